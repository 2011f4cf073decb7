"""FastAPI application factory and lifespan management.

This module contains the create_app() factory function that creates and
configures the FastAPI application instance, including lifespan management
for startup/shutdown and router registration.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from toolbridge import __version__
from toolbridge.config import ToolbridgeSettings
from toolbridge.errors import SessionInitFailed
from toolbridge.llm import CompletionClient, create_completion_client
from toolbridge.routers import chat, health
from toolbridge.sessions import ConversationEngine, SessionManager
from toolbridge.sessions.manager import EngineFactory
from toolbridge.tools import ToolInvoker, load_static_catalog

logger = logging.getLogger(__name__)


def build_engine_factory(
    settings: ToolbridgeSettings, completion_client: CompletionClient
) -> EngineFactory:
    """Build the callable that creates one conversation engine per session.

    Every engine gets its own ToolInvoker, and therefore its own provider
    subprocess. The static catalog, when configured, is read once here.
    """
    catalog_path = settings.resolved_tool_catalog_path
    static_catalog = load_static_catalog(catalog_path) if catalog_path else None

    def factory() -> ConversationEngine:
        invoker = ToolInvoker(
            server_path=settings.resolved_tool_server_path,
            connect_timeout=settings.connect_timeout,
            call_timeout=settings.tool_call_timeout,
            static_catalog=static_catalog,
        )
        return ConversationEngine(
            completion_client=completion_client,
            tool_invoker=invoker,
            max_tool_rounds=settings.max_tool_rounds,
            completion_timeout=settings.completion_timeout,
        )

    return factory


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan context manager for FastAPI application.

    On startup the completion client and the session manager are created
    once and stored in app.state, and the persistent session is created
    eagerly. On shutdown every live session is cleaned up so no provider
    subprocess outlives the server.

    Args:
        app: The FastAPI application instance.

    Yields:
        None: Control is yielded while the app is running.
    """
    settings: ToolbridgeSettings = app.state.settings

    completion_client = create_completion_client(settings)
    app.state.completion_client = completion_client
    logger.info(
        f"Initialized {settings.llm_provider} completion client with model: {settings.model}"
    )

    session_manager = SessionManager(build_engine_factory(settings, completion_client))
    app.state.session_manager = session_manager

    if settings.eager_persistent_session:
        logger.info("Initializing persistent session...")
        try:
            engine = await session_manager.get_or_create(settings.persistent_session_id)
            logger.info(
                "Persistent session initialized with tools: "
                f"{', '.join(tool.name for tool in engine.tools)}"
            )
        except SessionInitFailed as e:
            logger.error(f"Failed to initialize persistent session: {e}")
            logger.warning(
                "The API server is running, but tool functionality may not work correctly."
            )

    yield

    # Shutdown: Clean up resources
    logger.info("Shutting down...")
    await session_manager.shutdown()
    await completion_client.close()
    logger.info("Completion client closed")


def create_app(settings: ToolbridgeSettings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    This factory function creates a FastAPI instance with all routers,
    middleware, and configuration applied. It can accept an optional
    settings object for testing or explicit configuration.

    Args:
        settings: Optional ToolbridgeSettings instance. If not provided,
                  settings will be loaded from environment variables.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    if settings is None:
        from toolbridge.dependencies import get_settings

        settings = get_settings()

    app = FastAPI(
        title="toolbridge",
        description="Chat backend bridging a language model to MCP tools",
        version=__version__,
        lifespan=lifespan,
    )

    # Store settings in app.state for lifespan access
    app.state.settings = settings

    # Note: FastAPI's type hints for add_middleware are overly strict
    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(chat.router)

    # The frontend mount must come last so it doesn't shadow the API routes
    static_dir = settings.resolved_static_dir
    if static_dir is not None:
        if static_dir.is_dir():
            app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")
        else:
            logger.warning(f"Static directory {static_dir} not found, not serving it")

    return app
