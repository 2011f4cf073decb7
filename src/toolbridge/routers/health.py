"""Health check endpoint router."""

import logging

from fastapi import APIRouter, Request

from toolbridge import __version__
from toolbridge.models.health import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Health check endpoint.

    Returns the service status and version, the completion provider and
    whether it is reachable, the number of live sessions, and the tools of
    the persistent session when it is live.

    Args:
        request: The FastAPI request object.

    Returns:
        HealthResponse: Health status and version information.
    """
    settings = request.app.state.settings
    llm_connected = None
    active_sessions = 0
    tools: list[str] = []

    if hasattr(request.app.state, "completion_client"):
        try:
            llm_connected = await request.app.state.completion_client.check_connection()
        except Exception as e:
            logger.warning(f"Completion provider connectivity check failed: {e}")
            llm_connected = False

    if hasattr(request.app.state, "session_manager"):
        session_manager = request.app.state.session_manager
        active_sessions = len(session_manager)
        persistent = session_manager.get(settings.persistent_session_id)
        if persistent is not None:
            tools = [tool.name for tool in persistent.tools]

    return HealthResponse(
        status="ok",
        version=__version__,
        llm_provider=settings.llm_provider,
        model=settings.model,
        llm_connected=llm_connected,
        active_sessions=active_sessions,
        tools=tools,
    )
