"""Unit tests for the FastAPI app factory, lifespan and configuration."""

import json

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

import toolbridge.app as app_module
from toolbridge import __version__, create_app
from toolbridge.app import build_engine_factory
from toolbridge.config import DEFAULT_TOOL_SERVER_PATH, ToolbridgeSettings
from toolbridge.errors import ConnectionFailed
from toolbridge.sessions import ConversationEngine


def test_create_app_returns_fastapi_instance(test_settings):
    """Test that create_app returns a FastAPI instance."""
    app = create_app(settings=test_settings)
    assert isinstance(app, FastAPI)


def test_create_app_metadata(test_settings):
    """Test that app has correct metadata."""
    app = create_app(settings=test_settings)
    assert app.title == "toolbridge"
    assert app.version == __version__
    assert "MCP tools" in app.description


def test_create_app_routes(test_settings):
    """Test that health and chat routes are registered."""
    app = create_app(settings=test_settings)

    routes = [route.path for route in app.routes]  # type: ignore[attr-defined]
    assert "/api/v1/health" in routes
    assert "/api/v1/chat" in routes
    assert "/api/v1/chat/stream" in routes
    assert "/api/v1/chat/clear" in routes
    assert "/api/v1/chat/history" in routes


def test_create_app_has_cors_middleware(test_settings):
    """Test that CORS middleware is configured."""
    app = create_app(settings=test_settings)

    middleware_classes = [m.cls.__name__ for m in app.user_middleware]  # type: ignore[attr-defined]
    assert "CORSMiddleware" in middleware_classes


@pytest.mark.asyncio
async def test_static_frontend_is_served(test_settings, tmp_path):
    """Test that a configured static directory is served at /."""
    static_dir = tmp_path / "public"
    static_dir.mkdir()
    (static_dir / "index.html").write_text("<h1>toolbridge chat</h1>")
    settings = test_settings.model_copy(update={"static_dir": str(static_dir)})

    app = create_app(settings=settings)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/")

    assert response.status_code == 200
    assert "toolbridge chat" in response.text


def test_missing_static_dir_is_not_mounted(test_settings, tmp_path):
    """Test that a missing static directory is skipped."""
    settings = test_settings.model_copy(update={"static_dir": str(tmp_path / "nope")})

    app = create_app(settings=settings)

    assert "static" not in [getattr(route, "name", None) for route in app.routes]


@pytest.mark.asyncio
async def test_lifespan_creates_and_cleans_up_persistent_session(
    test_app, app_llm, app_invokers
):
    """Test that startup creates the persistent session and shutdown tears it down."""
    async with test_app.router.lifespan_context(test_app):
        session_manager = test_app.state.session_manager
        assert "persistent-session" in session_manager
        assert app_invokers[0].initialized

    assert len(session_manager) == 0
    assert app_invokers[0].cleaned_up
    assert app_llm.closed


@pytest.mark.asyncio
async def test_lifespan_survives_persistent_session_failure(
    test_app, invoker_config
):
    """Test that a failing tool provider does not stop the server from starting."""
    invoker_config["initialize_error"] = ConnectionFailed("spawn failed")

    async with test_app.router.lifespan_context(test_app):
        assert "persistent-session" not in test_app.state.session_manager


@pytest.mark.asyncio
async def test_lifespan_without_eager_session(test_settings, app_invokers):
    """Test that the persistent session can be created lazily instead."""
    settings = test_settings.model_copy(update={"eager_persistent_session": False})
    app = create_app(settings=settings)

    async with app.router.lifespan_context(app):
        assert len(app.state.session_manager) == 0

    assert app_invokers == []


def test_engine_factory_wires_settings(test_settings, app_llm):
    """Test that each engine gets its own invoker configured from settings."""
    factory = build_engine_factory(test_settings, app_llm)

    first = factory()
    second = factory()

    assert isinstance(first, ConversationEngine)
    assert first.tool_invoker is not second.tool_invoker
    assert first.completion_client is app_llm
    assert first.max_tool_rounds == 3
    kwargs = app_module.ToolInvoker.call_args.kwargs
    assert kwargs["server_path"] == test_settings.resolved_tool_server_path
    assert kwargs["connect_timeout"] == 10.0
    assert kwargs["static_catalog"] is None


def test_engine_factory_loads_static_catalog(test_settings, app_llm, tmp_path):
    """Test that a configured static catalog is handed to every invoker."""
    catalog_path = tmp_path / "tools.json"
    catalog_path.write_text(json.dumps([{"name": "get-alerts"}]))
    settings = test_settings.model_copy(update={"tool_catalog_path": str(catalog_path)})

    build_engine_factory(settings, app_llm)()

    static_catalog = app_module.ToolInvoker.call_args.kwargs["static_catalog"]
    assert [tool.name for tool in static_catalog] == ["get-alerts"]


def test_settings_default_values():
    """Test that settings have correct default values."""
    settings = ToolbridgeSettings(_env_file=None)  # type: ignore[call-arg]

    assert settings.host == "127.0.0.1"
    assert settings.port == 8000
    assert settings.llm_provider == "anthropic"
    assert settings.max_tokens == 1000
    assert settings.connect_timeout == 10.0
    assert settings.max_tool_rounds == 5
    assert settings.persistent_session_id == "persistent-session"
    assert settings.log_level == "INFO"
    assert settings.resolved_tool_server_path == DEFAULT_TOOL_SERVER_PATH.resolve()
    assert settings.resolved_tool_catalog_path is None
    assert settings.resolved_static_dir is None


def test_settings_env_prefix(monkeypatch):
    """Test that settings respect the TOOLBRIDGE_ environment variable prefix."""
    monkeypatch.setenv("TOOLBRIDGE_PORT", "9000")
    monkeypatch.setenv("TOOLBRIDGE_LLM_PROVIDER", "ollama")
    monkeypatch.setenv("TOOLBRIDGE_MAX_TOOL_ROUNDS", "8")

    settings = ToolbridgeSettings(_env_file=None)  # type: ignore[call-arg]

    assert settings.port == 9000
    assert settings.llm_provider == "ollama"
    assert settings.max_tool_rounds == 8


def test_settings_reject_zero_tool_rounds():
    """Test that the tool round limit must be positive."""
    with pytest.raises(ValueError):
        ToolbridgeSettings(_env_file=None, max_tool_rounds=0)  # type: ignore[call-arg]
