"""Pytest configuration and shared fixtures for toolbridge tests.

This module provides common fixtures used across all test modules,
including scripted stand-ins for the completion client and the tool
invoker, test app creation and async client setup.
"""

from typing import Any, Mapping, Sequence
from unittest.mock import patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from toolbridge import create_app
from toolbridge.config import ToolbridgeSettings
from toolbridge.errors import UnknownTool
from toolbridge.llm import CompletionClient, CompletionItem, TextItem
from toolbridge.sessions import ConversationEngine
from toolbridge.tools import ToolCallResult, ToolDescriptor

FORECAST_TOOL = ToolDescriptor(
    name="get-forecast",
    description="Get weather forecast for a location",
    input_schema={
        "type": "object",
        "properties": {
            "latitude": {"type": "number", "minimum": -90, "maximum": 90},
            "longitude": {"type": "number", "minimum": -180, "maximum": 180},
        },
        "required": ["latitude", "longitude"],
    },
)

PHRASE_TOOL = ToolDescriptor(
    name="random-qing-hua",
    description="Random novelty phrase",
    input_schema={"type": "object", "properties": {}},
)


class ScriptedCompletionClient(CompletionClient):
    """Completion client that replays scripted responses in order.

    A scripted response is either a list of completion items or an
    exception to raise. Every request is recorded in calls.
    """

    def __init__(self, responses: Sequence[Any] | None = None) -> None:
        self.model = "test-model"
        self.responses: list[Any] = list(responses or [])
        self.calls: list[tuple[list[dict[str, Any]], tuple[ToolDescriptor, ...]]] = []
        self.closed = False

    async def complete(
        self,
        messages: list[dict[str, Any]],
        tools: Sequence[ToolDescriptor],
    ) -> list[CompletionItem]:
        self.calls.append(([dict(msg) for msg in messages], tuple(tools)))
        if not self.responses:
            return [TextItem(text="(no scripted response)")]
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return list(response)

    async def close(self) -> None:
        self.closed = True


class FakeToolInvoker:
    """In-process stand-in for ToolInvoker.

    results maps a tool name to the payload it returns, or to an
    exception it raises.
    """

    def __init__(
        self,
        tools: Sequence[ToolDescriptor] = (FORECAST_TOOL, PHRASE_TOOL),
        results: Mapping[str, Any] | None = None,
        initialize_error: Exception | None = None,
    ) -> None:
        self.tools = tuple(tools)
        self.results: dict[str, Any] = dict(results or {})
        self.initialize_error = initialize_error
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.initialized = False
        self.cleaned_up = False

    async def initialize(self) -> None:
        if self.initialize_error is not None:
            raise self.initialize_error
        self.initialized = True

    def list_tools(self) -> tuple[ToolDescriptor, ...]:
        return self.tools

    async def call_tool(
        self, name: str, arguments: Mapping[str, Any]
    ) -> ToolCallResult:
        if name not in {tool.name for tool in self.tools}:
            raise UnknownTool(name)
        self.calls.append((name, dict(arguments)))
        result = self.results.get(name, [{"type": "text", "text": "ok"}])
        if isinstance(result, Exception):
            raise result
        return ToolCallResult(content=result)

    async def cleanup(self) -> None:
        self.cleaned_up = True


@pytest.fixture
def scripted_llm() -> ScriptedCompletionClient:
    """A completion client with an empty script."""
    return ScriptedCompletionClient()


@pytest.fixture
def fake_invoker() -> FakeToolInvoker:
    """A tool invoker offering the forecast and phrase tools."""
    return FakeToolInvoker()


@pytest.fixture
def engine(scripted_llm, fake_invoker) -> ConversationEngine:
    """A conversation engine wired to the scripted client and fake invoker."""
    return ConversationEngine(
        completion_client=scripted_llm,
        tool_invoker=fake_invoker,  # type: ignore[arg-type]
        max_tool_rounds=3,
    )


@pytest.fixture
def app_llm() -> ScriptedCompletionClient:
    """The completion client handed to the app under test."""
    return ScriptedCompletionClient()


@pytest.fixture
def invoker_config() -> dict[str, Any]:
    """Options applied to every tool invoker the app creates."""
    return {"results": {}, "initialize_error": None}


@pytest.fixture
def app_invokers() -> list[FakeToolInvoker]:
    """Every tool invoker the app created, in creation order."""
    return []


@pytest.fixture(autouse=True)
def mock_app_collaborators(app_llm, invoker_config, app_invokers):
    """Keep the app away from real providers and subprocesses.

    Patches the completion client factory and the ToolInvoker class used by
    the app factory, so the lifespan and every session use in-process fakes.
    """

    def make_invoker(**kwargs: Any) -> FakeToolInvoker:
        invoker = FakeToolInvoker(
            results=invoker_config["results"],
            initialize_error=invoker_config["initialize_error"],
        )
        app_invokers.append(invoker)
        return invoker

    with (
        patch("toolbridge.app.create_completion_client", return_value=app_llm),
        patch("toolbridge.app.ToolInvoker", side_effect=make_invoker),
    ):
        yield


@pytest.fixture
def test_settings(tmp_path):
    """Create test settings isolated from the environment.

    Args:
        tmp_path: Pytest fixture providing a temporary directory.

    Returns:
        ToolbridgeSettings: Settings instance configured for testing.
    """
    server_path = tmp_path / "server.py"
    server_path.write_text("# tool provider placeholder\n")

    return ToolbridgeSettings(
        _env_file=None,  # type: ignore[call-arg]
        host="127.0.0.1",
        port=8000,
        llm_provider="anthropic",
        model="test-model",
        anthropic_api_key="test-key",
        tool_server_path=str(server_path),
        max_tool_rounds=3,
        log_level="DEBUG",
        cors_origins=["*"],
    )


@pytest.fixture
def test_app(test_settings):
    """Create a FastAPI test application instance.

    Args:
        test_settings: Test settings fixture.

    Returns:
        FastAPI: Configured test application.
    """
    return create_app(settings=test_settings)


@pytest_asyncio.fixture
async def async_client(test_app):
    """Create an async HTTP client for testing FastAPI endpoints.

    Args:
        test_app: Test application fixture.

    Yields:
        AsyncClient: Async HTTP client for making test requests.
    """
    # Trigger the lifespan startup manually for tests
    async with test_app.router.lifespan_context(test_app):
        transport = ASGITransport(app=test_app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
