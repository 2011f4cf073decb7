"""Exception hierarchy for toolbridge.

Every error raised by the tool invoker, the conversation engine and the
session manager derives from ToolbridgeError so the HTTP layer can map
them to responses in one place.
"""

from typing import Any


class ToolbridgeError(Exception):
    """Base class for all toolbridge errors."""


class ProviderNotFound(ToolbridgeError):
    """The tool provider entry point does not exist."""


class UnsupportedProviderKind(ToolbridgeError):
    """The tool provider entry point is not a recognized script kind."""


class ConnectionFailed(ToolbridgeError):
    """Spawning or handshaking with the tool provider failed."""


class ToolDiscoveryFailed(ToolbridgeError):
    """The tool provider did not answer the tool listing request."""


class UnknownTool(ToolbridgeError):
    """A tool call named a tool absent from the catalog."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class InvocationFailed(ToolbridgeError):
    """A tool call could not be completed over the provider channel."""


class MalformedToolArguments(ToolbridgeError):
    """Tool arguments arrived as a string that is not a JSON object."""


class TurnFailed(ToolbridgeError):
    """A conversation turn was aborted.

    Attributes:
        partial_response: Envelope entries produced before the failure.
    """

    def __init__(self, message: str, partial_response: list[Any] | None = None):
        super().__init__(message)
        self.partial_response: list[Any] = partial_response or []


class TooManyToolRounds(TurnFailed):
    """The model kept requesting tools past the configured round limit."""


class SessionInitFailed(ToolbridgeError):
    """A conversation engine could not be initialized for a session."""

    def __init__(self, session_id: str, message: str) -> None:
        super().__init__(message)
        self.session_id = session_id
