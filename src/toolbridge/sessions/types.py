"""Data types for conversation state and turn envelopes.

This module defines the messages kept in a session's history and the
entries of the envelope returned for each conversation turn.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


def _new_message_id() -> str:
    return uuid.uuid4().hex[:10]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass
class UserMessage:
    """A message from the user.

    Tool results re-enter the conversation as user messages; for those,
    tool_name records which tool produced the content.
    """

    role: str = "user"
    content: str = ""
    tool_name: str | None = None
    message_id: str = field(default_factory=_new_message_id)
    timestamp: str = field(default_factory=_now)

    def __post_init__(self) -> None:
        """Validate role is always 'user'."""
        self.role = "user"


@dataclass
class AssistantMessage:
    """A response from the LLM assistant."""

    role: str = "assistant"
    content: str = ""
    message_id: str = field(default_factory=_new_message_id)
    timestamp: str = field(default_factory=_now)

    def __post_init__(self) -> None:
        """Validate role is always 'assistant'."""
        self.role = "assistant"


# Union type for all message types
Message = UserMessage | AssistantMessage


@dataclass
class TextEntry:
    """Text produced by the model during a turn."""

    text: str
    type: str = "text"


@dataclass
class ToolCallEntry:
    """A tool invocation made during a turn."""

    name: str
    args: dict[str, Any]
    type: str = "tool_call"


@dataclass
class ToolResultEntry:
    """The serialized result of a tool invocation."""

    result: str
    type: str = "tool_result"


# Union type for all envelope entries
EnvelopeEntry = TextEntry | ToolCallEntry | ToolResultEntry


@dataclass
class ResponseEnvelope:
    """Everything produced by one turn, plus the updated history."""

    response: list[EnvelopeEntry]
    chat_history: list[Message]


def to_provider_messages(history: list[Message]) -> list[dict[str, Any]]:
    """Convert session history to completion API format.

    Returns:
        List of message dicts: [{"role": "...", "content": "..."}, ...]
    """
    return [{"role": msg.role, "content": msg.content} for msg in history]
