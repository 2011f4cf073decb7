"""Conversation sessions for toolbridge.

This package provides the conversation engine that runs tool-augmented
turns, the session manager that maps session identifiers to engines, and
the message and envelope types they exchange.
"""

from toolbridge.sessions.engine import ConversationEngine, format_tool_result
from toolbridge.sessions.manager import SessionManager
from toolbridge.sessions.types import (
    AssistantMessage,
    EnvelopeEntry,
    Message,
    ResponseEnvelope,
    TextEntry,
    ToolCallEntry,
    ToolResultEntry,
    UserMessage,
)

__all__ = [
    # Core classes
    "ConversationEngine",
    "SessionManager",
    "format_tool_result",
    # Message types
    "Message",
    "UserMessage",
    "AssistantMessage",
    # Envelope types
    "EnvelopeEntry",
    "ResponseEnvelope",
    "TextEntry",
    "ToolCallEntry",
    "ToolResultEntry",
]
