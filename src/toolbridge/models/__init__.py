"""Pydantic models for API request and response schemas.

This package contains all Pydantic models used for validating and
serializing API requests and responses across all endpoints.
"""

from toolbridge.models.chat import (
    ChatRequest,
    ChatResponse,
    ClearResponse,
    DoneEvent,
    ErrorEvent,
    HistoryResponse,
    MessageResponse,
    TextEntryResponse,
    ToolCallEntryResponse,
    ToolResultEntryResponse,
)
from toolbridge.models.health import HealthResponse

__all__ = [
    "ChatRequest",
    "ChatResponse",
    "ClearResponse",
    "DoneEvent",
    "ErrorEvent",
    "HealthResponse",
    "HistoryResponse",
    "MessageResponse",
    "TextEntryResponse",
    "ToolCallEntryResponse",
    "ToolResultEntryResponse",
]
