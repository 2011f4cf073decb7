"""Pydantic models for chat API requests and responses.

This module defines the request and response schemas for the chat
endpoints, including the SSE event payloads of the streaming endpoint.
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class ChatRequest(BaseModel):
    """Request body for POST /api/v1/chat and POST /api/v1/chat/stream."""

    message: str = Field(description="The user message to send.")

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"message": "What's the weather for 38.58,-121.49?"},
            ]
        }
    )


class TextEntryResponse(BaseModel):
    """Text produced by the model."""

    type: Literal["text"] = "text"
    text: str


class ToolCallEntryResponse(BaseModel):
    """A tool invocation made during the turn."""

    type: Literal["tool_call"] = "tool_call"
    name: str
    args: dict[str, Any] = Field(default_factory=dict)


class ToolResultEntryResponse(BaseModel):
    """The serialized result of a tool invocation."""

    type: Literal["tool_result"] = "tool_result"
    result: str


EnvelopeEntryResponse = Annotated[
    TextEntryResponse | ToolCallEntryResponse | ToolResultEntryResponse,
    Field(discriminator="type"),
]


class MessageResponse(BaseModel):
    """Response schema for a single history message."""

    role: str = Field(description="Message role (user or assistant)")
    content: str = Field(description="Message content")
    tool_name: str | None = Field(
        default=None,
        description="Tool that produced this content, for tool result messages",
    )
    message_id: str = Field(description="Unique message identifier")
    timestamp: str = Field(description="ISO 8601 timestamp")

    model_config = ConfigDict(from_attributes=True)


class ChatResponse(BaseModel):
    """Response body for the non-streaming chat endpoint."""

    session_id: str = Field(description="Session identifier")
    response: list[EnvelopeEntryResponse] = Field(
        description="Everything produced during the turn, in order"
    )
    chat_history: list[MessageResponse] = Field(
        description="The session's full history after the turn"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "session_id": "4f0c9a1e2b7d4c6a8e3f5b1d9c2a7e60",
                "response": [
                    {
                        "type": "tool_call",
                        "name": "get-forecast",
                        "args": {"latitude": 38.58, "longitude": -121.49},
                    },
                    {
                        "type": "tool_result",
                        "result": '[\n  {\n    "type": "text",\n    "text": "Forecast for 38.58, -121.49: ..."\n  }\n]',
                    },
                    {"type": "text", "text": "Tonight will be clear, around 55°F."},
                ],
                "chat_history": [],
            }
        }
    )


class HistoryResponse(BaseModel):
    """Response body for GET /api/v1/chat/history."""

    session_id: str = Field(description="Session identifier")
    chat_history: list[MessageResponse] = Field(description="The session's history")


class ClearResponse(BaseModel):
    """Response body for POST /api/v1/chat/clear."""

    success: bool = True
    message: str = "Chat history cleared"


# --- SSE event payloads ---


class DoneEvent(BaseModel):
    """Final event of a successful streamed turn."""

    session_id: str
    chat_history: list[MessageResponse]


class ErrorEvent(BaseModel):
    """Event emitted when a streamed turn fails."""

    code: str
    message: str
    details: dict[str, Any] = Field(default_factory=dict)
