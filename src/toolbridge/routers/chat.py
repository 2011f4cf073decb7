"""Chat API endpoints.

This module provides endpoints for chat turns (complete and streamed via
SSE), for clearing a session and for reading its history. The caller's
session is identified by an opaque cookie.
"""

import logging
from contextlib import aclosing
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from pydantic import TypeAdapter
from sse_starlette.sse import EventSourceResponse

from toolbridge.dependencies import (
    attach_session_cookie,
    get_session_id,
    get_session_manager,
)
from toolbridge.errors import SessionInitFailed, TooManyToolRounds, TurnFailed
from toolbridge.models.chat import (
    ChatRequest,
    ChatResponse,
    ClearResponse,
    DoneEvent,
    EnvelopeEntryResponse,
    ErrorEvent,
    HistoryResponse,
    MessageResponse,
)
from toolbridge.sessions import ConversationEngine, Message, SessionManager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/chat", tags=["chat"])

_entry_adapter: TypeAdapter[EnvelopeEntryResponse] = TypeAdapter(EnvelopeEntryResponse)


def _history_to_response(history: list[Message]) -> list[MessageResponse]:
    return [MessageResponse.model_validate(msg) for msg in history]


def _validate_message(request_body: ChatRequest) -> str:
    message = request_body.message
    if not message.strip():
        raise HTTPException(
            status_code=400,
            detail={
                "error": {
                    "code": "empty_message",
                    "message": "Message is required",
                    "details": {},
                }
            },
        )
    return message


async def _get_engine(
    session_manager: SessionManager, session_id: str
) -> ConversationEngine:
    try:
        return await session_manager.get_or_create(session_id)
    except SessionInitFailed as e:
        raise HTTPException(
            status_code=503,
            detail={
                "error": {
                    "code": "session_init_failed",
                    "message": "Failed to initialize chat session",
                    "details": {"reason": str(e)},
                }
            },
        )


def _error_code(error: TurnFailed) -> str:
    return "too_many_tool_rounds" if isinstance(error, TooManyToolRounds) else "turn_failed"


@router.post("", response_model=ChatResponse)
async def chat(
    request_body: ChatRequest,
    request: Request,
    response: Response,
    session_manager: SessionManager = Depends(get_session_manager),
    session_id: str = Depends(get_session_id),
) -> ChatResponse:
    """Send a message and receive the complete turn envelope.

    Args:
        request_body: Chat request containing the message
        request: FastAPI request object
        response: Outgoing response, used to set the session cookie
        session_manager: Injected session manager
        session_id: The caller's session identifier

    Returns:
        ChatResponse with the turn entries and the full history

    Raises:
        HTTPException: 400 for an empty message, 503 if the session cannot
            be initialized, 500 if the turn fails
    """
    message = _validate_message(request_body)
    engine = await _get_engine(session_manager, session_id)
    attach_session_cookie(response, session_id, request.app.state.settings)

    try:
        envelope = await engine.process_query(message)
    except TurnFailed as e:
        logger.error(f"Error processing chat message for session {session_id}: {e}")
        # The session keeps the partial turn, so the caller still needs its cookie
        raise HTTPException(
            status_code=500,
            detail={
                "error": {
                    "code": _error_code(e),
                    "message": "Failed to process message",
                    "details": {
                        "partial_response": [
                            asdict(entry) for entry in e.partial_response
                        ]
                    },
                }
            },
            headers={"set-cookie": response.headers["set-cookie"]},
        )

    return ChatResponse(
        session_id=session_id,
        response=[asdict(entry) for entry in envelope.response],
        chat_history=_history_to_response(envelope.chat_history),
    )


@router.post("/stream")
async def chat_streaming(
    request_body: ChatRequest,
    request: Request,
    session_manager: SessionManager = Depends(get_session_manager),
    session_id: str = Depends(get_session_id),
) -> EventSourceResponse:
    """Stream a turn's envelope entries via Server-Sent Events (SSE).

    SSE Events:
        - text: Text produced by the model
        - tool_call: A tool invocation, with name and args
        - tool_result: The serialized tool result
        - error: If the turn fails
        - done: The turn is complete; carries the full history

    Raises:
        HTTPException: 400 for an empty message, 503 if the session cannot
            be initialized
    """
    message = _validate_message(request_body)
    engine = await _get_engine(session_manager, session_id)

    async def event_generator():
        """Generate SSE events from the conversation turn."""
        try:
            async with aclosing(engine.stream_turn(message)) as entries:
                async for entry in entries:
                    if await request.is_disconnected():
                        logger.warning(
                            f"Client disconnected during streaming for session {session_id}"
                        )
                        return

                    event_data = _entry_adapter.validate_python(asdict(entry))
                    yield {"event": entry.type, "data": event_data.model_dump_json()}

            done_event = DoneEvent(
                session_id=session_id,
                chat_history=_history_to_response(engine.history),
            )
            yield {"event": "done", "data": done_event.model_dump_json()}

        except TurnFailed as e:
            logger.error(f"Error during streaming for session {session_id}: {e}")
            error_event = ErrorEvent(
                code=_error_code(e),
                message="Failed to process message",
                details={"session_id": session_id},
            )
            yield {"event": "error", "data": error_event.model_dump_json()}

    event_response = EventSourceResponse(event_generator())
    attach_session_cookie(event_response, session_id, request.app.state.settings)
    return event_response


@router.post("/clear", response_model=ClearResponse)
async def clear_chat(
    request: Request,
    response: Response,
    session_manager: SessionManager = Depends(get_session_manager),
    session_id: str = Depends(get_session_id),
) -> ClearResponse:
    """Tear down the caller's session; the next request starts fresh."""
    removed = await session_manager.remove(session_id)
    logger.info(f"Cleared session {session_id} (existed: {removed})")
    attach_session_cookie(response, session_id, request.app.state.settings)
    return ClearResponse()


@router.get("/history", response_model=HistoryResponse)
async def chat_history(
    request: Request,
    response: Response,
    session_manager: SessionManager = Depends(get_session_manager),
    session_id: str = Depends(get_session_id),
) -> HistoryResponse:
    """Get the caller's history, creating the session if needed.

    Raises:
        HTTPException: 503 if the session cannot be initialized
    """
    engine = await _get_engine(session_manager, session_id)
    attach_session_cookie(response, session_id, request.app.state.settings)
    return HistoryResponse(
        session_id=session_id,
        chat_history=_history_to_response(engine.history),
    )
