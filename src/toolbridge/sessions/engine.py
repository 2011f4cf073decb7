"""Tool-augmented conversation loop.

This module provides the ConversationEngine, which owns one session's
message history and drives each user turn through completion, tool
dispatch and follow-up completion rounds until the model stops asking for
tools.
"""

import asyncio
import json
import logging
from collections import deque
from typing import Any, AsyncIterator

from toolbridge.errors import TooManyToolRounds, TurnFailed
from toolbridge.llm.client import CompletionClient
from toolbridge.llm.types import CompletionItem, TextItem, parse_tool_arguments
from toolbridge.sessions.types import (
    AssistantMessage,
    EnvelopeEntry,
    Message,
    ResponseEnvelope,
    TextEntry,
    ToolCallEntry,
    ToolResultEntry,
    UserMessage,
    to_provider_messages,
)
from toolbridge.tools.invoker import ToolInvoker
from toolbridge.tools.types import ToolDescriptor

logger = logging.getLogger(__name__)


def format_tool_result(payload: Any) -> str:
    """Serialize a tool result payload to its canonical text form.

    Structured payloads are pretty-printed as JSON; scalars pass through.
    """
    if isinstance(payload, (dict, list)):
        return json.dumps(payload, indent=2, ensure_ascii=False)
    if payload is None:
        return ""
    return payload if isinstance(payload, str) else str(payload)


class ConversationEngine:
    """Conversation state and turn loop for one session.

    History is append-only: a turn adds the user message, one user-role
    message per tool result and a final assistant message. When a turn
    fails, whatever it already appended stays in place.

    Attributes:
        completion_client: Shared language-model client
        tool_invoker: Tool provider connection owned by this engine
        max_tool_rounds: Maximum tool dispatches allowed in one turn
        completion_timeout: Seconds allowed per completion (None waits forever)
        history: Ordered conversation messages
    """

    def __init__(
        self,
        completion_client: CompletionClient,
        tool_invoker: ToolInvoker,
        max_tool_rounds: int = 5,
        completion_timeout: float | None = None,
    ) -> None:
        self.completion_client = completion_client
        self.tool_invoker = tool_invoker
        self.max_tool_rounds = max_tool_rounds
        self.completion_timeout = completion_timeout
        self.history: list[Message] = []
        self._turn_lock = asyncio.Lock()

    @property
    def tools(self) -> tuple[ToolDescriptor, ...]:
        """The tool catalog, fixed at initialization."""
        return self.tool_invoker.list_tools()

    async def initialize(self) -> None:
        """Connect the tool invoker and load the tool catalog."""
        await self.tool_invoker.initialize()

    async def cleanup(self) -> None:
        """Release the tool invoker's provider connection."""
        await self.tool_invoker.cleanup()

    async def process_query(self, query: str) -> ResponseEnvelope:
        """Run one turn and collect its envelope.

        Args:
            query: The user's message

        Returns:
            ResponseEnvelope: Turn entries in order plus the full history

        Raises:
            TurnFailed: If a completion or a tool call fails
            TooManyToolRounds: If the model exceeds max_tool_rounds
        """
        entries = [entry async for entry in self.stream_turn(query)]
        return ResponseEnvelope(response=entries, chat_history=list(self.history))

    async def stream_turn(self, query: str) -> AsyncIterator[EnvelopeEntry]:
        """Run one turn, yielding envelope entries as they are produced.

        Turns on the same engine are serialized; a second turn waits until
        the first has finished.

        Yields:
            EnvelopeEntry: text, tool_call and tool_result entries in order

        Raises:
            TurnFailed: If a completion or a tool call fails
            TooManyToolRounds: If the model exceeds max_tool_rounds
        """
        async with self._turn_lock:
            entries: list[EnvelopeEntry] = []
            rounds = 0

            self.history.append(UserMessage(content=query))
            logger.info(f"Processing turn with {len(self.history)} history messages")

            try:
                pending: deque[CompletionItem] = deque(
                    await self._request_completion()
                )

                while pending:
                    item = pending.popleft()

                    if isinstance(item, TextItem):
                        text_entry = TextEntry(text=item.text)
                        entries.append(text_entry)
                        yield text_entry
                        continue

                    rounds += 1
                    if rounds > self.max_tool_rounds:
                        raise TooManyToolRounds(
                            f"Model requested more than {self.max_tool_rounds} "
                            "tool calls in one turn",
                            partial_response=list(entries),
                        )

                    arguments = parse_tool_arguments(item.arguments)
                    call_entry = ToolCallEntry(name=item.name, args=arguments)
                    entries.append(call_entry)
                    yield call_entry

                    result = await self.tool_invoker.call_tool(item.name, arguments)
                    formatted = format_tool_result(result.content)
                    if result.is_error:
                        logger.warning(f"Tool {item.name} reported an error result")

                    result_entry = ToolResultEntry(result=formatted)
                    entries.append(result_entry)
                    yield result_entry

                    self.history.append(
                        UserMessage(content=formatted, tool_name=item.name)
                    )

                    # Follow-up items come before the rest of the current
                    # completion's items
                    follow_up = await self._request_completion()
                    pending.extendleft(reversed(follow_up))

            except TurnFailed:
                raise
            except Exception as e:
                logger.error(f"Turn failed: {e}")
                raise TurnFailed(
                    f"Turn failed: {e}", partial_response=list(entries)
                ) from e

            assistant_text = "\n".join(
                entry.text for entry in entries if isinstance(entry, TextEntry)
            )
            self.history.append(AssistantMessage(content=assistant_text))
            logger.info(
                f"Turn completed with {len(entries)} entries and {rounds} tool calls"
            )

    async def _request_completion(self) -> list[CompletionItem]:
        messages = to_provider_messages(self.history)
        try:
            return await asyncio.wait_for(
                self.completion_client.complete(messages, self.tools),
                timeout=self.completion_timeout,
            )
        except asyncio.TimeoutError as e:
            raise TimeoutError(
                f"Completion timed out after {self.completion_timeout}s"
            ) from e
