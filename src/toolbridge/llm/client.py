"""Async completion clients.

This module wraps the Anthropic and Ollama SDKs behind one CompletionClient
interface. Each client normalizes its provider's response immediately, so
callers receive a list of CompletionItem regardless of the provider shape.
Clients are created once at startup and shared by all sessions.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, Sequence

import anthropic
import ollama

from toolbridge.config import ToolbridgeSettings
from toolbridge.llm.types import (
    CompletionItem,
    normalize_content_blocks,
    normalize_message,
)
from toolbridge.tools.types import ToolDescriptor

logger = logging.getLogger(__name__)


class CompletionClient(ABC):
    """Interface for one language-model completion provider.

    Attributes:
        model: Model name sent with every completion request
    """

    model: str

    @abstractmethod
    async def complete(
        self,
        messages: list[dict[str, Any]],
        tools: Sequence[ToolDescriptor],
    ) -> list[CompletionItem]:
        """Request one completion.

        Args:
            messages: Conversation history as [{"role": ..., "content": ...}]
            tools: Tool catalog offered to the model

        Returns:
            list[CompletionItem]: Normalized content items in model order
        """

    async def check_connection(self) -> bool:
        """Check if the provider is reachable."""
        return True

    async def close(self) -> None:
        """Release provider resources."""


class AnthropicCompletionClient(CompletionClient):
    """Completion client for the Anthropic messages API.

    Tool requests arrive as tool_use content blocks mixed with text blocks.
    """

    def __init__(
        self, model: str, max_tokens: int = 1000, api_key: str | None = None
    ) -> None:
        """Initialize the Anthropic client.

        Args:
            model: Anthropic model name
            max_tokens: Completion token limit
            api_key: API key (default: the ANTHROPIC_API_KEY environment variable)
        """
        self.model = model
        self.max_tokens = max_tokens
        self._client = anthropic.AsyncAnthropic(api_key=api_key)
        logger.info(f"AnthropicCompletionClient initialized with model: {model}")

    async def complete(
        self,
        messages: list[dict[str, Any]],
        tools: Sequence[ToolDescriptor],
    ) -> list[CompletionItem]:
        # The messages API rejects empty turns, e.g. an assistant turn whose
        # only output was a tool call
        payload = [msg for msg in messages if msg.get("content")]

        request: dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": payload,
        }
        if tools:
            request["tools"] = [tool.to_anthropic() for tool in tools]

        logger.debug(
            f"Requesting completion with {len(payload)} messages and {len(tools)} tools"
        )
        try:
            response = await self._client.messages.create(**request)
        except Exception as e:
            logger.error(f"Anthropic completion failed: {e}")
            raise

        items = normalize_content_blocks(response.content)
        logger.debug(f"Completion returned {len(items)} items")
        return items

    async def close(self) -> None:
        await self._client.close()
        logger.debug("AnthropicCompletionClient closed")


class OllamaCompletionClient(CompletionClient):
    """Completion client for the Ollama chat API.

    Tool requests arrive as a tool_calls list next to the message text.
    All chat requests use streaming; chunks are collected into one message.

    Attributes:
        host: The Ollama server URL (e.g., "http://localhost:11434")
    """

    def __init__(self, host: str, model: str) -> None:
        """Initialize the Ollama client.

        Args:
            host: The Ollama server URL
            model: Ollama model name
        """
        self.host = host
        self.model = model
        self._client = ollama.AsyncClient(host=host)
        logger.info(f"OllamaCompletionClient initialized with host: {host}")

    async def check_connection(self) -> bool:
        """Check if the Ollama server is reachable.

        Returns:
            bool: True if connection is successful, False otherwise
        """
        try:
            await self._client.list()
            logger.debug("Ollama connection check: successful")
            return True
        except Exception as e:
            logger.warning(f"Ollama connection check failed: {e}")
            return False

    async def chat_stream(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
    ) -> AsyncIterator[dict[str, Any]]:
        """Stream chat response chunks from Ollama.

        Yields:
            dict: Response chunks. Each chunk contains a message dict with
                  role, content and possibly tool_calls; the final chunk
                  has done=True.
        """
        logger.debug(f"Starting chat stream with model: {self.model}")

        async for chunk in await self._client.chat(
            model=self.model,
            messages=messages,
            tools=tools or None,
            stream=True,
        ):
            if hasattr(chunk, "model_dump"):
                chunk_dict = chunk.model_dump()
            elif isinstance(chunk, dict):
                chunk_dict = chunk
            else:
                chunk_dict = vars(chunk)

            yield chunk_dict

        logger.debug("Chat stream completed")

    async def complete(
        self,
        messages: list[dict[str, Any]],
        tools: Sequence[ToolDescriptor],
    ) -> list[CompletionItem]:
        content_parts: list[str] = []
        tool_calls: list[Any] = []

        try:
            async for chunk in self.chat_stream(
                messages=messages,
                tools=[tool.to_ollama() for tool in tools],
            ):
                message = chunk.get("message") or {}
                content = message.get("content") or ""
                if content:
                    content_parts.append(content)
                tool_calls.extend(message.get("tool_calls") or [])

                if chunk.get("done"):
                    break
        except Exception as e:
            logger.error(f"Ollama completion failed: {e}")
            raise

        items = normalize_message(
            {"content": "".join(content_parts), "tool_calls": tool_calls}
        )
        logger.debug(f"Completion returned {len(items)} items")
        return items

    async def close(self) -> None:
        # ollama.AsyncClient uses httpx internally which handles cleanup
        logger.debug("OllamaCompletionClient closed")


def create_completion_client(settings: ToolbridgeSettings) -> CompletionClient:
    """Create the completion client selected by the settings.

    Raises:
        ValueError: If the configured provider is unknown
    """
    if settings.llm_provider == "anthropic":
        return AnthropicCompletionClient(
            model=settings.model,
            max_tokens=settings.max_tokens,
            api_key=settings.anthropic_api_key,
        )
    if settings.llm_provider == "ollama":
        return OllamaCompletionClient(host=settings.ollama_host, model=settings.model)

    raise ValueError(f"Unknown LLM provider: {settings.llm_provider}")
