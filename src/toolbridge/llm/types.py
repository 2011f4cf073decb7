"""Completion item types and response normalizers.

Completion providers return tool requests in two incompatible shapes:

- content-item lists, where text and tool_use blocks are mixed in order
  (Anthropic messages API)
- a single message carrying text plus a separate tool_calls list
  (Ollama chat API, OpenAI-style)

Both are normalized into a flat list of TextItem and ToolUseItem right
after each completion call, so the conversation loop only ever sees one
representation.
"""

import json
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from toolbridge.errors import MalformedToolArguments


@dataclass(frozen=True)
class TextItem:
    """Plain text produced by the model."""

    text: str


@dataclass(frozen=True)
class ToolUseItem:
    """A tool invocation requested by the model.

    Attributes:
        name: Name of the requested tool
        arguments: Structured arguments, or a serialized JSON string
        call_id: Provider-assigned identifier of the request, if any
    """

    name: str
    arguments: Mapping[str, Any] | str | None = None
    call_id: str | None = None


CompletionItem = TextItem | ToolUseItem


def _get_value(obj: Any, key: str, default: Any = None) -> Any:
    """Read a field from either an SDK object or a plain dict."""
    if isinstance(obj, dict):
        return obj.get(key, default)
    return getattr(obj, key, default)


def normalize_content_blocks(blocks: Iterable[Any]) -> list[CompletionItem]:
    """Normalize a content-item list (text and tool_use blocks).

    Blocks of other types (thinking, citations, ...) are dropped.
    """
    items: list[CompletionItem] = []

    for block in blocks:
        block_type = _get_value(block, "type")
        if block_type == "text":
            items.append(TextItem(text=_get_value(block, "text", "")))
        elif block_type == "tool_use":
            items.append(
                ToolUseItem(
                    name=_get_value(block, "name"),
                    arguments=_get_value(block, "input"),
                    call_id=_get_value(block, "id"),
                )
            )

    return items


def normalize_message(message: Any) -> list[CompletionItem]:
    """Normalize a message carrying text plus a tool_calls list.

    The text, when non-empty, comes first, followed by one ToolUseItem per
    tool call in list order.
    """
    items: list[CompletionItem] = []

    content = _get_value(message, "content") or ""
    if content:
        items.append(TextItem(text=content))

    for tool_call in _get_value(message, "tool_calls") or []:
        function = _get_value(tool_call, "function") or {}
        items.append(
            ToolUseItem(
                name=_get_value(function, "name"),
                arguments=_get_value(function, "arguments"),
                call_id=_get_value(tool_call, "id"),
            )
        )

    return items


def parse_tool_arguments(raw: Mapping[str, Any] | str | None) -> dict[str, Any]:
    """Turn raw tool arguments into a dict.

    Args:
        raw: Arguments as delivered by the provider

    Returns:
        dict: The structured arguments

    Raises:
        MalformedToolArguments: If a string payload is not a JSON object
    """
    if raw is None:
        return {}
    if isinstance(raw, Mapping):
        return dict(raw)
    if isinstance(raw, str):
        if not raw.strip():
            return {}
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as e:
            raise MalformedToolArguments(
                f"Tool arguments are not valid JSON: {e}"
            ) from e
        if not isinstance(parsed, dict):
            raise MalformedToolArguments(
                f"Tool arguments must be a JSON object, got {type(parsed).__name__}"
            )
        return parsed

    raise MalformedToolArguments(
        f"Unsupported tool arguments type: {type(raw).__name__}"
    )
