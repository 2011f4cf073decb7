"""Language-model completion layer.

This package provides async completion clients for the supported providers
and the normalizers that map their responses onto one item representation.
"""

from toolbridge.llm.client import (
    AnthropicCompletionClient,
    CompletionClient,
    OllamaCompletionClient,
    create_completion_client,
)
from toolbridge.llm.types import (
    CompletionItem,
    TextItem,
    ToolUseItem,
    normalize_content_blocks,
    normalize_message,
    parse_tool_arguments,
)

__all__ = [
    "AnthropicCompletionClient",
    "CompletionClient",
    "CompletionItem",
    "OllamaCompletionClient",
    "TextItem",
    "ToolUseItem",
    "create_completion_client",
    "normalize_content_blocks",
    "normalize_message",
    "parse_tool_arguments",
]
