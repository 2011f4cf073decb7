"""Type definitions for the tool catalog.

This module contains the dataclasses that describe tools exposed by the
tool provider and the results it returns for tool calls.
"""

from dataclasses import dataclass, field
from typing import Any


def _get_value(obj: Any, key: str, default: Any = None) -> Any:
    """Read a field from either an SDK object or a plain dict."""
    if isinstance(obj, dict):
        return obj.get(key, default)
    return getattr(obj, key, default)


@dataclass(frozen=True)
class ToolDescriptor:
    """A callable tool advertised by the tool provider.

    Attributes:
        name: Unique tool identifier (e.g., "get-forecast")
        description: Human-readable purpose, shown to the model
        input_schema: JSON schema of the accepted arguments
    """

    name: str
    description: str = ""
    input_schema: dict[str, Any] = field(
        default_factory=lambda: {"type": "object", "properties": {}}
    )

    @staticmethod
    def from_mcp_tool(tool: Any) -> "ToolDescriptor":
        """Create a ToolDescriptor from an MCP tool listing entry."""
        schema = _get_value(tool, "inputSchema") or {
            "type": "object",
            "properties": {},
        }
        return ToolDescriptor(
            name=_get_value(tool, "name"),
            description=_get_value(tool, "description") or "",
            input_schema=dict(schema),
        )

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "ToolDescriptor":
        """Create a ToolDescriptor from a catalog file entry.

        Both the MCP spelling (inputSchema) and the Anthropic spelling
        (input_schema) of the schema key are accepted.

        Raises:
            ValueError: If the entry has no usable name or schema
        """
        name = data.get("name")
        if not isinstance(name, str) or not name:
            raise ValueError(f"Tool entry has no name: {data!r}")

        schema = data.get("inputSchema", data.get("input_schema"))
        if schema is None:
            schema = {"type": "object", "properties": {}}
        if not isinstance(schema, dict):
            raise ValueError(f"Tool '{name}' has a non-object input schema")

        return ToolDescriptor(
            name=name,
            description=data.get("description") or "",
            input_schema=schema,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the MCP key spelling."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }

    def to_anthropic(self) -> dict[str, Any]:
        """Format for the Anthropic messages API tools parameter."""
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.input_schema,
        }

    def to_ollama(self) -> dict[str, Any]:
        """Format for the Ollama chat API tools parameter."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.input_schema,
            },
        }


@dataclass
class ToolCallResult:
    """The raw payload returned by the tool provider for one call.

    Attributes:
        content: Content items as JSON-shaped dicts, or a scalar payload
        is_error: Whether the provider flagged the result as a tool error
    """

    content: Any
    is_error: bool = False

    @staticmethod
    def from_mcp_result(result: Any) -> "ToolCallResult":
        """Create a ToolCallResult from an MCP CallToolResult."""
        content = _get_value(result, "content", [])
        if isinstance(content, list):
            content = [
                item.model_dump(mode="json", exclude_none=True)
                if hasattr(item, "model_dump")
                else item
                for item in content
            ]
        return ToolCallResult(
            content=content,
            is_error=bool(_get_value(result, "isError", False)),
        )
