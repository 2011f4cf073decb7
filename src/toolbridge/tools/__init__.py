"""Tool catalog and invocation layer.

This package provides the tool descriptors, static catalog loading and the
ToolInvoker that talks to an out-of-process MCP tool provider.
"""

from toolbridge.tools.catalog import load_static_catalog
from toolbridge.tools.invoker import ToolInvoker, resolve_launch_command
from toolbridge.tools.types import ToolCallResult, ToolDescriptor

__all__ = [
    "ToolCallResult",
    "ToolDescriptor",
    "ToolInvoker",
    "load_static_catalog",
    "resolve_launch_command",
]
