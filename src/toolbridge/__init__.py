"""toolbridge: chat backend bridging a language model to MCP tools.

This package provides a REST API and SSE streaming interface for chat
sessions whose model can discover and call tools served by an
out-of-process MCP tool provider.
"""

__version__ = "0.1.0"

from toolbridge.app import create_app  # noqa: E402

__all__ = ["create_app", "__version__"]
