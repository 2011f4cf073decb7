"""Bundled MCP tool provider.

The server module is spawned as a subprocess by the tool invoker; the
upstream module holds its HTTP lookups.
"""

__all__: list[str] = []
