"""Static tool catalog loading.

Providers that do not answer tool discovery can be paired with a catalog
file: a JSON list of tool entries, each with a name, a description and an
input schema.
"""

import json
import logging
from pathlib import Path

from toolbridge.tools.types import ToolDescriptor

logger = logging.getLogger(__name__)


def load_static_catalog(path: Path) -> tuple[ToolDescriptor, ...]:
    """Load a static tool catalog from a JSON file.

    Args:
        path: Path to the catalog file

    Returns:
        Tuple of tool descriptors in file order

    Raises:
        FileNotFoundError: If the catalog file doesn't exist
        ValueError: If the file is not a list of valid, uniquely named tools
    """
    if not path.is_file():
        raise FileNotFoundError(f"Tool catalog not found at path: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    # Accept both a bare list and the {"tools": [...]} listing shape
    if isinstance(data, dict):
        data = data.get("tools")
    if not isinstance(data, list):
        raise ValueError(f"Tool catalog {path} must contain a list of tools")

    tools: list[ToolDescriptor] = []
    seen: set[str] = set()
    for entry in data:
        if not isinstance(entry, dict):
            raise ValueError(f"Tool catalog entry is not an object: {entry!r}")
        tool = ToolDescriptor.from_dict(entry)
        if tool.name in seen:
            raise ValueError(f"Duplicate tool name in catalog: {tool.name}")
        seen.add(tool.name)
        tools.append(tool)

    logger.info(f"Loaded {len(tools)} tools from static catalog {path}")
    return tuple(tools)
