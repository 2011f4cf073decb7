"""Tool invoker backed by an MCP tool provider subprocess.

This module owns the lifecycle of one stdio connection to a tool provider:
spawning the provider script, the MCP handshake, tool discovery, tool calls
and teardown. Each conversation engine owns exactly one ToolInvoker.
"""

import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Any, Iterable, Mapping

from mcp import ClientSession, StdioServerParameters
from mcp.client.stdio import stdio_client

from toolbridge.errors import (
    ConnectionFailed,
    InvocationFailed,
    ProviderNotFound,
    ToolDiscoveryFailed,
    UnknownTool,
    UnsupportedProviderKind,
)
from toolbridge.tools.types import ToolCallResult, ToolDescriptor

logger = logging.getLogger(__name__)


def resolve_launch_command(
    server_path: Path, platform: str = sys.platform
) -> tuple[str, list[str]]:
    """Pick the command used to launch a tool provider script.

    Args:
        server_path: Path to the provider entry point
        platform: Platform identifier, as in sys.platform

    Returns:
        Tuple of (command, args)

    Raises:
        UnsupportedProviderKind: If the script is neither Python nor JavaScript
    """
    suffix = server_path.suffix.lower()

    if suffix == ".py":
        if sys.executable:
            command = sys.executable
        else:
            command = "python" if platform == "win32" else "python3"
    elif suffix in (".js", ".mjs"):
        command = "node.exe" if platform == "win32" else "node"
    else:
        raise UnsupportedProviderKind(
            f"Server script must be a .js or .py file: {server_path}"
        )

    return command, [str(server_path)]


class ToolInvoker:
    """Client for one out-of-process MCP tool provider.

    The stdio transport and the MCP session are entered and exited by a
    single background task, so cleanup() can be awaited from any task.

    Attributes:
        server_path: Path to the provider entry point
        connect_timeout: Seconds allowed for spawn plus handshake
        call_timeout: Seconds allowed per tool call (None waits forever)
    """

    def __init__(
        self,
        server_path: Path,
        connect_timeout: float = 10.0,
        call_timeout: float | None = None,
        static_catalog: Iterable[ToolDescriptor] | None = None,
        env: dict[str, str] | None = None,
    ) -> None:
        """Initialize the invoker without connecting.

        Args:
            server_path: Path to the provider entry point
            connect_timeout: Handshake timeout in seconds
            call_timeout: Per-call timeout in seconds
            static_catalog: Fixed catalog used instead of tool discovery
            env: Environment for the provider (default: this process's)
        """
        self.server_path = Path(server_path)
        self.connect_timeout = connect_timeout
        self.call_timeout = call_timeout
        self.static_catalog = (
            tuple(static_catalog) if static_catalog is not None else None
        )
        self.env = env

        self._session: ClientSession | None = None
        self._tools: tuple[ToolDescriptor, ...] = ()
        self._tools_by_name: dict[str, ToolDescriptor] = {}
        self._connection_task: asyncio.Task | None = None
        self._connection_error: BaseException | None = None
        self._ready = asyncio.Event()
        self._closing = asyncio.Event()

    @property
    def is_connected(self) -> bool:
        """Whether the MCP session is currently open."""
        return self._session is not None

    async def initialize(self) -> None:
        """Spawn the provider, perform the handshake and load the catalog.

        Raises:
            ProviderNotFound: If the entry point doesn't exist
            UnsupportedProviderKind: If the entry point kind is unknown
            ConnectionFailed: If spawning or the handshake fails or times out
            ToolDiscoveryFailed: If the tool listing request fails
        """
        logger.info(f"Initializing tool invoker with server script: {self.server_path}")

        if not self.server_path.is_file():
            raise ProviderNotFound(
                f"Server script not found at path: {self.server_path}"
            )

        command, args = resolve_launch_command(self.server_path)
        logger.debug(f"Using command: {command}, args: {args}")

        params = StdioServerParameters(
            command=command,
            args=args,
            env=self.env if self.env is not None else dict(os.environ),
        )
        await self._connect(params)

        if self.static_catalog is not None:
            tools = self.static_catalog
            logger.debug("Using static tool catalog, skipping discovery")
        else:
            try:
                tools = await self._discover_tools()
            except ToolDiscoveryFailed:
                await self._close_connection()
                raise

        self._tools = tools
        self._tools_by_name = {tool.name: tool for tool in tools}
        logger.info(
            f"Connected to tool provider with tools: {[t.name for t in tools]}"
        )

    def list_tools(self) -> tuple[ToolDescriptor, ...]:
        """Return the catalog snapshot loaded at initialization."""
        return self._tools

    async def call_tool(
        self, name: str, arguments: Mapping[str, Any]
    ) -> ToolCallResult:
        """Call a tool on the provider.

        Args:
            name: Tool name, must be in the catalog
            arguments: Structured tool arguments

        Returns:
            ToolCallResult: The raw result payload

        Raises:
            UnknownTool: If the tool is not in the catalog (no call is made)
            InvocationFailed: If the channel is closed, times out or errors
        """
        if name not in self._tools_by_name:
            raise UnknownTool(name)

        session = self._session
        if session is None:
            raise InvocationFailed(
                f"Cannot call tool '{name}': tool provider is not connected"
            )

        logger.debug(f"Calling tool {name} with arguments: {dict(arguments)}")
        try:
            result = await asyncio.wait_for(
                session.call_tool(name, arguments=dict(arguments)),
                timeout=self.call_timeout,
            )
        except asyncio.TimeoutError as e:
            logger.error(f"Tool {name} timed out after {self.call_timeout}s")
            raise InvocationFailed(
                f"Tool '{name}' timed out after {self.call_timeout}s"
            ) from e
        except Exception as e:
            logger.error(f"Tool {name} failed: {e}")
            raise InvocationFailed(f"Tool '{name}' failed: {e}") from e

        return ToolCallResult.from_mcp_result(result)

    async def cleanup(self) -> None:
        """Close the provider connection.

        Closing an already closed connection is not an error. Close errors
        are logged and suppressed; the session handle is always released.
        """
        try:
            if self._connection_task is not None:
                logger.info("Closing tool provider connection...")
                await self._close_connection()
        except Exception as e:
            logger.warning(
                f"Error during tool provider close (can be ignored if already closed): {e}"
            )
        finally:
            self._session = None
            self._connection_task = None
            logger.debug("Tool invoker cleanup completed")

    async def _connect(self, params: StdioServerParameters) -> None:
        self._ready = asyncio.Event()
        self._closing = asyncio.Event()
        self._connection_error = None
        self._connection_task = asyncio.create_task(
            self._run_connection(params),
            name=f"tool-provider:{self.server_path.name}",
        )

        try:
            await asyncio.wait_for(self._ready.wait(), timeout=self.connect_timeout)
        except asyncio.TimeoutError as e:
            await self._close_connection(cancel=True)
            raise ConnectionFailed(
                f"Timed out after {self.connect_timeout}s connecting to "
                f"tool provider {self.server_path}"
            ) from e

        if self._session is None:
            error = self._connection_error
            await self._close_connection()
            raise ConnectionFailed(
                f"Failed to connect to tool provider {self.server_path}: {error}"
            ) from error

    async def _run_connection(self, params: StdioServerParameters) -> None:
        try:
            async with stdio_client(params) as (read_stream, write_stream):
                async with ClientSession(read_stream, write_stream) as session:
                    await session.initialize()
                    self._session = session
                    self._ready.set()
                    await self._closing.wait()
        except Exception as e:
            self._connection_error = e
            if self._ready.is_set():
                logger.warning(f"Tool provider connection closed with error: {e}")
            else:
                logger.error(f"Failed to connect to tool provider: {e}")
        finally:
            self._session = None
            self._ready.set()

    async def _discover_tools(self) -> tuple[ToolDescriptor, ...]:
        session = self._session
        if session is None:
            raise ToolDiscoveryFailed("Tool provider is not connected")

        logger.debug("Fetching available tools...")
        try:
            result = await asyncio.wait_for(
                session.list_tools(), timeout=self.connect_timeout
            )
        except Exception as e:
            logger.error(f"Failed to list tools: {e}")
            raise ToolDiscoveryFailed(f"Failed to list tools: {e}") from e

        return tuple(ToolDescriptor.from_mcp_tool(tool) for tool in result.tools)

    async def _close_connection(self, cancel: bool = False) -> None:
        task = self._connection_task
        self._connection_task = None
        if task is None or task.done():
            return

        if cancel:
            task.cancel()
        else:
            self._closing.set()

        _, pending = await asyncio.wait({task}, timeout=self.connect_timeout)
        if pending:
            logger.warning("Tool provider did not shut down in time, cancelling")
            task.cancel()
            await asyncio.wait({task})
