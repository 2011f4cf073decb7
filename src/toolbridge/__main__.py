"""CLI entry point for toolbridge.

This module provides the command-line interface for starting the server.
It can be invoked as `toolbridge` (via the script entry point) or
`python -m toolbridge`.
"""

import argparse
import logging
import sys

import uvicorn

from toolbridge import __version__, create_app
from toolbridge.config import ToolbridgeSettings


def main() -> None:
    """Main entry point for the toolbridge CLI.

    Parses command-line arguments and starts the uvicorn server with the
    FastAPI application. Uvicorn turns SIGINT/SIGTERM into a lifespan
    shutdown, which cleans up every session's tool provider.
    """
    parser = argparse.ArgumentParser(
        prog="toolbridge",
        description="Chat backend bridging a language model to MCP tools",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"toolbridge {__version__}",
    )

    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Host to bind the server to (default: 127.0.0.1, can be set via TOOLBRIDGE_HOST)",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to bind the server to (default: 8000, can be set via TOOLBRIDGE_PORT)",
    )

    parser.add_argument(
        "--llm-provider",
        type=str,
        default=None,
        choices=["anthropic", "ollama"],
        help="Completion provider (default: anthropic, can be set via TOOLBRIDGE_LLM_PROVIDER)",
    )

    parser.add_argument(
        "--model",
        type=str,
        default=None,
        help="Completion model name (can be set via TOOLBRIDGE_MODEL)",
    )

    parser.add_argument(
        "--tool-server",
        type=str,
        default=None,
        help="Path to the MCP tool provider script, .py or .js "
        "(default: bundled server, can be set via TOOLBRIDGE_TOOL_SERVER_PATH)",
    )

    parser.add_argument(
        "--static-dir",
        type=str,
        default=None,
        help="Directory of frontend files served at / (can be set via TOOLBRIDGE_STATIC_DIR)",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO, can be set via TOOLBRIDGE_LOG_LEVEL)",
    )

    args = parser.parse_args()

    # Build settings, CLI args override environment variables
    settings_kwargs = {}
    if args.host is not None:
        settings_kwargs["host"] = args.host
    if args.port is not None:
        settings_kwargs["port"] = args.port
    if args.llm_provider is not None:
        settings_kwargs["llm_provider"] = args.llm_provider
    if args.model is not None:
        settings_kwargs["model"] = args.model
    if args.tool_server is not None:
        settings_kwargs["tool_server_path"] = args.tool_server
    if args.static_dir is not None:
        settings_kwargs["static_dir"] = args.static_dir
    if args.log_level is not None:
        settings_kwargs["log_level"] = args.log_level

    settings = ToolbridgeSettings(**settings_kwargs)

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = create_app(settings=settings)

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    sys.exit(main())
