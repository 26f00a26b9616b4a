"""
postmark_mcp_server.py
----------------------
Local stdio MCP server exposing the Postmark tools.

Register it with an MCP client as a stdio server, e.g.:

    "postmark": {
        "command": "postmark-mcp",
        "env": {
            "POSTMARK_SERVER_TOKEN": "...",
            "DEFAULT_SENDER_EMAIL": "info@example.com",
            "DEFAULT_MESSAGE_STREAM": "outbound"
        }
    }

The process refuses to start when any required setting is missing.
"""

import logging
import sys

import anyio
from mcp import types
from mcp.server import Server
from mcp.server.stdio import stdio_server

from postmark_config import configure_logging, resolve_settings
from tool_catalog import create_registry
from tool_errors import ConfigurationMissing
from tool_registry import ToolRegistry

logger = logging.getLogger(__name__)

SERVER_NAME = "postmark-mcp"
SERVER_VERSION = "1.0.0"


def build_server(registry: ToolRegistry) -> Server:
    server = Server(SERVER_NAME, version=SERVER_VERSION)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return registry.list_tools()

    # Argument validation is done by the registry so errors name the field
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict) -> types.CallToolResult:
        logger.info(f"Received tool call: {name}")
        # requests is blocking; keep the event loop free
        result = await anyio.to_thread.run_sync(registry.dispatch, name, arguments)
        return result.to_call_tool_result()

    return server


async def serve(registry: ToolRegistry) -> None:
    server = build_server(registry)
    async with stdio_server() as (read_stream, write_stream):
        logger.info(f"{SERVER_NAME} listening on stdio ({len(registry.names())} tools)")
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )


def main() -> None:
    configure_logging()
    try:
        settings = resolve_settings()
    except ConfigurationMissing as e:
        logger.error(str(e))
        sys.exit(1)

    configure_logging(settings.log_level)
    logger.info(
        f"Starting {SERVER_NAME} | sender={settings.default_sender} "
        f"| stream={settings.default_message_stream}"
    )
    registry = create_registry(settings)
    anyio.run(serve, registry)


if __name__ == "__main__":
    main()
