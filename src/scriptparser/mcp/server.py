"""MCP stdio server for the script tool catalog."""

from __future__ import annotations

import asyncio
from typing import Any

from mcp import types
from mcp.server import Server
from mcp.server.stdio import stdio_server

from scriptparser import __version__
from scriptparser.config import ScriptParserSettings, get_logger, get_settings
from scriptparser.exceptions import OperationError
from scriptparser.mcp.dispatcher import ToolDispatcher
from scriptparser.mcp.models import BackendConfig

logger = get_logger(__name__)


def create_server(
    dispatcher: ToolDispatcher, name: str = "script-parser-mcp-server"
) -> Server:
    """Create an MCP server bound to a dispatcher.

    Args:
        dispatcher: Dispatcher handling every tool call
        name: Server name announced to clients

    Returns:
        Configured low-level MCP server
    """
    server: Server = Server(name, version=__version__)

    @server.list_tools()  # type: ignore[misc]
    async def list_tools() -> list[types.Tool]:
        return [
            types.Tool(
                name=spec.name,
                description=spec.description,
                inputSchema=spec.input_schema(),
            )
            for spec in dispatcher.list_tools()
        ]

    # Argument validation is the dispatcher's job so errors name the field
    @server.call_tool(validate_input=False)  # type: ignore[misc]
    async def call_tool(name: str, arguments: dict[str, Any]) -> types.CallToolResult:
        result = await dispatcher.call(name, arguments)
        return types.CallToolResult(
            content=[types.TextContent(type="text", text=result.text)],
            isError=not result.success,
        )

    logger.info("Created MCP server", name=name, tools=len(dispatcher.list_tools()))
    return server


async def run_stdio(settings: ScriptParserSettings) -> None:
    """Serve the tool catalog over stdio until the client disconnects.

    Raises:
        OperationError: If the backend health check is enabled and fails
    """
    config = BackendConfig.from_settings(settings)
    async with ToolDispatcher(config) as dispatcher:
        if settings.mcp_check_backend:
            await dispatcher.client.health()
            logger.info("Script service reachable", api_url=config.base_url)

        server = create_server(dispatcher, settings.mcp_server_name)
        logger.info("MCP server running on stdio", api_url=config.base_url)
        async with stdio_server() as (read_stream, write_stream):
            await server.run(
                read_stream, write_stream, server.create_initialization_options()
            )


def main(settings: ScriptParserSettings | None = None) -> None:
    """Main entry point for the MCP server."""
    settings = settings or get_settings()
    try:
        asyncio.run(run_stdio(settings))
    except KeyboardInterrupt:
        logger.info("MCP server stopped")
    except OperationError as e:
        logger.error("Script service unavailable", error=e.message)
        raise SystemExit(1) from e


if __name__ == "__main__":
    main()
