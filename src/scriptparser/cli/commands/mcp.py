"""MCP server command."""

from typing import Annotated

import typer

from scriptparser.config import get_logger, get_settings_for_cli

logger = get_logger(__name__)


def mcp_command(
    api_url: Annotated[
        str | None,
        typer.Option("--api-url", help="Base URL of the script service"),
    ] = None,
    api_key: Annotated[
        str | None,
        typer.Option("--api-key", help="API key sent as X-API-Key"),
    ] = None,
    check_backend: Annotated[
        bool | None,
        typer.Option(
            "--check-backend/--no-check-backend",
            help="Probe the script service before serving",
        ),
    ] = None,
) -> None:
    """Run the MCP (Model Context Protocol) server on stdio.

    Exposes the script tool catalog to MCP clients such as desktop
    assistants. The script service must be reachable at --api-url.

    Example:
        scriptparser mcp --api-url http://localhost:3000
    """
    settings = get_settings_for_cli(
        cli_overrides={
            "api_url": api_url,
            "api_key": api_key,
            "mcp_check_backend": check_backend,
        }
    )

    from scriptparser.mcp.server import main as mcp_main

    logger.info("Starting MCP server", api_url=settings.api_url)
    try:
        mcp_main(settings)
    except KeyboardInterrupt:
        logger.info("MCP server stopped by user")
        raise typer.Exit(0) from None
