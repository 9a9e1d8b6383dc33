"""HTTP service command."""

from typing import Annotated

import typer
import uvicorn
from rich.console import Console

from scriptparser.api.app import create_app
from scriptparser.config import get_logger, get_settings_for_cli

logger = get_logger(__name__)
console = Console(stderr=True)


def serve_command(
    host: Annotated[
        str | None, typer.Option("--host", "-h", help="Address to bind to")
    ] = None,
    port: Annotated[
        int | None, typer.Option("--port", "-p", help="Port to listen on")
    ] = None,
    reload: Annotated[
        bool, typer.Option("--reload", "-r", help="Enable auto-reload")
    ] = False,
) -> None:
    """Run the script HTTP service."""
    settings = get_settings_for_cli(cli_overrides={"api_host": host, "api_port": port})

    console.print("[blue]Starting script service...[/blue]")
    console.print(f"[dim]Listening on {settings.api_host}:{settings.api_port}[/dim]")
    console.print(f"[dim]Database: {settings.database_path}[/dim]")

    log_level = "debug" if settings.debug else "info"
    if reload:
        # Reload needs an import string; the factory re-reads settings
        uvicorn.run(
            "scriptparser.api.app:create_app",
            factory=True,
            host=settings.api_host,
            port=settings.api_port,
            reload=True,
            log_level=log_level,
        )
        return

    uvicorn.run(
        create_app(settings),
        host=settings.api_host,
        port=settings.api_port,
        log_level=log_level,
    )
