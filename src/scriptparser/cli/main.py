"""Main CLI entry point."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console

from scriptparser import __version__
from scriptparser.cli.commands import (
    init_command,
    mcp_command,
    serve_command,
    tools_app,
)
from scriptparser.config import (
    ScriptParserSettings,
    configure_logging,
    get_logger,
    get_settings,
    reset_settings,
    set_settings,
)
from scriptparser.exceptions import ScriptParserError

logger = get_logger(__name__)
console = Console()

app = typer.Typer(
    name="scriptparser",
    help="Script analysis storage service and MCP tool adapter",
    pretty_exceptions_enable=False,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command(name="init")(init_command)
app.command(name="serve")(serve_command)
app.command(name="mcp")(mcp_command)
app.add_typer(tools_app, name="tools")


@app.command()
def status(
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Show the effective configuration."""
    settings = get_settings()

    status_info: dict[str, Any] = {
        "version": __version__,
        "database": str(settings.database_path),
        "database_exists": settings.database_path.exists(),
        "api_host": settings.api_host,
        "api_port": settings.api_port,
        "api_url": settings.api_url,
        "api_key_configured": settings.api_key is not None,
        "mcp_server_name": settings.mcp_server_name,
        "log_level": settings.log_level,
    }

    if json_output:
        print(json.dumps(status_info, indent=2))
        return

    console.print("[bold cyan]scriptparser status[/bold cyan]\n")
    for key, value in status_info.items():
        console.print(f"  {key.replace('_', ' ').title()}: {value}")


@app.callback()
def main_callback(
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file (YAML, TOML, or JSON)",
            envvar="SCRIPTPARSER_CONFIG",
        ),
    ] = None,
    debug: Annotated[
        bool,
        typer.Option(
            "--debug", help="Enable debug logging", envvar="SCRIPTPARSER_DEBUG"
        ),
    ] = False,
) -> None:
    """Configure global options."""
    if debug:
        os.environ["SCRIPTPARSER_LOG_LEVEL"] = "DEBUG"
        os.environ["SCRIPTPARSER_DEBUG"] = "true"
        reset_settings()

    if config:
        if not config.exists():
            console.print(f"[red]Error:[/red] Config file not found: {config}")
            raise typer.Exit(1)
        try:
            settings = ScriptParserSettings.from_multiple_sources(
                config_files=[config]
            )
        except ScriptParserError as e:
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(1) from e
        set_settings(settings)
        configure_logging(settings)
    elif debug:
        configure_logging(get_settings())
        logger.debug("Debug mode enabled")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
