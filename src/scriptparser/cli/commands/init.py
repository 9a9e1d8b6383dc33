"""Initialize database command."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from scriptparser.config import get_settings_for_cli
from scriptparser.database import create_database
from scriptparser.exceptions import ScriptParserError

console = Console()


def init_command(
    db_path: Annotated[
        Path | None,
        typer.Option(
            "--db-path",
            "-d",
            help="Path to the SQLite database file",
        ),
    ] = None,
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Recreate the database, deleting all existing data",
        ),
    ] = False,
) -> None:
    """Create the script database and seed the default tag types.

    Fails if the database already exists unless --force is given.
    """
    settings = get_settings_for_cli(cli_overrides={"database_path": db_path})
    resolved_path = settings.database_path

    if resolved_path.exists():
        if not force:
            console.print(
                f"[red]Error:[/red] Database already exists at {resolved_path}. "
                "Use --force to recreate it."
            )
            raise typer.Exit(1)
        if not typer.confirm(f"Delete all data in {resolved_path}?"):
            console.print("[yellow]Initialization cancelled.[/yellow]")
            raise typer.Exit(0)
        resolved_path.unlink()

    try:
        console.print("[green]Initializing database...[/green]")
        create_database(resolved_path)
    except (OSError, ScriptParserError) as e:
        console.print(f"[red]Error:[/red] Failed to initialize database: {e}")
        raise typer.Exit(1) from e

    console.print(f"[green]✓[/green] Database initialized at {resolved_path}")
