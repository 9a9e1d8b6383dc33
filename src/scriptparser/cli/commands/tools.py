"""Inspect and invoke catalog tools from the command line."""

import asyncio
import json
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.table import Table

from scriptparser.config import get_settings_for_cli
from scriptparser.mcp.catalog import TOOLS
from scriptparser.mcp.dispatcher import ToolDispatcher
from scriptparser.mcp.models import BackendConfig, ToolResult

console = Console()
tools_app = typer.Typer(
    name="tools",
    help="Inspect and call the tool catalog",
    rich_markup_mode="rich",
)


@tools_app.command("list")
def list_tools(
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """List the advertised tools and their argument schemas."""
    specs = list(TOOLS)

    if json_output:
        payload = [
            {
                "name": spec.name,
                "description": spec.description,
                "inputSchema": spec.input_schema(),
            }
            for spec in specs
        ]
        print(json.dumps(payload, indent=2))
        return

    table = Table(title="Script tools")
    table.add_column("Name", style="cyan")
    table.add_column("Arguments")
    table.add_column("Description")
    for spec in specs:
        schema = spec.input_schema()
        required = set(schema.get("required", []))
        args = ", ".join(
            name if name in required else f"{name}?"
            for name in schema.get("properties", {})
        )
        table.add_row(spec.name, args or "-", spec.description)
    console.print(table)


async def _dispatch(config: BackendConfig, name: str, arguments: Any) -> ToolResult:
    async with ToolDispatcher(config) as dispatcher:
        return await dispatcher.call(name, arguments)


@tools_app.command("call")
def call_tool(
    name: Annotated[str, typer.Argument(help="Tool name")],
    args: Annotated[
        str, typer.Option("--args", "-a", help="Arguments as a JSON object")
    ] = "{}",
    api_url: Annotated[
        str | None,
        typer.Option("--api-url", help="Base URL of the script service"),
    ] = None,
    json_output: Annotated[
        bool, typer.Option("--json", help="Print the full result envelope")
    ] = False,
) -> None:
    """Call one tool against the script service and print the result."""
    try:
        arguments = json.loads(args)
    except json.JSONDecodeError as e:
        console.print(f"[red]Error:[/red] --args is not valid JSON: {e.msg}")
        raise typer.Exit(2) from e

    settings = get_settings_for_cli(cli_overrides={"api_url": api_url})
    result = asyncio.run(_dispatch(BackendConfig.from_settings(settings), name, arguments))

    if json_output:
        print(result.model_dump_json(indent=2))
    else:
        print(result.text)

    if not result.success:
        raise typer.Exit(1)
