"""scriptparser CLI commands."""

from __future__ import annotations

from scriptparser.cli.commands.init import init_command
from scriptparser.cli.commands.mcp import mcp_command
from scriptparser.cli.commands.serve import serve_command
from scriptparser.cli.commands.tools import tools_app

__all__ = [
    "init_command",
    "mcp_command",
    "serve_command",
    "tools_app",
]
