"""scriptparser MCP adapter.

Exposes the script data operations as MCP tools over stdio.
"""

from scriptparser.mcp.dispatcher import ToolDispatcher
from scriptparser.mcp.models import BackendConfig, CallState, ErrorKind, ToolResult

__all__ = [
    "BackendConfig",
    "CallState",
    "ErrorKind",
    "ToolDispatcher",
    "ToolResult",
]
