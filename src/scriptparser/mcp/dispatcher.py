"""Validation and dispatch of tool calls.

``ToolDispatcher.call`` is the single entry point for every transport. It
walks each call through ``CallState`` and always returns a ``ToolResult``;
no exception escapes it.
"""

from __future__ import annotations

import itertools
from typing import Any

import httpx
import pydantic

from scriptparser.config import get_logger
from scriptparser.exceptions import (
    NotFoundError,
    ScriptParserError,
    UnknownOperationError,
    ValidationError,
)
from scriptparser.mcp.catalog import TOOLS, ToolSpec, get_tool, tool_names
from scriptparser.mcp.client import ScriptAPIClient
from scriptparser.mcp.models import BackendConfig, CallState, ErrorKind, ToolResult

logger = get_logger(__name__)


def _describe_validation_error(exc: pydantic.ValidationError) -> tuple[str, str | None]:
    """Reduce a pydantic error to a message and the dotted field path."""
    errors = exc.errors()
    if not errors:
        return "Invalid arguments", None
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ())) or None
    if field:
        return f"Invalid argument '{field}': {first['msg']}", field
    return f"Invalid arguments: {first['msg']}", None


class ToolDispatcher:
    """Routes named tool calls to catalog handlers against one backend."""

    def __init__(
        self,
        config: BackendConfig,
        transport: httpx.AsyncBaseTransport | None = None,
        client: ScriptAPIClient | None = None,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            config: Backend connection details
            transport: Optional httpx transport for the backend client
            client: Pre-built backend client (overrides ``transport``)
        """
        self.config = config
        self.client = client or ScriptAPIClient(config, transport=transport)
        self._call_ids = itertools.count(1)

    def list_tools(self) -> list[ToolSpec]:
        """Get the advertised catalog."""
        return list(TOOLS)

    def _transition(self, call_id: int, name: str, state: CallState) -> CallState:
        logger.debug("Tool call state", call_id=call_id, tool=name, state=state.value)
        return state

    async def call(self, name: str, arguments: Any = None) -> ToolResult:
        """Validate and execute one tool call.

        Args:
            name: Operation name (or accepted alias)
            arguments: Untyped argument mapping from the caller

        Returns:
            Result envelope; failures are reported in it, never raised
        """
        call_id = next(self._call_ids)
        self._transition(call_id, name, CallState.RECEIVED)

        spec = get_tool(name)
        if spec is None:
            error = UnknownOperationError(name, available=tool_names())
            return self._fail(call_id, name, ErrorKind.UNKNOWN_OPERATION, error.message)

        try:
            args = spec.input_model.model_validate(
                {} if arguments is None else arguments
            )
        except pydantic.ValidationError as e:
            message, field = _describe_validation_error(e)
            return self._fail(
                call_id, name, ErrorKind.VALIDATION_ERROR, message, field=field
            )
        self._transition(call_id, name, CallState.VALIDATED)

        self._transition(call_id, name, CallState.EXECUTING)
        try:
            text = await spec.handler(self.client, args)
        except ValidationError as e:
            return self._fail(
                call_id, name, ErrorKind.VALIDATION_ERROR, e.message, field=e.field
            )
        except NotFoundError as e:
            return self._fail(call_id, name, ErrorKind.NOT_FOUND, e.message)
        except ScriptParserError as e:
            return self._fail(call_id, name, ErrorKind.OPERATION_ERROR, e.message)
        except httpx.HTTPError as e:
            return self._fail(
                call_id, name, ErrorKind.OPERATION_ERROR, f"Backend request failed: {e}"
            )
        except Exception:
            logger.exception("Unexpected error in tool handler", tool=name)
            return self._fail(
                call_id,
                name,
                ErrorKind.OPERATION_ERROR,
                f"Unexpected error while running {spec.name}",
            )

        self._transition(call_id, name, CallState.SUCCEEDED)
        logger.info("Tool call succeeded", tool=name)
        return ToolResult.ok(text)

    def _fail(
        self,
        call_id: int,
        name: str,
        kind: ErrorKind,
        message: str,
        field: str | None = None,
    ) -> ToolResult:
        self._transition(call_id, name, CallState.FAILED)
        logger.warning(
            "Tool call failed",
            tool=name,
            error_kind=kind.value,
            error=message,
            field=field,
        )
        return ToolResult.failure(kind, message, field=field)

    async def aclose(self) -> None:
        """Release the backend connection pool."""
        await self.client.aclose()

    async def __aenter__(self) -> ToolDispatcher:
        """Async context manager entry."""
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit."""
        await self.aclose()
