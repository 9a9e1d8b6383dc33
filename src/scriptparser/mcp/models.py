"""Data models for the MCP tool-call adapter."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from scriptparser.config import ScriptParserSettings


class ErrorKind(str, Enum):
    """Failure categories reported in a tool result."""

    VALIDATION_ERROR = "validation_error"
    UNKNOWN_OPERATION = "unknown_operation"
    NOT_FOUND = "not_found"
    OPERATION_ERROR = "operation_error"


class CallState(str, Enum):
    """Lifecycle of a single tool call."""

    RECEIVED = "received"
    VALIDATED = "validated"
    EXECUTING = "executing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ToolResult(BaseModel):
    """Uniform envelope returned for every tool call."""

    success: bool
    text: str
    state: CallState
    error: ErrorKind | None = None
    field: str | None = None

    @classmethod
    def ok(cls, text: str) -> ToolResult:
        """Build a successful result."""
        return cls(success=True, text=text, state=CallState.SUCCEEDED)

    @classmethod
    def failure(
        cls, kind: ErrorKind, message: str, field: str | None = None
    ) -> ToolResult:
        """Build a failed result carrying the caller-facing message."""
        return cls(
            success=False,
            text=f"Execution failed: {message}",
            state=CallState.FAILED,
            error=kind,
            field=field,
        )


class BackendConfig(BaseModel):
    """Connection details for the script HTTP service."""

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(default="http://localhost:3000")
    api_key: str | None = Field(default=None, repr=False)
    timeout: float | None = Field(default=None, gt=0)
    max_connections: int = Field(default=10, ge=1)

    @classmethod
    def from_settings(cls, settings: ScriptParserSettings) -> BackendConfig:
        """Build backend configuration from application settings."""
        return cls(
            base_url=settings.api_url,
            api_key=settings.api_key,
            timeout=settings.api_timeout,
            max_connections=settings.api_max_connections,
        )
