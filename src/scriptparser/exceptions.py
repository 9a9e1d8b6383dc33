"""Custom exception hierarchy for scriptparser with helpful error messages."""

from __future__ import annotations

from typing import Any


class ScriptParserError(Exception):
    """Base exception with helpful formatting for all scriptparser errors.

    Provides structured error messages with hints and details to help users
    understand and fix problems.
    """

    def __init__(
        self,
        message: str,
        hint: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize exception with structured error information.

        Args:
            message: Primary error message describing what went wrong
            hint: Optional hint suggesting how to fix the problem
            details: Optional dictionary with additional debugging information
        """
        self.message = message
        self.hint = hint
        self.details = details
        super().__init__(self.format_error())

    def format_error(self) -> str:
        """Format the error message with hint and details.

        Returns:
            Formatted error string with all available information
        """
        output = f"Error: {self.message}"
        if self.hint:
            output += f"\nHint: {self.hint}"
        if self.details:
            details_str = "\n".join(
                f"  {key}: {value}" for key, value in self.details.items()
            )
            output += f"\nDetails:\n{details_str}"
        return output


class ValidationError(ScriptParserError):
    """Bad or missing caller input, with the offending field when known."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        hint: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize validation error.

        Args:
            message: Error message
            field: Dotted path of the offending argument (e.g. ``items.0.content``)
            hint: Optional hint
            details: Optional extra information
        """
        self.field = field
        if field:
            details = {"field": field, **(details or {})}
        super().__init__(message=message, hint=hint, details=details)


class UnknownOperationError(ScriptParserError):
    """Requested operation name is not in the catalog."""

    def __init__(self, name: str, available: list[str] | None = None) -> None:
        """Initialize unknown operation error.

        Args:
            name: The requested operation name
            available: Names that are registered
        """
        self.name = name
        hint = None
        if available:
            hint = f"Available operations: {', '.join(available)}"
        super().__init__(message=f"Unknown operation: {name}", hint=hint)


class NotFoundError(ScriptParserError):
    """Referenced project or resource does not exist."""

    pass


class OperationError(ScriptParserError):
    """Backend, storage, network or malformed-response failure."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        hint: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize operation error.

        Args:
            message: Upstream message, forwarded verbatim when available
            status_code: HTTP status returned by the backend, if any
            hint: Optional hint
            details: Optional extra information
        """
        self.status_code = status_code
        if status_code is not None:
            details = {"status_code": status_code, **(details or {})}
        super().__init__(message=message, hint=hint, details=details)


class DatabaseError(ScriptParserError):
    """Database-related errors including connection and query issues."""

    pass


class ConfigurationError(ScriptParserError):
    """Configuration errors including invalid settings and missing config files."""

    pass


def check_config_keys(config: dict[str, Any]) -> None:
    """Check for common configuration mistakes.

    Args:
        config: Configuration dictionary to validate

    Raises:
        ConfigurationError: With hints about correct configuration keys
    """
    wrong_keys = {
        "db_path": "database_path",
        "base_url": "api_url",
        "script_api_url": "api_url",
        "script_api_key": "api_key",  # pragma: allowlist secret
    }

    for wrong, correct in wrong_keys.items():
        if wrong in config:
            raise ConfigurationError(
                message=f"Invalid configuration key '{wrong}'",
                hint=f"Use '{correct}' instead of '{wrong}'",
                details={
                    "found_keys": list(config.keys()),
                    "invalid_key": wrong,
                    "correct_key": correct,
                },
            )
