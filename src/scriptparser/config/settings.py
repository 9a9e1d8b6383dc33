"""scriptparser configuration settings."""

from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Callable
from pathlib import Path
from typing import Any

import yaml
from pydantic import AliasChoices, Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from scriptparser.exceptions import ConfigurationError, check_config_keys


class ScriptParserSettings(BaseSettings):
    """scriptparser configuration settings.

    Sources, strongest first: command-line flags, config files (YAML, TOML
    or JSON; later files win), ``SCRIPTPARSER_*`` environment variables,
    a ``.env`` file, then the defaults below.

    The backend URL and key may also be given as SCRIPT_API_URL and
    SCRIPT_API_KEY, the names used by existing adapter deployments.
    """

    model_config = SettingsConfigDict(
        env_prefix="SCRIPTPARSER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Database settings
    database_path: Path = Field(
        default_factory=lambda: Path.cwd() / "scriptparser.db",
        description="Path to the SQLite database file",
    )
    database_timeout: float = Field(
        default=30.0,
        description="SQLite busy timeout in seconds",
        ge=0.1,
    )
    database_journal_mode: str = Field(
        default="WAL",
        description="SQLite journal mode (DELETE, TRUNCATE, PERSIST, MEMORY, WAL, OFF)",
        pattern="^(DELETE|TRUNCATE|PERSIST|MEMORY|WAL|OFF)$",
    )
    database_synchronous: str = Field(
        default="NORMAL",
        description="SQLite synchronous mode (OFF, NORMAL, FULL, EXTRA)",
        pattern="^(OFF|NORMAL|FULL|EXTRA)$",
    )
    database_pool_min_size: int = Field(
        default=1,
        description="Connections opened when the pool starts",
        ge=0,
    )
    database_pool_max_size: int = Field(
        default=10,
        description="Upper bound on concurrent database connections",
        ge=1,
    )

    # Debug settings
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    # Logging settings
    log_level: str = Field(
        default="WARNING",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
    )
    log_format: str = Field(
        default="console",
        description="Log output format (console, json, structured)",
        pattern="^(console|json|structured)$",
    )
    log_file: Path | None = Field(
        default=None,
        description="Optional log file path",
    )

    # HTTP service settings
    api_host: str = Field(
        default="127.0.0.1",
        description="Address the HTTP service binds to",
    )
    api_port: int = Field(
        default=3000,
        description="Port the HTTP service listens on",
        ge=1,
        le=65535,
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed to call the HTTP service",
    )

    # Backend client settings (used by the MCP adapter)
    api_url: str = Field(
        default="http://localhost:3000",
        description="Base URL of the script HTTP service",
        validation_alias=AliasChoices(
            "api_url", "SCRIPTPARSER_API_URL", "SCRIPT_API_URL"
        ),
    )
    api_key: str | None = Field(
        default=None,
        description="Optional API key sent as X-API-Key on every backend call",
        validation_alias=AliasChoices(
            "api_key", "SCRIPTPARSER_API_KEY", "SCRIPT_API_KEY"
        ),
    )
    api_timeout: float | None = Field(
        default=None,
        description="Backend request timeout in seconds (unset = wait indefinitely)",
        gt=0,
    )
    api_max_connections: int = Field(
        default=10,
        description="Maximum concurrent connections to the backend",
        ge=1,
    )

    # MCP settings
    mcp_server_name: str = Field(
        default="script-parser-mcp-server",
        description="Server name announced to MCP clients",
    )
    mcp_check_backend: bool = Field(
        default=False,
        description="Probe the backend health endpoint before serving",
    )

    @field_validator("database_path", "log_file", mode="before")
    @classmethod
    def expand_path(cls, v: Any) -> Path | None:
        """Expand $VARS and ~, then make the path absolute."""
        if v is None:
            return None
        if not isinstance(v, str | Path):
            raise ValueError(f"Expected a path, got {type(v).__name__}: {v!r}")
        return Path(os.path.expandvars(str(v))).expanduser().resolve()

    @field_validator("log_level", "log_format", mode="before")
    @classmethod
    def normalize_case(cls, v: Any, info: ValidationInfo) -> str:
        """Accept log level and format names in any case."""
        if not isinstance(v, str):
            raise ValueError(
                f"{info.field_name} must be a string, got {type(v).__name__}"
            )
        return v.upper() if info.field_name == "log_level" else v.lower()

    @field_validator("api_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Drop trailing slashes so endpoint paths join cleanly."""
        return v.rstrip("/")

    @classmethod
    def from_file(cls, config_path: Path | str) -> ScriptParserSettings:
        """Load settings from one YAML, TOML or JSON file.

        Raises:
            FileNotFoundError: If the file does not exist
            ConfigurationError: On an unsupported format or a misnamed key
        """
        path = Path(config_path)
        if not path.is_file():
            raise FileNotFoundError(f"Configuration file not found: {path}")
        return cls(**_read_config_file(path))

    @classmethod
    def from_multiple_sources(
        cls,
        config_files: list[Path | str],
        overrides: dict[str, Any] | None = None,
    ) -> ScriptParserSettings:
        """Merge config files in order, then apply explicit overrides.

        Later files win over earlier ones and missing files are skipped.
        Fields set by neither fall back to the environment and defaults.
        ``None`` override values are ignored.
        """
        data: dict[str, Any] = {}
        for config_file in config_files:
            path = Path(config_file)
            if not path.is_file():
                # Imported here: the logging module imports this one
                from scriptparser.config.logging import get_logger

                get_logger(__name__).warning(
                    "Configuration file not found, skipping", config_file=str(path)
                )
                continue
            data.update(_read_config_file(path))

        data.update({k: v for k, v in (overrides or {}).items() if v is not None})
        return cls(**data)


_CONFIG_SUFFIXES = (".yaml", ".json", ".toml")

_PARSERS: dict[str, Callable[[str], Any]] = {
    ".yaml": yaml.safe_load,
    ".yml": yaml.safe_load,
    ".toml": tomllib.loads,
    ".json": json.loads,
}


def _read_config_file(path: Path) -> dict[str, Any]:
    """Parse a config file into a mapping of setting names to values."""
    parse = _PARSERS.get(path.suffix.lower())
    if parse is None:
        raise ConfigurationError(
            message=f"Unsupported config file format: {path.suffix or path.name}",
            hint="Use a .yaml, .yml, .toml or .json file",
            details={"file": str(path)},
        )

    try:
        data = parse(path.read_text(encoding="utf-8"))
    except (yaml.YAMLError, tomllib.TOMLDecodeError, json.JSONDecodeError) as e:
        raise ConfigurationError(
            message=f"Could not parse configuration file: {e}",
            details={"file": str(path)},
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            message="Configuration file must hold a mapping of settings",
            details={"file": str(path), "found": type(data).__name__},
        )
    check_config_keys(data)
    return data


def _discover_config_files() -> list[Path]:
    """Config files that exist, lowest precedence first."""
    directories = [
        Path("/etc/scriptparser"),
        Path.home() / ".scriptparser",
        Path.home() / ".config" / "scriptparser",
        Path.cwd() / ".scriptparser",
    ]
    candidates = [d / f"config{s}" for d in directories for s in _CONFIG_SUFFIXES]
    candidates += [Path.cwd() / f"scriptparser{s}" for s in _CONFIG_SUFFIXES]

    found = []
    for path in candidates:
        try:
            if path.is_file():
                found.append(path)
        except OSError:
            continue
    return found


_settings: ScriptParserSettings | None = None


def get_settings() -> ScriptParserSettings:
    """Get the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = ScriptParserSettings.from_multiple_sources(
            _discover_config_files()
        )
    return _settings


def set_settings(settings: ScriptParserSettings | None) -> None:
    """Replace the process-wide settings (``None`` forces a reload)."""
    global _settings
    _settings = settings


def clear_settings_cache() -> None:
    """Forget loaded settings so the next access re-reads every source."""
    set_settings(None)


def get_settings_for_cli(
    cli_overrides: dict[str, Any] | None = None,
) -> ScriptParserSettings:
    """Get the global settings with command-line flag values layered on top.

    Flags left unset (``None``) keep the configured value.
    """
    settings = get_settings()
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    if not overrides:
        return settings
    return ScriptParserSettings(**{**settings.model_dump(), **overrides})
