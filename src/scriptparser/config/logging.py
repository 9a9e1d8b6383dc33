"""Logging configuration for scriptparser.

Every handler writes to stderr (or a file). stdout belongs to the MCP stdio
transport and must only ever carry protocol messages.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Any

import structlog
from structlog.contextvars import merge_contextvars
from structlog.processors import (
    CallsiteParameter,
    CallsiteParameterAdder,
    TimeStamper,
    add_log_level,
    dict_tracebacks,
    format_exc_info,
)
from structlog.stdlib import ProcessorFormatter, add_logger_name, filter_by_level

from scriptparser.config.settings import ScriptParserSettings

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5


def _renderer(log_format: str) -> Any:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    if log_format == "structured":
        return structlog.processors.KeyValueRenderer(
            key_order=["timestamp", "level", "logger", "event"],
            drop_missing=True,
        )
    return structlog.dev.ConsoleRenderer(
        colors=sys.stderr.isatty(),
        exception_formatter=structlog.dev.rich_traceback,
    )


def _build_handlers(settings: ScriptParserSettings) -> list[logging.Handler]:
    """stderr handler plus an optional rotating file, sharing one formatter.

    Records from plain stdlib loggers (uvicorn, httpx) get the same
    timestamp, level and logger name fields as structlog events.
    """
    formatter = ProcessorFormatter(
        processor=_renderer(settings.log_format),
        foreign_pre_chain=[TimeStamper(fmt="iso"), add_log_level, add_logger_name],
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if settings.log_file:
        settings.log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                filename=str(settings.log_file),
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_FILE_BACKUPS,
                encoding="utf-8",
            )
        )
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def _event_processors(settings: ScriptParserSettings) -> list[Any]:
    processors: list[Any] = [
        merge_contextvars,
        filter_by_level,
        TimeStamper(fmt="iso"),
        add_log_level,
        add_logger_name,
    ]
    if settings.debug:
        processors.append(
            CallsiteParameterAdder(
                parameters=[
                    CallsiteParameter.FILENAME,
                    CallsiteParameter.LINENO,
                    CallsiteParameter.FUNC_NAME,
                ]
            )
        )
    if settings.log_format == "json":
        processors.append(dict_tracebacks)
    elif settings.log_format == "structured":
        processors.append(format_exc_info)

    # Rendering happens in the handlers' ProcessorFormatter, which is also
    # what lets pytest's caplog see structlog events
    processors.append(ProcessorFormatter.wrap_for_formatter)
    return processors


def configure_logging(settings: ScriptParserSettings) -> None:
    """Route structlog and stdlib logging through the configured handlers.

    Safe to call again; the previous root handlers are replaced.

    Raises:
        ValueError: If the log level is not known to the logging module.
    """
    levels = logging.getLevelNamesMapping()
    if settings.log_level not in levels:
        raise ValueError(
            f"Invalid log level '{settings.log_level}'. "
            f"Valid levels are: {', '.join(sorted(levels))}"
        )
    level = levels[settings.log_level]

    logging.basicConfig(level=level, handlers=_build_handlers(settings), force=True)

    # httpx logs every request at INFO; keep it quiet unless debugging
    logging.getLogger("httpx").setLevel(
        logging.DEBUG if settings.debug else logging.WARNING
    )

    structlog.configure(
        processors=_event_processors(settings),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:
    """Get a structlog logger bound to ``name``."""
    return structlog.get_logger(name)
