"""Structured logging built on Loguru.

Features:
- **Context propagation**: correlation, request and account IDs bound with
  ``logger.contextualize`` appear on every line of a request
- **Standard library integration**: uvicorn, SQLAlchemy and friends are
  routed through Loguru by ``InterceptHandler``
- **Fatal error hooks**: exceptions that escape the main thread or the event
  loop are logged at CRITICAL before the process exits

Formatter types:
- **console**: Human-readable with inline context (development)
- **json**: One JSON document per line (staging, production)
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from collections.abc import Callable
from types import TracebackType
from typing import Any, Final, Protocol, cast

import orjson
from loguru import logger

from src.core.constants import REDACTED


class _LoggingState:
    """Simple state holder to track if logging has been configured."""

    def __init__(self) -> None:
        self.configured = False


_state = _LoggingState()


class LogConfigProtocol(Protocol):
    """Protocol for log configuration objects."""

    @property
    def log_level(self) -> str:
        """Logging level."""
        ...

    @property
    def log_formatter_type(self) -> str | None:
        """Log formatter type."""
        ...

    @property
    def sensitive_fields(self) -> list[str]:
        """Field names whose values are never printed."""
        ...


class SettingsProtocol(Protocol):
    """Protocol for settings objects that setup_logging can accept."""

    @property
    def debug(self) -> bool:
        """Debug mode flag."""
        ...

    @property
    def log_config(self) -> LogConfigProtocol:
        """Log configuration."""
        ...


DEFAULT_LOG_FORMAT: Final[str] = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "{message}"
)
ID_DISPLAY_LENGTH: Final[int] = 12
MAX_FIELD_VALUE_LENGTH: Final[int] = 100
PRIORITY_FIELDS: Final[tuple[str, ...]] = (
    "request_id",
    "correlation_id",
    "account_id",
    "method",
    "path",
    "status_code",
    "duration_ms",
)
FATAL_EXIT_CODE: Final[int] = 1


def _escape(value: object) -> str:
    return str(value).replace("{", "{{").replace("}", "}}")


def _format_priority_field(field: str, value: object) -> str:
    if field in {"request_id", "correlation_id"}:
        value = str(value)[:ID_DISPLAY_LENGTH]
    elif field == "duration_ms":
        value = f"{value}ms"
    elif field == "status_code":
        status = str(value)
        color = {"2": "green", "3": "yellow"}.get(status[:1], "red")
        return f"<{color}>{_escape(status)}</{color}>"
    return _escape(value)


def _format_extra_field(key: str, value: object, sensitive: list[str]) -> str:
    str_value = str(value)
    if key in sensitive:
        str_value = REDACTED
    elif len(str_value) > MAX_FIELD_VALUE_LENGTH:
        str_value = str_value[: MAX_FIELD_VALUE_LENGTH - 3] + "..."
    return f"{_escape(key)}={_escape(str_value)}"


def make_console_formatter(
    sensitive_fields: list[str],
) -> Callable[[dict[str, Any]], str]:
    """Build a console formatter that shows the bound context inline.

    Args:
        sensitive_fields: Extra keys whose values are replaced by REDACTED.

    Returns:
        Callable[[dict[str, Any]], str]: A Loguru ``format`` callable.
    """

    def format_console_with_context(record: dict[str, Any]) -> str:
        extra = record.get("extra", {})
        parts = [
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green>",
            "<level>{level: <8}</level>",
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan>",
        ]

        context_parts = [
            f"<yellow>{_format_priority_field(field, extra[field])}</yellow>"
            for field in PRIORITY_FIELDS
            if extra.get(field) is not None
        ]
        context_parts.extend(
            f"<dim>{_format_extra_field(key, value, sensitive_fields)}</dim>"
            for key, value in extra.items()
            if key not in PRIORITY_FIELDS
            and not key.startswith("_")
            and value is not None
        )
        if context_parts:
            parts.append(" ".join(f"[{part}]" for part in context_parts))

        parts.append(_escape(record.get("message", "")))
        line = " | ".join(parts) + "\n"
        if record.get("exception"):
            line += "{exception}\n"
        return line

    return format_console_with_context


def serialize_for_json(record: dict[str, Any]) -> str:
    """Format log record as a single-line JSON document.

    Args:
        record: Loguru record to format.

    Returns:
        str: JSON-formatted log entry with newline.
    """
    log_entry: dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "logger": record["name"],
        "function": record["function"],
        "line": record["line"],
    }

    if extra := record.get("extra", {}):
        log_entry.update({k: v for k, v in extra.items() if not k.startswith("_")})

    if exc := record.get("exception"):
        log_entry["exception"] = {
            "type": exc.type.__name__ if exc.type else None,
            "value": str(exc.value) if exc.value else None,
        }

    return orjson.dumps(log_entry, default=str).decode() + "\n"


class InterceptHandler(logging.Handler):
    """Intercept standard logging and redirect to Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        """Forward log record to Loguru.

        Args:
            record: Standard library LogRecord to forward.
        """
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find the caller outside of the logging module
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def setup_logging(settings: SettingsProtocol) -> None:
    """Configure Loguru sinks and route stdlib logging through them.

    Args:
        settings: Application settings containing log configuration.

    Note:
        This function ensures it's only called once using module state.
    """
    if _state.configured:
        return

    logger.remove()

    formatter_type = settings.log_config.log_formatter_type or "console"

    if formatter_type == "console":
        logger.add(
            sys.stdout,
            format=cast("Any", make_console_formatter(settings.log_config.sensitive_fields)),
            level=settings.log_config.log_level,
            colorize=True,
            diagnose=settings.debug,
            backtrace=settings.debug,
        )
    else:

        def structured_sink(message: Any) -> None:
            sys.stdout.write(serialize_for_json(message.record))
            sys.stdout.flush()

        logger.add(
            structured_sink,
            level=settings.log_config.log_level,
            enqueue=True,
            diagnose=False,
            backtrace=False,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(logger_name)
        uvicorn_logger.handlers = [InterceptHandler()]
        uvicorn_logger.propagate = False

    logger.info(
        "Logging configured with {} formatter",
        formatter_type,
        log_level=settings.log_config.log_level,
    )

    _state.configured = True


def handle_uncaught_exception(
    exc_type: type[BaseException],
    exc_value: BaseException,
    exc_traceback: TracebackType | None,
) -> None:
    """``sys.excepthook`` replacement: log at CRITICAL and exit with status 1."""
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_traceback)
        return
    logger.opt(exception=(exc_type, exc_value, exc_traceback)).critical(
        "Uncaught exception, shutting down"
    )
    logger.complete()
    os._exit(FATAL_EXIT_CODE)


def handle_loop_exception(
    loop: asyncio.AbstractEventLoop, context: dict[str, Any]
) -> None:
    """Event loop exception handler for errors no task awaited.

    Logs at CRITICAL and terminates the process with status 1.
    """
    exception = context.get("exception")
    message = context.get("message", "Unhandled error in event loop")
    logger.opt(exception=exception).critical(
        "Unhandled asynchronous error: {}", message
    )
    loop.stop()
    logger.complete()
    os._exit(FATAL_EXIT_CODE)


def install_fatal_error_hooks() -> None:
    """Log and exit on exceptions that escape the main thread."""
    sys.excepthook = handle_uncaught_exception
