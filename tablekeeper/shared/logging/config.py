"""Tablekeeper - Logger Configuration.

Loguru-based structured logging:
- Loguru for application logs (console format in development, JSON in production)
- Intercept handler for third-party library logs (uvicorn, fastapi, sqlalchemy)
- Request context (request_id, trace_id, user_id) attached to every record
- Redaction of sensitive fields in structured output
"""

from __future__ import annotations

import json
import logging
import re
import sys
from typing import TYPE_CHECKING, Any

from loguru import logger

from tablekeeper.shared.context import request_id_var, trace_id_var, user_id_var

if TYPE_CHECKING:
    from tablekeeper.core.config import Settings

SENSITIVE_PATTERNS = re.compile(
    r"(password|token|secret|authorization|credential|hash)",
    re.IGNORECASE,
)

REDACTED = "***REDACTED***"


class InterceptHandler(logging.Handler):
    """Redirect records from the standard ``logging`` module to Loguru.

    uvicorn, fastapi and sqlalchemy log through ``logging``; the handler
    keeps their records in the same sinks and format.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = str(record.levelno)

        # Skip logging-module frames so file:line points at the caller
        frame = logging.currentframe()
        depth = 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def _context_patcher(record: dict[str, Any]) -> None:
    """Attach request context variables to every record."""
    extra = record["extra"]
    extra.setdefault("request_id", request_id_var.get() or "-")
    extra.setdefault("trace_id", trace_id_var.get() or "-")
    extra.setdefault("user_id", user_id_var.get() or "-")


def redact(data: dict[str, Any]) -> dict[str, Any]:
    """Replace values of sensitive keys, recursing into nested dicts."""
    result: dict[str, Any] = {}
    for key, value in data.items():
        if SENSITIVE_PATTERNS.search(key):
            result[key] = REDACTED
        elif isinstance(value, dict):
            result[key] = redact(value)
        else:
            result[key] = value
    return result


def _create_json_sink(service_name: str) -> Any:
    """Create a JSON sink closure with the service name."""

    def json_sink(message: Any) -> None:
        record = message.record
        log_entry: dict[str, Any] = {
            "timestamp": record["time"].isoformat(),
            "level": record["level"].name,
            "message": record["message"],
            "service": service_name,
            "module": record["name"],
            "function": record["function"],
            "line": record["line"],
            **redact(dict(record["extra"])),
        }

        exc = record["exception"]
        if exc is not None:
            log_entry["exception"] = {
                "type": exc.type.__name__ if exc.type else None,
                "value": str(exc.value) if exc.value else None,
            }

        sys.stdout.write(json.dumps(log_entry, ensure_ascii=False, default=str) + "\n")
        sys.stdout.flush()

    return json_sink


def setup_logger(settings: Settings) -> None:
    """Configure Loguru logger.

    Sets up the console (dev) or JSON (prod) sink, the request-context
    patcher and interception of third-party library logs.
    """
    logger.remove()
    logger.configure(patcher=_context_patcher)

    level = settings.logging.level.upper()
    is_json = settings.logging.format.lower() == "json"

    if is_json:
        logger.add(
            _create_json_sink(settings.app.name),
            level=level,
            backtrace=False,
            diagnose=False,
            enqueue=True,
        )
    else:
        dev_format = (
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level> | "
            "<dim>request_id={extra[request_id]}</dim>"
        )
        logger.add(
            sys.stdout,
            format=dev_format,
            level=level,
            colorize=True,
            backtrace=True,
            diagnose=settings.app.debug,
            enqueue=True,
        )

    configure_third_party_loggers(verbose=not is_json)

    logger.info("Logger configured", level=level, format="json" if is_json else "console")


def configure_third_party_loggers(*, verbose: bool = True) -> None:
    """Route standard-library loggers through Loguru and tame their levels."""
    logging.root.handlers = [InterceptHandler()]
    logging.root.setLevel(logging.INFO)

    levels = {
        "uvicorn": logging.INFO,
        "uvicorn.error": logging.INFO,
        "uvicorn.access": logging.INFO if verbose else logging.WARNING,
        "fastapi": logging.INFO,
        "sqlalchemy": logging.WARNING,
        "sqlalchemy.engine": logging.WARNING,
        "asyncpg": logging.WARNING,
    }
    for name, level in levels.items():
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.propagate = False
        std_logger.setLevel(level)


def get_logger(name: str):
    """Get a Loguru logger bound to a module name."""
    return logger.bind(name=name)
