"""Tablekeeper - Shared Logging Configuration.

Loguru-based logging module with:
- Structured JSON logging for production
- Colored console output for development
- Request context correlation
- Automatic sensitive data redaction
"""

from loguru import logger

from .config import (
    InterceptHandler,
    configure_third_party_loggers,
    get_logger,
    redact,
    setup_logger,
)
from .event_logger import (
    log_login_failed,
    log_login_succeeded,
    log_logout,
    log_refresh_reuse_detected,
    log_refresh_rotated,
    log_unknown_constraint,
    log_user_registered,
)

__all__ = [
    # Core logging
    "logger",
    "setup_logger",
    "get_logger",
    "redact",
    "InterceptHandler",
    "configure_third_party_loggers",
    # Event logging
    "log_user_registered",
    "log_login_succeeded",
    "log_login_failed",
    "log_refresh_rotated",
    "log_refresh_reuse_detected",
    "log_logout",
    "log_unknown_constraint",
]
