"""
Shared module - cross-cutting concerns and utilities.

- Context variables for request/trace IDs
- Logging utilities with Loguru
- Error hierarchy and mapping
- Tri-state partial updates
"""

from .context import (
    clear_request_context,
    request_id_var,
    set_request_context,
    trace_id_var,
)
from .logging import get_logger, logger, setup_logger
from .update import KEEP, Change, Keep, Update

__all__ = [
    # Context
    "clear_request_context",
    "request_id_var",
    "set_request_context",
    "trace_id_var",
    # Logging
    "logger",
    "setup_logger",
    "get_logger",
    # Updates
    "KEEP",
    "Change",
    "Keep",
    "Update",
]
