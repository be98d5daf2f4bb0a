"""Shared errors package.

Centralized error handling and exception management.
"""

from .base import AppError
from .context import trace_id_var
from .decorators import safe
from .domain import (
    AuthenticationError,
    AuthorizationError,
    BadRequestError,
    BusinessRuleViolationError,
    ConflictError,
    NotFoundError,
    ServiceUnavailableError,
    ValidationError,
)
from .handlers import error_response, render_app_error, setup_exception_handlers
from .mapping import ExceptionMapper
from .schemas import ErrorDetail, ErrorResponse

__all__ = [
    # Base
    "AppError",
    # Domain categories
    "BadRequestError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "ConflictError",
    "BusinessRuleViolationError",
    "ServiceUnavailableError",
    # Mapping
    "ExceptionMapper",
    "safe",
    # Handlers
    "setup_exception_handlers",
    "error_response",
    "render_app_error",
    # Context
    "trace_id_var",
    # Schemas
    "ErrorDetail",
    "ErrorResponse",
]
