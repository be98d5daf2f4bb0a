"""Standard domain error categories.

Concrete errors live in ``tablekeeper.core.exceptions`` and derive
from one of these.
"""

from http import HTTPStatus

from .base import AppError


class BadRequestError(AppError):
    """Bad request - malformed or invalid."""

    status_code = HTTPStatus.BAD_REQUEST


class ValidationError(BadRequestError):
    """Input validation error."""

    code = "VALIDATION_ERROR"


class AuthenticationError(AppError):
    """Authentication required or failed."""

    status_code = HTTPStatus.UNAUTHORIZED
    headers = {"WWW-Authenticate": "Bearer"}


class AuthorizationError(AppError):
    """Access denied - insufficient permissions."""

    status_code = HTTPStatus.FORBIDDEN


class NotFoundError(AppError):
    """Resource not found."""

    status_code = HTTPStatus.NOT_FOUND


class ConflictError(AppError):
    """Resource conflict or duplicate."""

    status_code = HTTPStatus.CONFLICT


class BusinessRuleViolationError(AppError):
    """Operation violates a business rule."""

    status_code = HTTPStatus.UNPROCESSABLE_ENTITY


class ServiceUnavailableError(AppError):
    """Service temporarily unavailable."""

    status_code = HTTPStatus.SERVICE_UNAVAILABLE
