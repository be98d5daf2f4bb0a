"""Mapping of infrastructure errors to domain errors.

Storage exceptions never reach services or routers as-is: the ``@safe``
decorator runs them through ``ExceptionMapper``, which picks the handler
registered for the closest class in the exception's MRO.
"""

import logging
from collections.abc import Callable
from typing import Any

from sqlalchemy.exc import (
    DatabaseError,
    DataError,
    IntegrityError,
    InterfaceError,
    OperationalError,
)

from .base import AppError
from .domain import ConflictError, ServiceUnavailableError, ValidationError

logger = logging.getLogger(__name__)

Handler = Callable[[Any, str], AppError]


class ExceptionMapper:
    """Centralized mapping of technical exceptions to domain exceptions."""

    _handlers: dict[type[Exception], Handler] = {}

    @classmethod
    def register(cls, *exception_types: type[Exception]) -> Callable[[Handler], Handler]:
        """Register a handler for exception types.

        A later registration for the same type replaces the earlier one.

        Usage:
            @ExceptionMapper.register(IntegrityError)
            def _handle_integrity_error(exc: IntegrityError, func_name: str) -> AppError:
                return ConflictError(message="Record already exists")
        """

        def decorator(handler: Handler) -> Handler:
            for exc_type in exception_types:
                cls._handlers[exc_type] = handler
            return handler

        return decorator

    @classmethod
    def handler_for(cls, exc: Exception) -> Handler | None:
        for exc_type in type(exc).__mro__:
            handler = cls._handlers.get(exc_type)
            if handler is not None:
                return handler
        return None

    @classmethod
    def map(cls, exc: Exception, func_name: str = "") -> AppError:
        """Map a technical exception to a domain exception.

        Args:
            exc: The technical exception to map
            func_name: Name of the function where exception occurred (for logging)

        Returns:
            Mapped domain exception (AppError subclass)
        """
        handler = cls.handler_for(exc)
        if handler is not None:
            return handler(exc, func_name)

        logger.exception(f"Unhandled exception in {func_name}: {type(exc).__name__}")
        return AppError()


# --- Default handlers ---


@ExceptionMapper.register(IntegrityError)
def _handle_integrity_error(exc: IntegrityError, func_name: str) -> AppError:
    """Database: integrity violation without a domain-specific translation."""
    logger.warning(f"Untranslated integrity error in {func_name}")
    return ConflictError(message="Database constraint violation")


@ExceptionMapper.register(DataError)
def _handle_data_error(exc: DataError, func_name: str) -> AppError:
    """Database: value rejected by the column type."""
    return ValidationError(message="Invalid input value")


@ExceptionMapper.register(OperationalError, InterfaceError, DatabaseError)
def _handle_database_error(exc: Exception, func_name: str) -> AppError:
    """Database: connection or operational error."""
    logger.error(f"Database error in {func_name}: {type(exc).__name__}")
    return ServiceUnavailableError(
        message="Database temporarily unavailable",
        details={"service": "database"},
    )
