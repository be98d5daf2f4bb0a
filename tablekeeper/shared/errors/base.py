"""Base exception class for application errors.

Error codes and default messages are derived from the class itself,
so a new error type is usually a docstring and a status code.
"""

import logging
import re
from typing import Any, ClassVar

from pydantic import ValidationError

from .context import trace_id_var
from .schemas import ErrorDetail, ErrorResponse

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


class AppError(Exception):
    """Base class for all application errors.

    - ``code`` is derived from the class name (TableNotFoundError -> TABLE_NOT_FOUND)
    - ``default_message`` is the first docstring line
    - ``details`` are validated through ErrorDetail (extra keys allowed)
    - ``headers`` are copied onto the HTTP response
    """

    status_code: int = 500
    code: str = "INTERNAL_ERROR"
    default_message: str = "Internal server error"
    headers: ClassVar[dict[str, str]] = {}

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | ErrorDetail | None = None,
        status_code: int | None = None,
        code: str | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.details = self._validate_details(details)

        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code

        super().__init__(self.message)

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)

        if "code" not in cls.__dict__:
            name = cls.__name__
            for suffix in ("Exception", "Error"):
                if name.endswith(suffix) and name != suffix:
                    name = name[: -len(suffix)]
                    break
            cls.code = _CAMEL_BOUNDARY.sub("_", name).upper()

        if "default_message" not in cls.__dict__ and cls.__doc__:
            cls.default_message = cls.__doc__.strip().split("\n")[0]

    def _validate_details(self, details: dict[str, Any] | ErrorDetail | None) -> dict[str, Any]:
        if details is None:
            return {}
        if isinstance(details, ErrorDetail):
            return details.model_dump(exclude_none=True)
        try:
            return ErrorDetail(**details).model_dump(exclude_none=True)
        except ValidationError:
            logger.warning(f"Unvalidated details in {self.__class__.__name__}")
            return dict(details)

    @property
    def trace_id(self) -> str:
        """Get current trace_id from context."""
        return trace_id_var.get()

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            error=self.code,
            message=self.message,
            details=self.details,
            trace_id=self.trace_id,
        )

