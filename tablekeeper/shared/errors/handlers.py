"""Exception handlers for FastAPI.

Every error leaves the application as an ErrorResponse body with an
``X-Error-Code`` header.
"""

import logging
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .base import AppError
from .context import trace_id_var
from .schemas import ErrorResponse

logger = logging.getLogger(__name__)


def error_response(
    status_code: int,
    code: str,
    message: str,
    details: dict | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build the unified JSON error response."""
    body = ErrorResponse(
        error=code,
        message=message,
        details=details or {},
        trace_id=trace_id_var.get(),
    )
    return JSONResponse(
        status_code=int(status_code),
        content=jsonable_encoder(body),
        headers={"X-Error-Code": code, **(headers or {})},
    )


def render_app_error(exc: AppError) -> JSONResponse:
    """Render an AppError (also used outside the router, e.g. in middleware)."""
    return JSONResponse(
        status_code=int(exc.status_code),
        content=jsonable_encoder(exc.to_response()),
        headers={"X-Error-Code": exc.code, **exc.headers},
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers in FastAPI application.

    Registers handlers for:
    - Business errors (AppError)
    - Request validation errors (RequestValidationError), rendered as 400
    - HTTP errors (StarletteHTTPException)
    - Unexpected exceptions (Exception)
    """

    @app.exception_handler(AppError)
    async def app_exception_handler(request: Request, exc: AppError) -> JSONResponse:
        if exc.status_code >= HTTPStatus.INTERNAL_SERVER_ERROR:
            logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
        return render_app_error(exc)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
            for err in exc.errors()
        ]
        return error_response(
            HTTPStatus.BAD_REQUEST,
            "VALIDATION_ERROR",
            "Input validation error",
            {"errors": errors},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return error_response(
            exc.status_code,
            f"HTTP_{exc.status_code}",
            str(exc.detail),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled exception on {request.method} {request.url.path}")
        return error_response(
            HTTPStatus.INTERNAL_SERVER_ERROR,
            "INTERNAL_SERVER_ERROR",
            "Internal server error",
        )
