"""
Middleware для обработки запросов.
"""

import time
import uuid
from collections.abc import Awaitable, Callable, Iterable

from fastapi import Request, Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp, Receive, Scope, Send

from tablekeeper.shared.context import clear_request_context, set_request_context, set_user_id
from tablekeeper.shared.errors import AppError, render_app_error

from .exceptions import UnauthenticatedError
from .metrics import HTTP_REQUEST_IN_PROGRESS, record_http_request
from .security import TokenIssuer

# ==================== Request Tracing Middleware ====================


class RequestTracingMiddleware(BaseHTTPMiddleware):
    """Middleware для трейсинга и логирования запросов.

    Добавляет request ID ко всем запросам, пишет метрики и лог запроса.
    """

    SKIP_LOG_PREFIXES: tuple[str, ...] = ("/observability/",)

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        set_request_context(request_id)

        method = request.method
        HTTP_REQUEST_IN_PROGRESS.labels(method=method).inc()
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            duration = time.perf_counter() - start_time
            record_http_request(method, self._get_endpoint(request), 500, duration)
            logger.opt(exception=True).error(
                "Request failed",
                method=method,
                path=request.url.path,
                duration_ms=round(duration * 1000, 2),
            )
            raise
        finally:
            HTTP_REQUEST_IN_PROGRESS.labels(method=method).dec()

        duration = time.perf_counter() - start_time
        record_http_request(method, self._get_endpoint(request), response.status_code, duration)
        response.headers["X-Request-ID"] = request_id
        self._log_request(request, response, duration)
        clear_request_context()
        return response

    def _get_endpoint(self, request: Request) -> str:
        """Шаблон пути маршрута (низкая кардинальность меток)."""
        route = request.scope.get("route")
        path = getattr(route, "path", None)
        return path or "unmatched"

    def _log_request(self, request: Request, response: Response, duration: float) -> None:
        if request.url.path.startswith(self.SKIP_LOG_PREFIXES):
            return

        if response.status_code >= 500:
            level = "ERROR"
        elif response.status_code >= 400:
            level = "WARNING"
        else:
            level = "INFO"

        # bind, а не kwargs: путь может содержать фигурные скобки
        logger.bind(
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round(duration * 1000, 2),
            client_ip=request.client.host if request.client else "unknown",
        ).log(level, f"{request.method} {request.url.path} -> {response.status_code}")


# ==================== Claims Middleware ====================


class ClaimsMiddleware:
    """
    Проверка bearer токена до вызова обработчика.

    Для защищённых путей извлекает ``Authorization: Bearer <jwt>``,
    проверяет токен и кладёт Claims в ``request.state.claims``.
    Без токена или с невалидным токеном запрос завершается 401,
    обработчик не вызывается. В БД middleware не ходит.
    """

    DEFAULT_PUBLIC_PATHS: frozenset[str] = frozenset(
        {
            "/api/auth/login",
            "/api/auth/register",
            "/api/auth/refresh",
            "/api/docs",
            "/api/redoc",
            "/api/openapi.json",
        }
    )

    def __init__(
        self,
        app: ASGIApp,
        *,
        issuer: TokenIssuer,
        protected_prefix: str = "/api",
        public_paths: Iterable[str] | None = None,
    ) -> None:
        self.app = app
        self.issuer = issuer
        self.protected_prefix = protected_prefix
        self.public_paths = (
            frozenset(public_paths) if public_paths is not None else self.DEFAULT_PUBLIC_PATHS
        )

    def is_protected(self, scope: Scope) -> bool:
        path: str = scope.get("path", "")
        if scope.get("method") == "OPTIONS":
            return False
        if not path.startswith(self.protected_prefix):
            return False
        return path.rstrip("/") not in self.public_paths

    @staticmethod
    def extract_bearer(scope: Scope) -> str:
        """
        Raises:
            UnauthenticatedError: Заголовок отсутствует или не Bearer.
        """
        header = None
        for name, value in scope.get("headers", []):
            if name == b"authorization":
                header = value.decode("latin-1")
                break

        if header is None:
            raise UnauthenticatedError("Authorization header is required")

        scheme, _, token = header.partition(" ")
        token = token.strip()
        if scheme.lower() != "bearer" or not token or " " in token:
            raise UnauthenticatedError("Authorization header must be 'Bearer <token>'")
        return token

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not self.is_protected(scope):
            await self.app(scope, receive, send)
            return

        try:
            claims = self.issuer.validate(self.extract_bearer(scope))
        except AppError as exc:
            response = render_app_error(exc)
            await response(scope, receive, send)
            return

        scope.setdefault("state", {})["claims"] = claims
        set_user_id(str(claims.sub))
        await self.app(scope, receive, send)
