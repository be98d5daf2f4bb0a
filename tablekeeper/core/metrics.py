"""
Prometheus метрики для мониторинга приложения.
"""

from fastapi.responses import Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    Info,
    generate_latest,
)

# Глобальный registry (не default, чтобы не смешиваться с метриками процесса)
REGISTRY = CollectorRegistry(auto_describe=True)


# ==================== Application Info ====================

APP_INFO = Info(
    "tablekeeper_app",
    "Application information",
    registry=REGISTRY,
)


# ==================== HTTP Metrics ====================

HTTP_REQUEST_COUNT = Counter(
    "tablekeeper_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
    registry=REGISTRY,
)

HTTP_REQUEST_LATENCY = Histogram(
    "tablekeeper_http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
    registry=REGISTRY,
)

HTTP_REQUEST_IN_PROGRESS = Gauge(
    "tablekeeper_http_requests_in_progress",
    "HTTP requests in progress",
    ["method"],
    registry=REGISTRY,
)


# ==================== Authentication Metrics ====================

AUTH_ATTEMPTS_TOTAL = Counter(
    "tablekeeper_auth_attempts_total",
    "Total authentication attempts",
    ["result"],
    registry=REGISTRY,
)

AUTH_TOKEN_OPERATIONS = Counter(
    "tablekeeper_auth_token_operations_total",
    "Total token operations",
    ["operation", "status"],
    registry=REGISTRY,
)


# ==================== Table Metrics ====================

JOIN_REQUESTS_TOTAL = Counter(
    "tablekeeper_join_requests_total",
    "Join requests by outcome",
    ["outcome"],
    registry=REGISTRY,
)

SESSIONS_FINALIZED = Counter(
    "tablekeeper_sessions_finalized_total",
    "Sessions closed with attendance",
    registry=REGISTRY,
)


# ==================== Helper Functions ====================


def record_http_request(method: str, endpoint: str, status_code: int, duration: float) -> None:
    """Записать метрики HTTP запроса."""
    HTTP_REQUEST_COUNT.labels(
        method=method,
        endpoint=endpoint,
        status_code=str(status_code),
    ).inc()
    HTTP_REQUEST_LATENCY.labels(method=method, endpoint=endpoint).observe(duration)


def record_auth_attempt(result: str) -> None:
    """Записать попытку аутентификации (success / failure)."""
    AUTH_ATTEMPTS_TOTAL.labels(result=result).inc()


def record_token_operation(operation: str, status: str = "success") -> None:
    """Записать операцию с токеном (issue / rotate / revoke)."""
    AUTH_TOKEN_OPERATIONS.labels(operation=operation, status=status).inc()


def record_join_request(outcome: str) -> None:
    """created / approved / rejected / withdrawn."""
    JOIN_REQUESTS_TOTAL.labels(outcome=outcome).inc()


def get_metrics() -> tuple[bytes, str]:
    """
    Получить метрики в формате Prometheus.

    Returns:
        Tuple из (содержимое, content-type).
    """
    return generate_latest(REGISTRY), CONTENT_TYPE_LATEST


async def metrics_endpoint() -> Response:
    """Endpoint для экспорта метрик."""
    content, content_type = get_metrics()
    return Response(content=content, media_type=content_type)


def init_metrics(name: str, version: str) -> None:
    """Инициализировать метрики при старте приложения."""
    APP_INFO.info({"name": name, "version": version})
