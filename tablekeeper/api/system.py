"""Health, liveness and metrics endpoints."""

from fastapi import APIRouter, Request
from fastapi.responses import Response

from tablekeeper.core.database import db_manager
from tablekeeper.core.metrics import metrics_endpoint
from tablekeeper.shared.schemas import HealthResponse

router = APIRouter(prefix="/observability", tags=["Системные"])


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Health check endpoint for load balancer."""
    dependencies = {
        "database": "healthy" if await db_manager.health_check() else "unhealthy",
    }
    status = "healthy" if all(v == "healthy" for v in dependencies.values()) else "unhealthy"
    return HealthResponse(
        status=status,
        version=request.app.state.settings.app.version,
        dependencies=dependencies,
    )


@router.get("/live")
async def liveness_check() -> dict[str, bool]:
    """Liveness check endpoint."""
    return {"alive": True}


@router.get("/metrics")
async def get_metrics() -> Response:
    """Prometheus metrics endpoint."""
    return await metrics_endpoint()
