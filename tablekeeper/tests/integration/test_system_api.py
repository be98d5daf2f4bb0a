"""Tests for health, liveness and metrics endpoints."""

from tablekeeper.core.database import db_manager


async def test_health(client):
    response = await client.get("/observability/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["version"] == "1.0.0"
    assert body["dependencies"] == {"database": "healthy"}


async def test_health_reports_unhealthy_database(client, monkeypatch):
    async def _down() -> bool:
        return False

    monkeypatch.setattr(db_manager, "health_check", _down)

    response = await client.get("/observability/health")

    assert response.json()["status"] == "unhealthy"


async def test_live(client):
    response = await client.get("/observability/live")

    assert response.json() == {"alive": True}


async def test_metrics_exposition(client):
    response = await client.get("/observability/metrics")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")


async def test_request_id_is_echoed(client):
    response = await client.get("/observability/live", headers={"X-Request-ID": "req-42"})

    assert response.headers["X-Request-ID"] == "req-42"
