from __future__ import annotations

import sys
from pathlib import Path
from uuid import UUID

import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

import tabletop.api.routes.health as health_route
from tabletop.api.middleware.request_id import resolve_request_id
from tabletop.api.main import app


def test_live_health_endpoint() -> None:
    client = TestClient(app)
    response = client.get("/health/live")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert response.headers["X-Request-Id"]


def test_ready_health_endpoint_healthy_with_mocks(monkeypatch) -> None:
    monkeypatch.setattr(health_route, "ping_database", lambda timeout_seconds=1.0: True)
    monkeypatch.setattr(health_route, "ping_redis", lambda timeout_seconds=1.0: True)

    client = TestClient(app)
    response = client.get("/health/ready")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "checks": {"postgres": True, "redis": True}}


def test_ready_health_endpoint_reports_unavailable_dependency(monkeypatch) -> None:
    monkeypatch.setattr(health_route, "ping_database", lambda timeout_seconds=1.0: True)
    monkeypatch.setattr(health_route, "ping_redis", lambda timeout_seconds=1.0: False)

    client = TestClient(app)
    response = client.get("/health/ready")

    assert response.status_code == 503
    assert response.json() == {
        "status": "unavailable",
        "checks": {"postgres": True, "redis": False},
    }


def test_metrics_endpoint_exposes_http_counters() -> None:
    client = TestClient(app)
    client.get("/health/live")

    response = client.get("/metrics")

    assert response.status_code == 200
    assert "tabletop_http_requests_total" in response.text
    assert 'route="/health/live"' in response.text


def test_metrics_endpoint_lists_order_counters() -> None:
    client = TestClient(app)

    response = client.get("/metrics")

    assert response.status_code == 200
    assert "# TYPE tabletop_orders_total counter" in response.text
    assert "# TYPE tabletop_orders_placed_total counter" in response.text


def test_well_formed_request_id_is_echoed() -> None:
    client = TestClient(app)

    response = client.get("/health/live", headers={"X-Request-Id": "edge-7f3a:42"})

    assert response.headers["X-Request-Id"] == "edge-7f3a:42"


@pytest.mark.parametrize("raw", ["x" * 65, "two words", "id;drop", "café"])
def test_malformed_request_id_is_replaced(raw: str) -> None:
    client = TestClient(app)

    response = client.get("/health/live", headers={"X-Request-Id": raw.encode("utf-8")})

    echoed = response.headers["X-Request-Id"]
    assert echoed != raw
    assert str(UUID(echoed)) == echoed


def test_resolve_request_id_strips_whitespace_and_mints_when_missing() -> None:
    assert resolve_request_id("  req-9 ") == "req-9"
    assert UUID(resolve_request_id(None))
    assert UUID(resolve_request_id(""))
