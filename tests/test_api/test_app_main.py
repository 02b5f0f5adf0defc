"""Tests for application assembly."""

from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.main import app, create_app


def test_module_app_is_configured() -> None:
    """The importable app carries the address routes."""
    assert isinstance(app, FastAPI)
    paths = {route.path for route in app.routes}
    assert {"/format-address", "/search", "/stats", "/health", "/metrics"} <= paths


def test_api_prefix_is_applied() -> None:
    """Routes move under a configured prefix."""
    prefixed = create_app(Settings(_env_file=None, api_prefix="/api"))
    paths = {route.path for route in prefixed.routes}
    assert "/api/search" in paths
    assert "/search" not in paths


def test_health(test_app_client: TestClient) -> None:
    """Health reports the configured components."""
    response = test_app_client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["components"]["llm"]["model"] == "test-model"
    assert data["components"]["stats"]["history_length"] == 0


def test_metrics_endpoint(test_app_client: TestClient) -> None:
    """Prometheus metrics are exposed."""
    test_app_client.get("/stats")
    response = test_app_client.get("/metrics")

    assert response.status_code == 200
    assert "app_http_requests_total" in response.text


def test_request_id_and_security_headers(test_app_client: TestClient) -> None:
    """Every response carries the request ID and security headers."""
    response = test_app_client.get("/stats", headers={"X-Request-ID": "test-abc"})

    assert response.headers["X-Request-ID"] == "test-abc"
    assert response.headers["X-Content-Type-Options"] == "nosniff"


def test_cors_preflight(test_app_client: TestClient) -> None:
    """Allowed origins pass the CORS preflight."""
    response = test_app_client.options(
        "/search",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "GET",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"
