"""
Tests for application wiring: health endpoints, middleware and exception handlers.
"""
from contextlib import asynccontextmanager

import pytest
from fastapi.testclient import TestClient


class TestHealthEndpoints:
    """Tests for /v1/health and /v1/ping."""

    def test_health(self, client):
        response = client.get("/v1/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "Proftest API"
        assert "timestamp" in data

    def test_ping(self, client):
        assert client.get("/v1/ping").json() == {"message": "pong"}

    def test_root(self, client):
        data = client.get("/").json()
        assert data["docs"] == "/v1/docs"


class TestRequestLoggingMiddleware:
    """Tests for request ID propagation."""

    def test_generates_request_id(self, client):
        response = client.get("/v1/ping")
        assert response.headers["X-Request-ID"]

    def test_echoes_request_id(self, client):
        response = client.get("/v1/ping", headers={"X-Request-ID": "abc-123"})
        assert response.headers["X-Request-ID"] == "abc-123"


class TestExceptionHandlers:
    """Tests for the application-level exception handlers."""

    def test_validation_error_shape(self, client):
        response = client.get("/v1/tests/not-a-number")

        assert response.status_code == 422
        errors = response.json()["detail"]
        assert errors[0]["loc"] == ["path", "test_id"]
        assert errors[0]["msg"]
        assert errors[0]["type"]

    def test_unknown_route(self, client):
        response = client.get("/v1/nothing-here")
        assert response.status_code == 404

    def test_unhandled_exception_returns_error_id(self):
        """Unexpected errors become a 500 carrying an error_id."""
        from proftest.main import create_application

        @asynccontextmanager
        async def no_lifespan(app):
            yield

        app = create_application()
        app.router.lifespan_context = no_lifespan

        @app.get("/boom")
        async def boom():
            raise RuntimeError("unexpected")

        with TestClient(app, raise_server_exceptions=False) as test_client:
            response = test_client.get("/boom")

        assert response.status_code == 500
        body = response.json()
        assert body["detail"] == "Internal server error"
        assert len(body["error_id"]) == 36


@pytest.mark.parametrize("path", ["/v1/docs", "/v1/openapi.json"])
def test_docs_served_under_api_prefix(client, path):
    assert client.get(path).status_code == 200
