"""
Tests for Request Logging Middleware - src/api/middleware/logging.py.

Method, path, status and duration logging, sensitive header redaction and
X-Request-ID correlation.
"""

import logging

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.api.middleware.logging import (
    REQUEST_ID_HEADER,
    RequestLoggingMiddleware,
    redact_sensitive_headers,
)
from src.observability.logging import get_correlation_id


@pytest.fixture
def logged_app() -> FastAPI:
    """Minimal app wrapped in the logging middleware."""
    app = FastAPI()
    app.add_middleware(RequestLoggingMiddleware)

    @app.get("/test")
    async def test_endpoint():
        return {"message": "test", "correlation_id": get_correlation_id()}

    @app.post("/test")
    async def test_post():
        return {"message": "posted"}

    @app.get("/boom")
    async def boom():
        raise RuntimeError("kaput")

    return app


@pytest.fixture
def logged_client(logged_app) -> TestClient:
    return TestClient(logged_app)


class TestRequestLogging:
    """Request/response log lines."""

    def test_logs_method_path_and_status(self, logged_client: TestClient, caplog):
        with caplog.at_level(logging.INFO):
            response = logged_client.get("/test")

        assert response.status_code == 200
        messages = [record.message for record in caplog.records]
        assert any("GET /test 200" in message for message in messages)

    def test_logs_duration(self, logged_client: TestClient, caplog):
        with caplog.at_level(logging.INFO):
            logged_client.get("/test")

        assert any("duration=" in record.message for record in caplog.records)

    def test_client_errors_logged_as_warning(self, logged_client: TestClient, caplog):
        with caplog.at_level(logging.INFO):
            response = logged_client.get("/nonexistent")

        assert response.status_code == 404
        assert any(
            record.levelno == logging.WARNING and "404" in record.message
            for record in caplog.records
        )

    def test_logs_post_requests(self, logged_client: TestClient, caplog):
        with caplog.at_level(logging.INFO):
            logged_client.post("/test")

        assert any("POST /test" in record.message for record in caplog.records)

    def test_unhandled_error_logged_and_reraised(self, logged_app, caplog):
        client = TestClient(logged_app, raise_server_exceptions=True)

        with caplog.at_level(logging.INFO):
            with pytest.raises(RuntimeError, match="kaput"):
                client.get("/boom")

        assert any("Request failed" in record.message for record in caplog.records)

    def test_preserves_response(self, logged_client: TestClient):
        response = logged_client.get("/test")

        assert response.json()["message"] == "test"


class TestCorrelationId:
    """X-Request-ID binding and echo."""

    def test_incoming_request_id_echoed_and_bound(self, logged_client: TestClient):
        response = logged_client.get("/test", headers={REQUEST_ID_HEADER: "req-12345"})

        assert response.headers[REQUEST_ID_HEADER] == "req-12345"
        assert response.json()["correlation_id"] == "req-12345"

    def test_request_id_generated_when_missing(self, logged_client: TestClient):
        response = logged_client.get("/test")

        request_id = response.headers[REQUEST_ID_HEADER]
        assert len(request_id) == 32
        assert response.json()["correlation_id"] == request_id

    def test_correlation_id_cleared_after_request(self, logged_client: TestClient):
        logged_client.get("/test", headers={REQUEST_ID_HEADER: "req-1"})

        assert get_correlation_id() is None


class TestHeaderRedaction:
    """Credentials never reach the logs."""

    def test_redact_authorization_header(self):
        redacted = redact_sensitive_headers(
            {"Authorization": "Bearer secret-token", "Content-Type": "application/json"}
        )

        assert redacted["Authorization"] == "[REDACTED]"
        assert redacted["Content-Type"] == "application/json"

    def test_redact_api_key_variations(self):
        redacted = redact_sensitive_headers(
            {
                "x-api-key": "secret1",
                "Api-Key": "secret2",
                "apikey": "secret3",
                "x-goog-api-key": "secret4",
                "X-Custom-Header": "not-secret",
            }
        )

        assert redacted["x-api-key"] == "[REDACTED]"
        assert redacted["Api-Key"] == "[REDACTED]"
        assert redacted["apikey"] == "[REDACTED]"
        assert redacted["x-goog-api-key"] == "[REDACTED]"
        assert redacted["X-Custom-Header"] == "not-secret"

    def test_sensitive_headers_not_logged(self, logged_client: TestClient, caplog):
        with caplog.at_level(logging.DEBUG):
            logged_client.get(
                "/test",
                headers={"Authorization": "Bearer super-secret-token", "X-API-Key": "another-secret"},
            )

        log_output = " ".join(record.message for record in caplog.records)
        assert "super-secret-token" not in log_output
        assert "another-secret" not in log_output
