"""Unit tests for LoggingMiddleware correlation id handling."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from movement.api.middleware.logging_middleware import (
    CORRELATION_HEADER,
    LoggingMiddleware,
)
from movement.infrastructure.observability.correlation import get_correlation_id


@pytest.fixture
def client() -> TestClient:
    app = FastAPI()
    app.add_middleware(LoggingMiddleware)

    @app.get("/echo")
    async def echo() -> dict[str, str]:
        return {"correlation_id": get_correlation_id()}

    @app.get("/boom")
    async def boom() -> None:
        raise RuntimeError("boom")

    return TestClient(app)


class TestLoggingMiddleware:
    def test_echoes_incoming_correlation_id(self, client: TestClient) -> None:
        response = client.get("/echo", headers={CORRELATION_HEADER: "corr-123"})

        assert response.headers[CORRELATION_HEADER] == "corr-123"
        assert response.json() == {"correlation_id": "corr-123"}

    def test_generates_correlation_id_when_missing(self, client: TestClient) -> None:
        response = client.get("/echo")

        generated = response.headers[CORRELATION_HEADER]
        assert generated
        assert response.json() == {"correlation_id": generated}

    def test_distinct_ids_per_request(self, client: TestClient) -> None:
        first = client.get("/echo").headers[CORRELATION_HEADER]
        second = client.get("/echo").headers[CORRELATION_HEADER]
        assert first != second

    def test_errors_propagate(self, client: TestClient) -> None:
        with pytest.raises(RuntimeError):
            client.get("/boom")
