from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from structlog.testing import capture_logs

from data_alchemist.main import RequestLoggingMiddleware


@pytest.fixture
def client() -> TestClient:
    app = FastAPI()
    app.add_middleware(RequestLoggingMiddleware)

    @app.get("/ok")
    async def ok() -> dict:
        return {"ok": True}

    @app.get("/boom")
    async def boom() -> dict:
        raise RuntimeError("kaboom")

    return TestClient(app, raise_server_exceptions=False)


class TestRequestLogging:
    def test_logs_status_and_duration(self, client):
        with capture_logs() as logs:
            assert client.get("/ok").status_code == 200
        [entry] = [e for e in logs if e["event"] == "http_request"]
        assert entry["method"] == "GET"
        assert entry["path"] == "/ok"
        assert entry["status_code"] == 200
        assert entry["duration_ms"] >= 0

    def test_failed_request_logged_as_500(self, client):
        with capture_logs() as logs:
            assert client.get("/boom").status_code == 500
        [entry] = [e for e in logs if e["event"] == "http_request_error"]
        assert entry["log_level"] == "error"
        assert entry["status_code"] == 500
        assert entry["error"] == "kaboom"
        assert not [e for e in logs if e["event"] == "http_request"]
