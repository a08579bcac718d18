"""
Unit tests for the request logging middleware.

A small FastAPI app wrapped in the middleware is driven through httpx, so
route matching and header handling are the real Starlette behavior.
"""

from unittest.mock import patch

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from agent_sns.server.middleware.logfire_middleware import PROCESS_TIME_HEADER, LogfireMiddleware

MODULE = "agent_sns.server.middleware.logfire_middleware"


def build_app() -> FastAPI:
    app = FastAPI()

    @app.get("/api/threads/{thread_id}")
    async def read_thread(thread_id: str):
        return {"id": thread_id}

    @app.post("/api/fail")
    async def fail():
        raise RuntimeError("handler failed")

    app.add_middleware(LogfireMiddleware)
    return app


@pytest.fixture
async def client():
    transport = ASGITransport(app=build_app(), raise_app_exceptions=True)
    async with AsyncClient(transport=transport, base_url="http://localhost") as ac:
        yield ac


async def test_reports_route_template_and_status(client):
    with patch(f"{MODULE}.log_api_request") as mock_log:
        response = await client.get("/api/threads/abc123")

    assert response.status_code == 200
    method, path, status_code, duration_ms = mock_log.call_args[0]
    assert (method, path, status_code) == ("GET", "/api/threads/{thread_id}", 200)
    assert duration_ms >= 0


async def test_unmatched_path_reports_raw_path(client):
    with patch(f"{MODULE}.log_api_request") as mock_log:
        response = await client.get("/api/nowhere")

    assert response.status_code == 404
    assert mock_log.call_args[0][1] == "/api/nowhere"
    assert mock_log.call_args[0][2] == 404


async def test_sets_process_time_header(client):
    with patch(f"{MODULE}.log_api_request"):
        response = await client.get("/api/threads/abc")

    assert float(response.headers[PROCESS_TIME_HEADER]) >= 0


async def test_errors_are_logged_as_500_and_reraised(client):
    with patch(f"{MODULE}.log_api_request") as mock_log, patch(f"{MODULE}.logger") as mock_logger:
        with pytest.raises(RuntimeError, match="handler failed"):
            await client.post("/api/fail")

    assert mock_log.call_args[0][2] == 500
    mock_logger.error.assert_called_once()
    assert mock_logger.error.call_args[1]["exc_info"] is True


@pytest.mark.parametrize("threshold,warned", [(-1, True), (60_000, False)])
async def test_slow_request_warning(client, threshold, warned):
    with patch(f"{MODULE}.log_api_request"), patch(f"{MODULE}.logger") as mock_logger, patch(
        f"{MODULE}.SLOW_REQUEST_MS", threshold
    ):
        await client.get("/api/threads/abc")

    assert mock_logger.warning.called is warned
    if warned:
        assert "Slow request GET /api/threads/{thread_id}" in mock_logger.warning.call_args[0][0]
