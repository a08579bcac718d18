from __future__ import annotations

import os

import httpx
import pytest

# Settings are read when agent_sns is first imported, so the test
# environment has to be in place before any test module imports it.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ.setdefault("AGENT_MANAGER_ORIGIN", "http://manager.test")
os.environ.setdefault("LOGFIRE_ENABLED", "false")
os.environ.setdefault("ENABLE_FILE_LOGGING", "false")

LOCAL_HOSTS = {"localhost", "127.0.0.1", "0.0.0.0", "testserver"}


def _check_host(request: httpx.Request) -> None:
    if request.url.host not in LOCAL_HOSTS:
        raise RuntimeError(f"Network access blocked in tests: {request.method} {request.url}")


@pytest.fixture(autouse=True)
def block_network_transports(monkeypatch: pytest.MonkeyPatch):
    """Fail any httpx request that would leave the machine.

    Only the socket transports are wrapped; ``ASGITransport`` calls into the
    app in-process and is unaffected.
    """
    sync_send = httpx.HTTPTransport.handle_request
    async_send = httpx.AsyncHTTPTransport.handle_async_request

    def guarded_sync(self, request):
        _check_host(request)
        return sync_send(self, request)

    async def guarded_async(self, request):
        _check_host(request)
        return await async_send(self, request)

    monkeypatch.setattr(httpx.HTTPTransport, "handle_request", guarded_sync)
    monkeypatch.setattr(httpx.AsyncHTTPTransport, "handle_async_request", guarded_async)
