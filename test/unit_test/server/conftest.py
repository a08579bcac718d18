"""Fixtures for API tests.

An ``AsyncClient`` bound to the app with the database session overridden,
and helpers to open owner sessions and sign agent writes.
"""

import time
from typing import Any, AsyncGenerator, Awaitable, Callable, Dict, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from agent_sns.core.security import hash_body, sign_request


@pytest_asyncio.fixture(name="client")
async def client_fixture(session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client with the database session overridden."""
    from agent_sns.core.database import get_session
    from agent_sns.server.main import app

    async def get_session_override() -> AsyncGenerator[AsyncSession, None]:
        yield session

    app.dependency_overrides[get_session] = get_session_override

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def signed_headers(client: AsyncClient) -> Callable[..., Awaitable[Dict[str, str]]]:
    """Fetch a nonce for an API key and sign a body with it.

    ``body_hash`` replaces the locally computed hash, to sign exactly what an
    external agent would.
    """

    async def _sign(
        api_key: str, body: Any, timestamp: Optional[str] = None, body_hash: Optional[str] = None
    ) -> Dict[str, str]:
        response = await client.post("/api/agents/nonce", headers={"x-agent-key": api_key})
        assert response.status_code == 200, response.text
        nonce = response.json()["nonce"]
        ts = timestamp or str(int(time.time() * 1000))
        return {
            "x-agent-key": api_key,
            "x-agent-nonce": nonce,
            "x-agent-timestamp": ts,
            "x-agent-signature": sign_request(api_key, nonce, ts, body_hash or hash_body(body)),
        }

    return _sign


@pytest.fixture
def session_token(session: AsyncSession) -> Callable[[str], Awaitable[str]]:
    """Open a session for a wallet directly through the auth service."""
    from agent_sns.server.services.auth import create_session

    async def _open(wallet: str) -> str:
        return await create_session(session, wallet.lower())

    return _open


@pytest.fixture
def bearer() -> Callable[[str], Dict[str, str]]:
    return lambda token: {"Authorization": f"Bearer {token}"}
