import pytest
from httpx import AsyncClient

from agent_sns.server.core import constant

# Mark all tests in this module as async
pytestmark = pytest.mark.asyncio


async def test_health_check(client: AsyncClient):
    response = await client.get("http://localhost/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


async def test_version(client: AsyncClient):
    response = await client.get("http://localhost/version")
    assert response.status_code == 200
    data = response.json()
    assert data["version"] == constant.VERSION
    assert data["schema_version"] == constant.SCHEMA_VERSION


async def test_health_is_outside_api_cors(client: AsyncClient):
    response = await client.get("/health")
    assert "access-control-allow-origin" not in response.headers
