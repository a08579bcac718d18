"""Shared fixtures for unit tests.

Every test gets a fresh in-memory SQLite database with all tables created,
plus factories for communities, wallets and registered agents.
"""

from dataclasses import dataclass
from typing import AsyncGenerator, Awaitable, Callable, Optional

import pytest
import pytest_asyncio
from eth_account import Account
from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount
from sqlalchemy.ext.asyncio import AsyncSession

from agent_sns.core.database import create_all, create_engine, create_sessionmaker
from agent_sns.core.database.entities.agents import Agent, AgentStatus
from agent_sns.core.database.entities.communities import Community, CommunityStatus
from agent_sns.core.database.repositories import ApiKeyRepository
from agent_sns.core.security import generate_api_key

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


def sign_text(account: LocalAccount, text: str) -> str:
    """``personal_sign`` a text with a local account, as a 0x-prefixed hex string."""
    signature = account.sign_message(encode_defunct(text=text)).signature.hex()
    return signature if signature.startswith("0x") else f"0x{signature}"


@dataclass
class RegisteredAgent:
    agent: Agent
    community: Community
    owner: LocalAccount
    api_key: str


@pytest_asyncio.fixture
async def test_engine():
    """Create a fresh in-memory database for one test."""
    engine = create_engine(TEST_DATABASE_URL)
    await create_all(engine)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(test_engine):
    return create_sessionmaker(test_engine)


@pytest_asyncio.fixture(name="session")
async def session_fixture(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Create a new session for each test."""
    async with session_maker() as session:
        yield session


@pytest.fixture
def owner() -> LocalAccount:
    return Account.create()


@pytest.fixture
def sign() -> Callable[[LocalAccount, str], str]:
    return sign_text


@pytest.fixture
def make_community(session: AsyncSession) -> Callable[..., Awaitable[Community]]:
    async def _make(
        slug: str = "tokamak", name: Optional[str] = None, status: CommunityStatus = CommunityStatus.ACTIVE, **fields
    ) -> Community:
        community = Community(slug=slug, name=name or slug.title(), status=status, **fields)
        session.add(community)
        await session.commit()
        await session.refresh(community)
        return community

    return _make


@pytest.fixture
def make_agent(session: AsyncSession, make_community) -> Callable[..., Awaitable[RegisteredAgent]]:
    """Create a verified agent in a community holding an active API key."""

    async def _make(
        handle: str = "alpha", community: Optional[Community] = None, owner_account: Optional[LocalAccount] = None
    ) -> RegisteredAgent:
        community = community or await make_community()
        owner_account = owner_account or Account.create()
        wallet = owner_account.address.lower()
        agent = Agent(
            handle=handle,
            wallet_address=wallet,
            owner_wallet=wallet,
            account=f"sig-{handle}",
            community_id=community.id,
            community_slug=community.slug,
            status=AgentStatus.VERIFIED,
        )
        session.add(agent)
        await session.commit()
        await session.refresh(agent)

        generated = generate_api_key()
        await ApiKeyRepository(session).upsert_for_agent(agent.id, generated, community.id)
        return RegisteredAgent(agent=agent, community=community, owner=owner_account, api_key=generated.plain)

    return _make
