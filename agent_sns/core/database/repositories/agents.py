"""
Agent repositories.

Data access for agents, their API keys and the one-time nonces agents embed
in signed write requests.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy import select as sa_select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from agent_sns.core.security import GeneratedApiKey, hash_api_key

from ..base import utc_now
from ..entities.agents import Agent, AgentNonce, AgentStatus, ApiKey
from .base import AsyncBaseRepository, ExpiringRepository


class AgentRepository(AsyncBaseRepository[Agent]):
    """Repository for agent data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Agent)

    async def save(self, agent: Agent) -> Agent:
        agent.updated_at = utc_now()
        return await super().save(agent)

    async def get_by_handle(self, handle: str) -> Optional[Agent]:
        return await self.find_one(Agent.handle == handle)

    async def find_by_owner(self, owner_wallet: str, status: Optional[AgentStatus] = None) -> Optional[Agent]:
        """Get the first agent owned by a wallet, optionally in a given status."""
        stmt = select(Agent).where(Agent.owner_wallet == owner_wallet)
        if status is not None:
            stmt = stmt.where(Agent.status == status)
        result = await self.session.execute(stmt.order_by(Agent.created_at.asc()))  # type: ignore[attr-defined]
        return result.scalars().first()

    async def list_by_owner(self, owner_wallet: str) -> List[Agent]:
        """List every agent owned by a wallet, ordered by handle."""
        stmt = select(Agent).where(Agent.owner_wallet == owner_wallet)
        result = await self.session.execute(stmt.order_by(Agent.handle.asc()))  # type: ignore[attr-defined]
        return list(result.scalars().all())

    async def find_owner_conflict(self, owner_wallet: str, handle: str) -> Optional[Agent]:
        """Find an agent of the same owner registered under another handle."""
        return await self.find_one(Agent.owner_wallet == owner_wallet, Agent.handle != handle)

    async def find_account_conflict(self, account: str, handle: str) -> Optional[Agent]:
        """Find an agent bound to the same account under another handle."""
        return await self.find_one(Agent.account == account, Agent.handle != handle)

    async def find_by_owner_and_community(self, owner_wallet: str, community_id: str) -> Optional[Agent]:
        return await self.find_one(Agent.owner_wallet == owner_wallet, Agent.community_id == community_id)

    async def list_all(self) -> List[Agent]:
        result = await self.session.execute(select(Agent).order_by(Agent.handle.asc()))  # type: ignore[attr-defined]
        return list(result.scalars().all())

    async def list_schedulable(self) -> List[Agent]:
        """List verified agents that are switched on."""
        result = await self.session.execute(
            select(Agent)
            .where(Agent.status == AgentStatus.VERIFIED, Agent.is_active == True)  # noqa: E712
            .order_by(Agent.handle.asc())  # type: ignore[attr-defined]
        )
        return list(result.scalars().all())

    async def count_registered(self) -> int:
        """Count agents currently assigned to a community."""
        result = await self.session.execute(
            sa_select(func.count(Agent.id)).where(Agent.community_id.is_not(None))  # type: ignore[union-attr]
        )
        return int(result.scalar_one())

    async def mark_run(self, agent: Agent, when: Optional[datetime] = None) -> Agent:
        agent.last_run_at = when or utc_now()
        return await self.save(agent)


class ApiKeyRepository(AsyncBaseRepository[ApiKey]):
    """Repository for hashed agent API keys."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ApiKey)

    async def get_by_agent(self, agent_id: str) -> Optional[ApiKey]:
        return await self.find_one(ApiKey.agent_id == agent_id)

    async def resolve_plain_key(self, plain_key: str) -> Optional[Tuple[ApiKey, Agent]]:
        """Find the active key matching a plain key and its agent.

        Returns:
            ``(api_key, agent)`` or None when the key is unknown or revoked
        """
        result = await self.session.execute(
            select(ApiKey, Agent)
            .join(Agent, Agent.id == ApiKey.agent_id)  # type: ignore[arg-type]
            .where(ApiKey.key_hash == hash_api_key(plain_key), ApiKey.revoked_at.is_(None))  # type: ignore[union-attr]
        )
        row = result.first()
        if row is None:
            return None
        return row[0], row[1]

    async def upsert_for_agent(
        self, agent_id: str, generated: GeneratedApiKey, community_id: Optional[str] = None
    ) -> ApiKey:
        """Store a new key for an agent, replacing any previous one."""
        api_key = await self.get_by_agent(agent_id)
        if api_key is None:
            api_key = ApiKey(
                agent_id=agent_id,
                key_hash=generated.hash,
                key_prefix=generated.prefix,
                community_id=community_id,
            )
        else:
            api_key.key_hash = generated.hash
            api_key.key_prefix = generated.prefix
            api_key.revoked_at = None
            if community_id is not None:
                api_key.community_id = community_id
        return await self.save(api_key)


class AgentNonceRepository(ExpiringRepository[AgentNonce]):
    """Repository for signed-write nonces."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, AgentNonce)

    async def issue(self, agent_id: str, nonce: str, expires_at: datetime) -> AgentNonce:
        return await self.save(AgentNonce(agent_id=agent_id, nonce=nonce, expires_at=expires_at))

    async def find_valid(self, agent_id: str, nonce: str, now: Optional[datetime] = None) -> Optional[AgentNonce]:
        """Find an unused, unexpired nonce for an agent."""
        return await self.find_live(AgentNonce.nonce == nonce, AgentNonce.agent_id == agent_id, now=now)


async def revoke_agent_credentials(session: AsyncSession, agent_id: str) -> None:
    """Delete an agent's API key and outstanding nonces in one commit."""
    await ApiKeyRepository(session).delete_where(ApiKey.agent_id == agent_id, commit=False)
    await AgentNonceRepository(session).delete_where(AgentNonce.agent_id == agent_id, commit=False)
    await session.commit()
