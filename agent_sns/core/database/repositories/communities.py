"""
Community repository.

Lookups by slug and owner, the owner close that schedules deletion, and the
cascading delete used both by the admin API and by the purge of expired
closed communities.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import delete, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..base import utc_now
from ..entities.agents import Agent, ApiKey
from ..entities.communities import Community, CommunityStatus
from ..entities.threads import Comment, Thread
from .base import BULK_OPTIONS, AsyncBaseRepository

CLOSE_RETENTION = timedelta(days=14)


class CommunityRepository(AsyncBaseRepository[Community]):
    """Repository for community data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Community)

    async def get_by_slug(self, slug: str) -> Optional[Community]:
        return await self.find_one(Community.slug == slug)

    async def list_ordered(self, status: Optional[CommunityStatus] = None) -> List[Community]:
        """List communities by name, optionally restricted to one status."""
        stmt = select(Community).order_by(Community.name.asc())  # type: ignore[attr-defined]
        if status is not None:
            stmt = stmt.where(Community.status == status)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_owned(self, wallet: str) -> List[Community]:
        stmt = select(Community).where(Community.owner_wallet == wallet.lower()).order_by(
            Community.name.asc()  # type: ignore[attr-defined]
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_many(self, community_ids: List[str]) -> dict[str, Community]:
        """Fetch communities keyed by id."""
        if not community_ids:
            return {}
        stmt = select(Community).where(Community.id.in_(community_ids))  # type: ignore[attr-defined]
        result = await self.session.execute(stmt)
        return {community.id: community for community in result.scalars().all()}

    async def close(self, community: Community, now: Optional[datetime] = None) -> Community:
        """Close a community and schedule it for deletion.

        API keys scoped to the community are deleted so its agents can no
        longer write. The community itself stays readable until
        ``delete_at``, after which the purge removes it.
        """
        now = now or utc_now()
        await self.session.execute(
            delete(ApiKey).where(ApiKey.community_id == community.id), execution_options=BULK_OPTIONS
        )
        community.status = CommunityStatus.CLOSED
        community.closed_at = now
        community.delete_at = now + CLOSE_RETENTION
        self.session.add(community)
        await self.session.commit()
        await self.session.refresh(community)
        return community

    async def delete_with_content(self, community: Community) -> None:
        """Delete a community together with its threads and comments.

        API keys scoped to the community are revoked and its agents are
        detached. Everything happens in one commit.
        """
        now = utc_now()
        thread_ids = select(Thread.id).where(Thread.community_id == community.id)
        await self.session.execute(
            delete(Comment).where(Comment.thread_id.in_(thread_ids)),  # type: ignore[attr-defined]
            execution_options=BULK_OPTIONS,
        )
        await self.session.execute(
            delete(Thread).where(Thread.community_id == community.id), execution_options=BULK_OPTIONS
        )
        await self.session.execute(
            update(ApiKey).where(ApiKey.community_id == community.id).values(revoked_at=now),
            execution_options=BULK_OPTIONS,
        )
        await self.session.execute(
            update(Agent).where(Agent.community_id == community.id).values(community_id=None, community_slug=None),
            execution_options=BULK_OPTIONS,
        )
        await self.session.delete(community)
        await self.session.commit()

    async def purge_expired_closed(self, now: Optional[datetime] = None) -> int:
        """Delete closed communities whose ``delete_at`` has passed.

        Returns:
            Number of communities removed
        """
        now = now or utc_now()
        result = await self.session.execute(
            select(Community).where(
                (Community.status == CommunityStatus.CLOSED) & (Community.delete_at < now)  # type: ignore[operator]
            )
        )
        expired = list(result.scalars().all())
        for community in expired:
            await self.delete_with_content(community)
        return len(expired)
