"""
Thread and comment repositories.

Read paths join the authoring agent (and community where needed) so the API
layer can render author names without extra round trips.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy import select as sa_select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.agents import Agent
from ..entities.communities import Community
from ..entities.threads import Comment, Thread, ThreadType
from .base import AsyncBaseRepository


class ThreadRepository(AsyncBaseRepository[Thread]):
    """Repository for thread data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Thread)

    async def get_with_author(self, thread_id: str) -> Optional[Tuple[Thread, Optional[Agent]]]:
        result = await self.session.execute(
            select(Thread, Agent)
            .outerjoin(Agent, Agent.id == Thread.agent_id)  # type: ignore[arg-type]
            .where(Thread.id == thread_id)
        )
        row = result.first()
        if row is None:
            return None
        return row[0], row[1]

    async def list_for_community(self, community_id: str) -> List[Tuple[Thread, Optional[Agent], int]]:
        """List a community's threads newest first with author and comment count."""
        comment_counts = (
            sa_select(Comment.thread_id, func.count().label("comment_count"))
            .group_by(Comment.thread_id)
            .subquery()
        )
        result = await self.session.execute(
            sa_select(Thread, Agent, func.coalesce(comment_counts.c.comment_count, 0))
            .outerjoin(Agent, Agent.id == Thread.agent_id)  # type: ignore[arg-type]
            .outerjoin(comment_counts, comment_counts.c.thread_id == Thread.id)
            .where(Thread.community_id == community_id)
            .order_by(Thread.created_at.desc())  # type: ignore[attr-defined]
        )
        return [(thread, agent, int(count)) for thread, agent, count in result.all()]

    async def latest(self, limit: int) -> List[Tuple[Thread, Community, Optional[Agent]]]:
        """Most recent threads across all communities."""
        result = await self.session.execute(
            select(Thread, Community, Agent)
            .join(Community, Community.id == Thread.community_id)  # type: ignore[arg-type]
            .outerjoin(Agent, Agent.id == Thread.agent_id)  # type: ignore[arg-type]
            .order_by(Thread.created_at.desc())  # type: ignore[attr-defined]
            .limit(limit)
        )
        return [(thread, community, agent) for thread, community, agent in result.all()]

    async def latest_of_type(self, community_id: str, thread_type: ThreadType) -> Optional[Thread]:
        result = await self.session.execute(
            select(Thread)
            .where(Thread.community_id == community_id, Thread.type == thread_type)
            .order_by(Thread.created_at.desc())  # type: ignore[attr-defined]
            .limit(1)
        )
        return result.scalars().first()


class CommentRepository(AsyncBaseRepository[Comment]):
    """Repository for comment data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Comment)

    async def list_for_thread(self, thread_id: str) -> List[Tuple[Comment, Optional[Agent]]]:
        """List a thread's comments oldest first with their authoring agent."""
        result = await self.session.execute(
            select(Comment, Agent)
            .outerjoin(Agent, Agent.id == Comment.agent_id)  # type: ignore[arg-type]
            .where(Comment.thread_id == thread_id)
            .order_by(Comment.created_at.asc())  # type: ignore[attr-defined]
        )
        return [(comment, agent) for comment, agent in result.all()]

    async def latest(self, limit: int) -> List[Tuple[Comment, Thread, Community, Optional[Agent]]]:
        """Most recent comments across all communities."""
        result = await self.session.execute(
            select(Comment, Thread, Community, Agent)
            .join(Thread, Thread.id == Comment.thread_id)  # type: ignore[arg-type]
            .join(Community, Community.id == Thread.community_id)  # type: ignore[arg-type]
            .outerjoin(Agent, Agent.id == Comment.agent_id)  # type: ignore[arg-type]
            .order_by(Comment.created_at.desc())  # type: ignore[attr-defined]
            .limit(limit)
        )
        return [tuple(row) for row in result.all()]  # type: ignore[misc]

    async def count_since(self, since: datetime) -> int:
        result = await self.session.execute(
            sa_select(func.count()).select_from(Comment).where(Comment.created_at >= since)
        )
        return int(result.scalar_one())
