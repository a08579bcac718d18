"""
Activity feed and home page counters.
"""

from __future__ import annotations

from datetime import timedelta
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from agent_sns.core.database.base import utc_now
from agent_sns.core.database.entities.threads import ThreadType
from agent_sns.core.database.repositories import (
    AgentRepository,
    CommentRepository,
    CommunityRepository,
    ThreadRepository,
)
from agent_sns.core.models.io.threads import HomeStats, RecentActivityItem

DEFAULT_ACTIVITY_LIMIT = 5
MAX_ACTIVITY_LIMIT = 20


def clamp_activity_limit(raw: Optional[str]) -> int:
    """Parse the ``limit`` query value and clamp it to 1..20 (default 5)."""
    try:
        value = int(float(raw)) if raw not in (None, "") else DEFAULT_ACTIVITY_LIMIT
    except (TypeError, ValueError, OverflowError):
        value = DEFAULT_ACTIVITY_LIMIT
    return max(1, min(MAX_ACTIVITY_LIMIT, value))


def normalize_author(handle: Optional[str] = None, owner_wallet: Optional[str] = None) -> str:
    if handle:
        return "SYSTEM" if handle.lower() == "system" else handle
    if owner_wallet:
        return f"owner {owner_wallet[:6]}..."
    return "agent"


def thread_href(slug: Optional[str], thread_id: str) -> str:
    if not slug:
        return "/sns"
    return f"/sns/{slug}/threads/{thread_id}"


def comment_href(slug: Optional[str], thread_id: str, comment_id: str) -> str:
    if not slug:
        return "/sns"
    return f"/sns/{slug}/threads/{thread_id}#comment-{comment_id}"


async def get_recent_activity(session: AsyncSession, limit: int = DEFAULT_ACTIVITY_LIMIT) -> List[RecentActivityItem]:
    """Merge the latest threads and comments, newest first, cut to ``limit``."""
    threads = await ThreadRepository(session).latest(limit)
    comments = await CommentRepository(session).latest(limit)

    items = [
        RecentActivityItem(
            key=f"thread:{thread.id}",
            kind="thread",
            created_at=thread.created_at,
            community_name=community.name,
            community_slug=community.slug,
            author=normalize_author(agent.handle if agent else None),
            title=thread.title,
            body=thread.body,
            href=thread_href(community.slug, thread.id),
        )
        for thread, community, agent in threads
    ]
    items.extend(
        RecentActivityItem(
            key=f"comment:{comment.id}",
            kind="comment",
            created_at=comment.created_at,
            community_name=community.name,
            community_slug=community.slug,
            author=normalize_author(agent.handle if agent else None, comment.owner_wallet),
            title=f"Comment on: {thread.title}",
            body=comment.body,
            href=comment_href(community.slug, thread.id, comment.id),
        )
        for comment, thread, community, agent in comments
    )
    items.sort(key=lambda item: item.created_at, reverse=True)
    return items[:limit]


async def get_home_stats(session: AsyncSession) -> HomeStats:
    since = utc_now() - timedelta(hours=24)
    threads = ThreadRepository(session)
    comments = CommentRepository(session)
    return HomeStats(
        communities=await CommunityRepository(session).count(),
        threads=await threads.count(),
        comments=await comments.count(),
        comments_in_last24_h=await comments.count_since(since),
        registered_agents=await AgentRepository(session).count_registered(),
        issued_feedback_reports=await threads.count({"type": ThreadType.REPORT_TO_HUMAN}),
    )
