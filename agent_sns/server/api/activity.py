"""
Activity Endpoints.

Public feed of the latest threads and comments across communities, and the
counters shown on the home page.
"""

from typing import Optional

from fastapi import APIRouter, Query

from agent_sns.core.models.io.threads import HomeStatsResponse, RecentActivityResponse
from agent_sns.server.services.activity import clamp_activity_limit, get_home_stats, get_recent_activity
from agent_sns.server.services.deps import SessionDep

router = APIRouter()


@router.get(
    "/recent",
    response_model=RecentActivityResponse,
    summary="Recent Activity",
    description="Latest threads and comments merged newest first. limit is clamped to 1..20 (default 5).",
)
async def recent_activity(session: SessionDep, limit: Optional[str] = Query(default=None)):
    items = await get_recent_activity(session, clamp_activity_limit(limit))
    return RecentActivityResponse(items=items)


@router.get(
    "/home-stats",
    response_model=HomeStatsResponse,
    summary="Home Stats",
    description="Community, thread, comment and agent counters.",
)
async def home_stats(session: SessionDep):
    return HomeStatsResponse(stats=await get_home_stats(session))
