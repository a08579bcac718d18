"""
Agent scheduling loop.

Each cycle runs a fixed list of jobs, every one in its own database session:

- heartbeats: record an "active" heartbeat for every verified, switched-on agent
- report threads: seed a SYSTEM report thread in each active community that
  has not had one within the report interval
- community purge: delete closed communities past their ``delete_at``
- credential purge: delete expired login nonces, challenges, sessions and
  agent nonces

A failing job is logged and the remaining jobs still run.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Awaitable, Callable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from agent_sns.core.database import async_session_maker
from agent_sns.core.database.base import utc_now
from agent_sns.core.database.entities.communities import CommunityStatus
from agent_sns.core.database.entities.threads import Thread, ThreadType
from agent_sns.core.database.repositories import (
    AgentNonceRepository,
    AgentRepository,
    AuthChallengeRepository,
    AuthNonceRepository,
    CommentRepository,
    CommunityRepository,
    HeartbeatRepository,
    SessionRepository,
    ThreadRepository,
)
from agent_sns.core.logging_config import get_logger
from agent_sns.server.core.config import SchedulerConfig, settings

logger = get_logger(__name__)


@dataclass
class CycleReport:
    """What one scheduling cycle did."""

    started_at: datetime
    heartbeats: int = 0
    report_threads: int = 0
    purged_communities: int = 0
    purged_credentials: int = 0
    failed_jobs: List[str] = field(default_factory=list)


async def record_heartbeats(session: AsyncSession, now: datetime, report: CycleReport) -> None:
    agents = AgentRepository(session)
    heartbeats = HeartbeatRepository(session)
    for agent in await agents.list_schedulable():
        await heartbeats.record(agent.id, {"note": f"Scheduled heartbeat for {agent.handle}"}, seen_at=now)
        await agents.mark_run(agent, now)
        report.heartbeats += 1


def build_report_body(community_name: str, threads: int, comments_last_day: int, active_agents: int, now: datetime) -> str:
    return "\n".join(
        [
            f"Community: {community_name}",
            f"Threads: {threads}",
            f"Comments (last 24h): {comments_last_day}",
            f"Active agents: {active_agents}",
            f"GeneratedAt: {now.isoformat(timespec='seconds')}Z",
        ]
    )


async def seed_report_threads(
    session: AsyncSession, now: datetime, report: CycleReport, config: SchedulerConfig
) -> None:
    threads = ThreadRepository(session)
    agents = AgentRepository(session)
    # Comment counts are platform-wide; threads and agents are per community
    comments_last_day = await CommentRepository(session).count_since(now - timedelta(hours=24))
    min_age = timedelta(minutes=config.report_thread_interval_minutes)

    for community in await CommunityRepository(session).list_ordered(CommunityStatus.ACTIVE):
        latest = await threads.latest_of_type(community.id, ThreadType.SYSTEM)
        if latest is not None and now - latest.created_at < min_age:
            continue
        body = build_report_body(
            community.name,
            await threads.count({"community_id": community.id}),
            comments_last_day,
            await agents.count({"community_id": community.id, "is_active": True}),
            now,
        )
        await threads.save(
            Thread(
                community_id=community.id,
                title=f"Activity report: {community.name}",
                body=body,
                type=ThreadType.SYSTEM,
                created_at=now,
            )
        )
        report.report_threads += 1


async def purge_communities(session: AsyncSession, now: datetime, report: CycleReport) -> None:
    report.purged_communities += await CommunityRepository(session).purge_expired_closed(now)


async def purge_credentials(session: AsyncSession, now: datetime, report: CycleReport) -> None:
    for repo in (
        AuthNonceRepository(session),
        AuthChallengeRepository(session),
        SessionRepository(session),
        AgentNonceRepository(session),
    ):
        report.purged_credentials += await repo.purge_expired(now)


async def run_agent_cycle(
    session_maker: Optional[async_sessionmaker[AsyncSession]] = None,
    now: Optional[datetime] = None,
    config: Optional[SchedulerConfig] = None,
) -> CycleReport:
    """Run every scheduled job once.

    Args:
        session_maker: Session factory; defaults to the application's
        now: Reference time for the cycle (naive UTC)
        config: Scheduler settings; defaults to ``settings.scheduler``

    Returns:
        A report of what the cycle did. Failed jobs are listed by name.
    """
    session_maker = session_maker or async_session_maker
    config = config or settings.scheduler
    now = now or utc_now()
    report = CycleReport(started_at=now)

    jobs: List[tuple[str, Callable[[AsyncSession], Awaitable[None]]]] = [
        ("heartbeats", lambda s: record_heartbeats(s, now, report)),
        ("report_threads", lambda s: seed_report_threads(s, now, report, config)),
        ("purge_communities", lambda s: purge_communities(s, now, report)),
        ("purge_credentials", lambda s: purge_credentials(s, now, report)),
    ]
    for name, job in jobs:
        try:
            async with session_maker() as session:
                await job(session)
        except Exception as e:
            report.failed_jobs.append(name)
            logger.error(f"Scheduled job {name} failed: {e}", exc_info=True)

    logger.info(
        f"Agent cycle done: heartbeats={report.heartbeats}, report_threads={report.report_threads}, "
        f"purged_communities={report.purged_communities}, purged_credentials={report.purged_credentials}, "
        f"failed={report.failed_jobs or 'none'}"
    )
    return report


async def schedule_loop(
    interval_seconds: Optional[float] = None,
    stop_event: Optional[asyncio.Event] = None,
    session_maker: Optional[async_sessionmaker[AsyncSession]] = None,
    max_cycles: Optional[int] = None,
) -> int:
    """Run ``run_agent_cycle`` every ``interval_seconds`` until stopped.

    Args:
        interval_seconds: Pause between cycles; defaults to ``AGENT_RUN_INTERVAL_SEC``
        stop_event: Set it to end the loop after the current cycle
        session_maker: Session factory passed to each cycle
        max_cycles: Stop after this many cycles (unbounded when None)

    Returns:
        Number of cycles run
    """
    interval = settings.scheduler.interval_seconds if interval_seconds is None else interval_seconds
    stop_event = stop_event or asyncio.Event()
    cycles = 0

    while not stop_event.is_set():
        await run_agent_cycle(session_maker)
        cycles += 1
        if max_cycles is not None and cycles >= max_cycles:
            break
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=interval)
        except asyncio.TimeoutError:
            pass

    logger.info(f"Agent scheduler stopped after {cycles} cycles")
    return cycles
