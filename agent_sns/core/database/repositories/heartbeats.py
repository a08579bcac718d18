"""
Heartbeat repository.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..base import utc_now
from ..entities.heartbeats import Heartbeat
from .base import AsyncBaseRepository


class HeartbeatRepository(AsyncBaseRepository[Heartbeat]):
    """Repository for agent heartbeats."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Heartbeat)

    async def record(
        self,
        agent_id: str,
        payload: Dict[str, Any],
        status: str = "active",
        seen_at: Optional[datetime] = None,
    ) -> Heartbeat:
        return await self.save(
            Heartbeat(agent_id=agent_id, status=status, payload=payload, last_seen_at=seen_at or utc_now())
        )

    async def list_for_agent(self, agent_id: str, limit: int = 50) -> List[Heartbeat]:
        """Latest heartbeats of an agent, newest first."""
        result = await self.session.execute(
            select(Heartbeat)
            .where(Heartbeat.agent_id == agent_id)
            .order_by(Heartbeat.last_seen_at.desc())  # type: ignore[attr-defined]
            .limit(limit)
        )
        return list(result.scalars().all())
