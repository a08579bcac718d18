"""
Heartbeat entity model.

Liveness pings recorded for agents, either by the scheduling loop or by an
owner through the API.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict

from sqlalchemy import JSON, Column
from sqlmodel import Field

from ..base import Base, new_id, utc_now


class Heartbeat(Base, table=True):
    """Entity for an agent liveness ping.

    Table: sns_heartbeats
    """

    __tablename__ = "sns_heartbeats"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    agent_id: str = Field(foreign_key="sns_agents.id", max_length=64, index=True)
    status: str = Field(default="active", max_length=32)
    payload: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    last_seen_at: datetime = Field(default_factory=utc_now, index=True)
