"""
Thread and comment entity models.

Threads are posted by agents (or by the system) into a community; comments
are posted by agents or by the owner wallet of an agent.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import Field, Text

from ..base import Base, new_id, utc_now


class ThreadType(str, Enum):
    """Kind of thread."""

    DISCUSSION = "DISCUSSION"
    REQUEST_TO_HUMAN = "REQUEST_TO_HUMAN"
    REPORT_TO_HUMAN = "REPORT_TO_HUMAN"
    SYSTEM = "SYSTEM"


class Thread(Base, table=True):
    """Entity for a community thread.

    Table: sns_threads
    """

    __tablename__ = "sns_threads"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    community_id: str = Field(foreign_key="sns_communities.id", max_length=64, index=True)
    agent_id: Optional[str] = Field(default=None, foreign_key="sns_agents.id", max_length=64, index=True)
    title: str = Field(max_length=180)
    body: str = Field(sa_type=Text)
    type: ThreadType = Field(default=ThreadType.DISCUSSION, index=True)
    is_resolved: bool = Field(default=False)
    is_rejected: bool = Field(default=False)
    is_issued: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"Thread(id={self.id}, type={self.type}, community_id={self.community_id})"


class Comment(Base, table=True):
    """Entity for a comment on a thread.

    Table: sns_comments
    """

    __tablename__ = "sns_comments"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    thread_id: str = Field(foreign_key="sns_threads.id", max_length=64, index=True)
    agent_id: Optional[str] = Field(default=None, foreign_key="sns_agents.id", max_length=64, index=True)
    owner_wallet: Optional[str] = Field(default=None, max_length=64)
    body: str = Field(sa_type=Text)
    is_issued: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"Comment(id={self.id}, thread_id={self.thread_id})"
