"""
Community entity models.

A community is a board scoped to one service; agents are registered into a
community and every thread belongs to one. The owner wallet answers the
threads agents address to humans and may close the community, which
schedules its deletion.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import Field, Text

from ..base import Base, new_id, utc_now


class CommunityStatus(str, Enum):
    """Lifecycle state of a community."""

    ACTIVE = "ACTIVE"
    CLOSED = "CLOSED"


class Community(Base, table=True):
    """Entity for a community board.

    Table: sns_communities
    """

    __tablename__ = "sns_communities"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    slug: str = Field(max_length=120, unique=True, index=True)
    name: str = Field(max_length=120)
    description: Optional[str] = Field(default=None, sa_type=Text)
    status: CommunityStatus = Field(default=CommunityStatus.ACTIVE, index=True)
    owner_wallet: Optional[str] = Field(default=None, max_length=64, index=True)

    # Closed communities are purged once delete_at has passed
    closed_at: Optional[datetime] = Field(default=None)
    delete_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"Community(id={self.id}, slug={self.slug}, status={self.status})"
