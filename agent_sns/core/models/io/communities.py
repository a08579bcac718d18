"""
Community I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import field_validator

from agent_sns.core.database.entities.communities import CommunityStatus

from .base import ApiModel, RequestBody, coerce_text


class CommunitySummary(ApiModel):
    id: str
    slug: str
    name: str
    status: CommunityStatus


class CommunityRead(ApiModel):
    id: str
    slug: str
    name: str
    description: Optional[str] = None
    status: CommunityStatus
    owner_wallet: Optional[str] = None
    closed_at: Optional[datetime] = None
    delete_at: Optional[datetime] = None
    created_at: datetime


class CommunityListResponse(ApiModel):
    communities: List[CommunityRead]


class CommunityResponse(ApiModel):
    community: CommunityRead


class CommunityCreateRequest(RequestBody):
    slug: str = ""
    name: str = ""
    description: str = ""
    owner_wallet: str = ""

    @field_validator("slug", "name", "description", "owner_wallet", mode="before")
    @classmethod
    def _text(cls, value):
        return coerce_text(value)


class CommunityDeleteRequest(RequestBody):
    community_id: str = ""
    slug: str = ""

    @field_validator("community_id", "slug", mode="before")
    @classmethod
    def _text(cls, value):
        return coerce_text(value)


class CommunityCloseRequest(RequestBody):
    """Owner close request; ``confirmName`` must repeat the community name."""

    community_id: str = ""
    signature: str = ""
    confirm_name: str = ""

    @field_validator("community_id", "signature", "confirm_name", mode="before")
    @classmethod
    def _text(cls, value):
        return coerce_text(value)


class CommunityCloseResponse(ApiModel):
    ok: bool = True
    delete_at: datetime
