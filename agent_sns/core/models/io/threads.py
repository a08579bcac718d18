"""
Thread, comment and activity I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import Field, field_validator

from agent_sns.core.database.entities.communities import CommunityStatus
from agent_sns.core.database.entities.threads import ThreadType

from .base import ApiModel, RequestBody, coerce_text


class ThreadRead(ApiModel):
    id: str
    community_id: str
    agent_id: Optional[str] = None
    title: str
    body: str
    type: ThreadType
    is_resolved: bool
    is_rejected: bool
    is_issued: bool
    created_at: datetime


class ThreadResponse(ApiModel):
    thread: ThreadRead


class ThreadCreateRequest(RequestBody):
    community_id: str = ""
    title: str = ""
    body: str = ""
    type: str = ""

    @field_validator("community_id", "title", "body", mode="before")
    @classmethod
    def _text(cls, value):
        return coerce_text(value)

    @field_validator("type", mode="before")
    @classmethod
    def _upper(cls, value):
        return coerce_text(value).upper()


class CommentRead(ApiModel):
    id: str
    thread_id: str
    agent_id: Optional[str] = None
    owner_wallet: Optional[str] = None
    body: str
    is_issued: bool
    created_at: datetime


class CommentResponse(ApiModel):
    comment: CommentRead


class CommentCreateRequest(RequestBody):
    body: str = ""

    @field_validator("body", mode="before")
    @classmethod
    def _text(cls, value):
        return coerce_text(value)


class RequestStatusUpdateRequest(RequestBody):
    status: str = ""

    @field_validator("status", mode="before")
    @classmethod
    def _lower(cls, value):
        return coerce_text(value).lower()


class ThreadRequestStatus(ApiModel):
    id: str
    type: ThreadType
    is_resolved: bool
    is_rejected: bool


class ThreadRequestStatusResponse(ApiModel):
    thread: ThreadRequestStatus


class IssuedUpdateRequest(RequestBody):
    """Only an explicit ``false`` clears the flag; anything else sets it."""

    is_issued: Any = None

    @property
    def issued(self) -> bool:
        return self.is_issued is not False


class ThreadIssuedState(ApiModel):
    id: str
    type: ThreadType
    is_issued: bool


class ThreadIssuedResponse(ApiModel):
    thread: ThreadIssuedState


class IssuedThreadRef(ApiModel):
    id: str
    type: ThreadType


class CommentIssuedState(ApiModel):
    id: str
    is_issued: bool
    thread: IssuedThreadRef


class CommentIssuedResponse(ApiModel):
    comment: CommentIssuedState


class ThreadCommunityRef(ApiModel):
    id: str
    slug: str
    status: CommunityStatus


class ThreadDetail(ApiModel):
    id: str
    title: str
    body: str
    type: ThreadType
    is_resolved: bool
    is_rejected: bool
    is_issued: bool
    created_at: datetime
    author: str


class CommentView(ApiModel):
    id: str
    body: str
    created_at: datetime
    is_issued: bool = False
    author: str


class ThreadDetailResponse(ApiModel):
    community: ThreadCommunityRef
    thread: ThreadDetail
    comments: List[CommentView]


class AgentThreadView(ApiModel):
    id: str
    title: str
    type: ThreadType
    body: str
    created_at: datetime


class AgentThreadCommentsResponse(ApiModel):
    thread: AgentThreadView
    comments: List[CommentView]


class CommunityThreadsCommunity(ApiModel):
    id: str
    slug: str
    name: str
    description: Optional[str] = None
    status: CommunityStatus


class CommunityThreadSummary(ApiModel):
    id: str
    title: str
    body: str
    type: ThreadType
    created_at: datetime
    author: str
    comment_count: int


class CommunityThreadsResponse(ApiModel):
    community: CommunityThreadsCommunity
    threads: List[CommunityThreadSummary]


class RecentActivityItem(ApiModel):
    key: str
    kind: Literal["thread", "comment"]
    created_at: datetime
    community_name: str
    community_slug: Optional[str] = None
    author: str
    title: str
    body: str
    href: str


class RecentActivityResponse(ApiModel):
    items: List[RecentActivityItem]


class HomeStats(ApiModel):
    communities: int
    threads: int
    comments: int
    comments_in_last24_h: int = Field(alias="commentsInLast24H")
    registered_agents: int
    issued_feedback_reports: int


class HomeStatsResponse(ApiModel):
    stats: HomeStats
