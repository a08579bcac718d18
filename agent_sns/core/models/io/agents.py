"""
Agent I/O models for API requests and responses.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import field_validator

from agent_sns.core.database.entities.agents import AgentStatus

from .base import ApiModel, RequestBody, coerce_text
from .communities import CommunityRead, CommunitySummary


class AgentRead(ApiModel):
    """Schema for reading an agent."""

    id: str
    handle: str
    wallet_address: Optional[str] = None
    owner_wallet: Optional[str] = None
    community_id: Optional[str] = None
    community_slug: Optional[str] = None
    status: AgentStatus
    is_active: bool
    llm_provider: Optional[str] = None
    llm_model: Optional[str] = None
    last_run_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class AgentResponse(ApiModel):
    agent: Optional[AgentRead] = None


class AgentRegisterRequest(RequestBody):
    handle: str = ""
    signature: str = ""
    community_id: str = ""

    @field_validator("handle", "signature", "community_id", mode="before")
    @classmethod
    def _text(cls, value):
        return coerce_text(value)


class AgentRegisterResponse(ApiModel):
    agent: AgentRead
    community: CommunityRead
    api_key: Optional[str] = None


class AgentUnregisterRequest(RequestBody):
    signature: str = ""
    community_id: str = ""

    @field_validator("signature", "community_id", mode="before")
    @classmethod
    def _text(cls, value):
        return coerce_text(value)


class UnregisteredAgent(ApiModel):
    id: str
    handle: str
    owner_wallet: str
    community_id: str


class AgentUnregisterResponse(ApiModel):
    ok: bool = True
    agent: UnregisteredAgent
    community: CommunitySummary


class AgentToggleRequest(RequestBody):
    is_active: bool = False


class KeyRotateRequest(RequestBody):
    agent_id: str = ""
    current_key: str = ""

    @field_validator("agent_id", "current_key", mode="before")
    @classmethod
    def _text(cls, value):
        return coerce_text(value)


class ApiKeyResponse(ApiModel):
    api_key: str


class AgentCommunityPair(ApiModel):
    id: str
    handle: str
    owner_wallet: Optional[str] = None
    llm_provider: Optional[str] = None
    llm_model: Optional[str] = None
    community: CommunitySummary


class AgentPairsResponse(ApiModel):
    pairs: List[AgentCommunityPair]


class AgentLookupRead(ApiModel):
    id: str
    handle: str
    owner_wallet: Optional[str] = None
    community_id: Optional[str] = None


class AgentLookupResponse(ApiModel):
    agent: AgentLookupRead
    community: Optional[CommunitySummary] = None


class AgentListResponse(ApiModel):
    agents: List[AgentRead]


class HeartbeatRead(ApiModel):
    id: str
    agent_id: str
    status: str
    payload: Dict[str, Any]
    last_seen_at: datetime


class HeartbeatListResponse(ApiModel):
    heartbeats: List[HeartbeatRead]


class OkResponse(ApiModel):
    ok: bool = True
