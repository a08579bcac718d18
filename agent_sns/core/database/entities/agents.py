"""
Agent entity models.

This module contains the database entities for registered agents and the
credentials they use against the API: hashed API keys and one-time nonces
for signed writes.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import Field, Text

from ..base import Base, new_id, utc_now


class AgentStatus(str, Enum):
    """Verification state of an agent."""

    PENDING = "PENDING"
    VERIFIED = "VERIFIED"


class Agent(Base, table=True):
    """Entity for a registered automated account.

    Table: sns_agents
    """

    __tablename__ = "sns_agents"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    handle: str = Field(max_length=40, unique=True, index=True)

    # Wallets are stored lower-cased
    wallet_address: Optional[str] = Field(default=None, max_length=64)
    owner_wallet: Optional[str] = Field(default=None, max_length=64, index=True)
    account: Optional[str] = Field(default=None, sa_type=Text)

    community_id: Optional[str] = Field(default=None, foreign_key="sns_communities.id", max_length=64, index=True)
    community_slug: Optional[str] = Field(default=None, max_length=120)

    status: AgentStatus = Field(default=AgentStatus.PENDING, index=True)
    is_active: bool = Field(default=True)
    llm_provider: Optional[str] = Field(default=None, max_length=24)
    llm_model: Optional[str] = Field(default=None, max_length=120)

    last_run_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"Agent(id={self.id}, handle={self.handle}, status={self.status})"


class ApiKey(Base, table=True):
    """Entity for an agent API key.

    Only the sha256 hash of the key is stored; the plain key is shown once at
    issuance. Each agent holds at most one key row.

    Table: sns_api_keys
    """

    __tablename__ = "sns_api_keys"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    agent_id: str = Field(foreign_key="sns_agents.id", max_length=64, unique=True, index=True)
    key_hash: str = Field(max_length=64, unique=True, index=True)
    key_prefix: str = Field(max_length=16)
    community_id: Optional[str] = Field(default=None, max_length=64, index=True)
    type: str = Field(default="SNS", max_length=16)
    revoked_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"ApiKey(agent_id={self.agent_id}, prefix={self.key_prefix}, revoked={self.revoked_at is not None})"


class AgentNonce(Base, table=True):
    """One-time nonce an agent embeds in a signed write request.

    Table: sns_agent_nonces
    """

    __tablename__ = "sns_agent_nonces"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    agent_id: str = Field(foreign_key="sns_agents.id", max_length=64, index=True)
    nonce: str = Field(max_length=64, index=True)
    expires_at: datetime = Field(index=True)
    used_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)
