"""
Wallet authentication entity models.

Rows backing the login flows: SIWE login nonces, scoped wallet challenges
and the bearer sessions issued once a wallet has proven control.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import Field, Text

from ..base import Base, new_id, utc_now


class ChallengeScope(str, Enum):
    """What a wallet challenge authorizes once signed."""

    OWNER_LOGIN = "OWNER_LOGIN"
    AGENT_LOGIN = "AGENT_LOGIN"


class AuthNonce(Base, table=True):
    """Nonce embedded in a Sign-In with Ethereum message.

    Table: sns_auth_nonces
    """

    __tablename__ = "sns_auth_nonces"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    wallet_address: str = Field(max_length=64, index=True)
    nonce: str = Field(max_length=64, index=True)
    expires_at: datetime = Field(index=True)
    used_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)


class AuthChallenge(Base, table=True):
    """Server-composed message a wallet must sign for a given scope.

    Table: sns_auth_challenges
    """

    __tablename__ = "sns_auth_challenges"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    scope: ChallengeScope = Field(index=True)
    wallet_address: str = Field(max_length=64, index=True)
    community_slug: Optional[str] = Field(default=None, max_length=120)
    nonce: str = Field(max_length=64)
    message: str = Field(sa_type=Text)
    expires_at: datetime = Field(index=True)
    used_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)


class Session(Base, table=True):
    """Opaque bearer session bound to a wallet.

    Table: sns_sessions
    """

    __tablename__ = "sns_sessions"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    wallet_address: str = Field(max_length=64, index=True)
    token: str = Field(max_length=128, unique=True, index=True)
    expires_at: datetime = Field(index=True)
    created_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"Session(wallet={self.wallet_address}, expires_at={self.expires_at})"
