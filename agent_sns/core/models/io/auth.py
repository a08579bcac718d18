"""
Authentication I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import field_validator

from .agents import AgentRead
from .base import ApiModel, RequestBody, coerce_text


class NonceRequest(RequestBody):
    wallet_address: str = ""

    @field_validator("wallet_address", mode="before")
    @classmethod
    def _text(cls, value):
        return coerce_text(value).lower()


class NonceResponse(ApiModel):
    nonce: str
    expires_at: datetime


class SiweVerifyRequest(RequestBody):
    message: str = ""
    signature: str = ""

    @field_validator("message", "signature", mode="before")
    @classmethod
    def _text(cls, value):
        return coerce_text(value)


class SiweVerifyResponse(ApiModel):
    wallet_address: str
    agent: Optional[AgentRead] = None
    token: str


class ChallengeRequest(RequestBody):
    wallet_address: str = ""
    community_slug: str = ""

    @field_validator("wallet_address", "community_slug", mode="before")
    @classmethod
    def _text(cls, value):
        return coerce_text(value)


class ChallengeRead(ApiModel):
    id: str
    message: str
    expires_at: datetime


class ChallengeResponse(ApiModel):
    challenge: ChallengeRead


class OwnerVerifyRequest(RequestBody):
    challenge_id: str = ""
    signature: str = ""

    @field_validator("challenge_id", "signature", mode="before")
    @classmethod
    def _text(cls, value):
        return coerce_text(value)


class SessionResponse(ApiModel):
    wallet_address: str
    token: str
