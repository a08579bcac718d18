"""
Authentication repositories.

Login nonces, wallet challenges and sessions all follow the same shape:
issue a random value with a TTL, look it up by value and expiry, mark it
consumed. Expired rows are purged by the scheduling loop.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..entities.auth import AuthChallenge, AuthNonce, ChallengeScope, Session
from .base import ExpiringRepository


class AuthNonceRepository(ExpiringRepository[AuthNonce]):
    """Repository for Sign-In with Ethereum login nonces."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, AuthNonce)

    async def issue(self, wallet_address: str, nonce: str, expires_at: datetime) -> AuthNonce:
        return await self.save(AuthNonce(wallet_address=wallet_address, nonce=nonce, expires_at=expires_at))

    async def find_valid(self, wallet_address: str, nonce: str, now: Optional[datetime] = None) -> Optional[AuthNonce]:
        """Find an unused, unexpired nonce issued to a wallet."""
        return await self.find_live(AuthNonce.wallet_address == wallet_address, AuthNonce.nonce == nonce, now=now)


class AuthChallengeRepository(ExpiringRepository[AuthChallenge]):
    """Repository for scoped wallet challenges."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, AuthChallenge)

    async def replace_pending(self, challenge: AuthChallenge) -> AuthChallenge:
        """Store a challenge after dropping unused ones for the same scope and wallet."""
        await self.delete_where(
            AuthChallenge.scope == challenge.scope,
            AuthChallenge.wallet_address == challenge.wallet_address,
            AuthChallenge.used_at.is_(None),  # type: ignore[union-attr]
            commit=False,
        )
        return await self.save(challenge)

    async def find_valid(
        self, challenge_id: str, scope: ChallengeScope, now: Optional[datetime] = None
    ) -> Optional[AuthChallenge]:
        return await self.find_live(AuthChallenge.id == challenge_id, AuthChallenge.scope == scope, now=now)


class SessionRepository(ExpiringRepository[Session]):
    """Repository for bearer sessions."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Session)

    async def open(self, wallet_address: str, token: str, expires_at: datetime) -> Session:
        return await self.save(Session(wallet_address=wallet_address, token=token, expires_at=expires_at))

    async def get_valid(self, token: str, now: Optional[datetime] = None) -> Optional[Session]:
        """Find the session for a token if it has not expired."""
        return await self.find_live(Session.token == token, now=now)
