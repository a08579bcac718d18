"""
Wallet authentication service.

Implements the three credential flows an owner wallet goes through:

- Login nonce: a random value the wallet embeds in a Sign-In with Ethereum
  message.
- Wallet challenge: a server-composed text the wallet ``personal_sign``-s,
  scoped to owner login or agent login.
- Session: the bearer token handed out once a signature checks out.

Every value is random hex with a TTL and lives in its own table.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from agent_sns.core.database.base import utc_now
from agent_sns.core.database.entities.auth import AuthChallenge, ChallengeScope
from agent_sns.core.database.repositories import (
    AuthChallengeRepository,
    AuthNonceRepository,
    SessionRepository,
)
from agent_sns.core.logging_config import get_logger
from agent_sns.core.security import generate_nonce, generate_session_token, normalize_wallet_address
from agent_sns.server.core.config import AuthConfig, settings

logger = get_logger(__name__)


@dataclass(frozen=True)
class IssuedNonce:
    nonce: str
    expires_at: datetime


class ChallengeError(Exception):
    """A wallet challenge could not be consumed."""


def _auth_config(config: Optional[AuthConfig]) -> AuthConfig:
    return config or settings.auth


def format_expiry(value: datetime) -> str:
    """Render a naive UTC datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    return value.isoformat(timespec="milliseconds") + "Z"


async def issue_auth_nonce(
    session: AsyncSession, wallet_address: str, config: Optional[AuthConfig] = None
) -> IssuedNonce:
    """Store a login nonce for a (lower-cased) wallet address."""
    ttl = _auth_config(config).nonce_ttl_seconds
    record = await AuthNonceRepository(session).issue(
        wallet_address=wallet_address.lower(),
        nonce=generate_nonce(),
        expires_at=utc_now() + timedelta(seconds=ttl),
    )
    return IssuedNonce(nonce=record.nonce, expires_at=record.expires_at)


async def create_session(session: AsyncSession, wallet_address: str, config: Optional[AuthConfig] = None) -> str:
    """Open a bearer session for a wallet and return its token."""
    ttl = _auth_config(config).session_ttl_seconds
    record = await SessionRepository(session).open(
        wallet_address=wallet_address,
        token=generate_session_token(),
        expires_at=utc_now() + timedelta(seconds=ttl),
    )
    logger.info(f"Session opened for wallet {wallet_address}")
    return record.token


def build_challenge_message(
    app_name: str,
    scope: ChallengeScope,
    wallet_address: str,
    nonce: str,
    expires_at: datetime,
    community_slug: Optional[str] = None,
) -> str:
    lines = [app_name, f"Scope: {scope.value}", f"Wallet: {wallet_address}"]
    if community_slug:
        lines.append(f"Community: {community_slug}")
    lines.append(f"Nonce: {nonce}")
    lines.append(f"ExpiresAt: {format_expiry(expires_at)}")
    return "\n".join(lines)


async def issue_wallet_challenge(
    session: AsyncSession,
    scope: ChallengeScope,
    wallet_address: str,
    community_slug: Optional[str] = None,
    config: Optional[AuthConfig] = None,
) -> AuthChallenge:
    """Create a challenge for a wallet, replacing its pending ones in the same scope.

    Raises:
        InvalidWalletAddress: If the address is not valid
    """
    auth_config = _auth_config(config)
    wallet = normalize_wallet_address(wallet_address)
    slug = (community_slug or "").strip() or None
    nonce = generate_nonce()
    expires_at = utc_now() + timedelta(seconds=auth_config.challenge_ttl_seconds)

    challenge = AuthChallenge(
        scope=scope,
        wallet_address=wallet,
        community_slug=slug,
        nonce=nonce,
        message=build_challenge_message(auth_config.app_name, scope, wallet, nonce, expires_at, slug),
        expires_at=expires_at,
    )
    return await AuthChallengeRepository(session).replace_pending(challenge)


async def consume_wallet_challenge(session: AsyncSession, challenge_id: str, scope: ChallengeScope) -> AuthChallenge:
    """Mark a pending challenge as used and return it.

    Raises:
        ChallengeError: If the id is blank or no unused, unexpired challenge matches
    """
    challenge_id = (challenge_id or "").strip()
    if not challenge_id:
        raise ChallengeError("challengeId is required")

    repo = AuthChallengeRepository(session)
    challenge = await repo.find_valid(challenge_id, scope)
    if challenge is None or not await repo.consume(challenge):
        raise ChallengeError("Invalid or expired challenge")
    return challenge
