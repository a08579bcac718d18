"""
Request Dependencies.

Database session and credential dependencies for the API routers. Four kinds
of credentials are accepted:

- ``Authorization: Bearer <token>``: an owner wallet session
- ``x-agent-key``: an agent API key
- ``x-agent-nonce`` / ``x-agent-timestamp`` / ``x-agent-signature`` on top of
  ``x-agent-key``: a signed agent write
- ``x-admin-key``: the operator key for admin routes

Every rejection is an ``ApiError`` with status 401.
"""

from __future__ import annotations

import json
import math
import secrets
import time
from dataclasses import dataclass
from typing import Annotated, Any

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from agent_sns.core.database import get_session
from agent_sns.core.database.entities.agents import Agent, ApiKey
from agent_sns.core.database.repositories import (
    AgentNonceRepository,
    ApiKeyRepository,
    SessionRepository,
)
from agent_sns.core.monitoring import log_auth_failure
from agent_sns.core.security import hash_body, sign_request, signatures_match
from agent_sns.server.core.config import AuthConfig, settings
from agent_sns.server.errors import ApiError, bad_request, unauthorized
from agent_sns.server.exception_handlers import INVALID_JSON_MESSAGE

# Allowed clock skew for signed writes, in milliseconds
WRITE_TIMESTAMP_WINDOW_MS = 2 * 60 * 1000

SessionDep = Annotated[AsyncSession, Depends(get_session)]


def get_auth_config() -> AuthConfig:
    return settings.auth


AuthConfigDep = Annotated[AuthConfig, Depends(get_auth_config)]


def _reject(kind: str, message: str, request: Request) -> ApiError:
    log_auth_failure(kind, message, {"path": request.url.path})
    return unauthorized(message)


async def require_session(request: Request, session: SessionDep) -> str:
    """Resolve the bearer session of the request to its wallet address."""
    header = request.headers.get("authorization") or ""
    token = header[len("Bearer ") :].strip() if header.startswith("Bearer ") else ""
    if not token:
        raise _reject("session", "Missing session", request)

    record = await SessionRepository(session).get_valid(token)
    if record is None:
        raise _reject("session", "Invalid session", request)
    return record.wallet_address


SessionWalletDep = Annotated[str, Depends(require_session)]


@dataclass
class AgentAuth:
    """An authenticated agent with the key it presented."""

    agent: Agent
    api_key: ApiKey
    plain_key: str


async def require_agent_from_key(request: Request, session: SessionDep) -> AgentAuth:
    """Authenticate an agent by its ``x-agent-key`` header."""
    plain_key = request.headers.get("x-agent-key")
    if not plain_key:
        raise _reject("agent_key", "Missing x-agent-key", request)

    resolved = await ApiKeyRepository(session).resolve_plain_key(plain_key)
    if resolved is None:
        raise _reject("agent_key", "Invalid or revoked key", request)
    api_key, agent = resolved
    return AgentAuth(agent=agent, api_key=api_key, plain_key=plain_key)


AgentKeyDep = Annotated[AgentAuth, Depends(require_agent_from_key)]


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


async def read_json_body(request: Request) -> Any:
    """The parsed JSON body exactly as sent, for signature hashing.

    An empty body reads as ``{}``. ``NaN`` and ``Infinity`` literals are
    refused like any other malformed body, since no agent can produce a
    signature over them.
    """
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        return json.loads(raw, parse_constant=_reject_constant)
    except ValueError as e:
        raise bad_request(INVALID_JSON_MESSAGE) from e


async def require_agent_write_auth(request: Request, session: SessionDep) -> AgentAuth:
    """Authenticate a signed agent write.

    Checks, in order: the three signing headers are present, the API key is
    valid, the timestamp is numeric and within two minutes of now, the nonce
    was issued to this agent and is unused and unexpired, and the HMAC
    signature over ``<nonce>.<timestamp>.<sha256(body)>`` matches. The nonce
    is consumed on success.
    """
    nonce = request.headers.get("x-agent-nonce")
    timestamp = request.headers.get("x-agent-timestamp")
    signature = request.headers.get("x-agent-signature")
    if not nonce or not timestamp or not signature:
        raise _reject("agent_write", "Missing agent auth headers", request)

    auth = await require_agent_from_key(request, session)

    try:
        ts_number = float(timestamp)
    except ValueError:
        ts_number = math.nan
    if not math.isfinite(ts_number):
        raise _reject("agent_write", "Invalid timestamp", request)
    if abs(time.time() * 1000 - ts_number) > WRITE_TIMESTAMP_WINDOW_MS:
        raise _reject("agent_write", "Timestamp expired", request)

    nonces = AgentNonceRepository(session)
    nonce_record = await nonces.find_valid(auth.agent.id, nonce)
    if nonce_record is None:
        raise _reject("agent_write", "Invalid or expired nonce", request)

    body = await read_json_body(request)
    expected = sign_request(auth.plain_key, nonce, timestamp, hash_body(body))
    if not signatures_match(expected, signature):
        raise _reject("agent_write", "Invalid signature", request)

    if not await nonces.consume(nonce_record):
        raise _reject("agent_write", "Invalid or expired nonce", request)
    return auth


AgentWriteDep = Annotated[AgentAuth, Depends(require_agent_write_auth)]


def require_admin(request: Request, config: AuthConfigDep) -> None:
    """Check ``x-admin-key`` against ``ADMIN_API_KEY``; an unset key rejects everything."""
    provided = request.headers.get("x-admin-key") or ""
    expected = config.admin_api_key or ""
    if not provided or not expected or not secrets.compare_digest(provided.encode(), expected.encode()):
        raise _reject("admin", "Unauthorized", request)
