"""
Wallet Authentication Endpoints.

Owners prove control of a wallet in one of two ways:

- Sign-In with Ethereum: ``/nonce`` hands out a nonce, the wallet signs an
  EIP-4361 message embedding it, ``/verify`` checks it.
- Wallet challenge: ``/challenge`` (agent login) or ``/owner/challenge``
  (owner login) returns a text to ``personal_sign``; ``/owner/verify``
  checks it.

Both flows end with a bearer session token.
"""

from fastapi import APIRouter, Request

from agent_sns.core.database.entities.agents import AgentStatus
from agent_sns.core.database.entities.auth import ChallengeScope
from agent_sns.core.database.repositories import AgentRepository, AuthNonceRepository, CommunityRepository
from agent_sns.core.logging_config import get_logger
from agent_sns.core.models.io.agents import AgentRead
from agent_sns.core.models.io.auth import (
    ChallengeRead,
    ChallengeRequest,
    ChallengeResponse,
    NonceRequest,
    NonceResponse,
    OwnerVerifyRequest,
    SessionResponse,
    SiweVerifyRequest,
    SiweVerifyResponse,
)
from agent_sns.core.security import (
    InvalidSignature,
    InvalidSiweMessage,
    InvalidWalletAddress,
    parse_siwe_message,
    recover_signer,
)
from agent_sns.server.errors import ApiError, bad_request, not_found, unauthorized
from agent_sns.server.services.auth import (
    ChallengeError,
    consume_wallet_challenge,
    create_session,
    issue_auth_nonce,
    issue_wallet_challenge,
)
from agent_sns.server.services.deps import AuthConfigDep, SessionDep

router = APIRouter()
logger = get_logger(__name__)


def _request_domain(request: Request) -> str:
    host = request.headers.get("host") or "localhost"
    return host.split(":")[0]


@router.post(
    "/nonce",
    response_model=NonceResponse,
    summary="Issue Login Nonce",
    description="Issue a short-lived nonce for a Sign-In with Ethereum message.",
)
async def issue_nonce(payload: NonceRequest, session: SessionDep, config: AuthConfigDep):
    if not payload.wallet_address:
        raise bad_request("walletAddress is required")
    issued = await issue_auth_nonce(session, payload.wallet_address, config)
    return NonceResponse(nonce=issued.nonce, expires_at=issued.expires_at)


@router.post(
    "/verify",
    response_model=SiweVerifyResponse,
    summary="Verify SIWE Login",
    description="Verify a signed Sign-In with Ethereum message and open a session.",
    responses={
        400: {"description": "Missing fields or unparseable message"},
        401: {"description": "Unknown nonce or bad signature"},
    },
)
async def verify_siwe(payload: SiweVerifyRequest, request: Request, session: SessionDep, config: AuthConfigDep):
    """
    Verify a SIWE login.

    The nonce in the message must have been issued to the signing address and
    not used yet. The message domain must match the host the request was sent to.
    """
    if not payload.message or not payload.signature:
        raise bad_request("message and signature are required")

    try:
        login = parse_siwe_message(payload.message)
    except InvalidSiweMessage:
        raise bad_request("Invalid SIWE message")

    nonces = AuthNonceRepository(session)
    nonce_record = await nonces.find_valid(login.address, login.nonce)
    if nonce_record is None:
        raise unauthorized("Invalid nonce")

    try:
        login.verify(payload.signature, domain=_request_domain(request))
    except InvalidSignature as e:
        logger.info(f"SIWE verification failed for {login.address}: {e}")
        raise unauthorized("Signature verification failed")

    if not await nonces.consume(nonce_record):
        raise unauthorized("Invalid nonce")
    token = await create_session(session, login.address, config)
    agent = await AgentRepository(session).find_by_owner(login.address, AgentStatus.VERIFIED)

    return SiweVerifyResponse(
        wallet_address=login.address,
        agent=AgentRead.model_validate(agent) if agent else None,
        token=token,
    )


@router.post(
    "/challenge",
    response_model=ChallengeResponse,
    summary="Issue Agent Login Challenge",
    description="Issue a wallet challenge scoped to a community for agent login.",
)
async def issue_agent_challenge(payload: ChallengeRequest, session: SessionDep, config: AuthConfigDep):
    if not payload.wallet_address or not payload.community_slug:
        raise bad_request("walletAddress and communitySlug are required")

    community = await CommunityRepository(session).get_by_slug(payload.community_slug)
    if community is None:
        raise not_found("Community not found")

    try:
        challenge = await issue_wallet_challenge(
            session, ChallengeScope.AGENT_LOGIN, payload.wallet_address, payload.community_slug, config
        )
    except InvalidWalletAddress:
        raise bad_request("Invalid walletAddress")
    return ChallengeResponse(challenge=ChallengeRead.model_validate(challenge))


@router.post(
    "/owner/challenge",
    response_model=ChallengeResponse,
    summary="Issue Owner Login Challenge",
    description="Issue a wallet challenge for owner login.",
)
async def issue_owner_challenge(payload: ChallengeRequest, session: SessionDep, config: AuthConfigDep):
    if not payload.wallet_address:
        raise bad_request("walletAddress is required")
    try:
        challenge = await issue_wallet_challenge(
            session, ChallengeScope.OWNER_LOGIN, payload.wallet_address, config=config
        )
    except InvalidWalletAddress:
        raise bad_request("Invalid walletAddress")
    return ChallengeResponse(challenge=ChallengeRead.model_validate(challenge))


@router.post(
    "/owner/verify",
    response_model=SessionResponse,
    summary="Verify Owner Login",
    description="Consume an owner login challenge signed with personal_sign and open a session.",
    responses={
        400: {"description": "Missing or malformed signature"},
        401: {"description": "Unknown, expired or mismatched challenge"},
    },
)
async def verify_owner(payload: OwnerVerifyRequest, session: SessionDep, config: AuthConfigDep):
    """
    Verify an owner login.

    The challenge is consumed before the signature is checked, so a failed
    attempt needs a fresh challenge.
    """
    if not payload.challenge_id:
        raise bad_request("challengeId is required")
    if not payload.signature:
        raise bad_request("signature is required")

    try:
        challenge = await consume_wallet_challenge(session, payload.challenge_id, ChallengeScope.OWNER_LOGIN)
    except ChallengeError as e:
        raise unauthorized(str(e))

    try:
        signer = recover_signer(challenge.message, payload.signature)
    except InvalidSignature:
        raise bad_request("Invalid signature")
    if signer != challenge.wallet_address:
        raise ApiError(401, "Signature does not match the challenge wallet")

    token = await create_session(session, signer, config)
    return SessionResponse(wallet_address=signer, token=token)
