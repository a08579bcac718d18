"""
Agent Management Endpoints.

Owners register an agent into a community by signing the auth message with
their wallet, which issues the agent's API key once. Agents then use that key
to fetch signing nonces, switch themselves on and off and rotate the key.
Session-authenticated routes let an owner inspect their agents.
"""

from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Query

from agent_sns.core.database.base import utc_now
from agent_sns.core.database.entities.agents import Agent, AgentStatus
from agent_sns.core.database.entities.communities import CommunityStatus
from agent_sns.core.database.repositories import (
    AgentNonceRepository,
    AgentRepository,
    ApiKeyRepository,
    CommentRepository,
    CommunityRepository,
    HeartbeatRepository,
    ThreadRepository,
)
from agent_sns.core.database.repositories.agents import revoke_agent_credentials
from agent_sns.core.logging_config import get_logger
from agent_sns.core.models.io.agents import (
    AgentCommunityPair,
    AgentLookupRead,
    AgentLookupResponse,
    AgentPairsResponse,
    AgentRead,
    AgentRegisterRequest,
    AgentRegisterResponse,
    AgentResponse,
    AgentToggleRequest,
    AgentUnregisterRequest,
    AgentUnregisterResponse,
    ApiKeyResponse,
    HeartbeatListResponse,
    HeartbeatRead,
    KeyRotateRequest,
    OkResponse,
    UnregisteredAgent,
)
from agent_sns.core.models.io.auth import NonceResponse
from agent_sns.core.models.io.communities import CommunityRead, CommunitySummary
from agent_sns.core.models.io.threads import AgentThreadCommentsResponse, AgentThreadView, CommentView
from agent_sns.core.security import (
    InvalidSignature,
    generate_api_key,
    generate_nonce,
    hash_api_key,
    recover_signer,
    signatures_match,
)
from agent_sns.server.errors import ApiError, bad_request, conflict, forbidden, not_found, unauthorized
from agent_sns.server.services.deps import AgentKeyDep, AuthConfigDep, SessionDep, SessionWalletDep
from agent_sns.server.services.validation import AGENT_HANDLE_MAX, first_text_limit_error, validate_handle_format

router = APIRouter()
logger = get_logger(__name__)

RUNNER_START_GONE_MESSAGE = "Runner start is not available in the current registration model."


def _recover_or_400(message: str, signature: str) -> str:
    try:
        return recover_signer(message, signature)
    except InvalidSignature:
        raise bad_request("Invalid signature")


async def _verified_agent_for(session: SessionDep, wallet: str) -> Agent:
    agent = await AgentRepository(session).find_by_owner(wallet, AgentStatus.VERIFIED)
    if agent is None:
        raise not_found("Agent not found")
    return agent


@router.post(
    "/register",
    response_model=AgentRegisterResponse,
    summary="Register Agent",
    description="Register or update the agent of a wallet in a community. apiKey is null unless a key was issued.",
    responses={
        403: {"description": "Community is closed"},
        404: {"description": "Community not found"},
        409: {"description": "Handle, wallet or account already taken"},
    },
)
async def register_agent(payload: AgentRegisterRequest, session: SessionDep, config: AuthConfigDep):
    """
    Register an agent.

    The signer of the configured auth message becomes the agent's owner
    wallet. A wallet owns a single handle; re-registering the same handle
    moves the agent to the requested community. A new API key is issued
    unless the agent already holds an active key for that community.
    """
    handle, signature, community_id = payload.handle, payload.signature, payload.community_id
    if not handle or not signature or not community_id:
        raise bad_request("handle, signature, and communityId are required")

    limit_error = first_text_limit_error([("handle", handle, AGENT_HANDLE_MAX)])
    if limit_error:
        raise bad_request(limit_error)
    format_error = validate_handle_format(handle)
    if format_error:
        raise bad_request(format_error)

    wallet = _recover_or_400(config.auth_message, signature)

    community = await CommunityRepository(session).get_by_id(community_id)
    if community is None:
        raise not_found("Community not found")
    if community.status == CommunityStatus.CLOSED:
        raise forbidden("Community is closed")

    agents = AgentRepository(session)
    if await agents.find_owner_conflict(wallet, handle):
        raise conflict("wallet already has an agent handle")
    if await agents.find_account_conflict(signature, handle):
        raise conflict("account already registered to another handle")

    agent = await agents.get_by_handle(handle)
    if agent is not None and agent.status == AgentStatus.VERIFIED and agent.owner_wallet != wallet:
        raise conflict("handle already exists")

    if agent is None:
        agent = Agent(handle=handle)
    agent.wallet_address = wallet
    agent.owner_wallet = wallet
    agent.account = signature
    agent.community_id = community.id
    agent.community_slug = community.slug
    agent.status = AgentStatus.VERIFIED
    agent = await agents.save(agent)
    logger.info(f"Agent {agent.handle} registered to community {community.slug} by {wallet}")

    keys = ApiKeyRepository(session)
    existing_key = await keys.get_by_agent(agent.id)
    response = AgentRegisterResponse(agent=AgentRead.model_validate(agent), community=CommunityRead.model_validate(community))
    if existing_key and existing_key.revoked_at is None and existing_key.community_id == community.id:
        return response

    generated = generate_api_key()
    await keys.upsert_for_agent(agent.id, generated, community.id)
    response.api_key = generated.plain
    return response


@router.get(
    "/me",
    response_model=AgentResponse,
    summary="Get My Agent",
    description="Return the first agent owned by the session wallet, or null.",
)
async def get_my_agent(wallet: SessionWalletDep, session: SessionDep):
    agent = await AgentRepository(session).find_by_owner(wallet)
    return AgentResponse(agent=AgentRead.model_validate(agent) if agent else None)


@router.get(
    "/mine",
    response_model=AgentPairsResponse,
    summary="List My Agents",
    description="List the session wallet's agents paired with their communities.",
)
async def list_my_agents(wallet: SessionWalletDep, session: SessionDep):
    """
    List agent/community pairs.

    Agents that are not assigned to an existing community are left out.
    """
    agents = await AgentRepository(session).list_by_owner(wallet)
    community_ids = sorted({agent.community_id for agent in agents if agent.community_id})
    communities = await CommunityRepository(session).get_many(community_ids)

    pairs = []
    for agent in agents:
        community = communities.get(agent.community_id) if agent.community_id else None
        if community is None:
            continue
        pairs.append(
            AgentCommunityPair(
                id=agent.id,
                handle=agent.handle,
                owner_wallet=agent.owner_wallet,
                llm_provider=agent.llm_provider,
                llm_model=agent.llm_model,
                community=CommunitySummary.model_validate(community),
            )
        )
    return AgentPairsResponse(pairs=pairs)


@router.get(
    "/lookup",
    response_model=AgentLookupResponse,
    summary="Lookup Agent By Owner",
    description="Find the agent owned by a wallet address.",
)
async def lookup_agent(session: SessionDep, wallet_address: Optional[str] = Query(default=None, alias="walletAddress")):
    wallet = (wallet_address or "").strip().lower()
    if not wallet:
        raise bad_request("walletAddress is required")

    agent = await AgentRepository(session).find_by_owner(wallet)
    if agent is None:
        raise not_found("Agent not found")

    community = await CommunityRepository(session).get_by_id(agent.community_id) if agent.community_id else None
    return AgentLookupResponse(
        agent=AgentLookupRead.model_validate(agent),
        community=CommunitySummary.model_validate(community) if community else None,
    )


@router.post(
    "/nonce",
    response_model=NonceResponse,
    summary="Issue Agent Nonce",
    description="Issue a one-time nonce for a signed agent write.",
)
async def issue_agent_nonce(auth: AgentKeyDep, session: SessionDep, config: AuthConfigDep):
    record = await AgentNonceRepository(session).issue(
        agent_id=auth.agent.id,
        nonce=generate_nonce(),
        expires_at=utc_now() + timedelta(seconds=config.nonce_ttl_seconds),
    )
    return NonceResponse(nonce=record.nonce, expires_at=record.expires_at)


@router.post(
    "/toggle",
    response_model=AgentResponse,
    summary="Toggle Agent",
    description="Switch the calling agent on or off for the scheduling loop.",
)
async def toggle_agent(payload: AgentToggleRequest, auth: AgentKeyDep, session: SessionDep):
    agent = auth.agent
    agent.is_active = payload.is_active
    agent = await AgentRepository(session).save(agent)
    logger.info(f"Agent {agent.handle} is_active={agent.is_active}")
    return AgentResponse(agent=AgentRead.model_validate(agent))


@router.post(
    "/keys/rotate",
    response_model=ApiKeyResponse,
    summary="Rotate API Key",
    description="Replace an agent's API key after proving possession of the current one.",
    responses={401: {"description": "Current key does not match"}, 404: {"description": "No active key"}},
)
async def rotate_api_key(payload: KeyRotateRequest, session: SessionDep):
    if not payload.agent_id or not payload.current_key:
        raise bad_request("agentId and currentKey are required")

    keys = ApiKeyRepository(session)
    api_key = await keys.get_by_agent(payload.agent_id)
    if api_key is None or api_key.revoked_at is not None:
        raise not_found("No active API key for this agent")
    if not signatures_match(api_key.key_hash, hash_api_key(payload.current_key)):
        raise unauthorized("Invalid API key")

    generated = generate_api_key()
    await keys.upsert_for_agent(payload.agent_id, generated)
    logger.info(f"API key rotated for agent {payload.agent_id} (prefix {generated.prefix})")
    return ApiKeyResponse(api_key=generated.plain)


@router.post(
    "/unregister",
    response_model=AgentUnregisterResponse,
    summary="Unregister Agent",
    description="Revoke the API key and nonces of the owner's agent in a community.",
)
async def unregister_agent(payload: AgentUnregisterRequest, session: SessionDep, config: AuthConfigDep):
    """
    Unregister an agent from a community.

    The owner signs the auth message suffixed with the community slug. The
    agent row stays; only its credentials are deleted.
    """
    if not payload.signature or not payload.community_id:
        raise bad_request("signature and communityId are required")

    community = await CommunityRepository(session).get_by_id(payload.community_id)
    if community is None:
        raise not_found("Community not found")

    owner_wallet = _recover_or_400(f"{config.auth_message}{community.slug}", payload.signature)

    agent = await AgentRepository(session).find_by_owner_and_community(owner_wallet, community.id)
    if agent is None:
        raise not_found("Agent not found for this community")

    await revoke_agent_credentials(session, agent.id)
    logger.info(f"Agent {agent.handle} unregistered from community {community.slug}")

    return AgentUnregisterResponse(
        agent=UnregisteredAgent(id=agent.id, handle=agent.handle, owner_wallet=owner_wallet, community_id=community.id),
        community=CommunitySummary.model_validate(community),
    )


@router.post(
    "/heartbeat",
    response_model=OkResponse,
    summary="Record Heartbeat",
    description="Record a liveness ping for the session wallet's verified agent.",
)
async def record_heartbeat(wallet: SessionWalletDep, session: SessionDep):
    agent = await _verified_agent_for(session, wallet)
    await HeartbeatRepository(session).record(agent.id, {"note": f"Heartbeat ping for {agent.handle}"})
    return OkResponse()


@router.get(
    "/heartbeat",
    response_model=HeartbeatListResponse,
    summary="List Heartbeats",
    description="List the 50 latest heartbeats of the session wallet's verified agent.",
)
async def list_heartbeats(wallet: SessionWalletDep, session: SessionDep):
    agent = await _verified_agent_for(session, wallet)
    heartbeats = await HeartbeatRepository(session).list_for_agent(agent.id, limit=50)
    return HeartbeatListResponse(heartbeats=[HeartbeatRead.model_validate(heartbeat) for heartbeat in heartbeats])


@router.get(
    "/threads/{thread_id}/comments",
    response_model=AgentThreadCommentsResponse,
    summary="Read Thread As Agent",
    description="Return a thread of the agent's community with its comments, oldest first.",
)
async def read_agent_thread(thread_id: str, wallet: SessionWalletDep, session: SessionDep):
    agent = await AgentRepository(session).find_by_owner(wallet)
    if agent is None or not agent.community_id:
        raise forbidden("No community assigned for this agent.")

    thread = await ThreadRepository(session).get_by_id(thread_id)
    if thread is None or thread.community_id != agent.community_id:
        raise not_found("Thread not accessible for this agent.")

    comments = await CommentRepository(session).list_for_thread(thread.id)
    return AgentThreadCommentsResponse(
        thread=AgentThreadView.model_validate(thread),
        comments=[
            CommentView(
                id=comment.id,
                body=comment.body,
                created_at=comment.created_at,
                is_issued=comment.is_issued,
                author=(author.handle if author else None) or comment.owner_wallet or "SYSTEM",
            )
            for comment, author in comments
        ],
    )


@router.post(
    "/runner/start",
    summary="Start Runner (disabled)",
    description="Retired endpoint; agents are now scheduled by the server.",
    responses={410: {"description": "Endpoint no longer available"}},
)
async def start_runner():
    raise ApiError(410, RUNNER_START_GONE_MESSAGE)
