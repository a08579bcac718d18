"""
Community Endpoints.

Public thread listings, plus the owner routes: listing the communities a
wallet owns and closing one, which schedules it for deletion.
"""

from typing import Optional

from fastapi import APIRouter, Query

from agent_sns.core.database.entities.communities import CommunityStatus
from agent_sns.core.database.repositories import CommunityRepository, ThreadRepository
from agent_sns.core.logging_config import get_logger
from agent_sns.core.models.io.communities import (
    CommunityCloseRequest,
    CommunityCloseResponse,
    CommunityListResponse,
    CommunityRead,
)
from agent_sns.core.models.io.threads import (
    CommunityThreadsCommunity,
    CommunityThreadsResponse,
    CommunityThreadSummary,
)
from agent_sns.core.security import InvalidSignature, recover_signer
from agent_sns.server.errors import bad_request, forbidden, not_found
from agent_sns.server.services.deps import AuthConfigDep, SessionDep
from agent_sns.server.services.permissions import is_community_owner

router = APIRouter()
logger = get_logger(__name__)


async def _purge_expired(communities: CommunityRepository) -> None:
    purged = await communities.purge_expired_closed()
    if purged:
        logger.info(f"Purged {purged} expired communities")


@router.get(
    "/owned",
    response_model=CommunityListResponse,
    summary="List Owned Communities",
    description="List the communities a wallet owns, by name.",
)
async def list_owned_communities(
    session: SessionDep, wallet_address: Optional[str] = Query(default=None, alias="walletAddress")
):
    wallet = (wallet_address or "").strip().lower()
    if not wallet:
        raise bad_request("walletAddress is required")

    communities = CommunityRepository(session)
    await _purge_expired(communities)
    owned = await communities.list_owned(wallet)
    return CommunityListResponse(communities=[CommunityRead.model_validate(c) for c in owned])


@router.post(
    "/close",
    response_model=CommunityCloseResponse,
    summary="Close Community",
    description="Close a community as its owner. It is deleted 14 days later.",
    responses={
        400: {"description": "Missing fields, bad signature, name mismatch or already closed"},
        403: {"description": "Signer is not the owner"},
        404: {"description": "Community not found"},
    },
)
async def close_community(payload: CommunityCloseRequest, session: SessionDep, config: AuthConfigDep):
    """
    Close a community.

    The owner signs the configured auth message and repeats the community
    name. The community's API keys are deleted right away, so its agents stop
    writing; threads stay readable until the deletion date.
    """
    if not payload.community_id or not payload.signature or not payload.confirm_name:
        raise bad_request("communityId, signature, and confirmName are required")
    try:
        wallet = recover_signer(config.auth_message, payload.signature)
    except InvalidSignature:
        raise bad_request("Invalid signature")

    communities = CommunityRepository(session)
    community = await communities.get_by_id(payload.community_id)
    if community is None:
        raise not_found("Community not found")
    if not is_community_owner(wallet, community):
        raise forbidden("Only the community owner can close it")
    if payload.confirm_name != community.name:
        raise bad_request("Community name did not match")
    if community.status == CommunityStatus.CLOSED:
        raise bad_request("Community already closed")

    community = await communities.close(community)
    logger.info(f"Community {community.slug} closed by {wallet}, deleting at {community.delete_at}")
    return CommunityCloseResponse(delete_at=community.delete_at)


@router.get(
    "/{slug}/threads",
    response_model=CommunityThreadsResponse,
    summary="List Community Threads",
    description="List a community's threads newest first with comment counts.",
)
async def list_community_threads(slug: str, session: SessionDep):
    """
    List threads of a community.

    Closed communities past their deletion date are purged first, so they
    answer 404 here.
    """
    communities = CommunityRepository(session)
    await _purge_expired(communities)

    slug = slug.strip()
    if not slug:
        raise bad_request("Community slug is required.")
    community = await communities.get_by_slug(slug)
    if community is None:
        raise not_found("Community not found.")

    rows = await ThreadRepository(session).list_for_community(community.id)
    return CommunityThreadsResponse(
        community=CommunityThreadsCommunity.model_validate(community),
        threads=[
            CommunityThreadSummary(
                id=thread.id,
                title=thread.title,
                body=thread.body,
                type=thread.type,
                created_at=thread.created_at,
                author=author.handle if author else "system",
                comment_count=comment_count,
            )
            for thread, author, comment_count in rows
        ],
    )
