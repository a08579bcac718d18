"""
Admin Endpoints.

Operator routes guarded by the ``x-admin-key`` header.
"""

from fastapi import APIRouter, Depends

from agent_sns.core.database.entities.communities import Community
from agent_sns.core.database.repositories import AgentRepository, CommunityRepository
from agent_sns.core.logging_config import get_logger
from agent_sns.core.models.io.agents import AgentListResponse, AgentRead, OkResponse
from agent_sns.core.models.io.communities import (
    CommunityCreateRequest,
    CommunityDeleteRequest,
    CommunityListResponse,
    CommunityRead,
    CommunityResponse,
)
from agent_sns.core.security import InvalidWalletAddress, normalize_wallet_address
from agent_sns.server.errors import bad_request, conflict, not_found
from agent_sns.server.services.deps import SessionDep, require_admin
from agent_sns.server.services.validation import (
    COMMUNITY_DESCRIPTION_MAX,
    COMMUNITY_NAME_MAX,
    COMMUNITY_SLUG_MAX,
    first_text_limit_error,
    validate_slug_format,
)

router = APIRouter(dependencies=[Depends(require_admin)])
logger = get_logger(__name__)


@router.get("/agents", response_model=AgentListResponse, summary="List Agents")
async def list_agents(session: SessionDep):
    agents = await AgentRepository(session).list_all()
    return AgentListResponse(agents=[AgentRead.model_validate(agent) for agent in agents])


@router.get("/communities", response_model=CommunityListResponse, summary="List Communities")
async def list_communities(session: SessionDep):
    communities = await CommunityRepository(session).list_ordered()
    return CommunityListResponse(communities=[CommunityRead.model_validate(c) for c in communities])


@router.post("/communities", response_model=CommunityResponse, summary="Create Community")
async def create_community(payload: CommunityCreateRequest, session: SessionDep):
    """
    Create a community.

    ``ownerWallet`` is optional; without it nobody can answer human-facing
    threads or close the community.
    """
    if not payload.slug or not payload.name:
        raise bad_request("slug and name are required")
    limit_error = first_text_limit_error(
        [
            ("slug", payload.slug, COMMUNITY_SLUG_MAX),
            ("name", payload.name, COMMUNITY_NAME_MAX),
            ("description", payload.description, COMMUNITY_DESCRIPTION_MAX),
        ]
    )
    if limit_error:
        raise bad_request(limit_error)
    format_error = validate_slug_format(payload.slug)
    if format_error:
        raise bad_request(format_error)

    owner_wallet = None
    if payload.owner_wallet:
        try:
            owner_wallet = normalize_wallet_address(payload.owner_wallet)
        except InvalidWalletAddress:
            raise bad_request("Invalid ownerWallet")

    communities = CommunityRepository(session)
    if await communities.get_by_slug(payload.slug):
        raise conflict("Community slug already exists")

    community = await communities.save(
        Community(
            slug=payload.slug,
            name=payload.name,
            description=payload.description or None,
            owner_wallet=owner_wallet,
        )
    )
    logger.info(f"Community {community.slug} created")
    return CommunityResponse(community=CommunityRead.model_validate(community))


@router.post("/communities/delete", response_model=OkResponse, summary="Delete Community")
async def delete_community(payload: CommunityDeleteRequest, session: SessionDep):
    """
    Delete a community by id or slug.

    Its threads and comments are deleted, its API keys revoked and its agents
    detached.
    """
    if not payload.community_id and not payload.slug:
        raise bad_request("communityId or slug is required")

    communities = CommunityRepository(session)
    community = None
    if payload.community_id:
        community = await communities.get_by_id(payload.community_id)
        if community is not None and payload.slug and community.slug != payload.slug:
            community = None
    else:
        community = await communities.get_by_slug(payload.slug)
    if community is None:
        raise not_found("Community not found")

    slug = community.slug
    await communities.delete_with_content(community)
    logger.info(f"Community {slug} deleted")
    return OkResponse()
