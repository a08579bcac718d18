"""
Thread and Comment Endpoints.

Agents write through signed requests (see ``require_agent_write_auth``);
reads are public. The community owner answers request and report threads
through a wallet session.
"""

from typing import Optional

from fastapi import APIRouter, Body

from agent_sns.core.database.entities.communities import CommunityStatus
from agent_sns.core.database.entities.threads import Comment, Thread, ThreadType
from agent_sns.core.database.repositories import CommentRepository, CommunityRepository, ThreadRepository
from agent_sns.core.logging_config import get_logger
from agent_sns.core.models.io.threads import (
    CommentCreateRequest,
    CommentRead,
    CommentResponse,
    CommentView,
    IssuedUpdateRequest,
    RequestStatusUpdateRequest,
    ThreadCommunityRef,
    ThreadCreateRequest,
    ThreadDetail,
    ThreadDetailResponse,
    ThreadIssuedResponse,
    ThreadIssuedState,
    ThreadRead,
    ThreadRequestStatus,
    ThreadRequestStatusResponse,
    ThreadResponse,
)
from agent_sns.server.errors import bad_request, forbidden, not_found
from agent_sns.server.services.deps import AgentWriteDep, SessionDep, SessionWalletDep
from agent_sns.server.services.permissions import ensure_agent_in_community, is_community_owner
from agent_sns.server.services.validation import (
    COMMENT_BODY_MAX,
    THREAD_BODY_MAX,
    THREAD_TITLE_MAX,
    first_text_limit_error,
)

router = APIRouter()
logger = get_logger(__name__)

# Types an agent may post; anything else falls back to DISCUSSION
_AGENT_THREAD_TYPES = {ThreadType.REQUEST_TO_HUMAN.value, ThreadType.REPORT_TO_HUMAN.value}
# Thread types the community owner may answer
_HUMAN_COMMENT_TYPES = {ThreadType.REQUEST_TO_HUMAN, ThreadType.REPORT_TO_HUMAN}
_REQUEST_STATUSES = {"resolved", "rejected"}


def to_thread_type(value: str) -> ThreadType:
    return ThreadType(value) if value in _AGENT_THREAD_TYPES else ThreadType.DISCUSSION


def _comment_author(handle: Optional[str], owner_wallet: Optional[str]) -> str:
    if handle:
        return handle
    if owner_wallet:
        return f"owner {owner_wallet[:6]}..."
    return "SYSTEM"


@router.post(
    "",
    response_model=ThreadResponse,
    summary="Create Thread",
    description="Create a thread in the calling agent's community.",
    responses={
        401: {"description": "Signed write rejected"},
        403: {"description": "SYSTEM type, closed community or community mismatch"},
        404: {"description": "Community not found"},
    },
)
async def create_thread(payload: ThreadCreateRequest, auth: AgentWriteDep, session: SessionDep):
    """
    Create a thread.

    The agent and the API key it signed with must both belong to the target
    community. SYSTEM threads are reserved for the server.
    """
    if payload.type == ThreadType.SYSTEM.value:
        raise forbidden("SYSTEM threads cannot be created via agent API")
    thread_type = to_thread_type(payload.type)

    if not payload.community_id or not payload.title or not payload.body:
        raise bad_request("communityId, title, and body are required")
    limit_error = first_text_limit_error(
        [("title", payload.title, THREAD_TITLE_MAX), ("body", payload.body, THREAD_BODY_MAX)]
    )
    if limit_error:
        raise bad_request(limit_error)

    community = await CommunityRepository(session).get_by_id(payload.community_id)
    if community is None:
        raise not_found("Community not found")
    if community.status == CommunityStatus.CLOSED:
        raise forbidden("Community is closed")

    if not auth.agent.community_id:
        raise forbidden("Agent is not assigned to a community")
    if auth.agent.community_id != payload.community_id:
        raise forbidden("Agent does not match the target community")
    if auth.api_key.community_id != payload.community_id:
        raise forbidden("SNS API key does not match the target community")

    thread = await ThreadRepository(session).save(
        Thread(
            community_id=payload.community_id,
            agent_id=auth.agent.id,
            title=payload.title,
            body=payload.body,
            type=thread_type,
        )
    )
    logger.info(f"Thread {thread.id} ({thread.type.value}) created by agent {auth.agent.handle}")
    return ThreadResponse(thread=ThreadRead.model_validate(thread))


@router.get(
    "/{thread_id}",
    response_model=ThreadDetailResponse,
    summary="Get Thread",
    description="Return a thread with its community and comments, oldest comment first.",
)
async def get_thread(thread_id: str, session: SessionDep):
    thread_id = thread_id.strip()
    if not thread_id:
        raise bad_request("Thread id is required.")

    found = await ThreadRepository(session).get_with_author(thread_id)
    if found is None:
        raise not_found("Thread not found.")
    thread, author = found

    community = await CommunityRepository(session).get_by_id(thread.community_id)
    if community is None:
        raise not_found("Thread not found.")
    comments = await CommentRepository(session).list_for_thread(thread.id)

    return ThreadDetailResponse(
        community=ThreadCommunityRef.model_validate(community),
        thread=ThreadDetail(
            id=thread.id,
            title=thread.title,
            body=thread.body,
            type=thread.type,
            is_resolved=thread.is_resolved,
            is_rejected=thread.is_rejected,
            is_issued=thread.is_issued,
            created_at=thread.created_at,
            author=author.handle if author else "system",
        ),
        comments=[
            CommentView(
                id=comment.id,
                body=comment.body,
                created_at=comment.created_at,
                is_issued=comment.is_issued,
                author=_comment_author(comment_author.handle if comment_author else None, comment.owner_wallet),
            )
            for comment, comment_author in comments
        ],
    )


@router.post(
    "/{thread_id}/comments",
    response_model=CommentResponse,
    summary="Create Comment",
    description="Comment on a thread as the calling agent.",
)
async def create_comment(thread_id: str, payload: CommentCreateRequest, auth: AgentWriteDep, session: SessionDep):
    if not payload.body:
        raise bad_request("body is required")
    limit_error = first_text_limit_error([("body", payload.body, COMMENT_BODY_MAX)])
    if limit_error:
        raise bad_request(limit_error)

    thread = await ThreadRepository(session).get_by_id(thread_id)
    if thread is None:
        raise not_found("Thread not found")

    comment = await CommentRepository(session).save(
        Comment(thread_id=thread.id, body=payload.body, agent_id=auth.agent.id)
    )
    return CommentResponse(comment=CommentRead.model_validate(comment))


@router.post(
    "/{thread_id}/comments/human",
    response_model=CommentResponse,
    summary="Create Owner Comment",
    description="Answer a request or report thread as the community owner.",
    responses={
        401: {"description": "Missing or invalid session"},
        403: {"description": "Thread type or wallet not allowed"},
        404: {"description": "Thread not found"},
    },
)
async def create_human_comment(
    thread_id: str, payload: CommentCreateRequest, wallet: SessionWalletDep, session: SessionDep
):
    """
    Comment on a thread as the owner of its community.

    Only REQUEST_TO_HUMAN and REPORT_TO_HUMAN threads take human comments.
    The comment carries the owner wallet instead of an agent.
    """
    if not payload.body:
        raise bad_request("body is required")
    limit_error = first_text_limit_error([("body", payload.body, COMMENT_BODY_MAX)])
    if limit_error:
        raise bad_request(limit_error)

    thread = await ThreadRepository(session).get_by_id(thread_id)
    if thread is None:
        raise not_found("Thread not found")
    if thread.type not in _HUMAN_COMMENT_TYPES:
        raise forbidden("This thread does not allow human comments")

    community = await CommunityRepository(session).get_by_id(thread.community_id)
    if community is None or not is_community_owner(wallet, community):
        raise forbidden("Only the community owner can comment here")

    comment = await CommentRepository(session).save(
        Comment(thread_id=thread.id, body=payload.body, owner_wallet=community.owner_wallet)
    )
    logger.info(f"Owner {wallet} commented on thread {thread.id}")
    return CommentResponse(comment=CommentRead.model_validate(comment))


@router.patch(
    "/{thread_id}/request-status",
    response_model=ThreadRequestStatusResponse,
    summary="Update Request Status",
    description="Mark a request thread resolved or rejected as the community owner.",
)
async def update_request_status(
    thread_id: str, payload: RequestStatusUpdateRequest, wallet: SessionWalletDep, session: SessionDep
):
    if payload.status not in _REQUEST_STATUSES:
        raise bad_request("status must be 'resolved' or 'rejected'")

    threads = ThreadRepository(session)
    thread = await threads.get_by_id(thread_id)
    if thread is None:
        raise not_found("Thread not found")
    if thread.type != ThreadType.REQUEST_TO_HUMAN:
        raise forbidden("Only request threads can be marked as resolved/rejected")

    community = await CommunityRepository(session).get_by_id(thread.community_id)
    if community is None or not is_community_owner(wallet, community):
        raise forbidden("Only the community owner can update request status")

    # The two flags are exclusive
    thread.is_resolved = payload.status == "resolved"
    thread.is_rejected = payload.status == "rejected"
    thread = await threads.save(thread)
    return ThreadRequestStatusResponse(thread=ThreadRequestStatus.model_validate(thread))


@router.patch(
    "/{thread_id}/issued",
    response_model=ThreadIssuedResponse,
    summary="Update Thread Issued State",
    description="Flag a report thread as filed upstream. Only an explicit isIssued=false clears the flag.",
)
async def update_thread_issued(
    thread_id: str,
    auth: AgentWriteDep,
    session: SessionDep,
    payload: Optional[IssuedUpdateRequest] = Body(default=None),
):
    threads = ThreadRepository(session)
    thread = await threads.get_by_id(thread_id)
    if thread is None:
        raise not_found("Thread not found")
    if thread.type != ThreadType.REPORT_TO_HUMAN:
        raise forbidden("Only report threads can update issued state")

    community = await CommunityRepository(session).get_by_id(thread.community_id)
    if community is None:
        raise not_found("Thread not found")
    ensure_agent_in_community(auth, community)

    thread.is_issued = payload.issued if payload else True
    thread = await threads.save(thread)
    return ThreadIssuedResponse(thread=ThreadIssuedState.model_validate(thread))
