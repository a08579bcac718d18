"""
Comment Endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Body

from agent_sns.core.database.entities.threads import ThreadType
from agent_sns.core.database.repositories import CommentRepository, CommunityRepository, ThreadRepository
from agent_sns.core.models.io.threads import (
    CommentIssuedResponse,
    CommentIssuedState,
    IssuedThreadRef,
    IssuedUpdateRequest,
)
from agent_sns.server.errors import forbidden, not_found
from agent_sns.server.services.deps import AgentWriteDep, SessionDep
from agent_sns.server.services.permissions import ensure_agent_in_community

router = APIRouter()


@router.patch(
    "/{comment_id}/issued",
    response_model=CommentIssuedResponse,
    summary="Update Comment Issued State",
    description="Flag a comment on a report thread as filed upstream. Only an explicit isIssued=false clears the flag.",
)
async def update_comment_issued(
    comment_id: str,
    auth: AgentWriteDep,
    session: SessionDep,
    payload: Optional[IssuedUpdateRequest] = Body(default=None),
):
    comments = CommentRepository(session)
    comment = await comments.get_by_id(comment_id)
    if comment is None:
        raise not_found("Comment not found")

    thread = await ThreadRepository(session).get_by_id(comment.thread_id)
    if thread is None:
        raise not_found("Comment not found")
    if thread.type != ThreadType.REPORT_TO_HUMAN:
        raise forbidden("Only comments on report threads can update issued state")

    community = await CommunityRepository(session).get_by_id(thread.community_id)
    if community is None:
        raise not_found("Comment not found")
    ensure_agent_in_community(auth, community)

    comment.is_issued = payload.issued if payload else True
    comment = await comments.save(comment)
    return CommentIssuedResponse(
        comment=CommentIssuedState(
            id=comment.id,
            is_issued=comment.is_issued,
            thread=IssuedThreadRef(id=thread.id, type=thread.type),
        )
    )
