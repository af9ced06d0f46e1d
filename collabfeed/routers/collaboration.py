"""Co-creator invitation routes."""
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from ..models import InviteStatus
from ..schemas import InviteCreate, InviteListResponse, InviteRespond, InviteResponse
from ..services import CollaborationService, PostRepository, require_owner
from .dependencies import get_collaboration, get_current_user_id, get_post_repository

router = APIRouter(tags=["collaboration"])


@router.post("/posts/{post_id}/invites", response_model=InviteResponse, status_code=status.HTTP_201_CREATED)
async def invite_endpoint(
    post_id: UUID,
    payload: InviteCreate,
    user_id: UUID = Depends(get_current_user_id),
    collaboration: CollaborationService = Depends(get_collaboration),
) -> InviteResponse:
    invite = collaboration.invite(post_id, user_id, payload.invitee_id)
    return InviteResponse.model_validate(invite)


@router.post("/posts/{post_id}/invites/respond", response_model=InviteResponse)
async def respond_endpoint(
    post_id: UUID,
    payload: InviteRespond,
    user_id: UUID = Depends(get_current_user_id),
    collaboration: CollaborationService = Depends(get_collaboration),
) -> InviteResponse:
    invite = collaboration.respond(post_id, user_id, payload.accept)
    return InviteResponse.model_validate(invite)


@router.delete("/posts/{post_id}/co-creators/me", status_code=status.HTTP_204_NO_CONTENT)
async def leave_post_endpoint(
    post_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    collaboration: CollaborationService = Depends(get_collaboration),
) -> Response:
    collaboration.remove_self(post_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/invites/", response_model=InviteListResponse)
async def my_invites_endpoint(
    invite_status: InviteStatus | None = Query(default=None, alias="status"),
    user_id: UUID = Depends(get_current_user_id),
    collaboration: CollaborationService = Depends(get_collaboration),
) -> InviteListResponse:
    invites = collaboration.list_invites_for(user_id, status=invite_status)
    return InviteListResponse(items=[InviteResponse.model_validate(invite) for invite in invites])


@router.get("/posts/{post_id}/invites", response_model=InviteListResponse)
async def post_invites_endpoint(
    post_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    posts: PostRepository = Depends(get_post_repository),
    collaboration: CollaborationService = Depends(get_collaboration),
) -> InviteListResponse:
    """Every invite row for a post; only the owner may read it."""

    require_owner(posts.get_post(post_id), user_id, action="view invites for this post")
    invites = collaboration.list_collaborators(post_id)
    return InviteListResponse(items=[InviteResponse.model_validate(invite) for invite in invites])
