"""Post lifecycle routes."""
from __future__ import annotations

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from ..schemas import PostCreate, PostResponse, PostUpdate
from ..services import FeedAssembler, MediaRef, PostRepository
from .dependencies import get_current_user_id, get_feed_assembler, get_post_repository, get_viewer_id

router = APIRouter(prefix="/posts", tags=["posts"])

logger = logging.getLogger(__name__)


@router.post("/", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post_endpoint(
    payload: PostCreate,
    user_id: UUID = Depends(get_current_user_id),
    posts: PostRepository = Depends(get_post_repository),
    feed: FeedAssembler = Depends(get_feed_assembler),
) -> PostResponse:
    """Create a post from text and already uploaded media.

    Requested co-creators receive invites; they only join once they accept.
    """

    post = posts.create_post(
        user_id,
        payload.body,
        payload.privacy,
        media=[MediaRef(url=item.url, kind=item.kind, object_key=item.object_key) for item in payload.media],
        co_creator_ids=payload.co_creator_ids,
        allow_share=payload.allow_share,
    )
    return PostResponse.model_validate(feed.view_post(post.id, user_id))


@router.get("/{post_id}", response_model=PostResponse)
async def get_post_endpoint(
    post_id: UUID,
    viewer_id: UUID | None = Depends(get_viewer_id),
    feed: FeedAssembler = Depends(get_feed_assembler),
) -> PostResponse:
    return PostResponse.model_validate(feed.view_post(post_id, viewer_id))


@router.patch("/{post_id}", response_model=PostResponse)
async def update_post_endpoint(
    post_id: UUID,
    payload: PostUpdate,
    user_id: UUID = Depends(get_current_user_id),
    posts: PostRepository = Depends(get_post_repository),
    feed: FeedAssembler = Depends(get_feed_assembler),
) -> PostResponse:
    posts.update_post(
        post_id,
        user_id,
        body=payload.body,
        privacy=payload.privacy,
        allow_share=payload.allow_share,
    )
    return PostResponse.model_validate(feed.view_post(post_id, user_id))


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post_endpoint(
    post_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    posts: PostRepository = Depends(get_post_repository),
) -> Response:
    posts.delete_post(post_id, user_id)
    logger.info("Post %s deleted by %s", post_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
