"""Likes, comments and shares on posts the caller can see."""
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from ..schemas import (
    LikeToggleResponse,
    PostCommentCreate,
    PostCommentListResponse,
    PostCommentResponse,
    PostEngagementResponse,
    PostResponse,
    ShareCreate,
)
from ..services import EngagementAggregator, FeedAssembler
from .dependencies import get_current_user_id, get_engagement, get_feed_assembler, get_viewer_id

router = APIRouter(tags=["engagement"])


@router.post("/posts/{post_id}/likes/toggle", response_model=LikeToggleResponse)
async def toggle_like_endpoint(
    post_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    feed: FeedAssembler = Depends(get_feed_assembler),
    engagement: EngagementAggregator = Depends(get_engagement),
) -> LikeToggleResponse:
    feed.ensure_visible(post_id, user_id)
    return LikeToggleResponse.model_validate(engagement.toggle_like(post_id, user_id))


@router.get("/posts/{post_id}/engagement", response_model=PostEngagementResponse)
async def engagement_endpoint(
    post_id: UUID,
    viewer_id: UUID | None = Depends(get_viewer_id),
    feed: FeedAssembler = Depends(get_feed_assembler),
    engagement: EngagementAggregator = Depends(get_engagement),
) -> PostEngagementResponse:
    feed.ensure_visible(post_id, viewer_id)
    return PostEngagementResponse.model_validate(engagement.snapshot(post_id, viewer_id))


@router.get("/posts/{post_id}/comments", response_model=PostCommentListResponse)
async def list_comments_endpoint(
    post_id: UUID,
    viewer_id: UUID | None = Depends(get_viewer_id),
    feed: FeedAssembler = Depends(get_feed_assembler),
    engagement: EngagementAggregator = Depends(get_engagement),
) -> PostCommentListResponse:
    feed.ensure_visible(post_id, viewer_id)
    items = engagement.list_comments(post_id)
    return PostCommentListResponse(items=[PostCommentResponse(**item) for item in items])


@router.post(
    "/posts/{post_id}/comments",
    response_model=PostCommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_comment_endpoint(
    post_id: UUID,
    payload: PostCommentCreate,
    user_id: UUID = Depends(get_current_user_id),
    feed: FeedAssembler = Depends(get_feed_assembler),
    engagement: EngagementAggregator = Depends(get_engagement),
) -> PostCommentResponse:
    feed.ensure_visible(post_id, user_id)
    comment = engagement.add_comment(post_id, user_id, payload.body)
    return PostCommentResponse(**engagement.describe_comment(comment.id))


@router.delete("/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_comment_endpoint(
    comment_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    engagement: EngagementAggregator = Depends(get_engagement),
) -> Response:
    engagement.delete_comment(comment_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/posts/{post_id}/shares", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def share_post_endpoint(
    post_id: UUID,
    payload: ShareCreate | None = None,
    user_id: UUID = Depends(get_current_user_id),
    feed: FeedAssembler = Depends(get_feed_assembler),
    engagement: EngagementAggregator = Depends(get_engagement),
) -> PostResponse:
    feed.ensure_visible(post_id, user_id)
    options = payload or ShareCreate()
    share = engagement.share(post_id, user_id, message=options.message, privacy=options.privacy)
    return PostResponse.model_validate(feed.view_post(share.id, user_id))
