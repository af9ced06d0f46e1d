"""Schemas for likes, comments and shares."""
from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..models import PostPrivacy


class LikeToggleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    post_id: UUID
    liked: bool
    like_count: int


class PostEngagementResponse(BaseModel):
    """Like/comment/share counters used by interactive UI."""

    model_config = ConfigDict(from_attributes=True)

    post_id: UUID
    like_count: int
    comment_count: int
    share_count: int
    viewer_has_liked: bool


class PostCommentCreate(BaseModel):
    body: str = Field(..., min_length=1)


class PostCommentResponse(BaseModel):
    id: UUID
    post_id: UUID
    author_id: UUID
    username: str | None = None
    display_name: str | None = None
    avatar_url: str | None = None
    body: str
    created_at: datetime


class PostCommentListResponse(BaseModel):
    items: list[PostCommentResponse]


class ShareCreate(BaseModel):
    message: str | None = None
    privacy: PostPrivacy | None = None
