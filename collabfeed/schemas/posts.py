"""Pydantic schemas for post resources and feed pages."""
from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..models import MediaKind, PostPrivacy


class MediaRefCreate(BaseModel):
    """An object already uploaded to the media store."""

    url: str = Field(..., min_length=1, max_length=1024)
    kind: MediaKind
    object_key: str | None = Field(default=None, max_length=512)


class PostCreate(BaseModel):
    """Payload used by API clients when constructing a post."""

    body: str | None = None
    privacy: PostPrivacy = PostPrivacy.FRIENDS
    allow_share: bool = True
    media: list[MediaRefCreate] = Field(default_factory=list)
    co_creator_ids: list[UUID] = Field(default_factory=list)


class PostUpdate(BaseModel):
    """Partial edit; omitted fields stay as they are and an empty body clears the text."""

    body: str | None = None
    privacy: PostPrivacy | None = None
    allow_share: bool | None = None


class ProfileStub(BaseModel):
    id: UUID
    username: str | None = None
    display_name: str | None = None
    avatar_url: str | None = None


class PostMediaItem(BaseModel):
    id: UUID
    url: str
    kind: MediaKind
    uploader_id: UUID
    position: int
    created_at: datetime


class SharedFrom(BaseModel):
    id: UUID
    available: bool


class PostResponse(BaseModel):
    """Serialized post enriched with authors, media and engagement."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    owner_id: UUID
    body: str | None = None
    privacy: PostPrivacy
    allow_share: bool
    created_at: datetime
    edited_at: datetime | None = None
    author: ProfileStub
    co_creator_ids: list[UUID] = Field(default_factory=list)
    co_creators: list[ProfileStub] = Field(default_factory=list)
    media: list[PostMediaItem] = Field(default_factory=list)
    like_count: int = 0
    comment_count: int = 0
    share_count: int = 0
    viewer_has_liked: bool = False
    viewer_can_edit: bool = False
    shared_from: SharedFrom | None = None


class FeedPageResponse(BaseModel):
    """One page of the feed; pass ``next_cursor`` back to continue."""

    items: list[PostResponse]
    next_cursor: str | None = None
