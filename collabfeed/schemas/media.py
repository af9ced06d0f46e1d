"""Schemas for post media attachments."""
from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..models import MediaKind


class MediaResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    post_id: UUID
    url: str
    kind: MediaKind
    uploader_id: UUID
    position: int
    created_at: datetime


class MediaListResponse(BaseModel):
    items: list[MediaResponse]


class MediaUploadItemResult(BaseModel):
    """Outcome of one file in a multi-file upload."""

    index: int
    filename: str | None = None
    ok: bool
    media: MediaResponse | None = None
    error: str | None = None
    detail: str | None = None


class MediaUploadResponse(BaseModel):
    items: list[MediaUploadItemResult] = Field(default_factory=list)
    attached: int = 0
    failed: int = 0
