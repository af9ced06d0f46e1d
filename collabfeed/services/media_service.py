"""Media attachments on posts with per-contributor ownership."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..config import get_settings
from ..models import MediaKind, PostMedia
from .errors import NotAuthorized, NotFound, PostEngineError, ValidationError
from .permissions import load_co_creator_ids, require_author
from .persistence import commit_or_raise, get_post_or_raise
from .spaces_service import MediaStore, ObjectRef

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MediaUpload:
    """One file in a multi-item upload."""

    filename: str | None
    content_type: str | None
    data: bytes


@dataclass
class MediaAttachResult:
    """Outcome of a single upload item; failures carry the error code."""

    index: int
    filename: str | None
    media: PostMedia | None = None
    error: str | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.media is not None


def coerce_media_kind(value: MediaKind | str) -> MediaKind:
    try:
        return MediaKind(value)
    except ValueError as exc:
        raise ValidationError(f"Unsupported media kind: {value!r}") from exc


def kind_for_content_type(content_type: str | None) -> MediaKind:
    normalized = (content_type or "").strip().lower()
    if normalized.startswith("image/"):
        return MediaKind.IMAGE
    if normalized.startswith("video/"):
        return MediaKind.VIDEO
    raise ValidationError(f"Unsupported content type: {content_type or 'unknown'}")


def check_media_size(kind: MediaKind, size: int) -> None:
    settings = get_settings()
    limit = settings.media_max_image_bytes if kind is MediaKind.IMAGE else settings.media_max_video_bytes
    if size <= 0:
        raise ValidationError("Uploaded file is empty")
    if size > limit:
        raise ValidationError(f"File too large for {kind.value}: limit is {limit} bytes")


def discard_stored_object(store: MediaStore, key: str | None) -> None:
    """Delete a stored object, logging instead of raising on failure."""

    if not key:
        return
    try:
        store.delete_object(key)
    except PostEngineError:
        logger.warning("Could not delete stored media object %s", key, exc_info=True)


class MediaAttachmentManager:
    def __init__(self, db: Session, *, store: MediaStore) -> None:
        self.db = db
        self.store = store

    def attach(
        self,
        post_id: UUID,
        uploader_id: UUID,
        object_ref: ObjectRef | str,
        kind: MediaKind | str,
    ) -> PostMedia:
        """Link an already stored object to a post."""

        post = get_post_or_raise(self.db, post_id)
        require_author(self.db, post, uploader_id, action="add media to this post")
        media_kind = coerce_media_kind(kind)

        if isinstance(object_ref, ObjectRef):
            url, key = object_ref.url, object_ref.key
        else:
            url, key = object_ref, None
        if not url or not url.strip():
            raise ValidationError("Media URL is required")

        next_position = self.db.scalar(
            select(func.coalesce(func.max(PostMedia.position), -1) + 1).where(PostMedia.post_id == post_id)
        )
        media = PostMedia(
            post_id=post_id,
            url=url.strip(),
            object_key=key,
            kind=media_kind.value,
            uploader_id=uploader_id,
            position=int(next_position or 0),
        )
        self.db.add(media)
        commit_or_raise(self.db, "attach media")
        self.db.refresh(media)
        return media

    def upload_and_attach(
        self,
        post_id: UUID,
        uploader_id: UUID,
        items: Sequence[MediaUpload],
    ) -> list[MediaAttachResult]:
        """Store and attach each item independently, reporting every outcome."""

        post = get_post_or_raise(self.db, post_id)
        require_author(self.db, post, uploader_id, action="add media to this post")

        results: list[MediaAttachResult] = []
        for index, item in enumerate(items):
            result = MediaAttachResult(index=index, filename=item.filename)
            ref: ObjectRef | None = None
            try:
                kind = kind_for_content_type(item.content_type)
                check_media_size(kind, len(item.data))
                ref = self.store.put_object(item.data, item.content_type or "", filename=item.filename)
                result.media = self.attach(post_id, uploader_id, ref, kind)
            except PostEngineError as exc:
                result.error = exc.code
                result.message = exc.message
                if ref is not None:
                    discard_stored_object(self.store, ref.key)
                logger.info("Media item %d for post %s failed: %s", index, post_id, exc.code)
            results.append(result)
        return results

    def remove(self, media_id: UUID, caller_id: UUID) -> None:
        """Owner removes anything; a co-creator removes only what they uploaded.

        The last item of a post without text stays attached.
        """

        media = self.db.get(PostMedia, media_id)
        if media is None:
            raise NotFound("Media not found")
        post = get_post_or_raise(self.db, media.post_id)

        if caller_id != post.owner_id:
            co_creator_ids = load_co_creator_ids(self.db, post.id)
            if caller_id not in co_creator_ids or media.uploader_id != caller_id:
                raise NotAuthorized("Not allowed to remove this media")

        if post.body is None:
            remaining = self.db.scalar(
                select(func.count()).select_from(PostMedia).where(PostMedia.post_id == post.id)
            )
            if (remaining or 0) <= 1:
                raise ValidationError("A post needs text or media")

        key = media.object_key
        self.db.delete(media)
        commit_or_raise(self.db, "remove media")
        discard_stored_object(self.store, key)

    def list_media(self, post_id: UUID) -> list[PostMedia]:
        get_post_or_raise(self.db, post_id)
        stmt = (
            select(PostMedia)
            .where(PostMedia.post_id == post_id)
            .order_by(PostMedia.position.asc(), PostMedia.created_at.asc())
        )
        return list(self.db.scalars(stmt))


__all__ = [
    "MediaUpload",
    "MediaAttachResult",
    "MediaAttachmentManager",
    "coerce_media_kind",
    "kind_for_content_type",
    "check_media_size",
    "discard_stored_object",
]
