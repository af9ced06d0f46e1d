"""Post lifecycle: create, edit and delete collaborative posts."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from ..models import CollaborationInvite, MediaKind, Post, PostComment, PostLike, PostMedia, PostPrivacy, post_co_creators
from ..models.base import utcnow
from .collaboration_service import CollaborationService
from .errors import NotAllowed, NotFound, ValidationError
from .media_service import coerce_media_kind, discard_stored_object
from .notification_service import NotificationEmitter
from .permissions import require_author, require_owner
from .persistence import commit_or_raise, flush_or_raise, get_post_or_raise
from .spaces_service import MediaStore
from .visibility import coerce_privacy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MediaRef:
    """An already stored object to attach when the post is created."""

    url: str
    kind: MediaKind | str
    object_key: str | None = None


class PostRepository:
    def __init__(
        self,
        db: Session,
        *,
        notifier: NotificationEmitter,
        store: MediaStore | None = None,
    ) -> None:
        self.db = db
        self.store = store
        self.invites = CollaborationService(db, notifier=notifier)

    def create_post(
        self,
        owner_id: UUID,
        body: str | None,
        privacy: PostPrivacy | str = PostPrivacy.FRIENDS,
        media: Sequence[MediaRef] = (),
        co_creator_ids: Iterable[UUID] | None = None,
        *,
        allow_share: bool = True,
    ) -> Post:
        """Persist a post and its initial media together, then invite any requested co-creators."""

        post_privacy = coerce_privacy(privacy)
        text = (body or "").strip() or None
        media_rows: list[tuple[str, MediaKind, str | None]] = []
        for item in media:
            url = (item.url or "").strip()
            if not url:
                raise ValidationError("Media URL is required")
            media_rows.append((url, coerce_media_kind(item.kind), item.object_key))
        if text is None and not media_rows:
            raise ValidationError("A post needs text or media")

        post = Post(owner_id=owner_id, body=text, privacy=post_privacy.value, allow_share=allow_share)
        self.db.add(post)
        flush_or_raise(self.db, "create post")
        self.db.add_all(
            PostMedia(
                post_id=post.id,
                url=url,
                object_key=key,
                kind=kind.value,
                uploader_id=owner_id,
                position=position,
            )
            for position, (url, kind, key) in enumerate(media_rows)
        )
        commit_or_raise(self.db, "create post")
        self.db.refresh(post)

        for invitee_id in dict.fromkeys(co_creator_ids or ()):
            try:
                self.invites.invite(post.id, owner_id, invitee_id)
            except (ValidationError, NotAllowed, NotFound) as exc:
                logger.info("Skipped co-creator invite for %s on post %s: %s", invitee_id, post.id, exc.code)
        return post

    def update_post(
        self,
        post_id: UUID,
        caller_id: UUID,
        *,
        body: str | None = None,
        privacy: PostPrivacy | str | None = None,
        allow_share: bool | None = None,
    ) -> Post:
        """Apply a partial edit. ``body=""`` clears the text when media remains."""

        post = get_post_or_raise(self.db, post_id)
        require_author(self.db, post, caller_id)

        changed = False
        if body is not None:
            text = body.strip() or None
            if text is None and not self._has_media(post_id):
                raise ValidationError("A post needs text or media")
            if text != post.body:
                post.body = text
                changed = True
        if privacy is not None:
            post_privacy = coerce_privacy(privacy)
            if post_privacy.value != post.privacy:
                post.privacy = post_privacy.value
                changed = True
        if allow_share is not None and allow_share != post.allow_share:
            post.allow_share = allow_share
            changed = True

        if not changed:
            return post

        post.edited_at = utcnow()
        commit_or_raise(self.db, "update post")
        self.db.refresh(post)
        return post

    def delete_post(self, post_id: UUID, caller_id: UUID) -> None:
        """Hard-delete a post with its own child rows; reshares keep a dangling origin."""

        post = get_post_or_raise(self.db, post_id)
        require_owner(post, caller_id, action="delete this post")

        object_keys = [
            key
            for key in self.db.scalars(select(PostMedia.object_key).where(PostMedia.post_id == post_id))
            if key
        ]
        self.db.execute(delete(PostLike).where(PostLike.post_id == post_id))
        self.db.execute(delete(PostComment).where(PostComment.post_id == post_id))
        self.db.execute(delete(PostMedia).where(PostMedia.post_id == post_id))
        self.db.execute(delete(CollaborationInvite).where(CollaborationInvite.post_id == post_id))
        self.db.execute(delete(post_co_creators).where(post_co_creators.c.post_id == post_id))
        self.db.delete(post)
        commit_or_raise(self.db, "delete post")

        if self.store is not None:
            for key in object_keys:
                discard_stored_object(self.store, key)

    def get_post(self, post_id: UUID) -> Post:
        return get_post_or_raise(self.db, post_id)

    def _has_media(self, post_id: UUID) -> bool:
        count = self.db.scalar(select(func.count()).select_from(PostMedia).where(PostMedia.post_id == post_id))
        return bool(count)


__all__ = ["MediaRef", "PostRepository"]
