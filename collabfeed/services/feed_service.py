"""Personalised, paginated feed assembly with batched enrichment."""
from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Sequence
from uuid import UUID

from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session

from ..config import get_settings
from ..models import Post, PostMedia, PostPrivacy, User, post_co_creators
from .engagement_service import EngagementAggregator, EngagementCounts
from .errors import NotFound, ValidationError
from .permissions import is_author, load_co_creator_ids, load_co_creator_map
from .persistence import get_post_or_raise
from .relationship_service import RelationshipGraph
from .visibility import PostAudience, can_view, needs_relationship

logger = logging.getLogger(__name__)

_CURSOR_SEPARATOR = "|"


@dataclass(frozen=True)
class FeedCursor:
    """Position after the last returned post, ordered by (created_at desc, id asc)."""

    created_at: datetime
    post_id: UUID

    @classmethod
    def after(cls, post: Post) -> "FeedCursor":
        return cls(created_at=post.created_at, post_id=post.id)

    def encode(self) -> str:
        raw = f"{self.created_at.isoformat()}{_CURSOR_SEPARATOR}{self.post_id}"
        return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii")

    @classmethod
    def decode(cls, token: str) -> "FeedCursor":
        try:
            raw = base64.urlsafe_b64decode(token.encode("ascii")).decode("utf-8")
            stamp, post_id = raw.split(_CURSOR_SEPARATOR, 1)
            return cls(created_at=datetime.fromisoformat(stamp), post_id=UUID(post_id))
        except (binascii.Error, UnicodeError, ValueError) as exc:
            raise ValidationError("Malformed feed cursor") from exc


@dataclass
class FeedPage:
    items: list[dict[str, Any]] = field(default_factory=list)
    next_cursor: str | None = None


def _profile_stub(user: User | None, user_id: UUID) -> dict[str, Any]:
    if user is None:
        return {"id": user_id, "username": None, "display_name": None, "avatar_url": None}
    return {
        "id": user.id,
        "username": user.username,
        "display_name": user.display_name,
        "avatar_url": user.avatar_url,
    }


class FeedAssembler:
    def __init__(
        self,
        db: Session,
        *,
        relationships: RelationshipGraph,
        engagement: EngagementAggregator | None = None,
    ) -> None:
        self.db = db
        self.relationships = relationships
        self.engagement = engagement or EngagementAggregator(db)

    def assemble(
        self,
        viewer_id: UUID | None,
        cursor: str | None = None,
        page_size: int | None = None,
        author_id: UUID | None = None,
    ) -> FeedPage:
        """Return the next page of posts visible to ``viewer_id``.

        Candidates are read in windows of ``page_size + 1`` and filtered with
        the visibility rules; reading continues until one extra visible post
        proves another page exists or the store runs out. At most
        ``feed_max_windows`` windows are read per call; a page cut short that
        way may hold fewer items and resumes after the last candidate scanned.
        """

        settings = get_settings()
        size = settings.feed_default_page_size if page_size is None else page_size
        if size < 1 or size > settings.feed_max_page_size:
            raise ValidationError(f"Page size must be between 1 and {settings.feed_max_page_size}")

        position = FeedCursor.decode(cursor) if cursor else None
        collected: list[Post] = []
        co_creators: dict[UUID, list[UUID]] = {}
        windows = 0
        exhausted = False
        while True:
            windows += 1
            window = self._candidate_window(viewer_id, position, size + 1, author_id)
            window_co_creators = load_co_creator_map(self.db, [post.id for post in window])
            co_creators.update(window_co_creators)
            collected.extend(self._visible(window, viewer_id, window_co_creators))
            if len(collected) > size:
                break
            if len(window) <= size:
                exhausted = True
                break
            position = FeedCursor.after(window[-1])
            if windows >= settings.feed_max_windows:
                break

        page = collected[:size]
        next_cursor = None
        if len(collected) > size:
            next_cursor = FeedCursor.after(page[-1]).encode()
        elif not exhausted and position is not None:
            next_cursor = position.encode()
        logger.debug("Feed page for %s: %d items from %d window(s)", viewer_id, len(page), windows)
        return FeedPage(items=self.build_views(page, viewer_id, co_creators), next_cursor=next_cursor)

    def ensure_visible(self, post_id: UUID, viewer_id: UUID | None) -> tuple[Post, list[UUID]]:
        """Return the post and its co-creators, or raise ``NotFound`` when the viewer may not see it."""

        post = get_post_or_raise(self.db, post_id)
        co_creator_ids = load_co_creator_ids(self.db, post_id)
        audience = PostAudience.of(post, co_creator_ids)
        connected = False
        if needs_relationship(audience, viewer_id):
            connected = self.relationships.are_connected(viewer_id, post.owner_id)
        if not can_view(audience, viewer_id, connected=connected):
            raise NotFound("Post not found")
        return post, co_creator_ids

    def view_post(self, post_id: UUID, viewer_id: UUID | None) -> dict[str, Any]:
        """Single enriched post; invisible posts are reported as missing."""

        post, co_creator_ids = self.ensure_visible(post_id, viewer_id)
        return self.build_views([post], viewer_id, {post.id: co_creator_ids})[0]

    def build_views(
        self,
        posts: Sequence[Post],
        viewer_id: UUID | None,
        co_creators: dict[UUID, list[UUID]] | None = None,
    ) -> list[dict[str, Any]]:
        """Attach profiles, media, counts and share origins with one query per concern."""

        if not posts:
            return []
        post_ids = [post.id for post in posts]
        if co_creators is None:
            co_creators = load_co_creator_map(self.db, post_ids)

        profile_ids = {post.owner_id for post in posts}
        for post_id in post_ids:
            profile_ids.update(co_creators.get(post_id, ()))
        users = {user.id: user for user in self.db.scalars(select(User).where(User.id.in_(profile_ids)))}

        media: dict[UUID, list[dict[str, Any]]] = {post_id: [] for post_id in post_ids}
        media_stmt = (
            select(PostMedia)
            .where(PostMedia.post_id.in_(post_ids))
            .order_by(PostMedia.position.asc(), PostMedia.created_at.asc())
        )
        for item in self.db.scalars(media_stmt):
            media[item.post_id].append(
                {
                    "id": item.id,
                    "url": item.url,
                    "kind": item.kind,
                    "uploader_id": item.uploader_id,
                    "position": item.position,
                    "created_at": item.created_at,
                }
            )

        counts = self.engagement.counts_for(post_ids, viewer_id)

        origin_ids = {post.shared_from_id for post in posts if post.shared_from_id is not None}
        live_origins: set[UUID] = set()
        if origin_ids:
            live_origins = set(self.db.scalars(select(Post.id).where(Post.id.in_(origin_ids))))

        views: list[dict[str, Any]] = []
        for post in posts:
            co_creator_ids = list(co_creators.get(post.id, ()))
            stats = counts.get(post.id) or EngagementCounts(post_id=post.id)
            shared_from = None
            if post.shared_from_id is not None:
                shared_from = {"id": post.shared_from_id, "available": post.shared_from_id in live_origins}
            views.append(
                {
                    "id": post.id,
                    "owner_id": post.owner_id,
                    "body": post.body,
                    "privacy": post.privacy,
                    "allow_share": post.allow_share,
                    "created_at": post.created_at,
                    "edited_at": post.edited_at,
                    "author": _profile_stub(users.get(post.owner_id), post.owner_id),
                    "co_creator_ids": co_creator_ids,
                    "co_creators": [_profile_stub(users.get(uid), uid) for uid in co_creator_ids],
                    "media": media[post.id],
                    "like_count": stats.like_count,
                    "comment_count": stats.comment_count,
                    "share_count": stats.share_count,
                    "viewer_has_liked": stats.viewer_has_liked,
                    "viewer_can_edit": is_author(post, viewer_id, co_creator_ids),
                    "shared_from": shared_from,
                }
            )
        return views

    def _candidate_window(
        self,
        viewer_id: UUID | None,
        position: FeedCursor | None,
        limit: int,
        author_id: UUID | None,
    ) -> list[Post]:
        stmt = select(Post)
        if viewer_id is None:
            stmt = stmt.where(Post.privacy == PostPrivacy.PUBLIC.value)
        else:
            co_created = select(post_co_creators.c.post_id).where(post_co_creators.c.user_id == viewer_id)
            stmt = stmt.where(
                or_(
                    Post.owner_id == viewer_id,
                    Post.privacy.in_([PostPrivacy.PUBLIC.value, PostPrivacy.FRIENDS.value]),
                    Post.id.in_(co_created),
                )
            )
        if author_id is not None:
            stmt = stmt.where(Post.owner_id == author_id)
        if position is not None:
            stmt = stmt.where(
                or_(
                    Post.created_at < position.created_at,
                    and_(Post.created_at == position.created_at, Post.id > position.post_id),
                )
            )
        stmt = stmt.order_by(Post.created_at.desc(), Post.id.asc()).limit(limit)
        return list(self.db.scalars(stmt))

    def _visible(
        self,
        window: Iterable[Post],
        viewer_id: UUID | None,
        co_creators: dict[UUID, list[UUID]],
    ) -> list[Post]:
        audiences = [(post, PostAudience.of(post, co_creators.get(post.id, ()))) for post in window]
        pending_owners = {
            audience.owner_id for _, audience in audiences if needs_relationship(audience, viewer_id)
        }
        connected: dict[UUID, bool] = {}
        if pending_owners and viewer_id is not None:
            connected = self.relationships.batch_connected(viewer_id, pending_owners)
        return [
            post
            for post, audience in audiences
            if can_view(audience, viewer_id, connected=connected.get(audience.owner_id, False))
        ]


__all__ = ["FeedCursor", "FeedPage", "FeedAssembler"]
