"""Likes, comments and shares, with counts always recomputed from child rows."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, cast
from uuid import UUID

from sqlalchemy import delete, func, insert, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import get_settings
from ..models import Post, PostComment, PostLike, PostPrivacy, User
from .errors import NotAllowed, NotAuthorized, NotFound, StorageFailure, ValidationError
from .persistence import commit_or_raise, get_post_or_raise
from .visibility import coerce_privacy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngagementCounts:
    post_id: UUID
    like_count: int = 0
    comment_count: int = 0
    share_count: int = 0
    viewer_has_liked: bool = False


@dataclass(frozen=True)
class LikeToggleResult:
    post_id: UUID
    liked: bool
    like_count: int


class EngagementAggregator:
    def __init__(self, db: Session) -> None:
        self.db = db

    def toggle_like(self, post_id: UUID, user_id: UUID) -> LikeToggleResult:
        """Delete the like if present, otherwise insert it.

        The delete is a single conditional statement. When two identical
        requests race, the loser's insert hits the composite key and resolves
        to ``liked=True`` once the existing row is confirmed.
        """

        get_post_or_raise(self.db, post_id)

        removed = self.db.execute(
            delete(PostLike).where(PostLike.post_id == post_id, PostLike.user_id == user_id)
        ).rowcount
        if removed:
            commit_or_raise(self.db, "remove like")
            liked = False
        else:
            try:
                self.db.execute(insert(PostLike).values(post_id=post_id, user_id=user_id))
                self.db.commit()
            except IntegrityError as exc:
                self.db.rollback()
                if not self._has_liked(post_id, user_id):
                    # Not a duplicate: a referenced post or user row is missing.
                    get_post_or_raise(self.db, post_id)
                    logger.warning("Like for post %s by %s rejected by the store", post_id, user_id)
                    raise StorageFailure("Failed to add like") from exc
                logger.info("Duplicate like for post %s by %s resolved as liked", post_id, user_id)
            except SQLAlchemyError as exc:
                self.db.rollback()
                logger.exception("Failed to add like")
                raise StorageFailure("Failed to add like") from exc
            liked = True

        return LikeToggleResult(post_id=post_id, liked=liked, like_count=self._like_count(post_id))

    def add_comment(self, post_id: UUID, user_id: UUID, body: str) -> PostComment:
        get_post_or_raise(self.db, post_id)
        text = (body or "").strip()
        if not text:
            raise ValidationError("Comment cannot be empty")
        limit = get_settings().comment_max_length
        if len(text) > limit:
            raise ValidationError(f"Comment exceeds {limit} characters")

        comment = PostComment(post_id=post_id, author_id=user_id, body=text)
        self.db.add(comment)
        commit_or_raise(self.db, "add comment")
        self.db.refresh(comment)
        return comment

    def delete_comment(self, comment_id: UUID, user_id: UUID) -> None:
        comment = self.db.get(PostComment, comment_id)
        if comment is None:
            raise NotFound("Comment not found")
        if comment.author_id != user_id:
            raise NotAuthorized("Only the author may delete this comment")
        self.db.delete(comment)
        commit_or_raise(self.db, "delete comment")

    def list_comments(self, post_id: UUID) -> list[dict[str, Any]]:
        get_post_or_raise(self.db, post_id)
        return self._comment_rows(PostComment.post_id == post_id)

    def describe_comment(self, comment_id: UUID) -> dict[str, Any]:
        rows = self._comment_rows(PostComment.id == comment_id)
        if not rows:
            raise NotFound("Comment not found")
        return rows[0]

    def _comment_rows(self, condition: Any) -> list[dict[str, Any]]:
        stmt = (
            select(PostComment, User.username, User.display_name, User.avatar_url)
            .outerjoin(User, PostComment.author_id == User.id)
            .where(condition)
            .order_by(PostComment.created_at.asc(), PostComment.id.asc())
        )
        return [
            {
                "id": comment.id,
                "post_id": comment.post_id,
                "author_id": comment.author_id,
                "username": cast(str | None, username),
                "display_name": cast(str | None, display_name),
                "avatar_url": cast(str | None, avatar_url),
                "body": comment.body,
                "created_at": comment.created_at,
            }
            for comment, username, display_name, avatar_url in self.db.execute(stmt).all()
        ]

    def share(
        self,
        post_id: UUID,
        user_id: UUID,
        message: str | None = None,
        privacy: PostPrivacy | str | None = None,
    ) -> Post:
        """Create a reshare of ``post_id`` owned by ``user_id``."""

        origin = get_post_or_raise(self.db, post_id)
        if not origin.allow_share:
            raise NotAllowed("This post does not allow sharing")

        share_privacy = coerce_privacy(privacy) if privacy is not None else PostPrivacy.FRIENDS
        body = (message or "").strip() or get_settings().share_default_body
        post = Post(
            owner_id=user_id,
            body=body,
            privacy=share_privacy.value,
            shared_from_id=origin.id,
        )
        self.db.add(post)
        commit_or_raise(self.db, "share post")
        self.db.refresh(post)
        return post

    def counts_for(self, post_ids: Iterable[UUID], viewer_id: UUID | None = None) -> dict[UUID, EngagementCounts]:
        """Batched counts: one grouped query per metric."""

        ids = list(dict.fromkeys(post_ids))
        if not ids:
            return {}

        likes = dict(
            self.db.execute(
                select(PostLike.post_id, func.count()).where(PostLike.post_id.in_(ids)).group_by(PostLike.post_id)
            ).all()
        )
        comments = dict(
            self.db.execute(
                select(PostComment.post_id, func.count(PostComment.id))
                .where(PostComment.post_id.in_(ids))
                .group_by(PostComment.post_id)
            ).all()
        )
        shares = dict(
            self.db.execute(
                select(Post.shared_from_id, func.count(Post.id))
                .where(Post.shared_from_id.in_(ids))
                .group_by(Post.shared_from_id)
            ).all()
        )
        liked: set[UUID] = set()
        if viewer_id is not None:
            liked = set(
                self.db.scalars(
                    select(PostLike.post_id).where(PostLike.user_id == viewer_id, PostLike.post_id.in_(ids))
                )
            )

        return {
            post_id: EngagementCounts(
                post_id=post_id,
                like_count=int(likes.get(post_id) or 0),
                comment_count=int(comments.get(post_id) or 0),
                share_count=int(shares.get(post_id) or 0),
                viewer_has_liked=post_id in liked,
            )
            for post_id in ids
        }

    def snapshot(self, post_id: UUID, viewer_id: UUID | None = None) -> EngagementCounts:
        get_post_or_raise(self.db, post_id)
        return self.counts_for([post_id], viewer_id)[post_id]

    def _like_count(self, post_id: UUID) -> int:
        return int(self.db.scalar(select(func.count()).select_from(PostLike).where(PostLike.post_id == post_id)) or 0)

    def _has_liked(self, post_id: UUID, user_id: UUID) -> bool:
        stmt = select(PostLike.post_id).where(PostLike.post_id == post_id, PostLike.user_id == user_id)
        return self.db.scalar(stmt.limit(1)) is not None


__all__ = [
    "EngagementCounts",
    "LikeToggleResult",
    "EngagementAggregator",
]
