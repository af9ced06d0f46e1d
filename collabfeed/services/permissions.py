"""Single authorization predicate for every post mutation."""
from __future__ import annotations

from collections import defaultdict
from typing import Iterable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models import Post, post_co_creators
from .errors import NotAuthorized


def load_co_creator_ids(db: Session, post_id: UUID) -> list[UUID]:
    """Return the ordered co-creator set of one post."""

    stmt = (
        select(post_co_creators.c.user_id)
        .where(post_co_creators.c.post_id == post_id)
        .order_by(post_co_creators.c.added_at.asc(), post_co_creators.c.user_id.asc())
    )
    return list(db.scalars(stmt))


def load_co_creator_map(db: Session, post_ids: Iterable[UUID]) -> dict[UUID, list[UUID]]:
    """Return ordered co-creator sets for many posts in one query."""

    ids = list(post_ids)
    mapping: dict[UUID, list[UUID]] = defaultdict(list)
    if not ids:
        return mapping
    stmt = (
        select(post_co_creators.c.post_id, post_co_creators.c.user_id)
        .where(post_co_creators.c.post_id.in_(ids))
        .order_by(post_co_creators.c.added_at.asc(), post_co_creators.c.user_id.asc())
    )
    for post_id, user_id in db.execute(stmt):
        mapping[post_id].append(user_id)
    return mapping


def is_author(post: Post, user_id: UUID | None, co_creator_ids: Iterable[UUID]) -> bool:
    """Owner or accepted co-creator."""

    if user_id is None:
        return False
    return post.owner_id == user_id or user_id in set(co_creator_ids)


def require_author(db: Session, post: Post, user_id: UUID, *, action: str = "edit this post") -> list[UUID]:
    """Raise ``NotAuthorized`` unless ``user_id`` may mutate ``post``; returns the co-creator ids."""

    co_creator_ids = load_co_creator_ids(db, post.id)
    if not is_author(post, user_id, co_creator_ids):
        raise NotAuthorized(f"Not allowed to {action}")
    return co_creator_ids


def require_owner(post: Post, user_id: UUID, *, action: str = "manage this post") -> None:
    if post.owner_id != user_id:
        raise NotAuthorized(f"Only the owner may {action}")


__all__ = [
    "load_co_creator_ids",
    "load_co_creator_map",
    "is_author",
    "require_author",
    "require_owner",
]
