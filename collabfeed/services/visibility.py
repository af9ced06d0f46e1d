"""Pure visibility rules for a (post, viewer) pair."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable
from uuid import UUID

from ..models import Post, PostPrivacy
from .errors import ValidationError


@dataclass(frozen=True)
class PostAudience:
    """The parts of a post the visibility rules read."""

    owner_id: UUID
    privacy: PostPrivacy
    co_creator_ids: frozenset[UUID] = frozenset()

    @classmethod
    def of(cls, post: Post, co_creator_ids: Iterable[UUID] = ()) -> "PostAudience":
        return cls(
            owner_id=post.owner_id,
            privacy=PostPrivacy(post.privacy),
            co_creator_ids=frozenset(co_creator_ids),
        )


def coerce_privacy(value: PostPrivacy | str) -> PostPrivacy:
    try:
        return PostPrivacy(value)
    except ValueError as exc:
        raise ValidationError(f"Unsupported privacy value: {value!r}") from exc


def needs_relationship(audience: PostAudience, viewer_id: UUID | None) -> bool:
    """True when the answer depends on whether viewer and owner are connected."""

    if viewer_id is None or audience.privacy is not PostPrivacy.FRIENDS:
        return False
    return viewer_id != audience.owner_id and viewer_id not in audience.co_creator_ids


def can_view(audience: PostAudience, viewer_id: UUID | None, *, connected: bool = False) -> bool:
    if viewer_id is not None:
        if viewer_id == audience.owner_id:
            return True
        if viewer_id in audience.co_creator_ids:
            return True
    if audience.privacy is PostPrivacy.PUBLIC:
        return True
    if audience.privacy is PostPrivacy.FRIENDS and viewer_id is not None and connected:
        return True
    return False


__all__ = ["PostAudience", "coerce_privacy", "needs_relationship", "can_view"]
