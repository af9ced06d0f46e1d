"""Relationship lookups answered from the friendships table."""
from __future__ import annotations

from typing import Iterable, Protocol
from uuid import UUID

from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session

from ..models import Friendship
from ..models.friendship import ordered_pair


class RelationshipGraph(Protocol):
    def are_connected(self, user_a: UUID, user_b: UUID) -> bool: ...

    def batch_connected(self, user_a: UUID, others: Iterable[UUID]) -> dict[UUID, bool]: ...


class FriendshipGraph:
    """Answer connection queries from persisted friendships."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def are_connected(self, user_a: UUID, user_b: UUID) -> bool:
        if user_a == user_b:
            return False
        first, second = ordered_pair(user_a, user_b)
        stmt = select(Friendship.id).where(and_(Friendship.user_a_id == first, Friendship.user_b_id == second))
        return self.db.scalar(stmt.limit(1)) is not None

    def batch_connected(self, user_a: UUID, others: Iterable[UUID]) -> dict[UUID, bool]:
        candidates = {other for other in others if other != user_a}
        result: dict[UUID, bool] = {other: False for other in candidates}
        if not candidates:
            return result

        stmt = select(Friendship.user_a_id, Friendship.user_b_id).where(
            or_(
                and_(Friendship.user_a_id == user_a, Friendship.user_b_id.in_(candidates)),
                and_(Friendship.user_b_id == user_a, Friendship.user_a_id.in_(candidates)),
            )
        )
        for first, second in self.db.execute(stmt):
            friend_id = second if first == user_a else first
            result[friend_id] = True
        return result


__all__ = ["RelationshipGraph", "FriendshipGraph"]
