"""Session helpers shared by the post engine services."""
from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models import Post
from .errors import NotFound, StorageFailure

logger = logging.getLogger(__name__)


def commit_or_raise(db: Session, action: str) -> None:
    """Commit the session, translating store errors into ``StorageFailure``."""

    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to %s", action)
        raise StorageFailure(f"Failed to {action}") from exc


def flush_or_raise(db: Session, action: str) -> None:
    """Flush pending rows; on failure roll back so nothing half-written lingers."""

    try:
        db.flush()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to %s", action)
        raise StorageFailure(f"Failed to {action}") from exc


def get_post_or_raise(db: Session, post_id: UUID) -> Post:
    post = db.get(Post, post_id)
    if post is None:
        raise NotFound("Post not found")
    return post


__all__ = ["commit_or_raise", "flush_or_raise", "get_post_or_raise"]
