"""Association tables shared across ORM models."""
from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Table
from sqlalchemy.dialects.postgresql import UUID

from collabfeed.database import Base
from .base import utcnow


# Ordered co-creator set of a post; the composite key makes appends idempotent.
post_co_creators = Table(
    "post_co_creators",
    Base.metadata,
    Column("post_id", UUID(as_uuid=True), ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True),
    Column("added_at", DateTime(timezone=True), default=utcnow, nullable=False),
)


__all__ = ["post_co_creators"]
