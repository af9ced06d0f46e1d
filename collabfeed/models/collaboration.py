"""ORM model for co-creator invitations on posts."""
from __future__ import annotations

from sqlalchemy import Boolean, Column, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import expression, func

from collabfeed.database import Base
from .base import utcnow
from .enums import InviteStatus, invite_status_enum


class CollaborationInvite(Base):
    __tablename__ = "post_collaboration_invites"

    post_id = Column(UUID(as_uuid=True), ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True)
    invitee_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True)
    inviter_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    status = Column(invite_status_enum, nullable=False, default=InviteStatus.INVITED.value)
    can_edit = Column(Boolean, nullable=False, default=False, server_default=expression.false())
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    responded_at = Column(DateTime(timezone=True), nullable=True)


__all__ = ["CollaborationInvite"]
