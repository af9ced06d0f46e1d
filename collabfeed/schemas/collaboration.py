"""Schemas for co-creator invitations."""
from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from ..models import InviteStatus


class InviteCreate(BaseModel):
    invitee_id: UUID


class InviteRespond(BaseModel):
    accept: bool


class InviteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    post_id: UUID
    invitee_id: UUID
    inviter_id: UUID
    status: InviteStatus
    can_edit: bool
    created_at: datetime
    responded_at: datetime | None = None


class InviteListResponse(BaseModel):
    items: list[InviteResponse]
