"""Closed value sets shared by ORM models, schemas and services."""
from __future__ import annotations

from enum import StrEnum

from sqlalchemy import Enum


class PostPrivacy(StrEnum):
    PUBLIC = "public"
    FRIENDS = "friends"
    PRIVATE = "private"


class MediaKind(StrEnum):
    IMAGE = "image"
    VIDEO = "video"


class InviteStatus(StrEnum):
    INVITED = "invited"
    ACCEPTED = "accepted"
    DECLINED = "declined"


post_privacy_enum = Enum(*[item.value for item in PostPrivacy], name="post_privacy")
media_kind_enum = Enum(*[item.value for item in MediaKind], name="post_media_kind")
invite_status_enum = Enum(*[item.value for item in InviteStatus], name="collab_invite_status")


__all__ = [
    "PostPrivacy",
    "MediaKind",
    "InviteStatus",
    "post_privacy_enum",
    "media_kind_enum",
    "invite_status_enum",
]
