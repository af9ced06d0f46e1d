"""Convenience exports for ORM models."""
from .associations import post_co_creators
from .collaboration import CollaborationInvite
from .enums import InviteStatus, MediaKind, PostPrivacy
from .friendship import Friendship
from .media import PostMedia
from .notification import Notification
from .post import Post, PostComment, PostLike
from .user import User

__all__ = [
    "post_co_creators",
    "CollaborationInvite",
    "InviteStatus",
    "MediaKind",
    "PostPrivacy",
    "Friendship",
    "PostMedia",
    "Notification",
    "Post",
    "PostComment",
    "PostLike",
    "User",
]
