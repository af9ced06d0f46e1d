"""Convenience exports for schema layer."""
from .collaboration import InviteCreate, InviteListResponse, InviteRespond, InviteResponse
from .engagement import (
    LikeToggleResponse,
    PostCommentCreate,
    PostCommentListResponse,
    PostCommentResponse,
    PostEngagementResponse,
    ShareCreate,
)
from .media import MediaListResponse, MediaResponse, MediaUploadItemResult, MediaUploadResponse
from .posts import (
    FeedPageResponse,
    MediaRefCreate,
    PostCreate,
    PostMediaItem,
    PostResponse,
    PostUpdate,
    ProfileStub,
    SharedFrom,
)

__all__ = [
    "InviteCreate",
    "InviteListResponse",
    "InviteRespond",
    "InviteResponse",
    "LikeToggleResponse",
    "PostCommentCreate",
    "PostCommentListResponse",
    "PostCommentResponse",
    "PostEngagementResponse",
    "ShareCreate",
    "MediaListResponse",
    "MediaResponse",
    "MediaUploadItemResult",
    "MediaUploadResponse",
    "FeedPageResponse",
    "MediaRefCreate",
    "PostCreate",
    "PostMediaItem",
    "PostResponse",
    "PostUpdate",
    "ProfileStub",
    "SharedFrom",
]
