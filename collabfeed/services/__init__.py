"""Convenience exports for service layer."""
from .collaboration_service import CollaborationService
from .engagement_service import EngagementAggregator, EngagementCounts, LikeToggleResult
from .errors import (
    AlreadyCoCreator,
    AlreadyInvited,
    NotAllowed,
    NotAuthorized,
    NotFound,
    NotSignedIn,
    PostEngineError,
    StorageFailure,
    ValidationError,
)
from .feed_service import FeedAssembler, FeedCursor, FeedPage
from .identity import (
    BearerIdentity,
    IdentityContext,
    StaticIdentity,
    create_access_token,
    decode_access_token,
    get_identity,
    require_user_id,
)
from .media_service import MediaAttachmentManager, MediaAttachResult, MediaUpload
from .notification_service import NotificationEmitter, NotificationType, StoredNotificationEmitter
from .permissions import is_author, load_co_creator_ids, load_co_creator_map, require_author, require_owner
from .post_service import MediaRef, PostRepository
from .relationship_service import FriendshipGraph, RelationshipGraph
from .spaces_service import MediaStore, ObjectRef, SpacesConfigurationError, SpacesMediaStore
from .visibility import PostAudience, can_view, coerce_privacy, needs_relationship

__all__ = [
    "CollaborationService",
    "EngagementAggregator",
    "EngagementCounts",
    "LikeToggleResult",
    "AlreadyCoCreator",
    "AlreadyInvited",
    "NotAllowed",
    "NotAuthorized",
    "NotFound",
    "NotSignedIn",
    "PostEngineError",
    "StorageFailure",
    "ValidationError",
    "FeedAssembler",
    "FeedCursor",
    "FeedPage",
    "BearerIdentity",
    "IdentityContext",
    "StaticIdentity",
    "create_access_token",
    "decode_access_token",
    "get_identity",
    "require_user_id",
    "MediaAttachmentManager",
    "MediaAttachResult",
    "MediaUpload",
    "NotificationEmitter",
    "NotificationType",
    "StoredNotificationEmitter",
    "is_author",
    "load_co_creator_ids",
    "load_co_creator_map",
    "require_author",
    "require_owner",
    "MediaRef",
    "PostRepository",
    "FriendshipGraph",
    "RelationshipGraph",
    "MediaStore",
    "ObjectRef",
    "SpacesConfigurationError",
    "SpacesMediaStore",
    "PostAudience",
    "can_view",
    "coerce_privacy",
    "needs_relationship",
]
