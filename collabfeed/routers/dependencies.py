"""FastAPI dependencies that build request-scoped services."""
from __future__ import annotations

from uuid import UUID

from fastapi import Depends
from sqlalchemy.orm import Session

from ..database import create_session, get_session
from ..services import (
    CollaborationService,
    EngagementAggregator,
    FeedAssembler,
    FriendshipGraph,
    IdentityContext,
    MediaAttachmentManager,
    MediaStore,
    NotificationEmitter,
    PostRepository,
    RelationshipGraph,
    SpacesMediaStore,
    StoredNotificationEmitter,
    get_identity,
    require_user_id,
)


def get_media_store() -> MediaStore:
    return SpacesMediaStore()


def get_notifier() -> NotificationEmitter:
    return StoredNotificationEmitter(create_session)


def get_relationships(db: Session = Depends(get_session)) -> RelationshipGraph:
    return FriendshipGraph(db)


def get_current_user_id(identity: IdentityContext = Depends(get_identity)) -> UUID:
    """Resolve the signed-in user or fail with ``NotSignedIn``."""

    return require_user_id(identity)


def get_viewer_id(identity: IdentityContext = Depends(get_identity)) -> UUID | None:
    return identity.current_user_id()


def get_post_repository(
    db: Session = Depends(get_session),
    store: MediaStore = Depends(get_media_store),
    notifier: NotificationEmitter = Depends(get_notifier),
) -> PostRepository:
    return PostRepository(db, notifier=notifier, store=store)


def get_engagement(db: Session = Depends(get_session)) -> EngagementAggregator:
    return EngagementAggregator(db)


def get_feed_assembler(
    db: Session = Depends(get_session),
    relationships: RelationshipGraph = Depends(get_relationships),
    engagement: EngagementAggregator = Depends(get_engagement),
) -> FeedAssembler:
    return FeedAssembler(db, relationships=relationships, engagement=engagement)


def get_collaboration(
    db: Session = Depends(get_session),
    notifier: NotificationEmitter = Depends(get_notifier),
) -> CollaborationService:
    return CollaborationService(db, notifier=notifier)


def get_media_manager(
    db: Session = Depends(get_session),
    store: MediaStore = Depends(get_media_store),
) -> MediaAttachmentManager:
    return MediaAttachmentManager(db, store=store)


__all__ = [
    "get_media_store",
    "get_notifier",
    "get_relationships",
    "get_current_user_id",
    "get_viewer_id",
    "get_post_repository",
    "get_engagement",
    "get_feed_assembler",
    "get_collaboration",
    "get_media_manager",
]
