"""Fire-and-forget notification delivery persisted to the notifications table."""
from __future__ import annotations

import logging
from enum import StrEnum
from typing import Any, Callable, Protocol
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models import Notification

logger = logging.getLogger(__name__)


class NotificationType(StrEnum):
    COLLAB_INVITE = "post.collab.invite"
    COLLAB_ACCEPTED = "post.collab.accepted"
    COLLAB_DECLINED = "post.collab.declined"


class NotificationEmitter(Protocol):
    def notify(
        self,
        user_id: UUID,
        event_type: NotificationType | str,
        payload: dict[str, Any],
        *,
        sender_id: UUID | None = None,
    ) -> None: ...


class StoredNotificationEmitter:
    """Write notifications through a dedicated session so failures never touch the caller's transaction."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def notify(
        self,
        user_id: UUID,
        event_type: NotificationType | str,
        payload: dict[str, Any],
        *,
        sender_id: UUID | None = None,
    ) -> None:
        try:
            session = self._session_factory()
        except SQLAlchemyError:
            logger.exception("Could not open a session for %s notification", event_type)
            return

        try:
            session.add(
                Notification(
                    recipient_id=user_id,
                    sender_id=sender_id,
                    type=str(event_type),
                    payload=_json_safe(payload),
                )
            )
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            logger.warning("Notification %s for user %s was not delivered", event_type, user_id, exc_info=True)
        finally:
            session.close()


def _json_safe(payload: dict[str, Any]) -> dict[str, Any]:
    return {key: str(value) if isinstance(value, UUID) else value for key, value in payload.items()}


__all__ = ["NotificationType", "NotificationEmitter", "StoredNotificationEmitter"]
