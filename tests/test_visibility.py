"""Unit tests for the pure visibility rules and the feed cursor codec."""
from __future__ import annotations

import base64
import os
from datetime import datetime, timezone
from uuid import uuid4

import pytest

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///./test_visibility.db")

from collabfeed.models import PostPrivacy  # noqa: E402
from collabfeed.services import FeedCursor, PostAudience, ValidationError, can_view, coerce_privacy  # noqa: E402
from collabfeed.services.visibility import needs_relationship  # noqa: E402

OWNER = uuid4()
CO_CREATOR = uuid4()
STRANGER = uuid4()


def _audience(privacy: PostPrivacy) -> PostAudience:
    return PostAudience(owner_id=OWNER, privacy=privacy, co_creator_ids=frozenset({CO_CREATOR}))


@pytest.mark.parametrize("privacy", list(PostPrivacy))
def test_owner_and_co_creators_always_see_the_post(privacy: PostPrivacy):
    audience = _audience(privacy)
    assert can_view(audience, OWNER)
    assert can_view(audience, CO_CREATOR)


@pytest.mark.parametrize("connected", [True, False])
def test_private_post_hidden_from_everyone_else(connected: bool):
    assert not can_view(_audience(PostPrivacy.PRIVATE), STRANGER, connected=connected)


def test_friends_post_requires_connection():
    audience = _audience(PostPrivacy.FRIENDS)
    assert can_view(audience, STRANGER, connected=True)
    assert not can_view(audience, STRANGER, connected=False)


def test_anonymous_viewer_only_sees_public_posts():
    assert can_view(_audience(PostPrivacy.PUBLIC), None)
    assert not can_view(_audience(PostPrivacy.FRIENDS), None, connected=True)
    assert not can_view(_audience(PostPrivacy.PRIVATE), None)


def test_relationship_lookup_only_needed_for_outside_friends_viewers():
    assert needs_relationship(_audience(PostPrivacy.FRIENDS), STRANGER)
    assert not needs_relationship(_audience(PostPrivacy.FRIENDS), OWNER)
    assert not needs_relationship(_audience(PostPrivacy.FRIENDS), CO_CREATOR)
    assert not needs_relationship(_audience(PostPrivacy.PUBLIC), STRANGER)
    assert not needs_relationship(_audience(PostPrivacy.FRIENDS), None)


def test_unknown_privacy_is_rejected():
    assert coerce_privacy("public") is PostPrivacy.PUBLIC
    with pytest.raises(ValidationError):
        coerce_privacy("everyone")


def test_cursor_survives_encoding():
    cursor = FeedCursor(created_at=datetime(2026, 3, 1, 12, 30, 5, 123456, tzinfo=timezone.utc), post_id=uuid4())
    assert FeedCursor.decode(cursor.encode()) == cursor


@pytest.mark.parametrize(
    "token",
    [
        "not-base64!!",
        base64.urlsafe_b64encode(b"no-separator").decode(),
        base64.urlsafe_b64encode(b"2026-01-01T00:00:00|not-a-uuid").decode(),
        base64.urlsafe_b64encode(f"yesterday|{uuid4()}".encode()).decode(),
    ],
)
def test_malformed_cursor_is_a_validation_error(token: str):
    with pytest.raises(ValidationError):
        FeedCursor.decode(token)
