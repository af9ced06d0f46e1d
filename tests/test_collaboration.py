"""Service tests for the co-creator invite state machine."""
from __future__ import annotations

import os
from typing import Any, Callable, Iterator
from uuid import UUID, uuid4

import pytest
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///./test_collaboration.db")

from collabfeed.database import Base, SessionLocal, engine  # noqa: E402
from collabfeed.models import (  # noqa: E402
    CollaborationInvite,
    InviteStatus,
    Notification,
    Post,
    PostPrivacy,
    User,
    post_co_creators,
)
from collabfeed.services import (  # noqa: E402
    AlreadyCoCreator,
    AlreadyInvited,
    CollaborationService,
    NotAllowed,
    NotAuthorized,
    NotFound,
    StoredNotificationEmitter,
    ValidationError,
    load_co_creator_ids,
)


class RecordingNotifier:
    def __init__(self) -> None:
        self.sent: list[tuple[UUID, str, dict[str, Any]]] = []

    def notify(self, user_id, event_type, payload, *, sender_id=None) -> None:
        self.sent.append((user_id, str(event_type), payload))


@pytest.fixture(scope="module", autouse=True)
def _create_schema() -> Iterator[None]:
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def _clean_database() -> Iterator[None]:
    with SessionLocal() as session:
        session.execute(delete(Notification))
        session.execute(delete(CollaborationInvite))
        session.execute(delete(post_co_creators))
        session.execute(delete(Post))
        session.execute(delete(User))
        session.commit()
    yield


@pytest.fixture
def db() -> Iterator[Session]:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def user_factory(db: Session) -> Callable[[str], User]:
    def _create(username: str) -> User:
        user = User(username=username, display_name=username.title())
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _create


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def service(db: Session, notifier: RecordingNotifier) -> CollaborationService:
    return CollaborationService(db, notifier=notifier)


def _post(db: Session, owner: User, privacy: PostPrivacy = PostPrivacy.FRIENDS) -> Post:
    post = Post(owner_id=owner.id, body="draft", privacy=privacy.value)
    db.add(post)
    db.commit()
    db.refresh(post)
    return post


def test_invite_then_accept_adds_co_creator(db, user_factory, service, notifier):
    alice, bob = user_factory("alice"), user_factory("bob")
    post = _post(db, alice)

    invite = service.invite(post.id, alice.id, bob.id)
    assert invite.status == InviteStatus.INVITED.value
    assert notifier.sent[-1][0] == bob.id
    assert notifier.sent[-1][1] == "post.collab.invite"

    accepted = service.respond(post.id, bob.id, True)
    assert accepted.status == InviteStatus.ACCEPTED.value
    assert accepted.can_edit is True
    assert accepted.responded_at is not None
    assert load_co_creator_ids(db, post.id) == [bob.id]
    assert notifier.sent[-1][0] == alice.id
    assert notifier.sent[-1][1] == "post.collab.accepted"


def test_accepting_twice_never_duplicates_co_creator(db, user_factory, service):
    alice, bob = user_factory("alice"), user_factory("bob")
    post = _post(db, alice)
    service.invite(post.id, alice.id, bob.id)

    service.respond(post.id, bob.id, True)
    again = service.respond(post.id, bob.id, True)

    assert again.status == InviteStatus.ACCEPTED.value
    assert load_co_creator_ids(db, post.id) == [bob.id]


def test_declined_invite_never_adds_co_creator(db, user_factory, service, notifier):
    alice, bob = user_factory("alice"), user_factory("bob")
    post = _post(db, alice)
    service.invite(post.id, alice.id, bob.id)

    declined = service.respond(post.id, bob.id, False)
    repeated = service.respond(post.id, bob.id, False)

    assert declined.status == InviteStatus.DECLINED.value
    assert repeated.status == InviteStatus.DECLINED.value
    assert load_co_creator_ids(db, post.id) == []
    assert notifier.sent[-1][1] == "post.collab.declined"

    with pytest.raises(NotAllowed):
        service.respond(post.id, bob.id, True)
    assert load_co_creator_ids(db, post.id) == []


def test_pending_and_existing_co_creators_cannot_be_reinvited(db, user_factory, service):
    alice, bob = user_factory("alice"), user_factory("bob")
    post = _post(db, alice)
    service.invite(post.id, alice.id, bob.id)

    with pytest.raises(AlreadyInvited):
        service.invite(post.id, alice.id, bob.id)

    service.respond(post.id, bob.id, True)
    with pytest.raises(AlreadyCoCreator):
        service.invite(post.id, alice.id, bob.id)


def test_declined_user_can_be_invited_again(db, user_factory, service):
    alice, bob = user_factory("alice"), user_factory("bob")
    post = _post(db, alice)
    service.invite(post.id, alice.id, bob.id)
    service.respond(post.id, bob.id, False)

    reinvite = service.invite(post.id, alice.id, bob.id)
    assert reinvite.status == InviteStatus.INVITED.value
    assert reinvite.responded_at is None

    rows = db.scalars(select(CollaborationInvite).where(CollaborationInvite.post_id == post.id)).all()
    assert len(rows) == 1


def test_invite_rules(db, user_factory, service):
    alice, bob, carol = user_factory("alice"), user_factory("bob"), user_factory("carol")
    post = _post(db, alice)

    with pytest.raises(ValidationError):
        service.invite(post.id, alice.id, alice.id)
    with pytest.raises(NotAuthorized):
        service.invite(post.id, bob.id, carol.id)
    with pytest.raises(NotFound):
        service.invite(post.id, alice.id, uuid4())
    with pytest.raises(NotFound):
        service.invite(uuid4(), alice.id, bob.id)
    with pytest.raises(NotFound):
        service.respond(post.id, carol.id, True)


def test_co_creator_with_edit_rights_may_invite(db, user_factory, service):
    alice, bob, carol = user_factory("alice"), user_factory("bob"), user_factory("carol")
    post = _post(db, alice)
    service.invite(post.id, alice.id, bob.id)
    service.respond(post.id, bob.id, True)

    invite = service.invite(post.id, bob.id, carol.id)
    assert invite.inviter_id == bob.id


def test_remove_self_leaves_post_and_revokes_edit(db, user_factory, service):
    alice, bob = user_factory("alice"), user_factory("bob")
    post = _post(db, alice)
    service.invite(post.id, alice.id, bob.id)
    service.respond(post.id, bob.id, True)

    service.remove_self(post.id, bob.id)

    assert load_co_creator_ids(db, post.id) == []
    row = db.get(CollaborationInvite, (post.id, bob.id))
    db.refresh(row)
    assert row.can_edit is False

    with pytest.raises(NotAuthorized):
        service.remove_self(post.id, bob.id)
    with pytest.raises(NotAuthorized):
        service.remove_self(post.id, alice.id)


def test_listing_invites(db, user_factory, service):
    alice, bob, carol = user_factory("alice"), user_factory("bob"), user_factory("carol")
    first, second = _post(db, alice), _post(db, alice)
    service.invite(first.id, alice.id, bob.id)
    service.invite(second.id, alice.id, bob.id)
    service.invite(second.id, alice.id, carol.id)
    service.respond(first.id, bob.id, False)

    assert {invite.post_id for invite in service.list_invites_for(bob.id)} == {first.id, second.id}
    pending = service.list_invites_for(bob.id, status=InviteStatus.INVITED)
    assert [invite.post_id for invite in pending] == [second.id]
    assert {invite.invitee_id for invite in service.list_collaborators(second.id)} == {bob.id, carol.id}


def test_stored_notifications_are_persisted(db, user_factory):
    alice, bob = user_factory("alice"), user_factory("bob")
    post = _post(db, alice)
    service = CollaborationService(db, notifier=StoredNotificationEmitter(SessionLocal))

    service.invite(post.id, alice.id, bob.id)

    notification = db.scalars(select(Notification).where(Notification.recipient_id == bob.id)).one()
    assert notification.type == "post.collab.invite"
    assert notification.sender_id == alice.id
    assert notification.payload["post_id"] == str(post.id)
