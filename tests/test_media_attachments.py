"""Service tests for attaching, uploading and removing post media."""
from __future__ import annotations

import os
from typing import Callable, Iterator
from uuid import uuid4

import pytest
from sqlalchemy import delete
from sqlalchemy.orm import Session

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///./test_media_attachments.db")

from collabfeed.database import Base, SessionLocal, engine  # noqa: E402
from collabfeed.models import MediaKind, Post, PostMedia, User, post_co_creators  # noqa: E402
from collabfeed.services import (  # noqa: E402
    MediaAttachmentManager,
    MediaUpload,
    NotAuthorized,
    NotFound,
    ObjectRef,
    StorageFailure,
    ValidationError,
)
from collabfeed.services.spaces_service import object_key  # noqa: E402


class FakeMediaStore:
    def __init__(self, fail_on: set[str] | None = None) -> None:
        self.objects: dict[str, bytes] = {}
        self.deleted: list[str] = []
        self.fail_on = fail_on or set()

    def put_object(self, data: bytes, content_type: str, *, filename: str | None = None) -> ObjectRef:
        if filename in self.fail_on:
            raise StorageFailure("Upload to DigitalOcean Spaces failed")
        key = object_key(filename, "posts")
        self.objects[key] = data
        return ObjectRef(key=key, url=f"https://cdn.example.test/{key}")

    def delete_object(self, key: str) -> None:
        self.deleted.append(key)
        self.objects.pop(key, None)


@pytest.fixture(scope="module", autouse=True)
def _create_schema() -> Iterator[None]:
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def _clean_database() -> Iterator[None]:
    with SessionLocal() as session:
        session.execute(delete(PostMedia))
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
        user = User(username=username)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _create


@pytest.fixture
def store() -> FakeMediaStore:
    return FakeMediaStore()


@pytest.fixture
def manager(db: Session, store: FakeMediaStore) -> MediaAttachmentManager:
    return MediaAttachmentManager(db, store=store)


def _post_with_co_creator(db: Session, owner: User, co_creator: User | None = None) -> Post:
    post = Post(owner_id=owner.id, body="gallery")
    db.add(post)
    db.commit()
    db.refresh(post)
    if co_creator is not None:
        db.execute(post_co_creators.insert().values(post_id=post.id, user_id=co_creator.id))
        db.commit()
    return post


def test_attach_appends_in_order(db, user_factory, manager):
    alice = user_factory("alice")
    post = _post_with_co_creator(db, alice)

    first = manager.attach(post.id, alice.id, "https://cdn.example.test/a.jpg", MediaKind.IMAGE)
    second = manager.attach(post.id, alice.id, ObjectRef(key="posts/b.mp4", url="https://cdn.example.test/b.mp4"), "video")

    assert (first.position, second.position) == (0, 1)
    assert second.object_key == "posts/b.mp4"
    assert [item.id for item in manager.list_media(post.id)] == [first.id, second.id]


def test_attach_rules(db, user_factory, manager):
    alice, mallory = user_factory("alice"), user_factory("mallory")
    post = _post_with_co_creator(db, alice)

    with pytest.raises(NotAuthorized):
        manager.attach(post.id, mallory.id, "https://cdn.example.test/x.jpg", MediaKind.IMAGE)
    with pytest.raises(ValidationError):
        manager.attach(post.id, alice.id, "https://cdn.example.test/x.gif", "gif")
    with pytest.raises(NotFound):
        manager.attach(uuid4(), alice.id, "https://cdn.example.test/x.jpg", MediaKind.IMAGE)


def test_partial_upload_keeps_good_items(db, user_factory, store, manager):
    alice, bob = user_factory("alice"), user_factory("bob")
    post = _post_with_co_creator(db, alice, bob)
    store.fail_on = {"broken.jpg"}

    results = manager.upload_and_attach(
        post.id,
        bob.id,
        [
            MediaUpload(filename="one.jpg", content_type="image/jpeg", data=b"\xff\xd8one"),
            MediaUpload(filename="broken.jpg", content_type="image/jpeg", data=b"\xff\xd8two"),
            MediaUpload(filename="notes.txt", content_type="text/plain", data=b"hello"),
            MediaUpload(filename="clip.mp4", content_type="video/mp4", data=b"\x00\x00clip"),
        ],
    )

    assert [result.ok for result in results] == [True, False, False, True]
    assert results[1].error == "storage_failure"
    assert results[2].error == "validation_error"
    attached = manager.list_media(post.id)
    assert [item.kind for item in attached] == ["image", "video"]
    assert all(item.uploader_id == bob.id for item in attached)
    assert len(store.objects) == 2


def test_upload_by_outsider_stores_nothing(db, user_factory, store, manager):
    alice, mallory = user_factory("alice"), user_factory("mallory")
    post = _post_with_co_creator(db, alice)

    with pytest.raises(NotAuthorized):
        manager.upload_and_attach(
            post.id,
            mallory.id,
            [MediaUpload(filename="one.jpg", content_type="image/jpeg", data=b"data")],
        )
    assert store.objects == {}


def test_upload_size_limits(db, user_factory, manager, monkeypatch):
    from collabfeed.config import get_settings

    alice = user_factory("alice")
    post = _post_with_co_creator(db, alice)
    monkeypatch.setattr(get_settings(), "media_max_image_bytes", 4)

    results = manager.upload_and_attach(
        post.id,
        alice.id,
        [
            MediaUpload(filename="big.png", content_type="image/png", data=b"12345"),
            MediaUpload(filename="empty.png", content_type="image/png", data=b""),
        ],
    )
    assert [result.error for result in results] == ["validation_error", "validation_error"]


def test_removal_permissions(db, user_factory, store, manager):
    alice, bob, carol = user_factory("alice"), user_factory("bob"), user_factory("carol")
    post = _post_with_co_creator(db, alice, bob)
    db.execute(post_co_creators.insert().values(post_id=post.id, user_id=carol.id))
    db.commit()

    bobs = manager.upload_and_attach(
        post.id, bob.id, [MediaUpload(filename="bob.jpg", content_type="image/jpeg", data=b"bob")]
    )[0].media
    alices = manager.attach(post.id, alice.id, "https://cdn.example.test/alice.jpg", MediaKind.IMAGE)

    with pytest.raises(NotAuthorized):
        manager.remove(alices.id, bob.id)
    with pytest.raises(NotAuthorized):
        manager.remove(bobs.id, carol.id)

    manager.remove(bobs.id, bob.id)
    assert store.deleted == [bobs.object_key]

    manager.remove(alices.id, alice.id)
    assert manager.list_media(post.id) == []
    with pytest.raises(NotFound):
        manager.remove(alices.id, alice.id)


def test_departed_co_creator_media_stays(db, user_factory, manager):
    alice, bob = user_factory("alice"), user_factory("bob")
    post = _post_with_co_creator(db, alice, bob)
    media = manager.attach(post.id, bob.id, "https://cdn.example.test/bob.jpg", MediaKind.IMAGE)

    db.execute(post_co_creators.delete().where(post_co_creators.c.user_id == bob.id))
    db.commit()

    assert [item.id for item in manager.list_media(post.id)] == [media.id]
    with pytest.raises(NotAuthorized):
        manager.remove(media.id, bob.id)


def test_last_media_of_textless_post_stays(db, user_factory, store, manager):
    alice = user_factory("alice")
    post = Post(owner_id=alice.id, body=None)
    db.add(post)
    db.commit()
    db.refresh(post)
    first = manager.attach(post.id, alice.id, ObjectRef(key="posts/a.jpg", url="https://cdn.example.test/a.jpg"), "image")
    second = manager.attach(post.id, alice.id, "https://cdn.example.test/b.jpg", MediaKind.IMAGE)

    manager.remove(second.id, alice.id)
    with pytest.raises(ValidationError):
        manager.remove(first.id, alice.id)

    assert [item.id for item in manager.list_media(post.id)] == [first.id]
    assert store.deleted == []
