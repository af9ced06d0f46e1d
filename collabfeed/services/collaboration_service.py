"""Co-creator invitations and their invited/accepted/declined transitions."""
from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import delete, insert, literal, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..models import CollaborationInvite, InviteStatus, User, post_co_creators
from ..models.base import utcnow
from .errors import AlreadyCoCreator, AlreadyInvited, NotAllowed, NotAuthorized, NotFound, ValidationError
from .notification_service import NotificationEmitter, NotificationType
from .permissions import load_co_creator_ids
from .persistence import commit_or_raise, get_post_or_raise

logger = logging.getLogger(__name__)


class CollaborationService:
    def __init__(self, db: Session, *, notifier: NotificationEmitter) -> None:
        self.db = db
        self.notifier = notifier

    def invite(self, post_id: UUID, inviter_id: UUID, invitee_id: UUID) -> CollaborationInvite:
        """Offer co-creator status on ``post_id`` to ``invitee_id``."""

        post = get_post_or_raise(self.db, post_id)
        co_creator_ids = load_co_creator_ids(self.db, post_id)

        if inviter_id != post.owner_id:
            inviter_row = self.db.get(CollaborationInvite, (post_id, inviter_id))
            if inviter_id not in co_creator_ids or inviter_row is None or not inviter_row.can_edit:
                raise NotAuthorized("Only the owner or a co-creator with edit rights may invite")

        if invitee_id == post.owner_id:
            raise ValidationError("The owner cannot be invited to their own post")
        if self.db.get(User, invitee_id) is None:
            raise NotFound("User not found")
        if invitee_id in co_creator_ids:
            raise AlreadyCoCreator("User is already a co-creator")

        existing = self.db.get(CollaborationInvite, (post_id, invitee_id))
        if existing is not None:
            # Declined or departed collaborators get the same keyed row reset.
            result = self.db.execute(
                update(CollaborationInvite)
                .where(
                    CollaborationInvite.post_id == post_id,
                    CollaborationInvite.invitee_id == invitee_id,
                    CollaborationInvite.status != InviteStatus.INVITED.value,
                )
                .values(
                    status=InviteStatus.INVITED.value,
                    inviter_id=inviter_id,
                    can_edit=False,
                    created_at=utcnow(),
                    responded_at=None,
                )
            )
            if result.rowcount == 0:
                self.db.rollback()
                raise AlreadyInvited("User already has a pending invite")
            commit_or_raise(self.db, "re-invite collaborator")
            self.db.refresh(existing)
            invite = existing
        else:
            invite = CollaborationInvite(
                post_id=post_id,
                invitee_id=invitee_id,
                inviter_id=inviter_id,
                status=InviteStatus.INVITED.value,
                can_edit=False,
            )
            self.db.add(invite)
            try:
                self.db.commit()
            except IntegrityError as exc:
                self.db.rollback()
                raise AlreadyInvited("User already has a pending invite") from exc
            self.db.refresh(invite)

        self.notifier.notify(
            invitee_id,
            NotificationType.COLLAB_INVITE,
            {"post_id": post_id, "from_user_id": inviter_id},
            sender_id=inviter_id,
        )
        return invite

    def respond(self, post_id: UUID, invitee_id: UUID, accept: bool) -> CollaborationInvite:
        """Accept or decline a pending invite; repeating the same answer is a no-op."""

        invite = self.db.get(CollaborationInvite, (post_id, invitee_id))
        if invite is None:
            raise NotFound("Invite not found")
        post = get_post_or_raise(self.db, post_id)

        target = InviteStatus.ACCEPTED if accept else InviteStatus.DECLINED
        now = utcnow()
        result = self.db.execute(
            update(CollaborationInvite)
            .where(
                CollaborationInvite.post_id == post_id,
                CollaborationInvite.invitee_id == invitee_id,
                CollaborationInvite.status == InviteStatus.INVITED.value,
            )
            .values(status=target.value, can_edit=accept, responded_at=now)
        )
        if result.rowcount == 0:
            self.db.rollback()
            self.db.refresh(invite)
            if invite.status == target.value:
                return invite
            raise NotAllowed(f"Invite was already {invite.status}")

        if accept:
            self._append_co_creator(post_id, invitee_id, now)

        try:
            self.db.commit()
        except IntegrityError:
            # A concurrent acceptance already appended the co-creator.
            self.db.rollback()
            self.db.refresh(invite)
            if invite.status == target.value:
                return invite
            raise NotAllowed(f"Invite was already {invite.status}")
        self.db.refresh(invite)

        self.notifier.notify(
            post.owner_id,
            NotificationType.COLLAB_ACCEPTED if accept else NotificationType.COLLAB_DECLINED,
            {"post_id": post_id, "from_user_id": invitee_id, "accepted": accept},
            sender_id=invitee_id,
        )
        return invite

    def remove_self(self, post_id: UUID, user_id: UUID) -> None:
        """Leave the co-creator set; previously uploaded media stays on the post."""

        post = get_post_or_raise(self.db, post_id)
        if post.owner_id == user_id:
            raise NotAuthorized("The owner cannot leave their own post")

        result = self.db.execute(
            delete(post_co_creators).where(
                post_co_creators.c.post_id == post_id,
                post_co_creators.c.user_id == user_id,
            )
        )
        if result.rowcount == 0:
            self.db.rollback()
            raise NotAuthorized("Not a co-creator of this post")

        self.db.execute(
            update(CollaborationInvite)
            .where(CollaborationInvite.post_id == post_id, CollaborationInvite.invitee_id == user_id)
            .values(can_edit=False)
        )
        commit_or_raise(self.db, "remove co-creator")
        logger.info("User %s left post %s as co-creator", user_id, post_id)

    def list_invites_for(self, user_id: UUID, *, status: InviteStatus | None = None) -> list[CollaborationInvite]:
        stmt = select(CollaborationInvite).where(CollaborationInvite.invitee_id == user_id)
        if status is not None:
            stmt = stmt.where(CollaborationInvite.status == status.value)
        stmt = stmt.order_by(CollaborationInvite.created_at.desc())
        return list(self.db.scalars(stmt))

    def list_collaborators(self, post_id: UUID) -> list[CollaborationInvite]:
        get_post_or_raise(self.db, post_id)
        stmt = (
            select(CollaborationInvite)
            .where(CollaborationInvite.post_id == post_id)
            .order_by(CollaborationInvite.created_at.asc())
        )
        return list(self.db.scalars(stmt))

    def _append_co_creator(self, post_id: UUID, user_id: UUID, added_at) -> None:
        already_present = (
            select(post_co_creators.c.user_id)
            .where(post_co_creators.c.post_id == post_id, post_co_creators.c.user_id == user_id)
        )
        source = select(
            literal(post_id, type_=post_co_creators.c.post_id.type),
            literal(user_id, type_=post_co_creators.c.user_id.type),
            literal(added_at, type_=post_co_creators.c.added_at.type),
        ).where(~already_present.exists())
        self.db.execute(insert(post_co_creators).from_select(["post_id", "user_id", "added_at"], source))


__all__ = ["CollaborationService"]
