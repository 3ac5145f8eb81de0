from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from eventhub import notifications
from eventhub.api.v1.schemas.speakers import InvitationAction, SpeakerRequestIn
from eventhub.models import SpeakerInvitation, User
from eventhub.models.speaker_invitation import InvitationStatus
from eventhub.models.user import SpeakerStatus
from eventhub.services import events_service
from eventhub.services.error_codes import ErrorCode
from eventhub.services.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from eventhub.services.timeutils import utcnow

logger = structlog.get_logger()


def _get_user(db: Session, user_id: Any) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError(ErrorCode.USER_NOT_FOUND, "user not found")
    return user


# Speaker requests


def request_speaker(db: Session, user: User, payload: SpeakerRequestIn) -> User:
    if user.speaker_status == SpeakerStatus.APPROVED:
        raise ConflictError(
            ErrorCode.SPEAKER_ALREADY_APPROVED, "you are already an approved speaker"
        )
    if user.speaker_status == SpeakerStatus.PENDING:
        raise ConflictError(
            ErrorCode.SPEAKER_REQUEST_PENDING, "your speaker request is already pending review"
        )

    user.speaker_status = SpeakerStatus.PENDING
    user.speaker_bio = payload.bio
    user.speaker_topics = payload.topics
    user.speaker_image = payload.image
    user.speaker_request_date = utcnow()
    user.speaker_approval_date = None
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info("speaker_requested", user_id=str(user.id))
    return user


def list_pending_requests(db: Session) -> list[User]:
    stmt = (
        select(User)
        .where(User.speaker_status == SpeakerStatus.PENDING)
        .order_by(User.speaker_request_date)
    )
    return list(db.scalars(stmt).all())


def approve_speaker(db: Session, user_id: Any) -> User:
    user = _get_user(db, user_id)
    if user.speaker_status == SpeakerStatus.APPROVED:
        raise ConflictError(
            ErrorCode.SPEAKER_ALREADY_APPROVED, "user is already an approved speaker"
        )
    if user.speaker_status == SpeakerStatus.NONE:
        raise ValidationError(
            ErrorCode.INVALID_SPEAKER_REQUEST, "user has not requested speaker status"
        )

    user.speaker_status = SpeakerStatus.APPROVED
    user.speaker_approval_date = utcnow()
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info("speaker_approved", user_id=str(user.id))
    notifications.send_speaker_approved(user)
    return user


def reject_speaker(db: Session, user_id: Any) -> User:
    user = _get_user(db, user_id)
    if user.speaker_status == SpeakerStatus.REJECTED:
        raise ConflictError(
            ErrorCode.SPEAKER_ALREADY_REJECTED, "user's speaker request is already rejected"
        )
    if user.speaker_status == SpeakerStatus.NONE:
        raise ValidationError(
            ErrorCode.INVALID_SPEAKER_REQUEST, "user has not requested speaker status"
        )

    user.speaker_status = SpeakerStatus.REJECTED
    user.speaker_approval_date = None
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info("speaker_rejected", user_id=str(user.id))
    notifications.send_speaker_rejected(user)
    return user


def list_approved_speakers(db: Session) -> list[User]:
    stmt = (
        select(User)
        .where(User.speaker_status == SpeakerStatus.APPROVED)
        .order_by(User.username)
    )
    return list(db.scalars(stmt).all())


# Invitations


def _invitation_query():
    return select(SpeakerInvitation).options(
        selectinload(SpeakerInvitation.event),
        selectinload(SpeakerInvitation.speaker),
        selectinload(SpeakerInvitation.organizer),
    )


def invite_speaker(
    db: Session,
    organizer: User,
    event_id: Any,
    speaker_id: Any,
    message: str | None = None,
) -> tuple[SpeakerInvitation, bool]:
    """Invite an approved speaker; returns ``(invitation, created)``.

    A previously declined invitation is reopened instead of duplicated.
    """
    event = events_service.get_event(db, event_id)
    if event.organizer_id != organizer.id:
        raise PermissionDeniedError(
            ErrorCode.NOT_EVENT_ORGANIZER, "only the event organizer can invite speakers"
        )

    speaker = _get_user(db, speaker_id)
    if speaker.speaker_status != SpeakerStatus.APPROVED:
        raise ValidationError(ErrorCode.SPEAKER_NOT_APPROVED, "user is not an approved speaker")

    invitation = db.scalar(
        select(SpeakerInvitation).where(
            SpeakerInvitation.event_id == event.id,
            SpeakerInvitation.speaker_id == speaker.id,
            SpeakerInvitation.organizer_id == organizer.id,
        )
    )
    created = invitation is None
    if invitation is not None:
        if invitation.status != InvitationStatus.DECLINED:
            raise ConflictError(
                ErrorCode.INVITATION_EXISTS,
                f"speaker already has a {invitation.status.value} invitation for this event",
            )
        invitation.status = InvitationStatus.PENDING
        invitation.invitation_date = utcnow()
        invitation.response_date = None
        invitation.message = message
    else:
        invitation = SpeakerInvitation(
            event_id=event.id,
            speaker_id=speaker.id,
            organizer_id=organizer.id,
            status=InvitationStatus.PENDING,
            message=message,
        )
    db.add(invitation)

    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(
            ErrorCode.INVITATION_EXISTS, "speaker already invited to this event"
        ) from exc
    db.refresh(invitation)

    logger.info(
        "speaker_invited",
        invitation_id=str(invitation.id),
        event_id=str(event.id),
        speaker_id=str(speaker.id),
        reopened=not created,
    )
    notifications.send_invitation_received(speaker, organizer, event, invitation)
    return invitation, created


def list_event_invitations(db: Session, caller: User, event_id: Any) -> list[SpeakerInvitation]:
    event = events_service.get_event(db, event_id)
    events_service.require_manage_permission(
        caller, event, "not allowed to view invitations for this event"
    )
    stmt = (
        _invitation_query()
        .where(SpeakerInvitation.event_id == event.id)
        .order_by(SpeakerInvitation.invitation_date.desc())
    )
    return list(db.scalars(stmt).all())


def list_my_invitations(db: Session, speaker: User) -> list[SpeakerInvitation]:
    stmt = (
        _invitation_query()
        .where(SpeakerInvitation.speaker_id == speaker.id)
        .order_by(SpeakerInvitation.invitation_date.desc())
    )
    return list(db.scalars(stmt).all())


def respond(db: Session, speaker: User, invitation_id: Any, action: str) -> SpeakerInvitation:
    try:
        choice = InvitationAction(action)
    except ValueError:
        raise ValidationError(
            ErrorCode.INVALID_INVITATION_ACTION, 'action must be "accepted" or "declined"'
        ) from None

    invitation = db.scalar(_invitation_query().where(SpeakerInvitation.id == invitation_id))
    if not invitation:
        raise NotFoundError(ErrorCode.INVITATION_NOT_FOUND, "invitation not found")
    if invitation.speaker_id != speaker.id:
        raise PermissionDeniedError(
            ErrorCode.NOT_INVITED_SPEAKER, "not allowed to respond to this invitation"
        )
    if invitation.status != InvitationStatus.PENDING:
        raise ConflictError(
            ErrorCode.INVITATION_NOT_PENDING,
            f'invitation is already "{invitation.status.value}"',
        )

    invitation.status = (
        InvitationStatus.ACCEPTED
        if choice == InvitationAction.ACCEPTED
        else InvitationStatus.DECLINED
    )
    invitation.response_date = utcnow()
    db.add(invitation)
    db.commit()
    db.refresh(invitation)

    logger.info(
        "invitation_answered",
        invitation_id=str(invitation.id),
        status=invitation.status.value,
    )
    if invitation.status == InvitationStatus.ACCEPTED:
        notifications.send_invitation_accepted(speaker, invitation.event)
    return invitation
