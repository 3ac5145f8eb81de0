from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from eventhub.api.errors import http_error_from_service
from eventhub.api.v1.schemas.speakers import (
    InvitationCreate,
    InvitationOut,
    InvitationRespondIn,
    SpeakerOut,
)
from eventhub.auth.deps import CurrentUser
from eventhub.db import get_db
from eventhub.services import speakers_service
from eventhub.services.exceptions import ServiceError

router = APIRouter(tags=["speakers"])

DBSession = Annotated[Session, Depends(get_db)]


@router.get("/events/speakers/approved", response_model=list[SpeakerOut])
def approved_speakers(user: CurrentUser, db: DBSession):
    return speakers_service.list_approved_speakers(db)


@router.post(
    "/events/{event_id}/invite-speaker",
    response_model=InvitationOut,
    status_code=status.HTTP_201_CREATED,
)
def invite_speaker(
    event_id: uuid.UUID,
    payload: InvitationCreate,
    user: CurrentUser,
    db: DBSession,
    response: Response,
):
    try:
        invitation, created = speakers_service.invite_speaker(
            db, user, event_id, payload.speaker_id, payload.message
        )
    except ServiceError as err:
        raise http_error_from_service(err) from err

    if not created:
        response.status_code = status.HTTP_200_OK
    return InvitationOut.from_invitation(invitation)


@router.get("/events/{event_id}/invitations", response_model=list[InvitationOut])
def event_invitations(event_id: uuid.UUID, user: CurrentUser, db: DBSession):
    try:
        invitations = speakers_service.list_event_invitations(db, user, event_id)
    except ServiceError as err:
        raise http_error_from_service(err) from err
    return [InvitationOut.from_invitation(invitation) for invitation in invitations]


@router.get("/users/me/speaker-invitations", response_model=list[InvitationOut])
def my_invitations(user: CurrentUser, db: DBSession):
    return [
        InvitationOut.from_invitation(invitation)
        for invitation in speakers_service.list_my_invitations(db, user)
    ]


@router.put("/users/speaker-invitations/{invitation_id}/respond", response_model=InvitationOut)
def respond_to_invitation(
    invitation_id: uuid.UUID,
    payload: InvitationRespondIn,
    user: CurrentUser,
    db: DBSession,
):
    try:
        invitation = speakers_service.respond(db, user, invitation_id, payload.action)
    except ServiceError as err:
        raise http_error_from_service(err) from err
    return InvitationOut.from_invitation(invitation)
