from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from eventhub.api.errors import http_error_from_service
from eventhub.api.v1.schemas.speakers import SpeakerOut, SpeakerRequestIn
from eventhub.api.v1.schemas.users import PublicProfileOut, UserOut, UserSummaryOut, UserUpdate
from eventhub.auth.deps import AdminUser, CurrentUser
from eventhub.db import get_db
from eventhub.models.user import UserRole
from eventhub.services import speakers_service, users_service
from eventhub.services.exceptions import ServiceError

router = APIRouter(prefix="/users", tags=["users"])

DBSession = Annotated[Session, Depends(get_db)]


@router.get("/me", response_model=UserOut)
def me(user: CurrentUser):
    return user


@router.put("/me", response_model=UserOut)
def update_me(payload: UserUpdate, user: CurrentUser, db: DBSession):
    try:
        return users_service.update_profile(db, user, payload)
    except ServiceError as err:
        raise http_error_from_service(err) from err


@router.get("/details", response_model=list[UserSummaryOut])
def users_details(user: CurrentUser, db: DBSession, ids: str = Query(min_length=1)):
    try:
        user_ids = [uuid.UUID(part.strip()) for part in ids.split(",") if part.strip()]
    except ValueError:
        raise HTTPException(status_code=400, detail="invalid user id") from None
    return users_service.get_users_by_ids(db, user_ids)


@router.get("/speaker-requests", response_model=list[SpeakerOut])
def pending_speaker_requests(admin: AdminUser, db: DBSession):
    return speakers_service.list_pending_requests(db)


@router.put("/speaker-requests/{user_id}/approve", response_model=SpeakerOut)
def approve_speaker_request(user_id: uuid.UUID, admin: AdminUser, db: DBSession):
    try:
        return speakers_service.approve_speaker(db, user_id)
    except ServiceError as err:
        raise http_error_from_service(err) from err


@router.put("/speaker-requests/{user_id}/reject", response_model=SpeakerOut)
def reject_speaker_request(user_id: uuid.UUID, admin: AdminUser, db: DBSession):
    try:
        return speakers_service.reject_speaker(db, user_id)
    except ServiceError as err:
        raise http_error_from_service(err) from err


@router.post("/request-speaker", response_model=SpeakerOut)
def request_speaker(payload: SpeakerRequestIn, user: CurrentUser, db: DBSession):
    try:
        return speakers_service.request_speaker(db, user, payload)
    except ServiceError as err:
        raise http_error_from_service(err) from err


@router.get("/{user_id}/profile", response_model=UserOut | PublicProfileOut)
def user_profile(user_id: uuid.UUID, viewer: CurrentUser, db: DBSession):
    try:
        target = users_service.get_user(db, user_id)
    except ServiceError as err:
        raise http_error_from_service(err) from err

    # Admins see the full record; everyone else sees the public fields
    if viewer.role == UserRole.ADMIN:
        return UserOut.model_validate(target)
    return PublicProfileOut.model_validate(target)
