from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from eventhub.api.errors import http_error_from_service
from eventhub.api.v1.schemas.events import (
    DateFilter,
    EventCreate,
    EventDeletedOut,
    EventOut,
    EventUpdate,
)
from eventhub.auth.deps import CurrentUser
from eventhub.db import get_db
from eventhub.services import events_service
from eventhub.services.exceptions import ServiceError

router = APIRouter(prefix="/events", tags=["events"])

DBSession = Annotated[Session, Depends(get_db)]


@router.get("/my-events", response_model=list[EventOut])
def my_events(user: CurrentUser, db: DBSession):
    return [EventOut.from_event(event) for event in events_service.list_my_events(db, user)]


@router.get("/featured", response_model=list[EventOut])
def featured_events(db: DBSession):
    return [EventOut.from_event(event) for event in events_service.list_featured_events(db)]


@router.get("/upcoming", response_model=list[EventOut])
def upcoming_events(db: DBSession):
    return [EventOut.from_event(event) for event in events_service.list_upcoming_events(db)]


@router.get("/organizer/{organizer_id}", response_model=list[EventOut])
def organizer_events(organizer_id: uuid.UUID, db: DBSession):
    events = events_service.list_events_by_organizer(db, organizer_id)
    return [EventOut.from_event(event) for event in events]


@router.get("", response_model=list[EventOut])
def list_events(
    db: DBSession,
    search: str | None = Query(default=None, min_length=1, max_length=200),
    category: str | None = Query(default=None),
    date_filter: DateFilter | None = Query(default=None, alias="date"),
):
    events = events_service.list_events(
        db, search=search, category=category, date_filter=date_filter
    )
    return [EventOut.from_event(event) for event in events]


@router.post("", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(payload: EventCreate, user: CurrentUser, db: DBSession):
    try:
        event = events_service.create_event(db, user, payload)
    except ServiceError as err:
        raise http_error_from_service(err) from err
    return EventOut.from_event(event)


@router.get("/{event_id}", response_model=EventOut)
def get_event(event_id: uuid.UUID, db: DBSession):
    try:
        event = events_service.get_event(db, event_id)
    except ServiceError as err:
        raise http_error_from_service(err) from err
    return EventOut.from_event(event)


@router.put("/{event_id}", response_model=EventOut)
def update_event(event_id: uuid.UUID, payload: EventUpdate, user: CurrentUser, db: DBSession):
    try:
        event = events_service.update_event(db, user, event_id, payload)
    except ServiceError as err:
        raise http_error_from_service(err) from err
    return EventOut.from_event(event)


@router.delete("/{event_id}", response_model=EventDeletedOut)
def delete_event(event_id: uuid.UUID, user: CurrentUser, db: DBSession):
    try:
        deleted_tickets = events_service.delete_event(db, user, event_id)
    except ServiceError as err:
        raise http_error_from_service(err) from err
    return EventDeletedOut(event_id=event_id, deleted_tickets=deleted_tickets)
