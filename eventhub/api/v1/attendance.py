from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from eventhub.api.errors import http_error_from_service
from eventhub.api.v1.schemas.tickets import (
    CheckInIn,
    EventStatisticsOut,
    EventStatisticsSummaryOut,
    EventTicketsOut,
    PurchaseIn,
    TicketOut,
)
from eventhub.auth.deps import CurrentUser
from eventhub.db import get_db
from eventhub.services import checkin_service, statistics_service, tickets_service
from eventhub.services.exceptions import ServiceError
from eventhub.services.timeutils import local_now

router = APIRouter(prefix="/events", tags=["tickets"])

DBSession = Annotated[Session, Depends(get_db)]


@router.get("/my-tickets", response_model=list[TicketOut])
def my_tickets(user: CurrentUser, db: DBSession):
    now = local_now()
    return [
        TicketOut.from_ticket(
            ticket,
            status=checkin_service.effective_check_in_status(ticket, ticket.event, now),
            event=ticket.event,
        )
        for ticket in tickets_service.list_my_tickets(db, user)
    ]


@router.get("/statistics/all", response_model=list[EventStatisticsSummaryOut])
def all_statistics(user: CurrentUser, db: DBSession):
    return statistics_service.all_event_statistics(db, user)


@router.post("/tickets/check-in", response_model=TicketOut)
def check_in(payload: CheckInIn, user: CurrentUser, db: DBSession):
    try:
        ticket = checkin_service.check_in(db, user, payload.event_id, payload.ticket_code)
    except ServiceError as err:
        raise http_error_from_service(err) from err
    return TicketOut.from_ticket(ticket, with_attendee=True)


@router.post("/tickets/check-out", response_model=TicketOut)
def check_out(payload: CheckInIn, user: CurrentUser, db: DBSession):
    try:
        ticket = checkin_service.check_out(db, user, payload.event_id, payload.ticket_code)
    except ServiceError as err:
        raise http_error_from_service(err) from err
    return TicketOut.from_ticket(ticket, with_attendee=True)


@router.post("/{event_id}/register", response_model=TicketOut, status_code=status.HTTP_201_CREATED)
def register(event_id: uuid.UUID, user: CurrentUser, db: DBSession):
    try:
        ticket = tickets_service.register_free(db, user, event_id)
    except ServiceError as err:
        raise http_error_from_service(err) from err
    return TicketOut.from_ticket(ticket)


@router.post(
    "/{event_id}/purchase-ticket",
    response_model=TicketOut,
    status_code=status.HTTP_201_CREATED,
)
def purchase_ticket(
    event_id: uuid.UUID,
    user: CurrentUser,
    db: DBSession,
    payload: PurchaseIn | None = None,
):
    discount_code = payload.discount_code if payload else None
    try:
        ticket = tickets_service.purchase_paid(db, user, event_id, discount_code=discount_code)
    except ServiceError as err:
        raise http_error_from_service(err) from err
    return TicketOut.from_ticket(ticket)


@router.post("/{event_id}/unregister")
def unregister(event_id: uuid.UUID, user: CurrentUser, db: DBSession):
    try:
        tickets_service.unregister(db, user, event_id)
    except ServiceError as err:
        raise http_error_from_service(err) from err
    return {"status": "unregistered", "event_id": str(event_id)}


@router.get("/{event_id}/tickets", response_model=EventTicketsOut)
def event_tickets(event_id: uuid.UUID, user: CurrentUser, db: DBSession):
    try:
        event, tickets = tickets_service.list_event_tickets(db, user, event_id)
    except ServiceError as err:
        raise http_error_from_service(err) from err

    now = local_now()
    return EventTicketsOut(
        event_id=event.id,
        title=event.title,
        capacity=event.capacity,
        tickets=[
            TicketOut.from_ticket(
                ticket,
                status=checkin_service.effective_check_in_status(ticket, event, now),
                with_attendee=True,
            )
            for ticket in tickets
        ],
    )


@router.get("/{event_id}/statistics", response_model=EventStatisticsOut)
def event_statistics(event_id: uuid.UUID, user: CurrentUser, db: DBSession):
    try:
        return statistics_service.event_statistics(db, user, event_id)
    except ServiceError as err:
        raise http_error_from_service(err) from err
