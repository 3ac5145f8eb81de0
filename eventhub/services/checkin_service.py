from __future__ import annotations

from datetime import datetime
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.orm import Session

from eventhub.models import Event, Ticket, User
from eventhub.models.ticket import CheckInStatus
from eventhub.services import events_service
from eventhub.services.error_codes import ErrorCode
from eventhub.services.exceptions import ConflictError, NotFoundError
from eventhub.services.timeutils import utcnow

logger = structlog.get_logger()


def effective_check_in_status(
    ticket: Ticket, event: Event, now: datetime | None = None
) -> CheckInStatus:
    """Stored status, or ``noShow`` for a pending ticket of an event that has ended."""
    if ticket.check_in_status == CheckInStatus.PENDING and events_service.has_ended(event, now):
        return CheckInStatus.NO_SHOW
    return ticket.check_in_status


def _load_ticket(db: Session, caller: User, event_id: Any, ticket_code: str) -> Ticket:
    event = events_service.get_event(db, event_id)
    events_service.require_manage_permission(
        caller, event, "only the organizer can check attendees in"
    )

    ticket = db.scalar(
        select(Ticket)
        .where(Ticket.ticket_code == ticket_code.strip(), Ticket.event_id == event.id)
        .with_for_update()
    )
    if not ticket:
        raise NotFoundError(ErrorCode.TICKET_NOT_FOUND, "ticket not found for this event")
    return ticket


def check_in(db: Session, caller: User, event_id: Any, ticket_code: str) -> Ticket:
    ticket = _load_ticket(db, caller, event_id, ticket_code)
    if ticket.check_in_status != CheckInStatus.PENDING:
        raise ConflictError(ErrorCode.ALREADY_CHECKED_IN, "ticket is already checked in")

    ticket.check_in_status = CheckInStatus.CHECKED_IN
    ticket.check_in_time = utcnow()
    db.add(ticket)
    db.commit()
    db.refresh(ticket)

    logger.info("ticket_checked_in", ticket_id=str(ticket.id), event_id=str(ticket.event_id))
    return ticket


def check_out(db: Session, caller: User, event_id: Any, ticket_code: str) -> Ticket:
    ticket = _load_ticket(db, caller, event_id, ticket_code)
    if ticket.check_in_status == CheckInStatus.PENDING:
        raise ConflictError(ErrorCode.NOT_CHECKED_IN, "ticket is not checked in")

    ticket.check_in_status = CheckInStatus.PENDING
    ticket.check_in_time = None
    db.add(ticket)
    db.commit()
    db.refresh(ticket)

    logger.info("ticket_checked_out", ticket_id=str(ticket.id), event_id=str(ticket.event_id))
    return ticket
