from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from eventhub.models import Event, Ticket, User
from eventhub.models.ticket import CheckInStatus
from eventhub.services import events_service
from eventhub.services.timeutils import local_now


def event_statistics(db: Session, caller: User, event_id: Any, now: datetime | None = None) -> dict:
    event = events_service.get_event(db, event_id)
    events_service.require_manage_permission(
        caller, event, "not allowed to view statistics for this event"
    )

    total, checked_in = db.execute(
        select(
            func.count(Ticket.id),
            func.coalesce(
                func.sum(case((Ticket.check_in_status == CheckInStatus.CHECKED_IN, 1), else_=0)), 0
            ),
        ).where(Ticket.event_id == event.id)
    ).one()
    pending = int(total) - int(checked_in)

    # Pending tickets of an ended event are reported as no-shows
    no_show = 0
    if events_service.has_ended(event, now or local_now()):
        no_show, pending = pending, 0

    return {
        "event_id": event.id,
        "event_name": event.title,
        "total_sold_tickets": int(total),
        "checked_in_tickets": int(checked_in),
        "pending_tickets": pending,
        "no_show_tickets": no_show,
    }


def all_event_statistics(db: Session, caller: User) -> list[dict]:
    checked_in = func.coalesce(
        func.sum(case((Ticket.check_in_status == CheckInStatus.CHECKED_IN, 1), else_=0)), 0
    )
    stmt = (
        select(Event.id, Event.title, func.count(Ticket.id), checked_in)
        .outerjoin(Ticket, Ticket.event_id == Event.id)
        .group_by(Event.id, Event.title, Event.date, Event.start_time)
        .order_by(Event.date.desc(), Event.start_time.desc())
    )
    if not events_service.is_admin(caller):
        stmt = stmt.where(Event.organizer_id == caller.id)

    return [
        {
            "event_id": event_id,
            "title": title,
            "total_tickets": int(total),
            "checked_in_count": int(count),
        }
        for event_id, title, total, count in db.execute(stmt).all()
    ]
