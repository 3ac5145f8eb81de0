"""Room booking conflicts.

A candidate booking is widened by ``BOOKING_BUFFER`` on both sides and then
compared against the raw time ranges of the other events booked in the same
room on the same calendar date. Events in a room therefore need a gap of more
than one hour between them (exactly one hour is accepted).
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, time, timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from eventhub.models import Event
from eventhub.models.event import EventStatus
from eventhub.services.error_codes import ErrorCode
from eventhub.services.exceptions import ConflictError

BOOKING_BUFFER = timedelta(hours=1)


def buffered_window(start_time: time, end_time: time) -> tuple[time, time]:
    """Return ``(start - buffer, end + buffer)`` clamped to the same day."""
    anchor = date(2000, 1, 1)
    start = datetime.combine(anchor, start_time) - BOOKING_BUFFER
    end = datetime.combine(anchor, end_time) + BOOKING_BUFFER

    buffered_start = start.time() if start.date() == anchor else time.min
    buffered_end = end.time() if end.date() == anchor else time.max
    return buffered_start, buffered_end


def find_conflicting_event(
    db: Session,
    room_number: int,
    event_date: date,
    start_time: time,
    end_time: time,
    exclude_event_id: uuid.UUID | None = None,
) -> Event | None:
    buffered_start, buffered_end = buffered_window(start_time, end_time)

    stmt = (
        select(Event)
        .where(
            Event.room_number == room_number,
            Event.date == event_date,
            Event.status != EventStatus.CANCELLED,
            Event.start_time < buffered_end,
            Event.end_time > buffered_start,
        )
        .order_by(Event.start_time)
        .limit(1)
    )
    if exclude_event_id is not None:
        stmt = stmt.where(Event.id != exclude_event_id)

    return db.scalar(stmt)


def ensure_room_available(
    db: Session,
    room_number: int,
    event_date: date,
    start_time: time,
    end_time: time,
    exclude_event_id: uuid.UUID | None = None,
) -> None:
    conflict = find_conflicting_event(
        db, room_number, event_date, start_time, end_time, exclude_event_id
    )
    if conflict is None:
        return

    raise ConflictError(
        ErrorCode.ROOM_UNAVAILABLE,
        f"room {room_number} is already booked from {conflict.start_time:%H:%M} "
        f"to {conflict.end_time:%H:%M} on this date; leave more than one hour "
        "after the previous event ends",
    )
