from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from typing import Any

import structlog
from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.orm import Session

from eventhub.api.v1.schemas.events import DateFilter, EventCreate, EventUpdate
from eventhub.models import Event, Ticket, User
from eventhub.models.event import EventStatus
from eventhub.models.user import UserRole
from eventhub.services.availability import ensure_room_available
from eventhub.services.error_codes import ErrorCode
from eventhub.services.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from eventhub.services.timeutils import event_datetime, local_now

logger = structlog.get_logger()

MIN_ROOM_NUMBER = 1
MAX_ROOM_NUMBER = 10
SEATS_PER_ROOM = 100

BOOKING_FIELDS = ("date", "start_time", "end_time", "room_number")
NULLABLE_FIELDS = {
    "address",
    "image",
    "long_description",
    "organizer_image",
    "organizer_description",
    "schedule",
}


def capacity_for_room(room_number: int) -> int:
    return room_number * SEATS_PER_ROOM


def event_end(event: Event) -> datetime:
    return event_datetime(event.date, event.end_time)


def has_ended(event: Event, now: datetime | None = None) -> bool:
    return event_end(event) < (now or local_now())


def is_admin(user: User) -> bool:
    return user.role == UserRole.ADMIN


def can_manage(user: User, event: Event) -> bool:
    return is_admin(user) or event.organizer_id == user.id


def require_manage_permission(
    user: User, event: Event, message: str = "not organizer for this event"
) -> None:
    if not can_manage(user, event):
        raise PermissionDeniedError(ErrorCode.NOT_EVENT_ORGANIZER, message)


def get_event(db: Session, event_id: Any) -> Event:
    event = db.get(Event, event_id)
    if not event:
        raise NotFoundError(ErrorCode.EVENT_NOT_FOUND, "event not found")
    return event


def _validate_room_number(room_number: Any) -> int:
    if isinstance(room_number, bool) or not isinstance(room_number, int):
        raise ValidationError(
            ErrorCode.INVALID_ROOM_NUMBER, "room number must be an integer from 1 to 10"
        )
    if room_number < MIN_ROOM_NUMBER or room_number > MAX_ROOM_NUMBER:
        raise ValidationError(
            ErrorCode.INVALID_ROOM_NUMBER, "room number must be an integer from 1 to 10"
        )
    return room_number


def _issued_ticket_count(db: Session, event_id: Any) -> int:
    return int(
        db.scalar(select(func.count()).select_from(Ticket).where(Ticket.event_id == event_id)) or 0
    )


def create_event(db: Session, organizer: User, payload: EventCreate) -> Event:
    room_number = _validate_room_number(payload.room_number)
    if payload.end_time <= payload.start_time:
        raise ValidationError(ErrorCode.INVALID_TIME_RANGE, "end_time must be after start_time")

    if not payload.is_free and payload.price is None:
        raise ValidationError(ErrorCode.INVALID_PRICE, "paid events need a price")

    ensure_room_available(db, room_number, payload.date, payload.start_time, payload.end_time)

    event = Event(
        title=payload.title,
        date=payload.date,
        start_time=payload.start_time,
        end_time=payload.end_time,
        location=payload.location,
        address=payload.address,
        image=payload.image,
        category=payload.category,
        description=payload.description,
        long_description=payload.long_description or payload.description,
        is_free=payload.is_free,
        price_amount=None if payload.is_free else payload.price.amount,
        price_currency=None if payload.is_free else payload.price.currency,
        organizer_id=organizer.id,
        organizer_name=payload.organizer_name or organizer.username,
        organizer_image=payload.organizer_image,
        organizer_description=payload.organizer_description,
        room_number=room_number,
        capacity=capacity_for_room(room_number),
        status=EventStatus.ACTIVE,
        schedule=[item.model_dump() for item in payload.schedule],
        is_featured=payload.is_featured,
        is_upcoming=payload.is_upcoming,
    )
    db.add(event)
    db.commit()
    db.refresh(event)

    logger.info(
        "event_created",
        event_id=str(event.id),
        organizer_id=str(organizer.id),
        room_number=event.room_number,
        date=event.date.isoformat(),
    )
    return event


def update_event(db: Session, user: User, event_id: Any, patch: EventUpdate) -> Event:
    event = get_event(db, event_id)
    require_manage_permission(user, event, "not allowed to update this event")

    if has_ended(event):
        raise ConflictError(ErrorCode.EVENT_ENDED, "cannot edit an event that has already ended")

    patch_data = patch.model_dump(exclude_unset=True)

    if "room_number" in patch_data:
        if patch_data["room_number"] is None:
            patch_data.pop("room_number")
        else:
            _validate_room_number(patch_data["room_number"])

    new_date = patch_data.get("date") or event.date
    new_start = patch_data.get("start_time") or event.start_time
    new_end = patch_data.get("end_time") or event.end_time
    new_room = patch_data.get("room_number", event.room_number)

    if new_end <= new_start:
        raise ValidationError(ErrorCode.INVALID_TIME_RANGE, "end_time must be after start_time")

    new_status = patch_data.get("status") or event.status
    # Cancelled events hold no slot, so bringing one back must claim it again
    reactivating = event.status == EventStatus.CANCELLED and new_status != EventStatus.CANCELLED
    if reactivating or any(patch_data.get(key) is not None for key in BOOKING_FIELDS):
        ensure_room_available(
            db, new_room, new_date, new_start, new_end, exclude_event_id=event.id
        )

    if new_room != event.room_number:
        new_capacity = capacity_for_room(new_room)
        if new_capacity < _issued_ticket_count(db, event.id):
            raise ConflictError(
                ErrorCode.CAPACITY_BELOW_TICKETS,
                "capacity cannot be below the number of tickets already issued",
            )

    is_free = patch_data.get("is_free")
    if is_free is None:
        is_free = event.is_free
    price = patch_data.pop("price", None)
    if not is_free and price is None and event.price_amount is None:
        raise ValidationError(ErrorCode.INVALID_PRICE, "paid events need a price")

    for key in [key for key, value in patch_data.items() if value is None]:
        if key not in NULLABLE_FIELDS:
            patch_data.pop(key)

    for key, value in patch_data.items():
        if key == "schedule":
            value = value or []
        setattr(event, key, value)

    event.capacity = capacity_for_room(event.room_number)
    if event.is_free:
        event.price_amount = None
        event.price_currency = None
    elif price is not None:
        event.price_amount = price["amount"]
        event.price_currency = price["currency"]

    db.add(event)
    db.commit()
    db.refresh(event)

    logger.info("event_updated", event_id=str(event.id), fields=sorted(patch_data))
    return event


def delete_event(db: Session, user: User, event_id: Any) -> int:
    event = get_event(db, event_id)
    require_manage_permission(user, event, "not allowed to delete this event")

    result = db.execute(delete(Ticket).where(Ticket.event_id == event.id))
    deleted_tickets = result.rowcount or 0
    db.expire(event, ["tickets"])
    db.delete(event)
    db.commit()

    logger.info("event_deleted", event_id=str(event_id), deleted_tickets=deleted_tickets)
    return deleted_tickets


def _date_range(date_filter: DateFilter, today: date) -> tuple[date | None, date | None]:
    if date_filter == DateFilter.TODAY:
        return today, today
    if date_filter == DateFilter.TOMORROW:
        tomorrow = today + timedelta(days=1)
        return tomorrow, tomorrow
    if date_filter == DateFilter.THIS_WEEKEND:
        # Saturday and Sunday; on Sunday this is the coming weekend
        saturday = today + timedelta(days=(5 - today.weekday()) % 7)
        return saturday, saturday + timedelta(days=1)
    if date_filter == DateFilter.THIS_WEEK:
        # Weeks run Sunday to Saturday
        sunday = today - timedelta(days=(today.weekday() + 1) % 7)
        return sunday, sunday + timedelta(days=6)
    if date_filter == DateFilter.THIS_MONTH:
        last_day = calendar.monthrange(today.year, today.month)[1]
        return today.replace(day=1), today.replace(day=last_day)
    if date_filter == DateFilter.NEXT_MONTH:
        year = today.year + (1 if today.month == 12 else 0)
        month = 1 if today.month == 12 else today.month + 1
        last_day = calendar.monthrange(year, month)[1]
        return date(year, month, 1), date(year, month, last_day)
    if date_filter == DateFilter.ALL_UPCOMING:
        return today, None
    return None, None


def list_events(
    db: Session,
    search: str | None = None,
    category: str | None = None,
    date_filter: DateFilter | None = None,
    today: date | None = None,
) -> list[Event]:
    stmt = select(Event)

    if search:
        like = f"%{search.strip()}%"
        stmt = stmt.where(or_(Event.title.ilike(like), Event.location.ilike(like)))

    if category and category != "All":
        stmt = stmt.where(Event.category == category)

    if date_filter:
        start, end = _date_range(date_filter, today or local_now().date())
        if start is not None:
            stmt = stmt.where(Event.date >= start)
        if end is not None:
            stmt = stmt.where(Event.date <= end)

    return list(db.scalars(stmt.order_by(Event.date, Event.start_time)).all())


def list_featured_events(db: Session, today: date | None = None) -> list[Event]:
    today = today or local_now().date()
    stmt = (
        select(Event)
        .where(Event.is_featured.is_(True), Event.date >= today)
        .order_by(Event.date, Event.start_time)
    )
    return list(db.scalars(stmt).all())


def list_upcoming_events(db: Session, today: date | None = None) -> list[Event]:
    today = today or local_now().date()
    stmt = select(Event).where(Event.date >= today).order_by(Event.date, Event.start_time)
    return list(db.scalars(stmt).all())


def list_events_by_organizer(db: Session, organizer_id: Any) -> list[Event]:
    stmt = (
        select(Event)
        .where(Event.organizer_id == organizer_id)
        .order_by(Event.date.desc(), Event.start_time.desc())
    )
    return list(db.scalars(stmt).all())


def list_my_events(db: Session, user: User) -> list[Event]:
    return list_events_by_organizer(db, user.id)


def complete_ended_events(db: Session, now: datetime | None = None) -> int:
    """Mark active events whose end has passed as completed.

    Ticket check-in statuses are left alone; no-shows are derived on read.
    """
    now = now or local_now()
    candidates = db.scalars(
        select(Event).where(Event.status == EventStatus.ACTIVE, Event.date <= now.date())
    ).all()
    ended_ids = [event.id for event in candidates if has_ended(event, now)]
    if not ended_ids:
        return 0

    db.execute(
        update(Event)
        .where(Event.id.in_(ended_ids), Event.status == EventStatus.ACTIVE)
        .values(status=EventStatus.COMPLETED)
    )
    db.commit()

    logger.info("events_completed", count=len(ended_ids))
    return len(ended_ids)
