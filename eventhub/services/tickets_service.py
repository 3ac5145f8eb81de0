from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from eventhub import notifications
from eventhub.models import Event, Ticket, User
from eventhub.models.event import EventStatus
from eventhub.services import discounts_service, events_service
from eventhub.services.error_codes import ErrorCode
from eventhub.services.exceptions import ConflictError, NotFoundError, ValidationError
from eventhub.services.qr_codes import ticket_qr_code

logger = structlog.get_logger()


def _lock_event(db: Session, event_id: Any) -> Event:
    event = db.scalar(select(Event).where(Event.id == event_id).with_for_update())
    if not event:
        raise NotFoundError(ErrorCode.EVENT_NOT_FOUND, "event not found")
    return event


def _ticket_count(db: Session, event_id: Any) -> int:
    return int(
        db.scalar(select(func.count()).select_from(Ticket).where(Ticket.event_id == event_id))
        or 0
    )


def _find_ticket(db: Session, event_id: Any, user_id: Any) -> Ticket | None:
    return db.scalar(
        select(Ticket).where(Ticket.event_id == event_id, Ticket.user_id == user_id)
    )


def _check_open(db: Session, event: Event, user: User, now: datetime | None) -> None:
    if event.status != EventStatus.ACTIVE:
        raise ConflictError(ErrorCode.EVENT_NOT_ACTIVE, f"event is {event.status.value}")
    if events_service.has_ended(event, now):
        raise ConflictError(ErrorCode.EVENT_ENDED, "event has already ended")

    if _find_ticket(db, event.id, user.id):
        raise ConflictError(ErrorCode.ALREADY_REGISTERED, "already registered for this event")

    if _ticket_count(db, event.id) >= event.capacity:
        raise ConflictError(ErrorCode.EVENT_FULL, "event is full")


def _issue(db: Session, event: Event, user: User, **fields: Any) -> Ticket:
    ticket_code = str(uuid.uuid4())
    ticket = Ticket(
        event_id=event.id,
        user_id=user.id,
        ticket_code=ticket_code,
        qr_code_url=ticket_qr_code(
            ticket_code, event.id, user.id, paid=fields.get("is_paid", False)
        ),
        **fields,
    )
    db.add(ticket)
    event.tickets.append(ticket)
    return ticket


def _commit_ticket(db: Session, event_id: Any, user: User) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if _find_ticket(db, event_id, user.id):
            raise ConflictError(
                ErrorCode.ALREADY_REGISTERED, "already registered for this event"
            ) from exc
        raise


def register_free(db: Session, user: User, event_id: Any, now: datetime | None = None) -> Ticket:
    event = _lock_event(db, event_id)
    if not event.is_free:
        raise ValidationError(ErrorCode.EVENT_NOT_FREE, "this event requires a ticket purchase")

    _check_open(db, event, user, now)
    ticket = _issue(db, event, user, is_paid=False, is_free_ticket=True)
    _commit_ticket(db, event.id, user)
    db.refresh(ticket)

    logger.info(
        "ticket_issued",
        ticket_id=str(ticket.id),
        event_id=str(event.id),
        user_id=str(user.id),
        paid=False,
    )
    notifications.send_ticket_confirmation(user, event, ticket)
    return ticket


def purchase_paid(
    db: Session,
    user: User,
    event_id: Any,
    discount_code: str | None = None,
    now: datetime | None = None,
) -> Ticket:
    event = _lock_event(db, event_id)
    if event.is_free:
        raise ValidationError(ErrorCode.EVENT_NOT_PAID, "this event is free; register instead")

    _check_open(db, event, user, now)

    price = Decimal(event.price_amount or 0)
    final_price = price.quantize(discounts_service.CENTS)
    applied_code = None
    if discount_code and discount_code.strip():
        discount = discounts_service.validate_code(db, discount_code)
        final_price = discounts_service.apply_discount(price, discount.type, discount.value)
        discounts_service.redeem(db, discount)
        applied_code = discount.code

    # Simulated charge; no payment gateway is involved
    ticket = _issue(
        db,
        event,
        user,
        is_paid=True,
        is_free_ticket=False,
        price_paid=final_price,
        currency=event.price_currency,
        discount_code=applied_code,
    )
    _commit_ticket(db, event.id, user)
    db.refresh(ticket)

    logger.info(
        "ticket_issued",
        ticket_id=str(ticket.id),
        event_id=str(event.id),
        user_id=str(user.id),
        paid=True,
        price_paid=str(final_price),
        discount_code=applied_code,
    )
    notifications.send_ticket_confirmation(user, event, ticket)
    return ticket


def unregister(db: Session, user: User, event_id: Any) -> None:
    event = _lock_event(db, event_id)
    ticket = _find_ticket(db, event.id, user.id)
    if not ticket:
        raise NotFoundError(ErrorCode.TICKET_NOT_FOUND, "not registered for this event")

    event.tickets.remove(ticket)
    db.commit()
    logger.info("ticket_cancelled", event_id=str(event.id), user_id=str(user.id))


def list_my_tickets(db: Session, user: User) -> list[Ticket]:
    stmt = (
        select(Ticket)
        .where(Ticket.user_id == user.id)
        .options(selectinload(Ticket.event))
        .order_by(Ticket.purchase_date.desc())
    )
    return list(db.scalars(stmt).all())


def list_event_tickets(db: Session, caller: User, event_id: Any) -> tuple[Event, list[Ticket]]:
    event = events_service.get_event(db, event_id)
    events_service.require_manage_permission(
        caller, event, "not allowed to view tickets for this event"
    )
    stmt = (
        select(Ticket)
        .where(Ticket.event_id == event.id)
        .options(selectinload(Ticket.user))
        .order_by(Ticket.purchase_date)
    )
    return event, list(db.scalars(stmt).all())
