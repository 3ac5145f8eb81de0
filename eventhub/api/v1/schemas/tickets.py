from __future__ import annotations

import datetime as dt
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from eventhub.models import Event, Ticket
from eventhub.models.event import EventStatus
from eventhub.models.ticket import CheckInStatus


class SchemaBase(BaseModel):
    model_config = ConfigDict(from_attributes=True, extra="ignore")


class PurchaseIn(SchemaBase):
    discount_code: str | None = Field(default=None, max_length=64)


class CheckInIn(SchemaBase):
    event_id: UUID
    ticket_code: str = Field(min_length=1, max_length=64)


class TicketEventOut(SchemaBase):
    id: UUID
    title: str
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    location: str
    room_number: int
    status: EventStatus


class AttendeeOut(SchemaBase):
    id: UUID
    username: str
    email: str


class TicketOut(SchemaBase):
    id: UUID
    event_id: UUID
    user_id: UUID
    ticket_code: str
    qr_code_url: str
    purchase_date: dt.datetime
    is_paid: bool
    is_free_ticket: bool
    price_paid: float | None = None
    currency: str | None = None
    discount_code: str | None = None
    check_in_status: CheckInStatus
    check_in_time: dt.datetime | None = None
    event: TicketEventOut | None = None
    attendee: AttendeeOut | None = None

    @classmethod
    def from_ticket(
        cls,
        ticket: Ticket,
        status: CheckInStatus | None = None,
        event: Event | None = None,
        with_attendee: bool = False,
    ) -> TicketOut:
        return cls(
            id=ticket.id,
            event_id=ticket.event_id,
            user_id=ticket.user_id,
            ticket_code=ticket.ticket_code,
            qr_code_url=ticket.qr_code_url,
            purchase_date=ticket.purchase_date,
            is_paid=ticket.is_paid,
            is_free_ticket=ticket.is_free_ticket,
            price_paid=float(ticket.price_paid) if ticket.price_paid is not None else None,
            currency=ticket.currency,
            discount_code=ticket.discount_code,
            check_in_status=status or ticket.check_in_status,
            check_in_time=ticket.check_in_time,
            event=TicketEventOut.model_validate(event) if event is not None else None,
            attendee=AttendeeOut.model_validate(ticket.user) if with_attendee else None,
        )


class EventTicketsOut(SchemaBase):
    event_id: UUID
    title: str
    capacity: int
    tickets: list[TicketOut]


class EventStatisticsOut(SchemaBase):
    event_id: UUID
    event_name: str
    total_sold_tickets: int
    checked_in_tickets: int
    pending_tickets: int
    no_show_tickets: int


class EventStatisticsSummaryOut(SchemaBase):
    event_id: UUID
    title: str
    total_tickets: int
    checked_in_count: int
