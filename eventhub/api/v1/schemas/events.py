from __future__ import annotations

import datetime as dt
from decimal import Decimal
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from eventhub.models import Event
from eventhub.models.event import EventStatus

SUPPORTED_CURRENCIES = {"vnd", "usd"}


class SchemaBase(BaseModel):
    model_config = ConfigDict(from_attributes=True, extra="ignore")


class PriceIn(SchemaBase):
    amount: Decimal = Field(ge=0)
    currency: str

    @field_validator("currency", mode="before")
    @classmethod
    def _normalize_currency(cls, value: str) -> str:
        if not isinstance(value, str):
            raise ValueError("currency must be a string")
        normalized = value.strip().lower()
        if normalized not in SUPPORTED_CURRENCIES:
            raise ValueError("currency must be one of: vnd, usd")
        return normalized


class PriceOut(SchemaBase):
    amount: float
    currency: str


class ScheduleItem(SchemaBase):
    time: str
    title: str
    description: str | None = None


class OrganizerOut(SchemaBase):
    name: str
    image: str | None = None
    description: str | None = None


class DateFilter(str, Enum):
    TODAY = "Today"
    TOMORROW = "Tomorrow"
    THIS_WEEKEND = "This Weekend"
    THIS_WEEK = "This Week"
    THIS_MONTH = "This Month"
    NEXT_MONTH = "Next Month"
    ALL_UPCOMING = "All Upcoming"


class EventCreate(SchemaBase):
    title: str = Field(min_length=1, max_length=200)
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    location: str = Field(min_length=1)
    address: str | None = None
    image: str | None = None
    is_free: bool = True
    price: PriceIn | None = None
    category: str = Field(min_length=1)
    description: str = Field(min_length=1)
    long_description: str | None = None
    organizer_name: str | None = None
    organizer_image: str | None = None
    organizer_description: str | None = None
    room_number: int
    schedule: list[ScheduleItem] = Field(default_factory=list)
    is_featured: bool = False
    is_upcoming: bool = False

    @model_validator(mode="after")
    def _validate_time_bounds(self):
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class EventUpdate(SchemaBase):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    date: dt.date | None = None
    start_time: dt.time | None = None
    end_time: dt.time | None = None
    location: str | None = None
    address: str | None = None
    image: str | None = None
    is_free: bool | None = None
    price: PriceIn | None = None
    category: str | None = None
    description: str | None = None
    long_description: str | None = None
    organizer_name: str | None = None
    organizer_image: str | None = None
    organizer_description: str | None = None
    room_number: int | None = None
    status: EventStatus | None = None
    schedule: list[ScheduleItem] | None = None
    is_featured: bool | None = None
    is_upcoming: bool | None = None

    @model_validator(mode="after")
    def _validate_time_bounds(self):
        if self.start_time and self.end_time and self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class EventOut(SchemaBase):
    id: UUID
    title: str
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    location: str
    address: str | None = None
    image: str | None = None
    is_free: bool
    price: PriceOut | None = None
    category: str
    organizer: OrganizerOut
    organizer_id: UUID
    description: str
    long_description: str | None = None
    capacity: int
    room_number: int
    status: EventStatus
    schedule: list[ScheduleItem]
    is_featured: bool
    is_upcoming: bool
    tickets_sold: int
    created_at: dt.datetime
    updated_at: dt.datetime

    @classmethod
    def from_event(cls, event: Event) -> EventOut:
        price = None
        if not event.is_free and event.price_amount is not None:
            price = PriceOut(amount=float(event.price_amount), currency=event.price_currency or "")
        return cls(
            id=event.id,
            title=event.title,
            date=event.date,
            start_time=event.start_time,
            end_time=event.end_time,
            location=event.location,
            address=event.address,
            image=event.image,
            is_free=event.is_free,
            price=price,
            category=event.category,
            organizer=OrganizerOut(
                name=event.organizer_name,
                image=event.organizer_image,
                description=event.organizer_description,
            ),
            organizer_id=event.organizer_id,
            description=event.description,
            long_description=event.long_description,
            capacity=event.capacity,
            room_number=event.room_number,
            status=event.status,
            schedule=event.schedule or [],
            is_featured=event.is_featured,
            is_upcoming=event.is_upcoming,
            tickets_sold=len(event.tickets),
            created_at=event.created_at,
            updated_at=event.updated_at,
        )


class EventDeletedOut(SchemaBase):
    event_id: UUID
    deleted_tickets: int
