from __future__ import annotations

import uuid
import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any

import sqlalchemy as sa
from sqlalchemy import JSON, Boolean, Date, ForeignKey, Integer, Numeric, String, Text, Time, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eventhub.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from eventhub.models.speaker_invitation import SpeakerInvitation
    from eventhub.models.ticket import Ticket


class EventStatus(str, Enum):
    ACTIVE = "active"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class Event(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "events"
    __table_args__ = (
        sa.CheckConstraint("room_number >= 1 AND room_number <= 10", name="ck_events_room_number"),
        sa.Index("ix_events_room_date", "room_number", "date"),
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    start_time: Mapped[dt.time] = mapped_column(Time, nullable=False)
    end_time: Mapped[dt.time] = mapped_column(Time, nullable=False)
    location: Mapped[str] = mapped_column(String(300), nullable=False)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    image: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    category: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    long_description: Mapped[str | None] = mapped_column(Text, nullable=True)

    is_free: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    # Only set for paid events
    price_amount: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    price_currency: Mapped[str | None] = mapped_column(String(3), nullable=True)

    organizer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    organizer_name: Mapped[str] = mapped_column(String(200), nullable=False)
    organizer_image: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    organizer_description: Mapped[str | None] = mapped_column(Text, nullable=True)

    room_number: Mapped[int] = mapped_column(Integer, nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[EventStatus] = mapped_column(
        sa.Enum(EventStatus, name="event_status"),
        nullable=False,
        default=EventStatus.ACTIVE,
    )
    schedule: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    is_featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_upcoming: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    tickets: Mapped[list[Ticket]] = relationship(
        back_populates="event",
        cascade="all, delete-orphan",
        order_by="Ticket.purchase_date",
    )
    invitations: Mapped[list[SpeakerInvitation]] = relationship(
        back_populates="event",
        cascade="all, delete-orphan",
    )
