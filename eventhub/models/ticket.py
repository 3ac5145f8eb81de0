from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING

import sqlalchemy as sa
from sqlalchemy import Boolean, DateTime, ForeignKey, Numeric, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eventhub.models.base import Base, UUIDPrimaryKeyMixin, _utcnow

if TYPE_CHECKING:
    from eventhub.models.event import Event
    from eventhub.models.user import User


class CheckInStatus(str, Enum):
    PENDING = "pending"
    CHECKED_IN = "checkedIn"
    # Never stored; computed for pending tickets of ended events
    NO_SHOW = "noShow"


class Ticket(Base, UUIDPrimaryKeyMixin):
    __tablename__ = "tickets"
    __table_args__ = (UniqueConstraint("event_id", "user_id", name="uq_tickets_event_user"),)

    event_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    ticket_code: Mapped[str] = mapped_column(String(36), unique=True, nullable=False, index=True)
    qr_code_url: Mapped[str] = mapped_column(Text, nullable=False)
    purchase_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    is_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_free_ticket: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Simulated charge for paid tickets
    price_paid: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    currency: Mapped[str | None] = mapped_column(String(3), nullable=True)
    discount_code: Mapped[str | None] = mapped_column(String(64), nullable=True)

    check_in_status: Mapped[CheckInStatus] = mapped_column(
        sa.Enum(CheckInStatus, name="check_in_status"),
        nullable=False,
        default=CheckInStatus.PENDING,
    )
    check_in_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    event: Mapped[Event] = relationship(back_populates="tickets")
    user: Mapped[User] = relationship()
