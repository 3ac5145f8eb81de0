from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum

import sqlalchemy as sa
from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from eventhub.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class DiscountCode(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "discount_codes"
    __table_args__ = (
        sa.CheckConstraint("value >= 0", name="ck_discount_codes_value_non_negative"),
        sa.CheckConstraint(
            "usage_limit IS NULL OR usage_limit >= 1",
            name="ck_discount_codes_usage_limit_positive",
        ),
    )

    # Stored uppercase
    code: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    value: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    type: Mapped[DiscountType] = mapped_column(
        sa.Enum(DiscountType, name="discount_type"), nullable=False
    )
    expiration_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    usage_limit: Mapped[int | None] = mapped_column(Integer, nullable=True)
    times_used: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
