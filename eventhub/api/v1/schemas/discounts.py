from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from eventhub.models.discount_code import DiscountType


class SchemaBase(BaseModel):
    model_config = ConfigDict(from_attributes=True, extra="ignore")


class DiscountCreate(SchemaBase):
    code: str = Field(min_length=1, max_length=64)
    value: Decimal = Field(ge=0)
    type: DiscountType
    expiration_date: datetime | None = None
    usage_limit: int | None = Field(default=None, ge=1)
    is_active: bool = True

    @field_validator("code")
    @classmethod
    def _strip_code(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("code cannot be blank")
        return value


class DiscountUpdate(SchemaBase):
    code: str | None = Field(default=None, max_length=64)
    value: Decimal | None = Field(default=None, ge=0)
    type: DiscountType | None = None
    expiration_date: datetime | None = None
    usage_limit: int | None = Field(default=None, ge=1)
    is_active: bool | None = None


class DiscountOut(SchemaBase):
    id: UUID
    code: str
    value: float
    type: DiscountType
    expiration_date: datetime | None = None
    usage_limit: int | None = None
    times_used: int
    is_active: bool
    created_by: UUID | None = None
    created_at: datetime


class DiscountValidateIn(SchemaBase):
    code: str = Field(min_length=1)
    price: Decimal | None = Field(default=None, ge=0)


class DiscountValidateOut(SchemaBase):
    valid: bool
    code: str
    type: DiscountType
    value: float
    final_price: float | None = None
    message: str
