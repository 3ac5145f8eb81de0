from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eventhub.api.v1.schemas.discounts import DiscountCreate, DiscountUpdate
from eventhub.models import DiscountCode, User
from eventhub.models.discount_code import DiscountType
from eventhub.services.error_codes import ErrorCode
from eventhub.services.exceptions import ConflictError, NotFoundError, ValidationError
from eventhub.services.timeutils import as_utc, utcnow

logger = structlog.get_logger()

CENTS = Decimal("0.01")


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


def apply_discount(price: Decimal, discount_type: DiscountType, value: Decimal) -> Decimal:
    price = Decimal(price)
    value = Decimal(value)
    if discount_type == DiscountType.PERCENTAGE:
        final = price * (Decimal(100) - value) / Decimal(100)
    else:
        final = price - value
    if final < 0:
        final = Decimal(0)
    return final.quantize(CENTS, rounding=ROUND_HALF_UP)


def _check_usable(discount: DiscountCode, now: datetime) -> None:
    if discount.expiration_date is not None and as_utc(discount.expiration_date) < now:
        raise ValidationError(ErrorCode.DISCOUNT_EXPIRED, "discount code has expired")
    if discount.usage_limit is not None and discount.times_used >= discount.usage_limit:
        raise ValidationError(
            ErrorCode.DISCOUNT_LIMIT_REACHED, "discount code usage limit reached"
        )


def validate_code(db: Session, code: str, now: datetime | None = None) -> DiscountCode:
    """Look up a usable discount code. Usage is not counted here."""
    normalized = normalize_code(code)
    discount = db.scalar(select(DiscountCode).where(DiscountCode.code == normalized))
    if not discount or not discount.is_active:
        raise NotFoundError(ErrorCode.DISCOUNT_NOT_FOUND, "discount code not found or inactive")

    _check_usable(discount, now or utcnow())
    return discount


def redeem(db: Session, discount: DiscountCode) -> None:
    """Count one use inside the caller's transaction.

    The guarded update keeps ``times_used`` within ``usage_limit`` when two
    purchases race for the last use.
    """
    stmt = update(DiscountCode).where(DiscountCode.id == discount.id)
    if discount.usage_limit is not None:
        stmt = stmt.where(DiscountCode.times_used < DiscountCode.usage_limit)
    result = db.execute(
        stmt.values(times_used=DiscountCode.times_used + 1).execution_options(
            synchronize_session=False
        )
    )
    if result.rowcount != 1:
        raise ValidationError(
            ErrorCode.DISCOUNT_LIMIT_REACHED, "discount code usage limit reached"
        )
    db.expire(discount, ["times_used"])


def _check_value(discount_type: DiscountType, value: Decimal) -> None:
    if value < 0:
        raise ValidationError(ErrorCode.INVALID_DISCOUNT, "discount value must be non-negative")
    if discount_type == DiscountType.PERCENTAGE and value > 100:
        raise ValidationError(
            ErrorCode.INVALID_DISCOUNT, "percentage discount cannot exceed 100"
        )


def create_discount(db: Session, admin: User, payload: DiscountCreate) -> DiscountCode:
    _check_value(payload.type, payload.value)
    code = normalize_code(payload.code)

    if db.scalar(select(DiscountCode.id).where(DiscountCode.code == code)):
        raise ConflictError(ErrorCode.DISCOUNT_CODE_EXISTS, "discount code already exists")

    discount = DiscountCode(
        code=code,
        value=payload.value,
        type=payload.type,
        expiration_date=payload.expiration_date,
        usage_limit=payload.usage_limit,
        times_used=0,
        is_active=payload.is_active,
        created_by=admin.id,
    )
    db.add(discount)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(
            ErrorCode.DISCOUNT_CODE_EXISTS, "discount code already exists"
        ) from exc
    db.refresh(discount)

    logger.info("discount_created", discount_id=str(discount.id), code=discount.code)
    return discount


def list_discounts(db: Session) -> list[DiscountCode]:
    return list(db.scalars(select(DiscountCode).order_by(DiscountCode.created_at.desc())).all())


def get_discount(db: Session, discount_id: Any) -> DiscountCode:
    discount = db.get(DiscountCode, discount_id)
    if not discount:
        raise NotFoundError(ErrorCode.DISCOUNT_NOT_FOUND, "discount code not found")
    return discount


def get_discount_by_code(db: Session, code: str) -> DiscountCode:
    discount = db.scalar(select(DiscountCode).where(DiscountCode.code == normalize_code(code)))
    if not discount:
        raise NotFoundError(ErrorCode.DISCOUNT_NOT_FOUND, "discount code not found")
    return discount


def update_discount(db: Session, discount_id: Any, patch: DiscountUpdate) -> DiscountCode:
    discount = get_discount(db, discount_id)
    patch_data = patch.model_dump(exclude_unset=True)

    if "code" in patch_data:
        new_code = normalize_code(patch_data["code"] or "")
        if not new_code:
            raise ValidationError(ErrorCode.INVALID_DISCOUNT, "discount code cannot be empty")
        clash = db.scalar(
            select(DiscountCode.id).where(
                DiscountCode.code == new_code, DiscountCode.id != discount.id
            )
        )
        if clash:
            raise ConflictError(ErrorCode.DISCOUNT_CODE_EXISTS, "discount code already exists")
        patch_data["code"] = new_code

    for key in ("value", "type", "is_active"):
        if key in patch_data and patch_data[key] is None:
            patch_data.pop(key)

    _check_value(patch_data.get("type", discount.type), patch_data.get("value", discount.value))

    limit = patch_data.get("usage_limit", discount.usage_limit)
    if limit is not None and limit < discount.times_used:
        raise ValidationError(
            ErrorCode.INVALID_DISCOUNT, "usage limit cannot be below times already used"
        )

    for key, value in patch_data.items():
        setattr(discount, key, value)

    db.add(discount)
    db.commit()
    db.refresh(discount)

    logger.info("discount_updated", discount_id=str(discount.id), fields=sorted(patch_data))
    return discount


def delete_discount(db: Session, discount_id: Any) -> None:
    discount = get_discount(db, discount_id)
    db.delete(discount)
    db.commit()
    logger.info("discount_deleted", discount_id=str(discount_id))
