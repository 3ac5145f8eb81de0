from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from eventhub.api.errors import http_error_from_service
from eventhub.api.v1.schemas.discounts import (
    DiscountCreate,
    DiscountOut,
    DiscountUpdate,
    DiscountValidateIn,
    DiscountValidateOut,
)
from eventhub.auth.deps import AdminUser, CurrentUser
from eventhub.db import get_db
from eventhub.services import discounts_service
from eventhub.services.exceptions import ServiceError

router = APIRouter(prefix="/discounts", tags=["discounts"])

DBSession = Annotated[Session, Depends(get_db)]


@router.post("/validate", response_model=DiscountValidateOut)
def validate_discount(payload: DiscountValidateIn, user: CurrentUser, db: DBSession):
    try:
        discount = discounts_service.validate_code(db, payload.code)
    except ServiceError as err:
        raise http_error_from_service(err) from err

    final_price = None
    if payload.price is not None:
        final_price = float(
            discounts_service.apply_discount(payload.price, discount.type, discount.value)
        )
    return DiscountValidateOut(
        valid=True,
        code=discount.code,
        type=discount.type,
        value=float(discount.value),
        final_price=final_price,
        message="discount code applied",
    )


@router.post("", response_model=DiscountOut, status_code=status.HTTP_201_CREATED)
def create_discount(payload: DiscountCreate, admin: AdminUser, db: DBSession):
    try:
        return discounts_service.create_discount(db, admin, payload)
    except ServiceError as err:
        raise http_error_from_service(err) from err


@router.get("", response_model=list[DiscountOut])
def list_discounts(admin: AdminUser, db: DBSession):
    return discounts_service.list_discounts(db)


@router.get("/{code}", response_model=DiscountOut)
def get_discount(code: str, admin: AdminUser, db: DBSession):
    try:
        return discounts_service.get_discount_by_code(db, code)
    except ServiceError as err:
        raise http_error_from_service(err) from err


@router.put("/{discount_id}", response_model=DiscountOut)
def update_discount(
    discount_id: uuid.UUID, payload: DiscountUpdate, admin: AdminUser, db: DBSession
):
    try:
        return discounts_service.update_discount(db, discount_id, payload)
    except ServiceError as err:
        raise http_error_from_service(err) from err


@router.delete("/{discount_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_discount(discount_id: uuid.UUID, admin: AdminUser, db: DBSession):
    try:
        discounts_service.delete_discount(db, discount_id)
    except ServiceError as err:
        raise http_error_from_service(err) from err
    return Response(status_code=status.HTTP_204_NO_CONTENT)
