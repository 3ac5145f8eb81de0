from __future__ import annotations

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eventhub import notifications
from eventhub.api.v1.schemas.users import UserSummaryOut
from eventhub.auth.deps import CurrentUser
from eventhub.auth.jwt import issue_access_token
from eventhub.auth.password import MIN_PASSWORD_LENGTH, hash_password, needs_rehash, verify_password
from eventhub.auth.tokens import create_reset_token, hash_reset_token
from eventhub.db import get_db
from eventhub.models import User
from eventhub.services.timeutils import as_utc, utcnow

router = APIRouter(prefix="/auth", tags=["auth"])

DBSession = Annotated[Session, Depends(get_db)]

logger = structlog.get_logger()

RESET_REQUESTED_MESSAGE = "if that email is registered, a password reset link has been sent"


class AuthTokenOut(BaseModel):
    token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserSummaryOut


def _token_response(user: User) -> AuthTokenOut:
    token, ttl = issue_access_token(user)
    return AuthTokenOut(
        token=token,
        expires_in=ttl,
        user=UserSummaryOut.model_validate(user),
    )


class RegisterIn(BaseModel):
    username: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)


@router.post("/register", response_model=AuthTokenOut, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterIn, db: DBSession):
    email = payload.email.strip().lower()
    if db.scalar(select(User).where(User.email == email)):
        raise HTTPException(status_code=409, detail="user already exists")

    user = User(
        username=payload.username.strip(),
        email=email,
        password_hash=hash_password(payload.password),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="user already exists") from None
    db.refresh(user)

    logger.info("user_registered", user_id=str(user.id))
    return _token_response(user)


class LoginIn(BaseModel):
    email: EmailStr
    password: str


@router.post("/login", response_model=AuthTokenOut)
def login(payload: LoginIn, db: DBSession):
    email = payload.email.strip().lower()
    user = db.scalar(select(User).where(User.email == email))
    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=400, detail="invalid credentials")

    if needs_rehash(user.password_hash):
        user.password_hash = hash_password(payload.password)
        db.add(user)
        db.commit()

    return _token_response(user)


class ChangePasswordIn(BaseModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=MIN_PASSWORD_LENGTH)


@router.put("/change-password")
def change_password(payload: ChangePasswordIn, user: CurrentUser, db: DBSession):
    if not verify_password(payload.current_password, user.password_hash):
        raise HTTPException(status_code=400, detail="current password is incorrect")

    user.password_hash = hash_password(payload.new_password)
    db.add(user)
    db.commit()

    logger.info("password_changed", user_id=str(user.id))
    return {"message": "password changed"}


class ForgotPasswordIn(BaseModel):
    email: EmailStr


@router.post("/forgot-password")
def forgot_password(payload: ForgotPasswordIn, db: DBSession):
    user = db.scalar(select(User).where(User.email == payload.email.strip().lower()))
    if not user:
        return {"message": RESET_REQUESTED_MESSAGE}

    raw_token, token_hash, expires_at = create_reset_token()
    user.password_reset_token_hash = token_hash
    user.password_reset_expires_at = expires_at
    db.add(user)
    db.commit()

    notifications.send_password_reset(user, raw_token)
    return {"message": RESET_REQUESTED_MESSAGE}


class ResetPasswordIn(BaseModel):
    new_password: str = Field(min_length=MIN_PASSWORD_LENGTH)


@router.put("/reset-password/{token}")
def reset_password(token: str, payload: ResetPasswordIn, db: DBSession):
    user = db.scalar(select(User).where(User.password_reset_token_hash == hash_reset_token(token)))
    if (
        not user
        or user.password_reset_expires_at is None
        or as_utc(user.password_reset_expires_at) <= utcnow()
    ):
        raise HTTPException(status_code=400, detail="reset token is invalid or has expired")

    user.password_hash = hash_password(payload.new_password)
    user.password_reset_token_hash = None
    user.password_reset_expires_at = None
    db.add(user)
    db.commit()

    logger.info("password_reset", user_id=str(user.id))
    return {"message": "password has been reset"}
