from __future__ import annotations

import uuid
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eventhub.api.v1.schemas.users import UserUpdate
from eventhub.models import User
from eventhub.services.error_codes import ErrorCode
from eventhub.services.exceptions import ConflictError, NotFoundError

logger = structlog.get_logger()


def get_user(db: Session, user_id: Any) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError(ErrorCode.USER_NOT_FOUND, "user not found")
    return user


def get_users_by_ids(db: Session, user_ids: list[uuid.UUID]) -> list[User]:
    if not user_ids:
        return []
    return list(db.scalars(select(User).where(User.id.in_(user_ids))).all())


def update_profile(db: Session, user: User, patch: UserUpdate) -> User:
    patch_data = patch.model_dump(exclude_unset=True, exclude_none=True)

    if "email" in patch_data:
        email = patch_data["email"].strip().lower()
        if email != user.email:
            taken = db.scalar(select(User.id).where(User.email == email, User.id != user.id))
            if taken:
                raise ConflictError(ErrorCode.EMAIL_IN_USE, "email already in use")
        patch_data["email"] = email

    if "username" in patch_data:
        patch_data["username"] = patch_data["username"].strip()

    for key, value in patch_data.items():
        setattr(user, key, value)

    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(ErrorCode.EMAIL_IN_USE, "email already in use") from exc
    db.refresh(user)

    logger.info("profile_updated", user_id=str(user.id), fields=sorted(patch_data))
    return user
