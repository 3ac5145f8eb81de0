from __future__ import annotations

from collections.abc import Callable
from typing import Annotated

import structlog
from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from eventhub.auth.jwt import verify_access_token
from eventhub.db import get_db
from eventhub.models import User
from eventhub.models.user import UserRole

DBSession = Annotated[Session, Depends(get_db)]

TOKEN_HEADER = "x-auth-token"


def _unauthorized(detail: str = "unauthorized") -> HTTPException:
    return HTTPException(
        status_code=401,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _extract_token(request: Request) -> str | None:
    token = request.headers.get(TOKEN_HEADER, "").strip()
    if token:
        return token

    auth = request.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        return auth.removeprefix("Bearer ").strip() or None
    return None


def _user_from_token(db: Session, token: str) -> User:
    try:
        claims = verify_access_token(token)
    except ValueError:
        raise _unauthorized("token is not valid") from None

    user = db.get(User, claims["sub"])
    if not user:
        raise _unauthorized("user not found")

    structlog.contextvars.bind_contextvars(user_id=str(user.id))
    return user


def get_current_user(request: Request, db: DBSession) -> User:
    token = _extract_token(request)
    if not token:
        raise _unauthorized("no token, authorization denied")
    return _user_from_token(db, token)


CurrentUser = Annotated[User, Depends(get_current_user)]


def require_role(*roles: UserRole) -> Callable[[User], User]:
    def _check(user: CurrentUser) -> User:
        if user.role not in roles:
            raise HTTPException(
                status_code=403,
                detail={"code": "FORBIDDEN", "message": "insufficient role"},
            )
        return user

    return _check


AdminUser = Annotated[User, Depends(require_role(UserRole.ADMIN))]
