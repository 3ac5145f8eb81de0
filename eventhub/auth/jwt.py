from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import jwt
from jwt import PyJWTError

from eventhub.core.config import settings
from eventhub.models import User


def issue_access_token(user: User) -> tuple[str, int]:
    """Sign a token for ``user``; returns ``(token, ttl_seconds)``."""
    ttl = settings.access_token_ttl_seconds
    issued_at = datetime.now(timezone.utc)
    claims = {
        "sub": str(user.id),
        "role": user.role.value,
        "name": user.username,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "iat": issued_at,
        "exp": issued_at + timedelta(seconds=ttl),
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm), ttl


def verify_access_token(token: str) -> dict:
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            options={"require": ["sub", "exp"]},
        )
    except PyJWTError as exc:
        raise ValueError("invalid access token") from exc

    try:
        claims["sub"] = uuid.UUID(claims["sub"])
    except (TypeError, ValueError) as exc:
        raise ValueError("invalid token subject") from exc
    return claims
