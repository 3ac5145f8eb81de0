from __future__ import annotations

import hashlib
import secrets
from datetime import datetime, timedelta, timezone

from eventhub.core.config import settings


def _now() -> datetime:
    return datetime.now(timezone.utc)


def hash_reset_token(raw_token: str) -> str:
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


def create_reset_token() -> tuple[str, str, datetime]:
    """Return ``(raw_token, token_hash, expires_at)``; only the hash is stored."""
    raw_token = secrets.token_urlsafe(32)
    expires_at = _now() + timedelta(seconds=settings.password_reset_ttl_seconds)
    return raw_token, hash_reset_token(raw_token), expires_at
