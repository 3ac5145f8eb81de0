from __future__ import annotations

from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo

from eventhub.core.config import settings


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes read back from backends without tz support."""
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _event_zone():
    if settings.event_timezone.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(settings.event_timezone)


def local_now() -> datetime:
    """Naive wall-clock time in the zone event dates and times are expressed in."""
    return datetime.now(_event_zone()).replace(tzinfo=None)


def event_datetime(day: date, at: time) -> datetime:
    return datetime.combine(day, at)
