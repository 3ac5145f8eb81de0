from __future__ import annotations

import time

import structlog
from fastapi import Request
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response

from eventhub.core.config import settings
from eventhub.redis_client import get_redis

logger = structlog.get_logger()

WINDOWS = {
    "s": 1,
    "sec": 1,
    "second": 1,
    "seconds": 1,
    "m": 60,
    "min": 60,
    "minute": 60,
    "minutes": 60,
    "h": 3600,
    "hour": 3600,
    "hours": 3600,
    "d": 86400,
    "day": 86400,
    "days": 86400,
}


def parse_rate(rate: str) -> tuple[int, int]:
    """Parse ``"<limit>/<window>"`` (e.g. ``"60/minute"``) into ``(limit, window_seconds)``."""
    limit_str, sep, window_str = rate.strip().lower().partition("/")
    if not sep:
        raise ValueError(f"invalid rate format: {rate}")

    window = WINDOWS.get(window_str.strip())
    if window is None:
        raise ValueError(f"invalid rate window: {window_str}")
    return int(limit_str), window


def route_group(path: str) -> str:
    """Keep the first three path segments; nested actions share their resource's bucket."""
    parts = [part for part in path.split("/") if part]
    return "/" + "/".join(parts[:3])


def _rate_for(path: str) -> str:
    if any(path.startswith(prefix) for prefix in settings.rate_limit_auth_paths):
        return settings.rate_limit_auth
    return settings.rate_limit_default


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Fixed-window limit per client IP and route group, counted in Redis.

    Requests pass through untouched when Redis is unreachable.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        if not settings.rate_limit_enabled or request.method == "OPTIONS":
            return await call_next(request)

        path = request.url.path
        if path in settings.rate_limit_exempt_paths:
            return await call_next(request)

        try:
            limit, window_seconds = parse_rate(_rate_for(path))
        except ValueError:
            logger.warning("rate_limit_misconfigured", rate=_rate_for(path))
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = int(time.time())
        bucket = now // window_seconds
        reset = (bucket + 1) * window_seconds
        key = f"rl:{client_ip}:{request.method}:{route_group(path)}:{window_seconds}:{bucket}"

        try:
            r = get_redis()
            count = int(r.incr(key))
            if count == 1:
                r.expire(key, window_seconds)
        except RedisError:
            return await call_next(request)

        if count > limit:
            logger.info("rate_limited", client_ip=client_ip, path=path)
            return JSONResponse(
                status_code=429,
                content={"detail": {"code": "RATE_LIMITED", "message": "too many requests"}},
                headers={
                    "X-RateLimit-Limit": str(limit),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset": str(reset),
                    "Retry-After": str(max(0, reset - now)),
                },
            )

        response = await call_next(request)
        response.headers.setdefault("X-RateLimit-Limit", str(limit))
        response.headers.setdefault("X-RateLimit-Remaining", str(max(0, limit - count)))
        response.headers.setdefault("X-RateLimit-Reset", str(reset))
        return response
