from __future__ import annotations

import logging
import time
from typing import Awaitable, Callable

import redis
from fastapi import HTTPException, Request

from app.core.config import settings
from app.core.redis_client import get_redis

logger = logging.getLogger(__name__)


def _client_key(request: Request, *, trust_forwarded: bool) -> str:
    forwarded = request.headers.get("X-Forwarded-For") if trust_forwarded else None
    if forwarded:
        return forwarded.split(",", 1)[0].strip()
    return request.client.host if request.client else "unknown"


def rate_limiter(
    scope: str,
    *,
    limit: int,
    window_seconds: int,
) -> Callable[[Request], Awaitable[None]]:
    """Simple fixed-window rate limiter per client using Redis INCR + EXPIRE.

    Every search fans out to the provider, so this guards the upstream quota.
    If Redis is unavailable, the limiter becomes a no-op (fail open).
    """

    async def _dep(request: Request) -> None:
        r = get_redis()
        if r is None:
            return

        # Fixed-window bucket
        now = int(time.time())
        bucket = now // window_seconds
        client = _client_key(request, trust_forwarded=settings.trust_forwarded_for)
        key = f"rl:{scope}:{client}:{bucket}"

        try:
            count = int(await r.incr(key))
            if count == 1:
                await r.expire(key, window_seconds)
        except redis.RedisError as exc:
            logger.warning("rate limiter skipped: %s", exc)
            return

        if count > limit:
            retry_after = max(1, window_seconds - (now % window_seconds))
            raise HTTPException(
                status_code=429,
                detail="Rate limit exceeded",
                headers={"Retry-After": str(retry_after)},
            )

    return _dep
