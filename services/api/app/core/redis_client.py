from __future__ import annotations

import logging
from functools import lru_cache

import redis.asyncio as redis_async

from app.core.config import settings

logger = logging.getLogger(__name__)


@lru_cache
def get_redis() -> redis_async.Redis | None:
    """Shared Redis client, or None when REDIS_URL is not configured.

    Callers must treat Redis as optional and fail open on `redis.RedisError`.
    """
    if not settings.redis_url:
        return None
    try:
        return redis_async.Redis.from_url(settings.redis_url, decode_responses=True)
    except Exception as exc:
        logger.warning("Redis unavailable; shared credential cache and rate limiting disabled: %s", exc)
        return None
