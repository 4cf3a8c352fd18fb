from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Callable

import redis
import redis.asyncio as redis_async

from app.core.errors import MissingCredentialsError
from app.services.hostaway.provider import HostawayGateway

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Credential:
    value: str
    obtained_at: float
    ttl: float

    def is_fresh(self, now: float) -> bool:
        return now - self.obtained_at < self.ttl

    def remaining(self, now: float) -> float:
        return self.ttl - (now - self.obtained_at)


def _credential_key(account_id: str) -> str:
    return f"hostaway:credential:{account_id}"


class CredentialManager:
    """Owns the process-wide Hostaway bearer token.

    Lifecycle:
    - `get_credential()` acquires on first use and re-acquires once the TTL lapses.
    - `invalidate()` drops the cached token so the next call fetches a new one.

    Concurrent refreshes are not serialized; the last one to finish wins. At worst
    that costs a duplicate token request.

    When a Redis client is given, tokens are mirrored there so several instances
    can share one. Redis failures are logged and otherwise ignored.
    """

    def __init__(
        self,
        gateway: HostawayGateway,
        *,
        account_id: str | None,
        api_key: str | None,
        ttl_secs: float,
        clock: Callable[[], float] = time.time,
        redis_client: redis_async.Redis | None = None,
    ):
        self._gateway = gateway
        self._account_id = account_id
        self._api_key = api_key
        self._ttl = float(ttl_secs)
        self._clock = clock
        self._redis = redis_client
        self._credential: Credential | None = None

    @property
    def cached(self) -> Credential | None:
        return self._credential

    def _check_config(self) -> tuple[str, str]:
        if not self._account_id:
            raise MissingCredentialsError("Missing HOSTAWAY_ACCOUNT_ID")
        if not self._api_key:
            raise MissingCredentialsError("Missing HOSTAWAY_API_KEY")
        return self._account_id, self._api_key

    async def get_credential(self) -> Credential:
        account_id, api_key = self._check_config()

        now = self._clock()
        current = self._credential
        if current is not None and current.is_fresh(now):
            return current

        shared = await self._read_shared(account_id, now)
        if shared is not None:
            self._credential = shared
            return shared

        grant = await self._gateway.get_token(account_id=account_id, api_key=api_key)
        ttl = self._ttl
        if grant.expires_in is not None:
            ttl = min(ttl, float(grant.expires_in))

        fresh = Credential(value=grant.value, obtained_at=now, ttl=ttl)
        self._credential = fresh
        logger.info("hostaway access token acquired (ttl=%ss)", int(ttl))

        await self._write_shared(account_id, fresh, now)
        return fresh

    async def invalidate(self) -> None:
        self._credential = None
        if self._redis is None or not self._account_id:
            return
        try:
            await self._redis.delete(_credential_key(self._account_id))
        except redis.RedisError as exc:
            logger.warning("failed to drop shared credential: %s", exc)

    async def _read_shared(self, account_id: str, now: float) -> Credential | None:
        if self._redis is None:
            return None
        try:
            raw = await self._redis.get(_credential_key(account_id))
        except redis.RedisError as exc:
            logger.warning("shared credential lookup failed: %s", exc)
            return None
        if not raw:
            return None
        try:
            payload = json.loads(raw)
            cred = Credential(
                value=str(payload["value"]),
                obtained_at=float(payload["obtained_at"]),
                ttl=float(payload["ttl"]),
            )
        except (ValueError, KeyError, TypeError):
            return None
        return cred if cred.is_fresh(now) else None

    async def _write_shared(self, account_id: str, cred: Credential, now: float) -> None:
        if self._redis is None:
            return
        expire = int(cred.remaining(now))
        if expire <= 0:
            return
        payload = {"value": cred.value, "obtained_at": cred.obtained_at, "ttl": cred.ttl}
        try:
            await self._redis.setex(_credential_key(account_id), expire, json.dumps(payload))
        except redis.RedisError as exc:
            logger.warning("shared credential write failed: %s", exc)
