from __future__ import annotations

import json
import logging
from datetime import date
from typing import Any
from urllib.parse import quote

import httpx

from app.core.errors import AuthError, ParseError, UpstreamError
from app.domain.calendar import find_day_array, normalize_calendar
from app.domain.extractors import (
    extract_listing_records,
    extract_token,
    extract_token_expiry,
)
from app.domain.listing import unit_from_record
from app.services.hostaway.types import CalendarDay, TokenGrant, Unit

logger = logging.getLogger(__name__)

# Hard stop for catalogs that keep reporting more pages.
MAX_LISTING_PAGES = 20


def _snippet(text: str, limit: int = 300) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


# What mapping raises on a malformed provider value (pydantic errors are ValueErrors).
_MAPPING_ERRORS = (TypeError, ValueError, OverflowError)


def units_from_records(records: list[dict[str, Any]]) -> list[Unit]:
    try:
        return [unit_from_record(r) for r in records if r.get("id") is not None]
    except _MAPPING_ERRORS as exc:
        raise ParseError(f"Listing record could not be mapped: {exc}") from exc


def calendar_days(payload: Any, unit_id: str) -> list[CalendarDay]:
    if find_day_array(payload) is None:
        raise ParseError(f"Calendar for listing {unit_id} has no recognized day array")
    try:
        return normalize_calendar(payload)
    except _MAPPING_ERRORS as exc:
        raise ParseError(f"Calendar for listing {unit_id} could not be read: {exc}") from exc


class HostawayHttpGateway:
    name = "hostaway"

    def __init__(
        self,
        *,
        base_url: str,
        timeout_secs: float = 30.0,
        page_size: int = 1000,
        user_agent: str = "OceanVillas/0.1",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_secs = timeout_secs
        self.page_size = page_size
        self.user_agent = user_agent
        # tests inject httpx.MockTransport here
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout_secs,
            transport=self._transport,
            headers={"User-Agent": self.user_agent},
        )

    async def get_token(self, *, account_id: str, api_key: str) -> TokenGrant:
        form = {
            "grant_type": "client_credentials",
            "client_id": account_id,
            "client_secret": api_key,
            "scope": "general",
        }
        async with self._client() as client:
            try:
                resp = await client.post(
                    "/accessTokens",
                    data=form,
                    headers={"Cache-Control": "no-cache"},
                )
            except httpx.HTTPError as exc:
                raise AuthError(f"Failed to get access token: {exc}") from exc

        try:
            payload: Any = resp.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            payload = None

        token = extract_token(payload)
        if not resp.is_success or not token:
            body = json.dumps(payload) if payload is not None else _snippet(resp.text)
            raise AuthError(f"Failed to get access token ({resp.status_code}): {body}")

        return TokenGrant(value=token, expires_in=extract_token_expiry(payload))

    async def _get_json(
        self,
        client: httpx.AsyncClient,
        path: str,
        *,
        token: str,
        params: dict[str, Any],
    ) -> Any:
        try:
            resp = await client.get(
                path,
                params=params,
                headers={
                    "Authorization": f"Bearer {token}",
                    "Content-Type": "application/json",
                    "Cache-Control": "no-cache",
                },
            )
        except httpx.HTTPError as exc:
            raise UpstreamError(f"GET {path} failed: {exc}") from exc

        if not resp.is_success:
            raise UpstreamError(
                f"GET {path} returned {resp.status_code}", status=resp.status_code
            )

        try:
            return resp.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ParseError(f"GET {path} returned a non-JSON body") from exc

    async def list_units(self, *, token: str) -> list[Unit]:
        units: list[Unit] = []
        offset = 0

        async with self._client() as client:
            for _ in range(MAX_LISTING_PAGES):
                payload = await self._get_json(
                    client,
                    "/listings",
                    token=token,
                    params={
                        "limit": self.page_size,
                        "perPage": self.page_size,
                        "offset": offset,
                    },
                )
                records = extract_listing_records(payload)
                if records is None:
                    raise ParseError("Listings response has no recognized listing array")

                units.extend(units_from_records(records))
                offset += len(records)

                total = payload.get("count") if isinstance(payload, dict) else None
                if (
                    not records
                    or len(records) < self.page_size
                    or not isinstance(total, int)
                    or offset >= total
                ):
                    break
            else:
                logger.warning("listing pagination stopped after %d pages", MAX_LISTING_PAGES)

        return units

    async def get_calendar(
        self, *, token: str, unit_id: str, start: date, end: date
    ) -> list[CalendarDay]:
        path = f"/listings/{quote(unit_id, safe='')}/calendar"
        async with self._client() as client:
            payload = await self._get_json(
                client,
                path,
                token=token,
                params={"startDate": start.isoformat(), "endDate": end.isoformat()},
            )

        return calendar_days(payload, unit_id)
