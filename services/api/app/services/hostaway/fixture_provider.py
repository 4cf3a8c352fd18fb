from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Any

from app.core.errors import AuthError, ParseError, UpstreamError
from app.domain.extractors import extract_listing_records
from app.services.hostaway.gateway import calendar_days, units_from_records
from app.services.hostaway.types import CalendarDay, TokenGrant, Unit


class FixtureGateway:
    """Serves Hostaway-shaped payloads from a JSON file, for demos and local dev.

    File layout:
      {"listings": <catalog payload>, "calendars": {"<id>": <calendar payload>}}

    A calendar entry of the form {"httpStatus": 503} simulates an upstream failure.
    Calendar payloads are returned as-is; the date range is applied downstream.
    """

    name = "fixture"

    def __init__(self, fixture_path: str):
        self.fixture_path = fixture_path
        self._data = self._load()

    def _load(self) -> dict:
        p = Path(self.fixture_path)
        if not p.exists():
            raise FileNotFoundError(f"Fixture file not found: {p}")
        raw = p.read_text(encoding="utf-8")
        return json.loads(raw)

    async def get_token(self, *, account_id: str, api_key: str) -> TokenGrant:
        if not account_id or not api_key:
            raise AuthError("Failed to get access token (401): missing credentials")
        return TokenGrant(value=f"fixture-token-{account_id}")

    async def list_units(self, *, token: str) -> list[Unit]:
        records = extract_listing_records(self._data.get("listings"))
        if records is None:
            raise ParseError("Fixture listings have no recognized listing array")
        return units_from_records(records)

    async def get_calendar(
        self, *, token: str, unit_id: str, start: date, end: date
    ) -> list[CalendarDay]:
        calendars: dict[str, Any] = self._data.get("calendars", {})
        if unit_id not in calendars:
            raise UpstreamError(f"No calendar for listing {unit_id}", status=404)

        payload = calendars[unit_id]
        if isinstance(payload, dict) and "httpStatus" in payload:
            status = int(payload["httpStatus"])
            raise UpstreamError(f"Calendar for listing {unit_id} returned {status}", status=status)

        return calendar_days(payload, unit_id)
