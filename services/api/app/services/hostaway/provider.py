from __future__ import annotations

from datetime import date
from typing import Protocol

from app.services.hostaway.types import CalendarDay, TokenGrant, Unit


class HostawayGateway(Protocol):
    """The only network-facing surface; callers see normalized types."""

    name: str

    async def get_token(self, *, account_id: str, api_key: str) -> TokenGrant: ...

    async def list_units(self, *, token: str) -> list[Unit]: ...

    async def get_calendar(
        self, *, token: str, unit_id: str, start: date, end: date
    ) -> list[CalendarDay]: ...
