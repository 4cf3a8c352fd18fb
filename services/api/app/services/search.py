from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from datetime import date

from app.core.errors import ConfigError, ParseError, QueryValidationError, UpstreamError
from app.services.availability import AvailabilityVerdict, DateRange, apply_capacity, evaluate
from app.services.credentials import CredentialManager
from app.services.directory import list_configured_units, select_configured
from app.services.hostaway.provider import HostawayGateway
from app.services.hostaway.types import Unit

logger = logging.getLogger(__name__)

DEFAULT_GUESTS = 2

# Provider statuses that mean our bearer token is no longer accepted.
TOKEN_REJECTED_STATUSES = frozenset({401})

_iso_date = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True)
class SearchQuery:
    date_range: DateRange
    guests: int = DEFAULT_GUESTS


def _parse_iso_date(s: str) -> date | None:
    s = s.strip()
    if not _iso_date.match(s):
        return None
    try:
        return date.fromisoformat(s)
    except ValueError:
        return None


def parse_search_query(
    start_date: str | None, end_date: str | None, guests: str | int | None = None
) -> SearchQuery:
    """Validate raw query input. Raises QueryValidationError; never touches the network."""
    if not start_date or not end_date:
        raise QueryValidationError("Required: startDate, endDate")

    start = _parse_iso_date(start_date)
    end = _parse_iso_date(end_date)
    if start is None or end is None or end <= start:
        raise QueryValidationError("Invalid date range")

    if guests is None or (isinstance(guests, str) and not guests.strip()):
        n_guests = DEFAULT_GUESTS
    else:
        try:
            n_guests = int(str(guests).strip())
        except ValueError:
            raise QueryValidationError("Invalid guests") from None
    if n_guests < 1:
        raise QueryValidationError("Invalid guests")

    return SearchQuery(date_range=DateRange(start=start, end=end), guests=n_guests)


@dataclass(frozen=True)
class SearchResult:
    query: SearchQuery
    unit_ids: list[str]
    directory: list[Unit]
    verdicts: list[AvailabilityVerdict]
    available_units: list[Unit]


class SearchService:
    def __init__(
        self,
        gateway: HostawayGateway,
        credentials: CredentialManager,
        *,
        unit_ids: list[str],
    ):
        self._gateway = gateway
        self._credentials = credentials
        self._unit_ids = list(unit_ids)

    def require_unit_ids(self) -> list[str]:
        if not self._unit_ids:
            raise ConfigError("Missing OCEANVILLAS_LISTING_IDS")
        # de-dupe, keep configured order
        return list(dict.fromkeys(self._unit_ids))

    async def _drop_rejected_token(self, status: int | None) -> None:
        # No retry here; the next request acquires a fresh token.
        if status in TOKEN_REJECTED_STATUSES:
            logger.warning("hostaway rejected the access token (%s); dropping it", status)
            await self._credentials.invalidate()

    async def _directory(self, token: str, unit_ids: list[str]) -> list[Unit]:
        try:
            return await list_configured_units(self._gateway, token=token, unit_ids=unit_ids)
        except UpstreamError as exc:
            logger.warning("listing catalog unavailable: %s", exc)
            await self._drop_rejected_token(exc.status)
            return []
        except ParseError as exc:
            logger.warning("listing catalog unreadable: %s", exc)
            return []

    async def search(self, query: SearchQuery) -> SearchResult:
        unit_ids = self.require_unit_ids()
        credential = await self._credentials.get_credential()

        directory_task = self._directory(credential.value, unit_ids)
        evaluations = [
            evaluate(
                self._gateway,
                token=credential.value,
                unit_id=uid,
                date_range=query.date_range,
                guests=query.guests,
            )
            for uid in unit_ids
        ]
        directory, *verdicts = await asyncio.gather(directory_task, *evaluations)

        rejected = next(
            (v.upstream_status for v in verdicts if v.upstream_status in TOKEN_REJECTED_STATUSES),
            None,
        )
        await self._drop_rejected_token(rejected)

        by_id = {u.id: u for u in directory}
        verdicts = [apply_capacity(v, by_id.get(v.unit_id), query.guests) for v in verdicts]
        open_ids = {v.unit_id for v in verdicts if v.available}

        available_units = [u for u in directory if u.id in open_ids]
        logger.info(
            "search %s..%s guests=%d: %d/%d available",
            query.date_range.start,
            query.date_range.end,
            query.guests,
            len(available_units),
            len(unit_ids),
        )

        return SearchResult(
            query=query,
            unit_ids=unit_ids,
            directory=directory,
            verdicts=verdicts,
            available_units=available_units,
        )

    async def featured(self) -> list[Unit]:
        unit_ids = self.require_unit_ids()
        credential = await self._credentials.get_credential()
        return await self._directory(credential.value, unit_ids)

    async def get_listing(self, unit_id: str) -> Unit | None:
        """Look up any catalog unit by id; catalog failures propagate."""
        credential = await self._credentials.get_credential()
        try:
            units = await self._gateway.list_units(token=credential.value)
        except UpstreamError as exc:
            await self._drop_rejected_token(exc.status)
            raise
        found = select_configured(units, [unit_id])
        return found[0] if found else None
