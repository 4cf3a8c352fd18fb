from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date

from app.core.errors import ParseError, UpstreamError
from app.services.hostaway.provider import HostawayGateway
from app.services.hostaway.types import CalendarDay, DayStatus, ReasonCode, Unit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end <= self.start:
            raise ValueError("end must be after start")

    @property
    def nights(self) -> int:
        return (self.end - self.start).days

    def contains_night(self, d: date) -> bool:
        # checkout day is not a night
        return self.start <= d < self.end


@dataclass(frozen=True)
class AvailabilityVerdict:
    unit_id: str
    relevant_night_count: int = 0
    reason_codes: frozenset[ReasonCode] = field(default_factory=frozenset)
    # HTTP status of a failed calendar call, if any
    upstream_status: int | None = None

    @property
    def available(self) -> bool:
        return not self.reason_codes

    def with_reason(self, reason: ReasonCode) -> AvailabilityVerdict:
        return replace(self, reason_codes=self.reason_codes | {reason})


def decide(unit_id: str, days: list[CalendarDay], date_range: DateRange) -> AvailabilityVerdict:
    """Strict all-or-nothing decision over the nights of the stay."""
    nights = [d for d in days if d.date is not None and date_range.contains_night(d.date)]

    reasons: set[ReasonCode] = set()
    if not nights:
        reasons.add(ReasonCode.no_data)

    for night in nights:
        if night.status == DayStatus.unavailable:
            reasons.add(ReasonCode.night_unavailable)
        elif night.status == DayStatus.unknown:
            reasons.add(ReasonCode.night_unknown)
        if night.min_stay is not None and night.min_stay > date_range.nights:
            reasons.add(ReasonCode.min_stay_not_met)

    return AvailabilityVerdict(
        unit_id=unit_id,
        relevant_night_count=len(nights),
        reason_codes=frozenset(reasons),
    )


async def evaluate(
    gateway: HostawayGateway,
    *,
    token: str,
    unit_id: str,
    date_range: DateRange,
    guests: int = 1,
    unit: Unit | None = None,
) -> AvailabilityVerdict:
    """Fetch, normalize and decide one unit. Never raises for provider failures.

    Capacity can only be checked when `unit` is known up front; otherwise the
    caller applies `apply_capacity` once the directory is in.
    """
    try:
        days = await gateway.get_calendar(
            token=token, unit_id=unit_id, start=date_range.start, end=date_range.end
        )
    except UpstreamError as exc:
        logger.warning("calendar fetch failed for listing %s: %s", unit_id, exc)
        return AvailabilityVerdict(
            unit_id=unit_id,
            reason_codes=frozenset({ReasonCode.upstream_error}),
            upstream_status=exc.status,
        )
    except ParseError as exc:
        logger.warning("calendar unreadable for listing %s: %s", unit_id, exc)
        return AvailabilityVerdict(unit_id=unit_id, reason_codes=frozenset({ReasonCode.parse_error}))

    verdict = apply_capacity(decide(unit_id, days, date_range), unit, guests)
    logger.debug(
        "listing %s: %d nights, reasons=%s",
        unit_id,
        verdict.relevant_night_count,
        sorted(r.value for r in verdict.reason_codes),
    )
    return verdict


def apply_capacity(verdict: AvailabilityVerdict, unit: Unit | None, guests: int) -> AvailabilityVerdict:
    """Units that cannot sleep the party are out. Unknown capacity is not held against a unit."""
    if unit is None or unit.capacity is None:
        return verdict
    if unit.capacity < guests:
        return verdict.with_reason(ReasonCode.capacity_exceeded)
    return verdict
