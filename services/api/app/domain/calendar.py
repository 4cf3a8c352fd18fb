from __future__ import annotations

import re
from datetime import date
from typing import Any

from app.domain.extractors import Extractor, first_match, list_at, positive_int_at
from app.services.hostaway.types import CalendarDay, DayStatus

_iso_date = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_separators = re.compile(r"[\s_\-]+")

# Order matters everywhere below: the first extractor that applies wins.
CONTAINER_KEYS = ("result", "data")

DAY_ARRAY_EXTRACTORS: tuple[Extractor[list], ...] = (
    list_at(),
    list_at("days"),
    list_at("calendar"),
    list_at("data"),
)

DATE_FIELDS = ("date", "day", "calendarDate", "startDate", "localDate")

# True means the night is open.
OPEN_FLAG_FIELDS = ("available", "isAvailable")
# True means the night is taken.
CLOSED_FLAG_FIELDS = ("isBooked", "booked", "blocked", "isBlocked")
FLAG_FIELDS = OPEN_FLAG_FIELDS + CLOSED_FLAG_FIELDS

STATUS_TEXT_FIELDS = ("status", "state", "availability")

UNAVAILABLE_VOCABULARY = frozenset(
    {
        "booked",
        "reserved",
        "blocked",
        "unavailable",
        "occupied",
        "notavailable",
        "closed",
        "hold",
    }
)

MIN_STAY_EXTRACTORS: tuple[Extractor[int], ...] = (
    positive_int_at("minimumStay"),
    positive_int_at("minStay"),
    positive_int_at("minNights"),
    positive_int_at("minimumNights"),
)


def _flag_status(field: str, is_open: bool) -> DayStatus:
    open_when_true = field in OPEN_FLAG_FIELDS
    if is_open == open_when_true:
        return DayStatus.available
    return DayStatus.unavailable


def _bool_flag(field: str) -> Extractor[DayStatus]:
    def _read(record: Any) -> DayStatus | None:
        v = record.get(field)
        if isinstance(v, bool):
            return _flag_status(field, v)
        return None

    return Extractor(name=f"bool:{field}", read=_read)


def _numeric_flag(field: str) -> Extractor[DayStatus]:
    def _read(record: Any) -> DayStatus | None:
        v = record.get(field)
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            return None
        if v == 1:
            return _flag_status(field, True)
        if v == 0:
            return _flag_status(field, False)
        return None

    return Extractor(name=f"numeric:{field}", read=_read)


def _status_text(record: Any) -> DayStatus | None:
    raw = None
    for field in STATUS_TEXT_FIELDS:
        if record.get(field) is not None:
            raw = record[field]
            break
    if raw is None:
        return None
    text = _separators.sub("", str(raw).strip().lower())
    if text in UNAVAILABLE_VOCABULARY:
        return DayStatus.unavailable
    return None


STATUS_EXTRACTORS: tuple[Extractor[DayStatus], ...] = (
    *(_bool_flag(f) for f in FLAG_FIELDS),
    *(_numeric_flag(f) for f in FLAG_FIELDS),
    Extractor(name="text:status", read=_status_text),
)


def find_day_array(payload: Any) -> list | None:
    """Locate the per-day array, or None when no known shape matches."""
    container = payload
    if isinstance(payload, dict):
        for key in CONTAINER_KEYS:
            if payload.get(key) is not None:
                container = payload[key]
                break

    return first_match(DAY_ARRAY_EXTRACTORS, container)


def extract_days(payload: Any) -> list[dict[str, Any]]:
    """Pull the per-day records out of a calendar payload.

    Returns an empty list when no known shape matches.
    """
    days = find_day_array(payload)
    if days is None:
        return []
    return [d for d in days if isinstance(d, dict)]


def day_date(record: dict[str, Any]) -> date | None:
    value = None
    for field in DATE_FIELDS:
        if record.get(field):
            value = record[field]
            break
    if value is None:
        return None

    s = str(value)[:10]
    if not _iso_date.match(s):
        return None
    try:
        return date.fromisoformat(s)
    except ValueError:
        return None


def day_status(record: dict[str, Any]) -> DayStatus:
    status = first_match(STATUS_EXTRACTORS, record)
    if status is not None:
        return status

    # A flag we could not read means we cannot vouch for the night.
    if any(record.get(f) is not None for f in FLAG_FIELDS):
        return DayStatus.unknown
    return DayStatus.available


def day_min_stay(record: dict[str, Any]) -> int | None:
    return first_match(MIN_STAY_EXTRACTORS, record)


def normalize_day(record: dict[str, Any]) -> CalendarDay:
    return CalendarDay(
        date=day_date(record),
        status=day_status(record),
        min_stay=day_min_stay(record),
    )


def normalize_calendar(payload: Any) -> list[CalendarDay]:
    return [normalize_day(r) for r in extract_days(payload)]
