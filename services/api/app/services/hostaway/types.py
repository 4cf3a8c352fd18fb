from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DayStatus(str, Enum):
    available = "available"
    unavailable = "unavailable"
    unknown = "unknown"


class ReasonCode(str, Enum):
    upstream_error = "upstream_error"
    parse_error = "parse_error"
    no_data = "no_data"
    night_unavailable = "night_unavailable"
    night_unknown = "night_unknown"
    capacity_exceeded = "capacity_exceeded"
    min_stay_not_met = "min_stay_not_met"


class TokenGrant(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: str
    # seconds, when the provider says so
    expires_in: int | None = None


class ImageRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str | None = None
    airbnb_url: str | None = None
    caption: str | None = None

    @property
    def best_url(self) -> str | None:
        return self.url or self.airbnb_url


class Unit(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str

    city: str | None = None
    state: str | None = None
    country: str | None = None

    capacity: int | None = None
    bedroom_count: int | None = None
    bathroom_count: float | None = None

    description: str | None = None
    price_nightly: float | None = None
    booking_engine_url: str | None = None

    images: tuple[ImageRef, ...] = ()

    # arbitrary provider metadata
    raw: dict[str, Any] = Field(default_factory=dict, repr=False)


class CalendarDay(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: dt.date | None
    status: DayStatus
    min_stay: int | None = None
