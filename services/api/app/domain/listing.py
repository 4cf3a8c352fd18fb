from __future__ import annotations

import math
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

from app.domain.extractors import Extractor, first_match, string_at
from app.services.hostaway.types import ImageRef, Unit

NAME_EXTRACTORS: tuple[Extractor[str], ...] = (
    string_at("name"),
    string_at("externalListingName"),
)

BOOKING_URL_EXTRACTORS: tuple[Extractor[str], ...] = (
    string_at("bookingEnginePublicUrl"),
    string_at("bookingEngineUrl"),
    string_at("publicUrl"),
    string_at("listingUrl"),
    string_at("url"),
)


def _as_float(v: Any) -> float | None:
    if v is None or isinstance(v, bool):
        return None
    try:
        f = float(v)
    except (TypeError, ValueError, OverflowError):
        return None
    # inf/nan are not counts or prices
    return f if math.isfinite(f) else None


def _as_int(v: Any) -> int | None:
    f = _as_float(v)
    return int(f) if f is not None else None


def _as_text(v: Any) -> str | None:
    if isinstance(v, str) and v.strip():
        return v.strip()
    return None


def _coalesce(record: dict[str, Any], *keys: str) -> Any:
    # `??` semantics: 0 is a value, None/missing is not
    for k in keys:
        if record.get(k) is not None:
            return record[k]
    return None


def _image(raw: Any) -> ImageRef | None:
    if not isinstance(raw, dict):
        return None
    return ImageRef(
        url=_as_text(raw.get("url")),
        airbnb_url=_as_text(raw.get("airbnbUrl")),
        caption=_as_text(raw.get("caption")),
    )


def unit_from_record(record: dict[str, Any]) -> Unit:
    unit_id = str(record.get("id"))
    raw_images = record.get("listingImages")
    images = tuple(
        img
        for img in (_image(r) for r in (raw_images if isinstance(raw_images, list) else []))
        if img is not None
    )

    return Unit(
        id=unit_id,
        name=first_match(NAME_EXTRACTORS, record) or f"Listing {unit_id}",
        city=_as_text(record.get("city")),
        state=_as_text(record.get("state")),
        country=_as_text(record.get("country")),
        capacity=_as_int(_coalesce(record, "personCapacity", "maxGuests")),
        bedroom_count=_as_int(record.get("bedroomsNumber")),
        bathroom_count=_as_float(record.get("bathroomsNumber")),
        description=_as_text(record.get("description")),
        price_nightly=_as_float(_coalesce(record, "price", "priceNightly", "baseRate")),
        booking_engine_url=first_match(BOOKING_URL_EXTRACTORS, record),
        images=images,
        raw=record,
    )


def hero_image(unit: Unit) -> ImageRef | None:
    """First image with a direct url, else one with an Airbnb url, else the first."""
    for img in unit.images:
        if img.url:
            return img
    for img in unit.images:
        if img.airbnb_url:
            return img
    return unit.images[0] if unit.images else None


def thumbnail_url(unit: Unit) -> str | None:
    hero = hero_image(unit)
    return hero.best_url if hero else None


def booking_engine_url(unit: Unit, default_base: str | None) -> str | None:
    return unit.booking_engine_url or default_base or None


def build_booking_url(
    base: str | None,
    start_date: str | None,
    end_date: str | None,
    guests: int | str | None,
) -> str | None:
    """Deep-link into the booking engine with the stay pre-filled."""
    if not base:
        return None

    parsed = urlparse(base)
    if not parsed.scheme or not parsed.netloc:
        return base

    params = dict(parse_qsl(parsed.query, keep_blank_values=True))
    if start_date:
        params["startDate"] = start_date
    if end_date:
        params["endDate"] = end_date
    if guests:
        params["guests"] = str(guests)
        params["adults"] = str(guests)

    return urlunparse(parsed._replace(query=urlencode(params)))


def tagline(unit: Unit) -> str:
    if unit.city:
        return f"{unit.city}, {unit.state}" if unit.state else unit.city
    return "Premium stay"
