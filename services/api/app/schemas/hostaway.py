from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelOut(BaseModel):
    # JSON contract of the site is camelCase
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ListingCompactOut(CamelOut):
    id: str
    name: str
    city: str | None
    state: str | None
    country: str | None
    max_guests: int | None
    bedrooms: int | None
    bathrooms: float | None
    thumbnail_url: str | None
    price_nightly: float | None = None
    booking_url: str | None = None


class SearchQueryOut(CamelOut):
    start_date: str
    end_date: str
    guests: int


class VerdictOut(CamelOut):
    listing_id: str
    available: bool
    relevant_count: int
    reasons: list[str]


class SearchDebugOut(CamelOut):
    checked: list[VerdictOut]


class SearchOut(CamelOut):
    success: bool = True
    query: SearchQueryOut
    total_configured: int
    total_found_listings: int
    available_count: int
    available_listings: list[ListingCompactOut]
    debug: SearchDebugOut | None = None


class FeaturedListingOut(CamelOut):
    id: str
    name: str
    tagline: str
    sleeps: int
    beds: int
    baths: float
    highlight: str
    image: str | None


class FeaturedOut(CamelOut):
    success: bool = True
    featured: list[FeaturedListingOut]


class ListingDetailOut(CamelOut):
    id: str
    name: str
    description: str | None
    city: str | None
    state: str | None
    country: str | None
    max_guests: int | None
    bedrooms: int | None
    bathrooms: float | None
    hero_url: str | None
    booking_engine_url: str | None


class ListingDetailResponse(CamelOut):
    success: bool = True
    listing: ListingDetailOut


class ErrorOut(BaseModel):
    success: bool = False
    error: str
