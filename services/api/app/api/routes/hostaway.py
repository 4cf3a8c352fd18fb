from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from app.api.deps import get_search_service
from app.api.rate_limit import rate_limiter
from app.core.config import settings
from app.domain.listing import (
    booking_engine_url,
    build_booking_url,
    hero_image,
    tagline,
    thumbnail_url,
)
from app.schemas.hostaway import (
    ErrorOut,
    FeaturedListingOut,
    FeaturedOut,
    ListingCompactOut,
    ListingDetailOut,
    ListingDetailResponse,
    SearchDebugOut,
    SearchOut,
    SearchQueryOut,
    VerdictOut,
)
from app.services.availability import AvailabilityVerdict
from app.services.hostaway.types import Unit
from app.services.search import SearchQuery, SearchService, parse_search_query

router = APIRouter(prefix="/api/hostaway", tags=["hostaway"])

_error_responses = {
    400: {"model": ErrorOut},
    500: {"model": ErrorOut},
    502: {"model": ErrorOut},
}


def _compact(unit: Unit, query: SearchQuery) -> ListingCompactOut:
    base = booking_engine_url(unit, settings.booking_engine_base_url)
    return ListingCompactOut(
        id=unit.id,
        name=unit.name,
        city=unit.city,
        state=unit.state,
        country=unit.country,
        max_guests=unit.capacity,
        bedrooms=unit.bedroom_count,
        bathrooms=unit.bathroom_count,
        thumbnail_url=thumbnail_url(unit),
        price_nightly=unit.price_nightly,
        booking_url=build_booking_url(
            base,
            query.date_range.start.isoformat(),
            query.date_range.end.isoformat(),
            query.guests,
        ),
    )


def _verdict_out(v: AvailabilityVerdict) -> VerdictOut:
    return VerdictOut(
        listing_id=v.unit_id,
        available=v.available,
        relevant_count=v.relevant_night_count,
        reasons=sorted(r.value for r in v.reason_codes),
    )


@router.get(
    "/search",
    response_model=SearchOut,
    responses=_error_responses,
    dependencies=[
        Depends(
            rate_limiter(
                "search",
                limit=settings.rate_limit_search_per_window,
                window_seconds=settings.rate_limit_window_seconds,
            )
        )
    ],
)
async def search_listings(
    start_date: str | None = Query(default=None, alias="startDate"),
    end_date: str | None = Query(default=None, alias="endDate"),
    guests: str | None = Query(default=None),
    service: SearchService = Depends(get_search_service),
):
    service.require_unit_ids()
    query = parse_search_query(start_date, end_date, guests)

    result = await service.search(query)

    debug = None
    if settings.search_debug:
        debug = SearchDebugOut(checked=[_verdict_out(v) for v in result.verdicts])

    listings = [_compact(u, query) for u in result.available_units]
    return SearchOut(
        query=SearchQueryOut(
            start_date=query.date_range.start.isoformat(),
            end_date=query.date_range.end.isoformat(),
            guests=query.guests,
        ),
        total_configured=len(result.unit_ids),
        total_found_listings=len(result.directory),
        available_count=len(listings),
        available_listings=listings,
        debug=debug,
    )


@router.get("/featured", response_model=FeaturedOut, responses=_error_responses)
async def featured_listings(service: SearchService = Depends(get_search_service)):
    units = await service.featured()

    featured = []
    for u in units:
        hero = hero_image(u)
        featured.append(
            FeaturedListingOut(
                id=u.id,
                name=u.name,
                tagline=tagline(u),
                sleeps=u.capacity or 0,
                beds=u.bedroom_count or 0,
                baths=u.bathroom_count or 0,
                highlight="Direct booking",
                image=hero.best_url if hero else None,
            )
        )
    return FeaturedOut(featured=featured)


@router.get(
    "/listings/{listing_id}",
    response_model=ListingDetailResponse,
    responses={**_error_responses, 404: {"model": ErrorOut}},
)
async def get_listing(listing_id: str, service: SearchService = Depends(get_search_service)):
    unit = await service.get_listing(listing_id)
    if unit is None:
        return JSONResponse(
            status_code=404,
            content={"success": False, "error": "Listing not found", "id": listing_id},
        )

    return ListingDetailResponse(
        listing=ListingDetailOut(
            id=unit.id,
            name=unit.name,
            description=unit.description,
            city=unit.city,
            state=unit.state,
            country=unit.country,
            max_guests=unit.capacity,
            bedrooms=unit.bedroom_count,
            bathrooms=unit.bathroom_count,
            hero_url=thumbnail_url(unit),
            booking_engine_url=booking_engine_url(unit, settings.booking_engine_base_url),
        )
    )
