from __future__ import annotations

from fastapi import APIRouter, HTTPException
from fastapi.responses import RedirectResponse

from app.core.config import settings

router = APIRouter(tags=["booking"])


@router.get("/book", include_in_schema=False)
@router.get("/booking", include_in_schema=False)
def booking_redirect() -> RedirectResponse:
    # Checkout lives in the provider's booking engine; we only hand off.
    if not settings.booking_engine_base_url:
        raise HTTPException(status_code=404, detail="Booking engine not configured")
    return RedirectResponse(settings.booking_engine_base_url, status_code=307)
