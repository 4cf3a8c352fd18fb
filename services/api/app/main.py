"""Ocean Villas availability API.

Run (from services/api):
    uvicorn app.main:app --reload --port 8000
"""

from __future__ import annotations

import logging

from app.api.router import api_router
from app.core.config import settings
from app.core.errors import RentalApiError
from app.core.logging import setup_logging
from app.core.otel import init_otel
from app.middleware.request_id import RequestIdMiddleware
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

setup_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.api_name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)
app.add_middleware(RequestIdMiddleware)


@app.exception_handler(RentalApiError)
async def rental_api_error_handler(request: Request, exc: RentalApiError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s: %s", type(exc).__name__, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.message},
    )


app.include_router(api_router)

init_otel(app)
