from __future__ import annotations

from functools import lru_cache

from app.core.config import settings
from app.services.hostaway.fixture_provider import FixtureGateway
from app.services.hostaway.gateway import HostawayHttpGateway
from app.services.hostaway.provider import HostawayGateway


@lru_cache
def get_gateway() -> HostawayGateway:
    if settings.hostaway_provider == "fixture":
        return FixtureGateway(fixture_path=settings.fixture_hostaway_path)
    if settings.hostaway_provider == "hostaway":
        return HostawayHttpGateway(
            base_url=settings.hostaway_base_url,
            timeout_secs=settings.hostaway_timeout_secs,
            page_size=settings.hostaway_listings_page_size,
            user_agent=settings.user_agent,
        )
    raise ValueError(f"Unknown Hostaway provider: {settings.hostaway_provider}")
