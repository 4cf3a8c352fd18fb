from __future__ import annotations

from functools import lru_cache

from fastapi import Depends

from app.core.config import settings
from app.core.redis_client import get_redis
from app.services.credentials import CredentialManager
from app.services.hostaway.factory import get_gateway
from app.services.hostaway.provider import HostawayGateway
from app.services.search import SearchService


@lru_cache
def get_credential_manager() -> CredentialManager:
    # One per process; every request shares the cached token.
    return CredentialManager(
        get_gateway(),
        account_id=settings.hostaway_account_id,
        api_key=settings.hostaway_api_key,
        ttl_secs=settings.hostaway_token_ttl_secs,
        redis_client=get_redis(),
    )


def get_search_service(
    gateway: HostawayGateway = Depends(get_gateway),
    credentials: CredentialManager = Depends(get_credential_manager),
) -> SearchService:
    return SearchService(gateway, credentials, unit_ids=settings.listing_ids)
