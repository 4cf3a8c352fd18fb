from urllib.parse import parse_qs

import httpx
import pytest
from app.core.errors import AuthError, ConfigError
from app.services.credentials import CredentialManager


@pytest.mark.asyncio
async def test_token_is_cached_within_ttl(credentials, hostaway, clock):
    first = await credentials.get_credential()
    clock.advance(3599)
    second = await credentials.get_credential()

    assert first.value == "tok-123"
    assert second is first
    assert hostaway.token_requests == 1


@pytest.mark.asyncio
async def test_token_is_refreshed_after_ttl(credentials, hostaway, clock):
    await credentials.get_credential()
    clock.advance(3600)
    await credentials.get_credential()

    assert hostaway.token_requests == 2


@pytest.mark.asyncio
async def test_invalidate_forces_refresh(credentials, hostaway):
    await credentials.get_credential()
    await credentials.invalidate()
    assert credentials.cached is None

    await credentials.get_credential()
    assert hostaway.token_requests == 2


@pytest.mark.asyncio
async def test_token_request_is_client_credentials_form(credentials, hostaway):
    await credentials.get_credential()

    req = hostaway.requests[0]
    assert req.method == "POST"
    assert req.url.path == "/v1/accessTokens"
    assert req.headers["content-type"] == "application/x-www-form-urlencoded"
    form = parse_qs(req.content.decode())
    assert form["grant_type"] == ["client_credentials"]
    assert form["client_id"] == ["12345"]
    assert form["client_secret"] == ["secret"]


@pytest.mark.asyncio
async def test_shorter_provider_expiry_wins(credentials, hostaway, clock):
    hostaway.token_response = lambda: httpx.Response(
        200, json={"result": {"accessToken": "short"}, "expires_in": 60}
    )
    cred = await credentials.get_credential()
    assert cred.value == "short"
    assert cred.ttl == 60

    clock.advance(61)
    await credentials.get_credential()
    assert hostaway.token_requests == 2


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "account_id,api_key,message",
    [
        (None, "secret", "Missing HOSTAWAY_ACCOUNT_ID"),
        ("12345", "", "Missing HOSTAWAY_API_KEY"),
    ],
)
async def test_missing_config_fails_without_network(gateway, hostaway, account_id, api_key, message):
    mgr = CredentialManager(gateway, account_id=account_id, api_key=api_key, ttl_secs=60)

    with pytest.raises(ConfigError) as exc_info:
        await mgr.get_credential()

    assert exc_info.value.message == message
    # also an auth failure from the caller's point of view
    assert isinstance(exc_info.value, AuthError)
    assert hostaway.requests == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        lambda: httpx.Response(401, json={"status": "fail", "message": "invalid client"}),
        lambda: httpx.Response(200, json={"status": "success", "result": {}}),
        lambda: httpx.Response(200, text="<html>gateway</html>"),
        lambda: httpx.Response(500, json={"access_token": "tok"}),
    ],
)
async def test_auth_failures(credentials, hostaway, response):
    hostaway.token_response = response

    with pytest.raises(AuthError) as exc_info:
        await credentials.get_credential()

    assert "Failed to get access token" in exc_info.value.message
    assert credentials.cached is None


class FakeRedis:
    def __init__(self):
        self.store = {}
        self.ttls = {}

    async def get(self, key):
        return self.store.get(key)

    async def setex(self, key, ttl, value):
        self.store[key] = value
        self.ttls[key] = ttl

    async def delete(self, key):
        self.store.pop(key, None)


@pytest.mark.asyncio
async def test_shared_store_lets_instances_reuse_token(gateway, hostaway, clock):
    shared = FakeRedis()
    first = CredentialManager(
        gateway, account_id="12345", api_key="secret", ttl_secs=3600, clock=clock, redis_client=shared
    )
    second = CredentialManager(
        gateway, account_id="12345", api_key="secret", ttl_secs=3600, clock=clock, redis_client=shared
    )

    await first.get_credential()
    clock.advance(100)
    cred = await second.get_credential()

    assert cred.value == "tok-123"
    assert hostaway.token_requests == 1
    assert shared.ttls["hostaway:credential:12345"] == 3600


@pytest.mark.asyncio
async def test_shared_store_failure_fails_open(gateway, hostaway, clock):
    import redis

    class BrokenRedis(FakeRedis):
        async def get(self, key):
            raise redis.ConnectionError("down")

        async def setex(self, key, ttl, value):
            raise redis.ConnectionError("down")

    mgr = CredentialManager(
        gateway, account_id="12345", api_key="secret", ttl_secs=3600, clock=clock, redis_client=BrokenRedis()
    )
    cred = await mgr.get_credential()
    assert cred.value == "tok-123"
