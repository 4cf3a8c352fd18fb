import re
from datetime import date, timedelta

import httpx
import pytest
from app.api.deps import get_search_service
from app.main import app
from app.services.credentials import CredentialManager
from app.services.hostaway.gateway import HostawayHttpGateway
from app.services.search import SearchService
from fastapi.testclient import TestClient

BASE_URL = "https://hostaway.test/v1"

_calendar_path = re.compile(r"/listings/([^/]+)/calendar$")


def listing(listing_id, **overrides):
    record = {
        "id": listing_id,
        "name": f"Villa {listing_id}",
        "city": "Miramar Beach",
        "state": "FL",
        "country": "United States",
        "personCapacity": 6,
        "bedroomsNumber": 3,
        "bathroomsNumber": 2,
        "listingImages": [{"url": f"https://img.test/{listing_id}.jpg"}],
    }
    record.update(overrides)
    return record


def calendar(start, end, blocked=()):
    """Hostaway-style calendar covering start..end inclusive (checkout day too)."""
    days = []
    d = date.fromisoformat(start)
    last = date.fromisoformat(end)
    while d <= last:
        iso = d.isoformat()
        if iso in blocked:
            days.append({"date": iso, "isAvailable": 0, "status": "reserved"})
        else:
            days.append({"date": iso, "isAvailable": 1, "status": "available"})
        d += timedelta(days=1)
    return {"status": "success", "result": days}


class FakeHostaway:
    """In-memory stand-in for the Hostaway REST API, served via httpx.MockTransport."""

    def __init__(self):
        self.listings = []
        self.calendars = {}
        # factories, so every request gets a fresh httpx.Response
        self.token_response = lambda: httpx.Response(
            200, json={"token_type": "Bearer", "access_token": "tok-123"}
        )
        self.listings_response = None
        self.token_requests = 0
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if request.method == "POST" and path.endswith("/accessTokens"):
            self.token_requests += 1
            return self.token_response()

        if path.endswith("/listings"):
            if self.listings_response is not None:
                return self.listings_response()
            return httpx.Response(
                200,
                json={"status": "success", "result": self.listings, "count": len(self.listings)},
            )

        m = _calendar_path.search(path)
        if m:
            cal = self.calendars.get(m.group(1))
            if cal is None:
                return httpx.Response(404, json={"status": "fail"})
            if callable(cal):
                return cal()
            return httpx.Response(200, json=cal)

        return httpx.Response(404)

    def calendar_requests(self):
        return [r for r in self.requests if _calendar_path.search(r.url.path)]


class FakeClock:
    def __init__(self, now=1_700_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture()
def hostaway():
    return FakeHostaway()


@pytest.fixture()
def gateway(hostaway):
    return HostawayHttpGateway(
        base_url=BASE_URL,
        page_size=100,
        transport=httpx.MockTransport(hostaway.handler),
    )


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def credentials(gateway, clock):
    return CredentialManager(
        gateway,
        account_id="12345",
        api_key="secret",
        ttl_secs=3600,
        clock=clock,
    )


@pytest.fixture()
def unit_ids():
    return ["A", "B", "C"]


@pytest.fixture()
def client(gateway, credentials, unit_ids):
    def override_search_service():
        return SearchService(gateway, credentials, unit_ids=unit_ids)

    app.dependency_overrides[get_search_service] = override_search_service
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
