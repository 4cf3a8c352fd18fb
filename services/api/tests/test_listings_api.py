import httpx
from app.core.config import settings
from conftest import listing


def test_featured_lists_configured_units_in_order(client, hostaway, unit_ids):
    unit_ids[:] = ["B", "A"]
    hostaway.listings = [
        listing("A", listingImages=[{"airbnbUrl": "https://airbnb.test/a.jpg"}]),
        listing("B", state=None, personCapacity=None, bathroomsNumber=None),
        listing("C"),
    ]

    resp = client.get("/api/hostaway/featured")

    assert resp.status_code == 200
    featured = resp.json()["featured"]
    assert [f["id"] for f in featured] == ["B", "A"]
    assert featured[0] == {
        "id": "B",
        "name": "Villa B",
        "tagline": "Miramar Beach",
        "sleeps": 0,
        "beds": 3,
        "baths": 0,
        "highlight": "Direct booking",
        "image": "https://img.test/B.jpg",
    }
    assert featured[1]["tagline"] == "Miramar Beach, FL"
    assert featured[1]["image"] == "https://airbnb.test/a.jpg"
    # no calendar lookups for the featured strip
    assert hostaway.calendar_requests() == []


def test_listing_detail(client, hostaway):
    hostaway.listings = [
        listing("489089", description="Gulf-front villa", bookingEnginePublicUrl="https://book.test/489089")
    ]

    resp = client.get("/api/hostaway/listings/489089")

    assert resp.status_code == 200
    detail = resp.json()["listing"]
    assert detail["id"] == "489089"
    assert detail["description"] == "Gulf-front villa"
    assert detail["heroUrl"] == "https://img.test/489089.jpg"
    assert detail["bookingEngineUrl"] == "https://book.test/489089"
    assert detail["maxGuests"] == 6


def test_listing_detail_defaults_booking_engine(client, hostaway):
    hostaway.listings = [listing("7")]

    detail = client.get("/api/hostaway/listings/7").json()["listing"]

    assert detail["bookingEngineUrl"] == settings.booking_engine_base_url


def test_listing_detail_not_found(client, hostaway):
    hostaway.listings = [listing("A")]

    resp = client.get("/api/hostaway/listings/missing")

    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": "Listing not found", "id": "missing"}


def test_listing_detail_catalog_failure(client, hostaway):
    hostaway.listings_response = lambda: httpx.Response(502, text="bad gateway")

    resp = client.get("/api/hostaway/listings/A")

    assert resp.status_code == 502
    assert resp.json()["success"] is False


def test_booking_redirect(client):
    resp = client.get("/book", follow_redirects=False)

    assert resp.status_code == 307
    assert resp.headers["location"] == settings.booking_engine_base_url


def test_health_and_request_id(client):
    resp = client.get("/health", headers={"X-Request-Id": "abc"})

    assert resp.json() == {"status": "ok"}
    assert resp.headers["X-Request-Id"] == "abc"
