import pytest
from app.core.config import SEVEN_DAYS_SECS, Settings


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("489089,489093", ["489089", "489093"]),
        (" 489089 , ,489093 ", ["489089", "489093"]),
        ('["489089", 489093]', ["489089", "489093"]),
        ("[489089, 489093]", ["489089", "489093"]),
        ("", []),
    ],
)
def test_listing_ids_formats(monkeypatch, raw, expected):
    monkeypatch.setenv("OCEANVILLAS_LISTING_IDS", raw)
    assert Settings(_env_file=None).listing_ids == expected


def test_defaults(monkeypatch):
    for var in ("HOSTAWAY_ACCOUNT_ID", "HOSTAWAY_API_KEY", "OCEANVILLAS_LISTING_IDS", "HOSTAWAY_TOKEN_TTL_SECS"):
        monkeypatch.delenv(var, raising=False)

    s = Settings(_env_file=None)
    assert s.hostaway_account_id is None
    assert s.listing_ids == []
    assert s.hostaway_token_ttl_secs == SEVEN_DAYS_SECS
    assert s.hostaway_base_url == "https://api.hostaway.com/v1"


def test_booking_engine_alias(monkeypatch):
    monkeypatch.delenv("BOOKING_ENGINE_BASE_URL", raising=False)
    monkeypatch.setenv("HOSTAWAY_BOOKING_ENGINE_BASE_URL", "https://book.test")
    assert Settings(_env_file=None).booking_engine_base_url == "https://book.test"


def test_provider_validation(monkeypatch):
    monkeypatch.setenv("HOSTAWAY_PROVIDER", " Fixture ")
    assert Settings(_env_file=None).hostaway_provider == "fixture"

    monkeypatch.setenv("HOSTAWAY_PROVIDER", "airbnb")
    with pytest.raises(ValueError):
        Settings(_env_file=None)


def test_forwarded_for_untrusted_by_default(monkeypatch):
    monkeypatch.delenv("TRUST_FORWARDED_FOR", raising=False)
    assert Settings(_env_file=None).trust_forwarded_for is False

    monkeypatch.setenv("TRUST_FORWARDED_FOR", "true")
    assert Settings(_env_file=None).trust_forwarded_for is True
