from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

# services/api/app/core/config.py -> BASE_DIR == services/api
BASE_DIR = Path(__file__).resolve().parents[2]
APP_DIR = BASE_DIR / "app"
DEFAULT_FIXTURE_HOSTAWAY_PATH = APP_DIR / "fixtures" / "hostaway_fixture.json"

SEVEN_DAYS_SECS = 7 * 24 * 60 * 60


def _parse_list(v: Any, *, field: str) -> list[str]:
    """
    Supported env formats:
      - JSON list: '["489089", "489093"]'
      - Bracket list (no quotes): '[489089, 489093]'
      - Comma-separated: '489089, 489093'
    """
    if v is None:
        return []
    if isinstance(v, (list, tuple)):
        return [str(x).strip() for x in v if str(x).strip()]
    if isinstance(v, int):
        return [str(v)]
    if not isinstance(v, str):
        raise TypeError(f"{field} must be a string or list of strings")

    s = v.strip()
    if not s:
        return []

    # Try JSON first for strings that look like JSON arrays
    if s.startswith("[") and s.endswith("]"):
        try:
            parsed = json.loads(s)
            if isinstance(parsed, list):
                return [str(x).strip() for x in parsed if str(x).strip()]
        except json.JSONDecodeError:
            inner = s[1:-1].strip()
            if not inner:
                return []
            parts = [p.strip().strip('"').strip("'") for p in inner.split(",")]
            return [p for p in parts if p]

    parts = [p.strip() for p in s.split(",")]
    return [p for p in parts if p]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        extra="ignore",
        env_prefix="",
        case_sensitive=False,
    )

    # Environment
    env: str = Field(default="dev", validation_alias="ENV")

    # Application
    api_name: str = Field(default="oceanvillas-api", validation_alias="API_NAME")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    user_agent: str = Field(default="OceanVillas/0.1", validation_alias="USER_AGENT")

    # Hostaway credentials
    hostaway_account_id: str | None = Field(
        default=None, validation_alias="HOSTAWAY_ACCOUNT_ID"
    )
    hostaway_api_key: str | None = Field(
        default=None, validation_alias="HOSTAWAY_API_KEY"
    )

    # Hostaway transport
    hostaway_provider: Literal["hostaway", "fixture"] = Field(
        default="hostaway", validation_alias="HOSTAWAY_PROVIDER"
    )
    hostaway_base_url: str = Field(
        default="https://api.hostaway.com/v1", validation_alias="HOSTAWAY_BASE_URL"
    )
    hostaway_timeout_secs: float = Field(
        default=30.0, validation_alias="HOSTAWAY_TIMEOUT_SECS"
    )
    hostaway_token_ttl_secs: int = Field(
        default=SEVEN_DAYS_SECS, validation_alias="HOSTAWAY_TOKEN_TTL_SECS"
    )
    hostaway_listings_page_size: int = Field(
        default=1000, validation_alias="HOSTAWAY_LISTINGS_PAGE_SIZE"
    )
    fixture_hostaway_path: str = Field(
        default=str(DEFAULT_FIXTURE_HOSTAWAY_PATH),
        validation_alias="FIXTURE_HOSTAWAY_PATH",
    )

    @field_validator("hostaway_provider", mode="before")
    @classmethod
    def normalize_provider(cls, v: Any) -> str:
        if v is None:
            return "hostaway"
        if not isinstance(v, str):
            raise TypeError("HOSTAWAY_PROVIDER must be a string")
        s = v.strip().lower()
        if s not in {"hostaway", "fixture"}:
            raise ValueError("HOSTAWAY_PROVIDER must be one of: hostaway, fixture")
        return s

    # Configured units (allow-list, order is the display order)
    listing_ids: Annotated[list[str], NoDecode] = Field(
        default_factory=list, validation_alias="OCEANVILLAS_LISTING_IDS"
    )

    @field_validator("listing_ids", mode="before")
    @classmethod
    def parse_listing_ids(cls, v: Any) -> list[str]:
        return _parse_list(v, field="OCEANVILLAS_LISTING_IDS")

    # Booking engine (deep-link target, never called)
    booking_engine_base_url: str = Field(
        default="https://182003_1.holidayfuture.com",
        validation_alias=AliasChoices(
            "BOOKING_ENGINE_BASE_URL",
            "HOSTAWAY_BOOKING_ENGINE_BASE_URL",
            "NEXT_PUBLIC_BOOKING_URL",
        ),
    )

    # Search
    search_debug: bool = Field(default=False, validation_alias="SEARCH_DEBUG")

    # Shared cache (optional)
    redis_url: str | None = Field(default=None, validation_alias="REDIS_URL")

    # CORS
    cors_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        validation_alias="CORS_ORIGINS",
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: Any) -> list[str]:
        if isinstance(v, str) and v.strip() == "*":
            return ["*"]
        return _parse_list(v, field="CORS_ORIGINS")

    # Rate limiting
    rate_limit_window_seconds: int = Field(
        default=60, validation_alias="RATE_LIMIT_WINDOW_SECONDS"
    )
    rate_limit_search_per_window: int = Field(
        default=30, validation_alias="RATE_LIMIT_SEARCH_PER_WINDOW"
    )
    # Only honour X-Forwarded-For when a trusted proxy sets it.
    trust_forwarded_for: bool = Field(
        default=False, validation_alias="TRUST_FORWARDED_FOR"
    )

    # OpenTelemetry
    otel_enabled: bool = Field(default=False, validation_alias="OTEL_ENABLED")
    otel_otlp_endpoint: str = Field(
        default="http://localhost:4317",
        validation_alias="OTEL_OTLP_ENDPOINT",
    )


settings = Settings()
