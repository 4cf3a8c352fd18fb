from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, Sequence, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Extractor(Generic[T]):
    """A named guess at where a logical field lives in a provider payload.

    `read` returns None when the guess does not apply to the payload.
    """

    name: str
    read: Callable[[Any], T | None]


def first_match(extractors: Sequence[Extractor[T]], payload: Any) -> T | None:
    """Evaluate extractors in priority order; the first non-None result wins."""
    for ex in extractors:
        value = ex.read(payload)
        if value is not None:
            return value
    return None


def matching_name(extractors: Sequence[Extractor[T]], payload: Any) -> str | None:
    """Name of the extractor that `first_match` would use, for diagnostics."""
    for ex in extractors:
        if ex.read(payload) is not None:
            return ex.name
    return None


def dig(payload: Any, path: Iterable[str]) -> Any:
    cur = payload
    for key in path:
        if not isinstance(cur, dict):
            return None
        cur = cur.get(key)
    return cur


def _non_empty_str(v: Any) -> str | None:
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, (int, float)):
        return str(v)
    if isinstance(v, str) and v.strip():
        return v.strip()
    return None


def string_at(*path: str) -> Extractor[str]:
    def _read(payload: Any) -> str | None:
        return _non_empty_str(dig(payload, path))

    return Extractor(name=".".join(path), read=_read)


def list_at(*path: str) -> Extractor[list]:
    def _read(payload: Any) -> list | None:
        v = dig(payload, path) if path else payload
        return v if isinstance(v, list) else None

    return Extractor(name=".".join(path) or "<root>", read=_read)


def positive_int_at(*path: str) -> Extractor[int]:
    def _read(payload: Any) -> int | None:
        v = dig(payload, path)
        if isinstance(v, bool):
            return None
        if isinstance(v, float) and v.is_integer():
            v = int(v)
        if isinstance(v, str) and v.strip().isdecimal():
            v = int(v.strip())
        if isinstance(v, int) and v > 0:
            return v
        return None

    return Extractor(name=".".join(path), read=_read)


# Access token field synonyms seen across Hostaway accounts.
TOKEN_EXTRACTORS: tuple[Extractor[str], ...] = tuple(
    string_at(*prefix, field)
    for prefix in ((), ("result",), ("data",))
    for field in ("access_token", "accessToken", "token")
)

TOKEN_EXPIRY_EXTRACTORS: tuple[Extractor[int], ...] = tuple(
    positive_int_at(*prefix, "expires_in")
    for prefix in ((), ("result",), ("data",))
)

# Catalog responses: `result`, then `data`, then a bare array.
LISTING_ARRAY_EXTRACTORS: tuple[Extractor[list], ...] = (
    list_at("result"),
    list_at("data"),
    list_at(),
)


def extract_token(payload: Any) -> str | None:
    return first_match(TOKEN_EXTRACTORS, payload)


def extract_token_expiry(payload: Any) -> int | None:
    return first_match(TOKEN_EXPIRY_EXTRACTORS, payload)


def extract_listing_records(payload: Any) -> list[dict[str, Any]] | None:
    records = first_match(LISTING_ARRAY_EXTRACTORS, payload)
    if records is None:
        return None
    return [r for r in records if isinstance(r, dict)]
