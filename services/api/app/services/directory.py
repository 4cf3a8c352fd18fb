from __future__ import annotations

from app.services.hostaway.provider import HostawayGateway
from app.services.hostaway.types import Unit


def select_configured(units: list[Unit], unit_ids: list[str]) -> list[Unit]:
    """Keep only allow-listed units, in allow-list order, first occurrence wins."""
    by_id: dict[str, Unit] = {}
    for u in units:
        by_id.setdefault(u.id, u)

    out: list[Unit] = []
    seen: set[str] = set()
    for uid in unit_ids:
        if uid in seen:
            continue
        seen.add(uid)
        unit = by_id.get(uid)
        if unit is not None:
            out.append(unit)
    return out


async def list_configured_units(
    gateway: HostawayGateway, *, token: str, unit_ids: list[str]
) -> list[Unit]:
    units = await gateway.list_units(token=token)
    return select_configured(units, unit_ids)
