from __future__ import annotations

import importlib

from fastapi import APIRouter

api_router = APIRouter()


def _include(module_path: str) -> None:
    try:
        mod = importlib.import_module(module_path)
    except ModuleNotFoundError as exc:
        # Optional route module; ignore only if the module itself is absent.
        if exc.name != module_path:
            raise
        return

    router = getattr(mod, "router", None)
    if router is not None:
        api_router.include_router(router)


# Keep this list in the order you want routes registered.
for _mod in (
    "app.api.routes.health",
    "app.api.routes.hostaway",
    "app.api.routes.booking",
):
    _include(_mod)
