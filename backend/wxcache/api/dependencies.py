"""Request-scoped access to the store and settings held on app.state."""

import time

from fastapi import HTTPException, Request

from ..config import Settings
from ..services.store import WeatherStore


def get_store(request: Request) -> WeatherStore:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(status_code=503, detail="Weather store not open")
    return store


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def lookup_location(store: WeatherStore, location_setting: str) -> dict:
    rows = list(store.query_locations(location_setting=location_setting))
    if not rows:
        raise HTTPException(status_code=404, detail=f"Unknown location: {location_setting}")
    return rows[0]


def get_now() -> int:
    """Current epoch seconds; overridden in tests to pin "today"."""
    return int(time.time())
