"""GET /api/weather - Cached observations for one location."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..config import Settings
from ..schemas.records import WeatherOut
from ..services.store import WeatherStore
from .dependencies import get_settings, get_store, lookup_location

router = APIRouter()


@router.get("/weather", response_model=list[WeatherOut])
def list_weather(
    location: Optional[str] = Query(None, description="location_setting; defaults to the preferred location"),
    date: Optional[int] = Query(None, description="Epoch seconds; restricts to that day"),
    start_date: Optional[int] = Query(None, description="Epoch seconds; that day and later"),
    store: WeatherStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    setting = location or settings.preferred_location
    loc = lookup_location(store, setting)
    rows = store.query_weather(
        location_id=loc["_id"], on_day=date, start_date=start_date, order_by="date",
    )
    return [WeatherOut.model_validate(row) for row in rows]
