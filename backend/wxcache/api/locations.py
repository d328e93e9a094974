"""GET /api/locations - Cached locations."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..schemas.records import LocationOut
from ..services.store import WeatherStore
from .dependencies import get_store

router = APIRouter()


@router.get("/locations", response_model=list[LocationOut])
def list_locations(
    location_setting: Optional[str] = Query(None),
    store: WeatherStore = Depends(get_store),
):
    rows = store.query_locations(location_setting=location_setting, order_by="city_name")
    return [LocationOut.model_validate(row) for row in rows]
