"""GET /api/forecast - Day-by-day forecast rows ready for display."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..config import Settings
from ..schemas.records import ForecastDay, ForecastResponse, LocationOut
from ..services.formatting import format_temperature, friendly_day_string
from ..services.store import WeatherStore
from .dependencies import get_now, get_settings, get_store, lookup_location

router = APIRouter()


@router.get("/forecast", response_model=ForecastResponse)
def get_forecast(
    location: Optional[str] = Query(None),
    today: int = Depends(get_now),
    store: WeatherStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    """Forecast for the preferred (or given) location from today onward."""
    tz = settings.day_timezone
    metric = settings.units_metric

    loc = lookup_location(store, location or settings.preferred_location)
    rows = store.query_weather(location_id=loc["_id"], start_date=today, order_by="date")

    days = [
        ForecastDay(
            date=row["date"],
            friendly_day=friendly_day_string(row["date"], today, tz),
            description=row["short_desc"],
            weather_id=row["weather_id"],
            high=format_temperature(row["max_temp"], metric),
            low=format_temperature(row["min_temp"], metric),
            humidity=row["humidity"],
            pressure=row["pressure"],
            wind_speed=row["wind_speed"],
            degrees=row["degrees"],
        )
        for row in rows
    ]
    return ForecastResponse(
        location=LocationOut.model_validate(loc),
        units="metric" if metric else "imperial",
        days=days,
    )
