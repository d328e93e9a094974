"""Pydantic schemas for field maps written to and read from the store."""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class LocationIn(BaseModel):
    """Field map accepted by WeatherStore.insert_location."""

    model_config = ConfigDict(extra="forbid")

    location_setting: str = Field(min_length=1)
    city_name: str
    coord_lat: float
    coord_long: float


class WeatherIn(BaseModel):
    """Field map accepted by WeatherStore.insert_weather."""

    model_config = ConfigDict(extra="forbid")

    location_id: int
    date: int
    short_desc: str
    weather_id: int
    min_temp: float
    max_temp: float
    humidity: float
    pressure: float
    wind_speed: float
    degrees: float


class LocationOut(BaseModel):
    id: int = Field(validation_alias=AliasChoices("_id", "id"))
    location_setting: str
    city_name: str
    coord_lat: float
    coord_long: float


class WeatherOut(BaseModel):
    id: int = Field(validation_alias=AliasChoices("_id", "id"))
    location_id: int
    date: int
    short_desc: str
    weather_id: int
    min_temp: float
    max_temp: float
    humidity: float
    pressure: float
    wind_speed: float
    degrees: float


class ForecastDay(BaseModel):
    date: int
    friendly_day: str
    description: str
    weather_id: int
    high: str
    low: str
    humidity: float
    pressure: float
    wind_speed: float
    degrees: float


class ForecastResponse(BaseModel):
    location: LocationOut
    units: str
    days: list[ForecastDay]
