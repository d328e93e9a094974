"""Top-level API router aggregation."""

from fastapi import APIRouter

from . import forecast, locations, weather

api_router = APIRouter(prefix="/api")

api_router.include_router(locations.router)
api_router.include_router(weather.router)
api_router.include_router(forecast.router)
