"""WeatherModel ORM model: one day's observation for a location."""

from sqlalchemy import ForeignKey, Index, Integer, REAL, Text
from sqlalchemy.orm import Mapped, mapped_column

from .database import Base


class WeatherModel(Base):
    __tablename__ = "weather"

    id: Mapped[int] = mapped_column("_id", Integer, primary_key=True)
    location_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("location._id"), nullable=False
    )

    # Unix epoch seconds, full precision; day buckets are computed on read
    date: Mapped[int] = mapped_column(Integer, nullable=False)

    short_desc: Mapped[str] = mapped_column(Text, nullable=False)
    weather_id: Mapped[int] = mapped_column(Integer, nullable=False)

    # Stored in whatever unit ingestion produced
    min_temp: Mapped[float] = mapped_column(REAL, nullable=False)
    max_temp: Mapped[float] = mapped_column(REAL, nullable=False)

    humidity: Mapped[float] = mapped_column(REAL, nullable=False)
    pressure: Mapped[float] = mapped_column(REAL, nullable=False)
    wind_speed: Mapped[float] = mapped_column(REAL, nullable=False)
    degrees: Mapped[float] = mapped_column(REAL, nullable=False)

    __table_args__ = (
        Index("idx_weather_location_date", "location_id", "date"),
    )
