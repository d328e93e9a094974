"""Location ORM model: one row per distinct place."""

from sqlalchemy import Integer, REAL, Text
from sqlalchemy.orm import Mapped, mapped_column

from .database import Base


class LocationModel(Base):
    __tablename__ = "location"

    id: Mapped[int] = mapped_column("_id", Integer, primary_key=True)

    # Lookup key (postal code or provider slug); dedup key for the table
    location_setting: Mapped[str] = mapped_column(Text, unique=True, nullable=False)

    city_name: Mapped[str] = mapped_column(Text, nullable=False)
    coord_lat: Mapped[float] = mapped_column(REAL, nullable=False)
    coord_long: Mapped[float] = mapped_column(REAL, nullable=False)
