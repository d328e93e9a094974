"""WeatherStore: the handle through which locations and observations are
written and read.

A store moves through ``UNOPENED -> OPEN -> CLOSED``.  Only an open store
accepts inserts and queries.  All public operations take a single re-entrant
lock, so one handle may be shared between threads; SQLite itself is treated
as a single-writer medium.

Queries are materialised under the lock and handed back as generators over
that snapshot, so iterating a result never observes writes issued later.
"""

import logging
import sqlite3
import threading
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Iterator, Mapping, Optional

from pydantic import BaseModel, ValidationError
from sqlalchemy import Engine, Table, func, insert, inspect, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..config import Settings
from ..errors import (
    DuplicateError,
    InvalidRecordError,
    LocationReferenceError,
    StorageInitError,
    StoreClosedError,
)
from ..models.database import (
    SCHEMA_VERSION,
    Base,
    create_store_engine,
    read_schema_version,
    register_models,
    write_schema_version,
)
from ..models.location import LocationModel
from ..models.weather import WeatherModel
from ..schemas.records import LocationIn, WeatherIn
from .dates import Timestamp, day_bounds, normalize_date
from .notifications import ChangeEvent, ChangeNotifier

logger = logging.getLogger(__name__)

Row = dict[str, Any]


class StoreState(Enum):
    UNOPENED = "unopened"
    OPEN = "open"
    CLOSED = "closed"


def _parse(schema: type[BaseModel], fields: Mapping[str, Any], table: str) -> BaseModel:
    try:
        return schema.model_validate(dict(fields))
    except ValidationError as exc:
        raise InvalidRecordError(table, str(exc)) from exc


def _order_clause(table: Table, order_by: str):
    """``"date"`` sorts ascending, ``"-date"`` descending."""
    descending = order_by.startswith("-")
    name = order_by.lstrip("-")
    if name not in table.c:
        raise ValueError(f"Unknown sort column for {table.name}: {name}")
    column = table.c[name]
    return column.desc() if descending else column.asc()


class WeatherStore:
    """Single-file SQLite cache of locations and daily weather."""

    def __init__(
        self,
        db_path: str | Path,
        *,
        day_tz: str = "UTC",
        notifier: Optional[ChangeNotifier] = None,
    ) -> None:
        self.db_path = str(db_path)
        self.day_tz = day_tz
        self.notifier = notifier
        self.state = StoreState.UNOPENED
        self._engine: Optional[Engine] = None
        self._lock = threading.RLock()

    # ---- lifecycle ----

    def open(self) -> "WeatherStore":
        """Open (creating if needed) the database file and both tables."""
        with self._lock:
            if self.state is StoreState.OPEN:
                return self
            if self.state is StoreState.CLOSED:
                raise StoreClosedError("Store has been closed and cannot be reopened")

            engine: Optional[Engine] = None
            try:
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
                engine = create_store_engine(self.db_path)
                register_models()
                with engine.begin() as conn:
                    fresh = not inspect(conn).get_table_names()
                    Base.metadata.create_all(conn)
                    if fresh:
                        write_schema_version(conn)
            except (OSError, sqlite3.Error, SQLAlchemyError) as exc:
                if engine is not None:
                    engine.dispose()
                raise StorageInitError(
                    f"Cannot open weather store at {self.db_path}: {exc}"
                ) from exc

            self._engine = engine
            self.state = StoreState.OPEN
            logger.info("Weather store opened: %s", self.db_path)
            return self

    def close(self) -> None:
        with self._lock:
            if self.state is not StoreState.OPEN:
                return
            self._engine.dispose()
            self._engine = None
            self.state = StoreState.CLOSED
            logger.info("Weather store closed: %s", self.db_path)

    def __enter__(self) -> "WeatherStore":
        return self.open()

    def __exit__(self, *exc) -> None:
        self.close()

    def _require_open(self) -> Engine:
        if self.state is StoreState.CLOSED:
            raise StoreClosedError("Store is closed")
        if self.state is StoreState.UNOPENED:
            raise StoreClosedError("Store has not been opened")
        return self._engine

    @property
    def schema_version(self) -> int:
        with self._lock:
            engine = self._require_open()
            with engine.connect() as conn:
                return read_schema_version(conn)

    def reset(self) -> None:
        """Drop and recreate both tables empty.

        Opens the store first when called on an unopened handle.
        """
        with self._lock:
            if self.state is StoreState.UNOPENED:
                self.open()
            engine = self._require_open()
            with engine.begin() as conn:
                Base.metadata.drop_all(conn)
                Base.metadata.create_all(conn)
                write_schema_version(conn)
            logger.info("Weather store reset (schema version %d)", SCHEMA_VERSION)
        self._notify(LocationModel.__tablename__)
        self._notify(WeatherModel.__tablename__)

    # ---- writes ----

    def insert_location(self, fields: Mapping[str, Any]) -> int:
        """Insert a Location and return its ``_id``.

        Raises DuplicateError if the location_setting is already present.
        """
        with self._lock:
            engine = self._require_open()
            record = _parse(LocationIn, fields, "location")
            try:
                with engine.begin() as conn:
                    result = conn.execute(
                        insert(LocationModel.__table__).values(**record.model_dump())
                    )
                    row_id = result.inserted_primary_key[0]
            except IntegrityError as exc:
                raise self._constraint_error(exc, "location", record) from exc

        logger.debug("Inserted location %s as _id=%d", record.location_setting, row_id)
        self._notify(LocationModel.__tablename__, row_id)
        return row_id

    def find_or_insert_location(self, fields: Mapping[str, Any]) -> int:
        """Return the ``_id`` for this location_setting, inserting it if new."""
        with self._lock:
            engine = self._require_open()
            record = _parse(LocationIn, fields, "location")
            with engine.connect() as conn:
                existing = conn.execute(
                    select(LocationModel.id).where(
                        LocationModel.location_setting == record.location_setting
                    )
                ).scalar_one_or_none()
            if existing is not None:
                return existing
            return self.insert_location(fields)

    def insert_weather(self, fields: Mapping[str, Any]) -> int:
        """Insert one observation and return its ``_id``.

        Raises LocationReferenceError if location_id names no Location.
        """
        with self._lock:
            engine = self._require_open()
            record = _parse(WeatherIn, fields, "weather")
            try:
                with engine.begin() as conn:
                    self._check_locations(conn, {record.location_id})
                    result = conn.execute(
                        insert(WeatherModel.__table__).values(**record.model_dump())
                    )
                    row_id = result.inserted_primary_key[0]
            except IntegrityError as exc:
                raise self._constraint_error(exc, "weather", record) from exc

        logger.debug("Inserted weather for location %d as _id=%d", record.location_id, row_id)
        self._notify(WeatherModel.__tablename__, row_id)
        return row_id

    def bulk_insert_weather(self, rows: Iterable[Mapping[str, Any]]) -> int:
        """Insert many observations in one transaction; all or nothing."""
        with self._lock:
            engine = self._require_open()
            records = [_parse(WeatherIn, fields, "weather") for fields in rows]
            if not records:
                return 0
            try:
                with engine.begin() as conn:
                    self._check_locations(conn, {r.location_id for r in records})
                    conn.execute(
                        insert(WeatherModel.__table__),
                        [r.model_dump() for r in records],
                    )
            except IntegrityError as exc:
                raise self._constraint_error(exc, "weather", records[0]) from exc

        logger.info("Bulk inserted %d weather rows", len(records))
        self._notify(WeatherModel.__tablename__)
        return len(records)

    @staticmethod
    def _check_locations(conn, location_ids: set[int]) -> None:
        found = set(
            conn.execute(
                select(LocationModel.id).where(LocationModel.id.in_(sorted(location_ids)))
            ).scalars()
        )
        missing = sorted(location_ids - found)
        if missing:
            logger.warning("Rejected weather insert: no location _id=%d", missing[0])
            raise LocationReferenceError(missing[0])

    @staticmethod
    def _constraint_error(exc: IntegrityError, table: str, record: BaseModel):
        message = str(exc.orig)
        if "UNIQUE" in message and table == "location":
            logger.warning("Rejected duplicate location %s", record.location_setting)
            return DuplicateError(record.location_setting)
        if "FOREIGN KEY" in message:
            logger.warning("Rejected weather insert: dangling location_id")
            return LocationReferenceError(getattr(record, "location_id", -1))
        return InvalidRecordError(table, message)

    def _notify(self, table: str, row_id: Optional[int] = None) -> None:
        if self.notifier is not None:
            self.notifier.publish(ChangeEvent(table, row_id))

    # ---- reads ----

    def _snapshot(self, stmt) -> Iterator[Row]:
        with self._lock:
            engine = self._require_open()
            with engine.connect() as conn:
                rows = [dict(row) for row in conn.execute(stmt).mappings()]
        return (row for row in rows)

    def query_locations(
        self,
        *,
        location_setting: Optional[str] = None,
        order_by: Optional[str] = None,
    ) -> Iterator[Row]:
        """Location rows keyed by column name; unordered unless order_by is given."""
        table = LocationModel.__table__
        stmt = select(table)
        if location_setting is not None:
            stmt = stmt.where(LocationModel.location_setting == location_setting)
        if order_by:
            stmt = stmt.order_by(_order_clause(table, order_by))
        return self._snapshot(stmt)

    def query_weather(
        self,
        *,
        location_id: Optional[int] = None,
        location_setting: Optional[str] = None,
        on_day: Optional[Timestamp] = None,
        start_date: Optional[Timestamp] = None,
        order_by: Optional[str] = None,
    ) -> Iterator[Row]:
        """Weather rows keyed by column name.

        ``on_day`` keeps rows in the same day bucket as the given timestamp;
        ``start_date`` keeps rows from the start of that day onward.
        """
        table = WeatherModel.__table__
        stmt = select(table)
        if location_setting is not None:
            stmt = stmt.join(
                LocationModel.__table__, WeatherModel.location_id == LocationModel.id
            ).where(LocationModel.location_setting == location_setting)
        if location_id is not None:
            stmt = stmt.where(WeatherModel.location_id == location_id)
        if on_day is not None:
            start, end = day_bounds(on_day, self.day_tz)
            stmt = stmt.where(WeatherModel.date >= start, WeatherModel.date < end)
        if start_date is not None:
            stmt = stmt.where(WeatherModel.date >= normalize_date(start_date, self.day_tz))
        if order_by:
            stmt = stmt.order_by(_order_clause(table, order_by))
        return self._snapshot(stmt)

    def count_locations(self) -> int:
        return self._count(LocationModel.__table__)

    def count_weather(self) -> int:
        return self._count(WeatherModel.__table__)

    def _count(self, table: Table) -> int:
        with self._lock:
            engine = self._require_open()
            with engine.connect() as conn:
                return conn.execute(select(func.count()).select_from(table)).scalar_one()


def open_store(settings: Settings, notifier: Optional[ChangeNotifier] = None) -> WeatherStore:
    """Open the configured store, recreating it if its schema version is stale."""
    store = WeatherStore(settings.db_path, day_tz=settings.day_timezone, notifier=notifier)
    store.open()
    found = store.schema_version
    if found != SCHEMA_VERSION:
        logger.info("Schema version %d != %d, recreating weather store", found, SCHEMA_VERSION)
        store.reset()
    return store
