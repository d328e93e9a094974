"""Tests for WeatherStore inserts, queries and lifecycle."""

import sqlite3
import threading

import pytest

from wxcache.config import Settings
from wxcache.errors import (
    DuplicateError,
    InvalidRecordError,
    LocationReferenceError,
    StorageInitError,
    StoreClosedError,
)
from wxcache.models.database import SCHEMA_VERSION
from wxcache.services.store import StoreState, WeatherStore, open_store
from wxcache.services.validation import (
    TEST_DATE,
    build_location_fixture,
    build_north_pole_location,
    build_weather_fixture,
    validate_record,
    validate_single,
)

DAY = 86400


class TestLocationTable:
    def test_insert_then_query_round_trip(self, store):
        fixture = build_north_pole_location()
        row_id = store.insert_location(fixture)
        assert row_id > 0

        row = validate_single(fixture, store.query_locations(location_setting="99705"))
        assert row["_id"] == row_id

    def test_unfiltered_query_returns_single_row(self, store, north_pole_id):
        rows = list(store.query_locations())
        assert len(rows) == 1
        validate_record(build_north_pole_location(), rows[0])

    def test_duplicate_setting_rejected(self, store, north_pole_id):
        with pytest.raises(DuplicateError) as exc_info:
            store.insert_location(build_north_pole_location())
        assert exc_info.value.location_setting == "99705"
        assert store.count_locations() == 1

    def test_duplicate_with_different_city_still_rejected(self, store, north_pole_id):
        with pytest.raises(DuplicateError):
            store.insert_location(build_location_fixture("99705", "Santa's Village", 0.0, 0.0))
        row = next(store.query_locations())
        assert row["city_name"] == "North Pole"

    def test_find_or_insert_returns_existing_id(self, store, north_pole_id):
        assert store.find_or_insert_location(build_north_pole_location()) == north_pole_id
        assert store.count_locations() == 1

    def test_find_or_insert_inserts_new(self, store, north_pole_id):
        new_id = store.find_or_insert_location(
            build_location_fixture("94043", "Mountain View", 37.4056, -122.0775)
        )
        assert new_id != north_pole_id
        assert store.count_locations() == 2

    def test_missing_field_rejected(self, store):
        fixture = build_north_pole_location()
        del fixture["city_name"]
        with pytest.raises(InvalidRecordError):
            store.insert_location(fixture)
        assert store.count_locations() == 0

    def test_null_field_rejected(self, store):
        fixture = build_north_pole_location()
        fixture["coord_lat"] = None
        with pytest.raises(InvalidRecordError):
            store.insert_location(fixture)

    def test_unknown_column_rejected(self, store):
        fixture = build_north_pole_location()
        fixture["elevation"] = 12
        with pytest.raises(InvalidRecordError):
            store.insert_location(fixture)

    def test_order_by(self, store):
        for setting, city in (("2", "Bergen"), ("1", "Aachen"), ("3", "Cork")):
            store.insert_location(build_location_fixture(setting, city, 0.0, 0.0))
        names = [r["city_name"] for r in store.query_locations(order_by="city_name")]
        assert names == ["Aachen", "Bergen", "Cork"]
        names = [r["city_name"] for r in store.query_locations(order_by="-city_name")]
        assert names == ["Cork", "Bergen", "Aachen"]

    def test_order_by_unknown_column(self, store):
        with pytest.raises(ValueError):
            store.query_locations(order_by="altitude")


class TestWeatherTable:
    def test_north_pole_scenario(self, store, north_pole_id):
        fixture = build_weather_fixture(north_pole_id)
        weather_id = store.insert_weather(fixture)
        assert weather_id > 0

        row = validate_single(fixture, store.query_weather(location_id=north_pole_id))
        assert row["_id"] == weather_id
        assert row["short_desc"] == "Asteroids"
        assert row["min_temp"] == 65
        assert row["max_temp"] == 75

        with pytest.raises(DuplicateError):
            store.insert_location(build_north_pole_location())
        assert store.count_locations() == 1

    def test_dangling_location_rejected(self, store):
        with pytest.raises(LocationReferenceError) as exc_info:
            store.insert_weather(build_weather_fixture(42))
        assert exc_info.value.location_id == 42
        assert store.count_weather() == 0

    def test_missing_measurement_rejected(self, store, north_pole_id):
        fixture = build_weather_fixture(north_pole_id)
        del fixture["humidity"]
        with pytest.raises(InvalidRecordError):
            store.insert_weather(fixture)
        assert store.count_weather() == 0

    def test_same_day_repeat_is_kept(self, store, north_pole_id):
        store.insert_weather(build_weather_fixture(north_pole_id))
        store.insert_weather(build_weather_fixture(north_pole_id, short_desc="Clear"))
        assert store.count_weather() == 2

    def test_filter_by_location(self, store, north_pole_id):
        other = store.insert_location(build_location_fixture("94043", "Mountain View", 37.4, -122.1))
        store.insert_weather(build_weather_fixture(north_pole_id))
        store.insert_weather(build_weather_fixture(other, short_desc="Sunny"))

        rows = list(store.query_weather(location_id=other))
        assert [r["short_desc"] for r in rows] == ["Sunny"]
        rows = list(store.query_weather(location_setting="99705"))
        assert [r["short_desc"] for r in rows] == ["Asteroids"]

    def test_day_bucket_filter(self, store, north_pole_id):
        store.insert_weather(build_weather_fixture(north_pole_id, TEST_DATE - 1, short_desc="Eve"))
        store.insert_weather(build_weather_fixture(north_pole_id, TEST_DATE + 3600, short_desc="Morning"))
        store.insert_weather(build_weather_fixture(north_pole_id, TEST_DATE + DAY - 1, short_desc="Night"))
        store.insert_weather(build_weather_fixture(north_pole_id, TEST_DATE + DAY, short_desc="Next"))

        rows = store.query_weather(location_id=north_pole_id, on_day=TEST_DATE + 43200, order_by="date")
        assert [r["short_desc"] for r in rows] == ["Morning", "Night"]

    def test_start_date_filter(self, store, north_pole_id):
        for offset, desc in ((-DAY, "Yesterday"), (0, "Today"), (2 * DAY, "Later")):
            store.insert_weather(build_weather_fixture(north_pole_id, TEST_DATE + offset, short_desc=desc))

        rows = store.query_weather(start_date=TEST_DATE + 3600, order_by="date")
        assert [r["short_desc"] for r in rows] == ["Today", "Later"]

    def test_day_bucket_uses_store_timezone(self, db_path):
        with WeatherStore(db_path, day_tz="America/New_York") as store:
            loc = store.insert_location(build_north_pole_location())
            # 00:00 UTC on Dec 20 is still Dec 19 in New York
            store.insert_weather(build_weather_fixture(loc, TEST_DATE))
            assert list(store.query_weather(on_day=TEST_DATE + 12 * 3600)) == []
            assert len(list(store.query_weather(on_day=TEST_DATE - 12 * 3600))) == 1

    def test_bulk_insert(self, store, north_pole_id):
        rows = [build_weather_fixture(north_pole_id, TEST_DATE + i * DAY) for i in range(7)]
        assert store.bulk_insert_weather(rows) == 7
        assert store.count_weather() == 7

    def test_bulk_insert_is_all_or_nothing(self, store, north_pole_id):
        rows = [build_weather_fixture(north_pole_id), build_weather_fixture(999)]
        with pytest.raises(LocationReferenceError):
            store.bulk_insert_weather(rows)
        assert store.count_weather() == 0

    def test_bulk_insert_empty(self, store):
        assert store.bulk_insert_weather([]) == 0


class TestSequences:
    def test_snapshot_ignores_later_writes(self, store, north_pole_id):
        rows = store.query_locations()
        store.insert_location(build_location_fixture("94043", "Mountain View", 37.4, -122.1))
        assert len(list(rows)) == 1

    def test_each_query_is_independent(self, store, north_pole_id):
        first = store.query_locations()
        assert len(list(first)) == 1
        assert list(first) == []
        assert len(list(store.query_locations())) == 1


class TestReset:
    def test_reset_empties_both_tables(self, store, north_pole_id):
        store.insert_weather(build_weather_fixture(north_pole_id))
        store.reset()
        assert list(store.query_locations()) == []
        assert list(store.query_weather()) == []

    def test_reset_is_idempotent(self, store):
        store.reset()
        store.reset()
        assert store.count_locations() == 0
        assert store.schema_version == SCHEMA_VERSION

    def test_reset_on_missing_file(self, tmp_path):
        path = tmp_path / "nested" / "cache.db"
        store = WeatherStore(path)
        store.reset()
        assert path.exists()
        assert store.state is StoreState.OPEN
        assert store.count_weather() == 0
        store.close()


class TestLifecycle:
    def test_open_is_idempotent(self, db_path):
        store = WeatherStore(db_path)
        assert store.open() is store
        assert store.open() is store
        assert store.state is StoreState.OPEN
        store.close()

    def test_close_from_unopened_is_noop(self, db_path):
        store = WeatherStore(db_path)
        store.close()
        assert store.state is StoreState.UNOPENED

    def test_operations_before_open(self, db_path):
        store = WeatherStore(db_path)
        with pytest.raises(StoreClosedError):
            store.insert_location(build_north_pole_location())

    def test_operations_after_close(self, db_path):
        store = WeatherStore(db_path).open()
        store.close()
        store.close()
        assert store.state is StoreState.CLOSED
        with pytest.raises(StoreClosedError):
            store.insert_location(build_north_pole_location())
        with pytest.raises(StoreClosedError):
            store.insert_weather(build_weather_fixture(1))
        with pytest.raises(StoreClosedError):
            store.query_locations()
        with pytest.raises(StoreClosedError):
            store.query_weather()
        with pytest.raises(StoreClosedError):
            store.reset()
        with pytest.raises(StoreClosedError):
            store.open()

    def test_data_survives_reopen(self, db_path):
        with WeatherStore(db_path) as store:
            store.insert_location(build_north_pole_location())
        with WeatherStore(db_path) as store:
            assert store.count_locations() == 1

    def test_unopenable_path(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        with pytest.raises(StorageInitError):
            WeatherStore(blocker / "weather.db").open()

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "weather.db"
        path.write_bytes(b"this is not a sqlite database" * 64)
        store = WeatherStore(path)
        with pytest.raises(StorageInitError):
            store.open()
        assert store.state is StoreState.UNOPENED


class TestOpenStore:
    def test_stale_version_recreates(self, db_path):
        with WeatherStore(db_path) as store:
            store.insert_location(build_north_pole_location())

        conn = sqlite3.connect(db_path)
        conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION + 1}")
        conn.commit()
        conn.close()

        store = open_store(Settings(db_path=str(db_path)))
        try:
            assert store.schema_version == SCHEMA_VERSION
            assert store.count_locations() == 0
        finally:
            store.close()

    def test_current_version_keeps_data(self, db_path):
        with WeatherStore(db_path) as store:
            store.insert_location(build_north_pole_location())

        store = open_store(Settings(db_path=str(db_path)))
        try:
            assert store.count_locations() == 1
        finally:
            store.close()


class TestThreads:
    def test_concurrent_inserts_are_serialised(self, store):
        errors = []

        def worker(prefix):
            try:
                for i in range(25):
                    store.insert_location(
                        build_location_fixture(f"{prefix}-{i}", f"City {prefix}{i}", 1.0, 2.0)
                    )
            except Exception as exc:  # surfaced below
                errors.append(exc)

        threads = [threading.Thread(target=worker, args=(p,)) for p in "abcd"]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert store.count_locations() == 100
