"""Fixture builders and field-by-field record validation.

Fixtures are field maps keyed by column name, ready for
``WeatherStore.insert_location`` / ``insert_weather``.  ``validate_record``
compares such a map with a row read back from the store and reports the
first discrepancy with the offending field named.
"""

from typing import Any, Iterable, Mapping

TEST_LOCATION = "99705"
TEST_DATE = 1419033600  # December 20th, 2014


class ValidationError(AssertionError):
    """A stored record does not match its expected field map."""


class FieldNotFoundError(ValidationError):
    def __init__(self, field: str) -> None:
        super().__init__(f"Column '{field}' not found in record")
        self.field = field


class FieldMismatchError(ValidationError):
    def __init__(self, field: str, expected: Any, actual: Any) -> None:
        super().__init__(
            f"Column '{field}': value '{actual}' did not match the expected value '{expected}'"
        )
        self.field = field
        self.expected = expected
        self.actual = actual


class RecordCountError(ValidationError):
    def __init__(self, count: int) -> None:
        super().__init__(f"Expected exactly one record, got {count}")
        self.count = count


def build_location_fixture(
    location_setting: str, city_name: str, lat: float, long: float
) -> dict[str, Any]:
    return {
        "location_setting": location_setting,
        "city_name": city_name,
        "coord_lat": lat,
        "coord_long": long,
    }


def build_north_pole_location() -> dict[str, Any]:
    return build_location_fixture(TEST_LOCATION, "North Pole", 64.7488, -147.353)


def build_weather_fixture(
    location_id: int,
    date: int = TEST_DATE,
    *,
    short_desc: str = "Asteroids",
    weather_id: int = 321,
    min_temp: float = 65,
    max_temp: float = 75,
    humidity: float = 1.2,
    pressure: float = 1.3,
    wind_speed: float = 5.5,
    degrees: float = 1.1,
) -> dict[str, Any]:
    """Comical fictitious weather for *location_id*, which must already exist."""
    return {
        "location_id": location_id,
        "date": date,
        "short_desc": short_desc,
        "weather_id": weather_id,
        "min_temp": min_temp,
        "max_temp": max_temp,
        "humidity": humidity,
        "pressure": pressure,
        "wind_speed": wind_speed,
        "degrees": degrees,
    }


def _normalize(value: Any) -> str:
    # REAL columns hand back 65.0 for an int 65 written in
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def validate_record(expected: Mapping[str, Any], actual: Mapping[str, Any]) -> None:
    """Raise FieldNotFoundError / FieldMismatchError unless *actual* matches.

    Only the fields present in *expected* are checked; values are compared
    as strings.
    """
    for field, value in expected.items():
        if field not in actual:
            raise FieldNotFoundError(field)
        if _normalize(value) != _normalize(actual[field]):
            raise FieldMismatchError(field, value, actual[field])


def validate_single(expected: Mapping[str, Any], rows: Iterable[Mapping[str, Any]]) -> Mapping[str, Any]:
    """Check that *rows* holds exactly one record matching *expected*."""
    records = list(rows)
    if len(records) != 1:
        raise RecordCountError(len(records))
    validate_record(expected, records[0])
    return records[0]
