"""Exceptions raised by the weather store."""


class StoreError(Exception):
    """Base class for everything WeatherStore raises."""


class StorageInitError(StoreError):
    """The database file could not be created or opened."""


class StoreClosedError(StoreError):
    """An operation was issued on a closed store handle."""


class InvalidRecordError(StoreError):
    """A field map is missing required fields or carries ill-typed values."""

    def __init__(self, table: str, detail: str) -> None:
        super().__init__(f"Invalid {table} record: {detail}")
        self.table = table
        self.detail = detail


class DuplicateError(StoreError):
    """A Location with the same location_setting already exists."""

    def __init__(self, location_setting: str) -> None:
        super().__init__(f"Location '{location_setting}' already exists")
        self.location_setting = location_setting


class LocationReferenceError(StoreError):
    """A weather row references a Location id that does not exist."""

    def __init__(self, location_id: int) -> None:
        super().__init__(f"No location with _id={location_id}")
        self.location_id = location_id
