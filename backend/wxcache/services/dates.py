"""Day-bucket date semantics.

Observation dates are stored as Unix epoch seconds at full precision.  Two
timestamps belong to the same bucket when they render to the same
``YYYYMMDD`` string in the reference time zone; time of day is ignored.
"""

from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Union
from zoneinfo import ZoneInfo

Timestamp = Union[int, float, datetime]

# Format used to compare dates at day granularity
DATE_FORMAT = "%Y%m%d"


def resolve_tz(tz: Union[str, tzinfo, None]) -> tzinfo:
    if tz is None:
        return timezone.utc
    if isinstance(tz, str):
        return timezone.utc if tz.upper() == "UTC" else ZoneInfo(tz)
    return tz


def to_datetime(ts: Timestamp, tz: Union[str, tzinfo, None] = "UTC") -> datetime:
    """Convert epoch seconds or a datetime to an aware datetime in *tz*.

    Naive datetimes are taken to be UTC.
    """
    zone = resolve_tz(tz)
    if isinstance(ts, datetime):
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        return ts.astimezone(zone)
    return datetime.fromtimestamp(ts, tz=zone)


def same_day(a: Timestamp, b: Timestamp, tz: Union[str, tzinfo, None] = "UTC") -> bool:
    """True if *a* and *b* fall on the same calendar day in *tz*."""
    fmt_a = to_datetime(a, tz).strftime(DATE_FORMAT)
    fmt_b = to_datetime(b, tz).strftime(DATE_FORMAT)
    return fmt_a == fmt_b


def _midnight(day: date, zone: tzinfo) -> int:
    return int(datetime.combine(day, time.min, tzinfo=zone).timestamp())


def day_bounds(ts: Timestamp, tz: Union[str, tzinfo, None] = "UTC") -> tuple[int, int]:
    """Half-open ``[start, end)`` epoch range of the day containing *ts*."""
    zone = resolve_tz(tz)
    day = to_datetime(ts, zone).date()
    return _midnight(day, zone), _midnight(day + timedelta(days=1), zone)


def normalize_date(ts: Timestamp, tz: Union[str, tzinfo, None] = "UTC") -> int:
    """Start of the day containing *ts*, in epoch seconds."""
    return day_bounds(ts, tz)[0]
