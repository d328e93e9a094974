"""Display helpers for dates and temperatures.

Dates are epoch seconds rendered in a reference time zone.  ``now`` is always
passed in so output does not depend on the wall clock.
"""

from datetime import timedelta
from decimal import ROUND_HALF_UP, Decimal

from .dates import Timestamp, same_day, to_datetime


def format_temperature(temperature: float, metric: bool = True) -> str:
    """Whole-degree string; converts Celsius to Fahrenheit when not metric."""
    temp = temperature if metric else 9 * temperature / 5 + 32
    # Halves round away from zero: 22.5 -> 23, -22.5 -> -23
    return str(Decimal(repr(temp)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_date(ts: Timestamp, tz: str = "UTC") -> str:
    """Medium date, e.g. ``Dec 20, 2014``."""
    dt = to_datetime(ts, tz)
    return f"{dt:%b} {dt.day}, {dt.year}"


def formatted_month_day(ts: Timestamp, tz: str = "UTC") -> str:
    """``December 20``."""
    return to_datetime(ts, tz).strftime("%B %d")


def day_name(ts: Timestamp, now: Timestamp, tz: str = "UTC") -> str:
    """``Today``, ``Tomorrow`` or the weekday name."""
    if same_day(ts, now, tz):
        return "Today"
    tomorrow = to_datetime(now, tz) + timedelta(days=1)
    if same_day(ts, tomorrow, tz):
        return "Tomorrow"
    return to_datetime(ts, tz).strftime("%A")


def friendly_day_string(ts: Timestamp, now: Timestamp, tz: str = "UTC") -> str:
    """Day label for a forecast row.

    Today: ``Today, June 24``.  Within the next week: the day name.
    After that: ``Mon Jun 03``.
    """
    if same_day(ts, now, tz):
        return f"Today, {formatted_month_day(ts, tz)}"

    input_dt = to_datetime(ts, tz)
    week_out = to_datetime(now, tz) + timedelta(days=7)
    if input_dt < week_out:
        return day_name(ts, now, tz)
    return input_dt.strftime("%a %b %d")
