"""
Timezone utilities for the booking backend.

Teacher availability is declared as local wall-clock time in a single
operational timezone. Instants are stored in UTC. These helpers convert at
that boundary.
"""

from datetime import date, datetime, time, timezone
from typing import Optional

import pytz

from .config import settings


def get_operational_timezone(tz_name: Optional[str] = None) -> pytz.BaseTzInfo:
    """Return the timezone availability windows are declared in."""
    return pytz.timezone(tz_name or settings.operational_timezone)


def ensure_utc(dt: datetime) -> datetime:
    """
    Return an aware UTC datetime.

    Naive values are assumed to already be UTC (SQLite drops tzinfo on read).
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_local(dt: datetime, tz_name: Optional[str] = None) -> datetime:
    """Convert an instant to operational wall-clock time."""
    return ensure_utc(dt).astimezone(get_operational_timezone(tz_name))


def local_day_of_week(dt: datetime, tz_name: Optional[str] = None) -> int:
    """Day of week of an instant in local time, 0 = Sunday ... 6 = Saturday."""
    return (to_local(dt, tz_name).weekday() + 1) % 7


def local_time_string(dt: datetime, tz_name: Optional[str] = None) -> str:
    """Zero-padded HH:MM of an instant in local time."""
    return to_local(dt, tz_name).strftime("%H:%M")


def parse_time_of_day(value: str) -> time:
    hours, minutes = value.split(":")
    return time(int(hours), int(minutes))


def local_to_utc(day: date, wall_clock: time, tz_name: Optional[str] = None) -> datetime:
    """Combine a local date and wall-clock time into a UTC instant."""
    tz = get_operational_timezone(tz_name)
    local_dt = tz.localize(datetime.combine(day, wall_clock))
    return local_dt.astimezone(timezone.utc)
