"""
Wall-clock helpers shared by the schedule builder, the free-slot finder and
the availability editor.

Days of the week are Saturday-based throughout the backend: 0 is Saturday
and 6 is Friday. Conversion from Python's Monday-based ``weekday()`` happens
only here.
"""
import re
from datetime import date, datetime, timedelta
from typing import List, Optional
from zoneinfo import ZoneInfo

from backend.configuration.config import Config

DAYS_PER_WEEK = 7

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def is_valid_time(value: str) -> bool:
    """True for a zero-padded 24-hour "HH:mm" string."""
    return bool(value) and TIME_PATTERN.match(value) is not None


def time_to_minutes(value: str) -> int:
    """'09:30' -> 570"""
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def minutes_to_time(minutes: int) -> str:
    """570 -> '09:30'"""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def to_saturday_based(day: date) -> int:
    # weekday(): Monday=0 ... Saturday=5, Sunday=6
    return (day.weekday() + 2) % DAYS_PER_WEEK


def week_start(day: date) -> date:
    """The Saturday on or before ``day``."""
    return day - timedelta(days=to_saturday_based(day))


def week_dates(day: date) -> List[date]:
    """The seven calendar dates, Saturday first, of the week containing ``day``."""
    start = week_start(day)
    return [start + timedelta(days=offset) for offset in range(DAYS_PER_WEEK)]


def to_local(moment: datetime, timezone_name: Optional[str] = None) -> datetime:
    """
    Read a timestamp as school wall-clock time.

    Aware timestamps are converted into the configured school timezone when
    one is set; naive timestamps are already wall-clock.
    """
    timezone_name = timezone_name or Config.SCHOOL_TIMEZONE
    if timezone_name and moment.tzinfo is not None:
        return moment.astimezone(ZoneInfo(timezone_name))
    return moment


def minute_of_day(moment: datetime) -> int:
    local = to_local(moment)
    return local.hour * 60 + local.minute


def parse_timestamp(value: str) -> datetime:
    """ISO 8601 timestamp, accepting a trailing ``Z`` for UTC."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def wall_clock(moment: datetime) -> datetime:
    """School wall-clock time as a naive datetime, comparable with date bounds."""
    return to_local(moment).replace(tzinfo=None)


def today(timezone_name: Optional[str] = None) -> date:
    """The current calendar date at the school."""
    timezone_name = timezone_name or Config.SCHOOL_TIMEZONE
    if timezone_name:
        return datetime.now(ZoneInfo(timezone_name)).date()
    return datetime.now().date()
