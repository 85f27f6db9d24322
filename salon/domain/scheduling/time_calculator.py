"""Time parsing and calculations for the scheduling domain.

All functions are pure. Times of day are "HH:MM" strings on a single day;
anything outside 00:00-23:59 is rejected with ``FormatError`` rather than
clamped or wrapped past midnight.
"""

import re
from datetime import date, datetime, time
from zoneinfo import ZoneInfo

from ...shared.errors import FormatError

MINUTES_PER_DAY = 24 * 60

_TIME_PATTERN = re.compile(r"([0-9]{2}):([0-9]{2})")


def time_to_minutes(value: str) -> int:
    """Minutes since midnight for an "HH:MM" string."""
    if not isinstance(value, str):
        raise FormatError(f"Time must be a string, got {type(value).__name__}")

    match = _TIME_PATTERN.fullmatch(value)
    if not match:
        raise FormatError(f"Invalid time format {value!r}; expected HH:MM")

    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise FormatError(f"Time out of range: {value!r}")
    return hours * 60 + minutes


def minutes_to_time(minutes: int) -> str:
    """Inverse of ``time_to_minutes``, zero padded."""
    if isinstance(minutes, bool) or not isinstance(minutes, int):
        raise FormatError(f"Minutes must be an integer, got {minutes!r}")
    if minutes < 0 or minutes >= MINUTES_PER_DAY:
        raise FormatError(f"Minutes out of range for a single day: {minutes}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def calculate_end_time(start_time: str, duration_minutes: int) -> str:
    """End time of a service starting at ``start_time``."""
    return minutes_to_time(time_to_minutes(start_time) + duration_minutes)


def combine_date_time(day: date, value: str, tz: ZoneInfo) -> datetime:
    """Aware datetime for ``value`` on ``day`` in the business timezone"""
    minutes = time_to_minutes(value)
    return datetime.combine(day, time(minutes // 60, minutes % 60), tzinfo=tz)


def minutes_of_day(moment: datetime, tz: ZoneInfo) -> int:
    local = moment.astimezone(tz)
    return local.hour * 60 + local.minute


def format_time_12h(value: str) -> str:
    # "13:05" -> "1:05 PM"
    minutes = time_to_minutes(value)
    hours, mins = divmod(minutes, 60)
    period = "PM" if hours >= 12 else "AM"
    return f"{hours % 12 or 12}:{mins:02d} {period}"


def format_duration(minutes: int) -> str:
    hours, mins = divmod(minutes, 60)
    if hours == 0:
        return f"{mins} mins"
    if mins == 0:
        return f"{hours} {'hour' if hours == 1 else 'hours'}"
    return f"{hours}h {mins}m"


def parse_iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise FormatError("Invalid date format; expected YYYY-MM-DD") from None
