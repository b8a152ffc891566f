# barbershop/core.py

"""
Time and slot helpers shared by the schedule store, the conflict checker
and the availability calculator.

Instants are timezone-aware UTC datetimes, in memory and in the store.
SQLite hands them back without tzinfo; `from_storage` reattaches UTC.
Clock times ("HH:MM") and calendar dates are read on the shop's wall clock.
"""

import re
from datetime import date, datetime, time, timedelta, timezone
from math import ceil
from typing import Optional
from zoneinfo import ZoneInfo

from .errors import FormatError

TIME_RE = re.compile(r"^([01][0-9]|2[0-3]):([0-5][0-9])$")
DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def is_valid_time_string(value: str) -> bool:
    return isinstance(value, str) and TIME_RE.match(value) is not None


def time_to_minutes(value: str) -> int:
    """"14:30" -> 870."""
    match = TIME_RE.match(value) if isinstance(value, str) else None
    if match is None:
        raise FormatError(f"Invalid time '{value}'. Expected HH:MM")
    return int(match.group(1)) * 60 + int(match.group(2))


def minutes_to_time(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def parse_date(value) -> date:
    """Accepts a date or a YYYY-MM-DD string."""
    if isinstance(value, datetime):
        raise FormatError("Expected a calendar date, not a timestamp")
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not DATE_RE.match(value):
        raise FormatError(f"Invalid date '{value}'. Expected YYYY-MM-DD")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise FormatError(f"Invalid date '{value}'. Expected YYYY-MM-DD")


def slots_needed(duration_minutes: int, slot_width: int) -> int:
    return ceil(duration_minutes / slot_width)


def ranges_overlap(start_a, end_a, start_b, end_b) -> bool:
    # half-open: touching ranges do not overlap
    return start_a < end_b and end_a > start_b


def to_utc(ts: datetime, tz: ZoneInfo) -> datetime:
    """Normalize an incoming instant. Naive values are wall time in `tz`."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=tz)
    return ts.astimezone(timezone.utc)


def parse_instant(value, tz: ZoneInfo) -> datetime:
    """ISO-8601 string or datetime -> aware UTC datetime."""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            raise FormatError(f"Invalid timestamp '{value}'. Expected ISO-8601")
    if not isinstance(value, datetime):
        raise FormatError("Expected an ISO-8601 timestamp")
    return to_utc(value, tz)


def from_storage(ts: datetime) -> datetime:
    """Aware UTC view of a value read from the store (naive means UTC)."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def to_local(ts: datetime, tz: ZoneInfo) -> datetime:
    return from_storage(ts).astimezone(tz)


def day_bounds(day: date, tz: ZoneInfo) -> tuple[datetime, datetime]:
    """Aware UTC bounds [start, end) of calendar `day` in `tz`."""
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def is_valid_slot_boundary(ts: datetime, slot_width: int, tz: Optional[ZoneInfo] = None) -> bool:
    """
    True when `ts` falls exactly on the slot grid: :00, :20, :40 for a width
    of 20, with zero seconds and microseconds.
    """
    if tz is not None:
        ts = to_local(ts, tz)
    return ts.minute % slot_width == 0 and ts.second == 0 and ts.microsecond == 0


def generate_slots(start_time: str, end_time: str, slot_width: int) -> list[str]:
    """Slot starts of the half-open window [start_time, end_time)."""
    start = time_to_minutes(start_time)
    end = time_to_minutes(end_time)
    return [minutes_to_time(m) for m in range(start, end, slot_width)]


def effective_duration(appointment, default: int) -> int:
    """
    Length of an existing appointment in minutes.

    Fallback order: duration snapshot stored on the appointment, then the
    live duration of its service, then `default` (one slot).
    """
    service = getattr(appointment, "service", None)
    candidates = (
        appointment.duration,
        service.duration if service is not None else None,
    )
    for value in candidates:
        if value:
            return value
    return default
