"""
Time and rule primitives: overnight-aware durations, time-of-day buckets,
weekday membership and time-window arithmetic.
"""

import logging
from datetime import date, datetime, time, timedelta
from typing import Any, Iterable, Optional

from .errors import SchedulingInputError
from .types import ShiftPeriod

logger = logging.getLogger(__name__)

DAY_LABELS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
ALL_DAYS = list(range(7))


def parse_time(value: Any, field_name: str = "time") -> time:
    """
    Parse a time-of-day value.

    Accepts datetime.time objects and "HH:MM" / "HH:MM:SS" strings.
    Raises SchedulingInputError for anything else (empty, negative, out of range).
    """
    if isinstance(value, time):
        return value

    if isinstance(value, str):
        s = value.strip()
        if not s:
            raise SchedulingInputError(f"{field_name} is empty")
        fmt = "%H:%M" if len(s.split(":")) == 2 else "%H:%M:%S"
        try:
            return datetime.strptime(s, fmt).time()
        except ValueError as e:
            logger.debug("Failed parsing %s=%r as time string", field_name, value)
            raise SchedulingInputError(f"Invalid {field_name} format: {value!r}") from e

    raise SchedulingInputError(f"Unsupported {field_name} type: {type(value).__name__}")


def parse_optional_time(value: Any, field_name: str = "time") -> Optional[time]:
    """Like parse_time, but None and "" mean 'not set'."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_time(value, field_name)


def to_hours(t: time) -> float:
    return t.hour + t.minute / 60 + t.second / 3600


def calc_hours(start: time, end: time) -> float:
    """Gross duration in hours. end <= start means the shift wraps past midnight."""
    h = to_hours(end) - to_hours(start)
    if h <= 0:
        h += 24
    return round(h, 2)


def shift_span(shift_date: date, start: time, end: time) -> tuple[datetime, datetime]:
    """Absolute (start, end) instants of a shift starting on shift_date."""
    start_dt = datetime.combine(shift_date, start)
    end_dt = datetime.combine(shift_date, end)
    if end_dt <= start_dt:
        end_dt += timedelta(days=1)
    return start_dt, end_dt


def shift_period(start: time) -> ShiftPeriod:
    """Bucket a shift by its start hour."""
    h = start.hour
    if 5 <= h < 12:
        return ShiftPeriod.MORNING
    if 12 <= h < 17:
        return ShiftPeriod.AFTERNOON
    if h >= 17:
        return ShiftPeriod.EVENING
    return ShiftPeriod.NIGHT


def is_night_start(start: time) -> bool:
    return start.hour >= 20 or start.hour < 4


def is_morning_start(start: time) -> bool:
    return 5 <= start.hour < 10


def runs_on_day(days_of_week: Iterable[int], weekday: int) -> bool:
    """Weekday membership. An empty set means every day."""
    days = list(days_of_week or [])
    return not days or weekday in days


def is_weekend(d: date) -> bool:
    return d.weekday() >= 5


def datetime_ranges_overlap(
    start1: datetime, end1: datetime,
    start2: datetime, end2: datetime
) -> bool:
    """Check if two datetime ranges overlap."""
    return start1 < end2 and start2 < end1


def window_intervals_for_day(
    day: date,
    window_start: Optional[time],
    window_end: Optional[time],
) -> list[tuple[datetime, datetime]]:
    """
    Intervals of a daily time window that fall on the given calendar day.

    A wrapping window (22:00-06:00) yields two pieces: [00:00, 06:00) and [22:00, 24:00).
    An unset window yields nothing.
    """
    if window_start is None or window_end is None or window_start == window_end:
        return []

    day_start = datetime.combine(day, time(0, 0))
    day_end = day_start + timedelta(days=1)
    ws = datetime.combine(day, window_start)
    we = datetime.combine(day, window_end)

    if window_start < window_end:
        return [(ws, we)]
    return [(day_start, we), (ws, day_end)]


def overlap_seconds(
    start: datetime,
    end: datetime,
    intervals: list[tuple[datetime, datetime]],
) -> float:
    """Total seconds of [start, end) covered by the (non-overlapping) intervals."""
    total = 0.0
    for i_start, i_end in intervals:
        lo = max(start, i_start)
        hi = min(end, i_end)
        if hi > lo:
            total += (hi - lo).total_seconds()
    return total


def split_at_midnight(start: datetime, end: datetime) -> list[tuple[datetime, datetime]]:
    """Split [start, end) into calendar-day segments."""
    segments = []
    current = start
    while current < end:
        day_end = datetime.combine(current.date() + timedelta(days=1), time(0, 0))
        segment_end = min(end, day_end)
        segments.append((current, segment_end))
        current = segment_end
    return segments


def iso_week_key(d: date) -> tuple[int, int]:
    iso = d.isocalendar()
    return iso[0], iso[1]


def month_key(d: date) -> tuple[int, int]:
    return d.year, d.month
