"""Same-day wall-clock interval helpers.

Times are `datetime.time` values or "HH:MM" / "HH:MM:SS" strings. Class days
end before midnight, so no date rollover is handled.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Union

from ..core.exceptions import ValidationError

TimeLike = Union[time, str]

_TIME_FORMATS = ("%H:%M", "%H:%M:%S")
_DAY = date(2000, 1, 1)


def to_time(value: TimeLike) -> time:
    if isinstance(value, datetime):
        return value.time()
    if isinstance(value, time):
        return value
    if isinstance(value, str):
        text = value.strip()
        for fmt in _TIME_FORMATS:
            try:
                return datetime.strptime(text, fmt).time()
            except ValueError:
                continue
    raise ValidationError(f"invalid time (HH:MM): {value!r}")


def overlaps(start_a: TimeLike, end_a: TimeLike, start_b: TimeLike, end_b: TimeLike) -> bool:
    """Half-open overlap: ranges that only touch at an endpoint do not overlap."""
    return to_time(start_a) < to_time(end_b) and to_time(start_b) < to_time(end_a)


def extend(value: TimeLike, minutes: int) -> time:
    moved = datetime.combine(_DAY, to_time(value)) + timedelta(minutes=int(minutes))
    if moved.date() > _DAY:
        return time(23, 59, 59)
    if moved.date() < _DAY:
        return time(0, 0)
    return moved.time()


def within(current: TimeLike, start: TimeLike, end: TimeLike) -> bool:
    """Closed interval: the boundaries themselves are inside."""
    return to_time(start) <= to_time(current) <= to_time(end)


def minutes_between(start: TimeLike, end: TimeLike) -> int:
    delta = datetime.combine(_DAY, to_time(end)) - datetime.combine(_DAY, to_time(start))
    return int(delta.total_seconds() // 60)


def format_time(value: TimeLike) -> str:
    return to_time(value).strftime("%H:%M")


def format_range(start: TimeLike, end: TimeLike) -> str:
    return f"{format_time(start)}-{format_time(end)}"
