from __future__ import annotations

from datetime import datetime, time

import pytest

from src.school_timetable.school_timetable.common.timerange import (
    extend,
    format_range,
    minutes_between,
    overlaps,
    to_time,
    within,
)
from src.school_timetable.school_timetable.core.exceptions import ValidationError


def test_adjacent_ranges_do_not_overlap():
    assert not overlaps("09:00", "09:45", "09:45", "10:30")
    assert not overlaps("09:45", "10:30", "09:00", "09:45")


def test_partial_and_contained_ranges_overlap():
    assert overlaps("09:00", "09:45", "09:30", "10:15")
    assert overlaps("09:00", "10:00", "09:15", "09:30")
    assert overlaps("09:15", "09:30", "09:00", "10:00")
    assert overlaps("09:00", "09:45", "09:00", "09:45")


def test_overlap_is_symmetric():
    cases = [
        ("08:00", "08:45", "08:30", "09:15"),
        ("08:00", "08:45", "08:45", "09:30"),
        ("10:00", "11:00", "12:00", "13:00"),
    ]
    for a1, a2, b1, b2 in cases:
        assert overlaps(a1, a2, b1, b2) == overlaps(b1, b2, a1, a2)


def test_within_includes_both_boundaries():
    assert within("09:00", "09:00", "10:05")
    assert within("10:05", "09:00", "10:05")
    assert not within("08:59", "09:00", "10:05")
    assert not within("10:06", "09:00", "10:05")


def test_extend_adds_minutes():
    assert extend("10:00", 5) == time(10, 5)
    assert extend(time(9, 58), 5) == time(10, 3)


def test_extend_clamps_at_day_boundaries():
    assert extend("23:58", 5) == time(23, 59, 59)
    assert extend("00:02", -5) == time(0, 0)


def test_to_time_accepts_strings_times_and_datetimes():
    assert to_time("9:05") == time(9, 5)
    assert to_time(" 14:30:15 ") == time(14, 30, 15)
    assert to_time(time(7, 0)) == time(7, 0)
    assert to_time(datetime(2026, 10, 19, 8, 15)) == time(8, 15)


@pytest.mark.parametrize("bad", ["", "25:00", "nine", None, 900])
def test_to_time_rejects_garbage(bad):
    with pytest.raises(ValidationError):
        to_time(bad)


def test_minutes_between_and_format_range():
    assert minutes_between("09:00", "09:45") == 45
    assert format_range(time(9, 0), time(9, 45)) == "09:00-09:45"
