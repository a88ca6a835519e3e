from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Union


class Role(str, Enum):
    """Caller role resolved by the upstream identity provider."""

    SUPERADMIN = "superadmin"
    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"
    PARENT = "parent"
    ACCOUNTANT = "accountant"


class Weekday(str, Enum):
    """The six working days a slot can be scheduled on."""

    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"

    @property
    def order(self) -> int:
        return _WEEKDAY_ORDER.index(self)

    @classmethod
    def of(cls, value: Union[date, datetime]) -> "Weekday | None":
        """Working day of a calendar date; None on Sunday."""
        idx = value.weekday()
        if idx >= len(_WEEKDAY_ORDER):
            return None
        return _WEEKDAY_ORDER[idx]


_WEEKDAY_ORDER = [
    Weekday.MONDAY,
    Weekday.TUESDAY,
    Weekday.WEDNESDAY,
    Weekday.THURSDAY,
    Weekday.FRIDAY,
    Weekday.SATURDAY,
]


class AttendanceStatus(str, Enum):
    """Per-student status stored for a class occurrence."""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"


class ClassState(str, Enum):
    """Where a class occurrence stands relative to its marking window."""

    NOT_SCHEDULED_TODAY = "not_scheduled_today"
    NOT_YET_STARTED = "not_yet_started"
    IN_WINDOW = "in_window"
    EXPIRED = "expired"


class Reason(str, Enum):
    """Stable codes callers can branch on instead of parsing messages."""

    NOT_SCHEDULED_TODAY = "NOT_SCHEDULED_TODAY"
    NOT_YET_STARTED = "NOT_YET_STARTED"
    WINDOW_EXPIRED = "WINDOW_EXPIRED"
    SLOT_OCCUPIED = "SLOT_OCCUPIED"
    TEACHER_UNAVAILABLE = "TEACHER_UNAVAILABLE"
    ALREADY_MARKED = "ALREADY_MARKED"
