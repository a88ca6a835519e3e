from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Optional

from ..common.timerange import format_time
from ..core.enums import Weekday


@dataclass(frozen=True)
class ScheduleSlot:
    """Domain entity: one weekly-recurring (grade, section, day, period) assignment.

    `subject_name` / `teacher_name` are display copies filled in by the
    directory; they take no part in any invariant.
    """

    tenant_id: str
    grade: int
    section: str
    day: Weekday
    period: int
    start_time: time
    end_time: time
    subject_id: str
    teacher_id: str
    slot_id: Optional[int] = None
    subject_name: Optional[str] = None
    teacher_name: Optional[str] = None

    @property
    def slot_key(self) -> tuple[str, int, str, Weekday, int]:
        return (self.tenant_id, self.grade, self.section, self.day, self.period)

    def to_dict(self) -> dict:
        return {
            "id": self.slot_id,
            "grade": self.grade,
            "section": self.section,
            "day": self.day.value,
            "periodNum": self.period,
            "startTime": format_time(self.start_time),
            "endTime": format_time(self.end_time),
            "subjectId": self.subject_id,
            "teacherId": self.teacher_id,
            "subject": self.subject_name,
            "teacher": self.teacher_name,
        }
