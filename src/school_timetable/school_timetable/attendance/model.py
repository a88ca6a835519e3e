from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus, Reason
from ..schedules.model import ScheduleSlot


@dataclass(frozen=True)
class ClassOccurrenceKey:
    """Identifies one class occurrence; attendance is recorded at most once per key.

    The slot itself is not part of the key, so deleting a slot leaves the
    history intact.
    """

    tenant_id: str
    teacher_id: str
    subject_id: str
    period: int
    class_date: date

    @classmethod
    def for_slot(cls, slot: ScheduleSlot, class_date: date) -> "ClassOccurrenceKey":
        return cls(
            tenant_id=slot.tenant_id,
            teacher_id=slot.teacher_id,
            subject_id=slot.subject_id,
            period=slot.period,
            class_date=class_date,
        )


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one student's status for a class occurrence."""

    record_id: int
    tenant_id: str
    student_id: str
    teacher_id: str
    subject_id: str
    period: int
    class_date: date
    status: AttendanceStatus
    marked_at: datetime
    subject_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.record_id,
            "date": self.class_date.strftime("%Y-%m-%d"),
            "time": self.marked_at.strftime("%H:%M:%S"),
            "period": self.period,
            "subjectId": self.subject_id,
            "subject": self.subject_name,
            "studentId": self.student_id,
            "status": self.status.value,
        }


@dataclass(frozen=True)
class ClassInfo:
    """What a teacher sees before marking: the slot and whether marking is open."""

    slot: ScheduleSlot
    eligible: bool
    reason: Optional[Reason]
    ms_remaining: int
    already_marked: bool

    def to_dict(self) -> dict:
        return {
            **self.slot.to_dict(),
            "canMarkAttendance": self.eligible and not self.already_marked,
            "eligible": self.eligible,
            "reason": self.reason.value if self.reason else None,
            "timeRemaining": self.ms_remaining,
            "alreadyMarked": self.already_marked,
        }
