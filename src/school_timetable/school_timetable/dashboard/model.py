from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Sequence

from ..attendance.gate import GateDecision
from ..schedules.model import ScheduleSlot


@dataclass(frozen=True)
class ClassOccurrence:
    """A slot realised on a calendar date. Never persisted."""

    slot: ScheduleSlot
    class_date: date
    decision: GateDecision

    def to_dict(self) -> dict:
        return {
            **self.slot.to_dict(),
            "date": self.class_date.strftime("%Y-%m-%d"),
            "state": self.decision.state.value,
            "canMarkAttendance": self.decision.eligible,
            "timeRemaining": self.decision.ms_remaining,
        }


@dataclass(frozen=True)
class PeriodProgress:
    slot: ScheduleSlot
    marked_already: bool

    def to_dict(self) -> dict:
        return {**self.slot.to_dict(), "attendanceMarked": self.marked_already}


@dataclass(frozen=True)
class DashboardStats:
    classes_today: int
    attendance_marked: int
    pending_attendance: int

    @classmethod
    def from_progress(cls, progress: Sequence[PeriodProgress]) -> "DashboardStats":
        marked = sum(1 for p in progress if p.marked_already)
        return cls(classes_today=len(progress), attendance_marked=marked, pending_attendance=len(progress) - marked)

    def to_dict(self) -> dict:
        return {
            "classesToday": self.classes_today,
            "attendanceMarked": self.attendance_marked,
            "pendingAttendance": self.pending_attendance,
        }
