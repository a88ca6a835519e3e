from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..attendance.gate import AttendanceGate
from ..attendance.repository import AttendanceRepository
from ..common.validators import require_context
from ..core.enums import ClassState, Weekday
from ..schedules.model import ScheduleSlot
from ..schedules.repository import ScheduleRepository
from .model import ClassOccurrence, DashboardStats, PeriodProgress


class DashboardProjector:
    """Read-only view of a teacher's day: current class and marking progress."""

    def __init__(
        self,
        schedules: ScheduleRepository,
        attendance: AttendanceRepository,
        *,
        gate: AttendanceGate | None = None,
    ):
        self._schedules = schedules
        self._attendance = attendance
        self._gate = gate or AttendanceGate()

    def _today_slots(self, tenant_id: str, teacher_id: str, now: datetime) -> list[ScheduleSlot]:
        day = Weekday.of(now)
        if day is None:
            return []
        slots = self._schedules.find_by_teacher_and_day(tenant_id=tenant_id, teacher_id=teacher_id, day=day)
        return sorted(slots, key=lambda s: (s.start_time, s.period))

    def current_class(self, *, tenant_id: str, teacher_id: str, now: datetime) -> Optional[ClassOccurrence]:
        tenant_id, teacher_id = require_context(tenant_id, teacher_id)

        # Slots of one teacher never overlap, but the grace minutes after a class
        # can reach into the next one; the earlier class wins.
        for slot in self._today_slots(tenant_id, teacher_id, now):
            decision = self._gate.evaluate(slot, now)
            if decision.state == ClassState.IN_WINDOW:
                return ClassOccurrence(slot=slot, class_date=now.date(), decision=decision)
        return None

    def today_progress(self, *, tenant_id: str, teacher_id: str, now: datetime) -> Sequence[PeriodProgress]:
        tenant_id, teacher_id = require_context(tenant_id, teacher_id)

        slots = self._today_slots(tenant_id, teacher_id, now)
        if not slots:
            return []
        marked = self._attendance.marked_keys(tenant_id=tenant_id, teacher_id=teacher_id, class_date=now.date())
        return [PeriodProgress(slot=s, marked_already=(s.subject_id, s.period) in marked) for s in slots]

    def today_stats(self, *, tenant_id: str, teacher_id: str, now: datetime) -> DashboardStats:
        return DashboardStats.from_progress(self.today_progress(tenant_id=tenant_id, teacher_id=teacher_id, now=now))
