from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, time
from typing import Optional

import pytest

from src.school_timetable.school_timetable.attendance.gate import AttendanceGate
from src.school_timetable.school_timetable.attendance.model import AttendanceRecord, ClassOccurrenceKey
from src.school_timetable.school_timetable.attendance.service import AttendanceRecorder
from src.school_timetable.school_timetable.container import wire_container
from src.school_timetable.school_timetable.core.enums import Reason, Weekday
from src.school_timetable.school_timetable.core.exceptions import ConflictError, NotFoundError
from src.school_timetable.school_timetable.dashboard.service import DashboardProjector
from src.school_timetable.school_timetable.schedules.model import ScheduleSlot
from src.school_timetable.school_timetable.schedules.service import ScheduleAllocator

TENANT = "school-1"

# 2026-10-19 is a Monday.
MONDAY = date(2026, 10, 19)
TUESDAY = date(2026, 10, 20)
SUNDAY = date(2026, 10, 25)


def at(day: date, hour: int, minute: int, second: int = 0) -> datetime:
    return datetime.combine(day, time(hour, minute, second))


class InMemorySchedules:
    def __init__(self):
        self._slots: dict[int, ScheduleSlot] = {}
        self._next_id = 1
        self.teacher_day_queries = 0

    def find_by_slot_key(self, *, tenant_id, grade, section, day, period) -> Optional[ScheduleSlot]:
        for s in self._slots.values():
            if s.slot_key == (tenant_id, grade, section, day, period):
                return s
        return None

    def find_by_id(self, *, tenant_id, slot_id) -> Optional[ScheduleSlot]:
        s = self._slots.get(int(slot_id))
        return s if s and s.tenant_id == tenant_id else None

    def find_by_teacher_and_day(self, *, tenant_id, teacher_id, day):
        self.teacher_day_queries += 1
        items = [
            s for s in self._slots.values() if s.tenant_id == tenant_id and s.teacher_id == teacher_id and s.day == day
        ]
        return sorted(items, key=lambda s: s.start_time)

    def list_by_tenant(self, *, tenant_id):
        items = [s for s in self._slots.values() if s.tenant_id == tenant_id]
        return sorted(items, key=lambda s: (s.day.order, s.period, s.grade, s.section))

    def insert(self, slot: ScheduleSlot) -> ScheduleSlot:
        if self.find_by_slot_key(
            tenant_id=slot.tenant_id, grade=slot.grade, section=slot.section, day=slot.day, period=slot.period
        ):
            raise ConflictError("slot occupied", reason=Reason.SLOT_OCCUPIED)
        created = replace(slot, slot_id=self._next_id)
        self._slots[self._next_id] = created
        self._next_id += 1
        return created

    def force_insert(self, slot: ScheduleSlot) -> ScheduleSlot:
        """Bypass every check, as a concurrent writer would."""
        created = replace(slot, slot_id=self._next_id)
        self._slots[self._next_id] = created
        self._next_id += 1
        return created

    def delete(self, *, tenant_id, slot_id) -> None:
        if not self.find_by_id(tenant_id=tenant_id, slot_id=slot_id):
            raise NotFoundError("schedule slot not found")
        del self._slots[int(slot_id)]

    def count(self) -> int:
        return len(self._slots)


class InMemoryAttendance:
    def __init__(self):
        self.batches: dict[ClassOccurrenceKey, datetime] = {}
        self.records: list[AttendanceRecord] = []

    def exists_batch(self, key: ClassOccurrenceKey) -> bool:
        return key in self.batches

    def create_batch(self, key: ClassOccurrenceKey, *, marked_at: datetime, statuses) -> int:
        if key in self.batches:
            raise ConflictError("already marked today", reason=Reason.ALREADY_MARKED)
        self.batches[key] = marked_at
        for student_id, status in statuses.items():
            self.records.append(
                AttendanceRecord(
                    record_id=len(self.records) + 1,
                    tenant_id=key.tenant_id,
                    student_id=student_id,
                    teacher_id=key.teacher_id,
                    subject_id=key.subject_id,
                    period=key.period,
                    class_date=key.class_date,
                    status=status,
                    marked_at=marked_at,
                )
            )
        return len(statuses)

    def marked_keys(self, *, tenant_id, teacher_id, class_date):
        return {
            (k.subject_id, k.period)
            for k in self.batches
            if k.tenant_id == tenant_id and k.teacher_id == teacher_id and k.class_date == class_date
        }

    def list_for_teacher(self, *, tenant_id, teacher_id, limit):
        items = [r for r in self.records if r.tenant_id == tenant_id and r.teacher_id == teacher_id]
        items.sort(key=lambda r: (r.class_date, r.period), reverse=True)
        return items[:limit]


class InMemoryDirectory:
    def __init__(self, subjects: dict[str, str], teachers: dict[str, str]):
        self._subjects = subjects
        self._teachers = teachers

    def subject_name(self, *, tenant_id, subject_id):
        return self._subjects.get(subject_id)

    def teacher_name(self, *, tenant_id, teacher_id):
        return self._teachers.get(teacher_id)


def make_slot(
    *,
    grade: int = 9,
    section: str = "A",
    day: Weekday = Weekday.MONDAY,
    period: int = 3,
    start: time = time(9, 0),
    end: time = time(9, 45),
    subject_id: str = "math",
    teacher_id: str = "T1",
    tenant_id: str = TENANT,
) -> ScheduleSlot:
    return ScheduleSlot(
        tenant_id=tenant_id,
        grade=grade,
        section=section,
        day=day,
        period=period,
        start_time=start,
        end_time=end,
        subject_id=subject_id,
        teacher_id=teacher_id,
    )


@pytest.fixture
def schedules_repo() -> InMemorySchedules:
    return InMemorySchedules()


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def directory() -> InMemoryDirectory:
    return InMemoryDirectory(
        subjects={"math": "Mathematics", "phys": "Physics", "eng": "English"},
        teachers={"T1": "Anita Rao", "T2": "Daniel Okafor"},
    )


@pytest.fixture
def allocator(schedules_repo, directory) -> ScheduleAllocator:
    return ScheduleAllocator(schedules_repo, directory)


@pytest.fixture
def gate() -> AttendanceGate:
    return AttendanceGate(grace_minutes=5)


@pytest.fixture
def recorder(attendance_repo, schedules_repo, gate) -> AttendanceRecorder:
    return AttendanceRecorder(attendance_repo, schedules_repo, gate=gate)


@pytest.fixture
def projector(schedules_repo, attendance_repo, gate) -> DashboardProjector:
    return DashboardProjector(schedules_repo, attendance_repo, gate=gate)


@pytest.fixture
def container(schedules_repo, attendance_repo, directory):
    return wire_container(
        schedules_repo=schedules_repo,
        attendance_repo=attendance_repo,
        directory_repo=directory,
        grace_minutes=5,
    )
