from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional, Sequence

from ..common.timerange import TimeLike, format_range, format_time, overlaps, to_time
from ..common.validators import (
    require_non_empty,
    require_positive_int,
    require_role,
    require_tenant,
    require_weekday,
)
from ..core.constants import MAX_PERIOD
from ..core.enums import Reason, Role, Weekday
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..directory.repository import DirectoryRepository
from .model import ScheduleSlot
from .repository import ScheduleRepository

logger = logging.getLogger(__name__)


class ScheduleAllocator:
    """The only writer of schedule slots.

    Checks run from the exact slot-key lookup to the wider per-teacher scan and
    have no side effects before the final insert. The store's unique key stays
    the authoritative guard for slot identity; teacher overlap can still slip
    through a concurrent insert and is reported by `find_teacher_overlaps`.

    Writes go through `schedules`, which may be a cache in front of the store.
    Conflict checks read `store`, which must be uncached; it defaults to
    `schedules`.
    """

    def __init__(
        self,
        schedules: ScheduleRepository,
        directory: Optional[DirectoryRepository] = None,
        *,
        store: Optional[ScheduleRepository] = None,
    ):
        self._schedules = schedules
        self._store = store or schedules
        self._directory = directory

    def create_slot(
        self,
        *,
        current_role: Role,
        tenant_id: str,
        grade: int,
        section: str,
        day: Weekday | str,
        period: int,
        start_time: TimeLike,
        end_time: TimeLike,
        subject_id: str,
        teacher_id: str,
    ) -> ScheduleSlot:
        require_role(current_role, Role.ADMIN)
        tenant_id = require_tenant(tenant_id)

        grade = require_positive_int(grade, "grade")
        section = require_non_empty(section, "section").upper()
        day = require_weekday(day)
        period = require_positive_int(period, "period")
        if period > MAX_PERIOD:
            raise ValidationError(f"period must be at most {MAX_PERIOD}")
        subject_id = require_non_empty(subject_id, "subject")
        teacher_id = require_non_empty(teacher_id, "teacher")
        start = to_time(start_time)
        end = to_time(end_time)

        if not start < end:
            raise ValidationError("end time must be after start time")

        occupying = self._store.find_by_slot_key(
            tenant_id=tenant_id, grade=grade, section=section, day=day, period=period
        )
        if occupying:
            logger.info("slot %s-%s %s P%s rejected: occupied", grade, section, day.value, period)
            raise ConflictError(
                "slot occupied",
                reason=Reason.SLOT_OCCUPIED,
                details={
                    "slot_id": occupying.slot_id,
                    "subject_id": occupying.subject_id,
                    "subject": self._subject_name(tenant_id, occupying),
                    "teacher_id": occupying.teacher_id,
                    "time": format_range(occupying.start_time, occupying.end_time),
                },
            )

        for existing in self._store.find_by_teacher_and_day(tenant_id=tenant_id, teacher_id=teacher_id, day=day):
            if overlaps(start, end, existing.start_time, existing.end_time):
                logger.info("teacher %s unavailable on %s %s", teacher_id, day.value, format_range(start, end))
                raise ConflictError(
                    "teacher unavailable",
                    reason=Reason.TEACHER_UNAVAILABLE,
                    details={
                        "slot_id": existing.slot_id,
                        "grade": existing.grade,
                        "section": existing.section,
                        "period": existing.period,
                        "start_time": format_time(existing.start_time),
                        "end_time": format_time(existing.end_time),
                    },
                )

        created = self._schedules.insert(
            ScheduleSlot(
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
        )
        logger.info(
            "slot %s created: %s-%s %s P%s %s teacher=%s",
            created.slot_id, grade, section, day.value, period, format_range(start, end), teacher_id,
        )
        self._warn_if_double_booked(created)
        return self._with_names(created)

    def delete_slot(self, *, current_role: Role, tenant_id: str, slot_id: int) -> None:
        require_role(current_role, Role.ADMIN)
        tenant_id = require_tenant(tenant_id)

        self._schedules.delete(tenant_id=tenant_id, slot_id=int(slot_id))
        logger.info("slot %s deleted (school=%s)", slot_id, tenant_id)

    def list_slots(self, *, current_role: Role, tenant_id: str) -> Sequence[ScheduleSlot]:
        require_role(current_role, Role.ADMIN)
        tenant_id = require_tenant(tenant_id)
        return [self._with_names(s) for s in self._schedules.list_by_tenant(tenant_id=tenant_id)]

    def get_slot(self, *, current_role: Role, tenant_id: str, slot_id: int) -> ScheduleSlot:
        require_role(current_role, Role.ADMIN)
        tenant_id = require_tenant(tenant_id)
        slot = self._schedules.find_by_id(tenant_id=tenant_id, slot_id=int(slot_id))
        if not slot:
            raise NotFoundError("schedule slot not found", details={"slot_id": int(slot_id)})
        return self._with_names(slot)

    def find_teacher_overlaps(self, *, current_role: Role, tenant_id: str) -> list[tuple[ScheduleSlot, ScheduleSlot]]:
        """Pairs of one teacher's slots on one day whose times overlap."""
        require_role(current_role, Role.ADMIN)
        tenant_id = require_tenant(tenant_id)

        by_teacher_day: dict[tuple[str, Weekday], list[ScheduleSlot]] = {}
        for slot in self._store.list_by_tenant(tenant_id=tenant_id):
            by_teacher_day.setdefault((slot.teacher_id, slot.day), []).append(slot)

        pairs: list[tuple[ScheduleSlot, ScheduleSlot]] = []
        for slots in by_teacher_day.values():
            slots.sort(key=lambda s: (s.start_time, s.period))
            for i, a in enumerate(slots):
                for b in slots[i + 1:]:
                    if overlaps(a.start_time, a.end_time, b.start_time, b.end_time):
                        pairs.append((a, b))
        return pairs

    def _warn_if_double_booked(self, created: ScheduleSlot) -> None:
        # A concurrent create for the same teacher may have passed its pre-check too.
        for other in self._store.find_by_teacher_and_day(
            tenant_id=created.tenant_id, teacher_id=created.teacher_id, day=created.day
        ):
            if other.slot_id == created.slot_id:
                continue
            if overlaps(created.start_time, created.end_time, other.start_time, other.end_time):
                logger.warning(
                    "teacher %s double-booked on %s: slot %s %s overlaps slot %s %s",
                    created.teacher_id,
                    created.day.value,
                    created.slot_id,
                    format_range(created.start_time, created.end_time),
                    other.slot_id,
                    format_range(other.start_time, other.end_time),
                )

    def _subject_name(self, tenant_id: str, slot: ScheduleSlot) -> str:
        if slot.subject_name:
            return slot.subject_name
        if self._directory:
            name = self._directory.subject_name(tenant_id=tenant_id, subject_id=slot.subject_id)
            if name:
                return name
        return slot.subject_id

    def _with_names(self, slot: ScheduleSlot) -> ScheduleSlot:
        if slot.subject_name and slot.teacher_name:
            return slot
        if not self._directory:
            return slot
        return replace(
            slot,
            subject_name=slot.subject_name
            or self._directory.subject_name(tenant_id=slot.tenant_id, subject_id=slot.subject_id),
            teacher_name=slot.teacher_name
            or self._directory.teacher_name(tenant_id=slot.tenant_id, teacher_id=slot.teacher_id),
        )
