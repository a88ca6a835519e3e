from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

from ..common.validators import require_context, require_positive_int, require_role
from ..core.constants import DEFAULT_HISTORY_LIMIT, MAX_HISTORY_LIMIT
from ..core.enums import AttendanceStatus, Reason, Role
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..schedules.model import ScheduleSlot
from ..schedules.repository import ScheduleRepository
from .gate import AttendanceGate
from .model import AttendanceRecord, ClassInfo, ClassOccurrenceKey
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceRecorder:
    """The only writer of attendance records.

    Eligibility comes from the gate; at-most-once per class occurrence is
    pre-checked here and enforced by the store's unique batch key.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        schedules: ScheduleRepository,
        *,
        gate: AttendanceGate | None = None,
    ):
        self._attendance = attendance
        self._schedules = schedules
        self._gate = gate or AttendanceGate()

    def _resolve_slot(self, *, tenant_id: str, teacher_id: str, slot_id: Any) -> ScheduleSlot:
        try:
            slot_id = int(slot_id)
        except (TypeError, ValueError):
            raise ValidationError("invalid class id")

        slot = self._schedules.find_by_id(tenant_id=tenant_id, slot_id=slot_id)
        if not slot or slot.teacher_id != teacher_id:
            raise NotFoundError("class not found or not assigned to you", details={"slot_id": slot_id})
        return slot

    @staticmethod
    def _parse_statuses(statuses: Optional[Mapping[Any, Any]]) -> dict[str, AttendanceStatus]:
        if statuses is None:
            raise ValidationError("attendance is required")
        if not isinstance(statuses, Mapping):
            raise ValidationError("attendance must map student ids to statuses")

        parsed: dict[str, AttendanceStatus] = {}
        for student_id, raw in statuses.items():
            sid = str(student_id or "").strip()
            if not sid:
                raise ValidationError("student id is required")
            try:
                parsed[sid] = AttendanceStatus(str(raw or "").strip().lower())
            except ValueError:
                raise ValidationError(
                    f"invalid status for student {sid}: {raw!r}",
                    details={"student_id": sid, "allowed": [s.value for s in AttendanceStatus]},
                )
        return parsed

    def class_info(
        self,
        *,
        current_role: Role,
        tenant_id: str,
        teacher_id: str,
        slot_id: int,
        now: datetime,
    ) -> ClassInfo:
        require_role(current_role, Role.TEACHER)
        tenant_id, teacher_id = require_context(tenant_id, teacher_id)

        slot = self._resolve_slot(tenant_id=tenant_id, teacher_id=teacher_id, slot_id=slot_id)
        decision = self._gate.evaluate(slot, now)
        already_marked = self._attendance.exists_batch(ClassOccurrenceKey.for_slot(slot, now.date()))

        return ClassInfo(
            slot=slot,
            eligible=decision.eligible,
            reason=decision.reason,
            ms_remaining=decision.ms_remaining,
            already_marked=already_marked,
        )

    def submit(
        self,
        *,
        current_role: Role,
        tenant_id: str,
        teacher_id: str,
        slot_id: int,
        now: datetime,
        statuses: Mapping[str, Any],
    ) -> int:
        """Record one status per student for the slot's occurrence today.

        Returns the number of rows written. An empty mapping is accepted and
        writes nothing; the occurrence stays open for marking.
        """
        require_role(current_role, Role.TEACHER)
        tenant_id, teacher_id = require_context(tenant_id, teacher_id)

        slot = self._resolve_slot(tenant_id=tenant_id, teacher_id=teacher_id, slot_id=slot_id)

        decision = self._gate.evaluate(slot, now)
        if not decision.eligible:
            logger.info("attendance for slot %s rejected at %s: %s", slot.slot_id, now.isoformat(), decision.message)
            raise ValidationError(decision.message, reason=decision.reason, details={"slot_id": slot.slot_id})

        parsed = self._parse_statuses(statuses)

        key = ClassOccurrenceKey.for_slot(slot, now.date())
        if self._attendance.exists_batch(key):
            logger.info("attendance for slot %s on %s already marked", slot.slot_id, key.class_date)
            raise ConflictError(
                "already marked today",
                reason=Reason.ALREADY_MARKED,
                details={"slot_id": slot.slot_id, "date": key.class_date.isoformat()},
            )

        if not parsed:
            # Nothing recorded, so a retry with the real roster is still accepted.
            logger.warning("empty attendance submitted for slot %s on %s", slot.slot_id, key.class_date)
            return 0

        written = self._attendance.create_batch(key, marked_at=now, statuses=parsed)
        logger.info(
            "attendance marked: slot=%s teacher=%s period=%s date=%s rows=%s",
            slot.slot_id, teacher_id, slot.period, key.class_date, written,
        )
        return written

    def history(
        self,
        *,
        current_role: Role,
        tenant_id: str,
        teacher_id: str,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> Sequence[AttendanceRecord]:
        """Newest first; `limit` must be at least 1 and is capped at MAX_HISTORY_LIMIT."""
        require_role(current_role, Role.TEACHER)
        tenant_id, teacher_id = require_context(tenant_id, teacher_id)
        limit = min(require_positive_int(limit, "limit"), MAX_HISTORY_LIMIT)
        return self._attendance.list_for_teacher(tenant_id=tenant_id, teacher_id=teacher_id, limit=limit)
