from __future__ import annotations

from datetime import date, datetime
from typing import Mapping, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord, ClassOccurrenceKey


class AttendanceRepository(Protocol):
    def exists_batch(self, key: ClassOccurrenceKey) -> bool:
        raise NotImplementedError

    def create_batch(
        self,
        key: ClassOccurrenceKey,
        *,
        marked_at: datetime,
        statuses: Mapping[str, AttendanceStatus],
    ) -> int:
        """Write one row per student atomically, together with the batch marker.

        Returns the number of student rows written. Raises ConflictError when a
        batch already exists for the key; nothing is written in that case.
        """

        raise NotImplementedError

    def marked_keys(self, *, tenant_id: str, teacher_id: str, class_date: date) -> set[tuple[str, int]]:
        """(subject_id, period) pairs already marked by the teacher on a date."""

        raise NotImplementedError

    def list_for_teacher(self, *, tenant_id: str, teacher_id: str, limit: int) -> Sequence[AttendanceRecord]:
        """Newest first."""

        raise NotImplementedError
