from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Weekday
from .model import ScheduleSlot


class ScheduleRepository(Protocol):
    """Persistence for schedule slots.

    No business rules live here apart from the structural uniqueness of
    (tenant, grade, section, day, period).
    """

    def find_by_slot_key(
        self, *, tenant_id: str, grade: int, section: str, day: Weekday, period: int
    ) -> Optional[ScheduleSlot]:
        raise NotImplementedError

    def find_by_id(self, *, tenant_id: str, slot_id: int) -> Optional[ScheduleSlot]:
        raise NotImplementedError

    def find_by_teacher_and_day(self, *, tenant_id: str, teacher_id: str, day: Weekday) -> Sequence[ScheduleSlot]:
        """Slots ordered by start time."""

        raise NotImplementedError

    def list_by_tenant(self, *, tenant_id: str) -> Sequence[ScheduleSlot]:
        """All slots ordered by day, period, grade, section."""

        raise NotImplementedError

    def insert(self, slot: ScheduleSlot) -> ScheduleSlot:
        """Persist a slot and return it with its slot_id.

        Raises ConflictError when the slot key is already taken.
        """

        raise NotImplementedError

    def delete(self, *, tenant_id: str, slot_id: int) -> None:
        """Raises NotFoundError when the slot does not exist for the tenant."""

        raise NotImplementedError
