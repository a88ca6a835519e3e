from __future__ import annotations

import logging
import pickle
from typing import Optional, Sequence

from redis.exceptions import RedisError

from ..core.constants import DEFAULT_CACHE_TTL_SECONDS
from ..core.enums import Weekday
from .model import ScheduleSlot
from .repository import ScheduleRepository

logger = logging.getLogger(__name__)


class CachedScheduleRepository(ScheduleRepository):
    """Read-through Redis cache for a teacher's day, in front of any ScheduleRepository.

    Only `find_by_teacher_and_day` is cached. Writes go straight to the wrapped
    store and drop the affected key; an unreachable cache falls back to the store.
    """

    def __init__(self, inner: ScheduleRepository, client, *, ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS):
        self._inner = inner
        self._client = client
        self._ttl = int(ttl_seconds)

    @staticmethod
    def cache_key(tenant_id: str, teacher_id: str, day: Weekday) -> str:
        return f"schedule:{tenant_id}:{teacher_id}:{day.value}"

    def _get(self, key: str) -> Optional[list[ScheduleSlot]]:
        try:
            raw = self._client.get(key)
        except RedisError as e:
            logger.warning("schedule cache read failed for %s: %s", key, e)
            return None
        if raw is None:
            return None
        return pickle.loads(raw)

    def _set(self, key: str, slots: list[ScheduleSlot]) -> None:
        try:
            self._client.setex(key, self._ttl, pickle.dumps(slots))
        except RedisError as e:
            logger.warning("schedule cache write failed for %s: %s", key, e)

    def _invalidate(self, slot: ScheduleSlot) -> None:
        key = self.cache_key(slot.tenant_id, slot.teacher_id, slot.day)
        try:
            self._client.delete(key)
        except RedisError as e:
            logger.warning("schedule cache invalidation failed for %s: %s", key, e)

    def find_by_slot_key(
        self, *, tenant_id: str, grade: int, section: str, day: Weekday, period: int
    ) -> Optional[ScheduleSlot]:
        return self._inner.find_by_slot_key(tenant_id=tenant_id, grade=grade, section=section, day=day, period=period)

    def find_by_id(self, *, tenant_id: str, slot_id: int) -> Optional[ScheduleSlot]:
        return self._inner.find_by_id(tenant_id=tenant_id, slot_id=slot_id)

    def find_by_teacher_and_day(self, *, tenant_id: str, teacher_id: str, day: Weekday) -> Sequence[ScheduleSlot]:
        key = self.cache_key(tenant_id, teacher_id, day)
        cached = self._get(key)
        if cached is not None:
            return cached

        slots = list(self._inner.find_by_teacher_and_day(tenant_id=tenant_id, teacher_id=teacher_id, day=day))
        self._set(key, slots)
        return slots

    def list_by_tenant(self, *, tenant_id: str) -> Sequence[ScheduleSlot]:
        return self._inner.list_by_tenant(tenant_id=tenant_id)

    def insert(self, slot: ScheduleSlot) -> ScheduleSlot:
        created = self._inner.insert(slot)
        self._invalidate(created)
        return created

    def delete(self, *, tenant_id: str, slot_id: int) -> None:
        existing = self._inner.find_by_id(tenant_id=tenant_id, slot_id=slot_id)
        self._inner.delete(tenant_id=tenant_id, slot_id=slot_id)
        if existing:
            self._invalidate(existing)
