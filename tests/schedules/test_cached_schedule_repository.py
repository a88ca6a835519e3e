from __future__ import annotations

import pickle
from datetime import time

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from conftest import TENANT, make_slot

from src.school_timetable.school_timetable.container import wire_container
from src.school_timetable.school_timetable.core.enums import Reason, Role, Weekday
from src.school_timetable.school_timetable.core.exceptions import ConflictError
from src.school_timetable.school_timetable.schedules.cached_schedule_repository import CachedScheduleRepository
from src.school_timetable.school_timetable.schedules.service import ScheduleAllocator


class FakeRedis:
    def __init__(self):
        self.store: dict[str, bytes] = {}
        self.ttls: dict[str, int] = {}

    def get(self, key):
        return self.store.get(key)

    def setex(self, key, ttl, value):
        self.store[key] = value
        self.ttls[key] = ttl

    def delete(self, key):
        self.store.pop(key, None)


class DownRedis:
    def get(self, key):
        raise RedisConnectionError("down")

    def setex(self, key, ttl, value):
        raise RedisConnectionError("down")

    def delete(self, key):
        raise RedisConnectionError("down")


def _day(repo):
    return repo.find_by_teacher_and_day(tenant_id=TENANT, teacher_id="T1", day=Weekday.MONDAY)


def test_teacher_day_is_served_from_cache(schedules_repo):
    client = FakeRedis()
    repo = CachedScheduleRepository(schedules_repo, client, ttl_seconds=60)
    schedules_repo.insert(make_slot())

    first = _day(repo)
    second = _day(repo)

    assert first == second
    assert len(first) == 1
    assert schedules_repo.teacher_day_queries == 1
    assert client.ttls["schedule:school-1:T1:Monday"] == 60


def test_insert_and_delete_invalidate_the_teacher_day(schedules_repo):
    repo = CachedScheduleRepository(schedules_repo, FakeRedis(), ttl_seconds=60)
    assert _day(repo) == []

    created = repo.insert(make_slot())
    assert [s.slot_id for s in _day(repo)] == [created.slot_id]

    repo.delete(tenant_id=TENANT, slot_id=created.slot_id)
    assert _day(repo) == []


def test_unreachable_cache_falls_back_to_the_store(schedules_repo, caplog):
    repo = CachedScheduleRepository(schedules_repo, DownRedis(), ttl_seconds=60)

    created = repo.insert(make_slot())

    assert [s.slot_id for s in _day(repo)] == [created.slot_id]
    assert "schedule cache" in caplog.text


def test_allocator_checks_teacher_overlap_against_the_store_not_the_cache(schedules_repo, attendance_repo, directory):
    client = FakeRedis()
    cached = CachedScheduleRepository(schedules_repo, client, ttl_seconds=60)
    container = wire_container(
        schedules_repo=cached,
        attendance_repo=attendance_repo,
        directory_repo=directory,
        schedules_store=schedules_repo,
    )
    # A reader cached the empty day just before another process inserted a class.
    schedules_repo.insert(make_slot(grade=9, section="A", period=3, start=time(9, 0), end=time(9, 45)))
    client.store[CachedScheduleRepository.cache_key(TENANT, "T1", Weekday.MONDAY)] = pickle.dumps([])

    with pytest.raises(ConflictError) as exc:
        container.schedule_allocator.create_slot(
            current_role=Role.ADMIN,
            tenant_id=TENANT,
            grade=10,
            section="B",
            day="Monday",
            period=4,
            start_time="09:30",
            end_time="10:15",
            subject_id="phys",
            teacher_id="T1",
        )

    assert exc.value.reason == Reason.TEACHER_UNAVAILABLE
    assert schedules_repo.count() == 1


def test_allocator_writes_still_invalidate_the_cache(schedules_repo, directory):
    client = FakeRedis()
    cached = CachedScheduleRepository(schedules_repo, client, ttl_seconds=60)
    allocator = ScheduleAllocator(cached, directory, store=schedules_repo)
    key = CachedScheduleRepository.cache_key(TENANT, "T1", Weekday.MONDAY)
    assert _day(cached) == []

    slot = allocator.create_slot(
        current_role=Role.ADMIN,
        tenant_id=TENANT,
        grade=9,
        section="A",
        day="Monday",
        period=3,
        start_time="09:00",
        end_time="09:45",
        subject_id="math",
        teacher_id="T1",
    )

    assert key not in client.store
    assert [s.slot_id for s in _day(cached)] == [slot.slot_id]
