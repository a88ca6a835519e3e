from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import redis

from .attendance.gate import AttendanceGate
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceRecorder
from .core.constants import DEFAULT_CACHE_TTL_SECONDS, DEFAULT_GRACE_MINUTES
from .dashboard.service import DashboardProjector
from .database.connection import DBConfig, DatabaseConnection
from .directory.mysql_directory_repository import MySQLDirectoryRepository
from .directory.repository import DirectoryRepository
from .schedules.cached_schedule_repository import CachedScheduleRepository
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .schedules.repository import ScheduleRepository
from .schedules.service import ScheduleAllocator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Container:
    schedules_repo: ScheduleRepository
    attendance_repo: AttendanceRepository
    directory_repo: Optional[DirectoryRepository]

    gate: AttendanceGate
    schedule_allocator: ScheduleAllocator
    attendance_recorder: AttendanceRecorder
    dashboard_projector: DashboardProjector


def wire_container(
    *,
    schedules_repo: ScheduleRepository,
    attendance_repo: AttendanceRepository,
    directory_repo: Optional[DirectoryRepository] = None,
    schedules_store: Optional[ScheduleRepository] = None,
    grace_minutes: int = DEFAULT_GRACE_MINUTES,
) -> Container:
    """Build services over any repository implementations.

    `schedules_store` is the uncached store behind `schedules_repo` when the
    latter is a cache; slot conflict checks always read it.
    """
    gate = AttendanceGate(grace_minutes=int(grace_minutes))
    return Container(
        schedules_repo=schedules_repo,
        attendance_repo=attendance_repo,
        directory_repo=directory_repo,
        gate=gate,
        schedule_allocator=ScheduleAllocator(schedules_repo, directory_repo, store=schedules_store),
        attendance_recorder=AttendanceRecorder(attendance_repo, schedules_repo, gate=gate),
        dashboard_projector=DashboardProjector(schedules_repo, attendance_repo, gate=gate),
    )


def build_container(
    *,
    db_config: Mapping[str, Any],
    grace_minutes: int = DEFAULT_GRACE_MINUTES,
    cache_url: str = "",
    cache_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    store = MySQLScheduleRepository(conn)
    schedules_repo: ScheduleRepository = store
    if cache_url:
        schedules_repo = CachedScheduleRepository(
            store,
            redis.Redis.from_url(cache_url),
            ttl_seconds=cache_ttl_seconds,
        )
        logger.info("schedule cache enabled (ttl=%ss)", cache_ttl_seconds)

    return wire_container(
        schedules_repo=schedules_repo,
        attendance_repo=MySQLAttendanceRepository(conn),
        directory_repo=MySQLDirectoryRepository(conn),
        schedules_store=store,
        grace_minutes=grace_minutes,
    )
