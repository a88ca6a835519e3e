from __future__ import annotations

from dataclasses import replace
from typing import Any, Optional, Sequence

import mysql.connector

from ..core.enums import Reason, Weekday
from ..core.exceptions import ConflictError, NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import ScheduleSlot
from .repository import ScheduleRepository

_SELECT = """
    SELECT
        sc.slot_id, sc.school_id, sc.grade, sc.section, sc.day, sc.period_num,
        sc.start_time, sc.end_time, sc.subject_id, sc.teacher_id,
        sub.name AS subject_name,
        CONCAT_WS(' ', t.first_name, t.last_name) AS teacher_name
    FROM schedule_slots sc
    LEFT JOIN subjects sub ON sub.subject_id = sc.subject_id AND sub.school_id = sc.school_id
    LEFT JOIN teachers t ON t.teacher_id = sc.teacher_id AND t.school_id = sc.school_id
"""

_DAY_ORDER = "FIELD(sc.day, 'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday')"


def _to_slot(r: dict[str, Any]) -> ScheduleSlot:
    return ScheduleSlot(
        slot_id=int(r["slot_id"]),
        tenant_id=str(r["school_id"]),
        grade=int(r["grade"]),
        section=str(r["section"]),
        day=Weekday(r["day"]),
        period=int(r["period_num"]),
        start_time=normalize_mysql_time(r["start_time"]),
        end_time=normalize_mysql_time(r["end_time"]),
        subject_id=str(r["subject_id"]),
        teacher_id=str(r["teacher_id"]),
        subject_name=r.get("subject_name") or None,
        teacher_name=r.get("teacher_name") or None,
    )


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_by_slot_key(
        self, *, tenant_id: str, grade: int, section: str, day: Weekday, period: int
    ) -> Optional[ScheduleSlot]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT
                + """
                WHERE sc.school_id=%s AND sc.grade=%s AND sc.section=%s AND sc.day=%s AND sc.period_num=%s
                """,
                (tenant_id, int(grade), section, day.value, int(period)),
            )
            r = fetchone(cur)
            return _to_slot(r) if r else None

    def find_by_id(self, *, tenant_id: str, slot_id: int) -> Optional[ScheduleSlot]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE sc.school_id=%s AND sc.slot_id=%s", (tenant_id, int(slot_id)))
            r = fetchone(cur)
            return _to_slot(r) if r else None

    def find_by_teacher_and_day(self, *, tenant_id: str, teacher_id: str, day: Weekday) -> Sequence[ScheduleSlot]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT
                + """
                WHERE sc.school_id=%s AND sc.teacher_id=%s AND sc.day=%s
                ORDER BY sc.start_time ASC, sc.period_num ASC
                """,
                (tenant_id, teacher_id, day.value),
            )
            return [_to_slot(r) for r in fetchall(cur)]

    def list_by_tenant(self, *, tenant_id: str) -> Sequence[ScheduleSlot]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT
                + f"""
                WHERE sc.school_id=%s
                ORDER BY {_DAY_ORDER} ASC, sc.period_num ASC, sc.grade ASC, sc.section ASC
                """,
                (tenant_id,),
            )
            return [_to_slot(r) for r in fetchall(cur)]

    def insert(self, slot: ScheduleSlot) -> ScheduleSlot:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO schedule_slots(
                        school_id, grade, section, day, period_num,
                        start_time, end_time, subject_id, teacher_id
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        slot.tenant_id,
                        int(slot.grade),
                        slot.section,
                        slot.day.value,
                        int(slot.period),
                        slot.start_time,
                        slot.end_time,
                        slot.subject_id,
                        slot.teacher_id,
                    ),
                )
                slot_id = int(cur.lastrowid)
        except mysql.connector.errors.IntegrityError:
            # uq_schedule_slot lost a race against a concurrent insert.
            raise ConflictError(
                "slot occupied",
                reason=Reason.SLOT_OCCUPIED,
                details={
                    "grade": slot.grade,
                    "section": slot.section,
                    "day": slot.day.value,
                    "period": slot.period,
                },
            )
        return replace(slot, slot_id=slot_id)

    def delete(self, *, tenant_id: str, slot_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM schedule_slots WHERE school_id=%s AND slot_id=%s", (tenant_id, int(slot_id)))
            deleted = cur.rowcount > 0
        if not deleted:
            raise NotFoundError("schedule slot not found", details={"slot_id": int(slot_id)})
