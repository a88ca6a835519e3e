from __future__ import annotations

from datetime import date, datetime
from typing import Mapping, Sequence

import mysql.connector

from ..core.enums import AttendanceStatus, Reason
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceRecord, ClassOccurrenceKey
from .repository import AttendanceRepository


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def exists_batch(self, key: ClassOccurrenceKey) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT batch_id
                FROM attendance_batches
                WHERE school_id=%s AND teacher_id=%s AND subject_id=%s AND period_num=%s AND class_date=%s
                """,
                (key.tenant_id, key.teacher_id, key.subject_id, int(key.period), key.class_date),
            )
            return fetchone(cur) is not None

    def create_batch(
        self,
        key: ClassOccurrenceKey,
        *,
        marked_at: datetime,
        statuses: Mapping[str, AttendanceStatus],
    ) -> int:
        rows = [
            (
                key.tenant_id,
                str(student_id),
                key.teacher_id,
                key.subject_id,
                int(key.period),
                key.class_date,
                status.value,
                marked_at,
            )
            for student_id, status in statuses.items()
        ]

        try:
            # Marker and rows share one transaction; db_cursor rolls both back on error.
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_batches(school_id, teacher_id, subject_id, period_num, class_date, marked_at, records_count)
                    VALUES(%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        key.tenant_id,
                        key.teacher_id,
                        key.subject_id,
                        int(key.period),
                        key.class_date,
                        marked_at,
                        len(rows),
                    ),
                )
                batch_id = int(cur.lastrowid)
                if rows:
                    cur.executemany(
                        """
                        INSERT INTO attendance_records(
                            batch_id, school_id, student_id, teacher_id, subject_id,
                            period_num, class_date, status, marked_at
                        )
                        VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                        """,
                        [(batch_id, *row) for row in rows],
                    )
        except mysql.connector.errors.IntegrityError:
            raise ConflictError(
                "already marked today",
                reason=Reason.ALREADY_MARKED,
                details={"period": key.period, "date": key.class_date.isoformat()},
            )
        return len(rows)

    def marked_keys(self, *, tenant_id: str, teacher_id: str, class_date: date) -> set[tuple[str, int]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT subject_id, period_num
                FROM attendance_batches
                WHERE school_id=%s AND teacher_id=%s AND class_date=%s
                """,
                (tenant_id, teacher_id, class_date),
            )
            return {(str(r["subject_id"]), int(r["period_num"])) for r in fetchall(cur)}

    def list_for_teacher(self, *, tenant_id: str, teacher_id: str, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT
                    ar.record_id, ar.school_id, ar.student_id, ar.teacher_id, ar.subject_id,
                    ar.period_num, ar.class_date, ar.status, ar.marked_at,
                    sub.name AS subject_name
                FROM attendance_records ar
                LEFT JOIN subjects sub ON sub.subject_id = ar.subject_id AND sub.school_id = ar.school_id
                WHERE ar.school_id=%s AND ar.teacher_id=%s
                ORDER BY ar.class_date DESC, ar.period_num DESC, ar.student_id ASC
                LIMIT %s
                """,
                (tenant_id, teacher_id, int(limit)),
            )
            return [
                AttendanceRecord(
                    record_id=int(r["record_id"]),
                    tenant_id=str(r["school_id"]),
                    student_id=str(r["student_id"]),
                    teacher_id=str(r["teacher_id"]),
                    subject_id=str(r["subject_id"]),
                    period=int(r["period_num"]),
                    class_date=r["class_date"],
                    status=AttendanceStatus(r["status"]),
                    marked_at=r["marked_at"],
                    subject_name=r.get("subject_name"),
                )
                for r in fetchall(cur)
            ]
