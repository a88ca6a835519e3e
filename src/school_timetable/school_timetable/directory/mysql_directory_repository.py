from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .repository import DirectoryRepository


class MySQLDirectoryRepository(DirectoryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def subject_name(self, *, tenant_id: str, subject_id: str) -> Optional[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT name FROM subjects WHERE school_id=%s AND subject_id=%s",
                (tenant_id, subject_id),
            )
            r = fetchone(cur)
            return r["name"] if r else None

    def teacher_name(self, *, tenant_id: str, teacher_id: str) -> Optional[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT CONCAT_WS(' ', first_name, last_name) AS full_name
                FROM teachers
                WHERE school_id=%s AND teacher_id=%s
                """,
                (tenant_id, teacher_id),
            )
            r = fetchone(cur)
            return r["full_name"] if r else None
