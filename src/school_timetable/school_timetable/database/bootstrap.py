from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Iterable, Mapping

from .connection import DBConfig, DatabaseConnection

logger = logging.getLogger(__name__)

_CREATE_DB = re.compile(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$")
_USE_DB = re.compile(r"(?im)^\s*USE\b.*?;\s*$")


def _strip_database_statements(sql: str) -> str:
    # The target database comes from DB_CONFIG, not from the script.
    return _USE_DB.sub("", _CREATE_DB.sub("", sql))


def split_sql_statements(sql: str) -> Iterable[str]:
    """Split a script on ';' outside of quoted strings."""
    buf: list[str] = []
    quote: str | None = None
    escaped = False

    for ch in sql:
        buf.append(ch)
        if escaped:
            escaped = False
        elif ch == "\\":
            escaped = True
        elif quote:
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == ";":
            stmt = "".join(buf[:-1]).strip()
            buf.clear()
            if stmt:
                yield stmt

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _run_script(db_config: Mapping[str, Any], script: str) -> int:
    conn = DatabaseConnection(DBConfig.from_mapping(db_config)).connect()
    count = 0
    try:
        cur = conn.cursor()
        for stmt in split_sql_statements(_strip_database_statements(script)):
            cur.execute(stmt)
            count += 1
        conn.commit()
    finally:
        conn.close()
    return count


def ensure_database_exists(db_config: Mapping[str, Any]) -> None:
    target = DBConfig.from_mapping(db_config)
    conn = DatabaseConnection(target).connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: Mapping[str, Any], *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    count = _run_script(db_config, Path(schema_path).read_text(encoding="utf-8"))
    logger.info("schema applied: %s statements from %s", count, schema_path)


def apply_seed_sql(db_config: Mapping[str, Any], *, seed_path: str | Path) -> None:
    count = _run_script(db_config, Path(seed_path).read_text(encoding="utf-8"))
    logger.info("seed applied: %s statements from %s", count, seed_path)


def list_tables(db_config: Mapping[str, Any]) -> list[str]:
    conn = DatabaseConnection(DBConfig.from_mapping(db_config)).connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
