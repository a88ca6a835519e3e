from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.school_timetable.school_timetable.core.logging import setup_logging
from src.school_timetable.school_timetable.database.bootstrap import apply_seed_sql
from src.school_timetable.school_timetable.database.connection import DBConfig

logger = logging.getLogger("scripts.seed_db")


def main() -> None:
    setup_logging("INFO")
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
    logger.info("seeded demo school -> %s", DBConfig.from_mapping(db_config).describe())


if __name__ == "__main__":
    main()
