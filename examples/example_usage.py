"""Example: drive the service layer directly, without Flask.

Builds a slot, checks the marking window and submits attendance against the
database configured for the current APP_ENV.
"""

import importlib
from datetime import datetime

from config import get_settings_module

from src.school_timetable.school_timetable.container import build_container
from src.school_timetable.school_timetable.core.enums import Role
from src.school_timetable.school_timetable.core.exceptions import DomainError


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    try:
        slot = container.schedule_allocator.create_slot(
            current_role=Role.ADMIN,
            tenant_id="school-demo",
            grade=9,
            section="A",
            day="Monday",
            period=3,
            start_time="09:00",
            end_time="09:45",
            subject_id="sub-math",
            teacher_id="t-001",
        )
    except DomainError as e:
        print(f"create failed: {e.message} {e.details}")
        return

    now = datetime(2026, 10, 19, 9, 10)  # a Monday
    info = container.attendance_recorder.class_info(
        current_role=Role.TEACHER, tenant_id="school-demo", teacher_id="t-001", slot_id=slot.slot_id, now=now
    )
    print(info.to_dict())


if __name__ == "__main__":
    main()
