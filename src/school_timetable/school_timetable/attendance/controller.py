from __future__ import annotations

from datetime import datetime
from typing import Callable

from flask import Flask, g, jsonify, request

from ..common.datetime_utils import now_local
from ..common.web import caller_required
from ..container import Container
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import Role
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container, *, clock: Callable[[], datetime] = now_local) -> None:
    @app.route("/api/teacher/attendance/class/<int:slot_id>", methods=["GET"], endpoint="teacher_class_info")
    @caller_required(Role.TEACHER)
    def teacher_class_info(slot_id: int):
        info = container.attendance_recorder.class_info(
            current_role=g.caller.role,
            tenant_id=g.caller.tenant_id,
            teacher_id=g.caller.user_id,
            slot_id=slot_id,
            now=clock(),
        )
        return jsonify({"success": True, "classInfo": info.to_dict()})

    @app.route("/api/teacher/attendance", methods=["POST"], endpoint="teacher_attendance_submit")
    @caller_required(Role.TEACHER)
    def teacher_attendance_submit():
        data = request.get_json(silent=True)
        if not isinstance(data, dict) or data.get("classId") in (None, ""):
            raise ValidationError("classId and attendance are required")

        created = container.attendance_recorder.submit(
            current_role=g.caller.role,
            tenant_id=g.caller.tenant_id,
            teacher_id=g.caller.user_id,
            slot_id=data["classId"],
            now=clock(),
            statuses=data.get("attendance"),
        )
        return jsonify({"success": True, "message": "Attendance marked successfully", "recordsCreated": created})

    @app.route("/api/teacher/attendance", methods=["GET"], endpoint="teacher_attendance_history")
    @caller_required(Role.TEACHER)
    def teacher_attendance_history():
        limit = request.args.get("limit", DEFAULT_HISTORY_LIMIT)
        records = container.attendance_recorder.history(
            current_role=g.caller.role,
            tenant_id=g.caller.tenant_id,
            teacher_id=g.caller.user_id,
            limit=limit,
        )
        return jsonify({"success": True, "attendance": [r.to_dict() for r in records]})
