from __future__ import annotations

from flask import Flask, g, jsonify, request

from ..container import Container
from ..common.web import caller_required
from ..core.enums import Role
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/admin/schedules", methods=["POST"], endpoint="admin_schedules_create")
    @caller_required(Role.ADMIN)
    def admin_schedules_create():
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("JSON body is required")

        required = ("grade", "section", "day", "periodNum", "startTime", "endTime", "subjectId", "teacherId")
        missing = [name for name in required if data.get(name) in (None, "")]
        if missing:
            raise ValidationError("All fields are required", details={"missing": missing})

        slot = container.schedule_allocator.create_slot(
            current_role=g.caller.role,
            tenant_id=g.caller.tenant_id,
            grade=data["grade"],
            section=data["section"],
            day=data["day"],
            period=data["periodNum"],
            start_time=data["startTime"],
            end_time=data["endTime"],
            subject_id=data["subjectId"],
            teacher_id=data["teacherId"],
        )
        return (
            jsonify({"success": True, "message": "Schedule created successfully", "schedule": slot.to_dict()}),
            201,
        )

    @app.route("/api/admin/schedules", methods=["GET"], endpoint="admin_schedules_list")
    @caller_required(Role.ADMIN)
    def admin_schedules_list():
        slots = container.schedule_allocator.list_slots(current_role=g.caller.role, tenant_id=g.caller.tenant_id)
        return jsonify({"success": True, "schedules": [s.to_dict() for s in slots]})

    @app.route("/api/admin/schedules/<int:slot_id>", methods=["DELETE"], endpoint="admin_schedules_delete")
    @caller_required(Role.ADMIN)
    def admin_schedules_delete(slot_id: int):
        container.schedule_allocator.delete_slot(
            current_role=g.caller.role, tenant_id=g.caller.tenant_id, slot_id=slot_id
        )
        return jsonify({"success": True, "message": "Schedule deleted"})

    @app.route("/api/admin/schedules/overlaps", methods=["GET"], endpoint="admin_schedules_overlaps")
    @caller_required(Role.ADMIN)
    def admin_schedules_overlaps():
        pairs = container.schedule_allocator.find_teacher_overlaps(
            current_role=g.caller.role, tenant_id=g.caller.tenant_id
        )
        return jsonify(
            {
                "success": True,
                "overlaps": [{"first": a.to_dict(), "second": b.to_dict()} for a, b in pairs],
            }
        )
