from __future__ import annotations

from datetime import datetime
from typing import Callable

from flask import Flask, g, jsonify

from ..common.datetime_utils import now_local
from ..common.web import caller_required
from ..container import Container
from ..core.enums import Role
from .model import DashboardStats


def register(app: Flask, container: Container, *, clock: Callable[[], datetime] = now_local) -> None:
    @app.route("/api/teacher/dashboard", methods=["GET"], endpoint="teacher_dashboard")
    @caller_required(Role.TEACHER)
    def teacher_dashboard():
        now = clock()
        projector = container.dashboard_projector
        kwargs = {"tenant_id": g.caller.tenant_id, "teacher_id": g.caller.user_id, "now": now}

        progress = projector.today_progress(**kwargs)
        current = projector.current_class(**kwargs)

        return jsonify(
            {
                "success": True,
                "stats": DashboardStats.from_progress(progress).to_dict(),
                "schedule": [p.to_dict() for p in progress],
                "currentClass": current.to_dict() if current else None,
            }
        )
