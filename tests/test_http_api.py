from __future__ import annotations

import pytest
from flask import Flask

from conftest import MONDAY, at

from src.school_timetable.school_timetable.attendance.controller import register as register_attendance
from src.school_timetable.school_timetable.common.web import register_error_handlers
from src.school_timetable.school_timetable.dashboard.controller import register as register_dashboard
from src.school_timetable.school_timetable.schedules.controller import register as register_schedules

ADMIN = {"X-User-Role": "admin", "X-User-Id": "A1", "X-School-Id": "school-1"}
TEACHER = {"X-User-Role": "teacher", "X-User-Id": "T1", "X-School-Id": "school-1"}


class Clock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return Clock(at(MONDAY, 9, 30))


@pytest.fixture
def client(container, clock):
    app = Flask(__name__)
    app.config["TESTING"] = True
    register_error_handlers(app)
    register_schedules(app, container)
    register_attendance(app, container, clock=clock)
    register_dashboard(app, container, clock=clock)

    @app.route("/boom")
    def boom():
        raise RuntimeError("boom")

    return app.test_client()


def _slot_body(**overrides):
    body = {
        "grade": 9,
        "section": "A",
        "day": "Monday",
        "periodNum": 3,
        "startTime": "09:00",
        "endTime": "09:45",
        "subjectId": "math",
        "teacherId": "T1",
    }
    body.update(overrides)
    return body


def test_admin_creates_and_lists_slots(client):
    res = client.post("/api/admin/schedules", json=_slot_body(), headers=ADMIN)

    assert res.status_code == 201
    created = res.get_json()["schedule"]
    assert created["subject"] == "Mathematics"
    assert created["startTime"] == "09:00"

    listed = client.get("/api/admin/schedules", headers=ADMIN).get_json()["schedules"]
    assert [s["id"] for s in listed] == [created["id"]]


def test_conflicts_map_to_409_with_reason(client):
    client.post("/api/admin/schedules", json=_slot_body(), headers=ADMIN)

    occupied = client.post("/api/admin/schedules", json=_slot_body(teacherId="T2"), headers=ADMIN)
    busy = client.post(
        "/api/admin/schedules",
        json=_slot_body(grade=10, section="B", periodNum=4, startTime="09:30", endTime="10:15"),
        headers=ADMIN,
    )

    assert occupied.status_code == 409
    assert occupied.get_json()["reason"] == "SLOT_OCCUPIED"
    assert busy.status_code == 409
    assert busy.get_json()["reason"] == "TEACHER_UNAVAILABLE"
    assert busy.get_json()["details"]["section"] == "A"


def test_missing_fields_are_a_400(client):
    res = client.post("/api/admin/schedules", json={"grade": 9}, headers=ADMIN)

    assert res.status_code == 400
    assert "teacherId" in res.get_json()["details"]["missing"]


def test_identity_headers_are_required(client):
    assert client.get("/api/admin/schedules").status_code == 403
    assert client.get("/api/admin/schedules", headers=TEACHER).status_code == 403
    assert client.get("/api/admin/schedules", headers={**ADMIN, "X-School-Id": ""}).status_code == 403


def test_delete_slot_and_missing_slot(client):
    slot_id = client.post("/api/admin/schedules", json=_slot_body(), headers=ADMIN).get_json()["schedule"]["id"]

    assert client.delete(f"/api/admin/schedules/{slot_id}", headers=ADMIN).status_code == 200
    assert client.delete(f"/api/admin/schedules/{slot_id}", headers=ADMIN).status_code == 404


def test_overlap_report_is_empty_for_clean_timetable(client):
    client.post("/api/admin/schedules", json=_slot_body(), headers=ADMIN)

    res = client.get("/api/admin/schedules/overlaps", headers=ADMIN)

    assert res.status_code == 200
    assert res.get_json()["overlaps"] == []


def test_teacher_marks_attendance_once(client, clock):
    slot_id = client.post("/api/admin/schedules", json=_slot_body(), headers=ADMIN).get_json()["schedule"]["id"]

    info = client.get(f"/api/teacher/attendance/class/{slot_id}", headers=TEACHER).get_json()["classInfo"]
    assert info["canMarkAttendance"] is True
    assert info["timeRemaining"] == 21 * 60 * 1000

    body = {"classId": slot_id, "attendance": {"s1": "present", "s2": "absent"}}
    first = client.post("/api/teacher/attendance", json=body, headers=TEACHER)
    second = client.post("/api/teacher/attendance", json=body, headers=TEACHER)

    assert first.status_code == 200
    assert first.get_json()["recordsCreated"] == 2
    assert second.status_code == 409
    assert second.get_json()["reason"] == "ALREADY_MARKED"

    history = client.get("/api/teacher/attendance", headers=TEACHER).get_json()["attendance"]
    assert sorted(r["studentId"] for r in history) == ["s1", "s2"]


def test_late_submission_is_a_400_with_reason(client, clock):
    slot_id = client.post("/api/admin/schedules", json=_slot_body(), headers=ADMIN).get_json()["schedule"]["id"]
    clock.now = at(MONDAY, 9, 51)

    res = client.post(
        "/api/teacher/attendance", json={"classId": slot_id, "attendance": {"s1": "present"}}, headers=TEACHER
    )

    assert res.status_code == 400
    assert res.get_json()["reason"] == "WINDOW_EXPIRED"


def test_submission_without_class_id_is_a_400(client):
    res = client.post("/api/teacher/attendance", json={"attendance": {}}, headers=TEACHER)

    assert res.status_code == 400


def test_class_of_another_teacher_is_a_404(client):
    slot_id = client.post(
        "/api/admin/schedules", json=_slot_body(teacherId="T2"), headers=ADMIN
    ).get_json()["schedule"]["id"]

    res = client.get(f"/api/teacher/attendance/class/{slot_id}", headers=TEACHER)

    assert res.status_code == 404


def test_dashboard_shows_current_class_and_stats(client):
    client.post("/api/admin/schedules", json=_slot_body(), headers=ADMIN)
    client.post(
        "/api/admin/schedules",
        json=_slot_body(grade=10, periodNum=5, startTime="11:00", endTime="11:45", subjectId="phys"),
        headers=ADMIN,
    )

    data = client.get("/api/teacher/dashboard", headers=TEACHER).get_json()

    assert data["stats"] == {"classesToday": 2, "attendanceMarked": 0, "pendingAttendance": 2}
    assert [s["periodNum"] for s in data["schedule"]] == [3, 5]
    assert data["currentClass"]["periodNum"] == 3


def test_unexpected_errors_are_a_generic_500(client):
    res = client.get("/boom")

    assert res.status_code == 500
    assert res.get_json() == {"success": False, "message": "Internal server error"}


def test_history_limit_must_be_positive(client):
    assert client.get("/api/teacher/attendance?limit=-1", headers=TEACHER).status_code == 400
    assert client.get("/api/teacher/attendance?limit=abc", headers=TEACHER).status_code == 400
    assert client.get("/api/teacher/attendance?limit=5", headers=TEACHER).status_code == 200


def test_empty_submission_does_not_block_the_real_one(client):
    slot_id = client.post("/api/admin/schedules", json=_slot_body(), headers=ADMIN).get_json()["schedule"]["id"]

    empty = client.post("/api/teacher/attendance", json={"classId": slot_id, "attendance": {}}, headers=TEACHER)
    real = client.post(
        "/api/teacher/attendance", json={"classId": slot_id, "attendance": {"s1": "present"}}, headers=TEACHER
    )

    assert empty.get_json()["recordsCreated"] == 0
    assert real.status_code == 200
    assert real.get_json()["recordsCreated"] == 1
