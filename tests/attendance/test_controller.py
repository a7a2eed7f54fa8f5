from __future__ import annotations

import io
from datetime import datetime
from types import SimpleNamespace

import pytest
from flask import Flask
from PIL import Image

from src.practicum_attendance.practicum_attendance.attendance.controller import register
from src.practicum_attendance.practicum_attendance.attendance.service import AttendanceService
from src.practicum_attendance.practicum_attendance.core.constants import DEFAULT_HISTORY_LIMIT
from src.practicum_attendance.practicum_attendance.reports.service import AttendanceReportService


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(2026, 3, 2, hour, minute)


@pytest.fixture
def app(attendance_repo, agencies_repo, practicums_repo, clock, tmp_path):
    app = Flask(__name__)
    app.secret_key = "test-secret"
    app.config["TESTING"] = True
    app.config["UPLOAD_FOLDER"] = str(tmp_path)

    container = SimpleNamespace(
        attendance_service=AttendanceService(attendance_repo, agencies_repo, practicums_repo, clock=clock),
        report_service=AttendanceReportService(attendance_repo),
    )
    register(app, container)
    return app


@pytest.fixture
def client(app):
    client = app.test_client()
    with client.session_transaction() as s:
        s["user_id"] = 1
        s["role"] = "student"
    return client


def png_bytes() -> io.BytesIO:
    buf = io.BytesIO()
    Image.new("RGB", (4, 4), "white").save(buf, format="PNG")
    buf.seek(0)
    return buf


def test_requires_login(app):
    resp = app.test_client().post("/attendance/clock-in", json={"practicum_id": 10})

    assert resp.status_code == 401


def test_clock_in_returns_record(client, clock):
    clock.now = at(8, 30)

    resp = client.post("/attendance/clock-in", json={"practicum_id": 10, "location_type": "In-field"})

    body = resp.get_json()
    assert resp.status_code == 200
    assert body["success"] is True
    assert body["data"]["session_type"] == "morning"
    assert body["data"]["morning_time_in"] == "2026-03-02T08:30:00"
    assert body["data"]["time_in_remarks"] == "Late"
    assert body["data"]["time_in_location_type"] == "In-field"


def test_client_supplied_date_is_ignored(client, clock):
    clock.now = at(8)

    resp = client.post("/attendance/clock-in", json={"practicum_id": 10, "date": "2020-01-01", "time": "07:00"})

    assert resp.get_json()["data"]["work_date"] == "2026-03-02"


def test_photo_upload_is_saved(client, clock, tmp_path):
    clock.now = at(8)

    resp = client.post(
        "/attendance/clock-in",
        data={"practicum_id": "10", "photo": (png_bytes(), "selfie.png")},
        content_type="multipart/form-data",
    )

    photo = resp.get_json()["data"]["photo_in"]
    assert resp.status_code == 200
    assert photo.startswith("/uploads/") and photo.endswith("_selfie.png")
    assert (tmp_path / photo.rsplit("/", 1)[1]).exists()


def test_non_image_upload_is_rejected(client, clock):
    clock.now = at(8)

    resp = client.post(
        "/attendance/clock-in",
        data={"practicum_id": "10", "photo": (io.BytesIO(b"not an image"), "notes.txt")},
        content_type="multipart/form-data",
    )

    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Photo must be an image file"


def test_bad_enum_and_missing_practicum_are_400(client):
    assert client.post("/attendance/clock-in", json={"practicum_id": 10, "device_type": "Watch"}).status_code == 400
    assert client.post("/attendance/clock-in", json={}).status_code == 400


def test_non_operating_day_is_422(client, clock):
    clock.now = datetime(2026, 3, 7, 8, 0)

    resp = client.post("/attendance/clock-in", json={"practicum_id": 10})

    assert resp.status_code == 422
    assert "not an operating day" in resp.get_json()["message"]


def test_clock_out_without_record_is_404(client, clock):
    clock.now = at(12)

    assert client.post("/attendance/clock-out", json={"practicum_id": 10}).status_code == 404


def test_clock_out_and_today(client, clock):
    clock.now = at(8)
    client.post("/attendance/clock-in", json={"practicum_id": 10})
    clock.now = at(12)
    out = client.post("/attendance/clock-out", json={"practicum_id": 10})

    today = client.get("/attendance/today?practicum_id=10").get_json()["data"]

    assert out.status_code == 200
    assert today["morning_time_out"] == "2026-03-02T12:00:00"
    assert today["hours"] == 4.0


def test_student_cannot_read_other_students_history(client):
    assert client.get("/attendance/history?student_id=2").status_code == 403
    assert client.get("/attendance/history").status_code == 200


def test_stats(client, clock):
    clock.now = at(8)
    client.post("/attendance/clock-in", json={"practicum_id": 10})

    data = client.get("/attendance/stats").get_json()["data"]

    assert data["total_days"] == 1
    assert data["present_days"] == 1
    assert data["attendance_percentage"] == 100


def test_record_detail_includes_logs(client, clock):
    clock.now = at(8)
    record_id = client.post("/attendance/clock-in", json={"practicum_id": 10}).get_json()["data"]["record_id"]

    data = client.get(f"/attendance/{record_id}").get_json()["data"]

    assert data["record_id"] == record_id
    assert [log["session_type"] for log in data["detailed_logs"]] == ["morning"]
    assert client.get("/attendance/999").status_code == 404


def test_report_csv(client, clock):
    clock.now = at(8)
    client.post("/attendance/clock-in", json={"practicum_id": 10})
    clock.now = at(12)
    client.post("/attendance/clock-out", json={"practicum_id": 10})

    resp = client.get("/attendance/report.csv?start=2026-03-01&end=2026-03-07")

    text = resp.data.decode("utf-8-sig")
    assert resp.mimetype == "text/csv"
    assert "attendance_20260301_20260307.csv" in resp.headers["Content-Disposition"]
    assert text.splitlines()[0].startswith("work_date,day,student_id,student_name")
    assert "2026-03-02,Monday,1,Student 1" in text


def test_report_rejects_reversed_range(client):
    assert client.get("/attendance/report?start=2026-03-07&end=2026-03-01").status_code == 400


def test_report_range_defaults_to_server_clock_date(client, clock):
    clock.now = at(8)
    client.post("/attendance/clock-in", json={"practicum_id": 10})
    clock.now = at(12)
    client.post("/attendance/clock-out", json={"practicum_id": 10})

    resp = client.get("/attendance/report.csv")

    assert resp.headers["Content-Disposition"].endswith("_20260302.csv")
    assert "2026-03-02,Monday,1,Student 1" in resp.data.decode("utf-8-sig")


def test_history_limit_defaults_to_configured_constant():
    calls = {}

    def get_history(student_id, *, practicum_id=None, limit):
        calls.update(student_id=student_id, practicum_id=practicum_id, limit=limit)
        return []

    app = Flask(__name__)
    app.secret_key = "test-secret"
    register(app, SimpleNamespace(attendance_service=SimpleNamespace(get_history=get_history)))
    client = app.test_client()
    with client.session_transaction() as s:
        s["user_id"] = 1
        s["role"] = "student"

    assert client.get("/attendance/history").status_code == 200
    assert calls == {"student_id": 1, "practicum_id": None, "limit": DEFAULT_HISTORY_LIMIT}

    client.get("/attendance/history?limit=5")
    assert calls["limit"] == 5
