from __future__ import annotations

import csv
import io
import logging
import os
from dataclasses import asdict
from datetime import date, datetime, timedelta
from enum import Enum
from functools import wraps
from typing import Optional

from flask import Flask, current_app, jsonify, request, session
from PIL import Image, UnidentifiedImageError
from werkzeug.utils import secure_filename

from ..common.datetime_utils import parse_iso_date
from ..common.validators import optional_float, require_positive_int
from ..core.constants import DEFAULT_HISTORY_LIMIT, DEFAULT_REPORT_DAYS
from ..core.enums import DeviceType, LocationType, SessionType
from ..core.exceptions import (
    AuthorizationError,
    DomainError,
    NotFoundError,
    PolicyViolationError,
    ValidationError,
)
from ..container import Container
from .model import AttendanceRecord, ClockMetadata

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (NotFoundError, 404),
    (AuthorizationError, 403),
    (PolicyViolationError, 422),
    (ValidationError, 400),
)


def _jsonable(value):
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def record_to_dict(record: AttendanceRecord) -> dict:
    return {k: _jsonable(v) for k, v in asdict(record).items()}


def _parse_enum(cls, value, field_name: str):
    if value is None or value == "":
        return None
    try:
        return cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}")


def register(app: Flask, container: Container) -> None:
    def api_route(view):
        """Require a logged-in user and map domain errors to JSON responses."""

        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"success": False, "message": "Authentication required"}), 401
            try:
                return view(*args, **kwargs)
            except DomainError as e:
                code = next((c for cls, c in _STATUS_BY_ERROR if isinstance(e, cls)), 400)
                return jsonify({"success": False, "message": str(e)}), code
            except Exception:
                logger.exception("Unhandled error in %s", view.__name__)
                return jsonify({"success": False, "message": "Internal server error"}), 500

        return wrapper

    def _payload() -> dict:
        data = request.get_json(silent=True)
        if isinstance(data, dict):
            return data
        return request.form.to_dict()

    def _save_photo() -> Optional[str]:
        file = request.files.get("photo")
        if not file or not file.filename:
            return None

        try:
            Image.open(file.stream).verify()
        except (UnidentifiedImageError, OSError):
            raise ValidationError("Photo must be an image file")
        file.stream.seek(0)

        folder = current_app.config.get("UPLOAD_FOLDER", "uploads")
        os.makedirs(folder, exist_ok=True)
        filename = f"{datetime.now().strftime('%Y%m%d%H%M%S%f')}_{secure_filename(file.filename)}"
        file.save(os.path.join(folder, filename))
        return f"/uploads/{filename}"

    def _metadata(data: dict) -> ClockMetadata:
        # Client-supplied date/day/time are never read: the server clock decides.
        return ClockMetadata(
            latitude=optional_float(data.get("latitude"), "latitude"),
            longitude=optional_float(data.get("longitude"), "longitude"),
            address=data.get("address") or None,
            location_type=_parse_enum(LocationType, data.get("location_type"), "location_type"),
            device_type=_parse_enum(DeviceType, data.get("device_type"), "device_type"),
            device_unit=data.get("device_unit") or None,
            mac_address=data.get("mac_address") or None,
            photo_url=_save_photo() or data.get("photo_url") or None,
        )

    def _current_student() -> int:
        return int(session["user_id"])

    def _target_student(value) -> int:
        student_id = require_positive_int(value, "student_id") if value else _current_student()
        if session.get("role") == "student" and student_id != _current_student():
            raise AuthorizationError("You can only view your own attendance")
        return student_id

    @app.route("/attendance/clock-in", methods=["POST"], endpoint="attendance_clock_in")
    @api_route
    def clock_in():
        data = _payload()
        practicum_id = require_positive_int(data.get("practicum_id"), "practicum_id")
        record = container.attendance_service.clock_in(
            _current_student(), practicum_id, metadata=_metadata(data)
        )
        return jsonify({"success": True, "message": "Clock-in successful", "data": record_to_dict(record)}), 200

    @app.route("/attendance/clock-out", methods=["POST"], endpoint="attendance_clock_out")
    @api_route
    def clock_out():
        data = _payload()
        practicum_id = require_positive_int(data.get("practicum_id"), "practicum_id")
        record = container.attendance_service.clock_out(
            _current_student(),
            practicum_id,
            metadata=_metadata(data),
            session_hint=_parse_enum(SessionType, data.get("session_type"), "session_type"),
        )
        return jsonify({"success": True, "message": "Clock-out successful", "data": record_to_dict(record)}), 200

    @app.route("/attendance/today", methods=["GET"], endpoint="attendance_today")
    @api_route
    def today():
        practicum_id = require_positive_int(request.args.get("practicum_id"), "practicum_id")
        record = container.attendance_service.get_today_record(_current_student(), practicum_id)
        return jsonify(
            {
                "success": True,
                "message": "Today's attendance retrieved",
                "data": record_to_dict(record) if record else None,
            }
        )

    @app.route("/attendance/history", methods=["GET"], endpoint="attendance_history")
    @api_route
    def history():
        student_id = _target_student(request.args.get("student_id"))
        practicum_id = request.args.get("practicum_id")
        records = container.attendance_service.get_history(
            student_id,
            practicum_id=require_positive_int(practicum_id, "practicum_id") if practicum_id else None,
            limit=require_positive_int(request.args.get("limit", DEFAULT_HISTORY_LIMIT), "limit"),
        )
        return jsonify({"success": True, "data": [record_to_dict(r) for r in records]})

    @app.route("/attendance/stats", methods=["GET"], endpoint="attendance_stats")
    @api_route
    def stats():
        student_id = _target_student(request.args.get("student_id"))
        result = container.report_service.build_student_stats(student_id)
        return jsonify({"success": True, "message": "Attendance stats retrieved", "data": asdict(result)})

    def _report_from_args():
        end_raw = request.args.get("end")
        start_raw = request.args.get("start")
        try:
            end = parse_iso_date(end_raw) if end_raw else container.attendance_service.today()
            start = parse_iso_date(start_raw) if start_raw else end - timedelta(days=DEFAULT_REPORT_DAYS - 1)
        except ValueError:
            raise ValidationError("Dates must use YYYY-MM-DD")
        if start > end:
            raise ValidationError("start must not be after end")

        student_raw = request.args.get("student_id")
        practicum_raw = request.args.get("practicum_id")
        student_id = _target_student(student_raw) if student_raw or session.get("role") == "student" else None
        return container.report_service.build_hours_report(
            start=start,
            end=end,
            student_id=student_id,
            practicum_id=require_positive_int(practicum_raw, "practicum_id") if practicum_raw else None,
        ), start, end

    @app.route("/attendance/report", methods=["GET"], endpoint="attendance_report")
    @api_route
    def report():
        data, _, _ = _report_from_args()
        return jsonify({"success": True, "data": {"rows": data.rows, "summary": data.summary}})

    @app.route("/attendance/report.csv", methods=["GET"], endpoint="attendance_report_csv")
    @api_route
    def report_csv():
        data, start, end = _report_from_args()

        out = io.StringIO()
        writer = csv.DictWriter(
            out,
            fieldnames=[
                "work_date",
                "day",
                "student_id",
                "student_name",
                "student_number",
                "agency_name",
                "morning_in",
                "morning_out",
                "afternoon_in",
                "afternoon_out",
                "overtime_in",
                "overtime_out",
                "lunch_hours",
                "regular_hours",
                "overtime_hours",
                "undertime_hours",
                "status",
                "approval_status",
            ],
            extrasaction="ignore",
        )
        writer.writeheader()
        for row in data.rows:
            writer.writerow(row)

        filename = f"attendance_{start:%Y%m%d}_{end:%Y%m%d}.csv"
        return app.response_class(
            out.getvalue().encode("utf-8-sig"),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/attendance/<int:record_id>", methods=["GET"], endpoint="attendance_detail")
    @api_route
    def detail(record_id: int):
        details = container.attendance_service.get_record(record_id)
        if session.get("role") == "student" and details.record.student_id != _current_student():
            raise AuthorizationError("You can only view your own attendance")
        return jsonify(
            {
                "success": True,
                "data": {
                    **record_to_dict(details.record),
                    "detailed_logs": [{k: _jsonable(v) for k, v in asdict(log).items()} for log in details.logs],
                },
            }
        )
