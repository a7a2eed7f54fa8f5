from __future__ import annotations

from dataclasses import replace
from datetime import date
from enum import Enum
from typing import Any, Optional, Sequence

from ..core.enums import (
    ApprovalStatus,
    AttendanceStatus,
    DeviceType,
    LocationType,
    Remark,
    SessionType,
)
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_float, db_cursor, fetchall, fetchone
from .model import AttendanceRecord, AttendanceReportRow, DetailedAttendanceLog
from .repository import AttendanceRepository

# Columns written by create/save, in INSERT order.
_RECORD_COLUMNS = (
    "student_id",
    "practicum_id",
    "work_date",
    "day",
    "morning_time_in",
    "morning_time_out",
    "afternoon_time_in",
    "afternoon_time_out",
    "overtime_time_in",
    "overtime_time_out",
    "session_type",
    "hours",
    "undertime_hours",
    "status",
    "approval_status",
    "time_in_remarks",
    "time_out_remarks",
    "latitude",
    "longitude",
    "address",
    "photo_in",
    "photo_out",
    "time_in_location_type",
    "time_in_device_type",
    "time_in_device_unit",
    "time_in_mac_address",
    "time_out_location_type",
    "time_out_device_type",
    "time_out_device_unit",
    "time_out_mac_address",
)

_LOG_COLUMNS = (
    "record_id",
    "session_type",
    "created_at",
    "time_in_remarks",
    "photo_in",
    "time_in_location_type",
    "time_in_device_type",
    "time_in_device_unit",
    "time_in_mac_address",
    "time_in_exact_location",
    "time_out_remarks",
    "photo_out",
    "time_out_location_type",
    "time_out_device_type",
    "time_out_device_unit",
    "time_out_mac_address",
    "time_out_exact_location",
    "status",
)

_RECORD_SELECT = "ar.record_id, " + ", ".join(f"ar.{c}" for c in _RECORD_COLUMNS)


def _enum(cls, value):
    return cls(value) if value is not None else None


def _db_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=int(r["record_id"]),
        student_id=int(r["student_id"]),
        practicum_id=int(r["practicum_id"]),
        work_date=r["work_date"],
        day=r["day"],
        morning_time_in=r.get("morning_time_in"),
        morning_time_out=r.get("morning_time_out"),
        afternoon_time_in=r.get("afternoon_time_in"),
        afternoon_time_out=r.get("afternoon_time_out"),
        overtime_time_in=r.get("overtime_time_in"),
        overtime_time_out=r.get("overtime_time_out"),
        session_type=_enum(SessionType, r.get("session_type")),
        hours=as_float(r.get("hours")),
        undertime_hours=as_float(r.get("undertime_hours")),
        status=AttendanceStatus(r["status"]),
        approval_status=ApprovalStatus(r["approval_status"]),
        time_in_remarks=_enum(Remark, r.get("time_in_remarks")),
        time_out_remarks=_enum(Remark, r.get("time_out_remarks")),
        latitude=as_float(r.get("latitude")),
        longitude=as_float(r.get("longitude")),
        address=r.get("address"),
        photo_in=r.get("photo_in"),
        photo_out=r.get("photo_out"),
        time_in_location_type=_enum(LocationType, r.get("time_in_location_type")),
        time_in_device_type=_enum(DeviceType, r.get("time_in_device_type")),
        time_in_device_unit=r.get("time_in_device_unit"),
        time_in_mac_address=r.get("time_in_mac_address"),
        time_out_location_type=_enum(LocationType, r.get("time_out_location_type")),
        time_out_device_type=_enum(DeviceType, r.get("time_out_device_type")),
        time_out_device_unit=r.get("time_out_device_unit"),
        time_out_mac_address=r.get("time_out_mac_address"),
    )


def _to_log(r: dict) -> DetailedAttendanceLog:
    return DetailedAttendanceLog(
        log_id=int(r["log_id"]),
        record_id=int(r["record_id"]),
        session_type=SessionType(r["session_type"]),
        created_at=r["created_at"],
        time_in_remarks=Remark(r["time_in_remarks"]),
        photo_in=r.get("photo_in"),
        time_in_location_type=LocationType(r["time_in_location_type"]),
        time_in_device_type=DeviceType(r["time_in_device_type"]),
        time_in_device_unit=r.get("time_in_device_unit"),
        time_in_mac_address=r.get("time_in_mac_address"),
        time_in_exact_location=r.get("time_in_exact_location"),
        time_out_remarks=_enum(Remark, r.get("time_out_remarks")),
        photo_out=r.get("photo_out"),
        time_out_location_type=_enum(LocationType, r.get("time_out_location_type")),
        time_out_device_type=_enum(DeviceType, r.get("time_out_device_type")),
        time_out_device_unit=r.get("time_out_device_unit"),
        time_out_mac_address=r.get("time_out_mac_address"),
        time_out_exact_location=r.get("time_out_exact_location"),
        status=ApprovalStatus(r["status"]),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_RECORD_SELECT} FROM attendance_records ar WHERE ar.record_id=%s",
                (int(record_id),),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_for_student_and_date(
        self, student_id: int, practicum_id: int, work_date: date
    ) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_SELECT}
                FROM attendance_records ar
                WHERE ar.student_id=%s AND ar.practicum_id=%s AND ar.work_date=%s
                """,
                (int(student_id), int(practicum_id), work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_for_student(
        self,
        student_id: int,
        *,
        practicum_id: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["ar.student_id=%s"]
        params: list[object] = [int(student_id)]
        if practicum_id is not None:
            clauses.append("ar.practicum_id=%s")
            params.append(int(practicum_id))

        sql = f"""
            SELECT {_RECORD_SELECT}
            FROM attendance_records ar
            WHERE {" AND ".join(clauses)}
            ORDER BY ar.work_date DESC
        """
        if limit is not None:
            sql += " LIMIT %s"
            params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_record(r) for r in fetchall(cur)]

    def _insert_record(self, cur, record: AttendanceRecord) -> int:
        placeholders = ",".join(["%s"] * len(_RECORD_COLUMNS))
        cur.execute(
            f"INSERT INTO attendance_records({', '.join(_RECORD_COLUMNS)}) VALUES({placeholders})",
            tuple(_db_value(getattr(record, c)) for c in _RECORD_COLUMNS),
        )
        return int(cur.lastrowid)

    def _update_record(self, cur, record: AttendanceRecord) -> None:
        assignments = ", ".join(f"{c}=%s" for c in _RECORD_COLUMNS)
        cur.execute(
            f"UPDATE attendance_records SET {assignments} WHERE record_id=%s",
            tuple(_db_value(getattr(record, c)) for c in _RECORD_COLUMNS) + (int(record.record_id),),
        )

    def _insert_log(self, cur, log: DetailedAttendanceLog) -> int:
        placeholders = ",".join(["%s"] * len(_LOG_COLUMNS))
        cur.execute(
            f"INSERT INTO detailed_attendance_logs({', '.join(_LOG_COLUMNS)}) VALUES({placeholders})",
            tuple(_db_value(getattr(log, c)) for c in _LOG_COLUMNS),
        )
        return int(cur.lastrowid)

    def _update_log(self, cur, log: DetailedAttendanceLog) -> None:
        assignments = ", ".join(f"{c}=%s" for c in _LOG_COLUMNS)
        cur.execute(
            f"UPDATE detailed_attendance_logs SET {assignments} WHERE log_id=%s",
            tuple(_db_value(getattr(log, c)) for c in _LOG_COLUMNS) + (int(log.log_id),),
        )

    def create_record(self, record: AttendanceRecord) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._insert_record(cur, record)

    def save_clock_in(self, record: AttendanceRecord, log: DetailedAttendanceLog) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            if record.record_id:
                record_id = int(record.record_id)
                self._update_record(cur, record)
            else:
                record_id = self._insert_record(cur, record)
            self._insert_log(cur, replace(log, record_id=record_id))
            return record_id

    def save_clock_out(self, record: AttendanceRecord, log: Optional[DetailedAttendanceLog]) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            self._update_record(cur, record)
            if log is not None:
                self._update_log(cur, log)

    def clear_sessions(self, *, record_id: int, sessions: Sequence[SessionType]) -> bool:
        if not sessions:
            return False
        assignments = ", ".join(f"{s.value}_time_in=NULL, {s.value}_time_out=NULL" for s in sessions)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE attendance_records SET {assignments} WHERE record_id=%s",
                (int(record_id),),
            )
            return cur.rowcount > 0

    def get_latest_detailed_log(
        self, *, record_id: int, session_type: SessionType
    ) -> Optional[DetailedAttendanceLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT log_id, {", ".join(_LOG_COLUMNS)}
                FROM detailed_attendance_logs
                WHERE record_id=%s AND session_type=%s
                ORDER BY created_at DESC, log_id DESC
                LIMIT 1
                """,
                (int(record_id), session_type.value),
            )
            r = fetchone(cur)
            return _to_log(r) if r else None

    def list_detailed_logs(self, record_id: int) -> Sequence[DetailedAttendanceLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT log_id, {", ".join(_LOG_COLUMNS)}
                FROM detailed_attendance_logs
                WHERE record_id=%s
                ORDER BY created_at ASC, log_id ASC
                """,
                (int(record_id),),
            )
            return [_to_log(r) for r in fetchall(cur)]

    def get_report_rows(
        self,
        *,
        start_date: date,
        end_date: date,
        student_id: Optional[int] = None,
        practicum_id: Optional[int] = None,
    ) -> Sequence[AttendanceReportRow]:
        clauses = ["ar.work_date BETWEEN %s AND %s"]
        params: list[object] = [start_date, end_date]

        if student_id is not None:
            clauses.append("ar.student_id=%s")
            params.append(int(student_id))
        if practicum_id is not None:
            clauses.append("ar.practicum_id=%s")
            params.append(int(practicum_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT
                    {_RECORD_SELECT},
                    u.full_name, u.student_number,
                    a.name AS agency_name
                FROM attendance_records ar
                JOIN users u ON u.user_id = ar.student_id
                LEFT JOIN practicums p ON p.practicum_id = ar.practicum_id
                LEFT JOIN agencies a ON a.agency_id = p.agency_id
                WHERE {where}
                ORDER BY ar.work_date DESC, ar.student_id ASC
                """,
                tuple(params),
            )
            rows = fetchall(cur)

            return [
                AttendanceReportRow(
                    record=_to_record(r),
                    student_name=r["full_name"],
                    student_number=r.get("student_number"),
                    agency_name=r.get("agency_name"),
                )
                for r in rows
            ]
