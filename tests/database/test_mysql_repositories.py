from datetime import date, datetime, timedelta

import mysql.connector
import pytest

from src.practicum_attendance.practicum_attendance.agencies.mysql_agency_repository import MySQLAgencyRepository
from src.practicum_attendance.practicum_attendance.attendance.model import AttendanceRecord, DetailedAttendanceLog
from src.practicum_attendance.practicum_attendance.attendance.mysql_attendance_repository import (
    MySQLAttendanceRepository,
)
from src.practicum_attendance.practicum_attendance.core.enums import SessionType
from src.practicum_attendance.practicum_attendance.core.exceptions import PersistenceError


class ScriptedCursor:
    """Records every statement; fails on the first one containing ``fail_on``."""

    def __init__(self, *, rows=None, fail_on=None):
        self.executed = []
        self.rows = list(rows or [])
        self.fail_on = fail_on
        self.lastrowid = 0
        self.closed = False

    def execute(self, sql, params=None):
        if self.fail_on and self.fail_on in sql:
            raise mysql.connector.Error("Cannot add or update a child row")
        self.executed.append((" ".join(sql.split()), params))
        self.lastrowid += 40

    def fetchone(self):
        return self.rows.pop(0) if self.rows else None

    def close(self):
        self.closed = True


class ScriptedConnection:
    def __init__(self, cursor):
        self.cursor_obj = cursor
        self.commits = 0
        self.rolled_back = False
        self.closed = False

    def cursor(self, dictionary=True):
        return self.cursor_obj

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class ScriptedFactory:
    def __init__(self, cursor):
        self.conn = ScriptedConnection(cursor)

    def connect(self):
        return self.conn


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(2026, 3, 2, hour, minute)


def record(**kwargs) -> AttendanceRecord:
    fields = dict(record_id=0, student_id=1, practicum_id=10, work_date=date(2026, 3, 2), day="Monday")
    fields.update(kwargs)
    return AttendanceRecord(**fields)


def log(**kwargs) -> DetailedAttendanceLog:
    fields = dict(log_id=0, record_id=0, session_type=SessionType.MORNING, created_at=at(8))
    fields.update(kwargs)
    return DetailedAttendanceLog(**fields)


def test_first_clock_in_writes_record_and_log_in_one_transaction():
    cur = ScriptedCursor()
    factory = ScriptedFactory(cur)

    record_id = MySQLAttendanceRepository(factory).save_clock_in(record(morning_time_in=at(8)), log())

    assert record_id == 40
    assert [sql.split("(")[0] for sql, _ in cur.executed] == [
        "INSERT INTO attendance_records",
        "INSERT INTO detailed_attendance_logs",
    ]
    assert cur.executed[1][1][0] == 40
    assert factory.conn.commits == 1
    assert factory.conn.closed


def test_later_clock_in_updates_existing_record():
    cur = ScriptedCursor()
    factory = ScriptedFactory(cur)

    record_id = MySQLAttendanceRepository(factory).save_clock_in(
        record(record_id=7, morning_time_in=at(8), morning_time_out=at(12), afternoon_time_in=at(13)),
        log(session_type=SessionType.AFTERNOON, created_at=at(13)),
    )

    assert record_id == 7
    assert cur.executed[0][0].startswith("UPDATE attendance_records SET")
    assert cur.executed[0][1][-1] == 7
    assert cur.executed[1][1][0] == 7
    assert factory.conn.commits == 1


def test_failed_log_insert_rolls_back_the_record():
    cur = ScriptedCursor(fail_on="detailed_attendance_logs")
    factory = ScriptedFactory(cur)

    with pytest.raises(PersistenceError):
        MySQLAttendanceRepository(factory).save_clock_in(record(morning_time_in=at(8)), log())

    assert len(cur.executed) == 1
    assert factory.conn.rolled_back
    assert factory.conn.commits == 0


def test_failed_log_update_rolls_back_the_clock_out():
    cur = ScriptedCursor(fail_on="UPDATE detailed_attendance_logs")
    factory = ScriptedFactory(cur)
    closed = record(record_id=7, morning_time_in=at(8), morning_time_out=at(12))

    with pytest.raises(PersistenceError):
        MySQLAttendanceRepository(factory).save_clock_out(closed, log(log_id=3, record_id=7))

    assert factory.conn.rolled_back
    assert factory.conn.commits == 0


def test_clock_out_without_log_updates_record_only():
    cur = ScriptedCursor()
    factory = ScriptedFactory(cur)

    MySQLAttendanceRepository(factory).save_clock_out(
        record(record_id=7, morning_time_in=at(8), morning_time_out=at(12)), None
    )

    assert len(cur.executed) == 1
    assert factory.conn.commits == 1


AGENCY_ROW = {
    "agency_id": 3,
    "name": "Old Annex",
    "opening_time": timedelta(hours=8),
    "closing_time": timedelta(hours=17),
    "lunch_start_time": timedelta(hours=12),
    "lunch_end_time": timedelta(hours=13),
    "operating_days": "Monday,Wednesday",
}


@pytest.mark.parametrize(
    "lookup",
    [
        lambda repo: repo.get_by_id(3),
        lambda repo: repo.get_for_practicum(10),
    ],
)
def test_agency_lookups_agree_on_archived_agencies(lookup):
    cur = ScriptedCursor(rows=[dict(AGENCY_ROW)])

    agency = lookup(MySQLAgencyRepository(ScriptedFactory(cur)))

    assert agency.opening_time == "08:00:00"
    assert agency.lunch_end_time == "13:00:00"
    assert agency.operating_days == "Monday,Wednesday"
    assert "is_archived" not in cur.executed[0][0]
