from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Optional

import pytest

from src.practicum_attendance.practicum_attendance.agencies.model import Agency
from src.practicum_attendance.practicum_attendance.attendance.model import (
    AttendanceRecord,
    AttendanceReportRow,
    DetailedAttendanceLog,
)
from src.practicum_attendance.practicum_attendance.practicums.model import Practicum


class InMemoryAttendance:
    def __init__(self):
        self.records: dict[int, AttendanceRecord] = {}
        self.logs: dict[int, DetailedAttendanceLog] = {}
        self.writes: list[str] = []
        self._record_id = 0
        self._log_id = 0

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        return self.records.get(record_id)

    def get_for_student_and_date(self, student_id: int, practicum_id: int, work_date: date):
        for r in self.records.values():
            if (r.student_id, r.practicum_id, r.work_date) == (student_id, practicum_id, work_date):
                return r
        return None

    def list_for_student(self, student_id: int, *, practicum_id=None, limit=None):
        items = [
            r
            for r in self.records.values()
            if r.student_id == student_id and (practicum_id is None or r.practicum_id == practicum_id)
        ]
        items.sort(key=lambda r: r.work_date, reverse=True)
        return items[:limit] if limit is not None else items

    def create_record(self, record: AttendanceRecord) -> int:
        self._record_id += 1
        self.records[self._record_id] = replace(record, record_id=self._record_id)
        self.writes.append("create_record")
        return self._record_id

    def save_clock_in(self, record: AttendanceRecord, log: DetailedAttendanceLog) -> int:
        record_id = record.record_id
        if not record_id:
            self._record_id += 1
            record_id = self._record_id
        self.records[record_id] = replace(record, record_id=record_id)
        self._log_id += 1
        self.logs[self._log_id] = replace(log, log_id=self._log_id, record_id=record_id)
        self.writes.append("save_clock_in")
        return record_id

    def save_clock_out(self, record: AttendanceRecord, log: Optional[DetailedAttendanceLog]) -> None:
        self.records[record.record_id] = record
        if log is not None:
            self.logs[log.log_id] = log
        self.writes.append("save_clock_out")

    def clear_sessions(self, *, record_id: int, sessions) -> bool:
        record = self.records[record_id]
        for s in sessions:
            record = record.with_session(s)
        self.records[record_id] = record
        self.writes.append("clear_sessions")
        return True

    def get_latest_detailed_log(self, *, record_id: int, session_type):
        matches = [l for l in self.logs.values() if l.record_id == record_id and l.session_type == session_type]
        matches.sort(key=lambda l: (l.created_at, l.log_id))
        return matches[-1] if matches else None

    def list_detailed_logs(self, record_id: int):
        return [l for l in self.logs.values() if l.record_id == record_id]

    def get_report_rows(self, *, start_date: date, end_date: date, student_id=None, practicum_id=None):
        return [
            AttendanceReportRow(record=r, student_name=f"Student {r.student_id}", agency_name="City Hall")
            for r in sorted(self.records.values(), key=lambda r: r.work_date, reverse=True)
            if start_date <= r.work_date <= end_date
            and (student_id is None or r.student_id == student_id)
            and (practicum_id is None or r.practicum_id == practicum_id)
        ]


@dataclass
class InMemoryAgencies:
    agencies: dict[int, Agency]
    agency_by_practicum: dict[int, int] = field(default_factory=dict)

    def get_by_id(self, agency_id: int) -> Optional[Agency]:
        return self.agencies.get(agency_id)

    def get_for_practicum(self, practicum_id: int) -> Optional[Agency]:
        agency_id = self.agency_by_practicum.get(practicum_id)
        return self.agencies.get(agency_id) if agency_id else None


@dataclass
class InMemoryPracticums:
    practicums: dict[int, Practicum]

    def get_by_id(self, practicum_id: int) -> Optional[Practicum]:
        return self.practicums.get(practicum_id)

    def list_active_on(self, work_date: date):
        return [p for p in self.practicums.values() if p.status == "active" and p.covers(work_date)]


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def agency() -> Agency:
    return Agency(
        agency_id=1,
        name="City Hall",
        opening_time="08:00:00",
        closing_time="17:00:00",
        lunch_start_time="12:00:00",
        lunch_end_time="13:00:00",
        operating_days="Monday,Tuesday,Wednesday,Thursday,Friday",
    )


@pytest.fixture
def practicum() -> Practicum:
    return Practicum(
        practicum_id=10,
        student_id=1,
        agency_id=1,
        start_date=date(2026, 2, 1),
        end_date=date(2026, 5, 31),
    )


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def agencies_repo(agency) -> InMemoryAgencies:
    return InMemoryAgencies({1: agency}, {10: 1})


@pytest.fixture
def practicums_repo(practicum) -> InMemoryPracticums:
    return InMemoryPracticums({10: practicum})


@pytest.fixture
def clock() -> FakeClock:
    # 2026-03-02 is a Monday.
    return FakeClock(datetime(2026, 3, 2, 8, 0))
