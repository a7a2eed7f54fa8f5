from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import SessionType
from .model import AttendanceRecord, AttendanceReportRow, DetailedAttendanceLog


class AttendanceRepository(Protocol):
    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_student_and_date(
        self, student_id: int, practicum_id: int, work_date: date
    ) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_student(
        self,
        student_id: int,
        *,
        practicum_id: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        """Newest first."""

        raise NotImplementedError

    def create_record(self, record: AttendanceRecord) -> int:
        """Insert ``record`` (its ``record_id`` is ignored). Returns the new id."""

        raise NotImplementedError

    def clear_sessions(self, *, record_id: int, sessions: Sequence[SessionType]) -> bool:
        """Reset both timestamps of each given session to NULL."""

        raise NotImplementedError

    def save_clock_in(self, record: AttendanceRecord, log: DetailedAttendanceLog) -> int:
        """Insert (record_id 0) or update ``record`` and append ``log`` in one transaction.

        Returns the record id; ``log.record_id`` is ignored.
        """

        raise NotImplementedError

    def save_clock_out(self, record: AttendanceRecord, log: Optional[DetailedAttendanceLog]) -> None:
        """Update ``record`` and, when given, the session's log in one transaction."""

        raise NotImplementedError

    def get_latest_detailed_log(
        self, *, record_id: int, session_type: SessionType
    ) -> Optional[DetailedAttendanceLog]:
        raise NotImplementedError

    def list_detailed_logs(self, record_id: int) -> Sequence[DetailedAttendanceLog]:
        raise NotImplementedError

    def get_report_rows(
        self,
        *,
        start_date: date,
        end_date: date,
        student_id: Optional[int] = None,
        practicum_id: Optional[int] = None,
    ) -> Sequence[AttendanceReportRow]:
        raise NotImplementedError
