from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .agencies.mysql_agency_repository import MySQLAgencyRepository
from .attendance.absence_service import AbsenceService
from .attendance.factory import RemarkStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import IDEMPOTENCY_WINDOW_SECONDS, OVERTIME_MAX_HOURS
from .database.connection import DBConfig, DatabaseConnection
from .practicums.mysql_practicum_repository import MySQLPracticumRepository
from .reports.calculator.standard_calculator import LunchExclusionHoursCalculator
from .reports.service import AttendanceReportService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    agencies_repo: MySQLAgencyRepository
    practicums_repo: MySQLPracticumRepository
    attendance_repo: MySQLAttendanceRepository

    attendance_service: AttendanceService
    absence_service: AbsenceService
    report_service: AttendanceReportService


def build_container(
    *,
    db_config: dict,
    timezone: Optional[str] = None,
    idempotency_window_seconds: int = IDEMPOTENCY_WINDOW_SECONDS,
    overtime_max_hours: float = OVERTIME_MAX_HOURS,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    agencies_repo = MySQLAgencyRepository(conn)
    practicums_repo = MySQLPracticumRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)

    attendance_service = AttendanceService(
        attendance_repo,
        agencies_repo,
        practicums_repo,
        timezone=timezone,
        strategy_factory=RemarkStrategyFactory(),
        idempotency_window_seconds=idempotency_window_seconds,
        overtime_max_hours=overtime_max_hours,
    )
    absence_service = AbsenceService(attendance_repo, practicums_repo, agencies_repo, timezone=timezone)
    report_service = AttendanceReportService(
        attendance_repo,
        calculator=LunchExclusionHoursCalculator(overtime_max_hours=overtime_max_hours),
    )

    return Container(
        conn=conn,
        agencies_repo=agencies_repo,
        practicums_repo=practicums_repo,
        attendance_repo=attendance_repo,
        attendance_service=attendance_service,
        absence_service=absence_service,
        report_service=report_service,
    )
