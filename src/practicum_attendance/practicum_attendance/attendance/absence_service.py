from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, Optional

from ..agencies.repository import AgencyRepository
from ..common.datetime_utils import day_name, now_local
from ..core.enums import ApprovalStatus, AttendanceStatus
from ..core.exceptions import PersistenceError
from ..practicums.repository import PracticumRepository
from .model import AttendanceRecord
from .operating_days import is_operating_day
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AbsenceRunSummary:
    date: str
    created: int
    skipped: int
    total: int


class AbsenceService:
    """Marks students absent for operating days they never clocked in on."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        practicums: PracticumRepository,
        agencies: AgencyRepository,
        *,
        clock: Optional[Callable[[], datetime]] = None,
        timezone: Optional[str] = None,
    ):
        self._attendance = attendance
        self._practicums = practicums
        self._agencies = agencies
        self._clock = clock
        self._timezone = timezone

    def create_absent_records_for_date(self, target_date: Optional[date] = None) -> AbsenceRunSummary:
        now = self._clock() if self._clock else now_local(self._timezone)
        check_date = target_date or (now.date() - timedelta(days=1))
        weekday = day_name(check_date)

        practicums = list(self._practicums.list_active_on(check_date))
        logger.info("Checking absences for %s, %s (%d active practicums)", weekday, check_date, len(practicums))

        created = 0
        skipped = 0
        for practicum in practicums:
            agency = self._agencies.get_by_id(practicum.agency_id) if practicum.agency_id else None

            if not is_operating_day(agency, check_date):
                logger.info(
                    "Skipping %s: %s is not an operating day",
                    agency.name if agency else "unknown agency",
                    weekday,
                )
                skipped += 1
                continue

            if self._attendance.get_for_student_and_date(practicum.student_id, practicum.practicum_id, check_date):
                skipped += 1
                continue

            try:
                self._attendance.create_record(
                    AttendanceRecord(
                        record_id=0,
                        student_id=practicum.student_id,
                        practicum_id=practicum.practicum_id,
                        work_date=check_date,
                        day=weekday,
                        hours=0.0,
                        status=AttendanceStatus.ABSENT,
                        approval_status=ApprovalStatus.PENDING,
                    )
                )
            except PersistenceError as e:
                logger.error("Could not create absent record for practicum %s: %s", practicum.practicum_id, e)
                skipped += 1
                continue

            created += 1

        logger.info("Absence run for %s: %d created, %d skipped", check_date, created, skipped)
        return AbsenceRunSummary(
            date=check_date.isoformat(),
            created=created,
            skipped=skipped,
            total=len(practicums),
        )
