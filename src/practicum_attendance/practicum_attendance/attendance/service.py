from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Callable, Optional, Sequence

from ..agencies.model import Agency
from ..agencies.repository import AgencyRepository
from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_HISTORY_LIMIT, IDEMPOTENCY_WINDOW_SECONDS, OVERTIME_MAX_HOURS
from ..core.enums import SessionType
from ..core.exceptions import AuthorizationError, NotFoundError
from ..practicums.repository import PracticumRepository
from .boundaries import DEFAULT_SCHEDULE, AgencyScheduleDefaults, TimeBoundaries, compute_time_boundaries
from .factory import RemarkStrategyFactory
from .model import AttendanceRecord, ClockMetadata, DetailedAttendanceLog
from .nullifier import nullify_stale_sessions
from .repository import AttendanceRepository
from .transitions import apply_clock_in, apply_clock_out

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordDetails:
    record: AttendanceRecord
    logs: Sequence[DetailedAttendanceLog]


class AttendanceService:
    """Clock-in/clock-out use cases.

    Reads and writes happen here only; every decision is delegated to the pure
    functions in ``transitions``. The calendar date always comes from the
    server clock, never from the client.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        agencies: Optional[AgencyRepository] = None,
        practicums: Optional[PracticumRepository] = None,
        *,
        clock: Optional[Callable[[], datetime]] = None,
        timezone: Optional[str] = None,
        defaults: AgencyScheduleDefaults = DEFAULT_SCHEDULE,
        strategy_factory: Optional[RemarkStrategyFactory] = None,
        idempotency_window_seconds: int = IDEMPOTENCY_WINDOW_SECONDS,
        overtime_max_hours: float = OVERTIME_MAX_HOURS,
    ):
        self._attendance = attendance
        self._agencies = agencies
        self._practicums = practicums
        self._clock = clock
        self._timezone = timezone
        self._defaults = defaults
        self._factory = strategy_factory or RemarkStrategyFactory()
        self._idempotency_window = int(idempotency_window_seconds)
        self._overtime_max_hours = float(overtime_max_hours)

    def _now(self) -> datetime:
        return self._clock() if self._clock else now_local(self._timezone)

    def _resolve_agency(self, student_id: int, practicum_id: int, agency: Optional[Agency]) -> Optional[Agency]:
        if self._practicums:
            practicum = self._practicums.get_by_id(practicum_id)
            if not practicum:
                raise NotFoundError("Practicum not found")
            if practicum.student_id != student_id:
                raise AuthorizationError("This practicum does not belong to you")

        if agency is None and self._agencies:
            agency = self._agencies.get_for_practicum(practicum_id)
        return agency

    def nullify_stale_sessions(
        self,
        record: Optional[AttendanceRecord],
        boundaries: TimeBoundaries,
        now: datetime,
        *,
        is_clock_out_operation: bool,
    ) -> Optional[AttendanceRecord]:
        """Clear stale open sessions and persist the clears immediately."""
        result = nullify_stale_sessions(record, boundaries, now, is_clock_out_operation=is_clock_out_operation)
        if result.changed:
            self._attendance.clear_sessions(record_id=record.record_id, sessions=result.cleared)
            logger.info(
                "Nullified stale %s session(s) on record %s at %s",
                ",".join(s.value for s in result.cleared),
                record.record_id,
                now.strftime("%H:%M"),
            )
        return result.record

    def clock_in(
        self,
        student_id: int,
        practicum_id: int,
        *,
        agency: Optional[Agency] = None,
        metadata: Optional[ClockMetadata] = None,
    ) -> AttendanceRecord:
        now = self._now()
        agency = self._resolve_agency(student_id, practicum_id, agency)
        boundaries = compute_time_boundaries(agency, self._defaults)

        record = self._attendance.get_for_student_and_date(student_id, practicum_id, now.date())
        if record:
            cleaned = self.nullify_stale_sessions(record, boundaries, now, is_clock_out_operation=False)
            if cleaned != record:
                record = self._attendance.get_for_student_and_date(student_id, practicum_id, now.date())

        transition = apply_clock_in(
            record,
            agency,
            now,
            student_id=student_id,
            practicum_id=practicum_id,
            metadata=metadata,
            boundaries=boundaries,
            defaults=self._defaults,
            idempotency_window_seconds=self._idempotency_window,
            factory=self._factory,
        )

        if transition.is_duplicate:
            logger.info(
                "Duplicate clock-in for student %s ignored (%s session opened within %ss)",
                student_id,
                transition.session_type.value,
                self._idempotency_window,
            )
            return transition.record

        record_id = self._attendance.save_clock_in(transition.record, transition.detailed_log)
        saved = replace(transition.record, record_id=record_id)
        logger.info(
            "Student %s clocked in for %s session (%s)",
            student_id,
            transition.session_type.value,
            transition.remark.value,
        )
        return saved

    def clock_out(
        self,
        student_id: int,
        practicum_id: int,
        *,
        agency: Optional[Agency] = None,
        metadata: Optional[ClockMetadata] = None,
        session_hint: Optional[SessionType] = None,
    ) -> AttendanceRecord:
        now = self._now()
        agency = self._resolve_agency(student_id, practicum_id, agency)
        boundaries = compute_time_boundaries(agency, self._defaults)

        record = self._attendance.get_for_student_and_date(student_id, practicum_id, now.date())
        if not record:
            raise NotFoundError("No attendance record found for today to clock out")

        record = self.nullify_stale_sessions(record, boundaries, now, is_clock_out_operation=True)

        transition = apply_clock_out(
            record,
            agency,
            now,
            metadata=metadata,
            session_hint=session_hint,
            boundaries=boundaries,
            defaults=self._defaults,
            overtime_max_hours=self._overtime_max_hours,
            factory=self._factory,
        )

        if not transition.within_expected_window:
            logger.warning(
                "Clock-out for %s session at %s is outside the expected window (student %s)",
                transition.session_type.value,
                now.strftime("%H:%M"),
                student_id,
            )

        log = self._attendance.get_latest_detailed_log(
            record_id=record.record_id, session_type=transition.session_type
        )
        if log:
            metadata = metadata or ClockMetadata()
            log = replace(
                log,
                time_out_remarks=transition.remark,
                photo_out=metadata.photo_url,
                time_out_location_type=metadata.location_type,
                time_out_device_type=metadata.device_type,
                time_out_device_unit=metadata.device_unit,
                time_out_mac_address=metadata.mac_address,
                time_out_exact_location=metadata.address,
            )
        self._attendance.save_clock_out(transition.record, log)

        logger.info(
            "Student %s clocked out of %s session (%s, %.2fh)",
            student_id,
            transition.session_type.value,
            transition.remark.value,
            transition.record.hours or 0.0,
        )
        return transition.record

    def today(self) -> date:
        """Attendance calendar date on the server clock."""
        return self._now().date()

    def get_today_record(self, student_id: int, practicum_id: int) -> Optional[AttendanceRecord]:
        return self._attendance.get_for_student_and_date(student_id, practicum_id, self.today())

    def get_record(self, record_id: int) -> RecordDetails:
        record = self._attendance.get_by_id(record_id)
        if not record:
            raise NotFoundError("Attendance record not found")
        return RecordDetails(record=record, logs=list(self._attendance.list_detailed_logs(record_id)))

    def get_history(
        self,
        student_id: int,
        *,
        practicum_id: Optional[int] = None,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> Sequence[AttendanceRecord]:
        return self._attendance.list_for_student(student_id, practicum_id=practicum_id, limit=limit)
