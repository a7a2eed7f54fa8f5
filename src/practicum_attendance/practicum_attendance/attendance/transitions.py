"""Pure clock-in/clock-out state transitions.

Each function takes the day's record snapshot and returns the snapshot to
persist plus a description of the side effects; nothing here reads or writes
storage, so the whole state machine is testable without a database.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional, Tuple

from ..agencies.model import Agency
from ..common.datetime_utils import day_name, minutes_since_midnight
from ..core.constants import IDEMPOTENCY_WINDOW_SECONDS, OVERTIME_MAX_HOURS
from ..core.enums import ApprovalStatus, AttendanceStatus, DeviceType, LocationType, Remark, SessionType
from ..core.exceptions import PolicyViolationError, ValidationError
from .boundaries import DEFAULT_SCHEDULE, AgencyScheduleDefaults, TimeBoundaries, compute_time_boundaries
from .factory import RemarkStrategyFactory, calculate_remarks
from .hours import (
    calculate_hours_with_lunch_exclusion,
    calculate_overtime_hours,
    calculate_undertime_hours,
    overtime_elapsed_hours,
)
from .model import AttendanceRecord, ClockMetadata, DetailedAttendanceLog
from .nullifier import nullify_stale_sessions
from .operating_days import describe_operating_days, is_operating_day
from .sessions import determine_session_type, resolve_clock_out_session


@dataclass(frozen=True)
class ClockInTransition:
    record: AttendanceRecord
    session_type: SessionType
    remark: Remark
    is_new: bool = False
    is_duplicate: bool = False
    nullified: Tuple[SessionType, ...] = ()
    detailed_log: Optional[DetailedAttendanceLog] = None


@dataclass(frozen=True)
class ClockOutTransition:
    record: AttendanceRecord
    session_type: SessionType
    remark: Remark
    regular_hours: float
    overtime_hours: float
    undertime_hours: float
    within_expected_window: bool = True


def find_duplicate_clock_in(
    record: Optional[AttendanceRecord],
    now: datetime,
    *,
    window_seconds: int = IDEMPOTENCY_WINDOW_SECONDS,
) -> Optional[SessionType]:
    """Session opened less than ``window_seconds`` ago, if any."""
    if record is None:
        return None
    session = record.open_session()
    if session is None:
        return None
    elapsed = (now - record.time_in(session)).total_seconds()
    if 0 <= elapsed <= window_seconds:
        return session
    return None


def _new_record(*, student_id: int, practicum_id: int, now: datetime, remark: Remark) -> AttendanceRecord:
    work_date = now.date()
    return AttendanceRecord(
        record_id=0,
        student_id=int(student_id),
        practicum_id=int(practicum_id),
        work_date=work_date,
        day=day_name(work_date),
        status=AttendanceStatus.LATE if remark == Remark.LATE else AttendanceStatus.PRESENT,
    )


def apply_clock_in(
    record: Optional[AttendanceRecord],
    agency: Optional[Agency],
    now: datetime,
    *,
    student_id: int,
    practicum_id: int,
    metadata: Optional[ClockMetadata] = None,
    boundaries: Optional[TimeBoundaries] = None,
    defaults: AgencyScheduleDefaults = DEFAULT_SCHEDULE,
    idempotency_window_seconds: int = IDEMPOTENCY_WINDOW_SECONDS,
    factory: Optional[RemarkStrategyFactory] = None,
) -> ClockInTransition:
    metadata = metadata or ClockMetadata()
    boundaries = boundaries or compute_time_boundaries(agency, defaults)

    duplicate = find_duplicate_clock_in(record, now, window_seconds=idempotency_window_seconds)
    if duplicate is not None:
        return ClockInTransition(
            record=record,
            session_type=duplicate,
            remark=record.time_in_remarks or Remark.NORMAL,
            is_duplicate=True,
        )

    cleaned = nullify_stale_sessions(record, boundaries, now, is_clock_out_operation=False)
    record = cleaned.record

    session_type = determine_session_type(boundaries, now, record)

    if not is_operating_day(agency, now.date()):
        raise PolicyViolationError(
            f"Today ({day_name(now.date())}) is not an operating day. "
            f"Operating days: {describe_operating_days(agency)}"
        )

    remark = calculate_remarks(agency, now, session_type, is_clock_in=True, factory=factory)

    is_new = record is None
    base = record or _new_record(student_id=student_id, practicum_id=practicum_id, now=now, remark=remark)

    updated = replace(
        base.with_session(session_type, time_in=now),
        session_type=session_type,
        time_in_remarks=remark,
        approval_status=ApprovalStatus.PENDING,
        latitude=metadata.latitude,
        longitude=metadata.longitude,
        address=metadata.address,
        photo_in=metadata.photo_url,
        time_in_location_type=metadata.location_type,
        time_in_device_type=metadata.device_type,
        time_in_device_unit=metadata.device_unit,
        time_in_mac_address=metadata.mac_address,
    )

    log = DetailedAttendanceLog(
        log_id=0,
        record_id=base.record_id,
        session_type=session_type,
        created_at=now,
        time_in_remarks=remark,
        photo_in=metadata.photo_url,
        time_in_location_type=metadata.location_type or LocationType.INSIDE,
        time_in_device_type=metadata.device_type or DeviceType.DESKTOP,
        time_in_device_unit=metadata.device_unit,
        time_in_mac_address=metadata.mac_address,
        time_in_exact_location=metadata.address,
    )

    return ClockInTransition(
        record=updated,
        session_type=session_type,
        remark=remark,
        is_new=is_new,
        nullified=cleaned.cleared,
        detailed_log=log,
    )


def is_within_clock_out_window(boundaries: TimeBoundaries, session_type: SessionType, now: datetime) -> bool:
    current = minutes_since_midnight(now)
    if session_type == SessionType.MORNING:
        return boundaries.lunch_window_start <= current <= boundaries.lunch_window_end
    if session_type == SessionType.AFTERNOON:
        return boundaries.afternoon_clock_out_start <= current <= boundaries.afternoon_clock_out_deadline
    return True


def _pick(new, old):
    return new if new is not None else old


def apply_clock_out(
    record: AttendanceRecord,
    agency: Optional[Agency],
    now: datetime,
    *,
    metadata: Optional[ClockMetadata] = None,
    session_hint: Optional[SessionType] = None,
    boundaries: Optional[TimeBoundaries] = None,
    defaults: AgencyScheduleDefaults = DEFAULT_SCHEDULE,
    overtime_max_hours: float = OVERTIME_MAX_HOURS,
    factory: Optional[RemarkStrategyFactory] = None,
) -> ClockOutTransition:
    metadata = metadata or ClockMetadata()
    boundaries = boundaries or compute_time_boundaries(agency, defaults)

    session_type = resolve_clock_out_session(record, session_hint)
    time_in = record.time_in(session_type)
    if time_in is None:
        raise ValidationError(f"You must clock in for the {session_type.value} session before clocking out")
    if record.time_out(session_type) is not None:
        raise ValidationError(f"You have already clocked out for the {session_type.value} session")

    within_window = is_within_clock_out_window(boundaries, session_type, now)

    if session_type == SessionType.OVERTIME and overtime_elapsed_hours(time_in, now) > overtime_max_hours:
        raise PolicyViolationError(
            f"Overtime session exceeded the maximum of {overtime_max_hours:g} hours and cannot be clocked out."
        )

    remark = calculate_remarks(agency, now, session_type, is_clock_in=False, factory=factory)

    updated = record.with_session(session_type, time_in=time_in, time_out=now)
    regular = calculate_hours_with_lunch_exclusion(
        updated.morning_time_in,
        updated.morning_time_out,
        updated.afternoon_time_in,
        updated.afternoon_time_out,
    )
    overtime = calculate_overtime_hours(
        updated.overtime_time_in, updated.overtime_time_out, max_hours=overtime_max_hours
    )
    undertime = calculate_undertime_hours(agency, regular, defaults)

    updated = replace(
        updated,
        hours=round(regular + overtime, 2),
        undertime_hours=undertime,
        time_out_remarks=remark,
        approval_status=ApprovalStatus.PENDING,
        latitude=_pick(metadata.latitude, record.latitude),
        longitude=_pick(metadata.longitude, record.longitude),
        address=_pick(metadata.address, record.address),
        photo_out=_pick(metadata.photo_url, record.photo_out),
        time_out_location_type=_pick(metadata.location_type, record.time_out_location_type),
        time_out_device_type=_pick(metadata.device_type, record.time_out_device_type),
        time_out_device_unit=_pick(metadata.device_unit, record.time_out_device_unit),
        time_out_mac_address=_pick(metadata.mac_address, record.time_out_mac_address),
    )

    return ClockOutTransition(
        record=updated,
        session_type=session_type,
        remark=remark,
        regular_hours=regular,
        overtime_hours=round(overtime, 2),
        undertime_hours=undertime,
        within_expected_window=within_window,
    )
