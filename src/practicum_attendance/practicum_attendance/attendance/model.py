from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Optional

from ..core.enums import (
    ApprovalStatus,
    AttendanceStatus,
    DeviceType,
    LocationType,
    Remark,
    SessionType,
)

# Precedence used when more than one session looks open (corrupted rows).
OPEN_SESSION_PRECEDENCE = (SessionType.OVERTIME, SessionType.AFTERNOON, SessionType.MORNING)


@dataclass(frozen=True)
class ClockMetadata:
    """Device/location/photo details passed through verbatim to persistence."""

    latitude: Optional[float] = None
    longitude: Optional[float] = None
    address: Optional[str] = None
    location_type: Optional[LocationType] = None
    device_type: Optional[DeviceType] = None
    device_unit: Optional[str] = None
    mac_address: Optional[str] = None
    photo_url: Optional[str] = None


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one student's attendance for one practicum and calendar day.

    Each session owns a nullable in/out pair. A session's ``*_time_out`` is only
    set when its ``*_time_in`` is, and at most one session is open at a time.
    """

    record_id: int
    student_id: int
    practicum_id: int
    work_date: date
    day: str

    morning_time_in: Optional[datetime] = None
    morning_time_out: Optional[datetime] = None
    afternoon_time_in: Optional[datetime] = None
    afternoon_time_out: Optional[datetime] = None
    overtime_time_in: Optional[datetime] = None
    overtime_time_out: Optional[datetime] = None

    session_type: Optional[SessionType] = None
    hours: Optional[float] = None
    undertime_hours: Optional[float] = None
    status: AttendanceStatus = AttendanceStatus.PRESENT
    approval_status: ApprovalStatus = ApprovalStatus.PENDING
    time_in_remarks: Optional[Remark] = None
    time_out_remarks: Optional[Remark] = None

    latitude: Optional[float] = None
    longitude: Optional[float] = None
    address: Optional[str] = None
    photo_in: Optional[str] = None
    photo_out: Optional[str] = None
    time_in_location_type: Optional[LocationType] = None
    time_in_device_type: Optional[DeviceType] = None
    time_in_device_unit: Optional[str] = None
    time_in_mac_address: Optional[str] = None
    time_out_location_type: Optional[LocationType] = None
    time_out_device_type: Optional[DeviceType] = None
    time_out_device_unit: Optional[str] = None
    time_out_mac_address: Optional[str] = None

    def time_in(self, session: SessionType) -> Optional[datetime]:
        return getattr(self, f"{session.value}_time_in")

    def time_out(self, session: SessionType) -> Optional[datetime]:
        return getattr(self, f"{session.value}_time_out")

    def is_open(self, session: SessionType) -> bool:
        return self.time_in(session) is not None and self.time_out(session) is None

    def is_complete(self, session: SessionType) -> bool:
        return self.time_in(session) is not None and self.time_out(session) is not None

    def open_session(self) -> Optional[SessionType]:
        for session in OPEN_SESSION_PRECEDENCE:
            if self.is_open(session):
                return session
        return None

    def with_session(
        self,
        session: SessionType,
        *,
        time_in: Optional[datetime] = None,
        time_out: Optional[datetime] = None,
    ) -> "AttendanceRecord":
        """Return a copy whose ``session`` pair is replaced by the given values."""

        return replace(
            self,
            **{
                f"{session.value}_time_in": time_in,
                f"{session.value}_time_out": time_out,
            },
        )


@dataclass(frozen=True)
class DetailedAttendanceLog:
    """One row per session attempt; opened at clock-in, completed at clock-out."""

    log_id: int
    record_id: int
    session_type: SessionType
    created_at: datetime
    time_in_remarks: Remark = Remark.NORMAL
    photo_in: Optional[str] = None
    time_in_location_type: LocationType = LocationType.INSIDE
    time_in_device_type: DeviceType = DeviceType.DESKTOP
    time_in_device_unit: Optional[str] = None
    time_in_mac_address: Optional[str] = None
    time_in_exact_location: Optional[str] = None
    time_out_remarks: Optional[Remark] = None
    photo_out: Optional[str] = None
    time_out_location_type: Optional[LocationType] = None
    time_out_device_type: Optional[DeviceType] = None
    time_out_device_unit: Optional[str] = None
    time_out_mac_address: Optional[str] = None
    time_out_exact_location: Optional[str] = None
    status: ApprovalStatus = ApprovalStatus.PENDING


@dataclass(frozen=True)
class AttendanceReportRow:
    """Read-model for reports/exports: a record joined with its student."""

    record: AttendanceRecord
    student_name: str
    student_number: Optional[str] = None
    agency_name: Optional[str] = None
