from __future__ import annotations

from enum import Enum


class SessionType(str, Enum):
    """Work session within one attendance day."""

    MORNING = "morning"
    AFTERNOON = "afternoon"
    OVERTIME = "overtime"


class Remark(str, Enum):
    """Per-direction remark written at clock-in/clock-out."""

    NORMAL = "Normal"
    LATE = "Late"
    EARLY_DEPARTURE = "Early Departure"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    EXCUSED = "excused"


class ApprovalStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    DECLINED = "Declined"


class LocationType(str, Enum):
    INSIDE = "Inside"
    IN_FIELD = "In-field"
    OUTSIDE = "Outside"


class DeviceType(str, Enum):
    MOBILE = "Mobile"
    DESKTOP = "Desktop"
    TABLET = "Tablet"
