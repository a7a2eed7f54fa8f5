from __future__ import annotations

from ...attendance.hours import calculate_hours_with_lunch_exclusion, calculate_overtime_hours
from ...attendance.model import AttendanceRecord
from ...core.constants import OVERTIME_MAX_HOURS
from .base import HoursCalculator


class LunchExclusionHoursCalculator(HoursCalculator):
    """Standard rule: morning + afternoon measured separately, overtime capped."""

    def __init__(self, *, overtime_max_hours: float = OVERTIME_MAX_HOURS):
        self._overtime_max_hours = float(overtime_max_hours)

    def regular_hours(self, record: AttendanceRecord) -> float:
        return calculate_hours_with_lunch_exclusion(
            record.morning_time_in,
            record.morning_time_out,
            record.afternoon_time_in,
            record.afternoon_time_out,
        )

    def overtime_hours(self, record: AttendanceRecord) -> float:
        hours = calculate_overtime_hours(
            record.overtime_time_in,
            record.overtime_time_out,
            max_hours=self._overtime_max_hours,
        )
        return round(hours, 2)
