"""Worked, expected, undertime and overtime hours.

Lunch is never subtracted: morning and afternoon are measured as separate
sessions, so the gap between them is simply not counted.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..agencies.model import Agency
from ..core.constants import MINUTES_PER_DAY, OVERTIME_MAX_HOURS
from .boundaries import DEFAULT_SCHEDULE, AgencyScheduleDefaults, parse_time_to_minutes


def _session_hours(time_in: Optional[datetime], time_out: Optional[datetime]) -> float:
    if not time_in or not time_out:
        return 0.0
    return max(0.0, (time_out - time_in).total_seconds() / 3600)


def calculate_hours_with_lunch_exclusion(
    morning_time_in: Optional[datetime],
    morning_time_out: Optional[datetime],
    afternoon_time_in: Optional[datetime],
    afternoon_time_out: Optional[datetime],
) -> float:
    total = _session_hours(morning_time_in, morning_time_out)
    total += _session_hours(afternoon_time_in, afternoon_time_out)
    return round(total, 2)


def calculate_lunch_duration(
    morning_time_out: Optional[datetime],
    afternoon_time_in: Optional[datetime],
) -> Optional[float]:
    """Actual lunch break taken, or None when either side is missing."""
    if not morning_time_out or not afternoon_time_in:
        return None
    return max(0.0, round((afternoon_time_in - morning_time_out).total_seconds() / 3600, 2))


def _span_minutes(start: int, end: int) -> int:
    span = end - start
    if span < 0:
        span += MINUTES_PER_DAY
    return span


def calculate_expected_hours(
    agency: Optional[Agency],
    defaults: AgencyScheduleDefaults = DEFAULT_SCHEDULE,
) -> Optional[float]:
    """Regular hours an agency day is expected to hold, lunch excluded.

    Returns None when only one of opening/closing is known.
    """
    opening = parse_time_to_minutes(getattr(agency, "opening_time", None))
    closing = parse_time_to_minutes(getattr(agency, "closing_time", None))

    if opening is None and closing is None:
        return defaults.expected_hours
    if opening is None or closing is None:
        return None

    lunch_start = parse_time_to_minutes(getattr(agency, "lunch_start_time", None))
    lunch_end = parse_time_to_minutes(getattr(agency, "lunch_end_time", None))
    if lunch_start is not None and lunch_end is not None:
        lunch_hours = _span_minutes(lunch_start, lunch_end) / 60
    else:
        lunch_hours = defaults.lunch_hours

    work_hours = _span_minutes(opening, closing) / 60
    return round(max(0.0, work_hours - lunch_hours), 2)


def calculate_undertime_hours(
    agency: Optional[Agency],
    actual_hours: float,
    defaults: AgencyScheduleDefaults = DEFAULT_SCHEDULE,
) -> float:
    expected = calculate_expected_hours(agency, defaults)
    if expected is None:
        return 0.0
    return round(max(0.0, expected - float(actual_hours or 0)), 2)


def overtime_elapsed_hours(overtime_time_in: datetime, now: datetime) -> float:
    return (now - overtime_time_in).total_seconds() / 3600


def calculate_overtime_hours(
    overtime_time_in: Optional[datetime],
    overtime_time_out: Optional[datetime],
    *,
    max_hours: float = OVERTIME_MAX_HOURS,
) -> float:
    if not overtime_time_in or not overtime_time_out:
        return 0.0
    raw = overtime_elapsed_hours(overtime_time_in, overtime_time_out)
    return min(max(0.0, raw), max_hours)
