"""Official time boundaries derived from an agency's configured times.

All boundaries are expressed in minutes since midnight. Agency times that are
malformed or inconsistent are logged and replaced by defaults; they never stop
attendance from being captured.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional

from ..agencies.model import Agency
from ..core.constants import EARLY_MORNING_LIMIT, LATE_EVENING_LIMIT, MINUTES_PER_DAY

logger = logging.getLogger(__name__)

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


@dataclass(frozen=True)
class AgencyScheduleDefaults:
    """Fallbacks used whenever an agency leaves a time unset (or sets it badly)."""

    morning_cutoff: int = 10 * 60 + 59
    morning_span_minutes: int = 120
    lunch_window_start: int = 12 * 60
    lunch_window_end: int = 12 * 60 + 59
    afternoon_clock_out_start: int = 17 * 60
    afternoon_clock_out_deadline: int = 18 * 60
    clock_out_grace_minutes: int = 60
    expected_hours: float = 7.0
    lunch_hours: float = 1.0


DEFAULT_SCHEDULE = AgencyScheduleDefaults()


@dataclass(frozen=True)
class TimeBoundaries:
    morning_cutoff: int
    morning_boundary: int
    lunch_window_start: int
    lunch_window_end: int
    afternoon_clock_out_start: int
    afternoon_clock_out_deadline: int

    # Validated agency times (None when unset or rejected).
    opening: Optional[int] = None
    closing: Optional[int] = None
    lunch_start: Optional[int] = None
    lunch_end: Optional[int] = None


def parse_time_to_minutes(value) -> Optional[int]:
    """Parse ``H:MM``, ``HH:MM`` or ``HH:MM:SS`` into minutes since midnight.

    Returns None for anything else, including out-of-range fields.
    """
    if not isinstance(value, str):
        return None
    m = _TIME_RE.match(value.strip())
    if not m:
        return None
    hours, minutes = int(m.group(1)), int(m.group(2))
    seconds = int(m.group(3)) if m.group(3) is not None else 0
    if hours > 23 or minutes > 59 or seconds > 59:
        return None
    return hours * 60 + minutes


def crosses_midnight(start: int, end: int) -> bool:
    """An early-morning end paired with a late-evening start belongs to the next day."""
    return end < EARLY_MORNING_LIMIT and start > LATE_EVENING_LIMIT


def _is_ordered(start: int, end: int) -> bool:
    return start < end or crosses_midnight(start, end)


def _config_minutes(agency: Optional[Agency], field: str) -> Optional[int]:
    raw = getattr(agency, field, None) if agency else None
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    minutes = parse_time_to_minutes(raw)
    if minutes is None:
        logger.warning(
            "Agency %s has malformed %s=%r; using defaults",
            getattr(agency, "agency_id", "?"),
            field,
            raw,
        )
    return minutes


def _validated_pair(agency: Optional[Agency], start_field: str, end_field: str):
    start = _config_minutes(agency, start_field)
    end = _config_minutes(agency, end_field)
    if start is not None and end is not None and not _is_ordered(start, end):
        logger.warning(
            "Agency %s has %s (%s) not before %s (%s); using defaults",
            getattr(agency, "agency_id", "?"),
            start_field,
            getattr(agency, start_field),
            end_field,
            getattr(agency, end_field),
        )
        return None, None
    return start, end


def compute_time_boundaries(
    agency: Optional[Agency],
    defaults: AgencyScheduleDefaults = DEFAULT_SCHEDULE,
) -> TimeBoundaries:
    opening, closing = _validated_pair(agency, "opening_time", "closing_time")
    lunch_start, lunch_end = _validated_pair(agency, "lunch_start_time", "lunch_end_time")

    if lunch_start is not None:
        morning_cutoff = (lunch_start - 1) % MINUTES_PER_DAY
    elif opening is not None:
        morning_cutoff = min(opening + defaults.morning_span_minutes, MINUTES_PER_DAY - 1)
    else:
        morning_cutoff = defaults.morning_cutoff

    if closing is not None:
        clock_out_start = closing
        deadline = max(closing + defaults.clock_out_grace_minutes, defaults.afternoon_clock_out_deadline)
    else:
        clock_out_start = defaults.afternoon_clock_out_start
        deadline = defaults.afternoon_clock_out_deadline

    return TimeBoundaries(
        morning_cutoff=morning_cutoff,
        morning_boundary=morning_cutoff + 1,
        lunch_window_start=lunch_start if lunch_start is not None else defaults.lunch_window_start,
        lunch_window_end=lunch_end if lunch_end is not None else defaults.lunch_window_end,
        afternoon_clock_out_start=clock_out_start,
        afternoon_clock_out_deadline=deadline,
        opening=opening,
        closing=closing,
        lunch_start=lunch_start,
        lunch_end=lunch_end,
    )
