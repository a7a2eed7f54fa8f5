from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from ..common.datetime_utils import minutes_since_midnight
from ..core.enums import SessionType
from .boundaries import TimeBoundaries
from .model import AttendanceRecord


@dataclass(frozen=True)
class NullifyResult:
    record: Optional[AttendanceRecord]
    cleared: Tuple[SessionType, ...] = ()

    @property
    def changed(self) -> bool:
        return bool(self.cleared)


def nullify_stale_sessions(
    record: Optional[AttendanceRecord],
    boundaries: TimeBoundaries,
    now: datetime,
    *,
    is_clock_out_operation: bool,
) -> NullifyResult:
    """Clear sessions left open past their valid window.

    A clock-out in flight must never lose the session it is closing, so the
    pass is skipped entirely for clock-out operations.
    """
    if record is None or is_clock_out_operation:
        return NullifyResult(record=record)

    current = minutes_since_midnight(now)
    cleared: list[SessionType] = []

    if record.is_open(SessionType.MORNING) and current > boundaries.lunch_window_end + 1:
        record = record.with_session(SessionType.MORNING)
        cleared.append(SessionType.MORNING)

    if record.is_open(SessionType.AFTERNOON) and current > boundaries.afternoon_clock_out_deadline:
        record = record.with_session(SessionType.AFTERNOON)
        cleared.append(SessionType.AFTERNOON)

    return NullifyResult(record=record, cleared=tuple(cleared))
