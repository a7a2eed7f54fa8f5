from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..common.datetime_utils import minutes_since_midnight
from ..core.enums import SessionType
from ..core.exceptions import ValidationError
from .boundaries import TimeBoundaries
from .model import AttendanceRecord


def determine_session_type(
    boundaries: TimeBoundaries,
    now: datetime,
    record: Optional[AttendanceRecord],
) -> SessionType:
    """Pick the session a clock-in at ``now`` belongs to.

    Decided from server time and the day's record only; the client never
    chooses its own session.
    """
    if record is not None and record.is_complete(SessionType.AFTERNOON):
        if record.is_open(SessionType.OVERTIME):
            raise ValidationError("Overtime session is already in progress. Please clock out first.")
        if record.is_complete(SessionType.OVERTIME):
            raise ValidationError("Overtime session is already complete for today.")
        return SessionType.OVERTIME

    if record is not None:
        open_session = record.open_session()
        if open_session is not None:
            raise ValidationError(
                f"You have an active {open_session.value} session. "
                "Please clock out before clocking in again."
            )

    current = minutes_since_midnight(now)

    if record is None or record.morning_time_in is None:
        if current <= boundaries.morning_cutoff:
            return SessionType.MORNING
        return SessionType.AFTERNOON

    if record.is_complete(SessionType.MORNING):
        return SessionType.AFTERNOON

    # Unreachable while a time_out always has a time_in.
    if boundaries.lunch_start is not None:
        return SessionType.MORNING if current < boundaries.lunch_start else SessionType.AFTERNOON
    return SessionType.MORNING if current < boundaries.morning_boundary else SessionType.AFTERNOON


def resolve_clock_out_session(
    record: AttendanceRecord,
    hint: Optional[SessionType] = None,
) -> SessionType:
    """The open session is the one being clocked out; the hint only breaks a tie with nothing open."""
    open_session = record.open_session()
    if open_session is not None:
        return open_session
    return hint or SessionType.MORNING
