from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..agencies.model import Agency
from ..common.datetime_utils import minutes_since_midnight
from ..core.enums import Remark, SessionType
from .strategies.afternoon_strategy import AfternoonRemarkStrategy
from .strategies.base import RemarkStrategy
from .strategies.morning_strategy import MorningRemarkStrategy
from .strategies.overtime_strategy import OvertimeRemarkStrategy


@dataclass
class RemarkStrategyFactory:
    """Factory Pattern: choose the remark strategy for a session type."""

    def for_session(self, session_type: SessionType) -> RemarkStrategy:
        if session_type == SessionType.MORNING:
            return MorningRemarkStrategy()
        if session_type == SessionType.AFTERNOON:
            return AfternoonRemarkStrategy()
        return OvertimeRemarkStrategy()


def calculate_remarks(
    agency: Optional[Agency],
    now: datetime,
    session_type: SessionType,
    *,
    is_clock_in: bool,
    factory: Optional[RemarkStrategyFactory] = None,
) -> Remark:
    strategy = (factory or RemarkStrategyFactory()).for_session(session_type)
    current = minutes_since_midnight(now)
    if is_clock_in:
        return strategy.decide_clock_in(agency=agency, current=current)
    return strategy.decide_clock_out(agency=agency, current=current)
