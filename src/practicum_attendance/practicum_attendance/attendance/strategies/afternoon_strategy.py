from __future__ import annotations

from typing import Optional

from ...agencies.model import Agency
from ...core.enums import Remark
from .base import RemarkStrategy, next_day_adjusted, reference_minutes


class AfternoonRemarkStrategy(RemarkStrategy):
    """Late after lunch ends; early departure before closing time."""

    def decide_clock_in(self, *, agency: Optional[Agency], current: int) -> Remark:
        lunch_end = reference_minutes(agency, "lunch_end_time")
        if lunch_end is not None and current > next_day_adjusted(lunch_end, current):
            return Remark.LATE
        return Remark.NORMAL

    def decide_clock_out(self, *, agency: Optional[Agency], current: int) -> Remark:
        closing = reference_minutes(agency, "closing_time")
        if closing is not None and current < next_day_adjusted(closing, current):
            return Remark.EARLY_DEPARTURE
        return Remark.NORMAL
