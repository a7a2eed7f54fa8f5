from __future__ import annotations

from typing import Optional

from ...agencies.model import Agency
from ...core.enums import Remark
from .base import RemarkStrategy, reference_minutes


class MorningRemarkStrategy(RemarkStrategy):
    """Late after opening time; early departure before lunch starts."""

    def decide_clock_in(self, *, agency: Optional[Agency], current: int) -> Remark:
        opening = reference_minutes(agency, "opening_time")
        if opening is not None and current > opening:
            return Remark.LATE
        return Remark.NORMAL

    def decide_clock_out(self, *, agency: Optional[Agency], current: int) -> Remark:
        lunch_start = reference_minutes(agency, "lunch_start_time")
        if lunch_start is not None and current < lunch_start:
            return Remark.EARLY_DEPARTURE
        return Remark.NORMAL
