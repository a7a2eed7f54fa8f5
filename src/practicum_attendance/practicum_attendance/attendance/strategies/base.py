from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ...agencies.model import Agency
from ...core.constants import EARLY_MORNING_LIMIT, LATE_EVENING_LIMIT, MINUTES_PER_DAY
from ...core.enums import Remark
from ..boundaries import parse_time_to_minutes


class RemarkStrategy(ABC):
    """Strategy Pattern: how one session type is judged at clock-in and clock-out.

    ``current`` is the server time in minutes since midnight.
    """

    @abstractmethod
    def decide_clock_in(self, *, agency: Optional[Agency], current: int) -> Remark:
        raise NotImplementedError

    @abstractmethod
    def decide_clock_out(self, *, agency: Optional[Agency], current: int) -> Remark:
        raise NotImplementedError


def reference_minutes(agency: Optional[Agency], field: str) -> Optional[int]:
    if agency is None:
        return None
    return parse_time_to_minutes(getattr(agency, field, None))


def next_day_adjusted(reference: int, current: int) -> int:
    """Move an early-morning reference to the next day when ``current`` is late evening."""
    if reference < EARLY_MORNING_LIMIT and current > LATE_EVENING_LIMIT:
        return reference + MINUTES_PER_DAY
    return reference
