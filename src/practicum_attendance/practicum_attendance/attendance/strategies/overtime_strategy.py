from __future__ import annotations

from typing import Optional

from ...agencies.model import Agency
from ...core.enums import Remark
from .base import RemarkStrategy


class OvertimeRemarkStrategy(RemarkStrategy):
    """Overtime has no official window, so it is never late or early."""

    def decide_clock_in(self, *, agency: Optional[Agency], current: int) -> Remark:
        return Remark.NORMAL

    def decide_clock_out(self, *, agency: Optional[Agency], current: int) -> Remark:
        return Remark.NORMAL
