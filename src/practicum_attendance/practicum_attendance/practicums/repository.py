from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import Practicum


class PracticumRepository(Protocol):
    def get_by_id(self, practicum_id: int) -> Optional[Practicum]:
        raise NotImplementedError

    def list_active_on(self, work_date: date) -> Sequence[Practicum]:
        """Active practicums whose start/end range contains ``work_date``."""

        raise NotImplementedError
