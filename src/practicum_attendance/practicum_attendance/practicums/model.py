from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class Practicum:
    """Domain entity: a student's placement at an agency."""

    practicum_id: int
    student_id: int
    agency_id: Optional[int]
    start_date: date
    end_date: date
    status: str = "active"

    def covers(self, work_date: date) -> bool:
        return self.start_date <= work_date <= self.end_date
