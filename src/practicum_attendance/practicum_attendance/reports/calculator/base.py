from __future__ import annotations

from abc import ABC, abstractmethod

from ...attendance.model import AttendanceRecord


class HoursCalculator(ABC):
    """Calculator interface (Strategy Pattern for worked hours)."""

    @abstractmethod
    def regular_hours(self, record: AttendanceRecord) -> float:
        raise NotImplementedError

    @abstractmethod
    def overtime_hours(self, record: AttendanceRecord) -> float:
        raise NotImplementedError
