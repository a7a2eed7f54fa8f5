from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Agency:
    """Domain entity: host agency with its working-time configuration.

    Times are kept as the ``HH:MM[:SS]`` strings they are stored as; parsing
    and validation belong to the boundary calculator.
    """

    agency_id: int
    name: str
    opening_time: Optional[str] = None
    closing_time: Optional[str] = None
    lunch_start_time: Optional[str] = None
    lunch_end_time: Optional[str] = None
    operating_days: Optional[str] = None
