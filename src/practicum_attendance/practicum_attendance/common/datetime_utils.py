from __future__ import annotations

from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local(timezone: Optional[str] = None) -> datetime:
    """Current server-local time as a naive datetime.

    Note: Wrapped so tests can patch/mock easier. When ``timezone`` is given the
    wall clock of that zone is used instead of the host's.
    """
    if timezone:
        return datetime.now(ZoneInfo(timezone)).replace(tzinfo=None)
    return datetime.now()


def minutes_since_midnight(value: datetime) -> int:
    return value.hour * 60 + value.minute


def day_name(value: date) -> str:
    """English weekday name, e.g. 'Monday'."""
    return value.strftime("%A")
