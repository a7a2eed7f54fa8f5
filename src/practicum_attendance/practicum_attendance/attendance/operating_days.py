from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from ..agencies.model import Agency
from ..common.datetime_utils import day_name

logger = logging.getLogger(__name__)


def parse_operating_days(raw: Optional[str]) -> List[str]:
    """Split a comma-separated weekday list, dropping blanks."""
    if not raw:
        return []
    return [d.strip() for d in str(raw).split(",") if d.strip()]


def is_operating_day(agency: Optional[Agency], work_date: date) -> bool:
    """Case-insensitive weekday match; agencies without a list accept every day."""
    days = parse_operating_days(agency.operating_days if agency else None)
    if not days:
        return True

    name = day_name(work_date).lower()
    is_match = name in {d.lower() for d in days}
    logger.debug("Operating day check: %s %s in %s -> %s", work_date, name, days, is_match)
    return is_match


def describe_operating_days(agency: Optional[Agency]) -> str:
    days = parse_operating_days(agency.operating_days if agency else None)
    return ",".join(days) if days else "Not set"
