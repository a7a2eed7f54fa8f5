"""Create absent records for a day nobody clocked in on.

Intended to run once a day (cron) shortly after midnight; defaults to
yesterday in the server timezone.

    python scripts/mark_absences.py [--date YYYY-MM-DD]
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.practicum_attendance.practicum_attendance.common.datetime_utils import parse_iso_date
from src.practicum_attendance.practicum_attendance.container import build_container


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--date", help="Day to check (YYYY-MM-DD); defaults to yesterday")
    args = parser.parse_args()

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(
        level=getattr(logging, str(getattr(settings, "LOG_LEVEL", "INFO")).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    container = build_container(
        db_config=settings.DB_CONFIG,
        timezone=getattr(settings, "SERVER_TIMEZONE", None) or None,
    )
    summary = container.absence_service.create_absent_records_for_date(
        parse_iso_date(args.date) if args.date else None
    )
    print(f"OK: {summary.date}: {summary.created} absent records created, {summary.skipped} skipped ({summary.total} practicums)")


if __name__ == "__main__":
    main()
