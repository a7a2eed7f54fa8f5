from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, mysql_time_to_str
from .model import Agency
from .repository import AgencyRepository

_COLUMNS = """
    a.agency_id, a.name, a.opening_time, a.closing_time,
    a.lunch_start_time, a.lunch_end_time, a.operating_days
"""


def _to_agency(r: dict) -> Agency:
    return Agency(
        agency_id=int(r["agency_id"]),
        name=r["name"],
        opening_time=mysql_time_to_str(r.get("opening_time")),
        closing_time=mysql_time_to_str(r.get("closing_time")),
        lunch_start_time=mysql_time_to_str(r.get("lunch_start_time")),
        lunch_end_time=mysql_time_to_str(r.get("lunch_end_time")),
        operating_days=r.get("operating_days"),
    )


class MySQLAgencyRepository(AgencyRepository):
    """Archived agencies are still returned: their placements keep the time configuration they ran under."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, agency_id: int) -> Optional[Agency]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM agencies a
                WHERE a.agency_id=%s
                """,
                (int(agency_id),),
            )
            r = fetchone(cur)
            return _to_agency(r) if r else None

    def get_for_practicum(self, practicum_id: int) -> Optional[Agency]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM practicums p
                JOIN agencies a ON a.agency_id = p.agency_id
                WHERE p.practicum_id=%s
                """,
                (int(practicum_id),),
            )
            r = fetchone(cur)
            return _to_agency(r) if r else None
