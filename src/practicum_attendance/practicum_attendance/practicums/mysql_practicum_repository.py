from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Practicum
from .repository import PracticumRepository


def _to_practicum(r: dict) -> Practicum:
    return Practicum(
        practicum_id=int(r["practicum_id"]),
        student_id=int(r["student_id"]),
        agency_id=int(r["agency_id"]) if r.get("agency_id") is not None else None,
        start_date=r["start_date"],
        end_date=r["end_date"],
        status=r["status"],
    )


class MySQLPracticumRepository(PracticumRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, practicum_id: int) -> Optional[Practicum]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT practicum_id, student_id, agency_id, start_date, end_date, status
                FROM practicums
                WHERE practicum_id=%s
                """,
                (int(practicum_id),),
            )
            r = fetchone(cur)
            return _to_practicum(r) if r else None

    def list_active_on(self, work_date: date) -> Sequence[Practicum]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT practicum_id, student_id, agency_id, start_date, end_date, status
                FROM practicums
                WHERE status='active' AND start_date<=%s AND end_date>=%s
                ORDER BY practicum_id
                """,
                (work_date, work_date),
            )
            return [_to_practicum(r) for r in fetchall(cur)]
