from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import StaffProfile
from .repository import StaffRepository

_SELECT = """
    SELECT s.staff_id, s.department_id, s.location_id, s.shift_id, s.is_active, l.timezone
    FROM staff s
    LEFT JOIN locations l ON l.location_id = s.location_id
"""


def _row_to_staff(r: dict) -> StaffProfile:
    return StaffProfile(
        staff_id=int(r["staff_id"]),
        department_id=int(r["department_id"]) if r.get("department_id") is not None else None,
        location_id=int(r["location_id"]) if r.get("location_id") is not None else None,
        shift_id=int(r["shift_id"]) if r.get("shift_id") is not None else None,
        timezone=r.get("timezone"),
        is_active=bool(r.get("is_active", 1)),
    )


class MySQLStaffRepository(StaffRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, staff_id: int) -> Optional[StaffProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE s.staff_id=%s", (int(staff_id),))
            r = fetchone(cur)
            return _row_to_staff(r) if r else None

    def list_active(self) -> Sequence[StaffProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE s.is_active=1 ORDER BY s.staff_id")
            return [_row_to_staff(r) for r in fetchall(cur)]
