from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import LeaveStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import Holiday, LeaveRequest
from .repository import HolidayRepository, LeaveRepository


class MySQLLeaveRepository(LeaveRepository, HolidayRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_approved_for_staff(self, *, staff_id: int, start: date, end: date) -> Sequence[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT leave_request_id, staff_id, start_date, end_date, status,
                       day_fraction, affects_attendance, reason
                FROM leave_requests
                WHERE staff_id=%s AND status=%s AND start_date <= %s AND end_date >= %s
                ORDER BY leave_request_id
                """,
                (int(staff_id), LeaveStatus.APPROVED.value, end, start),
            )
            return [
                LeaveRequest(
                    request_id=int(r["leave_request_id"]),
                    staff_id=int(r["staff_id"]),
                    start_date=r["start_date"],
                    end_date=r["end_date"],
                    status=LeaveStatus(r["status"]),
                    day_fraction=Decimal(str(r.get("day_fraction") or "1")),
                    affects_attendance=bool(r.get("affects_attendance", 1)),
                    reason=r.get("reason"),
                )
                for r in fetchall(cur)
            ]

    def list_for_location(self, *, location_id: Optional[int], year: int) -> Sequence[Holiday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT holiday_id, holiday_name, holiday_date, location_id, is_recurring, is_active
                FROM holidays
                WHERE is_active=1
                  AND (location_id IS NULL OR location_id=%s)
                  AND (YEAR(holiday_date)=%s OR is_recurring=1)
                ORDER BY holiday_date, holiday_id
                """,
                (location_id, int(year)),
            )
            return [
                Holiday(
                    holiday_id=int(r["holiday_id"]),
                    holiday_name=r["holiday_name"],
                    holiday_date=r["holiday_date"],
                    location_id=int(r["location_id"]) if r.get("location_id") is not None else None,
                    is_recurring=bool(r.get("is_recurring")),
                    is_active=bool(r.get("is_active", 1)),
                )
                for r in fetchall(cur)
            ]
