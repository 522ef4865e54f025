from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, minutes_from_db, normalize_mysql_time
from .model import ScheduleOverride, Shift, ShiftAssignment
from .repository import ScheduleRepository, ShiftAssignmentRepository, ShiftRepository

_SHIFT_COLUMNS = """
    shift_id, shift_name, start_time, end_time, required_minutes, grace_period_minutes,
    late_threshold_minutes, early_leave_threshold_minutes, break_start_time, break_minutes,
    auto_deduct_break, overtime_policy_id, is_active
"""


def _row_to_shift(r: dict) -> Shift:
    return Shift(
        shift_id=int(r["shift_id"]),
        shift_name=r["shift_name"],
        start_time=normalize_mysql_time(r["start_time"]),
        end_time=normalize_mysql_time(r["end_time"]),
        required_minutes=int(r.get("required_minutes") or 0),
        grace_minutes=int(r.get("grace_period_minutes") or 0),
        late_threshold_minutes=int(r.get("late_threshold_minutes") or 0),
        early_leave_threshold_minutes=int(r.get("early_leave_threshold_minutes") or 0),
        break_start=normalize_mysql_time(r.get("break_start_time")),
        break_minutes=minutes_from_db(r.get("break_minutes")) or 0,
        auto_deduct_break=bool(r.get("auto_deduct_break")),
        overtime_policy_id=int(r["overtime_policy_id"]) if r.get("overtime_policy_id") is not None else None,
        is_active=bool(r.get("is_active", 1)),
    )


class MySQLShiftRepository(ShiftRepository, ShiftAssignmentRepository, ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_SHIFT_COLUMNS} FROM shifts WHERE shift_id=%s", (int(shift_id),))
            r = fetchone(cur)
            return _row_to_shift(r) if r else None

    def list_for_staff(self, *, staff_id: int) -> Sequence[ShiftAssignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT assignment_id, staff_id, shift_id, effective_from, effective_to
                FROM shift_assignments
                WHERE staff_id=%s
                ORDER BY effective_from, assignment_id
                """,
                (int(staff_id),),
            )
            return [
                ShiftAssignment(
                    assignment_id=int(r["assignment_id"]),
                    staff_id=int(r["staff_id"]),
                    shift_id=int(r["shift_id"]),
                    effective_from=r["effective_from"],
                    effective_to=r.get("effective_to"),
                )
                for r in fetchall(cur)
            ]

    def get_for_staff_and_date(self, *, staff_id: int, work_date: date) -> Optional[ScheduleOverride]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT schedule_id, staff_id, work_date, shift_id, note
                FROM schedules
                WHERE staff_id=%s AND work_date=%s
                """,
                (int(staff_id), work_date),
            )
            r = fetchone(cur)
            if not r:
                return None
            return ScheduleOverride(
                schedule_id=int(r["schedule_id"]),
                staff_id=int(r["staff_id"]),
                work_date=r["work_date"],
                shift_id=int(r["shift_id"]),
                note=r.get("note"),
            )
