from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import CorrectionStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_utc, db_cursor, fetchall, fetchone, to_db_datetime
from .model import AttendanceCorrection
from .repository import CorrectionRepository

_COLUMNS = """
    correction_id, staff_id, work_date, record_id,
    original_clock_in, original_clock_out, corrected_clock_in, corrected_clock_out,
    reason, status, requested_by, requested_at, reviewed_by, reviewed_at, review_notes
"""


def _row_to_correction(r: dict) -> AttendanceCorrection:
    return AttendanceCorrection(
        correction_id=int(r["correction_id"]),
        staff_id=int(r["staff_id"]),
        work_date=r["work_date"],
        record_id=int(r["record_id"]) if r.get("record_id") is not None else None,
        original_clock_in=as_utc(r.get("original_clock_in")),
        original_clock_out=as_utc(r.get("original_clock_out")),
        corrected_clock_in=as_utc(r.get("corrected_clock_in")),
        corrected_clock_out=as_utc(r.get("corrected_clock_out")),
        reason=r.get("reason") or "",
        status=CorrectionStatus(r["status"]),
        requested_by=int(r["requested_by"]) if r.get("requested_by") is not None else None,
        requested_at=as_utc(r.get("requested_at")),
        reviewed_by=int(r["reviewed_by"]) if r.get("reviewed_by") is not None else None,
        reviewed_at=as_utc(r.get("reviewed_at")),
        review_notes=r.get("review_notes"),
    )


class MySQLCorrectionRepository(CorrectionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        staff_id: int,
        work_date: date,
        record_id: Optional[int],
        original_clock_in: Optional[datetime],
        original_clock_out: Optional[datetime],
        corrected_clock_in: Optional[datetime],
        corrected_clock_out: Optional[datetime],
        reason: str,
        requested_by: int,
        requested_at: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_corrections(
                    staff_id, work_date, record_id,
                    original_clock_in, original_clock_out, corrected_clock_in, corrected_clock_out,
                    reason, status, requested_by, requested_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(staff_id),
                    work_date,
                    record_id,
                    to_db_datetime(original_clock_in),
                    to_db_datetime(original_clock_out),
                    to_db_datetime(corrected_clock_in),
                    to_db_datetime(corrected_clock_out),
                    reason,
                    CorrectionStatus.PENDING.value,
                    int(requested_by),
                    to_db_datetime(requested_at),
                ),
            )
            return int(cur.lastrowid)

    def get(self, *, correction_id: int) -> Optional[AttendanceCorrection]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_corrections WHERE correction_id=%s",
                (int(correction_id),),
            )
            r = fetchone(cur)
            return _row_to_correction(r) if r else None

    def list_pending(self, *, staff_id: Optional[int] = None, limit: int = 200) -> Sequence[AttendanceCorrection]:
        sql = f"SELECT {_COLUMNS} FROM attendance_corrections WHERE status=%s"
        params: list = [CorrectionStatus.PENDING.value]
        if staff_id is not None:
            sql += " AND staff_id=%s"
            params.append(int(staff_id))
        sql += " ORDER BY requested_at, correction_id LIMIT %s"
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_row_to_correction(r) for r in fetchall(cur)]

    def latest_approved_for(self, *, staff_id: int, work_date: date) -> Optional[AttendanceCorrection]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_corrections
                WHERE staff_id=%s AND work_date=%s AND status=%s
                ORDER BY reviewed_at DESC, correction_id DESC
                LIMIT 1
                """,
                (int(staff_id), work_date, CorrectionStatus.APPROVED.value),
            )
            r = fetchone(cur)
            return _row_to_correction(r) if r else None

    def decide(
        self,
        *,
        correction_id: int,
        status: CorrectionStatus,
        reviewed_by: int,
        reviewed_at: datetime,
        review_notes: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_corrections
                SET status=%s, reviewed_by=%s, reviewed_at=%s, review_notes=%s
                WHERE correction_id=%s AND status=%s
                """,
                (
                    status.value,
                    int(reviewed_by),
                    to_db_datetime(reviewed_at),
                    review_notes,
                    int(correction_id),
                    CorrectionStatus.PENDING.value,
                ),
            )
            return cur.rowcount == 1
