from __future__ import annotations

import json
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import (
    AnomalyFlag,
    OvertimeApproval,
    OvertimeCategory,
    PresenceStatus,
    RecordSource,
    RecordStage,
)
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_utc, db_cursor, fetchall, fetchone, to_db_datetime
from ..overtime.model import OvertimeBreakdown
from .model import AttendanceRecord
from .repository import AttendanceRecordRepository

_COLUMNS = """
    record_id, staff_id, work_date, presence, clock_in, clock_out,
    worked_minutes, break_deducted_minutes, regular_minutes,
    plain_overtime_minutes, weekend_overtime_minutes, holiday_overtime_minutes, weekly_overtime_minutes,
    plain_multiplier, weekend_multiplier, holiday_multiplier, weekly_multiplier,
    capped_overtime_minutes, discarded_overtime_minutes, overtime_approval, overtime_category,
    late_minutes, early_leave_minutes, leave_minutes, anomaly_flags,
    shift_id, policy_id, leave_request_id, holiday_id, correction_id,
    source, stage, processing_version, processed_at
"""


def _opt_int(value) -> Optional[int]:
    return int(value) if value is not None else None


def _flags_from_db(value) -> tuple[AnomalyFlag, ...]:
    if not value:
        return ()
    raw = json.loads(value) if isinstance(value, (str, bytes)) else value
    return tuple(AnomalyFlag(v) for v in raw)


def _row_to_record(r: dict) -> AttendanceRecord:
    overtime = OvertimeBreakdown(
        plain_minutes=int(r.get("plain_overtime_minutes") or 0),
        weekend_minutes=int(r.get("weekend_overtime_minutes") or 0),
        holiday_minutes=int(r.get("holiday_overtime_minutes") or 0),
        weekly_minutes=int(r.get("weekly_overtime_minutes") or 0),
        plain_multiplier=Decimal(str(r.get("plain_multiplier") or "1")),
        weekend_multiplier=Decimal(str(r.get("weekend_multiplier") or "1")),
        holiday_multiplier=Decimal(str(r.get("holiday_multiplier") or "1")),
        weekly_multiplier=Decimal(str(r.get("weekly_multiplier") or "1")),
        capped_minutes=int(r.get("capped_overtime_minutes") or 0),
        discarded_minutes=int(r.get("discarded_overtime_minutes") or 0),
        approval=OvertimeApproval(r["overtime_approval"]) if r.get("overtime_approval") else None,
    )
    return AttendanceRecord(
        record_id=int(r["record_id"]),
        staff_id=int(r["staff_id"]),
        work_date=r["work_date"],
        presence=PresenceStatus(r["presence"]),
        clock_in=as_utc(r.get("clock_in")),
        clock_out=as_utc(r.get("clock_out")),
        worked_minutes=int(r.get("worked_minutes") or 0),
        break_deducted_minutes=int(r.get("break_deducted_minutes") or 0),
        regular_minutes=int(r.get("regular_minutes") or 0),
        overtime=overtime,
        overtime_category=OvertimeCategory(r["overtime_category"]) if r.get("overtime_category") else None,
        late_minutes=_opt_int(r.get("late_minutes")),
        early_leave_minutes=_opt_int(r.get("early_leave_minutes")),
        leave_minutes=int(r.get("leave_minutes") or 0),
        anomalies=_flags_from_db(r.get("anomaly_flags")),
        shift_id=_opt_int(r.get("shift_id")),
        policy_id=_opt_int(r.get("policy_id")),
        leave_request_id=_opt_int(r.get("leave_request_id")),
        holiday_id=_opt_int(r.get("holiday_id")),
        correction_id=_opt_int(r.get("correction_id")),
        source=RecordSource(r.get("source") or RecordSource.PUNCHES.value),
        stage=RecordStage(r.get("stage") or RecordStage.PROVISIONAL.value),
        processing_version=int(r.get("processing_version") or 0),
        processed_at=as_utc(r.get("processed_at")),
    )


def _record_params(rec: AttendanceRecord) -> tuple:
    ot = rec.overtime
    return (
        rec.staff_id,
        rec.work_date,
        rec.presence.value,
        to_db_datetime(rec.clock_in),
        to_db_datetime(rec.clock_out),
        rec.worked_minutes,
        rec.break_deducted_minutes,
        rec.regular_minutes,
        ot.plain_minutes,
        ot.weekend_minutes,
        ot.holiday_minutes,
        ot.weekly_minutes,
        str(ot.plain_multiplier),
        str(ot.weekend_multiplier),
        str(ot.holiday_multiplier),
        str(ot.weekly_multiplier),
        ot.capped_minutes,
        ot.discarded_minutes,
        ot.approval.value if ot.approval else None,
        rec.overtime_category.value if rec.overtime_category else None,
        rec.late_minutes,
        rec.early_leave_minutes,
        rec.leave_minutes,
        json.dumps([f.value for f in rec.anomalies]),
        rec.shift_id,
        rec.policy_id,
        rec.leave_request_id,
        rec.holiday_id,
        rec.correction_id,
        rec.source.value,
        rec.stage.value,
        rec.processing_version,
        to_db_datetime(rec.processed_at),
    )


class MySQLAttendanceRecordRepository(AttendanceRecordRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_staff_and_date(self, *, staff_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE staff_id=%s AND work_date=%s",
                (int(staff_id), work_date),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def list_for_staff(self, *, staff_id: int, start: date, end: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE staff_id=%s AND work_date BETWEEN %s AND %s
                ORDER BY work_date
                """,
                (int(staff_id), start, end),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def list_with_anomalies(self, *, from_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE work_date >= %s AND JSON_LENGTH(anomaly_flags) > 0
                ORDER BY staff_id, work_date
                """,
                (from_date,),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def list_provisional(self, *, until: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE stage=%s AND work_date <= %s
                ORDER BY staff_id, work_date
                """,
                (RecordStage.PROVISIONAL.value, until),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def upsert(self, record: AttendanceRecord) -> AttendanceRecord:
        params = _record_params(record)
        columns = [c.strip() for c in _COLUMNS.split(",")][1:]
        updates = ", ".join(f"{c}=VALUES({c})" for c in columns if c not in ("staff_id", "work_date"))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO attendance_records({", ".join(columns)})
                VALUES({", ".join(["%s"] * len(columns))})
                ON DUPLICATE KEY UPDATE record_id=LAST_INSERT_ID(record_id), {updates}
                """,
                params,
            )
            return replace(record, record_id=int(cur.lastrowid))
