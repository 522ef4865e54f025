from __future__ import annotations

from datetime import datetime
from typing import Sequence

from ..core.enums import PunchKind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_utc, db_cursor, fetchall, to_db_datetime
from .model import PunchEvent
from .repository import PunchRepository

_COLUMNS = "log_id, staff_id, device_id, punch_time, punch_type, verification_mode, is_processed"


def _declared_kind(value) -> PunchKind | None:
    try:
        return PunchKind(str(value).upper()) if value else None
    except ValueError:
        return None


def _row_to_event(r: dict) -> PunchEvent:
    return PunchEvent(
        staff_id=int(r["staff_id"]),
        device_id=str(r["device_id"]) if r.get("device_id") is not None else None,
        timestamp=as_utc(r["punch_time"]),
        declared_kind=_declared_kind(r.get("punch_type")),
        verification_method=r.get("verification_mode"),
        event_id=int(r["log_id"]),
        is_processed=bool(r.get("is_processed")),
    )


class MySQLPunchRepository(PunchRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_staff(self, *, staff_id: int, start: datetime, end: datetime) -> Sequence[PunchEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM punch_logs
                WHERE staff_id=%s AND punch_time >= %s AND punch_time < %s AND is_valid=1
                ORDER BY punch_time, log_id
                """,
                (int(staff_id), to_db_datetime(start), to_db_datetime(end)),
            )
            return [_row_to_event(r) for r in fetchall(cur)]

    def list_unprocessed(self, *, limit: int = 10000) -> Sequence[PunchEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM punch_logs
                WHERE is_processed=0 AND is_valid=1 AND staff_id IS NOT NULL
                ORDER BY staff_id, punch_time, log_id
                LIMIT %s
                """,
                (int(limit),),
            )
            return [_row_to_event(r) for r in fetchall(cur)]

    def mark_processed(self, *, event_ids: Sequence[int], processed_at: datetime) -> int:
        ids = [int(i) for i in event_ids]
        if not ids:
            return 0
        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE punch_logs SET is_processed=1, processed_at=%s WHERE log_id IN ({placeholders})",
                (to_db_datetime(processed_at), *ids),
            )
            return cur.rowcount
