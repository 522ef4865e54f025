from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord


class AttendanceRecordRepository(Protocol):
    def get_for_staff_and_date(self, *, staff_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_staff(self, *, staff_id: int, start: date, end: date) -> Sequence[AttendanceRecord]:
        """Records with ``start <= work_date <= end``, ordered by date."""

        raise NotImplementedError

    def list_with_anomalies(self, *, from_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_provisional(self, *, until: date) -> Sequence[AttendanceRecord]:
        """Records still waiting for their weekly pass, with ``work_date <= until``."""

        raise NotImplementedError

    def upsert(self, record: AttendanceRecord) -> AttendanceRecord:
        """Insert or replace the single record of (staff_id, work_date); returns it with its id."""

        raise NotImplementedError
