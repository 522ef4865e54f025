from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import CorrectionStatus
from .model import AttendanceCorrection


class CorrectionRepository(Protocol):
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
        raise NotImplementedError

    def get(self, *, correction_id: int) -> Optional[AttendanceCorrection]:
        raise NotImplementedError

    def list_pending(self, *, staff_id: Optional[int] = None, limit: int = 200) -> Sequence[AttendanceCorrection]:
        raise NotImplementedError

    def latest_approved_for(self, *, staff_id: int, work_date: date) -> Optional[AttendanceCorrection]:
        raise NotImplementedError

    def decide(
        self,
        *,
        correction_id: int,
        status: CorrectionStatus,
        reviewed_by: int,
        reviewed_at: datetime,
        review_notes: Optional[str] = None,
    ) -> bool:
        """Move a PENDING correction to ``status``. False if it was no longer pending."""

        raise NotImplementedError
