from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..attendance.model import AttendanceRecord
from ..core.enums import CorrectionStatus
from ..overtime.weekly import WeeklyOutcome


@dataclass(frozen=True)
class AttendanceCorrection:
    """Thực thể miền (domain): Yêu cầu điều chỉnh giờ vào/ra của một ngày công.

    ``original_clock_in``/``original_clock_out`` are the record's values when
    the correction was submitted. A missing corrected side falls back to the
    snapshot.
    """

    correction_id: int
    staff_id: int
    work_date: date
    record_id: Optional[int]
    original_clock_in: Optional[datetime]
    original_clock_out: Optional[datetime]
    corrected_clock_in: Optional[datetime]
    corrected_clock_out: Optional[datetime]
    reason: str
    status: CorrectionStatus = CorrectionStatus.PENDING
    requested_by: Optional[int] = None
    requested_at: Optional[datetime] = None
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    review_notes: Optional[str] = None

    @property
    def effective_clock_in(self) -> Optional[datetime]:
        return self.corrected_clock_in if self.corrected_clock_in is not None else self.original_clock_in

    @property
    def effective_clock_out(self) -> Optional[datetime]:
        return self.corrected_clock_out if self.corrected_clock_out is not None else self.original_clock_out

    @property
    def changes_clock_times(self) -> bool:
        return (self.effective_clock_in, self.effective_clock_out) != (self.original_clock_in, self.original_clock_out)

    @property
    def overrides_punches(self) -> bool:
        """Approved and actually different from what the punches produced."""
        return self.status == CorrectionStatus.APPROVED and self.changes_clock_times


@dataclass(frozen=True)
class ReprocessResult:
    """Outcome of an approval. ``error`` is set when the correction was
    approved but rerunning its day failed; the next run picks it up."""

    correction: AttendanceCorrection
    before: Optional[AttendanceRecord]
    after: Optional[AttendanceRecord]
    weekly: Optional[WeeklyOutcome] = None
    error: Optional[str] = None

    @property
    def reprocessed(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class BulkReviewItem:
    correction_id: int
    success: bool
    message: str = ""


@dataclass(frozen=True)
class BulkReviewResult:
    items: tuple[BulkReviewItem, ...]

    @property
    def succeeded(self) -> tuple[int, ...]:
        return tuple(i.correction_id for i in self.items if i.success)

    @property
    def failed(self) -> tuple[int, ...]:
        return tuple(i.correction_id for i in self.items if not i.success)
