from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Iterable, Optional, Sequence

from ..attendance.repository import AttendanceRecordRepository
from ..common.datetime_utils import ensure_utc, now_utc
from ..common.validators import require_non_empty, require_positive_id
from ..core.enums import CorrectionStatus
from ..core.exceptions import DomainError, InvalidStateTransition, NotFoundError, ValidationError
from ..processing.service import AttendanceProcessingService
from .model import AttendanceCorrection, BulkReviewItem, BulkReviewResult, ReprocessResult
from .repository import CorrectionRepository

logger = logging.getLogger(__name__)


class CorrectionService:
    """Manual corrections of a day's clock-in/out: PENDING -> APPROVED | REJECTED.

    Approval reprocesses the day with the corrected times and then the
    whole ISO week; if that fails the approval stands and the result
    carries the error. Rejection changes nothing but the correction itself.
    """

    def __init__(
        self,
        corrections: CorrectionRepository,
        records: AttendanceRecordRepository,
        processor: AttendanceProcessingService,
        *,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._corrections = corrections
        self._records = records
        self._processor = processor
        self._clock = clock

    def submit(
        self,
        *,
        staff_id: int,
        work_date: date,
        corrected_clock_in: Optional[datetime],
        corrected_clock_out: Optional[datetime],
        reason: str,
        requested_by: int,
    ) -> AttendanceCorrection:
        reason = require_non_empty(reason, "Lý do")
        requested_by = require_positive_id(requested_by, "requested_by")
        if corrected_clock_in is None and corrected_clock_out is None:
            raise ValidationError("Vui lòng nhập ít nhất 1 thay đổi")

        corrected_in = ensure_utc(corrected_clock_in, field_name="corrected_clock_in") if corrected_clock_in else None
        corrected_out = ensure_utc(corrected_clock_out, field_name="corrected_clock_out") if corrected_clock_out else None

        rec = self._records.get_for_staff_and_date(staff_id=int(staff_id), work_date=work_date)
        if not rec:
            raise NotFoundError("Không tìm thấy bản ghi chấm công của ngày này")

        new_in = corrected_in or rec.clock_in
        new_out = corrected_out or rec.clock_out
        if new_in and new_out and new_out <= new_in:
            raise ValidationError("Giờ ra không thể nhỏ hơn giờ vào")

        correction_id = self._corrections.create(
            staff_id=rec.staff_id,
            work_date=rec.work_date,
            record_id=rec.record_id,
            original_clock_in=rec.clock_in,
            original_clock_out=rec.clock_out,
            corrected_clock_in=corrected_in,
            corrected_clock_out=corrected_out,
            reason=reason,
            requested_by=requested_by,
            requested_at=self._clock(),
        )
        logger.info("correction %s submitted for staff %s on %s", correction_id, rec.staff_id, rec.work_date)
        return self._get(correction_id)

    def list_pending(self, *, staff_id: Optional[int] = None, limit: int = 200) -> Sequence[AttendanceCorrection]:
        return self._corrections.list_pending(staff_id=staff_id, limit=limit)

    def approve(self, correction_id: int, *, reviewer_id: int, notes: str = "") -> ReprocessResult:
        pending = self._get_pending(correction_id)
        self._decide(pending, CorrectionStatus.APPROVED, reviewer_id, notes)

        try:
            before, after, weekly = self._processor.reprocess_day(pending.staff_id, pending.work_date)
        except DomainError as exc:
            # The approval stands; the stored record is left as it was.
            logger.exception(
                "correction %s approved but reprocessing staff %s on %s failed",
                pending.correction_id,
                pending.staff_id,
                pending.work_date,
            )
            current = self._records.get_for_staff_and_date(staff_id=pending.staff_id, work_date=pending.work_date)
            return ReprocessResult(
                correction=self._get(pending.correction_id),
                before=current,
                after=current,
                error=f"Đã duyệt nhưng xử lý lại thất bại: {exc}",
            )

        logger.info(
            "correction %s approved by %s; staff %s on %s reprocessed (version %s)",
            pending.correction_id,
            reviewer_id,
            pending.staff_id,
            pending.work_date,
            after.processing_version,
        )
        return ReprocessResult(correction=self._get(pending.correction_id), before=before, after=after, weekly=weekly)

    def reject(self, correction_id: int, *, reviewer_id: int, notes: str = "") -> AttendanceCorrection:
        pending = self._get_pending(correction_id)
        self._decide(pending, CorrectionStatus.REJECTED, reviewer_id, notes)
        logger.info("correction %s rejected by %s", pending.correction_id, reviewer_id)
        return self._get(pending.correction_id)

    def review_many(
        self,
        correction_ids: Iterable[int],
        action: CorrectionStatus,
        *,
        reviewer_id: int,
        notes: str = "",
    ) -> BulkReviewResult:
        """Approve or reject several corrections; one failure does not stop the rest."""

        if action not in (CorrectionStatus.APPROVED, CorrectionStatus.REJECTED):
            raise ValidationError(f"Hành động không hợp lệ: {action}")

        items = []
        for correction_id in correction_ids:
            try:
                message = ""
                if action == CorrectionStatus.APPROVED:
                    message = self.approve(correction_id, reviewer_id=reviewer_id, notes=notes).error or ""
                else:
                    self.reject(correction_id, reviewer_id=reviewer_id, notes=notes)
            except DomainError as exc:
                logger.warning("bulk review of correction %s failed: %s", correction_id, exc)
                items.append(BulkReviewItem(correction_id=int(correction_id), success=False, message=str(exc)))
            else:
                items.append(BulkReviewItem(correction_id=int(correction_id), success=True, message=message))
        return BulkReviewResult(items=tuple(items))

    def _get(self, correction_id: int) -> AttendanceCorrection:
        correction = self._corrections.get(correction_id=int(correction_id))
        if not correction:
            raise NotFoundError("Yêu cầu không tồn tại")
        return correction

    def _get_pending(self, correction_id: int) -> AttendanceCorrection:
        correction = self._get(correction_id)
        if correction.status != CorrectionStatus.PENDING:
            raise InvalidStateTransition("Yêu cầu đã được xử lý")
        return correction

    def _decide(self, correction: AttendanceCorrection, status: CorrectionStatus, reviewer_id: int, notes: str) -> None:
        decided = self._corrections.decide(
            correction_id=correction.correction_id,
            status=status,
            reviewed_by=require_positive_id(reviewer_id, "reviewer_id"),
            reviewed_at=self._clock(),
            review_notes=(notes or "").strip() or None,
        )
        if not decided:
            raise InvalidStateTransition("Yêu cầu đã được xử lý")
