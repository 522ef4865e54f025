from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional

from ..common.datetime_utils import get_zone, whole_minutes
from ..punches.model import PairingResult
from ..shifts.model import Shift
from .model import DailyHours


class DeviationCalculator:
    """Worked minutes, break deduction, lateness and early leave for one day.

    All shift boundaries are built in the staff member's timezone; punches
    are aware UTC datetimes, so the subtraction is exact across DST changes.
    """

    def calculate(
        self,
        pairing: PairingResult,
        *,
        shift: Optional[Shift],
        work_date: date,
        tz_name: str,
    ) -> DailyHours:
        gross = pairing.worked_minutes
        deducted = self._break_deduction(pairing, shift, gross)

        late = early = None
        if shift is not None:
            start, end = shift.bounds_on(work_date, get_zone(tz_name))
            if pairing.clock_in is not None:
                late = self._late_minutes(pairing.clock_in, start, shift)
            if pairing.clock_out is not None:
                early = self._early_leave_minutes(pairing.clock_out, end, shift)

        return DailyHours(
            gross_minutes=gross,
            break_deducted_minutes=deducted,
            worked_minutes=gross - deducted,
            late_minutes=late,
            early_leave_minutes=early,
        )

    @staticmethod
    def _break_deduction(pairing: PairingResult, shift: Optional[Shift], gross: int) -> int:
        # Explicitly punched breaks already reduce worked time; only top up.
        if shift is None or not shift.has_break or not shift.auto_deduct_break or gross <= 0:
            return 0
        missing = max(0, shift.break_minutes - pairing.interior_gap_minutes)
        return min(missing, gross)

    @staticmethod
    def _late_minutes(first_in: datetime, shift_start: datetime, shift: Shift) -> int:
        late = whole_minutes(first_in - (shift_start + timedelta(minutes=shift.grace_minutes)))
        if late <= 0 or late <= shift.late_threshold_minutes:
            return 0
        return late

    @staticmethod
    def _early_leave_minutes(last_out: datetime, shift_end: datetime, shift: Shift) -> int:
        early = whole_minutes((shift_end - timedelta(minutes=shift.early_leave_threshold_minutes)) - last_out)
        return max(0, early)
