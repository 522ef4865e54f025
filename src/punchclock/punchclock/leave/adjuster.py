from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from ..core.enums import LeaveStatus
from .model import DayCover, Holiday, LeaveRequest


class LeaveHolidayAdjuster:
    """Reconcile approved leave and the holiday calendar with a work date."""

    def __init__(self, *, default_leave_day_minutes: int = 480):
        self._default_leave_day_minutes = int(default_leave_day_minutes)

    def adjust(
        self,
        *,
        work_date: date,
        location_id: Optional[int],
        leaves: Iterable[LeaveRequest],
        holidays: Iterable[Holiday],
        required_minutes: Optional[int] = None,
    ) -> DayCover:
        covering = sorted(
            (
                lv
                for lv in leaves
                if lv.status == LeaveStatus.APPROVED and lv.affects_attendance and lv.covers(work_date)
            ),
            key=lambda lv: (-lv.day_fraction, lv.request_id),
        )
        holiday = self._holiday_for(work_date, location_id, holidays)

        if not covering:
            return DayCover(holiday=holiday)

        # Two approved half days on the same date make a full day.
        fraction = min(Decimal("1"), sum((lv.day_fraction for lv in covering), Decimal("0")))
        day_minutes = required_minutes if required_minutes else self._default_leave_day_minutes
        leave_minutes = int((Decimal(day_minutes) * fraction).to_integral_value(rounding=ROUND_HALF_UP))
        return DayCover(
            leave=covering[0],
            holiday=holiday,
            leave_fraction=fraction,
            leave_minutes=leave_minutes,
        )

    @staticmethod
    def _holiday_for(work_date: date, location_id: Optional[int], holidays: Iterable[Holiday]) -> Optional[Holiday]:
        matches = [h for h in holidays if h.is_active and h.applies_to(location_id) and h.falls_on(work_date)]
        if not matches:
            return None
        # Location-specific entries win over global ones.
        return min(matches, key=lambda h: (h.location_id is None, h.holiday_id))
