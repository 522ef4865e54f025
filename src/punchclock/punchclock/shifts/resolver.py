from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from ..staff.model import StaffProfile
from .model import Shift, ShiftResolution
from .repository import ScheduleRepository, ShiftAssignmentRepository, ShiftRepository

logger = logging.getLogger(__name__)


class ShiftResolver:
    """Effective shift for (staff, date).

    Precedence: per-date schedule override, then the assignment history row
    covering the date, then the staff member's current shift. The last case
    is not point-in-time and is reported as such.
    """

    def __init__(
        self,
        shifts: ShiftRepository,
        assignments: Optional[ShiftAssignmentRepository] = None,
        schedules: Optional[ScheduleRepository] = None,
        *,
        default_timezone: str = "UTC",
    ):
        self._shifts = shifts
        self._assignments = assignments
        self._schedules = schedules
        self._default_timezone = default_timezone

    def resolve(self, staff: StaffProfile, work_date: date) -> ShiftResolution:
        tz_name = staff.timezone or self._default_timezone

        if self._schedules:
            override = self._schedules.get_for_staff_and_date(staff_id=staff.staff_id, work_date=work_date)
            if override:
                return ShiftResolution(self._active(override.shift_id), tz_name, True, "schedule")

        history = list(self._assignments.list_for_staff(staff_id=staff.staff_id)) if self._assignments else []
        if history:
            covering = [a for a in history if a.covers(work_date)]
            if not covering:
                return ShiftResolution(None, tz_name, True, "history")
            current = max(covering, key=lambda a: (a.effective_from, a.assignment_id))
            return ShiftResolution(self._active(current.shift_id), tz_name, True, "history")

        if staff.shift_id:
            logger.debug(
                "staff %s has no shift history; using current shift %s for %s",
                staff.staff_id,
                staff.shift_id,
                work_date,
            )
            return ShiftResolution(self._active(staff.shift_id), tz_name, False, "current")

        return ShiftResolution(None, tz_name, True, "none")

    def _active(self, shift_id: int) -> Optional[Shift]:
        shift = self._shifts.get_by_id(shift_id)
        if shift is None or not shift.is_active:
            return None
        return shift
