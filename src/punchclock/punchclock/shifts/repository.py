from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import ScheduleOverride, Shift, ShiftAssignment


class ShiftRepository(Protocol):
    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        raise NotImplementedError


class ShiftAssignmentRepository(Protocol):
    def list_for_staff(self, *, staff_id: int) -> Sequence[ShiftAssignment]:
        """Full assignment history; an empty result means history is not tracked."""

        raise NotImplementedError


class ScheduleRepository(Protocol):
    def get_for_staff_and_date(self, *, staff_id: int, work_date: date) -> Optional[ScheduleOverride]:
        raise NotImplementedError
