from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import Holiday, LeaveRequest


class LeaveRepository(Protocol):
    def list_approved_for_staff(self, *, staff_id: int, start: date, end: date) -> Sequence[LeaveRequest]:
        """Approved leave requests overlapping [start, end]."""

        raise NotImplementedError


class HolidayRepository(Protocol):
    def list_for_location(self, *, location_id: Optional[int], year: int) -> Sequence[Holiday]:
        """Holidays of the location plus global ones, recurring entries included."""

        raise NotImplementedError
