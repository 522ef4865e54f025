from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from ..core.enums import LeaveStatus


@dataclass(frozen=True)
class LeaveRequest:
    request_id: int
    staff_id: int
    start_date: date
    end_date: date
    status: LeaveStatus
    day_fraction: Decimal = Decimal("1")
    affects_attendance: bool = True
    reason: Optional[str] = None

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


@dataclass(frozen=True)
class Holiday:
    holiday_id: int
    holiday_name: str
    holiday_date: date
    location_id: Optional[int] = None
    is_recurring: bool = False
    is_active: bool = True

    def falls_on(self, day: date) -> bool:
        if self.is_recurring:
            return (self.holiday_date.month, self.holiday_date.day) == (day.month, day.day)
        return self.holiday_date == day

    def applies_to(self, location_id: Optional[int]) -> bool:
        return self.location_id is None or self.location_id == location_id


@dataclass(frozen=True)
class DayCover:
    """Leave/holiday facts that override presence for one (staff, date)."""

    leave: Optional[LeaveRequest] = None
    holiday: Optional[Holiday] = None
    leave_fraction: Decimal = Decimal("0")
    leave_minutes: int = 0

    @property
    def is_full_leave(self) -> bool:
        return self.leave is not None and self.leave_fraction >= 1

    @property
    def is_partial_leave(self) -> bool:
        return self.leave is not None and self.leave_fraction < 1

    @property
    def is_holiday(self) -> bool:
        return self.holiday is not None
