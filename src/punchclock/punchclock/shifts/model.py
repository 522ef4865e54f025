from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional

from ..core.constants import DEFAULT_GRACE_MINUTES, DEFAULT_REQUIRED_MINUTES


@dataclass(frozen=True)
class Shift:
    """Thực thể miền (domain): Ca làm việc (Shift).

    ``end_time`` earlier than (or equal to) ``start_time`` means the shift
    wraps past midnight into the next calendar day.
    """

    shift_id: int
    shift_name: str
    start_time: time
    end_time: time
    required_minutes: int = DEFAULT_REQUIRED_MINUTES
    grace_minutes: int = DEFAULT_GRACE_MINUTES
    late_threshold_minutes: int = 0
    early_leave_threshold_minutes: int = 0
    break_start: Optional[time] = None
    break_minutes: int = 0
    auto_deduct_break: bool = False
    overtime_policy_id: Optional[int] = None
    is_active: bool = True

    @property
    def wraps_midnight(self) -> bool:
        return self.end_time <= self.start_time

    @property
    def has_break(self) -> bool:
        return self.break_minutes > 0

    def bounds_on(self, work_date: date, zone: tzinfo) -> tuple[datetime, datetime]:
        start = datetime.combine(work_date, self.start_time, tzinfo=zone)
        end_date = work_date + timedelta(days=1) if self.wraps_midnight else work_date
        end = datetime.combine(end_date, self.end_time, tzinfo=zone)
        return start, end


@dataclass(frozen=True)
class ShiftAssignment:
    """Append-only history row: which shift a staff member worked from when."""

    assignment_id: int
    staff_id: int
    shift_id: int
    effective_from: date
    effective_to: Optional[date] = None

    def covers(self, day: date) -> bool:
        return self.effective_from <= day and (self.effective_to is None or day <= self.effective_to)


@dataclass(frozen=True)
class ScheduleOverride:
    """Per-date roster entry that beats any standing assignment."""

    schedule_id: int
    staff_id: int
    work_date: date
    shift_id: int
    note: Optional[str] = None


@dataclass(frozen=True)
class ShiftResolution:
    shift: Optional[Shift]
    timezone: str
    point_in_time: bool = True
    source: str = "none"

    @property
    def is_scheduled(self) -> bool:
        """An explicit roster entry puts a shift on this very date."""

        return self.source == "schedule" and self.shift is not None
