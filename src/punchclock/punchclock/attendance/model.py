from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..common.datetime_utils import minutes_to_hours
from ..core.enums import (
    AnomalyFlag,
    OvertimeApproval,
    OvertimeCategory,
    PresenceStatus,
    RecordSource,
    RecordStage,
)
from ..overtime.model import OvertimeBreakdown

# Fields owned by the persistence layer or by the weekly pass; everything else
# is the output of the daily computation.
_BOOKKEEPING_FIELDS = ("record_id", "processing_version", "processed_at")
_WEEKLY_FIELDS = ("stage",)


@dataclass(frozen=True)
class DailyHours:
    """Minutes and deviations for one day, before overtime classification."""

    gross_minutes: int = 0
    break_deducted_minutes: int = 0
    worked_minutes: int = 0
    late_minutes: Optional[int] = None
    early_leave_minutes: Optional[int] = None


@dataclass(frozen=True)
class AttendanceRecord:
    """Thực thể miền (domain): Bản ghi chấm công của một nhân viên trong một ngày.

    Exactly one record exists per (staff_id, work_date); reprocessing
    replaces it in place. ``worked_minutes`` is after the auto-deducted break
    and, for a full leave day, equals the allocated leave minutes.
    ``late_minutes``/``early_leave_minutes`` are None when there is no data to
    judge and 0 when the staff member was on time.
    """

    staff_id: int
    work_date: date
    presence: PresenceStatus
    clock_in: Optional[datetime] = None
    clock_out: Optional[datetime] = None
    worked_minutes: int = 0
    break_deducted_minutes: int = 0
    regular_minutes: int = 0
    overtime: OvertimeBreakdown = field(default_factory=OvertimeBreakdown)
    overtime_category: Optional[OvertimeCategory] = None
    late_minutes: Optional[int] = None
    early_leave_minutes: Optional[int] = None
    leave_minutes: int = 0
    anomalies: tuple[AnomalyFlag, ...] = ()
    shift_id: Optional[int] = None
    policy_id: Optional[int] = None
    leave_request_id: Optional[int] = None
    holiday_id: Optional[int] = None
    correction_id: Optional[int] = None
    source: RecordSource = RecordSource.PUNCHES
    stage: RecordStage = RecordStage.PROVISIONAL
    record_id: Optional[int] = None
    processing_version: int = 0
    processed_at: Optional[datetime] = None

    def __post_init__(self):
        object.__setattr__(self, "anomalies", tuple(sorted(set(self.anomalies), key=lambda f: f.value)))

    @property
    def overtime_minutes(self) -> int:
        return self.overtime.total_minutes

    @property
    def net_regular_minutes(self) -> int:
        """Regular minutes left after the weekly pass moved some into overtime."""
        return self.regular_minutes - self.overtime.weekly_minutes

    @property
    def total_hours(self) -> Decimal:
        return minutes_to_hours(self.worked_minutes)

    @property
    def regular_hours(self) -> Decimal:
        return minutes_to_hours(self.net_regular_minutes)

    @property
    def overtime_hours(self) -> Decimal:
        return self.overtime.total_hours

    @property
    def payable_overtime_hours(self) -> Decimal:
        return self.overtime.payable_hours

    @property
    def approval(self) -> Optional[OvertimeApproval]:
        return self.overtime.approval

    @property
    def has_anomalies(self) -> bool:
        return bool(self.anomalies)

    def has_flag(self, flag: AnomalyFlag) -> bool:
        return flag in self.anomalies

    def same_result_as(self, other: Optional["AttendanceRecord"]) -> bool:
        """Compare computed content, ignoring id, version and processing time."""
        if other is None:
            return False
        return self._computed() == other._computed()

    def same_daily_result_as(self, other: Optional["AttendanceRecord"]) -> bool:
        """Like :meth:`same_result_as` but also ignoring what the weekly pass owns."""
        if other is None:
            return False
        return self._daily() == other._daily()

    def with_weekly(
        self, minutes: int, multiplier: Decimal, approval: Optional[OvertimeApproval]
    ) -> "AttendanceRecord":
        return replace(
            self,
            overtime=self.overtime.with_weekly(minutes, multiplier, approval),
            stage=RecordStage.FINAL,
        )

    def stamped(self, *, version: int, processed_at: datetime, record_id: Optional[int] = None) -> "AttendanceRecord":
        return replace(
            self,
            record_id=record_id if record_id is not None else self.record_id,
            processing_version=int(version),
            processed_at=processed_at,
        )

    def to_dict(self) -> dict:
        return {
            "record_id": self.record_id,
            "staff_id": self.staff_id,
            "work_date": self.work_date.isoformat(),
            "presence": self.presence.value,
            "clock_in": self.clock_in.isoformat() if self.clock_in else None,
            "clock_out": self.clock_out.isoformat() if self.clock_out else None,
            "worked_minutes": self.worked_minutes,
            "break_deducted_minutes": self.break_deducted_minutes,
            "regular_minutes": self.regular_minutes,
            "net_regular_minutes": self.net_regular_minutes,
            "total_hours": str(self.total_hours),
            "regular_hours": str(self.regular_hours),
            "overtime": self.overtime.to_dict(),
            "overtime_category": self.overtime_category.value if self.overtime_category else None,
            "late_minutes": self.late_minutes,
            "early_leave_minutes": self.early_leave_minutes,
            "leave_minutes": self.leave_minutes,
            "anomalies": [f.value for f in self.anomalies],
            "shift_id": self.shift_id,
            "policy_id": self.policy_id,
            "leave_request_id": self.leave_request_id,
            "holiday_id": self.holiday_id,
            "correction_id": self.correction_id,
            "source": self.source.value,
            "stage": self.stage.value,
            "processing_version": self.processing_version,
            "processed_at": self.processed_at.isoformat() if self.processed_at else None,
        }

    def _computed(self) -> dict:
        data = self.to_dict()
        for key in _BOOKKEEPING_FIELDS:
            data.pop(key)
        return data

    def _daily(self) -> dict:
        data = self._computed()
        for key in _WEEKLY_FIELDS:
            data.pop(key)
        data.pop("net_regular_minutes")
        data.pop("regular_hours")
        overtime = data.pop("overtime")
        for key in ("weekly_minutes", "weekly_multiplier", "approval", "total_hours", "payable_hours"):
            overtime.pop(key)
        data["overtime"] = overtime
        return data
