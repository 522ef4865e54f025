from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from ..common.datetime_utils import minutes_to_hours
from ..core.constants import HOURS_QUANTUM
from ..core.enums import OvertimeApproval, PolicyScope


@dataclass(frozen=True)
class OvertimePolicy:
    """Thresholds and multipliers that classify excess worked time.

    ``daily_threshold_minutes=None`` means the shift's required minutes are
    the daily threshold. ``weekend_full_day``/``holiday_full_day`` make every
    worked minute of such a day overtime instead of only the excess.
    """

    policy_id: int
    policy_name: str
    effective_from: date
    effective_to: Optional[date] = None
    daily_threshold_minutes: Optional[int] = 480
    daily_multiplier: Decimal = Decimal("1.5")
    apply_weekly_rule: bool = True
    weekly_threshold_minutes: int = 40 * 60
    weekly_multiplier: Decimal = Decimal("1.5")
    apply_weekend_rule: bool = True
    weekend_multiplier: Decimal = Decimal("2.0")
    weekend_full_day: bool = False
    apply_holiday_rule: bool = True
    holiday_multiplier: Decimal = Decimal("3.0")
    holiday_full_day: bool = False
    max_daily_overtime_minutes: Optional[int] = None
    minimum_overtime_minutes: int = 15
    auto_approval_minutes: Optional[int] = None
    is_active: bool = True
    is_default: bool = False
    department_ids: frozenset = frozenset()

    def is_effective_on(self, day: date) -> bool:
        return self.effective_from <= day and (self.effective_to is None or day <= self.effective_to)

    def threshold_for(self, required_minutes: int) -> int:
        if self.daily_threshold_minutes is None:
            return int(required_minutes)
        return int(self.daily_threshold_minutes)

    def approval_for(self, overtime_minutes: int) -> Optional[OvertimeApproval]:
        if overtime_minutes <= 0:
            return None
        if self.auto_approval_minutes is not None and overtime_minutes <= self.auto_approval_minutes:
            return OvertimeApproval.AUTO_APPROVED
        return OvertimeApproval.REQUIRES_APPROVAL


@dataclass(frozen=True)
class PolicyResolution:
    policy: Optional[OvertimePolicy]
    scope: Optional[PolicyScope] = None
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class OvertimeBreakdown:
    """Paid overtime per category, in minutes, with the multipliers applied to each."""

    plain_minutes: int = 0
    weekend_minutes: int = 0
    holiday_minutes: int = 0
    weekly_minutes: int = 0
    plain_multiplier: Decimal = Decimal("1")
    weekend_multiplier: Decimal = Decimal("1")
    holiday_multiplier: Decimal = Decimal("1")
    weekly_multiplier: Decimal = Decimal("1")
    capped_minutes: int = 0
    discarded_minutes: int = 0
    approval: Optional[OvertimeApproval] = None

    @property
    def total_minutes(self) -> int:
        return self.plain_minutes + self.weekend_minutes + self.holiday_minutes + self.weekly_minutes

    @property
    def total_hours(self) -> Decimal:
        return minutes_to_hours(self.total_minutes)

    @property
    def payable_hours(self) -> Decimal:
        weighted = (
            Decimal(self.plain_minutes) * self.plain_multiplier
            + Decimal(self.weekend_minutes) * self.weekend_multiplier
            + Decimal(self.holiday_minutes) * self.holiday_multiplier
            + Decimal(self.weekly_minutes) * self.weekly_multiplier
        )
        return (weighted / Decimal(60)).quantize(Decimal(HOURS_QUANTUM), rounding=ROUND_HALF_UP)

    def with_weekly(self, minutes: int, multiplier: Decimal, approval: Optional[OvertimeApproval]) -> "OvertimeBreakdown":
        return replace(self, weekly_minutes=int(minutes), weekly_multiplier=multiplier, approval=approval)

    def to_dict(self) -> dict:
        return {
            "plain_minutes": self.plain_minutes,
            "weekend_minutes": self.weekend_minutes,
            "holiday_minutes": self.holiday_minutes,
            "weekly_minutes": self.weekly_minutes,
            "plain_multiplier": str(self.plain_multiplier),
            "weekend_multiplier": str(self.weekend_multiplier),
            "holiday_multiplier": str(self.holiday_multiplier),
            "weekly_multiplier": str(self.weekly_multiplier),
            "capped_minutes": self.capped_minutes,
            "discarded_minutes": self.discarded_minutes,
            "approval": self.approval.value if self.approval else None,
            "total_hours": str(self.total_hours),
            "payable_hours": str(self.payable_hours),
        }
