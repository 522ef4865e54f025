from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import OvertimeCategory
from .factory import OvertimeStrategyFactory
from .model import OvertimeBreakdown, OvertimePolicy


@dataclass(frozen=True)
class OvertimeOutcome:
    category: OvertimeCategory
    breakdown: OvertimeBreakdown
    capped: bool = False


class OvertimeEngine:
    """Apply one effective policy to a day's worked minutes.

    Order of rules: pick the category, take the base minutes for that
    category, discard the base entirely when it is below the policy's
    minimum, then cap it. Minutes above the cap stay worked time but are not
    paid as overtime.
    """

    def __init__(self, *, strategy_factory: Optional[OvertimeStrategyFactory] = None):
        self._factory = strategy_factory or OvertimeStrategyFactory()

    def compute(
        self,
        *,
        worked_minutes: int,
        required_minutes: int,
        policy: OvertimePolicy,
        is_weekend: bool,
        is_holiday: bool,
    ) -> OvertimeOutcome:
        strategy = self._factory.for_day(policy=policy, is_weekend=is_weekend, is_holiday=is_holiday)
        base = strategy.base_minutes(
            worked_minutes=worked_minutes,
            threshold_minutes=policy.threshold_for(required_minutes),
            policy=policy,
        )

        discarded = 0
        if base < int(policy.minimum_overtime_minutes):
            discarded, base = base, 0

        capped_minutes = 0
        cap = policy.max_daily_overtime_minutes
        if cap is not None and base > int(cap):
            capped_minutes, base = base - int(cap), int(cap)

        minutes = {category: 0 for category in OvertimeCategory}
        minutes[strategy.category] = base

        breakdown = OvertimeBreakdown(
            plain_minutes=minutes[OvertimeCategory.PLAIN],
            weekend_minutes=minutes[OvertimeCategory.WEEKEND],
            holiday_minutes=minutes[OvertimeCategory.HOLIDAY],
            plain_multiplier=policy.daily_multiplier,
            weekend_multiplier=policy.weekend_multiplier,
            holiday_multiplier=policy.holiday_multiplier,
            weekly_multiplier=policy.weekly_multiplier,
            capped_minutes=capped_minutes,
            discarded_minutes=discarded,
            approval=policy.approval_for(base),
        )
        return OvertimeOutcome(category=strategy.category, breakdown=breakdown, capped=capped_minutes > 0)
