from __future__ import annotations

from dataclasses import dataclass

from .model import OvertimePolicy
from .strategies.base import OvertimeStrategy
from .strategies.holiday_strategy import HolidayOvertimeStrategy
from .strategies.plain_strategy import PlainOvertimeStrategy
from .strategies.weekend_strategy import WeekendOvertimeStrategy


@dataclass
class OvertimeStrategyFactory:
    """Factory Pattern: choose the overtime category for a day.

    A date that is both a holiday and a weekend is classified as holiday.
    """

    def for_day(self, *, policy: OvertimePolicy, is_weekend: bool, is_holiday: bool) -> OvertimeStrategy:
        if is_holiday and policy.apply_holiday_rule:
            return HolidayOvertimeStrategy()
        if is_weekend and policy.apply_weekend_rule:
            return WeekendOvertimeStrategy()
        return PlainOvertimeStrategy()
