from __future__ import annotations

from ...core.enums import OvertimeCategory
from ..model import OvertimePolicy
from .base import OvertimeStrategy


class WeekendOvertimeStrategy(OvertimeStrategy):
    category = OvertimeCategory.WEEKEND

    def base_minutes(self, *, worked_minutes: int, threshold_minutes: int, policy: OvertimePolicy) -> int:
        if policy.weekend_full_day:
            return max(0, int(worked_minutes))
        return self.excess(worked_minutes, threshold_minutes)