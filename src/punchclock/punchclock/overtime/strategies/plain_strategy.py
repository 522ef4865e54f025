from __future__ import annotations

from ...core.enums import OvertimeCategory
from ..model import OvertimePolicy
from .base import OvertimeStrategy


class PlainOvertimeStrategy(OvertimeStrategy):
    """Regular working day: only the excess over the daily threshold."""

    category = OvertimeCategory.PLAIN

    def base_minutes(self, *, worked_minutes: int, threshold_minutes: int, policy: OvertimePolicy) -> int:
        return self.excess(worked_minutes, threshold_minutes)