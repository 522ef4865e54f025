from __future__ import annotations

from abc import ABC, abstractmethod

from ...core.enums import OvertimeCategory
from ..model import OvertimePolicy


class OvertimeStrategy(ABC):
    """Strategy Pattern: how one category of day turns worked time into overtime."""

    category: OvertimeCategory

    @abstractmethod
    def base_minutes(self, *, worked_minutes: int, threshold_minutes: int, policy: OvertimePolicy) -> int:
        raise NotImplementedError

    @staticmethod
    def excess(worked_minutes: int, threshold_minutes: int) -> int:
        return max(0, int(worked_minutes) - int(threshold_minutes))
