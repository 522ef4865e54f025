from __future__ import annotations

from decimal import Decimal
from typing import Optional

from ..core.constants import DEFAULT_DUPLICATE_EVENT_THRESHOLD, DEFAULT_MAX_INTERVAL_MINUTES, DEFAULT_SHORT_SHIFT_RATIO
from ..core.enums import AnomalyFlag, PresenceStatus
from ..leave.model import DayCover
from ..punches.model import PairingResult
from ..shifts.model import Shift
from .model import DailyHours


class AnomalyDetector:
    """Raise advisory flags for a computed day. Flags never block a record."""

    def __init__(
        self,
        *,
        max_interval_minutes: int = DEFAULT_MAX_INTERVAL_MINUTES,
        short_shift_ratio: Decimal = Decimal(DEFAULT_SHORT_SHIFT_RATIO),
        duplicate_event_threshold: int = DEFAULT_DUPLICATE_EVENT_THRESHOLD,
    ):
        self._max_interval_minutes = int(max_interval_minutes)
        self._short_shift_ratio = Decimal(short_shift_ratio)
        self._duplicate_event_threshold = int(duplicate_event_threshold)

    def detect(
        self,
        *,
        pairing: PairingResult,
        shift: Optional[Shift],
        hours: DailyHours,
        presence: PresenceStatus,
        cover: DayCover,
        overtime_capped: bool = False,
        policy_missing: bool = False,
    ) -> tuple[AnomalyFlag, ...]:
        flags: set[AnomalyFlag] = set()

        if shift is None:
            flags.add(AnomalyFlag.NO_SHIFT_ASSIGNED)
        if pairing.is_incomplete:
            flags.add(AnomalyFlag.INCOMPLETE_PUNCH)
        if presence == PresenceStatus.ABSENT and shift is not None:
            flags.add(AnomalyFlag.NO_PUNCHES_ON_WORKDAY)
        if pairing.longest_interval_minutes > self._max_interval_minutes:
            flags.add(AnomalyFlag.EXCESSIVE_GAP)
        if self._is_short(pairing, shift, hours, presence, cover):
            flags.add(AnomalyFlag.SHORT_SHIFT)
        if pairing.collapsed_count > self._duplicate_event_threshold:
            flags.add(AnomalyFlag.DUPLICATE_DEVICE_EVENTS)
        if overtime_capped:
            flags.add(AnomalyFlag.OVERTIME_CAPPED)
        if policy_missing:
            flags.add(AnomalyFlag.NO_OVERTIME_POLICY)

        return tuple(sorted(flags, key=lambda f: f.value))

    def _is_short(
        self,
        pairing: PairingResult,
        shift: Optional[Shift],
        hours: DailyHours,
        presence: PresenceStatus,
        cover: DayCover,
    ) -> bool:
        # Only a complete, fully worked day can be judged short.
        if shift is None or presence != PresenceStatus.PRESENT:
            return False
        if not pairing.intervals or pairing.is_incomplete or cover.leave is not None:
            return False
        return Decimal(hours.worked_minutes) < Decimal(shift.required_minutes) * self._short_shift_ratio
