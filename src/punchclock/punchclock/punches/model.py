from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from ..common.datetime_utils import get_zone, whole_minutes
from ..core.enums import PunchKind


@dataclass(frozen=True)
class PunchEvent:
    """Raw reading from a biometric terminal.

    ``declared_kind`` is whatever the device reported; pairing never branches
    on it. Events are never mutated or deleted by the engine.
    """

    staff_id: int
    device_id: Optional[str]
    timestamp: datetime
    declared_kind: Optional[PunchKind] = None
    verification_method: Optional[str] = None
    event_id: Optional[int] = None
    is_processed: bool = False

    def sort_key(self) -> tuple:
        return (self.timestamp, self.device_id or "", self.event_id or 0)


@dataclass(frozen=True)
class WorkInterval:
    start: datetime
    end: datetime

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def minutes(self) -> int:
        return whole_minutes(self.duration)


@dataclass(frozen=True)
class PunchWindow:
    """Half-open UTC window [start, end) of punches that belong to one work date."""

    work_date: date
    start: datetime
    end: datetime

    def contains(self, ts: datetime) -> bool:
        return self.start <= ts < self.end

    @classmethod
    def for_day(
        cls,
        work_date: date,
        *,
        tz_name: str,
        shift_start: Optional[time] = None,
        lead_minutes: int = 0,
    ) -> "PunchWindow":
        zone = get_zone(tz_name)
        if shift_start is None:
            local_start = datetime.combine(work_date, time(0, 0), tzinfo=zone)
        else:
            local_start = datetime.combine(work_date, shift_start, tzinfo=zone) - timedelta(minutes=lead_minutes)
        local_end = local_start + timedelta(days=1)
        return cls(
            work_date=work_date,
            start=local_start.astimezone(timezone.utc),
            end=local_end.astimezone(timezone.utc),
        )


@dataclass(frozen=True)
class PairingResult:
    """Ordered work intervals for one day plus any trailing unpaired punch."""

    intervals: tuple[WorkInterval, ...]
    unpaired: tuple[PunchEvent, ...] = ()
    punches: tuple[PunchEvent, ...] = ()
    collapsed_count: int = 0
    clock_in: Optional[datetime] = None
    clock_out: Optional[datetime] = None
    is_override: bool = False

    @property
    def has_punches(self) -> bool:
        return bool(self.intervals) or bool(self.unpaired)

    @property
    def is_incomplete(self) -> bool:
        return bool(self.unpaired)

    @property
    def worked(self) -> timedelta:
        return sum((i.duration for i in self.intervals), timedelta(0))

    @property
    def worked_minutes(self) -> int:
        return whole_minutes(self.worked)

    @property
    def interior_gap_minutes(self) -> int:
        """Time between consecutive intervals, i.e. explicitly punched breaks."""
        gaps = timedelta(0)
        for prev, nxt in zip(self.intervals, self.intervals[1:]):
            gaps += nxt.start - prev.end
        return whole_minutes(gaps)

    @property
    def longest_interval_minutes(self) -> int:
        return max((i.minutes for i in self.intervals), default=0)

    @classmethod
    def from_override(
        cls, staff_id: int, clock_in: Optional[datetime], clock_out: Optional[datetime]
    ) -> "PairingResult":
        """Authoritative clock values from an approved correction (no pairing)."""

        if clock_in is not None and clock_out is not None:
            intervals = (WorkInterval(start=clock_in, end=clock_out),)
            unpaired: tuple[PunchEvent, ...] = ()
        else:
            single = clock_in or clock_out
            intervals = ()
            unpaired = (PunchEvent(staff_id=staff_id, device_id=None, timestamp=single),) if single else ()
        return cls(
            intervals=intervals,
            unpaired=unpaired,
            clock_in=clock_in,
            clock_out=clock_out,
            is_override=True,
        )
