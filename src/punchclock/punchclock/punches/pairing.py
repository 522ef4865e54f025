from __future__ import annotations

import dataclasses
from typing import Iterable, Optional

from ..common.datetime_utils import ensure_utc
from .model import PairingResult, PunchEvent, PunchWindow, WorkInterval


class PunchPairer:
    """Turn an unordered bag of punches into ordered work intervals.

    Ordering is derived from timestamps only. The first chronological punch
    opens an interval, the next closes it, alternating. A trailing odd punch
    stays unpaired and contributes no worked time.
    """

    def __init__(self, *, debounce_seconds: int = 60):
        self._debounce_seconds = int(debounce_seconds)

    def pair(self, events: Iterable[PunchEvent], window: Optional[PunchWindow] = None) -> PairingResult:
        normalized = [
            dataclasses.replace(e, timestamp=ensure_utc(e.timestamp, field_name=f"punch {e.event_id}"))
            for e in events
        ]
        if window is not None:
            normalized = [e for e in normalized if window.contains(e.timestamp)]

        ordered = sorted(normalized, key=PunchEvent.sort_key)
        kept, collapsed = self._debounce(ordered)

        intervals: list[WorkInterval] = []
        for opening, closing in zip(kept[0::2], kept[1::2]):
            intervals.append(WorkInterval(start=opening.timestamp, end=closing.timestamp))

        unpaired = (kept[-1],) if len(kept) % 2 else ()
        return PairingResult(
            intervals=tuple(intervals),
            unpaired=unpaired,
            punches=tuple(kept),
            collapsed_count=collapsed,
            clock_in=kept[0].timestamp if kept else None,
            clock_out=intervals[-1].end if intervals else None,
        )

    def _debounce(self, ordered: list[PunchEvent]) -> tuple[list[PunchEvent], int]:
        # Compare against the last *kept* event of the same device so a burst
        # of presses collapses into its first reading.
        last_kept: dict[Optional[str], PunchEvent] = {}
        kept: list[PunchEvent] = []
        collapsed = 0
        for event in ordered:
            previous = last_kept.get(event.device_id)
            if previous is not None:
                gap = (event.timestamp - previous.timestamp).total_seconds()
                if gap < self._debounce_seconds:
                    collapsed += 1
                    continue
            last_kept[event.device_id] = event
            kept.append(event)
        return kept, collapsed
