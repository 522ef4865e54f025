from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence

from .model import PunchEvent


class PunchRepository(Protocol):
    def list_for_staff(self, *, staff_id: int, start: datetime, end: datetime) -> Sequence[PunchEvent]:
        """Punches with ``start <= timestamp < end`` (UTC)."""

        raise NotImplementedError

    def list_unprocessed(self, *, limit: int = 10000) -> Sequence[PunchEvent]:
        raise NotImplementedError

    def mark_processed(self, *, event_ids: Sequence[int], processed_at: datetime) -> int:
        raise NotImplementedError
