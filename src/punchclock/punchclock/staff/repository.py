from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import StaffProfile


class StaffRepository(Protocol):
    def get_by_id(self, staff_id: int) -> Optional[StaffProfile]:
        raise NotImplementedError

    def list_active(self) -> Sequence[StaffProfile]:
        raise NotImplementedError
