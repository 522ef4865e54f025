from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import OvertimePolicy


class OvertimePolicyRepository(Protocol):
    def list_active(self) -> Sequence[OvertimePolicy]:
        raise NotImplementedError

    def get_by_id(self, policy_id: int) -> Optional[OvertimePolicy]:
        raise NotImplementedError
