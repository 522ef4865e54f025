from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class StaffProfile:
    """Thực thể miền (domain): nhân viên, chỉ gồm các trường engine cần."""

    staff_id: int
    department_id: Optional[int] = None
    location_id: Optional[int] = None
    shift_id: Optional[int] = None
    timezone: Optional[str] = None
    is_active: bool = True
