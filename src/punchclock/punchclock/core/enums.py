from __future__ import annotations

from enum import Enum


class PunchKind(str, Enum):
    """Loại punch do thiết bị khai báo (chỉ mang tính tham khảo)."""

    IN = "IN"
    OUT = "OUT"
    BREAK_START = "BREAK_START"
    BREAK_END = "BREAK_END"


class PresenceStatus(str, Enum):
    """Day classification stored on the attendance record."""

    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    ON_LEAVE = "ON_LEAVE"
    HOLIDAY = "HOLIDAY"
    REST_DAY = "REST_DAY"


class AnomalyFlag(str, Enum):
    NO_SHIFT_ASSIGNED = "NO_SHIFT_ASSIGNED"
    INCOMPLETE_PUNCH = "INCOMPLETE_PUNCH"
    NO_PUNCHES_ON_WORKDAY = "NO_PUNCHES_ON_WORKDAY"
    EXCESSIVE_GAP = "EXCESSIVE_GAP"
    SHORT_SHIFT = "SHORT_SHIFT"
    DUPLICATE_DEVICE_EVENTS = "DUPLICATE_DEVICE_EVENTS"
    OVERTIME_CAPPED = "OVERTIME_CAPPED"
    NO_OVERTIME_POLICY = "NO_OVERTIME_POLICY"


class OvertimeCategory(str, Enum):
    PLAIN = "PLAIN"
    WEEKEND = "WEEKEND"
    HOLIDAY = "HOLIDAY"


class OvertimeApproval(str, Enum):
    AUTO_APPROVED = "AUTO_APPROVED"
    REQUIRES_APPROVAL = "REQUIRES_APPROVAL"


class PolicyScope(str, Enum):
    """Specificity of an overtime policy match, most specific first."""

    SHIFT = "SHIFT"
    DEPARTMENT = "DEPARTMENT"
    DEFAULT = "DEFAULT"


class RecordStage(str, Enum):
    PROVISIONAL = "PROVISIONAL"
    FINAL = "FINAL"


class RecordSource(str, Enum):
    PUNCHES = "PUNCHES"
    CORRECTION = "CORRECTION"


class CorrectionStatus(str, Enum):
    """Trạng thái luồng duyệt yêu cầu điều chỉnh chấm công."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class LeaveStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


class WeekStatus(str, Enum):
    RECONCILED = "RECONCILED"
    DEFERRED = "DEFERRED"
    NOT_APPLICABLE = "NOT_APPLICABLE"
