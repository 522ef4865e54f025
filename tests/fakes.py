from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Optional

from src.punchclock.punchclock.attendance.model import AttendanceRecord
from src.punchclock.punchclock.core.enums import CorrectionStatus, LeaveStatus, RecordStage
from src.punchclock.punchclock.core.settings import EngineSettings
from src.punchclock.punchclock.corrections.model import AttendanceCorrection
from src.punchclock.punchclock.corrections.service import CorrectionService
from src.punchclock.punchclock.leave.model import Holiday, LeaveRequest
from src.punchclock.punchclock.overtime.model import OvertimePolicy
from src.punchclock.punchclock.processing.service import AttendanceProcessingService
from src.punchclock.punchclock.punches.model import PunchEvent
from src.punchclock.punchclock.shifts.model import ScheduleOverride, Shift, ShiftAssignment
from src.punchclock.punchclock.shifts.resolver import ShiftResolver
from src.punchclock.punchclock.staff.model import StaffProfile

UTC = timezone.utc


def at(day: date, hh: int, mm: int = 0, ss: int = 0) -> datetime:
    return datetime(day.year, day.month, day.day, hh, mm, ss, tzinfo=UTC)


def punches(staff_id: int, *stamps: datetime, device_id: str = "D1", start_id: int = 1) -> list[PunchEvent]:
    return [
        PunchEvent(staff_id=staff_id, device_id=device_id, timestamp=ts, event_id=start_id + i)
        for i, ts in enumerate(stamps)
    ]


def office_shift(**overrides) -> Shift:
    values = dict(
        shift_id=1,
        shift_name="Hành chính",
        start_time=time(9, 0),
        end_time=time(17, 0),
        required_minutes=480,
        grace_minutes=5,
    )
    values.update(overrides)
    return Shift(**values)


def default_policy(**overrides) -> OvertimePolicy:
    values = dict(
        policy_id=1,
        policy_name="Default",
        effective_from=date(2020, 1, 1),
        daily_threshold_minutes=480,
        minimum_overtime_minutes=30,
        max_daily_overtime_minutes=120,
        is_default=True,
    )
    values.update(overrides)
    return OvertimePolicy(**values)


class FixedClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class InMemoryStaff:
    def __init__(self, *profiles: StaffProfile):
        self.by_id = {p.staff_id: p for p in profiles}

    def get_by_id(self, staff_id: int) -> Optional[StaffProfile]:
        return self.by_id.get(int(staff_id))

    def list_active(self):
        return [p for p in sorted(self.by_id.values(), key=lambda p: p.staff_id) if p.is_active]


class InMemoryPunches:
    def __init__(self, events=()):
        self.events: list[PunchEvent] = list(events)
        self.marked: list[int] = []

    def add(self, *events: PunchEvent) -> None:
        self.events.extend(events)

    def list_for_staff(self, *, staff_id: int, start: datetime, end: datetime):
        return [e for e in self.events if e.staff_id == staff_id and start <= e.timestamp < end]

    def list_unprocessed(self, *, limit: int = 10000):
        return [e for e in self.events if not e.is_processed][:limit]

    def mark_processed(self, *, event_ids, processed_at: datetime) -> int:
        ids = set(event_ids)
        self.events = [replace(e, is_processed=True) if e.event_id in ids else e for e in self.events]
        self.marked.extend(sorted(ids))
        return len(ids)


class InMemoryShifts:
    def __init__(self, *shifts: Shift):
        self.shifts = {s.shift_id: s for s in shifts}
        self.assignments: list[ShiftAssignment] = []
        self.schedules: dict[tuple[int, date], ScheduleOverride] = {}

    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        return self.shifts.get(int(shift_id))

    def list_for_staff(self, *, staff_id: int):
        return [a for a in self.assignments if a.staff_id == staff_id]

    def get_for_staff_and_date(self, *, staff_id: int, work_date: date) -> Optional[ScheduleOverride]:
        return self.schedules.get((staff_id, work_date))


class InMemoryPolicies:
    def __init__(self, *policies: OvertimePolicy):
        self.policies = list(policies)

    def list_active(self):
        return [p for p in self.policies if p.is_active]

    def get_by_id(self, policy_id: int) -> Optional[OvertimePolicy]:
        return next((p for p in self.policies if p.policy_id == policy_id), None)


class InMemoryLeave:
    def __init__(self, leaves=(), holidays=()):
        self.leaves: list[LeaveRequest] = list(leaves)
        self.holidays: list[Holiday] = list(holidays)

    def list_approved_for_staff(self, *, staff_id: int, start: date, end: date):
        return [
            lv
            for lv in self.leaves
            if lv.staff_id == staff_id
            and lv.status == LeaveStatus.APPROVED
            and lv.start_date <= end
            and lv.end_date >= start
        ]

    def list_for_location(self, *, location_id: Optional[int], year: int):
        return [
            h
            for h in self.holidays
            if (h.location_id is None or h.location_id == location_id) and (h.holiday_date.year == year or h.is_recurring)
        ]


class InMemoryRecords:
    def __init__(self):
        self.by_key: dict[tuple[int, date], AttendanceRecord] = {}
        self.writes = 0
        self._next_id = 1
        self._lock = threading.Lock()

    def get_for_staff_and_date(self, *, staff_id: int, work_date: date) -> Optional[AttendanceRecord]:
        return self.by_key.get((staff_id, work_date))

    def list_for_staff(self, *, staff_id: int, start: date, end: date):
        return sorted(
            (r for (sid, d), r in self.by_key.items() if sid == staff_id and start <= d <= end),
            key=lambda r: r.work_date,
        )

    def list_with_anomalies(self, *, from_date: date):
        return [r for r in self.by_key.values() if r.work_date >= from_date and r.anomalies]

    def list_provisional(self, *, until: date):
        return sorted(
            (r for r in self.by_key.values() if r.stage == RecordStage.PROVISIONAL and r.work_date <= until),
            key=lambda r: (r.staff_id, r.work_date),
        )

    def upsert(self, record: AttendanceRecord) -> AttendanceRecord:
        with self._lock:
            existing = self.by_key.get((record.staff_id, record.work_date))
            record_id = existing.record_id if existing else self._next_id
            if not existing:
                self._next_id += 1
            stored = replace(record, record_id=record_id)
            self.by_key[(record.staff_id, record.work_date)] = stored
            self.writes += 1
            return stored


class InMemoryCorrections:
    def __init__(self):
        self.by_id: dict[int, AttendanceCorrection] = {}
        self._next_id = 1

    def create(self, **kwargs) -> int:
        cid = self._next_id
        self._next_id += 1
        self.by_id[cid] = AttendanceCorrection(correction_id=cid, status=CorrectionStatus.PENDING, **kwargs)
        return cid

    def get(self, *, correction_id: int) -> Optional[AttendanceCorrection]:
        return self.by_id.get(int(correction_id))

    def list_pending(self, *, staff_id: Optional[int] = None, limit: int = 200):
        items = [
            c
            for c in self.by_id.values()
            if c.status == CorrectionStatus.PENDING and (staff_id is None or c.staff_id == staff_id)
        ]
        return items[:limit]

    def latest_approved_for(self, *, staff_id: int, work_date: date) -> Optional[AttendanceCorrection]:
        approved = [
            c
            for c in self.by_id.values()
            if c.staff_id == staff_id and c.work_date == work_date and c.status == CorrectionStatus.APPROVED
        ]
        return max(approved, key=lambda c: (c.reviewed_at, c.correction_id), default=None)

    def decide(self, *, correction_id: int, status, reviewed_by: int, reviewed_at: datetime, review_notes=None) -> bool:
        current = self.by_id.get(int(correction_id))
        if not current or current.status != CorrectionStatus.PENDING:
            return False
        self.by_id[int(correction_id)] = replace(
            current, status=status, reviewed_by=reviewed_by, reviewed_at=reviewed_at, review_notes=review_notes
        )
        return True


@dataclass
class Engine:
    """Processing and correction services wired to in-memory repositories."""

    staff: InMemoryStaff
    punches: InMemoryPunches = field(default_factory=InMemoryPunches)
    shifts: InMemoryShifts = field(default_factory=InMemoryShifts)
    policies: InMemoryPolicies = field(default_factory=InMemoryPolicies)
    leave: InMemoryLeave = field(default_factory=InMemoryLeave)
    records: InMemoryRecords = field(default_factory=InMemoryRecords)
    corrections: InMemoryCorrections = field(default_factory=InMemoryCorrections)
    settings: EngineSettings = field(default_factory=lambda: EngineSettings(batch_workers=2))
    clock: FixedClock = field(default_factory=lambda: FixedClock(datetime(2026, 3, 20, 12, 0, tzinfo=UTC)))

    def __post_init__(self):
        resolver = ShiftResolver(self.shifts, self.shifts, self.shifts, default_timezone=self.settings.default_timezone)
        self.service = AttendanceProcessingService(
            settings=self.settings,
            staff=self.staff,
            punches=self.punches,
            shift_resolver=resolver,
            policies=self.policies,
            leaves=self.leave,
            holidays=self.leave,
            records=self.records,
            corrections=self.corrections,
            clock=self.clock,
        )
        self.correction_service = CorrectionService(self.corrections, self.records, self.service, clock=self.clock)


def standard_engine(**overrides) -> Engine:
    """One staff member (id 7) on a 09:00-17:00 office shift with the default policy."""

    values = dict(
        staff=InMemoryStaff(StaffProfile(staff_id=7, department_id=3, location_id=1, shift_id=1, timezone="UTC")),
        shifts=InMemoryShifts(office_shift()),
        policies=InMemoryPolicies(default_policy()),
    )
    values.update(overrides)
    return Engine(**values)


def half_day(staff_id: int, day: date, request_id: int = 50) -> LeaveRequest:
    return LeaveRequest(
        request_id=request_id,
        staff_id=staff_id,
        start_date=day,
        end_date=day,
        status=LeaveStatus.APPROVED,
        day_fraction=Decimal("0.5"),
    )
