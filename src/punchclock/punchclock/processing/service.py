from __future__ import annotations

import logging
import threading
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, Iterable, Optional

from ..attendance.model import AttendanceRecord
from ..attendance.pipeline import DailyAttendancePipeline, DayInputs
from ..attendance.repository import AttendanceRecordRepository
from ..common.datetime_utils import get_zone, iso_week_start, iter_dates, now_utc
from ..common.validators import require_date_order
from ..core.enums import WeekStatus
from ..core.exceptions import NotFoundError, WeekNotReadyError
from ..core.settings import EngineSettings
from ..corrections.repository import CorrectionRepository
from ..leave.repository import HolidayRepository, LeaveRepository
from ..overtime.model import OvertimePolicy
from ..overtime.repository import OvertimePolicyRepository
from ..overtime.weekly import WeeklyOutcome, WeeklyReconciler
from ..punches.model import PunchEvent, PunchWindow
from ..punches.repository import PunchRepository
from ..shifts.model import ShiftResolution
from ..shifts.resolver import ShiftResolver
from ..staff.model import StaffProfile
from ..staff.repository import StaffRepository
from .batch import BatchReport, BatchRunner
from .locks import KeyedLocks

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DayResult:
    before: Optional[AttendanceRecord]
    record: AttendanceRecord
    changed: bool
    warnings: tuple[str, ...] = ()
    event_ids: tuple[int, ...] = ()


class AttendanceProcessingService:
    """Turn raw punches into stored attendance records.

    Every public method is a plain call; scheduling them (nightly jobs,
    retries) is up to the caller. A daily unit reads its inputs, runs the
    pure pipeline and upserts the single record of (staff, date). The weekly
    pass for a (staff, ISO week) is serialised by a per-week lock.
    """

    def __init__(
        self,
        *,
        settings: EngineSettings,
        staff: StaffRepository,
        punches: PunchRepository,
        shift_resolver: ShiftResolver,
        policies: OvertimePolicyRepository,
        leaves: LeaveRepository,
        holidays: HolidayRepository,
        records: AttendanceRecordRepository,
        corrections: CorrectionRepository,
        pipeline: Optional[DailyAttendancePipeline] = None,
        reconciler: Optional[WeeklyReconciler] = None,
        runner: Optional[BatchRunner] = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._settings = settings
        self._staff = staff
        self._punches = punches
        self._shift_resolver = shift_resolver
        self._policies = policies
        self._leaves = leaves
        self._holidays = holidays
        self._records = records
        self._corrections = corrections
        self._pipeline = pipeline or DailyAttendancePipeline(settings)
        self._reconciler = reconciler or WeeklyReconciler()
        self._runner = runner or BatchRunner(workers=settings.batch_workers)
        self._clock = clock
        self._week_locks = KeyedLocks()

    # ---- single units ----------------------------------------------------

    def compute_day(self, staff_id: int, work_date: date) -> DayResult:
        """Daily phase only: compute and store one record, no weekly pass."""

        staff = self._get_staff(staff_id)
        inputs = self._gather(staff, work_date)
        outcome = self._pipeline.compute(inputs)
        for warning in outcome.warnings:
            logger.warning("staff %s on %s: %s", staff_id, work_date, warning)

        with self._week_locks.lock_for((staff.staff_id, iso_week_start(work_date))):
            before = self._records.get_for_staff_and_date(staff_id=staff.staff_id, work_date=work_date)
            stored, changed = self._store_daily(outcome.record, before)

        return DayResult(
            before=before,
            record=stored,
            changed=changed,
            warnings=outcome.warnings,
            event_ids=tuple(p.event_id for p in inputs.punches if p.event_id is not None),
        )

    def reconcile_week(self, staff_id: int, week_start: date) -> WeeklyOutcome:
        week_start = iso_week_start(week_start)
        with self._week_locks.lock_for((int(staff_id), week_start)):
            records = self._records.list_for_staff(
                staff_id=staff_id, start=week_start, end=week_start + timedelta(days=6)
            )
            try:
                outcome = self._reconciler.reconcile(
                    staff_id=int(staff_id),
                    week_start=week_start,
                    records=records,
                    policies=self._policy_map(records),
                    week_closed=self._week_closed(week_start),
                )
            except WeekNotReadyError as exc:
                logger.warning("weekly pass deferred: %s", exc)
                return WeeklyOutcome(
                    staff_id=int(staff_id),
                    week_start=week_start,
                    status=WeekStatus.DEFERRED,
                    records=tuple(records),
                    missing_days=exc.missing_days,
                )

            by_date = {r.work_date: r for r in records}
            stored = tuple(self._store_final(r, by_date.get(r.work_date)) for r in outcome.records)

        return WeeklyOutcome(
            staff_id=outcome.staff_id,
            week_start=outcome.week_start,
            status=outcome.status,
            records=stored,
            missing_days=outcome.missing_days,
            policy_id=outcome.policy_id,
        )

    def process_day(self, staff_id: int, work_date: date) -> tuple[DayResult, WeeklyOutcome]:
        result = self.compute_day(staff_id, work_date)
        weekly = self.reconcile_week(staff_id, iso_week_start(work_date))
        final = next((r for r in weekly.records if r.work_date == work_date), result.record)
        return (
            DayResult(
                before=result.before,
                record=final,
                changed=result.changed,
                warnings=result.warnings,
                event_ids=result.event_ids,
            ),
            weekly,
        )

    # ---- batches ---------------------------------------------------------

    def process_range(
        self, staff_id: int, start: date, end: date, *, cancel_event: Optional[threading.Event] = None
    ) -> BatchReport:
        require_date_order(start, end)
        units = [(int(staff_id), d) for d in iter_dates(start, end)]
        return self._run(units, cancel_event=cancel_event)

    def process_all_staff(self, work_date: date, *, cancel_event: Optional[threading.Event] = None) -> BatchReport:
        units = [(s.staff_id, work_date) for s in self._staff.list_active()]
        return self._run(units, cancel_event=cancel_event)

    def reprocess_anomalies(self, from_date: date, *, cancel_event: Optional[threading.Event] = None) -> BatchReport:
        units = [(r.staff_id, r.work_date) for r in self._records.list_with_anomalies(from_date=from_date)]
        return self._run(units, cancel_event=cancel_event)

    def process_pending(self, *, limit: int = 10000, cancel_event: Optional[threading.Event] = None) -> BatchReport:
        """Process every (staff, date) that has unprocessed punches.

        Punches are marked processed only for the units that succeeded.
        Weeks that were deferred while open and have closed since get their
        weekly pass here too.
        """

        pending = list(self._punches.list_unprocessed(limit=limit))
        by_unit: dict[tuple[int, date], list[int]] = defaultdict(list)
        staff_cache: dict[int, Optional[StaffProfile]] = {}

        for event in pending:
            if event.staff_id not in staff_cache:
                staff_cache[event.staff_id] = self._staff.get_by_id(event.staff_id)
            staff = staff_cache[event.staff_id]
            if staff is None:
                logger.warning("punch %s belongs to unknown staff %s; skipped", event.event_id, event.staff_id)
                continue
            by_unit[(staff.staff_id, self._work_date_for(staff, event))].append(event.event_id)

        processed_ids: dict[tuple[int, date], tuple[int, ...]] = {}

        def day_fn(staff_id: int, work_date: date) -> DayResult:
            result = self.compute_day(staff_id, work_date)
            processed_ids[(staff_id, work_date)] = result.event_ids
            return result

        report = self._runner.run(
            by_unit.keys(),
            day_fn=day_fn,
            week_fn=self.reconcile_week,
            weeks=self._closed_provisional_weeks(),
            cancel_event=cancel_event,
        )

        done: set[int] = set()
        for unit in report.succeeded:
            done.update(i for i in by_unit.get(unit, ()) if i is not None)
            done.update(processed_ids.get(unit, ()))
        if done:
            self._punches.mark_processed(event_ids=sorted(done), processed_at=self._clock())
        logger.info("pending punches: %s read, %s marked processed", len(pending), len(done))
        return report

    def reprocess_day(self, staff_id: int, work_date: date) -> tuple[Optional[AttendanceRecord], AttendanceRecord, WeeklyOutcome]:
        """Rerun a day and its week; returns the record before, after and the weekly outcome."""

        result, weekly = self.process_day(staff_id, work_date)
        return result.before, result.record, weekly

    # ---- helpers ---------------------------------------------------------

    def _run(self, units: Iterable[tuple[int, date]], *, cancel_event: Optional[threading.Event]) -> BatchReport:
        return self._runner.run(units, day_fn=self.compute_day, week_fn=self.reconcile_week, cancel_event=cancel_event)

    def _get_staff(self, staff_id: int) -> StaffProfile:
        staff = self._staff.get_by_id(int(staff_id))
        if staff is None:
            raise NotFoundError(f"staff {staff_id} not found")
        return staff

    def _resolutions(
        self, staff: StaffProfile, work_date: date
    ) -> tuple[ShiftResolution, ShiftResolution, ShiftResolution]:
        """Resolutions of the day before, the day itself and the day after."""

        one_day = timedelta(days=1)
        return (
            self._shift_resolver.resolve(staff, work_date - one_day),
            self._shift_resolver.resolve(staff, work_date),
            self._shift_resolver.resolve(staff, work_date + one_day),
        )

    def _window(self, staff: StaffProfile, work_date: date) -> PunchWindow:
        previous, resolution, following = self._resolutions(staff, work_date)
        return self._pipeline.window_for(work_date, resolution, previous=previous, following=following)

    def _gather(self, staff: StaffProfile, work_date: date) -> DayInputs:
        previous, resolution, following = self._resolutions(staff, work_date)
        window = self._pipeline.window_for(work_date, resolution, previous=previous, following=following)
        punches = self._punches.list_for_staff(staff_id=staff.staff_id, start=window.start, end=window.end)
        return DayInputs(
            staff=staff,
            work_date=work_date,
            shift_resolution=resolution,
            punches=tuple(punches),
            policies=tuple(self._policies.list_active()),
            leaves=tuple(self._leaves.list_approved_for_staff(staff_id=staff.staff_id, start=work_date, end=work_date)),
            holidays=tuple(self._holidays.list_for_location(location_id=staff.location_id, year=work_date.year)),
            correction=self._corrections.latest_approved_for(staff_id=staff.staff_id, work_date=work_date),
            previous_resolution=previous,
            next_resolution=following,
        )

    def _work_date_for(self, staff: StaffProfile, event: PunchEvent) -> date:
        # The day whose window contains the punch; windows are anchored on
        # the shift start, so an early-morning punch can belong to yesterday.
        tz_name = staff.timezone or self._settings.default_timezone
        local_day = event.timestamp.astimezone(get_zone(tz_name)).date()
        for candidate in (local_day - timedelta(days=1), local_day, local_day + timedelta(days=1)):
            if self._window(staff, candidate).contains(event.timestamp):
                return candidate
        return local_day

    def _closed_provisional_weeks(self) -> list[tuple[int, date]]:
        # Weeks deferred while open get their weekly pass once they close.
        last_closed = self._clock().date() - timedelta(days=1 + self._settings.week_close_after_days)
        weeks = {(r.staff_id, iso_week_start(r.work_date)) for r in self._records.list_provisional(until=last_closed)}
        return sorted(w for w in weeks if self._week_closed(w[1]))

    def _week_closed(self, week_start: date) -> bool:
        today = self._clock().date()
        return today >= week_start + timedelta(days=7 + self._settings.week_close_after_days)

    def _policy_map(self, records: Iterable[AttendanceRecord]) -> dict[int, OvertimePolicy]:
        policies = {p.policy_id: p for p in self._policies.list_active()}
        for record in records:
            if record.policy_id is not None and record.policy_id not in policies:
                policy = self._policies.get_by_id(record.policy_id)
                if policy is not None:
                    policies[policy.policy_id] = policy
        return policies

    def _store_daily(
        self, computed: AttendanceRecord, existing: Optional[AttendanceRecord]
    ) -> tuple[AttendanceRecord, bool]:
        # Same daily result: leave the stored record (and its weekly part) alone.
        if existing is not None and computed.same_daily_result_as(existing):
            return existing, False
        return self._write(computed, existing), True

    def _store_final(self, reconciled: AttendanceRecord, existing: Optional[AttendanceRecord]) -> AttendanceRecord:
        if existing is not None and reconciled.same_result_as(existing):
            return existing
        return self._write(reconciled, existing)

    def _write(self, record: AttendanceRecord, existing: Optional[AttendanceRecord]) -> AttendanceRecord:
        version = (existing.processing_version if existing else 0) + 1
        stamped = record.stamped(
            version=version,
            processed_at=self._clock(),
            record_id=existing.record_id if existing else None,
        )
        return self._records.upsert(stamped)
