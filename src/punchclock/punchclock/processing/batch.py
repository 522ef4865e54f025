from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Iterable, Optional

from ..common.datetime_utils import iso_week_start
from ..core.enums import WeekStatus
from ..overtime.weekly import WeeklyOutcome

logger = logging.getLogger(__name__)

Unit = tuple[int, date]


@dataclass(frozen=True)
class UnitFailure:
    """A unit that raised; the rest of the batch carried on."""

    staff_id: int
    work_date: date
    error_type: str
    message: str
    phase: str = "daily"


@dataclass
class BatchReport:
    total_units: int = 0
    succeeded: list[Unit] = field(default_factory=list)
    failed: list[UnitFailure] = field(default_factory=list)
    skipped: list[Unit] = field(default_factory=list)
    reconciled_weeks: list[Unit] = field(default_factory=list)
    deferred_weeks: list[Unit] = field(default_factory=list)
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        return not self.failed and not self.cancelled

    def summary(self) -> dict:
        return {
            "total_units": self.total_units,
            "succeeded": len(self.succeeded),
            "failed": len(self.failed),
            "skipped": len(self.skipped),
            "reconciled_weeks": len(self.reconciled_weeks),
            "deferred_weeks": len(self.deferred_weeks),
            "cancelled": self.cancelled,
        }


class BatchRunner:
    """Two-phase runner: every daily unit first, then one weekly pass per touched or requested week.

    Each unit is its own failure boundary. Cancellation is only observed
    between units, so a unit that has started always finishes and persists.
    """

    def __init__(self, *, workers: int = 4):
        self._workers = max(1, int(workers))

    def run(
        self,
        units: Iterable[Unit],
        *,
        day_fn: Callable[[int, date], Any],
        week_fn: Callable[[int, date], WeeklyOutcome],
        weeks: Iterable[Unit] = (),
        cancel_event: Optional[threading.Event] = None,
    ) -> BatchReport:
        ordered = sorted(set(units))
        report = BatchReport(total_units=len(ordered))
        logger.info("batch started: %s unit(s), %s worker(s)", len(ordered), self._workers)

        self._run_daily(ordered, day_fn, cancel_event, report)

        # Touched weeks plus any the caller wants swept again.
        touched = {(staff_id, iso_week_start(work_date)) for staff_id, work_date in report.succeeded}
        weeks = sorted(touched | {(int(staff_id), iso_week_start(d)) for staff_id, d in weeks})
        if weeks and not self._cancelled(cancel_event):
            self._run_weekly(weeks, week_fn, cancel_event, report)

        report.succeeded.sort()
        report.skipped.sort()
        report.reconciled_weeks.sort()
        report.deferred_weeks.sort()
        report.failed.sort(key=lambda f: (f.staff_id, f.work_date, f.phase))
        report.cancelled = self._cancelled(cancel_event)
        logger.info("batch finished: %s", report.summary())
        return report

    def _run_daily(self, ordered, day_fn, cancel_event, report: BatchReport) -> None:
        def run_unit(unit: Unit) -> bool:
            if self._cancelled(cancel_event):
                return False
            day_fn(*unit)
            return True

        with ThreadPoolExecutor(max_workers=self._workers) as executor:
            future_to_unit = {executor.submit(run_unit, unit): unit for unit in ordered}
            for future in as_completed(future_to_unit):
                staff_id, work_date = future_to_unit[future]
                try:
                    if future.result():
                        report.succeeded.append((staff_id, work_date))
                        logger.debug("processed staff %s on %s", staff_id, work_date)
                    else:
                        report.skipped.append((staff_id, work_date))
                except Exception as exc:
                    logger.exception("processing failed for staff %s on %s", staff_id, work_date)
                    report.failed.append(
                        UnitFailure(
                            staff_id=staff_id,
                            work_date=work_date,
                            error_type=type(exc).__name__,
                            message=str(exc),
                        )
                    )

    def _run_weekly(self, weeks, week_fn, cancel_event, report: BatchReport) -> None:
        def run_week(key: Unit) -> Optional[WeeklyOutcome]:
            if self._cancelled(cancel_event):
                return None
            return week_fn(*key)

        with ThreadPoolExecutor(max_workers=self._workers) as executor:
            future_to_week = {executor.submit(run_week, key): key for key in weeks}
            for future in as_completed(future_to_week):
                staff_id, week_start = future_to_week[future]
                try:
                    outcome = future.result()
                except Exception as exc:
                    logger.exception("weekly pass failed for staff %s, week of %s", staff_id, week_start)
                    report.failed.append(
                        UnitFailure(
                            staff_id=staff_id,
                            work_date=week_start,
                            error_type=type(exc).__name__,
                            message=str(exc),
                            phase="weekly",
                        )
                    )
                    continue

                if outcome is None:
                    continue
                if outcome.status == WeekStatus.DEFERRED:
                    report.deferred_weeks.append((staff_id, week_start))
                else:
                    report.reconciled_weeks.append((staff_id, week_start))

    @staticmethod
    def _cancelled(cancel_event: Optional[threading.Event]) -> bool:
        return cancel_event is not None and cancel_event.is_set()
