from __future__ import annotations

import threading
from datetime import date, timedelta

from src.punchclock.punchclock.core.enums import WeekStatus
from src.punchclock.punchclock.core.exceptions import InvalidPunchDataError
from src.punchclock.punchclock.overtime.weekly import WeeklyOutcome
from src.punchclock.punchclock.processing.batch import BatchRunner

MONDAY = date(2026, 3, 2)
NEXT_MONDAY = MONDAY + timedelta(days=7)


def _week_fn(status=WeekStatus.RECONCILED):
    calls = []

    def week_fn(staff_id, week_start):
        calls.append((staff_id, week_start))
        return WeeklyOutcome(staff_id=staff_id, week_start=week_start, status=status)

    return week_fn, calls


def test_one_failing_unit_does_not_stop_the_batch():
    def day_fn(staff_id, work_date):
        if staff_id == 8:
            raise InvalidPunchDataError("punch 12 is naive")

    week_fn, calls = _week_fn()
    report = BatchRunner(workers=3).run(
        [(7, MONDAY), (8, MONDAY), (7, MONDAY + timedelta(days=1))], day_fn=day_fn, week_fn=week_fn
    )

    assert report.succeeded == [(7, MONDAY), (7, MONDAY + timedelta(days=1))]
    assert len(report.failed) == 1
    failure = report.failed[0]
    assert (failure.staff_id, failure.work_date, failure.error_type, failure.phase) == (
        8,
        MONDAY,
        "InvalidPunchDataError",
        "daily",
    )
    assert calls == [(7, MONDAY)]
    assert report.reconciled_weeks == [(7, MONDAY)]
    assert not report.ok


def test_units_are_deduplicated_and_weeks_grouped():
    seen = []
    week_fn, calls = _week_fn()

    report = BatchRunner(workers=2).run(
        [(7, MONDAY), (7, MONDAY), (7, MONDAY + timedelta(days=2)), (7, NEXT_MONDAY)],
        day_fn=lambda staff_id, work_date: seen.append((staff_id, work_date)),
        week_fn=week_fn,
    )

    assert report.total_units == 3
    assert sorted(seen) == [(7, MONDAY), (7, MONDAY + timedelta(days=2)), (7, NEXT_MONDAY)]
    assert sorted(calls) == [(7, MONDAY), (7, NEXT_MONDAY)]
    assert report.summary()["reconciled_weeks"] == 2


def test_requested_weeks_are_reconciled_without_daily_units():
    week_fn, calls = _week_fn()

    report = BatchRunner(workers=2).run(
        [(7, NEXT_MONDAY)],
        day_fn=lambda *_: None,
        week_fn=week_fn,
        weeks=[(7, MONDAY + timedelta(days=3)), (7, NEXT_MONDAY)],
    )

    assert report.total_units == 1
    assert sorted(calls) == [(7, MONDAY), (7, NEXT_MONDAY)]
    assert report.reconciled_weeks == [(7, MONDAY), (7, NEXT_MONDAY)]


def test_deferred_weeks_are_reported():
    week_fn, _ = _week_fn(WeekStatus.DEFERRED)

    report = BatchRunner(workers=1).run([(7, MONDAY)], day_fn=lambda *_: None, week_fn=week_fn)

    assert report.deferred_weeks == [(7, MONDAY)]
    assert report.reconciled_weeks == []
    assert report.ok


def test_weekly_failure_is_recorded_with_phase():
    def week_fn(staff_id, week_start):
        raise RuntimeError("lost connection")

    report = BatchRunner(workers=1).run([(7, MONDAY)], day_fn=lambda *_: None, week_fn=week_fn)

    assert report.succeeded == [(7, MONDAY)]
    assert [(f.phase, f.error_type) for f in report.failed] == [("weekly", "RuntimeError")]


def test_cancellation_skips_units_not_yet_started():
    cancel = threading.Event()
    started = []

    def day_fn(staff_id, work_date):
        started.append((staff_id, work_date))
        cancel.set()

    week_fn, calls = _week_fn()
    units = [(7, MONDAY + timedelta(days=i)) for i in range(4)]

    report = BatchRunner(workers=1).run(units, day_fn=day_fn, week_fn=week_fn, cancel_event=cancel)

    assert started == [(7, MONDAY)]
    assert report.succeeded == [(7, MONDAY)]
    assert len(report.skipped) == 3
    assert report.cancelled
    assert calls == []


def test_cancelled_before_start_runs_nothing():
    cancel = threading.Event()
    cancel.set()
    week_fn, calls = _week_fn()

    report = BatchRunner(workers=2).run([(7, MONDAY)], day_fn=lambda *_: None, week_fn=week_fn, cancel_event=cancel)

    assert report.skipped == [(7, MONDAY)]
    assert report.succeeded == []
    assert report.cancelled
    assert calls == []
