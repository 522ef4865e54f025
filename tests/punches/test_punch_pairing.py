from __future__ import annotations

import random
from dataclasses import replace
from datetime import date, datetime, time, timedelta, timezone

import pytest

from src.punchclock.punchclock.core.enums import PunchKind
from src.punchclock.punchclock.core.exceptions import InvalidPunchDataError
from src.punchclock.punchclock.punches.model import PairingResult, PunchEvent, PunchWindow
from src.punchclock.punchclock.punches.pairing import PunchPairer

from fakes import at, punches

DAY = date(2026, 3, 2)


def test_pairs_alternate_punches_into_intervals():
    events = punches(7, at(DAY, 9), at(DAY, 12), at(DAY, 13), at(DAY, 17))

    result = PunchPairer().pair(events)

    assert [(i.start, i.end) for i in result.intervals] == [
        (at(DAY, 9), at(DAY, 12)),
        (at(DAY, 13), at(DAY, 17)),
    ]
    assert result.worked_minutes == 7 * 60
    assert result.interior_gap_minutes == 60
    assert result.clock_in == at(DAY, 9)
    assert result.clock_out == at(DAY, 17)
    assert not result.is_incomplete


def test_odd_punch_count_leaves_trailing_punch_unpaired():
    events = punches(7, at(DAY, 9), at(DAY, 12), at(DAY, 13))

    result = PunchPairer().pair(events)

    assert result.is_incomplete
    assert [e.timestamp for e in result.unpaired] == [at(DAY, 13)]
    assert result.worked_minutes == 3 * 60
    assert result.clock_out == at(DAY, 12)


def test_single_punch_has_clock_in_but_no_worked_time():
    result = PunchPairer().pair(punches(7, at(DAY, 9, 2)))

    assert result.has_punches
    assert result.intervals == ()
    assert result.worked_minutes == 0
    assert result.clock_in == at(DAY, 9, 2)
    assert result.clock_out is None


def test_declared_kind_is_ignored_and_order_does_not_matter():
    stamps = [at(DAY, 8, 55), at(DAY, 12, 1), at(DAY, 12, 58), at(DAY, 17, 4)]
    kinds = [PunchKind.OUT, PunchKind.OUT, PunchKind.IN, PunchKind.BREAK_START]
    events = [
        PunchEvent(staff_id=7, device_id="D1", timestamp=ts, declared_kind=k, event_id=i)
        for i, (ts, k) in enumerate(zip(stamps, kinds), start=1)
    ]
    shuffled = list(events)
    random.Random(4).shuffle(shuffled)
    relabelled = [replace(e, declared_kind=PunchKind.IN) for e in reversed(events)]

    pairer = PunchPairer()
    expected = pairer.pair(events)

    assert pairer.pair(shuffled).intervals == expected.intervals
    assert pairer.pair(relabelled).intervals == expected.intervals


def test_debounce_collapses_burst_from_same_device():
    events = punches(7, at(DAY, 9), at(DAY, 9, 0, 20), at(DAY, 9, 0, 50), at(DAY, 17))

    result = PunchPairer(debounce_seconds=60).pair(events)

    assert result.collapsed_count == 2
    assert len(result.intervals) == 1
    assert result.intervals[0].minutes == 8 * 60


def test_debounce_does_not_collapse_different_devices():
    first = punches(7, at(DAY, 9), device_id="GATE")
    second = punches(7, at(DAY, 9, 0, 30), device_id="LOBBY", start_id=10)

    result = PunchPairer(debounce_seconds=60).pair(first + second)

    assert result.collapsed_count == 0
    assert len(result.punches) == 2


def test_window_excludes_punches_outside_the_day():
    window = PunchWindow.for_day(DAY, tz_name="UTC", shift_start=time(9, 0), lead_minutes=240)
    events = punches(7, at(DAY, 4, 59), at(DAY, 9), at(DAY, 17), at(DAY + timedelta(days=1), 5))

    result = PunchPairer().pair(events, window)

    assert [e.timestamp for e in result.punches] == [at(DAY, 9), at(DAY, 17)]


def test_window_without_shift_is_local_midnight_to_midnight():
    window = PunchWindow.for_day(DAY, tz_name="Asia/Ho_Chi_Minh")

    assert window.start == datetime(2026, 3, 1, 17, 0, tzinfo=timezone.utc)
    assert window.end - window.start == timedelta(days=1)


def test_night_shift_punches_after_midnight_stay_on_the_start_day():
    window = PunchWindow.for_day(DAY, tz_name="UTC", shift_start=time(22, 0), lead_minutes=240)
    events = punches(7, at(DAY, 21, 55), at(DAY + timedelta(days=1), 6, 3))

    result = PunchPairer().pair(events, window)

    assert len(result.intervals) == 1
    assert result.worked_minutes == 8 * 60 + 8


def test_naive_timestamp_is_invalid_punch_data():
    events = [PunchEvent(staff_id=7, device_id="D1", timestamp=datetime(2026, 3, 2, 9, 0), event_id=1)]

    with pytest.raises(InvalidPunchDataError):
        PunchPairer().pair(events)


def test_override_with_only_clock_out_keeps_it_as_clock_out():
    result = PairingResult.from_override(7, None, at(DAY, 17))

    assert result.is_override
    assert result.is_incomplete
    assert result.clock_in is None
    assert result.clock_out == at(DAY, 17)
