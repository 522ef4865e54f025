from __future__ import annotations

from datetime import date, time

from src.punchclock.punchclock.attendance.calculator import DeviationCalculator
from src.punchclock.punchclock.punches.pairing import PunchPairer

from fakes import at, office_shift, punches

DAY = date(2026, 3, 2)


def _calc(events, shift, tz_name="UTC"):
    pairing = PunchPairer().pair(events)
    return DeviationCalculator().calculate(pairing, shift=shift, work_date=DAY, tz_name=tz_name)


def test_late_is_measured_after_grace():
    hours = _calc(punches(7, at(DAY, 9, 7), at(DAY, 17)), office_shift(grace_minutes=5))

    assert hours.late_minutes == 2
    assert hours.early_leave_minutes == 0
    assert hours.worked_minutes == 473


def test_arrival_within_grace_is_on_time():
    hours = _calc(punches(7, at(DAY, 9, 4), at(DAY, 17)), office_shift(grace_minutes=5))

    assert hours.late_minutes == 0


def test_late_below_threshold_is_ignored():
    hours = _calc(punches(7, at(DAY, 9, 12), at(DAY, 17)), office_shift(grace_minutes=5, late_threshold_minutes=10))

    assert hours.late_minutes == 0


def test_early_leave_respects_threshold():
    shift = office_shift(early_leave_threshold_minutes=10)

    assert _calc(punches(7, at(DAY, 9), at(DAY, 16, 45)), shift).early_leave_minutes == 5
    assert _calc(punches(7, at(DAY, 9), at(DAY, 16, 55)), shift).early_leave_minutes == 0


def test_no_shift_means_no_deviation_data():
    hours = _calc(punches(7, at(DAY, 9), at(DAY, 17)), None)

    assert hours.late_minutes is None
    assert hours.early_leave_minutes is None
    assert hours.worked_minutes == 480


def test_auto_break_is_deducted_once_when_no_break_was_punched():
    shift = office_shift(break_start=time(12, 0), break_minutes=60, auto_deduct_break=True)

    hours = _calc(punches(7, at(DAY, 9), at(DAY, 18)), shift)

    assert hours.gross_minutes == 540
    assert hours.break_deducted_minutes == 60
    assert hours.worked_minutes == 480


def test_punched_break_is_not_deducted_twice():
    shift = office_shift(break_start=time(12, 0), break_minutes=60, auto_deduct_break=True)

    hours = _calc(punches(7, at(DAY, 9), at(DAY, 12), at(DAY, 13), at(DAY, 18)), shift)

    assert hours.break_deducted_minutes == 0
    assert hours.worked_minutes == 480


def test_short_punched_break_is_topped_up():
    shift = office_shift(break_start=time(12, 0), break_minutes=60, auto_deduct_break=True)

    hours = _calc(punches(7, at(DAY, 9), at(DAY, 12), at(DAY, 12, 20), at(DAY, 17, 20)), shift)

    assert hours.break_deducted_minutes == 40
    assert hours.worked_minutes == 440


def test_shift_times_are_local_to_the_staff_timezone():
    # 09:07 in Ho Chi Minh City is 02:07 UTC.
    hours = _calc(punches(7, at(DAY, 2, 7), at(DAY, 10)), office_shift(grace_minutes=5), tz_name="Asia/Ho_Chi_Minh")

    assert hours.late_minutes == 2
    assert hours.early_leave_minutes == 0
