from __future__ import annotations

from datetime import date, time, timedelta
from decimal import Decimal

from src.punchclock.punchclock.attendance.pipeline import DailyAttendancePipeline, DayInputs
from src.punchclock.punchclock.core.enums import (
    AnomalyFlag,
    CorrectionStatus,
    LeaveStatus,
    OvertimeApproval,
    OvertimeCategory,
    PresenceStatus,
    RecordSource,
)
from src.punchclock.punchclock.core.settings import EngineSettings
from src.punchclock.punchclock.corrections.model import AttendanceCorrection
from src.punchclock.punchclock.leave.model import Holiday, LeaveRequest
from src.punchclock.punchclock.shifts.model import ShiftResolution
from src.punchclock.punchclock.staff.model import StaffProfile

from fakes import at, default_policy, half_day, office_shift, punches

MONDAY = date(2026, 3, 2)
SATURDAY = date(2026, 3, 7)
STAFF = StaffProfile(staff_id=7, department_id=3, location_id=1, shift_id=1, timezone="UTC")


def _inputs(day, events, *, shift=office_shift(), policies=None, source="history", **kwargs):
    return DayInputs(
        staff=STAFF,
        work_date=day,
        shift_resolution=ShiftResolution(shift=shift, timezone="UTC", source=source),
        punches=tuple(events),
        policies=tuple(policies if policies is not None else [default_policy()]),
        **kwargs,
    )


def _compute(day, events, **kwargs):
    return DailyAttendancePipeline(EngineSettings()).compute(_inputs(day, events, **kwargs))


def test_standard_day():
    record = _compute(MONDAY, punches(7, at(MONDAY, 9, 7), at(MONDAY, 17))).record

    assert record.presence == PresenceStatus.PRESENT
    assert record.late_minutes == 2
    assert record.early_leave_minutes == 0
    assert record.worked_minutes == 473
    assert record.overtime_minutes == 0
    assert record.anomalies == ()


def test_overtime_below_minimum_is_discarded():
    record = _compute(MONDAY, punches(7, at(MONDAY, 9), at(MONDAY, 17, 10))).record

    assert record.worked_minutes == 490
    assert record.overtime_minutes == 0
    assert record.overtime.discarded_minutes == 10
    assert record.regular_minutes == 490


def test_overtime_above_cap_is_capped_and_flagged():
    record = _compute(MONDAY, punches(7, at(MONDAY, 9), at(MONDAY, 20, 40))).record

    assert record.worked_minutes == 700
    assert record.overtime.plain_minutes == 120
    assert record.overtime.capped_minutes == 100
    assert record.regular_minutes == 580
    assert AnomalyFlag.OVERTIME_CAPPED in record.anomalies
    assert record.overtime_category == OvertimeCategory.PLAIN
    assert record.overtime_hours == Decimal("2.00")
    assert record.payable_overtime_hours == Decimal("3.00")
    assert record.approval == OvertimeApproval.REQUIRES_APPROVAL


def test_incomplete_punch_contributes_no_time():
    record = _compute(MONDAY, punches(7, at(MONDAY, 9))).record

    assert record.presence == PresenceStatus.PRESENT
    assert record.worked_minutes == 0
    assert record.clock_in == at(MONDAY, 9)
    assert record.clock_out is None
    assert record.early_leave_minutes is None
    assert AnomalyFlag.INCOMPLETE_PUNCH in record.anomalies


def test_holiday_on_weekend_is_classified_as_holiday():
    holiday = Holiday(holiday_id=4, holiday_name="Giỗ Tổ", holiday_date=SATURDAY)

    record = _compute(
        SATURDAY,
        punches(7, at(SATURDAY, 9), at(SATURDAY, 19)),
        holidays=(holiday,),
    ).record

    assert record.overtime_category == OvertimeCategory.HOLIDAY
    assert record.overtime.holiday_minutes == 120
    assert record.overtime.weekend_minutes == 0
    assert record.holiday_id == 4


def test_weekend_full_day_rule_makes_all_time_overtime():
    policy = default_policy(weekend_full_day=True, max_daily_overtime_minutes=None)

    record = _compute(SATURDAY, punches(7, at(SATURDAY, 9), at(SATURDAY, 13)), policies=[policy]).record

    assert record.overtime.weekend_minutes == 240
    assert record.regular_minutes == 0


def test_full_day_leave_suppresses_lateness_and_overtime():
    leave = LeaveRequest(
        request_id=5, staff_id=7, start_date=MONDAY, end_date=MONDAY, status=LeaveStatus.APPROVED
    )

    record = _compute(MONDAY, punches(7, at(MONDAY, 10), at(MONDAY, 21)), leaves=(leave,)).record

    assert record.presence == PresenceStatus.ON_LEAVE
    assert record.late_minutes == 0
    assert record.overtime_minutes == 0
    assert record.worked_minutes == 480
    assert record.clock_in == at(MONDAY, 10)
    assert record.leave_request_id == 5


def test_half_day_leave_keeps_punched_time_without_lateness():
    record = _compute(MONDAY, punches(7, at(MONDAY, 13), at(MONDAY, 17)), leaves=(half_day(7, MONDAY),)).record

    assert record.presence == PresenceStatus.PRESENT
    assert record.late_minutes == 0
    assert record.worked_minutes == 240
    assert record.leave_minutes == 240
    assert AnomalyFlag.SHORT_SHIFT not in record.anomalies


def test_no_punches_classification():
    holiday = Holiday(holiday_id=4, holiday_name="Tết", holiday_date=MONDAY + timedelta(days=1))

    absent = _compute(MONDAY, []).record
    rest = _compute(SATURDAY, []).record
    off = _compute(MONDAY + timedelta(days=1), [], holidays=(holiday,)).record

    assert absent.presence == PresenceStatus.ABSENT
    assert absent.anomalies == (AnomalyFlag.NO_PUNCHES_ON_WORKDAY,)
    assert rest.presence == PresenceStatus.REST_DAY
    assert rest.anomalies == ()
    assert off.presence == PresenceStatus.HOLIDAY


def test_no_shift_records_raw_hours_only():
    record = _compute(MONDAY, punches(7, at(MONDAY, 9), at(MONDAY, 19)), shift=None).record

    assert record.worked_minutes == 600
    assert record.overtime_minutes == 0
    assert record.late_minutes is None
    assert record.shift_id is None
    assert AnomalyFlag.NO_SHIFT_ASSIGNED in record.anomalies


def test_missing_policy_is_flagged_with_warning():
    outcome = _compute(MONDAY, punches(7, at(MONDAY, 9), at(MONDAY, 19)), policies=[])

    assert outcome.record.overtime_minutes == 0
    assert outcome.record.worked_minutes == 600
    assert AnomalyFlag.NO_OVERTIME_POLICY in outcome.record.anomalies
    assert outcome.warnings


def test_approved_correction_replaces_punches():
    correction = AttendanceCorrection(
        correction_id=11,
        staff_id=7,
        work_date=MONDAY,
        record_id=1,
        original_clock_in=at(MONDAY, 9),
        original_clock_out=None,
        corrected_clock_in=None,
        corrected_clock_out=at(MONDAY, 17),
        reason="quên chấm công ra",
        status=CorrectionStatus.APPROVED,
    )

    record = _compute(MONDAY, punches(7, at(MONDAY, 9)), correction=correction).record

    assert record.worked_minutes == 480
    assert record.source == RecordSource.CORRECTION
    assert record.correction_id == 11
    assert AnomalyFlag.INCOMPLETE_PUNCH not in record.anomalies


def test_same_inputs_give_same_record():
    inputs = _inputs(MONDAY, punches(7, at(MONDAY, 8, 58), at(MONDAY, 12), at(MONDAY, 13), at(MONDAY, 18, 30)))
    pipeline = DailyAttendancePipeline(EngineSettings())

    assert pipeline.compute(inputs).record == pipeline.compute(inputs).record


def test_rostered_weekend_day_without_punches_is_absent():
    record = _compute(SATURDAY, [], source="schedule").record

    assert record.presence == PresenceStatus.ABSENT
    assert record.anomalies == (AnomalyFlag.NO_PUNCHES_ON_WORKDAY,)


def test_windows_split_where_a_night_shift_meets_a_day_shift():
    pipeline = DailyAttendancePipeline(EngineSettings())
    office = ShiftResolution(shift=office_shift(), timezone="UTC", source="history")
    night = ShiftResolution(
        shift=office_shift(shift_id=2, start_time=time(22, 0), end_time=time(6, 0)), timezone="UTC", source="schedule"
    )
    tuesday = MONDAY + timedelta(days=1)

    monday_window = pipeline.window_for(MONDAY, night, previous=office, following=office)
    tuesday_window = pipeline.window_for(tuesday, office, previous=night, following=office)

    assert monday_window.start == at(MONDAY, 18)
    assert monday_window.end == at(tuesday, 7, 30)
    assert tuesday_window.start == monday_window.end
    assert tuesday_window.end == at(tuesday + timedelta(days=1), 5)


def test_neighbour_punches_outside_the_split_window_are_ignored():
    tuesday = MONDAY + timedelta(days=1)
    night = ShiftResolution(
        shift=office_shift(shift_id=2, start_time=time(22, 0), end_time=time(6, 0)), timezone="UTC", source="schedule"
    )
    events = punches(7, at(MONDAY, 22), at(tuesday, 6), at(tuesday, 9), at(tuesday, 17))

    record = _compute(tuesday, events, previous_resolution=night).record

    assert record.worked_minutes == 480
    assert record.clock_in == at(tuesday, 9)
    assert AnomalyFlag.INCOMPLETE_PUNCH not in record.anomalies
