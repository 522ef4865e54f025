from __future__ import annotations

from datetime import date
from decimal import Decimal

from src.punchclock.punchclock.core.enums import LeaveStatus
from src.punchclock.punchclock.leave.adjuster import LeaveHolidayAdjuster
from src.punchclock.punchclock.leave.model import Holiday, LeaveRequest

from fakes import half_day

DAY = date(2026, 4, 30)


def _adjust(*, leaves=(), holidays=(), location_id=1, required_minutes=480):
    return LeaveHolidayAdjuster().adjust(
        work_date=DAY,
        location_id=location_id,
        leaves=leaves,
        holidays=holidays,
        required_minutes=required_minutes,
    )


def test_two_half_days_make_a_full_leave_day():
    cover = _adjust(leaves=[half_day(7, DAY, request_id=2), half_day(7, DAY, request_id=1)])

    assert cover.is_full_leave
    assert cover.leave_minutes == 480
    assert cover.leave.request_id == 1


def test_half_day_uses_shift_length():
    cover = _adjust(leaves=[half_day(7, DAY)], required_minutes=420)

    assert cover.is_partial_leave
    assert cover.leave_fraction == Decimal("0.5")
    assert cover.leave_minutes == 210


def test_leave_without_shift_falls_back_to_default_day():
    cover = _adjust(leaves=[half_day(7, DAY)], required_minutes=None)

    assert cover.leave_minutes == 240


def test_pending_and_non_affecting_leave_is_ignored():
    pending = LeaveRequest(request_id=1, staff_id=7, start_date=DAY, end_date=DAY, status=LeaveStatus.PENDING)
    unpaid_note = LeaveRequest(
        request_id=2, staff_id=7, start_date=DAY, end_date=DAY, status=LeaveStatus.APPROVED, affects_attendance=False
    )

    cover = _adjust(leaves=[pending, unpaid_note])

    assert cover.leave is None
    assert cover.leave_minutes == 0


def test_location_holiday_wins_over_global_one():
    national = Holiday(holiday_id=1, holiday_name="Giải phóng miền Nam", holiday_date=DAY)
    local = Holiday(holiday_id=9, holiday_name="Lễ hội địa phương", holiday_date=DAY, location_id=1)
    other_site = Holiday(holiday_id=3, holiday_name="Chi nhánh khác", holiday_date=DAY, location_id=2)

    cover = _adjust(holidays=[national, local, other_site])

    assert cover.holiday.holiday_id == 9


def test_recurring_holiday_matches_any_year():
    recurring = Holiday(holiday_id=1, holiday_name="Quốc tế Lao động", holiday_date=date(2000, 4, 30), is_recurring=True)
    inactive = Holiday(holiday_id=2, holiday_name="Đã hủy", holiday_date=DAY, is_active=False)

    assert _adjust(holidays=[recurring]).is_holiday
    assert not _adjust(holidays=[inactive]).is_holiday
