from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from ..common.datetime_utils import get_zone
from ..core.enums import PresenceStatus, RecordSource
from ..core.settings import EngineSettings
from ..corrections.model import AttendanceCorrection
from ..leave.adjuster import LeaveHolidayAdjuster
from ..leave.model import DayCover, Holiday, LeaveRequest
from ..overtime.engine import OvertimeEngine
from ..overtime.model import OvertimePolicy
from ..overtime.resolver import PolicyResolver
from ..punches.model import PairingResult, PunchEvent, PunchWindow
from ..punches.pairing import PunchPairer
from ..shifts.model import ShiftResolution
from ..staff.model import StaffProfile
from .anomalies import AnomalyDetector
from .calculator import DeviationCalculator
from .model import AttendanceRecord


@dataclass(frozen=True)
class DayInputs:
    """Everything the daily computation reads, gathered by the caller."""

    staff: StaffProfile
    work_date: date
    shift_resolution: ShiftResolution
    punches: tuple[PunchEvent, ...] = ()
    policies: tuple[OvertimePolicy, ...] = ()
    leaves: tuple[LeaveRequest, ...] = ()
    holidays: tuple[Holiday, ...] = ()
    correction: Optional[AttendanceCorrection] = None
    previous_resolution: Optional[ShiftResolution] = None
    next_resolution: Optional[ShiftResolution] = None


@dataclass(frozen=True)
class DailyOutcome:
    record: AttendanceRecord
    window: PunchWindow
    warnings: tuple[str, ...] = ()


class DailyAttendancePipeline:
    """Pair, measure, classify and flag one (staff, date).

    ``compute`` is pure: same inputs, same record. Persistence, clocks and
    the weekly pass are the caller's business.
    """

    def __init__(
        self,
        settings: Optional[EngineSettings] = None,
        *,
        pairer: Optional[PunchPairer] = None,
        calculator: Optional[DeviationCalculator] = None,
        policy_resolver: Optional[PolicyResolver] = None,
        overtime_engine: Optional[OvertimeEngine] = None,
        adjuster: Optional[LeaveHolidayAdjuster] = None,
        detector: Optional[AnomalyDetector] = None,
    ):
        self._settings = settings or EngineSettings()
        s = self._settings
        self._pairer = pairer or PunchPairer(debounce_seconds=s.punch_debounce_seconds)
        self._calculator = calculator or DeviationCalculator()
        self._policy_resolver = policy_resolver or PolicyResolver()
        self._overtime_engine = overtime_engine or OvertimeEngine()
        self._adjuster = adjuster or LeaveHolidayAdjuster(default_leave_day_minutes=s.default_leave_day_minutes)
        self._detector = detector or AnomalyDetector(
            max_interval_minutes=s.max_interval_minutes,
            short_shift_ratio=s.short_shift_ratio,
            duplicate_event_threshold=s.duplicate_event_threshold,
        )

    @property
    def settings(self) -> EngineSettings:
        return self._settings

    def window_for(
        self,
        work_date: date,
        resolution: ShiftResolution,
        *,
        previous: Optional[ShiftResolution] = None,
        following: Optional[ShiftResolution] = None,
    ) -> PunchWindow:
        """Punch window of ``work_date``.

        Without neighbours this is the plain 24h window. Given the
        resolutions of the day before and after, the window is cut where
        they meet so that consecutive days never share a punch.
        """

        window = self._plain_window(work_date, resolution)
        start, end = window.start, window.end
        if previous is not None:
            start = self._boundary(work_date - timedelta(days=1), previous, resolution)
        if following is not None:
            end = self._boundary(work_date, resolution, following)
        return PunchWindow(work_date=work_date, start=start, end=end)

    def _plain_window(self, work_date: date, resolution: ShiftResolution) -> PunchWindow:
        shift = resolution.shift
        return PunchWindow.for_day(
            work_date,
            tz_name=resolution.timezone,
            shift_start=shift.start_time if shift else None,
            lead_minutes=self._settings.window_lead_minutes,
        )

    def _boundary(self, day: date, current: ShiftResolution, following: ShiftResolution) -> datetime:
        # Where ``day`` hands over to ``day + 1``: the next window's start,
        # unless today's shift still runs then.
        handover = self._plain_window(day + timedelta(days=1), following).start
        if current.shift is None:
            return handover
        _, shift_end = current.shift.bounds_on(day, get_zone(current.timezone))
        shift_end = shift_end.astimezone(timezone.utc)
        if shift_end <= handover:
            return handover
        if following.shift is None:
            return shift_end + timedelta(minutes=self._settings.window_lead_minutes)
        next_start, _ = following.shift.bounds_on(day + timedelta(days=1), get_zone(following.timezone))
        next_start = next_start.astimezone(timezone.utc)
        return shift_end + (next_start - shift_end) / 2

    def compute(self, inputs: DayInputs) -> DailyOutcome:
        resolution = inputs.shift_resolution
        shift = resolution.shift
        staff = inputs.staff
        work_date = inputs.work_date
        window = self.window_for(
            work_date, resolution, previous=inputs.previous_resolution, following=inputs.next_resolution
        )

        warnings: list[str] = []
        if shift is not None and not resolution.point_in_time:
            warnings.append(f"shift {shift.shift_id} taken from current assignment, not history, for {work_date}")

        correction = inputs.correction if inputs.correction and inputs.correction.overrides_punches else None
        if correction is not None:
            pairing = PairingResult.from_override(
                staff.staff_id, correction.effective_clock_in, correction.effective_clock_out
            )
        else:
            pairing = self._pairer.pair(inputs.punches, window)

        cover = self._adjuster.adjust(
            work_date=work_date,
            location_id=staff.location_id,
            leaves=inputs.leaves,
            holidays=inputs.holidays,
            required_minutes=shift.required_minutes if shift else None,
        )
        is_weekend = self._settings.is_weekend(work_date)

        hours = self._calculator.calculate(pairing, shift=shift, work_date=work_date, tz_name=resolution.timezone)
        fields: dict = {}
        capped = policy_missing = False

        if cover.is_full_leave:
            presence = PresenceStatus.ON_LEAVE
            fields.update(worked_minutes=cover.leave_minutes, regular_minutes=cover.leave_minutes)
            fields.update(late_minutes=0, early_leave_minutes=0)
        elif not pairing.has_punches:
            presence = self._presence_without_punches(cover, is_weekend, scheduled=resolution.is_scheduled)
            if presence == PresenceStatus.ON_LEAVE:
                fields.update(worked_minutes=cover.leave_minutes, regular_minutes=cover.leave_minutes)
                fields.update(late_minutes=0, early_leave_minutes=0)
        else:
            presence = PresenceStatus.PRESENT
            fields.update(
                worked_minutes=hours.worked_minutes,
                break_deducted_minutes=hours.break_deducted_minutes,
                regular_minutes=hours.worked_minutes,
                late_minutes=hours.late_minutes,
                early_leave_minutes=hours.early_leave_minutes,
            )
            if cover.is_partial_leave:
                fields.update(late_minutes=self._suppressed(hours.late_minutes))
                fields.update(early_leave_minutes=self._suppressed(hours.early_leave_minutes))

            if shift is not None:
                policy_resolution = self._policy_resolver.resolve(
                    inputs.policies, shift=shift, department_id=staff.department_id, on_date=work_date
                )
                warnings.extend(policy_resolution.warnings)
                policy = policy_resolution.policy
                if policy is None:
                    policy_missing = True
                else:
                    outcome = self._overtime_engine.compute(
                        worked_minutes=hours.worked_minutes,
                        required_minutes=shift.required_minutes,
                        policy=policy,
                        is_weekend=is_weekend,
                        is_holiday=cover.is_holiday,
                    )
                    capped = outcome.capped
                    fields.update(
                        overtime=outcome.breakdown,
                        overtime_category=outcome.category,
                        regular_minutes=hours.worked_minutes - outcome.breakdown.total_minutes,
                        policy_id=policy.policy_id,
                    )

        anomalies = self._detector.detect(
            pairing=pairing,
            shift=shift,
            hours=hours,
            presence=presence,
            cover=cover,
            overtime_capped=capped,
            policy_missing=policy_missing,
        )

        record = AttendanceRecord(
            staff_id=staff.staff_id,
            work_date=work_date,
            presence=presence,
            clock_in=pairing.clock_in,
            clock_out=pairing.clock_out,
            leave_minutes=cover.leave_minutes,
            anomalies=anomalies,
            shift_id=shift.shift_id if shift else None,
            leave_request_id=cover.leave.request_id if cover.leave else None,
            holiday_id=cover.holiday.holiday_id if cover.holiday else None,
            correction_id=correction.correction_id if correction else None,
            source=RecordSource.CORRECTION if correction else RecordSource.PUNCHES,
            **fields,
        )
        return DailyOutcome(record=record, window=window, warnings=tuple(warnings))

    @staticmethod
    def _presence_without_punches(cover: DayCover, is_weekend: bool, *, scheduled: bool = False) -> PresenceStatus:
        if cover.is_partial_leave:
            return PresenceStatus.ON_LEAVE
        if cover.is_holiday:
            return PresenceStatus.HOLIDAY
        if is_weekend and not scheduled:
            return PresenceStatus.REST_DAY
        return PresenceStatus.ABSENT

    @staticmethod
    def _suppressed(value: Optional[int]) -> Optional[int]:
        return None if value is None else 0
