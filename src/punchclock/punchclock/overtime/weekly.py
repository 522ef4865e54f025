from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Mapping, Optional

from ..attendance.model import AttendanceRecord
from ..common.datetime_utils import iso_week_start, week_days
from ..core.enums import OvertimeCategory, PresenceStatus, WeekStatus
from ..core.exceptions import ValidationError, WeekNotReadyError
from .model import OvertimePolicy

_WEEKLY_CATEGORIES = (None, OvertimeCategory.PLAIN)


@dataclass(frozen=True)
class WeeklyOutcome:
    staff_id: int
    week_start: date
    status: WeekStatus
    records: tuple[AttendanceRecord, ...] = ()
    missing_days: tuple[date, ...] = ()
    policy_id: Optional[int] = None

    @property
    def weekly_minutes(self) -> int:
        return sum(r.overtime.weekly_minutes for r in self.records)


class WeeklyReconciler:
    """Second pass over one (staff, ISO week) after every day has a record.

    Regular minutes of ordinary worked days are accumulated Monday to Sunday;
    whatever crosses the policy's weekly threshold becomes weekly overtime on
    the day it happens. The pass always starts again from the daily values,
    so running it twice changes nothing. Weekend and holiday days keep their
    own overtime and do not count towards the weekly total.
    """

    def reconcile(
        self,
        *,
        staff_id: int,
        week_start: date,
        records: Iterable[AttendanceRecord],
        policies: Mapping[int, OvertimePolicy],
        week_closed: bool = False,
    ) -> WeeklyOutcome:
        if iso_week_start(week_start) != week_start:
            raise ValidationError(f"week_start must be a Monday, got {week_start}")

        days = week_days(week_start)
        by_date = {r.work_date: r for r in records if r.staff_id == staff_id and r.work_date in days}
        missing = tuple(d for d in days if d not in by_date)
        if missing and not week_closed:
            raise WeekNotReadyError(staff_id, week_start, missing)

        ordered = [by_date[d] for d in days if d in by_date]
        policy = self._policy_for(ordered, policies)
        if policy is None or not policy.apply_weekly_rule:
            finalized = tuple(self._finalize(r, 0, policy) for r in ordered)
            return WeeklyOutcome(
                staff_id=staff_id,
                week_start=week_start,
                status=WeekStatus.NOT_APPLICABLE,
                records=finalized,
                missing_days=missing,
                policy_id=policy.policy_id if policy else None,
            )

        threshold = int(policy.weekly_threshold_minutes)
        cumulative = 0
        finalized = []
        for record in ordered:
            weekly = 0
            if record.presence == PresenceStatus.PRESENT and record.overtime_category in _WEEKLY_CATEGORIES:
                before = cumulative
                # Minutes the daily cap removed are never paid, weekly or otherwise.
                cumulative += max(0, record.regular_minutes - record.overtime.capped_minutes)
                weekly = max(0, cumulative - max(threshold, before))
            finalized.append(self._finalize(record, weekly, policy))

        return WeeklyOutcome(
            staff_id=staff_id,
            week_start=week_start,
            status=WeekStatus.RECONCILED,
            records=tuple(finalized),
            missing_days=missing,
            policy_id=policy.policy_id,
        )

    @staticmethod
    def _policy_for(ordered: list[AttendanceRecord], policies: Mapping[int, OvertimePolicy]) -> Optional[OvertimePolicy]:
        # The policy in force at the end of the week decides the weekly rule.
        for record in reversed(ordered):
            if record.policy_id is not None and record.policy_id in policies:
                return policies[record.policy_id]
        return None

    @staticmethod
    def _finalize(record: AttendanceRecord, weekly: int, policy: Optional[OvertimePolicy]) -> AttendanceRecord:
        daily = record.overtime.total_minutes - record.overtime.weekly_minutes
        if policy is None:
            return record.with_weekly(0, record.overtime.weekly_multiplier, record.overtime.approval)
        return record.with_weekly(weekly, policy.weekly_multiplier, policy.approval_for(daily + weekly))
