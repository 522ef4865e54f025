from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import OvertimePolicy
from .repository import OvertimePolicyRepository

_SELECT = """
    SELECT p.policy_id, p.policy_name, p.effective_from, p.effective_to,
           p.daily_threshold_minutes, p.daily_multiplier,
           p.apply_weekly_rule, p.weekly_threshold_minutes, p.weekly_multiplier,
           p.apply_weekend_rule, p.weekend_multiplier, p.weekend_full_day,
           p.apply_holiday_rule, p.holiday_multiplier, p.holiday_full_day,
           p.max_daily_overtime_minutes, p.minimum_overtime_minutes, p.auto_approval_minutes,
           p.is_active, p.is_default,
           GROUP_CONCAT(d.department_id) AS department_ids
    FROM overtime_policies p
    LEFT JOIN departments d ON d.overtime_policy_id = p.policy_id
"""


def _opt_int(value) -> Optional[int]:
    return int(value) if value is not None else None


def _row_to_policy(r: dict) -> OvertimePolicy:
    raw_departments = r.get("department_ids") or ""
    return OvertimePolicy(
        policy_id=int(r["policy_id"]),
        policy_name=r["policy_name"],
        effective_from=r["effective_from"],
        effective_to=r.get("effective_to"),
        daily_threshold_minutes=_opt_int(r.get("daily_threshold_minutes")),
        daily_multiplier=Decimal(str(r["daily_multiplier"])),
        apply_weekly_rule=bool(r.get("apply_weekly_rule")),
        weekly_threshold_minutes=int(r.get("weekly_threshold_minutes") or 0),
        weekly_multiplier=Decimal(str(r["weekly_multiplier"])),
        apply_weekend_rule=bool(r.get("apply_weekend_rule")),
        weekend_multiplier=Decimal(str(r["weekend_multiplier"])),
        weekend_full_day=bool(r.get("weekend_full_day")),
        apply_holiday_rule=bool(r.get("apply_holiday_rule")),
        holiday_multiplier=Decimal(str(r["holiday_multiplier"])),
        holiday_full_day=bool(r.get("holiday_full_day")),
        max_daily_overtime_minutes=_opt_int(r.get("max_daily_overtime_minutes")),
        minimum_overtime_minutes=int(r.get("minimum_overtime_minutes") or 0),
        auto_approval_minutes=_opt_int(r.get("auto_approval_minutes")),
        is_active=bool(r.get("is_active", 1)),
        is_default=bool(r.get("is_default")),
        department_ids=frozenset(int(x) for x in str(raw_departments).split(",") if x),
    )


class MySQLOvertimePolicyRepository(OvertimePolicyRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_active(self) -> Sequence[OvertimePolicy]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE p.is_active=1 GROUP BY p.policy_id ORDER BY p.policy_id")
            return [_row_to_policy(r) for r in fetchall(cur)]

    def get_by_id(self, policy_id: int) -> Optional[OvertimePolicy]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE p.policy_id=%s GROUP BY p.policy_id", (int(policy_id),))
            r = fetchone(cur)
            return _row_to_policy(r) if r else None
