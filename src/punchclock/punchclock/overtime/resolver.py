from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

from ..core.enums import PolicyScope
from ..shifts.model import Shift
from .model import OvertimePolicy, PolicyResolution

_SCOPE_ORDER = (PolicyScope.SHIFT, PolicyScope.DEPARTMENT, PolicyScope.DEFAULT)


class PolicyResolver:
    """Pick the single effective overtime policy for (shift, department, date).

    This is a pure query over the candidate list: the most specific scope
    wins (shift, then department, then default) and ties inside a scope go to
    the most recent ``effective_from``, then the lowest id. Several defaults
    effective on the same date are reported as a warning instead of failing.
    """

    def resolve(
        self,
        policies: Iterable[OvertimePolicy],
        *,
        shift: Optional[Shift],
        department_id: Optional[int],
        on_date: date,
    ) -> PolicyResolution:
        grouped: dict[PolicyScope, list[OvertimePolicy]] = {scope: [] for scope in _SCOPE_ORDER}

        for policy in policies:
            if not policy.is_active or not policy.is_effective_on(on_date):
                continue
            scope = self._scope_of(policy, shift=shift, department_id=department_id)
            if scope is not None:
                grouped[scope].append(policy)

        for scope in _SCOPE_ORDER:
            candidates = sorted(grouped[scope], key=lambda p: (-p.effective_from.toordinal(), p.policy_id))
            if not candidates:
                continue

            warnings: list[str] = []
            if len(candidates) > 1:
                tied = [p for p in candidates if p.effective_from == candidates[0].effective_from]
                if len(tied) > 1 or scope == PolicyScope.DEFAULT:
                    warnings.append(
                        f"{len(candidates)} {scope.value.lower()} overtime policies effective on {on_date}: "
                        f"using policy {candidates[0].policy_id}"
                    )
            return PolicyResolution(policy=candidates[0], scope=scope, warnings=tuple(warnings))

        return PolicyResolution(
            policy=None,
            warnings=(f"no overtime policy resolvable on {on_date}",),
        )

    @staticmethod
    def _scope_of(policy: OvertimePolicy, *, shift: Optional[Shift], department_id: Optional[int]) -> Optional[PolicyScope]:
        if shift is not None and shift.overtime_policy_id == policy.policy_id:
            return PolicyScope.SHIFT
        if department_id is not None and department_id in policy.department_ids:
            return PolicyScope.DEPARTMENT
        if policy.is_default:
            return PolicyScope.DEFAULT
        return None
