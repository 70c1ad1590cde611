"""BUDGET check: sessions moved off their habitual weekday."""

from __future__ import annotations

from planning_engine.models.enums import CheckFamily, ViolationCode
from planning_engine.models.violation import Violation
from planning_engine.validation.base import PlanCheck, ValidationInput
from planning_engine.validation.plan_access import as_dict, session_id


class WeekdayChangeBudgetCheck(PlanCheck):
    """At most max(1, floor(schedulable_count * ratio)) off-habit weekdays.

    Every off-habit session beyond the budget is reported, so a plan with
    budget 1 and three off-habit sessions gets two violations.
    """

    check_id = "weekday_change_budget"
    family = CheckFamily.BUDGET

    def check(self, ctx: ValidationInput) -> list[Violation]:
        budget = ctx.policy.weekday_change_budget(len(ctx.schedulable))
        off_habit = [
            session_id(s)
            for s in ctx.schedulable
            if as_dict(s.get("habit_anchor")).get("weekday_match") is False
        ]

        return [
            Violation(
                code=ViolationCode.WEEKDAY_CHANGE_BUDGET_EXCEEDED,
                message=(
                    f"Session {sid}: {len(off_habit)} sessions are off their habitual weekday, "
                    f"budget is {budget} (ratio {ctx.policy.effective_weekday_change_ratio:g})."
                ),
                session_id=sid,
            )
            for sid in off_habit[budget:]
        ]
