"""BUDGET check: total weekly training time against the athlete's range."""

from __future__ import annotations

from planning_engine.models.enums import CheckFamily, ViolationCode
from planning_engine.models.violation import Violation
from planning_engine.validation.base import PlanCheck, ValidationInput
from planning_engine.validation.plan_access import is_number


class WeeklyTimeBudgetCheck(PlanCheck):
    check_id = "weekly_time_budget"
    family = CheckFamily.BUDGET

    def is_applicable(self, ctx: ValidationInput) -> bool:
        profile = ctx.profile
        has_budget = profile.time_budget_min_hours is not None or profile.time_budget_max_hours is not None
        return has_budget and len(ctx.schedulable) > 0

    def check(self, ctx: ValidationInput) -> list[Violation]:
        total_min = sum(s["duration_min"] for s in ctx.schedulable if is_number(s.get("duration_min")))
        hours = total_min / 60.0
        low = ctx.profile.time_budget_min_hours
        high = ctx.profile.time_budget_max_hours

        if low is not None and hours < low:
            bound = f"below the {low:g}h minimum"
        elif high is not None and hours > high:
            bound = f"above the {high:g}h maximum"
        else:
            return []

        return [
            Violation(
                code=ViolationCode.WEEKLY_TIME_BUDGET_VIOLATION,
                message=f"Planned training time {hours:.1f}h is {bound}.",
            )
        ]
