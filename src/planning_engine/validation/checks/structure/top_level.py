"""STRUCTURE checks: top-level plan blocks and the prior-week plan alignment."""

from __future__ import annotations

from datetime import timedelta

from planning_engine.models.enums import CheckFamily, ViolationCode
from planning_engine.models.violation import Violation
from planning_engine.validation import schemas
from planning_engine.validation.base import PlanCheck, ValidationInput
from planning_engine.validation.plan_access import as_dict


class TopLevelShapeCheck(PlanCheck):
    """Required scheduling blocks exist and user-input requests are well formed."""

    check_id = "top_level_shape"
    family = CheckFamily.STRUCTURE

    def is_applicable(self, ctx: ValidationInput) -> bool:
        return True

    def check(self, ctx: ValidationInput) -> list[Violation]:
        plan = ctx.plan
        violations: list[Violation] = []

        if not isinstance(plan.get("scheduling_context"), dict):
            violations.append(
                Violation(
                    code=ViolationCode.MISSING_SCHEDULING_CONTEXT,
                    message="Plan is missing the scheduling_context object.",
                )
            )

        decisions = as_dict(plan.get("scheduling_decisions"))
        if not isinstance(decisions.get("habit_adherence_summary"), dict):
            violations.append(
                Violation(
                    code=ViolationCode.MISSING_HABIT_ADHERENCE_SUMMARY,
                    message="scheduling_decisions.habit_adherence_summary is required.",
                )
            )

        if not isinstance(plan.get("scheduling_risk_flags"), list):
            violations.append(
                Violation(
                    code=ViolationCode.MISSING_RISK_FLAGS,
                    message="scheduling_risk_flags must be an array (empty when there are no risks).",
                )
            )

        requests = plan.get("needs_user_input", [])
        if not isinstance(requests, list):
            violations.append(
                Violation(
                    code=ViolationCode.INVALID_USER_INPUT_REQUEST,
                    message="needs_user_input must be an array.",
                )
            )
            return violations

        for index, request in enumerate(requests):
            problems = schemas.schema_problems(schemas.USER_INPUT_REQUEST, request)
            if problems:
                violations.append(
                    Violation(
                        code=ViolationCode.INVALID_USER_INPUT_REQUEST,
                        message=f"needs_user_input[{index}]: " + "; ".join(problems) + ".",
                    )
                )
        return violations


class PriorWeekAlignmentCheck(PlanCheck):
    """The prior-week plan must start exactly seven days before this week."""

    check_id = "prior_week_alignment"
    family = CheckFamily.STRUCTURE

    def is_applicable(self, ctx: ValidationInput) -> bool:
        return ctx.has_prior_plan and ctx.week_start is not None and ctx.prior_week_start is not None

    def check(self, ctx: ValidationInput) -> list[Violation]:
        expected = ctx.week_start - timedelta(days=7)
        if ctx.prior_week_start == expected:
            return []
        return [
            Violation(
                code=ViolationCode.PRIOR_WEEK_PLAN_MISMATCH,
                message=(
                    f"Prior-week plan starts {ctx.prior_week_start.isoformat()}, expected "
                    f"{expected.isoformat()}; it was ignored for progression comparisons."
                ),
            )
        ]
