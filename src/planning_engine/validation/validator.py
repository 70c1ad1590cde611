"""PlanValidator: runs every plan check and collects typed violations."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

from planning_engine.inference.phase import resolve_phase
from planning_engine.models.athlete import AthleteProfile, CheckIn
from planning_engine.models.enums import CheckStatus, ViolationCode
from planning_engine.models.policy import SchedulingPolicy
from planning_engine.models.validation_report import CheckResult, ValidationReport
from planning_engine.models.violation import Violation
from planning_engine.scheduling.policy import derive_policy
from planning_engine.validation.base import ValidationInput
from planning_engine.validation.plan_access import as_dict, as_list, is_schedulable, parse_date, text
from planning_engine.validation.registry import CheckRegistry

logger = logging.getLogger(__name__)


class PlanValidator:
    """Validates a fully scheduled weekly plan.

    The validator is a pure function of its inputs: it never mutates the
    plan, never auto-corrects, and validating the same inputs twice gives
    the same violations in the same order.

    Usage:
        validator = PlanValidator()
        violations = validator.validate(plan, policy, profile, prior_week_plan, checkin)
        report = validator.run(plan, policy, profile, prior_week_plan, checkin)
    """

    def __init__(self, registry: CheckRegistry | None = None) -> None:
        self.registry = registry or CheckRegistry()

        # Auto-discover checks if using default registry
        if registry is None:
            self.registry.discover_checks()

    def validate(
        self,
        plan: Any,
        policy: SchedulingPolicy | None = None,
        profile: AthleteProfile | dict[str, Any] | None = None,
        prior_week_plan: Any = None,
        latest_checkin: CheckIn | dict[str, Any] | None = None,
        strategy: dict[str, Any] | None = None,
    ) -> list[Violation]:
        """Ordered list of violations; empty means the plan may be synced."""
        return list(self.run(plan, policy, profile, prior_week_plan, latest_checkin, strategy).violations)

    def run(
        self,
        plan: Any,
        policy: SchedulingPolicy | None = None,
        profile: AthleteProfile | dict[str, Any] | None = None,
        prior_week_plan: Any = None,
        latest_checkin: CheckIn | dict[str, Any] | None = None,
        strategy: dict[str, Any] | None = None,
    ) -> ValidationReport:
        """Run every applicable check and return the full report.

        Args:
            plan: Candidate plan JSON.
            policy: Effective scheduling policy. Derived from the plan phase
                and profile overrides when None.
            profile: Athlete profile (object or profile JSON).
            prior_week_plan: Plan JSON for the week before, or None.
            latest_checkin: Latest subjective check-in, or None.
            strategy: Strategy JSON; its ``phase_intent`` feeds phase resolution.

        Returns:
            ValidationReport with per-check outcomes and all violations.
        """
        if not isinstance(plan, dict) or not isinstance(plan.get("sessions"), list):
            violation = Violation(
                code=ViolationCode.INVALID_PLAN_FORMAT,
                message="Invalid plan format: plan must be an object with a sessions array.",
            )
            logger.info("Plan rejected: sessions array missing")
            return ValidationReport(
                check_results=(
                    CheckResult(
                        check_id="plan_format",
                        status=CheckStatus.VIOLATED,
                        violations=(violation,),
                        explanation=violation.message,
                    ),
                ),
                violations=(violation,),
            )

        ctx = self._build_input(plan, policy, profile, prior_week_plan, latest_checkin, strategy)

        results: list[CheckResult] = []
        violations: list[Violation] = []
        for check in self.registry.get_all_checks():
            if not check.is_applicable(ctx):
                results.append(
                    CheckResult(
                        check_id=check.check_id,
                        status=CheckStatus.NOT_APPLICABLE,
                        explanation="Structural prerequisites missing.",
                    )
                )
                continue

            found = check.check(ctx)
            violations.extend(found)
            results.append(
                CheckResult(
                    check_id=check.check_id,
                    status=CheckStatus.VIOLATED if found else CheckStatus.PASSED,
                    violations=tuple(found),
                    explanation=f"{len(found)} violation(s)." if found else "Passed.",
                )
            )
            logger.debug("Check %s: %d violation(s)", check.check_id, len(found))

        logger.info(
            "Validated plan for week %s (%s phase): %d violation(s)",
            ctx.week_start,
            ctx.phase.value,
            len(violations),
        )
        return ValidationReport(check_results=tuple(results), violations=tuple(violations))

    @staticmethod
    def _build_input(
        plan: dict[str, Any],
        policy: SchedulingPolicy | None,
        profile: AthleteProfile | dict[str, Any] | None,
        prior_week_plan: Any,
        latest_checkin: CheckIn | dict[str, Any] | None,
        strategy: dict[str, Any] | None,
    ) -> ValidationInput:
        """Normalize validator arguments into one frozen ValidationInput."""
        if not isinstance(profile, AthleteProfile):
            profile = AthleteProfile.from_dict(profile)
        if not isinstance(latest_checkin, CheckIn):
            latest_checkin = CheckIn.from_dict(latest_checkin)
        strategy = as_dict(strategy)

        plan_phase = text(plan.get("phase"))
        phase_intent = text(strategy.get("phase_intent"))
        if policy is None:
            policy = derive_policy(plan_phase, phase_intent, profile.policy_overrides)

        sessions = tuple(s for s in as_list(plan.get("sessions")) if isinstance(s, dict))
        week_start = parse_date(plan.get("week_start"))

        prior = as_dict(prior_week_plan)
        prior_week_start = parse_date(prior.get("week_start"))
        prior_sessions: tuple[dict[str, Any], ...] = ()
        aligned = (
            week_start is None
            or prior_week_start is None
            or prior_week_start == week_start - timedelta(days=7)
        )
        if prior and aligned:
            prior_sessions = tuple(s for s in as_list(prior.get("sessions")) if is_schedulable(s))

        return ValidationInput(
            plan=plan,
            policy=policy,
            profile=profile,
            checkin=latest_checkin,
            phase=resolve_phase(plan_phase, phase_intent),
            week_start=week_start,
            sessions=sessions,
            schedulable=tuple(s for s in sessions if is_schedulable(s)),
            prior_sessions=prior_sessions,
            prior_week_start=prior_week_start,
            has_prior_plan=bool(prior),
            strategy=strategy,
        )


def validate_plan(
    plan: Any,
    policy: SchedulingPolicy | None = None,
    profile: AthleteProfile | dict[str, Any] | None = None,
    prior_week_plan: Any = None,
    latest_checkin: CheckIn | dict[str, Any] | None = None,
    strategy: dict[str, Any] | None = None,
) -> list[Violation]:
    """Validate with a freshly discovered set of checks."""
    return PlanValidator().validate(plan, policy, profile, prior_week_plan, latest_checkin, strategy)
