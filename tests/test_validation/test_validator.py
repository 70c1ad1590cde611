"""Tests for PlanValidator: orchestration, format short-circuit, determinism."""

from __future__ import annotations

import copy

from planning_engine.models.enums import CheckFamily, CheckStatus, PriorityTier, ViolationCode
from planning_engine.models.policy import SchedulingPolicy
from planning_engine.validation.validator import PlanValidator, validate_plan


class TestPlanValidator:
    def setup_method(self) -> None:
        self.validator = PlanValidator()

    def test_valid_plan_has_no_violations(
        self, valid_plan: dict, prior_week_plan: dict, profile: dict, calm_checkin: dict
    ) -> None:
        violations = self.validator.validate(valid_plan, None, profile, prior_week_plan, calm_checkin)
        assert violations == []

    def test_report_marks_every_check(
        self, valid_plan: dict, prior_week_plan: dict, profile: dict, calm_checkin: dict
    ) -> None:
        report = self.validator.run(valid_plan, None, profile, prior_week_plan, calm_checkin)
        assert report.is_valid
        assert len(report.check_results) == len(self.validator.registry.get_all_checks())
        assert all(r.status in (CheckStatus.PASSED, CheckStatus.NOT_APPLICABLE) for r in report.check_results)
        assert report.to_dict()["valid"] is True

    def test_missing_sessions_is_single_format_violation(self) -> None:
        violations = self.validator.validate({"week_start": "2026-03-02", "needs_user_input": "nope"})
        assert len(violations) == 1
        assert violations[0].code == ViolationCode.INVALID_PLAN_FORMAT

    def test_non_dict_plan_is_format_violation(self) -> None:
        for plan in (None, [], "plan", {"sessions": "not-a-list"}):
            violations = self.validator.validate(plan)
            assert [v.code for v in violations] == [ViolationCode.INVALID_PLAN_FORMAT]

    def test_validating_twice_is_identical(
        self, valid_plan: dict, prior_week_plan: dict, profile: dict
    ) -> None:
        valid_plan["scheduling_risk_flags"] = []
        valid_plan["sessions"][1]["habit_match_score"] = 10
        first = self.validator.validate(valid_plan, None, profile, prior_week_plan, {"pain": 8})
        second = self.validator.validate(valid_plan, None, profile, prior_week_plan, {"pain": 8})
        assert first
        assert first == second

    def test_plan_is_not_mutated(self, valid_plan: dict, prior_week_plan: dict, profile: dict) -> None:
        valid_plan["sessions"][2]["deviation_minutes"] = -5
        snapshot = copy.deepcopy(valid_plan)
        self.validator.validate(valid_plan, None, profile, prior_week_plan, {"soreness": 9})
        assert valid_plan == snapshot

    def test_non_finite_checkin_values_are_ignored(
        self, valid_plan: dict, prior_week_plan: dict, profile: dict
    ) -> None:
        for checkin in ({"pain": "nan"}, {"soreness": float("inf")}, {"stress": "-inf", "sleep": float("nan")}):
            assert self.validator.validate(valid_plan, None, profile, prior_week_plan, checkin) == []

    def test_violations_ordered_by_family(self, valid_plan: dict, prior_week_plan: dict, profile: dict) -> None:
        del valid_plan["scheduling_context"]
        report = self.validator.run(valid_plan, None, profile, prior_week_plan, {"pain": 9})
        codes = report.codes()
        assert codes[0] == ViolationCode.MISSING_SCHEDULING_CONTEXT
        assert codes[-1] == ViolationCode.ASK_BEFORE_DOWNSHIFT_REQUIRED

    def test_checks_run_in_family_order(self) -> None:
        families = [c.family for c in self.validator.registry.get_all_checks()]
        assert families == sorted(families)
        assert families[0] == CheckFamily.STRUCTURE
        assert families[-1] == CheckFamily.GATE

    def test_explicit_policy_is_used(self, valid_plan: dict, prior_week_plan: dict, profile: dict) -> None:
        # A tighter key cap makes the bike's +30 min deviation exceed it
        policy = SchedulingPolicy(time_deviation_caps_min=_caps(key=20))
        codes = [v.code for v in self.validator.validate(valid_plan, policy, profile, prior_week_plan)]
        assert ViolationCode.DEVIATION_CAP_EXCEEDED in codes

    def test_module_level_validate_plan(self, valid_plan: dict, prior_week_plan: dict, profile: dict) -> None:
        assert validate_plan(valid_plan, None, profile, prior_week_plan) == []


def _caps(**overrides: int) -> dict[PriorityTier, int]:
    caps = {PriorityTier.KEY: 30, PriorityTier.SUPPORT: 60, PriorityTier.OPTIONAL: 90}
    for name, value in overrides.items():
        caps[PriorityTier(name)] = value
    return caps
