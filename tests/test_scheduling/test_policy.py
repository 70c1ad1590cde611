"""Tests for scheduling policy derivation, taper caps and weekday-change budget."""

from __future__ import annotations

import pytest

from planning_engine.exceptions import PolicyConfigError
from planning_engine.models.enums import PriorityTier
from planning_engine.models.policy import SchedulingPolicy, round_half_up
from planning_engine.scheduling.policy import derive_policy


class TestDerivePolicy:
    def test_defaults(self) -> None:
        policy = derive_policy("build")
        assert not policy.is_race_taper_week
        assert policy.effective_cap(PriorityTier.KEY) == 30
        assert policy.effective_cap(PriorityTier.SUPPORT) == 60
        assert policy.effective_cap(PriorityTier.OPTIONAL) == 90
        assert policy.weekday_change_budget_ratio == pytest.approx(0.2)

    def test_race_taper_from_phase_intent(self) -> None:
        policy = derive_policy("Week 12", "Taper into the A race")
        assert policy.is_race_taper_week
        assert policy.effective_cap(PriorityTier.KEY) == 45
        assert policy.effective_cap(PriorityTier.OPTIONAL) == 135

    def test_deload_is_not_race_taper(self) -> None:
        assert not derive_policy("Deload", "recover before the race block").is_race_taper_week

    def test_partial_cap_override(self) -> None:
        policy = derive_policy(overrides={"time_deviation_caps_min": {"key": 20}})
        assert policy.effective_cap(PriorityTier.KEY) == 20
        assert policy.effective_cap(PriorityTier.SUPPORT) == 60

    def test_ratio_override(self) -> None:
        policy = derive_policy(overrides={"weekday_change_budget_ratio": 0.5})
        assert policy.weekday_change_budget(6) == 3

    def test_non_positive_cap_rejected(self) -> None:
        with pytest.raises(PolicyConfigError):
            derive_policy(overrides={"time_deviation_caps_min": {"support": 0}})

    def test_unknown_tier_rejected(self) -> None:
        with pytest.raises(PolicyConfigError):
            derive_policy(overrides={"time_deviation_caps_min": {"critical": 10}})

    def test_ratio_out_of_range_rejected(self) -> None:
        with pytest.raises(PolicyConfigError):
            derive_policy(overrides={"race_taper_weekday_change_budget_ratio": 1.5})

    def test_non_numeric_multiplier_rejected(self) -> None:
        with pytest.raises(PolicyConfigError):
            derive_policy(overrides={"race_taper_multiplier": "lots"})


class TestSchedulingPolicy:
    def test_taper_caps_round_half_up(self) -> None:
        caps = {PriorityTier.KEY: 15, PriorityTier.SUPPORT: 45, PriorityTier.OPTIONAL: 1}
        policy = SchedulingPolicy(time_deviation_caps_min=caps, is_race_taper_week=True)
        assert policy.effective_cap(PriorityTier.KEY) == 23
        assert policy.effective_cap(PriorityTier.SUPPORT) == 68
        assert policy.effective_cap(PriorityTier.OPTIONAL) == 2

    def test_budget_floor_with_minimum_of_one(self) -> None:
        policy = SchedulingPolicy()
        assert policy.weekday_change_budget(0) == 1
        assert policy.weekday_change_budget(4) == 1
        assert policy.weekday_change_budget(10) == 2
        assert policy.weekday_change_budget(14) == 2

    def test_budget_uses_taper_ratio(self) -> None:
        policy = SchedulingPolicy(is_race_taper_week=True)
        assert policy.weekday_change_budget(5) == 2

    def test_missing_cap_rejected(self) -> None:
        with pytest.raises(ValueError):
            SchedulingPolicy(time_deviation_caps_min={PriorityTier.KEY: 30})

    def test_ratio_rejected(self) -> None:
        with pytest.raises(ValueError):
            SchedulingPolicy(weekday_change_budget_ratio=-0.1)

    def test_round_half_up(self) -> None:
        assert round_half_up(22.5) == 23
        assert round_half_up(22.4) == 22
        assert round_half_up(2.5) == 3
