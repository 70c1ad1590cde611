"""Scheduling policy: deviation caps and weekday-change budget."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from planning_engine.models.enums import (
    DEFAULT_DEVIATION_CAPS_MIN,
    DEFAULT_RACE_TAPER_MULTIPLIER,
    DEFAULT_RACE_TAPER_WEEKDAY_CHANGE_RATIO,
    DEFAULT_WEEKDAY_CHANGE_RATIO,
    PriorityTier,
)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class SchedulingPolicy:
    """Effective scheduling policy for one planning week.

    Caps are stored at their base values; ``effective_cap()`` applies the
    race-taper multiplier when the week is a race-taper week.
    """

    time_deviation_caps_min: dict[PriorityTier, int] = field(
        default_factory=lambda: dict(DEFAULT_DEVIATION_CAPS_MIN)
    )
    weekday_change_budget_ratio: float = DEFAULT_WEEKDAY_CHANGE_RATIO
    is_race_taper_week: bool = False
    race_taper_multiplier: float = DEFAULT_RACE_TAPER_MULTIPLIER
    race_taper_weekday_change_budget_ratio: float = DEFAULT_RACE_TAPER_WEEKDAY_CHANGE_RATIO

    def __post_init__(self) -> None:
        for tier in PriorityTier:
            cap = self.time_deviation_caps_min.get(tier)
            if not isinstance(cap, int) or isinstance(cap, bool) or cap <= 0:
                raise ValueError(f"Deviation cap for {tier.value} must be a positive integer, got {cap!r}")
        if self.race_taper_multiplier <= 0:
            raise ValueError(f"race_taper_multiplier must be positive, got {self.race_taper_multiplier}")
        for name in ("weekday_change_budget_ratio", "race_taper_weekday_change_budget_ratio"):
            ratio = getattr(self, name)
            if not 0.0 <= ratio <= 1.0:
                raise ValueError(f"{name} must be within [0, 1], got {ratio}")

    def effective_cap(self, tier: PriorityTier) -> int:
        """Deviation cap in minutes for *tier*, taper multiplier applied."""
        base = self.time_deviation_caps_min[tier]
        if not self.is_race_taper_week:
            return base
        return max(1, round_half_up(base * self.race_taper_multiplier))

    @property
    def effective_weekday_change_ratio(self) -> float:
        if self.is_race_taper_week:
            return self.race_taper_weekday_change_budget_ratio
        return self.weekday_change_budget_ratio

    def weekday_change_budget(self, schedulable_count: int) -> int:
        """Off-habit weekday sessions tolerated. Always at least 1."""
        return max(1, math.floor(schedulable_count * self.effective_weekday_change_ratio + 1e-9))

    def to_dict(self) -> dict:
        return {
            "time_deviation_caps_min": {t.value: c for t, c in self.time_deviation_caps_min.items()},
            "effective_time_deviation_caps_min": {t.value: self.effective_cap(t) for t in PriorityTier},
            "weekday_change_budget_ratio": self.weekday_change_budget_ratio,
            "is_race_taper_week": self.is_race_taper_week,
            "race_taper_multiplier": self.race_taper_multiplier,
            "race_taper_weekday_change_budget_ratio": self.race_taper_weekday_change_budget_ratio,
        }
