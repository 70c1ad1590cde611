"""Environment-variable-based defaults for anchors and scheduling policy."""

from __future__ import annotations

import os
from typing import Any

from planning_engine.exceptions import PolicyConfigError
from planning_engine.models.enums import (
    DEFAULT_ANCHOR_WINDOW_DAYS,
    DEFAULT_DAY_END_LOCAL,
    DEFAULT_DAY_START_LOCAL,
    DEFAULT_DEVIATION_CAPS_MIN,
    DEFAULT_RACE_TAPER_MULTIPLIER,
    DEFAULT_RACE_TAPER_WEEKDAY_CHANGE_RATIO,
    DEFAULT_WEEKDAY_CHANGE_RATIO,
    MIN_FREE_WINDOW_MIN,
    PriorityTier,
)

ANCHOR_WINDOW_DAYS: int = int(os.environ.get("PLANNING_ANCHOR_WINDOW_DAYS", str(DEFAULT_ANCHOR_WINDOW_DAYS)))
CAP_KEY_MIN: int = int(os.environ.get("PLANNING_CAP_KEY_MIN", str(DEFAULT_DEVIATION_CAPS_MIN[PriorityTier.KEY])))
CAP_SUPPORT_MIN: int = int(
    os.environ.get("PLANNING_CAP_SUPPORT_MIN", str(DEFAULT_DEVIATION_CAPS_MIN[PriorityTier.SUPPORT]))
)
CAP_OPTIONAL_MIN: int = int(
    os.environ.get("PLANNING_CAP_OPTIONAL_MIN", str(DEFAULT_DEVIATION_CAPS_MIN[PriorityTier.OPTIONAL]))
)
WEEKDAY_CHANGE_RATIO: float = float(
    os.environ.get("PLANNING_WEEKDAY_CHANGE_RATIO", str(DEFAULT_WEEKDAY_CHANGE_RATIO))
)
RACE_TAPER_MULTIPLIER: float = float(
    os.environ.get("PLANNING_RACE_TAPER_MULTIPLIER", str(DEFAULT_RACE_TAPER_MULTIPLIER))
)
RACE_TAPER_WEEKDAY_CHANGE_RATIO: float = float(
    os.environ.get("PLANNING_RACE_TAPER_WEEKDAY_CHANGE_RATIO", str(DEFAULT_RACE_TAPER_WEEKDAY_CHANGE_RATIO))
)
DAY_START_LOCAL: str = os.environ.get("PLANNING_DAY_START_LOCAL", DEFAULT_DAY_START_LOCAL)
DAY_END_LOCAL: str = os.environ.get("PLANNING_DAY_END_LOCAL", DEFAULT_DAY_END_LOCAL)
MIN_FREE_WINDOW: int = int(os.environ.get("PLANNING_MIN_FREE_WINDOW_MIN", str(MIN_FREE_WINDOW_MIN)))


def policy_defaults(overrides: dict[str, Any] | None = None) -> dict[str, Any]:
    """Merge environment defaults with athlete-specific policy overrides.

    Override keys mirror SchedulingPolicy fields; caps may be given as a
    partial ``{"key": 20}`` mapping.

    Raises:
        PolicyConfigError: if a cap is not a positive integer or a ratio
            falls outside [0, 1].
    """
    overrides = overrides or {}
    caps = {
        PriorityTier.KEY: CAP_KEY_MIN,
        PriorityTier.SUPPORT: CAP_SUPPORT_MIN,
        PriorityTier.OPTIONAL: CAP_OPTIONAL_MIN,
    }
    for tier_name, value in (overrides.get("time_deviation_caps_min") or {}).items():
        try:
            tier = PriorityTier(str(tier_name).lower())
        except ValueError:
            raise PolicyConfigError(f"Unknown priority tier in cap overrides: {tier_name!r}") from None
        caps[tier] = value

    for tier, value in caps.items():
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise PolicyConfigError(f"Deviation cap for {tier.value} must be a positive integer, got {value!r}")

    merged = {
        "time_deviation_caps_min": caps,
        "weekday_change_budget_ratio": _ratio(
            overrides.get("weekday_change_budget_ratio", WEEKDAY_CHANGE_RATIO), "weekday_change_budget_ratio"
        ),
        "race_taper_multiplier": _positive(
            overrides.get("race_taper_multiplier", RACE_TAPER_MULTIPLIER), "race_taper_multiplier"
        ),
        "race_taper_weekday_change_budget_ratio": _ratio(
            overrides.get("race_taper_weekday_change_budget_ratio", RACE_TAPER_WEEKDAY_CHANGE_RATIO),
            "race_taper_weekday_change_budget_ratio",
        ),
    }
    return merged


def _ratio(value: Any, name: str) -> float:
    try:
        ratio = float(value)
    except (TypeError, ValueError):
        raise PolicyConfigError(f"{name} must be a number, got {value!r}") from None
    if not 0.0 <= ratio <= 1.0:
        raise PolicyConfigError(f"{name} must be within [0, 1], got {ratio}")
    return ratio


def _positive(value: Any, name: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise PolicyConfigError(f"{name} must be a number, got {value!r}") from None
    if number <= 0:
        raise PolicyConfigError(f"{name} must be positive, got {number}")
    return number
