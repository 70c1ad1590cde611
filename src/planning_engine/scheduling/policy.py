"""Scheduling policy derivation: defaults, athlete overrides, race-taper switch."""

from __future__ import annotations

import logging
from typing import Any

from planning_engine.config import policy_defaults
from planning_engine.inference.phase import is_race_taper_week
from planning_engine.models.policy import SchedulingPolicy

logger = logging.getLogger(__name__)


def derive_policy(
    plan_phase: str | None = None,
    phase_intent: str | None = None,
    overrides: dict[str, Any] | None = None,
) -> SchedulingPolicy:
    """Build the effective SchedulingPolicy for one planning week.

    Args:
        plan_phase: Free-text phase of the draft plan (e.g. "Race week").
        phase_intent: Strategy phase-intent text, consulted with plan_phase.
        overrides: Athlete-specific policy overrides.

    Returns:
        SchedulingPolicy with ``is_race_taper_week`` set from the resolved
        phase. Taper caps are applied through ``effective_cap()``.

    Raises:
        PolicyConfigError: if defaults or overrides are out of range.
    """
    values = policy_defaults(overrides)
    taper = is_race_taper_week(plan_phase, phase_intent)
    if taper:
        logger.info("Race-taper week detected; caps x%.2f", values["race_taper_multiplier"])
    return SchedulingPolicy(is_race_taper_week=taper, **values)
