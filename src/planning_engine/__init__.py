"""Planning engine: habit anchors, scheduling context and plan validation."""

from planning_engine.anchors.deriver import derive_habit_anchors
from planning_engine.scheduling.context_builder import (
    build_scheduling_context,
    build_scheduling_context_async,
)
from planning_engine.scheduling.policy import derive_policy
from planning_engine.validation.validator import PlanValidator, validate_plan

__all__ = [
    "PlanValidator",
    "build_scheduling_context",
    "build_scheduling_context_async",
    "derive_habit_anchors",
    "derive_policy",
    "validate_plan",
]
