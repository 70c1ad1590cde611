"""Abstract base class for plan checks and the frozen validation input."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from planning_engine.models.athlete import AthleteProfile, CheckIn
from planning_engine.models.enums import CheckFamily, PhaseMode
from planning_engine.models.policy import SchedulingPolicy
from planning_engine.models.violation import Violation


@dataclass(frozen=True)
class ValidationInput:
    """Immutable snapshot of everything one validator run looks at.

    Built once per run by PlanValidator; checks never see the raw
    arguments, so derived facts (phase, schedulable sessions, prior-week
    sessions) are computed exactly once.
    """

    plan: dict[str, Any]
    policy: SchedulingPolicy
    profile: AthleteProfile
    checkin: CheckIn
    phase: PhaseMode
    week_start: date | None
    sessions: tuple[dict[str, Any], ...] = field(default_factory=tuple)
    schedulable: tuple[dict[str, Any], ...] = field(default_factory=tuple)
    prior_sessions: tuple[dict[str, Any], ...] = field(default_factory=tuple)
    prior_week_start: date | None = None
    has_prior_plan: bool = False
    strategy: dict[str, Any] = field(default_factory=dict)

    @property
    def conservative_mode(self) -> bool:
        return self.profile.conservative_mode


class PlanCheck(ABC):
    """Base class for all plan validation checks.

    Each check encapsulates one rule family. Checks are discovered
    automatically by the CheckRegistry and run by the PlanValidator in
    family order; every applicable check runs and its violations
    accumulate.

    Subclasses must define:
        check_id: unique identifier (e.g. "session_overlap")
        family: CheckFamily tier that fixes the run order
        check(): the rule logic, returning zero or more violations

    Override ``is_applicable()`` when a structural prerequisite must hold
    before the rule means anything.
    """

    check_id: str
    family: CheckFamily

    def is_applicable(self, ctx: ValidationInput) -> bool:
        """Default: the plan has at least one schedulable session."""
        return len(ctx.schedulable) > 0

    @abstractmethod
    def check(self, ctx: ValidationInput) -> list[Violation]:
        """Evaluate this check; an empty list means the plan passes it."""
        ...
