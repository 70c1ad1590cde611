"""Validation report: full audit trail of one PlanValidator run."""

from __future__ import annotations

from dataclasses import dataclass, field

from planning_engine.models.enums import CheckStatus, ViolationCode
from planning_engine.models.violation import Violation


@dataclass(frozen=True)
class CheckResult:
    """Record of a single check's evaluation during a validator run."""

    check_id: str
    status: CheckStatus
    violations: tuple[Violation, ...] = field(default_factory=tuple)
    explanation: str = ""


@dataclass(frozen=True)
class ValidationReport:
    """Every check's outcome plus the flattened, ordered violation list.

    Keeps validation decisions explainable: a check that was skipped
    because its prerequisites were missing shows up as NOT_APPLICABLE.
    """

    check_results: tuple[CheckResult, ...] = field(default_factory=tuple)
    violations: tuple[Violation, ...] = field(default_factory=tuple)

    @property
    def is_valid(self) -> bool:
        return not self.violations

    def codes(self) -> list[ViolationCode]:
        return [v.code for v in self.violations]

    def to_dict(self) -> dict:
        return {
            "valid": self.is_valid,
            "violations": [v.to_dict() for v in self.violations],
            "checks": [
                {"check_id": r.check_id, "status": r.status.name, "explanation": r.explanation}
                for r in self.check_results
            ],
        }
