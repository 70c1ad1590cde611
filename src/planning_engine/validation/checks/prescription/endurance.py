"""PRESCRIPTION checks: bike, run and swim prescription structure.

Only structure and numeric legality are checked; block prose is left to
the plan author.
"""

from __future__ import annotations

from typing import Any

from jsonschema import Draft7Validator

from planning_engine.models.enums import CheckFamily, Discipline, ViolationCode
from planning_engine.models.violation import Violation
from planning_engine.validation import schemas
from planning_engine.validation.base import PlanCheck, ValidationInput
from planning_engine.validation.plan_access import session_discipline, session_id

PRESCRIPTION_VALIDATORS: dict[Discipline, tuple[ViolationCode, Draft7Validator]] = {
    Discipline.BIKE: (ViolationCode.BIKE_PRESCRIPTION_INVALID, schemas.BIKE_PRESCRIPTION),
    Discipline.RUN: (ViolationCode.RUN_PRESCRIPTION_INVALID, schemas.RUN_PRESCRIPTION),
    Discipline.SWIM: (ViolationCode.SWIM_PRESCRIPTION_INVALID, schemas.SWIM_PRESCRIPTION),
}


def prescription_problems(discipline: Discipline, prescription: Any) -> list[str]:
    """Human-readable problems with one endurance prescription; empty when valid."""
    if not isinstance(prescription, dict):
        return [f"{discipline.value}_prescription object is missing"]
    _, validator = PRESCRIPTION_VALIDATORS[discipline]
    return schemas.schema_problems(validator, prescription)


class EndurancePrescriptionCheck(PlanCheck):
    """Every bike, run and swim session carries a well-formed prescription."""

    check_id = "endurance_prescription"
    family = CheckFamily.PRESCRIPTION

    def check(self, ctx: ValidationInput) -> list[Violation]:
        violations: list[Violation] = []
        for session in ctx.schedulable:
            discipline = session_discipline(session)
            if discipline not in PRESCRIPTION_VALIDATORS:
                continue
            code, _ = PRESCRIPTION_VALIDATORS[discipline]
            problems = prescription_problems(discipline, session.get(f"{discipline.value}_prescription"))
            if problems:
                sid = session_id(session)
                violations.append(
                    Violation(code=code, message=f"Session {sid}: " + "; ".join(problems) + ".", session_id=sid)
                )
        return violations
