"""PRESCRIPTION check: nutrition guidance on every schedulable session."""

from __future__ import annotations

from planning_engine.models.enums import CheckFamily, ViolationCode
from planning_engine.models.violation import Violation
from planning_engine.validation import schemas
from planning_engine.validation.base import PlanCheck, ValidationInput
from planning_engine.validation.plan_access import session_id


class NutritionPrescriptionCheck(PlanCheck):
    """Five required text fields plus at least one compliance marker."""

    check_id = "nutrition_prescription"
    family = CheckFamily.PRESCRIPTION

    def check(self, ctx: ValidationInput) -> list[Violation]:
        violations: list[Violation] = []
        for session in ctx.schedulable:
            sid = session_id(session)
            nutrition = session.get("nutrition_prescription")
            if not isinstance(nutrition, dict):
                problems = ["nutrition_prescription object is missing"]
            else:
                problems = schemas.schema_problems(schemas.NUTRITION_PRESCRIPTION, nutrition)

            if problems:
                violations.append(
                    Violation(
                        code=ViolationCode.NUTRITION_PRESCRIPTION_INVALID,
                        message=f"Session {sid}: nutrition prescription " + "; ".join(problems) + ".",
                        session_id=sid,
                    )
                )
        return violations
