"""SCHEMA checks: enumerated session fields and the scheduled time window."""

from __future__ import annotations

from datetime import timedelta

from planning_engine.models.enums import SCHEDULE_DURATION_TOLERANCE_MIN, CheckFamily, ViolationCode
from planning_engine.models.violation import Violation
from planning_engine.validation import schemas
from planning_engine.validation.base import PlanCheck, ValidationInput
from planning_engine.validation.plan_access import (
    is_number,
    session_date,
    session_id,
    session_window,
)

FIELD_CODES = {
    "canonical_type": ViolationCode.INVALID_CANONICAL_TYPE,
    "priority": ViolationCode.INVALID_PRIORITY,
    "load_class": ViolationCode.INVALID_LOAD_CLASS,
}


class SessionEnumerationCheck(PlanCheck):
    """canonical_type must be a fixed enumeration value; priority and
    load_class, when given, must be too."""

    check_id = "session_enumerations"
    family = CheckFamily.SCHEMA

    def check(self, ctx: ValidationInput) -> list[Violation]:
        violations: list[Violation] = []
        for session in ctx.schedulable:
            sid = session_id(session)
            reported: set[str] = set()
            for error in schemas.schema_errors(schemas.SESSION_ENUMERATIONS, session):
                for field in schemas.error_fields(error):
                    if field not in FIELD_CODES or field in reported:
                        continue
                    reported.add(field)
                    violations.append(
                        Violation(
                            code=FIELD_CODES[field],
                            message=f"Session {sid}: {field} {session.get(field)!r} is not allowed.",
                            session_id=sid,
                        )
                    )
        return violations


class ScheduledWindowCheck(PlanCheck):
    """Scheduled start/end agree with duration_min and fall inside the plan week."""

    check_id = "scheduled_window"
    family = CheckFamily.SCHEMA

    def check(self, ctx: ValidationInput) -> list[Violation]:
        violations: list[Violation] = []
        week_end = ctx.week_start + timedelta(days=6) if ctx.week_start else None

        for session in ctx.schedulable:
            sid = session_id(session)
            window = session_window(session)
            duration = session.get("duration_min")

            if window is None:
                violations.append(
                    Violation(
                        code=ViolationCode.SCHEDULE_DURATION_MISMATCH,
                        message=f"Session {sid}: scheduled_start_local/scheduled_end_local missing or invalid.",
                        session_id=sid,
                    )
                )
            elif not is_number(duration) or duration <= 0:
                violations.append(
                    Violation(
                        code=ViolationCode.SCHEDULE_DURATION_MISMATCH,
                        message=f"Session {sid}: duration_min must be a positive number.",
                        session_id=sid,
                    )
                )
            else:
                scheduled_min = (window[1] - window[0]).total_seconds() / 60.0
                if abs(scheduled_min - duration) > SCHEDULE_DURATION_TOLERANCE_MIN:
                    violations.append(
                        Violation(
                            code=ViolationCode.SCHEDULE_DURATION_MISMATCH,
                            message=(
                                f"Session {sid}: scheduled window is {scheduled_min:.0f} min "
                                f"but duration_min is {duration}."
                            ),
                            session_id=sid,
                        )
                    )

            day = session_date(session)
            if week_end is not None and day is not None and not ctx.week_start <= day <= week_end:
                violations.append(
                    Violation(
                        code=ViolationCode.SESSION_OUTSIDE_WEEK,
                        message=(
                            f"Session {sid}: date {day.isoformat()} is outside the week "
                            f"{ctx.week_start.isoformat()}..{week_end.isoformat()}."
                        ),
                        session_id=sid,
                    )
                )
        return violations
