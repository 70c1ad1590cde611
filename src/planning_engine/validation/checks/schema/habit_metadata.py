"""SCHEMA checks: habit anchor metadata, deviation, score and exception codes.

The stored deviation and habit_match_score are recomputed from the
scheduled start, the anchor target and the effective tier cap. Sessions
with no anchor (level_used "none") only need the fields to be present.
"""

from __future__ import annotations

from typing import Any

from planning_engine.math.anchor_statistics import circular_distance
from planning_engine.models.athlete import parse_hhmm
from planning_engine.models.enums import (
    DEVIATION_TOLERANCE_MIN,
    EXCEPTION_CODES,
    SCORE_TOLERANCE,
    AnchorLevel,
    CheckFamily,
    Confidence,
    ViolationCode,
)
from planning_engine.models.violation import Violation
from planning_engine.scheduling.scoring import habit_match_score
from planning_engine.validation import schemas
from planning_engine.validation.base import PlanCheck, ValidationInput
from planning_engine.validation.plan_access import (
    as_dict,
    is_number,
    session_id,
    session_priority,
    session_window,
    text,
)

LEVELS_WITH_TARGET = frozenset(level.value for level in AnchorLevel if level is not AnchorLevel.NONE)


def _metadata_problems(session: dict[str, Any]) -> list[str]:
    problems = schemas.schema_problems(schemas.HABIT_METADATA, session)
    anchor = as_dict(session.get("habit_anchor"))
    level = anchor.get("level_used")
    has_target = isinstance(level, str) and level in LEVELS_WITH_TARGET
    if has_target and parse_hhmm(anchor.get("target_start_local")) is None:
        problems.append("habit_anchor.target_start_local must be HH:MM")
    return problems


class HabitMetadataCheck(PlanCheck):
    """Habit anchor fields exist, are well typed, and agree with the schedule."""

    check_id = "habit_metadata"
    family = CheckFamily.SCHEMA

    def check(self, ctx: ValidationInput) -> list[Violation]:
        violations: list[Violation] = []
        for session in ctx.schedulable:
            sid = session_id(session)
            problems = _metadata_problems(session)
            if problems:
                violations.append(
                    Violation(
                        code=ViolationCode.MISSING_HABIT_METADATA,
                        message=f"Session {sid}: " + "; ".join(problems) + ".",
                        session_id=sid,
                    )
                )

            deviation = session.get("deviation_minutes")
            if not is_number(deviation) or deviation < 0:
                violations.append(
                    Violation(
                        code=ViolationCode.INVALID_DEVIATION,
                        message=f"Session {sid}: deviation_minutes must be a number >= 0.",
                        session_id=sid,
                    )
                )
                continue

            if problems:
                continue

            anchor = session["habit_anchor"]
            level = AnchorLevel(text(anchor["level_used"]).lower())
            if level is AnchorLevel.NONE:
                continue

            target = parse_hhmm(anchor["target_start_local"])
            window = session_window(session)
            if window is not None:
                start_min = window[0].hour * 60 + window[0].minute
                actual = circular_distance(start_min, target)
                if abs(actual - deviation) > DEVIATION_TOLERANCE_MIN:
                    violations.append(
                        Violation(
                            code=ViolationCode.DEVIATION_MISMATCH,
                            message=(
                                f"Session {sid}: deviation_minutes={deviation} but the scheduled start is "
                                f"{actual:.0f} min from the anchor target {anchor['target_start_local']}."
                            ),
                            session_id=sid,
                        )
                    )

            cap = ctx.policy.effective_cap(session_priority(session))
            expected = habit_match_score(
                anchor["weekday_match"],
                deviation,
                cap,
                level,
                Confidence(text(anchor["confidence"]).lower()),
            )
            stored = session["habit_match_score"]
            if abs(expected - stored) > SCORE_TOLERANCE:
                violations.append(
                    Violation(
                        code=ViolationCode.HABIT_MATCH_SCORE_MISMATCH,
                        message=f"Session {sid}: habit_match_score={stored} but the formula gives {expected:.1f}.",
                        session_id=sid,
                    )
                )
        return violations


class DeviationJustificationCheck(PlanCheck):
    """Off-habit placements need both a deviation_reason and a valid exception_code."""

    check_id = "deviation_justification"
    family = CheckFamily.SCHEMA

    def check(self, ctx: ValidationInput) -> list[Violation]:
        violations: list[Violation] = []
        for session in ctx.schedulable:
            sid = session_id(session)
            code = session.get("exception_code")
            code_valid = text(code) in EXCEPTION_CODES

            if code is not None and not code_valid:
                violations.append(
                    Violation(
                        code=ViolationCode.INVALID_EXCEPTION_CODE,
                        message=(
                            f"Session {sid}: exception_code {code!r} is not one of "
                            f"{', '.join(sorted(EXCEPTION_CODES))}."
                        ),
                        session_id=sid,
                    )
                )

            justified = code_valid and bool(text(session.get("deviation_reason")))
            if justified:
                continue

            deviation = session.get("deviation_minutes")
            cap = ctx.policy.effective_cap(session_priority(session))
            if is_number(deviation) and deviation > cap:
                violations.append(
                    Violation(
                        code=ViolationCode.DEVIATION_CAP_EXCEEDED,
                        message=(
                            f"Session {sid}: deviation {deviation} min exceeds the {cap} min cap "
                            "without deviation_reason and exception_code."
                        ),
                        session_id=sid,
                    )
                )

            if as_dict(session.get("habit_anchor")).get("weekday_match") is False:
                violations.append(
                    Violation(
                        code=ViolationCode.WEEKDAY_CHANGE_UNJUSTIFIED,
                        message=(
                            f"Session {sid}: placed off the habitual weekday "
                            "without deviation_reason and exception_code."
                        ),
                        session_id=sid,
                    )
                )
        return violations
