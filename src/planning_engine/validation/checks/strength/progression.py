"""STRENGTH checks: exercise structure and the phase-conditioned progression caps.

Caps by resolved phase, (normal / conservative) where they differ.
Conservative mode is on while the profile lists any current niggle.

    build     hard sets <= +15% / +7.5%, 1-3 / 1-2 exercises progressing,
              reps step +1..+2 / +1, sets step <= +1,
              load progression cites 2.5-7.5% / 1.25-3.75%
    maintain  hard sets within +-10% / +-5%, <= 1 exercise progressing,
              reps and sets step <= +1
    taper     hard sets -25% to -40%, max target RPE <= 7
    deload    same as taper
"""

from __future__ import annotations

from typing import Any

from planning_engine.models.enums import (
    STRENGTH_BUILD_HARD_SET_MAX_RATIO,
    STRENGTH_BUILD_LOAD_PCT_RANGE,
    STRENGTH_BUILD_MAX_PROGRESSING,
    STRENGTH_BUILD_MIN_PROGRESSING,
    STRENGTH_BUILD_REPS_RANGE,
    STRENGTH_MAINTAIN_HARD_SET_MAX_ABS_RATIO,
    STRENGTH_MAINTAIN_MAX_PROGRESSING,
    STRENGTH_MAINTAIN_MAX_REPS_STEP,
    STRENGTH_MAX_SETS_STEP,
    STRENGTH_TAPER_HARD_SET_RATIO_RANGE,
    STRENGTH_TAPER_MAX_RPE,
    CheckFamily,
    Discipline,
    PhaseMode,
    ProgressionAxis,
    ViolationCode,
)
from planning_engine.models.violation import Violation
from planning_engine.validation.base import PlanCheck, ValidationInput
from planning_engine.validation.checks.strength.exercises import (
    axis_delta,
    cited_load_percent,
    exercise_name,
    exercise_problems,
    exercises,
    hard_sets,
    max_target_rpe,
    progression_axis,
)
from planning_engine.validation.plan_access import as_dict, session_discipline, session_id, text
from planning_engine.validation.prior_week import NO_REFERENCE, comparable_prior_session

_EPS = 1e-9

PHASE_CODES = {
    PhaseMode.BUILD: ViolationCode.STRENGTH_BUILD_PROGRESS_INVALID,
    PhaseMode.MAINTAIN: ViolationCode.STRENGTH_MAINTAIN_PROGRESS_INVALID,
    PhaseMode.TAPER: ViolationCode.STRENGTH_TAPER_PROGRESS_INVALID,
    PhaseMode.DELOAD: ViolationCode.STRENGTH_TAPER_PROGRESS_INVALID,
}


def _strength_sessions(ctx: ValidationInput) -> list[dict[str, Any]]:
    return [s for s in ctx.schedulable if session_discipline(s) is Discipline.STRENGTH]


def structure_problems(session: dict[str, Any], conservative: bool) -> list[str]:
    items = exercises(session)
    if not items:
        return ["strength_prescription.exercises must be a non-empty array"]
    problems = []
    for index, exercise in enumerate(items):
        missing = exercise_problems(exercise, conservative)
        if missing:
            label = exercise_name(exercise) or f"exercises[{index}]"
            problems.append(f"{label}: {', '.join(missing)}")
    return problems


class StrengthStructureCheck(PlanCheck):
    check_id = "strength_structure"
    family = CheckFamily.STRENGTH

    def is_applicable(self, ctx: ValidationInput) -> bool:
        return len(_strength_sessions(ctx)) > 0

    def check(self, ctx: ValidationInput) -> list[Violation]:
        violations: list[Violation] = []
        for session in _strength_sessions(ctx):
            problems = structure_problems(session, ctx.conservative_mode)
            if problems:
                sid = session_id(session)
                violations.append(
                    Violation(
                        code=ViolationCode.STRENGTH_STRUCTURE_INVALID,
                        message=f"Session {sid}: " + "; ".join(problems) + ".",
                        session_id=sid,
                    )
                )
        return violations


class StrengthProgressionCheck(PlanCheck):
    check_id = "strength_progression"
    family = CheckFamily.STRENGTH

    def is_applicable(self, ctx: ValidationInput) -> bool:
        return len(_strength_sessions(ctx)) > 0

    def check(self, ctx: ValidationInput) -> list[Violation]:
        violations: list[Violation] = []
        for session in _strength_sessions(ctx):
            if structure_problems(session, ctx.conservative_mode):
                continue
            sid = session_id(session)
            prior = comparable_prior_session(session, ctx.prior_sessions)

            if prior is None:
                comparison = text(as_dict(session.get("progression_trace")).get("progression_comparison")).lower()
                if comparison != NO_REFERENCE:
                    violations.append(
                        Violation(
                            code=ViolationCode.STRENGTH_PRIOR_WEEK_REFERENCE,
                            message=(
                                f"Session {sid}: no prior-week strength session to compare against, "
                                f"progression_comparison must be {NO_REFERENCE!r}."
                            ),
                            session_id=sid,
                        )
                    )
                continue

            prior_items = [e for e in exercises(prior) if exercise_name(e)]
            if not prior_items or hard_sets(prior_items) <= 0:
                continue

            code = PHASE_CODES[ctx.phase]
            problems = evaluate_progression(ctx.phase, ctx.conservative_mode, exercises(session), prior_items)
            violations.extend(
                Violation(code=code, message=f"Session {sid}: {problem}.", session_id=sid) for problem in problems
            )
        return violations


def evaluate_progression(
    phase: PhaseMode,
    conservative: bool,
    current: list[dict[str, Any]],
    prior: list[dict[str, Any]],
) -> list[str]:
    """Problems with this week's exercises against last week's, for one phase."""
    mode = 1 if conservative else 0
    prior_by_name = {exercise_name(e): e for e in prior}
    pairs = [(e, prior_by_name[exercise_name(e)]) for e in current if exercise_name(e) in prior_by_name]

    prior_sets = hard_sets(prior)
    ratio = (hard_sets(current) - prior_sets) / prior_sets
    progressing = []
    for exercise, before in pairs:
        axis = progression_axis(exercise)
        delta = axis_delta(axis, exercise, before) if axis is not None else 0.0
        if delta > _EPS:
            progressing.append((exercise, before, axis, delta))

    problems: list[str] = []
    if phase in (PhaseMode.BUILD, PhaseMode.MAINTAIN):
        for exercise, before in pairs:
            step = axis_delta(ProgressionAxis.SETS, exercise, before)
            if step > STRENGTH_MAX_SETS_STEP + _EPS:
                problems.append(f"{exercise_name(exercise)} sets +{step:g} exceeds +{STRENGTH_MAX_SETS_STEP}")

    if phase is PhaseMode.BUILD:
        max_ratio = STRENGTH_BUILD_HARD_SET_MAX_RATIO[mode]
        if ratio > max_ratio + _EPS:
            problems.append(f"hard sets {ratio:+.1%} exceed the {max_ratio:+.1%} build cap")

        max_count = STRENGTH_BUILD_MAX_PROGRESSING[mode]
        if not STRENGTH_BUILD_MIN_PROGRESSING <= len(progressing) <= max_count:
            problems.append(
                f"{len(progressing)} exercises progressing, build allows "
                f"{STRENGTH_BUILD_MIN_PROGRESSING}-{max_count}"
            )

        low, high = STRENGTH_BUILD_REPS_RANGE[mode]
        pct_low, pct_high = STRENGTH_BUILD_LOAD_PCT_RANGE[mode]
        for exercise, _, axis, delta in progressing:
            name = exercise_name(exercise)
            if axis is ProgressionAxis.REPS and not low - _EPS <= delta <= high + _EPS:
                problems.append(f"{name} reps +{delta:g} outside +{low:g}..+{high:g}")
            if axis is ProgressionAxis.LOAD:
                pct = cited_load_percent(exercise)
                if pct is None or not pct_low - _EPS <= pct <= pct_high + _EPS:
                    cited = "no load change cited" if pct is None else f"cited {pct:g}%"
                    problems.append(f"{name} load progression {cited}, expected {pct_low:g}-{pct_high:g}%")

    elif phase is PhaseMode.MAINTAIN:
        max_abs = STRENGTH_MAINTAIN_HARD_SET_MAX_ABS_RATIO[mode]
        if abs(ratio) > max_abs + _EPS:
            problems.append(f"hard sets {ratio:+.1%} outside +-{max_abs:.1%} for maintain")
        if len(progressing) > STRENGTH_MAINTAIN_MAX_PROGRESSING:
            problems.append(
                f"{len(progressing)} exercises progressing, maintain allows {STRENGTH_MAINTAIN_MAX_PROGRESSING}"
            )
        for exercise, before in pairs:
            step = axis_delta(ProgressionAxis.REPS, exercise, before)
            if step > STRENGTH_MAINTAIN_MAX_REPS_STEP + _EPS:
                problems.append(
                    f"{exercise_name(exercise)} reps +{step:g} exceeds +{STRENGTH_MAINTAIN_MAX_REPS_STEP:g}"
                )

    else:
        low, high = STRENGTH_TAPER_HARD_SET_RATIO_RANGE
        if not low - _EPS <= ratio <= high + _EPS:
            problems.append(f"hard sets {ratio:+.1%} outside {low:+.0%}..{high:+.0%} for {phase.value}")
        top_rpe = max_target_rpe(current)
        if top_rpe is not None and top_rpe > STRENGTH_TAPER_MAX_RPE + _EPS:
            problems.append(f"max target_rpe {top_rpe:g} exceeds {STRENGTH_TAPER_MAX_RPE:g} for {phase.value}")

    return problems
