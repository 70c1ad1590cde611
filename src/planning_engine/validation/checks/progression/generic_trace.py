"""PROGRESSION check: week-over-week progression trace on every session.

A session either points at a comparable prior-week session and shows a
real change in at least one declared field, or declares "none" and the
plan raises a risk flag about the missing reference.
"""

from __future__ import annotations

import re
from typing import Any

from planning_engine.models.enums import CheckFamily, PhaseMode, ViolationCode
from planning_engine.models.violation import Violation
from planning_engine.validation.base import PlanCheck, ValidationInput
from planning_engine.validation.plan_access import (
    as_list,
    get_path,
    json_equal,
    mentions_id,
    mentions_word,
    session_discipline,
    session_id,
    text,
)
from planning_engine.validation.prior_week import (
    NO_REFERENCE,
    PRIOR_WEEK_REFERENCE,
    comparable_prior_session,
    mentions_missing_reference,
)

REDUCTION_LANGUAGE = re.compile(r"reduce|reduced|down|deload|taper|-\d|less", re.I)
REDUCING_PHASES = frozenset({PhaseMode.TAPER, PhaseMode.DELOAD})


def changed_fields(session: dict[str, Any], prior: dict[str, Any], paths: list[Any]) -> list[str]:
    """Declared dot paths whose JSON value differs between the two sessions."""
    return [
        path
        for path in paths
        if isinstance(path, str) and path and not json_equal(get_path(session, path), get_path(prior, path))
    ]


def goal_linked(ctx: ValidationInput, session: dict[str, Any], goal_link: str) -> bool:
    """goal_link names the discipline, the primary goal name or the primary goal id as a whole token."""
    discipline = session_discipline(session)
    if discipline is not None and mentions_word(discipline.value, goal_link):
        return True
    if ctx.profile.primary_goal_name and mentions_word(ctx.profile.primary_goal_name, goal_link):
        return True
    return bool(ctx.profile.primary_goal_id) and mentions_id(ctx.profile.primary_goal_id, goal_link)


class ProgressionTraceCheck(PlanCheck):
    check_id = "progression_trace"
    family = CheckFamily.PROGRESSION

    def check(self, ctx: ValidationInput) -> list[Violation]:
        violations: list[Violation] = []
        for session in ctx.schedulable:
            violations.extend(self._check_session(ctx, session))
        return violations

    def _check_session(self, ctx: ValidationInput, session: dict[str, Any]) -> list[Violation]:
        sid = session_id(session)
        trace = session.get("progression_trace")
        if not isinstance(trace, dict):
            return [
                Violation(
                    code=ViolationCode.PROGRESSION_TRACE_INVALID,
                    message=f"Session {sid}: progression_trace object is missing.",
                    session_id=sid,
                )
            ]

        violations: list[Violation] = []
        phase_mode = text(trace.get("phase_mode")).lower()
        if phase_mode != ctx.phase.value:
            violations.append(
                Violation(
                    code=ViolationCode.PROGRESSION_PHASE_MISMATCH,
                    message=(
                        f"Session {sid}: phase_mode {phase_mode or None!r} "
                        f"but the week resolves to {ctx.phase.value!r}."
                    ),
                    session_id=sid,
                )
            )

        if not goal_linked(ctx, session, text(trace.get("goal_link"))):
            violations.append(
                Violation(
                    code=ViolationCode.PROGRESSION_TRACE_INVALID,
                    message=f"Session {sid}: goal_link must mention the discipline or the primary goal.",
                    session_id=sid,
                )
            )

        comparison = text(trace.get("progression_comparison")).lower()
        prior = comparable_prior_session(session, ctx.prior_sessions)

        if prior is None:
            if comparison != NO_REFERENCE:
                violations.append(
                    Violation(
                        code=ViolationCode.PROGRESSION_PRIOR_WEEK_REFERENCE,
                        message=(
                            f"Session {sid}: no comparable prior-week session exists, "
                            f"progression_comparison must be {NO_REFERENCE!r}."
                        ),
                        session_id=sid,
                    )
                )
            if not mentions_missing_reference(ctx.plan, session):
                violations.append(
                    Violation(
                        code=ViolationCode.MISSING_PRIOR_REFERENCE_FLAG,
                        message=f"Session {sid}: scheduling_risk_flags must mention the missing prior-week reference.",
                        session_id=sid,
                    )
                )
            return violations

        prior_id = session_id(prior)
        if comparison != PRIOR_WEEK_REFERENCE or str(trace.get("prior_week_session_id") or "").strip() != prior_id:
            violations.append(
                Violation(
                    code=ViolationCode.PROGRESSION_PRIOR_WEEK_REFERENCE,
                    message=(
                        f"Session {sid}: must declare {PRIOR_WEEK_REFERENCE!r} with "
                        f"prior_week_session_id={prior_id!r}."
                    ),
                    session_id=sid,
                )
            )
            return violations

        changed = changed_fields(session, prior, as_list(trace.get("progressed_fields")))
        if not changed:
            violations.append(
                Violation(
                    code=ViolationCode.PROGRESSION_NOT_APPLIED,
                    message=f"Session {sid}: none of the declared progressed_fields differ from {prior_id}.",
                    session_id=sid,
                )
            )
        if ctx.phase in REDUCING_PHASES and not REDUCTION_LANGUAGE.search(text(trace.get("load_delta_summary"))):
            violations.append(
                Violation(
                    code=ViolationCode.PROGRESSION_NOT_APPLIED,
                    message=f"Session {sid}: {ctx.phase.value} week load_delta_summary must describe the reduction.",
                    session_id=sid,
                )
            )
        return violations
