"""SAFETY checks: overlaps, rest day and fixed commitments."""

from __future__ import annotations

from planning_engine.models.enums import MINUTES_PER_DAY, CheckFamily, ViolationCode
from planning_engine.models.violation import Violation
from planning_engine.validation.base import PlanCheck, ValidationInput
from planning_engine.validation.plan_access import (
    session_date,
    session_id,
    session_window,
    weekday_name,
)


class SessionOverlapCheck(PlanCheck):
    """No two scheduled sessions may overlap in time."""

    check_id = "session_overlap"
    family = CheckFamily.SAFETY

    def check(self, ctx: ValidationInput) -> list[Violation]:
        timed = [(session_window(s), session_id(s)) for s in ctx.schedulable]
        timed = sorted(((w, sid) for w, sid in timed if w is not None), key=lambda item: (item[0][0], item[1]))

        violations: list[Violation] = []
        for i, ((start_a, end_a), sid_a) in enumerate(timed):
            for (start_b, end_b), sid_b in timed[i + 1:]:
                if start_b >= end_a:
                    break
                violations.append(
                    Violation(
                        code=ViolationCode.SESSION_OVERLAP,
                        message=(
                            f"Sessions {sid_a} and {sid_b} overlap "
                            f"({start_a:%a %H:%M}-{end_a:%H:%M} vs {start_b:%a %H:%M}-{end_b:%H:%M})."
                        ),
                        session_id=sid_b,
                    )
                )
        return violations


class RestDayCheck(PlanCheck):
    """Nothing is scheduled on the athlete's declared rest weekday."""

    check_id = "rest_day"
    family = CheckFamily.SAFETY

    def is_applicable(self, ctx: ValidationInput) -> bool:
        return ctx.profile.rest_day is not None and len(ctx.schedulable) > 0

    def check(self, ctx: ValidationInput) -> list[Violation]:
        violations: list[Violation] = []
        for session in ctx.schedulable:
            day = session_date(session)
            if day is not None and weekday_name(day) == ctx.profile.rest_day:
                sid = session_id(session)
                violations.append(
                    Violation(
                        code=ViolationCode.REST_DAY_VIOLATION,
                        message=f"Session {sid} is scheduled on the rest day ({ctx.profile.rest_day}).",
                        session_id=sid,
                    )
                )
        return violations


class FixedCommitmentCheck(PlanCheck):
    """Sessions must not overlap a recurring fixed commitment."""

    check_id = "fixed_commitments"
    family = CheckFamily.SAFETY

    def is_applicable(self, ctx: ValidationInput) -> bool:
        return len(ctx.profile.fixed_commitments) > 0 and len(ctx.schedulable) > 0

    def check(self, ctx: ValidationInput) -> list[Violation]:
        violations: list[Violation] = []
        for session in ctx.schedulable:
            window = session_window(session)
            if window is None:
                continue
            start, end = window
            start_min = start.hour * 60 + start.minute
            # Sessions running past midnight are clipped to their start day.
            end_min = min(MINUTES_PER_DAY, start_min + int((end - start).total_seconds() // 60))
            weekday = weekday_name(start.date())

            for commitment in ctx.profile.fixed_commitments:
                if commitment.weekday != weekday:
                    continue
                if start_min < commitment.end_min_local and commitment.start_min_local < end_min:
                    sid = session_id(session)
                    label = commitment.label or "fixed commitment"
                    violations.append(
                        Violation(
                            code=ViolationCode.FIXED_COMMITMENT_CONFLICT,
                            message=f"Session {sid} overlaps '{label}' on {weekday}.",
                            session_id=sid,
                        )
                    )
        return violations
