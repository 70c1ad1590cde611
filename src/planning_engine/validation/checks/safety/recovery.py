"""SAFETY checks: recovery spacing between hard sessions.

- Hard (or harder) strength may not end within 24h before a key VO2 or
  interval session.
- At most one very_hard session per calendar day, unless two of that
  day's very_hard sessions are both labelled as a brick.
- At most one long session per discipline per week.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date, timedelta

from planning_engine.inference.keywords import mentions_brick
from planning_engine.models.enums import (
    STRENGTH_RECOVERY_GAP_HOURS,
    CanonicalType,
    CheckFamily,
    Discipline,
    LoadClass,
    PriorityTier,
    ViolationCode,
)
from planning_engine.models.violation import Violation
from planning_engine.validation.base import PlanCheck, ValidationInput
from planning_engine.validation.plan_access import (
    session_canonical_type,
    session_date,
    session_discipline,
    session_id,
    session_load_class,
    session_priority,
    session_texts,
    session_window,
)

HARD_LOAD_CLASSES = frozenset({LoadClass.HARD, LoadClass.VERY_HARD})
KEY_QUALITY_TYPES = frozenset({CanonicalType.VO2, CanonicalType.INTERVAL})


class StrengthBeforeKeySessionCheck(PlanCheck):
    check_id = "strength_before_key_session"
    family = CheckFamily.SAFETY

    def check(self, ctx: ValidationInput) -> list[Violation]:
        gap = timedelta(hours=STRENGTH_RECOVERY_GAP_HOURS)
        strength = []
        key_sessions = []
        for session in ctx.schedulable:
            window = session_window(session)
            if window is None:
                continue
            if session_discipline(session) is Discipline.STRENGTH:
                if session_load_class(session) in HARD_LOAD_CLASSES:
                    strength.append((session, window))
            elif (
                session_priority(session) is PriorityTier.KEY
                and session_canonical_type(session) in KEY_QUALITY_TYPES
            ):
                key_sessions.append((session, window))

        violations: list[Violation] = []
        for lift, (lift_start, lift_end) in strength:
            for key, (key_start, _) in key_sessions:
                if lift_start < key_start and key_start - lift_end < gap:
                    sid = session_id(lift)
                    violations.append(
                        Violation(
                            code=ViolationCode.STRENGTH_BEFORE_KEY_SESSION,
                            message=(
                                f"Hard strength session {sid} ends less than {STRENGTH_RECOVERY_GAP_HOURS}h "
                                f"before key session {session_id(key)}."
                            ),
                            session_id=sid,
                        )
                    )
        return violations


class VeryHardDayLimitCheck(PlanCheck):
    check_id = "very_hard_day_limit"
    family = CheckFamily.SAFETY

    def check(self, ctx: ValidationInput) -> list[Violation]:
        by_day: dict[date, list[dict]] = defaultdict(list)
        for session in ctx.schedulable:
            day = session_date(session)
            if day is not None and session_load_class(session) is LoadClass.VERY_HARD:
                by_day[day].append(session)

        violations: list[Violation] = []
        for day in sorted(by_day):
            sessions = by_day[day]
            if len(sessions) <= 1:
                continue
            bricks = [s for s in sessions if mentions_brick(*session_texts(s))]
            if len(bricks) >= 2:
                continue
            ids = ", ".join(session_id(s) for s in sessions)
            violations.append(
                Violation(
                    code=ViolationCode.VERY_HARD_DAY_LIMIT,
                    message=f"{len(sessions)} very_hard sessions on {day.isoformat()} ({ids}) and none form a brick.",
                    session_id=session_id(sessions[1]),
                )
            )
        return violations


class DuplicateLongSessionCheck(PlanCheck):
    check_id = "duplicate_long_session"
    family = CheckFamily.SAFETY

    def check(self, ctx: ValidationInput) -> list[Violation]:
        long_sessions: dict[Discipline, list[str]] = defaultdict(list)
        for session in ctx.schedulable:
            if session_canonical_type(session) is CanonicalType.LONG:
                long_sessions[session_discipline(session)].append(session_id(session))

        violations: list[Violation] = []
        for discipline in Discipline:
            ids = long_sessions.get(discipline, [])
            for extra in ids[1:]:
                violations.append(
                    Violation(
                        code=ViolationCode.DUPLICATE_LONG_SESSION,
                        message=(
                            f"Session {extra} is a second long {discipline.value} session this week "
                            f"(first: {ids[0]})."
                        ),
                        session_id=extra,
                    )
                )
        return violations
