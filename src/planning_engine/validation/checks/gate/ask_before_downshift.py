"""GATE check: ask the athlete before downshifting a strained week.

The gate trips when the latest check-in crosses any threshold
(pain >= 6, soreness >= 7, stress >= 8, motivation <= 3, sleep <= 2) or
the plan's habit adherence score is below 75. A tripped gate requires a
pending needs_user_input entry and forbids any downshift already applied
to the plan. Either failure yields a single violation.
"""

from __future__ import annotations

import json
import re

from planning_engine.models.enums import (
    CHECKIN_MOTIVATION_TRIGGER,
    CHECKIN_PAIN_TRIGGER,
    CHECKIN_SLEEP_TRIGGER,
    CHECKIN_SORENESS_TRIGGER,
    CHECKIN_STRESS_TRIGGER,
    HABIT_ADHERENCE_TRIGGER,
    CheckFamily,
    ViolationCode,
)
from planning_engine.models.violation import Violation
from planning_engine.validation.base import PlanCheck, ValidationInput
from planning_engine.validation.plan_access import as_dict, as_list, is_number, session_id, text

ADJUSTMENT_DOWNSHIFT = re.compile(r"downgraded|downshift|reduced|shortened", re.I)

_STRAIN = r"fatigue|fatigued|tired|sore|soreness|pain|stress|stressed|poor\s+sleep|low\s+motivation"
_REDUCTION = r"reduc\w*|shorten\w*|downgrad\w*|downshift\w*|cut|dropp?\w*|swapp?\w*|easier"
FATIGUE_REDUCTION = re.compile(
    rf"(?:\b(?:{_REDUCTION})\b[^.;]{{0,40}}\b(?:{_STRAIN})\b)|(?:\b(?:{_STRAIN})\b[^.;]{{0,40}}\b(?:{_REDUCTION})\b)",
    re.I,
)

PENDING_STATUSES = frozenset({"", "pending"})


def gate_triggers(ctx: ValidationInput) -> list[str]:
    """Human-readable reasons the gate is tripped; empty when it is not."""
    checkin = ctx.checkin
    reasons = []
    if checkin.pain is not None and checkin.pain >= CHECKIN_PAIN_TRIGGER:
        reasons.append(f"pain={checkin.pain}")
    if checkin.soreness is not None and checkin.soreness >= CHECKIN_SORENESS_TRIGGER:
        reasons.append(f"soreness={checkin.soreness}")
    if checkin.stress is not None and checkin.stress >= CHECKIN_STRESS_TRIGGER:
        reasons.append(f"stress={checkin.stress}")
    if checkin.motivation is not None and checkin.motivation <= CHECKIN_MOTIVATION_TRIGGER:
        reasons.append(f"motivation={checkin.motivation}")
    if checkin.sleep is not None and checkin.sleep <= CHECKIN_SLEEP_TRIGGER:
        reasons.append(f"sleep={checkin.sleep}")

    summary = as_dict(as_dict(ctx.plan.get("scheduling_decisions")).get("habit_adherence_summary"))
    score = summary.get("score")
    if is_number(score) and score < HABIT_ADHERENCE_TRIGGER:
        reasons.append(f"habit adherence {score:g} < {HABIT_ADHERENCE_TRIGGER}")
    return reasons


def has_pending_request(ctx: ValidationInput) -> bool:
    return any(
        isinstance(entry, dict) and text(entry.get("status")).lower() in PENDING_STATUSES
        for entry in as_list(ctx.plan.get("needs_user_input"))
    )


def applied_downshifts(ctx: ValidationInput) -> list[str]:
    """Where the plan shows a downshift it already made on its own."""
    found = []
    log = as_list(as_dict(ctx.plan.get("scheduling_decisions")).get("adjustment_log"))
    for index, entry in enumerate(log):
        blob = entry if isinstance(entry, str) else json.dumps(entry, sort_keys=True, default=str)
        if ADJUSTMENT_DOWNSHIFT.search(blob):
            found.append(f"adjustment_log[{index}]")
    for session in ctx.sessions:
        if FATIGUE_REDUCTION.search(text(session.get("intent"))):
            found.append(f"session {session_id(session)} intent")
    return found


class AskBeforeDownshiftCheck(PlanCheck):
    check_id = "ask_before_downshift"
    family = CheckFamily.GATE

    def is_applicable(self, ctx: ValidationInput) -> bool:
        return True

    def check(self, ctx: ValidationInput) -> list[Violation]:
        triggers = gate_triggers(ctx)
        if not triggers:
            return []

        problems = []
        if not has_pending_request(ctx):
            problems.append("no pending needs_user_input entry")
        downshifts = applied_downshifts(ctx)
        if downshifts:
            problems.append("downshift already applied in " + ", ".join(downshifts))
        if not problems:
            return []

        return [
            Violation(
                code=ViolationCode.ASK_BEFORE_DOWNSHIFT_REQUIRED,
                message=(
                    f"Ask before downshifting ({', '.join(triggers)}): {'; '.join(problems)}. "
                    "Add a pending needs_user_input question and keep the plan unchanged until answered."
                ),
            )
        ]
