"""Strength prescription readers: rep specs, hard sets and per-axis deltas."""

from __future__ import annotations

import re
from typing import Any

from planning_engine.models.enums import ProgressionAxis
from planning_engine.validation import schemas
from planning_engine.validation.plan_access import as_dict, as_list, is_number, text

REGRESSION_TRIGGER = re.compile(r"pain|fatigue", re.I)
LOAD_PERCENT = re.compile(r"([+-]?\d+(?:\.\d+)?)\s*%")
_REP_RANGE = re.compile(r"^\s*(\d+)\s*-\s*(\d+)\s*$")


def parse_reps(value: Any) -> float | None:
    """Rep count as a number: ``8`` -> 8.0, ``"8-12"`` -> 10.0, anything else -> None."""
    if is_number(value):
        return float(value) if value > 0 else None
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    if stripped.isdigit():
        return float(stripped) if int(stripped) > 0 else None
    match = _REP_RANGE.match(stripped)
    if not match:
        return None
    low, high = int(match.group(1)), int(match.group(2))
    if low <= 0 or high < low:
        return None
    return (low + high) / 2.0


def exercises(session: dict[str, Any]) -> list[dict[str, Any]]:
    prescription = as_dict(session.get("strength_prescription"))
    return [e for e in as_list(prescription.get("exercises")) if isinstance(e, dict)]


def exercise_name(exercise: dict[str, Any]) -> str:
    return text(exercise.get("name")).lower()


def progression_axis(exercise: dict[str, Any]) -> ProgressionAxis | None:
    try:
        return ProgressionAxis(text(as_dict(exercise.get("load")).get("progression_axis")).lower())
    except ValueError:
        return None


def exercise_problems(exercise: dict[str, Any], conservative: bool) -> list[str]:
    """Structural problems with one exercise; empty when it is well formed."""
    problems = schemas.schema_problems(schemas.STRENGTH_EXERCISE, exercise)
    if "reps" in exercise and parse_reps(exercise.get("reps")) is None:
        problems.append(f"reps: {exercise.get('reps')!r} is not a rep count or low-high range")
    rule = text(as_dict(exercise.get("load")).get("regression_rule"))
    if conservative and rule and not REGRESSION_TRIGGER.search(rule):
        problems.append("load.regression_rule must mention pain or fatigue")
    return problems


def hard_sets(items: list[dict[str, Any]]) -> int:
    """Every prescribed working set counts as a hard set."""
    return sum(e["sets"] for e in items if isinstance(e.get("sets"), int))


def max_target_rpe(items: list[dict[str, Any]]) -> float | None:
    values = [as_dict(e.get("load")).get("target_rpe") for e in items]
    values = [v for v in values if is_number(v)]
    return max(values) if values else None


def _number(exercise: dict[str, Any], *path: str) -> float:
    value: Any = exercise
    for key in path:
        value = as_dict(value).get(key)
    return float(value) if is_number(value) else 0.0


def axis_delta(axis: ProgressionAxis, current: dict[str, Any], prior: dict[str, Any]) -> float:
    """Signed change along one axis. Positive means progressed."""
    if axis is ProgressionAxis.SETS:
        return _number(current, "sets") - _number(prior, "sets")
    if axis is ProgressionAxis.REPS:
        return (parse_reps(current.get("reps")) or 0.0) - (parse_reps(prior.get("reps")) or 0.0)
    if axis is ProgressionAxis.TEMPO:
        return 1.0 if text(current.get("tempo")) != text(prior.get("tempo")) else 0.0
    if axis is ProgressionAxis.DENSITY:
        return _number(prior, "rest_sec") - _number(current, "rest_sec")
    rpe_up = _number(current, "load", "target_rpe") - _number(prior, "load", "target_rpe")
    rir_down = _number(prior, "load", "target_rir") - _number(current, "load", "target_rir")
    return max(rpe_up, rir_down)


def cited_load_percent(exercise: dict[str, Any]) -> float | None:
    """First percentage quoted in the exercise's progression text."""
    load = as_dict(exercise.get("load"))
    for value in (load.get("progression_note"), exercise.get("progression_note"), exercise.get("notes")):
        match = LOAD_PERCENT.search(text(value))
        if match:
            return abs(float(match.group(1)))
    return None
