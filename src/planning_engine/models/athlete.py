"""Athlete profile and daily check-in: frozen inputs to the planning core."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from planning_engine.models.enums import WEEKDAYS

_RESOLVED_NIGGLE_STATUSES = frozenset({"resolved", "past", "healed", "inactive"})


@dataclass(frozen=True)
class FixedCommitment:
    """Recurring weekly block the athlete cannot train in (work, school run)."""

    weekday: str
    start_min_local: int
    end_min_local: int
    label: str = ""


@dataclass(frozen=True)
class AthleteProfile:
    """Immutable athlete preferences and constraints.

    Built from the profile JSON with ``from_dict()``; unknown keys are
    ignored, malformed commitments are dropped.
    """

    rest_day: str | None = None
    fixed_commitments: tuple[FixedCommitment, ...] = field(default_factory=tuple)
    niggles: tuple[Any, ...] = field(default_factory=tuple)
    time_budget_min_hours: float | None = None
    time_budget_max_hours: float | None = None
    primary_goal_id: str | None = None
    primary_goal_name: str | None = None
    session_preferences: dict[str, Any] = field(default_factory=dict)
    policy_overrides: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> AthleteProfile:
        if not isinstance(data, dict):
            return cls()

        preferences = data.get("preferences") if isinstance(data.get("preferences"), dict) else {}
        rest_day = data.get("rest_day") or preferences.get("rest_day")
        rest_day = str(rest_day).strip().lower() if rest_day else None
        if rest_day not in WEEKDAYS:
            rest_day = None

        commitments: list[FixedCommitment] = []
        for raw in data.get("fixed_commitments") or []:
            commitment = _parse_commitment(raw)
            if commitment is not None:
                commitments.append(commitment)

        budget = data.get("time_budget_hours") if isinstance(data.get("time_budget_hours"), dict) else {}
        goal = data.get("primary_goal") if isinstance(data.get("primary_goal"), dict) else {}
        niggles = data.get("niggles") or data.get("current_niggles") or []

        return cls(
            rest_day=rest_day,
            fixed_commitments=tuple(commitments),
            niggles=tuple(niggles) if isinstance(niggles, (list, tuple)) else (),
            time_budget_min_hours=_as_float(budget.get("min")),
            time_budget_max_hours=_as_float(budget.get("max")),
            primary_goal_id=str(goal["id"]) if goal.get("id") is not None else None,
            primary_goal_name=str(goal["name"]) if goal.get("name") else None,
            session_preferences=dict(data.get("session_preferences") or {}),
            policy_overrides=dict(data.get("policy_overrides") or {}),
        )

    @property
    def current_niggles(self) -> tuple[Any, ...]:
        """Niggles that are still active (strings, or dicts not marked resolved)."""
        current = []
        for niggle in self.niggles:
            if isinstance(niggle, str) and niggle.strip():
                current.append(niggle)
            elif isinstance(niggle, dict):
                status = str(niggle.get("status") or "current").strip().lower()
                if status not in _RESOLVED_NIGGLE_STATUSES:
                    current.append(niggle)
        return tuple(current)

    @property
    def conservative_mode(self) -> bool:
        """Strength progression is capped tighter while any niggle is current."""
        return len(self.current_niggles) > 0


@dataclass(frozen=True)
class CheckIn:
    """Latest subjective check-in on a 1-10 scale. Missing fields are None."""

    pain: int | None = None
    soreness: int | None = None
    stress: int | None = None
    motivation: int | None = None
    sleep: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> CheckIn:
        if not isinstance(data, dict):
            return cls()
        return cls(
            pain=_as_int(data.get("pain")),
            soreness=_as_int(data.get("soreness")),
            stress=_as_int(data.get("stress")),
            motivation=_as_int(data.get("motivation")),
            sleep=_as_int(data.get("sleep")),
        )


def parse_hhmm(value: Any) -> int | None:
    """Parse ``"HH:MM"`` to minutes after midnight; None if malformed."""
    if not isinstance(value, str):
        return None
    parts = value.strip().split(":")
    if len(parts) < 2:
        return None
    try:
        hours, minutes = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    if not (0 <= hours <= 24 and 0 <= minutes < 60) or hours * 60 + minutes > 1440:
        return None
    return hours * 60 + minutes


def _parse_commitment(raw: Any) -> FixedCommitment | None:
    if not isinstance(raw, dict):
        return None
    weekday = str(raw.get("weekday") or raw.get("day") or "").strip().lower()
    start = parse_hhmm(raw.get("start"))
    end = parse_hhmm(raw.get("end"))
    if weekday not in WEEKDAYS or start is None or end is None or end <= start:
        return None
    return FixedCommitment(
        weekday=weekday,
        start_min_local=start,
        end_min_local=end,
        label=str(raw.get("label") or ""),
    )


def _as_float(value: Any) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _as_int(value: Any) -> int | None:
    number = _as_float(value)
    return int(number) if number is not None else None
