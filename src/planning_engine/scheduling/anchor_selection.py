"""Escalating anchor selection: (discipline, weekday, type) → (discipline, weekday) → (discipline)."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from planning_engine.models.enums import AnchorLevel, CanonicalType, Discipline
from planning_engine.models.habit_anchor import AnchorIndex, AnchorKey, HabitAnchor


@dataclass(frozen=True)
class SessionKey:
    """The parts of a session that anchor keys are built from."""

    discipline: Discipline
    weekday: str
    canonical_type: CanonicalType


KeyBuilder = Callable[[SessionKey], AnchorKey]

# Evaluated in order; the first level with a matching anchor is selected.
ANCHOR_KEY_BUILDERS: tuple[tuple[AnchorLevel, KeyBuilder], ...] = (
    (AnchorLevel.DISCIPLINE_WEEKDAY_TYPE, lambda s: (s.discipline.value, s.weekday, s.canonical_type.value)),
    (AnchorLevel.DISCIPLINE_WEEKDAY, lambda s: (s.discipline.value, s.weekday)),
    (AnchorLevel.DISCIPLINE, lambda s: (s.discipline.value,)),
)


def matching_anchors(index: AnchorIndex, session: SessionKey) -> list[tuple[AnchorLevel, HabitAnchor]]:
    """Every level with a matching anchor, in fallback order."""
    matches = []
    for level, build_key in ANCHOR_KEY_BUILDERS:
        anchor = index.lookup(level, build_key(session))
        if anchor is not None:
            matches.append((level, anchor))
    return matches


def select_anchor(index: AnchorIndex, session: SessionKey) -> tuple[AnchorLevel, HabitAnchor | None]:
    """First match wins; ``(AnchorLevel.NONE, None)`` when nothing matches."""
    for level, build_key in ANCHOR_KEY_BUILDERS:
        anchor = index.lookup(level, build_key(session))
        if anchor is not None:
            return level, anchor
    return AnchorLevel.NONE, None


def is_weekday_match(level: AnchorLevel) -> bool:
    """Only a discipline-level fallback means the weekday is off-habit.

    With no anchor at all there is no weekday habit to break.
    """
    return level is not AnchorLevel.DISCIPLINE
