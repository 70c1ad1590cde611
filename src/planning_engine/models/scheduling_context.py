"""Scheduling context: per-session anchor candidates and per-day free windows."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from planning_engine.models.enums import (
    AnchorLevel,
    CanonicalType,
    Confidence,
    Discipline,
    LoadClass,
    PriorityTier,
)
from planning_engine.models.habit_anchor import HabitAnchor, format_minutes
from planning_engine.models.policy import SchedulingPolicy


@dataclass(frozen=True)
class TimeWindow:
    """Half-open [start, end) interval in minutes after local midnight."""

    start_min: int
    end_min: int

    @property
    def duration_min(self) -> int:
        return self.end_min - self.start_min

    def contains(self, start_min: int, end_min: int) -> bool:
        return self.start_min <= start_min and end_min <= self.end_min

    def to_dict(self) -> dict:
        return {
            "start_local": format_minutes(self.start_min),
            "end_local": format_minutes(self.end_min) if self.end_min < 1440 else "24:00",
            "duration_min": self.duration_min,
        }


@dataclass(frozen=True)
class AnchorCandidate:
    """One anchor that matched a session at a given fallback level."""

    level: AnchorLevel
    anchor: HabitAnchor
    fits_free_window: bool

    @property
    def confidence(self) -> Confidence:
        return self.anchor.confidence

    @property
    def target_start_min_local(self) -> int:
        return self.anchor.preferred_start_min_local


@dataclass(frozen=True)
class SessionContext:
    """Scheduling facts for one draft session."""

    session_id: str
    session_date: date
    discipline: Discipline
    canonical_type: CanonicalType
    priority: PriorityTier
    load_class: LoadClass
    duration_min: int
    candidates: tuple[AnchorCandidate, ...] = field(default_factory=tuple)
    weekday_match: bool = True
    deviation_cap_min: int = 60
    suggested_start_min_local: int | None = None
    habit_match_score_at_suggestion: float | None = None

    @property
    def selected(self) -> AnchorCandidate | None:
        """First candidate in fallback order, or None when no anchor matched."""
        return self.candidates[0] if self.candidates else None

    @property
    def level_used(self) -> AnchorLevel:
        return self.selected.level if self.selected else AnchorLevel.NONE

    @property
    def confidence(self) -> Confidence:
        return self.selected.confidence if self.selected else Confidence.NONE


@dataclass(frozen=True)
class SchedulingContext:
    """Everything the plan generator needs to place one week of sessions."""

    week_start: date
    policy: SchedulingPolicy
    sessions: tuple[SessionContext, ...] = field(default_factory=tuple)
    free_windows: dict[date, tuple[TimeWindow, ...]] = field(default_factory=dict)
    warnings: tuple[str, ...] = field(default_factory=tuple)

    def session(self, session_id: str) -> SessionContext | None:
        for ctx in self.sessions:
            if ctx.session_id == session_id:
                return ctx
        return None

    @property
    def weekday_change_budget(self) -> int:
        return self.policy.weekday_change_budget(len(self.sessions))
