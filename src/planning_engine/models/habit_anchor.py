"""Habit anchors and the three-level anchor index."""

from __future__ import annotations

from dataclasses import dataclass, field

from planning_engine.models.enums import AnchorLevel, CanonicalType, Confidence, Discipline

AnchorKey = tuple[str, ...]


@dataclass(frozen=True)
class HabitAnchor:
    """Statistically inferred preferred start time for one grouping key.

    Times are minutes after local midnight. The window bounds are the
    weighted 25th/75th percentiles of observed start times.
    """

    level: AnchorLevel
    discipline: Discipline
    weekday: str | None
    canonical_type: CanonicalType | None
    preferred_start_min_local: int
    preferred_window_min_local: int
    preferred_window_max_local: int
    hour_histogram: tuple[float, ...]
    weighted_sample_count: float
    sample_count: int
    time_dispersion_min_local: float
    confidence: Confidence

    @property
    def key(self) -> AnchorKey:
        """Grouping key at this anchor's level of specificity."""
        if self.level is AnchorLevel.DISCIPLINE_WEEKDAY_TYPE:
            type_value = self.canonical_type.value if self.canonical_type else ""
            return (self.discipline.value, self.weekday or "", type_value)
        if self.level is AnchorLevel.DISCIPLINE_WEEKDAY:
            return (self.discipline.value, self.weekday or "")
        return (self.discipline.value,)

    @property
    def preferred_start_local(self) -> str:
        return format_minutes(self.preferred_start_min_local)


@dataclass(frozen=True)
class AnchorIndex:
    """Anchors at each level, sorted by descending weighted sample count."""

    by_discipline_weekday_type: tuple[HabitAnchor, ...] = field(default_factory=tuple)
    by_discipline_weekday: tuple[HabitAnchor, ...] = field(default_factory=tuple)
    by_discipline: tuple[HabitAnchor, ...] = field(default_factory=tuple)

    def anchors_at(self, level: AnchorLevel) -> tuple[HabitAnchor, ...]:
        if level is AnchorLevel.DISCIPLINE_WEEKDAY_TYPE:
            return self.by_discipline_weekday_type
        if level is AnchorLevel.DISCIPLINE_WEEKDAY:
            return self.by_discipline_weekday
        if level is AnchorLevel.DISCIPLINE:
            return self.by_discipline
        return ()

    def lookup(self, level: AnchorLevel, key: AnchorKey) -> HabitAnchor | None:
        """Return the anchor at *level* whose key equals *key*, or None."""
        for anchor in self.anchors_at(level):
            if anchor.key == key:
                return anchor
        return None

    @property
    def is_empty(self) -> bool:
        return not (self.by_discipline_weekday_type or self.by_discipline_weekday or self.by_discipline)


def format_minutes(minute_of_day: int) -> str:
    """Render minutes after midnight as ``HH:MM`` (wrapping at 24h)."""
    minute_of_day = int(minute_of_day) % 1440
    return f"{minute_of_day // 60:02d}:{minute_of_day % 60:02d}"
