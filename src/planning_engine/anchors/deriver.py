"""Habit anchor derivation from a trailing activity window.

Every activity in the window is bucketed under three keys at once:
(discipline, weekday, canonical_type), (discipline, weekday) and
(discipline). Each bucket becomes one HabitAnchor built from
recency-weighted quantiles of its start times.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date

import pandas as pd

from planning_engine import config
from planning_engine.math.anchor_statistics import (
    classify_confidence,
    hour_histogram,
    mean_circular_distance,
    recency_weight,
    weighted_quantile,
)
from planning_engine.models.activity import ActivityRecord
from planning_engine.models.enums import AnchorLevel, CanonicalType, Discipline
from planning_engine.models.habit_anchor import AnchorIndex, HabitAnchor

logger = logging.getLogger(__name__)

# Grouping columns per level, most specific first.
_LEVEL_COLUMNS: tuple[tuple[AnchorLevel, tuple[str, ...]], ...] = (
    (AnchorLevel.DISCIPLINE_WEEKDAY_TYPE, ("discipline", "weekday", "canonical_type")),
    (AnchorLevel.DISCIPLINE_WEEKDAY, ("discipline", "weekday")),
    (AnchorLevel.DISCIPLINE, ("discipline",)),
)


def activities_in_window(
    activities: Iterable[ActivityRecord],
    as_of: date,
    window_days: int = config.ANCHOR_WINDOW_DAYS,
) -> list[ActivityRecord]:
    """Activities dated within ``[as_of - window_days, as_of]``."""
    kept = []
    for activity in activities:
        age = (as_of - activity.local_date).days
        if 0 <= age <= window_days:
            kept.append(activity)
    return kept


def derive_habit_anchors(
    activities: Iterable[ActivityRecord],
    as_of: date,
    window_days: int = config.ANCHOR_WINDOW_DAYS,
) -> AnchorIndex:
    """Derive the three-level anchor index from an activity history.

    Anchors are rebuilt wholesale on every call. Empty input (or nothing
    inside the window) yields an empty index, not an error.

    Args:
        activities: Activity history, any order.
        as_of: Reference date; passed explicitly so derivation is deterministic.
        window_days: Trailing window length in days.

    Returns:
        AnchorIndex whose three tuples are sorted by descending
        weighted_sample_count.

    Raises:
        ValueError: if window_days is not positive.
    """
    if window_days <= 0:
        raise ValueError(f"window_days must be positive, got {window_days}")

    window = activities_in_window(activities, as_of, window_days)
    if not window:
        logger.info("No activities within %d days of %s; anchor index is empty", window_days, as_of)
        return AnchorIndex()

    frame = pd.DataFrame(
        {
            "discipline": [a.discipline.value for a in window],
            "weekday": [a.weekday for a in window],
            "canonical_type": [a.canonical_type.value for a in window],
            "minute": [a.minute_of_day for a in window],
            "weight": [recency_weight(a.local_date, as_of, window_days) for a in window],
        }
    )

    levels: dict[AnchorLevel, tuple[HabitAnchor, ...]] = {}
    for level, columns in _LEVEL_COLUMNS:
        anchors = [
            _build_anchor(level, columns, key, group)
            for key, group in frame.groupby(list(columns), sort=True)
        ]
        # Stable sort keeps key order among equally supported anchors
        anchors.sort(key=lambda a: a.weighted_sample_count, reverse=True)
        levels[level] = tuple(anchors)

    index = AnchorIndex(
        by_discipline_weekday_type=levels[AnchorLevel.DISCIPLINE_WEEKDAY_TYPE],
        by_discipline_weekday=levels[AnchorLevel.DISCIPLINE_WEEKDAY],
        by_discipline=levels[AnchorLevel.DISCIPLINE],
    )
    logger.info(
        "Derived anchors from %d activities: %d type-level, %d weekday-level, %d discipline-level",
        len(window),
        len(index.by_discipline_weekday_type),
        len(index.by_discipline_weekday),
        len(index.by_discipline),
    )
    return index


def _build_anchor(
    level: AnchorLevel,
    columns: tuple[str, ...],
    key: object,
    group: pd.DataFrame,
) -> HabitAnchor:
    """Build one anchor record from a grouped slice of the activity frame."""
    # pandas yields a scalar key for single-column groupbys on some versions
    key_values = key if isinstance(key, tuple) else (key,)
    fields = dict(zip(columns, key_values))

    minutes = group["minute"].tolist()
    weights = group["weight"].tolist()

    center = weighted_quantile(minutes, weights, 0.5)
    low = weighted_quantile(minutes, weights, 0.25)
    high = weighted_quantile(minutes, weights, 0.75)
    dispersion = mean_circular_distance(minutes, weights, center)
    weighted_count = float(sum(weights))

    canonical = fields.get("canonical_type")
    return HabitAnchor(
        level=level,
        discipline=Discipline(fields["discipline"]),
        weekday=fields.get("weekday"),
        canonical_type=CanonicalType(canonical) if canonical else None,
        preferred_start_min_local=int(center),
        preferred_window_min_local=int(low),
        preferred_window_max_local=int(high),
        hour_histogram=hour_histogram(minutes, weights),
        weighted_sample_count=round(weighted_count, 3),
        sample_count=len(minutes),
        time_dispersion_min_local=round(dispersion, 1),
        confidence=classify_confidence(weighted_count, dispersion),
    )
