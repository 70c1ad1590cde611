"""JSON-ready rendering of anchors and scheduling contexts.

The plan generator consumes the scheduling context as plain JSON, so every
enum is rendered by value and every time as ``HH:MM`` local.
"""

from __future__ import annotations

from typing import Any

from planning_engine.models.habit_anchor import AnchorIndex, HabitAnchor, format_minutes
from planning_engine.models.scheduling_context import (
    AnchorCandidate,
    SchedulingContext,
    SessionContext,
)


def anchor_to_dict(anchor: HabitAnchor) -> dict[str, Any]:
    return {
        "level": anchor.level.value,
        "discipline": anchor.discipline.value,
        "weekday": anchor.weekday,
        "canonical_type": anchor.canonical_type.value if anchor.canonical_type else None,
        "preferred_start_min_local": anchor.preferred_start_min_local,
        "preferred_start_local": anchor.preferred_start_local,
        "preferred_window_min_local": anchor.preferred_window_min_local,
        "preferred_window_max_local": anchor.preferred_window_max_local,
        "hour_histogram": list(anchor.hour_histogram),
        "weighted_sample_count": anchor.weighted_sample_count,
        "sample_count": anchor.sample_count,
        "time_dispersion_min_local": anchor.time_dispersion_min_local,
        "confidence": anchor.confidence.value,
    }


def anchor_index_to_dict(index: AnchorIndex) -> dict[str, list[dict[str, Any]]]:
    """The three anchor arrays, most specific first."""
    return {
        "by_discipline_weekday_type": [anchor_to_dict(a) for a in index.by_discipline_weekday_type],
        "by_discipline_weekday": [anchor_to_dict(a) for a in index.by_discipline_weekday],
        "by_discipline": [anchor_to_dict(a) for a in index.by_discipline],
    }


def _candidate_to_dict(candidate: AnchorCandidate) -> dict[str, Any]:
    return {
        "level_used": candidate.level.value,
        "confidence": candidate.confidence.value,
        "target_start_local": format_minutes(candidate.target_start_min_local),
        "preferred_window_local": [
            format_minutes(candidate.anchor.preferred_window_min_local),
            format_minutes(candidate.anchor.preferred_window_max_local),
        ],
        "fits_free_window": candidate.fits_free_window,
    }


def _session_to_dict(ctx: SessionContext) -> dict[str, Any]:
    selected = ctx.selected
    return {
        "session_id": ctx.session_id,
        "date": ctx.session_date.isoformat(),
        "discipline": ctx.discipline.value,
        "canonical_type": ctx.canonical_type.value,
        "priority": ctx.priority.value,
        "load_class": ctx.load_class.value,
        "duration_min": ctx.duration_min,
        "anchor_candidates": [_candidate_to_dict(c) for c in ctx.candidates],
        "habit_anchor": {
            "level_used": ctx.level_used.value,
            "confidence": ctx.confidence.value,
            "weekday_match": ctx.weekday_match,
            "target_start_local": format_minutes(selected.target_start_min_local) if selected else None,
        },
        "deviation_cap_min": ctx.deviation_cap_min,
        "suggested_start_local": (
            format_minutes(ctx.suggested_start_min_local) if ctx.suggested_start_min_local is not None else None
        ),
        "habit_match_score_at_suggestion": ctx.habit_match_score_at_suggestion,
    }


def to_context_dict(context: SchedulingContext) -> dict[str, Any]:
    """Render a SchedulingContext for the external plan generator."""
    return {
        "week_start": context.week_start.isoformat(),
        "policy": context.policy.to_dict(),
        "weekday_change_budget": context.weekday_change_budget,
        "sessions": [_session_to_dict(s) for s in context.sessions],
        "free_windows": {
            day.isoformat(): [w.to_dict() for w in windows]
            for day, windows in sorted(context.free_windows.items())
        },
        "warnings": list(context.warnings),
    }
