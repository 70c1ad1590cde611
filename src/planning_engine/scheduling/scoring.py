"""habit_match_score: how closely a placement follows the athlete's habit.

score = 40 * [weekday_match]
      + 40 * max(0, 1 - deviation_minutes / cap)
      + min(20, level_score + confidence_score)

clamped to [0, 100]. The validator recomputes this value and compares it
to the stored score with a tolerance of 1 point.
"""

from __future__ import annotations

from planning_engine.models.enums import (
    CONFIDENCE_SCORES,
    LEVEL_SCORES,
    SCORE_ANCHOR_QUALITY_MAX,
    SCORE_TIME_POINTS,
    SCORE_WEEKDAY_POINTS,
    AnchorLevel,
    Confidence,
)


def anchor_quality(level: AnchorLevel, confidence: Confidence) -> float:
    return min(SCORE_ANCHOR_QUALITY_MAX, float(LEVEL_SCORES[level] + CONFIDENCE_SCORES[confidence]))


def habit_match_score(
    weekday_match: bool,
    deviation_minutes: float,
    cap_minutes: float,
    level: AnchorLevel,
    confidence: Confidence,
) -> float:
    """Deterministic habit-match score in [0, 100].

    Raises:
        ValueError: if cap_minutes is not positive.
    """
    if cap_minutes <= 0:
        raise ValueError(f"cap_minutes must be positive, got {cap_minutes}")
    weekday_term = SCORE_WEEKDAY_POINTS if weekday_match else 0.0
    time_term = SCORE_TIME_POINTS * max(0.0, 1.0 - deviation_minutes / cap_minutes)
    score = weekday_term + time_term + anchor_quality(level, confidence)
    return max(0.0, min(100.0, score))
