"""Anchor statistics: recency weighting, weighted quantiles, circular time distance.

All functions are pure. Times of day are minutes after local midnight on
a 1440-minute clock.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date

import numpy as np

from planning_engine.models.enums import (
    CONFIDENCE_HIGH_MAX_DISPERSION_MIN,
    CONFIDENCE_HIGH_MIN_COUNT,
    CONFIDENCE_MEDIUM_MAX_DISPERSION_MIN,
    CONFIDENCE_MEDIUM_MIN_COUNT,
    MINUTES_PER_DAY,
    RECENCY_WEIGHT_NEWEST,
    RECENCY_WEIGHT_OLDEST,
    Confidence,
)


def recency_weight(activity_date: date, as_of: date, window_days: int) -> float:
    """Linear recency weight: 1.0 for today down to 0.25 at the window edge.

    Ages beyond the window are clamped to the edge weight; future dates
    are treated as today.

    Raises:
        ValueError: if window_days is not positive.
    """
    if window_days <= 0:
        raise ValueError(f"window_days must be positive, got {window_days}")
    age_days = (as_of - activity_date).days
    age_days = max(0, min(age_days, window_days))
    span = RECENCY_WEIGHT_NEWEST - RECENCY_WEIGHT_OLDEST
    return RECENCY_WEIGHT_NEWEST - span * (age_days / window_days)


def weighted_quantile(
    values: Sequence[float],
    weights: Sequence[float],
    q: float,
) -> float | None:
    """Weighted quantile by cumulative weight.

    Sorts samples by value and returns the first sample whose running
    weight reaches ``q * total_weight``. When the total weight is zero the
    middle sample by input position is returned. Empty input returns None.

    Raises:
        ValueError: if q is outside [0, 1] or the sequences differ in length.
    """
    if not 0.0 <= q <= 1.0:
        raise ValueError(f"q must be within [0, 1], got {q}")
    if len(values) != len(weights):
        raise ValueError("values and weights must have the same length")
    if len(values) == 0:
        return None

    vals = np.asarray(values, dtype=np.float64)
    wts = np.asarray(weights, dtype=np.float64)
    total = float(wts.sum())
    if total <= 0.0:
        return float(vals[len(vals) // 2])

    order = np.argsort(vals, kind="stable")
    cumulative = np.cumsum(wts[order])
    # Relative tolerance so q=1.0 is not lost to float accumulation error
    threshold = q * total - 1e-9 * total
    idx = int(np.searchsorted(cumulative, threshold, side="left"))
    idx = min(idx, len(vals) - 1)
    return float(vals[order[idx]])


def circular_distance(a: float, b: float) -> float:
    """Distance between two times of day, wrap-aware: 23:50 to 00:10 is 20."""
    diff = abs(a - b) % MINUTES_PER_DAY
    return min(diff, MINUTES_PER_DAY - diff)


def mean_circular_distance(
    values: Sequence[float],
    weights: Sequence[float],
    center: float,
) -> float:
    """Weighted mean circular distance of *values* from *center*.

    Falls back to the unweighted mean when all weights are zero.
    """
    if len(values) == 0:
        return 0.0
    distances = np.array([circular_distance(v, center) for v in values], dtype=np.float64)
    wts = np.asarray(weights, dtype=np.float64)
    if float(wts.sum()) <= 0.0:
        return float(distances.mean())
    return float(np.average(distances, weights=wts))


def hour_histogram(values: Sequence[float], weights: Sequence[float]) -> tuple[float, ...]:
    """24-bucket hour-of-day histogram of weighted sample counts."""
    if len(values) == 0:
        return tuple([0.0] * 24)
    hours = (np.asarray(values, dtype=np.int64) % MINUTES_PER_DAY) // 60
    counts = np.bincount(hours, weights=np.asarray(weights, dtype=np.float64), minlength=24)
    return tuple(round(float(c), 3) for c in counts[:24])


def classify_confidence(weighted_count: float, dispersion_min: float) -> Confidence:
    """Two-factor confidence classifier on sample support and time spread.

    high:   count >= 7 and dispersion <= 60 min
    medium: count >= 3 and dispersion <= 150 min
    low:    everything else
    """
    if weighted_count >= CONFIDENCE_HIGH_MIN_COUNT and dispersion_min <= CONFIDENCE_HIGH_MAX_DISPERSION_MIN:
        return Confidence.HIGH
    if weighted_count >= CONFIDENCE_MEDIUM_MIN_COUNT and dispersion_min <= CONFIDENCE_MEDIUM_MAX_DISPERSION_MIN:
        return Confidence.MEDIUM
    return Confidence.LOW
