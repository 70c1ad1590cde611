"""Free-window computation from busy intervals.

Busy intervals for a day are sorted, coalesced (overlapping or touching
intervals merge) and complemented inside the schedulable day bound.
Windows shorter than the minimum length are discarded.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from planning_engine.models.scheduling_context import TimeWindow


@dataclass(frozen=True)
class BusyInterval:
    """A busy calendar block in local wall-clock time."""

    start: datetime
    end: datetime


def merge_intervals(intervals: Iterable[TimeWindow]) -> list[TimeWindow]:
    """Sort by start and coalesce overlapping or adjacent intervals."""
    merged: list[TimeWindow] = []
    for interval in sorted(intervals, key=lambda w: (w.start_min, w.end_min)):
        if interval.end_min <= interval.start_min:
            continue
        if merged and interval.start_min <= merged[-1].end_min:
            last = merged[-1]
            merged[-1] = TimeWindow(last.start_min, max(last.end_min, interval.end_min))
        else:
            merged.append(interval)
    return merged


def complement_windows(
    busy: Sequence[TimeWindow],
    day_start_min: int,
    day_end_min: int,
    min_window_min: int,
) -> tuple[TimeWindow, ...]:
    """Free windows inside [day_start, day_end) not covered by *busy*."""
    free: list[TimeWindow] = []
    cursor = day_start_min
    for block in merge_intervals(busy):
        if block.end_min <= cursor:
            continue
        if block.start_min >= day_end_min:
            break
        if block.start_min > cursor:
            free.append(TimeWindow(cursor, min(block.start_min, day_end_min)))
        cursor = max(cursor, block.end_min)
    if cursor < day_end_min:
        free.append(TimeWindow(cursor, day_end_min))
    return tuple(w for w in free if w.duration_min >= min_window_min)


def busy_windows_on(day: date, busy: Iterable[BusyInterval]) -> list[TimeWindow]:
    """Clip busy intervals to one calendar day, as minutes after midnight."""
    day_start = datetime.combine(day, time.min)
    day_end = day_start + timedelta(days=1)
    windows = []
    for interval in busy:
        start = max(interval.start, day_start)
        end = min(interval.end, day_end)
        if end <= start:
            continue
        windows.append(
            TimeWindow(
                int((start - day_start).total_seconds() // 60),
                int(-(-(end - day_start).total_seconds() // 60)),
            )
        )
    return windows


def free_windows_for_week(
    week_start: date,
    busy: Sequence[BusyInterval],
    day_start_min: int,
    day_end_min: int,
    min_window_min: int,
    days: int = 7,
) -> dict[date, tuple[TimeWindow, ...]]:
    """Free windows for every date of the planning week."""
    result: dict[date, tuple[TimeWindow, ...]] = {}
    for offset in range(days):
        day = week_start + timedelta(days=offset)
        result[day] = complement_windows(
            busy_windows_on(day, busy), day_start_min, day_end_min, min_window_min
        )
    return result


def nearest_feasible_start(
    windows: Sequence[TimeWindow],
    target_min: int,
    duration_min: int,
) -> int | None:
    """Start closest to *target_min* such that the session fits in a window.

    Ties go to the earlier start. Returns None when no window is long enough.
    """
    best: int | None = None
    best_distance: int | None = None
    for window in windows:
        latest_start = window.end_min - duration_min
        if latest_start < window.start_min:
            continue
        candidate = min(max(target_min, window.start_min), latest_start)
        distance = abs(candidate - target_min)
        if best_distance is None or distance < best_distance or (distance == best_distance and candidate < best):
            best, best_distance = candidate, distance
    return best
