"""Calendar free/busy read: the single I/O seam of the planning core.

The core never talks to a calendar provider itself. Callers pass any
async callable that returns ``[{"start": ..., "end": ...}, ...]`` for a
time range; the OAuth and HTTP work stays in that collaborator. A failed
lookup never aborts planning: it degrades to zero busy windows plus a
warning, and placement falls back to habit anchors alone.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable
from datetime import datetime
from typing import Any

from planning_engine.exceptions import CalendarLookupError
from planning_engine.scheduling.free_windows import BusyInterval

logger = logging.getLogger(__name__)

CalendarSource = Callable[[datetime, datetime], Awaitable[Iterable[dict[str, Any]]]]


def parse_busy_intervals(raw_intervals: Iterable[Any]) -> list[BusyInterval]:
    """Parse ``{start, end}`` ISO-local dicts; malformed entries are dropped."""
    intervals: list[BusyInterval] = []
    for raw in raw_intervals or []:
        if not isinstance(raw, dict):
            continue
        start = _parse_local(raw.get("start"))
        end = _parse_local(raw.get("end"))
        if start is None or end is None or end <= start:
            continue
        intervals.append(BusyInterval(start=start, end=end))
    return intervals


async def fetch_busy_intervals(
    source: CalendarSource | None,
    time_min: datetime,
    time_max: datetime,
) -> tuple[list[BusyInterval], list[str]]:
    """Await one free/busy lookup. No retry here; that belongs to the source.

    Returns:
        (busy_intervals, warnings). On any lookup failure the busy list is
        empty and one warning explains why.
    """
    if source is None:
        return [], []
    try:
        raw = await source(time_min, time_max)
    except CalendarLookupError as exc:
        message = f"Calendar lookup failed ({exc}); scheduling from habit anchors only."
        logger.warning(message)
        return [], [message]
    except Exception as exc:
        message = (
            f"Calendar lookup failed unexpectedly ({type(exc).__name__}: {exc}); "
            "scheduling from habit anchors only."
        )
        logger.warning(message)
        return [], [message]
    intervals = parse_busy_intervals(raw or [])
    logger.info("Calendar returned %d busy intervals between %s and %s", len(intervals), time_min, time_max)
    return intervals, []


def _parse_local(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00")).replace(tzinfo=None)
    except ValueError:
        return None
