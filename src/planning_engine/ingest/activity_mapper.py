"""Pure functions mapping provider activity dicts to ActivityRecord.

No I/O. Takes the raw activity dicts an activity client already fetched
(``sport_type``, ``start_date_local``, ``name``...) and normalizes them.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime
from typing import Any, Optional

from planning_engine.exceptions import ActivityMappingError
from planning_engine.inference.keywords import infer_canonical_type
from planning_engine.models.activity import ActivityRecord
from planning_engine.models.enums import Discipline

logger = logging.getLogger(__name__)

SPORT_TYPE_DISCIPLINES: dict[str, Discipline] = {
    "run": Discipline.RUN,
    "trailrun": Discipline.RUN,
    "virtualrun": Discipline.RUN,
    "ride": Discipline.BIKE,
    "bike": Discipline.BIKE,
    "virtualride": Discipline.BIKE,
    "gravelride": Discipline.BIKE,
    "mountainbikeride": Discipline.BIKE,
    "ebikeride": Discipline.BIKE,
    "swim": Discipline.SWIM,
    "weighttraining": Discipline.STRENGTH,
    "strength": Discipline.STRENGTH,
    "workout": Discipline.STRENGTH,
    "crossfit": Discipline.STRENGTH,
}


def map_activity(raw: dict[str, Any], strict: bool = False) -> Optional[ActivityRecord]:
    """Map one provider activity dict to an ActivityRecord.

    Returns None for sports without a discipline. Malformed start times
    return None, or raise ActivityMappingError when *strict* is set.
    """
    discipline = _extract_discipline(raw)
    if discipline is None:
        return None

    start = _extract_start_local(raw.get("start_date_local") or raw.get("start_local"))
    if start is None:
        if strict:
            raise ActivityMappingError(f"Activity {raw.get('id')!r} has no parseable start_date_local")
        return None

    name = str(raw.get("name") or "")
    canonical = infer_canonical_type(
        raw.get("canonical_type"),
        name,
        raw.get("description"),
        raw.get("workout_type_label"),
        discipline=discipline,
    )
    moving_time = raw.get("moving_time")
    duration = round(float(moving_time) / 60.0, 1) if isinstance(moving_time, (int, float)) else None

    return ActivityRecord(
        discipline=discipline,
        start_local=start,
        canonical_type=canonical,
        activity_id=str(raw["id"]) if raw.get("id") is not None else None,
        duration_min=duration,
        name=name,
    )


def map_activities(raws: Iterable[dict[str, Any]]) -> list[ActivityRecord]:
    """Map a batch, skipping unmapped or malformed entries."""
    records: list[ActivityRecord] = []
    skipped = 0
    for raw in raws:
        record = map_activity(raw) if isinstance(raw, dict) else None
        if record is None:
            skipped += 1
            continue
        records.append(record)
    if skipped:
        logger.warning("Skipped %d activities without a mappable discipline or start time", skipped)
    return records


# ---------------------------------------------------------------------------
# Internal extractors, each tolerates None input
# ---------------------------------------------------------------------------


def _extract_discipline(raw: dict[str, Any]) -> Optional[Discipline]:
    sport = raw.get("sport_type") or raw.get("type") or raw.get("discipline")
    if not sport:
        return None
    return SPORT_TYPE_DISCIPLINES.get(str(sport).replace(" ", "").replace("_", "").lower())


def _extract_start_local(value: Any) -> Optional[datetime]:
    """Parse a local ISO timestamp to a naive wall-clock datetime.

    Providers append ``Z`` to local timestamps even though they are not
    UTC, so any offset is dropped rather than converted.
    """
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip().replace("Z", "+00:00")
    try:
        return datetime.fromisoformat(text).replace(tzinfo=None)
    except ValueError:
        return None
