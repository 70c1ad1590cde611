"""Activity record: one historical session from the activity provider."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from planning_engine.models.enums import WEEKDAYS, CanonicalType, Discipline


@dataclass(frozen=True)
class ActivityRecord:
    """Immutable, already-normalized historical activity.

    ``start_local`` is the athlete's local wall-clock start time (naive).
    """

    discipline: Discipline
    start_local: datetime
    canonical_type: CanonicalType = CanonicalType.OTHER
    activity_id: str | None = None
    duration_min: float | None = None
    name: str = ""

    @property
    def local_date(self) -> date:
        return self.start_local.date()

    @property
    def weekday(self) -> str:
        """Lowercase weekday name, e.g. ``"tuesday"``."""
        return WEEKDAYS[self.start_local.weekday()]

    @property
    def minute_of_day(self) -> int:
        return self.start_local.hour * 60 + self.start_local.minute
