"""Custom exception hierarchy for the planning engine."""

from __future__ import annotations


class PlanningEngineError(Exception):
    """Base exception for all planning_engine errors."""


class PolicyConfigError(PlanningEngineError):
    """Policy defaults or athlete overrides are out of range."""


class CalendarLookupError(PlanningEngineError):
    """The free/busy lookup failed. The core degrades to zero busy windows."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ActivityMappingError(PlanningEngineError):
    """A provider activity could not be mapped to an ActivityRecord."""
