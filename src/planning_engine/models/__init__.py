"""Data models for the planning engine."""

from planning_engine.models.activity import ActivityRecord
from planning_engine.models.athlete import AthleteProfile, CheckIn, FixedCommitment
from planning_engine.models.enums import (
    AnchorLevel,
    CanonicalType,
    CheckFamily,
    CheckStatus,
    Confidence,
    Discipline,
    LoadClass,
    PhaseMode,
    PriorityTier,
    ProgressionAxis,
    StrengthCategory,
    ViolationCode,
)
from planning_engine.models.habit_anchor import AnchorIndex, HabitAnchor
from planning_engine.models.policy import SchedulingPolicy
from planning_engine.models.scheduling_context import (
    AnchorCandidate,
    SchedulingContext,
    SessionContext,
    TimeWindow,
)
from planning_engine.models.validation_report import CheckResult, ValidationReport
from planning_engine.models.violation import Violation

__all__ = [
    "ActivityRecord",
    "AnchorCandidate",
    "AnchorIndex",
    "AnchorLevel",
    "AthleteProfile",
    "CanonicalType",
    "CheckFamily",
    "CheckIn",
    "CheckResult",
    "CheckStatus",
    "Confidence",
    "Discipline",
    "FixedCommitment",
    "HabitAnchor",
    "LoadClass",
    "PhaseMode",
    "PriorityTier",
    "ProgressionAxis",
    "SchedulingContext",
    "SchedulingPolicy",
    "SessionContext",
    "StrengthCategory",
    "TimeWindow",
    "ValidationReport",
    "Violation",
    "ViolationCode",
]
