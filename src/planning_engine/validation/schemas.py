"""Draft 7 JSON schemas for the structural parts of a plan.

Checks validate one sub-document at a time (a prescription, an exercise,
a user-input request) and turn ``iter_errors`` output into short problem
strings. Rules that need arithmetic or several fields at once (rep ranges,
schedule durations, the habit score) stay in the checks.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from jsonschema import Draft7Validator
from jsonschema.exceptions import ValidationError

from planning_engine.models.enums import (
    BIKE_TARGET_METRICS,
    NUTRITION_TEXT_FIELDS,
    TARGET_SYSTEMS,
    AnchorLevel,
    CanonicalType,
    Confidence,
    LoadClass,
    PriorityTier,
    ProgressionAxis,
    StrengthCategory,
)

RPE_RIR_METHOD = "rpe_rir"

NON_EMPTY_TEXT: dict[str, Any] = {"type": "string", "pattern": r"\S"}
POSITIVE_NUMBER: dict[str, Any] = {"type": "number", "exclusiveMinimum": 0}
POSITIVE_INTEGER: dict[str, Any] = {"type": "integer", "minimum": 1}
FILLED: dict[str, Any] = {
    "anyOf": [
        NON_EMPTY_TEXT,
        {"type": "number"},
        {"type": "object", "minProperties": 1},
        {"type": "array", "minItems": 1},
    ]
}


def _enum(values: Iterable[Any]) -> dict[str, Any]:
    return {"enum": sorted(v.value if hasattr(v, "value") else v for v in values)}


def _optional_enum(values: Iterable[Any]) -> dict[str, Any]:
    return {"enum": [*_enum(values)["enum"], None]}


BIKE_BLOCK_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["work_interval", "recovery_interval", "repetitions", "target_metric"],
    "properties": {
        "work_interval": FILLED,
        "recovery_interval": FILLED,
        "repetitions": POSITIVE_INTEGER,
        "target_metric": _enum(BIKE_TARGET_METRICS),
    },
}

RUN_BLOCK_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["impact_management"],
    "properties": {
        "duration_min": POSITIVE_NUMBER,
        "distance_m": POSITIVE_NUMBER,
        "impact_management": FILLED,
    },
    "anyOf": [{"required": ["duration_min"]}, {"required": ["distance_m"]}],
}

SWIM_BLOCK_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["distance_m", "repetitions", "rest_sec", "sendoff"],
    "properties": {
        "distance_m": POSITIVE_NUMBER,
        "repetitions": POSITIVE_INTEGER,
        "rest_sec": {"type": "number", "minimum": 0},
        "sendoff": FILLED,
    },
}


def endurance_prescription_schema(block_schema: dict[str, Any]) -> dict[str, Any]:
    return {
        "type": "object",
        "required": ["session_objective", "target_system", "blocks"],
        "properties": {
            "session_objective": NON_EMPTY_TEXT,
            "target_system": _enum(TARGET_SYSTEMS),
            "blocks": {"type": "array", "minItems": 1, "items": block_schema},
        },
    }


NUTRITION_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": [*NUTRITION_TEXT_FIELDS, "compliance_markers"],
    "properties": {
        **{name: NON_EMPTY_TEXT for name in NUTRITION_TEXT_FIELDS},
        "compliance_markers": {"type": "array", "contains": FILLED},
    },
}

EXERCISE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["name", "category", "sets", "reps", "rest_sec", "load"],
    "properties": {
        "name": NON_EMPTY_TEXT,
        "category": _enum(StrengthCategory),
        "sets": POSITIVE_INTEGER,
        "reps": {"type": ["number", "string"]},
        "rest_sec": POSITIVE_NUMBER,
        "load": {
            "type": "object",
            "required": ["method", "target_rpe", "target_rir", "progression_axis", "regression_rule"],
            "properties": {
                "method": {"const": RPE_RIR_METHOD},
                "target_rpe": {"type": "number"},
                "target_rir": {"type": "number"},
                "progression_axis": _enum(ProgressionAxis),
                "regression_rule": NON_EMPTY_TEXT,
            },
        },
    },
}

USER_INPUT_REQUEST_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["question", "reason", "options"],
    "properties": {
        "question": NON_EMPTY_TEXT,
        "reason": NON_EMPTY_TEXT,
        "options": {"type": "array", "minItems": 2, "items": FILLED},
    },
}

SESSION_ENUMERATION_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["canonical_type"],
    "properties": {
        "canonical_type": _enum(CanonicalType),
        "priority": _optional_enum(PriorityTier),
        "load_class": _optional_enum(LoadClass),
    },
}

HABIT_METADATA_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["habit_anchor", "habit_match_score"],
    "properties": {
        "habit_anchor": {
            "type": "object",
            "required": ["level_used", "confidence", "weekday_match"],
            "properties": {
                "level_used": _enum(AnchorLevel),
                "confidence": _enum(Confidence),
                "weekday_match": {"type": "boolean"},
            },
        },
        "habit_match_score": {"type": "number", "minimum": 0, "maximum": 100},
    },
}

BIKE_PRESCRIPTION = Draft7Validator(endurance_prescription_schema(BIKE_BLOCK_SCHEMA))
RUN_PRESCRIPTION = Draft7Validator(endurance_prescription_schema(RUN_BLOCK_SCHEMA))
SWIM_PRESCRIPTION = Draft7Validator(endurance_prescription_schema(SWIM_BLOCK_SCHEMA))
NUTRITION_PRESCRIPTION = Draft7Validator(NUTRITION_SCHEMA)
STRENGTH_EXERCISE = Draft7Validator(EXERCISE_SCHEMA)
USER_INPUT_REQUEST = Draft7Validator(USER_INPUT_REQUEST_SCHEMA)
SESSION_ENUMERATIONS = Draft7Validator(SESSION_ENUMERATION_SCHEMA)
HABIT_METADATA = Draft7Validator(HABIT_METADATA_SCHEMA)


def error_location(error: ValidationError) -> str:
    """Dotted path of an error inside the validated document, e.g. ``blocks[0].sendoff``."""
    location = ""
    for part in error.absolute_path:
        if isinstance(part, int):
            location += f"[{part}]"
        else:
            location += f".{part}" if location else str(part)
    return location


def error_fields(error: ValidationError) -> list[str]:
    """Top-level properties an error is about; for ``required`` errors, the missing ones."""
    if error.absolute_path:
        return [str(error.absolute_path[0])]
    if error.validator == "required" and isinstance(error.instance, dict):
        return [name for name in error.validator_value if name not in error.instance]
    return []


def schema_errors(validator: Draft7Validator, instance: Any) -> list[ValidationError]:
    return sorted(validator.iter_errors(instance), key=lambda e: (error_location(e), e.message))


def schema_problems(validator: Draft7Validator, instance: Any) -> list[str]:
    problems = []
    for error in schema_errors(validator, instance):
        location = error_location(error)
        problems.append(f"{location}: {error.message}" if location else error.message)
    return problems
