"""Shared test fixtures: athlete profile, check-ins, a valid build-week plan and its prior week.

The valid plan passes every check. Tests copy it and break one thing.

Week of Monday 2026-03-02, phase "build", default policy (caps 30/60/90,
ratio 0.2). Four schedulable sessions plus a Monday rest placeholder:

    run-1   Tue 06:30-07:20  support  anchor discipline_weekday/high, on target      score 96
    bike-1  Wed 18:00-19:00  key      anchor discipline_weekday_type/medium, +30 min  score 56
    swim-1  Thu 07:00-07:45  optional anchor discipline/low, off-habit weekday        score 46
    str-1   Fri 12:00-12:40  support  no anchor                                       score 50
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Callable

import pytest

from planning_engine.models.activity import ActivityRecord
from planning_engine.models.enums import CanonicalType, Discipline

WEEK_START = date(2026, 3, 2)
PRIOR_WEEK_START = date(2026, 2, 23)


def nutrition() -> dict[str, Any]:
    return {
        "pre_session": "Light carb snack 60 min before",
        "during_session": "Water only",
        "post_session": "Protein and carbs within 45 min",
        "hydration": "500 ml before, sip to thirst",
        "daily_context": "Normal training day intake",
        "compliance_markers": ["pre-session snack logged"],
    }


def exercise(
    name: str,
    sets: int,
    reps: Any,
    axis: str,
    rpe: float = 7.0,
    rir: float = 3.0,
    rest_sec: int = 90,
    category: str = "performance_transfer",
    **extra: Any,
) -> dict[str, Any]:
    load = {
        "method": "rpe_rir",
        "target_rpe": rpe,
        "target_rir": rir,
        "progression_axis": axis,
        "regression_rule": "Drop one set if pain or fatigue rises above 4/10",
    }
    load.update(extra.pop("load", {}))
    data = {
        "name": name,
        "category": category,
        "sets": sets,
        "reps": reps,
        "rest_sec": rest_sec,
        "load": load,
    }
    data.update(extra)
    return data


def trace(goal_link: str, prior_id: str | None, progressed: list[str], phase: str = "build") -> dict[str, Any]:
    return {
        "phase_mode": phase,
        "goal_link": goal_link,
        "progression_comparison": "prior_week_reference" if prior_id else "none",
        "prior_week_session_id": prior_id,
        "progressed_fields": progressed,
        "load_delta_summary": "Volume up slightly" if phase == "build" else "Volume reduced 30%",
    }


def _run_session() -> dict[str, Any]:
    return {
        "id": "run-1",
        "date": "2026-03-03",
        "discipline": "run",
        "type": "Easy run",
        "canonical_type": "easy",
        "priority": "support",
        "load_class": "easy",
        "intent": "Aerobic base",
        "duration_min": 50,
        "scheduled_start_local": "2026-03-03T06:30",
        "scheduled_end_local": "2026-03-03T07:20",
        "habit_anchor": {
            "level_used": "discipline_weekday",
            "confidence": "high",
            "weekday_match": True,
            "target_start_local": "06:30",
        },
        "habit_match_score": 96,
        "deviation_minutes": 0,
        "run_prescription": {
            "session_objective": "Aerobic base",
            "target_system": "aerobic_base",
            "blocks": [{"duration_min": 50, "impact_management": "Soft surface, cadence 170+"}],
        },
        "nutrition_prescription": nutrition(),
        "progression_trace": trace("run durability for Half Ironman", "run-0", ["duration_min"]),
    }


def _bike_session() -> dict[str, Any]:
    return {
        "id": "bike-1",
        "date": "2026-03-04",
        "discipline": "bike",
        "type": "Tempo ride",
        "canonical_type": "tempo",
        "priority": "key",
        "load_class": "hard",
        "intent": "Sustained tempo",
        "duration_min": 60,
        "scheduled_start_local": "2026-03-04T18:00",
        "scheduled_end_local": "2026-03-04T19:00",
        "habit_anchor": {
            "level_used": "discipline_weekday_type",
            "confidence": "medium",
            "weekday_match": True,
            "target_start_local": "17:30",
        },
        "habit_match_score": 56,
        "deviation_minutes": 30,
        "bike_prescription": {
            "session_objective": "Tempo durability",
            "target_system": "tempo",
            "blocks": [
                {
                    "work_interval": "15 min @ 85% FTP",
                    "recovery_interval": "5 min easy",
                    "repetitions": 2,
                    "target_metric": "power",
                }
            ],
        },
        "nutrition_prescription": nutrition(),
        "progression_trace": trace("bike tempo for Half Ironman", "bike-0", ["duration_min"]),
    }


def _swim_session() -> dict[str, Any]:
    return {
        "id": "swim-1",
        "date": "2026-03-05",
        "discipline": "swim",
        "type": "Technique swim",
        "canonical_type": "technique",
        "priority": "optional",
        "load_class": "easy",
        "intent": "Catch drills",
        "duration_min": 45,
        "scheduled_start_local": "2026-03-05T07:00",
        "scheduled_end_local": "2026-03-05T07:45",
        "habit_anchor": {
            "level_used": "discipline",
            "confidence": "low",
            "weekday_match": False,
            "target_start_local": "07:00",
        },
        "habit_match_score": 46,
        "deviation_minutes": 0,
        "deviation_reason": "Pool lane only available on Thursday",
        "exception_code": "facility_availability",
        "swim_prescription": {
            "session_objective": "Catch technique",
            "target_system": "technique",
            "blocks": [{"distance_m": 100, "repetitions": 8, "rest_sec": 20, "sendoff": "2:00"}],
        },
        "nutrition_prescription": nutrition(),
        "progression_trace": trace("swim technique for Half Ironman", None, []),
    }


def _strength_session() -> dict[str, Any]:
    return {
        "id": "str-1",
        "date": "2026-03-06",
        "discipline": "strength",
        "type": "Strength",
        "canonical_type": "strength",
        "priority": "support",
        "load_class": "moderate",
        "intent": "Lower body strength",
        "duration_min": 40,
        "scheduled_start_local": "2026-03-06T12:00",
        "scheduled_end_local": "2026-03-06T12:40",
        "habit_anchor": {
            "level_used": "none",
            "confidence": "none",
            "weekday_match": True,
            "target_start_local": None,
        },
        "habit_match_score": 50,
        "deviation_minutes": 0,
        "strength_prescription": {
            "exercises": [
                exercise("back squat", 4, "8-10", "sets"),
                exercise("romanian deadlift", 3, 8, "load"),
                exercise("calf raise", 3, 12, "reps", rpe=6.0, rir=4.0, rest_sec=60, category="injury_prevention"),
            ]
        },
        "nutrition_prescription": nutrition(),
        "progression_trace": trace(
            "strength support for Half Ironman", "str-0", ["strength_prescription.exercises.0.sets"]
        ),
    }


def build_valid_plan() -> dict[str, Any]:
    return {
        "week_start": WEEK_START.isoformat(),
        "phase": "build",
        "sessions": [
            {"id": "rest-1", "date": "2026-03-02", "discipline": "rest", "type": "rest"},
            _run_session(),
            _bike_session(),
            _swim_session(),
            _strength_session(),
        ],
        "scheduling_context": {"source": "habit_anchors"},
        "scheduling_decisions": {
            "habit_adherence_summary": {"score": 88},
            "adjustment_log": [],
        },
        "scheduling_risk_flags": ["No prior swim session last week; swim progression starts fresh."],
        "needs_user_input": [],
    }


def build_prior_week_plan() -> dict[str, Any]:
    return {
        "week_start": PRIOR_WEEK_START.isoformat(),
        "phase": "build",
        "sessions": [
            {"id": "run-0", "date": "2026-02-24", "discipline": "run", "type": "Easy run", "duration_min": 45},
            {"id": "bike-0", "date": "2026-02-25", "discipline": "bike", "type": "Tempo ride", "duration_min": 50},
            {
                "id": "str-0",
                "date": "2026-02-27",
                "discipline": "strength",
                "type": "Strength",
                "duration_min": 40,
                "strength_prescription": {
                    "exercises": [
                        exercise("back squat", 3, "8-10", "sets"),
                        exercise("romanian deadlift", 3, 8, "load"),
                        exercise(
                            "calf raise", 3, 12, "reps", rpe=6.0, rir=4.0, rest_sec=60, category="injury_prevention"
                        ),
                    ]
                },
            },
        ],
    }


@pytest.fixture
def valid_plan() -> dict[str, Any]:
    return build_valid_plan()


@pytest.fixture
def prior_week_plan() -> dict[str, Any]:
    return build_prior_week_plan()


@pytest.fixture
def profile() -> dict[str, Any]:
    return {
        "rest_day": "monday",
        "fixed_commitments": [{"weekday": "tuesday", "start": "09:00", "end": "17:00", "label": "work"}],
        "niggles": [],
        "time_budget_hours": {"min": 3, "max": 10},
        "primary_goal": {"id": "goal-703", "name": "Half Ironman"},
    }


@pytest.fixture
def calm_checkin() -> dict[str, int]:
    return {"pain": 2, "soreness": 3, "stress": 4, "motivation": 7, "sleep": 4}


@pytest.fixture
def session_by_id() -> Callable[[dict[str, Any], str], dict[str, Any]]:
    """Look up a session in a plan by id (mutable, for breaking one field)."""

    def _find(plan: dict[str, Any], session_id: str) -> dict[str, Any]:
        for session in plan["sessions"]:
            if session.get("id") == session_id:
                return session
        raise KeyError(session_id)

    return _find


@pytest.fixture
def run_history() -> list[ActivityRecord]:
    """Eight weeks of Tuesday 06:30-ish easy runs plus Saturday long runs at 08:00."""
    records = []
    for week in range(8):
        tuesday = date(2026, 1, 6).toordinal() + week * 7
        saturday = tuesday + 4
        day = date.fromordinal(tuesday)
        records.append(
            ActivityRecord(
                discipline=Discipline.RUN,
                start_local=datetime(day.year, day.month, day.day, 6, 25 + (week % 3) * 5),
                canonical_type=CanonicalType.EASY,
            )
        )
        day = date.fromordinal(saturday)
        records.append(
            ActivityRecord(
                discipline=Discipline.RUN,
                start_local=datetime(day.year, day.month, day.day, 8, 0),
                canonical_type=CanonicalType.LONG,
            )
        )
    return records
