"""Tests for the scheduling context builder and its JSON rendering."""

from __future__ import annotations

import asyncio
from datetime import date, datetime

import pytest

from planning_engine.anchors.deriver import derive_habit_anchors
from planning_engine.exceptions import CalendarLookupError
from planning_engine.models.activity import ActivityRecord
from planning_engine.models.athlete import AthleteProfile
from planning_engine.models.enums import AnchorLevel, CanonicalType, Confidence, PriorityTier
from planning_engine.models.habit_anchor import AnchorIndex
from planning_engine.models.scheduling_context import TimeWindow
from planning_engine.scheduling.calendar import parse_busy_intervals
from planning_engine.scheduling.context_builder import (
    build_scheduling_context,
    build_scheduling_context_async,
)
from planning_engine.scheduling.free_windows import BusyInterval
from planning_engine.serialization.context_json import anchor_index_to_dict, to_context_dict

WEEK_START = date(2026, 3, 2)
TUESDAY = date(2026, 3, 3)

DRAFT_SESSIONS = [
    {"id": "rest-1", "date": "2026-03-02", "discipline": "rest", "type": "rest"},
    {"id": "run-1", "date": "2026-03-03", "discipline": "run", "type": "Easy run", "duration_min": 50},
    {"id": "run-thu", "date": "2026-03-05", "discipline": "run", "type": "Easy run", "duration_min": 40},
    {"id": "swim-1", "date": "2026-03-06", "discipline": "swim", "type": "Technique swim", "duration_min": 45},
    {"id": "run-long", "date": "2026-03-07", "discipline": "run", "type": "Long run", "duration_min": 100},
]


@pytest.fixture
def anchors(run_history: list[ActivityRecord]) -> AnchorIndex:
    return derive_habit_anchors(run_history, date(2026, 3, 1))


@pytest.fixture
def athlete(profile: dict) -> AthleteProfile:
    return AthleteProfile.from_dict(profile)


class TestBuildSchedulingContext:
    def test_rest_sessions_skipped(self, anchors: AnchorIndex, athlete: AthleteProfile) -> None:
        context = build_scheduling_context(anchors, DRAFT_SESSIONS, WEEK_START, profile=athlete)
        assert [s.session_id for s in context.sessions] == ["run-1", "run-thu", "swim-1", "run-long"]

    def test_on_habit_session(self, anchors: AnchorIndex, athlete: AthleteProfile) -> None:
        context = build_scheduling_context(anchors, DRAFT_SESSIONS, WEEK_START, profile=athlete)
        run = context.session("run-1")
        assert run.canonical_type == CanonicalType.EASY
        assert run.priority == PriorityTier.SUPPORT
        assert run.level_used == AnchorLevel.DISCIPLINE_WEEKDAY_TYPE
        assert run.confidence == Confidence.MEDIUM
        assert len(run.candidates) == 3
        assert run.candidates[0].fits_free_window
        assert run.weekday_match
        assert run.deviation_cap_min == 60
        assert run.suggested_start_min_local == 390
        assert run.habit_match_score_at_suggestion == 96.0

    def test_off_habit_weekday_uses_discipline_anchor(self, anchors: AnchorIndex, athlete: AthleteProfile) -> None:
        context = build_scheduling_context(anchors, DRAFT_SESSIONS, WEEK_START, profile=athlete)
        run = context.session("run-thu")
        assert run.level_used == AnchorLevel.DISCIPLINE
        assert run.confidence == Confidence.HIGH
        assert not run.weekday_match
        assert run.suggested_start_min_local == 480
        assert run.habit_match_score_at_suggestion == pytest.approx(53.0)

    def test_no_anchor_means_no_suggestion(self, anchors: AnchorIndex, athlete: AthleteProfile) -> None:
        context = build_scheduling_context(anchors, DRAFT_SESSIONS, WEEK_START, profile=athlete)
        swim = context.session("swim-1")
        assert swim.level_used == AnchorLevel.NONE
        assert swim.priority == PriorityTier.OPTIONAL
        assert swim.weekday_match
        assert swim.suggested_start_min_local is None
        assert swim.habit_match_score_at_suggestion is None

    def test_long_session_is_key(self, anchors: AnchorIndex, athlete: AthleteProfile) -> None:
        context = build_scheduling_context(anchors, DRAFT_SESSIONS, WEEK_START, profile=athlete)
        long_run = context.session("run-long")
        assert long_run.priority == PriorityTier.KEY
        assert long_run.deviation_cap_min == 30
        assert long_run.suggested_start_min_local == 480

    def test_fixed_commitments_block_free_time(self, anchors: AnchorIndex, athlete: AthleteProfile) -> None:
        context = build_scheduling_context(anchors, DRAFT_SESSIONS, WEEK_START, profile=athlete)
        assert context.free_windows[TUESDAY] == (TimeWindow(300, 540), TimeWindow(1020, 1320))
        assert context.free_windows[WEEK_START] == (TimeWindow(300, 1320),)

    def test_busy_calendar_pushes_suggestion(self, anchors: AnchorIndex, athlete: AthleteProfile) -> None:
        busy = [BusyInterval(datetime(2026, 3, 3, 6, 0), datetime(2026, 3, 3, 8, 0))]
        context = build_scheduling_context(anchors, DRAFT_SESSIONS, WEEK_START, busy=busy, profile=athlete)
        run = context.session("run-1")
        assert not run.candidates[0].fits_free_window
        assert run.suggested_start_min_local == 310
        # 80 min off target is past the 60 min support cap: no time points
        assert run.habit_match_score_at_suggestion == pytest.approx(56.0)

    def test_race_taper_week_loosens_caps(self, anchors: AnchorIndex, athlete: AthleteProfile) -> None:
        context = build_scheduling_context(
            anchors, DRAFT_SESSIONS, WEEK_START, profile=athlete, plan_phase="Race week"
        )
        assert context.policy.is_race_taper_week
        assert context.session("run-1").deviation_cap_min == 90
        assert context.session("run-long").deviation_cap_min == 45
        assert context.weekday_change_budget == 1

    def test_empty_anchor_index(self) -> None:
        context = build_scheduling_context(AnchorIndex(), DRAFT_SESSIONS, WEEK_START)
        assert all(s.level_used == AnchorLevel.NONE for s in context.sessions)
        assert context.warnings == ()


class TestAsyncCalendarLookup:
    def test_busy_intervals_from_source(self, anchors: AnchorIndex, athlete: AthleteProfile) -> None:
        calls = []

        async def source(time_min: datetime, time_max: datetime) -> list[dict]:
            calls.append((time_min, time_max))
            return [{"start": "2026-03-03T06:00:00", "end": "2026-03-03T08:00:00"}]

        context = asyncio.run(
            build_scheduling_context_async(
                anchors, DRAFT_SESSIONS, WEEK_START, calendar_source=source, profile=athlete
            )
        )
        assert calls == [(datetime(2026, 3, 2), datetime(2026, 3, 9))]
        assert context.session("run-1").suggested_start_min_local == 310
        assert context.warnings == ()

    def test_failed_lookup_degrades_to_warning(self, anchors: AnchorIndex, athlete: AthleteProfile) -> None:
        async def source(time_min: datetime, time_max: datetime) -> list[dict]:
            raise CalendarLookupError("token expired", status_code=401)

        context = asyncio.run(
            build_scheduling_context_async(
                anchors, DRAFT_SESSIONS, WEEK_START, calendar_source=source, profile=athlete
            )
        )
        assert len(context.warnings) == 1
        assert "token expired" in context.warnings[0]
        assert context.session("run-1").suggested_start_min_local == 390

    def test_unexpected_error_also_degrades(self, anchors: AnchorIndex) -> None:
        async def source(time_min: datetime, time_max: datetime) -> list[dict]:
            raise TimeoutError("calendar timed out")

        context = asyncio.run(
            build_scheduling_context_async(anchors, DRAFT_SESSIONS, WEEK_START, calendar_source=source)
        )
        assert len(context.warnings) == 1
        assert "TimeoutError" in context.warnings[0]

    def test_no_source_means_no_busy_time(self, anchors: AnchorIndex) -> None:
        context = asyncio.run(build_scheduling_context_async(anchors, DRAFT_SESSIONS, WEEK_START))
        assert context.free_windows[TUESDAY] == (TimeWindow(300, 1320),)
        assert context.warnings == ()


class TestParseBusyIntervals:
    def test_malformed_entries_dropped(self) -> None:
        intervals = parse_busy_intervals(
            [
                {"start": "2026-03-03T06:00:00Z", "end": "2026-03-03T07:00:00Z"},
                {"start": "2026-03-03T09:00", "end": "2026-03-03T08:00"},
                {"start": "garbage", "end": "2026-03-03T08:00"},
                "not-a-dict",
            ]
        )
        assert intervals == [BusyInterval(datetime(2026, 3, 3, 6, 0), datetime(2026, 3, 3, 7, 0))]


class TestContextJson:
    def test_context_dict_shape(self, anchors: AnchorIndex, athlete: AthleteProfile) -> None:
        data = to_context_dict(build_scheduling_context(anchors, DRAFT_SESSIONS, WEEK_START, profile=athlete))
        assert data["week_start"] == "2026-03-02"
        assert data["weekday_change_budget"] == 1
        assert data["policy"]["effective_time_deviation_caps_min"] == {"key": 30, "support": 60, "optional": 90}
        assert len(data["free_windows"]) == 7
        assert data["free_windows"]["2026-03-02"] == [
            {"start_local": "05:00", "end_local": "22:00", "duration_min": 1020}
        ]

        run = data["sessions"][0]
        assert run["habit_anchor"] == {
            "level_used": "discipline_weekday_type",
            "confidence": "medium",
            "weekday_match": True,
            "target_start_local": "06:30",
        }
        assert run["suggested_start_local"] == "06:30"
        assert [c["level_used"] for c in run["anchor_candidates"]] == [
            "discipline_weekday_type",
            "discipline_weekday",
            "discipline",
        ]

    def test_no_anchor_renders_nulls(self) -> None:
        data = to_context_dict(build_scheduling_context(AnchorIndex(), DRAFT_SESSIONS[3:4], WEEK_START))
        swim = data["sessions"][0]
        assert swim["habit_anchor"]["level_used"] == "none"
        assert swim["habit_anchor"]["target_start_local"] is None
        assert swim["suggested_start_local"] is None

    def test_anchor_index_dict(self, anchors: AnchorIndex) -> None:
        data = anchor_index_to_dict(anchors)
        assert set(data) == {"by_discipline_weekday_type", "by_discipline_weekday", "by_discipline"}
        first = data["by_discipline"][0]
        assert first["preferred_start_local"] == "08:00"
        assert first["confidence"] == "high"
        assert len(first["hour_histogram"]) == 24
