"""Tests for free-window computation from busy calendar intervals."""

from __future__ import annotations

from datetime import date, datetime

from planning_engine.models.scheduling_context import TimeWindow
from planning_engine.scheduling.free_windows import (
    BusyInterval,
    busy_windows_on,
    complement_windows,
    free_windows_for_week,
    merge_intervals,
    nearest_feasible_start,
)

DAY_START = 5 * 60
DAY_END = 22 * 60


class TestMergeIntervals:
    def test_overlapping_and_touching_merge(self) -> None:
        merged = merge_intervals([TimeWindow(600, 660), TimeWindow(540, 610), TimeWindow(660, 700)])
        assert merged == [TimeWindow(540, 700)]

    def test_disjoint_stay_apart_and_sorted(self) -> None:
        merged = merge_intervals([TimeWindow(800, 860), TimeWindow(540, 600)])
        assert merged == [TimeWindow(540, 600), TimeWindow(800, 860)]

    def test_empty_intervals_dropped(self) -> None:
        assert merge_intervals([TimeWindow(600, 600), TimeWindow(700, 650)]) == []


class TestComplementWindows:
    def test_free_day(self) -> None:
        assert complement_windows([], DAY_START, DAY_END, 15) == (TimeWindow(DAY_START, DAY_END),)

    def test_workday_leaves_morning_and_evening(self) -> None:
        free = complement_windows([TimeWindow(540, 1020)], DAY_START, DAY_END, 15)
        assert free == (TimeWindow(DAY_START, 540), TimeWindow(1020, DAY_END))

    def test_short_gaps_discarded(self) -> None:
        busy = [TimeWindow(DAY_START, 600), TimeWindow(610, DAY_END)]
        assert complement_windows(busy, DAY_START, DAY_END, 15) == ()

    def test_gap_of_exactly_minimum_kept(self) -> None:
        busy = [TimeWindow(DAY_START, 600), TimeWindow(615, DAY_END)]
        assert complement_windows(busy, DAY_START, DAY_END, 15) == (TimeWindow(600, 615),)

    def test_busy_outside_bounds_ignored(self) -> None:
        busy = [TimeWindow(0, 120), TimeWindow(1350, 1440)]
        assert complement_windows(busy, DAY_START, DAY_END, 15) == (TimeWindow(DAY_START, DAY_END),)


class TestBusyWindowsOn:
    def test_overnight_event_is_clipped_per_day(self) -> None:
        event = BusyInterval(datetime(2026, 3, 2, 23, 0), datetime(2026, 3, 3, 6, 30))
        assert busy_windows_on(date(2026, 3, 2), [event]) == [TimeWindow(1380, 1440)]
        assert busy_windows_on(date(2026, 3, 3), [event]) == [TimeWindow(0, 390)]
        assert busy_windows_on(date(2026, 3, 4), [event]) == []

    def test_partial_minutes_widen_the_block(self) -> None:
        event = BusyInterval(datetime(2026, 3, 2, 9, 0, 30), datetime(2026, 3, 2, 9, 59, 30))
        assert busy_windows_on(date(2026, 3, 2), [event]) == [TimeWindow(540, 600)]


class TestFreeWindowsForWeek:
    def test_covers_seven_days(self) -> None:
        busy = [BusyInterval(datetime(2026, 3, 3, 9, 0), datetime(2026, 3, 3, 17, 0))]
        week = free_windows_for_week(date(2026, 3, 2), busy, DAY_START, DAY_END, 15)
        assert len(week) == 7
        assert week[date(2026, 3, 2)] == (TimeWindow(DAY_START, DAY_END),)
        assert week[date(2026, 3, 3)] == (TimeWindow(DAY_START, 540), TimeWindow(1020, DAY_END))


class TestNearestFeasibleStart:
    def test_target_inside_window(self) -> None:
        assert nearest_feasible_start([TimeWindow(300, 540)], 390, 50) == 390

    def test_pushed_to_fit_before_window_end(self) -> None:
        assert nearest_feasible_start([TimeWindow(300, 540)], 520, 50) == 490

    def test_picks_closest_window(self) -> None:
        windows = [TimeWindow(300, 540), TimeWindow(1020, 1320)]
        assert nearest_feasible_start(windows, 1000, 60) == 1020

    def test_closer_window_wins(self) -> None:
        # Latest start in the first window is 370 (80 away), the second opens at 500 (50 away)
        windows = [TimeWindow(300, 400), TimeWindow(500, 600)]
        assert nearest_feasible_start(windows, 450, 30) == 500

    def test_tie_goes_to_earlier_start(self) -> None:
        windows = [TimeWindow(500, 600), TimeWindow(300, 430)]
        assert nearest_feasible_start(windows, 450, 30) == 400

    def test_no_window_long_enough(self) -> None:
        assert nearest_feasible_start([TimeWindow(300, 330)], 300, 45) is None
