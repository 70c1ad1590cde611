"""SchedulingContextBuilder: merges habit anchors with calendar availability.

Usage:
    context = build_scheduling_context(anchors, draft_sessions, week_start, busy=busy)
    context = await build_scheduling_context_async(anchors, draft_sessions, week_start,
                                                   calendar_source=source)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import date, datetime, time, timedelta
from typing import Any

from planning_engine import config
from planning_engine.inference.keywords import (
    infer_canonical_type,
    infer_load_class,
    infer_priority,
)
from planning_engine.math.anchor_statistics import circular_distance
from planning_engine.models.athlete import AthleteProfile, parse_hhmm
from planning_engine.models.enums import (
    WEEKDAYS,
    AnchorLevel,
    CanonicalType,
    Discipline,
    LoadClass,
    PriorityTier,
)
from planning_engine.models.habit_anchor import AnchorIndex
from planning_engine.models.policy import SchedulingPolicy
from planning_engine.models.scheduling_context import (
    AnchorCandidate,
    SchedulingContext,
    SessionContext,
    TimeWindow,
)
from planning_engine.scheduling.anchor_selection import (
    SessionKey,
    is_weekday_match,
    matching_anchors,
)
from planning_engine.scheduling.calendar import CalendarSource, fetch_busy_intervals
from planning_engine.scheduling.free_windows import (
    BusyInterval,
    free_windows_for_week,
    nearest_feasible_start,
)
from planning_engine.scheduling.policy import derive_policy
from planning_engine.scheduling.scoring import habit_match_score

logger = logging.getLogger(__name__)

_DEFAULT_DURATION_MIN = 60


def build_scheduling_context(
    anchors: AnchorIndex,
    draft_sessions: Sequence[dict[str, Any]],
    week_start: date,
    busy: Iterable[BusyInterval] = (),
    profile: AthleteProfile | None = None,
    plan_phase: str | None = None,
    phase_intent: str | None = None,
    policy: SchedulingPolicy | None = None,
    warnings: Iterable[str] = (),
) -> SchedulingContext:
    """Build the scheduling context for one planning week.

    Args:
        anchors: Anchor index from ``derive_habit_anchors`` (consumed as data).
        draft_sessions: Draft plan sessions (``id``, ``date``, ``discipline``,
            ``type``/``intent``, optional ``canonical_type``, ``priority``,
            ``load_class`` and ``duration_min``). Rest and unknown-discipline
            sessions are skipped.
        week_start: First date of the planning week.
        busy: Busy calendar intervals already read for the week.
        profile: Athlete profile; fixed commitments count as busy time and
            policy overrides feed the policy.
        plan_phase: Plan phase text for race-taper detection.
        phase_intent: Strategy phase-intent text for race-taper detection.
        policy: Pre-built policy; derived from the phase text when None.
        warnings: Warnings from upstream steps (e.g. a failed calendar read).

    Returns:
        A SchedulingContext with ranked anchor candidates per session and
        free windows per day.
    """
    profile = profile or AthleteProfile()
    if policy is None:
        policy = derive_policy(plan_phase, phase_intent, profile.policy_overrides)

    all_busy = list(busy) + _commitment_intervals(profile, week_start)
    day_start = parse_hhmm(config.DAY_START_LOCAL)
    day_end = parse_hhmm(config.DAY_END_LOCAL)
    free = free_windows_for_week(
        week_start,
        all_busy,
        day_start if day_start is not None else 5 * 60,
        day_end if day_end is not None else 22 * 60,
        config.MIN_FREE_WINDOW,
    )

    contexts: list[SessionContext] = []
    for raw in draft_sessions:
        ctx = _session_context(raw, anchors, free, policy)
        if ctx is not None:
            contexts.append(ctx)

    context = SchedulingContext(
        week_start=week_start,
        policy=policy,
        sessions=tuple(contexts),
        free_windows=free,
        warnings=tuple(warnings),
    )
    logger.info(
        "Built scheduling context for week %s: %d sessions, %d free windows, taper=%s",
        week_start,
        len(contexts),
        sum(len(w) for w in free.values()),
        policy.is_race_taper_week,
    )
    return context


async def build_scheduling_context_async(
    anchors: AnchorIndex,
    draft_sessions: Sequence[dict[str, Any]],
    week_start: date,
    calendar_source: CalendarSource | None = None,
    profile: AthleteProfile | None = None,
    plan_phase: str | None = None,
    phase_intent: str | None = None,
) -> SchedulingContext:
    """Await one free/busy lookup for the week, then build the context.

    A failed lookup is not fatal: the context is built with no busy
    windows and carries the warning.
    """
    time_min = datetime.combine(week_start, time.min)
    time_max = time_min + timedelta(days=7)
    busy, warnings = await fetch_busy_intervals(calendar_source, time_min, time_max)
    return build_scheduling_context(
        anchors,
        draft_sessions,
        week_start,
        busy=busy,
        profile=profile,
        plan_phase=plan_phase,
        phase_intent=phase_intent,
        warnings=warnings,
    )


def _session_context(
    raw: dict[str, Any],
    anchors: AnchorIndex,
    free: dict[date, tuple[TimeWindow, ...]],
    policy: SchedulingPolicy,
) -> SessionContext | None:
    """Candidates, cap and suggested placement for one draft session."""
    if not isinstance(raw, dict):
        return None
    try:
        discipline = Discipline(str(raw.get("discipline", "")).lower())
    except ValueError:
        logger.debug("Skipping session %r with non-schedulable discipline", raw.get("id"))
        return None
    if str(raw.get("type", "")).lower() == "rest":
        return None
    session_date = _parse_date(raw.get("date"))
    if session_date is None:
        logger.debug("Skipping session %r without a valid date", raw.get("id"))
        return None

    texts = (raw.get("type"), raw.get("intent"), raw.get("title"))
    canonical = _enum_or_none(CanonicalType, raw.get("canonical_type")) or infer_canonical_type(
        *texts, discipline=discipline
    )
    priority = _enum_or_none(PriorityTier, raw.get("priority")) or infer_priority(canonical, *texts)
    load_class = _enum_or_none(LoadClass, raw.get("load_class")) or infer_load_class(canonical, *texts)
    duration = _duration(raw.get("duration_min"))
    day_windows = free.get(session_date, ())

    key = SessionKey(discipline=discipline, weekday=WEEKDAYS[session_date.weekday()], canonical_type=canonical)
    candidates = tuple(
        AnchorCandidate(
            level=level,
            anchor=anchor,
            fits_free_window=any(
                w.contains(anchor.preferred_start_min_local, anchor.preferred_start_min_local + duration)
                for w in day_windows
            ),
        )
        for level, anchor in matching_anchors(anchors, key)
    )
    cap = policy.effective_cap(priority)
    selected = candidates[0] if candidates else None
    weekday_match = is_weekday_match(selected.level if selected else AnchorLevel.NONE)
    suggested, score = _suggest_start(selected, day_windows, duration, weekday_match, cap)

    return SessionContext(
        session_id=str(raw.get("id", "")),
        session_date=session_date,
        discipline=discipline,
        canonical_type=canonical,
        priority=priority,
        load_class=load_class,
        duration_min=duration,
        candidates=candidates,
        weekday_match=weekday_match,
        deviation_cap_min=cap,
        suggested_start_min_local=suggested,
        habit_match_score_at_suggestion=score,
    )


def _suggest_start(
    selected: AnchorCandidate | None,
    day_windows: tuple[TimeWindow, ...],
    duration: int,
    weekday_match: bool,
    cap: int,
) -> tuple[int | None, float | None]:
    """Nearest feasible start to the selected anchor target, and its score.

    Without an anchor nothing is suggested; the plan generator places the
    session freely inside the day's windows.
    """
    if selected is None:
        return None, None
    target = selected.target_start_min_local
    suggested = nearest_feasible_start(day_windows, target, duration)
    if suggested is None:
        return None, None
    deviation = circular_distance(suggested, target)
    score = habit_match_score(weekday_match, deviation, cap, selected.level, selected.confidence)
    return suggested, round(score, 1)


def _commitment_intervals(profile: AthleteProfile, week_start: date) -> list[BusyInterval]:
    """Expand the profile's weekly fixed commitments into busy intervals."""
    intervals = []
    for offset in range(7):
        day = week_start + timedelta(days=offset)
        midnight = datetime.combine(day, time.min)
        for commitment in profile.fixed_commitments:
            if commitment.weekday == WEEKDAYS[day.weekday()]:
                intervals.append(
                    BusyInterval(
                        start=midnight + timedelta(minutes=commitment.start_min_local),
                        end=midnight + timedelta(minutes=commitment.end_min_local),
                    )
                )
    return intervals


def _enum_or_none(enum_cls: type, value: Any) -> Any:
    if not isinstance(value, str):
        return None
    try:
        return enum_cls(value.strip().lower())
    except ValueError:
        return None


def _parse_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


def _duration(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        return _DEFAULT_DURATION_MIN
    return int(round(value))
