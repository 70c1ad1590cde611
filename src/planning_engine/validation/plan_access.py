"""Guarded readers for plan JSON.

Plans arrive as untrusted dicts. Every reader here returns a neutral
value instead of raising.
"""

from __future__ import annotations

import json
import re
from datetime import date, datetime
from typing import Any

from planning_engine.inference.keywords import (
    infer_canonical_type,
    infer_load_class,
    infer_priority,
)
from planning_engine.models.enums import (
    WEEKDAYS,
    CanonicalType,
    Discipline,
    LoadClass,
    PriorityTier,
)

_MISSING = object()


def as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_local_datetime(value: Any) -> datetime | None:
    """Parse ``YYYY-MM-DDTHH:MM`` local time; offsets are dropped."""
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00")).replace(tzinfo=None)
    except ValueError:
        return None


def parse_date(value: Any) -> date | None:
    if not isinstance(value, str) or len(value.strip()) < 10:
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def weekday_name(day: date) -> str:
    return WEEKDAYS[day.weekday()]


# ---------------------------------------------------------------------------
# Session accessors
# ---------------------------------------------------------------------------


def session_id(session: dict[str, Any]) -> str:
    value = session.get("id")
    return str(value) if value is not None else "?"


def session_discipline(session: dict[str, Any]) -> Discipline | None:
    try:
        return Discipline(text(session.get("discipline")).lower())
    except ValueError:
        return None


def is_schedulable(session: Any) -> bool:
    """Run/bike/swim/strength sessions that are not rest placeholders."""
    if not isinstance(session, dict):
        return False
    return session_discipline(session) is not None and text(session.get("type")).lower() != "rest"


def session_texts(session: dict[str, Any]) -> tuple[str, str, str]:
    """Free-text fields keyword rules read: type, intent, notes."""
    return text(session.get("type")), text(session.get("intent")), text(session.get("notes"))


def session_canonical_type(session: dict[str, Any]) -> CanonicalType:
    """Declared canonical type when valid, otherwise inferred from text."""
    try:
        return CanonicalType(text(session.get("canonical_type")).lower())
    except ValueError:
        return infer_canonical_type(*session_texts(session), discipline=session_discipline(session))


def session_priority(session: dict[str, Any]) -> PriorityTier:
    try:
        return PriorityTier(text(session.get("priority")).lower())
    except ValueError:
        return infer_priority(session_canonical_type(session), *session_texts(session))


def session_load_class(session: dict[str, Any]) -> LoadClass:
    try:
        return LoadClass(text(session.get("load_class")).lower())
    except ValueError:
        return infer_load_class(session_canonical_type(session), *session_texts(session))


def session_window(session: dict[str, Any]) -> tuple[datetime, datetime] | None:
    """Scheduled (start, end), or None when either bound is unusable."""
    start = parse_local_datetime(session.get("scheduled_start_local"))
    end = parse_local_datetime(session.get("scheduled_end_local"))
    if start is None or end is None or end <= start:
        return None
    return start, end


def session_date(session: dict[str, Any]) -> date | None:
    day = parse_date(session.get("date"))
    if day is not None:
        return day
    window = session_window(session)
    return window[0].date() if window else None


# ---------------------------------------------------------------------------
# Dot-path reads and JSON equality (progression diffs)
# ---------------------------------------------------------------------------


def get_path(obj: Any, path: str) -> Any:
    """Read ``a.b.0.c`` from nested dicts/lists; returns a sentinel when absent."""
    current = obj
    for part in path.split("."):
        if isinstance(current, dict) and part in current:
            current = current[part]
        elif isinstance(current, list) and part.isdigit() and int(part) < len(current):
            current = current[int(part)]
        else:
            return _MISSING
    return current


def json_equal(a: Any, b: Any) -> bool:
    """Structural equality as JSON (key order ignored)."""
    if a is _MISSING or b is _MISSING:
        return a is b
    return json.dumps(a, sort_keys=True, default=str) == json.dumps(b, sort_keys=True, default=str)


def risk_flag_texts(plan: dict[str, Any]) -> list[str]:
    """Each scheduling risk flag flattened to lowercase text."""
    texts = []
    for flag in as_list(plan.get("scheduling_risk_flags")):
        if isinstance(flag, str):
            texts.append(flag.lower())
        elif isinstance(flag, dict):
            texts.append(json.dumps(flag, sort_keys=True, default=str).lower())
    return texts


def mentions_word(word: str, value: str) -> bool:
    """Whole-word, case-insensitive match; "_" counts as a separator, so "prior" is in "no_prior_reference"."""
    return bool(word) and re.search(rf"(?<![^\W_]){re.escape(word)}(?![^\W_])", value, re.I) is not None


def mentions_id(identifier: str, value: str) -> bool:
    """Whole-identifier match: "s1" is not in "s12" and "run-1" is not in "run-10"."""
    return bool(identifier) and re.search(rf"(?<![\w-]){re.escape(identifier)}(?![\w-])", value, re.I) is not None
