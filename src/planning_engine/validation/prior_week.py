"""Prior-week lookups shared by the progression checks."""

from __future__ import annotations

import re
from typing import Any

from planning_engine.validation.plan_access import (
    mentions_id,
    mentions_word,
    risk_flag_texts,
    session_canonical_type,
    session_discipline,
    session_id,
    text,
)

PRIOR_WEEK_REFERENCE = "prior_week_reference"
NO_REFERENCE = "none"

# Word edges treat "_" as a separator so coded flags like "no_prior_reference" count.
_PRIOR_MENTION = re.compile(r"(?<![^\W_])(?:prior|previous|last[\s_]+week)(?![^\W_])", re.I)


def comparable_prior_session(
    session: dict[str, Any],
    prior_sessions: tuple[dict[str, Any], ...],
) -> dict[str, Any] | None:
    """Prior-week session to compare against, or None.

    Match order within the same discipline: identical type text, then
    identical canonical type, then the first session of the discipline.
    """
    discipline = session_discipline(session)
    candidates = [p for p in prior_sessions if session_discipline(p) is discipline]
    if not candidates:
        return None

    session_type = text(session.get("type")).lower()
    if session_type:
        for prior in candidates:
            if text(prior.get("type")).lower() == session_type:
                return prior

    canonical = session_canonical_type(session)
    for prior in candidates:
        if session_canonical_type(prior) is canonical:
            return prior
    return candidates[0]


def mentions_missing_reference(plan: dict[str, Any], session: dict[str, Any]) -> bool:
    """A risk flag names the missing prior reference for this session or its discipline."""
    sid = session_id(session).lower()
    discipline = session_discipline(session)
    for flag in risk_flag_texts(plan):
        if not _PRIOR_MENTION.search(flag):
            continue
        if mentions_id(sid, flag) or (discipline is not None and mentions_word(discipline.value, flag)):
            return True
    return False
