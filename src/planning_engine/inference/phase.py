"""Phase resolution from plan and strategy text.

One resolver serves both the race-taper policy switch and the
progression checks, so the two can never disagree about the week.
"""

from __future__ import annotations

import re

from planning_engine.models.enums import PhaseMode

# Precedence order: deload > taper/peak/race > build > maintain.
PHASE_RULES: tuple[tuple[re.Pattern[str], PhaseMode], ...] = (
    (re.compile(r"deload|recovery\s+week|unload", re.I), PhaseMode.DELOAD),
    (re.compile(r"race|taper|peak", re.I), PhaseMode.TAPER),
    (re.compile(r"build", re.I), PhaseMode.BUILD),
    (re.compile(r"maintain|maintenance", re.I), PhaseMode.MAINTAIN),
)
DEFAULT_PHASE = PhaseMode.MAINTAIN


def resolve_phase(*texts: object) -> PhaseMode:
    """Resolve the phase mode from any number of free-text phase signals.

    Typical inputs are ``plan["phase"]`` and ``strategy["phase_intent"]``.
    Non-string inputs are ignored.
    """
    blob = " ".join(t for t in texts if isinstance(t, str))
    for pattern, mode in PHASE_RULES:
        if pattern.search(blob):
            return mode
    return DEFAULT_PHASE


def is_race_taper_week(*texts: object) -> bool:
    return resolve_phase(*texts) is PhaseMode.TAPER
