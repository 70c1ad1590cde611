"""Free-text keyword inference: canonical type, priority, load class, brick detection.

Each inference is a prioritized table of ``(pattern, label)`` rules
evaluated top to bottom, with a documented fallback. The tables are
plain module data so a stricter structured source can replace them
without touching scheduling or validation logic.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from planning_engine.models.enums import CanonicalType, Discipline, LoadClass, PriorityTier

# First match wins. Fallback: OTHER (STRENGTH for strength sessions).
CANONICAL_TYPE_RULES: tuple[tuple[re.Pattern[str], CanonicalType], ...] = (
    (re.compile(r"recover|shake\s*-?out|regenerat", re.I), CanonicalType.RECOVERY),
    (re.compile(r"vo2|v02|max\s*aerobic", re.I), CanonicalType.VO2),
    (re.compile(r"interval|repeats?\b|\d+\s*x\s*\d+|track|fartlek", re.I), CanonicalType.INTERVAL),
    (re.compile(r"tempo|threshold|sweet\s*spot|cruise", re.I), CanonicalType.TEMPO),
    (re.compile(r"\blong\b", re.I), CanonicalType.LONG),
    (re.compile(r"technique|drills?\b|form\b|skills?\b", re.I), CanonicalType.TECHNIQUE),
    (re.compile(r"durability|hills?\b|climb", re.I), CanonicalType.DURABILITY),
    (re.compile(r"strength|gym|weights?\b|lift", re.I), CanonicalType.STRENGTH),
    (re.compile(r"moderate|steady|endurance\s*pace", re.I), CanonicalType.MODERATE),
    (re.compile(r"easy|aerobic|base|z2|zone\s*2|endurance", re.I), CanonicalType.EASY),
)

# Types that are key sessions regardless of wording.
KEY_TYPES = frozenset({
    CanonicalType.VO2,
    CanonicalType.INTERVAL,
    CanonicalType.TEMPO,
    CanonicalType.LONG,
})
OPTIONAL_TYPES = frozenset({CanonicalType.RECOVERY, CanonicalType.TECHNIQUE})

KEY_TEXT = re.compile(r"\bkey\b|\brace\b|quality", re.I)
OPTIONAL_TEXT = re.compile(r"optional|if time", re.I)

# Explicit wording overrides the type-based load class.
LOAD_CLASS_TEXT_RULES: tuple[tuple[re.Pattern[str], LoadClass], ...] = (
    (re.compile(r"very\s*hard|max(imal)?\s*effort|all[\s-]*out", re.I), LoadClass.VERY_HARD),
)
LOAD_CLASS_BY_TYPE: dict[CanonicalType, LoadClass] = {
    CanonicalType.RECOVERY: LoadClass.RECOVERY,
    CanonicalType.EASY: LoadClass.EASY,
    CanonicalType.TECHNIQUE: LoadClass.EASY,
    CanonicalType.MODERATE: LoadClass.MODERATE,
    CanonicalType.DURABILITY: LoadClass.MODERATE,
    CanonicalType.STRENGTH: LoadClass.MODERATE,
    CanonicalType.OTHER: LoadClass.MODERATE,
    CanonicalType.TEMPO: LoadClass.HARD,
    CanonicalType.LONG: LoadClass.HARD,
    CanonicalType.INTERVAL: LoadClass.VERY_HARD,
    CanonicalType.VO2: LoadClass.VERY_HARD,
}

BRICK_PATTERN = re.compile(r"\bbrick\b", re.I)


def _joined(texts: Iterable[object]) -> str:
    return " ".join(str(t) for t in texts if t)


def infer_canonical_type(
    *texts: object,
    discipline: Discipline | None = None,
) -> CanonicalType:
    """Map free text to a canonical session type.

    An exact canonical value in any text wins outright; otherwise the rule
    table applies.
    """
    for text in texts:
        if isinstance(text, str):
            try:
                return CanonicalType(text.strip().lower())
            except ValueError:
                pass

    blob = _joined(texts)
    for pattern, label in CANONICAL_TYPE_RULES:
        if pattern.search(blob):
            return label
    if discipline is Discipline.STRENGTH:
        return CanonicalType.STRENGTH
    return CanonicalType.OTHER


def infer_priority(canonical_type: CanonicalType, *texts: object) -> PriorityTier:
    """Key for quality types or key/race wording, optional for light types, else support."""
    blob = _joined(texts)
    if canonical_type in KEY_TYPES or KEY_TEXT.search(blob):
        return PriorityTier.KEY
    if canonical_type in OPTIONAL_TYPES or OPTIONAL_TEXT.search(blob):
        return PriorityTier.OPTIONAL
    return PriorityTier.SUPPORT


def infer_load_class(canonical_type: CanonicalType, *texts: object) -> LoadClass:
    blob = _joined(texts)
    for pattern, label in LOAD_CLASS_TEXT_RULES:
        if pattern.search(blob):
            return label
    return LOAD_CLASS_BY_TYPE.get(canonical_type, LoadClass.MODERATE)


def mentions_brick(*texts: object) -> bool:
    return bool(BRICK_PATTERN.search(_joined(texts)))
