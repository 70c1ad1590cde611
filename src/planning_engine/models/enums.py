"""Enumerations and rule constants for the planning engine.

Values of the string enums are the literal tokens that appear in plan
JSON, so ``Discipline("run")`` parses a plan field directly.
"""

from enum import Enum, IntEnum, auto


class Discipline(str, Enum):
    """Training disciplines that carry habit anchors and prescriptions."""

    RUN = "run"
    BIKE = "bike"
    SWIM = "swim"
    STRENGTH = "strength"


class CanonicalType(str, Enum):
    """Discipline-independent session types used to key anchors and rules."""

    RECOVERY = "recovery"
    EASY = "easy"
    MODERATE = "moderate"
    TEMPO = "tempo"
    INTERVAL = "interval"
    VO2 = "vo2"
    LONG = "long"
    TECHNIQUE = "technique"
    DURABILITY = "durability"
    STRENGTH = "strength"
    OTHER = "other"


class PriorityTier(str, Enum):
    """How much scheduling deviation a session tolerates."""

    KEY = "key"
    SUPPORT = "support"
    OPTIONAL = "optional"


class LoadClass(str, Enum):
    """Session load classes ordered from lightest to heaviest."""

    RECOVERY = "recovery"
    EASY = "easy"
    MODERATE = "moderate"
    HARD = "hard"
    VERY_HARD = "very_hard"


class Confidence(str, Enum):
    """Habit anchor confidence classes."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"


class AnchorLevel(str, Enum):
    """Anchor key specificity, most specific first."""

    DISCIPLINE_WEEKDAY_TYPE = "discipline_weekday_type"
    DISCIPLINE_WEEKDAY = "discipline_weekday"
    DISCIPLINE = "discipline"
    NONE = "none"


class PhaseMode(str, Enum):
    """Resolved training phase for a plan week."""

    BUILD = "build"
    MAINTAIN = "maintain"
    TAPER = "taper"
    DELOAD = "deload"


class ProgressionAxis(str, Enum):
    """Single dimension along which a strength exercise is advanced."""

    LOAD = "load"
    REPS = "reps"
    SETS = "sets"
    TEMPO = "tempo"
    DENSITY = "density"


class StrengthCategory(str, Enum):
    """Why a strength exercise is in the program."""

    INJURY_PREVENTION = "injury_prevention"
    OVERUSE_BUFFER = "overuse_buffer"
    PERFORMANCE_TRANSFER = "performance_transfer"


class CheckFamily(IntEnum):
    """Validator check families. Lower value runs first."""

    STRUCTURE = 0
    SCHEMA = 1
    PRESCRIPTION = 2
    SAFETY = 3
    BUDGET = 4
    PROGRESSION = 5
    STRENGTH = 6
    GATE = 7


class ViolationCode(str, Enum):
    """Every violation code the validator can emit."""

    INVALID_PLAN_FORMAT = "INVALID_PLAN_FORMAT"

    # Top-level shape
    MISSING_SCHEDULING_CONTEXT = "MISSING_SCHEDULING_CONTEXT"
    MISSING_HABIT_ADHERENCE_SUMMARY = "MISSING_HABIT_ADHERENCE_SUMMARY"
    MISSING_RISK_FLAGS = "MISSING_RISK_FLAGS"
    INVALID_USER_INPUT_REQUEST = "INVALID_USER_INPUT_REQUEST"
    PRIOR_WEEK_PLAN_MISMATCH = "PRIOR_WEEK_PLAN_MISMATCH"

    # Per-session schema
    INVALID_CANONICAL_TYPE = "INVALID_CANONICAL_TYPE"
    INVALID_PRIORITY = "INVALID_PRIORITY"
    INVALID_LOAD_CLASS = "INVALID_LOAD_CLASS"
    MISSING_HABIT_METADATA = "MISSING_HABIT_METADATA"
    INVALID_DEVIATION = "INVALID_DEVIATION"
    DEVIATION_MISMATCH = "DEVIATION_MISMATCH"
    SCHEDULE_DURATION_MISMATCH = "SCHEDULE_DURATION_MISMATCH"
    HABIT_MATCH_SCORE_MISMATCH = "HABIT_MATCH_SCORE_MISMATCH"
    INVALID_EXCEPTION_CODE = "INVALID_EXCEPTION_CODE"
    DEVIATION_CAP_EXCEEDED = "DEVIATION_CAP_EXCEEDED"
    WEEKDAY_CHANGE_UNJUSTIFIED = "WEEKDAY_CHANGE_UNJUSTIFIED"
    SESSION_OUTSIDE_WEEK = "SESSION_OUTSIDE_WEEK"

    # Prescriptions
    BIKE_PRESCRIPTION_INVALID = "BIKE_PRESCRIPTION_INVALID"
    RUN_PRESCRIPTION_INVALID = "RUN_PRESCRIPTION_INVALID"
    SWIM_PRESCRIPTION_INVALID = "SWIM_PRESCRIPTION_INVALID"
    NUTRITION_PRESCRIPTION_INVALID = "NUTRITION_PRESCRIPTION_INVALID"

    # Temporal / safety
    SESSION_OVERLAP = "SESSION_OVERLAP"
    REST_DAY_VIOLATION = "REST_DAY_VIOLATION"
    FIXED_COMMITMENT_CONFLICT = "FIXED_COMMITMENT_CONFLICT"
    STRENGTH_BEFORE_KEY_SESSION = "STRENGTH_BEFORE_KEY_SESSION"
    VERY_HARD_DAY_LIMIT = "VERY_HARD_DAY_LIMIT"
    DUPLICATE_LONG_SESSION = "DUPLICATE_LONG_SESSION"

    # Budgets
    WEEKDAY_CHANGE_BUDGET_EXCEEDED = "WEEKDAY_CHANGE_BUDGET_EXCEEDED"
    WEEKLY_TIME_BUDGET_VIOLATION = "WEEKLY_TIME_BUDGET_VIOLATION"

    # Generic progression
    PROGRESSION_TRACE_INVALID = "PROGRESSION_TRACE_INVALID"
    PROGRESSION_PHASE_MISMATCH = "PROGRESSION_PHASE_MISMATCH"
    PROGRESSION_PRIOR_WEEK_REFERENCE = "PROGRESSION_PRIOR_WEEK_REFERENCE"
    PROGRESSION_NOT_APPLIED = "PROGRESSION_NOT_APPLIED"
    MISSING_PRIOR_REFERENCE_FLAG = "MISSING_PRIOR_REFERENCE_FLAG"

    # Strength progression
    STRENGTH_STRUCTURE_INVALID = "STRENGTH_STRUCTURE_INVALID"
    STRENGTH_PRIOR_WEEK_REFERENCE = "STRENGTH_PRIOR_WEEK_REFERENCE"
    STRENGTH_BUILD_PROGRESS_INVALID = "STRENGTH_BUILD_PROGRESS_INVALID"
    STRENGTH_MAINTAIN_PROGRESS_INVALID = "STRENGTH_MAINTAIN_PROGRESS_INVALID"
    STRENGTH_TAPER_PROGRESS_INVALID = "STRENGTH_TAPER_PROGRESS_INVALID"

    # Safety gate
    ASK_BEFORE_DOWNSHIFT_REQUIRED = "ASK_BEFORE_DOWNSHIFT_REQUIRED"


class CheckStatus(IntEnum):
    """Outcome of a single validator check."""

    VIOLATED = auto()
    PASSED = auto()
    NOT_APPLICABLE = auto()


WEEKDAYS: tuple[str, ...] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

MINUTES_PER_DAY = 1440

# ---------------------------------------------------------------------------
# Habit anchor statistics
# ---------------------------------------------------------------------------
DEFAULT_ANCHOR_WINDOW_DAYS = 56
RECENCY_WEIGHT_NEWEST = 1.0
RECENCY_WEIGHT_OLDEST = 0.25  # Weight at the window edge

CONFIDENCE_HIGH_MIN_COUNT = 7
CONFIDENCE_HIGH_MAX_DISPERSION_MIN = 60
CONFIDENCE_MEDIUM_MIN_COUNT = 3
CONFIDENCE_MEDIUM_MAX_DISPERSION_MIN = 150

# ---------------------------------------------------------------------------
# Scheduling
# ---------------------------------------------------------------------------
DEFAULT_DAY_START_LOCAL = "05:00"
DEFAULT_DAY_END_LOCAL = "22:00"
MIN_FREE_WINDOW_MIN = 15

DEFAULT_DEVIATION_CAPS_MIN = {
    PriorityTier.KEY: 30,
    PriorityTier.SUPPORT: 60,
    PriorityTier.OPTIONAL: 90,
}
DEFAULT_WEEKDAY_CHANGE_RATIO = 0.2
DEFAULT_RACE_TAPER_MULTIPLIER = 1.5
DEFAULT_RACE_TAPER_WEEKDAY_CHANGE_RATIO = 0.4

# habit_match_score components
SCORE_WEEKDAY_POINTS = 40.0
SCORE_TIME_POINTS = 40.0
SCORE_ANCHOR_QUALITY_MAX = 20.0
SCORE_TOLERANCE = 1.0

LEVEL_SCORES = {
    AnchorLevel.DISCIPLINE_WEEKDAY_TYPE: 10,
    AnchorLevel.DISCIPLINE_WEEKDAY: 6,
    AnchorLevel.DISCIPLINE: 3,
    AnchorLevel.NONE: 0,
}
CONFIDENCE_SCORES = {
    Confidence.HIGH: 10,
    Confidence.MEDIUM: 6,
    Confidence.LOW: 3,
    Confidence.NONE: 0,
}

EXCEPTION_CODES = frozenset({
    "calendar_conflict",
    "fixed_commitment",
    "travel",
    "recovery_spacing",
    "athlete_request",
    "weather",
    "facility_availability",
    "race_logistics",
})

# ---------------------------------------------------------------------------
# Validation tolerances and prescription schema
# ---------------------------------------------------------------------------
SCHEDULE_DURATION_TOLERANCE_MIN = 5
DEVIATION_TOLERANCE_MIN = 5
STRENGTH_RECOVERY_GAP_HOURS = 24

TARGET_SYSTEMS = frozenset({
    "aerobic_base",
    "tempo",
    "threshold",
    "vo2max",
    "anaerobic",
    "neuromuscular",
    "recovery",
    "technique",
    "race_specific",
})
BIKE_TARGET_METRICS = frozenset({"power", "hr", "rpe"})
NUTRITION_TEXT_FIELDS = (
    "pre_session",
    "during_session",
    "post_session",
    "hydration",
    "daily_context",
)

# ---------------------------------------------------------------------------
# Ask-before-downshift gate thresholds (check-in scale 1-10)
# ---------------------------------------------------------------------------
CHECKIN_PAIN_TRIGGER = 6         # pain >= 6
CHECKIN_SORENESS_TRIGGER = 7     # soreness >= 7
CHECKIN_STRESS_TRIGGER = 8       # stress >= 8
CHECKIN_MOTIVATION_TRIGGER = 3   # motivation <= 3
CHECKIN_SLEEP_TRIGGER = 2        # sleep <= 2
HABIT_ADHERENCE_TRIGGER = 75     # adherence score < 75

# ---------------------------------------------------------------------------
# Strength progression caps by phase (non-conservative, conservative)
# ---------------------------------------------------------------------------
STRENGTH_BUILD_HARD_SET_MAX_RATIO = (0.15, 0.075)
STRENGTH_MAINTAIN_HARD_SET_MAX_ABS_RATIO = (0.10, 0.05)
STRENGTH_TAPER_HARD_SET_RATIO_RANGE = (-0.40, -0.25)
STRENGTH_TAPER_MAX_RPE = 7.0
STRENGTH_BUILD_MAX_PROGRESSING = (3, 2)
STRENGTH_BUILD_MIN_PROGRESSING = 1
STRENGTH_MAINTAIN_MAX_PROGRESSING = 1
STRENGTH_BUILD_REPS_RANGE = ((1.0, 2.0), (1.0, 1.0))
STRENGTH_MAX_SETS_STEP = 1
STRENGTH_MAINTAIN_MAX_REPS_STEP = 1.0
STRENGTH_BUILD_LOAD_PCT_RANGE = ((2.5, 7.5), (1.25, 3.75))
