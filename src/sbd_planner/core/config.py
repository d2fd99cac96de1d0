"""
Configuration constants for the SBD plan generator.

All adjustable parameters are centralized here for easy tuning.
Prescription rows live in tables.py; this module only holds scalars,
caps and small lookup maps.
"""

from dataclasses import dataclass
from typing import Final

# =============================================================================
# BASE LIFTS
# =============================================================================

LIFTS: Final[tuple[str, ...]] = ("squat", "bench", "deadlift")

# Rep-to-fatigue slope per lift (Epley-family denominator, RIR-aware)
K_FACTORS: Final[dict[str, float]] = {
    "squat": 30.0,
    "bench": 31.0,
    "deadlift": 28.0,
}

LIFT_REGIONS: Final[dict[str, str]] = {
    "squat": "lower",
    "bench": "upper",
    "deadlift": "lower",
}

COMPETITION_NAMES: Final[dict[str, str]] = {
    "squat": "Competition Squat",
    "bench": "Competition Bench",
    "deadlift": "Competition Deadlift",
}

# =============================================================================
# LOAD MODEL
# =============================================================================

RPE_MAX: Final[float] = 10.0  # RIR = RPE_MAX - RPE
LOAD_INCREMENT_KG: Final[float] = 2.5  # Smallest plate jump used for planned weights

# =============================================================================
# CYCLE / BLOCKS
# =============================================================================

CANONICAL_CYCLE_WEEKS: Final[int] = 10
MIN_CYCLE_WEEKS: Final[int] = 6
MAX_CYCLE_WEEKS: Final[int] = 12

VOLUME_BLOCK_FRACTION: Final[float] = 0.4  # Volume ends at round(0.4 * N)
STRENGTH_BLOCK_FRACTION: Final[float] = 0.8  # Strength ends at round(0.8 * N)

BLOCKS: Final[tuple[str, ...]] = ("Volume", "Strength", "Peak")
SLOT_TYPES: Final[tuple[str, ...]] = ("primary", "secondary", "tertiary")

# =============================================================================
# TRAINING DAYS
# =============================================================================

WEEKDAY_TOKENS: Final[tuple[str, ...]] = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
MIN_TRAINING_DAYS: Final[int] = 3
MAX_TRAINING_DAYS: Final[int] = 6

# Maximum slot items one day may hold, by training frequency
DAY_SLOT_CAPS: Final[dict[int, int]] = {
    3: 3,
    4: 3,
    5: 2,
    6: 2,
}

# Same-lift stacking on one day is forbidden from this frequency upward
SAME_LIFT_RULE_MIN_DAYS: Final[int] = 4

# Bench gets a second primary slot from this frequency upward
BENCH_DOUBLE_PRIMARY_MIN_DAYS: Final[int] = 5

# =============================================================================
# PROFICIENCY / WEAKNESSES
# =============================================================================

PROFICIENCIES: Final[tuple[str, ...]] = ("Beginner", "Advanced")

WEAKNESS_TAGS: Final[frozenset[str]] = frozenset(
    {
        "bench_off_chest",
        "bench_lockout",
        "squat_hole",
        "squat_out_of_hole",
        "squat_depth",
        "deadlift_off_floor",
        "deadlift_lockout",
    }
)
MAX_WEAKNESSES: Final[int] = 2  # Only the first two tags steer variation choice


@dataclass(frozen=True)
class ProficiencyCaps:
    """Daily (hard) and weekly (soft) fatigue ceilings for one proficiency."""

    lower_daily_max: float
    upper_daily_max: float
    overall_daily_max: float
    lower_weekly_max: float
    upper_weekly_max: float
    overall_weekly_max: float


# Recalibrated upward from the first published caps (Beginner daily
# 2.5 / 2.5 / 3.5 and weekly 7.5 / 8 / 14; Advanced daily 3.25 / 3.25 / 4.5
# and weekly 10 / 11 / 18). Those could not hold a Volume week at 4-6 days,
# so items fell through to forced placement. Every week at 4-6 days must
# now schedule without a forced placement.
PROFICIENCY_CAPS: Final[dict[str, ProficiencyCaps]] = {
    "Beginner": ProficiencyCaps(
        lower_daily_max=3.5,
        upper_daily_max=3.25,
        overall_daily_max=5.25,
        lower_weekly_max=9.0,
        upper_weekly_max=8.0,
        overall_weekly_max=15.0,
    ),
    "Advanced": ProficiencyCaps(
        lower_daily_max=4.5,
        upper_daily_max=4.0,
        overall_daily_max=7.0,
        lower_weekly_max=12.0,
        upper_weekly_max=11.0,
        overall_weekly_max=21.0,
    ),
}

# =============================================================================
# FATIGUE
# =============================================================================

# Relative systemic cost per exercise (competition lifts highest)
VARIATION_FATIGUE_SCORES: Final[dict[str, float]] = {
    "Competition Squat": 1.5,
    "Competition Bench": 1.5,
    "Competition Deadlift": 1.7,
    "Paused Squat": 1.0,
    "Pin Squat (Mid)": 1.1,
    "Tempo Squat": 0.7,
    "Paused Bench": 0.9,
    "Close Grip Bench": 0.9,
    "Pin Press": 1.0,
    "Tempo Bench": 0.7,
    "RDL": 1.0,
    "Paused Deadlift": 1.1,
    "Deficit Deadlift": 1.1,
    "Hip Thrust": 0.7,
}
DEFAULT_FATIGUE_SCORE: Final[float] = 1.0

# Slack for float accumulation when comparing totals against caps
FATIGUE_TOLERANCE: Final[float] = 1e-9

# Extra cost of heavy primary work outside the Volume block
NEURAL_COST: Final[dict[str, float]] = {
    "squat": 0.3,
    "bench": 0.3,
    "deadlift": 0.5,
}

# =============================================================================
# SCHEDULER SCORING
# =============================================================================

WEEKLY_EXCESS_WEIGHT: Final[float] = 2.0
BALANCE_SLOT_WEIGHT: Final[float] = 0.5  # per item already on the day
BALANCE_FATIGUE_WEIGHT: Final[float] = 0.25  # per unit of day overall fatigue
SQUAT_DEADLIFT_INTERACTION_PENALTY: Final[float] = 0.75
PRIMARY_DAY_BIAS: Final[float] = 0.05  # per day index, primaries only

# Primary lift order within a week
LIFT_ORDER_VOLUME: Final[tuple[str, ...]] = ("bench", "squat", "deadlift")
LIFT_ORDER_DEFAULT: Final[tuple[str, ...]] = ("squat", "bench", "deadlift")

# =============================================================================
# PLAN / DELOAD
# =============================================================================

PLAN_NAME: Final[str] = "PerformanceBased"
DELOAD_AFTER_WEEK8_DEFAULT: Final[bool] = True
DELOAD_AFTER_WEEK10_DEFAULT: Final[bool] = False


@dataclass(frozen=True)
class DeloadRow:
    """One fixed row of the deload template (percentage-prescribed)."""

    lift: str
    sets: int
    reps: int
    percentage: float  # fraction of 1RM


# One lift per workout on the first three training days
DELOAD_TEMPLATE: Final[tuple[DeloadRow, ...]] = (
    DeloadRow(lift="squat", sets=3, reps=5, percentage=0.65),
    DeloadRow(lift="bench", sets=3, reps=5, percentage=0.65),
    DeloadRow(lift="deadlift", sets=2, reps=5, percentage=0.60),
)
