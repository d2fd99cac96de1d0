"""
Fatigue estimator.

Scores the relative systemic cost of a prescription and accumulates it
per day and per week, split by body region:

    score = base(exercise) * (sets * reps / 10) * (rpe / 10)

Contributions are never negative, so accumulated totals only grow.
"""

from .config import (
    DEFAULT_FATIGUE_SCORE,
    FATIGUE_TOLERANCE,
    LIFT_REGIONS,
    NEURAL_COST,
    VARIATION_FATIGUE_SCORES,
    ProficiencyCaps,
)
from .models import FatigueTotals, Region, SlotItem
from .tables import block_for_week, exercise_name_for, prescription_rows


def fatigue_meta(exercise_name: str) -> float:
    """Base fatigue multiplier for an exercise; unknown names score 1.0."""
    return VARIATION_FATIGUE_SCORES.get(exercise_name, DEFAULT_FATIGUE_SCORE)


def fatigue_for_exercise(exercise_name: str, sets: int, reps: int, rpe: float) -> float:
    """
    Fatigue score for one prescription row.

    Competition Squat, 4x6 @ 6:
        1.5 * (24 / 10) * 0.6 = 2.16

    Args:
        exercise_name: Exercise the row is performed with
        sets: Number of sets
        reps: Reps per set
        rpe: Target RPE

    Returns:
        Non-negative fatigue score
    """
    if sets <= 0 or reps <= 0 or rpe <= 0:
        return 0.0
    return fatigue_meta(exercise_name) * (sets * reps / 10) * (rpe / 10)


def lift_region(lift: str) -> Region:
    """bench -> upper; squat, deadlift -> lower."""
    if lift not in LIFT_REGIONS:
        raise ValueError(f"Unknown base lift: {lift!r}")
    return LIFT_REGIONS[lift]  # type: ignore[return-value]


def slot_fatigue(item: SlotItem, week: int, weaknesses: tuple[str, ...] = ()) -> float:
    """
    Total fatigue cost of one slot item in a canonical table week.

    A primary sums its top and backoff rows and, outside Volume, adds the
    lift's neural cost.
    """
    block = block_for_week(week)
    name = exercise_name_for(item, block, weaknesses)
    total = sum(
        fatigue_for_exercise(name, scheme.sets, scheme.reps, scheme.rpe)
        for _, scheme in prescription_rows(item, week)
    )
    if item.is_primary and block != "Volume":
        total += NEURAL_COST[item.lift]
    return total


def apply_fatigue(totals: FatigueTotals, lift: str, amount: float) -> FatigueTotals:
    """Add a lift's contribution to its region bucket."""
    return totals.add(lift_region(lift), amount)


def exceeds_daily_caps(totals: FatigueTotals, caps: ProficiencyCaps) -> bool:
    """True when any region or the overall total is over the daily ceiling."""
    return (
        totals.lower > caps.lower_daily_max + FATIGUE_TOLERANCE
        or totals.upper > caps.upper_daily_max + FATIGUE_TOLERANCE
        or totals.overall > caps.overall_daily_max + FATIGUE_TOLERANCE
    )


def weekly_excess(totals: FatigueTotals, caps: ProficiencyCaps) -> float:
    """Summed amount by which weekly totals exceed the weekly ceilings."""
    return (
        max(0.0, totals.lower - caps.lower_weekly_max)
        + max(0.0, totals.upper - caps.upper_weekly_max)
        + max(0.0, totals.overall - caps.overall_weekly_max)
    )
