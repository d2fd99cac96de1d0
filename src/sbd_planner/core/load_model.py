"""
Load model: one-rep max <-> working weight via reps and RPE.

    RIR   = 10 - RPE
    denom = 1 + (reps + RIR) / k(lift)
    weight = 1RM / denom          (planned weight, rounded to 2.5 kg)
    e1RM   = weight * denom       (estimated 1RM from a logged set)

The two directions are exact inverses for a fixed lift before rounding.
Both are pure and shared by plan generation, set logging and the
dashboard; nothing else re-derives them.

Degenerate inputs (non-positive or non-finite values, RPE above 10)
return None. Callers treat None as "no planned weight" / "no e1RM".
"""

import math

from .config import K_FACTORS, LOAD_INCREMENT_KG, RPE_MAX


def k_factor(lift: str) -> float:
    """
    Return the rep-to-fatigue slope for a base lift.

    Args:
        lift: "squat", "bench" or "deadlift"

    Returns:
        k constant (squat 30, bench 31, deadlift 28)

    Raises:
        ValueError: If lift is not a base lift
    """
    if lift not in K_FACTORS:
        raise ValueError(f"Unknown base lift: {lift!r}")
    return K_FACTORS[lift]


def round_to_increment(value: float, increment: float = LOAD_INCREMENT_KG) -> float:
    """
    Round to the nearest multiple of ``increment``; ties round up.

    round_to_increment(162.16) = 162.5
    round_to_increment(163.75) = 165.0
    """
    return math.floor(value / increment + 0.5) * increment


def _rep_denominator(reps: float, rpe: float | None, lift: str) -> float | None:
    """1 + (reps + RIR) / k, or None for degenerate reps / RPE."""
    if not math.isfinite(reps) or reps <= 0:
        return None
    if rpe is None:
        rir = 0.0
    else:
        if not math.isfinite(rpe) or rpe <= 0 or rpe > RPE_MAX:
            return None
        rir = RPE_MAX - rpe
    denom = 1 + (reps + rir) / k_factor(lift)
    return denom if denom > 0 else None


def required_weight(one_rm: float, reps: int, rpe: float, lift: str) -> float | None:
    """
    Planned working weight for ``reps`` at ``rpe`` given a 1RM.

    required_weight(200, 5, 8, "squat"):
        RIR = 2, denom = 1 + 7/30 = 1.2333, 200 / 1.2333 = 162.16 -> 162.5

    Args:
        one_rm: One-rep max in kg
        reps: Target reps per set
        rpe: Target RPE (0, 10]
        lift: Base lift selecting k

    Returns:
        Weight rounded to the nearest 2.5 kg, or None for degenerate input
    """
    if not math.isfinite(one_rm) or one_rm <= 0:
        return None
    denom = _rep_denominator(reps, rpe, lift)
    if denom is None:
        return None
    return round_to_increment(one_rm / denom)


def estimate_one_rep_max(
    weight: float,
    reps: int,
    rpe: float | None,
    lift: str,
) -> float | None:
    """
    Estimated 1RM from a set of ``reps`` at ``weight`` and ``rpe``.

    With ``rpe=None`` the set is treated as taken to failure (RIR 0),
    which gives e1RM = weight * (1 + reps / k).

    Args:
        weight: Weight lifted in kg
        reps: Reps performed
        rpe: Reported RPE, or None
        lift: Base lift selecting k

    Returns:
        Unrounded e1RM, or None for degenerate input
    """
    if not math.isfinite(weight) or weight <= 0:
        return None
    denom = _rep_denominator(reps, rpe, lift)
    if denom is None:
        return None
    return weight * denom


def weight_from_percentage(one_rm: float, percentage: float) -> float | None:
    """
    Planned weight for a percentage-prescribed row (e.g. 0.65 of 1RM).

    Returns:
        Weight rounded to the nearest 2.5 kg, or None for degenerate input
    """
    if not math.isfinite(one_rm) or one_rm <= 0:
        return None
    if not math.isfinite(percentage) or percentage <= 0:
        return None
    return round_to_increment(one_rm * percentage)
