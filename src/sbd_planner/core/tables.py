"""
Static prescription tables.

Rows are immutable data keyed by (block, week, lift) on the canonical
10-week cycle: Volume 1-4, Strength 5-8, Peak 9-10. Other cycle lengths
map their weeks onto canonical rows with canonical_week().

A lookup that finds no row is a defect in these tables, not a user error,
and raises PrescriptionTableError.
"""

from dataclasses import dataclass
from typing import Final

from .config import (
    CANONICAL_CYCLE_WEEKS,
    COMPETITION_NAMES,
    LIFTS,
    STRENGTH_BLOCK_FRACTION,
    VOLUME_BLOCK_FRACTION,
)
from .errors import PrescriptionTableError
from .models import PrimaryPrescription, RowKind, SetScheme, SlotCounts, SlotItem


@dataclass(frozen=True)
class PrimaryRow:
    block: str
    week: int
    lift: str
    prescription: PrimaryPrescription


@dataclass(frozen=True)
class AccessoryRow:
    """Secondary or tertiary row."""

    block: str
    week: int
    lift: str
    scheme: SetScheme


# =============================================================================
# BLOCKS
# =============================================================================


def block_bounds(block: str, cycle_weeks: int = CANONICAL_CYCLE_WEEKS) -> tuple[int, int]:
    """
    Return the first and last week (inclusive) of ``block``.

    Volume ends at round(0.4 * N), Strength at round(0.8 * N).
    N=10 -> Volume 1-4, Strength 5-8, Peak 9-10.
    """
    volume_end = round(VOLUME_BLOCK_FRACTION * cycle_weeks)
    strength_end = round(STRENGTH_BLOCK_FRACTION * cycle_weeks)
    if block == "Volume":
        return 1, volume_end
    if block == "Strength":
        return volume_end + 1, strength_end
    if block == "Peak":
        return strength_end + 1, cycle_weeks
    raise ValueError(f"Unknown block: {block!r}")


def block_for_week(week: int, cycle_weeks: int = CANONICAL_CYCLE_WEEKS) -> str:
    """
    Return the mesocycle block a week belongs to.

    Weeks past the end of the cycle fall into Peak; table lookups for them
    then fail with PrescriptionTableError.
    """
    if week < 1:
        raise ValueError(f"week must be >= 1, got {week}")
    if week <= block_bounds("Volume", cycle_weeks)[1]:
        return "Volume"
    if week <= block_bounds("Strength", cycle_weeks)[1]:
        return "Strength"
    return "Peak"


def canonical_week(week: int, cycle_weeks: int = CANONICAL_CYCLE_WEEKS) -> int:
    """
    Map a plan week onto the canonical table week with the same block
    and the same relative position inside it.

    A block that is one week long maps onto the last canonical week of
    that block.
    """
    if cycle_weeks == CANONICAL_CYCLE_WEEKS:
        return week
    block = block_for_week(week, cycle_weeks)
    start, end = block_bounds(block, cycle_weeks)
    c_start, c_end = block_bounds(block, CANONICAL_CYCLE_WEEKS)
    length = end - start + 1
    c_length = c_end - c_start + 1
    if length == 1:
        return c_end
    position = round((week - start) * (c_length - 1) / (length - 1))
    return c_start + position


# =============================================================================
# ROWS
# =============================================================================

_PRIMARY_BY_WEEK: Final[dict[int, PrimaryPrescription]] = {
    # Volume: straight sets, no backoff
    1: PrimaryPrescription(top=SetScheme(sets=4, reps=6, rpe=6.0)),
    2: PrimaryPrescription(top=SetScheme(sets=4, reps=6, rpe=6.5)),
    3: PrimaryPrescription(top=SetScheme(sets=4, reps=5, rpe=7.0)),
    4: PrimaryPrescription(top=SetScheme(sets=4, reps=5, rpe=6.5)),
    # Strength: single top set, backoff at -0.5 RPE
    5: PrimaryPrescription(
        top=SetScheme(sets=1, reps=4, rpe=7.0),
        backoff=SetScheme(sets=3, reps=4, rpe=6.5),
    ),
    6: PrimaryPrescription(
        top=SetScheme(sets=1, reps=3, rpe=8.0),
        backoff=SetScheme(sets=3, reps=3, rpe=7.5),
    ),
    7: PrimaryPrescription(
        top=SetScheme(sets=1, reps=2, rpe=8.5),
        backoff=SetScheme(sets=3, reps=2, rpe=8.0),
    ),
    8: PrimaryPrescription(
        top=SetScheme(sets=1, reps=2, rpe=8.0),
        backoff=SetScheme(sets=3, reps=2, rpe=7.5),
    ),
    # Peak: heavy single plus doubles
    9: PrimaryPrescription(
        top=SetScheme(sets=1, reps=1, rpe=8.5),
        backoff=SetScheme(sets=2, reps=2, rpe=7.5),
    ),
    10: PrimaryPrescription(
        top=SetScheme(sets=1, reps=1, rpe=9.0),
        backoff=SetScheme(sets=1, reps=2, rpe=7.0),
    ),
}

_SECONDARY_BY_WEEK: Final[dict[int, SetScheme]] = {
    1: SetScheme(sets=4, reps=8, rpe=6.0),
    2: SetScheme(sets=4, reps=8, rpe=6.0),
    3: SetScheme(sets=4, reps=8, rpe=6.0),
    4: SetScheme(sets=4, reps=8, rpe=6.0),
    5: SetScheme(sets=3, reps=5, rpe=7.0),
    6: SetScheme(sets=3, reps=5, rpe=7.0),
    7: SetScheme(sets=3, reps=5, rpe=7.0),
    8: SetScheme(sets=3, reps=5, rpe=7.0),
    9: SetScheme(sets=0, reps=0, rpe=0.0),
    10: SetScheme(sets=0, reps=0, rpe=0.0),
}

_TERTIARY_BY_WEEK: Final[dict[int, SetScheme]] = {
    1: SetScheme(sets=3, reps=10, rpe=6.0),
    2: SetScheme(sets=3, reps=10, rpe=6.0),
    3: SetScheme(sets=3, reps=10, rpe=6.0),
    4: SetScheme(sets=3, reps=10, rpe=6.0),
    5: SetScheme(sets=2, reps=6, rpe=6.0),
    6: SetScheme(sets=2, reps=6, rpe=6.0),
    7: SetScheme(sets=2, reps=6, rpe=6.0),
    8: SetScheme(sets=2, reps=6, rpe=6.0),
    9: SetScheme(sets=0, reps=0, rpe=0.0),
    10: SetScheme(sets=0, reps=0, rpe=0.0),
}

PRIMARY_TABLE: Final[tuple[PrimaryRow, ...]] = tuple(
    PrimaryRow(block=block_for_week(week), week=week, lift=lift, prescription=p)
    for week, p in _PRIMARY_BY_WEEK.items()
    for lift in LIFTS
)

SECONDARY_TABLE: Final[tuple[AccessoryRow, ...]] = tuple(
    AccessoryRow(block=block_for_week(week), week=week, lift=lift, scheme=s)
    for week, s in _SECONDARY_BY_WEEK.items()
    for lift in LIFTS
)

TERTIARY_TABLE: Final[tuple[AccessoryRow, ...]] = tuple(
    AccessoryRow(block=block_for_week(week), week=week, lift=lift, scheme=s)
    for week, s in _TERTIARY_BY_WEEK.items()
    for lift in LIFTS
)

_PRIMARY_INDEX: Final[dict[tuple[str, int, str], PrimaryRow]] = {
    (r.block, r.week, r.lift): r for r in PRIMARY_TABLE
}
_SECONDARY_INDEX: Final[dict[tuple[str, int, str], AccessoryRow]] = {
    (r.block, r.week, r.lift): r for r in SECONDARY_TABLE
}
_TERTIARY_INDEX: Final[dict[tuple[str, int, str], AccessoryRow]] = {
    (r.block, r.week, r.lift): r for r in TERTIARY_TABLE
}


def _lookup(index: dict, table_name: str, week: int, lift: str):
    block = block_for_week(week)
    row = index.get((block, week, lift))
    if row is None:
        raise PrescriptionTableError(
            f"No {table_name} prescription for block={block} week={week} lift={lift}"
        )
    return row


def find_primary(week: int, lift: str) -> PrimaryPrescription:
    """Primary prescription for a canonical week and lift."""
    return _lookup(_PRIMARY_INDEX, "primary", week, lift).prescription


def find_secondary(week: int, lift: str) -> SetScheme:
    """Secondary prescription for a canonical week and lift."""
    return _lookup(_SECONDARY_INDEX, "secondary", week, lift).scheme


def find_tertiary(week: int, lift: str) -> SetScheme:
    """Tertiary prescription for a canonical week and lift."""
    return _lookup(_TERTIARY_INDEX, "tertiary", week, lift).scheme


def prescription_rows(item: SlotItem, week: int) -> list[tuple[RowKind, SetScheme]]:
    """
    Return the (kind, scheme) rows a slot item expands into.

    Primary -> top (+ backoff); secondary / tertiary -> one "work" row.
    Empty schemes yield no rows.
    """
    if item.slot == "primary":
        p = find_primary(week, item.lift)
        return [] if p.is_empty else p.rows()
    if item.slot == "secondary":
        s = find_secondary(week, item.lift)
    else:
        s = find_tertiary(week, item.lift)
    return [] if s.is_empty else [("work", s)]


# =============================================================================
# SLOT TARGETS
# =============================================================================

# {(days, proficiency): {lift: SlotCounts}}
SLOT_TARGETS: Final[dict[tuple[int, str], dict[str, SlotCounts]]] = {
    (3, "Beginner"): {
        "squat": SlotCounts(primary=1, secondary=1, tertiary=0),
        "bench": SlotCounts(primary=1, secondary=1, tertiary=0),
        "deadlift": SlotCounts(primary=1, secondary=0, tertiary=0),
    },
    (3, "Advanced"): {
        "squat": SlotCounts(primary=1, secondary=1, tertiary=0),
        "bench": SlotCounts(primary=1, secondary=1, tertiary=0),
        "deadlift": SlotCounts(primary=1, secondary=1, tertiary=0),
    },
    (4, "Beginner"): {
        "squat": SlotCounts(primary=1, secondary=1, tertiary=0),
        "bench": SlotCounts(primary=1, secondary=1, tertiary=1),
        "deadlift": SlotCounts(primary=1, secondary=0, tertiary=0),
    },
    (4, "Advanced"): {
        "squat": SlotCounts(primary=1, secondary=1, tertiary=0),
        "bench": SlotCounts(primary=1, secondary=1, tertiary=1),
        "deadlift": SlotCounts(primary=1, secondary=1, tertiary=0),
    },
    (5, "Beginner"): {
        "squat": SlotCounts(primary=1, secondary=1, tertiary=1),
        "bench": SlotCounts(primary=2, secondary=1, tertiary=1),
        "deadlift": SlotCounts(primary=1, secondary=0, tertiary=0),
    },
    (5, "Advanced"): {
        "squat": SlotCounts(primary=1, secondary=1, tertiary=1),
        "bench": SlotCounts(primary=2, secondary=1, tertiary=1),
        "deadlift": SlotCounts(primary=1, secondary=1, tertiary=0),
    },
    (6, "Beginner"): {
        "squat": SlotCounts(primary=1, secondary=1, tertiary=1),
        "bench": SlotCounts(primary=2, secondary=1, tertiary=1),
        "deadlift": SlotCounts(primary=1, secondary=0, tertiary=0),
    },
    (6, "Advanced"): {
        "squat": SlotCounts(primary=1, secondary=1, tertiary=1),
        "bench": SlotCounts(primary=2, secondary=1, tertiary=1),
        "deadlift": SlotCounts(primary=1, secondary=1, tertiary=0),
    },
}


def get_slot_targets(days: int, proficiency: str) -> dict[str, SlotCounts]:
    """
    Per-lift slot counts for a training frequency and proficiency.

    Bench carries two primaries at 5+ days per week.

    Raises:
        PrescriptionTableError: If (days, proficiency) has no row
    """
    targets = SLOT_TARGETS.get((days, proficiency))
    if targets is None:
        raise PrescriptionTableError(
            f"No slot targets for days={days} proficiency={proficiency}"
        )
    return targets


# =============================================================================
# VARIATIONS
# =============================================================================


def competition_name(lift: str) -> str:
    """Canonical competition-lift exercise name."""
    return COMPETITION_NAMES[lift]


def secondary_variation(block: str, lift: str, weaknesses: tuple[str, ...] | list[str] = ()) -> str:
    """
    Deterministic secondary exercise for a block, lift and weakness tags.

    bench:    off chest -> Paused Bench, lockout -> Pin Press, else Close Grip Bench
    squat:    hole / depth -> Paused Squat, else Pin Squat (Mid)
    deadlift: Volume -> Deficit Deadlift, off floor -> Paused Deadlift, else RDL
    """
    if lift == "bench":
        if "bench_off_chest" in weaknesses:
            return "Paused Bench"
        if "bench_lockout" in weaknesses:
            return "Pin Press"
        return "Close Grip Bench"

    if lift == "squat":
        if any(w in weaknesses for w in ("squat_hole", "squat_out_of_hole", "squat_depth")):
            return "Paused Squat"
        return "Pin Squat (Mid)"

    if lift == "deadlift":
        if block == "Volume":
            return "Deficit Deadlift"
        if "deadlift_off_floor" in weaknesses:
            return "Paused Deadlift"
        return "RDL"

    return competition_name(lift)


def tertiary_variation(lift: str) -> str:
    """Deterministic tertiary exercise for a lift."""
    if lift == "bench":
        return "Tempo Bench"
    if lift == "squat":
        return "Tempo Squat"
    return "Hip Thrust"


def exercise_name_for(item: SlotItem, block: str, weaknesses: tuple[str, ...] | list[str] = ()) -> str:
    """Resolve the exercise a slot item is performed with."""
    if item.slot == "primary":
        return competition_name(item.lift)
    if item.slot == "secondary":
        return secondary_variation(block, item.lift, weaknesses)
    return tertiary_variation(item.lift)
