"""
Data models for sbd-planner.

Core dataclasses for generation inputs, static prescriptions, scheduling
state, the generated plan hierarchy, and the records kept by the store.
Inputs validate themselves in __post_init__ so that nothing downstream
ever sees a malformed request.
"""

import math
from dataclasses import dataclass, field
from typing import Literal

from .config import (
    CANONICAL_CYCLE_WEEKS,
    DELOAD_AFTER_WEEK8_DEFAULT,
    DELOAD_AFTER_WEEK10_DEFAULT,
    LIFTS,
    MAX_CYCLE_WEEKS,
    MAX_TRAINING_DAYS,
    MAX_WEAKNESSES,
    MIN_CYCLE_WEEKS,
    MIN_TRAINING_DAYS,
    PROFICIENCIES,
    SLOT_TYPES,
    WEAKNESS_TAGS,
    WEEKDAY_TOKENS,
)
from .errors import PlanInputError

BaseLift = Literal["squat", "bench", "deadlift"]
Block = Literal["Volume", "Strength", "Peak"]
SlotType = Literal["primary", "secondary", "tertiary"]
Proficiency = Literal["Beginner", "Advanced"]
Region = Literal["lower", "upper"]
RowKind = Literal["top", "backoff", "work", "deload"]
TrackingMode = Literal["e1rm", "volume", "none"]


# =============================================================================
# INPUTS
# =============================================================================


@dataclass(frozen=True)
class OneRepMaxes:
    """User-supplied one-rep maxes in kg; immutable for one generation run."""

    squat: float
    bench: float
    deadlift: float

    def __post_init__(self) -> None:
        """Reject non-numeric, non-finite and non-positive maxes."""
        for lift in LIFTS:
            value = getattr(self, lift)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise PlanInputError(f"1RM for {lift} must be a number, got {value!r}")
            if not math.isfinite(value) or value <= 0:
                raise PlanInputError(
                    "Please provide valid 1RM values for squat, bench, and deadlift "
                    f"({lift} = {value!r})."
                )

    def for_lift(self, lift: str) -> float:
        """Return the 1RM for a base lift."""
        if lift not in LIFTS:
            raise ValueError(f"Unknown base lift: {lift!r}")
        return float(getattr(self, lift))

    def to_dict(self) -> dict[str, float]:
        return {lift: self.for_lift(lift) for lift in LIFTS}


@dataclass
class PlanRequest:
    """
    Everything one generation run needs.

    ``days_of_week`` holds weekday tokens (Mon..Sun); they are re-ordered
    Monday-first so that day index 0 is always the earliest training day.
    ``deload_after_week8`` / ``deload_after_week10`` keep their canonical
    names: for other cycle lengths they mean "after the last Strength week"
    and "after the final week".
    """

    user_id: str
    days_of_week: list[str]
    one_rms: OneRepMaxes
    proficiency: str
    weaknesses: list[str] = field(default_factory=list)
    deload_after_week8: bool = DELOAD_AFTER_WEEK8_DEFAULT
    deload_after_week10: bool = DELOAD_AFTER_WEEK10_DEFAULT
    cycle_weeks: int = CANONICAL_CYCLE_WEEKS

    def __post_init__(self) -> None:
        """Validate and normalise the request."""
        if not isinstance(self.user_id, str) or not self.user_id.strip():
            raise PlanInputError("user_id must be a non-empty string")

        days = list(self.days_of_week)
        if len(days) < MIN_TRAINING_DAYS or len(days) > MAX_TRAINING_DAYS:
            raise PlanInputError(
                f"Training days must be {MIN_TRAINING_DAYS}–{MAX_TRAINING_DAYS}, got {len(days)}"
            )
        unknown = [d for d in days if d not in WEEKDAY_TOKENS]
        if unknown:
            raise PlanInputError(
                f"Invalid weekday token(s): {', '.join(map(repr, unknown))}. "
                f"Use {', '.join(WEEKDAY_TOKENS)}."
            )
        if len(set(days)) != len(days):
            raise PlanInputError("Training days must be distinct")
        self.days_of_week = sorted(days, key=WEEKDAY_TOKENS.index)

        if not isinstance(self.one_rms, OneRepMaxes):
            raise PlanInputError("one_rms must be a OneRepMaxes instance")

        if self.proficiency not in PROFICIENCIES:
            raise PlanInputError(
                f"Invalid proficiency: {self.proficiency!r}. "
                f"Must be one of {', '.join(PROFICIENCIES)}."
            )

        unknown_tags = [w for w in self.weaknesses if w not in WEAKNESS_TAGS]
        if unknown_tags:
            raise PlanInputError(
                f"Unknown weakness tag(s): {', '.join(map(repr, unknown_tags))}. "
                f"Known tags: {', '.join(sorted(WEAKNESS_TAGS))}."
            )

        if not MIN_CYCLE_WEEKS <= self.cycle_weeks <= MAX_CYCLE_WEEKS:
            raise PlanInputError(
                f"cycle_weeks must be {MIN_CYCLE_WEEKS}–{MAX_CYCLE_WEEKS}, got {self.cycle_weeks}"
            )

    @property
    def days(self) -> int:
        """Training frequency (days per week)."""
        return len(self.days_of_week)

    @property
    def active_weaknesses(self) -> tuple[str, ...]:
        """Weakness tags that steer variation choice (first MAX_WEAKNESSES)."""
        return tuple(self.weaknesses[:MAX_WEAKNESSES])


# =============================================================================
# STATIC PRESCRIPTIONS
# =============================================================================


@dataclass(frozen=True)
class SetScheme:
    """Sets x reps @ RPE for one prescription row."""

    sets: int
    reps: int
    rpe: float

    def __post_init__(self) -> None:
        if self.sets < 0:
            raise ValueError("sets must be non-negative")
        if self.reps < 0:
            raise ValueError("reps must be non-negative")
        if not 0 <= self.rpe <= 10:
            raise ValueError(f"rpe must be within [0, 10], got {self.rpe}")

    @property
    def is_empty(self) -> bool:
        return self.sets == 0 or self.reps == 0


@dataclass(frozen=True)
class PrimaryPrescription:
    """Top set scheme plus an optional lower-intensity backoff."""

    top: SetScheme
    backoff: SetScheme | None = None

    def rows(self) -> list[tuple[RowKind, SetScheme]]:
        """Return (kind, scheme) rows in presentation order."""
        rows: list[tuple[RowKind, SetScheme]] = [("top", self.top)]
        if self.backoff is not None and not self.backoff.is_empty:
            rows.append(("backoff", self.backoff))
        return rows

    @property
    def is_empty(self) -> bool:
        return self.top.is_empty


@dataclass(frozen=True)
class SlotCounts:
    """How many slot items of each tier a lift needs in one week."""

    primary: int
    secondary: int
    tertiary: int

    def count(self, slot: str) -> int:
        if slot not in SLOT_TYPES:
            raise ValueError(f"Unknown slot type: {slot!r}")
        return getattr(self, slot)


# =============================================================================
# SCHEDULING STATE
# =============================================================================


@dataclass(frozen=True)
class SlotItem:
    """One unit of required work for a week, before day assignment."""

    slot: SlotType
    lift: BaseLift

    def __post_init__(self) -> None:
        if self.slot not in SLOT_TYPES:
            raise ValueError(f"Invalid slot: {self.slot!r}")
        if self.lift not in LIFTS:
            raise ValueError(f"Invalid lift: {self.lift!r}")

    @property
    def is_primary(self) -> bool:
        return self.slot == "primary"

    def __str__(self) -> str:
        return f"{self.lift}-{self.slot}"


@dataclass(frozen=True)
class FatigueTotals:
    """
    Accumulated fatigue split by region.

    ``overall`` is derived, so ``overall == lower + upper`` holds by
    construction. ``add`` returns a new record and never decreases a field.
    """

    lower: float = 0.0
    upper: float = 0.0

    @property
    def overall(self) -> float:
        return self.lower + self.upper

    def add(self, region: Region, amount: float) -> "FatigueTotals":
        """Return totals with ``amount`` added to ``region``."""
        if amount < 0:
            raise ValueError("fatigue contributions must be non-negative")
        if region == "lower":
            return FatigueTotals(lower=self.lower + amount, upper=self.upper)
        if region == "upper":
            return FatigueTotals(lower=self.lower, upper=self.upper + amount)
        raise ValueError(f"Invalid region: {region!r}")


@dataclass(frozen=True)
class Placement:
    """A relaxed or forced scheduler placement, kept for reporting."""

    item: SlotItem
    day_index: int
    mode: Literal["relaxed", "forced"]
    reason: str


# =============================================================================
# GENERATED PLAN
# =============================================================================


@dataclass(frozen=True)
class PlannedExercise:
    """
    One prescribed exercise row of a workout.

    Exactly one of ``target_rpe`` / ``target_percentage`` is set.
    ``planned_weight`` is None when the load model cannot produce one.
    """

    exercise_name: str
    base_lift: BaseLift
    slot: str  # "primary" | "secondary" | "tertiary" | "deload"
    kind: RowKind
    target_sets: int
    target_reps: int
    target_rpe: float | None = None
    target_percentage: float | None = None
    planned_weight: float | None = None

    def __post_init__(self) -> None:
        if (self.target_rpe is None) == (self.target_percentage is None):
            raise ValueError("exactly one of target_rpe / target_percentage must be set")
        if self.target_sets <= 0 or self.target_reps <= 0:
            raise ValueError("target_sets and target_reps must be positive")


@dataclass
class PlannedWorkout:
    """One training day of a planned week."""

    day_index: int  # 0-based position among the selected training days
    weekday: str
    name: str
    exercises: list[PlannedExercise] = field(default_factory=list)

    @property
    def day_number(self) -> int:
        return self.day_index + 1


@dataclass
class PlannedWeek:
    """
    One week of the plan.

    ``sequence_number`` increases by one for every week including inserted
    deloads; ``week_number`` is the plan-week label (a deload carries the
    label of the week it follows).
    """

    week_number: int
    sequence_number: int
    is_deload: bool
    block: Block | None
    workouts: list[PlannedWorkout] = field(default_factory=list)
    fallbacks: list[Placement] = field(default_factory=list)

    @property
    def label(self) -> str:
        if self.is_deload:
            return f"Deload ({self.week_number})"
        return f"W{self.week_number}"


@dataclass
class GeneratedPlan:
    """The full in-memory plan produced by one generation run."""

    name: str
    weeks: list[PlannedWeek] = field(default_factory=list)

    def required_exercises(self) -> set[tuple[str, str]]:
        """Every (exercise_name, base_lift) pair referenced by the plan."""
        return {
            (ex.exercise_name, ex.base_lift)
            for week in self.weeks
            for workout in week.workouts
            for ex in workout.exercises
        }

    @property
    def total_weeks(self) -> int:
        return len(self.weeks)


# =============================================================================
# STORE RECORDS
# =============================================================================


@dataclass(frozen=True)
class ExerciseRecord:
    """Catalog identity for one (name, base_lift) pair."""

    id: int
    name: str
    base_lift: BaseLift
    is_main_lift: bool = False
    tracking_mode: TrackingMode = "none"


@dataclass(frozen=True)
class PlanRecord:
    id: int
    user_id: str
    name: str
    is_active: bool
    created_at: str  # ISO timestamp
    cycle_weeks: int = CANONICAL_CYCLE_WEEKS


@dataclass(frozen=True)
class GenerationInputsRecord:
    """Snapshot of the request a plan was generated from."""

    id: int
    plan_id: int
    days_of_week: tuple[str, ...]
    one_rms: OneRepMaxes
    proficiency: str
    weaknesses: tuple[str, ...]
    deload_after_week8: bool
    deload_after_week10: bool
    cycle_weeks: int

    def to_request(self, user_id: str) -> PlanRequest:
        """Rebuild the PlanRequest this snapshot was taken from."""
        return PlanRequest(
            user_id=user_id,
            days_of_week=list(self.days_of_week),
            one_rms=self.one_rms,
            proficiency=self.proficiency,
            weaknesses=list(self.weaknesses),
            deload_after_week8=self.deload_after_week8,
            deload_after_week10=self.deload_after_week10,
            cycle_weeks=self.cycle_weeks,
        )


@dataclass(frozen=True)
class PlanWeekRecord:
    id: int
    plan_id: int
    week_number: int
    sequence_number: int
    is_deload: bool

    @property
    def label(self) -> str:
        if self.is_deload:
            return f"Deload ({self.week_number})"
        return f"W{self.week_number}"


@dataclass(frozen=True)
class WorkoutRecord:
    id: int
    week_id: int
    day_number: int
    name: str


@dataclass(frozen=True)
class WorkoutExerciseRecord:
    id: int
    workout_id: int
    exercise_id: int
    target_sets: int
    target_reps: int
    target_rpe: float | None
    target_percentage: float | None
    planned_weight: float | None


@dataclass(frozen=True)
class SetLogRecord:
    """One logged set; additive, keyed by the workout exercise it belongs to."""

    id: int
    user_id: str
    workout_exercise_id: int
    weight: float
    reps: int
    rpe: float | None
    e1rm: float | None
    base_lift: BaseLift | None
    logged_at: str  # ISO timestamp


# =============================================================================
# READ-TIME ANALYTICS
# =============================================================================


@dataclass
class LiftSeries:
    """One optional value per base lift."""

    squat: float | None = None
    bench: float | None = None
    deadlift: float | None = None

    def get(self, lift: str) -> float | None:
        return getattr(self, lift)

    def keep_max(self, lift: str, value: float) -> None:
        """Store ``value`` for ``lift`` if it beats the current value."""
        current = getattr(self, lift)
        if current is None or value > current:
            setattr(self, lift, value)

    def to_dict(self) -> dict[str, float | None]:
        return {lift: self.get(lift) for lift in LIFTS}


@dataclass
class TimelinePoint:
    """Planned vs actual max e1RM for one plan week."""

    label: str
    week_number: int
    sequence_number: int
    is_deload: bool
    planned: LiftSeries = field(default_factory=LiftSeries)
    actual: LiftSeries = field(default_factory=LiftSeries)


@dataclass
class WorkoutHistoryItem:
    """Per-workout summary of logged sets for the history view."""

    workout_id: int
    workout_name: str
    week_label: str
    sets_logged: int
    last_logged_at: str
    best_e1rm: LiftSeries = field(default_factory=LiftSeries)
