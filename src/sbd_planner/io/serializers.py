"""
JSON serialization for store records.

Handles conversion between record dataclasses and JSON-compatible dicts.
Every row read back from the store passes through a dict_to_* function,
which validates required fields and raises StoreError on a malformed row.
"""

import math
from typing import Any

from ..core.config import LIFTS, PROFICIENCIES
from ..core.errors import PlanInputError, StoreError
from ..core.models import (
    ExerciseRecord,
    GenerationInputsRecord,
    OneRepMaxes,
    PlanRecord,
    PlanRequest,
    PlanWeekRecord,
    SetLogRecord,
    WorkoutExerciseRecord,
    WorkoutRecord,
)

_TRACKING_MODES = ("e1rm", "volume", "none")


def _field(data: dict[str, Any], name: str) -> Any:
    if not isinstance(data, dict):
        raise StoreError(f"Record must be an object, got {type(data).__name__}")
    if name not in data:
        raise StoreError(f"Record is missing required field '{name}': {data!r}")
    return data[name]


def validate_id(value: Any, name: str) -> int:
    """
    Validate a record id or foreign key.

    Raises:
        StoreError: If value is not a positive integer
    """
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise StoreError(f"{name} must be a positive integer, got {value!r}")
    return value


def validate_positive_int(value: Any, name: str) -> int:
    """
    Validate a positive count (sets, reps, day number).

    Raises:
        StoreError: If value is not a positive integer
    """
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise StoreError(f"{name} must be a positive integer, got {value!r}")
    return value


def validate_text(value: Any, name: str) -> str:
    """
    Validate a non-empty string.

    Raises:
        StoreError: If value is empty or not a string
    """
    if not isinstance(value, str) or not value.strip():
        raise StoreError(f"{name} must be a non-empty string, got {value!r}")
    return value


def validate_bool(value: Any, name: str) -> bool:
    if not isinstance(value, bool):
        raise StoreError(f"{name} must be true or false, got {value!r}")
    return value


def validate_optional_number(value: Any, name: str) -> float | None:
    """
    Validate an optional finite, non-negative number.

    Raises:
        StoreError: If value is present but not a finite non-negative number
    """
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise StoreError(f"{name} must be a number or null, got {value!r}")
    if not math.isfinite(value) or value < 0:
        raise StoreError(f"{name} must be finite and non-negative, got {value!r}")
    return float(value)


def validate_lift(value: Any, name: str = "base_lift") -> str:
    if value not in LIFTS:
        raise StoreError(f"{name} must be one of {LIFTS}, got {value!r}")
    return value


# =============================================================================
# EXERCISES
# =============================================================================


def exercise_record_to_dict(record: ExerciseRecord) -> dict[str, Any]:
    return {
        "id": record.id,
        "name": record.name,
        "base_lift": record.base_lift,
        "is_main_lift": record.is_main_lift,
        "tracking_mode": record.tracking_mode,
    }


def dict_to_exercise_record(data: dict[str, Any]) -> ExerciseRecord:
    """
    Convert dict to ExerciseRecord.

    Raises:
        StoreError: If data is invalid
    """
    tracking_mode = data.get("tracking_mode", "none") if isinstance(data, dict) else None
    if tracking_mode not in _TRACKING_MODES:
        raise StoreError(f"tracking_mode must be one of {_TRACKING_MODES}, got {tracking_mode!r}")
    return ExerciseRecord(
        id=validate_id(_field(data, "id"), "exercise id"),
        name=validate_text(_field(data, "name"), "exercise name"),
        base_lift=validate_lift(_field(data, "base_lift")),  # type: ignore[arg-type]
        is_main_lift=validate_bool(data.get("is_main_lift", False), "is_main_lift"),
        tracking_mode=tracking_mode,
    )


# =============================================================================
# PLANS
# =============================================================================


def plan_record_to_dict(record: PlanRecord) -> dict[str, Any]:
    return {
        "id": record.id,
        "user_id": record.user_id,
        "name": record.name,
        "is_active": record.is_active,
        "created_at": record.created_at,
        "cycle_weeks": record.cycle_weeks,
    }


def dict_to_plan_record(data: dict[str, Any]) -> PlanRecord:
    """
    Convert dict to PlanRecord.

    Raises:
        StoreError: If data is invalid
    """
    return PlanRecord(
        id=validate_id(_field(data, "id"), "plan id"),
        user_id=validate_text(_field(data, "user_id"), "user_id"),
        name=validate_text(_field(data, "name"), "plan name"),
        is_active=validate_bool(_field(data, "is_active"), "is_active"),
        created_at=validate_text(_field(data, "created_at"), "created_at"),
        cycle_weeks=validate_positive_int(_field(data, "cycle_weeks"), "cycle_weeks"),
    )


def generation_inputs_to_dict(
    record_id: int, plan_id: int, request: PlanRequest
) -> dict[str, Any]:
    """Snapshot a PlanRequest as a plan_generation_inputs row."""
    return {
        "id": record_id,
        "plan_id": plan_id,
        "days_of_week": list(request.days_of_week),
        "one_rms": request.one_rms.to_dict(),
        "proficiency": request.proficiency,
        "weaknesses": list(request.weaknesses),
        "deload_after_week8": request.deload_after_week8,
        "deload_after_week10": request.deload_after_week10,
        "cycle_weeks": request.cycle_weeks,
    }


def dict_to_generation_inputs(data: dict[str, Any]) -> GenerationInputsRecord:
    """
    Convert dict to GenerationInputsRecord.

    Raises:
        StoreError: If data is invalid
    """
    days = _field(data, "days_of_week")
    weaknesses = _field(data, "weaknesses")
    if not isinstance(days, list) or not all(isinstance(d, str) for d in days):
        raise StoreError(f"days_of_week must be a list of weekday tokens, got {days!r}")
    if not isinstance(weaknesses, list) or not all(isinstance(w, str) for w in weaknesses):
        raise StoreError(f"weaknesses must be a list of tags, got {weaknesses!r}")

    raw_rms = _field(data, "one_rms")
    if not isinstance(raw_rms, dict):
        raise StoreError(f"one_rms must be an object, got {raw_rms!r}")
    try:
        one_rms = OneRepMaxes(**{lift: _field(raw_rms, lift) for lift in LIFTS})
    except PlanInputError as e:
        raise StoreError(f"Stored 1RMs are invalid: {e}") from e

    proficiency = _field(data, "proficiency")
    if proficiency not in PROFICIENCIES:
        raise StoreError(f"proficiency must be one of {PROFICIENCIES}, got {proficiency!r}")

    return GenerationInputsRecord(
        id=validate_id(_field(data, "id"), "generation inputs id"),
        plan_id=validate_id(_field(data, "plan_id"), "plan_id"),
        days_of_week=tuple(days),
        one_rms=one_rms,
        proficiency=proficiency,
        weaknesses=tuple(weaknesses),
        deload_after_week8=validate_bool(_field(data, "deload_after_week8"), "deload_after_week8"),
        deload_after_week10=validate_bool(_field(data, "deload_after_week10"), "deload_after_week10"),
        cycle_weeks=validate_positive_int(_field(data, "cycle_weeks"), "cycle_weeks"),
    )


# =============================================================================
# WEEKS / WORKOUTS / ROWS
# =============================================================================


def plan_week_record_to_dict(record: PlanWeekRecord) -> dict[str, Any]:
    return {
        "id": record.id,
        "plan_id": record.plan_id,
        "week_number": record.week_number,
        "sequence_number": record.sequence_number,
        "is_deload": record.is_deload,
    }


def dict_to_plan_week_record(data: dict[str, Any]) -> PlanWeekRecord:
    return PlanWeekRecord(
        id=validate_id(_field(data, "id"), "plan week id"),
        plan_id=validate_id(_field(data, "plan_id"), "plan_id"),
        week_number=validate_positive_int(_field(data, "week_number"), "week_number"),
        sequence_number=validate_positive_int(_field(data, "sequence_number"), "sequence_number"),
        is_deload=validate_bool(_field(data, "is_deload"), "is_deload"),
    )


def workout_record_to_dict(record: WorkoutRecord) -> dict[str, Any]:
    return {
        "id": record.id,
        "week_id": record.week_id,
        "day_number": record.day_number,
        "name": record.name,
    }


def dict_to_workout_record(data: dict[str, Any]) -> WorkoutRecord:
    return WorkoutRecord(
        id=validate_id(_field(data, "id"), "workout id"),
        week_id=validate_id(_field(data, "week_id"), "week_id"),
        day_number=validate_positive_int(_field(data, "day_number"), "day_number"),
        name=validate_text(_field(data, "name"), "workout name"),
    )


def workout_exercise_record_to_dict(record: WorkoutExerciseRecord) -> dict[str, Any]:
    return {
        "id": record.id,
        "workout_id": record.workout_id,
        "exercise_id": record.exercise_id,
        "target_sets": record.target_sets,
        "target_reps": record.target_reps,
        "target_rpe": record.target_rpe,
        "target_percentage": record.target_percentage,
        "planned_weight": record.planned_weight,
    }


def dict_to_workout_exercise_record(data: dict[str, Any]) -> WorkoutExerciseRecord:
    """
    Convert dict to WorkoutExerciseRecord.

    Exactly one of target_rpe / target_percentage must be set.

    Raises:
        StoreError: If data is invalid
    """
    target_rpe = validate_optional_number(_field(data, "target_rpe"), "target_rpe")
    target_percentage = validate_optional_number(
        _field(data, "target_percentage"), "target_percentage"
    )
    if (target_rpe is None) == (target_percentage is None):
        raise StoreError(
            f"Workout exercise {data.get('id')!r} must set exactly one of "
            "target_rpe / target_percentage"
        )
    return WorkoutExerciseRecord(
        id=validate_id(_field(data, "id"), "workout exercise id"),
        workout_id=validate_id(_field(data, "workout_id"), "workout_id"),
        exercise_id=validate_id(_field(data, "exercise_id"), "exercise_id"),
        target_sets=validate_positive_int(_field(data, "target_sets"), "target_sets"),
        target_reps=validate_positive_int(_field(data, "target_reps"), "target_reps"),
        target_rpe=target_rpe,
        target_percentage=target_percentage,
        planned_weight=validate_optional_number(_field(data, "planned_weight"), "planned_weight"),
    )


# =============================================================================
# SET LOGS
# =============================================================================


def set_log_record_to_dict(record: SetLogRecord) -> dict[str, Any]:
    return {
        "id": record.id,
        "user_id": record.user_id,
        "workout_exercise_id": record.workout_exercise_id,
        "weight": record.weight,
        "reps": record.reps,
        "rpe": record.rpe,
        "e1rm": record.e1rm,
        "base_lift": record.base_lift,
        "logged_at": record.logged_at,
    }


def dict_to_set_log_record(data: dict[str, Any]) -> SetLogRecord:
    """
    Convert dict to SetLogRecord.

    Raises:
        StoreError: If data is invalid
    """
    weight = validate_optional_number(_field(data, "weight"), "weight")
    if weight is None or weight <= 0:
        raise StoreError(f"weight must be positive, got {weight!r}")
    base_lift = _field(data, "base_lift")
    if base_lift is not None:
        validate_lift(base_lift)
    return SetLogRecord(
        id=validate_id(_field(data, "id"), "set log id"),
        user_id=validate_text(_field(data, "user_id"), "user_id"),
        workout_exercise_id=validate_id(_field(data, "workout_exercise_id"), "workout_exercise_id"),
        weight=weight,
        reps=validate_positive_int(_field(data, "reps"), "reps"),
        rpe=validate_optional_number(_field(data, "rpe"), "rpe"),
        e1rm=validate_optional_number(_field(data, "e1rm"), "e1rm"),
        base_lift=base_lift,
        logged_at=validate_text(_field(data, "logged_at"), "logged_at"),
    )
