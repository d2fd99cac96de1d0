"""
Read-time analytics over a persisted plan and its set logs.

All e1RM figures come from load_model.estimate_one_rep_max so that
logging, the dashboard and the history view agree with plan generation.
"""

import math
from typing import Iterator

from .config import RPE_MAX
from .errors import PlanInputError, StoreError
from .load_model import estimate_one_rep_max
from .models import (
    ExerciseRecord,
    PlanWeekRecord,
    SetLogRecord,
    TimelinePoint,
    WorkoutExerciseRecord,
    WorkoutHistoryItem,
    WorkoutRecord,
)


def validate_logged_set(weight: float, reps: int, rpe: float | None) -> None:
    """
    Reject impossible set logs.

    Raises:
        PlanInputError: If weight or reps are not positive finite numbers,
            or RPE is outside (0, 10]
    """
    if not math.isfinite(weight) or weight <= 0:
        raise PlanInputError(f"weight must be a positive number, got {weight}")
    if not math.isfinite(reps) or reps <= 0:
        raise PlanInputError(f"reps must be a positive number, got {reps}")
    if rpe is not None and (not math.isfinite(rpe) or not 0 < rpe <= RPE_MAX):
        raise PlanInputError(f"rpe must be within (0, 10], got {rpe}")


def set_log_e1rm(
    exercise: ExerciseRecord,
    weight: float,
    reps: int,
    rpe: float | None,
) -> float | None:
    """
    e1RM stored with a logged set.

    Only main lifts logged with an RPE get one.
    """
    if not exercise.is_main_lift or rpe is None:
        return None
    return estimate_one_rep_max(weight, reps, rpe, exercise.base_lift)


def _walk_plan(
    store, plan_id: int
) -> Iterator[tuple[PlanWeekRecord, WorkoutRecord, WorkoutExerciseRecord]]:
    """Yield (week, workout, workout exercise) in sequence and day order."""
    for week, workouts in store.plan_tree(plan_id):
        for workout, rows in workouts:
            for we in rows:
                yield week, workout, we


def _require_active_plan(store, user_id: str):
    plan = store.active_plan(user_id)
    if plan is None:
        raise StoreError(f"No active plan for user {user_id!r}. Run 'generate' first.")
    return plan


def log_sets(
    store,
    user_id: str,
    workout_exercise_id: int,
    weight: float,
    reps: int,
    rpe: float | None = None,
    sets: int = 1,
) -> list[SetLogRecord]:
    """
    Log ``sets`` identical sets against a row of the user's active plan.

    Raises:
        PlanInputError: For impossible values
        StoreError: If there is no active plan or the row is not part of it
    """
    validate_logged_set(weight, reps, rpe)
    if sets <= 0:
        raise PlanInputError(f"sets must be positive, got {sets}")

    plan = _require_active_plan(store, user_id)
    row = next(
        (we for _, _, we in _walk_plan(store, plan.id) if we.id == workout_exercise_id),
        None,
    )
    if row is None:
        raise StoreError(
            f"Workout exercise {workout_exercise_id} is not part of the active plan"
        )

    exercise = store.exercise(row.exercise_id)
    e1rm = set_log_e1rm(exercise, weight, reps, rpe)
    entries = [(weight, reps, rpe, e1rm)] * sets

    with store.transaction() as tx:
        return tx.insert_set_logs(user_id, workout_exercise_id, exercise.base_lift, entries)


def weekly_e1rm_timeline(store, plan_id: int, user_id: str) -> list[TimelinePoint]:
    """
    Planned vs actual max e1RM per lift for every week of a plan.

    Both sides ignore RPE and treat every set as taken to failure, so a row
    logged at its planned weight and reps shows actual equal to planned.
    Planned values come from main-lift rows (planned weight, target reps);
    actual values from that week's set logs (logged weight, reps).
    """
    exercises = {rec.id: rec for rec in store.load_catalog().values()}
    logs_by_row: dict[int, list[SetLogRecord]] = {}
    for log in store.set_logs(user_id):
        logs_by_row.setdefault(log.workout_exercise_id, []).append(log)

    points: dict[int, TimelinePoint] = {}
    for week, _, we in _walk_plan(store, plan_id):
        point = points.get(week.id)
        if point is None:
            point = points[week.id] = TimelinePoint(
                label=week.label,
                week_number=week.week_number,
                sequence_number=week.sequence_number,
                is_deload=week.is_deload,
            )
        exercise = exercises.get(we.exercise_id)
        if exercise is None or not exercise.is_main_lift:
            continue

        if we.planned_weight is not None:
            planned = estimate_one_rep_max(
                we.planned_weight, we.target_reps, None, exercise.base_lift
            )
            if planned is not None:
                point.planned.keep_max(exercise.base_lift, planned)

        for log in logs_by_row.get(we.id, []):
            actual = estimate_one_rep_max(log.weight, log.reps, None, exercise.base_lift)
            if actual is not None:
                point.actual.keep_max(exercise.base_lift, actual)

    return sorted(points.values(), key=lambda p: p.sequence_number)


def _round_whole(value: float) -> float:
    return float(math.floor(value + 0.5))


def workout_history(store, plan_id: int, user_id: str) -> list[WorkoutHistoryItem]:
    """
    Per-workout summary of logged sets, most recently logged first.

    Best e1RM per lift is rounded half up to a whole number.
    """
    logs_by_row: dict[int, list[SetLogRecord]] = {}
    for log in store.set_logs(user_id):
        logs_by_row.setdefault(log.workout_exercise_id, []).append(log)

    items: dict[int, WorkoutHistoryItem] = {}
    for week, workout, we in _walk_plan(store, plan_id):
        for log in logs_by_row.get(we.id, []):
            item = items.get(workout.id)
            if item is None:
                item = WorkoutHistoryItem(
                    workout_id=workout.id,
                    workout_name=workout.name,
                    week_label=week.label,
                    sets_logged=0,
                    last_logged_at=log.logged_at,
                )
                items[workout.id] = item
            item.sets_logged += 1
            item.last_logged_at = max(item.last_logged_at, log.logged_at)
            if log.e1rm is not None and log.base_lift is not None:
                item.best_e1rm.keep_max(log.base_lift, _round_whole(log.e1rm))

    return sorted(items.values(), key=lambda h: h.last_logged_at, reverse=True)
