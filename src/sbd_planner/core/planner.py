"""
Plan generation for sbd-planner.

Walks the plan weeks, schedules each week's slot items onto training
days, expands the scheduled items into concrete exercise rows with planned
weights, and inserts deload weeks. Building the plan is pure; persisting
it happens afterwards in a single store transaction so that a failed run
never leaves a half-written plan active.
"""

import logging

from .config import DELOAD_TEMPLATE, PLAN_NAME
from .errors import CatalogIntegrityError, PlanGenerationError
from .load_model import required_weight, weight_from_percentage
from .models import (
    ExerciseRecord,
    GeneratedPlan,
    PlannedExercise,
    PlannedWeek,
    PlannedWorkout,
    PlanRequest,
)
from .scheduler import WeekSchedule, schedule_week
from .tables import (
    block_bounds,
    block_for_week,
    canonical_week,
    competition_name,
    exercise_name_for,
    prescription_rows,
)

logger = logging.getLogger(__name__)


# =============================================================================
# BUILD (pure)
# =============================================================================


def deload_weeks_after(request: PlanRequest) -> set[int]:
    """
    Plan weeks that are followed by an inserted deload.

    ``deload_after_week8`` -> after the last Strength week (week 8 of 10).
    ``deload_after_week10`` -> after the final week.
    """
    weeks = set()
    if request.deload_after_week8:
        weeks.add(block_bounds("Strength", request.cycle_weeks)[1])
    if request.deload_after_week10:
        weeks.add(request.cycle_weeks)
    return weeks


def explain_week(request: PlanRequest, week: int) -> WeekSchedule:
    """
    Re-run the scheduler for one plan week of a request.

    Returns the same day layout build_plan() uses for that week.
    """
    if not 1 <= week <= request.cycle_weeks:
        raise ValueError(f"week must be within 1..{request.cycle_weeks}, got {week}")
    return schedule_week(
        canonical_week(week, request.cycle_weeks),
        request.days,
        request.proficiency,
        request.active_weaknesses,
    )


def build_week(request: PlanRequest, week: int, sequence_number: int) -> PlannedWeek:
    """Schedule one training week and expand it into workouts."""
    table_week = canonical_week(week, request.cycle_weeks)
    block = block_for_week(table_week)
    schedule = explain_week(request, week)

    planned = PlannedWeek(
        week_number=week,
        sequence_number=sequence_number,
        is_deload=False,
        block=block,  # type: ignore[arg-type]
        fallbacks=list(schedule.fallbacks),
    )

    for day_index, items in enumerate(schedule.days):
        if not items:
            continue
        weekday = request.days_of_week[day_index]
        workout = PlannedWorkout(
            day_index=day_index,
            weekday=weekday,
            name=f"Day {day_index + 1} ({weekday})",
        )
        for item in items:
            name = exercise_name_for(item, block, request.active_weaknesses)
            one_rm = request.one_rms.for_lift(item.lift)
            for kind, scheme in prescription_rows(item, table_week):
                workout.exercises.append(
                    PlannedExercise(
                        exercise_name=name,
                        base_lift=item.lift,
                        slot=item.slot,
                        kind=kind,
                        target_sets=scheme.sets,
                        target_reps=scheme.reps,
                        target_rpe=scheme.rpe,
                        planned_weight=required_weight(
                            one_rm, scheme.reps, scheme.rpe, item.lift
                        ),
                    )
                )
        planned.workouts.append(workout)

    return planned


def build_deload_week(request: PlanRequest, week_number: int, sequence_number: int) -> PlannedWeek:
    """
    Fixed deload template, not run through the scheduler.

    One competition lift per workout on the first three training days.
    """
    planned = PlannedWeek(
        week_number=week_number,
        sequence_number=sequence_number,
        is_deload=True,
        block=None,
    )
    for day_index, row in enumerate(DELOAD_TEMPLATE):
        weekday = request.days_of_week[day_index]
        exercise = PlannedExercise(
            exercise_name=competition_name(row.lift),
            base_lift=row.lift,  # type: ignore[arg-type]
            slot="deload",
            kind="deload",
            target_sets=row.sets,
            target_reps=row.reps,
            target_percentage=row.percentage,
            planned_weight=weight_from_percentage(
                request.one_rms.for_lift(row.lift), row.percentage
            ),
        )
        planned.workouts.append(
            PlannedWorkout(
                day_index=day_index,
                weekday=weekday,
                name=f"Day {day_index + 1} ({weekday}) • Deload",
                exercises=[exercise],
            )
        )
    return planned


def build_plan(request: PlanRequest) -> GeneratedPlan:
    """
    Build the whole plan in memory.

    Sequence numbers increase by one for every week, deloads included.
    A deload carries the week number of the week it follows.
    """
    plan = GeneratedPlan(name=PLAN_NAME)
    deload_after = deload_weeks_after(request)
    sequence = 0

    for week in range(1, request.cycle_weeks + 1):
        sequence += 1
        plan.weeks.append(build_week(request, week, sequence))
        if week in deload_after:
            sequence += 1
            plan.weeks.append(build_deload_week(request, week, sequence))

    return plan


# =============================================================================
# PERSIST
# =============================================================================


def check_catalog(
    plan: GeneratedPlan,
    catalog: dict[tuple[str, str], ExerciseRecord],
) -> None:
    """
    Verify every exercise the plan references has a catalog identity.

    Raises:
        CatalogIntegrityError: Listing every missing (name, base_lift) pair
    """
    missing = [pair for pair in plan.required_exercises() if pair not in catalog]
    if missing:
        raise CatalogIntegrityError(missing)


def persist_plan(
    plan: GeneratedPlan,
    request: PlanRequest,
    catalog: dict[tuple[str, str], ExerciseRecord],
    tx,
) -> int:
    """
    Write a built plan through an open transaction.

    The user's previous active plan is deactivated, not deleted.

    Returns:
        Id of the new plan
    """
    deactivated = tx.deactivate_active_plans(request.user_id)
    for plan_id in deactivated:
        logger.info("Deactivated plan %d for user %s", plan_id, request.user_id)

    plan_record = tx.insert_plan(request.user_id, plan.name, request.cycle_weeks)
    tx.insert_generation_inputs(plan_record.id, request)

    for week in plan.weeks:
        week_record = tx.insert_plan_week(
            plan_record.id, week.week_number, week.sequence_number, week.is_deload
        )
        for workout in week.workouts:
            workout_record = tx.insert_workout(week_record.id, workout.day_number, workout.name)
            for ex in workout.exercises:
                tx.insert_workout_exercise(
                    workout_record.id,
                    catalog[(ex.exercise_name, ex.base_lift)].id,
                    ex.target_sets,
                    ex.target_reps,
                    ex.target_rpe,
                    ex.target_percentage,
                    ex.planned_weight,
                )
    return plan_record.id


def generate_plan(request: PlanRequest, store) -> int:
    """
    Build, check and persist a plan for ``request``.

    Input validation happens when the PlanRequest is constructed, and the
    catalog check runs before the transaction opens, so neither leaves
    anything behind in the store.

    Args:
        request: Validated generation inputs
        store: PlanStore to read the catalog from and write the plan to

    Returns:
        Id of the new active plan

    Raises:
        CatalogIntegrityError: If the catalog lacks a referenced exercise
        PlanGenerationError: If the write phase fails; the previous plan
            stays active
    """
    plan = build_plan(request)
    catalog = store.load_catalog()
    check_catalog(plan, catalog)

    try:
        with store.transaction() as tx:
            plan_id = persist_plan(plan, request, catalog, tx)
    except Exception as e:
        raise PlanGenerationError(e) from e

    logger.info(
        "Persisted plan %d (%s, %d weeks) for user %s",
        plan_id,
        plan.name,
        plan.total_weeks,
        request.user_id,
    )
    return plan_id
