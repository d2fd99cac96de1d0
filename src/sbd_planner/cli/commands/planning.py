"""Planning commands: init, generate, show-plan, explain."""

import json
from typing import Annotated, Any, Optional

import typer

from ...core.catalog import load_catalog_entries
from ...core.config import (
    CANONICAL_CYCLE_WEEKS,
    DELOAD_AFTER_WEEK8_DEFAULT,
    DELOAD_AFTER_WEEK10_DEFAULT,
    PROFICIENCY_CAPS,
)
from ...core.errors import PlannerError
from ...core.models import OneRepMaxes, PlanRecord, PlanRequest
from ...core.planner import explain_week, generate_plan
from ...core.tables import block_for_week, canonical_week
from ...io.plan_store import PlanStore
from .. import views
from ..app import DEFAULT_USER, JsonOption, StorePathOption, UserOption, app, get_store


def _require_store(store: PlanStore) -> None:
    if not store.exists():
        views.print_error(f"Store not found: {store.store_path}")
        views.print_info("Run 'init' first to create the store and seed the catalog.")
        raise typer.Exit(1)


def _require_active_plan(store: PlanStore, user_id: str) -> PlanRecord:
    plan = store.active_plan(user_id)
    if plan is None:
        views.print_error(f"No active plan for user '{user_id}'.")
        views.print_info("Run 'generate' to build one.")
        raise typer.Exit(1)
    return plan


def build_plan_overview(store: PlanStore, plan: PlanRecord) -> dict[str, Any]:
    """
    Collect a persisted plan into plain dicts for display and JSON output.

    Exercise names come from the catalog; the block is derived from the
    week number and the plan's cycle length.
    """
    names = {rec.id: rec.name for rec in store.load_catalog().values()}
    weeks = []
    for week, week_workouts in store.plan_tree(plan.id):
        block = None
        if not week.is_deload:
            block = block_for_week(canonical_week(week.week_number, plan.cycle_weeks))
        workouts = []
        for workout, rows in week_workouts:
            workouts.append(
                {
                    "id": workout.id,
                    "day_number": workout.day_number,
                    "name": workout.name,
                    "exercises": [
                        {
                            "id": we.id,
                            "exercise": names.get(we.exercise_id, f"#{we.exercise_id}"),
                            "sets": we.target_sets,
                            "reps": we.target_reps,
                            "rpe": we.target_rpe,
                            "percentage": we.target_percentage,
                            "planned_weight": we.planned_weight,
                        }
                        for we in rows
                    ],
                }
            )
        weeks.append(
            {
                "label": week.label,
                "week_number": week.week_number,
                "sequence_number": week.sequence_number,
                "is_deload": week.is_deload,
                "block": block,
                "workouts": workouts,
            }
        )
    return {
        "plan": {
            "id": plan.id,
            "name": plan.name,
            "created_at": plan.created_at,
            "cycle_weeks": plan.cycle_weeks,
        },
        "weeks": weeks,
    }


@app.command()
def init(
    store_path: StorePathOption = None,
) -> None:
    """
    Create the store and seed the exercise catalog.

    Safe to re-run: existing catalog entries are updated, not duplicated.
    """
    store = get_store(store_path)
    store.init()

    try:
        entries = load_catalog_entries()
        with store.transaction() as tx:
            added = tx.seed_exercises(entries)
    except (PlannerError, RuntimeError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success(f"Store ready: {store.store_path}")
    views.print_info(f"Catalog: {len(entries)} exercises ({added} added).")


@app.command()
def generate(
    days: Annotated[
        str,
        typer.Option("--days", "-d", help="Training days, comma-separated (e.g. Mon,Wed,Fri)"),
    ],
    squat: Annotated[float, typer.Option("--squat", help="Squat 1RM (kg)")],
    bench: Annotated[float, typer.Option("--bench", help="Bench press 1RM (kg)")],
    deadlift: Annotated[float, typer.Option("--deadlift", help="Deadlift 1RM (kg)")],
    proficiency: Annotated[
        str,
        typer.Option("--proficiency", help="Beginner or Advanced"),
    ] = "Beginner",
    weaknesses: Annotated[
        Optional[list[str]],
        typer.Option("--weakness", "-w", help="Weakness tag (repeatable, first two are used)"),
    ] = None,
    deload_after_week8: Annotated[
        bool,
        typer.Option(
            "--deload-after-week8/--no-deload-after-week8",
            help="Insert a deload after the Strength block",
        ),
    ] = DELOAD_AFTER_WEEK8_DEFAULT,
    deload_after_week10: Annotated[
        bool,
        typer.Option(
            "--deload-after-week10/--no-deload-after-week10",
            help="Insert a deload after the final week",
        ),
    ] = DELOAD_AFTER_WEEK10_DEFAULT,
    cycle_weeks: Annotated[
        int,
        typer.Option("--cycle-weeks", help="Cycle length in weeks (6-12)"),
    ] = CANONICAL_CYCLE_WEEKS,
    user_id: UserOption = DEFAULT_USER,
    store_path: StorePathOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Generate a new plan and make it the active one.

    The previous active plan is kept but marked inactive.
    """
    try:
        request = PlanRequest(
            user_id=user_id,
            days_of_week=[d.strip() for d in days.split(",") if d.strip()],
            one_rms=OneRepMaxes(squat=squat, bench=bench, deadlift=deadlift),
            proficiency=proficiency,
            weaknesses=list(weaknesses or []),
            deload_after_week8=deload_after_week8,
            deload_after_week10=deload_after_week10,
            cycle_weeks=cycle_weeks,
        )
    except PlannerError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    store = get_store(store_path)
    _require_store(store)

    try:
        plan_id = generate_plan(request, store)
    except PlannerError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    weeks = store.plan_weeks(plan_id)
    if json_out:
        print(json.dumps({
            "plan_id": plan_id,
            "user_id": user_id,
            "days_of_week": request.days_of_week,
            "weeks": [w.label for w in weeks],
        }, indent=2))
        return

    views.print_success(
        f"Generated plan #{plan_id} for '{user_id}': {len(weeks)} weeks "
        f"on {', '.join(request.days_of_week)}."
    )
    views.print_info("Run 'show-plan' to see it.")


@app.command("show-plan")
def show_plan(
    week: Annotated[
        Optional[int],
        typer.Option("--week", "-w", help="Only show weeks with this week number"),
    ] = None,
    user_id: UserOption = DEFAULT_USER,
    store_path: StorePathOption = None,
    json_out: JsonOption = False,
) -> None:
    """Show the active plan week by week with planned weights."""
    store = get_store(store_path)
    _require_store(store)

    try:
        plan = _require_active_plan(store, user_id)
        overview = build_plan_overview(store, plan)
    except PlannerError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if week is not None:
        overview["weeks"] = [w for w in overview["weeks"] if w["week_number"] == week]
        if not overview["weeks"]:
            views.print_error(f"Plan has no week {week}.")
            raise typer.Exit(1)

    if json_out:
        print(json.dumps(overview, indent=2))
        return

    views.print_plan(overview)


@app.command()
def explain(
    week: Annotated[int, typer.Option("--week", "-w", help="Plan week to explain")],
    user_id: UserOption = DEFAULT_USER,
    store_path: StorePathOption = None,
) -> None:
    """Show how a week's work was spread over the days and what it costs."""
    store = get_store(store_path)
    _require_store(store)

    try:
        plan = _require_active_plan(store, user_id)
        inputs = store.generation_inputs(plan.id)
        if inputs is None:
            views.print_error(f"Plan #{plan.id} has no stored generation inputs.")
            raise typer.Exit(1)
        request = inputs.to_request(user_id)
        schedule = explain_week(request, week)
    except (PlannerError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_explain(week, request.days_of_week, schedule, PROFICIENCY_CAPS[request.proficiency])
