"""Analysis commands: dashboard, history."""

import json

import typer

from ...core.analytics import weekly_e1rm_timeline, workout_history
from ...core.errors import PlannerError
from .. import views
from ..app import DEFAULT_USER, JsonOption, StorePathOption, UserOption, app, get_store


def _active_plan_id(store, user_id: str) -> int:
    if not store.exists():
        views.print_error(f"Store not found: {store.store_path}")
        views.print_info("Run 'init' first.")
        raise typer.Exit(1)
    plan = store.active_plan(user_id)
    if plan is None:
        views.print_error(f"No active plan for user '{user_id}'.")
        raise typer.Exit(1)
    return plan.id


@app.command()
def dashboard(
    user_id: UserOption = DEFAULT_USER,
    store_path: StorePathOption = None,
    json_out: JsonOption = False,
) -> None:
    """Planned vs actual max e1RM per week, deloads included."""
    store = get_store(store_path)

    try:
        plan_id = _active_plan_id(store, user_id)
        points = weekly_e1rm_timeline(store, plan_id, user_id)
    except PlannerError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if json_out:
        print(json.dumps({
            "plan_id": plan_id,
            "weeks": [
                {
                    "label": p.label,
                    "week_number": p.week_number,
                    "sequence_number": p.sequence_number,
                    "is_deload": p.is_deload,
                    "planned": p.planned.to_dict(),
                    "actual": p.actual.to_dict(),
                }
                for p in points
            ],
        }, indent=2))
        return

    views.print_dashboard(points)


@app.command()
def history(
    user_id: UserOption = DEFAULT_USER,
    store_path: StorePathOption = None,
) -> None:
    """Logged workouts of the active plan with best e1RM per lift."""
    store = get_store(store_path)

    try:
        plan_id = _active_plan_id(store, user_id)
        items = workout_history(store, plan_id, user_id)
    except PlannerError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_history(items)
