"""Session commands: log-set."""

from typing import Annotated, Optional

import typer

from ...core.analytics import log_sets
from ...core.errors import PlannerError
from .. import views
from ..app import DEFAULT_USER, StorePathOption, UserOption, app, get_store


@app.command("log-set")
def log_set(
    workout_exercise_id: Annotated[
        int,
        typer.Option("--row", "-r", help="Plan row ID (first column of show-plan)"),
    ],
    weight: Annotated[float, typer.Option("--weight", help="Weight lifted (kg)")],
    reps: Annotated[int, typer.Option("--reps", help="Reps performed")],
    rpe: Annotated[
        Optional[float],
        typer.Option("--rpe", help="Reported RPE (0-10]; needed for an e1RM"),
    ] = None,
    sets: Annotated[
        int,
        typer.Option("--sets", "-s", help="Number of identical sets to log"),
    ] = 1,
    user_id: UserOption = DEFAULT_USER,
    store_path: StorePathOption = None,
) -> None:
    """
    Log performed sets against a row of the active plan.

    Main lifts logged with an RPE get an estimated 1RM.
    """
    store = get_store(store_path)
    if not store.exists():
        views.print_error(f"Store not found: {store.store_path}")
        views.print_info("Run 'init' first.")
        raise typer.Exit(1)

    try:
        records = log_sets(store, user_id, workout_exercise_id, weight, reps, rpe, sets)
    except PlannerError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    msg = f"Logged {len(records)} x {reps} @ {weight:g} kg"
    if rpe is not None:
        msg += f" RPE {rpe:g}"
    e1rm = records[0].e1rm
    if e1rm is not None:
        msg += f"  (e1RM {e1rm:.1f} kg)"
    views.print_success(msg)
