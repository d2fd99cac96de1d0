"""Shared Typer app object, shared option types, and store utility."""

from pathlib import Path
from typing import Annotated, Optional

import typer

from ..io.plan_store import PlanStore, get_default_store_path

# Shared --store-path option type used across all commands
StorePathOption = Annotated[
    Optional[Path],
    typer.Option("--store-path", "-p", help="Path to the JSON store file"),
]

# Shared --user option type; the store can hold plans for several lifters
UserOption = Annotated[
    str,
    typer.Option("--user", "-u", help="User id the plan belongs to"),
]

JsonOption = Annotated[
    bool,
    typer.Option("--json", "-j", help="Output as JSON for machine processing"),
]

DEFAULT_USER = "default"

app = typer.Typer(
    name="sbd-planner",
    help="Squat / bench / deadlift training-plan generator.",
    no_args_is_help=True,
)


def get_store(store_path: Path | None) -> PlanStore:
    """Get plan store from path or default location."""
    if store_path is None:
        store_path = get_default_store_path()
    return PlanStore(store_path)
