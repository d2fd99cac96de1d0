"""
CLI entry point using Typer.

Provides commands for training plan management:
- init: Create the store and seed the exercise catalog
- generate: Build a new active plan from 1RMs and preferences
- show-plan: Display the active plan
- explain: Show how one week was scheduled
- log-set: Log performed sets against a plan row
- dashboard: Planned vs actual e1RM per week
- history: Logged workouts with best e1RM
"""

import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from .app import app
from .commands import analysis, planning, sessions  # noqa: F401  (register commands)


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show scheduler and store log messages"),
    ] = False,
) -> None:
    """
    Squat / bench / deadlift training-plan generator.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


if __name__ == "__main__":
    app()
