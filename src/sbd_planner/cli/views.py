"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of plans, schedules and progress.
"""

from typing import Any

from rich.console import Console
from rich.table import Table

from ..core.config import LIFTS, ProficiencyCaps
from ..core.models import FatigueTotals, LiftSeries, TimelinePoint, WorkoutHistoryItem
from ..core.scheduler import WeekSchedule

console = Console()


def _fmt_kg(value: float | None) -> str:
    return f"{value:.1f}" if value is not None else "-"


def _fmt_intensity(row: dict[str, Any]) -> str:
    if row["rpe"] is not None:
        return f"@{row['rpe']:g}"
    return f"{row['percentage'] * 100:.0f}%"


# =============================================================================
# PLAN
# =============================================================================


def format_week_table(week: dict[str, Any]) -> Table:
    """
    Create a Rich table for one plan week.

    Args:
        week: Week entry as built by the show-plan command

    Returns:
        Rich Table object
    """
    title = week["label"]
    if week.get("block"):
        title += f"  [dim]{week['block']}[/dim]"
    table = Table(title=title, title_justify="left")

    table.add_column("ID", justify="right", style="dim", width=4)
    table.add_column("Workout", style="cyan")
    table.add_column("Exercise", style="green")
    table.add_column("Sets x Reps", justify="right")
    table.add_column("Intensity", justify="right", style="magenta")
    table.add_column("Weight(kg)", justify="right", style="bold")

    for workout in week["workouts"]:
        first = True
        for row in workout["exercises"]:
            table.add_row(
                str(row["id"]),
                workout["name"] if first else "",
                row["exercise"],
                f"{row['sets']} x {row['reps']}",
                _fmt_intensity(row),
                _fmt_kg(row["planned_weight"]),
            )
            first = False
        table.add_section()

    return table


def print_plan(overview: dict[str, Any]) -> None:
    """
    Print every week of a plan overview.

    Args:
        overview: Plan overview as built by the show-plan command
    """
    plan = overview["plan"]
    console.print(
        f"[bold]{plan['name']}[/bold]  plan #{plan['id']}  "
        f"({plan['cycle_weeks']} weeks, created {plan['created_at']})"
    )
    for week in overview["weeks"]:
        console.print()
        console.print(format_week_table(week))


# =============================================================================
# EXPLAIN
# =============================================================================


def _fmt_totals(totals: FatigueTotals) -> tuple[str, str, str]:
    return f"{totals.lower:.2f}", f"{totals.upper:.2f}", f"{totals.overall:.2f}"


def print_explain(
    week: int,
    weekdays: list[str],
    schedule: WeekSchedule,
    caps: ProficiencyCaps,
) -> None:
    """
    Print how one week's slot items were distributed over the days.

    Args:
        week: Plan week number
        weekdays: Training weekday tokens, Monday-first
        schedule: Result of re-running the scheduler for the week
        caps: Proficiency caps the schedule was checked against
    """
    console.print(f"[bold]Week {week}[/bold]  block: [magenta]{schedule.block}[/magenta]")

    table = Table(show_header=True, header_style="dim")
    table.add_column("Day", style="cyan")
    table.add_column("Slot items")
    table.add_column("Lower", justify="right")
    table.add_column("Upper", justify="right")
    table.add_column("Overall", justify="right", style="bold")

    for i, items in enumerate(schedule.days):
        lower, upper, overall = _fmt_totals(schedule.day_totals[i])
        table.add_row(
            f"Day {i + 1} ({weekdays[i]})",
            ", ".join(str(it) for it in items) or "[dim]rest[/dim]",
            lower,
            upper,
            overall,
        )
    table.add_section()
    table.add_row(
        "[dim]daily cap[/dim]",
        "",
        f"{caps.lower_daily_max:.2f}",
        f"{caps.upper_daily_max:.2f}",
        f"{caps.overall_daily_max:.2f}",
    )
    lower, upper, overall = _fmt_totals(schedule.week_totals)
    table.add_row("Week total", f"{schedule.placed_count} items", lower, upper, overall)
    table.add_row(
        "[dim]weekly cap[/dim]",
        "",
        f"{caps.lower_weekly_max:.2f}",
        f"{caps.upper_weekly_max:.2f}",
        f"{caps.overall_weekly_max:.2f}",
    )
    console.print(table)

    if schedule.fallbacks:
        console.print()
        for p in schedule.fallbacks:
            print_warning(f"{p.item} placed on day {p.day_index + 1} ({p.mode}): {p.reason}")


# =============================================================================
# PROGRESS
# =============================================================================


def _fmt_pair(planned: LiftSeries, actual: LiftSeries, lift: str) -> str:
    return f"{_fmt_kg(planned.get(lift))} / {_fmt_kg(actual.get(lift))}"


def print_dashboard(points: list[TimelinePoint]) -> None:
    """
    Print planned vs actual max e1RM per week.

    Args:
        points: Timeline ordered by sequence number
    """
    if not points:
        console.print("[yellow]The plan has no weeks.[/yellow]")
        return

    table = Table(title="e1RM: planned / actual (kg)")
    table.add_column("Week", style="cyan")
    for lift in LIFTS:
        table.add_column(lift.capitalize(), justify="right")

    for point in points:
        label = f"[dim]{point.label}[/dim]" if point.is_deload else point.label
        table.add_row(label, *(_fmt_pair(point.planned, point.actual, lift) for lift in LIFTS))

    console.print(table)


def print_history(items: list[WorkoutHistoryItem]) -> None:
    """
    Print logged workouts, most recent first.

    Args:
        items: Per-workout summaries
    """
    if not items:
        console.print("[yellow]No sets logged yet.[/yellow]")
        return

    table = Table(title="Training History")
    table.add_column("Logged", style="cyan")
    table.add_column("Week")
    table.add_column("Workout", style="green")
    table.add_column("Sets", justify="right")
    for lift in LIFTS:
        table.add_column(f"Best {lift} e1RM", justify="right", style="bold")

    for item in items:
        table.add_row(
            item.last_logged_at,
            item.week_label,
            item.workout_name,
            str(item.sets_logged),
            *(_fmt_kg(item.best_e1rm.get(lift)) for lift in LIFTS),
        )

    console.print(table)


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")
