"""
plangraph CLI - list command.
"""

import json
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from plangraph.cli.errors import (
    ExitCode,
    print_invalid_option_error,
    print_tasks_dir_not_found_error,
)
from plangraph.cli.paths import resolve_plans_dir
from plangraph.core.plans.models import PlanStatus
from plangraph.core.plans.store import read_all_plans

console = Console()

STATUS_COLORS = {
    PlanStatus.PENDING: "white",
    PlanStatus.IN_PROGRESS: "yellow",
    PlanStatus.DONE: "green",
    PlanStatus.CANCELLED: "dim",
    PlanStatus.DEFERRED: "dim",
}


def list_plans(
    status: list[str] | None = typer.Option(
        None,
        "--status",
        "-s",
        help="Only show plans with this status (repeatable)",
    ),
    tasks_dir: Path | None = typer.Option(
        None,
        "--tasks-dir",
        "-d",
        help="Tasks directory (default: paths.tasks from config)",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output as JSON",
    ),
) -> None:
    """
    List plans in the tasks directory, ordered by id.

    Examples:
        plangraph list
        plangraph list --status pending --status in_progress
    """
    valid = [s.value for s in PlanStatus]
    wanted: set[PlanStatus] = set()
    for value in status or []:
        if value not in valid:
            print_invalid_option_error("status", value, valid)
            raise typer.Exit(ExitCode.USER_ERROR)
        wanted.add(PlanStatus(value))

    _, plans_dir, _ = resolve_plans_dir(tasks_dir)
    if not plans_dir.is_dir():
        print_tasks_dir_not_found_error(plans_dir)
        raise typer.Exit(ExitCode.USER_ERROR)

    collection = read_all_plans(plans_dir)
    plans = [
        collection.plans[plan_id]
        for plan_id in sorted(collection.plans)
        if not wanted or collection.plans[plan_id].record.status in wanted
    ]

    if json_output:
        data = [{**p.record.to_document(), "path": str(p.path)} for p in plans]
        sys.stdout.write(json.dumps(data, indent=2))
        sys.stdout.write("\n")
        return

    if not plans:
        console.print("[yellow]No plans found[/yellow]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("ID", justify="right")
    table.add_column("Status", width=12)
    table.add_column("Priority", width=8)
    table.add_column("Parent", justify="right")
    table.add_column("Deps")
    table.add_column("Title", overflow="fold")

    for loaded in plans:
        plan = loaded.record
        color = STATUS_COLORS.get(plan.status, "white")
        table.add_row(
            str(plan.id),
            f"[{color}]{plan.status.value}[/{color}]",
            plan.priority.value if plan.priority else "",
            str(plan.parent) if plan.parent is not None else "",
            ", ".join(str(d) for d in plan.dependencies),
            plan.title or "",
        )

    console.print(table)
