"""
plangraph CLI - next command.

Shows the plan to work on next, either among a root plan's dependencies
or across the whole tasks directory.
"""

import json
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from plangraph.cli.errors import ExitCode, print_tasks_dir_not_found_error
from plangraph.cli.paths import resolve_plans_dir
from plangraph.core.plans.models import PlanRecord
from plangraph.core.readiness import find_next_plan, find_next_ready_dependency

console = Console()


def _render_message(message: str, found: bool) -> None:
    first, *rest = message.split("\n")
    style = "green" if found else "yellow"
    console.print(f"[{style}]{escape(first)}[/{style}]", highlight=False)
    for line in rest:
        console.print(escape(line).replace("→ Try:", "[cyan]→ Try:[/cyan]"), highlight=False)


def _plan_summary(plan: PlanRecord, path: Path | None) -> dict[str, object]:
    data = plan.to_document()
    if path is not None:
        data["path"] = str(path)
    return data


def next_plan(
    root_id: int | None = typer.Argument(
        None,
        help="Plan id whose dependencies to search (default: whole tasks directory)",
    ),
    tasks_dir: Path | None = typer.Option(
        None,
        "--tasks-dir",
        "-d",
        help="Tasks directory (default: paths.tasks from config)",
    ),
    include_in_progress: bool = typer.Option(
        True,
        "--include-in-progress/--pending-only",
        help="Consider in-progress plans when searching the whole directory",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output as JSON",
    ),
) -> None:
    """
    Show the next plan that is ready to work on.

    With ROOT_ID, searches that plan's dependencies and children; in-progress
    plans win, then higher priority, then lower id. When every dependency is
    done the root plan itself is returned.

    Examples:
        plangraph next 12
        plangraph next --json
    """
    _, plans_dir, _ = resolve_plans_dir(tasks_dir)

    if root_id is not None:
        result = find_next_ready_dependency(root_id, plans_dir)
        if json_output:
            payload = {
                "plan": _plan_summary(result.plan, result.path) if result.plan else None,
                "message": result.message,
            }
            sys.stdout.write(json.dumps(payload, indent=2))
            sys.stdout.write("\n")
        else:
            _render_message(result.message, result.found)
            if result.path is not None:
                console.print(f"[dim]{result.path}[/dim]", highlight=False)
        if not result.found:
            raise typer.Exit(ExitCode.GENERAL_ERROR)
        return

    if not plans_dir.is_dir():
        print_tasks_dir_not_found_error(plans_dir)
        raise typer.Exit(ExitCode.USER_ERROR)

    loaded = find_next_plan(plans_dir, include_in_progress=include_in_progress)
    if json_output:
        payload = _plan_summary(loaded.record, loaded.path) if loaded else None
        sys.stdout.write(json.dumps(payload, indent=2))
        sys.stdout.write("\n")
    elif loaded is None:
        console.print("[yellow]No plans are ready to work on[/yellow]")
    else:
        console.print(f"[green]Next plan:[/green] {loaded.record.label}", highlight=False)
        console.print(f"[dim]{loaded.path}[/dim]", highlight=False)

    if loaded is None:
        raise typer.Exit(ExitCode.GENERAL_ERROR)
