"""
plangraph CLI - renumber command.

Repairs duplicate or missing plan ids and out-of-order plan families,
rewriting references and renaming files to match.
"""

import json
import logging
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from plangraph.cli.errors import (
    ExitCode,
    print_error,
    print_keep_path_not_found_error,
    print_tasks_dir_not_found_error,
)
from plangraph.cli.paths import resolve_plans_dir
from plangraph.core.renumber import (
    BatchWriteError,
    PathTraversalError,
    RenumberError,
    RenumberReport,
    renumber_plans,
)
from plangraph.utils.git import get_branch_changed_files

logger = logging.getLogger(__name__)
console = Console()


def _display(path: Path, base: Path) -> str:
    try:
        return str(path.relative_to(base))
    except ValueError:
        return str(path)


def _print_report(report: RenumberReport) -> None:
    base = report.directory

    for candidate in report.candidates:
        if candidate.conflicts_with is not None:
            console.print(
                f"[yellow]Conflict:[/yellow] {_display(candidate.file_path, base)} "
                f"reuses id {candidate.conflicts_with}",
                highlight=False,
            )
        else:
            console.print(
                f"[yellow]Missing id:[/yellow] {_display(candidate.file_path, base)}",
                highlight=False,
            )

    if report.hierarchy_mapping:
        moves = ", ".join(f"{old} → {new}" for old, new in sorted(report.hierarchy_mapping.items()))
        console.print(f"[cyan]Reordered families:[/cyan] {moves}", highlight=False)

    if report.changes:
        title = "Planned Changes (dry run)" if report.dry_run else "Renumbered Plans"
        table = Table(title=title, show_header=True, header_style="bold cyan")
        table.add_column("File", overflow="fold")
        table.add_column("Changes", overflow="fold")
        for change in report.changes:
            name = _display(change.source_path, base)
            if change.is_rename:
                name = f"{name} → {_display(change.target_path, base)}"
            table.add_row(name, "\n".join(change.describe()))
        console.print(table)

    for error in report.family_errors:
        print_error(
            error.message,
            reason="Parent and dependency links in this family form a loop",
            solution="Remove one of the dependencies between the listed plans and rerun",
        )

    if not report.changes and not report.family_errors:
        console.print("[green]✓[/green] No plans need renumbering.")
    elif report.dry_run:
        console.print(f"[dim]Dry run: {len(report.changes)} plan(s) would change[/dim]")
    elif report.applied:
        console.print(f"[green]✓[/green] Updated {len(report.changes)} plan(s)")


def renumber(
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "-n",
        help="Show what would change without writing anything",
    ),
    keep: list[Path] | None = typer.Option(
        None,
        "--keep",
        "-k",
        help="Plan file that keeps its id when it conflicts (repeatable)",
    ),
    no_branch_check: bool = typer.Option(
        False,
        "--no-branch-check",
        help="Ignore git branch changes when deciding which duplicate keeps its id",
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
        help="Output the report as JSON",
    ),
) -> None:
    """
    Fix duplicate and missing plan ids, and reorder plan families.

    Duplicates keep their id in the file you pass with --keep, then in files
    from trunk (when on a feature branch), then in the oldest file. Every
    other copy gets a fresh id above the current maximum.

    Examples:
        plangraph renumber --dry-run
        plangraph renumber --keep tasks/12-auth.plan.md
    """
    project_root, plans_dir, config = resolve_plans_dir(tasks_dir)
    if not plans_dir.is_dir():
        print_tasks_dir_not_found_error(plans_dir)
        raise typer.Exit(ExitCode.USER_ERROR)

    preferred: list[Path] = []
    for path in keep or []:
        resolved = path.expanduser().resolve()
        if not resolved.is_file():
            print_keep_path_not_found_error(path)
            raise typer.Exit(ExitCode.USER_ERROR)
        preferred.append(resolved)

    branch_changed = None
    if config.renumber.branch_aware and not no_branch_check:
        branch_changed = get_branch_changed_files(project_root, config.renumber.trunk_branch)
    logger.debug(
        "Renumbering %s (branch-aware: %s)", plans_dir, branch_changed is not None
    )

    try:
        report = renumber_plans(
            plans_dir,
            preferred_paths=preferred,
            branch_changed=branch_changed,
            dry_run=dry_run,
        )
    except BatchWriteError as e:
        print_error(
            str(e),
            reason="No plan files were changed",
            solution="Fix the file permissions or disk problem and rerun",
        )
        raise typer.Exit(ExitCode.GENERAL_ERROR)
    except PathTraversalError as e:
        print_error(str(e), reason="A renamed plan would leave the tasks directory")
        raise typer.Exit(ExitCode.USER_ERROR)
    except RenumberError as e:
        print_error(str(e), solution="Rename the conflicting files by hand and rerun")
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    if json_output:
        sys.stdout.write(json.dumps(report.model_dump(mode="json"), indent=2))
        sys.stdout.write("\n")
    else:
        _print_report(report)

    if report.family_errors:
        raise typer.Exit(ExitCode.GENERAL_ERROR)
