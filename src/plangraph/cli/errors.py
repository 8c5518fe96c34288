"""
Standardized error handling and exit codes for the plangraph CLI.

Consistent error messaging with actionable guidance and standardized exit
codes across all commands.
"""

from enum import IntEnum
from pathlib import Path

from rich.console import Console

console = Console()


class ExitCode(IntEnum):
    """Standard exit codes for plangraph CLI operations."""

    SUCCESS = 0
    """Operation completed successfully."""

    GENERAL_ERROR = 1
    """Operation failed, or nothing could be selected."""

    USER_ERROR = 2
    """User configuration or input error (actionable by user)."""

    SIGINT = 130
    """Terminated by SIGINT (Ctrl+C) - Unix standard."""


def print_error(
    problem: str,
    *,
    reason: str | None = None,
    solution: str | None = None,
) -> None:
    """
    Print a standardized error message with actionable guidance.

    Args:
        problem: Brief description of what went wrong
        reason: Optional explanation of why it happened
        solution: Optional command or action to fix it

    Example:
        >>> print_error(
        ...     "Tasks directory not found: tasks",
        ...     solution="plangraph --help",
        ... )
    """
    console.print(f"[red]Error:[/red] {problem}", highlight=False)

    if reason:
        console.print(f"[dim]{reason}[/dim]", highlight=False)

    if solution:
        console.print(f"[cyan]→ Try:[/cyan] {solution}", highlight=False)


def print_tasks_dir_not_found_error(path: Path) -> None:
    """Print error when the tasks directory does not exist."""
    print_error(
        f"Tasks directory not found: {path}",
        reason="Plan files are read from paths.tasks in .plangraph.json (default: tasks)",
        solution="plangraph <command> --tasks-dir PATH  # or set PLANGRAPH_TASKS_DIR",
    )


def print_keep_path_not_found_error(path: Path) -> None:
    """Print error when a --keep path does not exist."""
    print_error(
        f"Plan file not found: {path}",
        reason="--keep must name an existing plan file",
        solution="Check the path is correct",
    )


def print_invalid_option_error(option: str, value: str, valid: list[str]) -> None:
    """Print error for an option value outside the accepted set."""
    print_error(
        f"Invalid {option}: {value}",
        solution=f"Use one of: {', '.join(valid)}",
    )
