"""
plangraph CLI - Main application entry point.

This module sets up the Typer CLI application with all subcommands.
"""

import logging
import sys

import typer
from rich.console import Console

from plangraph import __version__
from plangraph.cli import list_cmd, next_cmd, renumber
from plangraph.core.config.env import load_layered_env
from plangraph.utils.project import get_project_root

app = typer.Typer(
    name="plangraph",
    help="Keep plan ids unique and ordered, and find the next plan to work on",
    no_args_is_help=True,
    add_completion=False,
    context_settings={"help_option_names": ["--help", "-h"]},
)

console = Console()


def setup_logging(debug: bool = False) -> None:
    """
    Configure logging for all commands.

    Args:
        debug: If True, enable DEBUG level logging
    """
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output with detailed logging",
    ),
) -> None:
    """
    plangraph - plan dependency graph tools.

    Plans are YAML or Markdown-frontmatter files with an id, an optional
    parent, and a list of dependencies.

    Common Workflows:
        plangraph renumber --dry-run   # Preview id fixes
        plangraph renumber             # Fix duplicate/missing ids
        plangraph next 12              # Next ready dependency of plan 12
        plangraph list                 # All plans
    """
    setup_logging(debug)
    load_layered_env(project_dir=get_project_root())
    ctx.obj = {"debug": debug}


app.command(name="renumber")(renumber.renumber)
app.command(name="next")(next_cmd.next_plan)
app.command(name="list")(list_cmd.list_plans)


@app.command()
def version() -> None:
    """Show plangraph version and exit."""
    console.print(f"plangraph version {__version__}")
    raise typer.Exit(0)


def cli_main() -> None:
    """Main CLI entry point."""
    app()


__all__ = ["app", "cli_main"]
