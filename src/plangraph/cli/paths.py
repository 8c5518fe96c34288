"""
Tasks directory resolution shared by CLI commands.
"""

from pathlib import Path

from plangraph.core.config import load_config, resolve_tasks_dir
from plangraph.core.config.models import PlangraphConfig
from plangraph.utils.project import get_project_root


def resolve_plans_dir(tasks_dir: Path | None) -> tuple[Path, Path, PlangraphConfig]:
    """
    Work out the project root, tasks directory and config for a command.

    An explicit ``--tasks-dir`` wins over ``paths.tasks`` from config.

    Returns:
        (project_root, tasks_dir, config)
    """
    project_root = get_project_root()
    config = load_config(project_root)
    if tasks_dir is not None:
        return project_root, tasks_dir.expanduser().resolve(), config
    return project_root, resolve_tasks_dir(project_root, config).resolve(), config
