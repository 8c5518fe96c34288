"""
Project root discovery utilities for plangraph.

A project root is the nearest directory containing a .plangraph.json
config file or a .git repository.
"""

from pathlib import Path

# Markers that indicate a project root, in order of priority
PROJECT_ROOT_MARKERS = [
    ".plangraph.json",  # plangraph configuration file
    ".git",  # Git repository
]


def find_project_root(start: Path | None = None) -> Path | None:
    """
    Find the project root directory by searching upward for marker files.

    Args:
        start: Directory to start searching from. Defaults to current working directory.

    Returns:
        Path to the project root directory, or None if not found.

    Example:
        >>> find_project_root(Path("/project/tasks/auth"))
        PosixPath('/project')
    """
    if start is None:
        start = Path.cwd()

    start = start.resolve()

    for current in (start, *start.parents):
        for marker in PROJECT_ROOT_MARKERS:
            if (current / marker).exists():
                return current

    return None


def get_project_root(start: Path | None = None) -> Path:
    """
    Get the project root directory, falling back to the start directory.

    Plans can be managed outside any repository, so a missing marker is not
    an error here.

    Args:
        start: Directory to start searching from. Defaults to current working directory.

    Returns:
        Path to the project root directory.
    """
    root = find_project_root(start)
    if root is None:
        return (start or Path.cwd()).resolve()
    return root
