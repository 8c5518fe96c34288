"""Utility helpers for plangraph."""

from plangraph.utils.git import (
    detect_trunk_branch,
    get_branch_changed_files,
    get_current_branch,
    get_git_root,
)
from plangraph.utils.project import find_project_root, get_project_root

__all__ = [
    "detect_trunk_branch",
    "find_project_root",
    "get_branch_changed_files",
    "get_current_branch",
    "get_git_root",
    "get_project_root",
]
