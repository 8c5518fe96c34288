"""
Git utilities for plangraph.

Used by the renumber command to find which plan files were changed on the
current branch, so that plans created on a feature branch give up their id
when they collide with plans already on trunk.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)

TRUNK_CANDIDATES = ("main", "master")


def _git(args: list[str], cwd: Path | None) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout


def get_git_root(cwd: Path | None = None) -> Path | None:
    """Get the top-level directory of the repository containing ``cwd``.

    Returns:
        Repository root, or None if not in a git repo
    """
    try:
        return Path(_git(["rev-parse", "--show-toplevel"], cwd).strip())
    except (subprocess.CalledProcessError, FileNotFoundError):
        return None


def get_current_branch(cwd: Path | None = None) -> str | None:
    """Get the current branch name.

    Returns:
        Branch name, or None if not in a git repo or HEAD is detached
    """
    try:
        branch = _git(["rev-parse", "--abbrev-ref", "HEAD"], cwd).strip()
    except (subprocess.CalledProcessError, FileNotFoundError):
        return None
    if not branch or branch == "HEAD":
        return None
    return branch


def detect_trunk_branch(cwd: Path | None = None) -> str | None:
    """Find the trunk branch: ``main`` if it exists, otherwise ``master``.

    Returns:
        Trunk branch name, or None if neither exists
    """
    try:
        output = _git(["branch", "--list", *TRUNK_CANDIDATES], cwd)
    except (subprocess.CalledProcessError, FileNotFoundError):
        return None

    existing = {line.replace("*", "").strip() for line in output.splitlines()}
    for candidate in TRUNK_CANDIDATES:
        if candidate in existing:
            return candidate
    return None


def get_branch_changed_files(cwd: Path | None = None, trunk: str | None = None) -> set[Path] | None:
    """Get files changed on the current branch relative to trunk.

    Includes files committed since the merge base with trunk, uncommitted
    changes, and untracked files. Deleted files are not included.

    Args:
        cwd: Directory inside the repository
        trunk: Trunk branch name (auto-detected if None)

    Returns:
        Resolved absolute paths, or None when not in a repo, when the current
        branch is trunk, or when git fails

    Example:
        >>> changed = get_branch_changed_files(Path("."))
        >>> changed is None or all(p.is_absolute() for p in changed)
        True
    """
    root = get_git_root(cwd)
    if root is None:
        logger.debug("Not in a git repository, skipping branch detection")
        return None

    branch = get_current_branch(root)
    if branch is None:
        logger.debug("HEAD is detached, skipping branch detection")
        return None

    trunk = trunk or detect_trunk_branch(root)
    if trunk is None:
        logger.debug("No trunk branch found, skipping branch detection")
        return None
    if branch == trunk:
        logger.debug("On trunk branch %s, skipping branch detection", trunk)
        return None

    try:
        merge_base = _git(["merge-base", trunk, "HEAD"], root).strip()
        diffed = _git(["diff", "--name-only", "--diff-filter=d", merge_base], root)
        untracked = _git(["ls-files", "--others", "--exclude-standard"], root)
    except (subprocess.CalledProcessError, FileNotFoundError) as e:
        logger.warning("Could not list files changed on branch %s: %s", branch, e)
        return None

    changed = {
        (root / line.strip()).resolve()
        for line in (*diffed.splitlines(), *untracked.splitlines())
        if line.strip()
    }
    logger.debug("%d files changed on branch %s since %s", len(changed), branch, trunk)
    return changed
