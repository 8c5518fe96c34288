"""
Exceptions raised by the renumber pass.
"""

from __future__ import annotations

from pathlib import Path


class RenumberError(Exception):
    """Base class for renumbering failures."""

    pass


class DependencyCycleError(RenumberError):
    """Raised when a family's parent/dependency edges contain a cycle."""

    def __init__(self, family_root: int, ids: list[int]) -> None:
        self.family_root = family_root
        self.ids = sorted(ids)
        joined = ", ".join(str(i) for i in self.ids)
        super().__init__(
            f"Cycle detected in plan family rooted at {family_root}: "
            f"could not order plans {joined}"
        )


class PathTraversalError(RenumberError):
    """Raised when a computed target path escapes the tasks directory."""

    def __init__(self, path: Path, root: Path) -> None:
        self.path = path
        self.root = root
        super().__init__(f"Refusing to write {path}: outside of {root}")


class BatchWriteError(RenumberError):
    """Raised after a failed write batch has been rolled back."""

    def __init__(self, path: Path, cause: BaseException) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to write {path}: {cause} (all changes rolled back)")
