"""
Transactional writer for renumbered plans.

Writes a batch of PlanChange objects so that a failure part-way through
leaves the tasks directory as it was before the batch started.

Every existing file is copied to a timestamped backup beside it
(``.<name>.backup-<timestamp>``) before it is first overwritten or
deleted. Backups are only removed once the whole batch has succeeded; on
failure every touched path is restored from its backup, or deleted if it
did not exist before, in reverse order. Backup names start with a dot, so
plan scans never pick them up.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from plangraph.core.plans.models import PlanRecord
from plangraph.core.plans.store import write_plan_file
from plangraph.core.renumber.errors import BatchWriteError
from plangraph.core.renumber.models import PlanChange

logger = logging.getLogger(__name__)

WriteFunc = Callable[[Path, PlanRecord], None]


@dataclass
class _Touched:
    """A path mutated by the batch and how to restore it."""

    path: Path
    backup: Path | None


class TransactionalPlanWriter:
    """
    Apply a batch of plan changes all-or-nothing.

    Example:
        >>> writer = TransactionalPlanWriter()
        >>> written = writer.apply(report.changes)
    """

    def __init__(self, write_func: WriteFunc | None = None) -> None:
        """
        Initialize the writer.

        Args:
            write_func: Serializer used for each plan (defaults to write_plan_file)
        """
        self._write = write_func or write_plan_file
        self._stamp = ""
        self._touched: list[_Touched] = []
        self._touched_keys: set[Path] = set()
        self._created_dirs: list[Path] = []

    def _backup_path(self, path: Path) -> Path:
        return path.with_name(f".{path.name}.backup-{self._stamp}")

    def _touch(self, path: Path) -> None:
        """Record ``path`` before its first mutation, backing it up if it exists."""
        key = path.resolve()
        if key in self._touched_keys:
            return
        backup: Path | None = None
        if path.exists():
            backup = self._backup_path(path)
            shutil.copy2(path, backup)
            logger.debug("Backed up %s to %s", path, backup)
        self._touched.append(_Touched(path=path, backup=backup))
        self._touched_keys.add(key)

    def _ensure_dir(self, directory: Path) -> None:
        missing: list[Path] = []
        current = directory
        while not current.exists():
            missing.append(current)
            current = current.parent
        directory.mkdir(parents=True, exist_ok=True)
        self._created_dirs.extend(reversed(missing))

    def apply(self, changes: Sequence[PlanChange]) -> list[Path]:
        """
        Write every change, renaming files where the target path differs.

        A renamed plan's source file is only deleted if no other change in the
        batch writes to that path, so plans can swap filenames.

        Returns:
            The paths written, in order

        Raises:
            BatchWriteError: If any step fails; the batch is rolled back first
        """
        self._stamp = datetime.now().strftime("%Y%m%dT%H%M%S%f")
        self._touched = []
        self._touched_keys = set()
        self._created_dirs = []

        targets = {c.target_path.resolve() for c in changes}
        written: list[Path] = []
        current: Path | None = None

        try:
            for change in changes:
                current = change.source_path
                self._ensure_dir(change.target_path.parent)

                if change.is_rename:
                    self._touch(change.source_path)
                self._touch(change.target_path)

                self._write(change.target_path, change.record)
                written.append(change.target_path)

                if change.is_rename and change.source_path.resolve() not in targets:
                    change.source_path.unlink()
                    logger.debug("Moved %s → %s", change.source_path, change.target_path)
        except Exception as e:
            logger.error("Writing %s failed, rolling back %d files", current, len(self._touched))
            self._rollback()
            raise BatchWriteError(current or Path("."), e) from e

        self._discard_backups()
        return written

    def _rollback(self) -> None:
        for touched in reversed(self._touched):
            try:
                if touched.backup is not None:
                    touched.path.parent.mkdir(parents=True, exist_ok=True)
                    shutil.copy2(touched.backup, touched.path)
                    touched.backup.unlink()
                elif touched.path.exists():
                    touched.path.unlink()
            except OSError as e:
                logger.error(
                    "Could not restore %s (backup kept at %s): %s",
                    touched.path,
                    touched.backup,
                    e,
                )

        for directory in reversed(self._created_dirs):
            try:
                directory.rmdir()
            except OSError:
                logger.debug("Leaving non-empty directory %s", directory)

    def _discard_backups(self) -> None:
        for touched in self._touched:
            if touched.backup is not None:
                touched.backup.unlink(missing_ok=True)
