"""
Duplicate and missing id detection.

When two plan files claim the same id, exactly one keeps it and the others
are renumbered. The file that keeps the id is chosen by, in order:

1. The caller's preferred paths (``--keep``).
2. Branch awareness: files changed on the current branch are assumed to be
   the newer, colliding additions and lose to files untouched by the branch.
3. The earliest ``createdAt`` timestamp.

Files with no usable id are always renumbered.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterable, Sequence
from pathlib import Path

from plangraph.core.plans.models import LoadedPlan
from plangraph.core.renumber.models import IdAssignment, RenumberCandidate, RenumberReason

logger = logging.getLogger(__name__)


def _norm(path: Path) -> Path:
    return Path(path).resolve()


def max_numeric_id(plans: Iterable[LoadedPlan]) -> int:
    """Highest id in use across all loaded files, or 0."""
    return max((p.record.id for p in plans if p.record.id is not None), default=0)


def _choose_keeper(
    group: Sequence[LoadedPlan],
    preferred: set[Path],
    changed: set[Path] | None,
) -> LoadedPlan:
    by_age = sorted(group, key=lambda p: p.created_sort_key)

    preferred_files = [p for p in by_age if _norm(p.path) in preferred]
    if preferred_files:
        return preferred_files[0]

    if changed is not None:
        changed_files = [p for p in by_age if _norm(p.path) in changed]
        if changed_files:
            unchanged = [p for p in by_age if _norm(p.path) not in changed]
            if unchanged:
                return unchanged[0]
            return changed_files[0]

    return by_age[0]


def _is_numeric_id(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _candidate_sort_key(candidate: RenumberCandidate) -> tuple[int, int, str]:
    original = candidate.original_id
    if _is_numeric_id(original):
        return (0, original, str(candidate.file_path))
    return (1, 0, str(candidate.file_path))


def find_plans_to_renumber(
    plans: Sequence[LoadedPlan],
    preferred_paths: Collection[Path] | None = None,
    branch_changed: Collection[Path] | None = None,
) -> list[RenumberCandidate]:
    """
    Find plan files that need a new id.

    Args:
        plans: Every loaded plan file, including duplicates
        preferred_paths: Files that should keep their id in a conflict
        branch_changed: Files changed on the current branch, or None when
            branch information is unavailable

    Returns:
        Candidates sorted by original id (numeric first), then file path
    """
    preferred = {_norm(p) for p in preferred_paths or ()}
    changed = None if branch_changed is None else {_norm(p) for p in branch_changed}

    candidates: list[RenumberCandidate] = []
    groups: dict[int, list[LoadedPlan]] = {}

    for plan in plans:
        plan_id = plan.record.id
        if plan_id is None:
            logger.debug("Plan file %s has no id", plan.path)
            candidates.append(
                RenumberCandidate(
                    file_path=plan.path,
                    original_id=plan.raw_id,
                    reason=RenumberReason.MISSING,
                )
            )
            continue
        groups.setdefault(plan_id, []).append(plan)

    for plan_id, group in groups.items():
        if len(group) < 2:
            continue
        keeper = _choose_keeper(group, preferred, changed)
        logger.debug(
            "Id %d is claimed by %d files; keeping %s", plan_id, len(group), keeper.path
        )
        for plan in group:
            if plan is keeper:
                continue
            candidates.append(
                RenumberCandidate(
                    file_path=plan.path,
                    original_id=plan_id,
                    reason=RenumberReason.CONFLICT,
                    conflicts_with=plan_id,
                )
            )

    candidates.sort(key=_candidate_sort_key)
    return candidates


def assign_new_ids(
    candidates: Sequence[RenumberCandidate],
    max_id: int,
) -> tuple[list[IdAssignment], int]:
    """
    Assign sequential ids to candidates, starting after ``max_id``.

    Pure function: the caller passes the current maximum and receives the
    new maximum back.

    Returns:
        Tuple of (assignments in candidate order, new maximum id)
    """
    assignments: list[IdAssignment] = []
    next_id = max_id
    for candidate in candidates:
        next_id += 1
        original = candidate.original_id
        assignments.append(
            IdAssignment(
                file_path=candidate.file_path,
                original_id=original if _is_numeric_id(original) else None,
                new_id=next_id,
                reason=candidate.reason,
            )
        )
    return assignments, next_id
