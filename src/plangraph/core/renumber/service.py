"""
Renumber pass orchestration.

Loads every plan file in the tasks directory, resolves duplicate and
missing ids, reorders out-of-order plan families, and writes the result in
a single rollback-protected batch.

Stages:
    1. Conflict resolution over every loaded file (duplicates included).
    2. Conflict assignments applied to an in-memory copy.
    3. Hierarchy reordering over that copy, whose ids are now unique.
    4. Hierarchy mapping applied, and the result diffed against disk.
    5. Transactional write (skipped for dry runs).
"""

from __future__ import annotations

import logging
from collections.abc import Collection
from pathlib import Path

from plangraph.core.plans.models import LoadedPlan, PlanRecord
from plangraph.core.plans.store import load_plan_files
from plangraph.core.renumber.conflicts import (
    assign_new_ids,
    find_plans_to_renumber,
    max_numeric_id,
)
from plangraph.core.renumber.hierarchy import find_hierarchy_reorders
from plangraph.core.renumber.models import RenumberReport
from plangraph.core.renumber.rewrite import (
    apply_conflict_assignments,
    apply_id_mapping,
    build_changes,
)
from plangraph.core.renumber.writer import TransactionalPlanWriter

logger = logging.getLogger(__name__)


def _snapshot(plans: list[LoadedPlan]) -> dict[int, PlanRecord]:
    records: dict[int, PlanRecord] = {}
    for plan in plans:
        plan_id = plan.record.id
        if plan_id is None:
            continue
        if plan_id in records:
            logger.warning("Plan id %d is still duplicated at %s", plan_id, plan.path)
        records[plan_id] = plan.record
    return records


def plan_renumbering(
    plans: list[LoadedPlan],
    root: Path,
    preferred_paths: Collection[Path] | None = None,
    branch_changed: Collection[Path] | None = None,
) -> RenumberReport:
    """
    Compute everything a renumber pass would change, without touching disk.

    Args:
        plans: Every plan file loaded from ``root``
        root: Tasks directory; target paths must stay inside it
        preferred_paths: Files that keep their id in a conflict
        branch_changed: Files changed on the current branch, or None

    Returns:
        RenumberReport with candidates, assignments, hierarchy mapping,
        per-family errors and the list of changes

    Raises:
        PathTraversalError: If a computed target escapes ``root``
        RenumberError: If target paths collide
    """
    report = RenumberReport(directory=root)

    report.candidates = find_plans_to_renumber(plans, preferred_paths, branch_changed)
    report.assignments, _ = assign_new_ids(report.candidates, max_numeric_id(plans))
    resolved = apply_conflict_assignments(plans, report.assignments)

    hierarchy = find_hierarchy_reorders(_snapshot(resolved))
    report.hierarchy_mapping = hierarchy.mapping
    report.family_errors = hierarchy.errors
    final = apply_id_mapping(resolved, hierarchy.mapping)

    report.changes = build_changes(plans, final, root)
    return report


def renumber_plans(
    directory: Path,
    *,
    preferred_paths: Collection[Path] | None = None,
    branch_changed: Collection[Path] | None = None,
    dry_run: bool = False,
    writer: TransactionalPlanWriter | None = None,
) -> RenumberReport:
    """
    Run a full renumber pass over a tasks directory.

    Args:
        directory: Tasks directory to scan recursively
        preferred_paths: Files that keep their id in a conflict
        branch_changed: Files changed on the current branch, or None
        dry_run: Compute and report changes without writing anything
        writer: Writer used to apply changes (defaults to TransactionalPlanWriter)

    Returns:
        RenumberReport; ``applied`` is True if changes were written

    Raises:
        FileNotFoundError: If the directory does not exist
        PathTraversalError: If a computed target escapes the directory
        BatchWriteError: If writing failed (everything was rolled back)

    Example:
        >>> report = renumber_plans(Path("tasks"), dry_run=True)
        >>> for change in report.changes:
        ...     print(change.source_path, change.describe())
    """
    directory = Path(directory)
    plans = load_plan_files(directory)
    report = plan_renumbering(plans, directory, preferred_paths, branch_changed)
    report.dry_run = dry_run

    if not report.changes:
        logger.info("No plans need renumbering")
        return report

    if dry_run:
        logger.info("Dry run: %d plans would change", len(report.changes))
        return report

    (writer or TransactionalPlanWriter()).apply(report.changes)
    report.applied = True
    logger.info("Renumbered %d plans", len(report.changes))
    return report
