"""
Reference rewriting for the renumber pass.

Applies id mappings to plan snapshots and turns the difference between the
loaded plans and the rewritten plans into a list of PlanChange objects,
including any file or directory renames implied by the new ids.

Two kinds of mapping are applied:

* Conflict assignments are per file. Only the flagged files get new ids,
  and references are only rewritten inside those files (a batch of
  colliding plans is assumed to reference its own members).
* Hierarchy mappings are global. Every ``id``, ``parent`` and
  ``dependencies`` entry that appears as a key is rewritten.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path

from plangraph.core.plans.models import LoadedPlan, PlanStatus
from plangraph.core.renumber.errors import PathTraversalError, RenumberError
from plangraph.core.renumber.models import IdAssignment, PlanChange, RenumberReason

logger = logging.getLogger(__name__)


def _path_key(path: Path) -> Path:
    return Path(path).resolve()


def apply_conflict_assignments(
    plans: Sequence[LoadedPlan],
    assignments: Sequence[IdAssignment],
) -> list[LoadedPlan]:
    """
    Give flagged files their new ids and fix references among them.

    Inside each renumbered file, ``parent`` and ``dependencies`` entries that
    name another renumbered plan's old id are pointed at its new id. When a
    renumbered plan depends on a plan whose ``parent`` is the renumbered
    plan's old id, that parent reference is updated too.

    A file renumbered because it had no id is also marked done.

    Returns:
        New LoadedPlan objects in the same order; the inputs are not modified
    """
    by_path = {_path_key(a.file_path): a for a in assignments}
    old_to_new: dict[int, int] = {}
    for assignment in assignments:
        if assignment.original_id is not None:
            old_to_new.setdefault(assignment.original_id, assignment.new_id)

    result: list[LoadedPlan] = []
    for plan in plans:
        assignment = by_path.get(_path_key(plan.path))
        if assignment is None:
            result.append(plan)
            continue

        record = plan.record
        update: dict[str, object] = {"id": assignment.new_id}
        if assignment.reason == RenumberReason.MISSING:
            update["status"] = PlanStatus.DONE
        if record.parent is not None:
            update["parent"] = old_to_new.get(record.parent, record.parent)
        update["dependencies"] = [old_to_new.get(d, d) for d in record.dependencies]

        logger.debug(
            "Renumbered %s → %d in %s",
            assignment.original_id or "missing",
            assignment.new_id,
            plan.path,
        )
        result.append(plan.model_copy(update={"record": record.model_copy(update=update)}))

    index_by_id: dict[int, int] = {}
    for position, plan in enumerate(result):
        if plan.record.id is not None:
            index_by_id[plan.record.id] = position

    for assignment in assignments:
        if assignment.original_id is None:
            continue
        renumbered = result[index_by_id[assignment.new_id]].record
        for dep in renumbered.dependencies:
            position = index_by_id.get(dep)
            if position is None:
                continue
            child = result[position]
            if child.record.parent == assignment.original_id:
                logger.debug("Updated parent in %s", child.path.name)
                result[position] = child.model_copy(
                    update={
                        "record": child.record.model_copy(
                            update={"parent": assignment.new_id}
                        )
                    }
                )

    return result


def apply_id_mapping(
    plans: Sequence[LoadedPlan],
    mapping: Mapping[int, int],
) -> list[LoadedPlan]:
    """Rewrite every id, parent and dependency found in ``mapping``."""
    if not mapping:
        return list(plans)

    result: list[LoadedPlan] = []
    for plan in plans:
        record = plan.record
        new_id = mapping.get(record.id, record.id) if record.id is not None else None
        new_parent = mapping.get(record.parent, record.parent) if record.parent is not None else None
        new_deps = [mapping.get(d, d) for d in record.dependencies]

        if (new_id, new_parent, new_deps) == (record.id, record.parent, record.dependencies):
            result.append(plan)
            continue

        updated = record.model_copy(
            update={"id": new_id, "parent": new_parent, "dependencies": new_deps}
        )
        result.append(plan.model_copy(update={"record": updated}))
    return result


def _id_token(plan: LoadedPlan) -> str | None:
    """The id as it could appear in the plan's filename."""
    if plan.record.id is not None:
        return str(plan.record.id)
    if plan.raw_id is not None and str(plan.raw_id).strip():
        return str(plan.raw_id).strip()
    return None


def compute_target_path(
    path: Path,
    root: Path,
    old_id: str | None,
    new_id: int | None,
    old_parent: int | None,
    new_parent: int | None,
) -> Path:
    """
    Work out where a rewritten plan should live.

    ``{old_id}-slug.yml`` becomes ``{new_id}-slug.yml``, and directory
    segments below ``root`` named ``{old_parent}-…`` become
    ``{new_parent}-…``.
    """
    name = path.name
    if old_id is not None and new_id is not None and old_id != str(new_id):
        prefix = f"{old_id}-"
        if name.startswith(prefix):
            name = f"{new_id}-{name[len(prefix):]}"

    directory = path.parent
    if old_parent is not None and new_parent is not None and old_parent != new_parent:
        try:
            relative = directory.relative_to(root)
        except ValueError:
            relative = None
        if relative is not None and relative.parts:
            prefix = f"{old_parent}-"
            parts = [
                f"{new_parent}-{part[len(prefix):]}" if part.startswith(prefix) else part
                for part in relative.parts
            ]
            directory = root.joinpath(*parts)

    return directory / name


def ensure_within_root(path: Path, root: Path) -> Path:
    """
    Reject paths that resolve outside ``root``.

    Raises:
        PathTraversalError: If the path escapes the root directory
    """
    resolved = Path(path).resolve()
    root_resolved = Path(root).resolve()
    if not resolved.is_relative_to(root_resolved):
        raise PathTraversalError(Path(path), Path(root))
    return resolved


def build_changes(
    originals: Sequence[LoadedPlan],
    rewritten: Sequence[LoadedPlan],
    root: Path,
) -> list[PlanChange]:
    """
    Diff loaded plans against their rewritten versions.

    Args:
        originals: Plans as loaded from disk
        rewritten: The same plans, same order, after all mappings
        root: Tasks directory every target must stay inside

    Returns:
        One PlanChange per plan whose id, parent, dependencies or status changed

    Raises:
        PathTraversalError: If a target path escapes ``root``
        RenumberError: If two plans would be written to the same path, or a
            target would overwrite a file that is not part of the batch
    """
    if len(originals) != len(rewritten):
        raise ValueError("originals and rewritten plans must line up")

    changes: list[PlanChange] = []
    for original, final in zip(originals, rewritten):
        before, after = original.record, final.record
        if (before.id, before.parent, before.dependencies, before.status) == (
            after.id,
            after.parent,
            after.dependencies,
            after.status,
        ):
            continue

        target = compute_target_path(
            original.path,
            root,
            _id_token(original),
            after.id,
            before.parent,
            after.parent,
        )
        ensure_within_root(target, root)
        changes.append(
            PlanChange(
                source_path=original.path,
                target_path=target,
                original_id=before.id,
                previous=before,
                record=after,
            )
        )

    _check_collisions(changes)
    return changes


def _check_collisions(changes: Sequence[PlanChange]) -> None:
    sources = {_path_key(c.source_path) for c in changes}
    seen: dict[Path, Path] = {}
    for change in changes:
        target = _path_key(change.target_path)
        if target in seen:
            raise RenumberError(
                f"Both {seen[target]} and {change.source_path} would be written to "
                f"{change.target_path}"
            )
        seen[target] = change.source_path
        if change.is_rename and target.exists() and target not in sources:
            raise RenumberError(
                f"Renaming {change.source_path} would overwrite existing file "
                f"{change.target_path}"
            )
