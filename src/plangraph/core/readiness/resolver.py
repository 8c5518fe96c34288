"""
Readiness resolution: which plan should be worked on next.

Given a root plan, the resolver walks everything the root depends on
(explicit ``dependencies`` and child plans that name it as ``parent``),
filters out plans that are finished, speculative, empty or blocked, and
picks the single best candidate. When nothing is selectable it explains
why, with a suggested next step for each reason.

The resolver never raises for "not found" or "nothing ready"; those are
returned as ``ReadinessResult(plan=None, message=...)``.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel

from plangraph.core.plans.graph import build_children_map
from plangraph.core.plans.models import (
    LoadedPlan,
    PlanPriority,
    PlanRecord,
    PlanStatus,
    priority_rank,
)
from plangraph.core.plans.store import read_all_plans

logger = logging.getLogger(__name__)

ARROW = "→ Try:"


class ReadinessResult(BaseModel):
    """Outcome of a readiness query."""

    plan: PlanRecord | None = None
    message: str
    path: Path | None = None

    @property
    def found(self) -> bool:
        return self.plan is not None


def _not_found(root_id: int) -> str:
    return (
        f"Plan not found: {root_id}\n"
        f"{ARROW} Check the plan ID is correct, or run `plangraph list` to see available plans"
    )


def _directory_not_found(directory: Path) -> str:
    return (
        f"Directory not found: {directory}\n"
        f"{ARROW} Check the path is correct and that you have read permissions for it"
    )


def _ids(plans: list[PlanRecord]) -> str:
    return ", ".join(str(p.id) for p in plans)


def discover_dependencies(
    root_id: int,
    records: Mapping[int, PlanRecord],
    children: Mapping[int, list[int]] | None = None,
) -> list[int]:
    """
    Breadth-first walk from the root through dependencies and child plans.

    Each id is visited at most once, so cycles terminate. Ids that do not
    exist are skipped. The root itself is never returned.

    Returns:
        Discovered plan ids in BFS order
    """
    if children is None:
        children = build_children_map(records)

    visited = {root_id}
    queue: deque[int] = deque()
    order: list[int] = []

    def enqueue(plan_id: int, via: int) -> None:
        if plan_id in visited:
            logger.debug("Plan %d already visited (reached again from %d)", plan_id, via)
            return
        visited.add(plan_id)
        if plan_id not in records:
            logger.debug("Dependency %d of plan %d does not exist, skipping", plan_id, via)
            return
        queue.append(plan_id)

    root = records[root_id]
    for dep in root.dependencies:
        enqueue(dep, root_id)
    for child in children.get(root_id, []):
        enqueue(child, root_id)

    while queue:
        current = queue.popleft()
        order.append(current)
        logger.debug("Examining plan %s", records[current].label)
        for dep in records[current].dependencies:
            enqueue(dep, current)
        for child in children.get(current, []):
            enqueue(child, current)

    return order


def _sort_key(plan: PlanRecord) -> tuple[int, int, int]:
    status_order = 0 if plan.status == PlanStatus.IN_PROGRESS else 1
    return (status_order, -priority_rank(plan.priority), plan.id or 0)


def _is_done(plan_id: int, records: Mapping[int, PlanRecord]) -> bool:
    plan = records.get(plan_id)
    return plan is not None and plan.status == PlanStatus.DONE


def select_next_ready(root_id: int, records: Mapping[int, PlanRecord]) -> ReadinessResult:
    """
    Pick the next actionable plan under ``root_id`` from an in-memory snapshot.

    Selection order: in-progress before pending, then priority (urgent first,
    unset last), then lowest id.
    """
    root = records.get(root_id)
    if root is None:
        return ReadinessResult(plan=None, message=_not_found(root_id))

    children = build_children_map(records)
    discovered = discover_dependencies(root_id, records, children)
    logger.debug("Discovered %d plans under %d: %s", len(discovered), root_id, discovered)
    if not discovered:
        return ReadinessResult(
            plan=None,
            message=(
                "No dependencies found for this plan\n"
                f"{ARROW} Add plan IDs to its `dependencies` list, or set `parent` on child plans"
            ),
        )

    candidates = [records[i] for i in discovered if records[i].status.is_actionable]
    for plan_id in discovered:
        if not records[plan_id].status.is_actionable:
            logger.debug(
                "Skipping plan %d: status is %s", plan_id, records[plan_id].status.value
            )

    ready: list[PlanRecord] = []
    maybe: list[PlanRecord] = []
    no_tasks: list[PlanRecord] = []
    blocked: list[PlanRecord] = []
    for plan in candidates:
        if plan.priority == PlanPriority.MAYBE:
            logger.debug("Skipping plan %d: priority is maybe", plan.id)
            maybe.append(plan)
            continue
        if not plan.tasks:
            logger.debug("Skipping plan %d: no tasks", plan.id)
            no_tasks.append(plan)
            continue
        if plan.status == PlanStatus.PENDING:
            incomplete = [d for d in plan.dependencies if not _is_done(d, records)]
            if incomplete:
                logger.debug("Skipping plan %d: waiting on %s", plan.id, incomplete)
                blocked.append(plan)
                continue
        ready.append(plan)

    if ready:
        ready.sort(key=_sort_key)
        chosen = ready[0]
        logger.debug(
            "Selected plan %d from %d ready candidates: %s",
            chosen.id,
            len(ready),
            [p.id for p in ready],
        )
        if chosen.status == PlanStatus.IN_PROGRESS:
            return ReadinessResult(plan=chosen, message=f"Found in-progress plan: {chosen.label}")
        return ReadinessResult(plan=chosen, message=f"Found ready plan: {chosen.label}")

    direct = [d for d in dict.fromkeys([*root.dependencies, *children.get(root_id, [])])]
    direct = [d for d in direct if d != root_id]
    if all(_is_done(d, records) for d in direct):
        if root.status != PlanStatus.DONE:
            return ReadinessResult(
                plan=root,
                message="All dependencies are complete - ready to work on the parent plan",
            )
        return ReadinessResult(
            plan=None,
            message=(
                "No ready dependencies found\n"
                f"All dependencies are complete and plan {root_id} is already done\n"
                f"{ARROW} Pick another plan with `plangraph next`"
            ),
        )

    lines = ["No ready dependencies found"]
    if blocked:
        lines.append(f"- Some dependencies are blocked by incomplete prerequisites ({_ids(blocked)})")
        lines.append(f"  {ARROW} Complete their prerequisites first; `plangraph list` shows their status")
    if no_tasks:
        lines.append(f"- Some dependencies have no actionable tasks ({_ids(no_tasks)})")
        lines.append(f"  {ARROW} Add tasks to these plans before working on them")
    if maybe:
        lines.append(f'- Some dependencies have "maybe" priority ({_ids(maybe)})')
        lines.append(f'  {ARROW} Review and update priorities for plans marked "maybe"')
    if not (blocked or no_tasks or maybe):
        lines.append("- Remaining dependencies are cancelled, deferred or missing")
        lines.append(f"  {ARROW} Reopen them or remove them from the dependency list")
    return ReadinessResult(plan=None, message="\n".join(lines))


def find_next_ready_dependency(root_id: int, directory: Path) -> ReadinessResult:
    """
    Find the next actionable plan under ``root_id`` in a plans directory.

    Args:
        root_id: Id of the plan whose dependencies should be searched
        directory: Tasks directory to load plans from

    Returns:
        ReadinessResult; ``plan`` is None when nothing is selectable and
        ``message`` explains why

    Example:
        >>> result = find_next_ready_dependency(1, Path("tasks"))
        >>> result.message
        'Found ready plan: 3 (Add login)'
    """
    directory = Path(directory)
    try:
        collection = read_all_plans(directory)
    except (FileNotFoundError, NotADirectoryError, PermissionError) as e:
        logger.debug("Cannot read plans directory %s: %s", directory, e)
        return ReadinessResult(plan=None, message=_directory_not_found(directory))

    result = select_next_ready(root_id, collection.records())
    if result.plan is not None and result.plan.id in collection.plans:
        result.path = collection.plans[result.plan.id].path
    return result


def find_next_plan(
    directory: Path,
    *,
    include_pending: bool = True,
    include_in_progress: bool = False,
) -> LoadedPlan | None:
    """
    Find the best plan to work on across a whole directory.

    A plan qualifies if its status is included, its priority is not
    ``maybe``, and (for pending plans) every dependency is done. Sorted the
    same way as select_next_ready().

    Raises:
        FileNotFoundError: If the directory does not exist
    """
    collection = read_all_plans(Path(directory))
    records = collection.records()

    qualifying: list[LoadedPlan] = []
    for loaded in collection.plans.values():
        plan = loaded.record
        if plan.status == PlanStatus.IN_PROGRESS and not include_in_progress:
            continue
        if plan.status == PlanStatus.PENDING and not include_pending:
            continue
        if not plan.status.is_actionable or plan.priority == PlanPriority.MAYBE:
            continue
        if plan.status == PlanStatus.PENDING and not all(
            _is_done(d, records) for d in plan.dependencies
        ):
            continue
        qualifying.append(loaded)

    if not qualifying:
        return None
    qualifying.sort(key=lambda loaded: _sort_key(loaded.record))
    return qualifying[0]
