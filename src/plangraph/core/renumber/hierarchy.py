"""
Hierarchical reordering of plan families.

A family is a root plan plus every plan reachable from it through
parent→child links. Within a family, a parent must have a smaller id than
its children, and a plan's in-family dependencies must have smaller ids
than the plan itself. When a family violates this, its members are
topologically sorted and the family's own ids are handed out again in that
order, so the set of ids the family uses never changes.

All traversals are bounded by visited sets so that cyclic parent or
dependency data terminates; a cycle in the edges used for sorting raises
DependencyCycleError for that family only.

Example::

    result = find_hierarchy_reorders(collection.records())
    # {5: 3, 3: 5} swaps a child that was numbered before its parent
    result.mapping
"""

from __future__ import annotations

import heapq
import logging
from collections.abc import Mapping, Sequence

from plangraph.core.plans.graph import find_root_ancestor
from plangraph.core.plans.models import PlanRecord
from plangraph.core.renumber.errors import DependencyCycleError
from plangraph.core.renumber.models import FamilyError, HierarchyResult

logger = logging.getLogger(__name__)


def group_families(records: Mapping[int, PlanRecord]) -> dict[int, list[int]]:
    """Group plan ids by root ancestor. Singleton families are included."""
    families: dict[int, list[int]] = {}
    for plan_id in sorted(records):
        root = find_root_ancestor(plan_id, records)
        families.setdefault(root, []).append(plan_id)
    return families


def _ordering_edges(
    members: Sequence[int], records: Mapping[int, PlanRecord]
) -> list[tuple[int, int]]:
    """(before, after) pairs for parent and in-family dependency edges."""
    member_set = set(members)
    edges: list[tuple[int, int]] = []
    for plan_id in members:
        record = records[plan_id]
        if record.parent is not None and record.parent != plan_id and record.parent in member_set:
            edges.append((record.parent, plan_id))
        for dep in record.dependencies:
            if dep != plan_id and dep in member_set:
                edges.append((dep, plan_id))
    return edges


def is_family_disordered(members: Sequence[int], records: Mapping[int, PlanRecord]) -> bool:
    """True if any parent or in-family dependency id is not below its dependent's id."""
    return any(before >= after for before, after in _ordering_edges(members, records))


def topological_sort(
    members: Sequence[int],
    records: Mapping[int, PlanRecord],
    family_root: int | None = None,
) -> list[int]:
    """
    Order family members so parents and dependencies come first.

    Kahn's algorithm; among the nodes that are ready at any point the lowest
    id is taken first, so an already ordered family keeps its order.

    Raises:
        DependencyCycleError: If some members can never be ordered
    """
    successors: dict[int, set[int]] = {m: set() for m in members}
    in_degree: dict[int, int] = {m: 0 for m in members}
    for before, after in _ordering_edges(members, records):
        if after not in successors[before]:
            successors[before].add(after)
            in_degree[after] += 1

    ready = [m for m in members if in_degree[m] == 0]
    heapq.heapify(ready)
    order: list[int] = []
    while ready:
        node = heapq.heappop(ready)
        order.append(node)
        for successor in successors[node]:
            in_degree[successor] -= 1
            if in_degree[successor] == 0:
                heapq.heappush(ready, successor)

    if len(order) != len(members):
        unresolved = [m for m in members if in_degree[m] > 0]
        root = family_root if family_root is not None else min(members)
        raise DependencyCycleError(root, unresolved)
    return order


def reorder_family(
    members: Sequence[int],
    records: Mapping[int, PlanRecord],
    family_root: int | None = None,
) -> dict[int, int]:
    """
    Compute old-id → new-id for one family.

    The family's own ids, sorted, are assigned positionally to the
    topological order. Unchanged ids are left out of the mapping.
    """
    order = topological_sort(members, records, family_root)
    available = sorted(members)
    return {old: new for old, new in zip(order, available) if old != new}


def find_hierarchy_reorders(records: Mapping[int, PlanRecord]) -> HierarchyResult:
    """
    Reorder every disordered family in a snapshot of uniquely-keyed plans.

    A cycle in one family is recorded in ``errors`` and does not stop other
    families from being processed.
    """
    result = HierarchyResult()
    for root, grouped in group_families(records).items():
        if len(grouped) < 2:
            continue
        if not is_family_disordered(grouped, records):
            continue

        logger.debug("Family rooted at %d is out of order: %s", root, grouped)
        try:
            mapping = reorder_family(grouped, records, root)
        except DependencyCycleError as e:
            logger.warning("%s", e)
            result.errors.append(
                FamilyError(family_root=root, ids=e.ids, message=str(e))
            )
            continue

        for old, new in mapping.items():
            logger.debug("Reordering plan %d → %d", old, new)
        result.mapping.update(mapping)

    return result
