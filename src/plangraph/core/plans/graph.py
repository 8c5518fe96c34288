"""
Parent/child graph helpers shared by the renumber pass and the readiness
resolver.

Only parent references that point at an existing plan, and not at the plan
itself, count as edges.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from plangraph.core.plans.models import PlanRecord

logger = logging.getLogger(__name__)


def valid_parent(plan_id: int, records: Mapping[int, PlanRecord]) -> int | None:
    """Return the plan's parent id if it refers to another existing plan."""
    parent = records[plan_id].parent
    if parent is None or parent == plan_id or parent not in records:
        return None
    return parent


def build_children_map(records: Mapping[int, PlanRecord]) -> dict[int, list[int]]:
    """Map each existing parent id to its direct children, ids ascending."""
    children: dict[int, list[int]] = {}
    for plan_id in sorted(records):
        parent = valid_parent(plan_id, records)
        if parent is not None:
            children.setdefault(parent, []).append(plan_id)
    return children


def find_root_ancestor(plan_id: int, records: Mapping[int, PlanRecord]) -> int:
    """
    Walk parent links upward to the topmost ancestor.

    On a parent cycle the walk stops at the last id that had not been
    visited yet.
    """
    visited = {plan_id}
    current = plan_id
    while True:
        parent = valid_parent(current, records)
        if parent is None:
            return current
        if parent in visited:
            logger.warning("Parent cycle detected while walking up from plan %d", plan_id)
            return current
        visited.add(parent)
        current = parent
