"""
Plan renumbering.

Repairs duplicate or missing plan ids and parent/dependency ordering
violations, rewriting every cross-reference and renaming files whose names
embed an id.

Public API:
    - renumber_plans: Run a full pass over a tasks directory
    - plan_renumbering: Compute a pass without touching disk
    - find_plans_to_renumber / assign_new_ids: Conflict resolution
    - find_hierarchy_reorders / topological_sort: Family reordering
    - TransactionalPlanWriter: All-or-nothing batch writes
"""

from plangraph.core.renumber.conflicts import assign_new_ids, find_plans_to_renumber
from plangraph.core.renumber.errors import (
    BatchWriteError,
    DependencyCycleError,
    PathTraversalError,
    RenumberError,
)
from plangraph.core.renumber.hierarchy import find_hierarchy_reorders, topological_sort
from plangraph.core.renumber.models import (
    FamilyError,
    HierarchyResult,
    IdAssignment,
    PlanChange,
    RenumberCandidate,
    RenumberReason,
    RenumberReport,
)
from plangraph.core.renumber.service import plan_renumbering, renumber_plans
from plangraph.core.renumber.writer import TransactionalPlanWriter

__all__ = [
    # Models
    "FamilyError",
    "HierarchyResult",
    "IdAssignment",
    "PlanChange",
    "RenumberCandidate",
    "RenumberReason",
    "RenumberReport",
    # Errors
    "BatchWriteError",
    "DependencyCycleError",
    "PathTraversalError",
    "RenumberError",
    # Functions
    "assign_new_ids",
    "find_hierarchy_reorders",
    "find_plans_to_renumber",
    "plan_renumbering",
    "renumber_plans",
    "topological_sort",
    # Writer
    "TransactionalPlanWriter",
]
