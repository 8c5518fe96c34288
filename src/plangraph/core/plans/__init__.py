"""
Plan models and file storage.

Provides the PlanRecord model with its status/priority enums, and the
store functions that read, write and bulk-load plan files.
"""

from plangraph.core.plans.models import (
    LoadedPlan,
    PlanCollection,
    PlanPriority,
    PlanRecord,
    PlanStatus,
    PlanTask,
    priority_rank,
)
from plangraph.core.plans.store import (
    PlanFileError,
    load_plan_files,
    read_all_plans,
    read_plan_file,
    scan_plan_files,
    write_plan_file,
)

__all__ = [
    # Models
    "LoadedPlan",
    "PlanCollection",
    "PlanPriority",
    "PlanRecord",
    "PlanStatus",
    "PlanTask",
    "priority_rank",
    # Store
    "PlanFileError",
    "load_plan_files",
    "read_all_plans",
    "read_plan_file",
    "scan_plan_files",
    "write_plan_file",
]
