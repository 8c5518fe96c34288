"""
Readiness resolution.

Answers "what should I work on next?" for a root plan or a whole tasks
directory.
"""

from plangraph.core.readiness.resolver import (
    ReadinessResult,
    discover_dependencies,
    find_next_plan,
    find_next_ready_dependency,
    select_next_ready,
)

__all__ = [
    "ReadinessResult",
    "discover_dependencies",
    "find_next_plan",
    "find_next_ready_dependency",
    "select_next_ready",
]
