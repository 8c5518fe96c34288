"""
plangraph - dependency-graph maintenance for plan files.

Keeps plan ids unique and ordered, rewrites cross-references when ids
move, and picks the next plan that is ready to work on.
"""

__version__ = "0.1.0"

# Re-export core models for convenience
from plangraph.core.config.models import PlangraphConfig
from plangraph.core.plans.models import PlanPriority, PlanRecord, PlanStatus

__all__ = ["PlangraphConfig", "PlanPriority", "PlanRecord", "PlanStatus", "__version__"]
