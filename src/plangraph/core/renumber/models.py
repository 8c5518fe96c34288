"""
Data models for the renumber pass.

The pass never mutates loaded plans in place. Each stage returns one of
these models, and only the final list of PlanChange objects is written.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from plangraph.core.plans.models import PlanRecord


class RenumberReason(str, Enum):
    """Why a plan file needs a new id."""

    MISSING = "missing"
    CONFLICT = "conflict"


class RenumberCandidate(BaseModel):
    """A plan file that must receive a new id."""

    file_path: Path
    original_id: Any = None
    reason: RenumberReason
    conflicts_with: int | None = None


class IdAssignment(BaseModel):
    """A new id assigned to a specific file by conflict resolution."""

    file_path: Path
    original_id: int | None = None
    new_id: int
    reason: RenumberReason


class FamilyError(BaseModel):
    """A family that could not be reordered."""

    family_root: int
    ids: list[int] = Field(default_factory=list)
    message: str


class HierarchyResult(BaseModel):
    """Merged id mapping for all reorderable families plus per-family errors."""

    mapping: dict[int, int] = Field(default_factory=dict)
    errors: list[FamilyError] = Field(default_factory=list)


class PlanChange(BaseModel):
    """A plan that must be (re)written, possibly under a new path."""

    source_path: Path
    target_path: Path
    original_id: int | None = None
    previous: PlanRecord
    record: PlanRecord

    @property
    def is_rename(self) -> bool:
        return self.source_path != self.target_path

    @property
    def id_changed(self) -> bool:
        return self.previous.id != self.record.id

    def describe(self) -> list[str]:
        """Human-readable list of what changed."""
        notes: list[str] = []
        if self.id_changed:
            notes.append(f"id {self.previous.id or 'missing'} → {self.record.id}")
        if self.previous.parent != self.record.parent:
            notes.append(f"parent {self.previous.parent} → {self.record.parent}")
        if self.previous.dependencies != self.record.dependencies:
            notes.append(
                f"dependencies {self.previous.dependencies} → {self.record.dependencies}"
            )
        if self.previous.status != self.record.status:
            notes.append(f"status {self.previous.status.value} → {self.record.status.value}")
        return notes


class RenumberReport(BaseModel):
    """Outcome of a full renumber pass."""

    directory: Path
    candidates: list[RenumberCandidate] = Field(default_factory=list)
    assignments: list[IdAssignment] = Field(default_factory=list)
    hierarchy_mapping: dict[int, int] = Field(default_factory=dict)
    family_errors: list[FamilyError] = Field(default_factory=list)
    changes: list[PlanChange] = Field(default_factory=list)
    dry_run: bool = False
    applied: bool = False

    @property
    def needs_changes(self) -> bool:
        return bool(self.changes)
