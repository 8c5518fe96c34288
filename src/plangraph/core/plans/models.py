"""
Plan data models.

These Pydantic models describe a single plan file: a unit of work with an
id, an optional parent, an explicit dependency list, a status, a priority
and a list of tasks. Unknown keys are preserved so that a load/write round
trip never drops data owned by other tools.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PlanStatus(str, Enum):
    """Lifecycle status of a plan."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    CANCELLED = "cancelled"
    DEFERRED = "deferred"

    @property
    def is_actionable(self) -> bool:
        """True for statuses the readiness resolver will consider."""
        return self in (PlanStatus.PENDING, PlanStatus.IN_PROGRESS)


class PlanPriority(str, Enum):
    """
    Priority of a plan.

    ``maybe`` marks speculative work; it ranks with an unset priority and is
    never selected as the next unit of work.
    """

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"
    MAYBE = "maybe"

    @property
    def rank(self) -> int:
        """Numeric rank, higher is more important."""
        return _PRIORITY_RANKS[self]


_PRIORITY_RANKS = {
    PlanPriority.URGENT: 4,
    PlanPriority.HIGH: 3,
    PlanPriority.MEDIUM: 2,
    PlanPriority.LOW: 1,
    PlanPriority.MAYBE: 0,
}


def priority_rank(priority: PlanPriority | None) -> int:
    """Rank a possibly-unset priority. Unset ranks below ``low``."""
    if priority is None:
        return 0
    return priority.rank


class PlanTask(BaseModel):
    """A single task inside a plan."""

    model_config = ConfigDict(extra="allow")

    title: str = ""
    description: str = ""
    done: bool = False


class PlanRecord(BaseModel):
    """
    A plan as stored on disk.

    ``id`` may be absent on freshly imported files; the renumber pass assigns
    one. ``parent`` and ``dependencies`` are references to other plans' ids
    and are not validated against the record set here: dangling references,
    duplicates and self-references are tolerated and handled by the graph
    algorithms.

    Example:
        >>> plan = PlanRecord(id=3, title="Add login", parent=1, dependencies=[2])
        >>> plan.status
        <PlanStatus.PENDING: 'pending'>
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: int | None = Field(default=None, ge=1)
    title: str | None = None
    goal: str | None = None
    details: str | None = None
    parent: int | None = None
    dependencies: list[int] = Field(default_factory=list)
    status: PlanStatus = PlanStatus.PENDING
    priority: PlanPriority | None = None
    tasks: list[PlanTask] = Field(default_factory=list)
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")

    @field_validator("dependencies", "tasks", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        if v is None:
            return []
        return v

    @field_validator("status", mode="before")
    @classmethod
    def default_status(cls, v: Any) -> Any:
        if v is None:
            return PlanStatus.PENDING
        return v

    @field_validator("created_at", "updated_at")
    @classmethod
    def assume_utc(cls, v: datetime | None) -> datetime | None:
        """Naive timestamps are taken as UTC so they compare with aware ones."""
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @property
    def label(self) -> str:
        """Short human-readable label: ``12 (Title)``."""
        if self.title:
            return f"{self.id} ({self.title})"
        return str(self.id)

    def to_document(self) -> dict[str, Any]:
        """
        Convert to the key-ordered mapping written to disk.

        ``None`` values and an empty dependency list are omitted.
        """
        data = self.model_dump(by_alias=True, exclude_none=True, mode="json")
        if not data.get("dependencies"):
            data.pop("dependencies", None)
        return data


EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class LoadedPlan(BaseModel):
    """
    A plan record together with where it came from.

    ``raw_id`` is the ``id`` value exactly as found in the file before
    validation; it may be absent or non-numeric, in which case
    ``record.id`` is None.
    """

    path: Path
    record: PlanRecord
    raw_id: Any = None

    @property
    def created_sort_key(self) -> tuple[datetime, str]:
        """Sort key: earliest ``createdAt`` first, path as tie-break."""
        return (self.record.created_at or EPOCH, str(self.path))


class PlanCollection(BaseModel):
    """Result of a bulk load keyed by plan id."""

    plans: dict[int, LoadedPlan] = Field(default_factory=dict)
    max_numeric_id: int = 0

    def records(self) -> dict[int, PlanRecord]:
        """Map of id to record, without file information."""
        return {plan_id: loaded.record for plan_id, loaded in self.plans.items()}
