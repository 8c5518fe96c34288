"""Tests for plangraph.core.plans.models."""

from datetime import datetime, timezone
from pathlib import Path

import pytest
from pydantic import ValidationError

from plangraph.core.plans.models import (
    EPOCH,
    LoadedPlan,
    PlanCollection,
    PlanPriority,
    PlanRecord,
    PlanStatus,
    priority_rank,
)


class TestPlanStatus:
    def test_actionable_statuses(self) -> None:
        assert PlanStatus.PENDING.is_actionable
        assert PlanStatus.IN_PROGRESS.is_actionable

    @pytest.mark.parametrize(
        "status", [PlanStatus.DONE, PlanStatus.CANCELLED, PlanStatus.DEFERRED]
    )
    def test_inactive_statuses(self, status: PlanStatus) -> None:
        assert not status.is_actionable


class TestPriorityRank:
    def test_order(self) -> None:
        ranks = [
            priority_rank(PlanPriority.URGENT),
            priority_rank(PlanPriority.HIGH),
            priority_rank(PlanPriority.MEDIUM),
            priority_rank(PlanPriority.LOW),
        ]
        assert ranks == sorted(ranks, reverse=True)

    def test_unset_ranks_below_low(self) -> None:
        assert priority_rank(None) < priority_rank(PlanPriority.LOW)
        assert priority_rank(None) == priority_rank(PlanPriority.MAYBE)


class TestPlanRecord:
    def test_defaults(self) -> None:
        plan = PlanRecord(id=1)
        assert plan.status == PlanStatus.PENDING
        assert plan.dependencies == []
        assert plan.tasks == []
        assert plan.parent is None

    def test_null_fields_normalized(self) -> None:
        plan = PlanRecord.model_validate(
            {"id": 2, "status": None, "dependencies": None, "tasks": None}
        )
        assert plan.status == PlanStatus.PENDING
        assert plan.dependencies == []
        assert plan.tasks == []

    def test_rejects_non_positive_id(self) -> None:
        with pytest.raises(ValidationError):
            PlanRecord(id=0)

    def test_created_at_alias(self) -> None:
        plan = PlanRecord.model_validate({"id": 1, "createdAt": "2024-03-01T10:00:00Z"})
        assert plan.created_at == datetime(2024, 3, 1, 10, tzinfo=timezone.utc)

    def test_naive_timestamp_assumed_utc(self) -> None:
        plan = PlanRecord(id=1, created_at=datetime(2024, 3, 1, 10))
        assert plan.created_at is not None
        assert plan.created_at.tzinfo == timezone.utc

    def test_label(self) -> None:
        assert PlanRecord(id=3, title="Add login").label == "3 (Add login)"
        assert PlanRecord(id=3).label == "3"

    def test_to_document_omits_empty_values(self) -> None:
        document = PlanRecord(id=4, title="Docs").to_document()
        assert document == {"id": 4, "title": "Docs", "status": "pending", "tasks": []}

    def test_to_document_keeps_unknown_keys(self) -> None:
        plan = PlanRecord.model_validate(
            {"id": 5, "assignedTo": "sam", "dependencies": [1], "createdAt": "2024-01-01T00:00:00Z"}
        )
        document = plan.to_document()
        assert document["assignedTo"] == "sam"
        assert document["dependencies"] == [1]
        assert document["createdAt"].startswith("2024-01-01T00:00:00")

    def test_string_references_coerced(self) -> None:
        plan = PlanRecord.model_validate({"id": "7", "parent": "3", "dependencies": ["1", 2]})
        assert plan.id == 7
        assert plan.parent == 3
        assert plan.dependencies == [1, 2]


class TestLoadedPlan:
    def test_created_sort_key_defaults_to_epoch(self, tmp_path: Path) -> None:
        loaded = LoadedPlan(path=tmp_path / "a.yml", record=PlanRecord(id=1))
        assert loaded.created_sort_key == (EPOCH, str(tmp_path / "a.yml"))

    def test_collection_records(self, tmp_path: Path) -> None:
        collection = PlanCollection(
            plans={1: LoadedPlan(path=tmp_path / "1.yml", record=PlanRecord(id=1, title="A"))},
            max_numeric_id=1,
        )
        assert collection.records()[1].title == "A"
