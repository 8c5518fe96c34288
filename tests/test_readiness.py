"""Tests for readiness resolution (next ready dependency / next plan)."""

from __future__ import annotations

from pathlib import Path

import pytest

from plangraph.core.plans.models import PlanPriority, PlanRecord, PlanStatus
from plangraph.core.readiness import (
    discover_dependencies,
    find_next_plan,
    find_next_ready_dependency,
    select_next_ready,
)

TASKS = [{"title": "Do the work"}]

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _p(
    plan_id: int,
    *,
    deps: list[int] | None = None,
    parent: int | None = None,
    status: PlanStatus = PlanStatus.PENDING,
    priority: PlanPriority | None = None,
    tasks: bool = True,
) -> PlanRecord:
    """Shorthand for a plan; plans get one task unless ``tasks=False``."""
    return PlanRecord(
        id=plan_id,
        title=f"Plan {plan_id}",
        dependencies=deps or [],
        parent=parent,
        status=status,
        priority=priority,
        tasks=TASKS if tasks else [],
    )


def _records(*plans: PlanRecord) -> dict[int, PlanRecord]:
    return {p.id: p for p in plans}


DONE = PlanStatus.DONE
IN_PROGRESS = PlanStatus.IN_PROGRESS


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


class TestDiscoverDependencies:
    def test_dependencies_and_children(self) -> None:
        records = _records(_p(1, deps=[2]), _p(2, deps=[4]), _p(3, parent=1), _p(4), _p(5))
        assert discover_dependencies(1, records) == [2, 3, 4]

    def test_children_of_discovered_plans(self) -> None:
        records = _records(_p(1, deps=[2]), _p(2), _p(3, parent=2))
        assert discover_dependencies(1, records) == [2, 3]

    def test_missing_ids_skipped(self) -> None:
        records = _records(_p(1, deps=[99, 2]), _p(2))
        assert discover_dependencies(1, records) == [2]

    def test_cycle_terminates_and_excludes_root(self) -> None:
        records = _records(_p(1, deps=[2]), _p(2, deps=[3]), _p(3, deps=[1, 2]))
        assert discover_dependencies(1, records) == [2, 3]


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------


class TestSelectNextReady:
    def test_plan_not_found(self) -> None:
        result = select_next_ready(99, _records(_p(1)))
        assert result.plan is None
        assert "Plan not found: 99" in result.message
        assert "→ Try:" in result.message
        assert "Check the plan ID is correct" in result.message
        assert "`plangraph list`" in result.message

    def test_no_dependencies(self) -> None:
        result = select_next_ready(1, _records(_p(1)))
        assert result.plan is None
        assert "No dependencies found for this plan" in result.message

    def test_ready_dependency(self) -> None:
        records = _records(_p(1, deps=[2]), _p(2))
        result = select_next_ready(1, records)
        assert result.plan is not None
        assert result.plan.id == 2
        assert result.message == "Found ready plan: 2 (Plan 2)"

    def test_in_progress_preferred(self) -> None:
        records = _records(
            _p(1, deps=[2, 3]),
            _p(2, priority=PlanPriority.URGENT),
            _p(3, status=IN_PROGRESS, priority=PlanPriority.LOW),
        )
        result = select_next_ready(1, records)
        assert result.plan is not None
        assert result.plan.id == 3
        assert "Found in-progress plan" in result.message

    def test_priority_then_id(self) -> None:
        records = _records(
            _p(1, deps=[2, 3, 4, 5]),
            _p(2),
            _p(3, priority=PlanPriority.LOW),
            _p(4, priority=PlanPriority.HIGH),
            _p(5, priority=PlanPriority.HIGH),
        )
        assert select_next_ready(1, records).plan.id == 4

    def test_unset_priority_last(self) -> None:
        records = _records(_p(1, deps=[2, 3]), _p(2), _p(3, priority=PlanPriority.LOW))
        assert select_next_ready(1, records).plan.id == 3

    def test_children_are_candidates(self) -> None:
        records = _records(_p(1), _p(2, parent=1, status=DONE), _p(3, parent=1))
        assert select_next_ready(1, records).plan.id == 3

    def test_multi_level_chain(self) -> None:
        records = _records(
            _p(1, deps=[2]),
            _p(2, deps=[3], status=DONE),
            _p(3, deps=[4], status=DONE),
            _p(4, deps=[5], status=DONE),
            _p(5),
        )
        assert select_next_ready(1, records).plan.id == 5

    def test_done_cancelled_deferred_skipped(self) -> None:
        records = _records(
            _p(1, deps=[2, 3, 4, 5]),
            _p(2, status=DONE),
            _p(3, status=PlanStatus.CANCELLED),
            _p(4, status=PlanStatus.DEFERRED),
            _p(5),
        )
        assert select_next_ready(1, records).plan.id == 5

    def test_pending_with_done_dependencies_is_ready(self) -> None:
        records = _records(_p(1, deps=[2, 3]), _p(2, deps=[3]), _p(3, status=DONE))
        assert select_next_ready(1, records).plan.id == 2

    def test_in_progress_not_blocked_by_dependencies(self) -> None:
        records = _records(_p(1, deps=[2]), _p(2, deps=[3], status=IN_PROGRESS), _p(3, tasks=False))
        assert select_next_ready(1, records).plan.id == 2

    def test_deterministic(self) -> None:
        records = _records(_p(1, deps=[4, 3, 2]), _p(2), _p(3), _p(4))
        results = {select_next_ready(1, records).plan.id for _ in range(5)}
        assert results == {2}


# ---------------------------------------------------------------------------
# Fallbacks and diagnostics
# ---------------------------------------------------------------------------


class TestFallbacks:
    def test_all_done_returns_parent(self) -> None:
        records = _records(_p(1, deps=[2]), _p(2, status=DONE), _p(3, parent=1, status=DONE))
        result = select_next_ready(1, records)
        assert result.plan is not None
        assert result.plan.id == 1
        assert result.message == "All dependencies are complete - ready to work on the parent plan"

    def test_root_already_done(self) -> None:
        records = _records(_p(1, deps=[2], status=DONE), _p(2, status=DONE))
        result = select_next_ready(1, records)
        assert result.plan is None
        assert "No ready dependencies found" in result.message
        assert "All dependencies are complete" in result.message

    def test_pending_child_prevents_parent_fallback(self) -> None:
        records = _records(_p(1, deps=[2]), _p(2, status=DONE), _p(3, parent=1, tasks=False))
        result = select_next_ready(1, records)
        assert result.plan is None
        assert "no actionable tasks" in result.message

    def test_blocked_dependencies(self) -> None:
        records = _records(_p(1, deps=[2]), _p(2, deps=[3]), _p(3, status=PlanStatus.DEFERRED))
        result = select_next_ready(1, records)
        assert result.plan is None
        assert "dependencies are blocked by incomplete prerequisites" in result.message

    def test_missing_prerequisite_blocks(self) -> None:
        records = _records(_p(1, deps=[2]), _p(2, deps=[42]))
        result = select_next_ready(1, records)
        assert result.plan is None
        assert "blocked by incomplete prerequisites" in result.message

    def test_cycle_returns_diagnostic(self) -> None:
        records = _records(_p(1, deps=[2]), _p(2, deps=[3]), _p(3, deps=[2]))
        result = select_next_ready(1, records)
        assert result.plan is None
        assert "dependencies are blocked by incomplete prerequisites" in result.message

    def test_no_tasks(self) -> None:
        records = _records(_p(1, deps=[2]), _p(2, tasks=False))
        result = select_next_ready(1, records)
        assert result.plan is None
        assert "dependencies have no actionable tasks" in result.message

    def test_maybe_priority(self) -> None:
        records = _records(_p(1, deps=[2, 3]), _p(2, priority=PlanPriority.MAYBE), _p(3, status=DONE))
        result = select_next_ready(1, records)
        assert result.plan is None
        assert 'dependencies have "maybe" priority' in result.message
        assert "Review and update priorities" in result.message

    def test_every_reason_listed(self) -> None:
        records = _records(
            _p(1, deps=[2, 3, 4]),
            _p(2, priority=PlanPriority.MAYBE),
            _p(3, tasks=False),
            _p(4, deps=[2]),
        )
        message = select_next_ready(1, records).message
        assert '"maybe" priority' in message
        assert "no actionable tasks" in message
        assert "blocked by incomplete prerequisites" in message


# ---------------------------------------------------------------------------
# Directory-level entry points
# ---------------------------------------------------------------------------


class TestFindNextReadyDependency:
    def test_directory_not_found(self, tmp_path: Path) -> None:
        result = find_next_ready_dependency(1, tmp_path / "missing")
        assert result.plan is None
        assert "Directory not found" in result.message
        assert "Check the path is correct" in result.message
        assert "permissions" in result.message

    def test_reads_plans_from_disk(self, write_plan, plans_dir: Path) -> None:
        write_plan("1-root.yml", id=1, title="Root", dependencies=[2, 3])
        write_plan("2-a.yml", id=2, title="A", status="done", tasks=TASKS)
        write_plan("sub/3-b.yml", id=3, title="B", priority="high", tasks=TASKS)

        result = find_next_ready_dependency(1, plans_dir)

        assert result.plan is not None
        assert result.plan.id == 3
        assert result.path == plans_dir / "sub" / "3-b.yml"

    def test_plan_not_in_directory(self, write_plan, plans_dir: Path) -> None:
        write_plan("1-root.yml", id=1)
        assert "Plan not found: 7" in find_next_ready_dependency(7, plans_dir).message


class TestFindNextPlan:
    def test_highest_priority_ready_plan(self, write_plan, plans_dir: Path) -> None:
        write_plan("1-a.yml", id=1, priority="low")
        write_plan("2-b.yml", id=2, priority="urgent", dependencies=[3])
        write_plan("3-c.yml", id=3, priority="medium")
        write_plan("4-d.yml", id=4, priority="high", status="done")

        loaded = find_next_plan(plans_dir)

        assert loaded is not None
        assert loaded.record.id == 3

    def test_in_progress_excluded_by_default(self, write_plan, plans_dir: Path) -> None:
        write_plan("1-a.yml", id=1, status="in_progress")
        assert find_next_plan(plans_dir) is None
        loaded = find_next_plan(plans_dir, include_in_progress=True)
        assert loaded is not None and loaded.record.id == 1

    def test_maybe_never_selected(self, write_plan, plans_dir: Path) -> None:
        write_plan("1-a.yml", id=1, priority="maybe")
        assert find_next_plan(plans_dir) is None

    def test_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            find_next_plan(tmp_path / "missing")
