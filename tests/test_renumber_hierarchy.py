"""Tests for hierarchical reordering of plan families."""

from __future__ import annotations

import pytest

from plangraph.core.plans.graph import build_children_map, find_root_ancestor
from plangraph.core.plans.models import PlanRecord
from plangraph.core.renumber.errors import DependencyCycleError
from plangraph.core.renumber.hierarchy import (
    find_hierarchy_reorders,
    group_families,
    is_family_disordered,
    reorder_family,
    topological_sort,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _records(*plans: PlanRecord) -> dict[int, PlanRecord]:
    return {p.id: p for p in plans if p.id is not None}


def _p(plan_id: int, parent: int | None = None, deps: list[int] | None = None) -> PlanRecord:
    return PlanRecord(id=plan_id, title=f"Plan {plan_id}", parent=parent, dependencies=deps or [])


def _remap(records: dict[int, PlanRecord], mapping: dict[int, int]) -> dict[int, PlanRecord]:
    out: dict[int, PlanRecord] = {}
    for plan_id, record in records.items():
        new_id = mapping.get(plan_id, plan_id)
        out[new_id] = record.model_copy(
            update={
                "id": new_id,
                "parent": mapping.get(record.parent, record.parent)
                if record.parent is not None
                else None,
                "dependencies": [mapping.get(d, d) for d in record.dependencies],
            }
        )
    return out


# ---------------------------------------------------------------------------
# Graph helpers
# ---------------------------------------------------------------------------


class TestGraphHelpers:
    def test_root_ancestor(self) -> None:
        records = _records(_p(1), _p(2, parent=1), _p(3, parent=2))
        assert find_root_ancestor(3, records) == 1

    def test_dangling_and_self_parent_ignored(self) -> None:
        records = _records(_p(1, parent=1), _p(2, parent=99))
        assert find_root_ancestor(1, records) == 1
        assert find_root_ancestor(2, records) == 2

    def test_parent_cycle_terminates(self) -> None:
        records = _records(_p(1, parent=3), _p(2, parent=1), _p(3, parent=2))
        assert find_root_ancestor(1, records) in {1, 2, 3}

    def test_children_map(self) -> None:
        records = _records(_p(1), _p(3, parent=1), _p(2, parent=1), _p(4, parent=9))
        assert build_children_map(records) == {1: [2, 3]}

    def test_group_families(self) -> None:
        records = _records(_p(1), _p(2, parent=1), _p(3), _p(4, parent=2))
        assert group_families(records) == {1: [1, 2, 4], 3: [3]}


# ---------------------------------------------------------------------------
# Disorder detection and sorting
# ---------------------------------------------------------------------------


class TestTopologicalSort:
    def test_ordered_family_is_identity(self) -> None:
        records = _records(_p(1), _p(2, parent=1), _p(3, parent=1, deps=[2]))
        assert not is_family_disordered([1, 2, 3], records)
        assert topological_sort([1, 2, 3], records) == [1, 2, 3]
        assert reorder_family([1, 2, 3], records) == {}

    def test_child_before_parent(self) -> None:
        records = _records(_p(5), _p(3, parent=5))
        assert is_family_disordered([3, 5], records)
        assert reorder_family([3, 5], records) == {5: 3, 3: 5}

    def test_dependency_before_dependent(self) -> None:
        records = _records(_p(1), _p(2, parent=1, deps=[3]), _p(3, parent=1))
        assert topological_sort([1, 2, 3], records) == [1, 3, 2]
        assert reorder_family([1, 2, 3], records) == {3: 2, 2: 3}

    def test_lowest_ready_id_first(self) -> None:
        records = _records(_p(10), _p(4, parent=10), _p(7, parent=10))
        assert topological_sort([4, 7, 10], records) == [10, 4, 7]

    def test_external_dependencies_ignored(self) -> None:
        records = _records(_p(1), _p(2, parent=1, deps=[9]), _p(9))
        assert not is_family_disordered([1, 2], records)

    def test_self_dependency_ignored(self) -> None:
        records = _records(_p(1), _p(2, parent=1, deps=[2]))
        assert topological_sort([1, 2], records) == [1, 2]

    def test_cycle_raises_with_ids(self) -> None:
        records = _records(_p(1), _p(2, parent=1, deps=[3]), _p(3, parent=1, deps=[2]))
        with pytest.raises(DependencyCycleError) as exc_info:
            topological_sort([1, 2, 3], records, family_root=1)
        assert exc_info.value.family_root == 1
        assert exc_info.value.ids == [2, 3]
        assert "Cycle detected" in str(exc_info.value)


# ---------------------------------------------------------------------------
# find_hierarchy_reorders
# ---------------------------------------------------------------------------


class TestFindHierarchyReorders:
    def test_no_changes_for_ordered_plans(self) -> None:
        records = _records(_p(1), _p(2, parent=1), _p(3))
        result = find_hierarchy_reorders(records)
        assert result.mapping == {}
        assert result.errors == []

    def test_mapping_conserves_family_ids(self) -> None:
        records = _records(
            _p(2),
            _p(6, parent=2, deps=[9]),
            _p(9, parent=2),
            _p(4, parent=9),
            _p(1),
        )
        result = find_hierarchy_reorders(records)
        assert result.mapping
        assert set(result.mapping) == set(result.mapping.values())

        remapped = _remap(records, result.mapping)
        assert set(remapped) == set(records)
        for plan_id, record in remapped.items():
            if record.parent is not None:
                assert record.parent < plan_id
            for dep in record.dependencies:
                if dep in remapped and find_root_ancestor(dep, remapped) == find_root_ancestor(
                    plan_id, remapped
                ):
                    assert dep < plan_id

    def test_cycle_isolated_to_family(self) -> None:
        records = _records(
            _p(1),
            _p(2, parent=1, deps=[3]),
            _p(3, parent=1, deps=[2]),
            _p(10),
            _p(8, parent=10),
        )
        result = find_hierarchy_reorders(records)
        assert result.mapping == {10: 8, 8: 10}
        assert len(result.errors) == 1
        assert result.errors[0].family_root == 1
        assert result.errors[0].ids == [2, 3]

    def test_parent_cycle_terminates(self) -> None:
        records = _records(_p(1, parent=2), _p(2, parent=1))
        result = find_hierarchy_reorders(records)
        assert result.errors == [] or all(e.ids for e in result.errors)

    def test_reordering_is_idempotent(self) -> None:
        records = _records(_p(1), _p(2, parent=1, deps=[3]), _p(3, parent=1))
        first = find_hierarchy_reorders(records)
        second = find_hierarchy_reorders(_remap(records, first.mapping))
        assert second.mapping == {}
