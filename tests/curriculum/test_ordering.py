"""Tests for range-shift sibling ordering."""

from uuid import uuid4

import pytest

from src.curriculum.errors import InvalidOrderError, OrderingInvariantError
from src.curriculum.ordering import (
    SiblingOrder,
    apply_changes,
    next_position,
    plan_insert,
    plan_reorder,
)


@pytest.fixture
def ids():
    return [uuid4() for _ in range(5)]


@pytest.fixture
def positions(ids):
    """Five siblings at 0..4."""
    return {item_id: order for order, item_id in enumerate(ids)}


class TestInsert:
    def test_append_to_empty_parent(self) -> None:
        assert plan_insert({}, None) == (0, {})

    def test_append_after_last_keeps_gaps(self, ids) -> None:
        gappy = {ids[0]: 0, ids[1]: 4}
        assert next_position(gappy) == 5
        assert plan_insert(gappy, None) == (5, {})

    def test_insert_shifts_siblings_at_or_after(self, ids, positions) -> None:
        position, shifted = plan_insert(positions, 2)

        assert position == 2
        assert shifted == {ids[2]: 3, ids[3]: 4, ids[4]: 5}

    def test_insert_past_end_shifts_nothing(self, positions) -> None:
        assert plan_insert(positions, 10) == (10, {})

    def test_negative_order_rejected(self, positions) -> None:
        with pytest.raises(InvalidOrderError):
            plan_insert(positions, -1)


class TestReorder:
    def test_move_down_closes_gap(self, ids, positions) -> None:
        changes = plan_reorder(positions, ids[1], 3)

        assert changes == {ids[2]: 1, ids[3]: 2, ids[1]: 3}
        result = apply_changes(positions, changes)
        ordered = sorted(result, key=result.get)
        assert ordered == [ids[0], ids[2], ids[3], ids[1], ids[4]]

    def test_move_up_opens_slot(self, ids, positions) -> None:
        changes = plan_reorder(positions, ids[3], 0)

        assert changes == {ids[0]: 1, ids[1]: 2, ids[2]: 3, ids[3]: 0}
        assert set(apply_changes(positions, changes).values()) == {0, 1, 2, 3, 4}

    def test_same_position_is_noop(self, ids, positions) -> None:
        assert plan_reorder(positions, ids[2], 2) == {}

    def test_move_to_end(self, ids, positions) -> None:
        changes = plan_reorder(positions, ids[0], 4)
        result = apply_changes(positions, changes)
        assert result[ids[0]] == 4
        assert result[ids[4]] == 3

    def test_negative_order_rejected(self, ids, positions) -> None:
        with pytest.raises(InvalidOrderError):
            plan_reorder(positions, ids[0], -2)

    def test_gaps_are_preserved(self, ids) -> None:
        """Nothing is re-sequenced, so unrelated gaps survive a move."""
        gappy = {ids[0]: 0, ids[1]: 2, ids[2]: 7}
        changes = plan_reorder(gappy, ids[2], 1)
        assert apply_changes(gappy, changes) == {ids[0]: 0, ids[1]: 3, ids[2]: 1}


class TestInvariants:
    def test_collision_detected(self, ids) -> None:
        with pytest.raises(OrderingInvariantError):
            apply_changes({ids[0]: 0, ids[1]: 1}, {ids[1]: 0})

    def test_sibling_order_versions(self) -> None:
        assert SiblingOrder().next_version == 1
        assert SiblingOrder(version=7).next_version == 8
