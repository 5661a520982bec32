"""Range-shift ordering for siblings under one parent.

The planners are pure: they take the current ``{id: order}`` map and return
only the positions that change. Nothing is ever fully re-sequenced, so gaps
left by deletions survive.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from uuid import UUID

from .errors import InvalidOrderError, OrderingInvariantError


@dataclass
class SiblingOrder:
    """Positions of all children of one parent, as read.

    ``version`` is the parent's ordering version at read time (None if the
    parent never had an ordering write).
    """

    positions: dict[UUID, int] = field(default_factory=dict)
    version: int | None = None

    @property
    def next_version(self) -> int:
        return (self.version or 0) + 1


def next_position(positions: Mapping[UUID, int]) -> int:
    """Position after the last sibling, 0 for an empty parent."""
    return max(positions.values()) + 1 if positions else 0


def plan_insert(
    positions: Mapping[UUID, int], desired: int | None
) -> tuple[int, dict[UUID, int]]:
    """Plan the insertion of a new sibling.

    Returns:
        (position of the new item, changed sibling positions)
    """
    if desired is None:
        return next_position(positions), {}
    if desired < 0:
        raise InvalidOrderError()

    shifted = {
        item_id: order + 1 for item_id, order in positions.items() if order >= desired
    }
    return desired, shifted


def plan_reorder(
    positions: Mapping[UUID, int], item_id: UUID, new_order: int
) -> dict[UUID, int]:
    """Plan moving ``item_id`` to ``new_order``.

    Moving down closes the gap behind the item (siblings in (old, new] move
    up one slot); moving up opens a slot (siblings in [new, old) move down
    one slot). Returns every changed position, the moved item included; an
    empty dict when nothing moves.
    """
    if new_order < 0:
        raise InvalidOrderError()

    old_order = positions[item_id]
    if new_order == old_order:
        return {}

    changes: dict[UUID, int] = {}
    for sibling_id, order in positions.items():
        if sibling_id == item_id:
            continue
        if old_order < order <= new_order:
            changes[sibling_id] = order - 1
        elif new_order <= order < old_order:
            changes[sibling_id] = order + 1
    changes[item_id] = new_order
    return changes


def apply_changes(
    positions: Mapping[UUID, int], changes: Mapping[UUID, int]
) -> dict[UUID, int]:
    """Resulting positions after ``changes``, checked for uniqueness."""
    result = {**positions, **changes}
    if len(set(result.values())) != len(result):
        raise OrderingInvariantError()
    return result
