"""
Ordered collection primitive.

An order array is a list of opaque ids whose position is the display order:
``Board.column_order`` for columns and ``BoardColumn.task_order`` for tasks.
Every function here returns a new list and never mutates its input, so callers
can hand the result straight to an ORM attribute (which is how SQLAlchemy
notices the JSON column changed).

Index semantics: ``move_within`` and ``insert_at`` take the *final* index of the
element. Drag-and-drop targets are usually gap slots in the list as rendered
before the dragged element is lifted out; ``slot_to_index`` converts one into
the other.
"""
from __future__ import annotations

from collections import Counter
from typing import Hashable, List, Sequence, Tuple

from taskboard.errors import InvalidOrder, InvalidPermutation


def remove(seq: Sequence[Hashable], item_id: Hashable) -> List[Hashable]:
    """Return ``seq`` without the first occurrence of ``item_id``."""
    result = list(seq)
    if item_id in result:
        result.remove(item_id)
    return result


def insert_at(seq: Sequence[Hashable], item_id: Hashable, index: int) -> List[Hashable]:
    """Return ``seq`` with ``item_id`` inserted at ``index`` clamped to ``[0, len(seq)]``."""
    result = list(seq)
    index = max(0, min(index, len(result)))
    result.insert(index, item_id)
    return result


def append(seq: Sequence[Hashable], item_id: Hashable) -> List[Hashable]:
    return insert_at(seq, item_id, len(seq))


def move_within(seq: Sequence[Hashable], from_index: int, to_index: int) -> List[Hashable]:
    """Move the element at ``from_index`` so that it ends up at ``to_index``.

    ``to_index`` is resolved against the sequence after the element has been
    removed, so the largest meaningful value is ``len(seq) - 1`` and anything
    above it lands at the end.
    """
    if not 0 <= from_index < len(seq):
        raise IndexError(f"from_index {from_index} out of range for {len(seq)} items")
    result = list(seq)
    item = result.pop(from_index)
    to_index = max(0, min(to_index, len(result)))
    result.insert(to_index, item)
    return result


def slot_to_index(from_index: int, slot: int) -> int:
    """Convert a drop slot in the pre-removal list into a final index.

    Slot ``k`` is the gap before element ``k``. Once the dragged element is
    lifted out every gap after it shifts left by one.
    """
    if slot > from_index:
        return slot - 1
    return slot


def insertion_bounds(target_length: int, same_collection: bool) -> Tuple[int, int]:
    """Inclusive range of valid final indices for a move into a collection.

    Moving within a collection replaces a position (``[0, n - 1]``); moving in
    from elsewhere inserts one (``[0, n]``).
    """
    if same_collection:
        return 0, target_length - 1
    return 0, target_length


def check_index(index: int, target_length: int, same_collection: bool) -> None:
    low, high = insertion_bounds(target_length, same_collection)
    if index < low or index > high:
        raise InvalidOrder(
            f"Order must be between {low} and {high}",
            details={"min": low, "max": high, "requested": index},
        )


def is_permutation(current: Sequence[Hashable], proposed: Sequence[Hashable]) -> bool:
    return Counter(current) == Counter(proposed)


def validate_permutation(
    current: Sequence[Hashable], proposed: Sequence[Hashable], noun: str = "column"
) -> None:
    """Raise ``InvalidPermutation`` unless ``proposed`` rearranges ``current`` exactly."""
    known = set(current)
    foreign = [item for item in proposed if item not in known]
    if foreign:
        raise InvalidPermutation(
            f"Invalid {noun} IDs provided",
            details={"unknown": foreign},
        )
    if len(proposed) != len(current) or not is_permutation(current, proposed):
        raise InvalidPermutation(
            f"All {noun}s must be included in the reorder exactly once",
            details={"expected": len(current), "received": len(proposed)},
        )
