"""
Client-side board cache and the local prediction of order changes.

Predictions use the same ordering functions as the server, so a drop can be
rendered before the server answers. Server answers always replace the local
order wholesale.
"""
import copy
from typing import Any, Dict, List, Optional, Tuple

from taskboard import ordering


class LocalBoard:
    """The client's copy of one board payload (camelCase, as served)."""

    def __init__(self, payload: Dict[str, Any]):
        self.payload = copy.deepcopy(payload)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "LocalBoard":
        return cls(payload)

    @property
    def board_id(self) -> str:
        return self.payload["id"]

    @property
    def columns(self) -> List[Dict[str, Any]]:
        return self.payload.setdefault("columns", [])

    @property
    def column_ids(self) -> List[str]:
        return [column["id"] for column in self.columns]

    def column(self, column_id: str) -> Dict[str, Any]:
        for column in self.columns:
            if column["id"] == column_id:
                return column
        raise KeyError(column_id)

    def task_ids(self, column_id: str) -> List[str]:
        return list(self.column(column_id).get("taskIds", []))

    def locate_task(self, task_id: str) -> Tuple[str, int]:
        """Return ``(column_id, index)`` of a task."""
        for column in self.columns:
            task_ids = column.get("taskIds", [])
            if task_id in task_ids:
                return column["id"], task_ids.index(task_id)
        raise KeyError(task_id)

    def locate_column(self, column_id: str) -> int:
        return self.column_ids.index(column_id)


def predict_column_order(column_ids: List[str], from_index: int, to_index: int) -> List[str]:
    return ordering.move_within(column_ids, from_index, to_index)


def predict_task_move(
    source_ids: List[str],
    target_ids: Optional[List[str]],
    from_index: int,
    to_index: int,
) -> Tuple[List[str], List[str]]:
    """Predict ``(source, target)`` task orders after a move.

    ``target_ids`` is None for a move within the source column; both returned
    lists are then the same order.
    """
    if target_ids is None:
        reordered = ordering.move_within(source_ids, from_index, to_index)
        return reordered, reordered
    task_id = source_ids[from_index]
    return ordering.remove(source_ids, task_id), ordering.insert_at(target_ids, task_id, to_index)


def apply_column_order(board: LocalBoard, column_ids: List[str]) -> bool:
    """Rearrange the cached columns to ``column_ids``.

    Returns False, leaving the cache untouched, when the ids do not match the
    cached columns; the cache then needs a refetch.
    """
    by_id = {column["id"]: column for column in board.columns}
    if not ordering.is_permutation(list(by_id), column_ids):
        return False
    board.payload["columns"] = [by_id[column_id] for column_id in column_ids]
    board.payload["columnIds"] = list(column_ids)
    return True


def apply_task_orders(board: LocalBoard, orders: Dict[str, List[str]]) -> bool:
    """Replace the task order of every column named in ``orders``.

    Task entries follow their ids between the named columns. Returns False,
    leaving the cache untouched, when an id is unknown locally.
    """
    try:
        columns = {column_id: board.column(column_id) for column_id in orders}
    except KeyError:
        return False
    tasks = {}
    for column in columns.values():
        for task in column.get("tasks", []):
            tasks[task["id"]] = task
    if any(task_id not in tasks for task_ids in orders.values() for task_id in task_ids):
        return False

    for column_id, task_ids in orders.items():
        column = columns[column_id]
        column["taskIds"] = list(task_ids)
        column["tasks"] = [tasks[task_id] for task_id in task_ids]
        for task in column["tasks"]:
            task["columnId"] = column_id
    return True
