"""Column service: column CRUD, locking and whole-column task reordering."""
import logging
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from taskboard import ordering
from taskboard.errors import InvalidTarget, ValidationFailed
from taskboard.models import Board, BoardColumn, Task
from taskboard.schemas import ColumnCreate
from taskboard.services.access import (
    ADMIN_ROLES,
    EDITOR_ROLES,
    OWNER_ONLY,
    get_board_for,
    get_column_for,
)
from taskboard.transactions import for_update, run_in_transaction
from taskboard.utils.primary_keys import new_id

logger = logging.getLogger(__name__)

DELETE_TASKS = "delete-tasks"
MOVE_TASKS = "move-tasks"


def ordered_tasks(column: BoardColumn) -> List[Task]:
    """Tasks of ``column`` in display order."""
    by_id = {task.id: task for task in column.task_rows}
    return [by_id[task_id] for task_id in column.task_order or []]


def ordered_columns(board: Board) -> List[BoardColumn]:
    """Columns of ``board`` in display order."""
    by_id = {column.id: column for column in board.column_rows}
    return [by_id[column_id] for column_id in board.column_order or []]


def _lock_board(session: Session, board_id: str) -> Board:
    return for_update(session.query(Board).filter(Board.id == board_id)).one()


def create_column(db: Session, board_id: str, column_data: ColumnCreate, user_id: str) -> BoardColumn:
    def work(session: Session) -> str:
        board = get_board_for(session, board_id, user_id, roles=ADMIN_ROLES, lock=True)
        column = BoardColumn(
            id=new_id(),
            name=column_data.name,
            board_id=board.id,
            task_order=[],
            is_locked=column_data.is_locked,
        )
        session.add(column)
        board.column_order = ordering.append(board.column_order or [], column.id)
        return column.id

    column_id = run_in_transaction(db, work)
    logger.info("Column %s appended to board %s", column_id, board_id)
    return db.query(BoardColumn).filter(BoardColumn.id == column_id).one()


def list_columns(db: Session, board_id: str, user_id: str) -> Tuple[Board, List[BoardColumn]]:
    board = get_board_for(db, board_id, user_id)
    return board, ordered_columns(board)


def rename_column(db: Session, column_id: str, name: str, user_id: str) -> BoardColumn:
    def work(session: Session) -> None:
        column = get_column_for(session, column_id, user_id, roles=ADMIN_ROLES, lock=True)
        column.name = name

    run_in_transaction(db, work)
    return get_column_for(db, column_id, user_id)


def set_column_lock(db: Session, column_id: str, is_locked: bool, user_id: str) -> Dict[str, object]:
    def work(session: Session) -> Dict[str, object]:
        column = get_column_for(session, column_id, user_id, roles=OWNER_ONLY, lock=True)
        previous = column.is_locked
        column.is_locked = is_locked
        return {
            "column_id": column.id,
            "board_id": column.board_id,
            "is_locked": is_locked,
            "previous_status": previous,
        }

    return run_in_transaction(db, work)


def reorder_tasks(db: Session, column_id: str, task_ids: List[str], user_id: str) -> BoardColumn:
    """Replace a column's task order with a permutation of itself."""
    proposed = list(task_ids)

    def work(session: Session) -> bool:
        column = get_column_for(session, column_id, user_id, roles=EDITOR_ROLES, lock=True)
        current = list(column.task_order or [])
        ordering.validate_permutation(current, proposed, noun="task")
        if current == proposed:
            return False
        column.task_order = proposed
        return True

    if run_in_transaction(db, work):
        logger.info("Column %s tasks reordered by %s: %s", column_id, user_id, proposed)
    return get_column_for(db, column_id, user_id)


def delete_column(
    db: Session,
    column_id: str,
    user_id: str,
    action: Optional[str] = None,
    target_column_id: Optional[str] = None,
) -> Dict[str, object]:
    """Delete a column and drop its id from the board's column order.

    A column that still holds tasks needs an ``action``: ``delete-tasks``
    deletes them, ``move-tasks`` appends them in their current order to
    ``target_column_id`` on the same board.
    """

    def work(session: Session) -> Dict[str, object]:
        column = get_column_for(session, column_id, user_id, roles=ADMIN_ROLES, lock=True)
        board = _lock_board(session, column.board_id)
        task_ids = list(column.task_order or [])

        if task_ids:
            if action == DELETE_TASKS:
                for task in list(column.task_rows):
                    session.delete(task)
            elif action == MOVE_TASKS:
                if not target_column_id or target_column_id == column.id:
                    raise InvalidTarget("Target column not found in this board")
                target = for_update(
                    session.query(BoardColumn).filter(
                        BoardColumn.id == target_column_id,
                        BoardColumn.board_id == board.id,
                    )
                ).first()
                if target is None:
                    raise InvalidTarget("Target column not found in this board")
                for task in ordered_tasks(column):
                    task.column = target
                moved = list(target.task_order or [])
                for task_id in task_ids:
                    moved = ordering.append(moved, task_id)
                target.task_order = moved
            else:
                raise ValidationFailed("Column contains tasks - specify an action")

        board.column_order = ordering.remove(board.column_order or [], column.id)
        session.delete(column)
        return {
            "deleted_column_id": column_id,
            "action_taken": action if task_ids and action else "none",
            "tasks_affected": len(task_ids),
        }

    result = run_in_transaction(db, work)
    logger.info("Column %s deleted by %s (%s)", column_id, user_id, result["action_taken"])
    return result
