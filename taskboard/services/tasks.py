"""Task service: task CRUD, assignment and the task move operation."""
import logging
from dataclasses import dataclass, field
from typing import Dict, List

from sqlalchemy.orm import Session

from taskboard import ordering
from taskboard.errors import BoardServiceError, Forbidden, InvalidTarget, NotFound, ValidationFailed
from taskboard.models import Board, BoardColumn, Task, User
from taskboard.schemas import TaskCreate, TaskUpdate
from taskboard.services.access import (
    ADMIN_ROLES,
    ANY_MEMBER,
    get_column_for,
    get_task_for,
    is_member,
    member_role,
    require_board_access,
)
from taskboard.services.columns import ordered_tasks
from taskboard.transactions import for_update, run_in_transaction
from taskboard.utils.primary_keys import new_id

logger = logging.getLogger(__name__)


@dataclass
class MoveResult:
    """Authoritative placement after a move; clients copy it verbatim."""

    task_id: str
    previous_column_id: str
    new_column_id: str
    new_order: int
    source_task_ids: List[str] = field(default_factory=list)
    target_task_ids: List[str] = field(default_factory=list)
    moved: bool = True

    def as_dict(self) -> Dict[str, object]:
        return {
            "task_id": self.task_id,
            "previous_column_id": self.previous_column_id,
            "new_column_id": self.new_column_id,
            "new_order": self.new_order,
            "source_task_ids": list(self.source_task_ids),
            "target_task_ids": list(self.target_task_ids),
        }


def _load_assignees(session: Session, board: Board, user_ids: List[str]) -> List[User]:
    unique_ids = list(dict.fromkeys(user_ids))
    if not unique_ids:
        return []
    if not all(is_member(board, user_id) for user_id in unique_ids):
        raise ValidationFailed("Some assignees are not board members")
    users = session.query(User).filter(User.id.in_(unique_ids)).all()
    if len(users) != len(unique_ids):
        raise ValidationFailed("Some assignees are not board members")
    return users


def _lock_column(session: Session, column_id: str) -> BoardColumn:
    column = for_update(session.query(BoardColumn).filter(BoardColumn.id == column_id)).first()
    if column is None:
        raise NotFound("Column not found")
    return column


def create_task(db: Session, column_id: str, task_data: TaskCreate, user_id: str) -> Task:
    def work(session: Session) -> str:
        column = get_column_for(session, column_id, user_id, roles=ANY_MEMBER, lock=True)
        assignees = _load_assignees(session, column.board, task_data.assignees)
        task = Task(
            id=new_id(),
            title=task_data.title,
            description=task_data.description,
            priority=task_data.priority,
            due_date=task_data.due_date,
            tags=list(task_data.tags),
            column=column,
            board_id=column.board_id,
            created_by_id=user_id,
        )
        task.assignees = assignees
        session.add(task)
        column.task_order = ordering.append(column.task_order or [], task.id)
        return task.id

    task_id = run_in_transaction(db, work)
    logger.info("Task %s appended to column %s", task_id, column_id)
    return db.query(Task).filter(Task.id == task_id).one()


def list_column_tasks(db: Session, column_id: str, user_id: str) -> List[Task]:
    column = get_column_for(db, column_id, user_id)
    return ordered_tasks(column)


def get_task(db: Session, task_id: str, user_id: str) -> Task:
    return get_task_for(db, task_id, user_id)


def update_task(db: Session, task_id: str, task_update: TaskUpdate, user_id: str) -> Task:
    update_data = task_update.model_dump(exclude_unset=True)
    assignee_ids = update_data.pop("assignees", None)

    def work(session: Session) -> None:
        task = get_task_for(session, task_id, user_id, roles=ADMIN_ROLES, lock=True)
        if assignee_ids is not None:
            task.assignees = _load_assignees(session, task.column.board, assignee_ids)
        for name, value in update_data.items():
            if value is None and name not in ("description", "due_date"):
                continue
            setattr(task, name, value)

    run_in_transaction(db, work)
    return get_task_for(db, task_id, user_id)


def delete_task(db: Session, task_id: str, user_id: str) -> Dict[str, str]:
    def work(session: Session) -> Dict[str, str]:
        task = get_task_for(session, task_id, user_id, roles=ADMIN_ROLES, lock=True)
        column = _lock_column(session, task.column_id)
        column.task_order = ordering.remove(column.task_order or [], task.id)
        session.delete(task)
        return {"task_id": task_id, "board_id": column.board_id, "column_id": column.id}

    result = run_in_transaction(db, work)
    logger.info("Task %s deleted by %s", task_id, user_id)
    return result


def move_task(db: Session, task_id: str, target_column_id: str, new_order: int, user_id: str) -> MoveResult:
    """Relocate a task to ``new_order`` in ``target_column_id``.

    ``new_order`` is the task's final index. Within its own column the valid
    range is ``[0, n - 1]``; into another column of the same board it is
    ``[0, n]``. The source column, destination column and task row are written
    in one transaction, and moving a task onto its current position writes
    nothing at all.
    """

    def work(session: Session) -> MoveResult:
        task = get_task_for(session, task_id, user_id, roles=ANY_MEMBER, lock=True)
        source = _lock_column(session, task.column_id)
        board = source.board
        require_board_access(board, user_id)

        # Re-read immediately before computing the insertion point
        destination = for_update(
            session.query(BoardColumn).filter(BoardColumn.id == target_column_id)
        ).first()
        if destination is None or destination.board_id != board.id:
            raise InvalidTarget("Target column not found in this board")

        same_column = destination.id == source.id
        target_order = list(destination.task_order or [])
        ordering.check_index(new_order, len(target_order), same_column)

        if same_column:
            if task.id not in target_order:
                raise BoardServiceError(f"Task {task.id} is missing from its column order")
            from_index = target_order.index(task.id)
            if from_index == new_order:
                return MoveResult(
                    task_id=task.id,
                    previous_column_id=source.id,
                    new_column_id=source.id,
                    new_order=new_order,
                    source_task_ids=target_order,
                    target_task_ids=target_order,
                    moved=False,
                )
            reordered = ordering.move_within(target_order, from_index, new_order)
            source.task_order = reordered
            return MoveResult(
                task_id=task.id,
                previous_column_id=source.id,
                new_column_id=source.id,
                new_order=reordered.index(task.id),
                source_task_ids=reordered,
                target_task_ids=reordered,
            )

        source_order = ordering.remove(source.task_order or [], task.id)
        target_order = ordering.insert_at(target_order, task.id, new_order)
        source.task_order = source_order
        destination.task_order = target_order
        task.column = destination
        return MoveResult(
            task_id=task.id,
            previous_column_id=source.id,
            new_column_id=destination.id,
            new_order=target_order.index(task.id),
            source_task_ids=source_order,
            target_task_ids=target_order,
        )

    result = run_in_transaction(db, work)
    if result.moved:
        logger.info(
            "Task %s moved by %s from %s to %s at %d",
            task_id, user_id, result.previous_column_id, result.new_column_id, result.new_order,
        )
    return result


def assign_task(db: Session, task_id: str, assignee_id: str, user_id: str) -> Dict[str, object]:
    def work(session: Session) -> Dict[str, object]:
        task = get_task_for(session, task_id, user_id, roles=ANY_MEMBER, lock=True)
        if not is_member(task.column.board, assignee_id):
            raise ValidationFailed("User is not a member of this board")
        if any(user.id == assignee_id for user in task.assignees):
            raise ValidationFailed("User is already assigned to this task", status_code=409)
        assignee = session.query(User).filter(User.id == assignee_id).first()
        if assignee is None:
            raise ValidationFailed("User is not a member of this board")
        task.assignees.append(assignee)
        return {
            "task_id": task.id,
            "user_id": assignee_id,
            "acting_user_id": user_id,
            "assignees": [user.id for user in task.assignees],
        }

    return run_in_transaction(db, work)


def unassign_task(db: Session, task_id: str, assignee_id: str, user_id: str) -> Dict[str, object]:
    def work(session: Session) -> Dict[str, object]:
        task = get_task_for(session, task_id, user_id, roles=ANY_MEMBER, lock=True)
        role = member_role(task.column.board, user_id)
        if role not in ("owner",) + ADMIN_ROLES and assignee_id != user_id:
            raise Forbidden("Only admins/owners can remove other users from tasks", status_code=403)
        remaining = [user for user in task.assignees if user.id != assignee_id]
        if len(remaining) == len(task.assignees):
            raise NotFound("User is not assigned to this task")
        task.assignees = remaining
        return {
            "task_id": task.id,
            "user_id": assignee_id,
            "acting_user_id": user_id,
            "assignees": [user.id for user in remaining],
        }

    return run_in_transaction(db, work)
