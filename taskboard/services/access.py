"""Board permission checks shared by the board, column and task services."""
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from taskboard.errors import Forbidden, NotFound, BOARD_ACCESS_MESSAGE
from taskboard.models import Board, BoardColumn, MemberRole, Task
from taskboard.transactions import for_update

# ``None`` means any member; an empty tuple means the owner only.
ANY_MEMBER = None
EDITOR_ROLES = (MemberRole.ADMIN.value, MemberRole.EDITOR.value)
ADMIN_ROLES = (MemberRole.ADMIN.value,)
OWNER_ONLY = ()


def member_role(board: Board, user_id: str) -> Optional[str]:
    """Return ``"owner"``, the member role, or ``None`` for outsiders."""
    if board.owner_id == user_id:
        return "owner"
    for member in board.members:
        if member.user_id == user_id:
            return member.role
    return None


def is_member(board: Board, user_id: str) -> bool:
    return member_role(board, user_id) is not None


def require_board_access(board: Board, user_id: str, roles: Optional[Iterable[str]] = ANY_MEMBER) -> str:
    role = member_role(board, user_id)
    if role is None:
        raise Forbidden()
    if role == "owner" or roles is None:
        return role
    if role not in tuple(roles):
        raise Forbidden()
    return role


def get_board_for(
    db: Session,
    board_id: str,
    user_id: str,
    roles: Optional[Iterable[str]] = ANY_MEMBER,
    lock: bool = False,
) -> Board:
    query = db.query(Board).filter(Board.id == board_id)
    if lock:
        query = for_update(query)
    board = query.first()
    if board is None:
        raise NotFound(BOARD_ACCESS_MESSAGE)
    require_board_access(board, user_id, roles)
    return board


def get_column_for(
    db: Session,
    column_id: str,
    user_id: str,
    roles: Optional[Iterable[str]] = ANY_MEMBER,
    lock: bool = False,
) -> BoardColumn:
    query = db.query(BoardColumn).filter(BoardColumn.id == column_id)
    if lock:
        query = for_update(query)
    column = query.first()
    if column is None:
        raise NotFound("Column not found")
    require_board_access(column.board, user_id, roles)
    return column


def get_task_for(
    db: Session,
    task_id: str,
    user_id: str,
    roles: Optional[Iterable[str]] = ANY_MEMBER,
    lock: bool = False,
) -> Task:
    """Load a task and check access against the board of its *current* column."""
    query = db.query(Task).filter(Task.id == task_id)
    if lock:
        query = for_update(query)
    task = query.first()
    if task is None:
        raise NotFound("Task not found")
    require_board_access(task.column.board, user_id, roles)
    return task
