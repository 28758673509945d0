"""Board service: board CRUD and column reordering."""
import logging
from typing import Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from taskboard import ordering
from taskboard.errors import Forbidden, NotFound, ValidationFailed, BOARD_ACCESS_MESSAGE
from taskboard.models import Board, BoardColumn, BoardMember, MemberRole, User
from taskboard.schemas import BoardCreate, BoardUpdate, MemberIn
from taskboard.services.access import ADMIN_ROLES, EDITOR_ROLES, get_board_for, require_board_access
from taskboard.transactions import for_update, run_in_transaction
from taskboard.utils.primary_keys import new_id

logger = logging.getLogger(__name__)


def _board_query(db: Session):
    return db.query(Board).options(
        selectinload(Board.owner),
        selectinload(Board.members).selectinload(BoardMember.user),
        selectinload(Board.column_rows).selectinload(BoardColumn.task_rows),
    )


def _dedupe_members(members: List[MemberIn]) -> List[MemberIn]:
    seen = set()
    unique = []
    for member in members:
        if member.user in seen:
            continue
        seen.add(member.user)
        unique.append(member)
    return unique


def _verify_members_exist(db: Session, members: List[MemberIn]) -> None:
    user_ids = [member.user for member in members]
    if not user_ids:
        return
    existing = {row[0] for row in db.query(User.id).filter(User.id.in_(user_ids)).all()}
    missing = [user_id for user_id in user_ids if user_id not in existing]
    if missing:
        raise ValidationFailed(f"The following users don't exist: {', '.join(missing)}")


def _sync_members(board: Board, members: List[MemberIn]) -> None:
    """Update member rows in place so the (board, user) constraint never trips."""
    wanted: Dict[str, str] = {member.user: member.role.value for member in members}
    for existing in list(board.members):
        if existing.user_id not in wanted:
            board.members.remove(existing)
        else:
            existing.role = wanted.pop(existing.user_id)
    for user_id, role in wanted.items():
        board.members.append(BoardMember(user_id=user_id, role=role))


def create_board(db: Session, board_data: BoardCreate, user_id: str) -> Board:
    if db.query(User.id).filter(User.id == user_id).first() is None:
        raise ValidationFailed("Owner user does not exist")

    members = board_data.members
    if members is None:
        members = [MemberIn(user=user_id, role=MemberRole.ADMIN)]
    members = _dedupe_members(members)

    def work(session: Session) -> str:
        _verify_members_exist(session, members)
        board = Board(
            id=new_id(),
            name=board_data.name,
            description=board_data.description or "",
            owner_id=user_id,
            column_order=[],
            tags=list(board_data.tags),
            locked_columns=board_data.locked_columns,
        )
        session.add(board)
        _sync_members(board, members)
        return board.id

    board_id = run_in_transaction(db, work)
    logger.info("Board %s created by %s", board_id, user_id)
    return get_board(db, board_id, user_id)


def list_boards(db: Session, user_id: str) -> List[Board]:
    return (
        _board_query(db)
        .filter(or_(Board.owner_id == user_id, Board.members.any(BoardMember.user_id == user_id)))
        .order_by(Board.created_at.desc())
        .all()
    )


def get_board(db: Session, board_id: str, user_id: str) -> Board:
    board = _board_query(db).filter(Board.id == board_id).first()
    if board is None:
        raise NotFound(BOARD_ACCESS_MESSAGE)
    require_board_access(board, user_id)
    return board


def update_board(db: Session, board_id: str, board_update: BoardUpdate, user_id: str) -> Board:
    update_data = board_update.model_dump(exclude_unset=True)
    members = board_update.members if "members" in update_data else None
    update_data.pop("members", None)

    def work(session: Session) -> None:
        board = get_board_for(session, board_id, user_id, roles=ADMIN_ROLES, lock=True)
        if members is not None:
            unique = _dedupe_members(members)
            _verify_members_exist(session, unique)
            _sync_members(board, unique)
        for field, value in update_data.items():
            if value is None and field != "description":
                continue
            setattr(board, field, value)

    run_in_transaction(db, work)
    return get_board(db, board_id, user_id)


def delete_board(db: Session, board_id: str, user_id: str) -> Dict[str, object]:
    def work(session: Session) -> Dict[str, object]:
        board = for_update(session.query(Board).filter(Board.id == board_id)).first()
        if board is None:
            raise NotFound(BOARD_ACCESS_MESSAGE)
        if board.owner_id != user_id:
            raise Forbidden()
        deleted_columns = len(board.column_rows)
        deleted_tasks = sum(len(column.task_rows) for column in board.column_rows)
        session.delete(board)
        return {
            "board_id": board_id,
            "deleted_columns": deleted_columns,
            "deleted_tasks": deleted_tasks,
        }

    result = run_in_transaction(db, work)
    logger.info("Board %s deleted by %s", board_id, user_id)
    return result


def reorder_columns(db: Session, board_id: str, column_ids: List[str], user_id: str) -> Board:
    """Replace the board's column order with a permutation of itself.

    Only ``Board.column_order`` is written; no column or task row changes.
    """
    proposed = list(column_ids)

    def work(session: Session) -> Optional[List[str]]:
        board = get_board_for(session, board_id, user_id, roles=EDITOR_ROLES, lock=True)
        current = list(board.column_order or [])
        ordering.validate_permutation(current, proposed, noun="column")
        if current == proposed:
            return None
        board.column_order = proposed
        return current

    previous = run_in_transaction(db, work)
    if previous is not None:
        logger.info("Board %s columns reordered by %s: %s -> %s", board_id, user_id, previous, proposed)
    return get_board(db, board_id, user_id)
