"""ORM to response-schema conversion shared by the v1 routers"""
from typing import List

from taskboard.models import Board, BoardColumn, Task
from taskboard.schemas import (
    BoardResponse,
    ColumnResponse,
    MemberResponse,
    TaskDetailResponse,
    TaskResponse,
    UserSummary,
)
from taskboard.services.columns import ordered_columns, ordered_tasks


def serialize_task(task: Task) -> TaskResponse:
    return TaskResponse(
        id=task.id,
        title=task.title,
        description=task.description,
        priority=task.priority,
        due_date=task.due_date,
        tags=list(task.tags or []),
        column_id=task.column_id,
        board_id=task.board_id,
        assignees=[UserSummary.model_validate(user) for user in task.assignees],
        created_by=UserSummary.model_validate(task.creator) if task.creator else None,
        created_at=task.created_at,
        updated_at=task.updated_at,
    )


def serialize_task_detail(task: Task) -> TaskDetailResponse:
    base = serialize_task(task)
    return TaskDetailResponse(
        **base.model_dump(),
        column_name=task.column.name,
        board_name=task.column.board.name,
    )


def serialize_column(column: BoardColumn, include_tasks: bool = True) -> ColumnResponse:
    return ColumnResponse(
        id=column.id,
        name=column.name,
        board_id=column.board_id,
        is_locked=column.is_locked,
        task_ids=list(column.task_order or []),
        tasks=[serialize_task(task) for task in ordered_tasks(column)] if include_tasks else [],
    )


def serialize_columns(columns: List[BoardColumn]) -> List[ColumnResponse]:
    return [serialize_column(column) for column in columns]


def serialize_board(board: Board) -> BoardResponse:
    return BoardResponse(
        id=board.id,
        name=board.name,
        description=board.description,
        owner=UserSummary.model_validate(board.owner),
        members=[
            MemberResponse(user=UserSummary.model_validate(member.user), role=member.role)
            for member in board.members
        ],
        column_ids=list(board.column_order or []),
        columns=serialize_columns(ordered_columns(board)),
        tags=list(board.tags or []),
        is_favorite=board.is_favorite,
        locked_columns=board.locked_columns,
        created_at=board.created_at,
        updated_at=board.updated_at,
    )
