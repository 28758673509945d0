"""Column endpoints"""
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from taskboard.api.v1.serializers import serialize_column, serialize_columns
from taskboard.database import get_db
from taskboard.dependencies import get_current_user
from taskboard.models import User
from taskboard.schemas import (
    ColumnCreate,
    ColumnDeleteResponse,
    ColumnListResponse,
    ColumnLockResponse,
    ColumnLockUpdate,
    ColumnResponse,
    ColumnUpdate,
    Envelope,
    TaskOrderUpdate,
)
from taskboard.services import columns as column_service

router = APIRouter()


@router.post(
    "/boards/{board_id}/columns",
    response_model=Envelope[ColumnResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_column(
    board_id: str,
    column_data: ColumnCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a column at the end of the board."""
    column = column_service.create_column(db, board_id, column_data, current_user.id)
    return Envelope(data=serialize_column(column), message="Column created successfully")


@router.get("/boards/{board_id}/columns", response_model=Envelope[ColumnListResponse])
def list_columns(
    board_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    board, columns = column_service.list_columns(db, board_id, current_user.id)
    return Envelope(
        data=ColumnListResponse(board_locked=board.locked_columns, columns=serialize_columns(columns)),
        message="Columns retrieved successfully",
    )


@router.patch("/columns/{column_id}", response_model=Envelope[ColumnResponse])
def update_column(
    column_id: str,
    column_update: ColumnUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    column = column_service.rename_column(db, column_id, column_update.name, current_user.id)
    return Envelope(data=serialize_column(column), message="Column updated successfully")


@router.patch("/columns/{column_id}/lock", response_model=Envelope[ColumnLockResponse])
def lock_column(
    column_id: str,
    lock_update: ColumnLockUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = column_service.set_column_lock(db, column_id, lock_update.is_locked, current_user.id)
    message = "Column locked successfully" if lock_update.is_locked else "Column unlocked successfully"
    return Envelope(data=ColumnLockResponse(**result), message=message)


@router.put("/columns/{column_id}/task-order", response_model=Envelope[ColumnResponse])
def update_task_order(
    column_id: str,
    order_update: TaskOrderUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Replace the column's task order; the body must be a permutation of it."""
    column = column_service.reorder_tasks(db, column_id, order_update.task_ids, current_user.id)
    return Envelope(data=serialize_column(column), message="Task order updated successfully")


@router.delete("/columns/{column_id}", response_model=Envelope[ColumnDeleteResponse])
def delete_column(
    column_id: str,
    action: Optional[Literal["delete-tasks", "move-tasks"]] = Query(None),
    target_column_id: Optional[str] = Query(None, alias="targetColumnId"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = column_service.delete_column(db, column_id, current_user.id, action, target_column_id)
    return Envelope(data=ColumnDeleteResponse(**result), message="Column deleted successfully")
