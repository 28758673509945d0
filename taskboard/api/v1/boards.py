"""Board endpoints, including column reordering"""
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from taskboard.api.v1.serializers import serialize_board
from taskboard.database import get_db
from taskboard.dependencies import get_current_user
from taskboard.models import User
from taskboard.schemas import (
    BoardCreate,
    BoardDeleteResponse,
    BoardResponse,
    BoardUpdate,
    ColumnOrderUpdate,
    Envelope,
)
from taskboard.services import boards as board_service

router = APIRouter()


@router.post("", response_model=Envelope[BoardResponse], status_code=status.HTTP_201_CREATED)
def create_board(
    board_data: BoardCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a board owned by the current user."""
    board = board_service.create_board(db, board_data, current_user.id)
    return Envelope(data=serialize_board(board), message="Board created successfully")


@router.get("", response_model=Envelope[List[BoardResponse]])
def list_boards(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """List boards the current user owns or is a member of."""
    boards = board_service.list_boards(db, current_user.id)
    return Envelope(data=[serialize_board(board) for board in boards], message="Boards retrieved successfully")


@router.get("/{board_id}", response_model=Envelope[BoardResponse])
def get_board(
    board_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Return a board with its columns and tasks in display order."""
    board = board_service.get_board(db, board_id, current_user.id)
    return Envelope(data=serialize_board(board), message="Board retrieved successfully")


@router.put("/{board_id}", response_model=Envelope[BoardResponse])
def update_board(
    board_id: str,
    board_update: BoardUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    board = board_service.update_board(db, board_id, board_update, current_user.id)
    return Envelope(data=serialize_board(board), message="Board updated successfully")


@router.delete("/{board_id}", response_model=Envelope[BoardDeleteResponse])
def delete_board(
    board_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = board_service.delete_board(db, board_id, current_user.id)
    return Envelope(data=BoardDeleteResponse(**result), message="Board deleted successfully")


@router.put("/{board_id}/column-order", response_model=Envelope[BoardResponse])
def update_column_order(
    board_id: str,
    order_update: ColumnOrderUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Replace the board's column order; the body must be a permutation of it."""
    board = board_service.reorder_columns(db, board_id, order_update.column_ids, current_user.id)
    return Envelope(data=serialize_board(board), message="Column order updated successfully")
