"""Task endpoints, including the move operation"""
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from taskboard.api.v1.serializers import serialize_task, serialize_task_detail
from taskboard.database import get_db
from taskboard.dependencies import get_current_user
from taskboard.models import User
from taskboard.schemas import (
    AssignmentResponse,
    Envelope,
    TaskAssign,
    TaskCreate,
    TaskDeleteResponse,
    TaskDetailResponse,
    TaskMove,
    TaskMoveResponse,
    TaskResponse,
    TaskUpdate,
)
from taskboard.services import tasks as task_service

router = APIRouter()


@router.post(
    "/columns/{column_id}/tasks",
    response_model=Envelope[TaskResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_task(
    column_id: str,
    task_data: TaskCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a task at the end of the column."""
    task = task_service.create_task(db, column_id, task_data, current_user.id)
    return Envelope(data=serialize_task(task), message="Task created successfully")


@router.get("/columns/{column_id}/tasks", response_model=Envelope[List[TaskResponse]])
def list_column_tasks(
    column_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    tasks = task_service.list_column_tasks(db, column_id, current_user.id)
    return Envelope(data=[serialize_task(task) for task in tasks], message="Tasks retrieved successfully")


@router.get("/tasks/{task_id}", response_model=Envelope[TaskDetailResponse])
def get_task(
    task_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    task = task_service.get_task(db, task_id, current_user.id)
    return Envelope(data=serialize_task_detail(task), message="Task retrieved successfully")


@router.patch("/tasks/{task_id}", response_model=Envelope[TaskResponse])
def update_task(
    task_id: str,
    task_update: TaskUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    task = task_service.update_task(db, task_id, task_update, current_user.id)
    return Envelope(data=serialize_task(task), message="Task updated successfully")


@router.delete("/tasks/{task_id}", response_model=Envelope[TaskDeleteResponse])
def delete_task(
    task_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = task_service.delete_task(db, task_id, current_user.id)
    return Envelope(data=TaskDeleteResponse(**result), message="Task deleted successfully")


@router.patch("/tasks/{task_id}/move", response_model=Envelope[TaskMoveResponse])
def move_task(
    task_id: str,
    move_data: TaskMove,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Move a task within its column or to another column of the same board."""
    result = task_service.move_task(
        db, task_id, move_data.target_column_id, move_data.new_order, current_user.id
    )
    message = "Task moved successfully" if result.moved else "Task already in position"
    return Envelope(data=TaskMoveResponse(**result.as_dict()), message=message)


@router.post("/tasks/{task_id}/assign", response_model=Envelope[AssignmentResponse])
def assign_task(
    task_id: str,
    assignment: TaskAssign,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = task_service.assign_task(db, task_id, assignment.user_id, current_user.id)
    return Envelope(data=AssignmentResponse(**result), message="User assigned successfully")


@router.delete("/tasks/{task_id}/assign/{user_id}", response_model=Envelope[AssignmentResponse])
def remove_assignment(
    task_id: str,
    user_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = task_service.unassign_task(db, task_id, user_id, current_user.id)
    return Envelope(data=AssignmentResponse(**result), message="Assignment removed successfully")
