"""Schemas for tasks and task moves"""
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from taskboard.models.task import TaskPriority
from taskboard.schemas.common import CamelModel
from taskboard.schemas.user import UserSummary


class TaskCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[datetime] = None
    tags: List[str] = Field(default_factory=list)
    assignees: List[str] = Field(default_factory=list)


class TaskUpdate(CamelModel):
    """Editable task fields. Placement only changes through a move."""

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None
    tags: Optional[List[str]] = None
    assignees: Optional[List[str]] = None

    class Config:
        extra = "forbid"


class TaskMove(CamelModel):
    target_column_id: str
    new_order: int


class TaskAssign(CamelModel):
    user_id: str


class TaskResponse(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    priority: TaskPriority
    due_date: Optional[datetime] = None
    tags: List[str] = Field(default_factory=list)
    column_id: str
    board_id: str
    assignees: List[UserSummary] = Field(default_factory=list)
    created_by: Optional[UserSummary] = None
    created_at: datetime
    updated_at: datetime


class TaskDetailResponse(TaskResponse):
    column_name: str
    board_name: str


class TaskMoveResponse(CamelModel):
    task_id: str
    previous_column_id: str
    new_column_id: str
    new_order: int
    source_task_ids: List[str]
    target_task_ids: List[str]


class TaskDeleteResponse(CamelModel):
    task_id: str
    board_id: str
    column_id: str


class AssignmentResponse(CamelModel):
    task_id: str
    user_id: str
    acting_user_id: str
    assignees: List[str]
