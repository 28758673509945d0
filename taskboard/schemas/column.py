"""Schemas for board columns"""
from typing import List

from pydantic import Field

from taskboard.schemas.common import CamelModel
from taskboard.schemas.task import TaskResponse


class ColumnCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    is_locked: bool = False


class ColumnUpdate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)


class ColumnLockUpdate(CamelModel):
    is_locked: bool


class TaskOrderUpdate(CamelModel):
    task_ids: List[str]


class ColumnResponse(CamelModel):
    id: str
    name: str
    board_id: str
    is_locked: bool
    task_ids: List[str] = Field(default_factory=list)
    tasks: List[TaskResponse] = Field(default_factory=list)


class ColumnListResponse(CamelModel):
    board_locked: bool
    columns: List[ColumnResponse]


class ColumnLockResponse(CamelModel):
    column_id: str
    board_id: str
    is_locked: bool
    previous_status: bool


class ColumnDeleteResponse(CamelModel):
    deleted_column_id: str
    action_taken: str
    tasks_affected: int
