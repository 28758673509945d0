"""
Pydantic schemas for request/response validation
"""
from taskboard.schemas.common import CamelModel, Envelope, ErrorEnvelope
from taskboard.schemas.user import UserSummary, Principal
from taskboard.schemas.task import (
    TaskCreate,
    TaskUpdate,
    TaskMove,
    TaskAssign,
    TaskResponse,
    TaskDetailResponse,
    TaskMoveResponse,
    TaskDeleteResponse,
    AssignmentResponse,
)
from taskboard.schemas.column import (
    ColumnCreate,
    ColumnUpdate,
    ColumnLockUpdate,
    TaskOrderUpdate,
    ColumnResponse,
    ColumnListResponse,
    ColumnLockResponse,
    ColumnDeleteResponse,
)
from taskboard.schemas.board import (
    MemberIn,
    BoardCreate,
    BoardUpdate,
    ColumnOrderUpdate,
    MemberResponse,
    BoardResponse,
    BoardDeleteResponse,
)

__all__ = [
    "CamelModel",
    "Envelope",
    "ErrorEnvelope",
    "UserSummary",
    "Principal",
    "TaskCreate",
    "TaskUpdate",
    "TaskMove",
    "TaskAssign",
    "TaskResponse",
    "TaskDetailResponse",
    "TaskMoveResponse",
    "TaskDeleteResponse",
    "AssignmentResponse",
    "ColumnCreate",
    "ColumnUpdate",
    "ColumnLockUpdate",
    "TaskOrderUpdate",
    "ColumnResponse",
    "ColumnListResponse",
    "ColumnLockResponse",
    "ColumnDeleteResponse",
    "MemberIn",
    "BoardCreate",
    "BoardUpdate",
    "ColumnOrderUpdate",
    "MemberResponse",
    "BoardResponse",
    "BoardDeleteResponse",
]
