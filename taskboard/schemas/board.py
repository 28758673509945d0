"""Schemas for boards and column reordering"""
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from taskboard.models.board_member import MemberRole
from taskboard.schemas.column import ColumnResponse
from taskboard.schemas.common import CamelModel
from taskboard.schemas.user import UserSummary


class MemberIn(CamelModel):
    user: str
    role: MemberRole = MemberRole.EDITOR


class BoardCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = ""
    members: Optional[List[MemberIn]] = None
    tags: List[str] = Field(default_factory=list)
    locked_columns: bool = False


class BoardUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    members: Optional[List[MemberIn]] = None
    tags: Optional[List[str]] = None
    is_favorite: Optional[bool] = None
    locked_columns: Optional[bool] = None

    class Config:
        extra = "forbid"


class ColumnOrderUpdate(CamelModel):
    column_ids: List[str]


class MemberResponse(CamelModel):
    user: UserSummary
    role: str


class BoardResponse(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    owner: UserSummary
    members: List[MemberResponse] = Field(default_factory=list)
    column_ids: List[str] = Field(default_factory=list)
    columns: List[ColumnResponse] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    is_favorite: bool
    locked_columns: bool
    created_at: datetime
    updated_at: datetime


class BoardDeleteResponse(CamelModel):
    board_id: str
    deleted_columns: int
    deleted_tasks: int
