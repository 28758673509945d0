"""Taskboard Database Models"""
from taskboard.models.user import User
from taskboard.models.board import Board
from taskboard.models.board_member import BoardMember, MemberRole
from taskboard.models.column import BoardColumn
from taskboard.models.task import Task, TaskPriority, task_assignees
from taskboard.utils.primary_keys import register_string_pk_listener

__all__ = [
    "User",
    "Board",
    "BoardMember",
    "MemberRole",
    "BoardColumn",
    "Task",
    "TaskPriority",
    "task_assignees",
]


for _model in (
    User,
    Board,
    BoardColumn,
    Task,
):
    register_string_pk_listener(_model)
