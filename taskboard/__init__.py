"""Taskboard: kanban boards with consistent column and task ordering."""

__version__ = "1.0.0"
