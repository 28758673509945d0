"""Client library: API access and optimistic drag-and-drop."""
from taskboard.client.api import ApiError, BoardApiClient
from taskboard.client.drag import (
    BoardController,
    DragInProgress,
    DragSession,
    Dragging,
    Idle,
    PendingConfirm,
    Reconciled,
    RolledBack,
)
from taskboard.client.state import LocalBoard

__all__ = [
    "ApiError",
    "BoardApiClient",
    "BoardController",
    "DragInProgress",
    "DragSession",
    "Dragging",
    "Idle",
    "PendingConfirm",
    "Reconciled",
    "RolledBack",
    "LocalBoard",
]
