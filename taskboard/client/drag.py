"""
Optimistic drag-and-drop for one board.

A drag gesture moves through ``Idle -> Dragging -> PendingConfirm`` and then
settles in ``Reconciled`` (server answer applied) or ``RolledBack`` (board
refetched). ``DragSession`` owns one gesture and always leaves the controller
without an active session, whichever way the ``async with`` block exits.

    async with controller.drag_task(task_id) as drag:
        await drag.drop(slot=2, column_id=target_column_id)
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from taskboard import ordering
from taskboard.client.api import ApiError, BoardApiClient
from taskboard.client.state import (
    LocalBoard,
    apply_column_order,
    apply_task_orders,
    predict_column_order,
    predict_task_move,
)

logger = logging.getLogger(__name__)

TASK = "task"
COLUMN = "column"
# Key used for the column order in predicted/authoritative maps
COLUMNS_KEY = "columns"


@dataclass(frozen=True)
class Origin:
    kind: str
    entity_id: str
    container_id: str
    index: int


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Dragging:
    origin: Origin


@dataclass(frozen=True)
class PendingConfirm:
    origin: Origin
    predicted: Dict[str, List[str]] = field(default_factory=dict)


@dataclass(frozen=True)
class Reconciled:
    authoritative: Dict[str, List[str]] = field(default_factory=dict)


@dataclass(frozen=True)
class RolledBack:
    error: ApiError


DragState = Union[Idle, Dragging, PendingConfirm, Reconciled, RolledBack]


class DragInProgress(RuntimeError):
    pass


class BoardController:
    """Holds the cached board and runs drag gestures against it."""

    def __init__(self, api: BoardApiClient, board_id: str):
        self.api = api
        self.board_id = board_id
        self.board: Optional[LocalBoard] = None
        self.state: DragState = Idle()
        self.stale = False
        self._session: Optional["DragSession"] = None

    @property
    def active_session(self) -> Optional["DragSession"]:
        return self._session

    async def load(self) -> LocalBoard:
        payload = await self.api.get_board(self.board_id)
        self.board = LocalBoard.from_payload(payload)
        self.stale = False
        return self.board

    async def refetch(self) -> None:
        """Replace the cache with the server's board; failures leave it flagged stale."""
        self.stale = True
        await self.load()

    def drag_task(self, task_id: str) -> "DragSession":
        return DragSession(self, TASK, task_id)

    def drag_column(self, column_id: str) -> "DragSession":
        return DragSession(self, COLUMN, column_id)


class DragSession:
    """One drag gesture; use with ``async with``."""

    def __init__(self, controller: BoardController, kind: str, entity_id: str):
        self.controller = controller
        self.kind = kind
        self.entity_id = entity_id
        self.origin: Optional[Origin] = None
        self.dropped = False

    async def __aenter__(self) -> "DragSession":
        controller = self.controller
        if controller._session is not None:
            raise DragInProgress("Another drag is already in progress")
        if controller.board is None:
            await controller.load()

        board = controller.board
        if self.kind == TASK:
            column_id, index = board.locate_task(self.entity_id)
            self.origin = Origin(TASK, self.entity_id, column_id, index)
        else:
            index = board.locate_column(self.entity_id)
            self.origin = Origin(COLUMN, self.entity_id, board.board_id, index)

        controller._session = self
        controller.state = Dragging(self.origin)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        controller = self.controller
        if isinstance(controller.state, PendingConfirm):
            # Left before the server answered; the prediction cannot be trusted
            controller.stale = True
            controller.state = Idle()
        elif isinstance(controller.state, Dragging):
            controller.state = Idle()
        controller._session = None
        return False

    async def drop(self, slot: int, column_id: Optional[str] = None) -> DragState:
        """Drop at gap ``slot`` of the rendered list, in ``column_id`` for tasks.

        Returns the settled state. A drop back onto the origin position is a
        no-op that never reaches the network.
        """
        if self.origin is None or self.controller._session is not self:
            raise DragInProgress("Drop outside of an active drag")
        if self.dropped:
            raise DragInProgress("This drag has already been dropped")
        self.dropped = True

        if self.kind == TASK:
            return await self._drop_task(slot, column_id or self.origin.container_id)
        return await self._drop_column(slot)

    def _settle_noop(self) -> DragState:
        self.controller.state = Idle()
        logger.debug("Drop on origin position for %s %s, nothing to do", self.kind, self.entity_id)
        return self.controller.state

    async def _drop_column(self, slot: int) -> DragState:
        controller = self.controller
        board = controller.board
        column_ids = board.column_ids
        _check_slot(slot, len(column_ids))
        to_index = ordering.slot_to_index(self.origin.index, slot)
        if to_index == self.origin.index:
            return self._settle_noop()

        predicted = predict_column_order(column_ids, self.origin.index, to_index)
        apply_column_order(board, predicted)
        controller.state = PendingConfirm(self.origin, {COLUMNS_KEY: predicted})

        try:
            payload = await controller.api.reorder_columns(controller.board_id, predicted)
        except ApiError as e:
            return await self._roll_back(e)

        controller.board = LocalBoard.from_payload(payload)
        controller.state = Reconciled({COLUMNS_KEY: controller.board.column_ids})
        logger.info("Column %s confirmed at %d", self.entity_id, to_index)
        return controller.state

    async def _drop_task(self, slot: int, column_id: str) -> DragState:
        controller = self.controller
        board = controller.board
        source_id = self.origin.container_id
        same_column = column_id == source_id
        source_ids = board.task_ids(source_id)
        target_ids = None if same_column else board.task_ids(column_id)

        if same_column:
            _check_slot(slot, len(source_ids))
            to_index = ordering.slot_to_index(self.origin.index, slot)
            if to_index == self.origin.index:
                return self._settle_noop()
        else:
            _check_slot(slot, len(target_ids))
            to_index = slot

        source_order, target_order = predict_task_move(source_ids, target_ids, self.origin.index, to_index)
        predicted = {source_id: source_order, column_id: target_order}
        apply_task_orders(board, predicted)
        controller.state = PendingConfirm(self.origin, predicted)

        try:
            result = await controller.api.move_task(self.entity_id, column_id, to_index)
        except ApiError as e:
            return await self._roll_back(e)

        authoritative = {
            result["previousColumnId"]: result["sourceTaskIds"],
            result["newColumnId"]: result["targetTaskIds"],
        }
        if not apply_task_orders(board, authoritative):
            logger.info("Local board out of date after move of %s, refetching", self.entity_id)
            await controller.refetch()
        controller.state = Reconciled(authoritative)
        logger.info("Task %s confirmed in %s at %d", self.entity_id, result["newColumnId"], result["newOrder"])
        return controller.state

    async def _roll_back(self, error: ApiError) -> DragState:
        controller = self.controller
        controller.state = RolledBack(error)
        logger.warning("Drop of %s %s rejected (%s), refetching board", self.kind, self.entity_id, error.message)
        await controller.refetch()
        return controller.state


def _check_slot(slot: int, length: int) -> None:
    if not 0 <= slot <= length:
        raise ValueError(f"Drop slot {slot} out of range for {length} items")
