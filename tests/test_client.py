import json

import httpx
import pytest

from taskboard import ordering
from taskboard.client import (
    ApiError,
    BoardApiClient,
    BoardController,
    DragInProgress,
    Idle,
    PendingConfirm,
    Reconciled,
    RolledBack,
)
from taskboard.client.state import LocalBoard, apply_task_orders, predict_task_move

BOARD_ID = "B1"


class FakeBoardServer:
    """In-memory stand-in for the board API behind ``httpx.MockTransport``."""

    def __init__(self, layout):
        self.layout = {column_id: list(task_ids) for column_id, task_ids in layout.items()}
        self.requests = []
        self.fail_next = None
        self.timeout_next = False
        self.on_mutation = None

    def payload(self):
        columns = []
        for column_id, task_ids in self.layout.items():
            columns.append(
                {
                    "id": column_id,
                    "name": column_id,
                    "boardId": BOARD_ID,
                    "isLocked": False,
                    "taskIds": list(task_ids),
                    "tasks": [{"id": task_id, "title": task_id, "columnId": column_id} for task_id in task_ids],
                }
            )
        return {"id": BOARD_ID, "name": "Sprint", "columnIds": list(self.layout), "columns": columns}

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        self.requests.append((request.method, request.url.path, body))
        assert request.headers["Authorization"] == "Bearer token"

        if request.method != "GET":
            if self.on_mutation:
                self.on_mutation()
            if self.timeout_next:
                self.timeout_next = False
                raise httpx.ReadTimeout("timed out", request=request)
            if self.fail_next:
                status, message = self.fail_next
                self.fail_next = None
                return httpx.Response(status, json={"success": False, "message": message})

        path = request.url.path
        if request.method == "GET" and path == f"/api/v1/boards/{BOARD_ID}":
            return self._ok(self.payload())
        if request.method == "PUT" and path == f"/api/v1/boards/{BOARD_ID}/column-order":
            ordering.validate_permutation(list(self.layout), body["columnIds"])
            self.layout = {column_id: self.layout[column_id] for column_id in body["columnIds"]}
            return self._ok(self.payload())
        if request.method == "PATCH" and path.endswith("/move"):
            task_id = path.split("/")[-2]
            return self._ok(self._move(task_id, body["targetColumnId"], body["newOrder"]))
        return httpx.Response(404, json={"success": False, "message": "Not found"})

    def _move(self, task_id, target_id, new_order):
        source_id = next(column_id for column_id, task_ids in self.layout.items() if task_id in task_ids)
        if source_id == target_id:
            self.layout[source_id] = ordering.move_within(
                self.layout[source_id], self.layout[source_id].index(task_id), new_order
            )
        else:
            self.layout[source_id] = ordering.remove(self.layout[source_id], task_id)
            self.layout[target_id] = ordering.insert_at(self.layout[target_id], task_id, new_order)
        return {
            "taskId": task_id,
            "previousColumnId": source_id,
            "newColumnId": target_id,
            "newOrder": self.layout[target_id].index(task_id),
            "sourceTaskIds": self.layout[source_id],
            "targetTaskIds": self.layout[target_id],
        }

    @staticmethod
    def _ok(data):
        return httpx.Response(200, json={"success": True, "data": data, "message": ""})


async def _controller(server):
    api = BoardApiClient("token", base_url="http://test/api/v1", transport=httpx.MockTransport(server.handler))
    controller = BoardController(api, BOARD_ID)
    await controller.load()
    return controller


def _mutations(server):
    return [request for request in server.requests if request[0] != "GET"]


@pytest.mark.asyncio
async def test_task_drop_renders_prediction_then_reconciles():
    server = FakeBoardServer({"C1": ["T1", "T2"], "C2": ["T3"]})
    controller = await _controller(server)
    seen = []
    server.on_mutation = lambda: seen.append((controller.state, controller.board.task_ids("C2")))

    async with controller.drag_task("T1") as drag:
        state = await drag.drop(slot=0, column_id="C2")

    pending, rendered = seen[0]
    assert isinstance(pending, PendingConfirm)
    assert pending.predicted == {"C1": ["T2"], "C2": ["T1", "T3"]}
    assert rendered == ["T1", "T3"]

    assert isinstance(state, Reconciled)
    assert state.authoritative == {"C1": ["T2"], "C2": ["T1", "T3"]}
    assert controller.board.task_ids("C1") == ["T2"]
    assert controller.board.column("C2")["tasks"][0]["columnId"] == "C2"
    assert _mutations(server) == [
        ("PATCH", "/api/v1/tasks/T1/move", {"targetColumnId": "C2", "newOrder": 0}),
    ]
    assert controller.active_session is None
    await controller.api.aclose()


@pytest.mark.asyncio
async def test_same_column_drop_sends_final_index():
    server = FakeBoardServer({"C1": ["T1", "T2", "T3"]})
    controller = await _controller(server)

    async with controller.drag_task("T1") as drag:
        await drag.drop(slot=3)

    assert _mutations(server) == [
        ("PATCH", "/api/v1/tasks/T1/move", {"targetColumnId": "C1", "newOrder": 2}),
    ]
    assert controller.board.task_ids("C1") == ["T2", "T3", "T1"]
    await controller.api.aclose()


@pytest.mark.asyncio
@pytest.mark.parametrize("slot", [1, 2])
async def test_drop_on_origin_never_reaches_network(slot):
    server = FakeBoardServer({"C1": ["T1", "T2", "T3"]})
    controller = await _controller(server)

    async with controller.drag_task("T2") as drag:
        state = await drag.drop(slot=slot, column_id="C1")

    assert isinstance(state, Idle)
    assert _mutations(server) == []
    assert controller.board.task_ids("C1") == ["T1", "T2", "T3"]
    await controller.api.aclose()


@pytest.mark.asyncio
async def test_rejected_drop_refetches_board():
    server = FakeBoardServer({"C1": ["T1", "T2"], "C2": []})
    controller = await _controller(server)
    server.fail_next = (409, "The board was modified concurrently, reload and try again")
    gets_before = len(server.requests)

    async with controller.drag_task("T1") as drag:
        state = await drag.drop(slot=0, column_id="C2")

    assert isinstance(state, RolledBack)
    assert state.error.status == 409
    assert state.error.is_conflict
    assert server.requests[-1][0] == "GET"
    assert len(server.requests) == gets_before + 2
    assert controller.board.task_ids("C1") == ["T1", "T2"]
    assert controller.board.task_ids("C2") == []
    assert controller.stale is False
    await controller.api.aclose()


@pytest.mark.asyncio
async def test_timeout_counts_as_failure(caplog):
    server = FakeBoardServer({"C1": ["T1"], "C2": []})
    controller = await _controller(server)
    server.timeout_next = True

    async with controller.drag_task("T1") as drag:
        state = await drag.drop(slot=0, column_id="C2")

    assert isinstance(state, RolledBack)
    assert state.error.status is None
    timeouts = [record for record in caplog.records if record.name == "taskboard.client.api"]
    assert timeouts[0].args == ("PATCH", "/tasks/T1/move")
    assert timeouts[0].getMessage() == "PATCH /tasks/T1/move timed out"
    assert controller.board.task_ids("C2") == []
    await controller.api.aclose()


@pytest.mark.asyncio
async def test_server_answer_wins_over_prediction():
    server = FakeBoardServer({"C1": ["T1"], "C2": ["T3"]})
    controller = await _controller(server)
    # Someone else adds T9 to C2 after we loaded the board
    server.layout["C2"] = ["T9", "T3"]

    async with controller.drag_task("T1") as drag:
        state = await drag.drop(slot=1, column_id="C2")

    assert isinstance(state, Reconciled)
    assert state.authoritative["C2"] == ["T9", "T1", "T3"]
    assert controller.board.task_ids("C2") == ["T9", "T1", "T3"]
    await controller.api.aclose()


@pytest.mark.asyncio
async def test_column_drag_reconciles_with_server_order():
    server = FakeBoardServer({"C1": [], "C2": [], "C3": []})
    controller = await _controller(server)

    async with controller.drag_column("C1") as drag:
        state = await drag.drop(slot=3)

    assert isinstance(state, Reconciled)
    assert state.authoritative == {"columns": ["C2", "C3", "C1"]}
    assert controller.board.column_ids == ["C2", "C3", "C1"]
    assert _mutations(server)[0][2] == {"columnIds": ["C2", "C3", "C1"]}
    await controller.api.aclose()


@pytest.mark.asyncio
async def test_escape_and_errors_always_clear_the_session():
    server = FakeBoardServer({"C1": ["T1"]})
    controller = await _controller(server)

    async with controller.drag_task("T1"):
        with pytest.raises(DragInProgress):
            async with controller.drag_task("T1"):
                pass
    assert isinstance(controller.state, Idle)
    assert controller.active_session is None

    with pytest.raises(RuntimeError):
        async with controller.drag_column("C1"):
            raise RuntimeError("pointer lost")
    assert isinstance(controller.state, Idle)
    assert controller.active_session is None
    assert _mutations(server) == []
    await controller.api.aclose()


@pytest.mark.asyncio
async def test_api_client_raises_server_message():
    server = FakeBoardServer({"C1": []})
    server.fail_next = (400, "Order must be between 0 and 0")
    async with BoardApiClient(
        "token", base_url="http://test/api/v1", transport=httpx.MockTransport(server.handler)
    ) as api:
        with pytest.raises(ApiError) as exc:
            await api.move_task("T1", "C1", 4)
    assert exc.value.status == 400
    assert exc.value.message == "Order must be between 0 and 0"


def test_predict_task_move_and_apply():
    source, target = predict_task_move(["T1", "T2"], ["T3"], 0, 1)
    assert (source, target) == (["T2"], ["T3", "T1"])

    board = LocalBoard(FakeBoardServer({"C1": ["T1", "T2"], "C2": ["T3"]}).payload())
    assert apply_task_orders(board, {"C1": source, "C2": target})
    assert board.task_ids("C2") == ["T3", "T1"]
    assert not apply_task_orders(board, {"C2": ["T3", "T1", "T7"]})
    assert board.task_ids("C2") == ["T3", "T1"]
