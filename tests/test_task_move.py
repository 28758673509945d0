import pytest

from conftest import seed_board, seed_users
from taskboard import ordering
from taskboard.config import settings
from taskboard.errors import Forbidden, InvalidOrder, InvalidTarget, NotFound, TransactionConflict
from taskboard.models import BoardColumn
from taskboard.services import tasks as task_service


def _move(seeded, title, column_name, new_order, user):
    return task_service.move_task(
        seeded.session, seeded.tasks[title], seeded.columns[column_name], new_order, user.id
    )


def test_move_first_task_to_end_of_same_column(make_board, users):
    seeded = make_board({"C1": ["T1", "T2", "T3"]})

    result = _move(seeded, "T1", "C1", 2, users["owner"])

    assert seeded.task_titles("C1") == ["T2", "T3", "T1"]
    assert result.moved is True
    assert result.new_order == 2
    assert result.previous_column_id == result.new_column_id == seeded.columns["C1"]


def test_move_task_to_front_of_other_column(make_board, users):
    seeded = make_board({"C1": ["T1", "T2"], "C2": ["T3"]})

    result = _move(seeded, "T1", "C2", 0, users["editor"])

    assert seeded.task_titles("C1") == ["T2"]
    assert seeded.task_titles("C2") == ["T1", "T3"]
    assert seeded.task("T1").column_id == seeded.columns["C2"]
    assert result.previous_column_id == seeded.columns["C1"]
    assert result.new_column_id == seeded.columns["C2"]
    assert result.source_task_ids == [seeded.tasks["T2"]]
    assert result.target_task_ids == [seeded.tasks["T1"], seeded.tasks["T3"]]


def test_cross_column_move_conserves_tasks(make_board, users):
    seeded = make_board({"C1": ["T1", "T2", "T3"], "C2": ["T4", "T5"]})
    before = len(seeded.column("C1").task_order) + len(seeded.column("C2").task_order)

    _move(seeded, "T2", "C2", 1, users["owner"])

    source = seeded.column("C1").task_order
    target = seeded.column("C2").task_order
    assert len(source) + len(target) == before
    assert (source + target).count(seeded.tasks["T2"]) == 1
    assert seeded.task_titles("C2") == ["T4", "T2", "T5"]


def test_move_onto_current_position_writes_nothing(make_board, users):
    seeded = make_board({"C1": ["T1", "T2", "T3"]})
    column_before = seeded.column("C1")
    order, column_version = list(column_before.task_order), column_before.version
    task_version = seeded.task("T2").version

    result = _move(seeded, "T2", "C1", 1, users["owner"])

    column_after = seeded.column("C1")
    assert result.moved is False
    assert column_after.task_order == order
    assert column_after.version == column_version
    assert seeded.task("T2").version == task_version
    assert seeded.task("T2").column_id == seeded.columns["C1"]


def test_sole_task_end_of_own_column_is_last_index(make_board, users):
    seeded = make_board({"C1": ["T1"]})

    result = _move(seeded, "T1", "C1", 0, users["owner"])
    assert result.moved is False

    with pytest.raises(InvalidOrder):
        _move(seeded, "T1", "C1", 1, users["owner"])
    assert seeded.task_titles("C1") == ["T1"]


def test_insertion_bounds_into_other_column(make_board, users):
    seeded = make_board({"C1": ["T1", "T2"], "C2": ["T3", "T4", "T5"]})

    with pytest.raises(InvalidOrder) as exc:
        _move(seeded, "T1", "C2", 4, users["owner"])
    assert exc.value.message == "Order must be between 0 and 3"
    assert seeded.task_titles("C1") == ["T1", "T2"]
    assert seeded.task_titles("C2") == ["T3", "T4", "T5"]

    _move(seeded, "T1", "C2", 3, users["owner"])
    assert seeded.task_titles("C2") == ["T3", "T4", "T5", "T1"]


def test_insertion_bounds_within_same_column(make_board, users):
    seeded = make_board({"C1": ["T1", "T2", "T3"]})

    with pytest.raises(InvalidOrder):
        _move(seeded, "T1", "C1", 3, users["owner"])
    with pytest.raises(InvalidOrder):
        _move(seeded, "T1", "C1", -1, users["owner"])

    _move(seeded, "T3", "C1", 0, users["owner"])
    assert seeded.task_titles("C1") == ["T3", "T1", "T2"]


def test_move_into_empty_column(make_board, users):
    seeded = make_board({"C1": ["T1"], "C2": []})

    _move(seeded, "T1", "C2", 0, users["owner"])

    assert seeded.task_titles("C1") == []
    assert seeded.task_titles("C2") == ["T1"]


def test_move_to_column_of_another_board_is_invalid_target(make_board, users):
    seeded = make_board({"C1": ["T1"]})
    other = make_board({"Elsewhere": []}, name="Other")

    with pytest.raises(InvalidTarget):
        task_service.move_task(
            seeded.session, seeded.tasks["T1"], other.columns["Elsewhere"], 0, users["owner"].id
        )
    with pytest.raises(InvalidTarget):
        task_service.move_task(seeded.session, seeded.tasks["T1"], "missing-column", 0, users["owner"].id)

    assert seeded.task_titles("C1") == ["T1"]
    assert other.task_titles("Elsewhere") == []


def test_viewer_may_move_but_outsider_may_not(make_board, users):
    seeded = make_board({"C1": ["T1", "T2"]})

    _move(seeded, "T1", "C1", 1, users["viewer"])
    assert seeded.task_titles("C1") == ["T2", "T1"]

    with pytest.raises(Forbidden):
        _move(seeded, "T1", "C1", 0, users["outsider"])
    assert seeded.task_titles("C1") == ["T2", "T1"]


def test_move_unknown_task(make_board, users):
    seeded = make_board({"C1": []})
    with pytest.raises(NotFound):
        task_service.move_task(seeded.session, "nope", seeded.columns["C1"], 0, users["owner"].id)


def test_move_result_dict_uses_final_placement(make_board, users):
    seeded = make_board({"C1": ["T1", "T2"], "C2": []})

    payload = _move(seeded, "T2", "C2", 0, users["owner"]).as_dict()

    assert payload == {
        "task_id": seeded.tasks["T2"],
        "previous_column_id": seeded.columns["C1"],
        "new_column_id": seeded.columns["C2"],
        "new_order": 0,
        "source_task_ids": [seeded.tasks["T1"]],
        "target_task_ids": [seeded.tasks["T2"]],
    }


def test_move_racing_a_reorder_lands_in_the_fresh_destination_order(file_sessions, monkeypatch):
    session, other = file_sessions
    users = seed_users(session)
    seeded = seed_board(session, users, {"C1": ["T1"], "C2": ["T3", "T4"]})
    t1, t3, t4 = (seeded.tasks[title] for title in ("T1", "T3", "T4"))
    insert_at = ordering.insert_at
    seen_targets = []

    def insert_after_concurrent_reorder(seq, item_id, index):
        if not seen_targets:
            # Another client reorders C2 and commits after our read
            column = other.query(BoardColumn).filter(BoardColumn.id == seeded.columns["C2"]).one()
            column.task_order = [t4, t3]
            other.commit()
        seen_targets.append(list(seq))
        return insert_at(seq, item_id, index)

    monkeypatch.setattr(ordering, "insert_at", insert_after_concurrent_reorder)

    result = task_service.move_task(session, t1, seeded.columns["C2"], 1, users["owner"].id)

    assert seen_targets == [[t3, t4], [t4, t3]]
    assert result.target_task_ids == [t4, t1, t3]
    assert seeded.task_titles("C2") == ["T4", "T1", "T3"]
    assert seeded.task_titles("C1") == []
    assert seeded.task("T1").column_id == seeded.columns["C2"]


def test_move_that_keeps_conflicting_leaves_board_untouched(file_sessions, monkeypatch):
    session, other = file_sessions
    users = seed_users(session)
    seeded = seed_board(session, users, {"C1": ["T1", "T2"], "C2": ["T3", "T4"]})
    insert_at = ordering.insert_at
    attempts = []

    def insert_while_destination_keeps_changing(seq, item_id, index):
        column = other.query(BoardColumn).filter(BoardColumn.id == seeded.columns["C2"]).one()
        column.name = f"C2 rev {len(attempts)}"
        other.commit()
        attempts.append(list(seq))
        return insert_at(seq, item_id, index)

    monkeypatch.setattr(ordering, "insert_at", insert_while_destination_keeps_changing)

    with pytest.raises(TransactionConflict) as exc:
        task_service.move_task(session, seeded.tasks["T1"], seeded.columns["C2"], 0, users["owner"].id)

    assert exc.value.status_code == 409
    assert len(attempts) == settings.TRANSACTION_MAX_RETRIES
    assert seeded.task_titles("C1") == ["T1", "T2"]
    assert seeded.task_titles("C2") == ["T3", "T4"]
    assert seeded.task("T1").column_id == seeded.columns["C1"]
