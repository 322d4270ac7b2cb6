import json

import pytest

from rewind_engine.history import (
    Coordinate,
    DeleteRange,
    Insert,
    VersionGraph,
    deserialize,
    dumps,
    loads,
    restore,
    serialize,
)
from rewind_engine.runtime import EngineSettings, telemetry


def make_graph() -> VersionGraph:
    graph = VersionGraph(settings=EngineSettings())
    graph.record_insert(0, "abc")
    graph.undo()
    graph.commit(Insert(2, "z"))
    graph.commit(DeleteRange(0, 2))
    return graph


def test_serialize_shape() -> None:
    data = serialize(make_graph())

    assert data["pointer"] == {
        "currentBranchId": "branch-1",
        "currentTransactionIndex": 1,
    }
    main = data["branches"]["main"]
    assert main["parentBranchId"] is None
    assert main["initialContent"] == ""
    assert main["transactions"][0] == {"type": "insert", "index": 0, "text": "a"}
    forked = data["branches"]["branch-1"]
    assert forked["parentBranchId"] == "main"
    assert forked["parentTransactionIndex"] == 1
    assert forked["initialContent"] == "ab"
    assert forked["transactions"][1] == {"type": "delete_range", "index": 0, "count": 2}


def test_deserialize_restores_graph() -> None:
    original = make_graph()

    restored = deserialize(serialize(original), settings=EngineSettings())

    assert restored.pointer == original.pointer
    assert restored.text() == original.text() == "z"
    assert restored.reconstruct("main", 2) == "abc"
    assert restored.table.branch_ids() == original.table.branch_ids()


def test_json_helpers() -> None:
    original = make_graph()

    restored = loads(dumps(original), settings=EngineSettings())

    assert json.loads(dumps(restored)) == serialize(original)


def test_restored_graph_keeps_forking_without_collisions() -> None:
    restored = deserialize(serialize(make_graph()), settings=EngineSettings())
    restored.switch_to_version("main", 0)

    coordinate = restored.commit(Insert(1, "q"))

    assert coordinate.branch_id == "branch-2"


def test_non_mapping_input_reinitializes() -> None:
    for data in (None, [], "garbage", {"branches": []}):
        graph = deserialize(data, settings=EngineSettings())
        assert graph.pointer == Coordinate("main", -1)
        assert graph.table.stats().branch_count == 1


def test_invalid_json_reinitializes() -> None:
    graph = loads("{not json", settings=EngineSettings())

    assert graph.text() == ""
    assert graph.table.root_id == "main"


def test_missing_root_reinitializes() -> None:
    data = {
        "branches": {
            "side": {
                "parentBranchId": "main",
                "parentTransactionIndex": 0,
                "initialContent": "x",
                "transactions": [],
            }
        },
        "pointer": {"currentBranchId": "side", "currentTransactionIndex": -1},
    }

    graph = deserialize(data, settings=EngineSettings())

    assert graph.table.branch_ids() == ("main",)
    assert graph.pointer == Coordinate("main", -1)


def test_unknown_pointer_branch_falls_back_to_root_tip() -> None:
    data = serialize(make_graph())
    data["pointer"] = {"currentBranchId": "ghost", "currentTransactionIndex": 0}

    graph = deserialize(data, settings=EngineSettings())

    assert graph.pointer == Coordinate("main", 2)


def test_out_of_range_pointer_falls_back_to_root_tip() -> None:
    data = serialize(make_graph())
    data["pointer"] = {"currentBranchId": "branch-1", "currentTransactionIndex": 9}

    graph = deserialize(data, settings=EngineSettings())

    assert graph.pointer == Coordinate("main", 2)


def test_missing_pointer_falls_back_to_root_tip() -> None:
    data = serialize(make_graph())
    del data["pointer"]

    graph = deserialize(data, settings=EngineSettings())

    assert graph.pointer == Coordinate("main", 2)


def test_orphaned_and_invalid_branches_are_dropped() -> None:
    data = serialize(make_graph())
    data["branches"]["orphan"] = {
        "parentBranchId": "nowhere",
        "parentTransactionIndex": 0,
        "initialContent": "",
        "transactions": [],
    }
    data["branches"]["broken"] = {
        "parentBranchId": "main",
        "initialContent": 42,
        "transactions": [],
    }

    graph = deserialize(data, settings=EngineSettings())

    assert set(graph.table.branch_ids()) == {"main", "branch-1"}


def test_malformed_operation_records_are_dropped() -> None:
    data = {
        "branches": {
            "main": {
                "parentBranchId": None,
                "initialContent": "",
                "transactions": [
                    [0, "a"],
                    ["bad"],
                    {"type": "insert", "index": 1, "text": "b"},
                ],
            }
        },
        "pointer": {"currentBranchId": "main", "currentTransactionIndex": 1},
    }

    graph = deserialize(data, settings=EngineSettings())

    assert graph.text() == "ab"
    assert len(graph.table.root.transactions) == 2


def test_legacy_array_log_loads() -> None:
    data = {
        "branches": {
            "main": {
                "id": "main",
                "parentBranchId": None,
                "parentTransactionIndex": -1,
                "initialContent": "",
                "transactions": [[0, "a"], [1, "b"], [2, "c"], [0], [0, 2]],
            }
        },
        "pointer": {"currentBranchId": "main", "currentTransactionIndex": 3},
    }

    graph = deserialize(data, settings=EngineSettings())

    assert graph.text() == "bc"
    assert graph.reconstruct("main", 4) == ""


def test_restore_in_place_emits_load() -> None:
    graph = VersionGraph(settings=EngineSettings())
    loaded = []
    graph.bus.subscribe("history.load", loaded.append)

    restore(graph, serialize(make_graph()))

    assert loaded == [Coordinate("branch-1", 1)]
    assert graph.text() == "z"


def capture_events(monkeypatch: pytest.MonkeyPatch) -> list:
    recorded: list = []
    monkeypatch.setattr(
        telemetry,
        "record_event",
        lambda name, **kwargs: recorded.append((name, kwargs.get("level"))),
    )
    return recorded


def test_orphaned_branch_logs_warning(monkeypatch: pytest.MonkeyPatch) -> None:
    data = serialize(make_graph())
    data["branches"]["orphan"] = {
        "parentBranchId": "nowhere",
        "parentTransactionIndex": 0,
        "initialContent": "",
        "transactions": [],
    }
    recorded = capture_events(monkeypatch)

    deserialize(data, settings=EngineSettings())

    assert ("history.load.orphaned_branch", "warning") in recorded


def test_pointer_reset_logs_warning(monkeypatch: pytest.MonkeyPatch) -> None:
    data = serialize(make_graph())
    data["pointer"] = {"currentBranchId": "ghost", "currentTransactionIndex": 0}
    recorded = capture_events(monkeypatch)

    deserialize(data, settings=EngineSettings())

    assert recorded == [("history.load.pointer_reset", "warning")]


def test_clean_load_logs_no_warnings(monkeypatch: pytest.MonkeyPatch) -> None:
    data = serialize(make_graph())
    recorded = capture_events(monkeypatch)

    deserialize(data, settings=EngineSettings())

    assert recorded == []
