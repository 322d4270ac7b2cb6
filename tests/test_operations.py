import pytest

from rewind_engine.history import (
    DeleteOne,
    DeleteRange,
    Insert,
    MalformedOperation,
    describe_operation,
    operation_from_record,
    operation_to_record,
)


def test_operation_kinds() -> None:
    assert Insert(0, "a").kind == "insert"
    assert DeleteOne(3).kind == "delete"
    assert DeleteRange(1, 2).kind == "delete_range"


@pytest.mark.parametrize(
    "factory",
    [
        lambda: Insert(-1, "a"),
        lambda: Insert(0, ""),
        lambda: DeleteOne(-2),
        lambda: DeleteRange(0, 0),
        lambda: DeleteRange(0, -3),
    ],
)
def test_operation_rejects_bad_values(factory) -> None:
    with pytest.raises(ValueError):
        factory()


def test_operation_rejects_bool_index() -> None:
    with pytest.raises(TypeError):
        DeleteOne(True)


def test_describe_operation_messages() -> None:
    assert describe_operation(Insert(4, "x")) == "Typed 'x' at index 4"
    assert describe_operation(DeleteOne(2)) == "Deleted character at index 2"
    assert (
        describe_operation(DeleteRange(1, 5))
        == "Deleted 5 characters starting at index 1"
    )


def test_tagged_record_shape() -> None:
    assert operation_to_record(DeleteRange(2, 3)) == {
        "type": "delete_range",
        "index": 2,
        "count": 3,
    }
    assert operation_from_record({"type": "insert", "index": 0, "text": "q"}) == Insert(
        0, "q"
    )


def test_legacy_array_records() -> None:
    assert operation_from_record([5, "z"]) == Insert(5, "z")
    assert operation_from_record([5]) == DeleteOne(5)
    assert operation_from_record([5, 2]) == DeleteRange(5, 2)


@pytest.mark.parametrize(
    "record",
    [
        None,
        "insert",
        [],
        [1, 2, 3],
        ["a"],
        {"type": "rename", "index": 0},
        {"type": "insert", "index": 0},
        {"type": "delete_range", "index": 0, "count": 0},
    ],
)
def test_malformed_records(record) -> None:
    with pytest.raises(MalformedOperation) as info:
        operation_from_record(record)
    assert info.value.record == record
