"""Atomic text operations recorded in a branch's transaction log."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Union

from .errors import MalformedOperation

INSERT = "insert"
DELETE = "delete"
DELETE_RANGE = "delete_range"


def _check_index(value: object) -> None:
    # bool is an int subclass; a True/False index is never intended
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError("index must be an integer")
    if value < 0:
        raise ValueError("index must be non-negative")


@dataclass(frozen=True, slots=True)
class Insert:
    """Splice ``text`` into the buffer at ``index``."""

    index: int
    text: str

    def __post_init__(self) -> None:
        _check_index(self.index)
        if not isinstance(self.text, str):
            raise TypeError("text must be a string")
        if not self.text:
            raise ValueError("text cannot be empty")

    @property
    def kind(self) -> str:
        return INSERT


@dataclass(frozen=True, slots=True)
class DeleteOne:
    """Remove exactly one character at ``index``."""

    index: int

    def __post_init__(self) -> None:
        _check_index(self.index)

    @property
    def kind(self) -> str:
        return DELETE


@dataclass(frozen=True, slots=True)
class DeleteRange:
    """Remove ``count`` characters starting at ``index``."""

    index: int
    count: int

    def __post_init__(self) -> None:
        _check_index(self.index)
        if isinstance(self.count, bool) or not isinstance(self.count, int):
            raise TypeError("count must be an integer")
        if self.count <= 0:
            raise ValueError("count must be positive")

    @property
    def kind(self) -> str:
        return DELETE_RANGE


Operation = Union[Insert, DeleteOne, DeleteRange]


def describe_operation(op: Operation) -> str:
    """Human-readable summary shown next to a timeline node."""

    if isinstance(op, Insert):
        return f"Typed '{op.text}' at index {op.index}"
    if isinstance(op, DeleteOne):
        return f"Deleted character at index {op.index}"
    return f"Deleted {op.count} characters starting at index {op.index}"


def operation_to_record(op: Operation) -> dict[str, Any]:
    if isinstance(op, Insert):
        return {"type": INSERT, "index": op.index, "text": op.text}
    if isinstance(op, DeleteOne):
        return {"type": DELETE, "index": op.index}
    return {"type": DELETE_RANGE, "index": op.index, "count": op.count}


def operation_from_record(record: Any) -> Operation:
    """Decode a persisted operation.

    Accepts the tagged mapping written by ``operation_to_record`` and the
    older positional arrays: ``[index, text]`` for an insert, ``[index]``
    for a single delete and ``[index, count]`` for a range delete.
    """

    try:
        if isinstance(record, Mapping):
            return _from_mapping(record)
        if isinstance(record, (list, tuple)):
            return _from_array(record)
    except (TypeError, ValueError, KeyError) as exc:
        raise MalformedOperation(str(exc), record=record) from exc
    raise MalformedOperation("unrecognized operation record", record=record)


def _from_mapping(record: Mapping[str, Any]) -> Operation:
    kind = record.get("type")
    if kind == INSERT:
        return Insert(record["index"], record["text"])
    if kind == DELETE:
        return DeleteOne(record["index"])
    if kind == DELETE_RANGE:
        return DeleteRange(record["index"], record["count"])
    raise ValueError(f"unknown operation type {kind!r}")


def _from_array(record: Any) -> Operation:
    if len(record) == 1:
        return DeleteOne(record[0])
    if len(record) == 2:
        index, payload = record
        if isinstance(payload, str):
            return Insert(index, payload)
        return DeleteRange(index, payload)
    raise ValueError(f"operation array of length {len(record)}")


__all__ = [
    "DELETE",
    "DELETE_RANGE",
    "INSERT",
    "DeleteOne",
    "DeleteRange",
    "Insert",
    "Operation",
    "describe_operation",
    "operation_from_record",
    "operation_to_record",
]
