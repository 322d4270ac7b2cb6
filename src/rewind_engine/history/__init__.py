"""Branching version history: operation logs, replay, fork-on-divergence."""

from .branch import Branch, BranchTable, TableStats
from .errors import (
    CorruptPersistedState,
    InvalidCoordinate,
    MalformedOperation,
    VersionGraphError,
)
from .events import HistoryBus
from .graph import VersionGraph
from .info import BranchSummary, StateInfo
from .operations import (
    DeleteOne,
    DeleteRange,
    Insert,
    Operation,
    describe_operation,
    operation_from_record,
    operation_to_record,
)
from .persistence import deserialize, dumps, loads, restore, serialize
from .pointer import INITIAL_INDEX, Coordinate, VersionPointer
from .replay import apply_operation, reconstruct

__all__ = [
    "Branch",
    "BranchSummary",
    "BranchTable",
    "Coordinate",
    "CorruptPersistedState",
    "DeleteOne",
    "DeleteRange",
    "HistoryBus",
    "INITIAL_INDEX",
    "Insert",
    "InvalidCoordinate",
    "MalformedOperation",
    "Operation",
    "StateInfo",
    "TableStats",
    "VersionGraph",
    "VersionGraphError",
    "VersionPointer",
    "apply_operation",
    "deserialize",
    "describe_operation",
    "dumps",
    "loads",
    "operation_from_record",
    "operation_to_record",
    "reconstruct",
    "restore",
    "serialize",
]
