"""Serialize a version graph to plain data and rebuild it defensively.

The emitted shape is::

    {
        "branches": {
            "<id>": {
                "id": "<id>",
                "parentBranchId": "<id>" | None,
                "parentTransactionIndex": int,
                "initialContent": str,
                "transactions": [{"type": ..., "index": ..., ...}, ...],
            },
            ...
        },
        "pointer": {"currentBranchId": str, "currentTransactionIndex": int},
    }

Loading never raises. Anything that cannot be trusted is dropped with a
``history.load.*`` warning, and a table without a usable root is replaced by
a fresh empty one.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping, Optional

from rewind_engine.runtime import telemetry
from rewind_engine.runtime.settings import EngineSettings

from .branch import Branch, BranchTable
from .errors import CorruptPersistedState, MalformedOperation
from .graph import VersionGraph
from .operations import Operation, operation_from_record, operation_to_record
from .pointer import INITIAL_INDEX


def serialize(graph: VersionGraph) -> Dict[str, Any]:
    branches = {
        branch.id: {
            "id": branch.id,
            "parentBranchId": branch.parent_branch_id,
            "parentTransactionIndex": branch.parent_transaction_index,
            "initialContent": branch.initial_content,
            "transactions": [operation_to_record(op) for op in branch.transactions],
        }
        for branch in graph.table.iter_branches()
    }
    pointer = graph.pointer
    return {
        "branches": branches,
        "pointer": {
            "currentBranchId": pointer.branch_id,
            "currentTransactionIndex": pointer.index,
        },
    }


def deserialize(
    data: Any, *, settings: Optional[EngineSettings] = None
) -> VersionGraph:
    """Build a new ``VersionGraph`` from ``serialize`` output."""

    graph = VersionGraph(settings=settings)
    restore(graph, data)
    return graph


def restore(graph: VersionGraph, data: Any) -> None:
    """Replace ``graph``'s state in place with persisted ``data``."""

    logger_name = graph.settings.logger_name
    try:
        table = _load_table(data, graph.settings, logger_name)
    except CorruptPersistedState as exc:
        telemetry.record_event(
            "history.load.reinitialized",
            level="warning",
            data={"reason": str(exc)},
            logger_name=logger_name,
        )
        table = BranchTable(
            Branch(id=graph.settings.root_branch_id),
            branch_prefix=graph.settings.branch_prefix,
        )
        graph.load(table)
        return

    pointer = data.get("pointer")
    if not isinstance(pointer, Mapping):
        pointer = {}
    graph.load(
        table,
        branch_id=pointer.get("currentBranchId"),
        index=pointer.get("currentTransactionIndex"),
    )


def dumps(graph: VersionGraph, **json_kwargs: Any) -> str:
    return json.dumps(serialize(graph), **json_kwargs)


def loads(text: str, *, settings: Optional[EngineSettings] = None) -> VersionGraph:
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as exc:
        telemetry.record_event(
            "history.load.invalid_json",
            level="warning",
            data={"reason": str(exc)},
            logger_name=(settings or EngineSettings.from_env()).logger_name,
        )
        data = None
    return deserialize(data, settings=settings)


def _load_table(
    data: Any, settings: EngineSettings, logger_name: str
) -> BranchTable:
    if not isinstance(data, Mapping):
        raise CorruptPersistedState("persisted history is not a mapping")
    raw_branches = data.get("branches")
    if not isinstance(raw_branches, Mapping):
        raise CorruptPersistedState("persisted history has no branch table")

    branches: Dict[str, Branch] = {}
    for key, raw in raw_branches.items():
        branch = _load_branch(key, raw, logger_name)
        if branch is not None:
            branches[branch.id] = branch

    root = _pick_root(branches, settings.root_branch_id)
    table = BranchTable(root, branch_prefix=settings.branch_prefix)
    for branch_id in _anchored_ids(branches, root.id):
        table.add(branches[branch_id])

    for branch_id in branches.keys() - set(table.branch_ids()):
        telemetry.record_event(
            "history.load.orphaned_branch",
            level="warning",
            data={"branch": branch_id},
            logger_name=logger_name,
        )
    return table


def _load_branch(key: Any, raw: Any, logger_name: str) -> Optional[Branch]:
    def reject(reason: str) -> None:
        telemetry.record_event(
            "history.load.dropped_branch",
            level="warning",
            data={"branch": key, "reason": reason},
            logger_name=logger_name,
        )

    if not isinstance(key, str) or not key or not isinstance(raw, Mapping):
        reject("branch entry is not a keyed mapping")
        return None
    parent = raw.get("parentBranchId")
    if parent is not None and not isinstance(parent, str):
        reject("parentBranchId is not a string")
        return None
    fork_index = raw.get("parentTransactionIndex", INITIAL_INDEX)
    if isinstance(fork_index, bool) or not isinstance(fork_index, int):
        reject("parentTransactionIndex is not an integer")
        return None
    content = raw.get("initialContent", "")
    if not isinstance(content, str):
        reject("initialContent is not a string")
        return None
    records = raw.get("transactions", [])
    if not isinstance(records, list):
        reject("transactions is not a list")
        return None

    return Branch(
        id=key,
        parent_branch_id=parent,
        parent_transaction_index=fork_index,
        initial_content=content,
        transactions=_load_operations(key, records, logger_name),
    )


def _load_operations(
    branch_id: str, records: List[Any], logger_name: str
) -> List[Operation]:
    operations: List[Operation] = []
    for position, record in enumerate(records):
        try:
            operations.append(operation_from_record(record))
        except MalformedOperation as exc:
            telemetry.record_event(
                "history.load.dropped_operation",
                level="warning",
                data={"branch": branch_id, "position": position, "reason": exc.reason},
                logger_name=logger_name,
            )
    return operations


def _pick_root(branches: Mapping[str, Branch], preferred: str) -> Branch:
    candidate = branches.get(preferred)
    if candidate is not None and candidate.is_root:
        return candidate
    for branch in branches.values():
        if branch.is_root:
            return branch
    raise CorruptPersistedState("no root branch in persisted history")


def _anchored_ids(branches: Mapping[str, Branch], root_id: str) -> List[str]:
    """Non-root ids whose parent chain reaches the root, parents first."""

    ordered: List[str] = []
    reached = {root_id}
    frontier = [root_id]
    while frontier:
        parent_id = frontier.pop(0)
        for branch in branches.values():
            if branch.parent_branch_id == parent_id and branch.id not in reached:
                reached.add(branch.id)
                ordered.append(branch.id)
                frontier.append(branch.id)
    return ordered


__all__ = ["deserialize", "dumps", "loads", "restore", "serialize"]
