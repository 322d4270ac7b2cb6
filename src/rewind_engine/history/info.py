"""Read-only descriptions of historical states for timeline views."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .branch import Branch, BranchTable
from .errors import InvalidCoordinate
from .operations import Operation, describe_operation
from .pointer import INITIAL_INDEX, Coordinate

INITIAL = "initial"
BRANCH_CREATED = "branch_created"


@dataclass(frozen=True, slots=True)
class StateInfo:
    branch_id: str
    transaction_index: int
    kind: str
    message: str
    operation: Optional[Operation]
    is_current: bool
    is_tip: bool

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.branch_id, self.transaction_index)


@dataclass(frozen=True, slots=True)
class BranchSummary:
    branch_id: str
    parent_branch_id: Optional[str]
    parent_transaction_index: int
    transaction_count: int
    is_current: bool


def describe_state(
    table: BranchTable, branch_id: str, index: int, *, current: Coordinate
) -> StateInfo:
    branch = table.get(branch_id)
    if not branch.has_index(index):
        raise InvalidCoordinate(branch_id, index)

    operation: Optional[Operation] = None
    if index == INITIAL_INDEX:
        kind, message = _origin_summary(table, branch)
    else:
        operation = branch.transactions[index]
        kind, message = operation.kind, describe_operation(operation)

    return StateInfo(
        branch_id=branch_id,
        transaction_index=index,
        kind=kind,
        message=message,
        operation=operation,
        is_current=current == Coordinate(branch_id, index),
        is_tip=index == branch.tip_index,
    )


def _origin_summary(table: BranchTable, branch: Branch) -> tuple[str, str]:
    if branch.is_root:
        if branch.initial_content:
            return INITIAL, "Initial content"
        return INITIAL, "Initial empty content"

    parent_id = branch.parent_branch_id or ""
    message = f"Branched to {branch.id} (initial state) from {parent_id}"
    if parent_id in table:
        parent = table.get(parent_id)
        fork_index = branch.parent_transaction_index
        if 0 <= fork_index <= parent.tip_index:
            parent_op = describe_operation(parent.transactions[fork_index])
            message = f"{message} after \"{parent_op}\""
    return BRANCH_CREATED, message


def summarize_branch(branch: Branch, *, current_branch_id: str) -> BranchSummary:
    return BranchSummary(
        branch_id=branch.id,
        parent_branch_id=branch.parent_branch_id,
        parent_transaction_index=branch.parent_transaction_index,
        transaction_count=len(branch.transactions),
        is_current=branch.id == current_branch_id,
    )


__all__ = [
    "BRANCH_CREATED",
    "BranchSummary",
    "INITIAL",
    "StateInfo",
    "describe_state",
    "summarize_branch",
]
