"""Text reconstruction by replaying a branch's operation log."""

from __future__ import annotations

from typing import List, Optional

from rewind_engine.runtime import telemetry

from .branch import Branch, BranchTable
from .errors import InvalidCoordinate, MalformedOperation
from .operations import DeleteOne, DeleteRange, Insert, Operation
from .pointer import INITIAL_INDEX


def apply_operation(chars: List[str], op: Operation) -> None:
    """Apply ``op`` in place to a list of code points.

    Raises ``MalformedOperation`` when ``op`` does not fit the buffer; the
    buffer is left untouched in that case.
    """

    size = len(chars)
    if isinstance(op, Insert):
        if op.index > size:
            raise MalformedOperation(
                f"insert at {op.index} past end of {size}-character text"
            )
        chars[op.index : op.index] = list(op.text)
    elif isinstance(op, DeleteOne):
        if op.index >= size:
            raise MalformedOperation(
                f"delete at {op.index} outside {size}-character text"
            )
        del chars[op.index]
    elif isinstance(op, DeleteRange):
        if op.index + op.count > size:
            raise MalformedOperation(
                f"delete of {op.count} at {op.index} outside {size}-character text"
            )
        del chars[op.index : op.index + op.count]
    else:
        raise MalformedOperation(f"unsupported operation {op!r}", record=op)


def replay_branch(
    branch: Branch, target_index: int, *, logger_name: Optional[str] = None
) -> str:
    if not branch.has_index(target_index):
        raise InvalidCoordinate(branch.id, target_index)
    if target_index == INITIAL_INDEX:
        return branch.initial_content

    chars = list(branch.initial_content)
    for position in range(target_index + 1):
        op = branch.transactions[position]
        try:
            apply_operation(chars, op)
        except MalformedOperation as exc:
            telemetry.record_event(
                "history.replay.skipped",
                level="warning",
                data={
                    "branch": branch.id,
                    "position": position,
                    "reason": exc.reason,
                },
                logger_name=logger_name,
            )
    return "".join(chars)


def reconstruct(
    table: BranchTable,
    branch_id: str,
    target_index: int,
    *,
    logger_name: Optional[str] = None,
) -> str:
    """Return the text of ``branch_id`` after ``transactions[0..target_index]``.

    ``target_index == -1`` yields the branch's ``initial_content``. Entries
    that no longer fit the text are skipped with a warning event.
    """

    return replay_branch(table.get(branch_id), target_index, logger_name=logger_name)


__all__ = ["apply_operation", "reconstruct", "replay_branch"]
