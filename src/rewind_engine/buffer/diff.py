"""Turn whole-text host edits into single-character operations."""

from __future__ import annotations

from typing import List

from rewind_engine.history.operations import DeleteOne, DeleteRange, Insert, Operation


def common_affixes(before: str, after: str) -> tuple[int, int]:
    """Lengths of the shared prefix and of the shared suffix after it."""

    limit = min(len(before), len(after))
    prefix = 0
    while prefix < limit and before[prefix] == after[prefix]:
        prefix += 1
    suffix = 0
    while (
        suffix < limit - prefix
        and before[len(before) - 1 - suffix] == after[len(after) - 1 - suffix]
    ):
        suffix += 1
    return prefix, suffix


def diff_operations(before: str, after: str) -> List[Operation]:
    """Operations that turn ``before`` into ``after`` when applied in order.

    The changed middle is removed with one delete, then the replacement is
    typed back one character at a time, so a paste becomes several
    transactions rather than a single atomic one.
    """

    if before == after:
        return []
    prefix, suffix = common_affixes(before, after)
    removed = len(before) - prefix - suffix
    inserted = after[prefix : len(after) - suffix]

    operations: List[Operation] = []
    if removed == 1:
        operations.append(DeleteOne(prefix))
    elif removed > 1:
        operations.append(DeleteRange(prefix, removed))
    operations.extend(
        Insert(prefix + offset, char) for offset, char in enumerate(inserted)
    )
    return operations


__all__ = ["common_affixes", "diff_operations"]
