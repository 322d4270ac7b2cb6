"""Version pointer naming the currently visible (branch, index) state."""

from __future__ import annotations

from dataclasses import dataclass

INITIAL_INDEX = -1


@dataclass(frozen=True, slots=True)
class Coordinate:
    """Immutable address of one historical state."""

    branch_id: str
    index: int = INITIAL_INDEX

    def __str__(self) -> str:
        return f"{self.branch_id}@{self.index}"


@dataclass(slots=True)
class VersionPointer:
    """Mutable cursor owned by a ``VersionGraph``.

    ``transaction_index`` is ``-1`` while the branch's ``initial_content``
    is showing. Only the graph moves the pointer.
    """

    branch_id: str
    transaction_index: int = INITIAL_INDEX

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.branch_id, self.transaction_index)

    def move_to(self, branch_id: str, index: int) -> Coordinate:
        self.branch_id = branch_id
        self.transaction_index = index
        return self.coordinate


__all__ = ["Coordinate", "INITIAL_INDEX", "VersionPointer"]
