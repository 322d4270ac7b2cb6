"""Branch records and the table that owns them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from .errors import InvalidCoordinate
from .operations import Operation
from .pointer import INITIAL_INDEX, Coordinate


@dataclass(slots=True)
class Branch:
    """Append-only operation log forked from a coordinate of its parent."""

    id: str
    parent_branch_id: Optional[str] = None
    parent_transaction_index: int = INITIAL_INDEX
    initial_content: str = ""
    transactions: List[Operation] = field(default_factory=list)

    @property
    def is_root(self) -> bool:
        return self.parent_branch_id is None

    @property
    def tip_index(self) -> int:
        return len(self.transactions) - 1

    def has_index(self, index: int) -> bool:
        return INITIAL_INDEX <= index <= self.tip_index

    @property
    def origin(self) -> Optional[Coordinate]:
        if self.parent_branch_id is None:
            return None
        return Coordinate(self.parent_branch_id, self.parent_transaction_index)


@dataclass(slots=True)
class TableStats:
    """Lightweight snapshot describing table state."""

    branch_count: int
    transaction_count: int
    root_branch_id: str


class BranchTable:
    """Maps branch id to ``Branch``; exactly one entry is the root."""

    def __init__(self, root: Branch, *, branch_prefix: str = "branch-") -> None:
        if not root.is_root:
            raise ValueError(f"Root branch '{root.id}' cannot have a parent")
        self._branches: Dict[str, Branch] = {root.id: root}
        self._root_id = root.id
        self._prefix = branch_prefix
        self._counter = 0
        self._revision = 0

    @property
    def root_id(self) -> str:
        return self._root_id

    @property
    def root(self) -> Branch:
        return self._branches[self._root_id]

    def revision(self) -> int:
        return self._revision

    def __contains__(self, branch_id: object) -> bool:
        try:
            return branch_id in self._branches
        except TypeError:
            return False

    def __len__(self) -> int:
        return len(self._branches)

    def get(self, branch_id: str) -> Branch:
        try:
            return self._branches[branch_id]
        except (KeyError, TypeError) as exc:
            raise InvalidCoordinate(branch_id) from exc

    def iter_branches(self) -> Iterator[Branch]:
        yield from self._branches.values()

    def branch_ids(self) -> tuple[str, ...]:
        return tuple(self._branches)

    def children_of(self, branch_id: str) -> list[Branch]:
        self.get(branch_id)
        return [
            branch
            for branch in self._branches.values()
            if branch.parent_branch_id == branch_id
        ]

    def add(self, branch: Branch) -> Branch:
        if branch.id in self._branches:
            raise ValueError(f"Branch '{branch.id}' already exists")
        if branch.is_root:
            raise ValueError(f"Branch '{branch.id}' needs a parent; the root exists")
        if branch.parent_branch_id not in self._branches:
            raise InvalidCoordinate(branch.parent_branch_id or "")
        self._branches[branch.id] = branch
        self._touch()
        return branch

    def append(self, branch_id: str, op: Operation) -> int:
        """Record ``op`` at the end of the branch log and return its index."""

        branch = self.get(branch_id)
        branch.transactions.append(op)
        self._touch()
        return branch.tip_index

    def next_branch_id(self) -> str:
        """Return an unused ``<prefix><n>`` id; ``n`` only ever grows."""

        while True:
            self._counter += 1
            candidate = f"{self._prefix}{self._counter}"
            if candidate not in self._branches:
                return candidate

    def lineage(self, branch_id: str) -> list[Coordinate]:
        """Fork coordinates from ``branch_id`` up to the root, nearest first."""

        chain: list[Coordinate] = []
        branch = self.get(branch_id)
        while branch.origin is not None:
            chain.append(branch.origin)
            branch = self.get(branch.origin.branch_id)
        return chain

    def stats(self) -> TableStats:
        return TableStats(
            branch_count=len(self._branches),
            transaction_count=sum(
                len(branch.transactions) for branch in self._branches.values()
            ),
            root_branch_id=self._root_id,
        )

    def _touch(self) -> None:
        self._revision += 1


__all__ = ["Branch", "BranchTable", "TableStats"]
