"""Version graph engine: commit-or-fork plus undo/redo/jump navigation."""

from __future__ import annotations

from typing import Any, Optional

from rewind_engine.runtime import telemetry
from rewind_engine.runtime.settings import EngineSettings

from . import events
from .branch import Branch, BranchTable
from .errors import InvalidCoordinate
from .events import HistoryBus
from .info import BranchSummary, StateInfo, describe_state, summarize_branch
from .operations import DeleteOne, DeleteRange, Insert, Operation
from .pointer import INITIAL_INDEX, Coordinate, VersionPointer
from .replay import apply_operation, reconstruct


class VersionGraph:
    """Owns one Branch Table and the Version Pointer into it.

    Calls are synchronous and must be serialized by the host; the engine
    does no locking. All writes to the table go through ``commit``,
    ``create_branch`` or ``load``.
    """

    def __init__(
        self,
        *,
        settings: Optional[EngineSettings] = None,
        table: Optional[BranchTable] = None,
        pointer: Optional[VersionPointer] = None,
    ) -> None:
        self.settings = settings or EngineSettings.from_env()
        self.logger = telemetry.get_logger(self.settings.logger_name)
        self.bus = HistoryBus()
        self._table = table if table is not None else self._fresh_table()
        if pointer is None:
            pointer = VersionPointer(self._table.root_id, self._table.root.tip_index)
        elif not self._is_valid(pointer.branch_id, pointer.transaction_index):
            raise InvalidCoordinate(pointer.branch_id, pointer.transaction_index)
        self._pointer = pointer

    # -- state queries -------------------------------------------------

    @property
    def table(self) -> BranchTable:
        return self._table

    @property
    def pointer(self) -> Coordinate:
        return self._pointer.coordinate

    @property
    def current_branch(self) -> Branch:
        return self._table.get(self._pointer.branch_id)

    def reconstruct(self, branch_id: str, index: int) -> str:
        return reconstruct(
            self._table, branch_id, index, logger_name=self.settings.logger_name
        )

    def text(self) -> str:
        pointer = self._pointer
        return self.reconstruct(pointer.branch_id, pointer.transaction_index)

    def tip(self, branch_id: str) -> Coordinate:
        return Coordinate(branch_id, self._table.get(branch_id).tip_index)

    def is_at_tip(self) -> bool:
        return self._pointer.transaction_index == self.current_branch.tip_index

    def lineage(self, branch_id: Optional[str] = None) -> list[Coordinate]:
        return self._table.lineage(branch_id or self._pointer.branch_id)

    def children_of(self, branch_id: str) -> list[str]:
        return [branch.id for branch in self._table.children_of(branch_id)]

    def get_state_info_at(self, branch_id: str, index: int) -> StateInfo:
        """Describe any valid coordinate, including a branch's ``-1`` origin."""

        return describe_state(self._table, branch_id, index, current=self.pointer)

    def current_state_info(self) -> StateInfo:
        return self.get_state_info_at(
            self._pointer.branch_id, self._pointer.transaction_index
        )

    def branch_summaries(self) -> list[BranchSummary]:
        return [
            summarize_branch(branch, current_branch_id=self._pointer.branch_id)
            for branch in self._table.iter_branches()
        ]

    # -- commit engine -------------------------------------------------

    def commit(self, op: Operation) -> Coordinate:
        """Record ``op`` against the visible text.

        When the pointer is behind its branch tip the edit diverges from
        history: a new branch is forked at the pointer and ``op`` becomes
        its first transaction. The original branch is never truncated.
        Raises ``MalformedOperation`` if ``op`` does not fit the text.
        """

        apply_operation(list(self.text()), op)

        with telemetry.span(
            "history::commit",
            logger_name=self.settings.logger_name,
            component="history",
            metadata={"branch": self._pointer.branch_id, "op": op.kind},
        ) as handle:
            if not self.is_at_tip():
                forked = self._fork(self._table.next_branch_id(), events.FORK)
                handle.add_metadata("forked_to", forked.branch_id)
            index = self._table.append(self._pointer.branch_id, op)
            coordinate = self._pointer.move_to(self._pointer.branch_id, index)

        self.bus.emit(events.COMMIT, coordinate)
        return coordinate

    def record_insert(self, index: int, text: str) -> Coordinate:
        """Commit ``text`` one character at a time starting at ``index``."""

        if not text:
            raise ValueError("text cannot be empty")
        coordinate = self.pointer
        for offset, char in enumerate(text):
            coordinate = self.commit(Insert(index + offset, char))
        return coordinate

    def record_delete(self, index: int) -> Coordinate:
        return self.commit(DeleteOne(index))

    def record_delete_range(self, index: int, count: int) -> Coordinate:
        return self.commit(DeleteRange(index, count))

    def create_branch(self, name: Optional[str] = None) -> Coordinate:
        """Fork at the pointer without an edit and move onto the new branch."""

        if name is None:
            name = self._table.next_branch_id()
        elif not name or name in self._table:
            raise ValueError(f"Branch name '{name}' is invalid or already exists")
        return self._fork(name, events.BRANCH)

    def _fork(self, branch_id: str, event: str) -> Coordinate:
        origin = self.pointer
        branch = Branch(
            id=branch_id,
            parent_branch_id=origin.branch_id,
            parent_transaction_index=origin.index,
            initial_content=self.reconstruct(origin.branch_id, origin.index),
        )
        self._table.add(branch)
        coordinate = self._pointer.move_to(branch_id, INITIAL_INDEX)
        telemetry.record_event(
            event,
            data={"branch": branch_id, "origin": str(origin)},
            logger_name=self.settings.logger_name,
        )
        self.bus.emit(event, {"coordinate": coordinate, "origin": origin})
        return coordinate

    # -- navigation ----------------------------------------------------

    def switch_to_version(self, branch_id: str, index: int) -> Coordinate:
        """Jump to ``(branch_id, index)``; raises ``InvalidCoordinate``."""

        branch = self._table.get(branch_id)
        if isinstance(index, bool) or not isinstance(index, int):
            raise InvalidCoordinate(
                branch_id, reason=f"Index {index!r} is not an integer"
            )
        if not branch.has_index(index):
            raise InvalidCoordinate(branch_id, index)
        return self._navigate(branch_id, index)

    def can_undo(self) -> bool:
        return self._pointer.transaction_index > INITIAL_INDEX

    def can_redo(self) -> bool:
        return not self.is_at_tip()

    def undo(self) -> bool:
        """Step back one transaction on the current branch.

        Stops at the branch's own ``-1`` origin; it never walks into the
        parent branch.
        """

        if not self.can_undo():
            return False
        self._navigate(self._pointer.branch_id, self._pointer.transaction_index - 1)
        return True

    def redo(self) -> bool:
        if not self.can_redo():
            return False
        self._navigate(self._pointer.branch_id, self._pointer.transaction_index + 1)
        return True

    def _navigate(self, branch_id: str, index: int) -> Coordinate:
        coordinate = self._pointer.move_to(branch_id, index)
        self.logger.debug(f"history::navigate {coordinate}")
        self.bus.emit(events.NAVIGATE, coordinate)
        return coordinate

    # -- loading -------------------------------------------------------

    def load(
        self,
        table: BranchTable,
        *,
        branch_id: Any = None,
        index: Any = None,
    ) -> Coordinate:
        """Adopt ``table`` and place the pointer at ``(branch_id, index)``.

        An unknown branch or out-of-range index falls back to the root
        branch's tip; the fallback is logged, never raised.
        """

        self._table = table
        if isinstance(branch_id, str) and self._is_valid(branch_id, index):
            coordinate = self._pointer.move_to(branch_id, index)
        else:
            coordinate = self._pointer.move_to(table.root_id, table.root.tip_index)
            if branch_id is not None or index is not None:
                telemetry.record_event(
                    "history.load.pointer_reset",
                    level="warning",
                    data={"branch": branch_id, "index": index, "now": str(coordinate)},
                    logger_name=self.settings.logger_name,
                )
        self.bus.emit(events.LOAD, coordinate)
        return coordinate

    def _is_valid(self, branch_id: str, index: Any) -> bool:
        if branch_id not in self._table:
            return False
        if isinstance(index, bool) or not isinstance(index, int):
            return False
        return self._table.get(branch_id).has_index(index)

    def _fresh_table(self) -> BranchTable:
        return BranchTable(
            Branch(id=self.settings.root_branch_id),
            branch_prefix=self.settings.branch_prefix,
        )


__all__ = ["VersionGraph"]
