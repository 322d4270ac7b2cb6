"""High-level buffer façade combining a version graph with a cursor."""

from __future__ import annotations

from contextlib import AbstractContextManager
from dataclasses import dataclass
from typing import ContextManager, Optional

from rewind_engine.history import Coordinate, VersionGraph
from rewind_engine.runtime import telemetry

from .diff import diff_operations
from .document import Cursor, TextDocument
from .sync import BufferMirror


@dataclass(slots=True)
class BufferView:
    branch_id: str
    transaction_index: int
    text: str
    cursor: Cursor


@dataclass(slots=True)
class BufferDelta:
    coordinate: Coordinate
    text: str
    cursor: Cursor
    label: str
    forked: bool = False


class Buffer:
    """Editing surface whose every keystroke lands in a ``VersionGraph``."""

    def __init__(
        self, *, name: str = "default", graph: Optional[VersionGraph] = None
    ) -> None:
        self.name = name
        self.graph = graph or VersionGraph()
        self._offset = len(self.graph.text())

    @classmethod
    def from_text(cls, text: str, *, name: str = "default") -> "Buffer":
        buffer = cls(name=name)
        if text:
            buffer.insert_text(text)
        return buffer

    @property
    def document(self) -> TextDocument:
        return TextDocument.from_text(self.graph.text())

    @property
    def cursor(self) -> Cursor:
        return self.document.cursor_for_offset(self._offset)

    @property
    def offset(self) -> int:
        return self._offset

    def set_cursor(self, cursor: Cursor) -> None:
        document = self.document
        self._offset = document.checked_offset(cursor)

    def move_cursor(self, delta: int) -> Cursor:
        self._offset = min(max(self._offset + delta, 0), len(self.graph.text()))
        return self.cursor

    def move_to_line_edge(self, *, end: bool) -> Cursor:
        document = self.document
        row, _ = document.cursor_for_offset(self._offset)
        col = len(document.get_line(row)) if end else 0
        self._offset = document.offset_for_cursor((row, col))
        return self.cursor

    def snapshot(self) -> BufferView:
        pointer = self.graph.pointer
        return BufferView(
            branch_id=pointer.branch_id,
            transaction_index=pointer.index,
            text=self.graph.text(),
            cursor=self.cursor,
        )

    def mirror(self, *, attributes: Optional[dict[str, str]] = None) -> BufferMirror:
        pointer = self.graph.pointer
        return BufferMirror(
            text=self.graph.text(),
            cursor=self.cursor,
            branch_id=pointer.branch_id,
            transaction_index=pointer.index,
            attributes=dict(attributes or {}),
        )

    def pull_buffer(self) -> BufferMirror:
        return self.mirror()

    def insert_text(self, text: str, *, cursor: Optional[Cursor] = None) -> BufferDelta:
        if cursor is not None:
            self.set_cursor(cursor)
        with Transaction(self, "insert_text") as tx:
            self.graph.record_insert(self._offset, text)
            self._offset += len(text)
        return tx.delta()

    def delete_backward(self) -> Optional[BufferDelta]:
        """Backspace: remove the character before the cursor."""

        if self._offset == 0:
            return None
        with Transaction(self, "delete_backward") as tx:
            self.graph.record_delete(self._offset - 1)
            self._offset -= 1
        return tx.delta()

    def delete_forward(self) -> Optional[BufferDelta]:
        """Delete key: remove the character under the cursor."""

        if self._offset >= len(self.graph.text()):
            return None
        with Transaction(self, "delete_forward") as tx:
            self.graph.record_delete(self._offset)
        return tx.delta()

    def delete_range(self, start: Cursor, end: Cursor) -> Optional[BufferDelta]:
        document = self.document
        start_offset = document.checked_offset(start)
        end_offset = document.checked_offset(end)
        if start_offset > end_offset:
            start_offset, end_offset = end_offset, start_offset
        count = end_offset - start_offset
        if count == 0:
            return None
        with Transaction(self, "delete_range") as tx:
            if count == 1:
                self.graph.record_delete(start_offset)
            else:
                self.graph.record_delete_range(start_offset, count)
            self._offset = start_offset
        return tx.delta()

    def push_host_edit(self, mirror: BufferMirror) -> None:
        """Record a host widget's whole-text change as individual operations."""

        operations = diff_operations(self.graph.text(), mirror.text)
        if operations:
            with Transaction(self, "host_edit") as tx:
                tx.span_metadata("operations", len(operations))
                for op in operations:
                    self.graph.commit(op)
        document = self.document
        row = min(max(mirror.cursor[0], 0), document.line_count - 1)
        col = min(max(mirror.cursor[1], 0), len(document.get_line(row)))
        self._offset = document.offset_for_cursor((row, col))

    def undo(self) -> bool:
        changed = self.graph.undo()
        self._clamp_cursor()
        return changed

    def redo(self) -> bool:
        changed = self.graph.redo()
        self._clamp_cursor()
        return changed

    def switch_to(self, branch_id: str, index: int) -> Coordinate:
        coordinate = self.graph.switch_to_version(branch_id, index)
        self._offset = len(self.graph.text())
        return coordinate

    def _clamp_cursor(self) -> None:
        self._offset = min(self._offset, len(self.graph.text()))


class Transaction(AbstractContextManager["Transaction"]):
    """Telemetry span around one buffer edit, tracking whether it forked."""

    def __init__(self, buffer: Buffer, label: str) -> None:
        self.buffer = buffer
        self.label = label
        self._span_cm: Optional[ContextManager[telemetry.SpanHandle]] = None
        self._handle: Optional[telemetry.SpanHandle] = None
        self._start_branch = buffer.graph.pointer.branch_id

    def __enter__(self) -> "Transaction":
        self._span_cm = telemetry.span(
            name=f"buffer::{self.label}",
            component=True,
            metadata={"buffer": self.buffer.name},
        )
        self._handle = self._span_cm.__enter__()
        return self

    def span_metadata(self, key: str, value: object) -> None:
        if self._handle is not None:
            self._handle.add_metadata(key, value)

    def delta(self) -> BufferDelta:
        coordinate = self.buffer.graph.pointer
        return BufferDelta(
            coordinate=coordinate,
            text=self.buffer.graph.text(),
            cursor=self.buffer.cursor,
            label=self.label,
            forked=coordinate.branch_id != self._start_branch,
        )

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self._span_cm is not None:
            self._span_cm.__exit__(exc_type, exc, tb)
        return False


__all__ = ["Buffer", "BufferDelta", "BufferView", "Transaction"]
