"""Line view over reconstructed text for row/column cursors."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple

Cursor = Tuple[int, int]  # (row, column)


class BufferValidationError(RuntimeError):
    """Raised when adapters provide out-of-bounds cursor info."""

    def __init__(self, message: str, *, cursor: Cursor | None = None) -> None:
        super().__init__(message)
        self.cursor = cursor


@dataclass(slots=True)
class TextDocument:
    """Immutable list-of-lines snapshot of one reconstructed state.

    Offsets count code points, the same addressing the operation log uses,
    with each line break counting as one character.
    """

    _lines: List[str] = field(default_factory=lambda: [""])

    @classmethod
    def from_text(cls, text: str) -> "TextDocument":
        return cls(_lines=text.split("\n"))

    @property
    def line_count(self) -> int:
        return len(self._lines)

    @property
    def length(self) -> int:
        return sum(len(line) for line in self._lines) + len(self._lines) - 1

    def get_line(self, index: int) -> str:
        return self._lines[index]

    def checked_offset(self, cursor: Cursor) -> int:
        """Offset of ``cursor``; raises ``BufferValidationError`` off the text."""

        row, col = cursor
        if row < 0 or row >= self.line_count:
            raise BufferValidationError(f"Row {row} out of range", cursor=cursor)
        if col < 0 or col > len(self._lines[row]):
            raise BufferValidationError(f"Column {col} out of range", cursor=cursor)
        return self.offset_for_cursor(cursor)

    def offset_for_cursor(self, cursor: Cursor) -> int:
        row, col = cursor
        offset = 0
        for i in range(row):
            offset += len(self._lines[i]) + 1  # newline
        return offset + col

    def cursor_for_offset(self, offset: int) -> Cursor:
        running = 0
        for row, line in enumerate(self._lines):
            if offset <= running + len(line):
                return (row, max(offset - running, 0))
            running += len(line) + 1
        return (len(self._lines) - 1, len(self._lines[-1]))


__all__ = ["BufferValidationError", "Cursor", "TextDocument"]
