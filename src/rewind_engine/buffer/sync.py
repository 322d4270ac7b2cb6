"""Adapter boundary types for syncing the history buffer with host widgets."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from .document import BufferValidationError, Cursor


@dataclass(slots=True)
class BufferMirror:
    """Host-friendly snapshot describing the visible state."""

    text: str
    cursor: Cursor
    branch_id: str
    transaction_index: int
    attributes: dict[str, str] = field(default_factory=dict)


class BufferSync(Protocol):
    """How adapters exchange data with the buffer layer."""

    def pull_buffer(self) -> BufferMirror:
        """Return the latest snapshot that the host should render."""
        ...

    def push_host_edit(self, mirror: BufferMirror) -> None:
        """Record a whole-text edit made by the host widget."""
        ...


__all__ = ["BufferMirror", "BufferSync", "BufferValidationError"]
