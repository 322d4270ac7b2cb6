"""Error taxonomy for the version graph."""

from __future__ import annotations

from typing import Any, Optional


class VersionGraphError(RuntimeError):
    """Base class for every error raised by ``rewind_engine.history``."""


class InvalidCoordinate(VersionGraphError):
    """Raised when a branch id is unknown or an index is out of range."""

    def __init__(
        self, branch_id: str, index: Optional[int] = None, *, reason: str = ""
    ) -> None:
        if reason:
            message = reason
        elif index is None:
            message = f"Branch '{branch_id}' does not exist"
        else:
            message = f"Index {index} is out of range for branch '{branch_id}'"
        super().__init__(message)
        self.branch_id = branch_id
        self.index = index


class MalformedOperation(VersionGraphError):
    """Raised when an operation record cannot be decoded or applied."""

    def __init__(self, reason: str, *, record: Any = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.record = record


class CorruptPersistedState(VersionGraphError):
    """Raised by the loader when persisted data has no usable root branch."""


__all__ = [
    "CorruptPersistedState",
    "InvalidCoordinate",
    "MalformedOperation",
    "VersionGraphError",
]
