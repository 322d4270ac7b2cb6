"""Cursor-aware editing façade over the version graph."""

from .buffer import Buffer, BufferDelta, BufferView, Transaction
from .diff import common_affixes, diff_operations
from .document import BufferValidationError, Cursor, TextDocument
from .sync import BufferMirror, BufferSync

__all__ = [
    "Buffer",
    "BufferDelta",
    "BufferMirror",
    "BufferSync",
    "BufferValidationError",
    "BufferView",
    "Cursor",
    "TextDocument",
    "Transaction",
    "common_affixes",
    "diff_operations",
]
