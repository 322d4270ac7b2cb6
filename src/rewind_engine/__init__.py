"""UI-agnostic branching undo/redo engine for character-level text edits."""

__all__ = [
    "adapters",
    "buffer",
    "history",
    "runtime",
]

__version__ = "0.1.0"
