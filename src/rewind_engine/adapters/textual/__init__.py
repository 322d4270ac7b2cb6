"""Textual adapter: key routing plus an optional demo app."""

from .controller import AdapterResult, TextualHistoryAdapter, TextualUIHooks

__all__ = ["AdapterResult", "TextualHistoryAdapter", "TextualUIHooks"]
