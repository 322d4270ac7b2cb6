"""Change notification for hosts that mirror the version graph."""

from __future__ import annotations

from typing import Callable, Dict

COMMIT = "history.commit"
FORK = "history.fork"
BRANCH = "history.branch"
NAVIGATE = "history.navigate"
LOAD = "history.load"

ALL_EVENTS = (COMMIT, FORK, BRANCH, NAVIGATE, LOAD)


class HistoryBus:
    """Minimal event bus letting UI and persistence layers re-read state."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, list[Callable[[object], None]]] = {}

    def subscribe(self, event: str, callback: Callable[[object], None]) -> None:
        if event not in ALL_EVENTS:
            raise ValueError(f"Unknown history event '{event}'")
        self._subscribers.setdefault(event, []).append(callback)

    def unsubscribe(self, event: str, callback: Callable[[object], None]) -> None:
        callbacks = self._subscribers.get(event, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def emit(self, event: str, payload: object | None = None) -> None:
        for callback in list(self._subscribers.get(event, [])):
            callback(payload)


__all__ = [
    "ALL_EVENTS",
    "BRANCH",
    "COMMIT",
    "FORK",
    "HistoryBus",
    "LOAD",
    "NAVIGATE",
]
