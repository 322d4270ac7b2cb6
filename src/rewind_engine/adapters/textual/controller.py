"""Minimal Textual adapter that routes key presses into a history buffer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence

from rewind_engine.buffer import Buffer, BufferMirror
from rewind_engine.history import BranchSummary, events


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@dataclass(slots=True)
class TextualUIHooks:
    """Callbacks invoked by the adapter to update Textual widgets."""

    update_buffer: Callable[[BufferMirror], None]
    update_status: Callable[[str], None] = _noop
    update_branches: Callable[[Sequence[BranchSummary]], None] = _noop
    # Optional realtime log callback a host may use to surface debug lines
    log: Callable[[str], None] = _noop


@dataclass(slots=True)
class AdapterResult:
    consumed: bool
    status: str = "ok"


class TextualHistoryAdapter:
    """Bridges a ``Buffer`` and its graph events to a Textual-friendly surface."""

    def __init__(self, buffer: Buffer, hooks: TextualUIHooks) -> None:
        self.buffer = buffer
        self.hooks = hooks
        self._commands: Dict[str, Callable[[], str]] = {
            "ctrl+z": self._undo,
            "ctrl+y": self._redo,
            "ctrl+b": self._new_branch,
            "ctrl+n": lambda: self._cycle_branch(1),
            "ctrl+p": lambda: self._cycle_branch(-1),
            "backspace": self._backspace,
            "delete": self._delete,
            "left": lambda: self._move(-1),
            "right": lambda: self._move(1),
            "home": lambda: self._line_edge(end=False),
            "end": lambda: self._line_edge(end=True),
            "enter": lambda: self._type("\n"),
        }
        self._subscribe_events()
        self._refresh_buffer()
        self._refresh_branches()

    def handle_textual_key(
        self, key: str, *, text: Optional[str] = None
    ) -> AdapterResult:
        """Translate a Textual key event into a buffer edit or navigation."""

        self._log_state("key ->", key=key, text=text)
        command = self._commands.get(key.lower())
        if command is not None:
            status = command()
        elif text is not None and len(text) == 1 and text.isprintable():
            status = self._type(text)
        else:
            return AdapterResult(consumed=False, status="ignored")

        self.hooks.update_status(status)
        self._refresh_buffer()
        self._log_state("result <-", status=status)
        return AdapterResult(consumed=True, status=status)

    def _type(self, text: str) -> str:
        delta = self.buffer.insert_text(text)
        return "forked" if delta.forked else "insert"

    def _backspace(self) -> str:
        delta = self.buffer.delete_backward()
        if delta is None:
            return "nothing to delete"
        return "forked" if delta.forked else "delete"

    def _delete(self) -> str:
        delta = self.buffer.delete_forward()
        if delta is None:
            return "nothing to delete"
        return "forked" if delta.forked else "delete"

    def _undo(self) -> str:
        return "undo" if self.buffer.undo() else "nothing to undo"

    def _redo(self) -> str:
        return "redo" if self.buffer.redo() else "nothing to redo"

    def _new_branch(self) -> str:
        coordinate = self.buffer.graph.create_branch()
        return f"branch {coordinate.branch_id}"

    def _cycle_branch(self, step: int) -> str:
        graph = self.buffer.graph
        ids = graph.table.branch_ids()
        position = ids.index(graph.pointer.branch_id)
        target = ids[(position + step) % len(ids)]
        tip = graph.tip(target)
        self.buffer.switch_to(tip.branch_id, tip.index)
        return f"switched {target}"

    def _move(self, delta: int) -> str:
        self.buffer.move_cursor(delta)
        return "move"

    def _line_edge(self, *, end: bool) -> str:
        self.buffer.move_to_line_edge(end=end)
        return "move"

    def _subscribe_events(self) -> None:
        bus = self.buffer.graph.bus
        for event in (
            events.COMMIT,
            events.FORK,
            events.BRANCH,
            events.NAVIGATE,
            events.LOAD,
        ):
            bus.subscribe(
                event, lambda payload, name=event: self._handle_event(name, payload)
            )

    def _handle_event(self, name: str, payload: object | None) -> None:
        self._log_state("event ->", event=name, payload=payload)
        self._refresh_branches()
        if name == events.LOAD:
            self._refresh_buffer()

    def _refresh_buffer(self) -> None:
        pointer = self.buffer.graph.pointer
        self.hooks.update_buffer(
            self.buffer.mirror(attributes={"coordinate": str(pointer)})
        )

    def _refresh_branches(self) -> None:
        self.hooks.update_branches(self.buffer.graph.branch_summaries())

    def _log_state(self, prefix: str, **fields: object) -> None:
        snapshot: Dict[str, object] = {
            "pointer": str(self.buffer.graph.pointer),
            "cursor": self.buffer.cursor,
            "buffer": self.buffer.name,
        }
        snapshot.update({k: v for k, v in fields.items() if v is not None})
        parts = [prefix] + [f"{key}={value!r}" for key, value in snapshot.items()]
        self.hooks.log(" ".join(parts))


__all__ = ["AdapterResult", "TextualHistoryAdapter", "TextualUIHooks"]
