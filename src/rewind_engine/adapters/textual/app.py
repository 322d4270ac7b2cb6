"""Executable Textual app that hosts the history engine."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from typing import Optional, Sequence

try:  # pragma: no cover - imported only when demo is run
    from textual import events
    from textual.app import App, ComposeResult
    from textual.containers import Horizontal
    from textual.widgets import Footer, Header, Static
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' package to use rewind_engine.adapters.textual.app"
    ) from exc

from rewind_engine.buffer import Buffer, BufferMirror
from rewind_engine.history import BranchSummary
from rewind_engine.runtime import telemetry

from .controller import TextualHistoryAdapter, TextualUIHooks

CURSOR_MARK = "█"


@dataclass
class UIState:
    buffer_text: str = ""
    status_text: str = ""
    branch_text: str = ""


def render_branches(summaries: Sequence[BranchSummary]) -> str:
    lines = []
    for summary in summaries:
        marker = ">" if summary.is_current else " "
        origin = (
            f" <- {summary.parent_branch_id}@{summary.parent_transaction_index}"
            if summary.parent_branch_id
            else ""
        )
        count = summary.transaction_count
        lines.append(f"{marker} {summary.branch_id} [{count}]{origin}")
    return "\n".join(lines)


def render_mirror(mirror: BufferMirror) -> str:
    row, col = mirror.cursor
    lines = mirror.text.split("\n")
    line = lines[row]
    lines[row] = line[:col] + CURSOR_MARK + line[col:]
    return "\n".join(lines)


class RewindApp(App[None]):
    """Minimal Textual UI: buffer on the left, branch list on the right."""

    CSS = """
	Screen {
		layout: vertical;
	}

	#main-area {
		height: 1fr;
	}

	#buffer-view {
		width: 3fr;
		border: round $accent;
		padding: 1 1;
		content-align: left top;
		overflow: auto;
	}

	#branch-view {
		width: 1fr;
		border: round $secondary;
		padding: 0 1;
	}

	#status-line {
		height: 1;
		background: $surface-darken-1;
		padding: 0 1;
	}
	"""

    BINDINGS = [
        ("ctrl+c", "quit", "Quit"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, *, buffer: Optional[Buffer] = None) -> None:
        super().__init__()
        self._state = UIState()
        self.buffer = buffer or Buffer()
        self.adapter: TextualHistoryAdapter | None = None
        self._buffer_widget: Static | None = None
        self._branch_widget: Static | None = None
        self._status_widget: Static | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Horizontal(id="main-area"):
            self._buffer_widget = Static("", id="buffer-view")
            self._branch_widget = Static("", id="branch-view")
            yield self._buffer_widget
            yield self._branch_widget
        self._status_widget = Static("", id="status-line")
        yield self._status_widget
        yield Footer()

    def on_mount(self) -> None:
        hooks = TextualUIHooks(
            update_buffer=self._update_buffer,
            update_status=self._update_status,
            update_branches=self._update_branches,
            log=self._log_line,
        )
        self.adapter = TextualHistoryAdapter(self.buffer, hooks)

    def on_key(self, event: events.Key) -> None:
        if not self.adapter or event.key in {"ctrl+c", "ctrl+q"}:
            return
        result = self.adapter.handle_textual_key(event.key, text=event.character)
        if result.consumed:
            event.stop()

    def _update_buffer(self, mirror: BufferMirror) -> None:
        self._state.buffer_text = render_mirror(mirror)
        if self._buffer_widget:
            self._buffer_widget.update(self._state.buffer_text)
        self.sub_title = mirror.attributes.get("coordinate", "")

    def _update_status(self, status: str) -> None:
        self._state.status_text = status
        if self._status_widget:
            self._status_widget.update(status)

    def _update_branches(self, summaries: Sequence[BranchSummary]) -> None:
        self._state.branch_text = render_branches(summaries)
        if self._branch_widget:
            self._branch_widget.update(self._state.branch_text)

    def _log_line(self, line: str) -> None:
        telemetry.get_logger("rewind_engine.textual").debug(line)


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the rewind engine Textual demo.")
    parser.add_argument(
        "--preset",
        choices=("development", "production", "performance"),
        default="production",
        help="Telemetry preset (default: production, which keeps the console clean)",
    )
    parser.add_argument(
        "--text",
        default="",
        help="Initial text typed into the root branch",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    telemetry.configure(preset=args.preset)
    app = RewindApp(buffer=Buffer.from_text(args.text))
    app.run()


if __name__ == "__main__":  # pragma: no cover - manual demo
    main()
