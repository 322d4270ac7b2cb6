from __future__ import annotations

from typing import List, Sequence

from rewind_engine.adapters.textual import TextualHistoryAdapter, TextualUIHooks
from rewind_engine.buffer import Buffer, BufferMirror
from rewind_engine.history import BranchSummary, VersionGraph, restore, serialize
from rewind_engine.runtime import EngineSettings


def make_buffer() -> Buffer:
    return Buffer(graph=VersionGraph(settings=EngineSettings()))


def make_adapter(
    buffer: Buffer,
    *,
    mirrors: List[BufferMirror] | None = None,
    statuses: List[str] | None = None,
    branches: List[Sequence[BranchSummary]] | None = None,
    logs: List[str] | None = None,
) -> TextualHistoryAdapter:
    hooks = TextualUIHooks(
        update_buffer=(mirrors.append if mirrors is not None else lambda mirror: None),
        update_status=(
            statuses.append if statuses is not None else lambda status: None
        ),
        update_branches=(
            branches.append if branches is not None else lambda summaries: None
        ),
        log=(logs.append if logs is not None else lambda line: None),
    )
    return TextualHistoryAdapter(buffer, hooks)


def type_text(adapter: TextualHistoryAdapter, text: str) -> None:
    for char in text:
        adapter.handle_textual_key(char, text=char)


def test_adapter_types_and_refreshes_buffer() -> None:
    mirrors: List[BufferMirror] = []
    statuses: List[str] = []
    adapter = make_adapter(make_buffer(), mirrors=mirrors, statuses=statuses)

    type_text(adapter, "hi")
    result = adapter.handle_textual_key("enter")

    assert result.consumed is True
    assert mirrors[-1].text == "hi\n"
    assert mirrors[-1].attributes["coordinate"] == "main@2"
    assert statuses[-1] == "insert"


def test_adapter_undo_redo_keys() -> None:
    buffer = make_buffer()
    statuses: List[str] = []
    adapter = make_adapter(buffer, statuses=statuses)
    type_text(adapter, "ab")

    adapter.handle_textual_key("ctrl+z")
    adapter.handle_textual_key("ctrl+y")
    adapter.handle_textual_key("ctrl+y")

    assert statuses[-3:] == ["undo", "redo", "nothing to redo"]
    assert buffer.graph.text() == "ab"


def test_adapter_reports_fork_and_branch_list() -> None:
    buffer = make_buffer()
    statuses: List[str] = []
    branches: List[Sequence[BranchSummary]] = []
    adapter = make_adapter(buffer, statuses=statuses, branches=branches)
    type_text(adapter, "ab")

    adapter.handle_textual_key("ctrl+z")
    adapter.handle_textual_key("c", text="c")

    assert statuses[-1] == "forked"
    assert [summary.branch_id for summary in branches[-1]] == ["main", "branch-1"]
    assert buffer.graph.text() == "ac"


def test_adapter_cycles_branch_tips() -> None:
    buffer = make_buffer()
    adapter = make_adapter(buffer)
    type_text(adapter, "ab")
    adapter.handle_textual_key("ctrl+b")
    type_text(adapter, "c")

    adapter.handle_textual_key("ctrl+n")
    assert buffer.graph.pointer.branch_id == "main"
    assert buffer.graph.text() == "ab"

    adapter.handle_textual_key("ctrl+p")
    assert buffer.graph.pointer.branch_id == "branch-1"
    assert buffer.graph.text() == "abc"


def test_adapter_cursor_and_deletion_keys() -> None:
    buffer = make_buffer()
    adapter = make_adapter(buffer)
    type_text(adapter, "abc")

    adapter.handle_textual_key("left")
    adapter.handle_textual_key("backspace")
    adapter.handle_textual_key("home")
    adapter.handle_textual_key("delete")

    assert buffer.graph.text() == "c"
    assert buffer.cursor == (0, 0)


def test_adapter_ignores_unmapped_keys() -> None:
    buffer = make_buffer()
    adapter = make_adapter(buffer)

    result = adapter.handle_textual_key("f5")

    assert result.consumed is False
    assert buffer.graph.table.stats().transaction_count == 0


def test_adapter_refreshes_on_load() -> None:
    source = make_buffer()
    source.insert_text("loaded")
    mirrors: List[BufferMirror] = []
    adapter = make_adapter(make_buffer(), mirrors=mirrors)

    restore(adapter.buffer.graph, serialize(source.graph))

    assert mirrors[-1].text == "loaded"


def test_adapter_emits_log_lines() -> None:
    logs: List[str] = []
    adapter = make_adapter(make_buffer(), logs=logs)

    adapter.handle_textual_key("x", text="x")

    assert any(line.startswith("key ->") for line in logs)
    assert any(line.startswith("result <-") for line in logs)


def test_branch_list_tracks_fork_counts_and_later_commits() -> None:
    branches: List[Sequence[BranchSummary]] = []
    adapter = make_adapter(make_buffer(), branches=branches)
    type_text(adapter, "ab")

    adapter.handle_textual_key("ctrl+z")
    adapter.handle_textual_key("c", text="c")

    latest = {summary.branch_id: summary for summary in branches[-1]}
    assert latest["branch-1"].transaction_count == 1
    assert latest["branch-1"].is_current is True
    assert latest["main"].transaction_count == 2

    type_text(adapter, "d")

    latest = {summary.branch_id: summary for summary in branches[-1]}
    assert latest["branch-1"].transaction_count == 2


def test_branch_list_moves_current_marker_on_cycle() -> None:
    buffer = make_buffer()
    branches: List[Sequence[BranchSummary]] = []
    adapter = make_adapter(buffer, branches=branches)
    type_text(adapter, "a")
    adapter.handle_textual_key("ctrl+b")

    adapter.handle_textual_key("ctrl+n")

    current = [summary.branch_id for summary in branches[-1] if summary.is_current]
    assert current == [buffer.graph.pointer.branch_id] == ["main"]
