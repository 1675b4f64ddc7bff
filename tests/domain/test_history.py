from __future__ import annotations

from domain.history import HistoryManager, capture
from domain.models import HistoryEntry
from tests.helpers.layout_fixtures import make_text, session_with_pages


def _entry(marker: str) -> HistoryEntry:
    return capture([make_text(marker)], [], [], [])


def _marker(manager_result: object) -> str:
    return manager_result.text_fields[0].id  # type: ignore[attr-defined]


def test_undo_records_live_state_as_redo_tip() -> None:
    manager = HistoryManager(limit=10)
    manager.snapshot(_entry("s0"))

    restored = manager.undo(_entry("live"))

    assert _marker(restored) == "s0"
    assert manager.can_redo
    assert _marker(manager.redo()) == "live"
    assert manager.redo() is None


def test_snapshot_after_undo_drops_redo_branch() -> None:
    manager = HistoryManager(limit=10)
    manager.snapshot(_entry("s0"))
    manager.snapshot(_entry("s1"))
    manager.undo(_entry("live"))

    manager.snapshot(_entry("branch"))

    assert not manager.can_redo
    assert [entry.text_fields[0].id for entry in manager.entries] == ["s0", "branch"]


def test_restore_returns_independent_copies() -> None:
    entry = _entry("s0")
    manager = HistoryManager()
    manager.snapshot(entry)

    restored = manager.undo(_entry("live"))
    restored.text_fields[0] = make_text("mutated")

    assert entry.text_fields[0].id == "s0"


def test_history_keeps_last_fifty_states() -> None:
    session = session_with_pages(1)
    for index in range(60):
        session.add_text_field(make_text(f"f{index}"))

    assert session.history.size == 50

    undone = 0
    while session.undo():
        undone += 1

    assert undone == 50
    # the oldest retained state is the one taken before the 11th addition
    assert [field.id for field in session.text_fields] == [f"f{index}" for index in range(10)]
    assert session.undo() is False


def test_undo_then_redo_restores_latest_state() -> None:
    session = session_with_pages(1)
    session.add_text_field(make_text("a"))
    session.add_text_field(make_text("b"))

    assert session.undo()
    assert [field.id for field in session.text_fields] == ["a"]
    assert session.redo()
    assert [field.id for field in session.text_fields] == ["a", "b"]
    assert session.redo() is False


def test_undo_after_redo_keeps_unsnapshotted_edits() -> None:
    manager = HistoryManager(limit=10)
    manager.snapshot(_entry("s0"))
    manager.undo(_entry("s1"))
    manager.redo()

    assert _marker(manager.undo(_entry("s1-edited"))) == "s0"
    assert _marker(manager.redo()) == "s1-edited"


def test_session_undo_on_redo_tip_keeps_field_update() -> None:
    session = session_with_pages(1)
    session.add_text_field(make_text("a"))
    session.undo()
    session.redo()

    session.update_text_field("a", x=321)
    session.undo()

    assert session.text_fields == []
    assert session.redo()
    assert [field.x for field in session.text_fields] == [321]
