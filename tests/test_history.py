"""
Tests for undo/redo history.

Covers:
- Commit / undo / redo over Document snapshots
- Redo tail truncation after a new commit
- Overwrite (preset load) resetting history
- Failing mutators leaving history untouched
- Cursor bounds over random operation sequences
- Listener notifications
"""
import logging
import random
import pytest

from log_digitizer import document as ops
from log_digitizer.data_model import Document, Point
from log_digitizer.history import HistoryStore


def add(x, y, index=0):
    return lambda d: ops.add_point(d, index, Point(x, y))


# ══════════════════════════════════════════════════════════════════════════
# Basic stack behaviour
# ══════════════════════════════════════════════════════════════════════════

class TestHistoryStack:

    @pytest.fixture
    def hs(self, doc):
        return HistoryStore(doc)

    def test_initial_state(self, hs, doc):
        assert hs.cursor == 0
        assert len(hs) == 1
        assert hs.current == doc
        assert not hs.can_undo()
        assert not hs.can_redo()

    def test_commit_appends(self, hs):
        new = hs.commit(add(100, 5), "Add point")
        assert len(hs) == 2
        assert hs.cursor == 1
        assert hs.current is new
        assert hs.current.series[0].points == (Point(100, 5),)
        assert hs.current_description == "Add point"

    def test_undo_restores_previous_snapshot(self, hs):
        before = hs.current
        hs.commit(add(100, 5))
        assert hs.undo() == before
        assert hs.can_redo()

    def test_redo(self, hs):
        after = hs.commit(add(100, 5))
        hs.undo()
        assert hs.redo() == after
        assert not hs.can_redo()

    def test_undo_at_start_is_noop(self, hs, doc):
        assert hs.undo() == doc
        assert hs.cursor == 0

    def test_redo_at_end_is_noop(self, hs):
        hs.commit(add(1, 1))
        hs.redo()
        assert hs.cursor == 1

    def test_commit_after_undo_drops_redo_tail(self, hs):
        hs.commit(add(1, 1))
        hs.commit(add(2, 2))
        hs.undo()
        hs.commit(add(3, 3))
        assert len(hs) == 3
        assert not hs.can_redo()
        assert [p.x for p in hs.current.series[0].points] == [1, 3]

    def test_identical_result_still_appends(self, hs):
        hs.commit(lambda d: d, "no change")
        assert len(hs) == 2
        assert hs.snapshots[0] == hs.snapshots[1]

    def test_snapshots_are_not_mutated_by_later_commits(self, hs):
        hs.commit(add(1, 1))
        first = hs.snapshots[1]
        hs.commit(add(2, 2))
        assert first.series[0].points == (Point(1, 1),)


class TestHistoryFailures:

    def test_raising_mutator_leaves_history(self, doc):
        hs = HistoryStore(doc)

        def boom(_d):
            raise IndexError("bad series")

        with pytest.raises(IndexError):
            hs.commit(boom)
        assert len(hs) == 1
        assert hs.current == doc

    def test_mutator_must_return_document(self, doc):
        hs = HistoryStore(doc)
        with pytest.raises(TypeError):
            hs.commit(lambda d: None)
        assert len(hs) == 1

    def test_empty_store_has_no_current(self):
        hs = HistoryStore()
        assert len(hs) == 0
        with pytest.raises(RuntimeError):
            _ = hs.current


class TestOverwrite:

    def test_overwrite_resets_to_single_snapshot(self, doc):
        hs = HistoryStore(doc)
        hs.commit(add(1, 1))
        hs.commit(add(2, 2))
        loaded = Document(series=())
        hs.overwrite(loaded)
        assert len(hs) == 1
        assert hs.cursor == 0
        assert hs.current == loaded

    def test_undo_after_overwrite_is_noop(self, doc):
        hs = HistoryStore(doc)
        hs.commit(add(1, 1))
        loaded = Document()
        hs.overwrite(loaded)
        assert hs.undo() == loaded
        assert not hs.can_undo()
        assert not hs.can_redo()


# ══════════════════════════════════════════════════════════════════════════
# Invariants
# ══════════════════════════════════════════════════════════════════════════

class TestCursorBounds:

    @pytest.mark.parametrize("seed", range(5))
    def test_random_sequences_keep_cursor_in_range(self, doc, seed):
        rng = random.Random(seed)
        hs = HistoryStore(doc)
        for step in range(200):
            op = rng.choice(("commit", "undo", "redo"))
            if op == "commit":
                before = hs.current
                hs.commit(add(step, step))
                if rng.random() < 0.5:
                    assert hs.undo() == before
            elif op == "undo":
                hs.undo()
            else:
                hs.redo()
            assert 0 <= hs.cursor < len(hs)


# ══════════════════════════════════════════════════════════════════════════
# Listeners
# ══════════════════════════════════════════════════════════════════════════

class TestListeners:

    def test_listener_gets_undo_redo_flags(self, doc):
        hs = HistoryStore(doc)
        seen = []
        hs.add_listener(lambda u, r: seen.append((u, r)))
        hs.commit(add(1, 1))
        hs.undo()
        hs.redo()
        hs.overwrite(doc)
        assert seen == [(True, False), (False, True), (True, False), (False, False)]

    def test_clamped_undo_does_not_notify(self, doc):
        hs = HistoryStore(doc)
        seen = []
        hs.add_listener(lambda u, r: seen.append((u, r)))
        hs.undo()
        assert seen == []

    def test_removed_listener_is_silent(self, doc):
        hs = HistoryStore(doc)
        seen = []
        cb = lambda u, r: seen.append((u, r))
        hs.add_listener(cb)
        hs.remove_listener(cb)
        hs.commit(add(1, 1))
        assert seen == []

    def test_failing_listener_is_logged(self, doc, caplog):
        hs = HistoryStore(doc)

        def bad(_u, _r):
            raise RuntimeError("widget gone")

        hs.add_listener(bad)
        with caplog.at_level(logging.ERROR, logger="log_digitizer.history"):
            hs.commit(add(1, 1))
        assert len(hs) == 2
        assert "history listener failed" in caplog.text
