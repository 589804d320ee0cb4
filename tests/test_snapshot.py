"""Tests for Snapshot and SnapshotStore."""

from __future__ import annotations

import logging
import math

import pytest

from engine.errors import StaleTokenError
from engine.snapshot import Snapshot, SnapshotStore
from engine.token import TokenSource


def _store(history_size=256):
    tokens = TokenSource()
    return tokens, SnapshotStore(tokens, history_size=history_size)


# ── Publishing ───────────────────────────────────────────────────────

class TestPublish:
    def test_latest_and_observers(self):
        tokens, store = _store()
        seen = []
        store.subscribe(seen.append)
        token = tokens.mint()

        snap = Snapshot(generation=token.generation, sequence=1, data=[3, 1])
        store.publish(token, snap)

        assert store.latest is snap
        assert seen == [snap]

    def test_unsubscribe(self):
        tokens, store = _store()
        seen = []
        unsubscribe = store.subscribe(seen.append)
        token = tokens.mint()
        store.publish(token, Snapshot(token.generation, 1))
        unsubscribe()
        store.publish(token, Snapshot(token.generation, 2))
        assert [s.sequence for s in seen] == [1]

    def test_stale_token_rejected(self):
        tokens, store = _store()
        seen = []
        store.subscribe(seen.append)
        old = tokens.mint()
        tokens.mint()
        with pytest.raises(StaleTokenError):
            store.publish(old, Snapshot(old.generation, 1))
        assert seen == []
        assert store.latest is None

    def test_generation_mismatch_rejected(self):
        tokens, store = _store()
        token = tokens.mint()
        with pytest.raises(StaleTokenError):
            store.publish(token, Snapshot(token.generation + 1, 1))

    def test_out_of_order_sequence_rejected(self):
        tokens, store = _store()
        token = tokens.mint()
        store.publish(token, Snapshot(token.generation, 2))
        with pytest.raises(StaleTokenError):
            store.publish(token, Snapshot(token.generation, 2))
        with pytest.raises(StaleTokenError):
            store.publish(token, Snapshot(token.generation, 1))
        assert store.latest.sequence == 2

    def test_failing_observer_is_logged_not_raised(self, caplog):
        tokens, store = _store()
        seen = []

        def broken(snap):
            raise ValueError("render failed")

        store.subscribe(broken)
        store.subscribe(seen.append)
        token = tokens.mint()
        with caplog.at_level(logging.ERROR, logger="engine.snapshot"):
            store.publish(token, Snapshot(token.generation, 1))
        assert len(seen) == 1
        assert "render failed" in caplog.text


# ── History ──────────────────────────────────────────────────────────

class TestHistory:
    def test_rolling_window(self):
        tokens, store = _store(history_size=3)
        token = tokens.mint()
        for seq in range(1, 6):
            store.publish(token, Snapshot(token.generation, seq))
        assert [s.sequence for s in store.history()] == [3, 4, 5]

    def test_since(self):
        tokens, store = _store()
        token = tokens.mint()
        for seq in range(1, 5):
            store.publish(token, Snapshot(token.generation, seq))
        assert [s.sequence for s in store.since(2)] == [3, 4]
        assert store.since(4) == []

    def test_new_generation_drops_old_history(self):
        tokens, store = _store()
        t1 = tokens.mint()
        store.publish(t1, Snapshot(t1.generation, 1))
        store.publish(t1, Snapshot(t1.generation, 2))
        t2 = tokens.mint()
        store.publish(t2, Snapshot(t2.generation, 1))

        assert [(s.generation, s.sequence) for s in store.history()] == [(t2.generation, 1)]
        # a poller still on the old generation gets everything retained
        assert [s.sequence for s in store.since(2, generation=t1.generation)] == [1]

    def test_clear(self):
        tokens, store = _store()
        assert store.clear() is False
        token = tokens.mint()
        store.publish(token, Snapshot(token.generation, 1))
        assert store.clear() is True
        assert store.latest is None
        assert store.history() == []


# ── Serialisation ────────────────────────────────────────────────────

class TestToDict:
    def test_json_safe(self):
        snap = Snapshot(
            generation=1,
            sequence=2,
            data={0: 0, 1: math.inf},
            highlight=((1, 2),),
            marks={"visited": [0]},
        )
        out = snap.to_dict()
        assert out["data"] == {"0": 0, "1": None}
        assert out["highlight"] == [[1, 2]]
        assert out["marks"] == {"visited": [0]}
        assert out["error"] is None
