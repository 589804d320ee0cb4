"""Tests for the StepSequencer loop."""

from __future__ import annotations

import threading

from algorithms.step import StepBuilder, WorkingState
from engine.errors import DefinitionError
from engine.pacing import PacingController
from engine.sequencer import Outcome, StepSequencer
from engine.snapshot import SnapshotStore
from engine.token import TokenSource


def _rig(speed_ms=0):
    guard = threading.Condition(threading.RLock())
    tokens = TokenSource()
    store = SnapshotStore(tokens)
    pacing = PacingController(tokens, condition=guard, speed_ms=speed_ms)
    return tokens, store, StepSequencer(tokens, store, pacing, guard)


def _writes(n):
    for k in range(1, n + 1):
        yield StepBuilder().write(0, k).build()


class TestSequencer:
    def test_completes_and_publishes_in_order(self):
        tokens, store, seq = _rig()
        token = tokens.mint()
        result = seq.run(_writes(4), WorkingState([0]), token, "demo")

        assert result.outcome is Outcome.COMPLETED
        assert result.steps == 4
        history = store.history()
        assert [s.sequence for s in history] == [1, 2, 3, 4]
        assert [s.data for s in history] == [[1], [2], [3], [4]]
        assert all(s.algo_key == "demo" for s in history)

    def test_definition_error_is_wrapped(self):
        tokens, store, seq = _rig()

        def broken():
            yield StepBuilder().write(0, 1).build()
            raise KeyError("missing")

        result = seq.run(broken(), WorkingState([0]), tokens.mint(), "broken")
        assert result.outcome is Outcome.FAILED
        assert result.steps == 1
        assert isinstance(result.error, DefinitionError)
        assert isinstance(result.error.cause, KeyError)

    def test_apply_error_is_wrapped(self):
        tokens, store, seq = _rig()
        source = iter([StepBuilder().write(5, 1).build()])
        result = seq.run(source, WorkingState([0]), tokens.mint())
        assert result.outcome is Outcome.FAILED
        assert isinstance(result.error.cause, IndexError)
        assert store.latest is None

    def test_stale_token_abandons_without_publishing(self):
        tokens, store, seq = _rig()
        token = tokens.mint()
        tokens.invalidate()
        result = seq.run(_writes(3), WorkingState([0]), token)
        assert result.outcome is Outcome.ABANDONED
        assert store.latest is None

    def test_invalidation_from_observer_stops_the_run(self):
        tokens, store, seq = _rig()
        store.subscribe(lambda snap: snap.sequence == 2 and tokens.invalidate())
        result = seq.run(_writes(10), WorkingState([0]), tokens.mint())
        assert result.outcome is Outcome.ABANDONED
        assert store.latest.sequence == 2

    def test_source_is_closed(self):
        tokens, store, seq = _rig()
        closed = []

        def source():
            try:
                for k in range(100):
                    yield StepBuilder().write(0, k).build()
            finally:
                closed.append(True)

        store.subscribe(lambda snap: tokens.invalidate())
        seq.run(source(), WorkingState([0]), tokens.mint())
        assert closed == [True]
