"""Shared fixtures: scripted definitions, a controller, and a wait helper."""

from __future__ import annotations

import threading
import time

import pytest

from algorithms.step import StepBuilder, WorkingState
from engine import InvalidInputError, PlaybackConfig, PlaybackController


# ── Scripted definitions ─────────────────────────────────────────────

class ScriptedDefinition:
    """Minimal Algorithm Definition driven by a plain generator function."""

    def __init__(self, key, script):
        self.key = key
        self.label = key.replace("_", " ").title()
        self._script = script

    def parse(self, params):
        values = params.get("values")
        if not isinstance(values, list) or not values:
            raise InvalidInputError("'values' must be a non-empty list", field="values")
        for v in values:
            if isinstance(v, bool) or not isinstance(v, int):
                raise InvalidInputError(f"'values' must be integers, got {v!r}", field="values")
        return {"values": list(values)}

    def make_state(self, inputs):
        return WorkingState(list(inputs["values"]))

    def steps(self, inputs):
        return self._script(list(inputs["values"]))


def three_comparisons(values):
    """[5, 3, 1, 4] → [1, 3, 4, 5] in exactly three comparison Steps."""
    sb = StepBuilder()
    sb.compare(0, 2).swap(0, 2)
    yield sb.build()

    sb = StepBuilder()
    sb.compare(2, 3).swap(2, 3)
    yield sb.build()

    sb = StepBuilder()
    sb.compare(1, 2)
    sb.mark("sorted", *range(len(values)))
    sb.phase = "done"
    yield sb.build(is_final=True)


def counting(total):
    """Writes 1, 2, … total into slot 0, one Step each."""
    def script(values):
        for k in range(1, total + 1):
            sb = StepBuilder()
            sb.write(0, k)
            yield sb.build(is_final=k == total)
    return script


def failing(at):
    """Yields at - 1 good Steps, then raises."""
    def script(values):
        for k in range(1, at):
            sb = StepBuilder()
            sb.write(0, k)
            yield sb.build()
        raise RuntimeError("boom")
    return script


@pytest.fixture
def sorter():
    return ScriptedDefinition("three_step", three_comparisons)


@pytest.fixture
def long_run():
    return ScriptedDefinition("long_run", counting(10_000))


# ── Controller ───────────────────────────────────────────────────────

@pytest.fixture
def controller():
    ctl = PlaybackController(PlaybackConfig(default_speed_ms=0, join_timeout_s=5.0))
    yield ctl
    ctl.reset()
    ctl.join(5.0)


# ── Helpers ──────────────────────────────────────────────────────────

@pytest.fixture
def wait_until():
    """Poll `predicate` until true or `timeout` seconds pass; returns the last result."""
    def wait(predicate, timeout=5.0, interval=0.005):
        deadline = time.monotonic() + timeout
        while True:
            result = predicate()
            if result or time.monotonic() >= deadline:
                return result
            time.sleep(interval)
    return wait


@pytest.fixture
def first_snapshot(controller):
    """Event set by an observer on the first snapshot it sees."""
    seen = threading.Event()
    unsubscribe = controller.subscribe(lambda snap: seen.set())
    yield seen
    unsubscribe()


@pytest.fixture
def make_failing():
    """Factory for a definition that raises on Step `at`."""
    return lambda at: ScriptedDefinition("broken", failing(at))
