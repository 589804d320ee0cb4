"""
step.py — Steps & Working State
================================
Every algorithm is a generator that yields Step objects.  A Step is one
atomic unit of progress: it mutates WorkingState once and (optionally)
marks points of interest.  Steps are arena-style: they reference
indices / keys into WorkingState.data instead of carrying closures,
so a definition is a plain, deterministic, flat sequence no matter how
recursive the algorithm is (recursion composes with `yield from`).

    • writes   – (key, value) assignments into data
    • swaps    – (key_a, key_b) exchanges
    • marks    – add keys to named markers ("sorted", "visited", …)
    • pointers – named cursors / auxiliary structures (mid, queue, …)
    • counters – deltas for running tallies (comparisons, swaps, …)

A key is an int / str for flat data, or a tuple path for nested data
(e.g. (i, j) into a DP table).

Design decisions:
  - Step is a frozen dataclass; the sequencer is the only thing that
    calls apply().
  - apply() resolves every key before touching anything, so a bad key
    fails the Step without leaving it half applied.
  - WorkingState is the only mutable object.  snapshot() deep-copies it,
    so renderers never alias live state.
"""

import copy
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from engine.snapshot import Snapshot


# ---------------------------------------------------------------------------
# Working state
# ---------------------------------------------------------------------------
class WorkingState:
    """
    Attributes:
        data            : The structure the algorithm operates on (list, dict, table).
        context         : Static inputs shown alongside data; never mutated by Steps.
        marks           : {marker: [keys]} in the order they were marked.
        pointers        : {name: value}
        counters        : {name: int}
        highlight       : Keys the latest Step looked at.
        phase           : Latest phase label.
        explanation     : Latest explanation.
        pseudocode_line : Latest pseudocode line.
        is_final        : Set by the Step that ends the run.
        steps_applied   : How many Steps have been applied.
    """

    def __init__(self, data: Any, context: Optional[Dict[str, Any]] = None, phase: str = "ready"):
        self.data:            Any                  = data
        self.context:         Dict[str, Any]       = dict(context or {})
        self.marks:           Dict[str, List[Any]] = {}
        self.pointers:        Dict[str, Any]       = {}
        self.counters:        Dict[str, int]       = {}
        self.highlight:       Tuple[Any, ...]      = ()
        self.phase:           str                  = phase
        self.explanation:     str                  = ""
        self.pseudocode_line: int                  = -1
        self.is_final:        bool                 = False
        self.steps_applied:   int                  = 0

    def marked(self, name: str) -> List[Any]:
        return list(self.marks.get(name, []))

    def snapshot(self, generation: int, sequence: int, algo_key: str = "", error: Optional[str] = None) -> Snapshot:
        return Snapshot(
            generation=generation,
            sequence=sequence,
            algo_key=algo_key,
            data=copy.deepcopy(self.data),
            context=copy.deepcopy(self.context),
            highlight=tuple(self.highlight),
            marks={k: list(v) for k, v in self.marks.items()},
            pointers=copy.deepcopy(self.pointers),
            counters=dict(self.counters),
            phase=self.phase,
            explanation=self.explanation,
            pseudocode_line=self.pseudocode_line,
            is_final=self.is_final or error is not None,
            error=error,
        )


# ---------------------------------------------------------------------------
# Step
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Step:
    writes:          Tuple[Tuple[Any, Any], ...] = ()
    swaps:           Tuple[Tuple[Any, Any], ...] = ()
    highlight:       Tuple[Any, ...]             = ()
    marks:           Tuple[Tuple[str, Any], ...] = ()
    unmarks:         Tuple[Tuple[str, Any], ...] = ()
    clears:          Tuple[str, ...]             = ()
    pointers:        Tuple[Tuple[str, Any], ...] = ()
    counters:        Tuple[Tuple[str, int], ...] = ()
    phase:           Optional[str]               = None
    explanation:     str                         = ""
    pseudocode_line: int                         = -1
    is_final:        bool                        = False

    def apply(self, state: WorkingState) -> None:
        # resolve first: any KeyError / IndexError happens before mutation
        writes = [(_locate(state.data, key), value) for key, value in self.writes]
        swaps  = [(_locate(state.data, a, existing=True), _locate(state.data, b, existing=True))
                  for a, b in self.swaps]

        for name in self.clears:
            state.marks.pop(name, None)
        for (container, key), value in writes:
            container[key] = value
        for (ca, ka), (cb, kb) in swaps:
            ca[ka], cb[kb] = cb[kb], ca[ka]
        for name, key in self.unmarks:
            keys = state.marks.get(name)
            if keys and key in keys:
                keys.remove(key)
        for name, key in self.marks:
            keys = state.marks.setdefault(name, [])
            if key not in keys:
                keys.append(key)
        for name, value in self.pointers:
            if value is None:
                state.pointers.pop(name, None)
            else:
                state.pointers[name] = value
        for name, delta in self.counters:
            state.counters[name] = state.counters.get(name, 0) + delta

        state.highlight       = self.highlight
        if self.phase is not None:
            state.phase       = self.phase
        state.explanation     = self.explanation
        state.pseudocode_line = self.pseudocode_line
        state.is_final        = self.is_final
        state.steps_applied  += 1


def _locate(data: Any, key: Any, existing: bool = False) -> Tuple[Any, Any]:
    """
    Return (container, last_key) for a flat key or a tuple path.  Writes
    may add dict keys; swaps pass `existing` and need the key present.
    """
    path = key if isinstance(key, tuple) else (key,)
    if not path:
        raise KeyError("empty key path")
    container = data
    for part in path[:-1]:
        container = container[part]
    last = path[-1]
    if isinstance(container, list):
        if not isinstance(last, int) or not -len(container) <= last < len(container):
            raise IndexError(f"index {key!r} out of range")
    elif not isinstance(container, dict):
        raise TypeError(f"cannot address {key!r} inside {type(container).__name__}")
    elif existing and last not in container:
        raise KeyError(key)
    return container, last


# ---------------------------------------------------------------------------
# Convenience builder so algorithms don't have to spell out every tuple
# ---------------------------------------------------------------------------
class StepBuilder:
    """
    Mutable scratch-pad that algorithms use to construct Steps cleanly.

    Usage inside an algorithm generator:
        sb = StepBuilder()
        sb.compare(j, j + 1)
        sb.swap(j, j + 1)
        sb.explanation = f"{a} > {b}, swap them."
        yield sb.build()
    """

    def __init__(self):
        self.reset()

    def reset(self):
        self.writes:          List[Tuple[Any, Any]] = []
        self.swaps:           List[Tuple[Any, Any]] = []
        self.highlight:       List[Any]             = []
        self.marks:           List[Tuple[str, Any]] = []
        self.unmarks:         List[Tuple[str, Any]] = []
        self.clears:          List[str]             = []
        self.pointers:        Dict[str, Any]        = {}
        self.counters:        Dict[str, int]        = {}
        self.phase:           Optional[str]         = None
        self.explanation:     str                   = ""
        self.pseudocode_line: int                   = -1

    # -- helpers --
    def look(self, *keys):
        for k in keys:
            if k not in self.highlight:
                self.highlight.append(k)
        return self

    def compare(self, *keys):
        self.look(*keys)
        return self.count("comparisons")

    def swap(self, a, b):
        self.swaps.append((a, b))
        self.look(a, b)
        return self.count("swaps")

    def write(self, key, value):
        self.writes.append((key, copy.deepcopy(value)))
        return self.count("writes")

    def mark(self, name: str, *keys):
        self.marks.extend((name, k) for k in keys)
        return self

    def unmark(self, name: str, *keys):
        self.unmarks.extend((name, k) for k in keys)
        return self

    def clear(self, *names: str):
        self.clears.extend(names)
        return self

    def point(self, name: str, value):
        self.pointers[name] = copy.deepcopy(value)
        return self

    def count(self, name: str, delta: int = 1):
        self.counters[name] = self.counters.get(name, 0) + delta
        return self

    def build(self, is_final: bool = False) -> Step:
        return Step(
            writes=tuple(self.writes),
            swaps=tuple(self.swaps),
            highlight=tuple(self.highlight),
            marks=tuple(self.marks),
            unmarks=tuple(self.unmarks),
            clears=tuple(self.clears),
            pointers=tuple(self.pointers.items()),
            counters=tuple(self.counters.items()),
            phase=self.phase,
            explanation=self.explanation,
            pseudocode_line=self.pseudocode_line,
            is_final=is_final,
        )
