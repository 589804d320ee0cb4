"""
snapshot.py — Snapshots & the Snapshot Store
=============================================
A Snapshot is a frozen-in-time copy of the run's WorkingState plus the
display metadata a renderer needs (highlighted keys, markers, pointers,
counters, phase label, explanation).  Observers own the copy; nothing
in it aliases live WorkingState.

The SnapshotStore keeps the latest snapshot and a short rolling window
for pollers, and fans every accepted snapshot out to observers.  It
refuses writes from stale tokens and out-of-order sequence numbers by
raising StaleTokenError; the sequencer treats that as "this run is
over" and never lets it reach the host.
"""

import logging
import math
import threading
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Deque, Dict, List, Optional, Tuple

from engine.errors import StaleTokenError
from engine.token import Token, TokenSource

logger = logging.getLogger(__name__)

Observer = Callable[["Snapshot"], None]


@dataclass(frozen=True)
class Snapshot:
    """
    Attributes:
        generation      : Token generation of the run that produced it.
        sequence        : 1-based, strictly increasing within a generation.
        algo_key        : Registry key of the algorithm being played.
        data            : Deep copy of WorkingState.data.
        context         : Static inputs the renderer needs (text, pattern, graph …).
        highlight       : Keys being looked at in this step (e.g. compared indices).
        marks           : {marker_name: [keys]} e.g. "sorted", "found", "visited".
        pointers        : Named cursors / auxiliary structures (mid, queue, stack …).
        counters        : Running tallies (comparisons, swaps, writes …).
        phase           : Short phase label ("partition", "merge", "done" …).
        explanation     : Plain-English description of the step.
        pseudocode_line : 0-based pseudocode line, -1 if none.
        is_final        : True on the snapshot that ends the run.
        error           : Message when the definition failed, else None.
    """

    generation:      int
    sequence:        int
    algo_key:        str                  = ""
    data:            Any                  = None
    context:         Dict[str, Any]       = field(default_factory=dict)
    highlight:       Tuple[Any, ...]      = ()
    marks:           Dict[str, List[Any]] = field(default_factory=dict)
    pointers:        Dict[str, Any]       = field(default_factory=dict)
    counters:        Dict[str, int]       = field(default_factory=dict)
    phase:           str                  = ""
    explanation:     str                  = ""
    pseudocode_line: int                  = -1
    is_final:        bool                 = False
    error:           Optional[str]        = None

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe view (string keys, infinities as None)."""
        return {
            "generation":      self.generation,
            "sequence":        self.sequence,
            "algo_key":        self.algo_key,
            "data":            _jsonable(self.data),
            "context":         _jsonable(self.context),
            "highlight":       _jsonable(list(self.highlight)),
            "marks":           _jsonable(self.marks),
            "pointers":        _jsonable(self.pointers),
            "counters":        dict(self.counters),
            "phase":           self.phase,
            "explanation":     self.explanation,
            "pseudocode_line": self.pseudocode_line,
            "is_final":        self.is_final,
            "error":           self.error,
        }


def _jsonable(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_jsonable(v) for v in value]
    if isinstance(value, float) and (math.isinf(value) or math.isnan(value)):
        return None
    return value


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------
class SnapshotStore:
    """
    Holds the latest Snapshot and a rolling window of the current
    generation's history.  History from an older generation is dropped
    as soon as a newer generation publishes.
    """

    def __init__(self, tokens: TokenSource, history_size: int = 256):
        self._tokens    = tokens
        self._lock      = threading.Lock()
        self._latest:   Optional[Snapshot]  = None
        self._history:  Deque[Snapshot]     = deque(maxlen=history_size)
        self._observers: List[Observer]     = []

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------
    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register observer; returns a function that unsubscribes it."""
        with self._lock:
            self._observers.append(observer)
        return lambda: self.unsubscribe(observer)

    def unsubscribe(self, observer: Observer) -> None:
        with self._lock:
            if observer in self._observers:
                self._observers.remove(observer)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def publish(self, token: Token, snapshot: Snapshot) -> None:
        if self._tokens.is_stale(token):
            raise StaleTokenError(token.generation)
        if snapshot.generation != token.generation:
            raise StaleTokenError(
                snapshot.generation,
                f"snapshot generation {snapshot.generation} does not match {token}",
            )

        with self._lock:
            last = self._latest
            if last is not None:
                if snapshot.generation < last.generation or (
                    snapshot.generation == last.generation and snapshot.sequence <= last.sequence
                ):
                    raise StaleTokenError(
                        snapshot.generation,
                        f"out-of-order snapshot {snapshot.generation}/{snapshot.sequence} "
                        f"after {last.generation}/{last.sequence}",
                    )
                if snapshot.generation != last.generation:
                    self._history.clear()
            self._latest = snapshot
            self._history.append(snapshot)
            observers = list(self._observers)

        for observer in observers:
            try:
                observer(snapshot)
            except Exception:
                logger.exception("observer %r failed on %d/%d", observer, snapshot.generation, snapshot.sequence)

    def clear(self) -> bool:
        """Forget everything.  Returns False if there was nothing to forget."""
        with self._lock:
            if self._latest is None and not self._history:
                return False
            self._latest = None
            self._history.clear()
        return True

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    @property
    def latest(self) -> Optional[Snapshot]:
        with self._lock:
            return self._latest

    def history(self) -> List[Snapshot]:
        with self._lock:
            return list(self._history)

    def since(self, sequence: int, generation: Optional[int] = None) -> List[Snapshot]:
        """Snapshots newer than `sequence`; everything retained if the generation moved on."""
        with self._lock:
            snaps = list(self._history)
        if not snaps:
            return []
        if generation is not None and snaps[-1].generation != generation:
            return snaps
        return [s for s in snaps if s.sequence > sequence]
