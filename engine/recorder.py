"""
recorder.py — Run Recorder & Analytics
========================================
Records a complete run (every Snapshot) with no pacing and no thread,
then computes the analytics the UI needs for the Analytics panel and
Comparison Mode.  Because a definition is deterministic, recording the
same input twice yields the same ordered Snapshot sequence; the live
PlaybackController produces that same sequence when left alone.

Usage:
    rec = Recorder()
    rec.start(get_algorithm("bubble_sort"), {"values": [5, 3, 1, 4]})
    rec.run_to_completion()          # exhausts the step source
    metrics = rec.get_metrics()      # the analytics card
    rec.export()                     # serialisable record for save/replay

Comparison Mode:
    The UI holds two Recorders (one per algorithm), runs both to
    completion on the SAME input, then calls compare(rec1, rec2).
"""

import logging
import sys
import time
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from engine.errors import DefinitionError
from engine.snapshot import Snapshot

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Metrics dataclass — what the Analytics panel renders
# ---------------------------------------------------------------------------
@dataclass
class RunMetrics:
    algo_key:      str   = ""
    algo_label:    str   = ""
    total_steps:   int   = 0
    comparisons:   int   = 0
    swaps:         int   = 0
    writes:        int   = 0
    wall_time_ms:  float = 0.0        # wall-clock time to run to completion
    memory_bytes:  int   = 0          # approx size of the snapshot buffer
    completed:     bool  = False
    error:         str   = ""
    counters:      Dict[str, int] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# ComparisonResult — side-by-side analytics
# ---------------------------------------------------------------------------
@dataclass
class ComparisonResult:
    left:  RunMetrics = field(default_factory=RunMetrics)
    right: RunMetrics = field(default_factory=RunMetrics)
    # derived
    winner_steps:       str = ""
    winner_comparisons: str = ""
    winner_swaps:       str = ""


# ---------------------------------------------------------------------------
# Recorder
# ---------------------------------------------------------------------------
class Recorder:
    """
    Attributes:
        snapshots : Every Snapshot of the run, in order.
        metrics   : Computed RunMetrics (available after run_to_completion).
        error     : DefinitionError if the definition raised.
    """

    def __init__(self):
        self.snapshots: List[Snapshot]            = []
        self.metrics:   Optional[RunMetrics]      = None
        self.error:     Optional[DefinitionError] = None

        self._definition: Any            = None
        self._params:     Dict[str, Any] = {}
        self._state:      Any            = None
        self._source:     Any            = None

    # ------------------------------------------------------------------
    # Setup & run
    # ------------------------------------------------------------------
    def start(self, definition: Any, params: Optional[Dict[str, Any]] = None) -> None:
        """Validate input and build a fresh state + step source."""
        inputs = definition.parse(params or {})

        self._definition = definition
        self._params     = dict(params or {})
        self._state      = definition.make_state(inputs)
        self._source     = iter(definition.steps(inputs))
        self.snapshots   = []
        self.metrics     = None
        self.error       = None

    def run_to_completion(self) -> RunMetrics:
        """Exhaust the step source, record every snapshot, compute metrics."""
        if self._source is None:
            raise RuntimeError("Call start() first.")

        key = self._definition.key
        started = time.monotonic()
        while True:
            try:
                step = next(self._source)
                step.apply(self._state)
            except StopIteration:
                break
            except Exception as exc:
                self._fail(exc)
                break
            self.snapshots.append(self._state.snapshot(0, len(self.snapshots) + 1, key))
        wall_ms = (time.monotonic() - started) * 1000
        self._source = None

        self.metrics = self._compute_metrics(wall_ms)
        return self.metrics

    def get_metrics(self) -> Optional[RunMetrics]:
        return self.metrics

    # ------------------------------------------------------------------
    # Export (serialisable record)
    # ------------------------------------------------------------------
    def export(self) -> Dict[str, Any]:
        return {
            "algo_key":  self._definition.key if self._definition else "",
            "params":    self._params,
            "metrics":   asdict(self.metrics) if self.metrics else {},
            "snapshots": [s.to_dict() for s in self.snapshots],
        }

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------
    def _fail(self, exc: BaseException) -> None:
        key = self._definition.key
        self.error = DefinitionError(key, exc)
        logger.exception("recording %s failed at step %d", key, len(self.snapshots) + 1)
        self.snapshots.append(
            self._state.snapshot(0, len(self.snapshots) + 1, key, error=str(self.error))
        )

    def _compute_metrics(self, wall_ms: float) -> RunMetrics:
        info = self._definition
        last = self.snapshots[-1] if self.snapshots else None
        counters = dict(last.counters) if last else {}

        # approximate memory: sizeof the snapshot buffer
        mem = sys.getsizeof(self.snapshots)
        for s in self.snapshots:
            mem += sys.getsizeof(s) + sys.getsizeof(s.data)

        return RunMetrics(
            algo_key=info.key,
            algo_label=getattr(info, "label", info.key),
            total_steps=len(self.snapshots),
            comparisons=counters.get("comparisons", 0),
            swaps=counters.get("swaps", 0),
            writes=counters.get("writes", 0),
            wall_time_ms=round(wall_ms, 2),
            memory_bytes=mem,
            completed=self.error is None,
            error=str(self.error) if self.error else "",
            counters=counters,
        )


# ---------------------------------------------------------------------------
# Comparison helper
# ---------------------------------------------------------------------------
def compare(left: Recorder, right: Recorder) -> ComparisonResult:
    """Given two completed Recorders, produce a ComparisonResult."""
    l = left.metrics  or RunMetrics()
    r = right.metrics or RunMetrics()

    def winner(l_val, r_val, l_key, r_key):
        if l_val == r_val:
            return "tie"
        return l_key if l_val < r_val else r_key

    return ComparisonResult(
        left=l,
        right=r,
        winner_steps=winner(l.total_steps, r.total_steps, l.algo_label, r.algo_label),
        winner_comparisons=winner(l.comparisons, r.comparisons, l.algo_label, r.algo_label),
        winner_swaps=winner(l.swaps, r.swaps, l.algo_label, r.algo_label),
    )
