"""
sequencer.py — Step Sequencer
==============================
Drives one Step source for one token, in one flat loop:

    check token → pull next Step → apply → publish Snapshot → suspend

The whole loop runs while holding the shared guard; the lock is only
released inside PacingController.suspend().  That makes each
pull/apply/publish atomic with respect to pause, cancel and restart.

Outcomes:
    COMPLETED – the source is exhausted
    FAILED    – the source (or a Step's apply) raised; carries DefinitionError
    ABANDONED – the token went stale; nobody is notified, the owner
                already knows because it invalidated the token
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, Optional

from engine.errors import DefinitionError, StaleTokenError
from engine.pacing import PacingController
from engine.snapshot import SnapshotStore
from engine.token import Token, TokenSource

logger = logging.getLogger(__name__)


class Outcome(Enum):
    COMPLETED = "completed"
    FAILED    = "failed"
    ABANDONED = "abandoned"


@dataclass(frozen=True)
class SequencerResult:
    outcome: Outcome
    steps:   int                        = 0
    error:   Optional[DefinitionError]  = None


class StepSequencer:
    def __init__(
        self,
        tokens: TokenSource,
        store: SnapshotStore,
        pacing: PacingController,
        guard: threading.Condition,
    ):
        self._tokens = tokens
        self._store  = store
        self._pacing = pacing
        self._guard  = guard

    def run(self, source: Iterator[Any], state: Any, token: Token, algo_key: str = "") -> SequencerResult:
        """
        `source` yields objects with apply(state); `state` must offer
        snapshot(generation, sequence, algo_key).
        """
        sequence = 0
        try:
            with self._guard:
                while True:
                    if self._tokens.is_stale(token):
                        logger.debug("%s stale before step %d", token, sequence + 1)
                        return SequencerResult(Outcome.ABANDONED, sequence)

                    try:
                        step = next(source)
                        step.apply(state)
                    except StopIteration:
                        logger.debug("%s exhausted after %d steps", token, sequence)
                        return SequencerResult(Outcome.COMPLETED, sequence)
                    except Exception as exc:
                        logger.exception("%s: definition %r raised at step %d", token, algo_key, sequence + 1)
                        return SequencerResult(Outcome.FAILED, sequence, DefinitionError(algo_key, exc))

                    sequence += 1
                    try:
                        self._store.publish(token, state.snapshot(token.generation, sequence, algo_key))
                    except StaleTokenError as exc:
                        logger.warning("%s: discarding snapshot %d (%s)", token, sequence, exc)
                        return SequencerResult(Outcome.ABANDONED, sequence - 1)

                    if not self._pacing.suspend(token):
                        logger.debug("%s stale after step %d", token, sequence)
                        return SequencerResult(Outcome.ABANDONED, sequence)
        finally:
            close = getattr(source, "close", None)
            if close is not None:
                close()
