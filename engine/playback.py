"""
playback.py — Playback Controller
==================================
The ONLY object a UI talks to during a run.  It owns the run's token,
its WorkingState and the worker thread that drives the StepSequencer.

State machine:
    IDLE       →  start()   →  RUNNING
    RUNNING    →  pause()   →  PAUSED
    PAUSED     →  resume()  →  RUNNING
    RUNNING / PAUSED  →  cancel() / reset()  →  CANCELLED  →  IDLE
    RUNNING    →  (steps exhausted)          →  COMPLETED
    RUNNING    →  (definition raised)        →  IDLE   (last_outcome = FAILED)
    COMPLETED  →  reset()   →  IDLE
    COMPLETED  →  start()   →  RUNNING

start() while RUNNING / PAUSED cancels the previous run first; minting
the new token is what makes the old one stale, so clicking "Start"
repeatedly never stacks runs.

A definition is any object with:
    key                      – registry key, used for tagging snapshots
    parse(params)  -> inputs – validation; raises InvalidInputError
    make_state(inputs)       – fresh WorkingState for this run
    steps(inputs)  -> iter   – fresh, lazily produced Step source

Thread safety:
  Every public method takes the shared guard, which the worker only
  releases while it is suspended between steps.  Observers and state
  listeners run on the worker thread while the guard is held; they may
  call pause()/cancel() (the guard is re-entrant) but must not join().
"""

import logging
import threading
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from engine.config import PlaybackConfig
from engine.errors import DefinitionError, StaleTokenError
from engine.pacing import PacingController
from engine.sequencer import Outcome, StepSequencer
from engine.snapshot import Observer, Snapshot, SnapshotStore
from engine.token import Token, TokenSource

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# States
# ---------------------------------------------------------------------------
class PlaybackState(Enum):
    IDLE      = "idle"
    RUNNING   = "running"
    PAUSED    = "paused"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class RunOutcome(Enum):
    COMPLETED = "completed"
    FAILED    = "failed"
    CANCELLED = "cancelled"


StateListener = Callable[[PlaybackState, PlaybackState], None]

_ACTIVE = (PlaybackState.RUNNING, PlaybackState.PAUSED)


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------
class PlaybackController:
    """
    Attributes:
        config       : PlaybackConfig in effect.
        store        : SnapshotStore observers subscribe to.
        pacing       : PacingController (speed + pause gate).
        last_outcome : How the most recent run ended (None while running / after reset).
        last_error   : DefinitionError of the most recent failed run.
    """

    def __init__(self, config: Optional[PlaybackConfig] = None):
        self.config = config or PlaybackConfig()

        self._guard  = threading.Condition(threading.RLock())
        self._tokens = TokenSource()
        self.store   = SnapshotStore(self._tokens, history_size=self.config.history_size)
        self.pacing  = PacingController(
            self._tokens,
            condition=self._guard,
            speed_ms=self.config.default_speed_ms,
            min_ms=self.config.min_speed_ms,
            max_ms=self.config.max_speed_ms,
        )
        self._sequencer = StepSequencer(self._tokens, self.store, self.pacing, self._guard)

        self._state:     PlaybackState             = PlaybackState.IDLE
        self._token:     Optional[Token]           = None
        self._algo_key:  str                       = ""
        self._working:   Any                       = None
        self._thread:    Optional[threading.Thread] = None
        self._listeners: List[StateListener]       = []

        self.last_outcome: Optional[RunOutcome]      = None
        self.last_error:   Optional[DefinitionError] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self, definition: Any, params: Optional[Dict[str, Any]] = None) -> Token:
        """
        Validate `params`, cancel any active run, then launch a new one.
        InvalidInputError propagates before any token is minted.
        """
        inputs = definition.parse(params or {})

        with self.pacing.control():
            if self._state in _ACTIVE:
                logger.info("start() while %s: cancelling %s", self._state.value, self._token)
                self._cancel_locked()

            working = definition.make_state(inputs)
            source  = iter(definition.steps(inputs))

            self.pacing.resume()
            token = self._tokens.mint()
            self._token        = token
            self._algo_key     = definition.key
            self._working      = working
            self.last_outcome  = None
            self.last_error    = None
            self._transition(PlaybackState.RUNNING)

            thread = threading.Thread(
                target=self._drive,
                args=(token, definition.key, source, working),
                name=f"playback-{definition.key}-{token.generation}",
                daemon=True,
            )
            self._thread = thread
            thread.start()

        logger.info("started %s (%s) at %d ms/step", token, definition.key, self.pacing.delay_ms)
        return token

    def pause(self) -> bool:
        with self.pacing.control():
            if self._state is not PlaybackState.RUNNING:
                return False
            self.pacing.pause()
            self._transition(PlaybackState.PAUSED)
            return True

    def resume(self) -> bool:
        with self.pacing.control():
            if self._state is not PlaybackState.PAUSED:
                return False
            self.pacing.resume()
            self._transition(PlaybackState.RUNNING)
            return True

    def toggle_pause(self) -> bool:
        with self.pacing.control():
            if self._state is PlaybackState.PAUSED:
                return self.resume()
            return self.pause()

    def cancel(self) -> bool:
        """Stop the active run.  The last snapshot stays visible."""
        with self.pacing.control():
            if self._state not in _ACTIVE:
                return False
            self._cancel_locked()
        logger.info("cancelled run")
        return True

    def reset(self) -> bool:
        """
        Cancel (if needed), drop WorkingState and every snapshot, return
        to IDLE.  Returns False when there was nothing to reset.
        """
        with self.pacing.control():
            changed = False
            if self._state in _ACTIVE:
                self._cancel_locked()
                changed = True
            if self._working is not None:
                self._working = None
                changed = True
            if self.store.clear():
                changed = True
            if self.last_outcome is not None or self.last_error is not None:
                self.last_outcome = None
                self.last_error   = None
                changed = True
            if self._state is not PlaybackState.IDLE:
                self._transition(PlaybackState.IDLE)
                changed = True
        if changed:
            logger.info("reset")
        return changed

    def set_speed(self, ms: Any) -> int:
        """Delay for the next suspension, clamped; InvalidInputError if not numeric."""
        return self.pacing.set_speed(ms)

    def join(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the current worker thread to finish.  Returns True if it
        has finished (or there is none).  Never call from an observer.
        """
        with self.pacing.control():
            thread = self._thread
        if thread is None:
            return True
        if thread is threading.current_thread():
            raise RuntimeError("join() called from the playback worker")
        thread.join(self.config.join_timeout_s if timeout is None else timeout)
        return not thread.is_alive()

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------
    def subscribe(self, observer: Observer) -> Callable[[], None]:
        return self.store.subscribe(observer)

    def on_state(self, listener: StateListener) -> Callable[[], None]:
        with self.pacing.control():
            self._listeners.append(listener)

        def remove():
            with self.pacing.control():
                if listener in self._listeners:
                    self._listeners.remove(listener)
        return remove

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------
    @property
    def state(self) -> PlaybackState:
        with self.pacing.control():
            return self._state

    @property
    def current_snapshot(self) -> Optional[Snapshot]:
        return self.store.latest

    @property
    def token(self) -> Optional[Token]:
        """Token of the active run, None when nothing is running."""
        return self._tokens.current

    @property
    def working_state(self) -> Any:
        """Live WorkingState of the latest run; treat as read-only."""
        with self.pacing.control():
            return self._working

    @property
    def algo_key(self) -> str:
        with self.pacing.control():
            return self._algo_key

    @property
    def speed_ms(self) -> int:
        return self.pacing.delay_ms

    @property
    def is_active(self) -> bool:
        return self.state in _ACTIVE

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------
    def _drive(self, token: Token, algo_key: str, source: Any, working: Any) -> None:
        result = self._sequencer.run(source, working, token, algo_key)

        with self.pacing.control():
            if result.outcome is Outcome.ABANDONED or self._tokens.is_stale(token):
                logger.debug("%s abandoned after %d steps", token, result.steps)
                return

            if result.outcome is Outcome.COMPLETED:
                self._tokens.invalidate(token)
                self.last_outcome = RunOutcome.COMPLETED
                self._transition(PlaybackState.COMPLETED)
                logger.info("%s completed in %d steps", token, result.steps)
                return

            # FAILED: surface the error once, then go back to IDLE
            error = result.error
            try:
                self.store.publish(
                    token,
                    working.snapshot(token.generation, result.steps + 1, algo_key, error=str(error)),
                )
            except StaleTokenError as exc:
                logger.warning("%s: error snapshot discarded (%s)", token, exc)
            self._tokens.invalidate(token)
            self._working     = None
            self.last_outcome = RunOutcome.FAILED
            self.last_error   = error
            self._transition(PlaybackState.IDLE)
            logger.info("%s failed after %d steps: %s", token, result.steps, error)

    def _cancel_locked(self) -> None:
        self._tokens.invalidate(self._token)
        self.pacing.resume()
        self.pacing.interrupt()
        self._working     = None
        self.last_outcome = RunOutcome.CANCELLED
        self._transition(PlaybackState.CANCELLED)
        self._transition(PlaybackState.IDLE)

    def _transition(self, new: PlaybackState) -> None:
        old = self._state
        if old is new:
            return
        self._state = new
        logger.debug("playback %s -> %s", old.value, new.value)
        for listener in list(self._listeners):
            try:
                listener(old, new)
            except Exception:
                logger.exception("state listener %r failed on %s -> %s", listener, old.value, new.value)
