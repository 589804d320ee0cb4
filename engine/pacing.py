"""
pacing.py — Pacing Controller
==============================
Turns the speed setting into an inter-step delay and owns the pause
gate.  suspend() is the ONLY place a run waits:

    1. interruptible delay of `delay_ms` (read once, when the delay starts)
    2. if paused: park on the gate until resume() or the token goes stale,
       then go back to 1 so a resumed run gets a full delay before its
       next step

Both waits are Condition.wait_for predicates, never sleep-polling.
cancel/reset call interrupt() so parked runs wake up and notice their
token is stale.

Every other caller takes the condition through control(), which
registers it as a contender; suspend() waits until contenders have
had their turn, so a zero delay still hands the lock over once per
step.

The condition is normally shared with the PlaybackController so the
gap between "suspend returned" and "next step published" cannot be
interleaved with pause() / cancel().

Speed is a delay in milliseconds, clamped to [min_ms, max_ms]
(0–1000 by default).  The UI slider is inverted: delay = 1000 - slider.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from engine.errors import InvalidInputError
from engine.token import Token, TokenSource

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Speed presets (milliseconds per step)
# ---------------------------------------------------------------------------
SPEED_PRESETS = {
    "slow":   1000,   # teaching mode
    "medium": 500,
    "fast":   150,    # demo mode
    "turbo":  50,
}

MIN_DELAY_MS = 0
MAX_DELAY_MS = 1000


def clamp_delay(value: Any, lo: int = MIN_DELAY_MS, hi: int = MAX_DELAY_MS) -> int:
    """Coerce `value` to an int delay in [lo, hi]; non-numbers are rejected."""
    if isinstance(value, bool):
        raise InvalidInputError(f"speed must be a number, got {value!r}", field="speed")
    try:
        ms = float(value)
    except (TypeError, ValueError):
        raise InvalidInputError(f"speed must be a number, got {value!r}", field="speed")
    if ms != ms:  # NaN
        raise InvalidInputError("speed must be a number, got NaN", field="speed")
    return int(min(hi, max(lo, round(ms))))


def delay_from_slider(value: Any, hi: int = MAX_DELAY_MS) -> int:
    """Inverted UI mapping: slider 0 is slowest, slider `hi` is no delay."""
    return hi - clamp_delay(value, 0, hi)


# ---------------------------------------------------------------------------
# Pacing Controller
# ---------------------------------------------------------------------------
class PacingController:
    """
    Attributes:
        delay_ms      : Delay the NEXT suspension will use.
        last_delay_ms : Delay the latest (or in-progress) suspension used.
        paused        : Whether the gate is closed.
    """

    def __init__(
        self,
        tokens: TokenSource,
        condition: Optional[threading.Condition] = None,
        speed_ms: int = SPEED_PRESETS["medium"],
        min_ms: int = MIN_DELAY_MS,
        max_ms: int = MAX_DELAY_MS,
    ):
        self._tokens  = tokens
        self._cond    = condition or threading.Condition(threading.RLock())
        self._min_ms  = min_ms
        self._max_ms  = max_ms
        self._delay_ms = clamp_delay(speed_ms, min_ms, max_ms)
        self._paused  = False
        self.last_delay_ms: Optional[int] = None

        self._contenders      = 0
        self._contenders_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Lock hand-off
    # ------------------------------------------------------------------
    @contextmanager
    def control(self) -> Iterator[threading.Condition]:
        """
        Hold the shared condition from a control path (pause, cancel,
        speed, state reads).  A running sequencer yields to it at its
        next suspension even when the delay is zero.
        """
        with self._contenders_lock:
            self._contenders += 1
        try:
            self._cond.acquire()
        finally:
            with self._contenders_lock:
                self._contenders -= 1
        try:
            yield self._cond
        finally:
            self._cond.notify_all()
            self._cond.release()

    def _uncontended(self) -> bool:
        with self._contenders_lock:
            return self._contenders == 0

    # ------------------------------------------------------------------
    # Suspension point
    # ------------------------------------------------------------------
    def suspend(self, token: Token) -> bool:
        """
        Wait out the delay and the pause gate.  Returns False as soon as
        `token` is stale; True when the run may take its next step.
        """
        stale = lambda: self._tokens.is_stale(token)
        with self._cond:
            while True:
                if stale():
                    return False
                delay = self._delay_ms
                self.last_delay_ms = delay
                if delay > 0:
                    self._cond.wait_for(stale, timeout=delay / 1000.0)
                # let queued control calls in before the next step
                self._cond.wait_for(lambda: stale() or self._uncontended())
                if stale():
                    return False
                if not self._paused:
                    return True
                logger.debug("%s parked on pause gate", token)
                self._cond.wait_for(lambda: stale() or not self._paused)
                logger.debug("%s released from pause gate", token)

    def interrupt(self) -> None:
        """Wake every waiter so it re-checks its token."""
        with self.control():
            self._cond.notify_all()

    # ------------------------------------------------------------------
    # Gate
    # ------------------------------------------------------------------
    def pause(self) -> bool:
        with self.control():
            if self._paused:
                return False
            self._paused = True
        return True

    def resume(self) -> bool:
        with self.control():
            if not self._paused:
                return False
            self._paused = False
            self._cond.notify_all()
        return True

    @property
    def paused(self) -> bool:
        with self.control():
            return self._paused

    # ------------------------------------------------------------------
    # Speed
    # ------------------------------------------------------------------
    def set_speed(self, ms: Any) -> int:
        """Set the delay for the next suspension; returns the clamped value."""
        delay = clamp_delay(ms, self._min_ms, self._max_ms)
        with self.control():
            self._delay_ms = delay
        logger.debug("speed set to %d ms", delay)
        return delay

    def set_speed_preset(self, preset: str) -> int:
        if preset not in SPEED_PRESETS:
            raise InvalidInputError(
                f"unknown speed preset {preset!r}; expected one of {', '.join(SPEED_PRESETS)}",
                field="speed",
            )
        return self.set_speed(SPEED_PRESETS[preset])

    @property
    def delay_ms(self) -> int:
        with self.control():
            return self._delay_ms
