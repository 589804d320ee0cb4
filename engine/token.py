"""
token.py — Cancellation Tokens
===============================
Every run gets a Token minted by a TokenSource.  At most one token is
current at a time; minting a new one or invalidating the current one
makes every older token stale forever.  Generations only ever go up,
so a stale token can never become current again.

    tokens = TokenSource()
    t1 = tokens.mint()
    t2 = tokens.mint()
    tokens.is_stale(t1)   # True
    tokens.invalidate()
    tokens.is_stale(t2)   # True
"""

import logging
import threading
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Token:
    generation: int

    def __str__(self) -> str:
        return f"run#{self.generation}"


class TokenSource:
    """Thread-safe generation counter."""

    def __init__(self):
        self._lock = threading.Lock()
        self._generation = 0
        self._live: Optional[int] = None

    def mint(self) -> Token:
        with self._lock:
            self._generation += 1
            self._live = self._generation
            token = Token(self._generation)
        logger.debug("minted %s", token)
        return token

    def is_stale(self, token: Optional[Token]) -> bool:
        if token is None:
            return True
        with self._lock:
            return token.generation != self._live

    def invalidate(self, token: Optional[Token] = None) -> bool:
        """
        Make `token` stale (or whatever is current when token is None).
        Returns True if something was actually invalidated.
        """
        with self._lock:
            if self._live is None:
                return False
            if token is not None and token.generation != self._live:
                return False
            gen, self._live = self._live, None
        logger.debug("invalidated run#%d", gen)
        return True

    @property
    def current(self) -> Optional[Token]:
        with self._lock:
            return Token(self._live) if self._live is not None else None

    @property
    def generation(self) -> int:
        """Highest generation ever minted."""
        with self._lock:
            return self._generation
