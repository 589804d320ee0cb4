"""
errors.py — Playback Error Taxonomy
====================================
    PlaybackError
      ├── InvalidInputError     – rejected before a token is minted
      │     └── UnknownAlgorithmError
      ├── StaleTokenError       – a write from a run that is no longer current
      └── DefinitionError       – the algorithm definition itself raised

InvalidInputError is also a ValueError so callers that only know about
the builtin hierarchy can still catch it.
"""

from typing import Optional


class PlaybackError(Exception):
    """Base class for everything the playback engine raises."""


class InvalidInputError(PlaybackError, ValueError):
    """Malformed or out-of-range input to start() / set_speed()."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class UnknownAlgorithmError(InvalidInputError):
    def __init__(self, key: str):
        super().__init__(f"Unknown algorithm: {key}", field="algo_key")
        self.key = key


class StaleTokenError(PlaybackError):
    """A snapshot publish attempted with a token that is no longer current."""

    def __init__(self, generation: int, message: str = ""):
        super().__init__(message or f"token generation {generation} is stale")
        self.generation = generation


class DefinitionError(PlaybackError):
    """Wraps an exception raised while pulling or applying a Step."""

    def __init__(self, algo_key: str, cause: BaseException):
        super().__init__(f"{algo_key or 'definition'} failed: {cause!r}")
        self.algo_key = algo_key
        self.cause = cause
