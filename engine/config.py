"""
config.py — Playback Configuration
===================================
One dataclass, read by the controller and the Flask host.

    cfg = PlaybackConfig.from_env()
    controller = PlaybackController(config=cfg)

Flask apps can pass their own mapping (app.config) through from_mapping();
only PLAYBACK_* keys are looked at.
"""

import os
from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional

from engine.errors import InvalidInputError


@dataclass(frozen=True)
class PlaybackConfig:
    """
    Attributes:
        default_speed_ms : Inter-step delay a fresh controller starts with.
        min_speed_ms     : Lower clamp for set_speed().
        max_speed_ms     : Upper clamp for set_speed(); also the slider range.
        history_size     : How many snapshots the store keeps for pollers.
        join_timeout_s   : Default wait used by join() / shutdown.
    """

    default_speed_ms: int   = 500
    min_speed_ms:     int   = 0
    max_speed_ms:     int   = 1000
    history_size:     int   = 256
    join_timeout_s:   float = 2.0

    def __post_init__(self):
        if self.min_speed_ms < 0 or self.max_speed_ms < self.min_speed_ms:
            raise InvalidInputError(
                f"speed bounds must satisfy 0 <= min <= max, got "
                f"{self.min_speed_ms}..{self.max_speed_ms}"
            )
        if self.history_size < 1:
            raise InvalidInputError("history_size must be at least 1", field="history_size")

    # ------------------------------------------------------------------
    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any], base: Optional["PlaybackConfig"] = None) -> "PlaybackConfig":
        """Overlay PLAYBACK_* keys from `mapping` onto `base` (or the defaults)."""
        cfg = base or cls()
        overrides = {}
        for key, attr, cast in _KEYS:
            if key in mapping and mapping[key] not in (None, ""):
                try:
                    overrides[attr] = cast(mapping[key])
                except (TypeError, ValueError):
                    raise InvalidInputError(f"{key} must be a number, got {mapping[key]!r}", field=key)
        return replace(cfg, **overrides) if overrides else cfg

    @classmethod
    def from_env(cls) -> "PlaybackConfig":
        return cls.from_mapping(os.environ)


_KEYS = (
    ("PLAYBACK_DEFAULT_SPEED_MS", "default_speed_ms", int),
    ("PLAYBACK_HISTORY_SIZE",     "history_size",     int),
    ("PLAYBACK_JOIN_TIMEOUT_S",   "join_timeout_s",   float),
)
