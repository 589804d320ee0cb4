"""
engine/
-------
Playback & recording layer.

    from engine import PlaybackController, PlaybackState, Recorder, compare
"""

from engine.errors    import (
    PlaybackError,
    InvalidInputError,
    UnknownAlgorithmError,
    StaleTokenError,
    DefinitionError,
)
from engine.config    import PlaybackConfig
from engine.token     import Token, TokenSource
from engine.snapshot  import Snapshot, SnapshotStore
from engine.pacing    import PacingController, SPEED_PRESETS, clamp_delay, delay_from_slider
from engine.sequencer import StepSequencer, SequencerResult, Outcome
from engine.playback  import PlaybackController, PlaybackState, RunOutcome
from engine.recorder  import Recorder, RunMetrics, ComparisonResult, compare

__all__ = [
    "PlaybackError",
    "InvalidInputError",
    "UnknownAlgorithmError",
    "StaleTokenError",
    "DefinitionError",
    "PlaybackConfig",
    "Token",
    "TokenSource",
    "Snapshot",
    "SnapshotStore",
    "PacingController",
    "SPEED_PRESETS",
    "clamp_delay",
    "delay_from_slider",
    "StepSequencer",
    "SequencerResult",
    "Outcome",
    "PlaybackController",
    "PlaybackState",
    "RunOutcome",
    "Recorder",
    "RunMetrics",
    "ComparisonResult",
    "compare",
]
