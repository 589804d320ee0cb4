"""
ui/
---
Presentation layer.

    from ui import render_snapshot
    from ui import playback_controls, algorithm_selector, …
"""

from ui.canvas import render_snapshot, CanvasConfig

from ui.controls import (
    playback_controls,
    algorithm_selector,
    input_editor,
    complexity_card,
    analytics_panel,
    comparison_selector,
    comparison_panel,
    pseudocode_viewer,
    explanation_panel,
)

__all__ = [
    "render_snapshot",
    "CanvasConfig",
    "playback_controls",
    "algorithm_selector",
    "input_editor",
    "complexity_card",
    "analytics_panel",
    "comparison_selector",
    "comparison_panel",
    "pseudocode_viewer",
    "explanation_panel",
]
