"""
controls.py — UI Control Panels
=================================
Every UI panel is a pure function that takes state and returns HTML.

Panels:
  • playback_controls   – start/pause/resume/cancel/reset + speed slider
  • algorithm_selector  – dropdown grouped by tag
  • input_editor        – JSON params, random sample button, complexity card
  • analytics_panel     – counters of the live run, or RunMetrics of a recording
  • comparison_selector – pick two algorithms to record on the current input
  • comparison_panel    – side-by-side metrics of two recordings
  • pseudocode_viewer   – with live line highlighting
  • explanation_panel   – "why this step happened"

Design:
  - All panels are stateless render functions.
  - State is passed in as kwargs.
  - Output is raw HTML strings (no templating engine).
  - The main app stitches them together.
"""

import json
from typing import Any, Dict, List, Optional

from algorithms import AlgoInfo
from engine import ComparisonResult, PlaybackState, RunMetrics, SPEED_PRESETS


def _esc(value: Any) -> str:
    return (
        str(value)
        .replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


# ---------------------------------------------------------------------------
# Playback Controls
# ---------------------------------------------------------------------------
def playback_controls(
    state: PlaybackState = PlaybackState.IDLE,
    speed_ms: int = SPEED_PRESETS["medium"],
    sequence: int = 0,
    max_ms: int = 1000,
) -> str:
    running = state is PlaybackState.RUNNING
    paused  = state is PlaybackState.PAUSED
    active  = running or paused

    pause_icon  = "▶" if paused else "⏸"
    pause_label = "Resume" if paused else "Pause"
    disabled    = lambda on: "" if on else "disabled"

    # slider is inverted: right = faster
    slider = max_ms - speed_ms
    presets = "".join(
        f'<option value="{ms}" {"selected" if ms == speed_ms else ""}>{name.capitalize()} ({ms} ms)</option>'
        for name, ms in SPEED_PRESETS.items()
    )

    return f"""
    <div class="panel playback-controls">
      <h3>⏯ Playback</h3>
      <div class="button-row">
        <button id="btn-start" title="Start">⏵ Start</button>
        <button id="btn-pause" title="{pause_label}" {disabled(active)}>{pause_icon}</button>
        <button id="btn-cancel" title="Cancel" {disabled(active)}>⏹</button>
        <button id="btn-reset" title="Reset">⟲</button>
      </div>
      <div class="step-info">
        <span class="state-badge state-{state.value}" id="state-badge">{state.value.upper()}</span>
        Step <span id="current-step">{sequence}</span>
      </div>
      <div class="speed-control">
        <label>Speed: <input type="range" id="speed-slider" min="0" max="{max_ms}" value="{slider}"></label>
        <span id="speed-value">{speed_ms} ms</span>
        <select id="speed-preset">{presets}</select>
      </div>
    </div>
    """


# ---------------------------------------------------------------------------
# Algorithm Selector
# ---------------------------------------------------------------------------
def algorithm_selector(algorithms: List[AlgoInfo], selected_key: str = "bubble_sort") -> str:
    groups: Dict[str, List[AlgoInfo]] = {}
    for algo in algorithms:
        groups.setdefault(algo.tags[0] if algo.tags else "other", []).append(algo)

    optgroups = []
    for tag, members in groups.items():
        options = []
        for algo in members:
            sel = 'selected' if algo.key == selected_key else ''
            options.append(
                f'<option value="{algo.key}" {sel}>{_esc(algo.label)} — {_esc(algo.complexity_average)}</option>'
            )
        optgroups.append(f'<optgroup label="{_esc(tag)}">{"".join(options)}</optgroup>')

    return f"""
    <div class="panel algorithm-selector">
      <h3>🧠 Algorithm</h3>
      <select id="algo-selector">
        {''.join(optgroups)}
      </select>
    </div>
    """


# ---------------------------------------------------------------------------
# Input Editor
# ---------------------------------------------------------------------------
def input_editor(algo: Optional[AlgoInfo] = None, params: Optional[Dict[str, Any]] = None) -> str:
    if algo is None:
        return """
        <div class="panel input-editor">
          <h3>✏️ Input</h3>
          <p class="placeholder">Select an algorithm.</p>
        </div>
        """
    body = json.dumps(params if params is not None else algo.sample, indent=2)
    return f"""
    <div class="panel input-editor">
      <h3>✏️ Input</h3>
      <p class="hint">{_esc(algo.description)}</p>
      <textarea id="input-params" rows="8" spellcheck="false">{_esc(body)}</textarea>
      <div class="button-row">
        <input type="number" id="input-seed" placeholder="seed">
        <button id="btn-random" title="Random input">🎲 Random</button>
      </div>
      <div id="input-error" class="error"></div>
      {complexity_card(algo)}
    </div>
    """


def complexity_card(algo: AlgoInfo) -> str:
    rows = "".join(
        f"<tr><td>{label}:</td><td><strong>{_esc(value or '—')}</strong></td></tr>"
        for label, value in (
            ("Best Case",    algo.complexity_best),
            ("Average Case", algo.complexity_average),
            ("Worst Case",   algo.complexity_worst),
            ("Space",        algo.complexity_space),
        )
    )
    return f'<table class="complexity-card">{rows}</table>'


# ---------------------------------------------------------------------------
# Analytics Panel
# ---------------------------------------------------------------------------
def analytics_panel(
    metrics: Optional[RunMetrics] = None,
    counters: Optional[Dict[str, int]] = None,
) -> str:
    if metrics is None and not counters:
        return """
        <div class="panel analytics-panel">
          <h3>📊 Analytics</h3>
          <p class="placeholder">Start an algorithm to see metrics.</p>
        </div>
        """

    if metrics is None:
        rows = "".join(
            f"<tr><td>{_esc(name.replace('_', ' ').capitalize())}:</td><td><strong>{value}</strong></td></tr>"
            for name, value in sorted(counters.items())
        )
        return f"""
        <div class="panel analytics-panel">
          <h3>📊 Analytics — live</h3>
          <table>{rows}</table>
        </div>
        """

    status = "✅ Completed" if metrics.completed else f"❌ {_esc(metrics.error)}"
    extra = "".join(
        f"<tr><td>{_esc(name.replace('_', ' ').capitalize())}:</td><td><strong>{value}</strong></td></tr>"
        for name, value in sorted(metrics.counters.items())
        if name not in ("comparisons", "swaps", "writes")
    )
    return f"""
    <div class="panel analytics-panel">
      <h3>📊 Analytics — {_esc(metrics.algo_label)}</h3>
      <table>
        <tr><td>Total Steps:</td><td><strong>{metrics.total_steps}</strong></td></tr>
        <tr><td>Comparisons:</td><td><strong>{metrics.comparisons}</strong></td></tr>
        <tr><td>Swaps:</td><td><strong>{metrics.swaps}</strong></td></tr>
        <tr><td>Writes:</td><td><strong>{metrics.writes}</strong></td></tr>
        {extra}
        <tr><td>Wall Time:</td><td><strong>{metrics.wall_time_ms:.2f} ms</strong></td></tr>
        <tr><td>Memory:</td><td><strong>{metrics.memory_bytes // 1024} KB</strong></td></tr>
        <tr><td>Status:</td><td><strong>{status}</strong></td></tr>
      </table>
    </div>
    """


# ---------------------------------------------------------------------------
# Comparison Selector
# ---------------------------------------------------------------------------
def comparison_selector(
    algorithms: List[AlgoInfo],
    left_key: str = "bubble_sort",
    right_key: str = "merge_sort",
) -> str:
    def options(selected):
        return "".join(
            f'<option value="{algo.key}" {"selected" if algo.key == selected else ""}>{_esc(algo.label)}</option>'
            for algo in algorithms
        )

    return f"""
    <div class="panel comparison-selector">
      <h3>⚖️ Compare</h3>
      <label>Left <select id="compare-left">{options(left_key)}</select></label>
      <label>Right <select id="compare-right">{options(right_key)}</select></label>
      <p class="hint">Both record the current input, without pacing.</p>
      <button id="btn-compare" title="Compare">Compare</button>
    </div>
    """


# ---------------------------------------------------------------------------
# Comparison Panel (side-by-side)
# ---------------------------------------------------------------------------
def comparison_panel(comp: Optional[ComparisonResult] = None) -> str:
    if not comp:
        return """
        <div class="panel comparison-panel">
          <h3>⚖️ Comparison Mode</h3>
          <p class="placeholder">Record two algorithms on the same input to compare.</p>
        </div>
        """

    left = comp.left
    right = comp.right

    def winner_badge(winner_label):
        if winner_label == "tie":
            return "🟰 Tie"
        return f"👑 {_esc(winner_label)}"

    return f"""
    <div class="panel comparison-panel">
      <h3>⚖️ Comparison: {_esc(left.algo_label)} vs {_esc(right.algo_label)}</h3>
      <table class="comparison-table">
        <thead>
          <tr>
            <th>Metric</th>
            <th>{_esc(left.algo_label)}</th>
            <th>{_esc(right.algo_label)}</th>
            <th>Winner</th>
          </tr>
        </thead>
        <tbody>
          <tr>
            <td>Steps</td>
            <td>{left.total_steps}</td>
            <td>{right.total_steps}</td>
            <td>{winner_badge(comp.winner_steps)}</td>
          </tr>
          <tr>
            <td>Comparisons</td>
            <td>{left.comparisons}</td>
            <td>{right.comparisons}</td>
            <td>{winner_badge(comp.winner_comparisons)}</td>
          </tr>
          <tr>
            <td>Swaps</td>
            <td>{left.swaps}</td>
            <td>{right.swaps}</td>
            <td>{winner_badge(comp.winner_swaps)}</td>
          </tr>
          <tr>
            <td>Wall Time</td>
            <td>{left.wall_time_ms:.2f} ms</td>
            <td>{right.wall_time_ms:.2f} ms</td>
            <td>—</td>
          </tr>
        </tbody>
      </table>
    </div>
    """


# ---------------------------------------------------------------------------
# Pseudocode Viewer
# ---------------------------------------------------------------------------
def pseudocode_viewer(pseudocode_lines: List[str], current_line: int = -1) -> str:
    if not pseudocode_lines:
        return """
        <div class="code-block">
          <div style="color: #7d8590; padding: 20px; text-align: center;">
            Select an algorithm to view pseudocode
          </div>
        </div>
        """

    lines_html = []
    for i, line in enumerate(pseudocode_lines):
        highlight = 'highlight' if i == current_line else ''
        lines_html.append(f'<div class="code-line {highlight}" data-line="{i}">{_esc(line)}</div>')

    return f"""
    <div class="code-block">
      {''.join(lines_html)}
    </div>
    """


# ---------------------------------------------------------------------------
# Explanation Panel
# ---------------------------------------------------------------------------
def explanation_panel(explanation: str = "", phase: str = "") -> str:
    if not explanation:
        return """<div class="explanation-text">▶ Press <strong>Start</strong> to see step-by-step explanations of what's happening at each stage.</div>"""

    badge = f'<span class="phase-badge">{_esc(phase)}</span> ' if phase else ""
    return f"""<div class="explanation-text">{badge}{_esc(explanation)}</div>"""
