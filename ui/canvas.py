"""
canvas.py — SVG Snapshot Renderer
==================================
Pure rendering function: Snapshot → SVG string.

The renderer consumes:
  • snapshot   – the current Snapshot (data, marks, highlight, pointers)
  • config     – visual config (canvas size, colors, fonts, …)

And produces an SVG string ready to inject into the DOM.

Layouts are picked from the shape of the data:
  • graph    – context carries "nodes" + "edges"; nodes on a circle,
               labelled with data[node]
  • table    – data is a list of lists (DP tables); one cell per entry
  • bars     – data is a flat list of numbers
  • strings  – context carries "text" + "pattern" (KMP); character strips
  • mapping  – anything else keyed (memo dicts, lps tables); key/value rows

Design decisions:
  - NO mutation.  The snapshot is only read.
  - Marker-based coloring is a simple dict lookup: marker → hex color,
    the first marker in MARK_PRIORITY that contains a key wins.
"""

import math
from typing import Any, Dict, List, Optional

from engine.snapshot import Snapshot


# ---------------------------------------------------------------------------
# Visual Config — color palette, dimensions, fonts
# ---------------------------------------------------------------------------
class CanvasConfig:
    # canvas
    width:  int = 900
    height: int = 420
    bg:     str = "#0d1117"

    # marker → fill
    mark_colors: Dict[str, str] = {
        "sorted":     "#10b981",   # emerald
        "found":      "#a855f7",   # purple
        "match":      "#a855f7",
        "finished":   "#10b981",
        "visited":    "#0e7490",   # deep teal
        "frontier":   "#0ea5e9",   # cyan
        "prefix":     "#0ea5e9",
        "memoised":   "#0ea5e9",
        "checked":    "#30363d",
        "eliminated": "#21262d",   # faded
    }
    default_fill:   str = "#1c2128"
    highlight:      str = "#f59e0b"   # amber, keys the step looked at
    pointer_color:  str = "#ec4899"   # pink

    # text
    label_color:    str = "#e6edf3"
    muted_color:    str = "#7d8590"
    font:           str = "'DM Sans', sans-serif"
    mono:           str = "'JetBrains Mono', monospace"

    # graph
    node_radius:    int = 22
    edge_color:     str = "#30363d"
    edge_width:     int = 2

    # cells / bars
    bar_gap:        int = 6
    cell_max:       int = 44


CONFIG = CanvasConfig()

MARK_PRIORITY = (
    "found", "match", "sorted", "finished", "frontier", "prefix",
    "memoised", "visited", "checked", "eliminated",
)

INDEX_POINTERS = ("i", "j", "left", "right", "mid", "min", "pivot", "current")


# ---------------------------------------------------------------------------
# Main Render Function
# ---------------------------------------------------------------------------
def render_snapshot(snapshot: Optional[Snapshot], config: CanvasConfig = CONFIG) -> str:
    """
    Returns an SVG string.

    Args:
        snapshot : Snapshot to draw, or None for an empty canvas.
        config   : Visual config.
    """
    parts = [
        f'<svg width="{config.width}" height="{config.height}" '
        f'viewBox="0 0 {config.width} {config.height}" '
        f'xmlns="http://www.w3.org/2000/svg" style="background: {config.bg};">',
        f'<rect width="{config.width}" height="{config.height}" fill="{config.bg}"/>',
    ]

    if snapshot is None:
        parts.append(_caption("Pick an algorithm and press Start.", config))
    else:
        data, context = snapshot.data, snapshot.context
        if "nodes" in context and "edges" in context:
            parts.append(_render_graph(snapshot, config))
        elif "text" in context and "pattern" in context:
            parts.append(_render_strings(snapshot, config))
        elif isinstance(data, list) and data and all(isinstance(r, list) for r in data):
            parts.append(_render_table(snapshot, config))
        elif isinstance(data, list):
            parts.append(_render_bars(snapshot, config))
        else:
            parts.append(_render_mapping(snapshot, config))
        if snapshot.error:
            parts.append(_caption(f"⚠ {_esc(snapshot.error)}", config, color="#f43f5e"))

    parts.append("</svg>")
    return "\n".join(parts)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _esc(value: Any) -> str:
    return str(value).replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _fmt(value: Any) -> str:
    if value is None:
        return "·"
    if isinstance(value, float):
        if math.isinf(value):
            return "∞"
        return f"{value:g}"
    return _esc(value)


def _fill_for(key: Any, snapshot: Snapshot, config: CanvasConfig) -> str:
    for name in MARK_PRIORITY:
        if key in snapshot.marks.get(name, ()):
            return config.mark_colors[name]
    return config.default_fill


def _stroke_for(key: Any, snapshot: Snapshot, config: CanvasConfig) -> str:
    return config.highlight if key in snapshot.highlight else "#30363d"


def _caption(text: str, config: CanvasConfig, color: Optional[str] = None) -> str:
    return (
        f'<text x="{config.width // 2}" y="{config.height - 16}" text-anchor="middle" '
        f'font-size="13" font-family="{config.font}" fill="{color or config.muted_color}">{text}</text>'
    )


def _pointer_labels(snapshot: Snapshot) -> Dict[Any, List[str]]:
    """Index pointers keyed by the slot they point at."""
    labels: Dict[Any, List[str]] = {}
    for name, value in snapshot.pointers.items():
        if name in INDEX_POINTERS and isinstance(value, int) and not isinstance(value, bool):
            labels.setdefault(value, []).append(name)
    return labels


# ---------------------------------------------------------------------------
# Bars (flat arrays)
# ---------------------------------------------------------------------------
def _render_bars(snapshot: Snapshot, config: CanvasConfig) -> str:
    values = snapshot.data
    n = len(values)
    if n == 0:
        return _caption("(empty)", config)

    numeric = [v for v in values if isinstance(v, (int, float)) and not isinstance(v, bool)]
    top = max((abs(v) for v in numeric), default=1) or 1
    usable_h = config.height - 110
    width = (config.width - 40) / n
    bar_w = max(4, width - config.bar_gap)
    baseline = config.height - 60
    pointers = _pointer_labels(snapshot)

    parts = ['<g class="bars">']
    for i, v in enumerate(values):
        h = max(4, usable_h * abs(v) / top) if isinstance(v, (int, float)) else 4
        x = 20 + i * width
        y = baseline - h
        parts.append(
            f'  <rect x="{x:.1f}" y="{y:.1f}" width="{bar_w:.1f}" height="{h:.1f}" rx="3" '
            f'fill="{_fill_for(i, snapshot, config)}" stroke="{_stroke_for(i, snapshot, config)}" stroke-width="2"/>'
        )
        parts.append(
            f'  <text x="{x + bar_w / 2:.1f}" y="{y - 6:.1f}" text-anchor="middle" font-size="12" '
            f'font-family="{config.mono}" fill="{config.label_color}">{_fmt(v)}</text>'
        )
        if i in pointers:
            parts.append(
                f'  <text x="{x + bar_w / 2:.1f}" y="{baseline + 20}" text-anchor="middle" font-size="11" '
                f'font-family="{config.mono}" fill="{config.pointer_color}">{_esc(",".join(pointers[i]))}</text>'
            )

    # merge / quick sort active range
    rng = snapshot.pointers.get("range")
    if isinstance(rng, list) and len(rng) == 2:
        lo, hi = rng
        parts.append(
            f'  <line x1="{20 + lo * width:.1f}" y1="{baseline + 32}" x2="{20 + hi * width + bar_w:.1f}" '
            f'y2="{baseline + 32}" stroke="{config.pointer_color}" stroke-width="3"/>'
        )
    parts.append('</g>')
    return "\n".join(parts)


# ---------------------------------------------------------------------------
# Table (DP grids)
# ---------------------------------------------------------------------------
def _render_table(snapshot: Snapshot, config: CanvasConfig) -> str:
    rows = snapshot.data
    n_rows = len(rows)
    n_cols = max(len(r) for r in rows)
    cell = min(config.cell_max, (config.width - 80) // max(1, n_cols), (config.height - 80) // max(1, n_rows))
    source = snapshot.context.get("source", "")
    target = snapshot.context.get("target", "")

    parts = ['<g class="table" transform="translate(50,40)">']
    # column / row headers from the two strings, offset by the empty prefix
    for j, ch in enumerate(" " + str(target)):
        parts.append(
            f'  <text x="{j * cell + cell / 2}" y="-8" text-anchor="middle" font-size="12" '
            f'font-family="{config.mono}" fill="{config.muted_color}">{_esc(ch)}</text>'
        )
    for i, ch in enumerate(" " + str(source)):
        parts.append(
            f'  <text x="-14" y="{i * cell + cell / 2 + 4}" text-anchor="middle" font-size="12" '
            f'font-family="{config.mono}" fill="{config.muted_color}">{_esc(ch)}</text>'
        )
    for i, row in enumerate(rows):
        for j, v in enumerate(row):
            key = (i, j)
            parts.append(
                f'  <rect x="{j * cell}" y="{i * cell}" width="{cell}" height="{cell}" '
                f'fill="{_fill_for(key, snapshot, config)}" stroke="{_stroke_for(key, snapshot, config)}" stroke-width="1"/>'
            )
            parts.append(
                f'  <text x="{j * cell + cell / 2}" y="{i * cell + cell / 2 + 4}" text-anchor="middle" '
                f'font-size="11" font-family="{config.mono}" fill="{config.label_color}">{_fmt(v)}</text>'
            )
    parts.append('</g>')
    return "\n".join(parts)


# ---------------------------------------------------------------------------
# Mapping (memo dicts, lps tables …)
# ---------------------------------------------------------------------------
def _render_mapping(snapshot: Snapshot, config: CanvasConfig) -> str:
    data = snapshot.data if isinstance(snapshot.data, dict) else {"value": snapshot.data}
    parts = ['<g class="mapping" transform="translate(40,40)">']
    for row, (key, value) in enumerate(list(data.items())[:18]):
        y = row * 20
        parts.append(
            f'  <rect x="0" y="{y}" width="360" height="18" rx="3" '
            f'fill="{_fill_for(key, snapshot, config)}" stroke="{_stroke_for(key, snapshot, config)}"/>'
        )
        shown = " ".join(_fmt(v) for v in value) if isinstance(value, list) else _fmt(value)
        parts.append(
            f'  <text x="8" y="{y + 13}" font-size="12" font-family="{config.mono}" '
            f'fill="{config.label_color}">{_esc(key)}: {shown}</text>'
        )
    if len(data) > 18:
        parts.append(f'  <text x="8" y="{18 * 20 + 13}" font-size="11" fill="#484f58">… +{len(data) - 18} more</text>')
    parts.append('</g>')
    parts.append(_render_pointer_panel(snapshot, config, x=config.width - 300, y=40))
    return "\n".join(parts)


# ---------------------------------------------------------------------------
# Strings (text + pattern strips)
# ---------------------------------------------------------------------------
def _render_strings(snapshot: Snapshot, config: CanvasConfig) -> str:
    text, pattern = str(snapshot.context["text"]), str(snapshot.context["pattern"])
    cell = min(config.cell_max, (config.width - 40) // max(1, len(text)))
    i = snapshot.pointers.get("i")
    j = snapshot.pointers.get("j")
    offset = (i - j) if isinstance(i, int) and isinstance(j, int) else 0

    parts = ['<g class="strings" transform="translate(20,50)">']
    for k, ch in enumerate(text):
        key = ("text", k)
        fill = config.mark_colors["match"] if any(s <= k < s + len(pattern) for s in snapshot.marks.get("match", ())) else config.default_fill
        parts.append(
            f'  <rect x="{k * cell}" y="0" width="{cell - 2}" height="{cell - 2}" '
            f'fill="{fill}" stroke="{_stroke_for(key, snapshot, config)}" stroke-width="2"/>'
        )
        parts.append(
            f'  <text x="{k * cell + cell / 2 - 1}" y="{cell / 2 + 4}" text-anchor="middle" font-size="13" '
            f'font-family="{config.mono}" fill="{config.label_color}">{_esc(ch)}</text>'
        )
    for k, ch in enumerate(pattern):
        key = ("pattern", k)
        x = (offset + k) * cell
        parts.append(
            f'  <rect x="{x}" y="{cell + 12}" width="{cell - 2}" height="{cell - 2}" '
            f'fill="{config.default_fill}" stroke="{_stroke_for(key, snapshot, config)}" stroke-width="2"/>'
        )
        parts.append(
            f'  <text x="{x + cell / 2 - 1}" y="{cell + 12 + cell / 2 + 4}" text-anchor="middle" font-size="13" '
            f'font-family="{config.mono}" fill="{config.label_color}">{_esc(ch)}</text>'
        )
    lps = snapshot.data.get("lps", []) if isinstance(snapshot.data, dict) else []
    parts.append(
        f'  <text x="0" y="{2 * cell + 48}" font-size="12" font-family="{config.mono}" '
        f'fill="{config.muted_color}">lps: {" ".join(_fmt(v) for v in lps)}</text>'
    )
    parts.append('</g>')
    return "\n".join(parts)


# ---------------------------------------------------------------------------
# Graph (circle layout)
# ---------------------------------------------------------------------------
def _render_graph(snapshot: Snapshot, config: CanvasConfig) -> str:
    nodes = snapshot.context["nodes"]
    cx, cy = 300, config.height / 2 - 10
    radius = min(cx, cy) - config.node_radius - 20
    pos = {}
    for k, node in enumerate(nodes):
        angle = 2 * math.pi * k / max(1, len(nodes)) - math.pi / 2
        pos[node] = (cx + radius * math.cos(angle), cy + radius * math.sin(angle))

    current = snapshot.pointers.get("current")
    data = snapshot.data if isinstance(snapshot.data, dict) else {}
    parts = ['<g class="graph">']

    # -- edges (draw first so nodes sit on top) --
    directed = snapshot.context.get("directed", False)
    for u, v, w in snapshot.context["edges"]:
        if u not in pos or v not in pos:
            continue
        (x1, y1), (x2, y2) = pos[u], pos[v]
        parts.append(
            f'  <line x1="{x1:.1f}" y1="{y1:.1f}" x2="{x2:.1f}" y2="{y2:.1f}" '
            f'stroke="{config.edge_color}" stroke-width="{config.edge_width}"/>'
        )
        if directed:
            parts.append(_arrow_head(x1, y1, x2, y2, config))
        if w != 1:
            # a u→v / v→u pair puts each label nearer its own tail
            t = 1 / 3 if directed else 1 / 2
            parts.append(
                f'  <text x="{x1 + (x2 - x1) * t:.1f}" y="{y1 + (y2 - y1) * t - 4:.1f}" text-anchor="middle" '
                f'font-size="11" font-family="{config.font}" fill="{config.muted_color}">{_fmt(w)}</text>'
            )

    # -- nodes --
    r = config.node_radius
    for node in nodes:
        x, y = pos[node]
        stroke = config.highlight if node == current or node in snapshot.highlight else "#30363d"
        parts.append(
            f'  <circle cx="{x:.1f}" cy="{y:.1f}" r="{r}" fill="{_fill_for(node, snapshot, config)}" '
            f'stroke="{stroke}" stroke-width="3"/>'
        )
        parts.append(
            f'  <text x="{x:.1f}" y="{y + 5:.1f}" text-anchor="middle" font-size="13" '
            f'font-family="{config.font}" fill="{config.label_color}" font-weight="600">{_esc(node)}</text>'
        )
        parts.append(
            f'  <text x="{x:.1f}" y="{y + r + 14:.1f}" text-anchor="middle" font-size="11" '
            f'font-family="{config.mono}" fill="{config.muted_color}">{_fmt(data.get(node))}</text>'
        )
    parts.append('</g>')
    parts.append(_render_pointer_panel(snapshot, config, x=config.width - 280, y=20))
    return "\n".join(parts)


def _arrow_head(x1: float, y1: float, x2: float, y2: float, config: CanvasConfig) -> str:
    """Triangle touching the target node's rim, pointing along u→v."""
    length = math.hypot(x2 - x1, y2 - y1) or 1.0
    ux, uy = (x2 - x1) / length, (y2 - y1) / length
    tip_x, tip_y = x2 - ux * config.node_radius, y2 - uy * config.node_radius
    base_x, base_y = tip_x - ux * 10, tip_y - uy * 10
    left  = (base_x - uy * 5, base_y + ux * 5)
    right = (base_x + uy * 5, base_y - ux * 5)
    return (
        f'  <polygon points="{tip_x:.1f},{tip_y:.1f} {left[0]:.1f},{left[1]:.1f} '
        f'{right[0]:.1f},{right[1]:.1f}" fill="{config.edge_color}"/>'
    )


# ---------------------------------------------------------------------------
# Pointer panel (queue / stack / calls …)
# ---------------------------------------------------------------------------
def _render_pointer_panel(snapshot: Snapshot, config: CanvasConfig, x: float, y: float) -> str:
    lists = [(k, v) for k, v in snapshot.pointers.items() if isinstance(v, (list, dict))]
    if not lists:
        return ""
    parts = [
        f'<g class="pointer-panel" transform="translate({x},{y})">',
        f'  <rect width="260" height="{24 + 18 * len(lists)}" fill="#161b22" stroke="#30363d" rx="8" opacity="0.95"/>',
    ]
    for row, (name, value) in enumerate(lists):
        if isinstance(value, dict):
            shown = ", ".join(f"{_esc(k)}→{_fmt(v)}" for k, v in value.items())
        else:
            shown = ", ".join(str(tuple(v)) if isinstance(v, list) else _fmt(v) for v in value)
        if len(shown) > 40:
            shown = shown[:39] + "…"
        parts.append(
            f'  <text x="12" y="{20 + row * 18}" font-size="12" font-family="{config.mono}" '
            f'fill="{config.muted_color}">{_esc(name)}: [{shown}]</text>'
        )
    parts.append('</g>')
    return "\n".join(parts)
