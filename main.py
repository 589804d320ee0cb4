"""
main.py — Algorithm Playback Flask App
========================================
The web server that hosts the playback engine.

Routes:
  GET  /                       – main UI
  GET  /api/algorithms         – registry listing (labels, tags, complexity, sample input, pseudocode)
  GET  /api/sample             – seeded random params: ?algo_key=…&seed=n
  POST /api/run                – start (or restart) a run: {"algo_key": …, "params": {…}}
  POST /api/pause              – pause the active run
  POST /api/resume             – resume a paused run
  POST /api/cancel             – cancel the active run, keep the last frame
  POST /api/reset              – cancel and clear everything
  POST /api/config/speed       – {"speed_ms": n} | {"slider": n} | {"preset": "fast"}
  GET  /api/state              – controller state + latest snapshot + rendered panels
  GET  /api/snapshots?since=N  – snapshots newer than sequence N (rolling window)
  POST /api/compare            – record two algorithms on one input, compare analytics

State management:
  One PlaybackController per app, kept in app.extensions["playback"].
  The page renders whatever /api/state reports; it never drives the
  run itself, so a slow browser cannot slow the algorithm down.
"""

import logging
import os
import random
from dataclasses import asdict

from flask import Flask, jsonify, render_template_string, request

from algorithms import list_algorithms, get_algorithm, require_algorithm
from algorithms.inputs import to_int
from engine import (
    InvalidInputError,
    PlaybackConfig,
    PlaybackController,
    Recorder,
    compare,
    delay_from_slider,
)
from ui import (
    render_snapshot,
    playback_controls,
    algorithm_selector,
    input_editor,
    analytics_panel,
    comparison_selector,
    comparison_panel,
    pseudocode_viewer,
    explanation_panel,
)

logger = logging.getLogger(__name__)

DEFAULT_ALGO = "bubble_sort"


def create_app(config=None) -> Flask:
    """
    Build the app and its PlaybackController.  `config` is merged into
    app.config; PLAYBACK_* keys (or environment variables) tune the
    controller.
    """
    app = Flask(__name__)
    if config:
        app.config.update(config)

    playback_config = PlaybackConfig.from_mapping(app.config, base=PlaybackConfig.from_env())
    app.extensions["playback"] = PlaybackController(playback_config)

    def controller() -> PlaybackController:
        return app.extensions["playback"]

    def body():
        data = request.get_json(silent=True)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise InvalidInputError("request body must be a JSON object")
        return data

    def status(**extra):
        ctl = controller()
        payload = {
            "state":        ctl.state.value,
            "generation":   ctl.token.generation if ctl.token else None,
            "algo_key":     ctl.algo_key,
            "speed_ms":     ctl.speed_ms,
            "last_outcome": ctl.last_outcome.value if ctl.last_outcome else None,
            "last_error":   str(ctl.last_error) if ctl.last_error else None,
        }
        payload.update(extra)
        return payload

    # ---------------------------------------------------------------------------
    # Errors
    # ---------------------------------------------------------------------------
    @app.errorhandler(InvalidInputError)
    def handle_invalid_input(exc):
        logger.info("rejected request to %s: %s", request.path, exc)
        return jsonify({"error": str(exc), "field": exc.field}), 400

    # ---------------------------------------------------------------------------
    # Main UI Route
    # ---------------------------------------------------------------------------
    @app.route("/")
    def index():
        ctl = controller()
        snap = ctl.current_snapshot
        algo_info = get_algorithm(ctl.algo_key or DEFAULT_ALGO)

        html = render_template_string(INDEX_TEMPLATE,
            svg=render_snapshot(snap),
            playback=playback_controls(
                state=ctl.state,
                speed_ms=ctl.speed_ms,
                sequence=snap.sequence if snap else 0,
                max_ms=ctl.config.max_speed_ms,
            ),
            algo_selector=algorithm_selector(list_algorithms(), selected_key=algo_info.key),
            inputs=input_editor(algo_info),
            analytics=analytics_panel(counters=snap.counters if snap else None),
            compare_controls=comparison_selector(list_algorithms()),
            comparison=comparison_panel(),
            pseudocode=pseudocode_viewer(algo_info.pseudocode, snap.pseudocode_line if snap else -1),
            explanation=explanation_panel(snap.explanation if snap else "", snap.phase if snap else ""),
        )
        return html

    # ---------------------------------------------------------------------------
    # API: Registry
    # ---------------------------------------------------------------------------
    @app.route("/api/algorithms")
    def api_algorithms():
        return jsonify([
            {
                "key":              a.key,
                "label":            a.label,
                "tags":             a.tags,
                "complexity":       a.complexity,
                "description":      a.description,
                "sample":           a.sample,
                "pseudocode":       a.pseudocode,
                "input_html":       input_editor(a),
            }
            for a in list_algorithms()
        ])

    @app.route("/api/sample")
    def api_sample():
        algo = require_algorithm(request.args.get("algo_key", DEFAULT_ALGO))
        raw_seed = request.args.get("seed", "")
        if raw_seed.strip():
            seed = to_int(raw_seed, "seed")
        else:
            seed = random.randrange(2 ** 31)
        return jsonify({"algo_key": algo.key, "seed": seed, "params": algo.random_sample(seed)})

    # ---------------------------------------------------------------------------
    # API: Lifecycle
    # ---------------------------------------------------------------------------
    @app.route("/api/run", methods=["POST"])
    def api_run():
        data = body()
        algo = require_algorithm(data.get("algo_key", DEFAULT_ALGO))
        params = data.get("params")
        if params is None:
            params = algo.sample
        token = controller().start(algo, params)
        return jsonify(status(generation=token.generation))

    @app.route("/api/pause", methods=["POST"])
    def api_pause():
        return jsonify(status(changed=controller().pause()))

    @app.route("/api/resume", methods=["POST"])
    def api_resume():
        return jsonify(status(changed=controller().resume()))

    @app.route("/api/cancel", methods=["POST"])
    def api_cancel():
        return jsonify(status(changed=controller().cancel()))

    @app.route("/api/reset", methods=["POST"])
    def api_reset():
        return jsonify(status(changed=controller().reset()))

    # ---------------------------------------------------------------------------
    # API: Config Changes
    # ---------------------------------------------------------------------------
    @app.route("/api/config/speed", methods=["POST"])
    def api_config_speed():
        data = body()
        ctl = controller()
        if "preset" in data:
            speed = ctl.pacing.set_speed_preset(str(data["preset"]))
        elif "slider" in data:
            speed = ctl.set_speed(delay_from_slider(data["slider"], ctl.config.max_speed_ms))
        elif "speed_ms" in data:
            speed = ctl.set_speed(data["speed_ms"])
        else:
            raise InvalidInputError("one of 'speed_ms', 'slider' or 'preset' is required", field="speed")
        return jsonify({"speed_ms": speed})

    # ---------------------------------------------------------------------------
    # API: Observation (polled by the page)
    # ---------------------------------------------------------------------------
    @app.route("/api/state")
    def api_state():
        ctl = controller()
        snap = ctl.current_snapshot
        algo_info = get_algorithm(snap.algo_key if snap else ctl.algo_key)
        panels = {
            "svg":         render_snapshot(snap),
            "pseudocode":  pseudocode_viewer(
                algo_info.pseudocode if algo_info else [],
                snap.pseudocode_line if snap else -1,
            ),
            "explanation": explanation_panel(snap.explanation if snap else "", snap.phase if snap else ""),
            "analytics":   analytics_panel(counters=snap.counters if snap else None),
        }
        return jsonify(status(
            snapshot=snap.to_dict() if snap else None,
            sequence=snap.sequence if snap else 0,
            panels=panels,
        ))

    @app.route("/api/snapshots")
    def api_snapshots():
        since = request.args.get("since", 0, type=int)
        generation = request.args.get("generation", None, type=int)
        snaps = controller().store.since(since, generation)
        return jsonify({"snapshots": [s.to_dict() for s in snaps]})

    # ---------------------------------------------------------------------------
    # API: Comparison Mode
    # ---------------------------------------------------------------------------
    @app.route("/api/compare", methods=["POST"])
    def api_compare():
        data = body()
        left_algo  = require_algorithm(data.get("left", ""))
        right_algo = require_algorithm(data.get("right", ""))
        params = data.get("params")
        if params is None:
            params = left_algo.sample

        recorders = []
        for algo in (left_algo, right_algo):
            rec = Recorder()
            rec.start(algo, params)
            rec.run_to_completion()
            recorders.append(rec)

        result = compare(*recorders)
        return jsonify({
            "result": asdict(result),
            "html":   comparison_panel(result),
        })

    return app


# ---------------------------------------------------------------------------
# HTML Template
# ---------------------------------------------------------------------------
INDEX_TEMPLATE = """
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Algorithm Playback</title>
  <link href="https://fonts.googleapis.com/css2?family=JetBrains+Mono:wght@400;500;700&family=DM+Sans:wght@400;500;700&display=swap" rel="stylesheet">
  <style>
    * { margin: 0; padding: 0; box-sizing: border-box; }

    :root {
      --bg-dark: #0d1117;
      --bg-darker: #010409;
      --bg-panel: #161b22;
      --border: #30363d;
      --text-primary: #e6edf3;
      --text-secondary: #7d8590;
      --text-muted: #484f58;
      --accent-cyan: #0ea5e9;
      --accent-teal: #06b6d4;
      --accent-emerald: #10b981;
      --accent-amber: #f59e0b;
      --accent-rose: #f43f5e;
      --glow-cyan: rgba(14, 165, 233, 0.4);
    }

    body {
      font-family: 'DM Sans', sans-serif;
      background: var(--bg-darker);
      color: var(--text-primary);
      display: flex;
      height: 100vh;
      overflow: hidden;
    }

    #sidebar {
      width: 360px;
      background: var(--bg-dark);
      border-right: 1px solid var(--border);
      overflow-y: auto;
      padding: 24px 16px;
    }

    #main { flex: 1; display: flex; flex-direction: column; }

    #canvas-container {
      flex: 1;
      display: flex;
      align-items: center;
      justify-content: center;
      border-bottom: 1px solid var(--border);
    }
    #canvas-svg { max-width: 100%; max-height: 100%; }

    #bottom-panel {
      display: grid;
      grid-template-columns: 1fr 1fr;
      gap: 20px;
      padding: 20px;
      background: var(--bg-dark);
      min-height: 280px;
      max-height: 360px;
      overflow: hidden;
    }

    .panel, #pseudocode-container, #explanation-container {
      background: var(--bg-panel);
      border: 1px solid var(--border);
      border-radius: 12px;
      padding: 18px;
      margin-bottom: 16px;
      overflow: auto;
    }

    .panel h3, #bottom-panel h3 {
      font-size: 13px;
      font-weight: 700;
      margin-bottom: 14px;
      text-transform: uppercase;
      letter-spacing: 0.5px;
      color: var(--accent-cyan);
    }

    .code-block {
      background: var(--bg-darker);
      border-radius: 8px;
      padding: 12px;
      font-family: 'JetBrains Mono', monospace;
      font-size: 13px;
      line-height: 1.6;
    }
    .code-line { padding: 4px 10px; border-radius: 6px; white-space: pre; }
    .code-line.highlight {
      background: linear-gradient(90deg, rgba(6, 182, 212, 0.15) 0%, transparent 100%);
      border-left: 3px solid var(--accent-cyan);
      box-shadow: 0 0 20px var(--glow-cyan);
    }

    .explanation-text { color: var(--text-secondary); line-height: 1.8; font-size: 14px; }
    .phase-badge, .state-badge {
      background: var(--bg-darker);
      color: var(--accent-amber);
      padding: 2px 8px;
      border-radius: 6px;
      font-size: 11px;
      font-weight: 700;
      text-transform: uppercase;
    }
    .state-running { color: var(--accent-emerald); }
    .state-paused { color: var(--accent-amber); }
    .state-completed { color: var(--accent-cyan); }

    .button-row { display: flex; gap: 8px; margin-bottom: 12px; }
    button {
      background: linear-gradient(135deg, var(--accent-cyan), var(--accent-teal));
      color: #fff;
      border: none;
      padding: 10px 16px;
      border-radius: 8px;
      cursor: pointer;
      font-size: 13px;
      font-weight: 600;
    }
    button[disabled] { opacity: 0.4; cursor: default; }

    select, input[type="range"], textarea {
      width: 100%;
      padding: 8px 10px;
      margin: 6px 0;
      background: var(--bg-darker);
      border: 1px solid var(--border);
      border-radius: 8px;
      color: var(--text-primary);
      font-size: 13px;
    }
    textarea { font-family: 'JetBrains Mono', monospace; resize: vertical; }
    label { display: block; font-size: 12px; color: var(--text-secondary); }

    .step-info {
      font-family: 'JetBrains Mono', monospace;
      font-size: 13px;
      margin: 10px 0;
      padding: 8px 12px;
      background: var(--bg-darker);
      border-left: 3px solid var(--accent-cyan);
      border-radius: 6px;
    }

    table { width: 100%; font-size: 13px; }
    table td:last-child, table td:not(:first-child) { text-align: right; color: var(--accent-cyan); }
    .hint, .placeholder { font-size: 12px; color: var(--text-muted); }
    .error { color: var(--accent-rose); font-size: 12px; min-height: 1em; }
  </style>
</head>
<body>
  <div id="sidebar">
    <div id="algo">{{ algo_selector|safe }}</div>
    <div id="inputs">{{ inputs|safe }}</div>
    <div id="playback">{{ playback|safe }}</div>
    <div id="analytics">{{ analytics|safe }}</div>
    <div id="compare-controls">{{ compare_controls|safe }}</div>
    <div id="comparison">{{ comparison|safe }}</div>
  </div>

  <div id="main">
    <div id="canvas-container">
      <div id="canvas-svg">{{ svg|safe }}</div>
    </div>

    <div id="bottom-panel">
      <div id="pseudocode-container">
        <h3>Pseudocode</h3>
        <div id="pseudocode">{{ pseudocode|safe }}</div>
      </div>
      <div id="explanation-container">
        <h3>Step Explanation</h3>
        <div id="explanation">{{ explanation|safe }}</div>
      </div>
    </div>
  </div>

  <script>
    let algorithms = {};
    let lastSeen = null;

    async function post(url, data) {
      const res = await fetch(url, {
        method: 'POST',
        headers: {'Content-Type': 'application/json'},
        body: JSON.stringify(data || {}),
      });
      const json = await res.json();
      document.getElementById('input-error').textContent = json.error || '';
      return json;
    }

    function selectedAlgo() {
      return document.getElementById('algo-selector').value;
    }

    function params() {
      try {
        return JSON.parse(document.getElementById('input-params').value);
      } catch (e) {
        document.getElementById('input-error').textContent = 'Input is not valid JSON';
        return undefined;
      }
    }

    fetch('/api/algorithms').then(r => r.json()).then(list => {
      list.forEach(a => algorithms[a.key] = a);
    });

    document.getElementById('algo-selector').addEventListener('change', (e) => {
      const algo = algorithms[e.target.value];
      if (algo) document.getElementById('inputs').innerHTML = algo.input_html;
    });

    // the input panel is swapped on algorithm change, so listen on the document
    document.addEventListener('click', async (e) => {
      if (e.target.id !== 'btn-random') return;
      const seed = document.getElementById('input-seed').value;
      const query = new URLSearchParams({algo_key: selectedAlgo(), seed: seed});
      const data = await (await fetch('/api/sample?' + query)).json();
      document.getElementById('input-error').textContent = data.error || '';
      if (data.error) return;
      document.getElementById('input-params').value = JSON.stringify(data.params, null, 2);
      document.getElementById('input-seed').value = data.seed;
    });

    document.getElementById('btn-compare').addEventListener('click', async () => {
      const p = params();
      if (p === undefined) return;
      const data = await post('/api/compare', {
        left: document.getElementById('compare-left').value,
        right: document.getElementById('compare-right').value,
        params: p,
      });
      if (data.html) document.getElementById('comparison').innerHTML = data.html;
    });

    document.getElementById('btn-start').addEventListener('click', async () => {
      const p = params();
      if (p === undefined) return;
      await post('/api/run', {algo_key: selectedAlgo(), params: p});
    });

    document.getElementById('btn-pause').addEventListener('click', async () => {
      const state = document.getElementById('state-badge').textContent.toLowerCase();
      await post(state === 'paused' ? '/api/resume' : '/api/pause');
    });
    document.getElementById('btn-cancel').addEventListener('click', () => post('/api/cancel'));
    document.getElementById('btn-reset').addEventListener('click', () => post('/api/reset'));

    document.getElementById('speed-slider').addEventListener('input', async (e) => {
      const data = await post('/api/config/speed', {slider: +e.target.value});
      document.getElementById('speed-value').textContent = data.speed_ms + ' ms';
    });
    document.getElementById('speed-preset').addEventListener('change', async (e) => {
      const data = await post('/api/config/speed', {speed_ms: +e.target.value});
      const slider = document.getElementById('speed-slider');
      slider.value = +slider.max - data.speed_ms;
      document.getElementById('speed-value').textContent = data.speed_ms + ' ms';
    });

    // Observer: render whatever the controller last published
    async function poll() {
      try {
        const data = await (await fetch('/api/state')).json();
        const badge = document.getElementById('state-badge');
        badge.textContent = data.state.toUpperCase();
        badge.className = 'state-badge state-' + data.state;
        const active = data.state === 'running' || data.state === 'paused';
        document.getElementById('btn-pause').disabled = !active;
        document.getElementById('btn-cancel').disabled = !active;
        document.getElementById('btn-pause').textContent = data.state === 'paused' ? '▶' : '⏸';
        document.getElementById('current-step').textContent = data.sequence;
        if (data.last_error) document.getElementById('input-error').textContent = data.last_error;

        const seen = data.generation + '/' + data.sequence + '/' + data.state;
        if (seen !== lastSeen) {
          lastSeen = seen;
          document.getElementById('canvas-svg').innerHTML = data.panels.svg;
          document.getElementById('pseudocode').innerHTML = data.panels.pseudocode;
          document.getElementById('explanation').innerHTML = data.panels.explanation;
          document.getElementById('analytics').innerHTML = data.panels.analytics;
        }
      } finally {
        setTimeout(poll, 100);
      }
    }
    poll();
  </script>
</body>
</html>
"""


# ---------------------------------------------------------------------------
# Run
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    logging.basicConfig(
        level=os.environ.get("PLAYBACK_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)-7s %(threadName)s %(name)s: %(message)s",
    )
    print("=" * 60)
    print("  Algorithm Playback")
    print("  Starting Flask server...")
    print("  Open http://localhost:5000")
    print("=" * 60)
    create_app().run(debug=False, threaded=True, port=5000)
