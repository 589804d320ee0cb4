"""Tests for the Flask host and the SVG / HTML renderers."""

from __future__ import annotations

import pytest

from algorithms import REGISTRY, AlgoInfo, StepBuilder, WorkingState
from engine import Recorder, Snapshot
from main import create_app
from ui import explanation_panel, pseudocode_viewer, render_snapshot


@pytest.fixture
def app():
    app = create_app({"TESTING": True, "PLAYBACK_DEFAULT_SPEED_MS": 0})
    yield app
    ctl = app.extensions["playback"]
    ctl.reset()
    ctl.join(5.0)


@pytest.fixture
def slow_app():
    app = create_app({"TESTING": True, "PLAYBACK_DEFAULT_SPEED_MS": 1000})
    yield app
    ctl = app.extensions["playback"]
    ctl.reset()
    ctl.join(5.0)


@pytest.fixture
def client(app):
    return app.test_client()


def _finish(app):
    assert app.extensions["playback"].join(5.0)


# ── Pages & registry ─────────────────────────────────────────────────

class TestPages:
    def test_index(self, client):
        res = client.get("/")
        assert res.status_code == 200
        html = res.get_data(as_text=True)
        assert 'id="algo-selector"' in html
        assert 'id="speed-slider"' in html
        assert "<svg" in html

    def test_index_has_comparison_controls(self, client):
        html = client.get("/").get_data(as_text=True)
        assert 'id="comparison"' in html
        assert 'id="compare-left"' in html
        assert 'id="compare-right"' in html
        assert 'id="btn-compare"' in html
        assert "'/api/compare'" in html
        assert 'id="btn-random"' in html

    def test_algorithms(self, client):
        res = client.get("/api/algorithms")
        assert res.status_code == 200
        listing = res.get_json()
        assert [a["key"] for a in listing] == list(REGISTRY)
        bubble = listing[0]
        assert bubble["label"] == "Bubble Sort"
        assert bubble["sample"] == {"values": [64, 34, 25, 12, 22, 11, 90]}
        assert 'id="input-params"' in bubble["input_html"]
        assert bubble["complexity"] == {"best": "O(n)", "average": "O(n²)", "worst": "O(n²)", "space": "O(1)"}
        assert "Worst Case" in bubble["input_html"]


# ── Lifecycle ────────────────────────────────────────────────────────

class TestRun:
    def test_run_to_completion(self, app, client):
        res = client.post("/api/run", json={"algo_key": "bubble_sort", "params": {"values": [5, 3, 1, 4]}})
        assert res.status_code == 200
        generation = res.get_json()["generation"]
        _finish(app)

        state = client.get("/api/state").get_json()
        assert state["state"] == "completed"
        assert state["last_outcome"] == "completed"
        assert state["algo_key"] == "bubble_sort"
        assert state["snapshot"]["generation"] == generation
        assert state["snapshot"]["data"] == [1, 3, 4, 5]
        assert state["snapshot"]["is_final"] is True
        assert state["panels"]["svg"].startswith("<svg")
        assert 'class="code-line' in state["panels"]["pseudocode"]

    def test_run_defaults_to_sample(self, app, client):
        res = client.post("/api/run", json={"algo_key": "binary_search"})
        assert res.status_code == 200
        _finish(app)
        snap = client.get("/api/state").get_json()["snapshot"]
        assert snap["marks"]["found"] == [3]

    def test_state_before_any_run(self, client):
        state = client.get("/api/state").get_json()
        assert state["state"] == "idle"
        assert state["snapshot"] is None
        assert state["sequence"] == 0
        assert state["generation"] is None

    def test_invalid_params(self, client):
        res = client.post("/api/run", json={"algo_key": "bubble_sort", "params": {"values": []}})
        assert res.status_code == 400
        payload = res.get_json()
        assert payload["field"] == "values"
        assert payload["error"]
        assert client.get("/api/state").get_json()["state"] == "idle"

    def test_unknown_algorithm(self, client):
        res = client.post("/api/run", json={"algo_key": "bogo_sort"})
        assert res.status_code == 400
        assert res.get_json()["field"] == "algo_key"

    def test_malformed_graph_is_rejected(self, client):
        res = client.post("/api/run", json={"algo_key": "bfs", "params": {"nodes": [0, 1], "edges": 5}})
        assert res.status_code == 400
        assert res.get_json()["field"] == "edges"
        res = client.post("/api/run", json={"algo_key": "bfs", "params": {"nodes": [0, 1], "source": [0]}})
        assert res.status_code == 400
        assert res.get_json()["field"] == "source"

    def test_non_object_body(self, client):
        res = client.post("/api/run", json=[1, 2, 3])
        assert res.status_code == 400

    def test_failed_run_reports_error(self, app, client, monkeypatch):
        def broken(values):
            yield StepBuilder().write(0, 1).build()
            raise ZeroDivisionError("division by zero")

        monkeypatch.setitem(REGISTRY, "broken", AlgoInfo(
            key="broken", label="Broken", fn=broken, pseudocode=["boom"],
            parse=lambda params: {"values": [0]},
            make_state=lambda parsed: WorkingState(list(parsed["values"])),
        ))
        res = client.post("/api/run", json={"algo_key": "broken", "params": {}})
        assert res.status_code == 200
        _finish(app)

        state = client.get("/api/state").get_json()
        assert state["state"] == "idle"
        assert state["last_outcome"] == "failed"
        assert "ZeroDivisionError" in state["last_error"]
        assert state["snapshot"]["sequence"] == 2
        assert state["snapshot"]["error"]
        assert "ZeroDivisionError" in state["panels"]["svg"]


class TestControls:
    def test_pause_resume_cancel(self, slow_app):
        client = slow_app.test_client()
        client.post("/api/run", json={"algo_key": "bubble_sort"})

        res = client.post("/api/pause").get_json()
        assert res["changed"] is True
        assert res["state"] == "paused"
        assert client.post("/api/pause").get_json()["changed"] is False

        res = client.post("/api/resume").get_json()
        assert res["changed"] is True
        assert res["state"] == "running"

        res = client.post("/api/cancel").get_json()
        assert res["changed"] is True
        assert res["state"] == "idle"
        assert res["last_outcome"] == "cancelled"
        assert client.post("/api/cancel").get_json()["changed"] is False

    def test_reset(self, app, client):
        client.post("/api/run", json={"algo_key": "insertion_sort"})
        _finish(app)
        res = client.post("/api/reset").get_json()
        assert res["changed"] is True
        assert res["state"] == "idle"
        assert client.get("/api/state").get_json()["snapshot"] is None
        assert client.post("/api/reset").get_json()["changed"] is False


class TestSpeed:
    def test_speed_ms_is_clamped(self, client):
        assert client.post("/api/config/speed", json={"speed_ms": 250}).get_json() == {"speed_ms": 250}
        assert client.post("/api/config/speed", json={"speed_ms": 5000}).get_json() == {"speed_ms": 1000}
        assert client.post("/api/config/speed", json={"speed_ms": -5}).get_json() == {"speed_ms": 0}

    def test_slider_is_inverted(self, client):
        assert client.post("/api/config/speed", json={"slider": 0}).get_json() == {"speed_ms": 1000}
        assert client.post("/api/config/speed", json={"slider": 850}).get_json() == {"speed_ms": 150}

    def test_preset(self, client):
        assert client.post("/api/config/speed", json={"preset": "turbo"}).get_json() == {"speed_ms": 50}
        assert client.get("/api/state").get_json()["speed_ms"] == 50

    @pytest.mark.parametrize("payload", [{}, {"speed_ms": "fast"}, {"preset": "warp"}, {"slider": None}])
    def test_bad_speed(self, client, payload):
        res = client.post("/api/config/speed", json=payload)
        assert res.status_code == 400
        assert "error" in res.get_json()


# ── Observation ──────────────────────────────────────────────────────

class TestSnapshots:
    def test_since(self, app, client):
        generation = client.post("/api/run", json={"algo_key": "bubble_sort", "params": {"values": [3, 2, 1]}}).get_json()["generation"]
        _finish(app)

        everything = client.get(f"/api/snapshots?since=0&generation={generation}").get_json()["snapshots"]
        assert [s["sequence"] for s in everything] == list(range(1, len(everything) + 1))
        assert everything[-1]["is_final"]

        tail = client.get(f"/api/snapshots?since=2&generation={generation}").get_json()["snapshots"]
        assert [s["sequence"] for s in tail] == [s["sequence"] for s in everything[2:]]

    def test_since_with_old_generation_returns_current_run(self, app, client):
        generation = client.post("/api/run", json={"algo_key": "bubble_sort"}).get_json()["generation"]
        _finish(app)
        snaps = client.get(f"/api/snapshots?since=999&generation={generation - 1}").get_json()["snapshots"]
        assert snaps
        assert all(s["generation"] == generation for s in snaps)


class TestCompare:
    def test_compare(self, client):
        res = client.post("/api/compare", json={
            "left": "bubble_sort",
            "right": "merge_sort",
            "params": {"values": [9, 8, 7, 6, 5, 4, 3, 2, 1]},
        })
        assert res.status_code == 200
        payload = res.get_json()
        assert payload["result"]["left"]["algo_key"] == "bubble_sort"
        assert payload["result"]["winner_comparisons"] == "Merge Sort"
        assert "Bubble Sort vs Merge Sort" in payload["html"]

    def test_compare_unknown(self, client):
        res = client.post("/api/compare", json={"left": "bubble_sort", "right": "nope"})
        assert res.status_code == 400

    def test_compare_needs_matching_input_family(self, client):
        res = client.post("/api/compare", json={"left": "bubble_sort", "right": "bfs", "params": {"values": [3, 1]}})
        assert res.status_code == 400
        assert res.get_json()["field"] == "nodes"


class TestSample:
    def test_seeded_sample_is_repeatable(self, client):
        first = client.get("/api/sample?algo_key=dijkstra&seed=42").get_json()
        second = client.get("/api/sample?algo_key=dijkstra&seed=42").get_json()
        assert first == second
        assert first["seed"] == 42
        assert first["algo_key"] == "dijkstra"
        assert set(first["params"]) == {"nodes", "edges", "source"}

    def test_sample_without_seed_reports_one(self, client):
        data = client.get("/api/sample?algo_key=kmp").get_json()
        again = client.get(f"/api/sample?algo_key=kmp&seed={data['seed']}").get_json()
        assert again["params"] == data["params"]

    def test_sample_runs(self, app, client):
        params = client.get("/api/sample?algo_key=merge_sort&seed=5").get_json()["params"]
        assert client.post("/api/run", json={"algo_key": "merge_sort", "params": params}).status_code == 200
        _finish(app)
        snap = client.get("/api/state").get_json()["snapshot"]
        assert snap["data"] == sorted(params["values"])

    @pytest.mark.parametrize("query, field", [
        ("algo_key=bogo_sort", "algo_key"),
        ("algo_key=bfs&seed=abc", "seed"),
    ])
    def test_bad_sample_request(self, client, query, field):
        res = client.get(f"/api/sample?{query}")
        assert res.status_code == 400
        assert res.get_json()["field"] == field


# ── Renderers ────────────────────────────────────────────────────────

class TestRender:
    def test_empty_canvas(self):
        svg = render_snapshot(None)
        assert svg.startswith("<svg") and svg.endswith("</svg>")
        assert "press Start" in svg

    @pytest.mark.parametrize("key", list(REGISTRY))
    def test_every_snapshot_renders(self, key):
        rec = Recorder()
        rec.start(REGISTRY[key], REGISTRY[key].sample)
        rec.run_to_completion()
        for snap in rec.snapshots:
            svg = render_snapshot(snap)
            assert svg.startswith("<svg") and svg.endswith("</svg>")

    def test_error_caption_is_escaped(self):
        snap = Snapshot(generation=1, sequence=1, data=[1, 2], error="<boom>", is_final=True)
        svg = render_snapshot(snap)
        assert "&lt;boom&gt;" in svg
        assert "<boom>" not in svg

    def test_pseudocode_highlight(self):
        html = pseudocode_viewer(["a", "b", "c"], current_line=1)
        assert 'class="code-line highlight" data-line="1"' in html
        assert 'class="code-line " data-line="0"' in html

    def test_explanation_escapes(self):
        html = explanation_panel("a < b", phase="pass 1")
        assert "a &lt; b" in html
        assert "pass 1" in html

    def test_directed_graph_draws_arrows(self):
        rec = Recorder()
        rec.start(REGISTRY["dijkstra"], {"nodes": [0, 1], "edges": [[0, 1, 2], [1, 0, 5]], "directed": True})
        rec.run_to_completion()
        svg = render_snapshot(rec.snapshots[-1])
        assert svg.count("<polygon") == 2
        assert ">2<" in svg and ">5<" in svg

    def test_undirected_graph_has_no_arrows(self):
        rec = Recorder()
        rec.start(REGISTRY["bfs"], REGISTRY["bfs"].sample)
        rec.run_to_completion()
        assert "<polygon" not in render_snapshot(rec.snapshots[-1])
