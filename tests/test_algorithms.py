"""Tests for the registry, input validation and the shipped definitions."""

from __future__ import annotations

import math
import random

import pytest

from algorithms import (
    REGISTRY,
    algorithms_by_tag,
    define,
    get_algorithm,
    list_algorithms,
    require_algorithm,
)
from engine import InvalidInputError, Recorder, UnknownAlgorithmError


def _final(key, params):
    rec = Recorder()
    rec.start(require_algorithm(key), params)
    rec.run_to_completion()
    assert rec.metrics.completed, rec.metrics.error
    return rec.snapshots[-1]


# ── Registry ─────────────────────────────────────────────────────────

class TestRegistry:
    def test_lookup(self):
        assert get_algorithm("bfs").label == "Breadth-First Search"
        assert get_algorithm("nope") is None
        with pytest.raises(UnknownAlgorithmError):
            require_algorithm("nope")

    def test_listing_and_tags(self):
        keys = [a.key for a in list_algorithms()]
        assert keys == list(REGISTRY)
        assert {a.key for a in algorithms_by_tag("sorting")} == {
            "bubble_sort", "insertion_sort", "selection_sort", "merge_sort", "quick_sort",
        }
        assert {a.key for a in algorithms_by_tag("graph")} == {"bfs", "dfs", "dijkstra"}

    def test_define_is_fresh_each_call(self):
        state_a, steps_a = define("bubble_sort", {"values": [2, 1]})
        state_b, steps_b = define("bubble_sort", {"values": [2, 1]})
        assert state_a is not state_b
        assert steps_a is not steps_b
        next(steps_a).apply(state_a)
        assert state_a.data == [1, 2]
        assert state_b.data == [2, 1]

    @pytest.mark.parametrize("key", list(REGISTRY))
    def test_sample_runs_to_a_final_step(self, key):
        info = REGISTRY[key]
        last = _final(key, info.sample)
        assert last.is_final
        assert last.phase == "done"
        assert last.error is None

    @pytest.mark.parametrize("key", list(REGISTRY))
    def test_pseudocode_lines_in_range(self, key):
        info = REGISTRY[key]
        rec = Recorder()
        rec.start(info, info.sample)
        rec.run_to_completion()
        for snap in rec.snapshots:
            assert -1 <= snap.pseudocode_line < len(info.pseudocode)


# ── Sorting ──────────────────────────────────────────────────────────

SORTS = ["bubble_sort", "insertion_sort", "selection_sort", "merge_sort", "quick_sort"]


class TestSorting:
    @pytest.mark.parametrize("key", SORTS)
    @pytest.mark.parametrize("values", [
        [5, 3, 1, 4],
        [1],
        [2, 2, 1, 1],
        [1, 2, 3, 4, 5],
        [-3, 999, 0, -999, 7],
    ])
    def test_sorts(self, key, values):
        last = _final(key, {"values": values})
        assert last.data == sorted(values)
        assert sorted(last.marks["sorted"]) == list(range(len(values)))

    @pytest.mark.parametrize("key", SORTS)
    def test_random_inputs(self, key):
        rng = random.Random(7)
        for _ in range(5):
            values = [rng.randint(-50, 50) for _ in range(rng.randint(1, 12))]
            assert _final(key, {"values": values}).data == sorted(values)

    def test_string_input_is_accepted(self):
        assert _final("bubble_sort", {"values": "5, 3 1,4"}).data == [1, 3, 4, 5]

    def test_bubble_sort_stops_early(self):
        rec = Recorder()
        rec.start(require_algorithm("bubble_sort"), {"values": [1, 2, 3, 4]})
        rec.run_to_completion()
        # one pass of three comparisons, then the final Step
        assert rec.metrics.total_steps == 4
        assert rec.metrics.swaps == 0

    def test_swap_and_sorted_mark_are_one_step(self):
        rec = Recorder()
        rec.start(require_algorithm("quick_sort"), {"values": [3, 1, 2]})
        rec.run_to_completion()
        placed = [s for s in rec.snapshots if s.marks.get("sorted") and not s.is_final]
        first = placed[0]
        pivot = first.marks["sorted"][0]
        assert first.data[pivot] == 2

    @pytest.mark.parametrize("params", [
        {},
        {"values": []},
        {"values": ["a"]},
        {"values": [True]},
        {"values": [1000]},
        {"values": list(range(40))},
        {"values": {"a": 1}},
    ])
    def test_rejects_bad_arrays(self, params):
        with pytest.raises(InvalidInputError):
            require_algorithm("merge_sort").parse(params)


# ── Searching ────────────────────────────────────────────────────────

class TestSearching:
    def test_linear_found(self):
        last = _final("linear_search", {"values": [64, 34, 25, 12, 22, 11, 90], "target": 22})
        assert last.marks["found"] == [4]
        assert last.counters["comparisons"] == 5

    def test_linear_missing(self):
        last = _final("linear_search", {"values": [1, 2, 3], "target": 9})
        assert "found" not in last.marks
        assert sorted(last.marks["checked"]) == [0, 1, 2]

    def test_binary_sorts_its_input(self):
        last = _final("binary_search", {"values": [90, 11, 25, 64, 12, 22, 34], "target": 25})
        assert last.data == [11, 12, 22, 25, 34, 64, 90]
        assert last.marks["found"] == [3]

    def test_binary_missing(self):
        last = _final("binary_search", {"values": [1, 3, 5, 7], "target": 4})
        assert "found" not in last.marks
        assert last.counters["comparisons"] <= 3

    def test_target_in_context(self):
        state, _ = define("linear_search", {"values": [1], "target": "7"})
        assert state.context == {"target": 7}

    @pytest.mark.parametrize("target", [None, "", "seven", 1.5, True])
    def test_rejects_non_numeric_target(self, target):
        with pytest.raises(InvalidInputError):
            define("binary_search", {"values": [1, 2], "target": target})


# ── Graphs ───────────────────────────────────────────────────────────

class TestGraphs:
    def test_bfs_distances(self):
        last = _final("bfs", REGISTRY["bfs"].sample)
        assert last.data == {0: 0, 1: 1, 2: 1, 3: 2, 4: 2, 5: 3}
        assert sorted(last.marks["visited"]) == [0, 1, 2, 3, 4, 5]

    def test_dfs_discovery_order(self):
        last = _final("dfs", REGISTRY["dfs"].sample)
        assert last.data == {0: 1, 1: 2, 3: 3, 5: 4, 4: 5, 2: 6}
        assert sorted(last.marks["finished"]) == [0, 1, 2, 3, 4, 5]

    def test_dijkstra_distances(self):
        last = _final("dijkstra", REGISTRY["dijkstra"].sample)
        assert last.data == {0: 0, 1: 7, 2: 9, 3: 20, 4: 20, 5: 11}
        assert last.to_dict()["data"]["0"] == 0

    def test_unreachable_nodes(self):
        params = {"nodes": [0, 1, 2], "edges": [[0, 1, 4]], "source": 0}
        assert _final("bfs", params).data == {0: 0, 1: 1, 2: None}
        dist = _final("dijkstra", params).data
        assert dist[1] == 4 and math.isinf(dist[2])

    def test_directed_edges(self):
        params = {"nodes": ["a", "b"], "edges": [{"from": "b", "to": "a"}], "source": "a", "directed": True}
        assert _final("bfs", params).data == {"a": 0, "b": None}

    def test_numeric_string_source(self):
        state, _ = define("bfs", {"nodes": [0, 1], "edges": [[0, 1]], "source": "1"})
        assert state.context["source"] == 1

    def test_directed_flag_accepts_strings(self):
        params = {"nodes": ["a", "b"], "edges": [{"from": "b", "to": "a"}], "source": "a"}
        assert _final("bfs", dict(params, directed="false")).data == {"a": 0, "b": 1}
        assert _final("bfs", dict(params, directed="true")).data == {"a": 0, "b": None}
        assert _final("bfs", dict(params, directed=0)).data == {"a": 0, "b": 1}

    @pytest.mark.parametrize("directed", ["sideways", 2, [True]])
    def test_rejects_bad_directed_flag(self, directed):
        with pytest.raises(InvalidInputError) as exc:
            define("bfs", {"nodes": [0, 1], "directed": directed})
        assert exc.value.field == "directed"

    def test_directed_context_keeps_both_arcs(self):
        params = {"nodes": [0, 1], "edges": [[0, 1, 2], [1, 0, 5]], "directed": True}
        state, _ = define("dijkstra", params)
        assert state.context["directed"] is True
        assert state.context["edges"] == [[0, 1, 2], [1, 0, 5]]
        assert _final("dijkstra", dict(params, source=1)).data == {0: 5, 1: 0}

    def test_undirected_context_is_flagged(self):
        state, _ = define("bfs", REGISTRY["bfs"].sample)
        assert state.context["directed"] is False

    def test_context_lists_each_edge_once(self):
        state, _ = define("dijkstra", REGISTRY["dijkstra"].sample)
        assert len(state.context["edges"]) == 9

    @pytest.mark.parametrize("params", [
        {"nodes": [], "edges": []},
        {"nodes": [0, 0]},
        {"nodes": [0, 1], "edges": [[0, 2]]},
        {"nodes": [0, 1], "edges": [[0]]},
        {"nodes": [0, 1], "edges": [[0, 1, "heavy"]]},
        {"nodes": [0, 1], "source": 5},
        {"nodes": [0, 1], "edges": 5},
        {"nodes": [0, 1], "edges": {"from": 0, "to": 1}},
        {"nodes": [0, 1], "source": [0]},
        {"nodes": [0, 1], "source": True},
        {"nodes": [0, 1], "edges": [[0, 1, float("inf")]]},
        {"nodes": [0, 1], "edges": [[0, 1, float("nan")]]},
    ])
    def test_rejects_bad_graphs(self, params):
        with pytest.raises(InvalidInputError):
            define("bfs", params)

    def test_dijkstra_rejects_negative_weights(self):
        params = {"nodes": [0, 1], "edges": [[0, 1, -2]]}
        define("bfs", params)
        with pytest.raises(InvalidInputError):
            define("dijkstra", params)


# ── Dynamic programming & strings ────────────────────────────────────

class TestDynamicProgramming:
    def test_edit_distance(self):
        last = _final("edit_distance", {"source": "kitten", "target": "sitting"})
        assert last.data[-1][-1] == 3
        assert last.pointers["distance"] == 3

    def test_edit_distance_empty_side(self):
        last = _final("edit_distance", {"source": "", "target": "abc"})
        assert last.data == [[0, 1, 2, 3]]

    def test_fibonacci(self):
        last = _final("fibonacci_memo", {"n": 8})
        assert last.data[8] == 21
        assert last.pointers["result"] == 21
        assert last.counters["cache_hits"] > 0

    def test_fibonacci_base_case(self):
        assert _final("fibonacci_memo", {"n": 1}).pointers["result"] == 1

    @pytest.mark.parametrize("n", [-1, 31, "many"])
    def test_fibonacci_bounds(self, n):
        with pytest.raises(InvalidInputError):
            define("fibonacci_memo", {"n": n})

    def test_kmp(self):
        last = _final("kmp", REGISTRY["kmp"].sample)
        assert last.marks["match"] == [10]
        assert last.data["lps"] == [0, 0, 1, 2, 0, 1, 2, 3, 4]
        assert last.counters["matches"] == 1

    def test_kmp_overlapping_matches(self):
        last = _final("kmp", {"text": "aaaa", "pattern": "aa"})
        assert last.marks["match"] == [0, 1, 2]

    def test_kmp_requires_pattern(self):
        with pytest.raises(InvalidInputError):
            define("kmp", {"text": "abc", "pattern": ""})


# ── Random samples ───────────────────────────────────────────────────

class TestRandomSamples:
    @pytest.mark.parametrize("key", list(REGISTRY))
    def test_seeded_samples_are_valid_and_repeatable(self, key):
        info = REGISTRY[key]
        for seed in range(5):
            params = info.random_sample(seed)
            assert params == info.random_sample(seed)
            last = _final(key, params)
            assert last.is_final and last.error is None

    @pytest.mark.parametrize("key", list(REGISTRY))
    def test_seeds_vary_the_sample(self, key):
        info = REGISTRY[key]
        samples = [info.random_sample(seed) for seed in range(10)]
        assert any(s != samples[0] for s in samples)

    def test_random_graph_is_connected(self):
        params = REGISTRY["bfs"].random_sample(3)
        last = _final("bfs", params)
        assert None not in last.data.values()

    def test_random_kmp_pattern_occurs(self):
        params = REGISTRY["kmp"].random_sample(11)
        assert params["pattern"] in params["text"]

    def test_complexity_card(self):
        assert REGISTRY["quick_sort"].complexity == {
            "best": "O(n log n)", "average": "O(n log n)", "worst": "O(n²)", "space": "O(log n)",
        }
        for info in REGISTRY.values():
            assert all(info.complexity.values()), info.key
