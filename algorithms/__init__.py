"""
algorithms/__init__.py — Algorithm Registry
=============================================
Single source of truth for every algorithm the player knows about.

    from algorithms import REGISTRY, get_algorithm

REGISTRY is a dict:
    {
        "bubble_sort": AlgoInfo(key, label, fn, parse, make_state, pseudocode, …),
        …
    }

AlgoInfo is the Algorithm Definition the engine consumes:

    info.parse(params)      -> inputs        (InvalidInputError on bad input)
    info.make_state(inputs) -> WorkingState  (fresh for every run)
    info.steps(inputs)      -> Step source   (fresh generator for every run)
    info.random_sample(seed) -> params       (seeded random input for the family)

Adding a new algorithm is: write the generator, add one entry here.
"""

import random
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from engine.errors import UnknownAlgorithmError

from algorithms import inputs
from algorithms.step import Step, StepBuilder, WorkingState

# ---------------------------------------------------------------------------
# Import all algorithm modules
# ---------------------------------------------------------------------------
from algorithms.bubble_sort     import bubble_sort     as _bubble,    PSEUDOCODE as _bubble_pc
from algorithms.insertion_sort  import insertion_sort  as _insertion, PSEUDOCODE as _insertion_pc
from algorithms.selection_sort  import selection_sort  as _selection, PSEUDOCODE as _selection_pc
from algorithms.merge_sort      import merge_sort      as _merge,     PSEUDOCODE as _merge_pc
from algorithms.quick_sort      import quick_sort      as _quick,     PSEUDOCODE as _quick_pc
from algorithms.linear_search   import linear_search   as _linear,    PSEUDOCODE as _linear_pc
from algorithms.binary_search   import binary_search   as _binary,    PSEUDOCODE as _binary_pc
from algorithms.bfs             import bfs             as _bfs,       PSEUDOCODE as _bfs_pc
from algorithms.dfs             import dfs             as _dfs,       PSEUDOCODE as _dfs_pc
from algorithms.dijkstra        import dijkstra        as _dijkstra,  PSEUDOCODE as _dij_pc
from algorithms.edit_distance   import edit_distance   as _edit,      PSEUDOCODE as _edit_pc, empty_table
from algorithms.fibonacci_memo  import fibonacci_memo  as _fib,       PSEUDOCODE as _fib_pc
from algorithms.kmp             import kmp             as _kmp,       PSEUDOCODE as _kmp_pc


# ---------------------------------------------------------------------------
# AlgoInfo — metadata card + definition contract for each algorithm
# ---------------------------------------------------------------------------
@dataclass
class AlgoInfo:
    key:                str                                      # registry key, e.g. "bubble_sort"
    label:              str                                      # human label
    fn:                 Callable[..., Iterator[Step]]            # the generator function
    parse:              Callable[[Dict[str, Any]], Dict[str, Any]]
    make_state:         Callable[[Dict[str, Any]], WorkingState]
    pseudocode:         List[str]
    sample:             Dict[str, Any] = field(default_factory=dict)   # default input for the UI
    randomize:          Optional[Callable[[random.Random], Dict[str, Any]]] = None
    tags:               List[str]      = field(default_factory=list)
    complexity_best:    str            = ""
    complexity_average: str            = ""
    complexity_worst:   str            = ""
    complexity_space:   str            = ""
    description:        str            = ""

    def steps(self, parsed: Dict[str, Any]) -> Iterator[Step]:
        return self.fn(**parsed)

    def define(self, params: Optional[Dict[str, Any]] = None) -> Tuple[WorkingState, Iterator[Step]]:
        """Validate `params`, return a fresh (WorkingState, step source) pair."""
        parsed = self.parse(params or {})
        return self.make_state(parsed), self.steps(parsed)

    def random_sample(self, seed: Optional[int] = None) -> Dict[str, Any]:
        """Random params for this family; the same seed gives the same params."""
        if self.randomize is None:
            return dict(self.sample)
        return self.randomize(random.Random(seed))

    @property
    def complexity(self) -> Dict[str, str]:
        return {
            "best":    self.complexity_best,
            "average": self.complexity_average,
            "worst":   self.complexity_worst,
            "space":   self.complexity_space,
        }


# ---------------------------------------------------------------------------
# Input parsers & state factories shared by families
# ---------------------------------------------------------------------------
def _parse_array(params):
    return {"values": inputs.int_list(params)}


def _parse_search(params):
    return {
        "values": inputs.int_list(params),
        "target": inputs.to_int(inputs._require(params, "target"), "target"),
    }


def _parse_sorted_search(params):
    parsed = _parse_search(params)
    parsed["values"] = sorted(parsed["values"])
    return parsed


def _array_state(parsed):
    context = {"target": parsed["target"]} if "target" in parsed else {}
    return WorkingState(list(parsed["values"]), context=context)


def _parse_graph(params):
    return inputs.graph(params)


def _parse_weighted_graph(params):
    return inputs.graph(params, allow_negative=False)


def _graph_state(parsed):
    return WorkingState({n: None for n in parsed["nodes"]}, context=inputs.graph_context(parsed))


def _distance_state(parsed):
    return WorkingState({n: float("inf") for n in parsed["nodes"]}, context=inputs.graph_context(parsed))


def _parse_edit(params):
    return {
        "source": inputs.text(params, "source", max_len=16, allow_empty=True),
        "target": inputs.text(params, "target", max_len=16, allow_empty=True),
    }


def _edit_state(parsed):
    return WorkingState(empty_table(parsed["source"], parsed["target"]), context=dict(parsed))


def _parse_fib(params):
    return {"n": inputs.bounded_int(params, "n", 0, 30)}


def _fib_state(parsed):
    return WorkingState({}, context=dict(parsed))


def _parse_kmp(params):
    return {
        "text":    inputs.text(params, "text"),
        "pattern": inputs.text(params, "pattern", max_len=16),
    }


def _kmp_state(parsed):
    return WorkingState({"lps": [0] * len(parsed["pattern"])}, context=dict(parsed))


# ---------------------------------------------------------------------------
# Random input factories (one per family, driven by a seeded Random)
# ---------------------------------------------------------------------------
def _random_array(rng):
    return {"values": inputs.random_values(rng, rng.randint(6, 12))}


def _random_search(rng):
    values = inputs.random_values(rng, rng.randint(6, 12))
    # mostly present, sometimes missing
    target = rng.choice(values) if rng.random() < 0.8 else rng.randint(1, 99)
    return {"values": values, "target": target}


def _random_sorted_search(rng):
    params = _random_search(rng)
    params["values"] = sorted(params["values"])
    return params


def _random_graph(rng):
    return inputs.random_graph(rng, rng.randint(5, 8))


def _random_weighted_graph(rng):
    return inputs.random_graph(rng, rng.randint(5, 8), weighted=True)


def _random_edit(rng):
    return {
        "source": inputs.random_word(rng, rng.randint(3, 8), "abcde"),
        "target": inputs.random_word(rng, rng.randint(3, 8), "abcde"),
    }


def _random_fib(rng):
    return {"n": rng.randint(3, 15)}


def _random_kmp(rng):
    pattern = inputs.random_word(rng, rng.randint(3, 6), "AB")
    text    = inputs.random_word(rng, rng.randint(15, 30), "AB")
    at = rng.randint(0, len(text))
    return {"text": text[:at] + pattern + text[at:], "pattern": pattern}


_SAMPLE_ARRAY = {"values": [64, 34, 25, 12, 22, 11, 90]}

_SAMPLE_GRAPH = {
    "nodes": [0, 1, 2, 3, 4, 5],
    "edges": [[0, 1], [0, 2], [1, 3], [1, 4], [2, 4], [3, 5], [4, 5]],
    "source": 0,
}

_SAMPLE_WEIGHTED = {
    "nodes": [0, 1, 2, 3, 4, 5],
    "edges": [
        [0, 1, 7], [0, 2, 9], [0, 5, 14], [1, 2, 10], [1, 3, 15],
        [2, 3, 11], [2, 5, 2], [3, 4, 6], [4, 5, 9],
    ],
    "source": 0,
}


# ---------------------------------------------------------------------------
# THE REGISTRY
# ---------------------------------------------------------------------------
REGISTRY: Dict[str, AlgoInfo] = {

    "bubble_sort": AlgoInfo(
        key="bubble_sort", label="Bubble Sort", fn=_bubble, pseudocode=_bubble_pc,
        parse=_parse_array, make_state=_array_state, sample=_SAMPLE_ARRAY,
        tags=["sorting", "comparison"],
        complexity_best="O(n)", complexity_average="O(n²)", complexity_worst="O(n²)",
        complexity_space="O(1)", randomize=_random_array,
        description="Swaps adjacent out-of-order pairs; the largest element bubbles up each pass.",
    ),

    "insertion_sort": AlgoInfo(
        key="insertion_sort", label="Insertion Sort", fn=_insertion, pseudocode=_insertion_pc,
        parse=_parse_array, make_state=_array_state, sample=_SAMPLE_ARRAY,
        tags=["sorting", "comparison"],
        complexity_best="O(n)", complexity_average="O(n²)", complexity_worst="O(n²)",
        complexity_space="O(1)", randomize=_random_array,
        description="Grows a sorted prefix by walking each new key left into place.",
    ),

    "selection_sort": AlgoInfo(
        key="selection_sort", label="Selection Sort", fn=_selection, pseudocode=_selection_pc,
        parse=_parse_array, make_state=_array_state, sample=_SAMPLE_ARRAY,
        tags=["sorting", "comparison"],
        complexity_best="O(n²)", complexity_average="O(n²)", complexity_worst="O(n²)",
        complexity_space="O(1)", randomize=_random_array,
        description="Repeatedly selects the minimum of the unsorted suffix.",
    ),

    "merge_sort": AlgoInfo(
        key="merge_sort", label="Merge Sort", fn=_merge, pseudocode=_merge_pc,
        parse=_parse_array, make_state=_array_state, sample=_SAMPLE_ARRAY,
        tags=["sorting", "divide-and-conquer", "recursive"],
        complexity_best="O(n log n)", complexity_average="O(n log n)", complexity_worst="O(n log n)",
        complexity_space="O(n)", randomize=_random_array,
        description="Splits in halves, sorts each recursively, merges the sorted runs.",
    ),

    "quick_sort": AlgoInfo(
        key="quick_sort", label="Quick Sort", fn=_quick, pseudocode=_quick_pc,
        parse=_parse_array, make_state=_array_state, sample=_SAMPLE_ARRAY,
        tags=["sorting", "divide-and-conquer", "recursive"],
        complexity_best="O(n log n)", complexity_average="O(n log n)", complexity_worst="O(n²)",
        complexity_space="O(log n)", randomize=_random_array,
        description="Partitions around a pivot, then sorts both sides recursively.",
    ),

    "linear_search": AlgoInfo(
        key="linear_search", label="Linear Search", fn=_linear, pseudocode=_linear_pc,
        parse=_parse_search, make_state=_array_state,
        sample={"values": [64, 34, 25, 12, 22, 11, 90], "target": 22},
        tags=["searching"],
        complexity_best="O(1)", complexity_average="O(n)", complexity_worst="O(n)",
        complexity_space="O(1)", randomize=_random_search,
        description="Checks every element in order until it finds the target.",
    ),

    "binary_search": AlgoInfo(
        key="binary_search", label="Binary Search", fn=_binary, pseudocode=_binary_pc,
        parse=_parse_sorted_search, make_state=_array_state,
        sample={"values": [11, 12, 22, 25, 34, 64, 90], "target": 25},
        tags=["searching", "divide-and-conquer"],
        complexity_best="O(1)", complexity_average="O(log n)", complexity_worst="O(log n)",
        complexity_space="O(1)", randomize=_random_sorted_search,
        description="Halves a sorted range around its midpoint each step.",
    ),

    "bfs": AlgoInfo(
        key="bfs", label="Breadth-First Search", fn=_bfs, pseudocode=_bfs_pc,
        parse=_parse_graph, make_state=_graph_state, sample=_SAMPLE_GRAPH,
        tags=["graph", "traversal", "unweighted"],
        complexity_best="O(V + E)", complexity_average="O(V + E)", complexity_worst="O(V + E)",
        complexity_space="O(V)", randomize=_random_graph,
        description="Explores layer by layer; distances are hop counts.",
    ),

    "dfs": AlgoInfo(
        key="dfs", label="Depth-First Search", fn=_dfs, pseudocode=_dfs_pc,
        parse=_parse_graph, make_state=_graph_state, sample=_SAMPLE_GRAPH,
        tags=["graph", "traversal", "recursive"],
        complexity_best="O(V + E)", complexity_average="O(V + E)", complexity_worst="O(V + E)",
        complexity_space="O(V)", randomize=_random_graph,
        description="Dives as deep as possible before backtracking.",
    ),

    "dijkstra": AlgoInfo(
        key="dijkstra", label="Dijkstra's Algorithm", fn=_dijkstra, pseudocode=_dij_pc,
        parse=_parse_weighted_graph, make_state=_distance_state, sample=_SAMPLE_WEIGHTED,
        tags=["graph", "shortest-path", "weighted"],
        complexity_best="O((V + E) log V)", complexity_average="O((V + E) log V)", complexity_worst="O((V + E) log V)",
        complexity_space="O(V)", randomize=_random_weighted_graph,
        description="Greedily settles the closest node. Non-negative weights only.",
    ),

    "edit_distance": AlgoInfo(
        key="edit_distance", label="Edit Distance", fn=_edit, pseudocode=_edit_pc,
        parse=_parse_edit, make_state=_edit_state,
        sample={"source": "kitten", "target": "sitting"},
        tags=["dynamic-programming", "strings"],
        complexity_best="O(m · n)", complexity_average="O(m · n)", complexity_worst="O(m · n)",
        complexity_space="O(m · n)", randomize=_random_edit,
        description="Fills the Levenshtein table cell by cell.",
    ),

    "fibonacci_memo": AlgoInfo(
        key="fibonacci_memo", label="Fibonacci (memoised)", fn=_fib, pseudocode=_fib_pc,
        parse=_parse_fib, make_state=_fib_state, sample={"n": 8},
        tags=["dynamic-programming", "recursive"],
        complexity_best="O(n)", complexity_average="O(n)", complexity_worst="O(n)",
        complexity_space="O(n)", randomize=_random_fib,
        description="Top-down recursion that never computes the same fib(k) twice.",
    ),

    "kmp": AlgoInfo(
        key="kmp", label="Knuth–Morris–Pratt", fn=_kmp, pseudocode=_kmp_pc,
        parse=_parse_kmp, make_state=_kmp_state,
        sample={"text": "ABABDABACDABABCABAB", "pattern": "ABABCABAB"},
        tags=["strings", "pattern-matching"],
        complexity_best="O(n + m)", complexity_average="O(n + m)", complexity_worst="O(n + m)",
        complexity_space="O(m)", randomize=_random_kmp,
        description="Uses the prefix table to never re-read a text character.",
    ),
}


# ---------------------------------------------------------------------------
# Lookup helpers
# ---------------------------------------------------------------------------
def get_algorithm(key: str) -> Optional[AlgoInfo]:
    """Return AlgoInfo by key, or None."""
    return REGISTRY.get(key)


def require_algorithm(key: str) -> AlgoInfo:
    """Return AlgoInfo by key or raise UnknownAlgorithmError."""
    info = REGISTRY.get(key)
    if info is None:
        raise UnknownAlgorithmError(str(key))
    return info


def list_algorithms() -> List[AlgoInfo]:
    """Return all registered algorithms in insertion order."""
    return list(REGISTRY.values())


def algorithms_by_tag(tag: str) -> List[AlgoInfo]:
    """Filter registry by tag."""
    return [a for a in REGISTRY.values() if tag in a.tags]


def define(key: str, params: Optional[Dict[str, Any]] = None) -> Tuple[WorkingState, Iterator[Step]]:
    """Look up `key`, validate `params`, return (WorkingState, step source)."""
    return require_algorithm(key).define(params)


__all__ = [
    "AlgoInfo",
    "REGISTRY",
    "Step",
    "StepBuilder",
    "WorkingState",
    "get_algorithm",
    "require_algorithm",
    "list_algorithms",
    "algorithms_by_tag",
    "define",
]
