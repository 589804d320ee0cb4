"""
inputs.py — Input Validation
=============================
Every parse_* function takes the raw params dict a UI sends and either
returns clean generator kwargs or raises InvalidInputError.  Nothing
here mints a token or touches state, so a rejected start() leaves the
controller exactly as it was.

Accepted shapes:
    values  : [5, 3, 1] or "5, 3, 1" or "5 3 1"
    target  : 7 or "7"
    graph   : {"nodes": [0, 1, 2], "edges": [[0, 1], [1, 2, 4], {"from": 0, "to": 2, "weight": 9}],
               "source": 0, "directed": false}
    flags   : true / false, 0 / 1, "true" / "false" / "yes" / "no"
    strings : {"text": "...", "pattern": "..."}
"""

import math
import random
import re
from typing import Any, Dict, Hashable, List, Mapping, Tuple

from engine.errors import InvalidInputError

MAX_VALUES  = 32
VALUE_RANGE = (-999, 999)
MAX_NODES   = 40
MAX_TEXT    = 64


def _require(params: Mapping[str, Any], name: str) -> Any:
    if not isinstance(params, Mapping):
        raise InvalidInputError(f"input must be an object, got {type(params).__name__}")
    if name not in params or params[name] is None or params[name] == "":
        raise InvalidInputError(f"'{name}' is required", field=name)
    return params[name]


def to_int(raw: Any, name: str) -> int:
    if isinstance(raw, bool):
        raise InvalidInputError(f"'{name}' must be an integer, got {raw!r}", field=name)
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float) and raw.is_integer():
        return int(raw)
    if isinstance(raw, str):
        try:
            return int(raw.strip())
        except ValueError:
            pass
    raise InvalidInputError(f"'{name}' must be an integer, got {raw!r}", field=name)


def bounded_int(params: Mapping[str, Any], name: str, lo: int, hi: int) -> int:
    value = to_int(_require(params, name), name)
    if not lo <= value <= hi:
        raise InvalidInputError(f"'{name}' must be between {lo} and {hi}, got {value}", field=name)
    return value


def int_list(
    params: Mapping[str, Any],
    name: str = "values",
    min_len: int = 1,
    max_len: int = MAX_VALUES,
    value_range: Tuple[int, int] = VALUE_RANGE,
) -> List[int]:
    raw = _require(params, name)
    if isinstance(raw, str):
        raw = [p for p in re.split(r"[,\s]+", raw.strip()) if p]
    if not isinstance(raw, (list, tuple)):
        raise InvalidInputError(f"'{name}' must be a list of integers", field=name)
    values = [to_int(v, name) for v in raw]
    if not min_len <= len(values) <= max_len:
        raise InvalidInputError(
            f"'{name}' must hold between {min_len} and {max_len} numbers, got {len(values)}",
            field=name,
        )
    lo, hi = value_range
    for v in values:
        if not lo <= v <= hi:
            raise InvalidInputError(f"'{name}' values must be between {lo} and {hi}, got {v}", field=name)
    return values


def text(params: Mapping[str, Any], name: str, max_len: int = MAX_TEXT, allow_empty: bool = False) -> str:
    raw = params.get(name, "") if isinstance(params, Mapping) else None
    if raw is None:
        raw = ""
    if not isinstance(raw, str):
        raise InvalidInputError(f"'{name}' must be a string", field=name)
    if not raw and not allow_empty:
        raise InvalidInputError(f"'{name}' is required", field=name)
    if len(raw) > max_len:
        raise InvalidInputError(f"'{name}' is limited to {max_len} characters", field=name)
    return raw


# ---------------------------------------------------------------------------
# Graph input
# ---------------------------------------------------------------------------
Adjacency = Dict[Hashable, List[Tuple[Hashable, float]]]


def _node_id(raw: Any, field: str) -> Hashable:
    if isinstance(raw, bool) or not isinstance(raw, (int, str)):
        raise InvalidInputError(f"node ids must be integers or strings, got {raw!r}", field=field)
    return raw


_TRUE  = ("true", "yes", "on", "1")
_FALSE = ("false", "no", "off", "0", "")


def flag(params: Mapping[str, Any], name: str, default: bool = False) -> bool:
    """Boolean switch; accepts JSON booleans, 0 / 1 and the usual strings."""
    raw = params.get(name, default)
    if raw is None:
        return default
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, int) and raw in (0, 1):
        return bool(raw)
    if isinstance(raw, str) and raw.strip().lower() in _TRUE + _FALSE:
        return raw.strip().lower() in _TRUE
    raise InvalidInputError(f"'{name}' must be true or false, got {raw!r}", field=name)


def graph(params: Mapping[str, Any], allow_negative: bool = True) -> Dict[str, Any]:
    """
    Returns {"nodes": [...], "adjacency": {node: [(nbr, weight), …]},
    "source": node, "directed": bool}.  Undirected unless params["directed"]
    is true.
    """
    nodes_raw = _require(params, "nodes")
    if not isinstance(nodes_raw, (list, tuple)) or not nodes_raw:
        raise InvalidInputError("'nodes' must be a non-empty list", field="nodes")
    nodes = [_node_id(n, "nodes") for n in nodes_raw]
    if len(set(nodes)) != len(nodes):
        raise InvalidInputError("'nodes' contains duplicates", field="nodes")
    if len(nodes) > MAX_NODES:
        raise InvalidInputError(f"at most {MAX_NODES} nodes are supported", field="nodes")

    edges_raw = params.get("edges")
    if edges_raw in (None, ""):
        edges_raw = []
    if not isinstance(edges_raw, (list, tuple)):
        raise InvalidInputError("'edges' must be a list", field="edges")

    directed = flag(params, "directed")
    adjacency: Adjacency = {n: [] for n in nodes}
    for edge in edges_raw:
        u, v, w = _edge(edge)
        if u not in adjacency or v not in adjacency:
            raise InvalidInputError(f"edge {u!r}-{v!r} references an unknown node", field="edges")
        if w < 0 and not allow_negative:
            raise InvalidInputError(f"negative weight on edge {u!r}-{v!r}", field="edges")
        adjacency[u].append((v, w))
        if not directed:
            adjacency[v].append((u, w))

    source = params.get("source")
    if source in (None, ""):
        source = nodes[0]
    source = _node_id(source, "source")
    if isinstance(source, str) and source.strip().lstrip("-").isdigit() and source not in adjacency:
        source = int(source)
    if source not in adjacency:
        raise InvalidInputError(f"source {source!r} is not a node of the graph", field="source")

    return {"nodes": nodes, "adjacency": adjacency, "source": source, "directed": directed}


def _edge(edge: Any) -> Tuple[Hashable, Hashable, float]:
    if isinstance(edge, Mapping):
        u, v, w = edge.get("from"), edge.get("to"), edge.get("weight", 1)
    elif isinstance(edge, (list, tuple)) and len(edge) in (2, 3):
        u, v = edge[0], edge[1]
        w = edge[2] if len(edge) == 3 else 1
    else:
        raise InvalidInputError(f"malformed edge {edge!r}", field="edges")
    if isinstance(w, bool) or not isinstance(w, (int, float)) or not math.isfinite(w):
        raise InvalidInputError(f"edge weight must be a finite number, got {w!r}", field="edges")
    return _node_id(u, "edges"), _node_id(v, "edges"), w


def graph_context(inputs: Dict[str, Any]) -> Dict[str, Any]:
    """
    Static description of the graph for renderers.  Undirected graphs list
    each edge once; directed graphs keep every arc, including u→v / v→u pairs.
    """
    directed = inputs.get("directed", False)
    seen = set()
    edges = []
    for u, nbrs in inputs["adjacency"].items():
        for v, w in nbrs:
            if not directed:
                if (v, u) in seen:
                    continue
                seen.add((u, v))
            edges.append([u, v, w])
    return {
        "nodes":    list(inputs["nodes"]),
        "edges":    edges,
        "source":   inputs["source"],
        "directed": directed,
    }


# ---------------------------------------------------------------------------
# Random inputs (seeded, so a seed always reproduces the same sample)
# ---------------------------------------------------------------------------
def random_values(rng: random.Random, size: int = 10, lo: int = 1, hi: int = 99) -> List[int]:
    return [rng.randint(lo, hi) for _ in range(size)]


def random_graph(
    rng: random.Random,
    num_nodes: int = 7,
    edge_probability: float = 0.35,
    weighted: bool = False,
) -> Dict[str, Any]:
    """
    Connected undirected graph: a random spanning tree first, then extra
    edges with `edge_probability`.
    """
    nodes = list(range(num_nodes))
    pairs = set()
    for v in nodes[1:]:
        pairs.add((rng.randrange(v), v))
    for u in nodes:
        for v in nodes[u + 1:]:
            if rng.random() < edge_probability:
                pairs.add((u, v))
    edges = [
        [u, v, rng.randint(1, 20)] if weighted else [u, v]
        for u, v in sorted(pairs)
    ]
    return {"nodes": nodes, "edges": edges, "source": 0}


def random_word(rng: random.Random, size: int, alphabet: str = "ABCD") -> str:
    return "".join(rng.choice(alphabet) for _ in range(size))
