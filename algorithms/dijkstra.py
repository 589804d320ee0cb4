"""
dijkstra.py — Dijkstra's Algorithm
====================================
Generator-based Dijkstra with a binary heap.  WorkingState.data maps
node → best known distance (inf until reached); the "previous" pointer
holds the shortest-path tree.

Yields a Step at:
  1. Initialise       →  source distance 0
  2. Settle a node    →  mark VISITED (stale heap entries are skipped silently)
  3. Examine an edge  →  relaxation (distance write in the same Step) or no-op
  4. Heap empty       →  done
"""

import heapq
import math
from typing import Dict, Hashable, Iterator, List, Optional, Tuple

from algorithms.step import Step, StepBuilder


PSEUDOCODE: List[str] = [
    "def dijkstra(graph, source):",             # 0
    "    dist[*] ← ∞; dist[source] ← 0",         # 1
    "    pq ← [(0, source)]",                   # 2
    "    while pq is not empty:",                # 3
    "        d, u ← pq.pop_min()",              # 4
    "        if u visited: continue",           # 5
    "        visited.add(u)",                   # 6
    "        for (v, w) in adj(u):",            # 7
    "            if d + w < dist[v]:",           # 8
    "                dist[v] ← d + w",          # 9
    "                prev[v] ← u; pq.push(v)",  # 10
]


def dijkstra(
    nodes: List[Hashable],
    adjacency: Dict[Hashable, List[Tuple[Hashable, float]]],
    source: Hashable,
    directed: bool = False,
) -> Iterator[Step]:
    dist:     Dict[Hashable, float]              = {n: math.inf for n in nodes}
    previous: Dict[Hashable, Optional[Hashable]] = {}
    visited = set()
    order   = {n: i for i, n in enumerate(nodes)}   # heap tie-break without comparing ids
    pq: List[Tuple[float, int, Hashable]] = [(0, order[source], source)]
    dist[source] = 0

    sb = StepBuilder()
    sb.phase = "relax"
    sb.write(source, 0)
    sb.mark("frontier", source)
    sb.point("queue", [[source, 0]])
    sb.pseudocode_line = 1
    sb.explanation = (
        f"Initialise: every distance is ∞ except the source {source!r}, which is 0"
        f"{' (directed graph)' if directed else ''}."
    )
    yield sb.build()

    while pq:
        d, _, u = heapq.heappop(pq)
        if u in visited:
            continue
        visited.add(u)

        sb = StepBuilder()
        sb.look(u)
        sb.unmark("frontier", u)
        sb.mark("visited", u)
        sb.point("current", u)
        sb.point("queue", _queue_view(pq, visited))
        sb.count("nodes_visited")
        sb.pseudocode_line = 6
        sb.explanation = f"Settle {u!r}: no shorter path than {d:g} can exist."
        yield sb.build()

        for v, w in adjacency[u]:
            if v in visited:
                continue
            sb = StepBuilder()
            sb.compare(u, v)
            sb.point("current", u)
            sb.count("edges_relaxed")
            candidate = d + w
            if candidate < dist[v]:
                old = dist[v]
                dist[v] = candidate
                previous[v] = u
                heapq.heappush(pq, (candidate, order[v], v))
                sb.write(v, candidate)
                sb.mark("frontier", v)
                sb.point("previous", dict(previous))
                sb.pseudocode_line = 9
                sb.explanation = f"Relax {u!r}→{v!r}: {d:g} + {w:g} = {candidate:g} beats {old:g}."
            else:
                sb.pseudocode_line = 8
                sb.explanation = f"Edge {u!r}→{v!r}: {d:g} + {w:g} does not beat {dist[v]:g}."
            sb.point("queue", _queue_view(pq, visited))
            yield sb.build()

    unreached = [n for n in nodes if math.isinf(dist[n])]
    sb = StepBuilder()
    sb.phase = "done"
    sb.point("current", None)
    sb.point("queue", [])
    sb.pseudocode_line = 3
    sb.explanation = (
        f"Queue empty. Shortest distances from {source!r} are final"
        + (f"; {len(unreached)} node(s) unreachable." if unreached else ".")
    )
    yield sb.build(is_final=True)


def _queue_view(pq, visited) -> List[list]:
    return [[node, d] for d, _, node in sorted(pq) if node not in visited]
