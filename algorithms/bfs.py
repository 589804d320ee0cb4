"""
bfs.py — Breadth-First Search
==============================
Generator-based BFS over an adjacency mapping.  WorkingState.data maps
node → hop distance from the source (None = not reached yet).

Yields a Step at every meaningful event:
  1. Initialise  →  source at distance 0, in the queue
  2. Dequeue a node  →  mark it VISITED
  3. Discover an unseen neighbour  →  write its distance, mark FRONTIER
  4. Queue empty  →  done

Pseudocode lines are 0-indexed and match PSEUDOCODE.
"""

from collections import deque
from typing import Dict, Hashable, Iterator, List, Tuple

from algorithms.step import Step, StepBuilder


PSEUDOCODE: List[str] = [
    "def BFS(graph, source):",                  # 0
    "    queue ← [source]",                     # 1
    "    seen ← {source}",                      # 2
    "    while queue is not empty:",             # 3
    "        node ← queue.dequeue()",           # 4
    "        for neighbour in adj(node):",      # 5
    "            if neighbour not in seen:",     # 6
    "                seen.add(neighbour)",      # 7
    "                queue.enqueue(neighbour)", # 8
]


def bfs(
    nodes: List[Hashable],
    adjacency: Dict[Hashable, List[Tuple[Hashable, float]]],
    source: Hashable,
    directed: bool = False,
) -> Iterator[Step]:
    queue = deque([source])
    seen  = {source}
    dist  = {source: 0}

    # --- initialisation step ---
    sb = StepBuilder()
    sb.phase = "explore"
    sb.write(source, 0)
    sb.mark("frontier", source)
    sb.point("queue", list(queue))
    sb.pseudocode_line = 1
    sb.explanation = (
        f"Initialise: source {source!r} goes into the queue at distance 0. "
        f"Edges are {'one-way' if directed else 'two-way'}. "
        f"BFS explores layer by layer from here."
    )
    yield sb.build()

    # --- main loop ---
    while queue:
        node = queue.popleft()
        sb = StepBuilder()
        sb.look(node)
        sb.unmark("frontier", node)
        sb.mark("visited", node)
        sb.point("current", node)
        sb.point("queue", list(queue))
        sb.count("nodes_visited")
        sb.pseudocode_line = 4
        sb.explanation = f"Dequeue {node!r} (distance {dist[node]}) and visit it."
        yield sb.build()

        for nbr, _weight in adjacency[node]:
            if nbr in seen:
                continue
            seen.add(nbr)
            dist[nbr] = dist[node] + 1
            queue.append(nbr)

            sb = StepBuilder()
            sb.compare(node, nbr)
            sb.write(nbr, dist[nbr])
            sb.mark("frontier", nbr)
            sb.point("current", node)
            sb.point("queue", list(queue))
            sb.pseudocode_line = 8
            sb.explanation = f"Edge {node!r}→{nbr!r}: {nbr!r} is new, enqueue it at distance {dist[nbr]}."
            yield sb.build()

    # --- done ---
    unreached = [n for n in nodes if n not in seen]
    sb = StepBuilder()
    sb.phase = "done"
    sb.point("current", None)
    sb.point("queue", [])
    sb.pseudocode_line = 3
    if unreached:
        sb.explanation = f"Queue empty. {len(unreached)} node(s) unreachable from {source!r}."
    else:
        sb.explanation = f"Queue empty. Every node was reached from {source!r}."
    yield sb.build(is_final=True)
