"""
dfs.py — Depth-First Search
=============================
Recursive DFS written as nested generators: each recursive visit is a
`yield from`, so the call structure of the algorithm never becomes
recursion in the playback loop.  WorkingState.data maps node → discovery
order (None = undiscovered); the "stack" pointer mirrors the call stack.

Yields a Step at:
  1. Enter a node     →  DISCOVERED, pushed on the stack
  2. Examine an edge  →  tree edge or already seen
  3. Leave a node     →  FINISHED, popped off the stack
"""

from typing import Dict, Hashable, Iterator, List, Set, Tuple

from algorithms.step import Step, StepBuilder


PSEUDOCODE: List[str] = [
    "def DFS(node):",                           # 0
    "    visited.add(node)",                    # 1
    "    for neighbour in adj(node):",          # 2
    "        if neighbour not in visited:",      # 3
    "            DFS(neighbour)",               # 4
    "    finish(node)",                         # 5
]


def dfs(
    nodes: List[Hashable],
    adjacency: Dict[Hashable, List[Tuple[Hashable, float]]],
    source: Hashable,
    directed: bool = False,
) -> Iterator[Step]:
    visited: Set[Hashable] = set()
    stack:   List[Hashable] = []

    yield from _visit(adjacency, source, visited, stack)

    sb = StepBuilder()
    sb.phase = "done"
    sb.point("stack", [])
    sb.point("current", None)
    sb.explanation = (
        f"DFS from {source!r} finished; {len(visited)} of {len(nodes)} node(s) reached"
        f"{' along directed edges' if directed else ''}."
    )
    yield sb.build(is_final=True)


def _visit(adjacency, node, visited, stack) -> Iterator[Step]:
    visited.add(node)
    stack.append(node)

    sb = StepBuilder()
    sb.phase = "explore"
    sb.look(node)
    sb.write(node, len(visited))
    sb.mark("visited", node)
    sb.point("current", node)
    sb.point("stack", list(stack))
    sb.count("nodes_visited")
    sb.pseudocode_line = 1
    sb.explanation = f"Enter {node!r} (discovery #{len(visited)}). DFS dives before it backtracks."
    yield sb.build()

    for nbr, _weight in adjacency[node]:
        sb = StepBuilder()
        sb.compare(node, nbr)
        sb.point("current", node)
        sb.point("stack", list(stack))
        sb.count("edges_examined")
        if nbr in visited:
            sb.pseudocode_line = 3
            sb.explanation = f"Edge {node!r}→{nbr!r}: {nbr!r} already visited, skip."
            yield sb.build()
            continue
        sb.pseudocode_line = 4
        sb.explanation = f"Edge {node!r}→{nbr!r}: {nbr!r} is new, descend."
        yield sb.build()
        yield from _visit(adjacency, nbr, visited, stack)

    stack.pop()
    sb = StepBuilder()
    sb.look(node)
    sb.mark("finished", node)
    sb.point("current", stack[-1] if stack else None)
    sb.point("stack", list(stack))
    sb.pseudocode_line = 5
    sb.explanation = f"All neighbours of {node!r} explored: backtrack."
    yield sb.build()
