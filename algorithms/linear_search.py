"""
linear_search.py — Linear Search
=================================
One Step per inspected index; the hit is marked "found" in the same Step
that compares it.
"""

from typing import Iterator, List

from algorithms.step import Step, StepBuilder


PSEUDOCODE: List[str] = [
    "def linear_search(a, target):",                 # 0
    "    for i in 0 .. n-1:",                        # 1
    "        if a[i] == target: return i",           # 2
    "    return NOT FOUND",                          # 3
]


def linear_search(values: List[int], target: int) -> Iterator[Step]:
    for i, value in enumerate(values):
        sb = StepBuilder()
        sb.phase = "scan"
        sb.compare(i)
        sb.point("current", i)
        sb.mark("checked", i)
        sb.pseudocode_line = 2
        if value == target:
            sb.mark("found", i)
            sb.phase = "done"
            sb.explanation = f"a[{i}] = {value} matches the target."
            yield sb.build(is_final=True)
            return
        sb.explanation = f"a[{i}] = {value} is not {target}; keep scanning."
        yield sb.build()

    sb = StepBuilder()
    sb.phase = "done"
    sb.point("current", None)
    sb.pseudocode_line = 3
    sb.explanation = f"Reached the end: {target} is not in the array."
    yield sb.build(is_final=True)
