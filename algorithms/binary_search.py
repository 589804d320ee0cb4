"""
binary_search.py — Binary Search
=================================
Works on the sorted copy of the input.  Each Step compares `mid` and, in
the same Step, narrows left / right (or marks the hit as "found"), so a
pause can never land between the comparison and its consequence.
"""

from typing import Iterator, List

from algorithms.step import Step, StepBuilder


PSEUDOCODE: List[str] = [
    "def binary_search(a, target):",                 # 0
    "    lo, hi ← 0, n - 1",                         # 1
    "    while lo <= hi:",                           # 2
    "        mid ← (lo + hi) // 2",                  # 3
    "        if a[mid] == target: return mid",       # 4
    "        if a[mid] < target: lo ← mid + 1",      # 5
    "        else: hi ← mid - 1",                    # 6
    "    return NOT FOUND",                          # 7
]


def binary_search(values: List[int], target: int) -> Iterator[Step]:
    lo, hi = 0, len(values) - 1

    sb = StepBuilder()
    sb.phase = "search"
    sb.point("left", lo)
    sb.point("right", hi)
    sb.pseudocode_line = 1
    sb.explanation = f"Search for {target} in [{lo}..{hi}]."
    yield sb.build()

    while lo <= hi:
        mid = (lo + hi) // 2
        sb = StepBuilder()
        sb.compare(mid)
        sb.point("mid", mid)
        if values[mid] == target:
            sb.mark("found", mid)
            sb.phase = "done"
            sb.pseudocode_line = 4
            sb.explanation = f"a[{mid}] = {target}: found."
            yield sb.build(is_final=True)
            return
        if values[mid] < target:
            sb.mark("eliminated", *range(lo, mid + 1))
            lo = mid + 1
            sb.point("left", lo)
            sb.pseudocode_line = 5
            sb.explanation = f"a[{mid}] = {values[mid]} < {target}: discard the left half."
        else:
            sb.mark("eliminated", *range(mid, hi + 1))
            hi = mid - 1
            sb.point("right", hi)
            sb.pseudocode_line = 6
            sb.explanation = f"a[{mid}] = {values[mid]} > {target}: discard the right half."
        yield sb.build()

    sb = StepBuilder()
    sb.phase = "done"
    sb.point("mid", None)
    sb.pseudocode_line = 7
    sb.explanation = f"The range is empty: {target} is not in the array."
    yield sb.build(is_final=True)
