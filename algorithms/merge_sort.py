"""
merge_sort.py — Merge Sort
===========================
Top-down merge sort.  The recursion lives in nested generators joined
with `yield from`, so the sequencer still sees one flat Step stream.

Yields a Step at:
  1. every split  (the "range" pointer shows the active sub-array)
  2. every write during a merge (with the comparison that chose it)
  3. the end      (everything marked sorted)
"""

from typing import Iterator, List

from algorithms.step import Step, StepBuilder


PSEUDOCODE: List[str] = [
    "def merge_sort(a, lo, hi):",                    # 0
    "    if lo >= hi: return",                       # 1
    "    mid ← (lo + hi) // 2",                      # 2
    "    merge_sort(a, lo, mid)",                    # 3
    "    merge_sort(a, mid+1, hi)",                  # 4
    "    merge(a, lo, mid, hi)",                     # 5
]


def merge_sort(values: List[int]) -> Iterator[Step]:
    arr = list(values)
    yield from _sort(arr, 0, len(arr) - 1, depth=0)

    sb = StepBuilder()
    sb.phase = "done"
    sb.point("range", None)
    sb.mark("sorted", *range(len(arr)))
    sb.explanation = "All runs merged: the array is sorted."
    yield sb.build(is_final=True)


def _sort(arr: List[int], lo: int, hi: int, depth: int) -> Iterator[Step]:
    if lo >= hi:
        return
    mid = (lo + hi) // 2

    sb = StepBuilder()
    sb.phase = "split"
    sb.look(*range(lo, hi + 1))
    sb.point("range", [lo, hi])
    sb.point("depth", depth)
    sb.pseudocode_line = 2
    sb.explanation = f"Split [{lo}..{hi}] into [{lo}..{mid}] and [{mid + 1}..{hi}]."
    yield sb.build()

    yield from _sort(arr, lo, mid, depth + 1)
    yield from _sort(arr, mid + 1, hi, depth + 1)
    yield from _merge(arr, lo, mid, hi, depth)


def _merge(arr: List[int], lo: int, mid: int, hi: int, depth: int) -> Iterator[Step]:
    left  = arr[lo:mid + 1]
    right = arr[mid + 1:hi + 1]
    i = j = 0
    k = lo

    while i < len(left) or j < len(right):
        sb = StepBuilder()
        sb.phase = "merge"
        sb.point("range", [lo, hi])
        sb.point("depth", depth)
        sb.pseudocode_line = 5
        if i < len(left) and j < len(right):
            sb.compare(lo + i, mid + 1 + j)
            if left[i] <= right[j]:
                value, i = left[i], i + 1
                sb.explanation = f"{value} <= {right[j]}: take from the left run."
            else:
                value, j = right[j], j + 1
                sb.explanation = f"{value} < {left[i]}: take from the right run."
        elif i < len(left):
            value, i = left[i], i + 1
            sb.explanation = f"Right run exhausted: copy {value}."
        else:
            value, j = right[j], j + 1
            sb.explanation = f"Left run exhausted: copy {value}."
        arr[k] = value
        sb.write(k, value)
        sb.look(k)
        yield sb.build()
        k += 1
