"""
quick_sort.py — Quick Sort (Lomuto partition)
==============================================
The partition generator returns the pivot's final index through
`yield from`, which is how the recursive structure composes into one
flat Step stream.  Placing the pivot and marking it sorted is a single
Step.
"""

from typing import Iterator, List

from algorithms.step import Step, StepBuilder


PSEUDOCODE: List[str] = [
    "def quick_sort(a, lo, hi):",                    # 0
    "    if lo < hi:",                               # 1
    "        pivot ← a[hi]; i ← lo - 1",             # 2
    "        for j in lo .. hi-1:",                  # 3
    "            if a[j] < pivot:",                  # 4
    "                i ← i + 1; swap(a[i], a[j])",   # 5
    "        swap(a[i+1], a[hi])",                   # 6
    "        quick_sort(a, lo, i)",                  # 7
    "        quick_sort(a, i+2, hi)",                # 8
]


def quick_sort(values: List[int]) -> Iterator[Step]:
    arr = list(values)
    yield from _quick(arr, 0, len(arr) - 1)

    sb = StepBuilder()
    sb.phase = "done"
    sb.point("pivot", None)
    sb.point("range", None)
    sb.mark("sorted", *range(len(arr)))
    sb.explanation = "Every pivot is in place: the array is sorted."
    yield sb.build(is_final=True)


def _quick(arr: List[int], lo: int, hi: int) -> Iterator[Step]:
    if lo < hi:
        p = yield from _partition(arr, lo, hi)
        yield from _quick(arr, lo, p - 1)
        yield from _quick(arr, p + 1, hi)
    elif lo == hi:
        sb = StepBuilder()
        sb.look(lo)
        sb.mark("sorted", lo)
        sb.pseudocode_line = 1
        sb.explanation = f"Single element at {lo} is trivially sorted."
        yield sb.build()


def _partition(arr: List[int], lo: int, hi: int):
    pivot = arr[hi]
    i = lo - 1

    for j in range(lo, hi):
        sb = StepBuilder()
        sb.phase = "partition"
        sb.point("pivot", hi)
        sb.point("range", [lo, hi])
        sb.compare(j, hi)
        if arr[j] < pivot:
            i += 1
            if i != j:
                arr[i], arr[j] = arr[j], arr[i]
                sb.swap(i, j)
            sb.pseudocode_line = 5
            sb.explanation = f"{arr[i]} < pivot {pivot}: move it into the low side at {i}."
        else:
            sb.pseudocode_line = 4
            sb.explanation = f"{arr[j]} >= pivot {pivot}: leave it on the high side."
        yield sb.build()

    p = i + 1
    sb = StepBuilder()
    sb.phase = "partition"
    sb.point("pivot", p)
    sb.point("range", [lo, hi])
    if p != hi:
        arr[p], arr[hi] = arr[hi], arr[p]
        sb.swap(p, hi)
    else:
        sb.look(p)
    sb.mark("sorted", p)
    sb.pseudocode_line = 6
    sb.explanation = f"Pivot {pivot} lands at its final position {p}."
    yield sb.build()
    return p
