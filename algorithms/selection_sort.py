"""
selection_sort.py — Selection Sort
===================================
Scans the unsorted suffix for its minimum (one Step per comparison,
the running minimum lives in the "min" pointer), then swaps it into
place and marks it sorted in a single Step.
"""

from typing import Iterator, List

from algorithms.step import Step, StepBuilder


PSEUDOCODE: List[str] = [
    "def selection_sort(a):",                        # 0
    "    for i in 0 .. n-2:",                        # 1
    "        m ← i",                                 # 2
    "        for j in i+1 .. n-1:",                  # 3
    "            if a[j] < a[m]: m ← j",             # 4
    "        swap(a[i], a[m])",                      # 5
]


def selection_sort(values: List[int]) -> Iterator[Step]:
    arr = list(values)
    n   = len(arr)

    for i in range(n - 1):
        m = i
        for j in range(i + 1, n):
            sb = StepBuilder()
            sb.phase = f"select position {i}"
            sb.compare(j, m)
            sb.pseudocode_line = 4
            if arr[j] < arr[m]:
                sb.explanation = f"{arr[j]} < {arr[m]}: new minimum at {j}."
                m = j
            else:
                sb.explanation = f"{arr[j]} >= {arr[m]}: minimum stays at {m}."
            sb.point("min", m)
            yield sb.build()

        sb = StepBuilder()
        sb.pseudocode_line = 5
        if m != i:
            arr[i], arr[m] = arr[m], arr[i]
            sb.swap(i, m)
            sb.explanation = f"Swap minimum {arr[i]} into position {i}."
        else:
            sb.look(i)
            sb.explanation = f"{arr[i]} is already the minimum of the suffix."
        sb.mark("sorted", i)
        yield sb.build()

    sb = StepBuilder()
    sb.phase = "done"
    sb.point("min", None)
    sb.mark("sorted", *range(n))
    sb.explanation = "The array is sorted."
    yield sb.build(is_final=True)
