"""
bubble_sort.py — Bubble Sort
=============================
Yields one Step per adjacent comparison; a swap happens in the same
Step as the comparison that caused it, and the element that bubbles
into place is marked "sorted" by the pass's last comparison.

Stops early when a pass makes no swaps.
"""

from typing import Iterator, List

from algorithms.step import Step, StepBuilder


PSEUDOCODE: List[str] = [
    "def bubble_sort(a):",                           # 0
    "    for i in 0 .. n-2:",                        # 1
    "        for j in 0 .. n-i-2:",                  # 2
    "            if a[j] > a[j+1]:",                 # 3
    "                swap(a[j], a[j+1])",            # 4
    "        if no swaps this pass: break",          # 5
    "    return a",                                  # 6
]


def bubble_sort(values: List[int]) -> Iterator[Step]:
    arr = list(values)
    n   = len(arr)

    for i in range(n - 1):
        swapped = False
        for j in range(n - i - 1):
            sb = StepBuilder()
            sb.phase = f"pass {i + 1}"
            sb.compare(j, j + 1)
            if arr[j] > arr[j + 1]:
                arr[j], arr[j + 1] = arr[j + 1], arr[j]
                sb.swap(j, j + 1)
                sb.pseudocode_line = 4
                sb.explanation = f"{arr[j + 1]} > {arr[j]}: swap positions {j} and {j + 1}."
                swapped = True
            else:
                sb.pseudocode_line = 3
                sb.explanation = f"{arr[j]} <= {arr[j + 1]}: already in order."
            if j == n - i - 2:
                sb.mark("sorted", n - i - 1)
            yield sb.build()

        if not swapped:
            break

    sb = StepBuilder()
    sb.phase = "done"
    sb.mark("sorted", *range(n))
    sb.pseudocode_line = 6
    sb.explanation = "No more swaps needed: the array is sorted."
    yield sb.build(is_final=True)
