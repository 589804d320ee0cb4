"""
insertion_sort.py — Insertion Sort
===================================
Grows a sorted prefix.  Each Step either picks the next key or
compares it against its left neighbour, shifting it left (a swap) in
the same Step when it is smaller.
"""

from typing import Iterator, List

from algorithms.step import Step, StepBuilder


PSEUDOCODE: List[str] = [
    "def insertion_sort(a):",                        # 0
    "    for i in 1 .. n-1:",                        # 1
    "        key ← a[i]; j ← i - 1",                 # 2
    "        while j >= 0 and a[j] > key:",          # 3
    "            a[j+1] ← a[j]; j ← j - 1",          # 4
    "        a[j+1] ← key",                          # 5
]


def insertion_sort(values: List[int]) -> Iterator[Step]:
    arr = list(values)
    n   = len(arr)

    for i in range(1, n):
        key = arr[i]
        sb = StepBuilder()
        sb.phase = f"insert a[{i}]"
        sb.look(i)
        sb.point("key", key)
        sb.mark("prefix", *range(i))
        sb.pseudocode_line = 2
        sb.explanation = f"Take key {key} from position {i} and walk it left."
        yield sb.build()

        j = i - 1
        while j >= 0:
            sb = StepBuilder()
            sb.compare(j, j + 1)
            if arr[j] > key:
                arr[j], arr[j + 1] = arr[j + 1], arr[j]
                sb.swap(j, j + 1)
                sb.pseudocode_line = 4
                sb.explanation = f"{arr[j + 1]} > {key}: shift it right."
                yield sb.build()
                j -= 1
            else:
                sb.pseudocode_line = 5
                sb.explanation = f"{arr[j]} <= {key}: key settles at position {j + 1}."
                yield sb.build()
                break

    sb = StepBuilder()
    sb.phase = "done"
    sb.clear("prefix")
    sb.point("key", None)
    sb.mark("sorted", *range(n))
    sb.explanation = "Every key has been inserted: the array is sorted."
    yield sb.build(is_final=True)
