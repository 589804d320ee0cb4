"""
kmp.py — Knuth–Morris–Pratt String Search
==========================================
Two phases over one WorkingState:
  • "lps"    – build the longest-proper-prefix-suffix table
               (data["lps"][i], addressed as ("lps", i))
  • "search" – scan the text; every character comparison is a Step,
               and a full match is marked on its start index in the
               same Step that completes it.
"""

from typing import Iterator, List

from algorithms.step import Step, StepBuilder


PSEUDOCODE: List[str] = [
    "def kmp(text, pattern):",                           # 0
    "    lps ← prefix_table(pattern)",                   # 1
    "    i, j ← 0, 0",                                   # 2
    "    while i < len(text):",                          # 3
    "        if text[i] == pattern[j]: i++, j++",        # 4
    "        if j == len(pattern): report i - j",        # 5
    "            j ← lps[j-1]",                          # 6
    "        elif mismatch: j ← lps[j-1] or i++",        # 7
]


def kmp(text: str, pattern: str) -> Iterator[Step]:
    lps = yield from _prefix_table(pattern)

    i = j = 0
    n, m = len(text), len(pattern)
    found = 0
    while i < n:
        sb = StepBuilder()
        sb.phase = "search"
        sb.compare(("text", i), ("pattern", j))
        if text[i] == pattern[j]:
            sb.explanation = f"text[{i}] == pattern[{j}] ('{text[i]}'): advance both."
            sb.pseudocode_line = 4
            i += 1
            j += 1
            if j == m:
                found += 1
                sb.mark("match", i - j)
                sb.count("matches")
                sb.explanation += f" Full match at {i - j}."
                sb.pseudocode_line = 5
                j = lps[j - 1]
        elif j:
            sb.explanation = f"'{text[i]}' != '{pattern[j]}': fall back to j = lps[{j - 1}] = {lps[j - 1]}."
            sb.pseudocode_line = 7
            j = lps[j - 1]
        else:
            sb.explanation = f"'{text[i]}' != '{pattern[0]}' at j = 0: move to the next character."
            sb.pseudocode_line = 7
            i += 1
        sb.point("i", i)
        sb.point("j", j)
        yield sb.build()

    sb = StepBuilder()
    sb.phase = "done"
    sb.point("i", None)
    sb.point("j", None)
    sb.explanation = f"Text scanned: {found} match(es) of '{pattern}'."
    yield sb.build(is_final=True)


def _prefix_table(pattern: str):
    m = len(pattern)
    lps = [0] * m
    length, i = 0, 1
    while i < m:
        sb = StepBuilder()
        sb.phase = "lps"
        sb.compare(("pattern", i), ("pattern", length))
        sb.pseudocode_line = 1
        if pattern[i] == pattern[length]:
            length += 1
            lps[i] = length
            sb.write(("lps", i), length)
            sb.explanation = f"pattern[{i}] == pattern[{length - 1}]: lps[{i}] = {length}."
            i += 1
        elif length:
            sb.explanation = f"Mismatch at {i}: shrink the candidate to lps[{length - 1}] = {lps[length - 1]}."
            length = lps[length - 1]
        else:
            sb.write(("lps", i), 0)
            sb.explanation = f"No border ends at {i}: lps[{i}] = 0."
            i += 1
        sb.point("len", length)
        yield sb.build()
    return lps
