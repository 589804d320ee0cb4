"""
edit_distance.py — Levenshtein Edit Distance
=============================================
Bottom-up DP.  WorkingState.data is the (m+1) × (n+1) table; cells are
addressed with (row, col) key paths.  The base row and column are
filled in one Step, then every interior cell gets its own Step.
"""

from typing import Iterator, List

from algorithms.step import Step, StepBuilder


PSEUDOCODE: List[str] = [
    "def edit_distance(s, t):",                                  # 0
    "    dp[i][0] ← i;  dp[0][j] ← j",                           # 1
    "    for i in 1 .. m:",                                      # 2
    "        for j in 1 .. n:",                                  # 3
    "            if s[i-1] == t[j-1]: dp[i][j] ← dp[i-1][j-1]",  # 4
    "            else: dp[i][j] ← 1 + min(del, ins, sub)",       # 5
    "    return dp[m][n]",                                       # 6
]


def empty_table(source: str, target: str) -> List[List[None]]:
    return [[None] * (len(target) + 1) for _ in range(len(source) + 1)]


def edit_distance(source: str, target: str) -> Iterator[Step]:
    m, n = len(source), len(target)
    dp = [[0] * (n + 1) for _ in range(m + 1)]

    sb = StepBuilder()
    sb.phase = "base cases"
    for i in range(m + 1):
        dp[i][0] = i
        sb.write((i, 0), i)
    for j in range(1, n + 1):
        dp[0][j] = j
        sb.write((0, j), j)
    sb.pseudocode_line = 1
    sb.explanation = "Turning a prefix into the empty string costs its length."
    yield sb.build()

    for i in range(1, m + 1):
        for j in range(1, n + 1):
            sb = StepBuilder()
            sb.phase = f"row {i}"
            sb.look((i, j))
            sb.point("i", i)
            sb.point("j", j)
            sb.count("comparisons")
            if source[i - 1] == target[j - 1]:
                dp[i][j] = dp[i - 1][j - 1]
                sb.look((i - 1, j - 1))
                sb.pseudocode_line = 4
                sb.explanation = f"'{source[i - 1]}' == '{target[j - 1]}': copy the diagonal ({dp[i][j]})."
            else:
                dp[i][j] = 1 + min(dp[i - 1][j], dp[i][j - 1], dp[i - 1][j - 1])
                sb.look((i - 1, j), (i, j - 1), (i - 1, j - 1))
                sb.pseudocode_line = 5
                sb.explanation = (
                    f"'{source[i - 1]}' != '{target[j - 1]}': 1 + min(delete {dp[i - 1][j]}, "
                    f"insert {dp[i][j - 1]}, substitute {dp[i - 1][j - 1]}) = {dp[i][j]}."
                )
            sb.write((i, j), dp[i][j])
            yield sb.build()

    sb = StepBuilder()
    sb.phase = "done"
    sb.look((m, n))
    sb.point("i", None)
    sb.point("j", None)
    sb.point("distance", dp[m][n])
    sb.pseudocode_line = 6
    sb.explanation = f"Edit distance between '{source}' and '{target}' is {dp[m][n]}."
    yield sb.build(is_final=True)
