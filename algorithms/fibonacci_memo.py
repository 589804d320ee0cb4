"""
fibonacci_memo.py — Fibonacci with Memoisation
===============================================
Top-down recursion whose calls are generators; each call's value comes
back through `yield from`.  WorkingState.data is the memo table
(k → fib(k)) and the "calls" pointer is the live call stack.
"""

from typing import Dict, Iterator, List

from algorithms.step import Step, StepBuilder


PSEUDOCODE: List[str] = [
    "def fib(k):",                                   # 0
    "    if k in memo: return memo[k]",              # 1
    "    if k <= 1: return k",                       # 2
    "    memo[k] ← fib(k-1) + fib(k-2)",             # 3
    "    return memo[k]",                            # 4
]


def fibonacci_memo(n: int) -> Iterator[Step]:
    memo: Dict[int, int] = {}
    calls: List[int] = []
    result = yield from _fib(n, memo, calls)

    sb = StepBuilder()
    sb.phase = "done"
    sb.point("calls", [])
    sb.point("result", result)
    sb.explanation = f"fib({n}) = {result}."
    yield sb.build(is_final=True)


def _fib(k: int, memo: Dict[int, int], calls: List[int]):
    calls.append(k)
    sb = StepBuilder()
    sb.phase = "recurse"
    sb.look(k)
    sb.point("calls", list(calls))
    sb.count("calls")

    if k in memo:
        sb.count("cache_hits")
        sb.pseudocode_line = 1
        sb.explanation = f"fib({k}) is memoised: {memo[k]}."
        calls.pop()
        yield sb.build()
        return memo[k]
    if k <= 1:
        sb.pseudocode_line = 2
        sb.explanation = f"fib({k}) is a base case: {k}."
        calls.pop()
        yield sb.build()
        return k

    sb.pseudocode_line = 3
    sb.explanation = f"fib({k}) needs fib({k - 1}) and fib({k - 2})."
    yield sb.build()

    a = yield from _fib(k - 1, memo, calls)
    b = yield from _fib(k - 2, memo, calls)
    memo[k] = a + b
    calls.pop()

    sb = StepBuilder()
    sb.look(k)
    sb.write(k, memo[k])
    sb.mark("memoised", k)
    sb.point("calls", list(calls))
    sb.pseudocode_line = 4
    sb.explanation = f"fib({k}) = {a} + {b} = {memo[k]}; store it in the memo."
    yield sb.build()
    return memo[k]
