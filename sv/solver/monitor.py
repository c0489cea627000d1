# -*- coding: utf-8 -*-
# sv/solver/monitor.py

"""
Output supervision for solver runs: a fixed-size tail for postmortems and a
case-insensitive detector for repeated failure lines (NaNs, divergence).
"""

from collections import deque
from typing import Iterable, Tuple

FAILURE_PATTERNS = ("nan", "floating point exception", "diverged")


def tail_lines(iter_lines: Iterable[str], n_tail: int = 25) -> str:
    """Return the last `n_tail` lines of `iter_lines`, joined by '\\n'."""
    dq = deque(maxlen=int(n_tail))
    for line in iter_lines:
        dq.append(line.rstrip("\n"))
    return "\n".join(dq)


def count_hits(line: str, patterns: Tuple[str, ...]) -> int:
    s = line.lower()
    return 1 if any(p in s for p in patterns) else 0


def early_stop(iter_lines: Iterable[str],
               patterns: Tuple[str, ...] = FAILURE_PATTERNS,
               max_bad: int = 3) -> bool:
    """
    True once `max_bad` lines matching any of `patterns` have been seen.

    Parameters
    ----------
    iter_lines : Iterable[str]
        Stream of lines to scan (e.g., a solver log).
    patterns : Tuple[str, ...]
        Substrings matched case-insensitively.
    max_bad : int
        Number of matching lines that triggers the stop.
    """
    pats = tuple(p.lower() for p in patterns)
    bad = 0
    for line in iter_lines:
        bad += count_hits(line, pats)
        if bad >= int(max_bad):
            return True
    return False
