"""
Domain — vendor version comparison (pure).

IBM versions look like ``8.5.5000.20130514_1044``.  They are not
semver; they are compared segment by segment, numerically where both
segments are digits and case-insensitively otherwise.
"""

from __future__ import annotations

import re

_SEGMENT = re.compile(r"[-.]|\d+|[^-.\d]+")


def versioncmp(a: str, b: str) -> int:
    """Compare two vendor versions. Returns -1, 0 or 1.

    >>> versioncmp("8.5.5000.20130514_1044", "8.5.5001.20130601_0000")
    -1
    >>> versioncmp("1.10", "1.9")
    1
    """
    ax = _SEGMENT.findall(a)
    bx = _SEGMENT.findall(b)
    while ax and bx:
        x = ax.pop(0)
        y = bx.pop(0)
        if x == y:
            continue
        # separators sort below everything else, '-' below '.'
        if x == "-":
            return -1
        if y == "-":
            return 1
        if x == ".":
            return -1
        if y == ".":
            return 1
        if x.isdigit() and y.isdigit():
            if x.startswith("0") or y.startswith("0"):
                return _cmp(x.upper(), y.upper())
            return _cmp(int(x), int(y))
        return _cmp(x.upper(), y.upper())
    return _cmp(a, b)


def is_newer(candidate: str, reference: str) -> bool:
    """Whether ``candidate`` sorts strictly after ``reference``."""
    return versioncmp(candidate, reference) > 0


def _cmp(x, y) -> int:
    return (x > y) - (x < y)
