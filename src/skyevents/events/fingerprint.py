"""
Scan status fingerprint.

Collapses "which contact slots are filled" into one float, sum(10**i) over the
filled indices, so the contact scanner can compare whole scan states with a
single equality test. The value is only meaningful for equality: it is
non-decreasing as long as slots are only ever filled (the scanner's
append-only discipline), and nothing else should rely on its ordering.
"""

from __future__ import annotations
from typing import Optional, Sequence, Tuple

Slots = Tuple[Optional[float], ...]


def filled_mask(slots: Sequence[Optional[float]]) -> Tuple[bool, ...]:
    return tuple(s is not None for s in slots)


def status_fingerprint(slots: Sequence[Optional[float]]) -> float:
    status = 0.0
    for i, s in enumerate(slots):
        if s is not None:
            status += 10.0 ** i
    return status
