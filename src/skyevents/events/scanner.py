"""
skyevents.events.scanner
------------------------
Coarse/fine forward scan for the contacts of nested boolean predicates.

A probe maps an instant to k nested flags (outermost first, e.g. "inside
penumbra", "inside umbra", ...) plus one auxiliary angle. Each flag turns on
once (ingress) and off once (egress). Contact slots are laid out as

    0 .. k-1      ingress of predicate 0 .. k-1
    2k-1-i        egress of predicate i

so for nested predicates the filled slots read in time order.

Every probe advances the cursor by the fine step. After a probe that leaves
the fingerprint unchanged the scanner also jumps ahead by the coarse step.
When a probe changes the fingerprint during such a jump, the cursor and the
slots roll back to the last stable snapshot and the interval is replayed at
the fine step, so each contact is timed to within one fine step.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

from ..core.errors import PreconditionViolation, SearchHorizonExceeded
from .config import ScanConfig
from .fingerprint import Slots, status_fingerprint

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProbeSample:
    flags: Tuple[bool, ...]
    angle: float = 0.0


Probe = Callable[[float], ProbeSample]


@dataclass(frozen=True)
class ScanResult:
    start_mjd: float
    slots: Slots
    angles: Tuple[Optional[float], ...]
    evaluations: int
    refinements: int

    @property
    def predicate_count(self) -> int:
        return len(self.slots) // 2

    def ingress(self, i: int) -> Optional[float]:
        return self.slots[ingress_slot(i)]

    def egress(self, i: int) -> Optional[float]:
        return self.slots[egress_slot(i, self.predicate_count)]

    def filled(self) -> Tuple[float, ...]:
        """Filled contact instants in slot order."""
        return tuple(s for s in self.slots if s is not None)


def ingress_slot(i: int) -> int:
    return i


def egress_slot(i: int, k: int) -> int:
    return 2 * k - 1 - i


def _record(
    slots: Slots,
    angles: Tuple[Optional[float], ...],
    flags: Sequence[bool],
    mjd: float,
    angle: float,
) -> Tuple[Slots, Tuple[Optional[float], ...]]:
    k = len(flags)
    s = list(slots)
    a = list(angles)
    for i, on in enumerate(flags):
        if on and s[i] is None:
            s[i] = mjd
            a[i] = angle
        j = egress_slot(i, k)
        if not on and s[j] is None and s[i] is not None:
            s[j] = mjd
            a[j] = angle
    return tuple(s), tuple(a)


def scan_contacts(probe: Probe, start_mjd: float, predicate_count: int, config: ScanConfig) -> ScanResult:
    """
    Scan forward from `start_mjd` until the outermost predicate's egress is found.

    Raises SearchHorizonExceeded once the cursor is more than `config.horizon_days`
    past the start without the outermost egress. Partial contact sets are never returned.
    """
    if predicate_count < 1:
        raise PreconditionViolation("predicate_count must be >= 1")

    k = predicate_count
    last = egress_slot(0, k)
    fine = config.fine_step_days
    coarse = config.coarse_step_days

    slots: Slots = (None,) * (2 * k)
    angles: Tuple[Optional[float], ...] = (None,) * (2 * k)
    cursor = start_mjd

    stable_cursor = start_mjd
    stable_status: Optional[float] = None
    stable_slots = slots
    stable_angles = angles
    fine_mode = False

    evaluations = 0
    refinements = 0

    while True:
        cursor += fine
        sample = probe(cursor)
        evaluations += 1
        if len(sample.flags) != k:
            raise PreconditionViolation(f"probe returned {len(sample.flags)} flags, expected {k}")

        slots, angles = _record(slots, angles, sample.flags, cursor, sample.angle)
        status = status_fingerprint(slots)

        if stable_status is not None and status != stable_status and not fine_mode:
            # something toggled inside the last coarse jump: replay it finely
            slots, angles, cursor = stable_slots, stable_angles, stable_cursor
            fine_mode = True
            refinements += 1
        elif not (fine_mode and status == stable_status):
            if fine_mode:
                LOG.debug("contact resolved at MJD %.8f (status %g)", cursor, status)
            fine_mode = False
            stable_cursor, stable_status = cursor, status
            stable_slots, stable_angles = slots, angles
            if slots[last] is not None:
                break
            cursor += coarse

        if cursor - start_mjd > config.horizon_days:
            LOG.debug("scan from MJD %.6f gave up after %d probes", start_mjd, evaluations)
            raise SearchHorizonExceeded(start_mjd, config.horizon_days)

    LOG.debug("scan from MJD %.6f finished: %d probes, %d refinements", start_mjd, evaluations, refinements)
    return ScanResult(
        start_mjd=start_mjd,
        slots=slots,
        angles=angles,
        evaluations=evaluations,
        refinements=refinements,
    )
