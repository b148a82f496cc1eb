"""
skyevents.events.lunar_phases
-----------------------------
Lunar phases and eclipse candidates (Meeus, Astronomical Algorithms, ch. 49 and 54).

Each phase instant is indexed by a lunation number k (k = 0 at the new moon of
2000-01-06; quarter phases sit on k + 0.25 / 0.5 / 0.75). From k:

  1. the mean phase JDE is a polynomial in k,
  2. the true phase adds periodic terms in the Sun's and Moon's anomalies, the
     Moon's argument of latitude and the node, plus 14 planetary arguments,
  3. new and full moons close enough to a node carry an eclipse prediction
     (kind, instant of maximum, magnitude, semi-durations).

Instants are returned as MJD on TT (the JDE of the series) after the Moon's
secular-acceleration correction; `core.deltat.ut_from_tt` gives civil time.
They are good to about a minute, enough to seed the contact scanner.
"""

from __future__ import annotations

import calendar
import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, List, Literal, Optional, Tuple, Union

from ..core.errors import PreconditionViolation
from ..core.time import DAYS_PER_CENTURY, DELTA_JD_MJD, SECONDS_PER_DAY, mjd_to_datetime
from ..reference.angles import polynomial_sum

LOG = logging.getLogger(__name__)

Phase = Literal["new", "first_quarter", "full", "last_quarter"]
EventType = Literal["next", "previous", "closest"]

PHASE_DELTA: Dict[str, float] = {
    "new": 0.0,
    "first_quarter": 0.25,
    "full": 0.5,
    "last_quarter": 0.75,
}

SYNODIC_MONTH = 29.530588853
LUNATIONS_PER_YEAR = 12.3685

# Moon secular acceleration ("/cy^2): Chapront et al. 2002, and the DE200 value.
MOON_SECULAR_ACCELERATION = -25.858
MOON_SECULAR_ACCELERATION_DE200 = -23.8946


# ------------------------------------------------------------
# Results
# ------------------------------------------------------------

SolarEclipseKind = Literal["total", "annular", "hybrid", "partial"]
LunarEclipseKind = Literal["penumbral", "partial", "total"]


@dataclass(frozen=True)
class SolarEclipsePrediction:
    kind: SolarEclipseKind
    maximum_mjd: float
    is_central: Optional[bool] = None  # None for partial eclipses
    magnitude: Optional[float] = None  # partial eclipses only


@dataclass(frozen=True)
class LunarEclipsePrediction:
    """Semi-durations are in minutes; None where the phase does not occur."""
    kind: LunarEclipseKind
    maximum_mjd: float
    magnitude: float
    radius_penumbral: float
    radius_umbral: float
    penumbral_semi_duration: Optional[float]
    partial_semi_duration: Optional[float] = None
    total_semi_duration: Optional[float] = None


EclipsePrediction = Union[SolarEclipsePrediction, LunarEclipsePrediction]


@dataclass(frozen=True)
class PhaseEvent:
    mjd: float
    phase: Phase
    eclipse: Optional[EclipsePrediction] = None


# ------------------------------------------------------------
# Lunation index
# ------------------------------------------------------------

def mean_phase_jd(k: float) -> float:
    t = k / 1236.85
    return polynomial_sum((2451550.09765 + SYNODIC_MONTH * k, 0.0, 0.0001337, -0.000000150, 0.00000000073), t)


def mean_phase_mjd(k: float) -> float:
    return mean_phase_jd(k) - DELTA_JD_MJD


def _approximate_k(mjd: float) -> float:
    d = mjd_to_datetime(mjd)
    days_in_month = calendar.monthrange(d.year, d.month)[1]
    day_fraction = d.day + (d.hour + d.minute / 60.0) / 24.0
    year = d.year + (d.month - 1.0 + day_fraction / (1.0 + days_in_month)) / 12.0
    return (year - 2000.0) * LUNATIONS_PER_YEAR


def initial_k(mjd: float, phase: Phase, event_type: EventType = "next") -> float:
    """Lunation index of the mean `phase` next to / before / closest to `mjd`."""
    if phase not in PHASE_DELTA:
        raise PreconditionViolation(f"Unknown phase '{phase}'. Available: {sorted(PHASE_DELTA)}")
    k = math.floor(_approximate_k(mjd)) + PHASE_DELTA[phase]

    if event_type == "next":
        while mean_phase_mjd(k) < mjd:
            k += 1.0
        while mean_phase_mjd(k - 1.0) >= mjd:
            k -= 1.0
    elif event_type == "previous":
        while mean_phase_mjd(k) > mjd:
            k -= 1.0
        while mean_phase_mjd(k + 1.0) <= mjd:
            k += 1.0
    elif event_type == "closest":
        k = min((k - 1.0, k, k + 1.0), key=lambda c: abs(mean_phase_mjd(c) - mjd))
    else:
        raise PreconditionViolation(f"Unknown event type '{event_type}'")
    return k


# ------------------------------------------------------------
# True phase
# ------------------------------------------------------------

@dataclass(frozen=True)
class _Arguments:
    k: float
    t: float
    M: float
    Mp: float
    F: float
    O: float
    E: float

    @classmethod
    def at(cls, k: float) -> "_Arguments":
        t = k / 1236.85
        rad = math.radians
        return cls(
            k=k,
            t=t,
            M=rad(polynomial_sum((2.5534 + 29.10535669 * k, 0.0, -0.0000218, -0.00000011), t)),
            Mp=rad(polynomial_sum((201.5643 + 385.81693528 * k, 0.0, 0.0107438, 0.00001239, -0.000000058), t)),
            F=rad(polynomial_sum((160.7108 + 390.67050274 * k, 0.0, -0.0016341, -0.00000227, 0.000000011), t)),
            O=rad(polynomial_sum((124.7746 - 1.5637558 * k, 0.0, 0.002069, 0.00000215), t)),
            E=polynomial_sum((1.0, -0.002516, -0.0000074), t),
        )


# A2 .. A14: (constant deg, deg per lunation, amplitude in days). A1 has a t^2 term, see _a1.
_PLANETARY: Tuple[Tuple[float, float, float], ...] = (
    (251.88, 0.016321, 0.000165),
    (251.83, 26.651886, 0.000164),
    (349.42, 36.412478, 0.000126),
    (84.66, 18.206239, 0.000110),
    (141.74, 53.303771, 0.000062),
    (207.14, 2.453732, 0.000060),
    (154.84, 7.306860, 0.000056),
    (34.52, 27.261239, 0.000047),
    (207.19, 0.121824, 0.000042),
    (291.34, 1.844379, 0.000040),
    (161.72, 24.198154, 0.000037),
    (239.56, 25.513099, 0.000035),
    (331.55, 3.592518, 0.000023),
)


def _a1(a: _Arguments) -> float:
    return math.radians(299.77 + 0.107408 * a.k - 0.009173 * a.t * a.t)


def _planetary_correction(a: _Arguments) -> float:
    total = 0.000325 * math.sin(_a1(a))
    for c0, c1, amp in _PLANETARY:
        total += amp * math.sin(math.radians(c0 + c1 * a.k))
    return total


def _new_full_correction(a: _Arguments, phase: Phase) -> float:
    sin = math.sin
    M, Mp, F, O, E = a.M, a.Mp, a.F, a.O, a.E
    if phase == "new":
        head = -0.4072 * sin(Mp) + 0.17241 * E * sin(M) + 0.01608 * sin(2 * Mp) + 0.01039 * sin(2 * F) \
            + 0.00739 * E * sin(Mp - M) - 0.00514 * E * sin(Mp + M) + 0.00208 * E * E * sin(2 * M)
        m2mp = -0.00007 * sin(Mp + 2 * M)
    else:
        head = -0.40614 * sin(Mp) + 0.17302 * E * sin(M) + 0.01614 * sin(2 * Mp) + 0.01043 * sin(2 * F) \
            + 0.00734 * E * sin(Mp - M) - 0.00515 * E * sin(Mp + M) + 0.00209 * E * E * sin(2 * M)
        m2mp = -0.00007 * E * sin(Mp + 2 * M)
    return (
        head
        - 0.00111 * sin(Mp - 2 * F) - 0.00057 * sin(Mp + 2 * F)
        + 0.00056 * E * sin(2 * Mp + M) - 0.00042 * sin(3 * Mp)
        + 0.00042 * E * sin(M + 2 * F) + 0.00038 * E * sin(M - 2 * F)
        - 0.00024 * E * sin(2 * Mp - M) + m2mp - 0.00017 * sin(O)
        + 0.00004 * (sin(2 * Mp - 2 * F) + sin(3 * M))
        + 0.00003 * (sin(Mp + M - 2 * F) + sin(2 * Mp + 2 * F) - sin(Mp + M + 2 * F) + sin(Mp - M + 2 * F))
        + 0.00002 * (-sin(Mp - M - 2 * F) - sin(3 * Mp + M) + sin(4 * Mp))
    )


def _quarter_correction(a: _Arguments, phase: Phase) -> float:
    sin, cos = math.sin, math.cos
    M, Mp, F, O, E = a.M, a.Mp, a.F, a.O, a.E
    W = 0.00306 - 0.00038 * E * cos(M) + 0.00026 * cos(Mp) - 0.00002 * cos(Mp - M) \
        + 0.00002 * cos(Mp + M) + 0.00002 * cos(2 * F)
    sign = 1.0 if phase == "first_quarter" else -1.0
    return (
        sign * W
        - 0.62801 * sin(Mp) + 0.17172 * E * sin(M) + 0.00862 * sin(2 * Mp) + 0.00804 * sin(2 * F)
        + 0.00454 * E * sin(Mp - M) - 0.01183 * E * sin(Mp + M) + 0.00204 * E * E * sin(2 * M)
        - 0.00180 * sin(Mp - 2 * F) - 0.0007 * sin(Mp + 2 * F) - 0.00040 * sin(3 * Mp)
        - 0.00034 * E * sin(2 * Mp - M) + 0.00032 * E * sin(M + 2 * F) + 0.00032 * E * sin(M - 2 * F)
        - 0.00028 * E * E * sin(Mp + 2 * M) + 0.00027 * E * sin(2 * Mp + M) - 0.00017 * sin(O)
        - 0.00005 * sin(Mp - M - 2 * F) + 0.00004 * sin(2 * Mp + 2 * F) - 0.00004 * sin(Mp + M + 2 * F)
        + 0.00004 * sin(Mp - 2 * M) + 0.00003 * sin(Mp + M - 2 * F) + 0.00003 * sin(3 * M)
        + 0.00002 * sin(2 * Mp - 2 * F) + 0.00002 * sin(Mp - M + 2 * F) - 0.00002 * sin(3 * Mp + M)
    )


def secular_acceleration_correction(jd: float) -> float:
    """Shift a JD computed with the DE200 lunar acceleration onto the current value."""
    cent = (jd - 2435109.0) / DAYS_PER_CENTURY
    delta_t = 0.91072 * (MOON_SECULAR_ACCELERATION - MOON_SECULAR_ACCELERATION_DE200) * cent * cent
    return jd + delta_t / SECONDS_PER_DAY


# ------------------------------------------------------------
# Eclipses
# ------------------------------------------------------------

@dataclass(frozen=True)
class _EclipseGeometry:
    gamma: float
    u: float
    F1: float


def _eclipse_geometry(a: _Arguments) -> _EclipseGeometry:
    sin, cos = math.sin, math.cos
    M, Mp, E = a.M, a.Mp, a.E
    F1 = a.F - math.radians(0.02665 * sin(a.O))
    p = -0.0392 * sin(Mp) + 0.2070 * E * sin(M) + 0.0024 * E * sin(2 * M) + 0.0116 * sin(2 * Mp) \
        - 0.0073 * E * sin(Mp + M) + 0.0067 * E * sin(Mp - M) + 0.0118 * sin(2 * F1)
    q = 5.2207 - 0.3299 * cos(Mp) - 0.0048 * E * cos(M) + 0.002 * E * cos(2 * M) \
        - 0.006 * E * cos(Mp + M) + 0.0041 * E * cos(Mp - M)
    gamma = (p * cos(F1) + q * sin(F1)) * (1.0 - 0.0048 * abs(cos(F1)))
    u = 0.0059 + 0.0046 * E * cos(M) - 0.0182 * cos(Mp) + 0.0004 * cos(2 * Mp) - 0.0005 * cos(M + Mp)
    return _EclipseGeometry(gamma=gamma, u=u, F1=F1)


def _maximum_mjd(jd: float, a: _Arguments, g: _EclipseGeometry, *, lunar: bool) -> float:
    sin = math.sin
    M, Mp, O, E, F1 = a.M, a.Mp, a.O, a.E, g.F1
    first = (-0.4065 if lunar else -0.4075) * sin(Mp) + (0.1727 if lunar else 0.1721) * E * sin(M)
    return (
        jd - DELTA_JD_MJD + first
        + 0.0161 * sin(2 * Mp) - 0.0097 * sin(2 * F1)
        + 0.0073 * E * sin(Mp - M) - 0.0050 * E * sin(Mp + M)
        + 0.0021 * E * sin(2 * M) - 0.0023 * sin(Mp - 2 * F1)
        + 0.0012 * sin(Mp + 2 * F1) + 0.0006 * E * sin(2 * Mp + M)
        - 0.0004 * sin(3 * Mp) - 0.0003 * E * sin(M + 2 * F1)
        + 0.0003 * sin(_a1(a)) - 0.0002 * E * sin(M - 2 * F1)
        - 0.0002 * E * sin(2 * Mp - M) - 0.0002 * sin(O)
    )


def _solar_eclipse(jd: float, a: _Arguments, g: _EclipseGeometry) -> Optional[SolarEclipsePrediction]:
    gamma, u = abs(g.gamma), g.u
    if gamma >= 1.5433 + u:
        return None
    maximum = _maximum_mjd(jd, a, g, lunar=False)
    if gamma < 0.9972 + abs(u):
        central = gamma < 0.9972
        if u < 0.0:
            kind = "total"
        elif u > 0.0047:
            kind = "annular"
        elif u < 0.00464 * math.sqrt(1.0 - g.gamma * g.gamma):
            kind = "hybrid"
        else:
            kind = "annular"
        return SolarEclipsePrediction(kind, maximum, is_central=central)
    magnitude = (1.5433 + u - gamma) / (0.5461 + 2.0 * u)
    return SolarEclipsePrediction("partial", maximum, magnitude=magnitude)


def _lunar_eclipse(jd: float, a: _Arguments, g: _EclipseGeometry) -> Optional[LunarEclipsePrediction]:
    gamma, u = abs(g.gamma), g.u
    mag_penumbral = (1.5573 + u - gamma) / 0.545
    mag_umbral = (1.0128 - u - gamma) / 0.545
    if mag_penumbral <= 0.0 and mag_umbral <= 0.0:
        return None

    n = 0.5458 + 0.04 * math.cos(a.Mp)
    gamma2 = g.gamma * g.gamma

    def semi_duration(x: float) -> Optional[float]:
        x2 = x * x
        return 60.0 * math.sqrt(x2 - gamma2) / n if x2 > gamma2 else None

    common = dict(
        maximum_mjd=_maximum_mjd(jd, a, g, lunar=True),
        radius_penumbral=1.2848 + u,
        radius_umbral=0.7403 - u,
        penumbral_semi_duration=semi_duration(1.5573 + u),
    )
    if mag_umbral < 0.0:
        return LunarEclipsePrediction("penumbral", magnitude=mag_penumbral, **common)
    partial = semi_duration(1.0128 - u)
    if mag_umbral < 1.0:
        return LunarEclipsePrediction("partial", magnitude=mag_umbral, partial_semi_duration=partial, **common)
    return LunarEclipsePrediction(
        "total",
        magnitude=mag_umbral,
        partial_semi_duration=partial,
        total_semi_duration=semi_duration(0.4678 - u),
        **common,
    )


def true_phase(k: float, phase: Phase, *, with_eclipses: bool = True) -> PhaseEvent:
    """True phase instant (MJD) for lunation index k, with an eclipse prediction where one occurs."""
    if phase not in PHASE_DELTA:
        raise PreconditionViolation(f"Unknown phase '{phase}'. Available: {sorted(PHASE_DELTA)}")
    jd = mean_phase_jd(k)
    a = _Arguments.at(k)

    if phase in ("new", "full"):
        delta = _new_full_correction(a, phase)
    else:
        delta = _quarter_correction(a, phase)

    eclipse: Optional[EclipsePrediction] = None
    if with_eclipses and phase in ("new", "full"):
        g = _eclipse_geometry(a)
        eclipse = _lunar_eclipse(jd, a, g) if phase == "full" else _solar_eclipse(jd, a, g)

    delta += _planetary_correction(a)
    mjd = secular_acceleration_correction(jd + delta) - DELTA_JD_MJD
    return PhaseEvent(mjd=mjd, phase=phase, eclipse=eclipse)


def next_phase(mjd: float, phase: Phase, event_type: EventType = "next", *, with_eclipses: bool = True) -> PhaseEvent:
    return true_phase(initial_k(mjd, phase, event_type), phase, with_eclipses=with_eclipses)


def lunar_phases(
    begin_mjd: float,
    end_mjd: float,
    *,
    phases: Tuple[Phase, ...] = ("new", "first_quarter", "full", "last_quarter"),
    with_eclipses: bool = True,
    max_workers: int = 1,
) -> List[PhaseEvent]:
    """
    All phases with begin_mjd <= instant <= end_mjd, sorted by time.

    With max_workers > 1 the lunations are evaluated on a thread pool; the
    result is the same either way.
    """
    if end_mjd < begin_mjd:
        raise PreconditionViolation("end_mjd must not precede begin_mjd")

    jobs: List[Tuple[float, Phase]] = []
    for phase in phases:
        # one lunation of slack on each side: true and mean phase differ by up to ~0.6 d
        k0 = initial_k(begin_mjd, phase, "next") - 1.0
        k1 = initial_k(end_mjd, phase, "next")
        k = k0
        while k <= k1:
            jobs.append((k, phase))
            k += 1.0

    if max_workers > 1 and len(jobs) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [executor.submit(true_phase, k, p, with_eclipses=with_eclipses) for k, p in jobs]
            events = [f.result() for f in futures]
    else:
        events = [true_phase(k, p, with_eclipses=with_eclipses) for k, p in jobs]

    events = [e for e in events if begin_mjd <= e.mjd <= end_mjd]
    events.sort(key=lambda e: e.mjd)
    LOG.debug("%d phase events between MJD %.3f and %.3f", len(events), begin_mjd, end_mjd)
    return events


def eclipse_candidates(begin_mjd: float, end_mjd: float, *, kind: Literal["lunar", "solar"], max_workers: int = 1) -> List[PhaseEvent]:
    phase: Phase = "full" if kind == "lunar" else "new"
    events = lunar_phases(begin_mjd, end_mjd, phases=(phase,), max_workers=max_workers)
    return [e for e in events if e.eclipse is not None]
