"""
skyevents.events.solar_eclipse
------------------------------
Geocentric contacts of a solar eclipse: the Moon's disk against the Sun's,
as seen from the Earth's centre.

Two nested predicates: "eclipsed" (the disks overlap) and "central" (one disk
lies wholly inside the other). Slots: first contact, central ingress,
central egress, last contact.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Literal, Optional, Tuple

from ..core.ephemeris import Ephemeris, require_metadata
from ..core.errors import PreconditionViolation, SearchHorizonExceeded
from ..core.time import SECONDS_PER_DAY
from ..core.types import GEOCENTRIC_EQUATORIAL_APPARENT, SphericalVector
from ..reference.angles import angular_distance
from ..reference.bodies import MOON, SUN
from .config import SOLAR_SCAN, ScanConfig
from .lunar_phases import SolarEclipsePrediction, eclipse_candidates
from .scanner import Probe, ProbeSample, scan_contacts

LOG = logging.getLogger(__name__)

SolarEclipseKind = Literal["partial", "annular", "total"]

PREDICATE_COUNT = 2
LEAD_TIME_DAYS = 8.0 / 24.0


def disk_overlap(sun: SphericalVector, moon: SphericalVector) -> Tuple[float, float, float]:
    """(separation, sun radius, moon radius), rad."""
    d = angular_distance(SphericalVector(sun.phi, sun.theta), SphericalVector(moon.phi, moon.theta))
    return d, SUN.angular_radius(sun.r), MOON.angular_radius(moon.r)


def solar_flags(d: float, s: float, m: float) -> Tuple[bool, bool]:
    eclipsed = d <= s + m
    central = (d + m <= s and m <= s) or (d + s <= m and m >= s)
    return eclipsed, central


def solar_disk_probe(sun: Ephemeris, moon: Ephemeris) -> Probe:
    require_metadata(sun, GEOCENTRIC_EQUATORIAL_APPARENT, role="sun ephemeris")
    require_metadata(moon, GEOCENTRIC_EQUATORIAL_APPARENT, role="moon ephemeris")

    def probe(mjd: float) -> ProbeSample:
        d, s, m = disk_overlap(sun.evaluate(mjd), moon.evaluate(mjd))
        return ProbeSample(flags=solar_flags(d, s, m), angle=d)

    return probe


@dataclass(frozen=True)
class SolarEclipseContacts:
    c1: Optional[float]
    c2: Optional[float]
    c3: Optional[float]
    c4: Optional[float]

    def ordered(self) -> Tuple[float, ...]:
        return tuple(t for t in (self.c1, self.c2, self.c3, self.c4) if t is not None)


@dataclass(frozen=True)
class SolarEclipse:
    kind: SolarEclipseKind
    maximum: float
    contacts: SolarEclipseContacts
    duration_seconds: float  # C1 -> C4
    prediction: Optional[SolarEclipsePrediction] = None


def scan_solar_eclipse(
    sun: Ephemeris,
    moon: Ephemeris,
    start_mjd: float,
    *,
    config: ScanConfig = SOLAR_SCAN,
) -> SolarEclipse:
    scan = scan_contacts(solar_disk_probe(sun, moon), start_mjd, PREDICATE_COUNT, config)
    c1, c2, c3, c4 = scan.slots
    contacts = SolarEclipseContacts(c1, c2, c3, c4)

    if c2 is not None and c3 is not None:
        maximum = 0.5 * (c2 + c3)
        _, s, m = disk_overlap(sun.evaluate(maximum), moon.evaluate(maximum))
        kind: SolarEclipseKind = "total" if m > s else "annular"
    else:
        maximum = 0.5 * (c1 + c4)
        kind = "partial"
    LOG.info("%s solar eclipse, maximum at MJD %.6f", kind, maximum)
    return SolarEclipse(kind=kind, maximum=maximum, contacts=contacts, duration_seconds=(c4 - c1) * SECONDS_PER_DAY)


def find_solar_eclipses(
    sun: Ephemeris,
    moon: Ephemeris,
    begin_mjd: float,
    end_mjd: float,
    *,
    config: ScanConfig = SOLAR_SCAN,
) -> List[SolarEclipse]:
    if end_mjd < begin_mjd:
        raise PreconditionViolation("end_mjd must not precede begin_mjd")

    out: List[SolarEclipse] = []
    for event in eclipse_candidates(begin_mjd, end_mjd, kind="solar"):
        p = event.eclipse
        try:
            found = scan_solar_eclipse(sun, moon, p.maximum_mjd - LEAD_TIME_DAYS, config=config)
        except SearchHorizonExceeded:
            LOG.warning("predicted %s solar eclipse at MJD %.4f not found by the scan", p.kind, p.maximum_mjd)
            continue
        out.append(SolarEclipse(found.kind, found.maximum, found.contacts, found.duration_seconds, prediction=p))
    return out
