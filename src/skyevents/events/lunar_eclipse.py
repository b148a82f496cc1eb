"""
skyevents.events.lunar_eclipse
------------------------------
Contacts of a lunar eclipse: the Moon's disk against the Earth's elliptical
umbra and penumbra, scanned with the coarse/fine contact scanner.

Four nested predicates, outermost first:

  0  Moon touches the penumbra       d <= P + m
  1  Moon fully inside the penumbra  d <= P - m
  2  Moon touches the umbra          d <= U + m
  3  Moon fully inside the umbra     d <= U - m

where d is the Moon's distance from the anti-solar point, m its angular
radius, and U / P the shadow radii along the Moon's position angle. The
eight scanner slots map onto the canonical contacts P1 U1 U2 U3 U4 P4.

All instants are MJD on TT, the scale the ephemerides are evaluated on.
"""

from __future__ import annotations

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Literal, Optional, Tuple

from ..core.ephemeris import Ephemeris, require_metadata
from ..core.errors import PreconditionViolation, SearchHorizonExceeded
from ..core.time import SECONDS_PER_DAY
from ..core.types import GEOCENTRIC_EQUATORIAL_APPARENT, SphericalVector
from ..reference.angles import angular_distance, position_angle
from ..reference.bodies import AU_KM, EARTH, MOON, SUN, Ellipsoid
from .config import LUNAR_SCAN, ScanConfig
from .lunar_phases import LunarEclipsePrediction, eclipse_candidates
from .scanner import Probe, ProbeSample, ScanResult, scan_contacts

LOG = logging.getLogger(__name__)

LunarEclipseKind = Literal["penumbral", "partial", "total"]

PREDICATE_COUNT = 4

# Danjon-style enlargement of the geometric umbra (equatorial, polar)
UMBRA_ENLARGEMENT_EQ = 1.0131
UMBRA_ENLARGEMENT_POL = 1.015

# scans start this long before the predicted maximum
LEAD_TIME_DAYS = 8.0 / 24.0


@dataclass(frozen=True)
class ShadowGeometry:
    """Instantaneous Earth-shadow geometry at the Moon's distance (all rad)."""
    distance: float            # Moon centre to shadow axis
    moon_radius: float
    umbra_radius: float        # along the Moon's position angle
    penumbra_radius: float
    position_angle: float

    def flags(self) -> Tuple[bool, bool, bool, bool]:
        d, m = self.distance, self.moon_radius
        return (
            d <= self.penumbra_radius + m,
            d <= self.penumbra_radius - m,
            d <= self.umbra_radius + m,
            d <= self.umbra_radius - m,
        )

    @property
    def umbral_magnitude(self) -> float:
        return (self.umbra_radius + self.moon_radius - self.distance) / (2.0 * self.moon_radius)

    @property
    def penumbral_magnitude(self) -> float:
        return (self.penumbra_radius + self.moon_radius - self.distance) / (2.0 * self.moon_radius)


def _ellipse_radius(pa: float, a_max: float, a_min: float) -> float:
    return 1.0 / math.hypot(math.sin(pa) / a_max, math.cos(pa) / a_min)


def shadow_geometry(
    sun: SphericalVector,
    moon: SphericalVector,
    *,
    mother: Ellipsoid = EARTH,
    target: Ellipsoid = MOON,
    star: Ellipsoid = SUN,
) -> ShadowGeometry:
    sun_radius = star.angular_radius(sun.r)
    moon_radius = target.angular_radius(moon.r)

    axis = SphericalVector(sun.phi + math.pi, -sun.theta, 1.0)
    moon_dir = SphericalVector(moon.phi, moon.theta, 1.0)

    cone_length = mother.equatorial_radius / (AU_KM * math.tan(sun_radius))  # AU
    scale_eq = UMBRA_ENLARGEMENT_EQ - moon.r / cone_length
    scale_pol = UMBRA_ENLARGEMENT_POL - moon.r / cone_length
    umbra_max = math.atan2(mother.equatorial_radius / AU_KM, moon.r) * scale_eq
    umbra_min = math.atan2(mother.polar_radius / AU_KM, moon.r) * scale_pol
    penumbra_max = umbra_max + 2.0 * sun_radius
    penumbra_min = umbra_min + 2.0 * sun_radius

    pa = 1.5 * math.pi - position_angle(moon_dir, axis)
    return ShadowGeometry(
        distance=angular_distance(moon_dir, axis),
        moon_radius=moon_radius,
        umbra_radius=_ellipse_radius(pa, umbra_max, umbra_min),
        penumbra_radius=_ellipse_radius(pa, penumbra_max, penumbra_min),
        position_angle=pa,
    )


def lunar_shadow_probe(sun: Ephemeris, moon: Ephemeris) -> Probe:
    require_metadata(sun, GEOCENTRIC_EQUATORIAL_APPARENT, role="sun ephemeris")
    require_metadata(moon, GEOCENTRIC_EQUATORIAL_APPARENT, role="moon ephemeris")

    def probe(mjd: float) -> ProbeSample:
        g = shadow_geometry(sun.evaluate(mjd), moon.evaluate(mjd))
        return ProbeSample(flags=g.flags(), angle=g.position_angle)

    return probe


# ------------------------------------------------------------
# Results
# ------------------------------------------------------------

@dataclass(frozen=True)
class LunarEclipseContacts:
    p1: Optional[float]
    u1: Optional[float]
    u2: Optional[float]
    u3: Optional[float]
    u4: Optional[float]
    p4: Optional[float]

    @classmethod
    def from_scan(cls, scan: ScanResult) -> "LunarEclipseContacts":
        s = scan.slots
        return cls(p1=s[0], u1=s[2], u2=s[3], u3=s[4], u4=s[5], p4=s[7])

    def ordered(self) -> Tuple[float, ...]:
        return tuple(t for t in (self.p1, self.u1, self.u2, self.u3, self.u4, self.p4) if t is not None)


@dataclass(frozen=True)
class LunarEclipse:
    kind: LunarEclipseKind
    maximum: float
    magnitude: float            # umbral for partial/total, penumbral otherwise
    contacts: LunarEclipseContacts
    duration_seconds: float     # P1 -> P4
    prediction: Optional[LunarEclipsePrediction] = None


def _classify(c: LunarEclipseContacts) -> Tuple[LunarEclipseKind, float]:
    if c.u2 is not None and c.u3 is not None:
        return "total", 0.5 * (c.u2 + c.u3)
    if c.u1 is not None and c.u4 is not None:
        return "partial", 0.5 * (c.u1 + c.u4)
    return "penumbral", 0.5 * (c.p1 + c.p4)


def scan_lunar_eclipse(
    sun: Ephemeris,
    moon: Ephemeris,
    start_mjd: float,
    *,
    config: ScanConfig = LUNAR_SCAN,
) -> LunarEclipse:
    """
    Scan forward from `start_mjd` for the next lunar eclipse.

    Raises SearchHorizonExceeded when no penumbral egress occurs within
    `config.horizon_days`.
    """
    scan = scan_contacts(lunar_shadow_probe(sun, moon), start_mjd, PREDICATE_COUNT, config)
    contacts = LunarEclipseContacts.from_scan(scan)
    kind, maximum = _classify(contacts)

    g = shadow_geometry(sun.evaluate(maximum), moon.evaluate(maximum))
    magnitude = g.penumbral_magnitude if kind == "penumbral" else g.umbral_magnitude
    duration = (contacts.p4 - contacts.p1) * SECONDS_PER_DAY
    LOG.info("%s lunar eclipse, maximum at MJD %.6f, magnitude %.3f", kind, maximum, magnitude)
    return LunarEclipse(kind=kind, maximum=maximum, magnitude=magnitude, contacts=contacts, duration_seconds=duration)


def find_lunar_eclipses(
    sun: Ephemeris,
    moon: Ephemeris,
    begin_mjd: float,
    end_mjd: float,
    *,
    config: ScanConfig = LUNAR_SCAN,
    max_workers: int = 1,
) -> List[LunarEclipse]:
    """
    Predict the lunar eclipses between the two dates, then time each one's
    contacts by scanning from 8 h before its predicted maximum.
    """
    if end_mjd < begin_mjd:
        raise PreconditionViolation("end_mjd must not precede begin_mjd")
    require_metadata(sun, GEOCENTRIC_EQUATORIAL_APPARENT, role="sun ephemeris")
    require_metadata(moon, GEOCENTRIC_EQUATORIAL_APPARENT, role="moon ephemeris")

    predictions = [e.eclipse for e in eclipse_candidates(begin_mjd, end_mjd, kind="lunar", max_workers=max_workers)]
    LOG.debug("%d lunar eclipse candidates", len(predictions))

    def _scan(p: LunarEclipsePrediction) -> Optional[LunarEclipse]:
        try:
            found = scan_lunar_eclipse(sun, moon, p.maximum_mjd - LEAD_TIME_DAYS, config=config)
        except SearchHorizonExceeded:
            # marginal penumbral predictions can miss the enlarged shadow entirely
            LOG.warning("predicted %s eclipse at MJD %.4f not found by the scan", p.kind, p.maximum_mjd)
            return None
        return LunarEclipse(
            kind=found.kind,
            maximum=found.maximum,
            magnitude=found.magnitude,
            contacts=found.contacts,
            duration_seconds=found.duration_seconds,
            prediction=p,
        )

    if max_workers > 1 and len(predictions) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [executor.submit(_scan, p) for p in predictions]
            found = [f.result() for f in futures]
    else:
        found = [_scan(p) for p in predictions]
    return [e for e in found if e is not None]
