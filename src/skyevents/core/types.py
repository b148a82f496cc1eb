from __future__ import annotations
from dataclasses import dataclass, field
from typing import Literal

from ..reference.bodies import Ellipsoid, EARTH_IERS2003

Orbit = Literal["geocentric", "heliocentric"]
Plane = Literal["ecliptic", "equatorial", "topocentric"]
Epoch = Literal["j2000", "apparent"]


@dataclass(frozen=True)
class Metadata:
    orbit: Orbit
    plane: Plane
    epoch: Epoch

GEOCENTRIC_EQUATORIAL_APPARENT = Metadata(orbit="geocentric", plane="equatorial", epoch="apparent")
GEOCENTRIC_ECLIPTIC_APPARENT = Metadata(orbit="geocentric", plane="ecliptic", epoch="apparent")


@dataclass(frozen=True)
class SphericalVector:
    """Spherical position: phi (longitude-like, rad), theta (latitude-like, rad), r (AU)."""
    phi: float
    theta: float
    r: float = 1.0


@dataclass(frozen=True)
class ObserverPosition:
    longitude: float  # radians, east positive
    latitude: float   # radians, north positive
    altitude: float = 0.0  # metres


@dataclass(frozen=True)
class Observer:
    position: ObserverPosition
    ellipsoid: Ellipsoid = field(default=EARTH_IERS2003)
