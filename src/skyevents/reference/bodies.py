from __future__ import annotations

import math
from dataclasses import dataclass

from ..core.errors import PreconditionViolation

AU_KM = 149597870.7


@dataclass(frozen=True)
class Ellipsoid:
    """Reference ellipsoid (km). A sphere has inverse_flattening = inf."""
    name: str
    equatorial_radius: float
    inverse_flattening: float = math.inf

    @property
    def polar_radius(self) -> float:
        return self.equatorial_radius - self.equatorial_radius / self.inverse_flattening

    def radius_at_latitude(self, latitude: float) -> float:
        return self.equatorial_radius * (1.0 - math.sin(latitude) ** 2 / self.inverse_flattening)

    def angular_radius(self, distance_au: float) -> float:
        """Apparent angular semi-diameter (rad) at a distance given in AU."""
        return math.atan(self.equatorial_radius / (distance_au * AU_KM))


def _from_polar(name: str, equatorial: float, polar: float) -> Ellipsoid:
    return Ellipsoid(name, equatorial, equatorial / (equatorial - polar))


SUN = Ellipsoid("sun", 696000.0)
MERCURY = _from_polar("mercury", 2440.53, 2438.26)
VENUS = Ellipsoid("venus", 6051.8)
EARTH_WGS72 = Ellipsoid("earth-wgs72", 6378.135, 298.26)
EARTH_WGS84 = Ellipsoid("earth-wgs84", 6378.137, 298.257223563)
EARTH_GRS80 = Ellipsoid("earth-grs80", 6378.137, 298.257222101)
EARTH_IERS1989 = Ellipsoid("earth-iers1989", 6378.136, 298.257)
EARTH_IERS2003 = Ellipsoid("earth-iers2003", 6378.1366, 298.25642)
MOON = Ellipsoid("moon", 1737.4)
MARS = _from_polar("mars", 3396.19, 3376.2)
JUPITER = _from_polar("jupiter", 71492.0, 66854.0)
SATURN = _from_polar("saturn", 60268.0, 54364.0)
URANUS = _from_polar("uranus", 25559.0, 24973.0)
NEPTUNE = _from_polar("neptune", 24764.0, 24341.0)
PLUTO = Ellipsoid("pluto", 1188.3)

EARTH = EARTH_IERS2003

ELLIPSOIDS = {e.name: e for e in (
    SUN, MERCURY, VENUS, EARTH_WGS72, EARTH_WGS84, EARTH_GRS80, EARTH_IERS1989,
    EARTH_IERS2003, MOON, MARS, JUPITER, SATURN, URANUS, NEPTUNE, PLUTO,
)}


def horizon_depression(altitude_m: float, ellipsoid: Ellipsoid = EARTH, latitude: float = 0.0) -> float:
    """
    Dip of the horizon (rad) for an observer `altitude_m` above the ellipsoid.

      rho = a (1 - k + k cos 2phi),  k = f / 2 = (a - b) / (2a)
      dip = acos(rho / (rho + h))
    """
    if altitude_m < 0.0:
        raise PreconditionViolation("altitude must be >= 0 for a horizon dip")
    k = (1.0 - ellipsoid.polar_radius / ellipsoid.equatorial_radius) * 0.5
    rho = ellipsoid.equatorial_radius * (1.0 - k + k * math.cos(2.0 * latitude))
    return math.acos(rho / (rho + altitude_m / 1000.0))
