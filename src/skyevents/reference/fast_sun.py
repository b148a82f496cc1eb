# reference/fast_sun.py
"""
Low-precision apparent geocentric Sun (ecliptic of date).

Longitude: mean longitude plus a 49-term periodic series, nutation in longitude
(two leading terms) and annual aberration. Distance from the Kepler equation of
centre with Earth's Simon et al. (1994) J2000 eccentricity. Latitude is taken as 0.

Accuracy is of the order of 0.01 deg in longitude, which is ample for
rise/set/transit and eclipse-contact timing at the one-second level.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from ..core.time import julian_centuries
from ..core.types import Metadata, SphericalVector, GEOCENTRIC_ECLIPTIC_APPARENT
from .angles import deg_normalize_to_rad, normalize, polynomial_sum

# amplitude (1e-7 rad), phase (deg), rate (deg / century)
_ARGS = np.array([
    [403406.0, 270.54861, 0.9287892],
    [195207.0, 340.19128, 35999.1376958],
    [119433.0, 63.91854, 35999.4089666],
    [112392.0, 331.2622, 35998.7287385],
    [3891.0, 317.843, 71998.20261],
    [2819.0, 86.631, 71998.4403],
    [1721.0, 240.052, 36000.35726],
    [660.0, 310.26, 71997.4812],
    [350.0, 247.23, 32964.4678],
    [334.0, 260.87, -19.441],
    [314.0, 297.82, 445267.1117],
    [268.0, 343.14, 45036.884],
    [242.0, 166.79, 3.1008],
    [234.0, 81.53, 22518.4434],
    [158.0, 3.5, -19.9739],
    [132.0, 132.75, 65928.9345],
    [129.0, 182.95, 9038.0293],
    [114.0, 162.03, 3034.7684],
    [99.0, 29.8, 33718.148],
    [93.0, 266.4, 3034.448],
    [86.0, 249.2, -2280.773],
    [78.0, 157.6, 29929.992],
    [72.0, 257.8, 31556.493],
    [68.0, 185.1, 149.588],
    [64.0, 69.9, 9037.75],
    [46.0, 8.0, 107997.405],
    [38.0, 197.1, -4444.176],
    [37.0, 250.4, 151.771],
    [32.0, 65.3, 67555.316],
    [29.0, 162.7, 31556.08],
    [28.0, 341.5, -4561.54],
    [27.0, 291.6, 107996.706],
    [27.0, 98.5, 1221.655],
    [25.0, 146.7, 62894.167],
    [24.0, 110.0, 31437.369],
    [21.0, 5.2, 14578.298],
    [21.0, 342.6, -31931.757],
    [20.0, 230.9, 34777.243],
    [18.0, 256.1, 1221.999],
    [17.0, 45.3, 62894.511],
    [14.0, 242.9, -4442.039],
    [13.0, 115.2, 107997.909],
    [13.0, 151.8, 119.066],
    [13.0, 285.3, 16859.071],
    [12.0, 53.3, -4.578],
    [10.0, 126.6, 26895.292],
    [10.0, 205.7, -39.127],
    [10.0, 85.9, 12297.536],
    [10.0, 146.1, 90073.778],
])

# Earth orbital eccentricity, Simon et al. (1994), polynomial in millennia
_EARTH_ECCENTRICITY = (0.0167086342, -0.0004203654, -0.0000126734, 1444e-10, -2e-10, 3e-10)


def nutation_in_longitude_deg(T: float) -> float:
    """Two leading nutation terms in longitude (deg)."""
    a = deg_normalize_to_rad(124.90 - 1934.134 * T + 0.002063 * T * T)
    b = deg_normalize_to_rad(201.11 + 72001.5377 * T + 0.00057 * T * T)
    return -0.004778 * math.sin(a) - 0.0003667 * math.sin(b)


def sun_longitude(T: float) -> float:
    """Apparent ecliptic longitude of date (rad, [0, 2*pi))."""
    amp, phase, rate = _ARGS[:, 0], _ARGS[:, 1], _ARGS[:, 2]
    series = float(np.sum(amp * np.sin(np.radians(phase) + np.radians(T * rate))))
    mean = deg_normalize_to_rad(282.7771834 + 36000.76952744 * T + 0.000005729577951308232 * series)
    aberration = math.radians(0.0000974 * math.cos(math.radians(177.63 + 35999.01848 * T)) - 0.005575)
    return normalize(mean + math.radians(nutation_in_longitude_deg(T)) + aberration)


def sun_distance(T: float) -> float:
    """Geocentric distance (AU)."""
    M = deg_normalize_to_rad(357.5291092 + 35999.0502909 * T - 0.0001536 * T * T + T * T * T / 24490000.0)
    C = (
        (1.9146 - 0.004817 * T - 0.000014 * T * T) * math.sin(M)
        + (0.019993 - 0.000101 * T) * math.sin(2.0 * M)
        + 0.00029 * math.sin(3.0 * M)
    )
    e = polynomial_sum(_EARTH_ECCENTRICITY, T / 10.0)
    v = M + math.radians(C)
    return 1.000001018 * (1.0 - e * e) / (1.0 + e * math.cos(v))


def sun_position(T: float) -> SphericalVector:
    return SphericalVector(phi=sun_longitude(T), theta=0.0, r=sun_distance(T))


@dataclass(frozen=True)
class FastSunEphemeris:
    """Geocentric / ecliptic / apparent Sun oracle."""
    metadata: Metadata = GEOCENTRIC_ECLIPTIC_APPARENT

    def evaluate(self, mjd: float) -> SphericalVector:
        return sun_position(julian_centuries(mjd))


FAST_SUN = FastSunEphemeris()
