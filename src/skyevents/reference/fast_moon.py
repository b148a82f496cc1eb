# reference/fast_moon.py
"""
Low-precision apparent geocentric Moon (ecliptic of date).

Main periodic terms of the ELP-2000/82 theory as tabulated by Meeus
(Astronomical Algorithms, ch. 47): 60 terms each for longitude/distance and
latitude, with the E eccentricity factor on solar-anomaly terms, the Venus /
Jupiter / flattening additive terms and two-term nutation in longitude.

The three sub-series (longitude, latitude, distance) are independent given the
fundamental arguments; `FastMoonEphemeris(executor=...)` evaluates them
concurrently. Results are bit-identical to sequential evaluation.
"""

from __future__ import annotations

import math
from concurrent.futures import Executor
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from ..core.time import julian_centuries
from ..core.types import Metadata, SphericalVector, GEOCENTRIC_ECLIPTIC_APPARENT
from .angles import polynomial_sum
from .bodies import AU_KM
from .fast_sun import nutation_in_longitude_deg


# ------------------------------------------------------------
# Term tables (multipliers of D, M, M', F; amplitudes)
# ------------------------------------------------------------

_D_LNG = np.array([
    0, 2, 2, 0, 0, 0, 2, 2, 2, 2, 0, 1, 0, 2, 0, 0, 4, 0, 4, 2,
    2, 1, 1, 2, 2, 4, 2, 0, 2, 2, 1, 2, 0, 0, 2, 2, 2, 4, 0, 3,
    2, 4, 0, 2, 2, 2, 4, 0, 4, 1, 2, 0, 1, 3, 4, 2, 0, 1, 2, 2,
], dtype=float)
_M_LNG = np.array([
    0, 0, 0, 0, 1, 0, 0, -1, 0, -1, 1, 0, 1, 0, 0, 0, 0, 0, 0, 1,
    1, 0, 1, -1, 0, 0, 0, 1, 0, -1, 0, -2, 1, 2, -2, 0, 0, -1, 0, 0,
    1, -1, 2, 2, 1, -1, 0, 0, -1, 0, 1, 0, 1, 0, 0, -1, 2, 1, 0, 0,
], dtype=float)
_MP_LNG = np.array([
    1, -1, 0, 2, 0, 0, -2, -1, 1, 0, -1, 0, 1, 0, 1, 1, -1, 3, -2, -1,
    0, -1, 0, 1, 2, 0, -3, -2, -1, -2, 1, 0, 2, 0, -1, 1, 0, -1, 2, -1,
    1, -2, -1, -1, -2, 0, 1, 4, 0, -2, 0, 2, 1, -2, -3, 2, 1, -1, 3, -1,
], dtype=float)
_F_LNG = np.array([
    0, 0, 0, 0, 0, 2, 0, 0, 0, 0, 0, 0, 0, -2, 2, -2, 0, 0, 0, 0,
    0, 0, 0, 0, 0, 0, 0, 0, 2, 0, 0, 0, 0, 0, 0, -2, 2, 0, 2, 0,
    0, 0, 0, 0, 0, -2, 0, 0, 0, 0, -2, -2, 0, 0, 0, 0, 0, 0, 0, -2,
], dtype=float)
_SIN_LNG = np.array([
    6288774, 1274027, 658314, 213618, -185116, -114332, 58793, 57066, 53322, 45758,
    -40923, -34720, -30383, 15327, -12528, 10980, 10675, 10034, 8548, -7888,
    -6766, -5163, 4987, 4036, 3994, 3861, 3665, -2689, -2602, 2390,
    -2348, 2236, -2120, -2069, 2048, -1773, -1595, 1215, -1110, -892,
    -810, 759, -713, -700, 691, 596, 549, 537, 520, -487,
    -399, -381, 351, -340, 330, 327, -323, 299, 294, 0,
], dtype=float)
_COS_LNG = np.array([
    -20905355, -3699111, -2955968, -569925, 48888, -3149, 246158, -152138, -170733, -204586,
    -129620, 108743, 104755, 10321, 0, 79661, -34782, -23210, -21636, 24208,
    30824, -8379, -16675, -12831, -10445, -11650, 14403, -7003, 0, 10056,
    6322, -9884, 5751, 0, -4950, 4130, 0, -3958, 0, 3258,
    2616, -1897, -2117, 2354, 0, 0, -1423, -1117, -1571, -1739,
    0, -4421, 0, 0, 0, 0, 1165, 0, 0, 8752,
], dtype=float)

_D_LAT = np.array([
    0, 0, 0, 2, 2, 2, 2, 0, 2, 0, 2, 2, 2, 2, 2, 2, 2, 0, 4, 0,
    0, 0, 1, 0, 0, 0, 1, 0, 4, 4, 0, 4, 2, 2, 2, 2, 0, 2, 2, 2,
    2, 4, 2, 2, 0, 2, 1, 1, 0, 2, 1, 2, 0, 4, 4, 1, 4, 1, 4, 2,
], dtype=float)
_M_LAT = np.array([
    0, 0, 0, 0, 0, 0, 0, 0, 0, 0, -1, 0, 0, 1, -1, -1, -1, 1, 0, 1,
    0, 1, 0, 1, 1, 1, 0, 0, 0, 0, 0, 0, 0, 0, -1, 0, 0, 0, 0, 1,
    1, 0, -1, -2, 0, 1, 1, 1, 1, 1, 0, -1, 1, 0, -1, 0, 0, 0, -1, -2,
], dtype=float)
_MP_LAT = np.array([
    0, 1, 1, 0, -1, -1, 0, 2, 1, 2, 0, -2, 1, 0, -1, 0, -1, -1, -1, 0,
    0, -1, 0, 1, 1, 0, 0, 3, 0, -1, 1, -2, 0, 2, 1, -2, 3, 2, -3, -1,
    0, 0, 1, 0, 1, 1, 0, 0, -2, -1, 1, -2, 2, -2, -1, 1, 1, -1, 0, 0,
], dtype=float)
_F_LAT = np.array([
    1, 1, -1, -1, 1, -1, 1, 1, -1, -1, -1, -1, 1, -1, 1, 1, -1, -1, -1, 1,
    3, 1, 1, 1, -1, -1, -1, 1, -1, 1, -3, 1, -3, -1, -1, 1, -1, 1, -1, 1,
    1, 1, 1, -1, 3, -1, -1, 1, -1, -1, 1, -1, 1, -1, -1, -1, -1, -1, -1, 1,
], dtype=float)
_SIN_LAT = np.array([
    5128122, 280602, 277693, 173237, 55413, 46271, 32573, 17198, 9266, 8822,
    8216, 4324, 4200, -3359, 2463, 2211, 2065, -1870, 1828, -1794,
    -1749, -1565, -1491, -1475, -1410, -1344, -1335, 1107, 1021, 833,
    777, 671, 607, 596, 491, -451, 439, 422, 421, -366,
    -351, 331, 315, 302, -283, -229, 223, 223, -220, -220,
    -185, 181, -177, 176, 166, -164, 132, -119, 115, 107,
], dtype=float)


# ------------------------------------------------------------
# Fundamental arguments (deg, wrapped to [0, 360))
# ------------------------------------------------------------

def _wrap360(x: float) -> float:
    y = math.fmod(x, 360.0)
    return y + 360.0 if y < 0.0 else y


@dataclass(frozen=True)
class LunarArguments:
    T: float
    D: float   # mean elongation
    M: float   # solar mean anomaly
    Mp: float  # lunar mean anomaly
    F: float   # argument of latitude
    Lp: float  # mean longitude
    E: float   # eccentricity factor

    @classmethod
    def at(cls, T: float) -> "LunarArguments":
        return cls(
            T=T,
            D=_wrap360(polynomial_sum((297.8501921, 445267.1114034, -0.0018819, 1.0 / 545868.0, -1.0 / 113065000.0), T)),
            M=_wrap360(357.5291092 + 35999.0502909 * T - 0.0001536 * T * T + T * T * T / 24490000.0),
            Mp=_wrap360(polynomial_sum((134.9633964, 477198.8675055, 0.0087414, 1.0 / 69699.0, -1.0 / 14712000.0), T)),
            F=_wrap360(polynomial_sum((93.2720950, 483202.0175233, -0.0036539, -1.0 / 3526000.0, 1.0 / 863310000.0), T)),
            Lp=_wrap360(polynomial_sum((218.3164477, 481267.88123421, -0.0015786, 1.0 / 538841.0, -1.0 / 65194000.0), T)),
            E=1.0 - 0.002516 * T - 0.0000074 * T * T,
        )


def _e_factor(m_mult: np.ndarray, E: float) -> np.ndarray:
    absm = np.abs(m_mult)
    return np.where(absm == 1.0, E, np.where(absm == 2.0, E * E, 1.0))


def _series_args(a: LunarArguments, d, m, mp, f) -> np.ndarray:
    return np.radians(d * a.D + m * a.M + mp * a.Mp + f * a.F)


# ------------------------------------------------------------
# Sub-series
# ------------------------------------------------------------

def moon_longitude(a: LunarArguments) -> float:
    """Apparent ecliptic longitude (rad, not wrapped)."""
    arg = _series_args(a, _D_LNG, _M_LNG, _MP_LNG, _F_LNG)
    correction = float(np.sum(_SIN_LNG * _e_factor(_M_LNG, a.E) * np.sin(arg))) / 1e6
    venus = 3958.0 / 1e6 * math.sin(math.radians(119.75 + a.T * 131.849))
    jupiter = 318.0 / 1e6 * math.sin(math.radians(53.09 + a.T * 479264.29))
    flat_earth = 1962.0 / 1e6 * math.sin(math.radians(a.Lp - a.F))
    return math.radians(a.Lp + correction + venus + jupiter + flat_earth + nutation_in_longitude_deg(a.T))


def moon_latitude(a: LunarArguments) -> float:
    """Ecliptic latitude (rad)."""
    arg = _series_args(a, _D_LAT, _M_LAT, _MP_LAT, _F_LAT)
    lat0 = float(np.sum(_SIN_LAT * _e_factor(_M_LAT, a.E) * np.sin(arg))) / 1e6
    venus = 175.0 / 1e6 * math.sin(math.radians(119.75 + a.T * 131.849))
    flat_earth = 1962.0 / 1e6 * math.sin(math.radians(a.Lp - a.F))
    a3 = 382.0 / 1e6 * math.sin(math.radians(313.45 + a.T * 481266.484))
    return math.radians(lat0 + venus + flat_earth + a3)


def moon_distance(a: LunarArguments) -> float:
    """Geocentric distance (AU)."""
    arg = _series_args(a, _D_LNG, _M_LNG, _MP_LNG, _F_LNG)
    correction = float(np.sum(_COS_LNG * _e_factor(_M_LNG, a.E) * np.cos(arg)))
    return (385000560.0 + correction) / 1000.0 / AU_KM


def moon_position(T: float, executor: Optional[Executor] = None) -> SphericalVector:
    a = LunarArguments.at(T)
    if executor is None:
        return SphericalVector(phi=moon_longitude(a), theta=moon_latitude(a), r=moon_distance(a))
    lng = executor.submit(moon_longitude, a)
    lat = executor.submit(moon_latitude, a)
    dist = executor.submit(moon_distance, a)
    return SphericalVector(phi=lng.result(), theta=lat.result(), r=dist.result())


@dataclass(frozen=True)
class FastMoonEphemeris:
    """Geocentric / ecliptic / apparent Moon oracle."""
    metadata: Metadata = GEOCENTRIC_ECLIPTIC_APPARENT
    executor: Optional[Executor] = field(default=None, compare=False, repr=False)

    def evaluate(self, mjd: float) -> SphericalVector:
        return moon_position(julian_centuries(mjd), self.executor)


FAST_MOON = FastMoonEphemeris()
