# reference/sidereal.py
"""
Greenwich mean / local apparent sidereal time.

All functions take MJD (UT) and return radians wrapped to [0, 2*pi).
The equation of the equinoxes uses the IAU 1980 nutation series (Meeus, ch. 22),
valid for |year| < 3000.
"""

from __future__ import annotations

import math
from typing import Callable, Literal, Optional

import numpy as np

from ..core.errors import PreconditionViolation
from ..core.time import SECONDS_PER_DAY, J2000_MJD, julian_centuries
from ..core.types import ObserverPosition
from .angles import PI2, ARCSEC_TO_RAD, normalize, deg_normalize_to_rad

SiderealMethod = Literal["laskar1986", "williams1994", "iau2000", "iau20xx"]

# (mjd, observer position) -> local apparent sidereal time (rad)
SiderealTimeFn = Callable[[float, ObserverPosition], float]

SIDEREAL_DAY_LENGTH = 1.00273781191135448  # sidereal days per solar day


def _day_split(mjd: float):
    mjd0 = math.floor(mjd)
    return mjd0, julian_centuries(mjd0), SECONDS_PER_DAY * (mjd - mjd0)


def gmst_laskar1986(mjd: float) -> float:
    _, T0, secs = _day_split(mjd)
    h0 = ((-6.2e-6 * T0 + 9.3104e-2) * T0 + 8640184.812866) * T0 + 24110.54841
    msday = 1.0 + ((-1.86e-5 * T0 + 0.186208) * T0 + 8640184.812866) / (SECONDS_PER_DAY * 36525.0)
    return normalize(PI2 / SECONDS_PER_DAY * math.fmod(h0 + msday * secs, SECONDS_PER_DAY))


def gmst_williams1994(mjd: float) -> float:
    _, T0, secs = _day_split(mjd)
    h0 = (((-2.0e-6 * T0 - 3e-7) * T0 + 9.27695e-2) * T0 + 8640184.7928613) * T0 + 24110.54841
    msday = (
        (((-(4.0 * 2.0e-6) * T0 - (3.0 * 3e-7)) * T0 + (2.0 * 9.27695e-2)) * T0 + 8640184.7928613)
        / (SECONDS_PER_DAY * 36525.0)
        + 1.0
    )
    return normalize(PI2 / SECONDS_PER_DAY * math.fmod(h0 + msday * secs, SECONDS_PER_DAY))


def gmst_iau20xx(mjd: float, *, iau2000: bool = False) -> float:
    """Earth-rotation-angle based GMST; `iau2000=True` selects the IAU 2000 polynomial."""
    mjd0 = math.floor(mjd)
    dt0 = mjd - J2000_MJD
    secs = SECONDS_PER_DAY * (mjd - mjd0)
    T = julian_centuries(mjd)
    h0 = PI2 * (secs / SECONDS_PER_DAY + 0.5 + 0.7790572732640 + (SIDEREAL_DAY_LENGTH - 1.0) * dt0)
    if iau2000:
        poly = 0.014506 + (4612.156534 + (1.3915817 + (-0.00000044 + (-0.000029956 + (-0.0000000368) * T) * T) * T) * T) * T
    else:
        poly = 0.014506 + (4612.15739966 + (1.39667721 + (-0.00009344 + 0.00001882 * T) * T) * T) * T
    return normalize(h0 + poly * ARCSEC_TO_RAD)


def gmst(mjd: float, method: SiderealMethod = "williams1994") -> float:
    if method == "laskar1986":
        return gmst_laskar1986(mjd)
    if method == "williams1994":
        return gmst_williams1994(mjd)
    if method == "iau2000":
        return gmst_iau20xx(mjd, iau2000=True)
    if method == "iau20xx":
        return gmst_iau20xx(mjd, iau2000=False)
    raise PreconditionViolation(f"Unknown sidereal method '{method}'. Available: laskar1986, williams1994, iau2000, iau20xx")


# ------------------------------------------------------------
# Nutation (IAU 1980, truncated) and equation of the equinoxes
# ------------------------------------------------------------

# multipliers of D, M, M', F, Omega
_NUT_ARGS = np.array([
    [0, 0, 0, 0, 1], [-2, 0, 0, 2, 2], [0, 0, 0, 2, 2], [0, 0, 0, 0, 2], [0, 1, 0, 0, 0],
    [0, 0, 1, 0, 0], [-2, 1, 0, 2, 2], [0, 0, 0, 2, 1], [0, 0, 1, 2, 2], [-2, -1, 0, 2, 2],
    [-2, 0, 1, 0, 0], [-2, 0, 0, 2, 1], [0, 0, -1, 2, 2], [2, 0, 0, 0, 0], [0, 0, 1, 0, 1],
    [2, 0, -1, 2, 2], [0, 0, -1, 0, 1], [0, 0, 1, 2, 1], [-2, 0, 2, 0, 0], [0, 0, -2, 2, 1],
    [2, 0, 0, 2, 2], [0, 0, 2, 2, 2], [0, 0, 2, 0, 0], [-2, 0, 1, 2, 2], [0, 0, 0, 2, 0],
    [-2, 0, 0, 2, 0], [0, 0, -1, 2, 1], [0, 2, 0, 0, 0], [2, 0, -1, 0, 1], [-2, 2, 0, 2, 2],
    [0, 1, 0, 0, 1], [-2, 0, 1, 0, 1], [0, -1, 0, 0, 1], [0, 0, 2, -2, 0], [2, 0, -1, 2, 1],
    [2, 0, 1, 2, 2], [0, 1, 0, 2, 2], [-2, 1, 1, 0, 0], [0, -1, 0, 2, 2], [2, 0, 0, 2, 1],
    [2, 0, 1, 0, 0], [-2, 0, 2, 2, 2], [-2, 0, 1, 2, 1], [2, 0, -2, 0, 1], [2, 0, 0, 0, 1],
    [0, -1, 1, 0, 0], [-2, -1, 0, 2, 1], [-2, 0, 0, 0, 1], [0, 0, 2, 2, 1],
], dtype=float)

# (psi, psi*T, eps, eps*T) in units of 0.0001 arcsec
_NUT_COEFFS = np.array([
    [-171996, -174.2, 92025, 8.9], [-13187, -1.6, 5736, -3.1], [-2274, -0.2, 977, -0.5],
    [2062, 0.2, -895, 0.5], [1426, -3.4, 54, -0.1], [712, 0.1, -7, 0], [-517, 1.2, 224, -0.6],
    [-386, -0.4, 200, 0], [-301, 0, 129, -0.1], [217, -0.5, -95, 0.3], [-158, 0, 0, 0],
    [129, 0.1, -70, 0], [123, 0, -53, 0], [63, 0, 0, 0], [63, 0.1, -33, 0], [-59, 0, 26, 0],
    [-58, -0.1, 32, 0], [-51, 0, 27, 0], [48, 0, 0, 0], [46, 0, -24, 0], [-38, 0, 16, 0],
    [-31, 0, 13, 0], [29, 0, 0, 0], [29, 0, -12, 0], [26, 0, 0, 0], [-22, 0, 0, 0],
    [21, 0, -10, 0], [17, -0.1, 0, 0], [16, 0, -8, 0], [-16, 0.1, 7, 0], [-15, 0, 9, 0],
    [-13, 0, 7, 0], [-12, 0, 6, 0], [11, 0, 0, 0], [-10, 0, 5, 0], [-8, 0, 3, 0], [7, 0, -3, 0],
    [-7, 0, 0, 0], [-7, 0, 3, 0], [-7, 0, 3, 0], [6, 0, 0, 0], [6, 0, -3, 0], [6, 0, -3, 0],
    [-6, 0, 3, 0], [-6, 0, 3, 0], [5, 0, 0, 0], [-5, 0, 3, 0], [-5, 0, 3, 0], [-5, 0, 0, 0],
], dtype=float)


def nutation_angles(T: float) -> tuple[float, float]:
    """(delta_psi, delta_eps) in radians at Julian centuries T."""
    T2 = T * T
    T3 = T2 * T
    D = deg_normalize_to_rad(297.85036 + 445267.111480 * T - 0.0019142 * T2 + T3 / 189474.0)
    M = deg_normalize_to_rad(357.52772 + 35999.050340 * T - 0.0001603 * T2 - T3 / 300000.0)
    Mm = deg_normalize_to_rad(134.96298 + 477198.867398 * T + 0.0086972 * T2 + T3 / 56250.0)
    F = deg_normalize_to_rad(93.27191 + 483202.017538 * T - 0.0036825 * T2 + T3 / 327270.0)
    Om = deg_normalize_to_rad(125.04452 - 1934.136261 * T + 0.0020708 * T2 + T3 / 450000.0)

    arg = _NUT_ARGS @ np.array([D, M, Mm, F, Om])
    c = _NUT_COEFFS
    dp = float(np.sum((c[:, 0] + c[:, 1] * T) * np.sin(arg)))
    de = float(np.sum((c[:, 2] + c[:, 3] * T) * np.cos(arg)))
    return dp * 1e-4 * ARCSEC_TO_RAD, de * 1e-4 * ARCSEC_TO_RAD


def equation_of_equinoxes(T: float) -> float:
    """Equation of the equinoxes (rad) = delta_psi * cos(true obliquity)."""
    dpsi, deps = nutation_angles(T)
    T2 = T * T
    eps0 = (84381.448 - 46.815 * T - 0.00059 * T2 + 0.001813 * T2 * T) * ARCSEC_TO_RAD
    return dpsi * math.cos(eps0 + deps)


def local_apparent_sidereal_time(
    mjd: float,
    position: ObserverPosition,
    *,
    method: SiderealMethod = "williams1994",
    equation_of_equinoxes_rad: Optional[float] = None,
) -> float:
    """GMST + equation of the equinoxes + east longitude, wrapped to [0, 2*pi)."""
    eoe = equation_of_equinoxes(julian_centuries(mjd)) if equation_of_equinoxes_rad is None else equation_of_equinoxes_rad
    return normalize(gmst(mjd, method) + eoe + position.longitude)


def sidereal_time_fn(method: SiderealMethod = "williams1994") -> SiderealTimeFn:
    """Bind a method into the (mjd, position) -> LAST callable the rise/set solver consumes."""
    def _last(mjd: float, position: ObserverPosition) -> float:
        return local_apparent_sidereal_time(mjd, position, method=method)
    return _last
