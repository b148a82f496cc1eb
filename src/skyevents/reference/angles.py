from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from ..core.errors import GeometricDegeneracy
from ..core.types import SphericalVector


# ------------------------------------------------------------
# Units & wrapping
# ------------------------------------------------------------

PI2 = 2.0 * math.pi
ARCSEC_TO_RAD = math.pi / (180.0 * 3600.0)
ARCMIN_TO_RAD = math.pi / (180.0 * 60.0)
RAD_TO_HOUR = 180.0 / (15.0 * math.pi)
RAD_TO_DAY = RAD_TO_HOUR / 24.0


def normalize(rad: float) -> float:
    """Wrap radians to [0, 2*pi)."""
    y = math.fmod(rad, PI2)
    if y < 0.0:
        y += PI2
    # fmod of a tiny negative number can round up to exactly 2*pi
    return 0.0 if y >= PI2 else y


def wrap_pi(rad: float) -> float:
    """Wrap radians to [-pi, pi)."""
    return normalize(rad + math.pi) - math.pi


def deg_normalize_to_rad(deg: float) -> float:
    y = math.fmod(deg, 360.0)
    if y < 0.0:
        y += 360.0
    return math.radians(y)


def dms_to_rad(deg: float, minutes: float = 0.0, seconds: float = 0.0) -> float:
    """Sexagesimal degrees to radians. The sign of `deg` applies to the whole angle."""
    sign = -1.0 if deg < 0 else 1.0
    return sign * math.radians(abs(deg) + minutes / 60.0 + seconds / 3600.0)


def rad_to_hms(rad: float) -> tuple[int, int, float]:
    """Radians -> (hours, minutes, seconds) of right ascension in [0h, 24h)."""
    h = normalize(rad) * RAD_TO_HOUR
    hh = int(h)
    m = (h - hh) * 60.0
    mm = int(m)
    return hh, mm, (m - mm) * 60.0


def polynomial_sum(coeffs: Sequence[float], x: float) -> float:
    """c0 + c1 x + c2 x^2 + ... (Horner)."""
    acc = 0.0
    for c in reversed(coeffs):
        acc = acc * x + c
    return acc


# ------------------------------------------------------------
# Vectors
# ------------------------------------------------------------

def to_rectangular(v: SphericalVector) -> np.ndarray:
    cl = math.cos(v.theta)
    return np.array([
        v.r * cl * math.cos(v.phi),
        v.r * cl * math.sin(v.phi),
        v.r * math.sin(v.theta),
    ])


def to_spherical(xyz: np.ndarray) -> SphericalVector:
    x, y, z = (float(c) for c in xyz)
    rho2 = x * x + y * y
    r = math.sqrt(rho2 + z * z)
    if r == 0.0:
        raise GeometricDegeneracy("direction of a zero-length vector is undefined")
    phi = 0.0 if rho2 == 0.0 else normalize(math.atan2(y, x))
    theta = math.atan2(z, math.sqrt(rho2))
    return SphericalVector(phi=phi, theta=theta, r=r)


def rotation_x(angle: float) -> np.ndarray:
    """Frame rotation about the x axis (passive, right-handed)."""
    c, s = math.cos(angle), math.sin(angle)
    return np.array([
        [1.0, 0.0, 0.0],
        [0.0, c, s],
        [0.0, -s, c],
    ])


def rotate(v: SphericalVector, matrix: np.ndarray) -> SphericalVector:
    out = to_spherical(matrix @ to_rectangular(v))
    return SphericalVector(phi=out.phi, theta=out.theta, r=v.r)


def angular_distance(a: SphericalVector, b: SphericalVector) -> float:
    """
    Great-circle separation in [0, pi], from the chord between unit vectors.

    acos(1 - |u1 - u2|^2 / 2); the argument is clipped so rounding can never
    produce NaN at zero or antipodal separation.
    """
    u1 = to_rectangular(SphericalVector(a.phi, a.theta, 1.0))
    u2 = to_rectangular(SphericalVector(b.phi, b.theta, 1.0))
    d = u1 - u2
    r2 = float(d @ d)
    return math.acos(min(1.0, max(-1.0, 1.0 - 0.5 * r2)))


def position_angle(a: SphericalVector, b: SphericalVector) -> float:
    """
    Position angle of `b` as seen from `a` (radians, sign convention of the
    shadow-ellipse code: -atan2(y, x)). Coincident points give 0.
    """
    dl = b.phi - a.phi
    cbp = math.cos(b.theta)
    y = math.sin(dl) * cbp
    x = math.sin(b.theta) * math.cos(a.theta) - cbp * math.sin(a.theta) * math.cos(dl)
    if x == 0.0 and y == 0.0:
        return 0.0
    return -math.atan2(y, x)
