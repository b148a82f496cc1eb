# tests/test_reference.py

import math
from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from skyevents.core.errors import GeometricDegeneracy, PreconditionViolation
from skyevents.core.time import julian_centuries, mjd_from_centuries
from skyevents.core.types import (
    GEOCENTRIC_ECLIPTIC_APPARENT,
    GEOCENTRIC_EQUATORIAL_APPARENT,
    SphericalVector,
)
from skyevents.core.ephemeris import FunctionEphemeris
from skyevents.reference.angles import (
    ARCSEC_TO_RAD,
    angular_distance,
    dms_to_rad,
    normalize,
    polynomial_sum,
    position_angle,
    rad_to_hms,
    to_rectangular,
    to_spherical,
    wrap_pi,
)
from skyevents.reference.bodies import EARTH, ELLIPSOIDS, MOON, SUN, horizon_depression
from skyevents.reference.fast_moon import FAST_MOON, FastMoonEphemeris, moon_position
from skyevents.reference.fast_sun import FAST_SUN, sun_distance, sun_longitude
from skyevents.reference.obliquity import (
    EquatorialEphemeris,
    ecliptic_to_equatorial,
    equatorial_to_ecliptic,
    mean_obliquity,
)

# --- Fast series reference values (T in Julian centuries from J2000) ---
SUN_REF = [
    (0.0, 11.17653591468365, 0.9833084337672905),
    (0.21, 11.17925484009307, 0.9833199547171038),
    (-0.21, 11.173943661007298, 0.9832971305001807),
]
MOON_REF = [
    (0.0, 3.897580699834961, 0.0902602318375678, 0.002690177410307512),
    (0.21, 2.085051381047725, 0.05849167492439595, 0.0025889864641208027),
    (-0.21, 5.488887078446313, 0.05133887486340649, 0.002409531558438556),
]


@pytest.mark.parametrize("T, phi, r", SUN_REF)
def test_fast_sun_reference(T, phi, r):
    assert sun_longitude(T) == pytest.approx(normalize(phi), abs=1e-9)
    assert sun_distance(T) == pytest.approx(r, abs=1e-12)


@pytest.mark.parametrize("T, phi, theta, r", MOON_REF)
def test_fast_moon_reference(T, phi, theta, r):
    v = moon_position(T)
    assert normalize(v.phi) == pytest.approx(normalize(phi), abs=1e-9)
    assert v.theta == pytest.approx(theta, abs=1e-9)
    assert v.r == pytest.approx(r, abs=1e-12)


def test_fast_sun_oracle_is_geocentric_ecliptic():
    v = FAST_SUN.evaluate(mjd_from_centuries(0.21))
    assert FAST_SUN.metadata == GEOCENTRIC_ECLIPTIC_APPARENT
    assert v.theta == 0.0
    assert v.phi == pytest.approx(normalize(SUN_REF[1][1]), abs=1e-9)


def test_fast_moon_sub_series_on_an_executor_match_inline():
    mjd = mjd_from_centuries(0.21)
    with ThreadPoolExecutor(max_workers=3) as ex:
        threaded = FastMoonEphemeris(executor=ex).evaluate(mjd)
    assert threaded == FAST_MOON.evaluate(mjd)


# --- Angles ---

@pytest.mark.parametrize(
    "x, expected",
    [(0.0, 0.0), (-1e-20, 0.0), (7.0, 7.0 - 2 * math.pi), (-math.pi / 2, 1.5 * math.pi)],
)
def test_normalize(x, expected):
    y = normalize(x)
    assert 0.0 <= y < 2 * math.pi
    assert y == pytest.approx(expected, abs=1e-15)


def test_wrap_pi_range():
    assert wrap_pi(math.pi) == pytest.approx(-math.pi)
    assert wrap_pi(3 * math.pi / 2) == pytest.approx(-math.pi / 2)
    assert wrap_pi(-0.25) == pytest.approx(-0.25)


def test_sexagesimal_helpers():
    assert dms_to_rad(-10, 30) == pytest.approx(-math.radians(10.5))
    h, m, s = rad_to_hms(math.radians(15 * (6 + 30.5 / 60)))
    assert (h, m) == (6, 30) and s == pytest.approx(30.0, abs=1e-6)
    assert polynomial_sum((1.0, 2.0, 3.0), 2.0) == 17.0


def test_rectangular_round_trip_keeps_distance():
    v = SphericalVector(2.5, -0.4, 3.0)
    back = to_spherical(to_rectangular(v))
    assert (back.phi, back.theta, back.r) == pytest.approx((2.5, -0.4, 3.0), abs=1e-12)


def test_zero_vector_has_no_direction():
    with pytest.raises(GeometricDegeneracy):
        to_spherical(np.zeros(3))


def test_angular_distance_limits():
    a = SphericalVector(0.3, 0.2)
    assert angular_distance(a, a) == 0.0
    antipode = SphericalVector(0.3 + math.pi, -0.2)
    assert angular_distance(a, antipode) == pytest.approx(math.pi, abs=1e-7)
    assert angular_distance(SphericalVector(0.0, 0.0), SphericalVector(0.0, 1e-6)) == pytest.approx(1e-6, rel=1e-3)


def test_position_angle_sign_convention():
    origin = SphericalVector(0.0, 0.0)
    assert position_angle(origin, origin) == 0.0
    assert position_angle(origin, SphericalVector(0.0, 0.1)) == 0.0
    assert position_angle(origin, SphericalVector(0.1, 0.0)) == pytest.approx(-math.pi / 2)


# --- Obliquity & frame rotation ---

def test_mean_obliquity_at_j2000():
    assert mean_obliquity(0.0, "williams1994") == pytest.approx(84381.406173 * ARCSEC_TO_RAD, abs=1e-15)
    assert mean_obliquity(0.0, "iau1976") == pytest.approx(84381.448 * ARCSEC_TO_RAD, abs=1e-15)
    # about 47" per century, decreasing
    drift = (mean_obliquity(1.0, "iau2006") - mean_obliquity(0.0, "iau2006")) / ARCSEC_TO_RAD
    assert drift == pytest.approx(-46.84, abs=0.05)
    with pytest.raises(PreconditionViolation):
        mean_obliquity(0.0, "ptolemy")


def test_solstice_point_maps_to_obliquity():
    eps = math.radians(23.44)
    v = ecliptic_to_equatorial(SphericalVector(math.pi / 2, 0.0, 1.0), eps)
    assert v.phi == pytest.approx(math.pi / 2, abs=1e-12)
    assert v.theta == pytest.approx(eps, abs=1e-12)
    back = equatorial_to_ecliptic(v, eps)
    assert (back.phi, back.theta) == pytest.approx((math.pi / 2, 0.0), abs=1e-12)


def test_equatorial_ephemeris_metadata_and_freezing():
    eq = EquatorialEphemeris(FAST_SUN)
    assert eq.metadata == GEOCENTRIC_EQUATORIAL_APPARENT

    frozen = EquatorialEphemeris(FAST_SUN, model="simon1994", frozen_at_mjd=59593.0)
    moving = EquatorialEphemeris(FAST_SUN, model="simon1994")
    # identical at the freezing instant, distance passes through untouched
    assert frozen.evaluate(59593.0) == moving.evaluate(59593.0)
    assert frozen.evaluate(59593.0).r == FAST_SUN.evaluate(59593.0).r


def test_equatorial_ephemeris_requires_an_ecliptic_inner():
    inner = FunctionEphemeris(lambda mjd: SphericalVector(0.0, 0.0), GEOCENTRIC_EQUATORIAL_APPARENT)
    with pytest.raises(PreconditionViolation):
        EquatorialEphemeris(inner)


# --- Bodies ---

def test_solar_semi_diameter_at_one_au():
    assert math.degrees(SUN.angular_radius(1.0)) * 3600.0 == pytest.approx(959.63, abs=0.05)
    assert MOON.polar_radius == MOON.equatorial_radius
    assert EARTH.polar_radius == pytest.approx(6356.75, abs=0.01)
    assert ELLIPSOIDS["moon"] is MOON


def test_horizon_depression():
    assert horizon_depression(0.0) == 0.0
    # geometric dip, roughly 1.93 arcmin * sqrt(h) without refraction
    dip_arcmin = math.degrees(horizon_depression(100.0)) * 60.0
    assert dip_arcmin == pytest.approx(19.3, abs=0.3)
    # grows with the square root of the height
    assert horizon_depression(400.0) == pytest.approx(2.0 * horizon_depression(100.0), rel=1e-3)
    with pytest.raises(PreconditionViolation):
        horizon_depression(-1.0)


def test_julian_centuries_epoch():
    assert julian_centuries(51544.5) == 0.0
    assert mjd_from_centuries(1.0) == 51544.5 + 36525.0
