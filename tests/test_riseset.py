# tests/test_riseset.py

import math
from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from skyevents.core.deltat import ConstantDeltaT, tt_from_ut, ut_from_tt
from skyevents.core.ephemeris import FunctionEphemeris
from skyevents.core.errors import PreconditionViolation
from skyevents.core.time import SECONDS_PER_DAY, mjd_from_datetime
from skyevents.core.types import (
    GEOCENTRIC_ECLIPTIC_APPARENT,
    GEOCENTRIC_EQUATORIAL_APPARENT,
    Observer,
    ObserverPosition,
    SphericalVector,
)
from skyevents.events import riseset as rs
from skyevents.events.config import RiseSetConfig
from skyevents.reference.angles import ARCMIN_TO_RAD, dms_to_rad, normalize, wrap_pi
from skyevents.reference.fast_sun import FAST_SUN
from skyevents.reference.obliquity import EquatorialEphemeris
from skyevents.reference.sidereal import SIDEREAL_DAY_LENGTH

# --- Reference cases ---
# Fast Sun rotated into the equator with the Simon (1994) obliquity frozen at
# the start date; upper limb on the horizon with a 15' solar radius and no dip.
# Start dates are 00:00 UTC moved onto TT; published times are truncated to
# the second.
#
# Saint Petersburg, 30d19'36"E 60d03'32.6"N, 2022-01-14, sidereal clock on TT:
#   Rise 06:47:42, Set 13:25:51, Upper 10:06:31, Lower 2022-01-13 22:06:20
# Saint Petersburg, 2022-01-25, sidereal clock on UT1:
#   Rise 06:29:03, Set 13:53:34, Upper 10:10:57, Lower 22:11:03
# Murmansk, 33d05'08.1"E 68d58'23.9"N, 1995-05-21, sidereal clock on UT1:
#   Set 21:39:12, Upper 09:44:11, Lower 21:44:13; the upper limb dips under
#   the horizon around the lower transit and is back up minutes later

SPB = ObserverPosition(dms_to_rad(30, 19, 36), dms_to_rad(60, 3, 32.6))
MURMANSK = ObserverPosition(dms_to_rad(33, 5, 8.1), dms_to_rad(68, 58, 23.9))

SUN_THRESHOLD = rs.horizon_astronomical(15.0 * ARCMIN_TO_RAD, 0.0)
REQUESTS = [SUN_THRESHOLD, rs.UpperTransit(), rs.LowerTransit()]

UT1_CLOCK = RiseSetConfig(sidereal_clock="ut1")

TOL_S = 2.0


def _mjd(*args) -> float:
    return mjd_from_datetime(datetime(*args, tzinfo=timezone.utc))


def _start(*args) -> float:
    return tt_from_ut(_mjd(*args))


def _solar(start_mjd):
    return EquatorialEphemeris(FAST_SUN, model="simon1994", frozen_at_mjd=start_mjd)


def _seconds_off(mjd_tt: float, *when) -> float:
    """Distance (s) from the UTC instant of `mjd_tt` to the second [when, when + 1 s)."""
    t = (ut_from_tt(mjd_tt) - _mjd(*when)) * SECONDS_PER_DAY
    if t < 0.0:
        return -t
    return max(0.0, t - 1.0)


def _by_event(results):
    return {r.event: r for r in results}


def test_saint_petersburg_winter_day():
    start = _start(2022, 1, 14)
    out = _by_event(rs.solve_events(start, SPB, _solar(start), REQUESTS))

    assert isinstance(out["rise"], rs.CrossingInstant)
    assert _seconds_off(out["rise"].mjd, 2022, 1, 14, 6, 47, 42) <= TOL_S
    assert _seconds_off(out["set"].mjd, 2022, 1, 14, 13, 25, 51) <= TOL_S
    assert _seconds_off(out["upper_transit"].mjd, 2022, 1, 14, 10, 6, 31) <= TOL_S
    # nearest lower transit lies before the start
    assert out["lower_transit"].mjd < start
    assert _seconds_off(out["lower_transit"].mjd, 2022, 1, 13, 22, 6, 20) <= TOL_S

    assert out["rise"].altitude == SUN_THRESHOLD.elevation
    assert out["set"].altitude == SUN_THRESHOLD.elevation
    # noon Sun at 60N in mid-January stays below 10 deg
    assert 0.0 < math.degrees(out["upper_transit"].altitude) < 10.0
    assert math.degrees(out["lower_transit"].altitude) < -40.0


def test_saint_petersburg_later_in_january():
    start = _start(2022, 1, 25)
    out = _by_event(rs.solve_events(start, SPB, _solar(start), REQUESTS, config=UT1_CLOCK))

    assert _seconds_off(out["rise"].mjd, 2022, 1, 25, 6, 29, 3) <= TOL_S
    assert _seconds_off(out["set"].mjd, 2022, 1, 25, 13, 53, 34) <= TOL_S
    assert _seconds_off(out["upper_transit"].mjd, 2022, 1, 25, 10, 10, 57) <= TOL_S
    assert out["lower_transit"].mjd < start

    # the evening lower transit is the nearest one from noon
    (lower,) = rs.solve_events(start + 0.5, SPB, _solar(start), [rs.LowerTransit()], config=UT1_CLOCK)
    assert _seconds_off(lower.mjd, 2022, 1, 25, 22, 11, 3) <= TOL_S


def test_murmansk_polar_day_start():
    start = _start(1995, 5, 21)
    eph = _solar(start)
    out = _by_event(rs.solve_events(start, MURMANSK, eph, REQUESTS, config=UT1_CLOCK))

    assert _seconds_off(out["set"].mjd, 1995, 5, 21, 21, 39, 12) <= TOL_S
    assert _seconds_off(out["upper_transit"].mjd, 1995, 5, 21, 9, 44, 11) <= TOL_S

    (lower,) = rs.solve_events(start + 0.5, MURMANSK, eph, [rs.LowerTransit()], config=UT1_CLOCK)
    assert _seconds_off(lower.mjd, 1995, 5, 21, 21, 44, 13) <= TOL_S
    # midnight Sun only grazes the threshold, so the rise follows within minutes
    assert isinstance(out["rise"], rs.CrossingInstant)
    assert 0.0 < (out["rise"].mjd - lower.mjd) * SECONDS_PER_DAY < 600.0
    assert out["set"].mjd < lower.mjd


def test_ut1_clock_delays_events_by_delta_t():
    start = _start(2022, 1, 14)
    eph = _solar(start)
    (on_tt,) = rs.solve_events(start, SPB, eph, [rs.UpperTransit()])
    (on_ut1,) = rs.solve_events(start, SPB, eph, [rs.UpperTransit()], config=UT1_CLOCK)
    delta_t = (start - ut_from_tt(start)) * SECONDS_PER_DAY
    assert (on_ut1.mjd - on_tt.mjd) * SECONDS_PER_DAY == pytest.approx(delta_t, abs=0.5)


def test_constant_delta_t_of_zero_matches_the_tt_clock():
    start = _start(2022, 1, 14)
    eph = _solar(start)
    cfg = UT1_CLOCK.tweak(delta_t=ConstantDeltaT(0.0))
    assert rs.solve_events(start, SPB, eph, REQUESTS, config=cfg) == rs.solve_events(start, SPB, eph, REQUESTS)


def test_observer_with_ellipsoid_is_accepted():
    start = _mjd(2022, 1, 14)
    a = rs.solve_events(start, SPB, _solar(start), [rs.UpperTransit()])
    b = rs.solve_events(start, Observer(SPB), _solar(start), [rs.UpperTransit()])
    assert a == b


def test_reconverges_from_just_before_a_returned_instant():
    start = _mjd(2022, 1, 14)
    eph = _solar(start)
    first = rs.solve_events(start, SPB, eph, REQUESTS)
    eps = 1.0 / SECONDS_PER_DAY
    for r in first:
        again = rs.solve_events(r.mjd - eps, SPB, eph, [r.request])
        match = [x for x in again if x.event == r.event][0]
        assert abs(match.mjd - r.mjd) * SECONDS_PER_DAY <= 0.5


# --- Synthetic star with an exactly linear sidereal clock ---

OMEGA = 2.0 * math.pi * SIDEREAL_DAY_LENGTH


def linear_last(mjd, position):
    return normalize(OMEGA * mjd + position.longitude)


def _star(ra, dec):
    return FunctionEphemeris(lambda mjd: SphericalVector(ra, dec), GEOCENTRIC_EQUATORIAL_APPARENT)


def _solve(start, position, eph, requests, **kwargs):
    return rs.solve_events(start, position, eph, requests, sidereal_time=linear_last, **kwargs)


def test_star_transits_hit_the_meridian():
    pos = ObserverPosition(0.4, 0.5)
    start = 60000.25
    up, low = _solve(start, pos, _star(1.0, 0.3), [rs.UpperTransit(True), rs.LowerTransit(True)])

    assert start <= up.mjd < start + 1.0
    assert wrap_pi(linear_last(up.mjd, pos) - 1.0) == pytest.approx(0.0, abs=1e-7)
    assert abs(low.mjd - start) <= 0.5
    assert wrap_pi(linear_last(low.mjd, pos) - 1.0 - math.pi) == pytest.approx(0.0, abs=1e-7)

    assert up.altitude == pytest.approx(math.pi / 2 - abs(0.5 - 0.3), abs=1e-12)
    assert low.altitude == pytest.approx(0.5 + 0.3 - math.pi / 2, abs=1e-12)


def test_star_rises_east_and_sets_west_once_per_day():
    pos = ObserverPosition(0.0, 0.7)
    dec = 0.2
    star = _star(2.0, dec)
    h = math.radians(-0.5)

    (low,) = _solve(60000.0, pos, star, [rs.LowerTransit(True)])
    rise, set_ = _solve(low.mjd, pos, star, [rs.RiseSet(h, True)])

    assert (rise.event, set_.event) == ("rise", "set")
    assert low.mjd < rise.mjd < set_.mjd < rise.mjd + 1.0

    for r, sign in ((rise, -1.0), (set_, 1.0)):
        H = wrap_pi(linear_last(r.mjd, pos) - 2.0)
        assert math.copysign(1.0, H) == sign
        sin_h = math.sin(pos.latitude) * math.sin(dec) + math.cos(pos.latitude) * math.cos(dec) * math.cos(H)
        assert math.asin(sin_h) == pytest.approx(h, abs=1e-7)


@pytest.mark.parametrize(
    "lat_deg, dec_deg, expected",
    [
        (60.0, 50.0, rs.Circumpolar),
        (60.0, -50.0, rs.AlwaysBelowHorizon),
        (-45.0, -60.0, rs.Circumpolar),
        (-45.0, 60.0, rs.AlwaysBelowHorizon),
    ],
)
def test_no_crossing_when_latitude_and_declination_reach_the_pole(lat_deg, dec_deg, expected):
    pos = ObserverPosition(0.0, math.radians(lat_deg))
    rise, set_, up = _solve(60000.0, pos, _star(0.0, math.radians(dec_deg)), [rs.custom(), rs.UpperTransit()])
    assert isinstance(rise, expected) and isinstance(set_, expected)
    assert rise.event == "rise" and set_.event == "set"
    # transits still exist
    assert isinstance(up, rs.CrossingInstant)


@pytest.mark.parametrize("dec_deg, expected", [(10.0, rs.Circumpolar), (-10.0, rs.AlwaysBelowHorizon)])
def test_observer_at_the_pole_takes_the_limiting_outcome(dec_deg, expected):
    pos = ObserverPosition(0.0, math.pi / 2)
    rise, _ = _solve(60000.0, pos, _star(0.0, math.radians(dec_deg)), [rs.custom()])
    assert isinstance(rise, expected)


def test_hour_angle_cosine_at_the_pole_is_infinite():
    assert rs.hour_angle_cosine(0.0, math.pi / 2, math.radians(-5)) == math.inf
    assert rs.hour_angle_cosine(0.0, math.pi / 2, math.radians(5)) == -math.inf


def test_results_follow_request_order():
    out = _solve(60000.0, ObserverPosition(0.0, 0.3), _star(1.0, 0.1), [rs.UpperTransit(True), rs.custom(is_star=True)])
    assert [r.event for r in out] == ["upper_transit", "rise", "set"]


# --- Preconditions & non-convergence ---

class CountingEphemeris:
    def __init__(self, phi=1.0, theta=0.2, metadata=GEOCENTRIC_EQUATORIAL_APPARENT):
        self.metadata = metadata
        self.calls = 0
        self._v = SphericalVector(phi, theta)

    def evaluate(self, mjd):
        self.calls += 1
        return self._v


def test_ecliptic_oracle_is_rejected_before_any_evaluation():
    eph = CountingEphemeris(metadata=GEOCENTRIC_ECLIPTIC_APPARENT)
    with pytest.raises(PreconditionViolation):
        rs.solve_events(60000.0, SPB, eph, REQUESTS)
    assert eph.calls == 0


def test_unbound_fast_sun_is_rejected():
    with pytest.raises(PreconditionViolation):
        rs.solve_events(60000.0, SPB, FAST_SUN, REQUESTS)


def test_non_finite_start_is_rejected():
    with pytest.raises(PreconditionViolation):
        rs.solve_events(float("nan"), SPB, CountingEphemeris(), REQUESTS)


def _frozen_clock(mjd, position):
    # the body never comes any closer to the meridian
    return 0.0


def test_star_reports_non_convergence_without_retry():
    eph = CountingEphemeris(phi=1.0)
    (r,) = rs.solve_events(60000.0, SPB, eph, [rs.UpperTransit(is_star=True)], sidereal_time=_frozen_clock)
    assert isinstance(r, rs.NonConvergence)
    assert r.iterations == 20
    assert eph.calls == 20


def test_body_retries_from_upper_transit_then_gives_up(caplog):
    eph = CountingEphemeris(phi=1.0)
    with caplog.at_level("INFO", logger="skyevents.events.riseset"):
        (r,) = rs.solve_events(60000.0, SPB, eph, [rs.UpperTransit()], sidereal_time=_frozen_clock)
    assert isinstance(r, rs.NonConvergence)
    assert r.iterations == 40
    # first attempt, anchor solve, retry
    assert eph.calls == 60
    assert any("did not converge" in rec.message for rec in caplog.records if rec.levelname == "WARNING")


def test_iteration_cap_comes_from_config():
    eph = CountingEphemeris(phi=1.0)
    cfg = RiseSetConfig(max_iterations=5)
    (r,) = rs.solve_events(60000.0, SPB, eph, [rs.LowerTransit(True)], config=cfg, sidereal_time=_frozen_clock)
    assert isinstance(r, rs.NonConvergence) and r.iterations == 5


def test_config_selects_the_sidereal_method():
    with patch("skyevents.events.riseset.sidereal_time_fn", return_value=linear_last) as factory:
        rs.solve_events(60000.0, SPB, _star(1.0, 0.1), [rs.UpperTransit(True)], config=RiseSetConfig(sidereal_method="laskar1986"))
    factory.assert_called_once_with("laskar1986")


def test_invalid_config_is_rejected():
    with pytest.raises(PreconditionViolation):
        RiseSetConfig(precision_seconds=0.0)
    with pytest.raises(PreconditionViolation):
        RiseSetConfig(max_iterations=0)
    with pytest.raises(PreconditionViolation, match="sidereal_clock"):
        RiseSetConfig(sidereal_clock="gmt")
    assert RiseSetConfig().tweak(max_iterations=7).max_iterations == 7


# --- Threshold constructors ---

def test_threshold_constructors():
    assert rs.twilight_astronomical().elevation == pytest.approx(math.radians(-18))
    assert rs.twilight_nautical().elevation == pytest.approx(math.radians(-12))
    assert rs.twilight_civil(is_star=True) == rs.RiseSet(math.radians(-6), True)

    R = 16.0 * ARCMIN_TO_RAD
    dip = 2.0 * ARCMIN_TO_RAD
    assert rs.horizon_astronomical(R, dip).elevation == pytest.approx(-(16 + 2 + 32.67) * ARCMIN_TO_RAD)
    assert rs.horizon_astronomical(R, dip, mother_body_is_earth=False).elevation == pytest.approx(-18 * ARCMIN_TO_RAD)
    assert rs.horizon_34arcmin(R).elevation == pytest.approx(-(16 + 34.67) * ARCMIN_TO_RAD)
    assert rs.custom(0.1, 0.02).elevation == pytest.approx(0.08)
    assert rs.custom().elevation == 0.0
