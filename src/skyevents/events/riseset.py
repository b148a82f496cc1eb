"""
skyevents.events.riseset
------------------------
Rise / set / upper and lower transit of a body for one observer.

Each sub-event is solved by fixed-point iteration on the hour-angle equation:
evaluate the body and the local apparent sidereal time at the current guess,
turn the remaining hour angle into a time step at the sidereal rate, and move
the guess. The first step from the start time is taken forward (upper transit,
rise, set) or on the nearest half-turn either side (lower transit); later
steps take the branch nearest the current guess. Iteration stops when the step
drops below `precision_seconds` or after `max_iterations`.

Outcomes are values, not exceptions: CrossingInstant, Circumpolar,
AlwaysBelowHorizon, or NonConvergence. Only a mismatched oracle frame raises.

Start and result MJDs are on TT, the ephemeris scale; convert civil times with
`core.deltat.tt_from_ut` / `ut_from_tt`. The sidereal clock is read on the TT
MJD unless `RiseSetConfig.sidereal_clock` is "ut1", in which case it is read at
TT - ΔT and results converted with `ut_from_tt` are the UT1 instants of the
events. With the default clock they come out ΔT earlier.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Literal, Optional, Sequence, Tuple, Union

from ..core.deltat import DeltaTModel, ut_from_tt
from ..core.ephemeris import Ephemeris, require_metadata
from ..core.errors import GeometricDegeneracy, PreconditionViolation
from ..core.types import GEOCENTRIC_EQUATORIAL_APPARENT, Observer, ObserverPosition, SphericalVector
from ..reference.angles import ARCMIN_TO_RAD, RAD_TO_DAY, normalize, wrap_pi
from ..reference.sidereal import SIDEREAL_DAY_LENGTH, SiderealTimeFn, sidereal_time_fn
from .config import DEFAULT_RISE_SET, RiseSetConfig

LOG = logging.getLogger(__name__)

EventKind = Literal["rise", "set", "upper_transit", "lower_transit"]

# hour angle (rad) -> elapsed solar days
HOUR_ANGLE_TO_DAYS = RAD_TO_DAY / SIDEREAL_DAY_LENGTH

# cos(phi) * cos(delta) below this is treated as an observer or body at a pole
_POLE_EPS = 1e-12


# ------------------------------------------------------------
# Requests
# ------------------------------------------------------------

@dataclass(frozen=True)
class RiseSet:
    """Rise and set across `elevation` (rad, geometric, positive up)."""
    elevation: float
    is_star: bool = False


@dataclass(frozen=True)
class UpperTransit:
    is_star: bool = False


@dataclass(frozen=True)
class LowerTransit:
    is_star: bool = False


EventRequest = Union[RiseSet, UpperTransit, LowerTransit]

REFRACTION_HORIZON = 32.67 * ARCMIN_TO_RAD
REFRACTION_HORIZON_34 = 34.67 * ARCMIN_TO_RAD


def twilight_astronomical(is_star: bool = False) -> RiseSet:
    return RiseSet(math.radians(-18.0), is_star)


def twilight_nautical(is_star: bool = False) -> RiseSet:
    return RiseSet(math.radians(-12.0), is_star)


def twilight_civil(is_star: bool = False) -> RiseSet:
    return RiseSet(math.radians(-6.0), is_star)


def horizon_astronomical(
    angular_radius: float,
    horizon_depression: float = 0.0,
    *,
    mother_body_is_earth: bool = True,
    is_star: bool = False,
) -> RiseSet:
    """Upper limb on the horizon: -R - dip, less 32.67' of refraction when observing from Earth."""
    refraction = REFRACTION_HORIZON if mother_body_is_earth else 0.0
    return RiseSet(-angular_radius - horizon_depression - refraction, is_star)


def horizon_34arcmin(angular_radius: float, *, mother_body_is_earth: bool = True, is_star: bool = False) -> RiseSet:
    refraction = REFRACTION_HORIZON_34 if mother_body_is_earth else 0.0
    return RiseSet(-angular_radius - refraction, is_star)


def custom(elevation: float = 0.0, angular_radius: float = 0.0, *, is_star: bool = False) -> RiseSet:
    return RiseSet(elevation - angular_radius, is_star)


# ------------------------------------------------------------
# Results
# ------------------------------------------------------------

@dataclass(frozen=True)
class CrossingInstant:
    request: EventRequest
    event: EventKind
    mjd: float
    altitude: float  # rad
    iterations: int = 0


@dataclass(frozen=True)
class AlwaysBelowHorizon:
    request: EventRequest
    event: EventKind


@dataclass(frozen=True)
class Circumpolar:
    request: EventRequest
    event: EventKind


@dataclass(frozen=True)
class NonConvergence:
    request: EventRequest
    event: EventKind
    iterations: int = 0


EventResult = Union[CrossingInstant, AlwaysBelowHorizon, Circumpolar, NonConvergence]


# ------------------------------------------------------------
# One step of the hour-angle iteration
# ------------------------------------------------------------

def hour_angle_cosine(elevation: float, latitude: float, declination: float) -> float:
    """
    cos H for which the body stands at `elevation`, from
      sin h = sin(phi) sin(delta) + cos(phi) cos(delta) cos H.

    At a pole (or for a body at a celestial pole) the denominator vanishes; the
    limiting value is +inf (never reaches h) or -inf (never drops to h).
    """
    num = math.sin(elevation) - math.sin(latitude) * math.sin(declination)
    den = math.cos(latitude) * math.cos(declination)
    if abs(den) < _POLE_EPS:
        return math.inf if num > 0.0 else -math.inf
    return num / den


def transit_altitude(latitude: float, declination: float, *, lower: bool = False) -> float:
    s = math.sin(declination) * math.sin(latitude)
    c = math.cos(declination) * math.cos(latitude)
    x = s - c if lower else s + c
    return math.asin(max(-1.0, min(1.0, x)))


def _check_finite(body: SphericalVector, mjd: float) -> None:
    if not (math.isfinite(body.phi) and math.isfinite(body.theta)):
        raise GeometricDegeneracy(f"ephemeris returned a non-finite position at MJD {mjd!r}")


def _step(
    mjd: float,
    position: ObserverPosition,
    ephemeris: Ephemeris,
    event: EventKind,
    elevation: Optional[float],
    sidereal_time: SiderealTimeFn,
    first: bool,
) -> Union[float, AlwaysBelowHorizon, Circumpolar, None]:
    """Next guess (MJD), or the sentinel class of a terminal outcome."""
    body = ephemeris.evaluate(mjd)
    _check_finite(body, mjd)
    last = sidereal_time(mjd, position)

    if event == "upper_transit":
        angle = body.phi - last
    elif event == "lower_transit":
        angle = body.phi - last - math.pi
    else:
        c = hour_angle_cosine(elevation, position.latitude, body.theta)
        if c > 1.0:
            return AlwaysBelowHorizon
        if c < -1.0:
            return Circumpolar
        h = math.acos(c)
        angle = body.phi - h - last if event == "rise" else body.phi + h - last

    if not first:
        angle = wrap_pi(angle)
    elif event == "lower_transit":
        angle = normalize(angle + math.pi) - math.pi
    else:
        angle = normalize(angle)
    return mjd + angle * HOUR_ANGLE_TO_DAYS


def _iterate(
    start_mjd: float,
    position: ObserverPosition,
    ephemeris: Ephemeris,
    event: EventKind,
    elevation: Optional[float],
    sidereal_time: SiderealTimeFn,
    config: RiseSetConfig,
) -> Tuple[object, float, int]:
    """
    Returns (outcome, last_guess, iterations) where outcome is "converged",
    "exhausted", AlwaysBelowHorizon or Circumpolar.
    """
    t = start_mjd
    for n in range(1, config.max_iterations + 1):
        nxt = _step(t, position, ephemeris, event, elevation, sidereal_time, first=(n == 1))
        if nxt is AlwaysBelowHorizon or nxt is Circumpolar:
            return nxt, t, n
        dt = nxt - t
        t = nxt
        if abs(dt) <= config.precision_days:
            return "converged", t, n
    return "exhausted", t, config.max_iterations


def _sub_events(request: EventRequest) -> List[Tuple[EventKind, Optional[float]]]:
    if isinstance(request, RiseSet):
        return [("rise", request.elevation), ("set", request.elevation)]
    if isinstance(request, UpperTransit):
        return [("upper_transit", None)]
    if isinstance(request, LowerTransit):
        return [("lower_transit", None)]
    raise PreconditionViolation(f"Unknown event request {request!r}")


def _solve_sub_event(
    start_mjd: float,
    position: ObserverPosition,
    ephemeris: Ephemeris,
    request: EventRequest,
    event: EventKind,
    elevation: Optional[float],
    sidereal_time: SiderealTimeFn,
    config: RiseSetConfig,
) -> EventResult:
    outcome, t, n = _iterate(start_mjd, position, ephemeris, event, elevation, sidereal_time, config)
    total = n

    if outcome == "exhausted" and not request.is_star:
        anchor_outcome, anchor, _ = _iterate(
            start_mjd, position, ephemeris, "upper_transit", None, sidereal_time, config
        )
        LOG.info(
            "%s did not converge from MJD %.6f; retrying from upper transit at MJD %.6f (%s)",
            event, start_mjd, anchor, anchor_outcome,
        )
        outcome, t, n = _iterate(anchor, position, ephemeris, event, elevation, sidereal_time, config)
        total += n

    if outcome is AlwaysBelowHorizon:
        return AlwaysBelowHorizon(request, event)
    if outcome is Circumpolar:
        return Circumpolar(request, event)
    if outcome == "exhausted":
        LOG.warning("%s did not converge within %d iterations from MJD %.6f", event, total, start_mjd)
        return NonConvergence(request, event, total)

    if event in ("rise", "set"):
        altitude = elevation
    else:
        body = ephemeris.evaluate(t)
        _check_finite(body, t)
        altitude = transit_altitude(position.latitude, body.theta, lower=(event == "lower_transit"))
    LOG.debug("%s converged at MJD %.8f after %d iterations", event, t, total)
    return CrossingInstant(request, event, t, altitude, total)


def _on_universal_time(sidereal_time: SiderealTimeFn, delta_t: DeltaTModel) -> SiderealTimeFn:
    def _last(mjd: float, position: ObserverPosition) -> float:
        return sidereal_time(ut_from_tt(mjd, delta_t), position)
    return _last


def solve_events(
    start_mjd: float,
    observer: Union[Observer, ObserverPosition],
    ephemeris: Ephemeris,
    requests: Sequence[EventRequest],
    *,
    config: Optional[RiseSetConfig] = None,
    sidereal_time: Optional[SiderealTimeFn] = None,
) -> List[EventResult]:
    """
    Solve every requested event starting from `start_mjd`.

    One result per sub-event, in request order (a RiseSet yields rise then set).
    The ephemeris must be geocentric / equatorial / apparent; anything else
    raises PreconditionViolation before any evaluation.
    """
    require_metadata(ephemeris, GEOCENTRIC_EQUATORIAL_APPARENT)
    if not math.isfinite(start_mjd):
        raise PreconditionViolation(f"start_mjd must be finite, got {start_mjd!r}")
    cfg = config or DEFAULT_RISE_SET
    position = observer.position if isinstance(observer, Observer) else observer
    st = sidereal_time or sidereal_time_fn(cfg.sidereal_method)
    if cfg.sidereal_clock == "ut1":
        st = _on_universal_time(st, cfg.delta_t)

    results: List[EventResult] = []
    for request in requests:
        for event, elevation in _sub_events(request):
            results.append(
                _solve_sub_event(start_mjd, position, ephemeris, request, event, elevation, st, cfg)
            )
    return results


def solve_event(
    start_mjd: float,
    observer: Union[Observer, ObserverPosition],
    ephemeris: Ephemeris,
    request: EventRequest,
    **kwargs,
) -> List[EventResult]:
    return solve_events(start_mjd, observer, ephemeris, [request], **kwargs)
