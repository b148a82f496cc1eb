"""
Convenience entry points. Dates are civil (UTC) and cross into TT here; every
MJD these functions return is on TT, see `core.deltat.ut_from_tt`.
"""

from __future__ import annotations

from datetime import date
from typing import List, Optional, Union

from .core.ephemeris import Ephemeris
from .core.deltat import tt_from_date
from .core.types import Observer, ObserverPosition
from .events.config import RiseSetConfig, ScanConfig, LUNAR_SCAN, SOLAR_SCAN
from .events.lunar_eclipse import LunarEclipse, find_lunar_eclipses
from .events.lunar_phases import PhaseEvent, lunar_phases
from .events.riseset import (
    EventRequest,
    EventResult,
    LowerTransit,
    RiseSet,
    UpperTransit,
    horizon_astronomical,
    solve_events,
)
from .events.solar_eclipse import SolarEclipse, find_solar_eclipses
from .reference.bodies import SUN, horizon_depression
from .reference.fast_moon import FAST_MOON
from .reference.fast_sun import FAST_SUN
from .reference.obliquity import EquatorialEphemeris, ObliquityModel

def fast_sun(*, model: ObliquityModel = "williams1994", frozen_at_mjd: Optional[float] = None) -> EquatorialEphemeris:
    """Low-precision apparent Sun rotated into the equator of date."""
    return EquatorialEphemeris(FAST_SUN, model=model, frozen_at_mjd=frozen_at_mjd)

def fast_moon(*, model: ObliquityModel = "williams1994", frozen_at_mjd: Optional[float] = None) -> EquatorialEphemeris:
    return EquatorialEphemeris(FAST_MOON, model=model, frozen_at_mjd=frozen_at_mjd)

def sun_threshold(mjd: float, observer: Union[Observer, ObserverPosition]) -> RiseSet:
    """Upper limb on the refracted horizon, dipped for the observer's altitude."""
    obs = observer if isinstance(observer, Observer) else Observer(observer)
    radius = SUN.angular_radius(FAST_SUN.evaluate(mjd).r)
    dip = horizon_depression(obs.position.altitude, obs.ellipsoid, obs.position.latitude) if obs.position.altitude > 0 else 0.0
    return horizon_astronomical(radius, dip)

def sun_events(
    d: date,
    observer: Union[Observer, ObserverPosition],
    *,
    threshold: Optional[RiseSet] = None,
    transits: bool = True,
    ephemeris: Optional[Ephemeris] = None,
    config: Optional[RiseSetConfig] = None,
) -> List[EventResult]:
    """Sunrise, sunset and (optionally) both transits, solved from 00:00 UTC of `d` (MJDs on TT)."""
    mjd = tt_from_date(d)
    requests: List[EventRequest] = [threshold or sun_threshold(mjd, observer)]
    if transits:
        requests += [UpperTransit(), LowerTransit()]
    return solve_events(mjd, observer, ephemeris or fast_sun(frozen_at_mjd=mjd), requests, config=config)

def moon_phases(begin: date, end: date, *, with_eclipses: bool = True, max_workers: int = 1) -> List[PhaseEvent]:
    return lunar_phases(tt_from_date(begin), tt_from_date(end), with_eclipses=with_eclipses, max_workers=max_workers)

def lunar_eclipses(
    begin: date,
    end: date,
    *,
    sun: Optional[Ephemeris] = None,
    moon: Optional[Ephemeris] = None,
    config: ScanConfig = LUNAR_SCAN,
    max_workers: int = 1,
) -> List[LunarEclipse]:
    return find_lunar_eclipses(
        sun or fast_sun(),
        moon or fast_moon(),
        tt_from_date(begin),
        tt_from_date(end),
        config=config,
        max_workers=max_workers,
    )

def solar_eclipses(
    begin: date,
    end: date,
    *,
    sun: Optional[Ephemeris] = None,
    moon: Optional[Ephemeris] = None,
    config: ScanConfig = SOLAR_SCAN,
) -> List[SolarEclipse]:
    return find_solar_eclipses(sun or fast_sun(), moon or fast_moon(), tt_from_date(begin), tt_from_date(end), config=config)
