"""skyevents public API.

Keep this surface small: users should mostly interact with functions re-exported here.
"""

from .api import (
    fast_sun,
    fast_moon,
    sun_threshold,
    sun_events,
    moon_phases,
    lunar_eclipses,
    solar_eclipses,
)
from .core.errors import (
    SkyEventsError,
    PreconditionViolation,
    SearchHorizonExceeded,
    GeometricDegeneracy,
    EphemerisUnavailableError,
)
from .core.deltat import DEFAULT_DELTA_T, ConstantDeltaT, TabulatedDeltaT, tt_from_ut, ut_from_tt
from .core.ephemeris import Ephemeris, FunctionEphemeris
from .core.types import Metadata, Observer, ObserverPosition, SphericalVector
from .events.config import RiseSetConfig, ScanConfig, LUNAR_SCAN, SOLAR_SCAN
from .events.riseset import (
    RiseSet,
    UpperTransit,
    LowerTransit,
    CrossingInstant,
    AlwaysBelowHorizon,
    Circumpolar,
    NonConvergence,
    solve_events,
)
from .events.scanner import scan_contacts
from .events.fingerprint import status_fingerprint
from .events.lunar_eclipse import LunarEclipse, scan_lunar_eclipse, find_lunar_eclipses
from .events.solar_eclipse import SolarEclipse, scan_solar_eclipse, find_solar_eclipses

__all__ = [
    "fast_sun",
    "fast_moon",
    "sun_threshold",
    "sun_events",
    "moon_phases",
    "lunar_eclipses",
    "solar_eclipses",
    "SkyEventsError",
    "PreconditionViolation",
    "SearchHorizonExceeded",
    "GeometricDegeneracy",
    "EphemerisUnavailableError",
    "DEFAULT_DELTA_T",
    "ConstantDeltaT",
    "TabulatedDeltaT",
    "tt_from_ut",
    "ut_from_tt",
    "Ephemeris",
    "FunctionEphemeris",
    "Metadata",
    "Observer",
    "ObserverPosition",
    "SphericalVector",
    "RiseSetConfig",
    "ScanConfig",
    "LUNAR_SCAN",
    "SOLAR_SCAN",
    "RiseSet",
    "UpperTransit",
    "LowerTransit",
    "CrossingInstant",
    "AlwaysBelowHorizon",
    "Circumpolar",
    "NonConvergence",
    "solve_events",
    "scan_contacts",
    "status_fingerprint",
    "LunarEclipse",
    "scan_lunar_eclipse",
    "find_lunar_eclipses",
    "SolarEclipse",
    "scan_solar_eclipse",
    "find_solar_eclipses",
]
