#ephemeris/skyfield_adapter.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict

from ..core.errors import EphemerisUnavailableError
from ..core.time import DELTA_JD_MJD
from ..core.types import GEOCENTRIC_EQUATORIAL_APPARENT, Metadata, SphericalVector
from . import require_ephemeris

LOG = logging.getLogger(__name__)

DEFAULT_KERNEL = "de421.bsp"

BODY_KEYS: Dict[str, str] = {
    "sun": "sun",
    "moon": "moon",
    "mercury": "mercury",
    "venus": "venus",
    "mars": "mars",
    "jupiter": "jupiter barycenter",
    "saturn": "saturn barycenter",
    "uranus": "uranus barycenter",
    "neptune": "neptune barycenter",
    "pluto": "pluto barycenter",
}


@dataclass(frozen=True)
class SkyfieldEphemeris:
    """
    Geocentric apparent equatorial (true equator and equinox of date) oracle
    backed by a JPL kernel through Skyfield.

    Requires optional deps:
      pip install "skyevents[ephemeris]"
    """
    body: str
    kernel: Any
    timescale: Any
    metadata: Metadata = GEOCENTRIC_EQUATORIAL_APPARENT

    @classmethod
    def load(cls, body: str, kernel: str = DEFAULT_KERNEL) -> "SkyfieldEphemeris":
        require_ephemeris()
        from skyfield.api import load  # type: ignore

        key = body.lower()
        if key not in BODY_KEYS:
            raise KeyError(f"Unknown body '{body}'. Available: {sorted(BODY_KEYS)}")
        try:
            eph = load(kernel)
        except (OSError, ValueError) as e:
            raise EphemerisUnavailableError(f"JPL kernel '{kernel}' could not be loaded") from e
        LOG.debug("loaded kernel %s for %s", kernel, key)
        return cls(body=key, kernel=eph, timescale=load.timescale())

    def evaluate(self, mjd: float) -> SphericalVector:
        t = self.timescale.ut1_jd(mjd + DELTA_JD_MJD)
        earth = self.kernel["earth"]
        target = self.kernel[BODY_KEYS[self.body]]
        ra, dec, distance = earth.at(t).observe(target).apparent().radec(epoch="date")
        return SphericalVector(phi=float(ra.radians), theta=float(dec.radians), r=float(distance.au))
