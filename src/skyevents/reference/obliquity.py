from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Literal, Optional, Tuple

import numpy as np

from ..core.ephemeris import Ephemeris, require_metadata
from ..core.errors import PreconditionViolation
from ..core.time import julian_centuries
from ..core.types import Metadata, SphericalVector
from .angles import ARCSEC_TO_RAD, polynomial_sum, rotation_x, rotate

ObliquityModel = Literal["williams1994", "simon1994", "laskar1986", "iau1976", "iau2006"]

# Mean obliquity polynomials in U = T/100 (arcsec). Coefficient 0 is the J2000 value.
_OBLIQUITY: Dict[str, Tuple[float, ...]] = {
    "williams1994": (84381.406173, -4683.396, -1.75, 1998.9, -51.38, -249.67, -39.05, 7.12, 27.87, 5.79, 2.45),
    "simon1994": (84381.412, -4680.927, -1.52, 1998.9, -51.38, -249.67, -39.05, 7.12, 27.87, 5.79, 2.45),
    "laskar1986": (84381.448, -4680.93, -1.55, 1999.25, -51.38, -249.67, -39.05, 7.12, 27.87, 5.79, 2.45),
    "iau1976": (84381.448, -4681.5, -5.9, 1813.0),
    "iau2006": (84381.406, -4683.6769, -1.831, 2003.400, -57.6, -434.0),
}


def mean_obliquity(T: float, model: ObliquityModel = "williams1994") -> float:
    """Mean obliquity of the ecliptic (rad) at Julian centuries T from J2000."""
    if model not in _OBLIQUITY:
        raise PreconditionViolation(f"Unknown obliquity model '{model}'. Available: {sorted(_OBLIQUITY)}")
    return polynomial_sum(_OBLIQUITY[model], T / 100.0) * ARCSEC_TO_RAD


def ecliptic_to_equatorial_matrix(eps: float) -> np.ndarray:
    return rotation_x(-eps)


def equatorial_to_ecliptic_matrix(eps: float) -> np.ndarray:
    return rotation_x(eps)


def ecliptic_to_equatorial(v: SphericalVector, eps: float) -> SphericalVector:
    return rotate(v, ecliptic_to_equatorial_matrix(eps))


def equatorial_to_ecliptic(v: SphericalVector, eps: float) -> SphericalVector:
    return rotate(v, equatorial_to_ecliptic_matrix(eps))


@dataclass(frozen=True)
class EquatorialEphemeris:
    """
    Rotates a geocentric ecliptic oracle into the equatorial plane.

    With `frozen_at_mjd` set, the obliquity is evaluated once at that instant
    (one rotation for a whole solve); otherwise it follows each evaluation time.
    """
    inner: Ephemeris
    model: ObliquityModel = "williams1994"
    frozen_at_mjd: Optional[float] = None
    _eps: Optional[float] = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self):
        m = self.inner.metadata
        require_metadata(self.inner, Metadata(m.orbit, "ecliptic", m.epoch), role="inner ephemeris")
        if self.frozen_at_mjd is not None:
            object.__setattr__(self, "_eps", mean_obliquity(julian_centuries(self.frozen_at_mjd), self.model))

    @property
    def metadata(self) -> Metadata:
        m = self.inner.metadata
        return Metadata(orbit=m.orbit, plane="equatorial", epoch=m.epoch)

    def evaluate(self, mjd: float) -> SphericalVector:
        eps = self._eps if self._eps is not None else mean_obliquity(julian_centuries(mjd), self.model)
        return ecliptic_to_equatorial(self.inner.evaluate(mjd), eps)
