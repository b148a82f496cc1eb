"""
skyevents.core.ephemeris
------------------------
The oracle boundary. Solvers consume an ephemeris only through this Protocol:
a `metadata` attribute describing the frame, and `evaluate(mjd)` returning the
body's spherical position at that instant (MJD, UTC scale).

Oracles must be reentrant: solver fan-out may evaluate one oracle from several
worker threads at once.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Protocol, runtime_checkable

from .errors import PreconditionViolation
from .types import Metadata, SphericalVector


@runtime_checkable
class Ephemeris(Protocol):
    @property
    def metadata(self) -> Metadata:
        """Orbit / plane / epoch of the vectors returned by evaluate()."""
        ...

    def evaluate(self, mjd: float) -> SphericalVector:
        """Apparent spherical position at MJD (UTC)."""
        ...


@dataclass(frozen=True)
class FunctionEphemeris:
    """Adapts a plain callable mjd -> SphericalVector into an Ephemeris."""
    fn: Callable[[float], SphericalVector]
    metadata: Metadata

    def evaluate(self, mjd: float) -> SphericalVector:
        return self.fn(mjd)


def require_metadata(ephemeris: Ephemeris, expected: Metadata, *, role: str = "ephemeris") -> None:
    """Fail fast when an oracle's frame differs from what a solver needs. No coercion is attempted."""
    got = getattr(ephemeris, "metadata", None)
    if not isinstance(got, Metadata):
        raise PreconditionViolation(f"{role} exposes no Metadata (got {got!r})")
    if got != expected:
        raise PreconditionViolation(
            f"{role} must be {expected.orbit}/{expected.plane}/{expected.epoch}, "
            f"got {got.orbit}/{got.plane}/{got.epoch}"
        )
