class SkyEventsError(Exception):
    """Base error."""

class PreconditionViolation(SkyEventsError, ValueError):
    """Raised when an oracle or argument does not satisfy a solver's contract."""

class SearchHorizonExceeded(SkyEventsError):
    """Raised when a contact scan passes its search horizon without completing."""

    def __init__(self, start_mjd: float, horizon_days: float):
        self.start_mjd = start_mjd
        self.horizon_days = horizon_days
        super().__init__(
            f"No eclipse found in the next {horizon_days:g} days (scan started at MJD {start_mjd:.6f})."
        )

class GeometricDegeneracy(SkyEventsError, ArithmeticError):
    """Raised when a geometric quantity has no finite limiting value (e.g. a zero-length vector)."""

class EphemerisUnavailableError(SkyEventsError):
    """Raised when the optional ephemeris adapter is requested but its extras are not installed."""
