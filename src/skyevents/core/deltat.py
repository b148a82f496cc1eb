"""
skyevents.core.deltat
---------------------
ΔT = TT - UT1 (seconds) and the crossing between civil and dynamical time.

Every MJD handed to an ephemeris, the rise/set solver or the contact scanner
is on TT. Civil instants (UTC, taken as UT1) enter that scale through
`tt_from_ut` and leave it through `ut_from_tt`; nothing inside the solvers
converts.

Model
-----
- 1972..2024: yearly IERS values (TT - UT1 at 1 January), piecewise linear.
- Outside the table: the Espenak–Meeus (NASA) piecewise polynomials. Past the
  last tabulated year the polynomial is shifted onto the table and the shift
  fades out linearly over `blend_years`.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, Iterator, Optional, Protocol, Tuple

from .errors import PreconditionViolation
from .time import J2000_MJD, SECONDS_PER_DAY, format_mjd, mjd_from_date, mjd_from_datetime

DAYS_PER_JULIAN_YEAR = 365.25


def decimal_year(mjd: float) -> float:
    """Julian-year decimal year; 2000.0 at J2000."""
    return 2000.0 + (mjd - J2000_MJD) / DAYS_PER_JULIAN_YEAR


class DeltaTModel(Protocol):
    """ΔT = TT - UT1, in seconds."""

    def delta_t_seconds(self, mjd: float) -> float: ...

    def info(self) -> Dict[str, object]: ...


@dataclass(frozen=True)
class ConstantDeltaT:
    value: float = 0.0

    def delta_t_seconds(self, mjd: float) -> float:
        return float(self.value)

    def info(self) -> Dict[str, object]:
        return {"type": "constant", "value": self.value}


# ------------------------------------------------------------
# Table
# ------------------------------------------------------------

@dataclass(frozen=True)
class DeltaTTable:
    """Piecewise-linear ΔT over decimal years."""
    x: Tuple[float, ...]
    y: Tuple[float, ...]

    def __post_init__(self):
        if len(self.x) != len(self.y) or len(self.x) < 2:
            raise PreconditionViolation("ΔT table needs at least two (year, seconds) pairs")
        if any(b <= a for a, b in zip(self.x, self.x[1:])):
            raise PreconditionViolation("ΔT table years must be strictly increasing")

    def __len__(self) -> int:
        return len(self.x)

    def __iter__(self) -> Iterator[Tuple[float, float]]:
        return iter(zip(self.x, self.y))

    @property
    def range(self) -> Tuple[float, float]:
        return (self.x[0], self.x[-1])

    def eval(self, year: float) -> float:
        if not (self.x[0] <= year <= self.x[-1]):
            raise PreconditionViolation(f"year out of table range [{self.x[0]}, {self.x[-1]}]: {year}")
        lo, hi = 0, len(self.x) - 1
        while hi - lo > 1:
            mid = (lo + hi) // 2
            if self.x[mid] <= year:
                lo = mid
            else:
                hi = mid
        t = (year - self.x[lo]) / (self.x[hi] - self.x[lo])
        return self.y[lo] + t * (self.y[hi] - self.y[lo])


IERS_YEARLY = DeltaTTable(
    x=tuple(float(y) for y in range(1972, 2025)),
    y=(
        42.23, 43.37, 44.49, 45.48, 46.46, 47.52, 48.53, 49.59, 50.54, 51.38,   # 1972-1981
        52.17, 52.96, 53.79, 54.34, 54.87, 55.32, 55.82, 56.30, 56.86, 57.57,   # 1982-1991
        58.31, 59.12, 59.98, 60.78, 61.63, 62.29, 62.97, 63.47, 63.83, 64.09,   # 1992-2001
        64.30, 64.47, 64.57, 64.69, 64.85, 65.15, 65.46, 65.78, 66.07, 66.32,   # 2002-2011
        66.60, 66.91, 67.28, 67.64, 68.10, 68.59, 68.97, 69.22, 69.36, 69.36,   # 2012-2021
        69.29, 69.20, 69.18,                                                    # 2022-2024
    ),
)


# ------------------------------------------------------------
# Espenak–Meeus polynomials
# ------------------------------------------------------------

# (upper bound year, origin year, scale, coefficients in ascending powers)
_EM2006_BRANCHES: Tuple[Tuple[float, float, float, Tuple[float, ...]], ...] = (
    (500.0, 0.0, 100.0, (10583.6, -1014.41, 33.78311, -5.952053, -0.1798452, 0.022174192, 0.0090316521)),
    (1600.0, 1000.0, 100.0, (1574.2, -556.01, 71.23472, 0.319781, -0.8503463, -0.005050998, 0.0083572073)),
    (1700.0, 1600.0, 1.0, (120.0, -0.9808, -0.01532, 1.0 / 7129.0)),
    (1800.0, 1700.0, 1.0, (8.83, 0.1603, -0.0059285, 0.00013336, -1.0 / 1174000.0)),
    (1860.0, 1800.0, 1.0, (13.72, -0.332447, 0.0068612, 0.0041116, -0.00037436, 0.0000121272,
                           -0.0000001699, 0.000000000875)),
    (1900.0, 1860.0, 1.0, (7.62, 0.5737, -0.251754, 0.01680668, -0.0004473624, 1.0 / 233174.0)),
    (1920.0, 1900.0, 1.0, (-2.79, 1.494119, -0.0598939, 0.0061966, -0.000197)),
    (1941.0, 1920.0, 1.0, (21.20, 0.84493, -0.076100, 0.0020936)),
    (1961.0, 1950.0, 1.0, (29.07, 0.407, -1.0 / 233.0, 1.0 / 2547.0)),
    (1986.0, 1975.0, 1.0, (45.45, 1.067, -1.0 / 260.0, -1.0 / 718.0)),
    (2005.0, 2000.0, 1.0, (63.86, 0.3345, -0.060374, 0.0017275, 0.000651814, 0.00002373599)),
    (2050.0, 2000.0, 1.0, (62.92, 0.32217, 0.005589)),
)


def _horner(u: float, coeffs: Tuple[float, ...]) -> float:
    acc = 0.0
    for c in reversed(coeffs):
        acc = acc * u + c
    return acc


def _long_term(year: float) -> float:
    u = (year - 1820.0) / 100.0
    return -20.0 + 32.0 * u * u


def delta_t_em2006(year: float) -> float:
    """Espenak–Meeus piecewise polynomial ΔT (s), valid roughly -1999..+3000."""
    if year < -500.0:
        return _long_term(year)
    for upper, origin, scale, coeffs in _EM2006_BRANCHES:
        if year < upper:
            return _horner((year - origin) / scale, coeffs)
    if year < 2150.0:
        return _long_term(year) - 0.5628 * (2150.0 - year)
    return _long_term(year)


@dataclass(frozen=True)
class TabulatedDeltaT:
    """IERS table inside its range, blended Espenak–Meeus polynomial outside."""
    table: DeltaTTable = IERS_YEARLY
    blend_years: float = 30.0

    def delta_t_seconds(self, mjd: float) -> float:
        year = decimal_year(mjd)
        a, b = self.table.range
        if a <= year <= b:
            return self.table.eval(year)
        if year < a or self.blend_years <= 0.0:
            return delta_t_em2006(year)
        offset = self.table.eval(b) - delta_t_em2006(b)
        w = min(1.0, (year - b) / self.blend_years)
        return delta_t_em2006(year) + (1.0 - w) * offset

    def info(self) -> Dict[str, object]:
        return {"type": "iers-table", "range": self.table.range, "blend_years": self.blend_years}


DEFAULT_DELTA_T = TabulatedDeltaT()


# ------------------------------------------------------------
# Scale crossings
# ------------------------------------------------------------

def tt_from_ut(mjd_ut: float, model: Optional[DeltaTModel] = None) -> float:
    m = model or DEFAULT_DELTA_T
    return mjd_ut + m.delta_t_seconds(mjd_ut) / SECONDS_PER_DAY


def ut_from_tt(mjd_tt: float, model: Optional[DeltaTModel] = None) -> float:
    m = model or DEFAULT_DELTA_T
    return mjd_tt - m.delta_t_seconds(mjd_tt) / SECONDS_PER_DAY


def tt_from_datetime(dt: datetime, model: Optional[DeltaTModel] = None) -> float:
    """Timezone-aware civil instant -> MJD (TT)."""
    return tt_from_ut(mjd_from_datetime(dt), model)


def tt_from_date(d: date, model: Optional[DeltaTModel] = None) -> float:
    """00:00 UTC of a civil date -> MJD (TT)."""
    return tt_from_ut(mjd_from_date(d), model)


def format_tt(mjd_tt: float, model: Optional[DeltaTModel] = None) -> str:
    """ISO-8601 UTC timestamp of a TT instant."""
    return format_mjd(ut_from_tt(mjd_tt, model))
