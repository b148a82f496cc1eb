from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Dict, Literal

from ..core.deltat import DEFAULT_DELTA_T, DeltaTModel
from ..core.errors import PreconditionViolation
from ..core.time import SECONDS_PER_DAY
from ..reference.sidereal import SiderealMethod

# MJD on which the sidereal clock is read: the ephemeris (TT) MJD itself, or TT - ΔT
SiderealClock = Literal["tt", "ut1"]


@dataclass(frozen=True)
class RiseSetConfig:
    """
    Convergence policy of the rise/set/transit iteration.

    sidereal_clock  "tt" reads GMST on the same TT MJD as the ephemeris;
                    "ut1" reads it at TT - ΔT from `delta_t`
    """
    precision_seconds: float = 0.5
    max_iterations: int = 20
    sidereal_method: SiderealMethod = "williams1994"
    sidereal_clock: SiderealClock = "tt"
    delta_t: DeltaTModel = DEFAULT_DELTA_T

    def __post_init__(self):
        if self.precision_seconds <= 0.0:
            raise PreconditionViolation("precision_seconds must be > 0")
        if self.max_iterations < 1:
            raise PreconditionViolation("max_iterations must be >= 1")
        if self.sidereal_clock not in ("tt", "ut1"):
            raise PreconditionViolation(f"sidereal_clock must be 'tt' or 'ut1', got {self.sidereal_clock!r}")

    @property
    def precision_days(self) -> float:
        return self.precision_seconds / SECONDS_PER_DAY

    def tweak(self, **kwargs) -> "RiseSetConfig":
        return replace(self, **kwargs)


@dataclass(frozen=True)
class ScanConfig:
    """
    Step policy of the coarse/fine contact scanner.

    fine_step_seconds    increment of every probe (and of fine mode)
    coarse_step_seconds  extra re-acquisition jump after each stable probe
    horizon_days         give up once the cursor is this far past the start
    """
    fine_step_seconds: float
    coarse_step_seconds: float
    horizon_days: float = 3.0

    def __post_init__(self):
        if self.fine_step_seconds <= 0.0 or self.coarse_step_seconds < 0.0:
            raise PreconditionViolation("fine step must be > 0 and coarse step >= 0")
        if self.horizon_days <= 0.0:
            raise PreconditionViolation("horizon_days must be > 0")

    @property
    def fine_step_days(self) -> float:
        return self.fine_step_seconds / SECONDS_PER_DAY

    @property
    def coarse_step_days(self) -> float:
        return self.coarse_step_seconds / SECONDS_PER_DAY

    @staticmethod
    def like(name: str) -> "ScanConfig":
        if name not in SCAN_PRESETS:
            raise KeyError(f"Unknown scan preset '{name}'. Available: {sorted(SCAN_PRESETS)}")
        return SCAN_PRESETS[name]

    def tweak(self, **kwargs) -> "ScanConfig":
        return replace(self, **kwargs)


LUNAR_SCAN = ScanConfig(fine_step_seconds=1.0, coarse_step_seconds=60.0)
SOLAR_SCAN = ScanConfig(fine_step_seconds=0.5, coarse_step_seconds=10.0)

SCAN_PRESETS: Dict[str, ScanConfig] = {
    "lunar": LUNAR_SCAN,
    "solar": SOLAR_SCAN,
}

DEFAULT_RISE_SET = RiseSetConfig()
