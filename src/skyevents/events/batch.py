from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union

from ..core.ephemeris import Ephemeris
from ..core.types import Observer, ObserverPosition
from ..reference.sidereal import SiderealTimeFn
from .config import RiseSetConfig
from .riseset import EventRequest, EventResult, solve_events

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class SolveJob:
    """One independent rise/set/transit solve (a body, an observer, a start date)."""
    start_mjd: float
    observer: Union[Observer, ObserverPosition]
    ephemeris: Ephemeris
    requests: Tuple[EventRequest, ...]
    config: Optional[RiseSetConfig] = None
    sidereal_time: Optional[SiderealTimeFn] = field(default=None, compare=False)


def _run(job: SolveJob) -> List[EventResult]:
    return solve_events(
        job.start_mjd,
        job.observer,
        job.ephemeris,
        job.requests,
        config=job.config,
        sidereal_time=job.sidereal_time,
    )


def solve_many(jobs: Sequence[SolveJob], *, max_workers: int = 1) -> List[List[EventResult]]:
    """
    Solve independent jobs, optionally on a thread pool.

    Results come back in job order and are identical for any max_workers.
    The first exception raised by a job propagates.
    """
    jobs = list(jobs)
    LOG.debug("solving %d jobs with max_workers=%d", len(jobs), max_workers)
    if max_workers > 1 and len(jobs) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [executor.submit(_run, job) for job in jobs]
            return [f.result() for f in futures]
    return [_run(job) for job in jobs]


def daily_jobs(
    start_mjd: float,
    days: int,
    observer: Union[Observer, ObserverPosition],
    ephemeris: Ephemeris,
    requests: Sequence[EventRequest],
    config: Optional[RiseSetConfig] = None,
) -> List[SolveJob]:
    """One job per day from start_mjd (e.g. a month of sunrise tables)."""
    reqs = tuple(requests)
    return [SolveJob(start_mjd + d, observer, ephemeris, reqs, config) for d in range(days)]
