# tests/test_batch.py

from datetime import date

import pytest

from skyevents import api
from skyevents.core.errors import PreconditionViolation
from skyevents.core.time import mjd_from_date
from skyevents.core.types import ObserverPosition
from skyevents.events.batch import SolveJob, daily_jobs, solve_many
from skyevents.events.riseset import CrossingInstant, LowerTransit, UpperTransit, horizon_astronomical
from skyevents.reference.angles import ARCMIN_TO_RAD, dms_to_rad
from skyevents.reference.fast_sun import FAST_SUN

SPB = ObserverPosition(dms_to_rad(30, 19, 36), dms_to_rad(60, 3, 32.6))
REQUESTS = [horizon_astronomical(16.0 * ARCMIN_TO_RAD), UpperTransit(), LowerTransit()]


@pytest.fixture
def week():
    start = mjd_from_date(date(2022, 1, 14))
    return daily_jobs(start, 7, SPB, api.fast_sun(frozen_at_mjd=start), REQUESTS)


def test_daily_jobs_step_one_day(week):
    assert [j.start_mjd - week[0].start_mjd for j in week] == list(range(7))
    assert all(j.requests == tuple(REQUESTS) for j in week)


def test_pool_preserves_job_order_and_values(week):
    sequential = solve_many(week)
    pooled = solve_many(week, max_workers=4)
    assert pooled == sequential
    assert len(sequential) == 7
    # four results per day, upper transits a day apart
    uppers = [r[2] for r in sequential]
    assert all(isinstance(u, CrossingInstant) for u in uppers)
    gaps = [b.mjd - a.mjd for a, b in zip(uppers, uppers[1:])]
    assert all(abs(g - 1.0) < 0.001 for g in gaps)


def test_days_lengthen_through_january(week):
    days = solve_many(week, max_workers=2)
    lengths = [r[1].mjd - r[0].mjd for r in days]
    assert lengths == sorted(lengths)


def test_empty_batch():
    assert solve_many([], max_workers=4) == []


def test_job_errors_propagate():
    job = SolveJob(60000.0, SPB, FAST_SUN, tuple(REQUESTS))
    with pytest.raises(PreconditionViolation):
        solve_many([job, job], max_workers=2)
