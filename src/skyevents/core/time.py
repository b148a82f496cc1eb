from __future__ import annotations
from datetime import date, datetime, timedelta, timezone
import math

SECONDS_PER_DAY = 86400.0
DAYS_PER_CENTURY = 36525.0
J2000_MJD = 51544.5  # 2000-01-01 12:00 UTC
DELTA_JD_MJD = 2400000.5

_MJD_EPOCH = datetime(1858, 11, 17, tzinfo=timezone.utc)


def mjd_from_datetime(dt: datetime) -> float:
    """
    Convert a timezone-aware datetime to Modified Julian Date (UTC scale).

    Naive datetimes are rejected.
    """
    if dt.tzinfo is None or dt.utcoffset() is None:
        raise ValueError("mjd_from_datetime requires a timezone-aware datetime")
    delta = dt.astimezone(timezone.utc) - _MJD_EPOCH
    return delta.days + (delta.seconds + delta.microseconds / 1e6) / SECONDS_PER_DAY


def mjd_from_date(d: date) -> float:
    """MJD at 00:00 UTC of a civil date."""
    return float((d - _MJD_EPOCH.date()).days)


def mjd_to_datetime(mjd: float) -> datetime:
    """MJD -> timezone-aware UTC datetime (microsecond resolution)."""
    days = math.floor(mjd)
    micros = round((mjd - days) * SECONDS_PER_DAY * 1e6)
    return _MJD_EPOCH + timedelta(days=days, microseconds=micros)


def mjd_to_jd(mjd: float) -> float:
    return mjd + DELTA_JD_MJD


def jd_to_mjd(jd: float) -> float:
    return jd - DELTA_JD_MJD


def julian_centuries(mjd: float) -> float:
    """Julian centuries from J2000.0."""
    return (mjd - J2000_MJD) / DAYS_PER_CENTURY


def mjd_from_centuries(jt: float) -> float:
    return jt * DAYS_PER_CENTURY + J2000_MJD


def seconds_to_days(seconds: float) -> float:
    return seconds / SECONDS_PER_DAY


def format_mjd(mjd: float) -> str:
    """ISO-8601 UTC timestamp rounded to the second."""
    dt = mjd_to_datetime(mjd)
    if dt.microsecond >= 500000:
        dt += timedelta(seconds=1)
    return dt.replace(microsecond=0).strftime("%Y-%m-%dT%H:%M:%SZ")
