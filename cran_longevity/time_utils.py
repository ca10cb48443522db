"""
Shared date helpers.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Iterable, List

import pandas as pd

from .models import CohortPeriod


DAYS_PER_YEAR = 365.25

_UNBOUNDED_STRINGS = {"inf", "-inf", "+inf", "infinity", "-infinity"}


def is_unbounded(value) -> bool:
    """Return True for the +/-infinity sentinel, as a float or a string."""
    if isinstance(value, float):
        return math.isinf(value)
    if isinstance(value, str):
        return value.strip().lower() in _UNBOUNDED_STRINGS
    return False


def parse_date(value) -> pd.Timestamp:
    """Parse a date leniently; anything unparseable becomes NaT."""
    if value is None or is_unbounded(value):
        return pd.NaT
    if isinstance(value, str) and not value.strip():
        return pd.NaT
    try:
        parsed = pd.to_datetime(value)
    except (ValueError, TypeError, OverflowError):
        return pd.NaT
    if pd.isna(parsed):
        return pd.NaT
    if parsed.tzinfo is not None:
        parsed = parsed.tz_convert("UTC").tz_localize(None)
    return parsed.normalize()


def parse_date_column(values: pd.Series) -> pd.Series:
    """Element-wise :func:`parse_date` returning a datetime64 column."""
    return pd.to_datetime(values.map(parse_date))


def years_between(start: pd.Series, end) -> pd.Series:
    """Elapsed time from ``start`` to ``end`` in years."""
    return (end - start).dt.days / DAYS_PER_YEAR


def build_periods(breaks: Iterable[int]) -> List[CohortPeriod]:
    """Build contiguous [start, end) cohorts from calendar-year boundaries."""
    years = sorted(set(int(year) for year in breaks))
    if len(years) < 2:
        raise ValueError("At least two period breaks are required")
    periods = []
    for start_year, end_year in zip(years[:-1], years[1:]):
        periods.append(
            CohortPeriod(
                start=pd.Timestamp(datetime(start_year, 1, 1)),
                end=pd.Timestamp(datetime(end_year, 1, 1)),
                label=f"[{start_year}, {end_year})",
            )
        )
    return periods
