"""
Assignment of packages to first-appearance cohorts.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

import pandas as pd

from .models import DURATION_YEARS, END_DATE, FIRST, START_PERIOD, CohortPeriod
from .time_utils import build_periods, years_between


logger = logging.getLogger(__name__)


def period_for(date, periods: Iterable[CohortPeriod]) -> Optional[CohortPeriod]:
    """Return the single cohort containing ``date``, or None."""
    matches = [period for period in periods if period.contains(date)]
    if len(matches) > 1:
        raise ValueError(f"Overlapping cohort periods for {date}: {matches}")
    return matches[0] if matches else None


def assign_periods(df: pd.DataFrame, breaks: Iterable[int]) -> pd.DataFrame:
    """Add the ordered categorical ``start_period`` column.

    Intervals are left-closed and right-open, so a ``first`` date on a
    boundary belongs to the later cohort. Records outside every cohort, or
    with no ``first`` date, get NaN.
    """
    periods: List[CohortPeriod] = build_periods(breaks)
    bins = [periods[0].start] + [period.end for period in periods]
    labels = [period.label for period in periods]

    out = df.copy()
    out[START_PERIOD] = pd.cut(
        pd.to_datetime(out[FIRST]),
        bins=pd.DatetimeIndex(bins),
        right=False,
        labels=labels,
        ordered=True,
    )

    excluded = int(out[START_PERIOD].isna().sum())
    if excluded:
        logger.info(f"{excluded} record(s) fall outside every cohort period")
    return out


def add_duration(df: pd.DataFrame) -> pd.DataFrame:
    """Add time on CRAN, from the first archived version to ``end_date``, in years."""
    out = df.copy()
    out[DURATION_YEARS] = years_between(pd.to_datetime(out[FIRST]), pd.to_datetime(out[END_DATE]))
    return out
