"""
Cleaning of the package lifecycle table.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable

import pandas as pd

from .models import CRAN_DATE, END_DATE, FIRST, LATEST, PKG, REMOVED
from .time_utils import is_unbounded, parse_date_column


logger = logging.getLogger(__name__)


def null_exception_dates(df: pd.DataFrame, exception_packages: Iterable[str]) -> pd.DataFrame:
    """Null ``first``/``latest`` for the named packages instead of dropping them.

    Names that are not present in the table are ignored.
    """
    df = df.copy()
    mask = df[PKG].isin(list(exception_packages))
    if mask.any():
        logger.info(f"Nulling archive dates for {int(mask.sum())} exception package(s)")
        df[FIRST] = df[FIRST].astype(object)
        df[LATEST] = df[LATEST].astype(object)
        df.loc[mask, [FIRST, LATEST]] = None
    return df


def drop_unbounded(df: pd.DataFrame) -> pd.DataFrame:
    """Remove records whose ``first`` date is the +/-infinity sentinel."""
    mask = df[FIRST].map(is_unbounded).astype(bool)
    if mask.any():
        logger.info(f"Dropping {int(mask.sum())} record(s) with unbounded first date")
    return df.loc[~mask].copy()


def normalize_lifecycle(
    df: pd.DataFrame,
    download_date: datetime,
    exception_packages: Iterable[str] = (),
) -> pd.DataFrame:
    """Clean raw lifecycle records and derive ``end_date`` and ``removed``.

    Args:
        df: Raw lifecycle records with ``pkg``, ``cran_date``, ``first`` and
            ``latest`` columns. Date columns may hold strings, timestamps or
            the +/-infinity sentinel.
        download_date: Data collection date used as ``end_date`` for packages
            still on CRAN.
        exception_packages: Packages whose archive dates are nulled rather
            than the record being dropped.

    Returns:
        A new DataFrame with parsed dates plus ``end_date`` and ``removed``.
    """
    cleaned = null_exception_dates(df, exception_packages)
    cleaned = drop_unbounded(cleaned)

    duplicated = cleaned[PKG].duplicated(keep="first")
    if duplicated.any():
        logger.warning(f"Keeping first of {int(duplicated.sum())} duplicated package key(s)")
        cleaned = cleaned.loc[~duplicated].copy()

    for col in (CRAN_DATE, FIRST, LATEST):
        cleaned[col] = parse_date_column(cleaned[col])

    cleaned[REMOVED] = cleaned[CRAN_DATE].isna()
    cleaned[END_DATE] = cleaned[LATEST].where(cleaned[REMOVED], pd.Timestamp(download_date))
    cleaned[END_DATE] = pd.to_datetime(cleaned[END_DATE])

    logger.info(
        f"Lifecycle table: {len(cleaned)} records, {int(cleaned[REMOVED].sum())} removed"
    )
    return cleaned.reset_index(drop=True)
