"""
Survival flags for the earlier listing and the combined lifecycle table.
"""

from __future__ import annotations

import logging
from datetime import datetime

import pandas as pd

from .models import DIED, END_DATE, PACKAGE, PKG, SURVIVED, YEARS_SINCE_REFERENCE
from .time_utils import years_between


logger = logging.getLogger(__name__)


def flag_survivors(later: pd.DataFrame, earlier: pd.DataFrame) -> pd.DataFrame:
    """Mark each entry of the earlier listing as present in the later one.

    Only the earlier listing's keys are iterated; packages that appear only
    in the later listing are not part of the result.
    """
    out = earlier.copy()
    out[SURVIVED] = out[PACKAGE].isin(set(later[PACKAGE])).astype(bool)
    logger.info(
        f"{int(out[SURVIVED].sum())} of {len(out)} earlier-listing packages survived"
    )
    return out


def combine_with_lifecycle(
    lifecycle: pd.DataFrame,
    flagged: pd.DataFrame,
    reference_date: datetime,
) -> pd.DataFrame:
    """Join lifecycle records onto the flagged earlier listing.

    The join is an outer join on the package key restricted to rows with a
    defined ``Survived`` value, so lifecycle-only packages are dropped.
    """
    merged = lifecycle.merge(
        flagged,
        how="outer",
        left_on=PKG,
        right_on=PACKAGE,
        indicator=True,
    )
    lifecycle_only = int((merged["_merge"] == "left_only").sum())
    snapshot_only = int((merged["_merge"] == "right_only").sum())
    if snapshot_only:
        logger.warning(f"{snapshot_only} earlier-listing package(s) have no lifecycle record")
    logger.debug(f"Dropping {lifecycle_only} lifecycle-only record(s)")

    combined = merged.loc[merged[SURVIVED].notna()].drop(columns="_merge").copy()
    combined[SURVIVED] = combined[SURVIVED].astype(bool)
    for col, dtype in flagged.dtypes.items():
        if isinstance(dtype, pd.CategoricalDtype):
            combined[col] = combined[col].astype(dtype)
    combined[PKG] = combined[PKG].fillna(combined[PACKAGE])
    combined[YEARS_SINCE_REFERENCE] = years_between(
        pd.Series(pd.Timestamp(reference_date), index=combined.index),
        pd.to_datetime(combined[END_DATE]),
    )
    combined[DIED] = ~combined[SURVIVED]
    return combined.reset_index(drop=True)
