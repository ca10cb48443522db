"""
Input loading for the lifecycle and snapshot tables.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Tuple

import pandas as pd

from .models import LIFECYCLE_COLUMNS, PACKAGE, SNAPSHOT, SNAPSHOT_COLUMNS


logger = logging.getLogger(__name__)


def _require_columns(df: pd.DataFrame, required: Iterable[str], source: str) -> None:
    missing = [col for col in required if col not in df.columns]
    if missing:
        raise ValueError(f"{source} missing required column(s): {', '.join(missing)}")


def load_lifecycle(path: Path) -> pd.DataFrame:
    """Read the lifecycle CSV, keeping the date columns as raw strings.

    Dates stay unparsed so that the +/-Inf sentinel in ``first`` survives
    until the normalizer sees it.
    """
    df = pd.read_csv(path, dtype=str, keep_default_na=False, na_values=["", "NA"])
    _require_columns(df, LIFECYCLE_COLUMNS, str(path))
    logger.info(f"Loaded {len(df)} lifecycle records from {path}")
    return df


def load_snapshots(path: Path) -> pd.DataFrame:
    """Read the snapshot CSV holding both listings."""
    df = pd.read_csv(path, dtype=str, keep_default_na=False, na_values=["", "NA"])
    _require_columns(df, SNAPSHOT_COLUMNS, str(path))
    df[SNAPSHOT] = df[SNAPSHOT].str.strip()
    logger.info(f"Loaded {len(df)} snapshot entries from {path}")
    return df


def split_snapshots(
    df: pd.DataFrame,
    earlier: str,
    later: str,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Split the snapshot table into its (earlier, later) listings."""
    labels = set(df[SNAPSHOT].astype(str))
    for label in (earlier, later):
        if label not in labels:
            raise ValueError(f"Snapshot {label!r} not found; available: {sorted(labels)}")

    frames = []
    for label in (earlier, later):
        listing = df.loc[df[SNAPSHOT].astype(str) == label].drop(columns=SNAPSHOT)
        duplicated = listing[PACKAGE].duplicated(keep="first")
        if duplicated.any():
            logger.warning(f"Snapshot {label}: keeping first of {int(duplicated.sum())} duplicated package(s)")
            listing = listing.loc[~duplicated]
        frames.append(listing.reset_index(drop=True))
    return frames[0], frames[1]
