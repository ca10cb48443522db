#!/usr/bin/env python3
"""Combine two CRAN listing CSVs into a single snapshot file."""

from __future__ import annotations

import argparse
from pathlib import Path

import pandas as pd

from cran_longevity.models import DEPENDS, LICENSE, PACKAGE, SNAPSHOT, SNAPSHOT_COLUMNS, VERSION


def _read_listing(path: Path, label: str) -> pd.DataFrame:
    df = pd.read_csv(path, dtype=str, sep=None, engine="python")
    missing = [col for col in (PACKAGE, VERSION, DEPENDS, LICENSE) if col not in df.columns]
    if missing:
        raise ValueError(f"{path} missing required column(s): {', '.join(missing)}")
    df[SNAPSHOT] = label
    return df.loc[:, list(SNAPSHOT_COLUMNS)]


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Stack an earlier and a later CRAN listing into one snapshot CSV."
    )
    parser.add_argument("earlier_csv", help="Path to the earlier listing")
    parser.add_argument("later_csv", help="Path to the later listing")
    parser.add_argument("output_csv", help="Path to the combined snapshot CSV")
    parser.add_argument("--earlier-label", default="2015", help="Label for the earlier listing")
    parser.add_argument("--later-label", default="2020", help="Label for the later listing")
    args = parser.parse_args()

    combined = pd.concat(
        [
            _read_listing(Path(args.earlier_csv), args.earlier_label),
            _read_listing(Path(args.later_csv), args.later_label),
        ],
        ignore_index=True,
    )
    combined.to_csv(Path(args.output_csv), index=False)


if __name__ == "__main__":
    main()
