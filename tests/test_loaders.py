"""Tests for input loading."""

from pathlib import Path

import pandas as pd
import pytest

from cran_longevity.loaders import load_lifecycle, load_snapshots, split_snapshots


def test_load_lifecycle_keeps_sentinels_as_text(tmp_path: Path) -> None:
    csv_path = tmp_path / "lifecycle.csv"
    csv_path.write_text(
        "pkg,cran_date,first,latest\n"
        "a,2019-01-01,-Inf,-Inf\n"
        "b,NA,2010-01-01,2012-01-01\n"
        "c,2019-01-01,,\n",
        encoding="utf-8",
    )

    df = load_lifecycle(csv_path)

    assert df.loc[0, "first"] == "-Inf"
    assert pd.isna(df.loc[1, "cran_date"])
    assert pd.isna(df.loc[2, "latest"])


def test_load_lifecycle_rejects_missing_columns(tmp_path: Path) -> None:
    csv_path = tmp_path / "lifecycle.csv"
    csv_path.write_text("pkg,cran_date\na,2019-01-01\n", encoding="utf-8")

    with pytest.raises(ValueError, match="first, latest"):
        load_lifecycle(csv_path)


def test_split_snapshots(tmp_path: Path) -> None:
    csv_path = tmp_path / "snapshots.csv"
    csv_path.write_text(
        "snapshot,Package,Version,Depends,License\n"
        "2015,a,1.0,,GPL-2\n"
        "2015,a,1.1,,GPL-2\n"
        "2015,b,0.1,\"R (>= 3.0.0), methods\",MIT + file LICENSE\n"
        "2020,a,2.0,,GPL-2\n",
        encoding="utf-8",
    )

    earlier, later = split_snapshots(load_snapshots(csv_path), "2015", "2020")

    assert list(earlier["Package"]) == ["a", "b"]
    assert earlier.loc[0, "Version"] == "1.0"
    assert earlier.loc[1, "Depends"] == "R (>= 3.0.0), methods"
    assert list(later["Package"]) == ["a"]
    assert "snapshot" not in earlier.columns


def test_split_snapshots_unknown_label(snapshots_raw) -> None:
    with pytest.raises(ValueError, match="2017"):
        split_snapshots(snapshots_raw, "2017", "2020")
