"""Tests for lifecycle cleaning."""

from datetime import datetime

import numpy as np
import pandas as pd

from cran_longevity.normalizer import normalize_lifecycle
from cran_longevity.time_utils import is_unbounded, parse_date


DOWNLOAD = datetime(2020, 6, 1)


def test_is_unbounded_accepts_strings_and_floats():
    assert is_unbounded("-Inf")
    assert is_unbounded(" Inf ")
    assert is_unbounded(float("inf"))
    assert is_unbounded(-np.inf)
    assert not is_unbounded("2015-01-01")
    assert not is_unbounded(np.nan)
    assert not is_unbounded(None)


def test_parse_date_defaults_to_nat():
    assert parse_date("2015-03-04") == pd.Timestamp("2015-03-04")
    assert pd.isna(parse_date("not a date"))
    assert pd.isna(parse_date(""))
    assert pd.isna(parse_date("-Inf"))


def test_two_row_scenario():
    raw = pd.DataFrame({
        "pkg": ["live", "gone"],
        "cran_date": ["2019-03-01", None],
        "first": [None, "2000-01-01"],
        "latest": [None, "2000-04-10"],
    })

    cleaned = normalize_lifecycle(raw, download_date=DOWNLOAD).set_index("pkg")

    assert not cleaned.loc["live", "removed"]
    assert cleaned.loc["live", "end_date"] == pd.Timestamp(DOWNLOAD)
    assert cleaned.loc["gone", "removed"]
    assert cleaned.loc["gone", "end_date"] == pd.Timestamp("2000-04-10")


def test_unbounded_first_is_dropped_except_named_package():
    raw = pd.DataFrame({
        "pkg": ["a", "b", "keeper"],
        "cran_date": ["2019-01-01", None, "2019-01-01"],
        "first": ["-Inf", "2010-01-01", "Inf"],
        "latest": ["-Inf", "2012-01-01", "-Inf"],
    })

    cleaned = normalize_lifecycle(raw, DOWNLOAD, exception_packages=["keeper"])

    assert list(cleaned["pkg"]) == ["b", "keeper"]
    keeper = cleaned.loc[cleaned["pkg"] == "keeper"].iloc[0]
    assert pd.isna(keeper["first"])
    assert pd.isna(keeper["latest"])
    assert not keeper["removed"]


def test_missing_exception_package_is_a_no_op(lifecycle_raw):
    with_missing = normalize_lifecycle(lifecycle_raw, DOWNLOAD, exception_packages=["absent"])
    without = normalize_lifecycle(lifecycle_raw, DOWNLOAD)

    pd.testing.assert_frame_equal(with_missing, without)
    assert "broken" not in set(without["pkg"])
    assert "keeper" not in set(without["pkg"])


def test_removed_iff_cran_date_absent(lifecycle_raw):
    cleaned = normalize_lifecycle(lifecycle_raw, DOWNLOAD, exception_packages=["keeper"])

    assert (cleaned["removed"] == cleaned["cran_date"].isna()).all()
    removed = cleaned[cleaned["removed"]]
    assert (removed["end_date"] == removed["latest"]).all()
    assert (cleaned.loc[~cleaned["removed"], "end_date"] == pd.Timestamp(DOWNLOAD)).all()


def test_input_frame_is_not_modified(lifecycle_raw):
    before = lifecycle_raw.copy()
    normalize_lifecycle(lifecycle_raw, DOWNLOAD, exception_packages=["keeper"])
    pd.testing.assert_frame_equal(lifecycle_raw, before)


def test_duplicated_keys_keep_first_row():
    raw = pd.DataFrame({
        "pkg": ["a", "a"],
        "cran_date": ["2019-01-01", None],
        "first": ["2010-01-01", "2011-01-01"],
        "latest": ["2012-01-01", "2013-01-01"],
    })

    cleaned = normalize_lifecycle(raw, DOWNLOAD)

    assert len(cleaned) == 1
    assert cleaned.loc[0, "first"] == pd.Timestamp("2010-01-01")
