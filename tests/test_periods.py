"""Tests for cohort period assignment."""

from datetime import datetime

import pandas as pd
import pytest

from cran_longevity.normalizer import normalize_lifecycle
from cran_longevity.periods import add_duration, assign_periods, period_for
from cran_longevity.time_utils import build_periods


BREAKS = (2000, 2005, 2010)


def test_build_periods_sorts_and_deduplicates():
    periods = build_periods([2010, 2000, 2005, 2005])

    assert [p.label for p in periods] == ["[2000, 2005)", "[2005, 2010)"]
    assert periods[0].end == periods[1].start


def test_build_periods_requires_two_breaks():
    with pytest.raises(ValueError):
        build_periods([2000])


def test_boundary_date_belongs_to_later_period():
    df = pd.DataFrame({"first": pd.to_datetime(["2004-12-31", "2005-01-01", "2000-01-01"])})

    out = assign_periods(df, BREAKS)

    assert list(out["start_period"].astype(str)) == ["[2000, 2005)", "[2005, 2010)", "[2000, 2005)"]
    assert out["start_period"].cat.ordered


def test_dates_outside_all_periods_are_excluded():
    df = pd.DataFrame({"first": pd.to_datetime(["1999-12-31", "2010-01-01", None])})

    out = assign_periods(df, BREAKS)

    assert out["start_period"].isna().all()


def test_assignment_is_exhaustive_and_disjoint(lifecycle_raw):
    breaks = (1997, 2005, 2010, 2013, 2016, 2021)
    cleaned = normalize_lifecycle(lifecycle_raw, datetime(2020, 6, 1))
    periods = build_periods(breaks)

    out = assign_periods(cleaned, breaks)

    for first, label in zip(out["first"], out["start_period"]):
        matches = [p for p in periods if p.contains(first)]
        if pd.isna(first):
            assert pd.isna(label)
            continue
        assert len(matches) == 1
        assert matches[0].label == label
        assert period_for(first, periods) == matches[0]


def test_add_duration_in_years():
    df = pd.DataFrame({
        "first": pd.to_datetime(["2000-01-01"]),
        "end_date": pd.to_datetime(["2001-01-01"]),
    })

    out = add_duration(df)

    assert out.loc[0, "duration_years"] == pytest.approx(366 / 365.25)
