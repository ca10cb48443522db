"""Shared synthetic CRAN tables for the pipeline tests."""

from datetime import datetime, timedelta

import numpy as np
import pandas as pd
import pytest


VERSIONS = ["0.1.2", "1.0", "2.3-1", "3.1.4", "4.0.0", "5.2", "x.1"]
DEPENDS = ["", "R (>= 3.0.0), methods", "methods, utils", "R (>= 2.10)", "stats"]
LICENSES = [
    "GPL-2",
    "GPL (>= 2)",
    "MIT + file LICENSE",
    "GPL-3",
    "GPL-2 | GPL-3",
    "Unknown | file LICENSE",
    "Artistic-1.0",
]


def build_lifecycle(n: int = 400, seed: int = 0) -> pd.DataFrame:
    rng = np.random.default_rng(seed)
    origin = datetime(1998, 1, 1)
    cutoff = datetime(2020, 5, 1)
    rows = []
    for i in range(n):
        first = origin + timedelta(days=int(rng.integers(0, 8000)))
        remaining = max((cutoff - first).days, 1)
        latest = first + timedelta(days=int(rng.integers(0, remaining)))
        removed = rng.random() < 0.3
        if removed:
            cran_date = ""
        else:
            cran_date = (latest + timedelta(days=1)).strftime("%Y-%m-%d")
        if not removed and i % 10 == 0:
            rows.append({"pkg": f"pkg{i}", "cran_date": cran_date, "first": "", "latest": ""})
            continue
        rows.append({
            "pkg": f"pkg{i}",
            "cran_date": cran_date,
            "first": first.strftime("%Y-%m-%d"),
            "latest": latest.strftime("%Y-%m-%d"),
        })
    rows.append({"pkg": "broken", "cran_date": "", "first": "-Inf", "latest": "-Inf"})
    rows.append({"pkg": "keeper", "cran_date": "2019-01-01", "first": "Inf", "latest": "-Inf"})
    df = pd.DataFrame(rows)
    return df.replace("", np.nan)


def build_snapshots(n_earlier: int = 300, seed: int = 1) -> pd.DataFrame:
    rng = np.random.default_rng(seed)
    rows = []
    for i in range(n_earlier):
        entry = {
            "Package": f"pkg{i}",
            "Version": VERSIONS[int(rng.integers(0, len(VERSIONS)))],
            "Depends": DEPENDS[int(rng.integers(0, len(DEPENDS)))] or np.nan,
            "License": LICENSES[int(rng.integers(0, len(LICENSES)))],
        }
        rows.append({"snapshot": "2015", **entry})
        if rng.random() < 0.7:
            rows.append({"snapshot": "2020", **entry})
    for i in range(20):
        rows.append({
            "snapshot": "2020",
            "Package": f"new{i}",
            "Version": "1.0.0",
            "Depends": np.nan,
            "License": "GPL-3",
        })
    return pd.DataFrame(rows)


@pytest.fixture
def lifecycle_raw() -> pd.DataFrame:
    return build_lifecycle()


@pytest.fixture
def snapshots_raw() -> pd.DataFrame:
    return build_snapshots()
