"""
Core data models for the longevity analysis.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional, Tuple

import pandas as pd


# Lifecycle table columns
PKG = "pkg"
CRAN_DATE = "cran_date"
FIRST = "first"
LATEST = "latest"
END_DATE = "end_date"
REMOVED = "removed"
START_PERIOD = "start_period"
DURATION_YEARS = "duration_years"

# Snapshot table columns
SNAPSHOT = "snapshot"
PACKAGE = "Package"
VERSION = "Version"
DEPENDS = "Depends"
LICENSE = "License"

# Derived snapshot features
SURVIVED = "Survived"
VERSION_BUCKET = "VersionBucket"
VERSION_BUCKET_2 = "VersionBucket2"
DEPENDS_ON_VERSIONED = "DependsOnVersionedPkg"
DEPENDENCY_COUNT = "DependencyCount"
LICENSE_GROUP = "LicenseGroup"
LICENSE_HAS_ALTERNATIVE = "LicenseHasAlternative"
MIN_R_VERSION = "MinRVersion"

# Combined table columns
YEARS_SINCE_REFERENCE = "years_since_reference"
DIED = "died"

LIFECYCLE_COLUMNS = (PKG, CRAN_DATE, FIRST, LATEST)
SNAPSHOT_COLUMNS = (SNAPSHOT, PACKAGE, VERSION, DEPENDS, LICENSE)

DEFAULT_LICENSE_ALLOW_LIST = (
    "MIT + file LICENSE",
    "GPL",
    "GPL-2 | GPL-3",
    "LGPL-3",
    "LGPL-2.1",
    "LGPL (>= 2)",
    "Artistic-2.0",
    "BSD_3_clause + file LICENSE",
    "BSD_2_clause + file LICENSE",
    "Apache License 2.0",
    "CC0",
)


@dataclass(frozen=True)
class StudyConfig:
    """Fixed constants of the study."""

    earlier_snapshot: str = "2015"
    later_snapshot: str = "2020"
    reference_date: datetime = datetime(2015, 6, 1)
    download_date: datetime = datetime(2020, 6, 1)
    period_breaks: Tuple[int, ...] = (1997, 2005, 2010, 2013, 2016, 2021)
    exception_packages: Tuple[str, ...] = ()
    license_allow_list: Tuple[str, ...] = DEFAULT_LICENSE_ALLOW_LIST
    km_horizons: Tuple[float, ...] = (1.0, 5.0, 10.0)


@dataclass(frozen=True)
class CohortPeriod:
    """A left-closed, right-open cohort interval."""

    start: pd.Timestamp
    end: pd.Timestamp
    label: str

    def contains(self, date) -> bool:
        if date is None or pd.isna(date):
            return False
        return self.start <= pd.Timestamp(date) < self.end


@dataclass(frozen=True)
class ModelResult:
    """A fitted model reduced to its coefficient table and fit metrics."""

    name: str
    kind: str
    n_obs: int
    n_events: Optional[int]
    coefficients: pd.DataFrame
    metrics: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "kind": self.kind,
            "n_obs": self.n_obs,
            "n_events": self.n_events,
            "metrics": dict(self.metrics),
            "coefficients": self.coefficients.reset_index().to_dict(orient="records"),
        }
