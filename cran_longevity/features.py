"""
Feature extraction from CRAN listing snapshots.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional

import pandas as pd
from packaging import version as pkg_version

from .models import (
    DEFAULT_LICENSE_ALLOW_LIST,
    DEPENDENCY_COUNT,
    DEPENDS,
    DEPENDS_ON_VERSIONED,
    LICENSE,
    LICENSE_GROUP,
    LICENSE_HAS_ALTERNATIVE,
    MIN_R_VERSION,
    VERSION,
    VERSION_BUCKET,
    VERSION_BUCKET_2,
)


logger = logging.getLogger(__name__)

OTHERS_VERSION = "others"
CONSOLIDATED_VERSION = "1-4"
VERSION_BUCKETS = ("0", "1", "2", "3", "4", OTHERS_VERSION)
CONSOLIDATED_BUCKETS = ("0", CONSOLIDATED_VERSION, OTHERS_VERSION)

GPL2_GROUP = "GPL(V2+) Group"
GPL3_GROUP = "GPL(V3+) Group"
OTHER_LICENSES = "Others"
GPL2_LICENSES = frozenset({"GPL-2", "GPL (>= 2)", "GPL (>= 2.0)"})
GPL3_LICENSES = frozenset({"GPL-3", "GPL (>= 3)"})

VERSIONED_MARKER = "(>="
ALTERNATIVE_MARKER = "|"

_LEADING_NUMBER = re.compile(r"[0-9]+")
_PACKAGE_NAME = re.compile(r"[A-Za-z][A-Za-z0-9.]*")
_R_CONSTRAINT = re.compile(r"(?:^|,)\s*R\s*\(\s*>=\s*([^)\s]+)\s*\)")


def _is_missing(value) -> bool:
    return value is None or (not isinstance(value, str) and pd.isna(value))


def version_bucket(value) -> str:
    """Bucket a version string by its leading component.

    The text before the first ``.`` (the whole string when there is none)
    must be a plain non-negative integer in [0, 4]; anything else, including
    a non-numeric component, lands in ``"others"``.
    """
    if _is_missing(value):
        return OTHERS_VERSION
    leading = str(value).strip().split(".", 1)[0]
    if not _LEADING_NUMBER.fullmatch(leading):
        logger.debug(f"Non-numeric leading version component in {value!r}")
        return OTHERS_VERSION
    major = int(leading)
    if 0 <= major <= 4:
        return str(major)
    return OTHERS_VERSION


def consolidate_version_bucket(bucket: str) -> str:
    """Merge buckets 1 through 4 into a single ``"1-4"`` level."""
    if bucket in ("1", "2", "3", "4"):
        return CONSOLIDATED_VERSION
    return bucket


def depends_on_versioned_pkg(depends) -> bool:
    """True if any dependency carries a ``(>=`` lower-bound constraint."""
    if _is_missing(depends):
        return False
    return VERSIONED_MARKER in str(depends)


def dependency_count(depends) -> int:
    """Count the comma-separated entries of ``Depends`` that name a package."""
    if _is_missing(depends):
        return 0
    return sum(1 for piece in str(depends).split(",") if _PACKAGE_NAME.search(piece))


def min_r_version(depends) -> Optional[str]:
    """Minimum R version required by an ``R (>= x)`` entry, if any."""
    if _is_missing(depends):
        return None
    match = _R_CONSTRAINT.search(str(depends))
    if match is None:
        return None
    try:
        return str(pkg_version.Version(match.group(1)))
    except pkg_version.InvalidVersion:
        logger.debug(f"Unparseable R version constraint in {depends!r}")
        return None


def license_group(value, allow_list: Iterable[str] = DEFAULT_LICENSE_ALLOW_LIST) -> str:
    """Collapse a raw license string into a canonical group."""
    if _is_missing(value):
        return OTHER_LICENSES
    value = str(value)
    if value in GPL2_LICENSES:
        return GPL2_GROUP
    if value in GPL3_LICENSES:
        return GPL3_GROUP
    if value in set(allow_list):
        return value
    return OTHER_LICENSES


def license_has_alternative(value) -> bool:
    """True if the license offers alternatives (``A | B``)."""
    if _is_missing(value):
        return False
    return ALTERNATIVE_MARKER in str(value)


def license_levels(allow_list: Iterable[str] = DEFAULT_LICENSE_ALLOW_LIST) -> list:
    """Category order for ``LicenseGroup``; the GPL-2 group is the baseline."""
    levels = [GPL2_GROUP, GPL3_GROUP]
    levels += [name for name in allow_list if name not in levels]
    levels.append(OTHER_LICENSES)
    return levels


def extract_features(
    df: pd.DataFrame,
    license_allow_list: Iterable[str] = DEFAULT_LICENSE_ALLOW_LIST,
) -> pd.DataFrame:
    """Derive the modelling features for every row of a listing."""
    allow_list = tuple(license_allow_list)
    out = df.copy()

    out[VERSION_BUCKET] = pd.Categorical(
        out[VERSION].map(version_bucket), categories=list(VERSION_BUCKETS)
    )
    out[VERSION_BUCKET_2] = pd.Categorical(
        out[VERSION_BUCKET].astype(str).map(consolidate_version_bucket),
        categories=list(CONSOLIDATED_BUCKETS),
    )
    out[DEPENDS_ON_VERSIONED] = out[DEPENDS].map(depends_on_versioned_pkg).astype(bool)
    out[DEPENDENCY_COUNT] = out[DEPENDS].map(dependency_count).astype(int)
    out[MIN_R_VERSION] = out[DEPENDS].map(min_r_version)
    out[LICENSE_GROUP] = pd.Categorical(
        out[LICENSE].map(lambda value: license_group(value, allow_list)),
        categories=license_levels(allow_list),
    )
    out[LICENSE_HAS_ALTERNATIVE] = out[LICENSE].map(license_has_alternative).astype(bool)

    logger.info(f"Extracted features for {len(out)} listing entries")
    return out
