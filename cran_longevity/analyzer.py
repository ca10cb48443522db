"""
End-to-end longevity analysis: cleaning, features, joins and model fits.
"""

import logging
import traceback
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

import pandas as pd
from tqdm import tqdm

from .features import extract_features
from .joiner import combine_with_lifecycle, flag_survivors
from .loaders import load_lifecycle, load_snapshots, split_snapshots
from .modeling import (
    fit_cox,
    fit_logit,
    kaplan_meier_table,
    logrank_by_group,
    survival_crosstab,
)
from .models import (
    DEPENDENCY_COUNT,
    DEPENDS_ON_VERSIONED,
    DIED,
    DURATION_YEARS,
    LICENSE_GROUP,
    LICENSE_HAS_ALTERNATIVE,
    REMOVED,
    START_PERIOD,
    SURVIVED,
    VERSION_BUCKET,
    VERSION_BUCKET_2,
    YEARS_SINCE_REFERENCE,
    ModelResult,
    StudyConfig,
)
from .normalizer import normalize_lifecycle
from .periods import add_duration, assign_periods


logger = logging.getLogger(__name__)

FULL_CATEGORICAL = (VERSION_BUCKET, LICENSE_GROUP)
SIMPLE_CATEGORICAL = (VERSION_BUCKET_2, LICENSE_GROUP)
FEATURE_NUMERIC = (DEPENDS_ON_VERSIONED, DEPENDENCY_COUNT, LICENSE_HAS_ALTERNATIVE)
CROSSTAB_FEATURES = (
    VERSION_BUCKET,
    VERSION_BUCKET_2,
    DEPENDS_ON_VERSIONED,
    LICENSE_GROUP,
    LICENSE_HAS_ALTERNATIVE,
)


class LongevityAnalyzer:
    """Analyze how long CRAN packages stay on CRAN and what predicts it."""

    def __init__(
        self,
        lifecycle_path: Optional[Path] = None,
        snapshots_path: Optional[Path] = None,
        config: StudyConfig = StudyConfig(),
        output_dir: Path = Path("./output"),
    ):
        """Initialize longevity analyzer.

        Args:
            lifecycle_path: CSV with pkg, cran_date, first, latest
            snapshots_path: CSV with snapshot, Package, Version, Depends, License
            config: Study constants
            output_dir: Output directory for results
        """
        self.lifecycle_path = Path(lifecycle_path) if lifecycle_path else None
        self.snapshots_path = Path(snapshots_path) if snapshots_path else None
        self.config = config
        self.output_dir = Path(output_dir)

    def prepare_lifecycle(self, raw: pd.DataFrame) -> pd.DataFrame:
        """Clean lifecycle records and add cohorts and durations."""
        cleaned = normalize_lifecycle(
            raw,
            download_date=self.config.download_date,
            exception_packages=self.config.exception_packages,
        )
        cleaned = assign_periods(cleaned, self.config.period_breaks)
        return add_duration(cleaned)

    def prepare_snapshots(self, raw: pd.DataFrame) -> pd.DataFrame:
        """Flag survivors of the earlier listing and derive its features."""
        earlier, later = split_snapshots(
            raw, self.config.earlier_snapshot, self.config.later_snapshot
        )
        flagged = flag_survivors(later, earlier)
        return extract_features(flagged, self.config.license_allow_list)

    def fit_trend_models(self, lifecycle: pd.DataFrame) -> Dict[str, Any]:
        """Cohort comparison of time on CRAN."""
        cohorts = lifecycle.loc[lifecycle[START_PERIOD].notna()]
        return {
            "kaplan_meier": kaplan_meier_table(
                cohorts, DURATION_YEARS, REMOVED, START_PERIOD, self.config.km_horizons
            ),
            "logrank": logrank_by_group(cohorts, DURATION_YEARS, REMOVED, START_PERIOD),
        }

    def _model_specs(self) -> Dict[str, Tuple[Callable[..., ModelResult], str, Dict]]:
        return {
            "cox_start_period": (
                fit_cox,
                "lifecycle",
                dict(duration_col=DURATION_YEARS, event_col=REMOVED, categorical=(START_PERIOD,)),
            ),
            "logit_survival_full": (
                fit_logit,
                "features",
                dict(outcome=SURVIVED, categorical=FULL_CATEGORICAL, numeric=FEATURE_NUMERIC),
            ),
            "logit_survival_simple": (
                fit_logit,
                "features",
                dict(outcome=SURVIVED, categorical=SIMPLE_CATEGORICAL, numeric=FEATURE_NUMERIC),
            ),
            "cox_after_reference": (
                fit_cox,
                "combined",
                dict(
                    duration_col=YEARS_SINCE_REFERENCE,
                    event_col=DIED,
                    categorical=SIMPLE_CATEGORICAL,
                    numeric=FEATURE_NUMERIC,
                ),
            ),
        }

    def analyze(
        self,
        lifecycle_raw: Optional[pd.DataFrame] = None,
        snapshots_raw: Optional[pd.DataFrame] = None,
    ) -> Dict[str, Any]:
        """Run complete analysis.

        Raw tables are loaded from the configured paths unless passed in.

        Returns:
            Dictionary with derived tables, fitted models and any model errors
        """
        if lifecycle_raw is None:
            if self.lifecycle_path is None:
                raise ValueError("No lifecycle data: pass a table or a lifecycle_path")
            lifecycle_raw = load_lifecycle(self.lifecycle_path)
        if snapshots_raw is None:
            if self.snapshots_path is None:
                raise ValueError("No snapshot data: pass a table or a snapshots_path")
            snapshots_raw = load_snapshots(self.snapshots_path)

        lifecycle = self.prepare_lifecycle(lifecycle_raw)
        features = self.prepare_snapshots(snapshots_raw)
        combined = combine_with_lifecycle(lifecycle, features, self.config.reference_date)
        tables = {"lifecycle": lifecycle, "features": features, "combined": combined}

        results: Dict[str, Any] = {
            "config": self.config,
            "num_lifecycle_records": int(len(lifecycle)),
            "num_removed": int(lifecycle[REMOVED].sum()),
            "num_earlier_listing": int(len(features)),
            "num_survived": int(features[SURVIVED].sum()),
            "num_combined": int(len(combined)),
            "tables": tables,
            "models": {},
            "errors": {},
        }

        try:
            results.update(self.fit_trend_models(lifecycle))
        except Exception as e:
            logger.error(f"Error estimating cohort survival curves: {e}")
            logger.error(traceback.format_exc())
            results["errors"]["kaplan_meier"] = str(e)

        specs = self._model_specs()
        for name, (fitter, table, kwargs) in tqdm(specs.items(), desc="Fitting models", total=len(specs)):
            try:
                results["models"][name] = fitter(tables[table], name=name, **kwargs)
            except Exception as e:
                logger.error(f"Error fitting {name}: {e}")
                logger.error(traceback.format_exc())
                results["errors"][name] = str(e)
                continue

        results["crosstabs"] = pd.concat(
            [survival_crosstab(features, feature, SURVIVED) for feature in CROSSTAB_FEATURES],
            ignore_index=True,
        )
        return results
