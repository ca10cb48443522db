"""
Reporting and export utilities.
"""

from __future__ import annotations

import dataclasses
import json
import logging
from pathlib import Path
from typing import Dict, List

import pandas as pd


logger = logging.getLogger(__name__)


def print_summary(results: Dict) -> None:
    logger.info("\n" + "=" * 60)
    logger.info("CRAN LONGEVITY RESULTS")
    logger.info("=" * 60)
    logger.info("Lifecycle records: %s (%s removed)", results["num_lifecycle_records"], results["num_removed"])
    logger.info(
        "Earlier listing: %s packages, %s survived",
        results["num_earlier_listing"],
        results["num_survived"],
    )
    logger.info("Combined records: %s", results["num_combined"])
    if results.get("logrank"):
        logger.info("Cohort log-rank p-value: %.4g", results["logrank"]["p_value"])
    logger.info("-" * 60)
    for name, model in results["models"].items():
        logger.info("%s (%s): n=%s, events=%s", name, model.kind, model.n_obs, model.n_events)
        for metric, value in model.metrics.items():
            logger.info("    %s: %.4f", metric, value)
    for name, error in results.get("errors", {}).items():
        logger.info("%s FAILED: %s", name, error)
    logger.info("=" * 60)


def results_to_dict(results: Dict) -> Dict:
    """JSON-friendly view of the results (no DataFrames)."""
    out = {
        key: results[key]
        for key in (
            "num_lifecycle_records",
            "num_removed",
            "num_earlier_listing",
            "num_survived",
            "num_combined",
        )
    }
    if "config" in results:
        out["config"] = dataclasses.asdict(results["config"])
    out["logrank"] = results.get("logrank")
    out["models"] = {name: model.to_dict() for name, model in results.get("models", {}).items()}
    out["errors"] = dict(results.get("errors", {}))
    return out


def save_results_json(results: Dict, output_dir: Path) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    results_file = output_dir / "results.json"
    with open(results_file, 'w') as f:
        json.dump(results_to_dict(results), f, indent=2, default=str)
    return results_file


def export_model_tables(results: Dict, output_dir: Path) -> List[Path]:
    output_dir.mkdir(parents=True, exist_ok=True)
    written = []
    for name, model in results.get("models", {}).items():
        table_file = output_dir / f"{name}_coefficients.csv"
        model.coefficients.to_csv(table_file)
        written.append(table_file)
    for key in ("kaplan_meier", "crosstabs"):
        if key in results and results[key] is not None:
            table_file = output_dir / f"{key}.csv"
            results[key].to_csv(table_file, index=False)
            written.append(table_file)
    return written


def export_worksheets(results: Dict, output_dir: Path) -> Path | None:
    if 'tables' not in results:
        return None
    output_dir.mkdir(parents=True, exist_ok=True)
    excel_file = output_dir / "worksheets.xlsx"
    with pd.ExcelWriter(excel_file, engine='openpyxl') as writer:
        for table_name, table_df in results['tables'].items():
            df_copy = table_df.copy()
            for col in df_copy.columns:
                if isinstance(df_copy[col].dtype, pd.CategoricalDtype):
                    df_copy[col] = df_copy[col].astype(str).where(df_copy[col].notna())
            df_copy.to_excel(writer, sheet_name=table_name[:31], index=False)
    return excel_file
