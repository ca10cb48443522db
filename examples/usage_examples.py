#!/usr/bin/env python3
"""
Example script showing how to use the cran-longevity tool.
"""

from datetime import datetime
from pathlib import Path

from cran_longevity.analyzer import LongevityAnalyzer
from cran_longevity.features import dependency_count, license_group, version_bucket
from cran_longevity.models import StudyConfig
from cran_longevity.reporting import export_model_tables, save_results_json


def example_basic_analysis():
    """Example: Full analysis with the default study constants."""
    print("="*60)
    print("Example 1: Basic Analysis")
    print("="*60)

    analyzer = LongevityAnalyzer(
        lifecycle_path=Path("./data/lifecycle.csv"),
        snapshots_path=Path("./data/snapshots.csv"),
        output_dir=Path("./output/example1")
    )

    results = analyzer.analyze()

    print(f"\nLifecycle records: {results['num_lifecycle_records']}")
    print(f"Removed packages: {results['num_removed']}")
    print(f"2015 packages surviving to 2020: {results['num_survived']} of {results['num_earlier_listing']}")
    print(results["kaplan_meier"].to_string(index=False))

    save_results_json(results, analyzer.output_dir)
    export_model_tables(results, analyzer.output_dir)


def example_custom_study():
    """Example: Different snapshot dates, cohorts and exception package."""
    print("\n" + "="*60)
    print("Example 2: Custom Study Constants")
    print("="*60)

    config = StudyConfig(
        reference_date=datetime(2015, 1, 1),
        download_date=datetime(2020, 1, 1),
        period_breaks=(1997, 2008, 2012, 2016, 2021),
        exception_packages=("somepkg",),
    )
    analyzer = LongevityAnalyzer(
        lifecycle_path=Path("./data/lifecycle.csv"),
        snapshots_path=Path("./data/snapshots.csv"),
        config=config,
        output_dir=Path("./output/example2")
    )

    results = analyzer.analyze()

    for name, model in results["models"].items():
        print(f"\n{name} (n={model.n_obs}, events={model.n_events})")
        print(model.coefficients.to_string())


def example_feature_helpers():
    """Example: The per-row feature helpers."""
    print("\n" + "="*60)
    print("Example 3: Feature Helpers")
    print("="*60)

    print(f"version_bucket('0.9-2') = {version_bucket('0.9-2')}")
    print(f"dependency_count('R (>= 3.0.0), methods, utils') = {dependency_count('R (>= 3.0.0), methods, utils')}")
    print(f"license_group('GPL (>= 2)') = {license_group('GPL (>= 2)')}")


if __name__ == "__main__":
    example_feature_helpers()
    example_basic_analysis()
    example_custom_study()
