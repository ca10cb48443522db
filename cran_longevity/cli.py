"""
Command-line interface for the CRAN longevity analysis.
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

from .analyzer import LongevityAnalyzer
from .models import DEFAULT_LICENSE_ALLOW_LIST, StudyConfig
from .reporting import export_model_tables, export_worksheets, print_summary, save_results_json


def _parse_date(value: str) -> datetime:
    try:
        return datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date {value!r}. Use YYYY-MM-DD")


def build_parser() -> argparse.ArgumentParser:
    defaults = StudyConfig()
    parser = argparse.ArgumentParser(
        description="Analyze how long CRAN packages survive and what predicts it"
    )

    parser.add_argument(
        "--lifecycle",
        required=True,
        help="CSV with pkg, cran_date, first, latest columns"
    )

    parser.add_argument(
        "--snapshots",
        required=True,
        help="CSV with snapshot, Package, Version, Depends, License columns"
    )

    parser.add_argument(
        "--earlier-snapshot",
        default=defaults.earlier_snapshot,
        help=f"Label of the earlier listing. Default: {defaults.earlier_snapshot}"
    )

    parser.add_argument(
        "--later-snapshot",
        default=defaults.later_snapshot,
        help=f"Label of the later listing. Default: {defaults.later_snapshot}"
    )

    parser.add_argument(
        "--reference-date",
        type=_parse_date,
        default=defaults.reference_date,
        help="Date of the earlier listing (YYYY-MM-DD). Default: %(default)s"
    )

    parser.add_argument(
        "--download-date",
        type=_parse_date,
        default=defaults.download_date,
        help="Date the lifecycle data was collected (YYYY-MM-DD). Default: %(default)s"
    )

    parser.add_argument(
        "--period-breaks",
        type=int,
        nargs="+",
        default=list(defaults.period_breaks),
        help="Calendar years bounding the first-appearance cohorts"
    )

    parser.add_argument(
        "--exception-package",
        action="append",
        default=[],
        help="Package whose archive dates are nulled instead of dropping it (repeatable)"
    )

    parser.add_argument(
        "--license",
        action="append",
        default=None,
        help="License string kept as its own group (repeatable). Default: common CRAN licenses"
    )

    parser.add_argument(
        "--km-horizons",
        type=float,
        nargs="+",
        default=list(defaults.km_horizons),
        help="Years at which Kaplan-Meier survival is reported"
    )

    parser.add_argument(
        "--get-worksheets",
        action="store_true",
        help="Export the derived tables to an Excel file"
    )

    parser.add_argument(
        "--output-dir",
        default="./output",
        help="Output directory for results. Default: ./output"
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging"
    )
    return parser


def main(argv=None):
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if len(set(args.period_breaks)) < 2:
        parser.error("--period-breaks needs at least two distinct years")

    config = StudyConfig(
        earlier_snapshot=args.earlier_snapshot,
        later_snapshot=args.later_snapshot,
        reference_date=args.reference_date,
        download_date=args.download_date,
        period_breaks=tuple(args.period_breaks),
        exception_packages=tuple(args.exception_package),
        license_allow_list=tuple(args.license) if args.license else DEFAULT_LICENSE_ALLOW_LIST,
        km_horizons=tuple(args.km_horizons),
    )

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    analyzer = LongevityAnalyzer(
        lifecycle_path=Path(args.lifecycle),
        snapshots_path=Path(args.snapshots),
        config=config,
        output_dir=output_dir,
    )

    try:
        results = analyzer.analyze()
    except Exception as e:
        print(f"\nError during analysis: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        sys.exit(1)

    print_summary(results)

    results_file = save_results_json(results, analyzer.output_dir)
    print(f"\nResults saved to: {results_file}")

    for table_file in export_model_tables(results, analyzer.output_dir):
        print(f"Table saved to: {table_file}")

    if args.get_worksheets:
        excel_file = export_worksheets(results, analyzer.output_dir)
        print(f"Worksheets saved to: {excel_file}")

    return 0 if not results["errors"] else 2


if __name__ == "__main__":
    sys.exit(main())
