"""
Market Atlas Dashboard Runner.

Usage:
    poetry run python run_dashboard.py                        # Default projections, CSV export
    poetry run python run_dashboard.py --format parquet       # Parquet record export
    poetry run python run_dashboard.py --evaluation "By Volume"
    poetry run python run_dashboard.py --no-export            # Audit only
"""

import argparse
import json
import logging
import time

from market_atlas.dashboard import MarketDashboard
from market_atlas.market.audit import RecordAuditor
from market_atlas.market.core import MarketEvaluation
from market_atlas.writers import ChartWriter, RecordWriter


def main() -> None:
    """Build the market dataset and export the default dashboard projections."""
    parser = argparse.ArgumentParser(
        description="Market Atlas Dashboard Runner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  poetry run python run_dashboard.py --no-export              # Fast check
  poetry run python run_dashboard.py --format parquet --verbose
        """,
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default="data/output",
        help="Directory for output artifacts",
    )
    parser.add_argument(
        "--format",
        type=str,
        choices=["csv", "parquet"],
        default="csv",
        help="Record export format (default: csv)",
    )
    parser.add_argument(
        "--evaluation",
        type=str,
        choices=[e.value for e in MarketEvaluation],
        default=MarketEvaluation.BY_VALUE.value,
        help="Aggregate market value or volume (default: By Value)",
    )
    parser.add_argument(
        "--no-export",
        action="store_true",
        help="Skip writing records and charts",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    mode_parts = [f"Evaluation={args.evaluation}"]
    mode_parts.append(f"Export={'Disabled' if args.no_export else args.format}")
    print(f"Initializing Market Atlas ({', '.join(mode_parts)})...")

    dashboard = MarketDashboard()

    print("Generating market dataset...")
    start_time = time.time()
    records = dashboard.get_records()
    frame = dashboard.get_frame()
    duration = time.time() - start_time
    print(f"Generated {len(records)} records in {duration:.2f} seconds.")

    # 1. Audit the generated records
    report = RecordAuditor().audit(frame)
    print("\nDataset Audit:")
    print(json.dumps(report, indent=2))

    # 2. Default projections
    print("\nComputing projections...")
    filters = dashboard.default_filters()
    overview = dashboard.build_overview(filters, args.evaluation)
    waterfall = dashboard.compute_waterfall()
    layout = dashboard.attractiveness.layout(frame)
    growth = dashboard.compute_yoy_and_cagr(regions=filters["region"])

    print(f"KPI total ({args.evaluation}): {overview['kpi_total']:,.1f}")
    print(f"Incremental opportunity: {waterfall.total_incremental_opportunity:,.1f}")
    print(
        f"Attractiveness bubbles: {len(layout.entities)} "
        f"(layout {'converged' if layout.converged else 'hit iteration ceiling'} "
        f"after {layout.iterations} iterations)"
    )

    if args.no_export:
        return

    # 3. Export artifacts
    print("\nWriting Artifacts...")
    record_path = RecordWriter(args.output_dir).write_records(records, args.format)
    print(f"Records saved to {record_path}")

    chart_writer = ChartWriter(args.output_dir)
    for name, payload in (
        ("overview", overview),
        ("waterfall", waterfall),
        ("attractiveness", layout.entities),
        ("growth", growth),
    ):
        path = chart_writer.write_charts(name, payload)
        print(f"Chart data saved to {path}")


if __name__ == "__main__":
    main()
