"""
main.py
--------
Entry point for the Transaction Trend Analytics Engine.

Reads transactions from CSV, runs the full analytics pipeline for one
window, and writes output to the outputs/ folder.

Usage (from the project root):
    python main.py --input path/to/transactions.csv

    # With optional arguments:
    python main.py --from 2024-03-01 --to 2024-03-31
    python main.py --granularity weekly --currency DJF

Without --from/--to the window is the last 30 days ending today.
"""

import sys
import os
import argparse
import json
import logging
import pandas as pd
from datetime import date, datetime, timedelta

# Ensure project root is on path (for VS Code runs from any working directory)
PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, PROJECT_ROOT)

from pipeline import TrendAnalyticsPipeline
from core.exceptions import RangeError
from core.models import AnalyticsBundle
from core.window import build_window


# =============================================================================
# LOGGING SETUP
# =============================================================================

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("main")


# =============================================================================
# ARGUMENT PARSING
# =============================================================================

def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Transaction Trend Analytics Engine. Trends, forecast and insights for one date window."
    )
    parser.add_argument(
        "--input", type=str, default=None,
        help="Path to input transactions CSV. Defaults to transactions.csv in project root."
    )
    parser.add_argument(
        "--from", dest="start_date", type=str, default=None,
        help="Window start date (YYYY-MM-DD). Defaults to 29 days before --to."
    )
    parser.add_argument(
        "--to", dest="end_date", type=str, default=None,
        help="Window end date (YYYY-MM-DD), inclusive. Defaults to today."
    )
    parser.add_argument(
        "--granularity", type=str, default=None,
        choices=["daily", "weekly", "monthly"],
        help="Bucket size for the period series. Defaults to config value (daily)."
    )
    parser.add_argument(
        "--currency", type=str, default="all",
        help="Currency filter. Default: all."
    )
    parser.add_argument(
        "--output-dir", type=str, default=None,
        help="Output directory. Defaults to outputs/ in project root."
    )
    return parser.parse_args(argv)


# =============================================================================
# MAIN
# =============================================================================

def main(argv: list[str] | None = None):
    args = parse_args(argv)

    # --- Resolve paths ---
    input_path = args.input or os.path.join(PROJECT_ROOT, "transactions.csv")
    output_dir = args.output_dir or os.path.join(PROJECT_ROOT, "outputs")

    # --- Resolve window (the only place "today" is read) ---
    end = args.end_date or date.today().isoformat()
    start = args.start_date
    if start is None:
        try:
            start = (date.fromisoformat(end) - timedelta(days=29)).isoformat()
        except ValueError:
            start = end  # build_window reports the bad --to below

    try:
        window = build_window(start, end, args.granularity, args.currency)
    except RangeError as e:
        logger.error(f"Rejected window ({e.bound}): {e}")
        sys.exit(1)

    # --- Load transactions ---
    logger.info(f"Loading transactions from: {input_path}")
    if not os.path.exists(input_path):
        logger.error(f"Input file not found: {input_path}")
        sys.exit(1)

    transactions = pd.read_csv(input_path)
    logger.info(f"Loaded {len(transactions):,} transactions.")

    # --- Run pipeline ---
    logger.info("Initializing pipeline...")
    pipeline = TrendAnalyticsPipeline()

    logger.info("Running analytics pipeline...")
    bundle = pipeline.run(transactions, window)

    # --- Output: bundle JSON + period series CSV ---
    os.makedirs(output_dir, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    bundle_path = os.path.join(output_dir, f"trend_analytics_{timestamp}.json")
    with open(bundle_path, "w") as f:
        json.dump(bundle.to_dict(), f, indent=2, default=str)
    logger.info(f"Analytics bundle saved to: {bundle_path}")

    series_path = os.path.join(output_dir, f"period_series_{timestamp}.csv")
    pd.DataFrame([p.to_dict() for p in bundle.period_series]).to_csv(series_path, index=False)
    logger.info(f"Period series saved to: {series_path}")

    # --- Print summary ---
    _print_summary(bundle)


def _print_summary(bundle: AnalyticsBundle):
    """Prints a clean summary table to the console."""
    window = bundle.window
    print("\n" + "=" * 80)
    print("  TRANSACTION TREND SUMMARY")
    print(f"  {window.start_date} to {window.end_date}  ({window.granularity.value}, {window.currency or 'all currencies'})")
    print("=" * 80)

    if not bundle.period_series:
        print("\n  No transactions in the selected window.\n")
        return

    stats = bundle.statistics
    print("\n  Volume:")
    print("  " + "-" * 60)
    print(f"    {'Transactions':20s}  {stats.count:>15,}")
    print(f"    {'Total volume':20s}  {stats.total:>15,.2f}")
    print(f"    {'Average amount':20s}  {stats.mean:>15,.2f}")
    print(f"    {'Median amount':20s}  {stats.percentiles[50]:>15,.2f}")
    print(f"    {'Periods':20s}  {len(bundle.period_series):>15,}")

    print("\n  Trends:")
    print("  " + "-" * 60)
    for metric, trend in bundle.trends.items():
        print(f"    {metric:20s}  {trend.value}")
    print(f"    {'volatility':20s}  {bundle.volatility * 100:.1f}%")
    print(f"    {'volume/count corr':20s}  {bundle.correlation:.2f}")

    forecast = bundle.forecast
    print("\n  Forecast:")
    print("  " + "-" * 60)
    if not forecast.sufficient_data:
        print("    Insufficient data for forecasting")
    else:
        print(f"    R² = {forecast.r_squared:.3f}")
        for p in forecast.projections:
            print(f"    Period {p.period:<4d}  {p.projected_volume:>15,.2f}  ({p.confidence_label})")

    if bundle.insights:
        print("\n  Insights:")
        print("  " + "-" * 60)
        for insight in bundle.insights:
            print(f"    [{insight.type:8s}] {insight.title}: {insight.description}")
    print("=" * 80 + "\n")


if __name__ == "__main__":
    main()
