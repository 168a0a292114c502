"""
comparison.py
--------------
Current window vs. the window of identical length immediately before it.

The up/down tag here uses a flat percentage threshold (default 5%). It is a
coarser signal than the pairwise trend classifier in trend.py and the two
are kept separate.
"""

from dataclasses import fields
from typing import Iterable

import pandas as pd

from core.frames import in_window, to_frame
from core.models import (
    AnalysisWindow,
    MetricChange,
    PeriodComparison,
    PeriodStats,
    TransactionRecord,
)
from config.config_loader import get_aggregation_config, get_comparison_config

COMPARED_METRICS = [f.name for f in fields(PeriodStats)]


def period_stats(df: pd.DataFrame, window: AnalysisWindow) -> PeriodStats:
    """Window-level totals over an already normalized frame."""
    cfg = get_aggregation_config()
    rows = in_window(df, window)

    count = len(rows)
    if count == 0:
        return PeriodStats(0, 0.0, 0.0, 0.0, 0, 0, 0, 0, 0.0)

    volume = float(rows["amount"].sum())
    successful = int(rows["status"].eq(cfg["success_status"]).sum())
    return PeriodStats(
        total_transactions=count,
        total_volume=volume,
        avg_amount=volume / count,
        total_fees=float(rows["fee"].sum()),
        successful_count=successful,
        failed_count=int(rows["status"].eq(cfg["failure_status"]).sum()),
        high_value_count=int(rows["amount"].ge(float(cfg["high_value_threshold"])).sum()),
        reversed_count=int(rows["is_reversed"].sum()),
        success_rate=round(successful / count * 100, 2),
    )


def metric_change(current: float, previous: float, threshold: float | None = None) -> MetricChange:
    """
    Percent change of one metric.

    previous == 0 reports 100% when current > 0, otherwise 0%.
    """
    if threshold is None:
        threshold = get_comparison_config()["trend_threshold_pct"]

    if previous != 0:
        change = round((current - previous) / previous * 100, 2)
    else:
        change = 100.0 if current > 0 else 0.0

    if change > threshold:
        trend = "up"
    elif change < -threshold:
        trend = "down"
    else:
        trend = "stable"

    return MetricChange(change=change, change_abs=current - previous, trend=trend)


def compare_periods(
    transactions: pd.DataFrame | Iterable[TransactionRecord], window: AnalysisWindow
) -> PeriodComparison:
    """
    Stats for `window` and `window.previous()` plus the per-metric change.

    `transactions` must cover both windows; records outside them are ignored.
    """
    df = to_frame(transactions)
    current = period_stats(df, window)
    previous = period_stats(df, window.previous())

    threshold = get_comparison_config()["trend_threshold_pct"]
    comparison = {
        name: metric_change(float(getattr(current, name)), float(getattr(previous, name)), threshold)
        for name in COMPARED_METRICS
    }
    return PeriodComparison(current=current, previous=previous, comparison=comparison)
