"""
seasonal.py
------------
Seasonal patterns from raw transaction timestamps.

Three independent groupings over the records inside the window:
    day_of_week  0-6, 0 = Sunday
    hour_of_day  0-23
    month        1-12

Each bucket carries count, total volume and average amount. Buckets with no
records are absent; callers that need all 24 hours fill the gaps themselves.
"""

import calendar
from typing import Iterable, List

import pandas as pd

from core.frames import in_window, to_frame
from core.models import AnalysisWindow, SeasonalBucket, SeasonalPatterns, TransactionRecord
from config.config_loader import get_insight_config

# Index matches day_of_week keys (0 = Sunday)
DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


def extract_seasonal_patterns(
    transactions: pd.DataFrame | Iterable[TransactionRecord], window: AnalysisWindow
) -> SeasonalPatterns:
    df = in_window(to_frame(transactions), window)
    if df.empty:
        return SeasonalPatterns()

    timestamps = df["timestamp"]
    # pandas counts Monday as 0; shift so Sunday is 0
    day_keys = (timestamps.dt.dayofweek + 1) % 7

    return SeasonalPatterns(
        day_of_week=_group(df, day_keys, lambda k: DAY_NAMES[k]),
        hour_of_day=_group(df, timestamps.dt.hour, lambda k: f"{k:02d}:00"),
        month=_group(df, timestamps.dt.month, lambda k: calendar.month_name[k]),
    )


def peak_bucket(buckets: List[SeasonalBucket]) -> SeasonalBucket | None:
    """Bucket with the highest total volume. Ties go to the lowest key."""
    if not buckets:
        return None
    return max(buckets, key=lambda b: (b.total_volume, -b.key))


def low_activity_buckets(buckets: List[SeasonalBucket], ratio: float | None = None) -> List[SeasonalBucket]:
    """
    Buckets whose volume falls below `ratio` times the average bucket volume.
    Defaults to insights.low_activity_ratio (0.5).
    """
    if not buckets:
        return []
    if ratio is None:
        ratio = get_insight_config()["low_activity_ratio"]
    average = sum(b.total_volume for b in buckets) / len(buckets)
    return [b for b in buckets if b.total_volume < average * ratio]


def _group(df: pd.DataFrame, keys: pd.Series, label) -> List[SeasonalBucket]:
    grouped = (
        df["amount"]
        .groupby(keys.rename("key"), sort=True)
        .agg(["size", "sum", "mean"])
    )
    return [
        SeasonalBucket(
            key=int(key),
            label=label(int(key)),
            transaction_count=int(row["size"]),
            total_volume=float(row["sum"]),
            avg_amount=float(row["mean"]),
        )
        for key, row in grouped.iterrows()
    ]
