"""
period_aggregator.py
---------------------
Buckets transactions into fixed-granularity periods.

This is the foundation layer. Every period-series component (statistics,
trend, moving averages, correlation, growth, forecast) consumes the list
of PeriodAggregate produced here, so bucket identity must be stable:

    daily    -> "YYYY-MM-DD"
    weekly   -> "YYYY-Www"   (ISO year and week, zero padded)
    monthly  -> "YYYY-MM"

All three formats sort lexicographically in chronological order, so the
output is ordered by period_key with a plain sort.

Design decisions:
    - Records outside [start_date, end_date] are dropped before bucketing.
    - Only non-empty buckets are emitted. Gaps are not zero-filled.
    - Status labels and the high-value threshold come from config.yaml.
"""

from datetime import date, datetime
from typing import Any, Iterable, List, Mapping

import pandas as pd

from core.frames import in_window, to_frame
from core.models import AnalysisWindow, Granularity, PeriodAggregate, TransactionRecord
from config.config_loader import get_aggregation_config

AGGREGATE_FIELDS = [
    "period_key", "transaction_count", "total_volume", "total_fees",
    "successful_count", "failed_count", "high_value_count", "reversed_count",
]


def bucket_key(timestamp: date | datetime, granularity: Granularity | str) -> str:
    """Bucket identity for a single timestamp."""
    granularity = Granularity(granularity)
    if granularity == Granularity.WEEKLY:
        iso = timestamp.isocalendar()
        return f"{iso[0]}-W{iso[1]:02d}"
    if granularity == Granularity.MONTHLY:
        return timestamp.strftime("%Y-%m")
    return timestamp.strftime("%Y-%m-%d")


def period_start(period_key: str, granularity: Granularity | str) -> date:
    """First calendar day of a bucket. Inverse of bucket_key()."""
    granularity = Granularity(granularity)
    if granularity == Granularity.WEEKLY:
        year, week = period_key.split("-W")
        return date.fromisocalendar(int(year), int(week), 1)
    if granularity == Granularity.MONTHLY:
        return datetime.strptime(period_key, "%Y-%m").date()
    return date.fromisoformat(period_key)


class PeriodAggregator:
    """
    Folds transactions into PeriodAggregates.

    Usage:
        aggregator = PeriodAggregator()
        series = aggregator.aggregate(records, window)
    """

    def __init__(self):
        self.config = get_aggregation_config()
        self.high_value_threshold = float(self.config["high_value_threshold"])
        self.success_status = self.config["success_status"]
        self.failure_status = self.config["failure_status"]

    # -------------------------------------------------------------------------
    # PUBLIC INTERFACE
    # -------------------------------------------------------------------------

    def aggregate(
        self, transactions: pd.DataFrame | Iterable[TransactionRecord], window: AnalysisWindow
    ) -> List[PeriodAggregate]:
        """
        Bucket transactions inside the window.

        Args:
            transactions: TransactionRecords, or a DataFrame with the same
                column names. Already-normalized frames are accepted as-is.
            window: Validated AnalysisWindow.

        Returns:
            PeriodAggregates sorted by period_key. Empty input -> [].
        """
        df = in_window(to_frame(transactions), window)
        if df.empty:
            return []

        df = df.assign(
            period_key=self._bucket_keys(df["timestamp"], window.granularity),
            _success=df["status"].eq(self.success_status),
            _failed=df["status"].eq(self.failure_status),
            _high_value=df["amount"].ge(self.high_value_threshold),
        )

        grouped = (
            df.groupby("period_key", sort=True)
            .agg(
                transaction_count=("amount", "size"),
                total_volume=("amount", "sum"),
                total_fees=("fee", "sum"),
                successful_count=("_success", "sum"),
                failed_count=("_failed", "sum"),
                high_value_count=("_high_value", "sum"),
                reversed_count=("is_reversed", "sum"),
            )
            .reset_index()
        )

        return [self._build_aggregate(row) for row in grouped.to_dict("records")]

    def from_rows(self, rows: Iterable[Mapping[str, Any]]) -> List[PeriodAggregate]:
        """
        Build the period series from rows that were aggregated upstream
        (e.g. by a GROUP BY in the data-access layer).

        avg_amount is recomputed from total_volume / transaction_count so the
        invariant holds regardless of what the row carried.

        Raises:
            ValueError: Missing fields, or success + failure counts above the total.
        """
        series = []
        for row in rows:
            missing = [f for f in AGGREGATE_FIELDS if f not in row]
            if missing:
                raise ValueError(f"Aggregate row missing fields: {missing}")
            aggregate = self._build_aggregate(row)
            if aggregate.successful_count + aggregate.failed_count > aggregate.transaction_count:
                raise ValueError(
                    f"Period {aggregate.period_key}: successful + failed "
                    f"({aggregate.successful_count} + {aggregate.failed_count}) exceeds "
                    f"transaction_count ({aggregate.transaction_count})"
                )
            series.append(aggregate)
        return sorted(series, key=lambda p: p.period_key)

    # -------------------------------------------------------------------------
    # INTERNAL
    # -------------------------------------------------------------------------

    @staticmethod
    def _bucket_keys(timestamps: pd.Series, granularity: Granularity) -> pd.Series:
        if granularity == Granularity.WEEKLY:
            iso = timestamps.dt.isocalendar()
            return iso["year"].astype(int).astype(str) + "-W" + iso["week"].astype(int).map("{:02d}".format)
        if granularity == Granularity.MONTHLY:
            return timestamps.dt.strftime("%Y-%m")
        return timestamps.dt.strftime("%Y-%m-%d")

    @staticmethod
    def _build_aggregate(row: Mapping[str, Any]) -> PeriodAggregate:
        count = int(row["transaction_count"])
        volume = float(row["total_volume"] or 0.0)
        return PeriodAggregate(
            period_key=str(row["period_key"]),
            transaction_count=count,
            total_volume=volume,
            avg_amount=volume / count if count > 0 else 0.0,
            total_fees=float(row["total_fees"] or 0.0),
            successful_count=int(row["successful_count"]),
            failed_count=int(row["failed_count"]),
            high_value_count=int(row["high_value_count"]),
            reversed_count=int(row["reversed_count"]),
        )
