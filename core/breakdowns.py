"""
breakdowns.py
--------------
Record-level volume breakdowns for the volume dashboard.

    by_currency          ignores the window's currency filter (it is the
                         view used to pick one)
    by_transaction_type  rows without a type are skipped
    by_channel           rows without a channel are skipped
    amount_distribution  Completed transactions only, fixed amount bands
    top_volume_days      busiest calendar days by volume

Grouped breakdowns are sorted by volume descending and cut at top_n.
"""

import math
from typing import Any, Dict, Iterable, List

import pandas as pd

from core.frames import in_window, to_frame
from core.models import AnalysisWindow, Breakdowns, TransactionRecord
from config.config_loader import get_aggregation_config, get_breakdown_config


class BreakdownBuilder:
    """
    Usage:
        breakdowns = BreakdownBuilder().build(records, window)
    """

    def __init__(self):
        self.config = get_breakdown_config()
        self.top_n = int(self.config["top_n"])
        self.band_labels = [b["label"] for b in self.config["amount_bands"]]
        self.band_edges = [-math.inf] + [
            math.inf if b["upper"] is None else float(b["upper"]) for b in self.config["amount_bands"]
        ]
        self.success_status = get_aggregation_config()["success_status"]

    # -------------------------------------------------------------------------
    # PUBLIC INTERFACE
    # -------------------------------------------------------------------------

    def build(
        self, transactions: pd.DataFrame | Iterable[TransactionRecord], window: AnalysisWindow
    ) -> Breakdowns:
        df = to_frame(transactions)
        filtered = in_window(df, window)
        return Breakdowns(
            by_currency=self.volume_by(in_window(df, window, apply_currency=False), "currency"),
            by_transaction_type=self.volume_by(filtered, "transaction_type_id"),
            by_channel=self.volume_by(filtered, "channel"),
            amount_distribution=self.amount_distribution(filtered),
            top_volume_days=self.top_volume_days(filtered),
        )

    def volume_by(self, df: pd.DataFrame, column: str) -> List[Dict[str, Any]]:
        """Count, volume, avg/min/max amount, fees and successful volume per value of `column`."""
        rows = df[df[column].notna()] if not df.empty else df
        if rows.empty:
            return []

        rows = rows.assign(_successful_amount=rows["amount"].where(rows["status"].eq(self.success_status), 0.0))
        grouped = (
            rows.groupby(column, sort=True)
            .agg(
                transaction_count=("amount", "size"),
                total_volume=("amount", "sum"),
                avg_amount=("amount", "mean"),
                min_amount=("amount", "min"),
                max_amount=("amount", "max"),
                total_fees=("fee", "sum"),
                successful_volume=("_successful_amount", "sum"),
            )
            .reset_index()
            .sort_values("total_volume", ascending=False, kind="mergesort")
            .head(self.top_n)
        )
        return _records(grouped)

    def amount_distribution(self, df: pd.DataFrame) -> List[Dict[str, Any]]:
        """Completed transactions per amount band, in band order. Empty bands are absent."""
        completed = df[df["status"].eq(self.success_status)] if not df.empty else df
        if completed.empty:
            return []

        bands = pd.cut(completed["amount"], bins=self.band_edges, labels=self.band_labels, right=False)
        grouped = (
            completed["amount"]
            .groupby(bands.rename("amount_range"), observed=True, sort=True)
            .agg(transaction_count="size", total_volume="sum", avg_amount="mean")
            .reset_index()
        )
        grouped["amount_range"] = grouped["amount_range"].astype(str)
        return _records(grouped)

    def top_volume_days(self, df: pd.DataFrame) -> List[Dict[str, Any]]:
        if df.empty:
            return []

        days = df["timestamp"].dt.normalize()
        grouped = (
            df["amount"]
            .groupby(days.rename("date"), sort=True)
            .agg(transaction_count="size", total_volume="sum", avg_amount="mean")
            .reset_index()
            .sort_values("total_volume", ascending=False, kind="mergesort")
            .head(self.top_n)
        )
        grouped["day_name"] = grouped["date"].dt.day_name()
        grouped["date"] = grouped["date"].dt.strftime("%Y-%m-%d")
        return _records(grouped)


def _records(frame: pd.DataFrame) -> List[Dict[str, Any]]:
    """DataFrame rows as plain dicts with native Python scalars."""
    out = []
    for row in frame.to_dict("records"):
        out.append({k: v.item() if hasattr(v, "item") else v for k, v in row.items()})
    return out
