"""
frames.py
----------
Conversion of transaction input into a normalized pandas DataFrame.

The engine accepts either a sequence of TransactionRecord or a DataFrame
with the same column names (e.g. read straight from CSV). Both go through
to_frame() once; window filtering happens per component via in_window().
"""

from dataclasses import asdict
from typing import Iterable

import pandas as pd

from core.models import AnalysisWindow, TransactionRecord

REQUIRED_COLUMNS = ["timestamp", "amount", "status"]

OPTIONAL_DEFAULTS = {
    "fee": 0.0,
    "is_reversed": False,
    "currency": "",
    "channel": None,
    "transaction_type_id": None,
    "transaction_id": None,
}

FRAME_COLUMNS = REQUIRED_COLUMNS + list(OPTIONAL_DEFAULTS)

_TRUTHY = {"1", "true", "t", "yes", "y"}


def records_to_frame(records: Iterable[TransactionRecord]) -> pd.DataFrame:
    """Flattens TransactionRecords into a DataFrame with FRAME_COLUMNS."""
    rows = [asdict(r) for r in records]
    if not rows:
        return pd.DataFrame(columns=FRAME_COLUMNS)
    return pd.DataFrame(rows, columns=FRAME_COLUMNS)


def to_frame(data: pd.DataFrame | Iterable[TransactionRecord]) -> pd.DataFrame:
    """
    Validates and normalizes transaction input.

    - timestamp parsed to datetime64
    - amount / fee coerced to float (Decimal and numeric strings accepted)
    - blank or negative amounts rejected
    - is_reversed coerced to bool ("1", "true", 1, True all count)
    - missing optional columns filled with defaults
    - rows sorted by timestamp (stable, so equal timestamps keep input order)

    Raises:
        ValueError: If a required column is missing, or a timestamp/amount
            cannot be parsed, or an amount is blank or negative.
    """
    if isinstance(data, pd.DataFrame):
        df = data.copy()
    else:
        df = records_to_frame(data)

    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")

    for col, default in OPTIONAL_DEFAULTS.items():
        if col not in df.columns:
            df[col] = default

    df["timestamp"] = pd.to_datetime(df["timestamp"])
    df["amount"] = _numeric(df["amount"]).astype(float)
    _check_amounts(df["amount"])
    df["fee"] = _numeric(df["fee"], errors="coerce").fillna(0.0).astype(float)
    df["is_reversed"] = df["is_reversed"].map(_as_bool).astype(bool)
    df["status"] = df["status"].astype(str)
    df["currency"] = df["currency"].fillna("").astype(str)

    return df.sort_values("timestamp", kind="mergesort").reset_index(drop=True)


def in_window(df: pd.DataFrame, window: AnalysisWindow, apply_currency: bool = True) -> pd.DataFrame:
    """Rows whose calendar date falls inside the window (and its currency filter)."""
    if df.empty:
        return df
    days = df["timestamp"].dt.date
    mask = (days >= window.start_date) & (days <= window.end_date)
    if apply_currency and window.currency is not None:
        mask &= df["currency"] == window.currency
    return df[mask]


def _as_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    if value is None or pd.isna(value):
        return False
    return bool(value)


def _numeric(series: pd.Series, errors: str = "raise") -> pd.Series:
    # Decimal / mixed object columns go through their string form
    if series.dtype == object:
        series = series.astype(str)
    return pd.to_numeric(series, errors=errors)


def _check_amounts(amounts: pd.Series) -> None:
    blank = amounts.isna()
    if blank.any():
        raise ValueError(f"Blank amount in rows: {amounts.index[blank].tolist()}")
    negative = amounts < 0
    if negative.any():
        raise ValueError(f"Negative amount in rows: {amounts.index[negative].tolist()}")
