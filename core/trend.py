"""
trend.py
---------
Trend direction and trailing moving averages over a period series.

Direction rule: walk consecutive pairs, count strict increases and strict
decreases (ties count as neither), then

    upward    if increases > decreases * ratio
    downward  if decreases > increases * ratio
    stable    otherwise

with ratio = 1.5 from config. The asymmetric margin keeps near-balanced
noisy series from flipping between upward and downward.
"""

from typing import Dict, Iterable, List, Sequence

from core.models import PeriodAggregate, TrendResult
from config.config_loader import get_trend_config


def classify_trend(series: Sequence[float], ratio: float | None = None, min_points: int | None = None) -> TrendResult:
    cfg = get_trend_config()
    ratio = cfg["direction_ratio"] if ratio is None else ratio
    min_points = cfg["min_points"] if min_points is None else min_points

    if len(series) < min_points:
        return TrendResult.INSUFFICIENT_DATA

    increases = 0
    decreases = 0
    for prev, curr in zip(series, series[1:]):
        if curr > prev:
            increases += 1
        elif curr < prev:
            decreases += 1

    if increases > decreases * ratio:
        return TrendResult.UPWARD
    if decreases > increases * ratio:
        return TrendResult.DOWNWARD
    return TrendResult.STABLE


def classify_metric_trends(
    series: List[PeriodAggregate],
    metrics: Iterable[str] = ("total_volume", "transaction_count", "success_rate"),
) -> Dict[str, TrendResult]:
    """Direction per metric of the period series, keyed by metric name."""
    return {m: classify_trend([p.metric(m) for p in series]) for m in metrics}


def moving_average(series: Sequence[float], window: int) -> List[float]:
    """
    Trailing average: index i averages series[max(0, i - window + 1) .. i].
    Early indices use the shorter prefix, so output length == input length.
    """
    if window < 1:
        raise ValueError(f"Moving average window must be >= 1, got {window}")

    out: List[float] = []
    for i in range(len(series)):
        start = max(0, i - window + 1)
        chunk = series[start:i + 1]
        out.append(sum(chunk) / len(chunk))
    return out


def moving_averages(series: Sequence[float], windows: Iterable[int] | None = None) -> Dict[int, List[float]]:
    """One trailing average per window size. Defaults to config (7/14/30)."""
    if windows is None:
        windows = get_trend_config()["moving_average_windows"]
    values = [float(v) for v in series]
    return {int(w): moving_average(values, int(w)) for w in windows}
