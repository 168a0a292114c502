"""
growth.py
----------
Compound period-over-period growth between the first and last period.

    rate = ((last / first) ^ (1 / (n - 1)) - 1) * 100

A zero first value short-circuits to 0% instead of dividing by zero.
"""

from typing import Dict, Iterable, List

from core.models import GrowthRateResult, PeriodAggregate
from config.config_loader import get_trend_config


def compound_growth_rate(first: float, last: float, periods: int) -> float:
    """Per-period compound rate in percent. 0 for < 2 periods or first == 0."""
    if periods < 2 or first == 0:
        return 0.0
    ratio = last / first
    if ratio < 0:
        # Sign change between first and last has no real root
        return 0.0
    return (ratio ** (1.0 / (periods - 1)) - 1.0) * 100.0


def growth_rates(
    series: List[PeriodAggregate], metrics: Iterable[str] | None = None
) -> Dict[str, GrowthRateResult]:
    """
    Growth summary per metric of the period series.

    Args:
        series: Ordered PeriodAggregates.
        metrics: Metric names (PeriodAggregate fields or rates). Defaults to
            config: transaction_count, total_volume, avg_amount, success_rate.

    Returns:
        {metric: GrowthRateResult}. Empty when fewer than 2 periods.

    Raises:
        KeyError: Unknown metric name.
    """
    if metrics is None:
        metrics = get_trend_config()["growth_metrics"]
    if len(series) < 2:
        return {}

    results: Dict[str, GrowthRateResult] = {}
    for metric in metrics:
        values = [p.metric(metric) for p in series]
        first, last = values[0], values[-1]
        results[metric] = GrowthRateResult(
            metric=metric,
            growth_rate=round(compound_growth_rate(first, last, len(values)), 2),
            start_value=first,
            end_value=last,
            total_change=last - first,
            periods=len(values),
        )
    return results
