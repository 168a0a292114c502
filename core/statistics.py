"""
statistics.py
--------------
Descriptive statistics over a numeric series.

Percentiles use linear interpolation between order statistics, the same
definition as SQL PERCENTILE_CONT (numpy's default "linear" method).
Standard deviation is the population form: sqrt(sum((x - mean)^2) / n).
"""

from typing import Sequence

import numpy as np

from core.models import PERCENTILE_LEVELS, SeriesStatistics


def describe(series: Sequence[float]) -> SeriesStatistics:
    """
    Summarize a series. An empty series returns all-zero statistics rather
    than raising, so callers always get a complete bundle.
    """
    values = np.asarray(series, dtype=float)
    if values.size == 0:
        return SeriesStatistics.empty()

    percentiles = np.percentile(values, PERCENTILE_LEVELS)

    return SeriesStatistics(
        count=int(values.size),
        total=float(values.sum()),
        mean=float(values.mean()),
        std_dev=float(values.std(ddof=0)),
        min=float(values.min()),
        max=float(values.max()),
        percentiles={p: round(float(v), 2) for p, v in zip(PERCENTILE_LEVELS, percentiles)},
    )
