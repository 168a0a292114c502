"""
correlation.py
---------------
Volatility (coefficient of variation) and Pearson correlation.

Both return 0 on degenerate input (too few points, zero mean, zero
variance) instead of NaN or infinity. A zero here means "no signal".
"""

from typing import Sequence

import numpy as np

from config.config_loader import get_trend_config


def volatility(series: Sequence[float]) -> float:
    """Population std / mean. 0 when fewer than 2 points or mean <= 0."""
    values = np.asarray(series, dtype=float)
    if values.size < 2:
        return 0.0
    mean = values.mean()
    if mean <= 0 or np.ptp(values) == 0:
        return 0.0
    return float(values.std(ddof=0) / mean)


def correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """
    Pearson's r over the first min(len(x), len(y)) points:

        r = sum(dx * dy) / sqrt(sum(dx^2) * sum(dy^2))

    Returns 0 when fewer than 2 points or either series is constant.
    """
    n = min(len(x), len(y))
    if n < 2:
        return 0.0

    xs = np.asarray(x[:n], dtype=float)
    ys = np.asarray(y[:n], dtype=float)
    if np.ptp(xs) == 0 or np.ptp(ys) == 0:
        return 0.0

    dx = xs - xs.mean()
    dy = ys - ys.mean()

    denominator = np.sqrt(np.sum(dx * dx) * np.sum(dy * dy))
    if denominator <= 0:
        return 0.0
    return float(np.sum(dx * dy) / denominator)


def volatility_level(value: float) -> str:
    """Label a volatility value as low, moderate or high using the configured cut points."""
    levels = get_trend_config()["volatility_levels"]
    if value < levels["low"]:
        return "low"
    if value < levels["moderate"]:
        return "moderate"
    return "high"


def correlation_strength(r: float) -> str:
    """Label |r| as strong, moderate or weak."""
    levels = get_trend_config()["correlation_strength"]
    if abs(r) > levels["strong"]:
        return "strong"
    if abs(r) > levels["moderate"]:
        return "moderate"
    return "weak"
