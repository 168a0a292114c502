"""
forecast.py
------------
Short-horizon volume forecast from an ordinary least squares line.

The history is indexed x = 1..n and fitted with the closed-form sums:

    slope     = (n*Sxy - Sx*Sy) / (n*Sxx - Sx^2)
    intercept = (Sy - slope*Sx) / n
    R^2       = 1 - SSres / SStot          (0 when SStot == 0)

Projection step i (1..horizon) lands on period n + i, is clamped at 0, and
carries confidence max(0, 1 - i * decay). With the default decay of 0.1 the
confidence reaches 0 at the tenth step.
"""

from typing import Sequence

import numpy as np

from core.models import ForecastResult, Projection
from config.config_loader import get_forecast_config


def linear_regression(x: Sequence[float], y: Sequence[float]) -> tuple[float, float, float]:
    """
    Returns (slope, intercept, r_squared).

    Requires len(x) == len(y) >= 2 with at least two distinct x values.
    """
    xs = np.asarray(x, dtype=float)
    ys = np.asarray(y, dtype=float)
    n = xs.size

    sum_x = xs.sum()
    sum_y = ys.sum()
    sum_xy = np.sum(xs * ys)
    sum_x2 = np.sum(xs * xs)

    slope = (n * sum_xy - sum_x * sum_y) / (n * sum_x2 - sum_x * sum_x)
    intercept = (sum_y - slope * sum_x) / n

    predicted = slope * xs + intercept
    ss_total = np.sum((ys - ys.mean()) ** 2)
    ss_res = np.sum((ys - predicted) ** 2)
    # ss_total of a constant series is rounding noise, not 0
    r_squared = max(0.0, 1.0 - ss_res / ss_total) if np.ptp(ys) > 0 else 0.0

    return float(slope), float(intercept), float(r_squared)


def forecast(volumes: Sequence[float], horizon: int | None = None) -> ForecastResult:
    """
    Fit volume against period index and project the next `horizon` periods.

    Fewer than min_points (3) history points returns
    ForecastResult.insufficient(); no regression is attempted.
    """
    cfg = get_forecast_config()
    horizon = cfg["horizon"] if horizon is None else horizon
    decay = cfg["confidence_decay"]

    n = len(volumes)
    if n < cfg["min_points"]:
        return ForecastResult.insufficient()

    periods = list(range(1, n + 1))
    slope, intercept, r_squared = linear_regression(periods, volumes)

    projections = []
    for step in range(1, horizon + 1):
        period = n + step
        projections.append(Projection(
            period=period,
            projected_volume=max(0.0, slope * period + intercept),
            confidence=round(max(0.0, 1.0 - step * decay), 4),
        ))

    return ForecastResult(slope=slope, intercept=intercept, r_squared=r_squared, projections=projections)
