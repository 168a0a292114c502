"""
models.py
----------
Core domain models. These are the typed contracts between engine layers.

- TransactionRecord: Input event, owned by the data-access layer. Read-only.
- AnalysisWindow: Date range + bucket granularity for one analysis request.
- PeriodAggregate: Output of the period aggregator. One per non-empty bucket.
  Every period-series component consumes a list of these.
- Statistic result types (SeriesStatistics, ForecastResult, ...) and the
  AnalyticsBundle that carries all of them to the caller.

Everything is created fresh per request and never mutated afterwards.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional

from core.exceptions import RangeError


class Granularity(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class TrendResult(str, Enum):
    """Direction label for a numeric series. Stateless; recomputed per call."""

    UPWARD = "upward"
    DOWNWARD = "downward"
    STABLE = "stable"
    INSUFFICIENT_DATA = "insufficient_data"


# =============================================================================
# INPUT
# =============================================================================

@dataclass(frozen=True)
class TransactionRecord:
    """A single transaction event as delivered by the data-access layer."""

    timestamp: datetime
    amount: float                    # >= 0. Decimal accepted, converted at the frame boundary.
    status: str                      # "Completed" | "Failed" | "Pending" | "Pending Authorized" | ...
    fee: float = 0.0
    is_reversed: bool = False
    currency: str = ""
    channel: Optional[str] = None
    transaction_type_id: Optional[int] = None
    transaction_id: Optional[str] = None


@dataclass(frozen=True)
class AnalysisWindow:
    """
    Inclusive [start_date, end_date] window plus bucket granularity.

    Build through core.window.build_window() at the request boundary; the
    constructor only guards the start <= end invariant.
    """

    start_date: date
    end_date: date
    granularity: Granularity = Granularity.DAILY
    currency: Optional[str] = None   # None = all currencies

    def __post_init__(self):
        if self.start_date > self.end_date:
            raise RangeError(
                f"start_date {self.start_date} is after end_date {self.end_date}",
                bound="start_date",
                value=self.start_date,
            )

    @property
    def days(self) -> int:
        """Inclusive length in days."""
        return (self.end_date - self.start_date).days + 1

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    def previous(self) -> "AnalysisWindow":
        """The window of identical length ending the day before start_date."""
        prev_end = self.start_date - timedelta(days=1)
        prev_start = prev_end - timedelta(days=self.days - 1)
        return AnalysisWindow(prev_start, prev_end, self.granularity, self.currency)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "granularity": self.granularity.value,
            "currency": self.currency,
        }


# =============================================================================
# PERIOD SERIES
# =============================================================================

def _rate(part: int, whole: int) -> float:
    return round(part / whole * 100, 2) if whole > 0 else 0.0


@dataclass(frozen=True)
class PeriodAggregate:
    """
    Per-bucket totals. Produced by PeriodAggregator, consumed by every
    period-series component.

    Invariants: successful_count + failed_count <= transaction_count;
    avg_amount == total_volume / transaction_count (0 for an empty bucket).
    """

    period_key: str                  # "2024-03-01" | "2024-W09" | "2024-03"
    transaction_count: int
    total_volume: float
    avg_amount: float
    total_fees: float
    successful_count: int
    failed_count: int
    high_value_count: int
    reversed_count: int

    @property
    def success_rate(self) -> float:
        return _rate(self.successful_count, self.transaction_count)

    @property
    def failure_rate(self) -> float:
        return _rate(self.failed_count, self.transaction_count)

    @property
    def reversal_rate(self) -> float:
        return _rate(self.reversed_count, self.transaction_count)

    def metric(self, name: str) -> float:
        """Looks up a numeric field or derived rate by name."""
        if name in METRIC_NAMES:
            return float(getattr(self, name))
        raise KeyError(f"Unknown period metric '{name}'. Available: {sorted(METRIC_NAMES)}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "period_key": self.period_key,
            "transaction_count": self.transaction_count,
            "total_volume": self.total_volume,
            "avg_amount": self.avg_amount,
            "total_fees": self.total_fees,
            "successful_count": self.successful_count,
            "failed_count": self.failed_count,
            "high_value_count": self.high_value_count,
            "reversed_count": self.reversed_count,
            "success_rate": self.success_rate,
            "failure_rate": self.failure_rate,
            "reversal_rate": self.reversal_rate,
        }


METRIC_NAMES = frozenset({
    "transaction_count", "total_volume", "avg_amount", "total_fees",
    "successful_count", "failed_count", "high_value_count", "reversed_count",
    "success_rate", "failure_rate", "reversal_rate",
})


# =============================================================================
# STATISTIC RESULTS
# =============================================================================

PERCENTILE_LEVELS = (25, 50, 75, 90, 95, 99)


@dataclass(frozen=True)
class SeriesStatistics:
    """Descriptive statistics of a numeric series. All zero for an empty series."""

    count: int
    total: float
    mean: float
    std_dev: float                   # Population standard deviation
    min: float
    max: float
    percentiles: Dict[int, float] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> "SeriesStatistics":
        return cls(0, 0.0, 0.0, 0.0, 0.0, 0.0, {p: 0.0 for p in PERCENTILE_LEVELS})

    def to_dict(self) -> Dict[str, Any]:
        out = {
            "count": self.count,
            "total": self.total,
            "mean": self.mean,
            "std_dev": self.std_dev,
            "min": self.min,
            "max": self.max,
        }
        out.update({f"p{p}": v for p, v in self.percentiles.items()})
        return out


@dataclass(frozen=True)
class GrowthRateResult:
    metric: str
    growth_rate: float               # Compound per-period rate, percent
    start_value: float
    end_value: float
    total_change: float
    periods: int


@dataclass(frozen=True)
class Projection:
    period: int                      # 1-based index continuing the history
    projected_volume: float          # Clamped to >= 0
    confidence: float                # 0.0 - 1.0, decreasing with distance

    @property
    def confidence_label(self) -> str:
        if self.confidence >= 0.8:
            return "High"
        if self.confidence >= 0.6:
            return "Medium"
        return "Low"


@dataclass(frozen=True)
class ForecastResult:
    """OLS fit of volume against period index plus the projected periods."""

    slope: float
    intercept: float
    r_squared: float
    projections: List[Projection] = field(default_factory=list)
    sufficient_data: bool = True

    @classmethod
    def insufficient(cls) -> "ForecastResult":
        return cls(0.0, 0.0, 0.0, [], sufficient_data=False)

    def to_dict(self) -> Dict[str, Any]:
        if not self.sufficient_data:
            return {"error": "Insufficient data for forecasting", "projections": [], "r_squared": 0.0}
        return {
            "regression": {"slope": self.slope, "intercept": self.intercept, "r_squared": self.r_squared},
            "projections": [
                {
                    "period": p.period,
                    "projected_volume": p.projected_volume,
                    "confidence": p.confidence,
                    "confidence_label": p.confidence_label,
                }
                for p in self.projections
            ],
            "r_squared": self.r_squared,
        }


@dataclass(frozen=True)
class SeasonalBucket:
    key: int                         # day of week 0-6 (0=Sunday) | hour 0-23 | month 1-12
    label: str
    transaction_count: int
    total_volume: float
    avg_amount: float


@dataclass(frozen=True)
class SeasonalPatterns:
    day_of_week: List[SeasonalBucket] = field(default_factory=list)
    hour_of_day: List[SeasonalBucket] = field(default_factory=list)
    month: List[SeasonalBucket] = field(default_factory=list)


@dataclass(frozen=True)
class PeriodStats:
    """Window-level totals used by the period comparison."""

    total_transactions: int
    total_volume: float
    avg_amount: float
    total_fees: float
    successful_count: int
    failed_count: int
    high_value_count: int
    reversed_count: int
    success_rate: float


@dataclass(frozen=True)
class MetricChange:
    change: float                    # percent
    change_abs: float
    trend: str                       # "up" | "down" | "stable"


@dataclass(frozen=True)
class PeriodComparison:
    current: PeriodStats
    previous: PeriodStats
    comparison: Dict[str, MetricChange] = field(default_factory=dict)


@dataclass(frozen=True)
class Insight:
    type: str                        # "positive" | "warning" | "info" | "neutral"
    title: str
    description: str
    category: str = "insight"        # "insight" | "recommendation"


@dataclass(frozen=True)
class Breakdowns:
    """Record-level breakdowns. Each list holds plain row dicts."""

    by_currency: List[Dict[str, Any]] = field(default_factory=list)
    by_transaction_type: List[Dict[str, Any]] = field(default_factory=list)
    by_channel: List[Dict[str, Any]] = field(default_factory=list)
    amount_distribution: List[Dict[str, Any]] = field(default_factory=list)
    top_volume_days: List[Dict[str, Any]] = field(default_factory=list)


# =============================================================================
# OUTPUT BUNDLE
# =============================================================================

@dataclass(frozen=True)
class AnalyticsBundle:
    """Everything one analysis request returns to the presentation layer."""

    window: AnalysisWindow
    period_series: List[PeriodAggregate]
    statistics: SeriesStatistics                 # per-transaction amounts
    volume_statistics: SeriesStatistics          # per-period volumes
    trends: Dict[str, TrendResult]
    moving_averages: Dict[int, List[float]]
    volatility: float
    correlation: float                           # volume vs. transaction count
    growth_rates: Dict[str, GrowthRateResult]
    forecast: ForecastResult
    seasonal: Optional[SeasonalPatterns] = None
    period_comparison: Optional[PeriodComparison] = None
    breakdowns: Optional[Breakdowns] = None
    insights: List[Insight] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready representation. Keys follow the dashboard export layout."""
        return {
            "window": self.window.to_dict(),
            "period_series": [p.to_dict() for p in self.period_series],
            "statistics": self.statistics.to_dict(),
            "volume_statistics": self.volume_statistics.to_dict(),
            "trends": {k: v.value for k, v in self.trends.items()},
            "moving_averages": {f"{w}_period": vals for w, vals in self.moving_averages.items()},
            "volatility": self.volatility,
            "correlation": self.correlation,
            "growth_rates": {k: vars(v).copy() for k, v in self.growth_rates.items()},
            "forecast": self.forecast.to_dict(),
            "seasonal": _seasonal_to_dict(self.seasonal),
            "period_comparison": _comparison_to_dict(self.period_comparison),
            "breakdowns": vars(self.breakdowns).copy() if self.breakdowns else None,
            "insights": [vars(i).copy() for i in self.insights],
        }


def _seasonal_to_dict(seasonal: Optional[SeasonalPatterns]) -> Optional[Dict[str, Any]]:
    if seasonal is None:
        return None
    return {
        name: [vars(b).copy() for b in getattr(seasonal, name)]
        for name in ("day_of_week", "hour_of_day", "month")
    }


def _comparison_to_dict(comparison: Optional[PeriodComparison]) -> Optional[Dict[str, Any]]:
    if comparison is None:
        return None
    return {
        "current": vars(comparison.current).copy(),
        "previous": vars(comparison.previous).copy(),
        "comparison": {k: vars(v).copy() for k, v in comparison.comparison.items()},
    }
