"""
insight_rules.py
-----------------
Concrete insight rules. One class per finding or recommendation.

Findings (category "insight") describe what the numbers show. Recommendations
(category "recommendation") suggest what to look at next. Both are pure
threshold checks over the AnalyticsBundle.

Thresholds come from the insights block of config.yaml.
generate_insights() runs every registered rule in registry order.
"""

import logging
from typing import List

from core.models import AnalyticsBundle, Insight, TrendResult
from core.seasonal import low_activity_buckets, peak_bucket
from insights.base_rule import BaseInsightRule

logger = logging.getLogger(__name__)


# =============================================================================
# FINDINGS
# =============================================================================
class VolumeTrendRule(BaseInsightRule):
    """Direction of total volume across the period series."""

    def __init__(self):
        super().__init__("volume_trend")

    def _evaluate(self, bundle: AnalyticsBundle) -> List[Insight]:
        trend = bundle.trends.get("total_volume")
        if trend == TrendResult.UPWARD:
            return [self._insight(
                "positive",
                "Growing Transaction Volume",
                "Transaction volume shows an upward trend over the selected period.",
            )]
        if trend == TrendResult.DOWNWARD:
            return [self._insight(
                "warning",
                "Declining Transaction Volume",
                "Transaction volume shows a downward trend. Consider investigating causes.",
            )]
        if trend == TrendResult.STABLE:
            return [self._insight(
                "neutral",
                "Stable Transaction Volume",
                "Transaction volume remains relatively stable over the period.",
            )]
        return []


class SuccessRateRule(BaseInsightRule):
    """Flags an excellent or a low success rate. Silent in between."""

    def __init__(self):
        super().__init__("success_rate")

    def _evaluate(self, bundle: AnalyticsBundle) -> List[Insight]:
        rate = self._current_success_rate(bundle)
        if rate is None:
            return []
        if rate >= self.config["success_rate_excellent"]:
            return [self._insight(
                "positive",
                "Excellent Success Rate",
                f"Current success rate of {rate}% is excellent.",
            )]
        if rate < self.config["success_rate_low"]:
            return [self._insight(
                "warning",
                "Low Success Rate",
                f"Success rate of {rate}% needs attention.",
            )]
        return []


class VolatilityRule(BaseInsightRule):
    def __init__(self):
        super().__init__("volatility")

    def _evaluate(self, bundle: AnalyticsBundle) -> List[Insight]:
        if bundle.volatility <= self.config["high_volatility"]:
            return []
        return [self._insight(
            "warning",
            "High Volatility Detected",
            "Transaction volumes show high volatility. Consider investigating irregular patterns.",
        )]


class CorrelationRule(BaseInsightRule):
    def __init__(self):
        super().__init__("correlation")

    def _evaluate(self, bundle: AnalyticsBundle) -> List[Insight]:
        r = bundle.correlation
        if abs(r) <= self.config["strong_correlation"]:
            return []
        direction = "positive" if r > 0 else "negative"
        return [self._insight(
            "info",
            "Strong Volume-Count Correlation",
            f"Transaction volume and count show {direction} correlation ({r:.2f}).",
        )]


class PeakActivityRule(BaseInsightRule):
    """Busiest day of week and hour of day by volume. Needs seasonal patterns."""

    def __init__(self):
        super().__init__("peak_activity")

    def _evaluate(self, bundle: AnalyticsBundle) -> List[Insight]:
        if bundle.seasonal is None:
            return []
        insights = []
        peak_day = peak_bucket(bundle.seasonal.day_of_week)
        if peak_day is not None:
            insights.append(self._insight("info", "Peak Day", f"Peak day is {peak_day.label}."))
        peak_hour = peak_bucket(bundle.seasonal.hour_of_day)
        if peak_hour is not None:
            insights.append(self._insight("info", "Peak Hour", f"Peak hour is {peak_hour.key:02d}:00."))
        return insights


# =============================================================================
# RECOMMENDATIONS
# =============================================================================
class DecliningVolumeRecommendation(BaseInsightRule):
    category = "recommendation"

    def __init__(self):
        super().__init__("declining_volume")

    def _evaluate(self, bundle: AnalyticsBundle) -> List[Insight]:
        if bundle.trends.get("total_volume") != TrendResult.DOWNWARD:
            return []
        return [self._insight(
            "warning",
            "Declining Volume",
            "Consider investigating causes of declining volume",
        )]


class DecliningSuccessRateRecommendation(BaseInsightRule):
    category = "recommendation"

    def __init__(self):
        super().__init__("declining_success_rate")

    def _evaluate(self, bundle: AnalyticsBundle) -> List[Insight]:
        if bundle.trends.get("success_rate") != TrendResult.DOWNWARD:
            return []
        return [self._insight(
            "warning",
            "Declining Success Rate",
            "Success rate is declining - review system performance",
        )]


class SmoothingRecommendation(BaseInsightRule):
    category = "recommendation"

    def __init__(self):
        super().__init__("smoothing")

    def _evaluate(self, bundle: AnalyticsBundle) -> List[Insight]:
        if bundle.volatility <= self.config["high_volatility"]:
            return []
        return [self._insight(
            "info",
            "Smooth Volume Swings",
            "High volatility detected - consider smoothing mechanisms",
        )]


class LowActivityHoursRecommendation(BaseInsightRule):
    """Hours whose volume sits below half the hourly average."""

    category = "recommendation"

    def __init__(self):
        super().__init__("low_activity_hours")

    def _evaluate(self, bundle: AnalyticsBundle) -> List[Insight]:
        if bundle.seasonal is None:
            return []
        low_hours = low_activity_buckets(bundle.seasonal.hour_of_day, self.config["low_activity_ratio"])
        if not low_hours:
            return []
        return [self._insight(
            "info",
            "Low-Activity Hours",
            "Consider promotions during low-activity hours",
        )]


class ReliableForecastRecommendation(BaseInsightRule):
    category = "recommendation"

    def __init__(self):
        super().__init__("reliable_forecast")

    def _evaluate(self, bundle: AnalyticsBundle) -> List[Insight]:
        forecast = bundle.forecast
        if not forecast.sufficient_data or forecast.r_squared <= self.config["reliable_forecast_r_squared"]:
            return []
        return [self._insight(
            "positive",
            "Reliable Forecast",
            "Strong trend detected - forecasts are reliable for planning",
        )]


# =============================================================================
# RULE REGISTRY
# =============================================================================
# Single source of truth for all active rules. Output order follows this dict.
# To add a new rule: create the class above, add it here.

INSIGHT_RULE_REGISTRY: dict[str, type[BaseInsightRule]] = {
    "volume_trend": VolumeTrendRule,
    "success_rate": SuccessRateRule,
    "volatility": VolatilityRule,
    "correlation": CorrelationRule,
    "peak_activity": PeakActivityRule,
    "declining_volume": DecliningVolumeRecommendation,
    "declining_success_rate": DecliningSuccessRateRecommendation,
    "smoothing": SmoothingRecommendation,
    "low_activity_hours": LowActivityHoursRecommendation,
    "reliable_forecast": ReliableForecastRecommendation,
}


def get_all_rules() -> list[BaseInsightRule]:
    """Instantiates and returns all registered rules."""
    return [cls() for cls in INSIGHT_RULE_REGISTRY.values()]


def generate_insights(bundle: AnalyticsBundle, rules: list[BaseInsightRule] | None = None) -> List[Insight]:
    """Runs every rule over the bundle and concatenates their output."""
    if rules is None:
        rules = get_all_rules()
    insights: List[Insight] = []
    for rule in rules:
        found = rule.evaluate(bundle)
        logger.debug(f"Rule '{rule.name}' produced {len(found)} insight(s)")
        insights.extend(found)
    return insights
