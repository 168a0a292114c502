"""
base_rule.py
-------------
Abstract base class for insight rules.

Each concrete rule (volume trend, success rate, volatility, etc.) inherits
from this and reads one aspect of the AnalyticsBundle. Rules are pure: they
never modify the bundle and return an empty list when they have nothing
to say.

Concrete rules only need to implement:
    - _evaluate(): the threshold check, returning zero or more Insights
"""

from abc import ABC, abstractmethod
from typing import List

from core.models import AnalyticsBundle, Insight
from config.config_loader import get_insight_config


class BaseInsightRule(ABC):
    """
    Abstract base for insight rules.

    Subclasses implement _evaluate(). This class holds the shared threshold
    config and the Insight construction helpers.
    """

    category = "insight"

    def __init__(self, name: str):
        self.name = name
        self.config = get_insight_config()

    # -------------------------------------------------------------------------
    # PUBLIC INTERFACE
    # -------------------------------------------------------------------------

    def evaluate(self, bundle: AnalyticsBundle) -> List[Insight]:
        """Apply this rule to a finished bundle."""
        return list(self._evaluate(bundle))

    # -------------------------------------------------------------------------
    # ABSTRACT METHODS
    # -------------------------------------------------------------------------

    @abstractmethod
    def _evaluate(self, bundle: AnalyticsBundle) -> List[Insight]:
        ...

    # -------------------------------------------------------------------------
    # SHARED HELPERS
    # -------------------------------------------------------------------------

    def _insight(self, type_: str, title: str, description: str) -> Insight:
        return Insight(type=type_, title=title, description=description, category=self.category)

    @staticmethod
    def _current_success_rate(bundle: AnalyticsBundle) -> float | None:
        """
        Success rate over the whole window, or None when there were no
        transactions. Prefers the comparison's current stats, which see
        every record; falls back to summing the period series.
        """
        if bundle.period_comparison is not None:
            current = bundle.period_comparison.current
            if current.total_transactions == 0:
                return None
            return current.success_rate

        count = sum(p.transaction_count for p in bundle.period_series)
        if count == 0:
            return None
        successful = sum(p.successful_count for p in bundle.period_series)
        return round(successful / count * 100, 2)
