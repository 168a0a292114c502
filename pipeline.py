"""
pipeline.py
------------
Main orchestration layer. Wires together:
    1. PeriodAggregator        →  period series for the window
    2. Period-series stats     →  statistics, trends, moving averages,
                                  volatility, correlation, growth
    3. Forecast                →  OLS projection of per-period volume
    4. Seasonal patterns       →  day / hour / month buckets from raw records
    5. Comparison, breakdowns  →  previous-window deltas, volume breakdowns
    6. Insight rules           →  findings and recommendations

This is the single entry point for running the engine. Everything else
is internal machinery.

Usage:
    from pipeline import TrendAnalyticsPipeline
    from core.window import build_window

    window = build_window("2024-03-01", "2024-03-31", "daily")
    bundle = TrendAnalyticsPipeline().run(transactions, window)

Stages 3 and 4 are the expensive ones. A caller can bound them with a
time.monotonic() deadline or a threading.Event; either one firing before a
stage starts raises AnalysisAborted naming that stage.
"""

import logging
import threading
import time
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Mapping

import pandas as pd

from core.breakdowns import BreakdownBuilder
from core.comparison import compare_periods
from core.correlation import correlation, volatility
from core.exceptions import AnalysisAborted
from core.forecast import forecast
from core.frames import in_window, to_frame
from core.growth import growth_rates
from core.models import AnalysisWindow, AnalyticsBundle, PeriodAggregate, SeriesStatistics, TransactionRecord
from core.period_aggregator import PeriodAggregator
from core.seasonal import extract_seasonal_patterns
from core.statistics import describe
from core.trend import classify_metric_trends, moving_averages
from insights.insight_rules import generate_insights, get_all_rules
from config.config_loader import load_config

logger = logging.getLogger(__name__)


class TrendAnalyticsPipeline:
    """
    End-to-end trend analytics for one window.

    Holds no per-request state; one instance can serve many windows.
    """

    def __init__(self):
        self.config = load_config()
        self.aggregator = PeriodAggregator()
        self.breakdown_builder = BreakdownBuilder()
        self.rules = get_all_rules()

        logger.info(
            f"Pipeline initialized. "
            f"Insight rules: {[r.name for r in self.rules]}. "
            f"Max range: {self.config['analysis_window']['max_range_days']} days."
        )

    # -------------------------------------------------------------------------
    # PUBLIC INTERFACE
    # -------------------------------------------------------------------------

    def run(
        self,
        transactions: pd.DataFrame | Iterable[TransactionRecord],
        window: AnalysisWindow,
        deadline: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> AnalyticsBundle:
        """
        Run every component over raw transactions.

        Args:
            transactions: TransactionRecords or an equivalent DataFrame. To get
                a meaningful period comparison the input must also cover
                window.previous(); records outside both windows are ignored.
            window: Validated AnalysisWindow (see core.window.build_window).
            deadline: time.monotonic() value after which the expensive stages
                are not started.
            cancel_event: Set by the caller to abandon the run.

        Raises:
            AnalysisAborted: Deadline passed or cancel_event set before the
                forecast or seasonal stage.
        """
        df = to_frame(transactions)
        logger.info(f"Pipeline starting. Input: {len(df):,} transactions. Window: {window.start_date} to {window.end_date} ({window.granularity.value}).")

        # --- Stage 1: Period aggregation ---
        series = self.aggregator.aggregate(df, window)
        logger.info(f"Stage 1 complete. Periods: {len(series):,}.")

        # --- Stage 2: Period-series statistics ---
        amounts = in_window(df, window)["amount"]
        components = self._series_components(series)
        logger.info(f"Stage 2 complete. Volume trend: {components['trends']['total_volume'].value}.")

        # --- Stage 3: Forecast ---
        self._check_abort("forecast", deadline, cancel_event)
        forecast_result = forecast([p.total_volume for p in series])
        logger.info(f"Stage 3 complete. Forecast sufficient: {forecast_result.sufficient_data}.")

        # --- Stage 4: Seasonal patterns ---
        self._check_abort("seasonal", deadline, cancel_event)
        seasonal = extract_seasonal_patterns(df, window)
        logger.info(f"Stage 4 complete. Active hours: {len(seasonal.hour_of_day)}.")

        # --- Stage 5: Comparison and breakdowns ---
        comparison = compare_periods(df, window)
        breakdowns = self.breakdown_builder.build(df, window)
        logger.info(
            f"Stage 5 complete. Volume change vs previous window: "
            f"{comparison.comparison['total_volume'].change}%."
        )

        bundle = AnalyticsBundle(
            window=window,
            period_series=series,
            statistics=describe(amounts.tolist()),
            forecast=forecast_result,
            seasonal=seasonal,
            period_comparison=comparison,
            breakdowns=breakdowns,
            **components,
        )
        return self._with_insights(bundle)

    def run_from_aggregates(
        self,
        rows: Iterable[Mapping[str, Any]],
        window: AnalysisWindow,
        deadline: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> AnalyticsBundle:
        """
        Run the period-series components on rows aggregated upstream.

        Seasonal patterns, the period comparison, breakdowns and the
        per-transaction statistics need raw records and are left empty.
        """
        series = self.aggregator.from_rows(rows)
        logger.info(f"Pipeline starting from {len(series):,} pre-aggregated periods.")

        components = self._series_components(series)

        self._check_abort("forecast", deadline, cancel_event)
        forecast_result = forecast([p.total_volume for p in series])
        logger.info(f"Forecast complete. Sufficient: {forecast_result.sufficient_data}.")

        bundle = AnalyticsBundle(
            window=window,
            period_series=series,
            statistics=SeriesStatistics.empty(),
            forecast=forecast_result,
            **components,
        )
        return self._with_insights(bundle)

    # -------------------------------------------------------------------------
    # INTERNAL
    # -------------------------------------------------------------------------

    @staticmethod
    def _series_components(series: List[PeriodAggregate]) -> Dict[str, Any]:
        volumes = [p.total_volume for p in series]
        counts = [p.transaction_count for p in series]
        return {
            "volume_statistics": describe(volumes),
            "trends": classify_metric_trends(series),
            "moving_averages": moving_averages(volumes),
            "volatility": volatility(volumes),
            "correlation": correlation(volumes, counts),
            "growth_rates": growth_rates(series),
        }

    def _with_insights(self, bundle: AnalyticsBundle) -> AnalyticsBundle:
        insights = generate_insights(bundle, self.rules)
        logger.info(f"Pipeline complete. Insights: {len(insights)}.")
        return replace(bundle, insights=insights)

    @staticmethod
    def _check_abort(stage: str, deadline: float | None, cancel_event: threading.Event | None) -> None:
        if cancel_event is not None and cancel_event.is_set():
            logger.warning(f"Cancelled before '{stage}' stage.")
            raise AnalysisAborted(stage, reason="cancelled")
        if deadline is not None and time.monotonic() >= deadline:
            logger.warning(f"Deadline exceeded before '{stage}' stage.")
            raise AnalysisAborted(stage)
