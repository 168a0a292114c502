"""
window.py
----------
Request-boundary validation for analysis windows.

build_window() is the only place raw date inputs are parsed and checked.
Everything downstream receives an AnalysisWindow and trusts it.
"""

from datetime import date, datetime
from typing import Optional

from core.exceptions import RangeError
from core.models import AnalysisWindow, Granularity
from config.config_loader import get_window_config


def _parse_date(value: date | datetime | str, bound: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise RangeError(f"Invalid {bound}: {value!r} is not an ISO date (YYYY-MM-DD)", bound=bound, value=value)


def build_window(
    start: date | datetime | str,
    end: date | datetime | str,
    granularity: Granularity | str | None = None,
    currency: Optional[str] = None,
    max_days: int | None = None,
) -> AnalysisWindow:
    """
    Validate raw inputs and build an AnalysisWindow.

    Args:
        start, end: Inclusive bounds as dates, datetimes or ISO strings.
        granularity: "daily" | "weekly" | "monthly". Defaults to config.
        currency: Currency filter. None or "all" means no filter.
        max_days: Override the configured range cap.

    Raises:
        RangeError: Unparseable bound, start > end, range over the cap,
            or unknown granularity. `bound` names the offending input.
    """
    cfg = get_window_config()
    start_date = _parse_date(start, "start_date")
    end_date = _parse_date(end, "end_date")

    if start_date > end_date:
        raise RangeError(
            f"start_date {start_date} is after end_date {end_date}",
            bound="start_date",
            value=start_date,
        )

    cap = int(max_days if max_days is not None else cfg["max_range_days"])
    span = (end_date - start_date).days
    if span > cap:
        raise RangeError(
            f"Date range of {span} days exceeds the maximum of {cap} days",
            bound="end_date",
            value=end_date,
        )

    raw_granularity = granularity or cfg["default_granularity"]
    try:
        resolved = Granularity(raw_granularity)
    except ValueError:
        raise RangeError(
            f"Unknown granularity {raw_granularity!r}. Allowed: {cfg['granularities']}",
            bound="granularity",
            value=raw_granularity,
        )

    if currency is not None and (not currency.strip() or currency.strip().lower() == "all"):
        currency = None

    return AnalysisWindow(start_date, end_date, resolved, currency)
