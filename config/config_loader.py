"""
config_loader.py
-----------------
Singleton config loader. Reads config.yaml once and caches it.
Every threshold the analytics engine applies is read through here.
"""

import os
import yaml
from typing import Any, Dict


_CONFIG_CACHE: Dict[str, Any] = {}


def load_config(config_path: str | None = None) -> Dict[str, Any]:
    """
    Load and cache the YAML configuration file.

    Args:
        config_path: Path to config.yaml. Defaults to config/ relative to this file.

    Returns:
        Full config dictionary.
    """
    global _CONFIG_CACHE

    if _CONFIG_CACHE:
        return _CONFIG_CACHE

    if config_path is None:
        config_path = os.path.join(os.path.dirname(__file__), "config.yaml")

    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r") as f:
        _CONFIG_CACHE = yaml.safe_load(f)

    return _CONFIG_CACHE


def _get_block(name: str) -> Dict[str, Any]:
    config = load_config()
    if name not in config:
        raise KeyError(
            f"No '{name}' block in config. "
            f"Available: {list(config.keys())}"
        )
    return config[name]


def get_window_config() -> Dict[str, Any]:
    """Returns the analysis_window block (range cap, default granularity)."""
    return _get_block("analysis_window")


def get_aggregation_config() -> Dict[str, Any]:
    """Returns the aggregation block (status labels, high-value threshold)."""
    return _get_block("aggregation")


def get_trend_config() -> Dict[str, Any]:
    """Returns the trend block (direction ratio, moving average windows, growth metrics)."""
    return _get_block("trend")


def get_forecast_config() -> Dict[str, Any]:
    """Returns the forecast block."""
    return _get_block("forecast")


def get_comparison_config() -> Dict[str, Any]:
    """Returns the period_comparison block."""
    return _get_block("period_comparison")


def get_insight_config() -> Dict[str, Any]:
    """Returns the insight threshold block."""
    return _get_block("insights")


def get_breakdown_config() -> Dict[str, Any]:
    """Returns the breakdowns block (top-N limits, amount bands)."""
    return _get_block("breakdowns")


def reset_config() -> None:
    """Clears cached config. Useful for testing."""
    global _CONFIG_CACHE
    _CONFIG_CACHE = {}
