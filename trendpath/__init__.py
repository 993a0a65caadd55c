"""
Trend-Path: spike-aware demand forecasting over a supply network.

Typical use::

    from trendpath import Product, SupplyEdge, run_trend_path

    result = run_trend_path(products, edges)
    result.outcomes["Burger"].depletion_periods
"""
from .domain.models import (
    Product,
    ProductOutcome,
    RunResult,
    SourceMode,
    SpikeSnapshot,
    SupplyEdge,
)
from .settings import TrendPathSettings, load_settings
from .workflows.trend_path import TrendPathWorkflow, run_trend_path

__version__ = "0.1.0"

__all__ = [
    "Product",
    "ProductOutcome",
    "RunResult",
    "SourceMode",
    "SpikeSnapshot",
    "SupplyEdge",
    "TrendPathSettings",
    "TrendPathWorkflow",
    "load_settings",
    "run_trend_path",
]
