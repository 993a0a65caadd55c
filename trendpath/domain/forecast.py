"""
Path-adjusted demand forecast and stock depletion estimate.

    baseline  = mean of the last min(len(history), F) observations
    adjusted  = baseline × (1 + per_spike_increment × spike_count)
    depletion = floor(stock / adjusted)   (None = never: adjusted <= 0, or the
                                          ratio exceeds float range)

spike_count is the number of spiking nodes on the product's supply path,
excluding the path's source and including the product itself. Without a
path the count is 0 and the adjusted forecast equals the baseline.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence
import math
import statistics

import numpy as np

from .models import Product, SpikeSnapshot
from ..settings import TrendPathSettings


@dataclass(frozen=True)
class ForecastEstimate:
    baseline: float
    adjusted: float
    spike_count: int
    depletion_periods: Optional[int]


def baseline_forecast(history: Sequence[float], window: int = 24) -> float:
    """Mean of the most recent *window* observations (0.0 if empty)."""
    if not history:
        return 0.0
    n = min(len(history), window)
    tail = history[-n:]
    try:
        return statistics.fmean(tail)
    except OverflowError:
        # Sum exceeds float range: average the values scaled by their peak
        values = np.asarray(tail, dtype=float)
        peak = float(values.max())
        return peak * float(np.mean(values / peak))


def count_spike_nodes(path: Optional[Sequence[str]], snapshot: SpikeSnapshot) -> int:
    if not path:
        return 0
    return sum(1 for node in path[1:] if snapshot.is_spike(node))


def adjust_forecast(baseline: float, spike_count: int, per_spike_increment: float) -> float:
    return baseline * (1.0 + per_spike_increment * spike_count)


def estimate_depletion(stock: float, forecast: float) -> Optional[int]:
    """Whole periods until *stock* runs out at *forecast* per period."""
    if forecast <= 0:
        return None
    periods = stock / forecast
    if not math.isfinite(periods):
        return None  # forecast too small to ever consume the stock
    return int(math.floor(periods))


def depletion_warning(estimates: Iterable[Optional[int]], threshold: int) -> bool:
    """True if any finite estimate is below *threshold*."""
    return any(e is not None and e < threshold for e in estimates)


def estimate_product(
    product: Product,
    path: Optional[Sequence[str]],
    snapshot: SpikeSnapshot,
    settings: TrendPathSettings,
) -> ForecastEstimate:
    baseline = baseline_forecast(product.demand_history, settings.forecast_window)
    spike_count = count_spike_nodes(path, snapshot)
    adjusted = adjust_forecast(baseline, spike_count, settings.per_spike_increment)
    return ForecastEstimate(
        baseline=baseline,
        adjusted=adjusted,
        spike_count=spike_count,
        depletion_periods=estimate_depletion(product.stock, adjusted),
    )
