"""
Demand window statistics.

Splits the tail of a demand series into non-overlapping windows:

    history: ... [ long-term window (L) .................................. ]
                            [ previous window (P) ][ short window (S) ]

- short_term_avg  = mean(short window)
- prev_avg        = mean(previous window)
- sigma           = population σ of previous ∪ short windows
- long_term_sigma = population σ of the last L observations (or all of them)

All moments are population moments (ddof=0). Divisions elsewhere in the
pipeline go through ``safe_divisor`` so a flat series never divides by zero.
"""

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from .exceptions import InsufficientHistoryError


@dataclass(frozen=True)
class WindowStats:
    """Statistics of one window split."""
    short_term_avg: float
    prev_avg: float
    sigma: float
    long_term_sigma: float
    short_window: int
    previous_window: int


def safe_divisor(value: float, epsilon: float = 1e-3) -> float:
    """Floor a divisor to *epsilon* so it is never zero or near-zero."""
    return max(epsilon, value)


def population_std(values: Sequence[float]) -> float:
    """Population standard deviation (0.0 for empty input)."""
    if len(values) == 0:
        return 0.0
    return float(np.std(np.asarray(values, dtype=float), ddof=0))


def population_mean(values: Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.mean(np.asarray(values, dtype=float)))


def compute_window_stats(
    history: Sequence[float],
    short_window: int = 3,
    previous_window: int = 5,
    long_term_window: int = 48,
) -> WindowStats:
    """
    Compute window statistics for a chronological demand series.

    Args:
        history: Demand observations, oldest first
        short_window: Most recent observations (S)
        previous_window: Observations immediately before the short window (P)
        long_term_window: Observations for long-term volatility (L)

    Returns:
        WindowStats

    Raises:
        InsufficientHistoryError: fewer than S + P observations
    """
    if short_window < 1 or previous_window < 1 or long_term_window < 1:
        raise ValueError("Window lengths must be >= 1")

    required = short_window + previous_window
    series = np.asarray(history, dtype=float)
    if series.size < required:
        raise InsufficientHistoryError(required=required, available=int(series.size))

    short = series[-short_window:]
    previous = series[-required:-short_window]
    combined = series[-required:]
    long_term = series[-long_term_window:]

    return WindowStats(
        short_term_avg=population_mean(short),
        prev_avg=population_mean(previous),
        sigma=population_std(combined),
        long_term_sigma=population_std(long_term),
        short_window=short_window,
        previous_window=previous_window,
    )
