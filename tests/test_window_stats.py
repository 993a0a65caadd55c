"""
Tests for demand window statistics.

Validates:
1. Non-overlapping short / previous windows
2. Union-window sigma and long-term sigma (population formulas)
3. Insufficient history is an explicit error
"""

import math

import pytest

from trendpath.domain.exceptions import InsufficientHistoryError
from trendpath.domain.window_stats import (
    compute_window_stats,
    population_mean,
    population_std,
    safe_divisor,
)
from conftest import BURGER_HISTORY, FLAT_HISTORY


class TestComputeWindowStats:

    def test_default_windows_on_burger_history(self):
        stats = compute_window_stats(BURGER_HISTORY)

        assert stats.short_term_avg == pytest.approx(70.0)        # 65, 70, 75
        assert stats.prev_avg == pytest.approx(37.8)              # 11, 13, 50, 55, 60
        assert stats.sigma == pytest.approx(math.sqrt(533.109375))
        # Whole history (10 < 48 observations)
        assert stats.long_term_sigma == pytest.approx(math.sqrt(668.49))

    def test_windows_do_not_overlap(self):
        history = [1, 1, 1, 1, 1, 100, 100, 100]
        stats = compute_window_stats(history, short_window=3, previous_window=5)

        assert stats.short_term_avg == pytest.approx(100.0)
        assert stats.prev_avg == pytest.approx(1.0)

    def test_escalation_windows(self):
        stats = compute_window_stats(BURGER_HISTORY, short_window=1, previous_window=2)

        assert stats.short_term_avg == 75.0
        assert stats.prev_avg == pytest.approx(62.5)   # 60, 65
        assert stats.short_window == 1
        assert stats.previous_window == 2

    def test_long_term_window_limits_history(self):
        history = [0.0] * 50 + [10.0, 20.0] * 5
        stats = compute_window_stats(history, long_term_window=10)

        assert stats.long_term_sigma == pytest.approx(5.0)

    def test_flat_history_has_zero_sigma(self):
        stats = compute_window_stats(FLAT_HISTORY)

        assert stats.sigma == 0.0
        assert stats.long_term_sigma == 0.0
        assert stats.short_term_avg == stats.prev_avg == 20.0

    def test_exactly_minimum_history(self):
        stats = compute_window_stats([1, 2, 3, 4, 5, 6, 7, 8])

        assert stats.short_term_avg == pytest.approx(7.0)
        assert stats.prev_avg == pytest.approx(3.0)

    def test_insufficient_history_raises(self):
        with pytest.raises(InsufficientHistoryError) as exc_info:
            compute_window_stats([1, 2, 3, 4, 5, 6, 7])

        assert exc_info.value.required == 8
        assert exc_info.value.available == 7

    def test_invalid_window_length(self):
        with pytest.raises(ValueError):
            compute_window_stats(BURGER_HISTORY, short_window=0)


class TestHelpers:

    def test_population_std_is_non_negative(self):
        for values in ([], [3.0], [1.0, 1.0], [0, 100, 5, 7]):
            assert population_std(values) >= 0.0

    def test_population_not_sample_formula(self):
        # Sample sd of [1, 3] is sqrt(2); population sd is 1
        assert population_std([1, 3]) == pytest.approx(1.0)

    def test_population_mean_empty(self):
        assert population_mean([]) == 0.0

    def test_safe_divisor_floors_zero(self):
        assert safe_divisor(0.0) == 1e-3
        assert safe_divisor(0.0, epsilon=1e-6) == 1e-6
        assert safe_divisor(4.0) == 4.0
