"""Shared fixtures: the fast-food scenario used across the suite."""

import pytest

from trendpath.domain.models import Product, SupplyEdge
from trendpath.settings import TrendPathSettings


BURGER_HISTORY = (10, 12, 11, 13, 50, 55, 60, 65, 70, 75)
FRIES_HISTORY = (8, 9, 7, 10, 45, 48, 50, 52, 55, 58)
SODA_HISTORY = (5, 5, 6, 5, 30, 32, 33, 35, 36, 38)
VIRAL_HISTORY = (10, 12, 11, 13, 50, 55, 60, 200, 220, 250)
FLAT_HISTORY = (20,) * 10


@pytest.fixture
def settings() -> TrendPathSettings:
    return TrendPathSettings()


@pytest.fixture
def kitchen_products():
    """Burger / Fries / Soda, all ramping up over the last hours."""
    return [
        Product("Burger", BURGER_HISTORY, 100),
        Product("Fries", FRIES_HISTORY, 80),
        Product("Soda", SODA_HISTORY, 60),
    ]


@pytest.fixture
def kitchen_edges():
    """Central kitchen supplies everything, plus cross-product deliveries."""
    return [
        SupplyEdge("Kitchen", "Burger", 5.0),
        SupplyEdge("Kitchen", "Fries", 4.0),
        SupplyEdge("Kitchen", "Soda", 3.0),
        SupplyEdge("Burger", "Fries", 2.0),
        SupplyEdge("Fries", "Soda", 1.5),
    ]
